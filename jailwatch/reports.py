# jailwatch/reports.py
# Report pipeline: RawReport -> classifier + safe_parse -> server status -> wire dict.

from __future__ import annotations

import logging
import socket
from dataclasses import dataclass, field
from datetime import datetime, timezone
from functools import partial
from typing import Any, Dict, List, Optional

from jailwatch.classify import infer_category, infer_severity
from jailwatch.config import get_config
from jailwatch.contracts.serializers import (
    serialize_backup_response,
    serialize_history_response,
    serialize_jail_response,
    serialize_jails_response,
    serialize_nginx_response,
    serialize_overview_response,
    serialize_system_response,
)
from jailwatch.parsers.backup import parse_backup_output
from jailwatch.parsers.fail2ban import parse_jail_status
from jailwatch.parsers.health import Diagnosis, ErrorKind, detect_fail2ban_error
from jailwatch.parsers.history import parse_ban_history
from jailwatch.parsers.monitor import Section, has_section, parse_monitor_output, parse_quick_check
from jailwatch.parsers.nginx import parse_nginx_stats
from jailwatch.parsers.records import (
    default_backup_result,
    default_ban_history,
    default_jail_detail,
    default_monitor_report,
    default_nginx_stats,
    default_quick_check,
    default_system_info,
)
from jailwatch.parsers.safe_parse import safe_parse
from jailwatch.parsers.system import parse_system_info

logger = logging.getLogger(__name__)

ONLINE = "online"
PARTIAL = "partial"
OFFLINE = "offline"
ERROR = "error"

# Error texts that point at fail2ban itself rather than at the report format.
FAIL2BAN_ERROR_HINTS = ("fail2ban", "connection", "service")

NGINX_COUNTER_KEYS = ("total_requests", "errors_404", "admin_scans", "webdav_attacks", "hidden_files_attacks")


@dataclass(frozen=True)
class RawReport:
    """One script run as handed over by the execution gateway. Never persisted."""

    text: Optional[str]
    stderr_text: str = ""
    exit_code: int = 0
    produced_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_streams(cls, stdout: Any, stderr: Any = "", exit_code: int = 0) -> "RawReport":
        return cls(text=_decode(stdout), stderr_text=_decode(stderr) or "", exit_code=exit_code)

    @property
    def failed(self) -> bool:
        return self.exit_code != 0

    @property
    def timestamp(self) -> str:
        return self.produced_at.isoformat()


def _decode(stream: Any) -> Optional[str]:
    if stream is None or isinstance(stream, str):
        return stream
    if isinstance(stream, (bytes, bytearray)):
        return bytes(stream).decode("utf-8", errors="replace")
    return str(stream)


def _add_error(parsed: dict, message: str) -> None:
    errors: List[str] = parsed.setdefault("errors", [])
    if message not in errors:
        errors.append(message)
    parsed["partial"] = bool(errors)


def _merge_diagnosis(parsed: dict, diagnosis: Diagnosis, template: str = "{message}") -> None:
    # Empty output is already reported by safe_parse with a better message.
    if not diagnosis.is_error or diagnosis.kind is ErrorKind.EMPTY_OUTPUT:
        return
    logger.warning(f"fail2ban error detected: {diagnosis.message}")
    if any("fail2ban" in e for e in parsed.get("errors", [])):
        return
    _add_error(parsed, template.format(message=diagnosis.message))


def _merge_exit_code(parsed: dict, report: Optional[RawReport]) -> None:
    if report is not None and report.failed:
        logger.warning(f"script exited with code {report.exit_code}")
        _add_error(parsed, f"Script exited with code {report.exit_code}")


def _has_nginx_data(parsed: dict) -> bool:
    nginx = parsed.get("nginx")
    if not isinstance(nginx, dict):
        return False
    if any(isinstance(nginx.get(k), int) and nginx[k] > 0 for k in NGINX_COUNTER_KEYS):
        return True
    return not any("NGINX section" in e for e in parsed.get("errors", []))


def determine_server_status(parsed: dict, diagnosis: Diagnosis) -> str:
    """
    online  - no errors at all
    partial - fail2ban failed but the nginx part of the report is usable
    offline - anything else
    """
    errors = parsed.get("errors") or []
    if not errors and not diagnosis.is_error:
        return ONLINE

    fail2ban_failed = diagnosis.is_error and diagnosis.kind is not ErrorKind.EMPTY_OUTPUT
    if not fail2ban_failed:
        fail2ban_failed = any(hint in e for e in errors for hint in FAIL2BAN_ERROR_HINTS)

    if fail2ban_failed and _has_nginx_data(parsed):
        return PARTIAL
    return OFFLINE


def _text(report: Optional[RawReport]) -> Optional[str]:
    return report.text if report is not None else None


def _diagnose(report: Optional[RawReport]) -> Diagnosis:
    if report is None:
        return detect_fail2ban_error(None)
    return detect_fail2ban_error(report.text, report.stderr_text)


def _parse_monitor(report: Optional[RawReport]) -> dict:
    cfg = get_config().parser
    parser = partial(parse_monitor_output, max_search=cfg.max_search, top_ips_limit=cfg.top_ips_limit)
    parsed = safe_parse(parser, _text(report), default_monitor_report())
    if parsed["errors"]:
        logger.warning(f"Parser warnings: {parsed['errors']}")
    return parsed


def _monitor_jails(parsed: dict) -> List[Dict[str, Any]]:
    """Jails from the banned-IPs section, plus listed jails that had nothing to show."""
    active = parsed.get("fail2ban", {}).get("jails") or []
    by_name: Dict[str, Dict[str, Any]] = {}

    for name in active:
        by_name[name] = {"name": name, "banned_count": 0, "banned_ips": []}
    for jail in parsed.get("jails") or []:
        by_name[jail["name"]] = dict(jail)

    jails = []
    for name, jail in by_name.items():
        ips = jail.get("banned_ips") or []
        jail["enabled"] = name in active or bool(ips)
        jail["category"] = infer_category(name)
        jails.append(jail)
    return jails


# ---------------------------------------------------------------------------
# Resources
# ---------------------------------------------------------------------------

def build_overview(report: Optional[RawReport]) -> dict:
    """Dashboard overview from one monitor-security.sh run."""
    diagnosis = _diagnose(report)
    parsed = _parse_monitor(report)
    _merge_diagnosis(parsed, diagnosis)
    _merge_exit_code(parsed, report)

    if report is None or (report.failed and not (report.text or "").strip()):
        status = ERROR
    else:
        status = determine_server_status(parsed, diagnosis)

    fail2ban = parsed.get("fail2ban") or {}
    system = parsed.get("system") or {}
    data = {
        "timestamp": report.timestamp if report is not None else None,
        "server": {
            "hostname": parsed.get("hostname") or socket.gethostname(),
            "uptime": system.get("uptime") or "",
        },
        "summary": {
            "active_jails": len(fail2ban.get("jails") or []),
            "total_banned_ips": fail2ban.get("total_banned") or 0,
        },
        "jails": _monitor_jails(parsed),
        "nginx": parsed.get("nginx") or {},
        "system": system,
        "errors": parsed["errors"],
        "partial": parsed["partial"],
        "serverStatus": status,
    }
    return serialize_overview_response(data)


def _build_jails_from_quick(quick: RawReport) -> dict:
    diagnosis = _diagnose(quick)
    if diagnosis.is_error and diagnosis.kind is not ErrorKind.EMPTY_OUTPUT:
        logger.warning(f"fail2ban error detected in quick check: {diagnosis.message}")
        return serialize_jails_response({
            "jails": [],
            "lastUpdated": quick.timestamp,
            "serverStatus": OFFLINE,
            "errors": [diagnosis.message],
            "partial": True,
        })

    parser = partial(parse_quick_check, max_search=get_config().parser.quick_check_max_search)
    parsed = safe_parse(parser, quick.text, default_quick_check())
    jails = [
        {"name": name, "enabled": True, "banned_ips": [], "category": infer_category(name)}
        for name in parsed.get("jails") or []
    ]
    return serialize_jails_response({
        "jails": jails,
        "lastUpdated": quick.timestamp,
        "serverStatus": PARTIAL if parsed["errors"] else ONLINE,
        "errors": parsed["errors"],
        "partial": parsed["partial"],
    })


def build_jails(report: Optional[RawReport], quick: Optional[RawReport] = None) -> dict:
    """
    Jail list from the monitor report. When the monitor run failed outright
    and a quick-check run is supplied, the quick check is used instead.
    """
    if quick is not None and (report is None or report.failed):
        logger.warning("monitor report unavailable, falling back to quick check")
        return _build_jails_from_quick(quick)

    diagnosis = _diagnose(report)
    parsed = _parse_monitor(report)
    _merge_diagnosis(parsed, diagnosis)
    _merge_exit_code(parsed, report)

    return serialize_jails_response({
        "jails": _monitor_jails(parsed),
        "lastUpdated": report.timestamp if report is not None else None,
        "serverStatus": determine_server_status(parsed, diagnosis),
        "errors": parsed["errors"],
        "partial": parsed["partial"],
    })


def _parse_history(report: Optional[RawReport], jail: Optional[str], limit: Optional[int] = None) -> dict:
    if limit is None:
        limit = get_config().parser.history_limit
    parser = partial(parse_ban_history, jail=jail, limit=limit)
    return safe_parse(parser, _text(report), default_ban_history(jail))


def _merge_history(parsed: dict, history: dict) -> None:
    """Ban times and activity from fail2ban.log; the log itself never marks the jail partial."""
    if history["errors"]:
        logger.warning(f"ban history unavailable for {parsed['name']}: {history['errors']}")
        return

    events = history["events"]
    banned_at: Dict[str, str] = {}
    ban_counts: Dict[str, int] = {}
    for event in events:
        if event["action"] == "unban":
            continue
        banned_at.setdefault(event["ip"], event["timestamp"])
        ban_counts[event["ip"]] = ban_counts.get(event["ip"], 0) + 1

    parsed["bannedIPs"] = [
        {"ip": ip, "bannedAt": banned_at.get(ip), "banCount": ban_counts.get(ip, 1)}
        for ip in parsed.get("banned_ips") or []
    ]
    if events:
        parsed["last_activity"] = events[0]["timestamp"]


def build_jail(name: str, report: Optional[RawReport], log: Optional[RawReport] = None) -> dict:
    """
    Single jail from `fail2ban-client status <name>` output. With `log`
    (fail2ban.log text), each banned address gets its latest ban time and ban
    count, and the newest event becomes the jail's last activity.
    """
    diagnosis = _diagnose(report)
    parser = partial(parse_jail_status, jail_name=name)
    parsed = safe_parse(parser, _text(report), default_jail_detail(name))
    _merge_diagnosis(parsed, diagnosis)
    _merge_exit_code(parsed, report)

    parsed["name"] = parsed.get("name") or name
    count = parsed.get("currently_banned")
    if not isinstance(count, int):
        count = len(parsed.get("banned_ips") or [])
    parsed["category"] = infer_category(parsed["name"])
    parsed["severity"] = infer_severity(parsed["name"], count)

    if log is not None:
        _merge_history(parsed, _parse_history(log, parsed["name"]))
    return serialize_jail_response(parsed)


def build_nginx(report: Optional[RawReport]) -> dict:
    """
    Nginx counters from the monitor report; when the report carries no nginx
    section header the text is read as standalone nginx-stats.sh output.
    """
    diagnosis = _diagnose(report)

    if not has_section(_text(report), Section.NGINX):
        logger.debug("no nginx section header, reading standalone nginx stats")
        parser = partial(parse_nginx_stats, max_search=get_config().parser.max_search)
        stats = safe_parse(parser, _text(report), default_nginx_stats())
    else:
        parsed = _parse_monitor(report)
        stats = dict(parsed["nginx"])
        stats["errors"] = [e for e in parsed["errors"] if "section in monitor report" not in e]
        stats["partial"] = bool(stats["errors"])

    _merge_diagnosis(stats, diagnosis, "fail2ban unavailable (nginx data still available): {message}")
    _merge_exit_code(stats, report)
    return serialize_nginx_response(stats)


def build_system(report: Optional[RawReport], fallback: Optional[dict] = None) -> dict:
    """
    System health from the monitor report, or from system-info.sh output when
    the report has no system section header. `fallback` fills fields neither
    source provided; by default only the local hostname is known.
    """
    if fallback is None:
        fallback = {"hostname": socket.gethostname()}

    diagnosis = _diagnose(report)

    if not has_section(_text(report), Section.SYSTEM):
        logger.debug("no system section header, reading standalone system info")
        info = safe_parse(parse_system_info, _text(report), default_system_info())
    else:
        parsed = _parse_monitor(report)
        info = dict(parsed["system"])
        info["hostname"] = parsed.get("hostname")
        info["errors"] = [e for e in parsed["errors"] if "section in monitor report" not in e]
        info["partial"] = bool(info["errors"])

    for key, value in fallback.items():
        if info.get(key) is None and value is not None:
            info[key] = value

    _merge_diagnosis(info, diagnosis, "fail2ban unavailable (system data still available): {message}")
    _merge_exit_code(info, report)
    return serialize_system_response(info)


def build_backup(report: Optional[RawReport]) -> dict:
    """Backup result; stdout and stderr are read together."""
    text = None
    if report is not None and report.text is not None:
        text = f"{report.text}\n{report.stderr_text}" if report.stderr_text else report.text

    parsed = safe_parse(parse_backup_output, text, default_backup_result())
    _merge_exit_code(parsed, report)
    if parsed["errors"]:
        logger.warning(f"backup reported problems: {parsed['errors']}")
    return serialize_backup_response(parsed)


def build_history(report: Optional[RawReport], jail: Optional[str] = None, limit: Optional[int] = None) -> dict:
    """Ban/unban/restore events from fail2ban.log text, newest first."""
    if limit is None:
        limit = get_config().parser.history_limit
    parsed = _parse_history(report, jail, limit)
    _merge_exit_code(parsed, report)
    return serialize_history_response(parsed, limit)


def response_headers() -> Dict[str, str]:
    """Headers the routing layer sends with every resource, e.g. the API version."""
    api = get_config().api
    return {api.version_header: api.version}
