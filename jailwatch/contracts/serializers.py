# jailwatch/contracts/serializers.py
# Maps loosely-typed parse results onto the external response models.

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Iterable, List, Optional

from jailwatch.classify import infer_category
from jailwatch.config import get_config
from jailwatch.contracts.schemas import (
    BackupResponse,
    BanEvent,
    BannedIP,
    HistoryResponse,
    JailsResponse,
    NginxCounters,
    NginxResponse,
    NormalizedJail,
    OverviewResponse,
    SystemResponse,
)

# First positive integer wins; the live IP list length is the last resort.
BAN_COUNT_KEYS = ("currently_banned", "bans_active", "banned_count", "bannedCount")

ONLINE = "online"
OFFLINE = "offline"


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _as_int(value: Any, default: int = 0) -> int:
    if _is_int(value):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return default


def _as_optional_int(value: Any) -> Optional[int]:
    if _is_int(value) or (isinstance(value, float) and value.is_integer()):
        return int(value)
    return None


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "on")
    if _is_int(value):
        return value != 0
    return False


def _as_str(value: Any, default: str = "") -> str:
    if value is None or value == "":
        return default
    if isinstance(value, (dict, list)):
        return default
    return str(value)


def _as_optional_str(value: Any) -> Optional[str]:
    text = _as_str(value)
    return text or None


def _as_dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _pick(data: dict, *keys: str) -> Any:
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return None


def _diagnostics(data: dict, response: dict, *, server_status: bool = False) -> dict:
    prefix = get_config().api.diagnostic_prefix
    errors = data.get("errors")
    if isinstance(errors, list) and errors:
        response[f"{prefix}errors"] = [str(e) for e in errors]
    if "partial" in data:
        response[f"{prefix}partial"] = bool(data["partial"])
    if server_status and data.get("serverStatus"):
        response[f"{prefix}serverStatus"] = str(data["serverStatus"])
    return response


def coarsen_server_status(status: Any) -> str:
    """
    Collapse the internal status set {online, partial, offline, error} to the
    external {online, offline}. Lossy on purpose: partial and error both read
    as offline; the nuance stays in the diagnostic fields.
    """
    return ONLINE if status == ONLINE else OFFLINE


# ---------------------------------------------------------------------------
# Jails
# ---------------------------------------------------------------------------

def _banned_ip_model(ip: Any, banned_at: Optional[str] = None, ban_count: Optional[int] = None) -> BannedIP:
    count = ban_count if _is_int(ban_count) else 1
    if isinstance(ip, str):
        return BannedIP(ip=ip.strip(), bannedAt=banned_at, banCount=count)
    if isinstance(ip, dict):
        own_count = ip.get("banCount")
        return BannedIP(
            ip=_as_str(ip.get("ip")).strip(),
            bannedAt=_as_optional_str(ip.get("bannedAt")) or banned_at,
            banCount=own_count if _is_int(own_count) else count,
        )
    return BannedIP(ip="", bannedAt=banned_at, banCount=count)


def serialize_banned_ip(ip: Any, banned_at: Optional[str] = None, ban_count: Optional[int] = None) -> dict:
    return _banned_ip_model(ip, banned_at, ban_count).to_wire()


def _banned_entries(jail: dict) -> List[BannedIP]:
    # The structured list wins over the flat alias so a normalized jail fed
    # back in keeps its per-address metadata.
    source = jail.get("bannedIPs")
    if not isinstance(source, list):
        source = jail.get("banned_ips")
    if not isinstance(source, list):
        return []
    entries = (_banned_ip_model(item) for item in source)
    return [entry for entry in entries if entry.ip]


def resolve_ban_count(jail: dict, ips: Iterable[str]) -> int:
    for key in BAN_COUNT_KEYS:
        value = jail.get(key)
        if _is_int(value) and value > 0:
            return value
    return len(list(ips))


def _jail_model(jail: Any) -> NormalizedJail:
    if not isinstance(jail, dict):
        return NormalizedJail()

    name = _as_str(jail.get("name"))
    entries = _banned_entries(jail)
    ips = [entry.ip for entry in entries]
    count = resolve_ban_count(jail, ips)

    total = _as_optional_int(_pick(jail, "total_banned", "totalBanned"))
    if total is None:
        total = _as_optional_int(_as_dict(jail.get("historical_bans")).get("total"))

    return NormalizedJail(
        name=name,
        enabled=_as_bool(jail.get("enabled")),
        active_bans={"count": count, "ips": ips},
        historical_bans={"total": total},
        bannedIPs=entries,
        currently_banned=count,
        banned_ips=list(ips),
        total_banned=total,
        banned_count=count,
        category=_as_optional_str(jail.get("category")) or (infer_category(name) if name else None),
        filter=_as_optional_str(jail.get("filter")) or name or None,
        maxRetry=_as_optional_int(_pick(jail, "maxRetry", "max_retry")),
        banTime=_as_optional_int(_pick(jail, "banTime", "ban_time")),
    )


def serialize_jail(jail: Any) -> dict:
    """
    Normalize one jail. Idempotent: serializing the output again yields an
    equal dict. Ban counts come from one precedence chain and are mirrored
    into `active_bans.count`, `currently_banned` and `banned_count`.
    """
    return _jail_model(jail).to_wire()


def serialize_jails_response(data: Any) -> dict:
    if not isinstance(data, dict):
        return JailsResponse(lastUpdated=_utcnow()).to_wire()

    jails = data.get("jails")
    response = JailsResponse(
        jails=[_jail_model(j) for j in jails] if isinstance(jails, list) else [],
        lastUpdated=_as_str(data.get("lastUpdated")) or _utcnow(),
        serverStatus=coarsen_server_status(data.get("serverStatus")),
    ).to_wire()
    return _diagnostics(data, response)


def serialize_jail_response(data: Any) -> dict:
    """Single jail endpoint: a NormalizedJail plus backend-only detail fields."""
    if not isinstance(data, dict):
        return serialize_jail({})

    response = serialize_jail(data)
    prefix = get_config().api.diagnostic_prefix
    if data.get("severity"):
        response[f"{prefix}severity"] = str(data["severity"])
    if "findTime" in data or "find_time" in data:
        response[f"{prefix}findTime"] = _as_optional_int(_pick(data, "findTime", "find_time"))
    if data.get("last_activity"):
        response[f"{prefix}lastActivity"] = str(data["last_activity"])
    return _diagnostics(data, response)


# ---------------------------------------------------------------------------
# Nginx / system / overview / backup
# ---------------------------------------------------------------------------

def _nginx_fields(data: dict) -> dict:
    return {
        "404_count": _as_int(_pick(data, "404_count", "count_404", "errors_404", "errors404")),
        "admin_scans": _as_int(_pick(data, "admin_scans", "adminScans")),
        "webdav_attacks": _as_int(_pick(data, "webdav_attacks", "webdavAttacks")),
        "hidden_files_attempts": _as_int(
            _pick(data, "hidden_files_attempts", "hidden_files_attacks", "hiddenFilesAttacks")
        ),
    }


def serialize_nginx_response(data: Any) -> dict:
    if not isinstance(data, dict):
        return NginxResponse().to_wire()
    response = NginxResponse.model_validate(_nginx_fields(data)).to_wire()
    return _diagnostics(data, response)


def serialize_system_response(data: Any) -> dict:
    if not isinstance(data, dict):
        return SystemResponse().to_wire()
    response = SystemResponse(
        hostname=_as_optional_str(data.get("hostname")),
        uptime=_as_optional_str(data.get("uptime")),
        memory=_as_optional_str(data.get("memory")),
        disk=_as_optional_str(data.get("disk")),
        load=_as_optional_str(data.get("load")),
    ).to_wire()
    return _diagnostics(data, response)


def serialize_overview_response(data: Any) -> dict:
    if not isinstance(data, dict):
        return OverviewResponse(timestamp=_utcnow()).to_wire()

    server = _as_dict(data.get("server"))
    summary = _as_dict(data.get("summary"))
    system = _as_dict(data.get("system"))
    jails = data.get("jails")

    response = OverviewResponse(
        timestamp=_as_str(data.get("timestamp")) or _utcnow(),
        server={
            "hostname": _as_str(server.get("hostname")),
            "uptime": _as_str(server.get("uptime")),
        },
        summary={
            "active_jails": _as_int(summary.get("active_jails")),
            "total_banned_ips": _as_int(summary.get("total_banned_ips")),
        },
        jails=[_jail_model(j) for j in jails] if isinstance(jails, list) else [],
        nginx=NginxCounters.model_validate(_nginx_fields(_as_dict(data.get("nginx")))),
        system={
            "memory": _as_optional_str(system.get("memory")),
            "disk": _as_optional_str(system.get("disk")),
            "load": _as_optional_str(system.get("load")),
        },
    ).to_wire()
    return _diagnostics(data, response, server_status=True)


def serialize_backup_response(data: Any) -> dict:
    if not isinstance(data, dict):
        return BackupResponse(timestamp=_utcnow()).to_wire()
    response = BackupResponse(
        success=_as_bool(data.get("success")),
        filename=_as_optional_str(data.get("filename")),
        path=_as_optional_str(data.get("path")),
        size=_as_optional_int(data.get("size")),
        sizeFormatted=_as_optional_str(_pick(data, "sizeFormatted", "size_formatted")),
        timestamp=_as_str(data.get("timestamp")) or _utcnow(),
    ).to_wire()
    return _diagnostics(data, response)


# ---------------------------------------------------------------------------
# Ban history
# ---------------------------------------------------------------------------

def serialize_history_response(data: Any, limit: int) -> dict:
    """Ban events newest first; malformed events are dropped, never repaired."""
    if not isinstance(data, dict):
        return HistoryResponse(limit=limit).to_wire()

    events = []
    for item in data.get("events") or []:
        if isinstance(item, dict) and item.get("action") in ("ban", "unban", "restore"):
            events.append(BanEvent(
                jail=_as_str(item.get("jail")),
                ip=_as_str(item.get("ip")),
                action=item["action"],
                timestamp=_as_str(item.get("timestamp")),
            ))

    response = HistoryResponse(
        events=events,
        total=len(events),
        jail=_as_optional_str(data.get("jail")),
        limit=limit,
    ).to_wire()
    return _diagnostics(data, response)
