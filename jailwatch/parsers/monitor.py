# jailwatch/parsers/monitor.py
# Section-state parsers for monitor-security.sh and quick-check.sh reports.

from __future__ import annotations

import logging
import re
from enum import Enum
from typing import Dict, List, Optional, Pattern, Tuple

from jailwatch.errors import MissingSectionError
from jailwatch.parsers.fail2ban import JAIL_LIST_RE, STATUS_RE
from jailwatch.parsers.health import ErrorKind, detect_fail2ban_error
from jailwatch.parsers.records import JailBans, MonitorReport, QuickCheck, TopIP
from jailwatch.parsers.scanner import (
    clean_line,
    extract_ips,
    extract_number,
    find_value_after_anchor,
    split_lines,
    split_list,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_SEARCH = 3


class Section(str, Enum):
    NONE = "none"
    FAIL2BAN = "fail2ban"
    BANNED_IPS = "banned_ips"
    NGINX = "nginx"
    SYSTEM = "system"


# Header lines are the only thing that moves the section state. Each pattern is
# anchored at the start of the stripped line so that data lines mentioning the
# same words ("Общо блокирани IP адреси: 4") never count as headers.
SECTION_HEADERS: Tuple[Tuple[Section, Pattern[str]], ...] = (
    (Section.FAIL2BAN, re.compile(r"^(?:🔒\s*FAIL2BAN|FAIL2BAN\s+(?:СТАТИСТИКИ|STATISTICS))", re.IGNORECASE)),
    (Section.BANNED_IPS, re.compile(r"^(?:🚫|(?:БЛОКИРАНИ|BANNED)\s+IP)", re.IGNORECASE)),
    (Section.NGINX, re.compile(r"^(?:📊\s*NGINX|NGINX\s+(?:СТАТИСТИКИ|STATISTICS))", re.IGNORECASE)),
    (Section.SYSTEM, re.compile(r"^(?:💾|(?:СИСТЕМНИ\s+РЕСУРСИ|SYSTEM\s+RESOURCES))", re.IGNORECASE)),
)

SECTION_LABELS = {
    Section.FAIL2BAN: "FAIL2BAN",
    Section.BANNED_IPS: "BANNED IPS",
    Section.NGINX: "NGINX",
    Section.SYSTEM: "SYSTEM",
}

TITLE_RE = re.compile(r"(?:СИГУРНОСТЕН\s+МОНИТОРИНГ|SECURITY\s+MONITORING)\s*-\s*(.+)", re.IGNORECASE)
HOST_RE = re.compile(r"^(?:Сървър|Server|Host)\s*:\s*(.+)$", re.IGNORECASE)

JAIL_HEADER_RE = re.compile(r"^([A-Za-z0-9._-]+)\s*\((\d+)\s*(?:блокирани|блокиран|banned)\)", re.IGNORECASE)
INDENTED_RE = re.compile(r"^(?:\s{2,}|\t)\S")
TOTAL_BANNED_RE = re.compile(r"(?:общо\s+блокирани|total\s+banned)[^\d]*(\d+)", re.IGNORECASE)

# Labels begin with letters (or "404"); access and fail2ban log lines that end
# up in the same section begin with an address or a date, so the leading \D*?
# keeps them out.
NGINX_METRICS: Tuple[Tuple[str, Pattern[str]], ...] = (
    ("total_requests", re.compile(r"^\D*?(?:общо\s+заявки|total\s+requests)", re.IGNORECASE)),
    ("hidden_files_attacks", re.compile(r"^\D*?(?:скрити\s+файлове|hidden\s+files?)", re.IGNORECASE)),
    ("webdav_attacks", re.compile(r"^\D*?webdav", re.IGNORECASE)),
    ("admin_scans", re.compile(r"^\D*?admin\s+(?:скенери|scanners|scans)", re.IGNORECASE)),
    ("errors_404", re.compile(r"^404\s+(?:грешки|errors)", re.IGNORECASE)),
    ("robots_scans", re.compile(r"^\D*?(?:роботи|robots)", re.IGNORECASE)),
)
TOP_IPS_RE = re.compile(r"^\W*(?:топ|top)\s*\d*\s*ip", re.IGNORECASE)
TOP_IP_ROW_RE = re.compile(r"^(\d+)\s+(\d{1,3}(?:\.\d{1,3}){3})\b")

MEM_ROW_RE = re.compile(r"^mem:\s*(\S+)\s+(\S+)", re.IGNORECASE)
DISK_ROW_RE = re.compile(r"^(\S+)\s+(\d[\w.,]*)\s+(\d[\w.,]*)\s+(\d[\w.,]*)\s+(\d+)%")
LOAD_RE = re.compile(r"load\s*average\s*:\s*(.+)$", re.IGNORECASE)
UPTIME_RE = re.compile(r"\bup\s+(.+?)(?:,\s+\d+\s+users?\b|,\s+load\b|$)", re.IGNORECASE)


def _section_for(line: str) -> Optional[Section]:
    for section, pattern in SECTION_HEADERS:
        if pattern.search(line):
            return section
    return None


def has_section(output: Optional[str], section: Section) -> bool:
    """True when `output` carries the header line of `section`."""
    if not output or not isinstance(output, str):
        return False
    return any(_section_for(line.strip()) is section for line in split_lines(output))


def _collapse(value: str) -> str:
    return re.sub(r"\s+", " ", value).strip().rstrip(",")


def _top_ips(lines: List[str], start: int, limit: int) -> List[TopIP]:
    rows: List[TopIP] = []
    for line in lines[start + 1:]:
        m = TOP_IP_ROW_RE.match(line)
        if not m or not extract_ips(m.group(2)):
            break
        rows.append(TopIP(ip=m.group(2), count=int(m.group(1))))
        if len(rows) >= limit:
            break
    return rows


def parse_monitor_output(output: str, max_search: int = DEFAULT_MAX_SEARCH, top_ips_limit: int = 10) -> dict:
    """
    Parse the composite monitor-security.sh report in one forward pass.

    The parser holds a single `Section` state, moved only by header lines and
    never back to NONE. Inside BANNED_IPS a `current_jail` pointer collects
    indented address lines until the next "name (N banned)" header.

    Tie-break: last match wins. A jail header seen twice replaces the earlier
    entry, and a repeated total or metric label overwrites the earlier value.
    Nginx counters are always located with `find_value_after_anchor`.
    """
    raw_lines = split_lines(output)
    lines = [l.strip() for l in raw_lines]
    result = MonitorReport()

    section = Section.NONE
    seen = set()
    jails: Dict[str, JailBans] = {}
    current_jail: Optional[JailBans] = None
    explicit_total: Optional[int] = None

    for i, line in enumerate(lines):
        if not line:
            continue

        header = _section_for(line)
        if header is not None:
            if header is not section:
                logger.debug(f"monitor report: {section.value} -> {header.value} at line {i}")
            section = header
            seen.add(header)
            current_jail = None
            continue

        if section is Section.NONE:
            m = TITLE_RE.search(line)
            if m:
                result.timestamp = m.group(1).strip()
            m = HOST_RE.match(line)
            if m:
                result.hostname = m.group(1).strip()

        elif section is Section.FAIL2BAN:
            cleaned = clean_line(line)
            m = JAIL_LIST_RE.search(cleaned)
            if m:
                value = m.group(1).strip()
                if not value and i + 1 < len(lines) and _section_for(lines[i + 1]) is None:
                    value = clean_line(lines[i + 1])
                result.fail2ban.jails = split_list(value)
            m = STATUS_RE.match(cleaned)
            if m:
                result.fail2ban.status = m.group(1).strip().lower()

        elif section is Section.BANNED_IPS:
            m = JAIL_HEADER_RE.match(line)
            if m:
                current_jail = JailBans(name=m.group(1), banned_count=int(m.group(2)))
                jails[current_jail.name] = current_jail
                continue
            total = extract_number(line, TOTAL_BANNED_RE)
            if total is not None:
                explicit_total = total
                continue
            if current_jail is not None and INDENTED_RE.match(raw_lines[i]):
                current_jail.banned_ips.extend(extract_ips(line))

        elif section is Section.NGINX:
            if TOP_IPS_RE.match(line):
                result.nginx.top_ips = _top_ips(lines, i, top_ips_limit)
                continue
            for name, anchor in NGINX_METRICS:
                if anchor.search(line):
                    value = find_value_after_anchor(lines[i:], anchor, max_search, after_anchor_only=True)
                    if value is not None:
                        setattr(result.nginx, name, value)
                    break

        elif section is Section.SYSTEM:
            m = MEM_ROW_RE.match(line)
            if m:
                result.system.memory = f"{m.group(2)}/{m.group(1)}"
                continue
            m = DISK_ROW_RE.match(line)
            if m:
                result.system.disk = f"{m.group(3)}/{m.group(2)} ({m.group(5)}%)"
                continue
            m = LOAD_RE.search(line)
            if m:
                result.system.load = m.group(1).strip()
                up = UPTIME_RE.search(line[:m.start()])
                if up:
                    result.system.uptime = _collapse(up.group(1))

    result.jails = list(jails.values())
    if explicit_total is not None:
        result.fail2ban.total_banned = explicit_total
    else:
        result.fail2ban.total_banned = sum(j.banned_count for j in result.jails)

    for section_name in (Section.FAIL2BAN, Section.BANNED_IPS, Section.NGINX, Section.SYSTEM):
        if section_name not in seen:
            result.add_error(MissingSectionError(f"Missing {SECTION_LABELS[section_name]} section in monitor report").message)

    diagnosis = detect_fail2ban_error(output)
    if diagnosis.is_error and diagnosis.kind is not ErrorKind.EMPTY_OUTPUT:
        result.add_error(diagnosis.message)

    return result.as_dict()


QUICK_JAILS_RE = re.compile(r"^\W*fail2ban\s+jails", re.IGNORECASE)
QUICK_BANNED_RE = re.compile(r"^\W*(?:блокирани\s+ip|banned\s+ips?)\b", re.IGNORECASE)
QUICK_ATTACKS_RE = re.compile(r"^\W*(?:последни\s+атаки|recent\s+attacks)", re.IGNORECASE)
QUICK_ERRORS_RE = re.compile(r"^\W*(?:грешки|errors)\s*:", re.IGNORECASE)
QUICK_TIME_RE = re.compile(r"^(?:време|time)\s*:\s*(.+)$", re.IGNORECASE)
QUICK_DONE_RE = re.compile(r"✅|проверката\s+завърши|check\s+complete", re.IGNORECASE)


def parse_quick_check(output: str, max_search: int = 2) -> dict:
    """Parse quick-check.sh: jail names plus three small counters."""
    raw_lines = split_lines(output)
    lines = [l.strip() for l in raw_lines]
    result = QuickCheck()
    jails_seen = False

    for i, line in enumerate(lines):
        if QUICK_JAILS_RE.match(line):
            jails_seen = True
            names: List[str] = []
            for raw in raw_lines[i + 1:]:
                if not raw.strip() or not INDENTED_RE.match(raw):
                    break
                name = raw.strip()
                if "---" in name or "🚫" in name:
                    continue
                names.extend(split_list(name))
            result.jails = names
            continue

        m = QUICK_TIME_RE.match(line)
        if m:
            result.checked_at = m.group(1).strip()
        if QUICK_DONE_RE.search(line):
            result.completed = True

    for name, anchor in (
        ("banned_count", QUICK_BANNED_RE),
        ("recent_attacks", QUICK_ATTACKS_RE),
        ("log_errors", QUICK_ERRORS_RE),
    ):
        value = find_value_after_anchor(lines, anchor, max_search)
        if value is not None:
            setattr(result, name, value)

    if not jails_seen:
        result.add_error(MissingSectionError("Fail2ban jails section missing from quick check").message)

    diagnosis = detect_fail2ban_error(output)
    if diagnosis.is_error and diagnosis.kind is not ErrorKind.EMPTY_OUTPUT:
        result.add_error(diagnosis.message)

    return result.as_dict()
