# jailwatch/parsers/fail2ban.py
# Parsers for `fail2ban-client status` and `fail2ban-client status <jail>`.

from __future__ import annotations

import re
from typing import List, Optional

from jailwatch.parsers.records import GlobalStatus, JailDetail
from jailwatch.parsers.scanner import clean_line, extract_ips, extract_number, split_lines, split_list

STATUS_RE = re.compile(r"^status\s*:\s*(.+)$", re.IGNORECASE)
JAIL_LIST_RE = re.compile(r"jail\s+list\s*:\s*(.*)$", re.IGNORECASE)

FILTER_RE = re.compile(r"^filter\s*[:=]\s*(\S.*)$", re.IGNORECASE)
MAX_RETRY_RE = re.compile(r"max\s*retry\s*[:=]?\s*(\d+)", re.IGNORECASE)
BAN_TIME_RE = re.compile(r"ban\s*time\s*[:=]?\s*(-?\d+)", re.IGNORECASE)
FIND_TIME_RE = re.compile(r"find\s*time\s*[:=]?\s*(\d+)", re.IGNORECASE)
BANNED_LIST_RE = re.compile(r"banned\s+ip\s+list\s*:\s*(.*)$", re.IGNORECASE)
CURRENTLY_BANNED_RE = re.compile(r"currently\s+banned\s*:\s*(.*)$", re.IGNORECASE)
TOTAL_BANNED_RE = re.compile(r"total\s+banned\s*:\s*(\d+)", re.IGNORECASE)


def _next_nonempty(lines: List[str], idx: int) -> str:
    for line in lines[idx + 1:]:
        if line:
            return line
    return ""


def parse_fail2ban_status(output: str) -> dict:
    """
    Parse the global `fail2ban-client status` output.

        Status
        |- Number of jail:      2
        `- Jail list:   sshd, nginx-404

    The jail list may sit on the label line or on the line after it.
    """
    lines = [clean_line(l) for l in split_lines(output)]
    result = GlobalStatus()

    for i, line in enumerate(lines):
        if not line:
            continue

        m = STATUS_RE.match(line)
        if m:
            result.status = m.group(1).strip().lower()

        m = JAIL_LIST_RE.search(line)
        if m:
            value = m.group(1).strip() or _next_nonempty(lines, i)
            result.jails = split_list(value)

    return result.as_dict()


def extract_jail_names(output: str) -> List[str]:
    return parse_fail2ban_status(output)["jails"]


def _banned_ips_from(lines: List[str], idx: int, inline: str) -> List[str]:
    if inline.strip():
        return extract_ips(inline)
    return extract_ips(_next_nonempty(lines, idx))


def parse_jail_status(output: str, jail_name: str = "") -> dict:
    """
    Parse `fail2ban-client status <jail>` plus any config lines the script appends.

    `enabled` is inferred, not read: fail2ban does not print it. A jail counts
    as enabled when a banned count parses, when any banned IP is listed, or,
    as a last resort, when a filter name resolved. Repeated labels: the last
    occurrence wins.
    """
    lines = [clean_line(l) for l in split_lines(output)]
    result = JailDetail(name=jail_name)
    count_seen = False

    for i, line in enumerate(lines):
        if not line:
            continue

        m = FILTER_RE.match(line)
        if m:
            result.filter = m.group(1).strip()

        value = extract_number(line, MAX_RETRY_RE)
        if value is not None:
            result.max_retry = value

        value = extract_number(line, BAN_TIME_RE)
        if value is not None:
            result.ban_time = value

        value = extract_number(line, FIND_TIME_RE)
        if value is not None:
            result.find_time = value

        value = extract_number(line, TOTAL_BANNED_RE)
        if value is not None:
            result.total_banned = value

        m = CURRENTLY_BANNED_RE.search(line)
        if m:
            count: Optional[int] = extract_number(m.group(1), re.compile(r"^\s*(\d+)\s*$"))
            if count is not None:
                result.currently_banned = count
                count_seen = True
            ips = _banned_ips_from(lines, i, m.group(1))
            if ips:
                result.banned_ips = ips

        m = BANNED_LIST_RE.search(line)
        if m:
            result.banned_ips = _banned_ips_from(lines, i, m.group(1))

    result.enabled = count_seen or bool(result.banned_ips) or bool(result.filter)
    return result.as_dict()
