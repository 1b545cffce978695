# jailwatch/parsers/system.py
# system-info.sh parser: `key: value` lines with several accepted spellings.

from __future__ import annotations

import re
from typing import Pattern, Tuple

from jailwatch.parsers.records import SystemInfo
from jailwatch.parsers.scanner import split_lines

SYSTEM_FIELDS: Tuple[Tuple[str, Pattern[str]], ...] = (
    ("hostname", re.compile(r"^(?:hostname|host\s+name|host|сървър|server)\s*[:=]\s*(.+)$", re.IGNORECASE)),
    ("uptime", re.compile(r"^(?:uptime|up\s+time|време\s+на\s+работа)\s*[:=]\s*(.+)$", re.IGNORECASE)),
    ("memory", re.compile(r"^(?:memory|mem|ram|памет)\s*[:=]\s*(.+)$", re.IGNORECASE)),
    ("disk", re.compile(r"^(?:disk|df|диск|дисково\s+пространство)\s*[:=]\s*(.+)$", re.IGNORECASE)),
    ("load", re.compile(r"^(?:load\s+average|load|натоварване)\s*[:=]\s*(.+)$", re.IGNORECASE)),
)

# Only consulted for fields the structured pass left empty, e.g. a raw
# `uptime` line: " 10:02:11 up 3 days,  4:01,  2 users,  load average: 0.10, 0.20, 0.30"
LOOSE_FIELDS: Tuple[Tuple[str, Pattern[str]], ...] = (
    ("load", re.compile(r"load\s*average\s*:\s*(.+)$", re.IGNORECASE)),
    ("uptime", re.compile(r"\bup\s+(.+?),\s+\d+\s+users?\b", re.IGNORECASE)),
)

HOSTNAME_RE = re.compile(r"^[a-zA-Z0-9._-]+$")


def parse_system_info(output: str) -> dict:
    """
    Parse system-info.sh output:

        hostname:web01
        uptime:up 5 days, 3 hours
        memory:2.1G/7.7G (27%)
        disk:20G/50G (42%)
        load:0.15, 0.10, 0.05

    The first structural match per field wins. When no hostname line exists,
    a bare first line that looks like a hostname is used instead.
    """
    lines = [l.strip() for l in split_lines(output) if l.strip()]
    result = SystemInfo()

    for line in lines:
        for name, pattern in SYSTEM_FIELDS:
            m = pattern.match(line)
            if m and getattr(result, name) is None:
                setattr(result, name, m.group(1).strip())
                break

    for line in lines:
        for name, pattern in LOOSE_FIELDS:
            if getattr(result, name) is not None:
                continue
            m = pattern.search(line)
            if m:
                setattr(result, name, re.sub(r"\s+", " ", m.group(1)).strip())

    if result.hostname is None and lines:
        first = lines[0]
        if ":" not in first and HOSTNAME_RE.match(first):
            result.hostname = first

    if all(getattr(result, name) is None for name, _ in SYSTEM_FIELDS):
        result.add_error("No system information fields recognized in output")
    return result.as_dict()
