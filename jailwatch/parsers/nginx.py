# jailwatch/parsers/nginx.py
# Standalone nginx counters: nginx-stats.sh `key:value` output or the
# label/value layout used in the monitor report.

from __future__ import annotations

import re
from typing import Pattern, Tuple

from jailwatch.parsers.records import NginxStats
from jailwatch.parsers.scanner import find_value_after_anchor, split_lines

NGINX_COUNTERS: Tuple[Tuple[str, Pattern[str]], ...] = (
    ("count_404", re.compile(r"^(?:404_count|404\s+(?:грешки|errors))", re.IGNORECASE)),
    ("admin_scans", re.compile(r"^\D*?(?:admin_scans|admin\s+(?:скенери|scanners|scans))", re.IGNORECASE)),
    ("webdav_attacks", re.compile(r"^\D*?(?:webdav_attacks|webdav)", re.IGNORECASE)),
    ("hidden_files_attempts", re.compile(r"^\D*?(?:hidden_files_attempts|скрити\s+файлове|hidden\s+files?)", re.IGNORECASE)),
    ("robots_scans", re.compile(r"^\D*?(?:robots_scans|роботи|robots)", re.IGNORECASE)),
    ("total_requests", re.compile(r"^\D*?(?:total_requests|общо\s+заявки|total\s+requests)", re.IGNORECASE)),
)


def parse_nginx_stats(output: str, max_search: int = 3) -> dict:
    """Anchor-based nginx counters; a repeated label overwrites the earlier value."""
    lines = [l.strip() for l in split_lines(output) if l.strip()]
    result = NginxStats()
    matched = False

    for i, line in enumerate(lines):
        for name, anchor in NGINX_COUNTERS:
            if anchor.search(line):
                value = find_value_after_anchor(lines[i:], anchor, max_search, after_anchor_only=True)
                if value is not None:
                    setattr(result, name, value)
                    matched = True
                break

    if not matched:
        result.add_error("No nginx counters recognized in output")
    return result.as_dict()
