# jailwatch/parsers/history.py
# fail2ban.log parser: ban, unban and restore events, newest first.

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from jailwatch.parsers.records import BanEvent, BanHistory
from jailwatch.parsers.scanner import split_lines

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 50

# 2026-10-17 09:15:02,123 (milliseconds optional)
LOG_TIMESTAMP_RE = re.compile(r"^(\d{4}-\d{2}-\d{2})\s+(\d{2}:\d{2}:\d{2})(?:,(\d{3}))?")

# Accepted layouts, all from the fail2ban.action(s) logger:
#   fail2ban.actions: [sshd] Ban 203.0.113.5
#   fail2ban.actions        [1234]: NOTICE  [sshd] Ban 203.0.113.5
#   fail2ban.actions [1234]: WARNING [sshd] Unban 203.0.113.5
#   fail2ban.action: [sshd] Restore Ban 203.0.113.5
ACTION_RE = re.compile(
    r"fail2ban\.actions?(?:\s*\[[^\]]+\])?:\s+"
    r"(?:(?:NOTICE|WARNING|INFO|ERROR)\s+)?"
    r"\[([^\]]+)\]\s+(Restore\s+Ban|Unban|Ban)\s+(\d{1,3}(?:\.\d{1,3}){3})\b",
    re.IGNORECASE,
)


class BanAction(str, Enum):
    BAN = "ban"
    UNBAN = "unban"
    RESTORE = "restore"


def _action(raw: str) -> BanAction:
    word = re.sub(r"\s+", " ", raw).strip().lower()
    if word == "restore ban":
        return BanAction.RESTORE
    return BanAction(word)


def _timestamp(date: str, time: str, millis: Optional[str]) -> Optional[datetime]:
    try:
        stamp = datetime.strptime(f"{date} {time}", "%Y-%m-%d %H:%M:%S")
    except ValueError:
        return None
    if millis:
        stamp = stamp.replace(microsecond=int(millis) * 1000)
    return stamp.replace(tzinfo=timezone.utc)


def parse_ban_history(output: str, jail: Optional[str] = None, limit: int = DEFAULT_HISTORY_LIMIT) -> dict:
    """
    Parse fail2ban.log text into ban events, newest first, at most `limit`.

    Only lines with a leading log timestamp and a fail2ban.action(s) entry
    count; everything else (filter "Found" lines, server notices) is skipped.
    The log carries no zone, so timestamps are read as UTC. With `jail` set,
    events of other jails are dropped. A log without a single timestamped
    line is reported as an error; a quiet log with no bans is not.
    """
    if limit < 1:
        raise ValueError(f"history limit must be >= 1, got {limit}")

    result = BanHistory(jail=jail)
    dated: List[tuple] = []
    timestamped = 0
    skipped = 0

    for line in split_lines(output):
        line = line.strip()
        if not line:
            continue
        ts = LOG_TIMESTAMP_RE.match(line)
        if not ts:
            skipped += 1
            continue
        stamp = _timestamp(*ts.groups())
        if stamp is None:
            logger.debug(f"ban history: unreadable timestamp in {line[:40]!r}")
            skipped += 1
            continue
        timestamped += 1

        m = ACTION_RE.search(line)
        if not m:
            skipped += 1
            continue
        name, action, ip = m.groups()
        if jail and name != jail:
            continue

        event = BanEvent(
            jail=name,
            ip=ip,
            action=_action(action).value,
            timestamp=stamp.isoformat(timespec="milliseconds"),
        )
        dated.append((stamp, event))

    logger.debug(f"ban history: {len(dated)} events, {skipped} lines skipped")

    if not timestamped:
        result.add_error("No fail2ban log lines recognized")

    # Stable sort keeps file order among events logged in the same millisecond.
    dated.sort(key=lambda pair: pair[0], reverse=True)
    result.events = [event for _, event in dated[:limit]]
    return result.as_dict()
