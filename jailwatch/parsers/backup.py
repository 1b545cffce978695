# jailwatch/parsers/backup.py
# backup-fail2ban.sh result parser.

from __future__ import annotations

import re
from typing import Optional

from jailwatch.parsers.records import BackupResult
from jailwatch.parsers.scanner import split_lines

SUCCESS_RE = re.compile(r"✅|успешно|бекъп\s+създаден|success", re.IGNORECASE)
# Failure words count only as markers, never inside file names.
FAILURE_RE = re.compile(r"❌|^(?:грешка|error)\b|\bfailed\b|^tar:.*\berror\b", re.IGNORECASE)
LISTING_RE = re.compile(r"^(?:съдържание\s+на\s+бекъпа|backup\s+contents)\s*:", re.IGNORECASE)
FILE_RE = re.compile(r"(?:Файл|File)\s*:\s*(\S.*)$", re.IGNORECASE)
SIZE_RE = re.compile(r"(?:Размер|Size)\s*:\s*(\S.*)$", re.IGNORECASE)
BACKUP_PATH_RE = re.compile(r"(/\S*fail2ban-config-\d{8}_\d{6}\.tar\.gz)")
SIZE_VALUE_RE = re.compile(r"([\d.]+)\s*([KMGT]?)(?:i?B)?\b", re.IGNORECASE)

# Binary multiples, as printed by `du -h`.
SIZE_UNITS = {
    "B": 1,
    "KB": 1024,
    "MB": 1024 ** 2,
    "GB": 1024 ** 3,
    "TB": 1024 ** 4,
}


def size_to_bytes(text: Optional[str]) -> Optional[int]:
    """'1.5M', '12K', '3 GB', '512B' -> bytes; None when unreadable."""
    if not text:
        return None
    m = SIZE_VALUE_RE.search(text)
    if not m:
        return None
    try:
        value = float(m.group(1))
    except ValueError:
        return None
    unit = f"{m.group(2).upper()}B" if m.group(2) else "B"
    return int(round(value * SIZE_UNITS[unit]))


def parse_backup_output(output: str) -> dict:
    """
    Parse the backup script output.

    An explicit failure marker always wins: the result is unsuccessful even if
    a path or a success marker was printed too. Without any marker, a found
    backup path counts as success. The archive listing that follows
    "Съдържание на бекъпа:" is skipped up to the next blank line.
    """
    lines = [l.strip() for l in split_lines(output)]
    result = BackupResult()
    succeeded = False
    failed = False
    in_listing = False

    for line in lines:
        if not line:
            in_listing = False
            continue
        if in_listing:
            continue
        if LISTING_RE.search(line):
            in_listing = True
            continue
        if SUCCESS_RE.search(line):
            succeeded = True
        if FAILURE_RE.search(line):
            failed = True

        m = FILE_RE.search(line)
        if m:
            result.path = m.group(1).strip()
        elif result.path is None:
            m = BACKUP_PATH_RE.search(line)
            if m:
                result.path = m.group(1)

        m = SIZE_RE.search(line)
        if m:
            result.size_formatted = m.group(1).strip()
            result.size = size_to_bytes(result.size_formatted)

    if result.path:
        result.filename = result.path.rstrip("/").split("/")[-1] or None

    if failed:
        result.success = False
        result.add_error("Backup operation failed")
    elif succeeded or result.path:
        result.success = True
    else:
        result.add_error("Backup output carried no success marker and no backup file")
    return result.as_dict()
