# jailwatch/parsers/scanner.py
# Anchor-based line scanning primitives shared by every report parser.

from __future__ import annotations

import re
from typing import Optional, Pattern, Sequence, Tuple, Union

Anchor = Union[str, Pattern[str]]
Lines = Union[str, Sequence[str]]

IPV4_RE = re.compile(
    r"\b(?:(?:25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)\.){3}"
    r"(?:25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)\b"
)
DIGITS_RE = re.compile(r"(\d+)")

# fail2ban-client draws its tree with these characters ("|- ", "`- ").
TREE_PREFIX_RE = re.compile(r"^[\s|`\-]+")


def split_lines(text: Lines) -> list:
    if isinstance(text, str):
        return text.splitlines()
    return list(text)


def clean_line(line: str) -> str:
    """Strip whitespace and incidental tree prefixes (pipes, backticks, dashes)."""
    return TREE_PREFIX_RE.sub("", line or "").strip()


def _match(line: str, anchor: Anchor) -> Optional[Tuple[int, int]]:
    if isinstance(anchor, str):
        idx = line.find(anchor)
        if idx == -1:
            return None
        return idx, idx + len(anchor)
    m = anchor.search(line)
    if not m:
        return None
    return m.start(), m.end()


def line_matches(line: str, anchor: Anchor) -> bool:
    return _match(line or "", anchor) is not None


def validate_output(output: object) -> Tuple[bool, Optional[str]]:
    if output is None:
        return False, "Output is null"
    if not isinstance(output, str):
        return False, "Output is not a string"
    if not output.strip():
        return False, "Output is empty"
    return True, None


def extract_section(text: Lines, start_anchor: Anchor, end_anchor: Optional[Anchor] = None) -> list:
    """
    Return the lines strictly between the first line matching `start_anchor`
    and the first later line matching `end_anchor`.

    Without `end_anchor` (or when it never matches) the section runs to the end
    of the input. A missing `start_anchor` yields an empty list.
    """
    lines = split_lines(text)
    start = next((i for i, line in enumerate(lines) if line_matches(line, start_anchor)), None)
    if start is None:
        return []

    end = len(lines)
    if end_anchor is not None:
        for i in range(start + 1, len(lines)):
            if line_matches(lines[i], end_anchor):
                end = i
                break
    return lines[start + 1:end]


def _number_in(text: str) -> Optional[int]:
    candidate = text.strip()
    try:
        return int(candidate)
    except ValueError:
        pass
    m = DIGITS_RE.search(candidate)
    if m:
        return int(m.group(1))
    return None


def find_value_after_anchor(
    lines: Lines,
    anchor: Anchor,
    max_search: int = 5,
    after_anchor_only: bool = False,
) -> Optional[int]:
    """
    Find the first integer at or after the first line matching `anchor`.

    At most `max_search + 1` lines are inspected: the anchor line and up to
    `max_search` lines after it. Each line is tried as a whole integer first,
    then for its first run of digits.

    With `after_anchor_only`, only the text following the anchor match is read
    on the anchor line, so a label like "404 errors:" does not answer with its
    own digits.
    """
    lines = split_lines(lines)
    for idx, line in enumerate(lines):
        span = _match(line, anchor)
        if span is not None:
            break
    else:
        return None

    value = _number_in(line[span[1]:] if after_anchor_only else line)
    if value is not None:
        return value

    end = min(idx + max_search + 1, len(lines))
    for i in range(idx + 1, end):
        value = _number_in(lines[i])
        if value is not None:
            return value
    return None


def extract_ips(text: Optional[str]) -> list:
    """IPv4 addresses in order of appearance, duplicates kept."""
    if not text or not isinstance(text, str):
        return []
    found = []
    for candidate in IPV4_RE.findall(text):
        parts = candidate.split(".")
        if len(parts) == 4 and all(p.isdigit() and 0 <= int(p) <= 255 for p in parts):
            found.append(candidate)
    return found


def extract_number(line: Optional[str], pattern: Anchor = DIGITS_RE) -> Optional[int]:
    if not line or not isinstance(line, str):
        return None
    m = re.search(pattern, line) if isinstance(pattern, str) else pattern.search(line)
    if not m:
        return None
    raw = m.group(1) if m.groups() else m.group(0)
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


def split_list(value: str) -> list:
    """Comma separated names, trimmed, empties dropped."""
    return [item.strip() for item in (value or "").split(",") if item.strip()]
