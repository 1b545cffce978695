"""Report parsers: anchor scanner, health classifier, section parsers and the safe-parse boundary."""

from jailwatch.parsers.backup import parse_backup_output, size_to_bytes
from jailwatch.parsers.fail2ban import extract_jail_names, parse_fail2ban_status, parse_jail_status
from jailwatch.parsers.health import Diagnosis, ErrorKind, detect_fail2ban_error
from jailwatch.parsers.history import parse_ban_history
from jailwatch.parsers.monitor import Section, has_section, parse_monitor_output, parse_quick_check
from jailwatch.parsers.nginx import parse_nginx_stats
from jailwatch.parsers.safe_parse import safe_parse
from jailwatch.parsers.scanner import (
    extract_ips,
    extract_number,
    extract_section,
    find_value_after_anchor,
)
from jailwatch.parsers.system import parse_system_info

__all__ = [
    "Diagnosis",
    "ErrorKind",
    "Section",
    "detect_fail2ban_error",
    "extract_ips",
    "extract_jail_names",
    "extract_number",
    "extract_section",
    "find_value_after_anchor",
    "has_section",
    "parse_ban_history",
    "parse_backup_output",
    "parse_fail2ban_status",
    "parse_jail_status",
    "parse_monitor_output",
    "parse_nginx_stats",
    "parse_quick_check",
    "parse_system_info",
    "safe_parse",
    "size_to_bytes",
]
