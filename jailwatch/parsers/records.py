# jailwatch/parsers/records.py
# Internal records produced by the report parsers, and their safe defaults.

from __future__ import annotations

from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from typing import List, Optional


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class Record:
    """Common tail of every parse result: `partial` is True exactly when `errors` is non-empty."""

    errors: List[str] = field(default_factory=list)
    partial: bool = False

    def add_error(self, message: str) -> None:
        if message and message not in self.errors:
            self.errors.append(message)
        self.partial = bool(self.errors)

    def as_dict(self) -> dict:
        data = asdict(self)
        data["partial"] = bool(self.errors)
        return data


@dataclass
class GlobalStatus(Record):
    status: str = "unknown"
    jails: List[str] = field(default_factory=list)


@dataclass
class JailDetail(Record):
    name: str = ""
    enabled: bool = False
    filter: Optional[str] = None
    max_retry: Optional[int] = None
    ban_time: Optional[int] = None
    find_time: Optional[int] = None
    banned_ips: List[str] = field(default_factory=list)
    currently_banned: Optional[int] = None
    total_banned: Optional[int] = None


@dataclass
class Fail2banSummary:
    status: str = "unknown"
    jails: List[str] = field(default_factory=list)
    total_banned: int = 0


@dataclass
class JailBans:
    name: str
    banned_count: int = 0
    banned_ips: List[str] = field(default_factory=list)


@dataclass
class TopIP:
    ip: str
    count: int


@dataclass
class NginxCounters:
    total_requests: int = 0
    top_ips: List[TopIP] = field(default_factory=list)
    hidden_files_attacks: int = 0
    webdav_attacks: int = 0
    admin_scans: int = 0
    errors_404: int = 0
    robots_scans: int = 0


@dataclass
class SystemResources:
    memory: Optional[str] = None
    disk: Optional[str] = None
    load: Optional[str] = None
    uptime: Optional[str] = None


@dataclass
class MonitorReport(Record):
    fail2ban: Fail2banSummary = field(default_factory=Fail2banSummary)
    jails: List[JailBans] = field(default_factory=list)
    nginx: NginxCounters = field(default_factory=NginxCounters)
    system: SystemResources = field(default_factory=SystemResources)
    timestamp: Optional[str] = None
    hostname: Optional[str] = None


@dataclass
class QuickCheck(Record):
    jails: List[str] = field(default_factory=list)
    banned_count: int = 0
    recent_attacks: int = 0
    log_errors: int = 0
    checked_at: Optional[str] = None
    completed: bool = False


@dataclass
class NginxStats(Record):
    count_404: int = 0
    admin_scans: int = 0
    webdav_attacks: int = 0
    hidden_files_attempts: int = 0
    robots_scans: int = 0
    total_requests: int = 0


@dataclass
class SystemInfo(Record):
    hostname: Optional[str] = None
    uptime: Optional[str] = None
    memory: Optional[str] = None
    disk: Optional[str] = None
    load: Optional[str] = None


@dataclass
class BackupResult(Record):
    success: bool = False
    filename: Optional[str] = None
    path: Optional[str] = None
    size: Optional[int] = None
    size_formatted: Optional[str] = None
    timestamp: str = field(default_factory=_utcnow)


@dataclass
class BanEvent:
    jail: str
    ip: str
    action: str  # ban | unban | restore
    timestamp: str


@dataclass
class BanHistory(Record):
    jail: Optional[str] = None
    events: List[BanEvent] = field(default_factory=list)


# Defaults handed to safe_parse; each call builds a fresh dict.

def default_global_status() -> dict:
    return GlobalStatus().as_dict()


def default_jail_detail(name: str = "") -> dict:
    return JailDetail(name=name).as_dict()


def default_monitor_report() -> dict:
    return MonitorReport().as_dict()


def default_quick_check() -> dict:
    return QuickCheck().as_dict()


def default_nginx_stats() -> dict:
    return NginxStats().as_dict()


def default_system_info() -> dict:
    return SystemInfo().as_dict()


def default_backup_result() -> dict:
    return BackupResult().as_dict()


def default_ban_history(jail: Optional[str] = None) -> dict:
    return BanHistory(jail=jail).as_dict()
