"""
jailwatch/contracts/schemas.py
Pydantic models for the external (versioned) response shapes.

Every field listed here is always present in a serialized response. Unknown
optional values are None, collections default to empty lists. Field names are
the wire names the dashboard already consumes, legacy aliases included;
"404_count" is not a valid identifier and travels as an alias.

Backend-only diagnostics ("_errors", "_partial", ...) are not part of these
models. The serializers append them after dumping, under the reserved "_"
prefix, so consumers can ignore unknown fields.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

ServerStatus = Literal["online", "offline"]


class ContractModel(BaseModel):
    """Base for all external shapes: unknown keys are a serializer bug."""
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


# ---------------------------------------------------------------------------
# Jails
# ---------------------------------------------------------------------------

class BannedIP(ContractModel):
    ip: str
    bannedAt: Optional[str] = None  # fail2ban-client does not report ban times
    banCount: int = 1


class ActiveBans(ContractModel):
    """Bans enforced right now."""
    count: int = 0
    ips: List[str] = Field(default_factory=list)


class HistoricalBans(ContractModel):
    """Cumulative bans since fail2ban started; None when the source does not say."""
    total: Optional[int] = None


class NormalizedJail(ContractModel):
    name: str = ""
    enabled: bool = False
    active_bans: ActiveBans = Field(default_factory=ActiveBans)
    historical_bans: HistoricalBans = Field(default_factory=HistoricalBans)
    bannedIPs: List[BannedIP] = Field(default_factory=list)
    # Flat legacy aliases, always equal to the structured values above
    currently_banned: int = 0
    banned_ips: List[str] = Field(default_factory=list)
    total_banned: Optional[int] = None
    banned_count: int = 0
    # Optional fields: always present, None when unknown
    category: Optional[str] = None
    filter: Optional[str] = None
    maxRetry: Optional[int] = None
    banTime: Optional[int] = None


class JailsResponse(ContractModel):
    jails: List[NormalizedJail] = Field(default_factory=list)
    lastUpdated: str
    serverStatus: ServerStatus = "offline"


# ---------------------------------------------------------------------------
# Nginx / system / overview
# ---------------------------------------------------------------------------

class NginxCounters(ContractModel):
    count_404: int = Field(0, alias="404_count")
    admin_scans: int = 0
    webdav_attacks: int = 0
    hidden_files_attempts: int = 0


class NginxResponse(NginxCounters):
    pass


class SystemResponse(ContractModel):
    hostname: Optional[str] = None
    uptime: Optional[str] = None
    memory: Optional[str] = None
    disk: Optional[str] = None
    load: Optional[str] = None


class ServerSummary(ContractModel):
    hostname: str = ""
    uptime: str = ""


class BanSummary(ContractModel):
    active_jails: int = 0
    total_banned_ips: int = 0


class SystemSummary(ContractModel):
    memory: Optional[str] = None
    disk: Optional[str] = None
    load: Optional[str] = None


class OverviewResponse(ContractModel):
    timestamp: str
    server: ServerSummary = Field(default_factory=ServerSummary)
    summary: BanSummary = Field(default_factory=BanSummary)
    jails: List[NormalizedJail] = Field(default_factory=list)
    nginx: NginxCounters = Field(default_factory=NginxCounters)
    system: SystemSummary = Field(default_factory=SystemSummary)


# ---------------------------------------------------------------------------
# Backup
# ---------------------------------------------------------------------------

class BackupResponse(ContractModel):
    success: bool = False
    filename: Optional[str] = None
    path: Optional[str] = None
    size: Optional[int] = None
    sizeFormatted: Optional[str] = None
    timestamp: str


# ---------------------------------------------------------------------------
# Ban history
# ---------------------------------------------------------------------------

BanAction = Literal["ban", "unban", "restore"]


class BanEvent(ContractModel):
    jail: str
    ip: str
    action: BanAction
    timestamp: str


class HistoryResponse(ContractModel):
    events: List[BanEvent] = Field(default_factory=list)
    total: int = 0
    jail: Optional[str] = None
    limit: int
