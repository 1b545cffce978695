# jailwatch/config.py
# Configuration for the parsing core: anchor search windows, API contract, logging

from __future__ import annotations

import os
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from jailwatch.errors import ConfigError

logger = logging.getLogger(__name__)

ENV_PREFIX = "JAILWATCH_"


@dataclass(frozen=True)
class ParserConfig:
    max_search: int = 3              # lines scanned after an anchor in the monitor report
    quick_check_max_search: int = 2  # quick-check counters sit right under their label
    top_ips_limit: int = 10
    history_limit: int = 50         # newest fail2ban.log events kept

    def __post_init__(self):
        if self.max_search < 0 or self.quick_check_max_search < 0:
            raise ConfigError("max_search values must be >= 0")
        if self.top_ips_limit < 1:
            raise ConfigError("top_ips_limit must be >= 1")
        if not 1 <= self.history_limit <= 1000:
            raise ConfigError("history_limit must be between 1 and 1000")


@dataclass(frozen=True)
class ApiConfig:
    version: str = "1.0.0"
    version_header: str = "X-API-Version"
    diagnostic_prefix: str = "_"


@dataclass(frozen=True)
class LogConfig:
    level: str = "INFO"
    format: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    file_enabled: bool = False
    file_path: Path = field(default_factory=lambda: Path("/var/log/jailwatch/jailwatch.log"))
    max_file_size_mb: int = 10
    backup_count: int = 5


@dataclass
class JailwatchConfig:
    parser: ParserConfig = field(default_factory=ParserConfig)
    api: ApiConfig = field(default_factory=ApiConfig)
    log: LogConfig = field(default_factory=LogConfig)
    debug: bool = False

    @classmethod
    def from_env(cls) -> "JailwatchConfig":
        try:
            parser = ParserConfig(
                max_search=int(os.getenv(f"{ENV_PREFIX}MAX_SEARCH", "3")),
                quick_check_max_search=int(os.getenv(f"{ENV_PREFIX}QUICK_CHECK_MAX_SEARCH", "2")),
                top_ips_limit=int(os.getenv(f"{ENV_PREFIX}TOP_IPS_LIMIT", "10")),
                history_limit=int(os.getenv(f"{ENV_PREFIX}HISTORY_LIMIT", "50")),
            )
        except ValueError as e:
            raise ConfigError(f"Invalid parser setting: {e}") from e

        api = ApiConfig(
            version=os.getenv(f"{ENV_PREFIX}API_VERSION", "1.0.0"),
        )

        log_file = os.getenv(f"{ENV_PREFIX}LOG_FILE", "")
        log = LogConfig(
            level=os.getenv(f"{ENV_PREFIX}LOG_LEVEL", "INFO"),
            file_enabled=bool(log_file),
            file_path=Path(log_file) if log_file else LogConfig().file_path,
        )

        return cls(
            parser=parser,
            api=api,
            log=log,
            debug=os.getenv(f"{ENV_PREFIX}DEBUG", "false").lower() == "true",
        )


_config: Optional[JailwatchConfig] = None


def get_config() -> JailwatchConfig:
    global _config
    if _config is None:
        _config = JailwatchConfig.from_env()
    return _config


def set_config(config: Optional[JailwatchConfig]) -> None:
    global _config
    _config = config


def setup_logging(config: Optional[JailwatchConfig] = None) -> None:
    cfg = config or get_config()

    handlers: List[logging.Handler] = [logging.StreamHandler()]

    if cfg.log.file_enabled:
        from logging.handlers import RotatingFileHandler
        file_handler = RotatingFileHandler(
            cfg.log.file_path,
            maxBytes=cfg.log.max_file_size_mb * 1024 * 1024,
            backupCount=cfg.log.backup_count,
        )
        handlers.append(file_handler)

    level = "DEBUG" if cfg.debug else cfg.log.level.upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format=cfg.log.format,
        handlers=handlers,
        force=True,
    )
