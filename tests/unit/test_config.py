"""Unit tests for configuration loading and logging setup."""
import logging
from logging.handlers import RotatingFileHandler

import pytest

from jailwatch.config import (
    JailwatchConfig,
    LogConfig,
    ParserConfig,
    get_config,
    set_config,
    setup_logging,
)
from jailwatch.errors import ConfigError


class TestDefaults:
    """Built-in values."""

    def test_parser_defaults(self):
        cfg = JailwatchConfig()
        assert cfg.parser.max_search == 3
        assert cfg.parser.quick_check_max_search == 2
        assert cfg.parser.top_ips_limit == 10
        assert cfg.parser.history_limit == 50

    def test_api_contract(self):
        cfg = JailwatchConfig()
        assert cfg.api.version == "1.0.0"
        assert cfg.api.version_header == "X-API-Version"
        assert cfg.api.diagnostic_prefix == "_"

    def test_no_log_file_by_default(self):
        assert JailwatchConfig().log.file_enabled is False


class TestFromEnv:
    """JAILWATCH_* environment variables."""

    def test_reads_env(self, monkeypatch):
        monkeypatch.setenv("JAILWATCH_MAX_SEARCH", "5")
        monkeypatch.setenv("JAILWATCH_TOP_IPS_LIMIT", "3")
        monkeypatch.setenv("JAILWATCH_HISTORY_LIMIT", "20")
        monkeypatch.setenv("JAILWATCH_API_VERSION", "1.1.0")
        monkeypatch.setenv("JAILWATCH_DEBUG", "true")

        cfg = JailwatchConfig.from_env()
        assert cfg.parser.max_search == 5
        assert cfg.parser.top_ips_limit == 3
        assert cfg.parser.history_limit == 20
        assert cfg.api.version == "1.1.0"
        assert cfg.debug is True

    def test_log_file_enables_file_logging(self, monkeypatch, tmp_path):
        monkeypatch.setenv("JAILWATCH_LOG_FILE", str(tmp_path / "jw.log"))
        cfg = JailwatchConfig.from_env()
        assert cfg.log.file_enabled is True
        assert cfg.log.file_path == tmp_path / "jw.log"

    def test_non_numeric_value(self, monkeypatch):
        monkeypatch.setenv("JAILWATCH_MAX_SEARCH", "many")
        with pytest.raises(ConfigError):
            JailwatchConfig.from_env()

    def test_out_of_range_value(self):
        with pytest.raises(ConfigError):
            ParserConfig(max_search=-1)
        with pytest.raises(ConfigError):
            ParserConfig(top_ips_limit=0)
        with pytest.raises(ConfigError):
            ParserConfig(history_limit=0)


class TestSingleton:
    """get_config / set_config."""

    def test_set_and_get(self):
        custom = JailwatchConfig(parser=ParserConfig(max_search=1))
        set_config(custom)
        assert get_config() is custom

    def test_reset_rebuilds_from_env(self, monkeypatch):
        set_config(JailwatchConfig(parser=ParserConfig(max_search=1)))
        set_config(None)
        monkeypatch.setenv("JAILWATCH_MAX_SEARCH", "4")
        assert get_config().parser.max_search == 4


class TestSetupLogging:
    """Root logger configuration."""

    def test_rotating_file_handler(self, tmp_path):
        log_path = tmp_path / "jailwatch.log"
        cfg = JailwatchConfig(log=LogConfig(file_enabled=True, file_path=log_path, level="WARNING"))

        setup_logging(cfg)
        root = logging.getLogger()
        try:
            handlers = [h for h in root.handlers if isinstance(h, RotatingFileHandler)]
            assert len(handlers) == 1
            assert root.level == logging.WARNING

            logging.getLogger("jailwatch.test").warning("written to file")
            handlers[0].flush()
            assert "written to file" in log_path.read_text()
        finally:
            for handler in list(root.handlers):
                if isinstance(handler, RotatingFileHandler):
                    root.removeHandler(handler)
                    handler.close()

    def test_debug_overrides_level(self):
        setup_logging(JailwatchConfig(debug=True))
        assert logging.getLogger().level == logging.DEBUG
