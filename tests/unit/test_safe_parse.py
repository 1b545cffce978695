"""Unit tests for the safe-parse boundary."""
import logging
from functools import partial

from jailwatch.parsers.records import default_monitor_report
from jailwatch.parsers.safe_parse import safe_parse


def _ok_parser(text):
    return {"value": len(text), "errors": []}


class TestShortCircuits:
    """None and blank input never reach the parser."""

    def test_none_input(self, caplog):
        calls = []

        def parser(text):
            calls.append(text)
            return {}

        with caplog.at_level(logging.ERROR, logger="jailwatch.parsers.safe_parse"):
            result = safe_parse(parser, None, {"value": 0})

        assert calls == []
        assert result == {
            "value": 0,
            "errors": ["Parser received null input - script execution failed"],
            "partial": True,
        }
        assert "null input" in caplog.text

    def test_blank_input(self):
        result = safe_parse(_ok_parser, "  \n\t ", {"value": 0})
        assert result["errors"] == ["Parser received empty input - script returned no output"]
        assert result["partial"] is True
        assert result["value"] == 0

    def test_no_defaults(self):
        result = safe_parse(_ok_parser, None)
        assert set(result) == {"errors", "partial"}


class TestParserFailures:
    """Exceptions and bad return values become error data."""

    def test_exception_message(self):
        def parser(text):
            raise ValueError("boom")

        result = safe_parse(parser, "text", {"value": 0})
        assert result == {"value": 0, "errors": ["boom"], "partial": True}

    def test_exception_without_message(self):
        def parser(text):
            raise RuntimeError()

        result = safe_parse(parser, "text")
        assert result["errors"] == ["RuntimeError"]

    def test_non_dict_result(self):
        result = safe_parse(lambda text: ["not", "a", "dict"], "text", {"value": 0})
        assert result["partial"] is True
        assert "expected dict" in result["errors"][0]

    def test_exception_is_logged(self, caplog):
        def parser(text):
            raise KeyError("jails")

        with caplog.at_level(logging.ERROR, logger="jailwatch.parsers.safe_parse"):
            safe_parse(parser, "text")
        assert "parser failed" in caplog.text


class TestResultContract:
    """Merging with defaults and the errors/partial invariant."""

    def test_defaults_overlaid(self):
        result = safe_parse(_ok_parser, "abcd", {"value": 0, "other": "kept"})
        assert result == {"value": 4, "other": "kept", "errors": [], "partial": False}

    def test_partial_follows_errors(self):
        result = safe_parse(lambda text: {"errors": ["x"], "partial": False}, "text")
        assert result["partial"] is True

        result = safe_parse(lambda text: {"errors": [], "partial": True}, "text")
        assert result["partial"] is False

    def test_errors_normalized_to_list_of_str(self):
        result = safe_parse(lambda text: {"errors": None}, "text")
        assert result["errors"] == []

        result = safe_parse(lambda text: {"errors": "single"}, "text")
        assert result["errors"] == ["single"]

    def test_defaults_not_mutated(self):
        defaults = default_monitor_report()
        result = safe_parse(lambda text: {}, "text", defaults)
        result["jails"].append("x")
        result["fail2ban"]["jails"].append("sshd")
        assert defaults["jails"] == []
        assert defaults["fail2ban"]["jails"] == []

    def test_bytes_are_decoded(self, caplog):
        seen = []

        def parser(text):
            seen.append(text)
            return {}

        with caplog.at_level(logging.WARNING, logger="jailwatch.parsers.safe_parse"):
            safe_parse(parser, "Сървър: web01".encode("utf-8"))
        assert seen == ["Сървър: web01"]
        assert "not a string" in caplog.text

    def test_partial_objects_accepted(self):
        def parser(text, factor=1):
            return {"value": len(text) * factor}

        result = safe_parse(partial(parser, factor=2), "abc")
        assert result["value"] == 6
        assert result["partial"] is False
