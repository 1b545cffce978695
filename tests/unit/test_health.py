"""Unit tests for the fail2ban failure-signature classifier."""
from jailwatch.errors import ServiceDownError, ServicePermissionError
from jailwatch.parsers.health import HEALTHY, ErrorKind, detect_fail2ban_error


class TestSignatures:
    """Each signature family maps to its kind and message."""

    def test_connection_refused(self):
        d = detect_fail2ban_error("ERROR  Connection refused")
        assert d.is_error
        assert d.kind is ErrorKind.CONNECTION_ERROR
        assert d.message == "fail2ban service connection refused"

    def test_service_down(self):
        d = detect_fail2ban_error(
            "ERROR   Failed to access socket path: /var/run/fail2ban/fail2ban.sock. Is fail2ban running?"
        )
        assert d.kind is ErrorKind.SERVICE_DOWN
        assert d.message == "fail2ban service is not running"

    def test_permission_denied(self):
        d = detect_fail2ban_error("", "sudo: Permission denied")
        assert d.kind is ErrorKind.PERMISSION_ERROR

    def test_command_not_found(self):
        d = detect_fail2ban_error("bash: fail2ban-client: command not found")
        assert d.kind is ErrorKind.COMMAND_NOT_FOUND

    def test_case_insensitive(self):
        assert detect_fail2ban_error("CONNECTION REFUSED").kind is ErrorKind.CONNECTION_ERROR


class TestPriority:
    """First matching family wins when several signatures are present."""

    def test_socket_failure_beats_permission(self):
        d = detect_fail2ban_error("Failed to access socket path ... Permission denied")
        assert d.kind is ErrorKind.SERVICE_DOWN

    def test_connection_beats_everything(self):
        d = detect_fail2ban_error("Permission denied", "Connection refused")
        assert d.kind is ErrorKind.CONNECTION_ERROR


class TestEmptyAndHealthy:
    """No signature: empty output is an error, anything else is healthy."""

    def test_empty_streams(self):
        d = detect_fail2ban_error("", "")
        assert d.is_error
        assert d.kind is ErrorKind.EMPTY_OUTPUT

    def test_none_stdout(self):
        assert detect_fail2ban_error(None).kind is ErrorKind.EMPTY_OUTPUT

    def test_stderr_only_is_not_empty(self):
        d = detect_fail2ban_error("", "some warning")
        assert d == HEALTHY

    def test_normal_output(self):
        d = detect_fail2ban_error("Status\n`- Jail list:\tsshd")
        assert not d.is_error
        assert d.kind is ErrorKind.NONE
        assert d.message is None


class TestDiagnosis:
    """Conversion helpers on the Diagnosis record."""

    def test_to_exception(self):
        error = detect_fail2ban_error("Is fail2ban running?").to_exception()
        assert isinstance(error, ServiceDownError)
        assert error.message == "fail2ban service is not running"

        error = detect_fail2ban_error("Access denied").to_exception()
        assert isinstance(error, ServicePermissionError)

    def test_no_exception_for_empty_or_healthy(self):
        assert detect_fail2ban_error("").to_exception() is None
        assert HEALTHY.to_exception() is None

    def test_as_dict(self):
        assert detect_fail2ban_error("").as_dict() == {
            "isError": True,
            "kind": "empty_output",
            "message": "Empty output from fail2ban command",
        }
