# jailwatch/parsers/health.py
# Cheap upfront health gate: spots fail2ban failure signatures in raw output.

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from jailwatch.errors import (
    CommandNotFoundError,
    JailwatchError,
    ServiceConnectionError,
    ServiceDownError,
    ServicePermissionError,
)


class ErrorKind(str, Enum):
    CONNECTION_ERROR = "connection_error"
    SERVICE_DOWN = "service_down"
    PERMISSION_ERROR = "permission_error"
    COMMAND_NOT_FOUND = "command_not_found"
    EMPTY_OUTPUT = "empty_output"
    NONE = "none"


# Evaluated top to bottom, first hit wins. Output can carry several
# signatures at once ("Failed to access socket ... Permission denied"),
# so the order is part of the contract.
SIGNATURES: Tuple[Tuple[ErrorKind, Tuple[str, ...], str], ...] = (
    (
        ErrorKind.CONNECTION_ERROR,
        ("connection refused", "failed to connect", "cannot connect"),
        "fail2ban service connection refused",
    ),
    (
        ErrorKind.SERVICE_DOWN,
        (
            "service not running",
            "service is not running",
            "not running",
            "is fail2ban running",
            "failed to access socket",
            "socket path",
        ),
        "fail2ban service is not running",
    ),
    (
        ErrorKind.PERMISSION_ERROR,
        ("permission denied", "access denied"),
        "Permission denied accessing fail2ban",
    ),
    (
        ErrorKind.COMMAND_NOT_FOUND,
        ("command not found",),
        "fail2ban-client command not found (reported by script)",
    ),
)

_EXCEPTIONS = {
    ErrorKind.CONNECTION_ERROR: ServiceConnectionError,
    ErrorKind.SERVICE_DOWN: ServiceDownError,
    ErrorKind.PERMISSION_ERROR: ServicePermissionError,
    ErrorKind.COMMAND_NOT_FOUND: CommandNotFoundError,
}


@dataclass(frozen=True)
class Diagnosis:
    is_error: bool
    kind: ErrorKind
    message: Optional[str] = None

    def to_exception(self) -> Optional[JailwatchError]:
        """Typed error for this diagnosis; None when healthy or merely empty."""
        error_cls = _EXCEPTIONS.get(self.kind)
        if error_cls is None:
            return None
        return error_cls(self.message)

    def as_dict(self) -> dict:
        return {"isError": self.is_error, "kind": self.kind.value, "message": self.message}


HEALTHY = Diagnosis(is_error=False, kind=ErrorKind.NONE)


def detect_fail2ban_error(stdout: Optional[str], stderr: Optional[str] = "") -> Diagnosis:
    stdout = stdout or ""
    stderr = stderr or ""
    lower = f"{stdout}\n{stderr}".lower()

    for kind, needles, message in SIGNATURES:
        if any(needle in lower for needle in needles):
            return Diagnosis(is_error=True, kind=kind, message=message)

    if not stdout.strip() and not stderr.strip():
        return Diagnosis(is_error=True, kind=ErrorKind.EMPTY_OUTPUT, message="Empty output from fail2ban command")

    return HEALTHY
