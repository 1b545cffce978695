"""Module errors: structured error taxonomy for jailwatch."""
#
from enum import Enum
from typing import Dict, Any, Optional
# PURPOSE:
# Gives every failure the parsing core can run into a stable code, a typed
# exception and a dict form. The parsing boundary converts all of them into
# `{errors, partial}` data; the routing layer uses the codes and HTTP hints
# when it decides what to answer.
#
# ERROR CODE FORMAT:
# - PARSE_XXX: input and structural parsing errors
# - F2B_XXX: fail2ban health failures detected in command output
# - CONFIG_XXX: configuration errors
# - SYSTEM_XXX: everything else
#
# USAGE:
#   from jailwatch.errors import ServiceDownError
#
#   raise ServiceDownError(
#       "fail2ban service is not running",
#       details={"script": "monitor-security.sh"}
#   )
#
class ErrorCode(Enum):
    # Parse Errors
    PARSE_NULL_INPUT = "PARSE_001"
    PARSE_EMPTY_INPUT = "PARSE_002"
    PARSE_EXCEPTION = "PARSE_003"
    PARSE_MISSING_SECTION = "PARSE_004"

    # fail2ban Errors
    F2B_CONNECTION_REFUSED = "F2B_001"
    F2B_SERVICE_DOWN = "F2B_002"
    F2B_PERMISSION_DENIED = "F2B_003"
    F2B_COMMAND_NOT_FOUND = "F2B_004"

    # Config Errors
    CONFIG_INVALID = "CONFIG_001"

    # System Errors
    SYSTEM_INTERNAL_ERROR = "SYSTEM_001"


class JailwatchError(Exception):
    """
    Base exception class for jailwatch with structured error information.

    Attributes:
        code: ErrorCode enum value (e.g., "PARSE_001")
        message: Human-readable error message
        details: Optional dictionary with additional context
        http_status: Suggested HTTP status code for the routing layer
    """

    code: ErrorCode = ErrorCode.SYSTEM_INTERNAL_ERROR
    default_message: str = "Internal error"

    # Map error codes to HTTP status codes
    HTTP_STATUS_MAP: Dict[ErrorCode, int] = {
        ErrorCode.PARSE_NULL_INPUT: 502,       # Bad Gateway: the script produced nothing
        ErrorCode.PARSE_EMPTY_INPUT: 502,
        ErrorCode.PARSE_EXCEPTION: 500,
        ErrorCode.PARSE_MISSING_SECTION: 200,  # partial data is still served

        ErrorCode.F2B_CONNECTION_REFUSED: 503, # Service Unavailable
        ErrorCode.F2B_SERVICE_DOWN: 503,
        ErrorCode.F2B_PERMISSION_DENIED: 403,  # Forbidden
        ErrorCode.F2B_COMMAND_NOT_FOUND: 503,

        ErrorCode.CONFIG_INVALID: 500,

        ErrorCode.SYSTEM_INTERNAL_ERROR: 500,
    }

    def __init__(
        self,
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        code: Optional[ErrorCode] = None,
        http_status: Optional[int] = None,
    ):
        """
        Initialize a JailwatchError.

        Args:
            message: Human-readable error message (defaults to the class message)
            details: Optional dictionary with additional context
            code: Optional ErrorCode overriding the class code
            http_status: Optional HTTP status code (defaults to mapped value)
        """
        self.code = code or type(self).code
        self.message = message or self.default_message
        self.details = details or {}
        self.http_status = http_status or self.HTTP_STATUS_MAP.get(self.code, 500)

        # Build exception message with code for easy debugging
        super().__init__(f"[{self.code.value}] {self.message}")

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert error to dictionary for JSON serialization.

        Returns:
            Dictionary with code, message, details, and http_status
        """
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
            "http_status": self.http_status
        }

    def to_json(self) -> str:
        """Serialize error to JSON string."""
        import json
        return json.dumps(self.to_dict(), default=str)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "JailwatchError":
        """
        Deserialize error from dictionary.

        The concrete subclass registered for the code is used when there is one.
        """
        code = ErrorCode(data["code"])
        error_cls = _CODE_TO_CLASS.get(code, cls)
        return error_cls(
            data["message"],
            details=data.get("details", {}),
            code=code,
            http_status=data.get("http_status"),
        )


class InputError(JailwatchError):
    """Raw text was None: the script produced no output object at all."""
    code = ErrorCode.PARSE_NULL_INPUT
    default_message = "Parser received null input - script execution failed"


class EmptyInputError(JailwatchError):
    """Raw text was empty or whitespace only."""
    code = ErrorCode.PARSE_EMPTY_INPUT
    default_message = "Parser received empty input - script returned no output"


class MissingSectionError(JailwatchError):
    code = ErrorCode.PARSE_MISSING_SECTION
    default_message = "Report section missing"


class ServiceConnectionError(JailwatchError):
    code = ErrorCode.F2B_CONNECTION_REFUSED
    default_message = "fail2ban service connection refused"


class ServiceDownError(JailwatchError):
    code = ErrorCode.F2B_SERVICE_DOWN
    default_message = "fail2ban service is not running"


class ServicePermissionError(JailwatchError):
    code = ErrorCode.F2B_PERMISSION_DENIED
    default_message = "Permission denied accessing fail2ban"


class CommandNotFoundError(JailwatchError):
    code = ErrorCode.F2B_COMMAND_NOT_FOUND
    default_message = "fail2ban-client command not found (reported by script)"


class CaughtParseException(JailwatchError):
    """An unexpected exception raised while a parser walked the report."""
    code = ErrorCode.PARSE_EXCEPTION
    default_message = "Unknown parsing error"


class ConfigError(JailwatchError):
    code = ErrorCode.CONFIG_INVALID
    default_message = "Invalid configuration"


_CODE_TO_CLASS = {
    error_cls.code: error_cls
    for error_cls in (
        InputError,
        EmptyInputError,
        MissingSectionError,
        ServiceConnectionError,
        ServiceDownError,
        ServicePermissionError,
        CommandNotFoundError,
        CaughtParseException,
        ConfigError,
    )
}


# ============================================================================
# Convenience Functions
# ============================================================================

def handle_error(error: Exception, context: Optional[str] = None) -> JailwatchError:
    """
    Convert a generic exception to a JailwatchError.

    Used at the safe-parse boundary to turn whatever a parser raised into a
    structured error whose message ends up in the result's `errors` list.

    Args:
        error: The original exception
        context: Optional context string (e.g., "while parsing monitor report")

    Returns:
        The error itself when it is already a JailwatchError, otherwise a
        CaughtParseException carrying the original type and message
    """
    if isinstance(error, JailwatchError):
        return error

    error_type = type(error).__name__
    message = str(error) or error_type
    if context:
        message = f"{context}: {message}"

    return CaughtParseException(
        message,
        details={
            "original_type": error_type,
            "original_message": str(error)
        }
    )


# ============================================================================
# Module-Level Exports
# ============================================================================

__all__ = [
    "ErrorCode",
    "JailwatchError",
    "InputError",
    "EmptyInputError",
    "MissingSectionError",
    "ServiceConnectionError",
    "ServiceDownError",
    "ServicePermissionError",
    "CommandNotFoundError",
    "CaughtParseException",
    "ConfigError",
    "handle_error",
]
