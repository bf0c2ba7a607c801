# rmi_driver/core/errors.py
from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Stable machine-readable error identifiers."""
    UNKNOWN = "unknown"
    NO_MATCHING_HANDLER = "no_matching_handler"
    HANDLER_NOT_CONFIGURED = "handler_not_configured"
    MALFORMED_COMMAND = "malformed_command"
    HANDLER_REGISTRATION = "handler_registration_error"
    HANDLER_CONFIG = "handler_config_error"


class RmiDriverError(Exception):
    """
    Base class for all expected operational errors in the driver core.
    """

    #: Stable machine-readable identifier (for CLI exit mapping, telemetry, etc.)
    code: ErrorKind = ErrorKind.UNKNOWN

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.hint = hint
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Dispatch errors (one inbound message)
# ---------------------------------------------------------------------------

class NoMatchingHandlerError(RmiDriverError):
    """
    No registered criteria matched the inbound message.

    Recoverable: the caller usually drops and logs the command.
    """
    code = ErrorKind.NO_MATCHING_HANDLER


class HandlerNotConfiguredError(RmiDriverError):
    """
    A handler matched but has no conversion function.

    This is a registration defect, not an input error.
    """
    code = ErrorKind.HANDLER_NOT_CONFIGURED


class MalformedCommandError(RmiDriverError):
    """
    A wire command could not be built from the message.

    Examples:
      - conversion function returned nothing
      - parameter added before the primary keyword
      - keyword/value containing the segment terminator
    """
    code = ErrorKind.MALFORMED_COMMAND


# ---------------------------------------------------------------------------
# Setup errors (before any dispatch)
# ---------------------------------------------------------------------------

class HandlerRegistrationError(RmiDriverError):
    """Handler registration rejected (e.g. registry already sealed)."""
    code = ErrorKind.HANDLER_REGISTRATION


class HandlerConfigError(RmiDriverError):
    """
    Handler or driver configuration is invalid.

    Examples:
      - missing / malformed YAML file
      - unknown converter name
      - unknown message field in criteria
    """
    code = ErrorKind.HANDLER_CONFIG
