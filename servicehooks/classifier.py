"""Map an invocation failure to an error kind, and a kind to an HTTP outcome."""

from enum import Enum

import requests

from servicehooks.errors import ConfigurationError, MissingError
from servicehooks.models import DispatchOutcome

TIMEOUT_BODY = "Service Timeout"
ERROR_BODY = "ERROR"
OK_BODY = "OK"


class ErrorKind(str, Enum):
    CONNECTION = "connection"
    CONFIGURATION = "configuration"
    TIMEOUT = "timeout"
    MISSING = "missing"
    UNCLASSIFIED = "unclassified"


STATUS_CODES = {
    ErrorKind.CONNECTION: 503,
    ErrorKind.CONFIGURATION: 400,
    ErrorKind.TIMEOUT: 504,
    ErrorKind.MISSING: 404,
    ErrorKind.UNCLASSIFIED: 500,
}


def classify_error(error: BaseException) -> ErrorKind:
    """Return the kind of ``error``.

    Connection failures are checked before timeouts, so a requests
    ConnectTimeout (both at once) is a connection failure.
    """
    if isinstance(error, (ConnectionError, requests.ConnectionError)):
        return ErrorKind.CONNECTION
    if isinstance(error, ConfigurationError):
        return ErrorKind.CONFIGURATION
    if isinstance(error, (TimeoutError, requests.Timeout)):
        return ErrorKind.TIMEOUT
    if isinstance(error, MissingError):
        return ErrorKind.MISSING
    return ErrorKind.UNCLASSIFIED


def outcome_for(kind: ErrorKind, error: BaseException) -> DispatchOutcome:
    """Status and body for a failure of the given kind."""
    status = STATUS_CODES[kind]
    if kind is ErrorKind.TIMEOUT:
        return DispatchOutcome(status_code=status, body=TIMEOUT_BODY)
    if kind is ErrorKind.UNCLASSIFIED:
        return DispatchOutcome(status_code=status, body=ERROR_BODY)
    return DispatchOutcome(status_code=status, body=str(error))


def success_outcome(hook_name: str, event_name: str, handle: object) -> DispatchOutcome:
    """200 outcome for a call that raised nothing."""
    if handle:
        return DispatchOutcome(status_code=200, body=OK_BODY)
    return DispatchOutcome(
        status_code=200,
        body=f"{hook_name} Service does not respond to '{event_name}' events",
    )
