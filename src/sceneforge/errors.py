"""Error taxonomy for remote generation calls."""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """How a failed remote call should be treated."""

    TRANSIENT = "transient"
    QUOTA_EXCEEDED = "quota_exceeded"
    PERMANENT = "permanent"


class GenerationError(Exception):
    """A remote generation call failed.

    Service clients raise one of the subclasses so the retry policy can
    act on the kind instead of parsing message text.
    """

    kind: ErrorKind = ErrorKind.PERMANENT

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class TransientError(GenerationError):
    """Rate limiting or temporary unavailability; safe to retry."""

    kind = ErrorKind.TRANSIENT


class QuotaExceededError(GenerationError):
    """The service's usage allowance is exhausted; never retried."""

    kind = ErrorKind.QUOTA_EXCEEDED


class PermanentError(GenerationError):
    """The request cannot succeed as issued."""

    kind = ErrorKind.PERMANENT


# Lower-cased phrases, English and Korean
QUOTA_MARKERS = ("quota exceeded", "exceeded quota", "exceeded your current quota", "할당량")
TRANSIENT_MARKERS = ("429", "resource_exhausted", "resource exhausted", "503", "unavailable", "속도")


def classify_message(message: str) -> ErrorKind:
    """Classify an error by its text.

    Only used for exceptions that did not come through a service client.
    """
    msg = message.lower()
    if any(marker in msg for marker in QUOTA_MARKERS):
        return ErrorKind.QUOTA_EXCEEDED
    if any(marker in msg for marker in TRANSIENT_MARKERS):
        return ErrorKind.TRANSIENT
    return ErrorKind.PERMANENT


def classify_error(error: BaseException) -> ErrorKind:
    """Return the retry classification for an exception."""
    if isinstance(error, GenerationError):
        return error.kind
    return classify_message(str(error) or type(error).__name__)


def error_from_response(status_code: int, body: str, service: str) -> GenerationError:
    """Build a structured error from an HTTP error response."""
    message = f"{service} error {status_code}: {body[:500]}"
    lowered = body.lower()
    if status_code == 429:
        if "quota" in lowered and "per minute" not in lowered:
            return QuotaExceededError(message, status_code)
        return TransientError(message, status_code)
    if status_code in (500, 502, 503, 504):
        return TransientError(message, status_code)
    return PermanentError(message, status_code)
