"""
Error Types

Closed error hierarchy shared by every hourly_wordle component.
Controllers map these onto HTTP status codes; the core only raises them.
"""

from enum import Enum
from typing import Optional


class HourlyWordleError(Exception):
    """Base class for every error raised by the word core."""


class InputError(HourlyWordleError, ValueError):
    """Malformed caller input (wrong guess length, empty seed, ...)."""


class IntegrityError(HourlyWordleError):
    """A stored word record is malformed or cannot be decoded."""


class DecodeError(IntegrityError):
    """Obfuscated payload is not valid for the reversible encoding step."""


class CoordinationError(HourlyWordleError):
    """Word creation failed for a non-race reason and no record was found afterwards."""

    def __init__(self, message: str, hour_id: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.hour_id = hour_id
        self.cause = cause


class InitializationOrderError(HourlyWordleError, RuntimeError):
    """Lexicon queried before load() completed."""


class StoreErrorKind(Enum):
    """Machine-readable failure kinds reported by a word store."""
    ALREADY_EXISTS = "already-exists"
    PERMISSION_DENIED = "permission-denied"
    UNAUTHENTICATED = "unauthenticated"
    UNAVAILABLE = "unavailable"
    DEADLINE_EXCEEDED = "deadline-exceeded"
    RESOURCE_EXHAUSTED = "resource-exhausted"
    INTERNAL = "internal"
    ABORTED = "aborted"
    MAX_RETRIES_EXCEEDED = "max-retries-exceeded"

    @property
    def is_transient(self) -> bool:
        return self in _TRANSIENT_KINDS


_TRANSIENT_KINDS = frozenset({
    StoreErrorKind.UNAVAILABLE,
    StoreErrorKind.DEADLINE_EXCEEDED,
    StoreErrorKind.RESOURCE_EXHAUSTED,
    StoreErrorKind.INTERNAL,
    StoreErrorKind.ABORTED,
})


class StoreError(HourlyWordleError):
    """Failure reported by the document store, tagged with its kind."""

    def __init__(self, message: str, kind: StoreErrorKind, original_error: Optional[BaseException] = None):
        super().__init__(message)
        self.kind = kind
        self.original_error = original_error

    @classmethod
    def of(cls, kind: StoreErrorKind, message: str,
           original_error: Optional[BaseException] = None) -> "StoreError":
        """Build the right subclass for ``kind``."""
        error_class = TransientStoreError if kind.is_transient else StoreError
        return error_class(message, kind, original_error)


class TransientStoreError(StoreError):
    """Retryable store failure (unavailable, timeouts, throttling, ...)."""


_FRIENDLY_MESSAGES = {
    StoreErrorKind.PERMISSION_DENIED: "Access denied. Please check your permissions.",
    StoreErrorKind.UNAVAILABLE: "Service temporarily unavailable. Please try again.",
    StoreErrorKind.DEADLINE_EXCEEDED: "Request timed out. Please try again.",
    StoreErrorKind.RESOURCE_EXHAUSTED: "Service is busy. Please try again later.",
    StoreErrorKind.UNAUTHENTICATED: "Authentication required.",
    StoreErrorKind.ALREADY_EXISTS: "Data already exists.",
    StoreErrorKind.ABORTED: "Operation was aborted. Please try again.",
    StoreErrorKind.INTERNAL: "Internal server error. Please try again.",
    StoreErrorKind.MAX_RETRIES_EXCEEDED: "Service kept failing. Please try again later.",
}


def friendly_message(kind: StoreErrorKind) -> str:
    """User-facing sentence for a store failure kind."""
    return _FRIENDLY_MESSAGES.get(kind, f"An error occurred: {kind.value}")
