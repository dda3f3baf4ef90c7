"""
Error taxonomy shared by the sync layer and its store boundaries.
"""
import enum
from typing import Optional


class ErrorKind(str, enum.Enum):
    """Closed set of failure kinds a remote or local operation can report."""
    NO_ACCOUNT = "no_account"
    NETWORK_UNAVAILABLE = "network_unavailable"
    QUOTA_EXCEEDED = "quota_exceeded"
    PERMISSION_FAILURE = "permission_failure"
    NOT_FOUND = "not_found"
    INVALID_DATA = "invalid_data"
    RETRY_LIMIT_EXCEEDED = "retry_limit_exceeded"
    UNKNOWN = "unknown"


RETRYABLE_KINDS = frozenset({ErrorKind.NETWORK_UNAVAILABLE, ErrorKind.UNKNOWN})

USER_MESSAGES = {
    ErrorKind.NO_ACCOUNT: "No account available. Please sign in.",
    ErrorKind.NETWORK_UNAVAILABLE: "Network connection unavailable. Please check your internet connection.",
    ErrorKind.QUOTA_EXCEEDED: "Storage quota exceeded. Please free up space.",
    ErrorKind.PERMISSION_FAILURE: "Permission denied.",
    ErrorKind.NOT_FOUND: "Record not found.",
    ErrorKind.INVALID_DATA: "Invalid data format.",
    ErrorKind.RETRY_LIMIT_EXCEEDED: "Operation failed after multiple retries.",
    ErrorKind.UNKNOWN: "An unexpected error occurred.",
}


class SyncError(Exception):
    """A failure tagged with one ErrorKind; cause holds the underlying error."""

    def __init__(
        self,
        kind: ErrorKind,
        message: Optional[str] = None,
        cause: Optional[BaseException] = None
    ):
        self.kind = kind
        self.message = message or USER_MESSAGES[kind]
        self.cause = cause
        super().__init__(self.message)

    @property
    def retryable(self) -> bool:
        return self.kind in RETRYABLE_KINDS

    @property
    def user_message(self) -> str:
        """Message suitable for display."""
        if self.kind == ErrorKind.UNKNOWN and self.cause is not None:
            return str(self.cause) or USER_MESSAGES[self.kind]
        return self.message

    @classmethod
    def unknown(cls, cause: BaseException) -> "SyncError":
        return cls(ErrorKind.UNKNOWN, str(cause) or USER_MESSAGES[ErrorKind.UNKNOWN], cause=cause)

    @classmethod
    def invalid(cls, errors) -> "SyncError":
        """Build an INVALID_DATA error from a list of validation messages."""
        return cls(ErrorKind.INVALID_DATA, "; ".join(errors) or USER_MESSAGES[ErrorKind.INVALID_DATA])

    def __repr__(self) -> str:
        return f"SyncError({self.kind.value!r}, {self.message!r})"


class CircuitOpenError(SyncError):
    """Raised without attempting the call while the circuit breaker is open."""

    def __init__(self, retry_after: float):
        self.retry_after = retry_after
        super().__init__(
            ErrorKind.UNKNOWN,
            f"Circuit breaker active - too many consecutive failures, retry in {retry_after:.0f}s"
        )

    @property
    def user_message(self) -> str:
        return self.message
