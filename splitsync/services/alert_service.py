"""
Central queue for errors surfaced to the user, shown one at a time.
"""
import logging
from collections import deque
from typing import Any, Callable, Deque, Optional
from pydantic import BaseModel, ConfigDict
from splitsync.core.errors import ErrorKind, SyncError

logger = logging.getLogger(__name__)

# Oldest queued alerts are discarded beyond this
MAX_QUEUED_ALERTS = 20

ALERT_TITLES = {
    ErrorKind.NO_ACCOUNT: "Account Error",
    ErrorKind.NETWORK_UNAVAILABLE: "Network Error",
    ErrorKind.QUOTA_EXCEEDED: "Storage Error",
    ErrorKind.PERMISSION_FAILURE: "Permission Error",
    ErrorKind.NOT_FOUND: "Not Found",
    ErrorKind.INVALID_DATA: "Validation Error",
    ErrorKind.RETRY_LIMIT_EXCEEDED: "Sync Error",
    ErrorKind.UNKNOWN: "Error",
}


class Alert(BaseModel):
    """One queued user-visible error."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    title: str
    message: str
    kind: ErrorKind = ErrorKind.UNKNOWN
    retry: Optional[Callable[[], Any]] = None

    @property
    def can_retry(self) -> bool:
        return self.retry is not None


class ErrorCenter:
    """FIFO of alerts; `current` is the single alert on display."""

    def __init__(self, max_queued: int = MAX_QUEUED_ALERTS):
        self._queue: Deque[Alert] = deque(maxlen=max_queued)
        self.current: Optional[Alert] = None

    @property
    def pending_count(self) -> int:
        return len(self._queue)

    def report(self, error: BaseException, retry: Optional[Callable[[], Any]] = None,
               title: Optional[str] = None) -> Alert:
        """
        Queue an error; it is shown immediately if nothing else is on display.
        An error matching an alert already shown or queued is folded into it,
        keeping the newest retry action.
        """
        if isinstance(error, SyncError):
            kind = error.kind
            message = error.user_message
        else:
            kind = ErrorKind.UNKNOWN
            message = str(error) or "An unexpected error occurred"

        alert = Alert(title=title or ALERT_TITLES[kind], message=message, kind=kind, retry=retry)
        logger.error(f"Error handled: {alert.title}: {alert.message}")
        existing = self._find(alert)
        if existing is not None:
            existing.retry = retry
            return existing

        if len(self._queue) == self._queue.maxlen:
            logger.warning(f"Alert queue full, discarding '{self._queue[0].title}'")
        self._queue.append(alert)
        if self.current is None:
            self._advance()
        return alert

    def _find(self, alert: Alert) -> Optional[Alert]:
        candidates = [self.current, *self._queue] if self.current is not None else list(self._queue)
        for candidate in candidates:
            if (candidate.kind, candidate.title, candidate.message) == (alert.kind, alert.title, alert.message):
                return candidate
        return None

    def _advance(self) -> None:
        self.current = self._queue.popleft() if self._queue else None

    def dismiss(self) -> Optional[Alert]:
        """Close the current alert and show the next one, if any."""
        dismissed = self.current
        self._advance()
        return dismissed

    def retry(self) -> Any:
        """
        Dismiss the current alert and re-invoke its bound action. The action's
        return value is passed through, so coroutine actions can be awaited.
        """
        alert = self.dismiss()
        if alert is None or alert.retry is None:
            return None
        return alert.retry()

    def clear(self) -> None:
        self._queue.clear()
        self.current = None
