"""
Change notification channel between the engine and presentation layers.
"""
import enum
import logging
from typing import Callable, Dict, List, Optional, Protocol

logger = logging.getLogger(__name__)


class ChangeTopic(str, enum.Enum):
    GROUPS_CHANGED = "groups_changed"
    EXPENSES_CHANGED = "expenses_changed"
    SYNC_STATUS_CHANGED = "sync_status_changed"
    CHANGES_LOST = "changes_lost"  # A queued mutation was dropped before reaching the remote store


Subscriber = Callable[[ChangeTopic, Optional[str]], None]


class ChangeNotifier(Protocol):
    """
    Fire-and-forget, at-least-once announcements. The only payload is an
    optional hint naming the affected entity id.
    """

    def publish(self, topic: ChangeTopic, affected_id: Optional[str] = None) -> None:
        ...

    def subscribe(self, topic: ChangeTopic, callback: Subscriber) -> Callable[[], None]:
        ...


class InProcessNotifier:
    """Delivers notifications synchronously to in-process subscribers."""

    def __init__(self):
        self._subscribers: Dict[ChangeTopic, List[Subscriber]] = {}

    def subscribe(self, topic: ChangeTopic, callback: Subscriber) -> Callable[[], None]:
        """Register callback; returns a function that unsubscribes it."""
        self._subscribers.setdefault(topic, []).append(callback)

        def unsubscribe():
            callbacks = self._subscribers.get(topic, [])
            if callback in callbacks:
                callbacks.remove(callback)

        return unsubscribe

    def publish(self, topic: ChangeTopic, affected_id: Optional[str] = None) -> None:
        for callback in list(self._subscribers.get(topic, [])):
            try:
                callback(topic, affected_id)
            except Exception:
                # A broken subscriber must not stop delivery to the others
                logger.exception(f"Subscriber failed while handling {topic.value}")
