"""
Typed view over a LocalStore: groups, expenses, pending operations and
sync status, each serialized under its own key.
"""
import logging
from datetime import datetime
from typing import Dict, List, Optional, Type, TypeVar
from pydantic import BaseModel, ValidationError
from splitsync.core.utils import ensure_utc
from splitsync.db.local_store import LocalStore
from splitsync.schemas.expense import Expense
from splitsync.schemas.group import Group
from splitsync.schemas.sync import PendingOperation, SyncableItem

logger = logging.getLogger(__name__)

GROUPS_KEY = "offline_groups"
EXPENSES_KEY = "offline_expenses"
PENDING_OPERATIONS_KEY = "pending_operations"
DROPPED_OPERATIONS_KEY = "dropped_operations"
SYNC_STATUS_KEY = "sync_status_items"
LAST_SYNC_KEY = "last_sync_time"

ALL_KEYS = (
    GROUPS_KEY, EXPENSES_KEY, PENDING_OPERATIONS_KEY,
    DROPPED_OPERATIONS_KEY, SYNC_STATUS_KEY, LAST_SYNC_KEY,
)

M = TypeVar("M", bound=BaseModel)


class LocalCache:
    """Loads and saves engine collections; corrupted records are skipped, not fatal."""

    def __init__(self, store: LocalStore):
        self.store = store

    def _load_list(self, key: str, model: Type[M]) -> List[M]:
        raw = self.store.get(key)
        if raw is None:
            return []
        if not isinstance(raw, list):
            logger.error(f"Failed to load '{key}': expected a list, got {type(raw).__name__}")
            return []

        items = []
        for record in raw:
            try:
                items.append(model.model_validate(record))
            except ValidationError as e:
                logger.warning(f"Skipping corrupted {model.__name__} record in '{key}': {e.error_count()} errors")
        return items

    def _save_list(self, key: str, items: List[BaseModel]) -> None:
        self.store.set(key, [item.model_dump(mode="json") for item in items])

    def load_groups(self) -> List[Group]:
        return self._load_list(GROUPS_KEY, Group)

    def save_groups(self, groups: List[Group]) -> None:
        self._save_list(GROUPS_KEY, groups)

    def load_expenses(self) -> List[Expense]:
        return self._load_list(EXPENSES_KEY, Expense)

    def save_expenses(self, expenses: List[Expense]) -> None:
        self._save_list(EXPENSES_KEY, expenses)

    def load_pending_operations(self) -> List[PendingOperation]:
        return self._load_list(PENDING_OPERATIONS_KEY, PendingOperation)

    def save_pending_operations(self, operations: List[PendingOperation]) -> None:
        self._save_list(PENDING_OPERATIONS_KEY, operations)

    def load_dropped_operations(self) -> List[PendingOperation]:
        return self._load_list(DROPPED_OPERATIONS_KEY, PendingOperation)

    def save_dropped_operations(self, operations: List[PendingOperation]) -> None:
        self._save_list(DROPPED_OPERATIONS_KEY, operations)

    def load_sync_status(self) -> Dict[str, SyncableItem]:
        return {item.id: item for item in self._load_list(SYNC_STATUS_KEY, SyncableItem)}

    def save_sync_status(self, items: Dict[str, SyncableItem]) -> None:
        self._save_list(SYNC_STATUS_KEY, list(items.values()))

    def load_last_sync_time(self) -> Optional[datetime]:
        raw = self.store.get(LAST_SYNC_KEY)
        if not raw:
            return None
        try:
            return ensure_utc(datetime.fromisoformat(raw))
        except (TypeError, ValueError):
            logger.warning(f"Ignoring unreadable last sync time {raw!r}")
            return None

    def save_last_sync_time(self, value: datetime) -> None:
        self.store.set(LAST_SYNC_KEY, value.isoformat())

    def clear(self) -> None:
        for key in ALL_KEYS:
            self.store.delete(key)
