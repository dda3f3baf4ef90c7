"""
Pydantic schemas for sync bookkeeping: queued operations and per-item status.
"""
from pydantic import BaseModel, Field, field_validator
from typing import Any, Dict, Optional
from datetime import datetime
import enum
from splitsync.core.utils import ensure_utc, new_id, utcnow


class SyncStatus(str, enum.Enum):
    """Per-item sync state."""
    SYNCED = "synced"
    SYNCING = "syncing"
    OFFLINE = "offline"
    CONFLICT = "conflict"
    FAILED = "failed"

    @property
    def description(self) -> str:
        return {
            SyncStatus.SYNCED: "Synced",
            SyncStatus.SYNCING: "Syncing...",
            SyncStatus.OFFLINE: "Offline",
            SyncStatus.CONFLICT: "Conflict",
            SyncStatus.FAILED: "Sync Failed",
        }[self]


class OperationType(str, enum.Enum):
    """Kind of queued mutation."""
    CREATE_GROUP = "createGroup"
    UPDATE_GROUP = "updateGroup"
    DELETE_GROUP = "deleteGroup"
    CREATE_EXPENSE = "createExpense"
    UPDATE_EXPENSE = "updateExpense"
    DELETE_EXPENSE = "deleteExpense"

    @property
    def is_group(self) -> bool:
        return self in (OperationType.CREATE_GROUP, OperationType.UPDATE_GROUP, OperationType.DELETE_GROUP)

    @property
    def is_delete(self) -> bool:
        return self in (OperationType.DELETE_GROUP, OperationType.DELETE_EXPENSE)


class PendingOperation(BaseModel):
    """A local mutation awaiting remote confirmation."""
    id: str = Field(default_factory=new_id)
    type: OperationType
    entity_id: str
    timestamp: datetime = Field(default_factory=utcnow)
    payload: Dict[str, Any] = {}  # JSON-serialized Group or Expense
    retry_count: int = 0

    @field_validator("timestamp")
    @classmethod
    def utc_timestamp(cls, v: datetime) -> datetime:
        return ensure_utc(v)


class SyncableItem(BaseModel):
    """Sync metadata for one entity, keyed by entity id."""
    id: str
    sync_status: SyncStatus = SyncStatus.OFFLINE
    last_modified: datetime = Field(default_factory=utcnow)
    is_local_only: bool = False

    @field_validator("last_modified")
    @classmethod
    def utc_last_modified(cls, v: datetime) -> datetime:
        return ensure_utc(v)


class SyncStatusResponse(BaseModel):
    """Schema for the global sync indicator."""
    status: SyncStatus
    is_online: bool
    pending_operations: int
    last_sync_time: Optional[datetime] = None

    @field_validator("last_sync_time")
    @classmethod
    def utc_last_sync_time(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v) if v is not None else None
