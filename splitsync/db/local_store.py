"""
Local key/value stores for serialized engine state.
"""
import copy
import json
import logging
from typing import Any, Dict, Optional, Protocol
from sqlalchemy.orm import sessionmaker
from splitsync.models.local_entry import LocalEntry

logger = logging.getLogger(__name__)


class LocalStore(Protocol):
    """Synchronous key/value access to JSON-serializable values."""

    def get(self, key: str) -> Optional[Any]:
        ...

    def set(self, key: str, value: Any) -> None:
        ...

    def delete(self, key: str) -> None:
        ...


class InMemoryLocalStore:
    """Process-local store; values round-trip through JSON like a real store."""

    def __init__(self):
        self._data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[Any]:
        raw = self._data.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = json.dumps(value)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class SqlLocalStore:
    """Store backed by the local_entries table."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def get(self, key: str) -> Optional[Any]:
        db = self._session_factory()
        try:
            entry = db.query(LocalEntry).filter(LocalEntry.key == key).first()
            if entry is None:
                return None
            return copy.deepcopy(entry.value)
        finally:
            db.close()

    def set(self, key: str, value: Any) -> None:
        db = self._session_factory()
        try:
            entry = db.query(LocalEntry).filter(LocalEntry.key == key).first()
            if entry is None:
                db.add(LocalEntry(key=key, value=value))
            else:
                entry.value = value
            db.commit()
        except Exception:
            db.rollback()
            logger.error(f"Failed to save local entry '{key}'", exc_info=True)
            raise
        finally:
            db.close()

    def delete(self, key: str) -> None:
        db = self._session_factory()
        try:
            db.query(LocalEntry).filter(LocalEntry.key == key).delete()
            db.commit()
        finally:
            db.close()
