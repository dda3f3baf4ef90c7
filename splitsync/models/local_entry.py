"""
Key/value row backing the local store.
"""
from sqlalchemy import Column, String, DateTime, JSON
from splitsync.core.utils import utcnow
from splitsync.db.base import Base


class LocalEntry(Base):
    """One serialized collection (groups, expenses, queue, status map) under a key."""
    __tablename__ = "local_entries"

    key = Column(String(100), primary_key=True)
    value = Column(JSON, nullable=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
