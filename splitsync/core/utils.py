"""
Utility functions for the engine.
"""
from datetime import datetime, timezone
import uuid


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def new_id() -> str:
    """Opaque identifier for groups, expenses, participants and operations."""
    return str(uuid.uuid4()).upper()


def normalize_name(name: str) -> str:
    """Normalize a display name for comparison."""
    return (name or "").strip().lower()


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
