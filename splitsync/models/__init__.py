"""Models package - Import all models for SQLAlchemy registration."""
from splitsync.models.local_entry import LocalEntry

__all__ = [
    "LocalEntry",
]
