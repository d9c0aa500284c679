"""SQLAlchemy models."""

from src.models.storage_entry import StorageEntry

__all__ = [
    "StorageEntry",
]
