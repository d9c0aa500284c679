"""Key-value storage entry model."""

from sqlalchemy import Column, String, Text

from src.database import Base
from src.models.mixins import TimestampMixin


class StorageEntry(Base, TimestampMixin):
    """One serialized collection snapshot, addressed by its storage key."""

    __tablename__ = "storage_entries"

    key = Column(String(255), primary_key=True)
    value = Column(Text, nullable=False)  # JSON array of camelCase entities
