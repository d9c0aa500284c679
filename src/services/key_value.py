"""Durable key-value storage backends for collection snapshots."""

import logging
from abc import ABC, abstractmethod

import redis
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.exceptions import StorageUnavailableError
from src.models.storage_entry import StorageEntry

logger = logging.getLogger(__name__)


class KeyValueStorage(ABC):
    """String values addressed by string keys."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the stored value, or None if the key was never written."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Durably store the value before returning."""


class InMemoryKeyValueStorage(KeyValueStorage):
    """Process-local storage for tests and scratch sessions."""

    def __init__(self, initial: dict[str, str] | None = None):
        self.data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value


class SqlKeyValueStorage(KeyValueStorage):
    """One row per key in the storage_entries table; every set commits."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, key: str) -> str | None:
        try:
            entry = self.db.query(StorageEntry).filter(StorageEntry.key == key).first()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageUnavailableError(key, str(e)) from e
        return entry.value if entry else None

    def set(self, key: str, value: str) -> None:
        try:
            entry = self.db.query(StorageEntry).filter(StorageEntry.key == key).first()
            if entry:
                entry.value = value
            else:
                self.db.add(StorageEntry(key=key, value=value))
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageUnavailableError(key, str(e)) from e
        logger.debug(f"Wrote {len(value)} bytes to '{key}'")


class RedisKeyValueStorage(KeyValueStorage):
    """Plain GET/SET on a Redis server."""

    def __init__(self, client: redis.Redis):
        self.client = client

    def get(self, key: str) -> str | None:
        try:
            value = self.client.get(key)
        except redis.RedisError as e:
            raise StorageUnavailableError(key, str(e)) from e
        if value is None:
            return None
        return value.decode("utf-8") if isinstance(value, bytes) else value

    def set(self, key: str, value: str) -> None:
        try:
            self.client.set(key, value)
        except redis.RedisError as e:
            raise StorageUnavailableError(key, str(e)) from e
        logger.debug(f"Wrote {len(value)} bytes to '{key}'")


# Redis client shared by all requests
_redis_client: redis.Redis | None = None


def get_redis_client(redis_url: str) -> redis.Redis:
    """Get the shared Redis client."""
    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(redis_url)
    return _redis_client
