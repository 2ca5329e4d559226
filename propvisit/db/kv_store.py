"""Durable async key-value store backed by a single SQLite table.

Values are opaque strings (JSON text in practice). Individual calls are
serialized on one I/O lock because SQLite in-memory databases share a single
connection between sessions. Load-modify-persist sequences need more than
that; callers take the per-key write lock from write_lock().
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Iterable

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from propvisit.errors import StoreUnavailable
from propvisit.models import Base, KVEntry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoreKeys:
    """Store key namespace for the four persisted blobs."""

    users: str
    current_user: str
    properties: str
    visits: str

    @classmethod
    def with_prefix(cls, prefix: str) -> StoreKeys:
        return cls(
            users=f"{prefix}users",
            current_user=f"{prefix}current_user",
            properties=f"{prefix}properties",
            visits=f"{prefix}visits",
        )

    def all(self) -> list[str]:
        return [self.users, self.current_user, self.properties, self.visits]


class KeyValueStore:
    """Async get/set/remove of string values keyed by string."""

    def __init__(self, engine: AsyncEngine):
        self._engine = engine
        self._session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
        self._io_lock = asyncio.Lock()
        self._write_locks: dict[str, asyncio.Lock] = {}

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    def write_lock(self, key: str) -> asyncio.Lock:
        """Lock shared by every writer of ``key`` on this store handle."""
        lock = self._write_locks.get(key)
        if lock is None:
            lock = self._write_locks[key] = asyncio.Lock()
        return lock

    async def create(self) -> None:
        """Create the backing table if it does not exist yet."""
        try:
            async with self._engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except SQLAlchemyError as e:
            logger.exception("Failed to initialize key-value store")
            raise StoreUnavailable(f"Could not initialize store: {e}") from e

    async def get(self, key: str) -> str | None:
        try:
            async with self._io_lock, self._session_factory() as db:
                entry = await db.get(KVEntry, key)
                return entry.value if entry else None
        except SQLAlchemyError as e:
            logger.exception("Store read failed for %s", key)
            raise StoreUnavailable(f"Could not read {key}") from e

    async def set(self, key: str, value: str) -> None:
        try:
            async with self._io_lock, self._session_factory() as db:
                entry = await db.get(KVEntry, key)
                if entry is None:
                    db.add(KVEntry(key=key, value=value))
                else:
                    entry.value = value
                await db.commit()
        except SQLAlchemyError as e:
            logger.exception("Store write failed for %s", key)
            raise StoreUnavailable(f"Could not write {key}") from e

    async def remove(self, key: str) -> None:
        await self.multi_remove([key])

    async def multi_remove(self, keys: Iterable[str]) -> None:
        keys = list(keys)
        if not keys:
            return
        try:
            async with self._io_lock, self._session_factory() as db:
                await db.execute(delete(KVEntry).where(KVEntry.key.in_(keys)))
                await db.commit()
        except SQLAlchemyError as e:
            logger.exception("Store delete failed for %s", keys)
            raise StoreUnavailable(f"Could not remove {', '.join(keys)}") from e

    async def close(self) -> None:
        """Dispose the engine and its pooled connections."""
        await self._engine.dispose()
