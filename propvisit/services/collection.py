"""Document collections: one store key holding a mapping of id -> record.

Every mutation rewrites the whole blob. Writers on the same key are
serialized through the store's per-key write lock, so concurrent inserts
never lose each other's records.
"""

from __future__ import annotations

import json
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Generic, TypeVar

from pydantic import BaseModel, ValidationError

from propvisit.db.kv_store import KeyValueStore
from propvisit.errors import CorruptStore

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)


class DocumentCollection(Generic[RecordT]):
    def __init__(self, store: KeyValueStore, key: str, model: type[RecordT]):
        self._store = store
        self.key = key
        self._model = model

    async def load_all(self) -> dict[str, RecordT]:
        """Read the whole collection; a missing key is an empty collection."""
        raw = await self._store.get(self.key)
        if raw is None:
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error("Collection %s holds invalid JSON: %s", self.key, e)
            raise CorruptStore(f"{self.key} is not valid JSON") from e
        if not isinstance(data, dict):
            raise CorruptStore(f"{self.key} must hold a mapping of id to record")
        try:
            return {rid: self._model.model_validate(item) for rid, item in data.items()}
        except ValidationError as e:
            logger.error("Collection %s holds malformed records: %s", self.key, e)
            raise CorruptStore(f"{self.key} contains malformed records") from e

    async def persist(self, records: dict[str, RecordT]) -> None:
        """Rewrite the whole collection blob."""
        payload = {rid: r.model_dump(mode="json") for rid, r in records.items()}
        await self._store.set(self.key, json.dumps(payload, ensure_ascii=False))

    async def filter(self, predicate: Callable[[RecordT], bool]) -> list[RecordT]:
        """Matching records in store iteration order."""
        records = await self.load_all()
        return [r for r in records.values() if predicate(r)]

    @asynccontextmanager
    async def mutate(self) -> AsyncIterator[dict[str, RecordT]]:
        """Yield the loaded mapping under the write lock; persist on clean exit.

        An exception raised inside the block discards the changes.
        """
        async with self._store.write_lock(self.key):
            records = await self.load_all()
            yield records
            await self.persist(records)

    async def insert(self, record: RecordT) -> RecordT:
        async with self.mutate() as records:
            records[record.id] = record
        return record
