import hashlib

import pytest
import pytest_asyncio

from propvisit.data_layer import DataLayer
from propvisit.db.engine import create_store_engine
from propvisit.db.kv_store import KeyValueStore, StoreKeys


class Sha256Hasher:
    """Unsalted, fast hash so tests don't pay for bcrypt."""

    def hash(self, password: str) -> str:
        return hashlib.sha256(password.encode("utf-8")).hexdigest()

    def verify(self, password: str, password_hash: str) -> bool:
        return self.hash(password) == password_hash


@pytest.fixture
def hasher():
    return Sha256Hasher()


@pytest.fixture
def keys():
    return StoreKeys.with_prefix("@test:")


@pytest_asyncio.fixture
async def store():
    kv = KeyValueStore(create_store_engine("sqlite+aiosqlite:///:memory:"))
    await kv.create()
    yield kv
    await kv.close()


@pytest_asyncio.fixture
async def layer(store, keys, hasher):
    return DataLayer(store, keys, hasher)
