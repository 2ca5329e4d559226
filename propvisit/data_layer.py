"""Public operation surface of the on-device data layer."""

from __future__ import annotations

import logging
from datetime import datetime

from propvisit.config import Settings, get_settings
from propvisit.db.engine import create_store_engine
from propvisit.db.kv_store import KeyValueStore, StoreKeys
from propvisit.errors import PropVisitError
from propvisit.schemas import (
    AuthResult, PropertyRecord, PublicUser, VisitRecord, VisitWithProperty,
)
from propvisit.services.passwords import BcryptHasher, PasswordHasher
from propvisit.services.properties import PropertyRepository
from propvisit.services.session_manager import SessionManager
from propvisit.services.session_state import SessionState
from propvisit.services.visits import VisitRepository

logger = logging.getLogger(__name__)


class DataLayer:
    """Session manager and repositories wired to one store handle."""

    def __init__(self, store: KeyValueStore, keys: StoreKeys, hasher: PasswordHasher):
        self.store = store
        self.keys = keys
        self.sessions = SessionManager(store, keys, hasher)
        self.properties = PropertyRepository(store, keys.properties, self.sessions)
        self.visits = VisitRepository(store, keys.visits, self.sessions, self.properties)

    async def __aenter__(self) -> DataLayer:
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()

    def session_state(self) -> SessionState:
        return SessionState(self.sessions)

    # ── Session ───────────────────────────────────────────

    async def register(
        self, email: str, name: str, password: str, phone: str | None = None,
    ) -> AuthResult:
        return await self.sessions.register(email, name, password, phone=phone)

    async def login(self, email: str, password: str) -> AuthResult:
        return await self.sessions.login(email, password)

    async def logout(self) -> None:
        await self.sessions.logout()

    async def current_user(self) -> PublicUser | None:
        return await self.sessions.current_user()

    # ── Properties ────────────────────────────────────────

    async def list_properties(self) -> list[PropertyRecord]:
        return await self.properties.list_all()

    async def get_property(self, property_id: str) -> PropertyRecord:
        return await self.properties.get(property_id)

    async def create_property(
        self, name: str, address: str, description: str | None = None,
    ) -> PropertyRecord:
        return await self.properties.create(name, address, description)

    # ── Visits ────────────────────────────────────────────

    async def list_visits(self) -> list[VisitRecord]:
        return await self.visits.list_all()

    async def list_visits_by_property(self, property_id: str) -> list[VisitRecord]:
        return await self.visits.list_by_property(property_id)

    async def list_visits_with_properties(self) -> list[VisitWithProperty]:
        return await self.visits.list_with_properties()

    async def create_visit(
        self,
        property_id: str,
        visit_date: datetime,
        needs_parking: bool = False,
        reason: str | None = None,
    ) -> VisitRecord:
        return await self.visits.create(property_id, visit_date, needs_parking, reason)

    # ── Utilities ─────────────────────────────────────────

    async def clear_all_data(self) -> None:
        """Remove every stored user, session, property and visit."""
        await self.store.multi_remove(self.keys.all())
        logger.warning("All stored data cleared")

    async def close(self) -> None:
        await self.store.close()


async def open_data_layer(
    settings: Settings | None = None, hasher: PasswordHasher | None = None,
) -> DataLayer:
    """Open the configured store, creating its table on first use."""
    settings = settings or get_settings()
    store = KeyValueStore(create_store_engine(settings.store.database_url))
    try:
        await store.create()
    except PropVisitError:
        await store.close()
        raise
    return DataLayer(
        store,
        StoreKeys.with_prefix(settings.store.key_prefix),
        hasher or BcryptHasher(settings.security.bcrypt_rounds),
    )
