"""Owner-scoped access to the properties collection."""

from __future__ import annotations

import logging

from propvisit.db.kv_store import KeyValueStore
from propvisit.errors import InvalidInput, PropertyNotFound
from propvisit.ids import new_id
from propvisit.schemas import PropertyRecord
from propvisit.services.collection import DocumentCollection
from propvisit.services.session_manager import SessionManager

logger = logging.getLogger(__name__)


class PropertyRepository:
    def __init__(self, store: KeyValueStore, key: str, sessions: SessionManager):
        self.collection: DocumentCollection[PropertyRecord] = DocumentCollection(store, key, PropertyRecord)
        self._sessions = sessions

    async def list_all(self) -> list[PropertyRecord]:
        """The current user's properties, in store order."""
        user = await self._sessions.require_user()
        return await self.collection.filter(lambda p: p.owner_id == user.id)

    async def get(self, property_id: str) -> PropertyRecord:
        user = await self._sessions.require_user()
        records = await self.collection.load_all()
        prop = records.get(property_id)
        if prop is None or prop.owner_id != user.id:
            raise PropertyNotFound(f"Property {property_id} not found")
        return prop

    async def create(
        self, name: str, address: str, description: str | None = None,
    ) -> PropertyRecord:
        user = await self._sessions.require_user()
        if not name or not name.strip():
            raise InvalidInput("Property name is required")
        if not address or not address.strip():
            raise InvalidInput("Property address is required")

        prop = PropertyRecord(
            id=new_id(),
            owner_id=user.id,
            name=name,
            address=address,
            description=description or None,
        )
        await self.collection.insert(prop)
        logger.info("Created property %s for user %s", prop.id, user.id)
        return prop
