"""Owner-scoped access to the visits collection.

Listings are always sorted by visit_date, newest first. Python's sort is
stable, so visits sharing a visit_date keep the store's insertion order.

A visit may only be created against a property the caller owns. Listing by
property stays lenient: an unknown property id simply matches nothing.
"""

from __future__ import annotations

import logging
from datetime import datetime

from propvisit.db.kv_store import KeyValueStore
from propvisit.errors import InvalidInput
from propvisit.ids import new_id
from propvisit.schemas import VisitRecord, VisitWithProperty
from propvisit.services.collection import DocumentCollection
from propvisit.services.properties import PropertyRepository
from propvisit.services.session_manager import SessionManager

logger = logging.getLogger(__name__)


def newest_first(visits: list[VisitRecord]) -> list[VisitRecord]:
    return sorted(visits, key=lambda v: v.visit_date, reverse=True)


class VisitRepository:
    def __init__(
        self,
        store: KeyValueStore,
        key: str,
        sessions: SessionManager,
        properties: PropertyRepository,
    ):
        self.collection: DocumentCollection[VisitRecord] = DocumentCollection(store, key, VisitRecord)
        self._sessions = sessions
        self._properties = properties

    async def list_all(self) -> list[VisitRecord]:
        user = await self._sessions.require_user()
        visits = await self.collection.filter(lambda v: v.owner_id == user.id)
        return newest_first(visits)

    async def list_by_property(self, property_id: str) -> list[VisitRecord]:
        user = await self._sessions.require_user()
        visits = await self.collection.filter(
            lambda v: v.owner_id == user.id and v.property_id == property_id
        )
        return newest_first(visits)

    async def list_with_properties(self) -> list[VisitWithProperty]:
        """All of the user's visits, each annotated with its property's name and address."""
        visits = await self.list_all()
        props = {p.id: p for p in await self._properties.list_all()}
        rows = []
        for v in visits:
            prop = props.get(v.property_id)
            rows.append(VisitWithProperty(
                **v.model_dump(),
                property_name=prop.name if prop else None,
                property_address=prop.address if prop else None,
            ))
        return rows

    async def create(
        self,
        property_id: str,
        visit_date: datetime,
        needs_parking: bool = False,
        reason: str | None = None,
    ) -> VisitRecord:
        user = await self._sessions.require_user()
        if not property_id:
            raise InvalidInput("property_id is required")
        if visit_date is None:
            raise InvalidInput("visit_date is required")
        if not isinstance(visit_date, datetime):
            raise InvalidInput("visit_date must be a datetime")
        # Raises PropertyNotFound for unknown or foreign properties
        await self._properties.get(property_id)

        visit = VisitRecord(
            id=new_id(),
            property_id=property_id,
            owner_id=user.id,
            visit_date=visit_date,
            needs_parking=bool(needs_parking),
            reason=reason or "",
        )
        await self.collection.insert(visit)
        logger.info("Created visit %s on property %s", visit.id, property_id)
        return visit
