from __future__ import annotations
from datetime import datetime
from pydantic import BaseModel, Field, field_validator

from propvisit.schemas._time import as_utc, utcnow


class VisitRecord(BaseModel):
    id: str
    property_id: str
    owner_id: str
    visit_date: datetime
    needs_parking: bool = False
    reason: str = ""
    created_at: datetime = Field(default_factory=utcnow)

    @field_validator("visit_date", "created_at")
    @classmethod
    def _utc(cls, v: datetime) -> datetime:
        return as_utc(v)


class VisitWithProperty(VisitRecord):
    # None when the property is not among the owner's
    property_name: str | None = None
    property_address: str | None = None
