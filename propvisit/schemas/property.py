from __future__ import annotations
from datetime import datetime
from pydantic import BaseModel, Field, field_validator

from propvisit.schemas._time import as_utc, utcnow


class PropertyRecord(BaseModel):
    id: str
    owner_id: str
    name: str
    address: str
    description: str | None = None
    created_at: datetime = Field(default_factory=utcnow)

    @field_validator("created_at")
    @classmethod
    def _utc(cls, v: datetime) -> datetime:
        return as_utc(v)
