from __future__ import annotations
from datetime import datetime
from pydantic import BaseModel, Field, field_validator

from propvisit.schemas._time import as_utc, utcnow


class PublicUser(BaseModel):
    """User without its password hash; also the stored session pointer."""

    id: str
    email: str
    name: str
    phone: str | None = None


class UserRecord(PublicUser):
    password_hash: str
    created_at: datetime = Field(default_factory=utcnow)

    @field_validator("created_at")
    @classmethod
    def _utc(cls, v: datetime) -> datetime:
        return as_utc(v)

    def to_public(self) -> PublicUser:
        return PublicUser(id=self.id, email=self.email, name=self.name, phone=self.phone)


class AuthResult(BaseModel):
    user: PublicUser
    token: str
