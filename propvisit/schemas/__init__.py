"""Pydantic record schemas for stored documents."""

from propvisit.schemas.user import PublicUser, UserRecord, AuthResult
from propvisit.schemas.property import PropertyRecord
from propvisit.schemas.visit import VisitRecord, VisitWithProperty

__all__ = [
    "PublicUser", "UserRecord", "AuthResult",
    "PropertyRecord",
    "VisitRecord", "VisitWithProperty",
]
