"""SQLAlchemy ORM models for the on-device store."""

from propvisit.models.base import Base
from propvisit.models.kv_entry import KVEntry

__all__ = ["Base", "KVEntry"]
