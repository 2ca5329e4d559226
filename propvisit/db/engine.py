"""Async SQLAlchemy engine factory for the on-device store."""

from __future__ import annotations

from pathlib import Path

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from propvisit.errors import StoreUnavailable

_SQLITE_PREFIX = "sqlite+aiosqlite:///"


def create_store_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine, making sure a file-backed SQLite directory exists."""
    if database_url.startswith(_SQLITE_PREFIX):
        db_path = database_url[len(_SQLITE_PREFIX):]
        if db_path and db_path != ":memory:":
            try:
                Path(db_path).parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise StoreUnavailable(f"Could not create store directory for {db_path}") from e
    return create_async_engine(database_url, echo=echo)
