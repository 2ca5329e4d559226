"""Identifier generation for new records."""

from __future__ import annotations

import threading

from ulid import ULID

_lock = threading.Lock()
_last: ULID | None = None


def new_id() -> str:
    """Return a new ULID string.

    ULIDs combine a millisecond timestamp with 80 random bits. Values issued by
    this process are strictly increasing, so two calls never return the same id
    even within one millisecond.
    """
    global _last
    with _lock:
        candidate = ULID()
        if _last is not None and int(candidate) <= int(_last):
            candidate = ULID.from_int(int(_last) + 1)
        _last = candidate
    return str(candidate)
