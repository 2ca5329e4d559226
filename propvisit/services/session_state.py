"""Boot-time session state for the presentation layer.

HYDRATING -> AUTHENTICATED | ANONYMOUS, then AUTHENTICATED <-> ANONYMOUS.
The coordinator never goes back to HYDRATING.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable

from propvisit.errors import InvalidSessionState
from propvisit.schemas import PublicUser
from propvisit.services.session_manager import SessionManager, token_for

logger = logging.getLogger(__name__)


class SessionStatus(str, Enum):
    HYDRATING = "hydrating"
    AUTHENTICATED = "authenticated"
    ANONYMOUS = "anonymous"


Listener = Callable[["SessionState"], None]


class SessionState:
    def __init__(self, sessions: SessionManager):
        self._sessions = sessions
        self.status = SessionStatus.HYDRATING
        self.user: PublicUser | None = None
        self.token: str | None = None
        self._listeners: list[Listener] = []

    @property
    def loading(self) -> bool:
        return self.status is SessionStatus.HYDRATING

    @property
    def is_authenticated(self) -> bool:
        return self.status is SessionStatus.AUTHENTICATED

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` after every transition; returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def hydrate(self) -> None:
        """Restore the persisted session. Credentials are not re-checked."""
        if self.status is not SessionStatus.HYDRATING:
            raise InvalidSessionState("Session state is already hydrated")
        try:
            user = await self._sessions.current_user()
        except Exception:
            logger.exception("Error loading stored session")
            self._set_anonymous()
            raise
        if user is None:
            self._set_anonymous()
        else:
            self._set_authenticated(user, token_for(user.id))

    async def login(self, email: str, password: str) -> PublicUser:
        self._require_hydrated()
        result = await self._sessions.login(email, password)
        self._set_authenticated(result.user, result.token)
        return result.user

    async def register(
        self, email: str, name: str, password: str, phone: str | None = None,
    ) -> PublicUser:
        self._require_hydrated()
        result = await self._sessions.register(email, name, password, phone=phone)
        self._set_authenticated(result.user, result.token)
        return result.user

    async def logout(self) -> None:
        self._require_hydrated()
        await self._sessions.logout()
        self._set_anonymous()

    def _require_hydrated(self) -> None:
        if self.status is SessionStatus.HYDRATING:
            raise InvalidSessionState("Call hydrate() before changing the session")

    def _set_authenticated(self, user: PublicUser, token: str) -> None:
        self.user = user
        self.token = token
        self.status = SessionStatus.AUTHENTICATED
        self._notify()

    def _set_anonymous(self) -> None:
        self.user = None
        self.token = None
        self.status = SessionStatus.ANONYMOUS
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)
