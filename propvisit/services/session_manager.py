"""Accounts and the persisted "current user" pointer.

register/login write the users collection and the session pointer; nothing
else is touched here. The pointer stores the public projection only.
"""

from __future__ import annotations

import json
import logging

from pydantic import ValidationError

from propvisit.db.kv_store import KeyValueStore, StoreKeys
from propvisit.errors import (
    CorruptStore, DuplicateEmail, InvalidCredentials, InvalidInput,
    NotAuthenticated, UserNotFound,
)
from propvisit.ids import new_id
from propvisit.schemas import AuthResult, PublicUser, UserRecord
from propvisit.services.collection import DocumentCollection
from propvisit.services.passwords import PasswordHasher

logger = logging.getLogger(__name__)


def token_for(user_id: str) -> str:
    """Local session marker derived from the user id (not a security token)."""
    return f"local_token_{user_id}"


class SessionManager:
    def __init__(self, store: KeyValueStore, keys: StoreKeys, hasher: PasswordHasher):
        self._store = store
        self._pointer_key = keys.current_user
        self._hasher = hasher
        self.users: DocumentCollection[UserRecord] = DocumentCollection(store, keys.users, UserRecord)

    async def register(
        self, email: str, name: str, password: str, phone: str | None = None,
    ) -> AuthResult:
        """Create a user and log them in.

        Raises DuplicateEmail when the exact email is already registered; the
        users collection is left untouched in that case.
        """
        for field_name, value in (("email", email), ("name", name), ("password", password)):
            if not value or not value.strip():
                raise InvalidInput(f"{field_name} is required")

        async with self.users.mutate() as users:
            if any(u.email == email for u in users.values()):
                logger.info("Registration rejected: duplicate email")
                raise DuplicateEmail()
            user = UserRecord(
                id=new_id(),
                email=email,
                name=name,
                phone=phone or None,
                password_hash=self._hasher.hash(password),
            )
            users[user.id] = user

        public = user.to_public()
        await self._set_pointer(public)
        logger.info("Registered user %s", user.id)
        return AuthResult(user=public, token=token_for(user.id))

    async def login(self, email: str, password: str) -> AuthResult:
        users = await self.users.filter(lambda u: u.email == email)
        if not users:
            raise UserNotFound()
        user = users[0]
        if not self._hasher.verify(password, user.password_hash):
            logger.warning("Invalid credentials for user %s", user.id)
            raise InvalidCredentials()

        public = user.to_public()
        await self._set_pointer(public)
        logger.info("User %s logged in", user.id)
        return AuthResult(user=public, token=token_for(user.id))

    async def logout(self) -> None:
        """Clear the session pointer. Safe to call when already logged out."""
        await self._store.remove(self._pointer_key)

    async def current_user(self) -> PublicUser | None:
        raw = await self._store.get(self._pointer_key)
        if raw is None:
            return None
        try:
            return PublicUser.model_validate(json.loads(raw))
        except (json.JSONDecodeError, ValidationError) as e:
            raise CorruptStore(f"{self._pointer_key} is malformed") from e

    async def require_user(self) -> PublicUser:
        user = await self.current_user()
        if user is None:
            raise NotAuthenticated()
        return user

    async def _set_pointer(self, user: PublicUser) -> None:
        await self._store.set(self._pointer_key, user.model_dump_json())
