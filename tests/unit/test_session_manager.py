import json

import pytest

from propvisit.errors import (
    CorruptStore, DuplicateEmail, InvalidCredentials, InvalidInput,
    NotAuthenticated, UserNotFound,
)
from propvisit.services.passwords import BcryptHasher
from propvisit.services.session_manager import SessionManager, token_for


@pytest.fixture
def sessions(store, keys, hasher):
    return SessionManager(store, keys, hasher)


async def test_register_returns_projection_and_token(sessions):
    result = await sessions.register("a@x.com", "A", "pw")
    assert result.user.email == "a@x.com"
    assert result.user.name == "A"
    assert result.user.phone is None
    assert result.token == f"local_token_{result.user.id}"
    assert "password_hash" not in result.user.model_dump()


async def test_register_sets_current_user_without_secret(sessions, store, keys):
    await sessions.register("a@x.com", "A", "pw")
    current = await sessions.current_user()
    assert current.email == "a@x.com"
    assert "password_hash" not in json.loads(await store.get(keys.current_user))


async def test_register_stores_hash_not_password(sessions, store, keys, hasher):
    await sessions.register("a@x.com", "A", "pw", phone="555-0100")
    users = json.loads(await store.get(keys.users))
    (record,) = users.values()
    assert record["password_hash"] == hasher.hash("pw")
    assert record["phone"] == "555-0100"
    assert "created_at" in record


async def test_duplicate_email_is_rejected_and_users_unchanged(sessions):
    await sessions.register("a@x.com", "A", "pw")
    with pytest.raises(DuplicateEmail):
        await sessions.register("a@x.com", "Other", "pw2")
    assert len(await sessions.users.load_all()) == 1


async def test_email_comparison_is_case_sensitive(sessions):
    await sessions.register("a@x.com", "A", "pw")
    await sessions.register("A@x.com", "Upper", "pw")
    assert len(await sessions.users.load_all()) == 2
    with pytest.raises(UserNotFound):
        await sessions.login("A@X.COM", "pw")


@pytest.mark.parametrize("email,name,password", [
    ("", "A", "pw"),
    ("a@x.com", "  ", "pw"),
    ("a@x.com", "A", ""),
])
async def test_register_requires_fields(sessions, email, name, password):
    with pytest.raises(InvalidInput):
        await sessions.register(email, name, password)
    assert await sessions.users.load_all() == {}


async def test_login_success_sets_pointer(sessions):
    registered = await sessions.register("a@x.com", "A", "pw")
    await sessions.logout()
    result = await sessions.login("a@x.com", "pw")
    assert result.user == registered.user
    assert result.token == registered.token
    assert (await sessions.current_user()).id == registered.user.id


async def test_login_wrong_password(sessions):
    await sessions.register("a@x.com", "A", "pw")
    await sessions.logout()
    with pytest.raises(InvalidCredentials):
        await sessions.login("a@x.com", "nope")
    assert await sessions.current_user() is None


async def test_login_unknown_email(sessions):
    with pytest.raises(UserNotFound):
        await sessions.login("ghost@x.com", "pw")


async def test_logout_is_idempotent(sessions):
    await sessions.register("a@x.com", "A", "pw")
    await sessions.logout()
    await sessions.logout()
    assert await sessions.current_user() is None


async def test_require_user_without_session(sessions):
    with pytest.raises(NotAuthenticated):
        await sessions.require_user()


async def test_corrupt_pointer_raises(sessions, store, keys):
    await store.set(keys.current_user, "not json")
    with pytest.raises(CorruptStore):
        await sessions.current_user()


async def test_hasher_is_injectable(store, keys):
    sessions = SessionManager(store, keys, BcryptHasher(rounds=4))
    await sessions.register("b@x.com", "B", "pw")
    await sessions.logout()
    assert (await sessions.login("b@x.com", "pw")).user.email == "b@x.com"
    with pytest.raises(InvalidCredentials):
        await sessions.login("b@x.com", "PW")


def test_token_for():
    assert token_for("abc") == "local_token_abc"


async def test_register_rejects_password_too_long_for_bcrypt(store, keys):
    sessions = SessionManager(store, keys, BcryptHasher(rounds=4))
    with pytest.raises(InvalidInput):
        await sessions.register("a@x.com", "A", "x" * 100)
    assert await sessions.users.load_all() == {}
    assert await sessions.current_user() is None

    # 72 bytes is still accepted; multi-byte characters count by encoded size
    await sessions.register("a@x.com", "A", "x" * 72)
    with pytest.raises(InvalidInput):
        await sessions.register("b@x.com", "B", "ñ" * 37)
