import pytest

from propvisit.errors import InvalidCredentials, InvalidSessionState, StoreUnavailable
from propvisit.services.session_state import SessionState, SessionStatus


async def test_starts_hydrating(layer):
    state = layer.session_state()
    assert state.status is SessionStatus.HYDRATING
    assert state.loading
    assert not state.is_authenticated


async def test_hydrate_without_stored_user_is_anonymous(layer):
    state = layer.session_state()
    await state.hydrate()
    assert state.status is SessionStatus.ANONYMOUS
    assert not state.loading
    assert state.user is None


async def test_hydrate_restores_persisted_user(layer):
    result = await layer.register("a@x.com", "A", "pw")
    state = layer.session_state()
    await state.hydrate()
    assert state.is_authenticated
    assert state.user == result.user
    assert state.token == result.token


async def test_hydrate_only_once(layer):
    state = layer.session_state()
    await state.hydrate()
    with pytest.raises(InvalidSessionState):
        await state.hydrate()


async def test_hydrate_failure_leaves_anonymous(layer, monkeypatch):
    async def broken():
        raise StoreUnavailable()

    monkeypatch.setattr(layer.sessions, "current_user", broken)
    state = layer.session_state()
    with pytest.raises(StoreUnavailable):
        await state.hydrate()
    assert state.status is SessionStatus.ANONYMOUS


async def test_register_login_logout_transitions(layer):
    state = layer.session_state()
    await state.hydrate()

    user = await state.register("a@x.com", "A", "pw", phone="555")
    assert state.is_authenticated
    assert state.user == user
    assert state.token == f"local_token_{user.id}"

    await state.logout()
    assert state.status is SessionStatus.ANONYMOUS
    assert state.token is None

    await state.login("a@x.com", "pw")
    assert state.is_authenticated
    assert (await layer.current_user()).id == user.id


async def test_failed_login_keeps_state(layer):
    await layer.register("a@x.com", "A", "pw")
    await layer.logout()
    state = layer.session_state()
    await state.hydrate()
    with pytest.raises(InvalidCredentials):
        await state.login("a@x.com", "wrong")
    assert state.status is SessionStatus.ANONYMOUS


async def test_double_logout_stays_anonymous(layer):
    state = layer.session_state()
    await state.hydrate()
    await state.register("a@x.com", "A", "pw")
    await state.logout()
    await state.logout()
    assert state.status is SessionStatus.ANONYMOUS
    assert await layer.current_user() is None


async def test_listeners_are_notified(layer):
    state = SessionState(layer.sessions)
    seen = []
    unsubscribe = state.subscribe(lambda s: seen.append(s.status))
    await state.hydrate()
    await state.register("a@x.com", "A", "pw")
    unsubscribe()
    await state.logout()
    assert seen == [SessionStatus.ANONYMOUS, SessionStatus.AUTHENTICATED]


async def test_transitions_before_hydrate_are_rejected(layer):
    await layer.register("a@x.com", "A", "pw")
    await layer.logout()
    state = layer.session_state()
    with pytest.raises(InvalidSessionState):
        await state.login("a@x.com", "pw")
    with pytest.raises(InvalidSessionState):
        await state.register("b@x.com", "B", "pw")
    with pytest.raises(InvalidSessionState):
        await state.logout()
    assert state.status is SessionStatus.HYDRATING
    assert await layer.current_user() is None

    await state.hydrate()
    assert state.status is SessionStatus.ANONYMOUS
