from __future__ import annotations

from decimal import Decimal

import pytest

from users.backend import BackendClient, BackendError
from users.bridge import (
    GUEST_EMAIL_KEY,
    GUEST_PASSWORD_KEY,
    SESSION_KEY,
    SIGNED_IN,
    SIGNED_OUT,
    TOKEN_REFRESHED,
    AnonymousIdentityProvider,
    AuthBridge,
    NativeAnonymousIdentity,
    StoredGuestIdentity,
    identity_provider_for,
)

from .conftest import FakeBackend


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def storage():
    return {}


@pytest.fixture
def bridge(backend, storage):
    return AuthBridge(BackendClient("https://backend.test", "anon-key", session=backend), storage)


def _signups(backend):
    return [r for r in backend.requests if r[1] == "/auth/v1/signup"]


def test_first_load_provisions_a_guest_and_its_profile(bridge, backend, storage):
    user = bridge.load()

    assert storage[GUEST_EMAIL_KEY].endswith("@guest.topupbd.app")
    assert storage[GUEST_PASSWORD_KEY]
    assert storage[SESSION_KEY]["user_id"] == "uid-1"
    assert len(backend.profiles) == 1
    assert len(user.user_id) == 6 and user.user_id.isalnum()
    assert user.full_name == "Guest"
    assert user.balance == Decimal("0")
    assert bridge.current_user == user


def test_later_loads_reuse_the_stored_session(bridge, backend, storage):
    bridge.load()
    again = AuthBridge(BackendClient("https://backend.test", "anon-key", session=backend), storage)

    user = again.load()

    assert len(_signups(backend)) == 1
    assert len(backend.profiles) == 1
    assert user.user_id == backend.profiles[0]["user_id"]


def test_stored_guest_signs_in_when_its_session_is_gone(bridge, backend, storage):
    bridge.load()
    storage.pop(SESSION_KEY)

    bridge.load()

    assert len(_signups(backend)) == 1
    assert any(r[3].get("grant_type") == "password" for r in backend.requests)


def test_backend_outage_falls_back_to_an_in_memory_guest(bridge, backend):
    backend.down = True

    user = bridge.load()

    assert user.user_id == "GUEST"
    assert user.balance == Decimal("0")


def test_listeners_see_every_session_change_and_can_unsubscribe(bridge):
    events = []
    unsubscribe = bridge.on_auth_state_change(lambda event, session: events.append(event))

    bridge.load()
    bridge.refresh()
    unsubscribe()
    bridge.sign_out()

    assert events == [SIGNED_IN, TOKEN_REFRESHED]
    assert bridge.current_user is None


def test_sign_up_creates_a_named_profile(bridge, backend):
    user = bridge.sign_up("rahim@example.com", "secret123", "Rahim Uddin")

    assert user.full_name == "Rahim Uddin"
    assert user.email == "rahim@example.com"
    assert backend.profiles[0]["balance"] == 0


def test_sign_in_with_wrong_password_raises(bridge, backend):
    bridge.sign_up("rahim@example.com", "secret123")

    with pytest.raises(BackendError) as exc:
        bridge.sign_in("rahim@example.com", "nope")
    assert exc.value.status_code == 400
    assert str(exc.value) == "Invalid login credentials"


def test_sign_out_drops_the_session(bridge, storage):
    events = []
    bridge.on_auth_state_change(lambda event, session: events.append(event))
    bridge.load()

    bridge.sign_out()

    assert SESSION_KEY not in storage
    assert events[-1] == SIGNED_OUT


def test_native_mode_uses_anonymous_sign_in(backend, storage):
    assert isinstance(identity_provider_for("native"), NativeAnonymousIdentity)
    assert isinstance(identity_provider_for("stored"), StoredGuestIdentity)

    bridge = AuthBridge(BackendClient("https://backend.test", "anon-key", session=backend), storage,
                        NativeAnonymousIdentity())
    bridge.load()

    assert GUEST_EMAIL_KEY not in storage
    assert _signups(backend)[0][2] == {"data": {}}


def test_unconfigured_backend_is_a_backend_error(storage):
    client = BackendClient("", "", session=FakeBackend())
    with pytest.raises(BackendError):
        client.get_user("token")


def test_profile_is_looked_up_again_after_a_failed_load(bridge, backend, storage):
    bridge.load()
    backend.profiles_down = True
    assert bridge.load().is_fallback

    backend.profiles_down = False
    again = AuthBridge(BackendClient("https://backend.test", "anon-key", session=backend), storage)
    again.current_user = bridge.current_user
    user = again.load()

    assert not user.is_fallback
    assert user.user_id == backend.profiles[0]["user_id"]


def test_every_load_picks_up_a_credited_balance(bridge, backend):
    bridge.load()
    backend.profiles[0]["balance"] = "250.00"

    assert bridge.load().balance == Decimal("250.00")


def test_identity_provider_interface_is_abstract():
    with pytest.raises(TypeError):
        AnonymousIdentityProvider()
