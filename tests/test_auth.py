"""
Tests for utils/auth.py

Covers: name_from_email, is_company_email, AuthSession lifecycle against a
fake Supabase auth client, AuthManager.fetch_or_create_profile.
"""

from types import SimpleNamespace

import pytest
from sqlalchemy import text

from utils.auth import AuthManager, AuthSession, is_company_email, name_from_email


# ── Fakes ─────────────────────────────────────────────────────────────


class _FakeSubscription:
    def __init__(self):
        self.unsubscribe_calls = 0

    def unsubscribe(self):
        self.unsubscribe_calls += 1


class _FakeAuth:
    """Minimal client.auth: get_session + on_auth_state_change."""

    def __init__(self, session=None, error=None):
        self._session = session
        self._error = error
        self.callbacks = []
        self.subscription = _FakeSubscription()

    def get_session(self):
        if self._error:
            raise self._error
        return self._session

    def on_auth_state_change(self, callback):
        self.callbacks.append(callback)
        return self.subscription

    def emit(self, event, session):
        for callback in list(self.callbacks):
            callback(event, session)


class _RecordingLock:
    """Lock stand-in that records last_event on acquire and release."""

    def __init__(self, owner):
        self.owner = owner
        self.seen = []

    def __enter__(self):
        self.seen.append(("enter", self.owner.last_event))
        return self

    def __exit__(self, *exc):
        self.seen.append(("exit", self.owner.last_event))
        return False


def _session(user_id="u-1", email="ana.souza@investsmart.com.br"):
    return SimpleNamespace(user=SimpleNamespace(id=user_id, email=email), access_token="token")


# ── Email helpers ─────────────────────────────────────────────────────


@pytest.mark.parametrize("email, expected", [
    ("rodrigo.vignoli@investsmart.com.br", "Rodrigo Vignoli"),
    ("ANA@investsmart.com.br", "Ana"),
    ("no-at-sign", "no-at-sign"),
    ("", ""),
])
def test_name_from_email(email, expected):
    assert name_from_email(email) == expected


def test_is_company_email():
    assert is_company_email(" Ana@InvestSmart.com.br ", "investsmart.com.br")
    assert not is_company_email("ana@investsmart.com.br.evil.io", "investsmart.com.br")
    assert not is_company_email("", "investsmart.com.br")


def test_is_company_email_uses_configured_domain():
    assert is_company_email("ana@investsmart.com.br")


# ── AuthSession ───────────────────────────────────────────────────────


def test_start_reads_current_session_and_subscribes():
    auth = _FakeAuth(session=_session())

    state = AuthSession(auth).start()

    assert state.is_authenticated
    assert state.user_id == "u-1"
    assert state.loading is False
    assert state.is_subscribed
    assert len(auth.callbacks) == 1


def test_start_is_idempotent():
    auth = _FakeAuth(session=_session())
    state = AuthSession(auth)

    state.start()
    state.start()

    assert len(auth.callbacks) == 1


def test_events_replace_state_and_notify():
    auth = _FakeAuth(session=None)
    seen = []
    state = AuthSession(auth, on_change=lambda event, s: seen.append((event, s.user_id))).start()

    assert not state.is_authenticated

    auth.emit(SimpleNamespace(value="SIGNED_IN"), _session("u-2", "bruno@investsmart.com.br"))
    assert state.email == "bruno@investsmart.com.br"
    assert state.last_event == "SIGNED_IN"

    auth.emit("SIGNED_OUT", None)
    assert not state.is_authenticated
    assert seen == [("SIGNED_IN", "u-2"), ("SIGNED_OUT", None)]


def test_close_unsubscribes_once():
    auth = _FakeAuth(session=_session())
    state = AuthSession(auth).start()

    state.close()
    state.close()

    assert auth.subscription.unsubscribe_calls == 1
    assert not state.is_subscribed


def test_context_manager_releases_subscription():
    auth = _FakeAuth(session=_session())

    with AuthSession(auth) as state:
        assert state.is_subscribed

    assert auth.subscription.unsubscribe_calls == 1


def test_session_read_failure_is_recorded():
    auth = _FakeAuth(error=RuntimeError("network down"))

    state = AuthSession(auth).start()

    assert not state.is_authenticated
    assert state.error == "network down"
    assert state.loading is False
    assert state.is_subscribed


def test_event_name_is_recorded_while_holding_the_lock():
    auth = _FakeAuth(session=None)
    state = AuthSession(auth).start()
    state._lock = _RecordingLock(state)

    auth.emit("TOKEN_REFRESHED", _session())

    assert state._lock.seen == [("enter", None), ("exit", "TOKEN_REFRESHED")]
    assert state.last_event == "TOKEN_REFRESHED"


# ── Profiles ──────────────────────────────────────────────────────────


def test_fetch_or_create_profile_creates_operator(engine):
    profile = AuthManager().fetch_or_create_profile("u-9", "carla.dias@investsmart.com.br")

    assert profile['name'] == "Carla Dias"
    assert profile['role'] == "user"

    with engine.connect() as conn:
        stored = conn.execute(text("SELECT name, role FROM profiles WHERE id = 'u-9'")).one()
    assert tuple(stored) == ("Carla Dias", "user")


def test_fetch_or_create_profile_returns_existing(engine, team):
    profile = AuthManager().fetch_or_create_profile(team['admin'], "boss@investsmart.com.br")

    assert profile['role'] == "admin"
    assert profile['name'] == "Boss"


def test_created_profile_row_has_only_profile_columns(engine):
    AuthManager().fetch_or_create_profile("u-10", "davi.costa@investsmart.com.br")

    with engine.connect() as conn:
        row = conn.execute(text("SELECT * FROM profiles WHERE id = 'u-10'")).mappings().one()

    assert set(row) == {'id', 'email', 'name', 'role', 'created_at', 'updated_at'}
    assert row['email'] == "davi.costa@investsmart.com.br"
    assert row['created_at'] is not None
