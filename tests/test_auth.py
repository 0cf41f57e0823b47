import pytest

from taskquest.auth import (
    SESSION_KEY,
    AnonymousSession,
    ensure_signed_in,
    is_signed_in,
    sign_in_anonymously,
    sign_out,
)
from taskquest.errors import AuthError
from taskquest.store.repo import revoke_session


def test_sign_in_creates_distinct_sessions(db_url):
    a = sign_in_anonymously(db_url)
    b = sign_in_anonymously(db_url)
    assert isinstance(a, AnonymousSession)
    assert a.uid != b.uid
    assert a.token != b.token


def test_ensure_signed_in_reuses_the_browser_session(db_url):
    state = {}
    first = ensure_signed_in(state, db_url)
    assert is_signed_in(state)
    assert state[SESSION_KEY] == first
    assert ensure_signed_in(state, db_url) == first


def test_revoked_session_signs_in_again(db_url):
    state = {}
    first = ensure_signed_in(state, db_url)
    revoke_session(db_url, first.token)
    second = ensure_signed_in(state, db_url)
    assert second.uid != first.uid
    assert state[SESSION_KEY] == second


def test_sign_out(db_url):
    state = {}
    session = ensure_signed_in(state, db_url)
    sign_out(state, db_url)
    assert not is_signed_in(state)
    sign_out(state, db_url)
    assert ensure_signed_in(state, db_url).uid != session.uid


def test_unreachable_database_raises_auth_error(tmp_path):
    bad = f"sqlite:///{(tmp_path / 'no' / 'such' / 'dir.db').as_posix()}"
    with pytest.raises(AuthError):
        sign_in_anonymously(bad)
