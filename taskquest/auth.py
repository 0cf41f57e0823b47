"""Anonymous sign-in.

There are no credentials: signing in creates an anonymous session row and the
browser session keeps its token in ``st.session_state``. The store refuses to
work until a session exists.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, MutableMapping, Optional

from taskquest.errors import AuthError, StorageError
from taskquest.store.repo import create_session, init_db, revoke_session, touch_session

logger = logging.getLogger(__name__)

SESSION_KEY = "auth_session"


@dataclass(frozen=True)
class AnonymousSession:
    uid: str
    token: str

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "AnonymousSession":
        return cls(uid=str(row["uid"]), token=str(row["token"]))


def sign_in_anonymously(database_url: str) -> AnonymousSession:
    try:
        init_db(database_url)
        session = AnonymousSession.from_row(create_session(database_url))
    except StorageError as exc:
        logger.error("Anonymous sign-in failed: %s", exc)
        raise AuthError(f"Anonymous sign-in failed: {exc}") from exc
    logger.info("Signed in anonymously as %s", session.uid)
    return session


def resume_session(database_url: str, token: str) -> Optional[AnonymousSession]:
    try:
        row = touch_session(database_url, token)
    except StorageError as exc:
        raise AuthError(f"Could not restore session: {exc}") from exc
    return AnonymousSession.from_row(row) if row else None


def ensure_signed_in(session_state: MutableMapping[str, Any], database_url: str) -> AnonymousSession:
    """Reuse the browser session's sign-in, or sign in anonymously."""
    current = session_state.get(SESSION_KEY)
    if isinstance(current, AnonymousSession):
        restored = resume_session(database_url, current.token)
        if restored is not None:
            return restored
        logger.info("Session %s is no longer valid, signing in again", current.uid)

    session = sign_in_anonymously(database_url)
    session_state[SESSION_KEY] = session
    return session


def is_signed_in(session_state: MutableMapping[str, Any]) -> bool:
    return isinstance(session_state.get(SESSION_KEY), AnonymousSession)


def sign_out(session_state: MutableMapping[str, Any], database_url: str) -> None:
    current = session_state.pop(SESSION_KEY, None)
    if not isinstance(current, AnonymousSession):
        return
    try:
        revoke_session(database_url, current.token)
    except StorageError as exc:
        raise AuthError(f"Sign-out failed: {exc}") from exc
