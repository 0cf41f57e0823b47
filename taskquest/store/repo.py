from __future__ import annotations

import json
import logging
import secrets
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from taskquest.errors import StorageError
from taskquest.store.db import get_engine, get_sessionmaker
from taskquest.store.models import AuthSession, Base, UserDocument


logger = logging.getLogger(__name__)

# Serialises read-modify-write merges of the same document within the process.
_DOC_LOCKS: Dict[str, threading.Lock] = {}
_DOC_LOCKS_GUARD = threading.Lock()


def _document_lock(document_id: str) -> threading.Lock:
    with _DOC_LOCKS_GUARD:
        lock = _DOC_LOCKS.get(document_id)
        if lock is None:
            lock = _DOC_LOCKS[document_id] = threading.Lock()
        return lock


@dataclass(frozen=True)
class DocumentSnapshot:
    """A read of the shared document. ``exists`` is False before the first write."""

    document_id: str
    data: Dict[str, Any] = field(default_factory=dict)
    revision: int = 0
    updated_at: Optional[datetime] = None

    @property
    def exists(self) -> bool:
        return self.revision > 0


def init_db(database_url: str) -> None:
    engine = get_engine(database_url)
    try:
        Base.metadata.create_all(engine)
    except SQLAlchemyError as exc:
        raise StorageError(f"Could not initialise database: {exc}") from exc


def get_document(database_url: str, document_id: str) -> DocumentSnapshot:
    sm = get_sessionmaker(database_url)
    try:
        with sm() as s:
            doc = s.get(UserDocument, document_id)
            if doc is None:
                return DocumentSnapshot(document_id=document_id)
            return DocumentSnapshot(
                document_id=document_id,
                data=doc.data(),
                revision=int(doc.revision),
                updated_at=doc.updated_at,
            )
    except SQLAlchemyError as exc:
        logger.error("Reading document %s failed: %s", document_id, exc)
        raise StorageError(f"Could not read document '{document_id}'") from exc


def document_revision(database_url: str, document_id: str) -> int:
    sm = get_sessionmaker(database_url)
    try:
        with sm() as s:
            rev = s.execute(select(UserDocument.revision).where(UserDocument.id == document_id)).scalar()
            return int(rev or 0)
    except SQLAlchemyError as exc:
        raise StorageError(f"Could not read revision of '{document_id}'") from exc


def set_document(
    database_url: str,
    document_id: str,
    fields: Dict[str, Any],
    *,
    merge: bool = True,
) -> int:
    """Write ``fields`` into the document and return the new revision.

    With ``merge`` only the named top-level fields are replaced; without it the
    whole document is replaced. Every write stamps ``last_updated``.
    """
    now = datetime.now().replace(microsecond=0)
    sm = get_sessionmaker(database_url)
    try:
        with _document_lock(document_id), sm() as s:
            doc = s.get(UserDocument, document_id, with_for_update=True)
            if doc is None:
                doc = UserDocument(id=document_id, data_json="{}", revision=0)
                s.add(doc)

            data = doc.data() if merge else {}
            data.update(fields)
            data["last_updated"] = now.isoformat()

            doc.data_json = json.dumps(data)
            doc.revision = int(doc.revision or 0) + 1
            doc.updated_at = now
            s.commit()
            logger.debug("Wrote %s to %s (revision %s)", sorted(fields), document_id, doc.revision)
            return int(doc.revision)
    except SQLAlchemyError as exc:
        logger.error("Writing document %s failed: %s", document_id, exc)
        raise StorageError(f"Could not write document '{document_id}'") from exc


# ---------------- Anonymous sessions ----------------


def create_session(database_url: str) -> Dict[str, Any]:
    sm = get_sessionmaker(database_url)
    try:
        with sm() as s:
            row = AuthSession(uid=str(uuid.uuid4()), token=secrets.token_hex(32))
            s.add(row)
            s.commit()
            return row.to_dict()
    except SQLAlchemyError as exc:
        raise StorageError("Could not create session") from exc


def touch_session(database_url: str, token: str) -> Optional[Dict[str, Any]]:
    """Return the live session for ``token`` and bump its last-seen stamp."""
    sm = get_sessionmaker(database_url)
    try:
        with sm() as s:
            row = s.execute(select(AuthSession).where(AuthSession.token == token)).scalars().first()
            if row is None or row.revoked:
                return None
            row.last_seen_at = datetime.now().replace(microsecond=0)
            s.commit()
            return row.to_dict()
    except SQLAlchemyError as exc:
        raise StorageError("Could not read session") from exc


def revoke_session(database_url: str, token: str) -> bool:
    sm = get_sessionmaker(database_url)
    try:
        with sm() as s:
            row = s.execute(select(AuthSession).where(AuthSession.token == token)).scalars().first()
            if row is None:
                return False
            row.revoked = True
            s.commit()
            return True
    except SQLAlchemyError as exc:
        raise StorageError("Could not revoke session") from exc
