"""Typed access to the shared user document.

``UserStore`` maps the document's JSON fields to the value types in
``taskquest.models``. Every write merges only the fields it names, so saving
tasks never clobbers XP or theme settings written from another tab.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence

from taskquest.auth import AnonymousSession
from taskquest.errors import InvalidDocumentError, NotSignedInError
from taskquest.models import Quote, Task, ThemeSettings, XPData, new_id
from taskquest.store.repo import DocumentSnapshot, document_revision, get_document, init_db, set_document
from taskquest.store.watcher import DocumentWatcher
from taskquest.xp import level_from_xp

logger = logging.getLogger(__name__)

TASKS = "tasks"
COMPLETED = "completed"
XP = "xp"
LEVEL = "level"
PINNED_QUOTES = "pinned_quotes"
THEME_ID = "theme_id"
IS_DARK_MODE = "is_dark_mode"

# Older exports used camelCase field names.
_ALIASES = {
    "pinnedQuotes": PINNED_QUOTES,
    "themeId": THEME_ID,
    "isDarkMode": IS_DARK_MODE,
}

Unsubscribe = Callable[[], None]


def _tasks(data: Dict[str, Any], key: str) -> List[Task]:
    raw = data.get(key) or []
    return [Task.from_dict(item) for item in raw if isinstance(item, dict)]


def _quotes(data: Dict[str, Any]) -> List[Quote]:
    raw = data.get(PINNED_QUOTES) or []
    return [Quote.from_dict(item) for item in raw if isinstance(item, dict)]


def _xp(data: Dict[str, Any]) -> XPData:
    # The level always follows from XP; a stored level is informational only.
    xp = max(0, int(data.get(XP) or 0))
    return XPData(xp=xp, level=level_from_xp(xp).level)


def _theme(data: Dict[str, Any]) -> ThemeSettings:
    return ThemeSettings(
        theme_id=str(data.get(THEME_ID) or "default"),
        is_dark_mode=bool(data.get(IS_DARK_MODE) or False),
    )


class UserStore:
    def __init__(
        self,
        database_url: str,
        document_id: str,
        session: Optional[AnonymousSession],
        *,
        sync_interval_seconds: float = 5.0,
        watcher: Optional[DocumentWatcher] = None,
    ) -> None:
        self.database_url = database_url
        self.document_id = document_id
        self.session = session
        self.watcher = watcher or DocumentWatcher(
            database_url, document_id, interval_seconds=sync_interval_seconds
        )
        init_db(database_url)

    # ---------------- Internals ----------------

    def _require_session(self) -> None:
        if self.session is None:
            raise NotSignedInError("Sign in before reading or writing data")

    def _read(self) -> Dict[str, Any]:
        self._require_session()
        return get_document(self.database_url, self.document_id).data

    def _write(self, fields: Dict[str, Any]) -> int:
        self._require_session()
        return set_document(self.database_url, self.document_id, fields, merge=True)

    def snapshot(self) -> DocumentSnapshot:
        self._require_session()
        return get_document(self.database_url, self.document_id)

    def revision(self) -> int:
        self._require_session()
        return document_revision(self.database_url, self.document_id)

    # ---------------- Tasks ----------------

    def get_tasks(self) -> List[Task]:
        return _tasks(self._read(), TASKS)

    def save_tasks(self, tasks: Sequence[Task]) -> None:
        self._write({TASKS: [t.to_dict() for t in tasks]})
        logger.info("Saved %d active tasks", len(tasks))

    def get_completed_tasks(self) -> List[Task]:
        return _tasks(self._read(), COMPLETED)

    def save_completed_tasks(self, completed: Sequence[Task]) -> None:
        self._write({COMPLETED: [t.to_dict() for t in completed]})
        logger.info("Saved %d completed tasks", len(completed))

    def save_all(self, tasks: Sequence[Task], completed: Sequence[Task]) -> None:
        self._write({
            TASKS: [t.to_dict() for t in tasks],
            COMPLETED: [t.to_dict() for t in completed],
        })

    # ---------------- XP ----------------

    def get_xp_data(self) -> XPData:
        return _xp(self._read())

    def save_xp_data(self, xp: int, level: int) -> None:
        self._write({XP: int(xp), LEVEL: int(level)})

    # ---------------- Pinned quotes ----------------

    def get_pinned_quotes(self) -> List[Quote]:
        return _quotes(self._read())

    def save_pinned_quotes(self, quotes: Sequence[Quote]) -> None:
        self._write({PINNED_QUOTES: [q.to_dict() for q in quotes]})

    def is_quote_pinned(self, text: str, author: str) -> bool:
        return any(q.same_as(text, author) for q in self.get_pinned_quotes())

    def add_pinned_quote(self, text: str, author: str) -> Optional[Quote]:
        """Pin a quote; returns None when the same text and author are already pinned."""
        existing = self.get_pinned_quotes()
        if any(q.same_as(text, author) for q in existing):
            return None
        quote = Quote(id=new_id(), text=text, author=author)
        self.save_pinned_quotes(existing + [quote])
        return quote

    def remove_pinned_quote(self, quote_id: str) -> bool:
        existing = self.get_pinned_quotes()
        kept = [q for q in existing if q.id != quote_id]
        self.save_pinned_quotes(kept)
        return len(kept) != len(existing)

    # ---------------- Theme ----------------

    def get_theme_settings(self) -> ThemeSettings:
        return _theme(self._read())

    def save_theme_settings(self, theme_id: str, is_dark_mode: bool) -> None:
        self._write({THEME_ID: theme_id, IS_DARK_MODE: bool(is_dark_mode)})

    # ---------------- Live queries ----------------

    def subscribe_to_user_data(self, callback: Callable[[List[Task], List[Task]], None]) -> Unsubscribe:
        self._require_session()

        def listener(snapshot: Optional[DocumentSnapshot], error: Optional[Exception]) -> None:
            if snapshot is None:
                callback([], [])
                return
            callback(_tasks(snapshot.data, TASKS), _tasks(snapshot.data, COMPLETED))

        return self.watcher.subscribe(listener)

    def subscribe_to_theme_settings(self, callback: Callable[[str, bool], None]) -> Unsubscribe:
        self._require_session()

        def listener(snapshot: Optional[DocumentSnapshot], error: Optional[Exception]) -> None:
            settings = _theme(snapshot.data) if snapshot is not None else ThemeSettings()
            callback(settings.theme_id, settings.is_dark_mode)

        return self.watcher.subscribe(listener)

    # ---------------- Import / export ----------------

    def export_document(self) -> Dict[str, Any]:
        data = self._read()
        xp = _xp(data)
        theme = _theme(data)
        return {
            TASKS: [t.to_dict() for t in _tasks(data, TASKS)],
            COMPLETED: [t.to_dict() for t in _tasks(data, COMPLETED)],
            XP: xp.xp,
            LEVEL: xp.level,
            PINNED_QUOTES: [q.to_dict() for q in _quotes(data)],
            THEME_ID: theme.theme_id,
            IS_DARK_MODE: theme.is_dark_mode,
            "exported_at": datetime.now().replace(microsecond=0).isoformat(),
        }

    def import_document(self, payload: Any) -> Dict[str, int]:
        """Replace the fields present in ``payload``; returns per-field item counts."""
        if not isinstance(payload, dict):
            raise InvalidDocumentError("Import must be a JSON object")
        data = {_ALIASES.get(k, k): v for k, v in payload.items()}

        fields: Dict[str, Any] = {}
        for key in (TASKS, COMPLETED, PINNED_QUOTES):
            if key not in data:
                continue
            if not isinstance(data[key], list):
                raise InvalidDocumentError(f"'{key}' must be a list")
            fields[key] = data[key]
        if TASKS in fields:
            fields[TASKS] = [t.to_dict() for t in _tasks(fields, TASKS)]
        if COMPLETED in fields:
            fields[COMPLETED] = [t.to_dict() for t in _tasks(fields, COMPLETED)]
        if PINNED_QUOTES in fields:
            fields[PINNED_QUOTES] = [q.to_dict() for q in _quotes(fields)]

        # A payload level is ignored; it is recomputed from xp.
        if XP in data:
            try:
                xp = max(0, int(data[XP] or 0))
            except (TypeError, ValueError, OverflowError) as exc:
                raise InvalidDocumentError("'xp' must be an integer") from exc
            fields[XP] = xp
            fields[LEVEL] = level_from_xp(xp).level
        if THEME_ID in data:
            fields[THEME_ID] = str(data[THEME_ID] or "default")
        if IS_DARK_MODE in data:
            fields[IS_DARK_MODE] = bool(data[IS_DARK_MODE])

        if not fields:
            raise InvalidDocumentError("Nothing to import")
        self._write(fields)
        counts = {k: len(v) for k, v in fields.items() if isinstance(v, list)}
        logger.info("Imported document fields %s", sorted(fields))
        return counts
