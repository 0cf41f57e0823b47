"""Live query over the shared document.

A background thread polls the document revision and notifies subscribers when
it changes. Subscribers receive the snapshot, or ``None`` plus the exception
when the poll fails.
"""
from __future__ import annotations

import logging
import threading
from threading import Event
from typing import Callable, Dict, Optional

from taskquest.errors import StorageError
from taskquest.store.repo import DocumentSnapshot, document_revision, get_document


logger = logging.getLogger(__name__)

Listener = Callable[[Optional[DocumentSnapshot], Optional[Exception]], None]


class DocumentWatcher:
    def __init__(
        self,
        database_url: str,
        document_id: str,
        *,
        interval_seconds: float = 5.0,
        autostart: bool = True,
    ) -> None:
        self.database_url = database_url
        self.document_id = document_id
        self.interval_seconds = max(0.05, float(interval_seconds))
        self.autostart = autostart

        self._listeners: Dict[int, Listener] = {}
        self._next_key = 0
        self._lock = threading.Lock()
        self._stop_event = Event()
        self._thread: Optional[threading.Thread] = None
        self._last_revision: Optional[int] = None
        self._failing = False

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener``, deliver the current state to it, and start polling."""
        with self._lock:
            key = self._next_key
            self._next_key += 1
            self._listeners[key] = listener

        try:
            snapshot = get_document(self.database_url, self.document_id)
        except StorageError as exc:
            self._call(listener, None, exc)
        else:
            if not self.running:
                self._last_revision = snapshot.revision
            self._call(listener, snapshot, None)

        if self.autostart:
            self.start()

        def unsubscribe() -> None:
            with self._lock:
                self._listeners.pop(key, None)
                empty = not self._listeners
            if empty:
                self.stop()

        return unsubscribe

    def start(self) -> None:
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run, name=f"document-watcher-{self.document_id}", daemon=True
        )
        self._thread.start()

    def stop(self, timeout: float = 2.0) -> None:
        self._stop_event.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=timeout)
        self._thread = None

    def poll_once(self) -> bool:
        """Check the revision once; returns True when listeners were notified."""
        try:
            revision = document_revision(self.database_url, self.document_id)
            if revision == self._last_revision and not self._failing:
                return False
            snapshot = get_document(self.database_url, self.document_id)
        except StorageError as exc:
            if self._failing:
                return False
            self._failing = True
            logger.warning("Live query on %s failed: %s", self.document_id, exc)
            self._broadcast(None, exc)
            return True

        self._failing = False
        self._last_revision = snapshot.revision
        self._broadcast(snapshot, None)
        return True

    def _run(self) -> None:
        while not self._stop_event.is_set():
            self.poll_once()
            self._stop_event.wait(self.interval_seconds)

    def _broadcast(self, snapshot: Optional[DocumentSnapshot], error: Optional[Exception]) -> None:
        with self._lock:
            listeners = list(self._listeners.values())
        for listener in listeners:
            self._call(listener, snapshot, error)

    @staticmethod
    def _call(listener: Listener, snapshot: Optional[DocumentSnapshot], error: Optional[Exception]) -> None:
        try:
            listener(snapshot, error)
        except Exception:  # noqa: BLE001
            # A failing subscriber must not stop the poll loop.
            logger.exception("Document listener raised")
