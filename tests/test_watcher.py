import threading

from taskquest.errors import StorageError
from taskquest.store import watcher as watcher_module
from taskquest.store.repo import init_db, set_document
from taskquest.store.watcher import DocumentWatcher


def _url(db_url):
    init_db(db_url)
    return db_url


def test_subscribe_delivers_current_state(db_url):
    url = _url(db_url)
    set_document(url, "doc", {"xp": 42})
    watcher = DocumentWatcher(url, "doc", autostart=False)

    seen = []
    watcher.subscribe(lambda snap, err: seen.append((snap, err)))
    assert len(seen) == 1
    snap, err = seen[0]
    assert err is None
    assert snap.data["xp"] == 42
    assert not watcher.poll_once()


def test_background_thread_pushes_changes(db_url):
    url = _url(db_url)
    watcher = DocumentWatcher(url, "doc", interval_seconds=0.05)
    changed = threading.Event()
    seen = []

    def listener(snap, err):
        seen.append(snap)
        if snap is not None and snap.data.get("xp") == 7:
            changed.set()

    unsubscribe = watcher.subscribe(listener)
    try:
        assert watcher.running
        set_document(url, "doc", {"xp": 7})
        assert changed.wait(5)
    finally:
        unsubscribe()
    assert not watcher.running
    assert seen[0] is not None and not seen[0].exists


def test_failing_listener_does_not_block_others(db_url):
    url = _url(db_url)
    watcher = DocumentWatcher(url, "doc", autostart=False)
    seen = []

    def broken(snap, err):
        raise RuntimeError("listener bug")

    watcher.subscribe(broken)
    watcher.subscribe(lambda snap, err: seen.append(snap))
    set_document(url, "doc", {"tasks": []})
    assert watcher.poll_once()
    assert seen[-1].revision == 1


def test_errors_are_reported_once_per_outage(db_url, monkeypatch):
    url = _url(db_url)
    watcher = DocumentWatcher(url, "doc", autostart=False)
    errors = []
    watcher.subscribe(lambda snap, err: errors.append(err) if err else None)

    real = watcher_module.document_revision

    def boom(*args, **kwargs):
        raise StorageError("offline")

    monkeypatch.setattr(watcher_module, "document_revision", boom)
    assert watcher.poll_once()
    assert not watcher.poll_once()
    assert len(errors) == 1

    monkeypatch.setattr(watcher_module, "document_revision", real)
    assert watcher.poll_once()
    monkeypatch.setattr(watcher_module, "document_revision", boom)
    watcher.poll_once()
    assert len(errors) == 2
