import threading

import pytest

from taskquest.errors import StorageError
from taskquest.store.repo import (
    create_session,
    document_revision,
    get_document,
    init_db,
    revoke_session,
    set_document,
    touch_session,
)


@pytest.fixture
def url(db_url):
    init_db(db_url)
    return db_url


def test_missing_document_reads_as_empty(url):
    snap = get_document(url, "shared-user")
    assert not snap.exists
    assert snap.data == {}
    assert snap.revision == 0
    assert document_revision(url, "shared-user") == 0


def test_merge_keeps_other_fields(url):
    assert set_document(url, "doc", {"tasks": [{"id": "a"}]}) == 1
    assert set_document(url, "doc", {"xp": 500, "level": 1}) == 2
    snap = get_document(url, "doc")
    assert snap.exists
    assert snap.revision == 2
    assert snap.data["tasks"] == [{"id": "a"}]
    assert snap.data["xp"] == 500
    assert "last_updated" in snap.data


def test_replace_drops_other_fields(url):
    set_document(url, "doc", {"tasks": [], "xp": 10})
    set_document(url, "doc", {"theme_id": "ocean"}, merge=False)
    data = get_document(url, "doc").data
    assert "xp" not in data
    assert data["theme_id"] == "ocean"
    assert document_revision(url, "doc") == 2


def test_documents_are_independent(url):
    set_document(url, "one", {"xp": 1})
    assert get_document(url, "two").data == {}


def test_unreachable_database_raises_storage_error(tmp_path):
    bad = f"sqlite:///{(tmp_path / 'missing' / 'nested' / 'db.sqlite').as_posix()}"
    with pytest.raises(StorageError):
        init_db(bad)
    with pytest.raises(StorageError):
        set_document(bad, "doc", {"xp": 1})


def test_session_lifecycle(url):
    row = create_session(url)
    assert len(row["token"]) == 64
    assert touch_session(url, row["token"])["uid"] == row["uid"]
    assert revoke_session(url, row["token"])
    assert touch_session(url, row["token"]) is None
    assert touch_session(url, "unknown") is None
    assert not revoke_session(url, "unknown")


def test_concurrent_merges_keep_every_field(url):
    rounds = 20
    for i in range(rounds):
        doc = f"race-{i}"
        set_document(url, doc, {"theme_id": "default"})
        barrier = threading.Barrier(2)
        errors = []

        def write(fields):
            try:
                barrier.wait(5)
                set_document(url, doc, fields)
            except Exception as exc:  # noqa: BLE001
                errors.append(exc)

        threads = [
            threading.Thread(target=write, args=({"tasks": [{"id": f"t{i}"}]},)),
            threading.Thread(target=write, args=({"xp": i},)),
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join(10)

        assert errors == []
        data = get_document(url, doc).data
        assert data["tasks"] == [{"id": f"t{i}"}]
        assert data["xp"] == i
        assert data["theme_id"] == "default"
        assert document_revision(url, doc) == 3
