from datetime import datetime

import pytest

from taskquest.auth import sign_in_anonymously
from taskquest.models import Task
from taskquest.service import TodoService
from taskquest.store.db import dispose_engine
from taskquest.store.storage import UserStore
from taskquest.store.watcher import DocumentWatcher

NOW = datetime(2024, 1, 1, 12, 0, 0)


@pytest.fixture
def db_url(tmp_path):
    url = f"sqlite:///{(tmp_path / 'taskquest-test.db').as_posix()}"
    yield url
    dispose_engine(url)


@pytest.fixture
def session(db_url):
    return sign_in_anonymously(db_url)


@pytest.fixture
def store(db_url, session):
    watcher = DocumentWatcher(db_url, "test-user", autostart=False)
    return UserStore(db_url, "test-user", session, watcher=watcher)


@pytest.fixture
def service(store):
    return TodoService(store, clock=lambda: NOW)


@pytest.fixture
def make_task():
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        values = {
            "id": f"task-{counter['n']}",
            "title": f"Task {counter['n']}",
            "start_date": "2024-01-01",
            "created_at": datetime(2024, 1, 1, 11, 0, 0),
        }
        values.update(overrides)
        return Task(**values)

    return _make
