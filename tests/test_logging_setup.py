import logging

from taskquest.logging_setup import _ConsoleNoiseFilter


def _record(name, level):
    return logging.LogRecord(name, level, __file__, 1, "msg", None, None)


def test_console_filter():
    f = _ConsoleNoiseFilter()
    assert f.filter(_record("taskquest.service", logging.INFO))
    assert not f.filter(_record("taskquest.store.watcher", logging.INFO))
    assert f.filter(_record("taskquest.store.watcher", logging.WARNING))
    assert not f.filter(_record("urllib3.connectionpool", logging.WARNING))
    assert f.filter(_record("sqlalchemy.pool", logging.ERROR))
