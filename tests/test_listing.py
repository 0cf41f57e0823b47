from datetime import datetime

from taskquest.listing import filter_by_subject, page_count, page_items, sort_tasks, subject_suggestions


def test_end_date_sort_puts_undated_last_ascending(make_task):
    a = make_task(title="a", end_date="2024-02-01")
    b = make_task(title="b")
    c = make_task(title="c", end_date="2024-01-15")
    assert [t.title for t in sort_tasks([a, b, c], "end_date", "asc")] == ["c", "a", "b"]
    assert [t.title for t in sort_tasks([a, b, c], "end_date", "desc")] == ["b", "a", "c"]


def test_title_sort_ignores_case(make_task):
    tasks = [make_task(title="banana"), make_task(title="Apple"), make_task(title="cherry")]
    assert [t.title for t in sort_tasks(tasks, "title", "asc")] == ["Apple", "banana", "cherry"]


def test_unknown_key_falls_back_to_default(make_task):
    old = make_task(title="old", created_at=datetime(2024, 1, 1))
    new = make_task(title="new", created_at=datetime(2024, 1, 2))
    assert [t.title for t in sort_tasks([old, new], "nonsense")] == ["new", "old"]


def test_history_sorts_by_completion(make_task):
    first = make_task(title="first", completed_at=datetime(2024, 1, 1))
    second = make_task(title="second", completed_at=datetime(2024, 1, 3))
    ordered = sort_tasks([first, second], "nonsense", "desc", default="completed_at")
    assert [t.title for t in ordered] == ["second", "first"]


def test_subject_suggestions_and_filter(make_task):
    active = [make_task(subject="Math"), make_task(), make_task(subject="Art")]
    completed = [make_task(subject="Math"), make_task(subject="Music")]
    assert subject_suggestions(active, completed) == ["Math", "Art", "Music"]
    assert len(filter_by_subject(active, "Math")) == 1
    assert len(filter_by_subject(active, "")) == 3


def test_page_count():
    assert page_count(0, 9) == 1
    assert page_count(9, 9) == 1
    assert page_count(10, 9) == 2


def test_page_items_collapse_gaps():
    assert page_items(1, 1) == []
    assert page_items(1, 3) == [1, 2, 3]
    assert page_items(1, 10) == [1, 2, "…", 10]
    assert page_items(5, 10) == [1, "…", 4, 5, 6, "…", 10]
