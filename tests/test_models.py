from datetime import datetime, timedelta, timezone

from taskquest.models import Quote, Task, ThemeSettings, XPData, parse_timestamp


def test_task_to_dict_drops_missing_fields():
    task = Task(id="t1", title="Write report", start_date="2024-01-01", created_at=datetime(2024, 1, 1, 9))
    assert task.to_dict() == {
        "id": "t1",
        "title": "Write report",
        "start_date": "2024-01-01",
        "created_at": "2024-01-01T09:00:00",
    }


def test_task_from_dict_accepts_camel_case_and_epoch_millis():
    task = Task.from_dict({
        "id": "x",
        "title": "Legacy",
        "startDate": "2024-02-01",
        "endDate": "2024-02-03",
        "endTime": "18:00",
        "workload": "3",
        "createdAt": 1706774400000,
    })
    assert task.start_date == "2024-02-01"
    assert task.end_date == "2024-02-03"
    assert task.end_time == "18:00"
    assert task.workload == 3.0
    assert task.created_at == datetime.fromtimestamp(1706774400)
    assert task.completed_at is None


def test_task_from_dict_fills_required_fields():
    task = Task.from_dict({"title": "", "created_at": "2024-05-06T07:08:09"})
    assert task.title == "Untitled"
    assert task.start_date == "2024-05-06"
    assert task.id


def test_complete_and_reopen():
    task = Task(id="t1", title="A", start_date="2024-01-01")
    done = task.completed(datetime(2024, 1, 2, 10, 0))
    assert done.is_completed
    assert done.completed_at == datetime(2024, 1, 2, 10, 0)
    assert not task.is_completed
    assert done.reopened().completed_at is None


def test_parse_timestamp():
    utc_ten = datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc).astimezone().replace(tzinfo=None)
    assert parse_timestamp("2024-01-01T10:00:00Z") == utc_ten
    assert parse_timestamp("garbage") is None
    assert parse_timestamp(None) is None


def test_quote_identity_is_text_and_author():
    q = Quote(id="q1", text="Stay hungry", author="Jobs")
    assert q.same_as("Stay hungry", "Jobs")
    assert not q.same_as("Stay hungry", "Someone else")
    again = Quote.from_dict(q.to_dict())
    assert again == q


def test_defaults():
    assert XPData() == XPData(xp=0, level=1)
    assert ThemeSettings() == ThemeSettings(theme_id="default", is_dark_mode=False)


def test_parse_timestamp_converts_offsets_to_naive_local_time():
    parsed = parse_timestamp("2024-01-01T11:00:00+02:00")
    assert parsed.tzinfo is None
    expected = datetime(2024, 1, 1, 11, 0, tzinfo=timezone(timedelta(hours=2))).astimezone().replace(tzinfo=None)
    assert parsed == expected
    aware = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)
    assert parse_timestamp(aware).tzinfo is None


def test_task_from_dict_with_offset_timestamps_is_naive():
    task = Task.from_dict({
        "id": "t1",
        "title": "Imported",
        "start_date": "2024-01-01",
        "created_at": "2024-01-01T11:00:00+00:00",
        "completed_at": "2024-01-01T12:00:00+00:00",
    })
    assert task.created_at.tzinfo is None
    assert task.completed_at - task.created_at == timedelta(hours=1)


def test_task_from_dict_drops_non_finite_workload():
    for raw in ("nan", "inf", "-inf", float("nan")):
        task = Task.from_dict({"id": "t", "title": "x", "start_date": "2024-01-01", "workload": raw})
        assert task.workload is None
