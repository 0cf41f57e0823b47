import re
from datetime import datetime, timedelta

from taskquest import schedule
from taskquest.schedule import (
    due_at,
    elapsed_label,
    format_remaining,
    start_at,
    subject_color,
    urgency,
    urgency_color,
)

NOW = datetime(2024, 1, 10, 12, 0)


def test_missing_times_use_day_bounds(make_task):
    task = make_task(start_date="2024-01-05", end_date="2024-01-06")
    assert start_at(task) == datetime(2024, 1, 5, 0, 0)
    assert due_at(task) == datetime(2024, 1, 6, 23, 59)
    assert due_at(make_task()) is None


def test_urgency_bands(make_task):
    assert urgency(make_task(), NOW) == "none"
    assert urgency(make_task(end_date="2024-01-10", end_time="11:00"), NOW) == "expired"
    assert urgency(make_task(end_date="2024-01-10", end_time="17:00"), NOW) == "critical"
    assert urgency(make_task(end_date="2024-01-11", end_time="12:00"), NOW) == "soon"
    assert urgency(make_task(end_date="2024-01-15"), NOW) == "ok"


def test_urgency_colors(make_task):
    assert urgency_color(make_task(), NOW) == "#6B7280"
    assert urgency_color(make_task(end_date="2024-01-10", end_time="17:00"), NOW) == "#dc3545"
    assert urgency_color(make_task(end_date="2024-01-11", end_time="12:00"), NOW) == "#ffc107"
    assert urgency_color(make_task(end_date="2024-01-15"), NOW) == "#198754"
    done = make_task(end_date="2024-01-15", completed_at=NOW)
    assert urgency_color(done, NOW) == "#6f42c1"


def test_format_remaining():
    assert format_remaining(None) == "no deadline"
    assert format_remaining(timedelta(0)) == "expired"
    assert format_remaining(timedelta(days=2, hours=3)) == "2d 3h"
    assert format_remaining(timedelta(hours=5, minutes=7)) == "5h 7m"
    assert format_remaining(timedelta(minutes=42)) == "42m"


def test_elapsed_label(make_task):
    task = make_task(start_date="2024-01-01", start_time="09:00", completed_at=datetime(2024, 1, 1, 11, 30))
    assert elapsed_label(task) == "2h 30m"
    early = make_task(start_date="2024-01-02", completed_at=datetime(2024, 1, 1, 8, 0))
    assert elapsed_label(early) == "0h 0m"
    assert elapsed_label(make_task()) is None


def test_subject_color_is_stable_hsl():
    assert subject_color("a") == "hsl(97 70% 45%)"
    assert subject_color("Math") == "hsl(64 70% 45%)"
    assert subject_color("Math") == subject_color("Math")


def test_subject_hash_wraps_like_a_signed_int():
    assert schedule._java_hash("polygenelubricants") == -2147483648
    assert subject_color("polygenelubricants") == "hsl(128 70% 45%)"
    long_subject = "Distributed Systems Reading Group " * 5
    assert re.fullmatch(r"hsl\((\d{1,3}) 70% 45%\)", subject_color(long_subject))
