"""Remaining-time urgency and display helpers for a single task."""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from taskquest.models import Task

DEFAULT_START_TIME = "00:00"
DEFAULT_END_TIME = "23:59"

URGENCY_COLORS = {
    "none": "#6B7280",
    "expired": "#dc3545",
    "critical": "#dc3545",
    "soon": "#ffc107",
    "ok": "#198754",
}
HISTORY_COLOR = "#6f42c1"


def combine(day: str, clock: Optional[str], fallback: str) -> datetime:
    return datetime.fromisoformat(f"{day}T{clock or fallback}")


def start_at(task: Task) -> datetime:
    return combine(task.start_date, task.start_time, DEFAULT_START_TIME)


def due_at(task: Task) -> Optional[datetime]:
    if not task.end_date:
        return None
    return combine(task.end_date, task.end_time, DEFAULT_END_TIME)


def planned_end(task: Task) -> Optional[datetime]:
    """Planned end as shown on task cards (missing end time reads as midnight)."""
    if not task.end_date:
        return None
    return combine(task.end_date, task.end_time, DEFAULT_START_TIME)


def remaining(task: Task, now: datetime) -> Optional[timedelta]:
    """Time left until the deadline; ``None`` when the task has no deadline."""
    due = due_at(task)
    if due is None:
        return None
    return due - now


def urgency(task: Task, now: datetime) -> str:
    left = remaining(task, now)
    if left is None:
        return "none"
    if left <= timedelta(0):
        return "expired"
    if left < timedelta(hours=6):
        return "critical"
    if left < timedelta(hours=48):
        return "soon"
    return "ok"


def urgency_color(task: Task, now: datetime) -> str:
    if task.is_completed:
        return HISTORY_COLOR
    return URGENCY_COLORS[urgency(task, now)]


def format_remaining(left: Optional[timedelta]) -> str:
    if left is None:
        return "no deadline"
    if left <= timedelta(0):
        return "expired"
    sec = int(left.total_seconds())
    d, rest = divmod(sec, 86400)
    h, rest = divmod(rest, 3600)
    m = rest // 60
    if d > 0:
        return f"{d}d {h}h"
    if h > 0:
        return f"{h}h {m}m"
    return f"{m}m"


def elapsed_label(task: Task) -> Optional[str]:
    """Start-to-finish duration for history cards, ``Hh Mm``."""
    end = task.completed_at or planned_end(task)
    if end is None:
        return None
    total = max(0, int((end - start_at(task)).total_seconds()))
    return f"{total // 3600}h {(total % 3600) // 60}m"


def _java_hash(text: str) -> int:
    h = 0
    for ch in text:
        h = (h * 31 + ord(ch)) & 0xFFFFFFFF
    return h - 0x100000000 if h & 0x80000000 else h


def subject_color(subject: str) -> str:
    hue = abs(_java_hash(subject)) % 360
    return f"hsl({hue} 70% 45%)"
