from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Dict, List, Sequence

from taskquest.models import Task
from taskquest.schedule import HISTORY_COLOR, URGENCY_COLORS, due_at, subject_color


@dataclass(frozen=True)
class TimelineEntry:
    task: Task
    due: datetime


@dataclass(frozen=True)
class TimelineRange:
    start: datetime
    end: datetime

    @property
    def span(self) -> timedelta:
        return self.end - self.start


@dataclass(frozen=True)
class Marker:
    when: datetime
    position: float
    is_today: bool
    label: str


def timeline_entries(active: Sequence[Task], completed: Sequence[Task]) -> List[TimelineEntry]:
    entries = []
    for task in list(active) + list(completed):
        due = due_at(task)
        if due is not None:
            entries.append(TimelineEntry(task=task, due=due))
    entries.sort(key=lambda e: e.due)
    return entries


def timeline_range(entries: Sequence[TimelineEntry], now: datetime) -> TimelineRange:
    if not entries:
        return TimelineRange(start=now, end=now + timedelta(days=7))
    first = min(e.due for e in entries)
    last = max(e.due for e in entries)
    padding = (last - first) * 0.05
    return TimelineRange(start=first - padding, end=last + padding)


def date_position(moment: datetime, rng: TimelineRange) -> float:
    total = rng.span.total_seconds()
    if total <= 0:
        # Every entry shares one due moment.
        return 50.0
    return (moment - rng.start).total_seconds() / total * 100


def group_by_day(entries: Sequence[TimelineEntry]) -> Dict[date, List[TimelineEntry]]:
    groups: Dict[date, List[TimelineEntry]] = {}
    for entry in entries:
        groups.setdefault(entry.due.date(), []).append(entry)
    return groups


def _label(moment: datetime) -> str:
    return f"{moment:%b} {moment.day}"


def timeline_markers(rng: TimelineRange, now: datetime) -> List[Marker]:
    days = int(-(-rng.span.total_seconds() // 86400))
    step = max(1, days // 12)
    markers = []
    for i in range(0, days + 1, step):
        moment = rng.start + timedelta(days=i)
        markers.append(
            Marker(
                when=moment,
                position=date_position(moment, rng),
                is_today=moment.date() == now.date(),
                label=_label(moment),
            )
        )
    today_pos = date_position(now, rng)
    if not any(m.is_today for m in markers) and 0 <= today_pos <= 100:
        markers.append(Marker(when=now, position=today_pos, is_today=True, label=_label(now)))
    markers.sort(key=lambda m: m.position)
    return markers


def entry_color(task: Task) -> str:
    if task.completed_at:
        return HISTORY_COLOR
    if task.subject:
        return subject_color(task.subject)
    return URGENCY_COLORS["none"]
