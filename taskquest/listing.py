"""Filtering, sorting and paging of task lists as shown in the UI."""
from __future__ import annotations

from datetime import datetime
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

from taskquest.models import Task

ACTIVE_SORT_KEYS: Dict[str, str] = {
    "created_at": "Created",
    "title": "Title",
    "start_date": "Start Date",
    "end_date": "End Date",
    "subject": "Subject",
    "workload": "Workload",
}
HISTORY_SORT_KEYS: Dict[str, str] = {
    "completed_at": "Completed",
    "title": "Title",
    "start_date": "Start Date",
    "end_date": "End Date",
    "subject": "Subject",
    "workload": "Workload",
}

_SortKey = Callable[[Task], Tuple]

_KEYS: Dict[str, _SortKey] = {
    "created_at": lambda t: (t.created_at,),
    "completed_at": lambda t: (t.completed_at or datetime.min,),
    "title": lambda t: (t.title.lower(),),
    "start_date": lambda t: (t.start_date,),
    # Tasks without an end date sort after every dated task ascending.
    "end_date": lambda t: (0, t.end_date) if t.end_date else (1, ""),
    "subject": lambda t: (t.subject or "",),
    "workload": lambda t: (t.workload or 0,),
}


def subject_suggestions(active: Sequence[Task], completed: Sequence[Task]) -> List[str]:
    seen: Dict[str, None] = {}
    for t in list(active) + list(completed):
        if t.subject:
            seen.setdefault(t.subject, None)
    return list(seen)


def filter_by_subject(tasks: Sequence[Task], subject: Optional[str]) -> List[Task]:
    if not subject:
        return list(tasks)
    return [t for t in tasks if t.subject == subject]


def sort_tasks(tasks: Sequence[Task], by: str, order: str = "desc", *, default: str = "created_at") -> List[Task]:
    key = _KEYS.get(by) or _KEYS[default]
    return sorted(tasks, key=key, reverse=(order == "desc"))


def page_count(total: int, per_page: int) -> int:
    return max(1, -(-total // per_page))


def page_items(page: int, pages: int) -> List[Union[int, str]]:
    """Page numbers to render, with ``"…"`` standing in for skipped runs."""
    if pages <= 1:
        return []
    items: List[Union[int, str]] = []
    last_was_gap = False
    for p in range(1, pages + 1):
        if p == 1 or p == pages or abs(p - page) <= 1:
            items.append(p)
            last_was_gap = False
        elif not last_was_gap:
            items.append("…")
            last_was_gap = True
    return items
