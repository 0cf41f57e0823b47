from __future__ import annotations

import math
import re
from dataclasses import replace
from datetime import datetime
from typing import Dict, Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from taskquest.models import Task, new_id
from taskquest.schedule import DEFAULT_END_TIME, DEFAULT_START_TIME, combine

_URL_RE = re.compile(r"^https?://", re.IGNORECASE)

Number = Union[int, float, str, None]


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _workload(raw: Number) -> Optional[float]:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return None
    value = float(raw)
    if not math.isfinite(value):
        raise ValueError(f"workload must be finite: {raw!r}")
    return value


def validate_task_form(
    *,
    title: str,
    start_date: Optional[str],
    start_time: Optional[str] = None,
    end_date: Optional[str] = None,
    end_time: Optional[str] = None,
    workload: Number = None,
    link: Optional[str] = None,
) -> Dict[str, str]:
    """Return field -> message for every invalid field; empty when the form is valid."""
    errors: Dict[str, str] = {}
    if not (title or "").strip():
        errors["title"] = "Title is required"

    if start_date and end_date:
        try:
            start = combine(start_date, start_time, DEFAULT_START_TIME)
            end = combine(end_date, end_time, DEFAULT_START_TIME)
        except ValueError:
            errors["end_date"] = "Dates must be YYYY-MM-DD and times HH:MM"
        else:
            if end < start:
                errors["end_date"] = "End must be after start"

    try:
        _workload(workload)
    except (TypeError, ValueError):
        errors["workload"] = "Workload must be a number"

    cleaned_link = _clean(link)
    if cleaned_link and not _URL_RE.match(cleaned_link):
        errors["link"] = "Link must start with http or https"
    return errors


def build_task(
    *,
    title: str,
    start_date: str,
    start_time: Optional[str] = None,
    end_date: Optional[str] = None,
    end_time: Optional[str] = DEFAULT_END_TIME,
    workload: Number = None,
    link: Optional[str] = None,
    subject: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Task:
    """Create a new task from already-validated form values."""
    created = (now or datetime.now()).replace(microsecond=0)
    return Task(
        id=new_id(),
        title=title.strip(),
        start_date=start_date,
        start_time=_clean(start_time),
        end_date=_clean(end_date),
        end_time=_clean(end_time) if _clean(end_date) else None,
        workload=_workload(workload),
        link=_clean(link),
        subject=_clean(subject),
        created_at=created,
    )


def apply_edit(
    task: Task,
    *,
    title: str,
    start_date: str,
    start_time: Optional[str] = None,
    end_date: Optional[str] = None,
    end_time: Optional[str] = None,
    workload: Number = None,
    link: Optional[str] = None,
    subject: Optional[str] = None,
) -> Task:
    """Edits keep the id, creation and completion stamps."""
    return replace(
        task,
        title=title.strip(),
        start_date=start_date,
        start_time=_clean(start_time),
        end_date=_clean(end_date),
        end_time=_clean(end_time) if _clean(end_date) else None,
        workload=_workload(workload),
        link=_clean(link),
        subject=_clean(subject),
    )


def form_defaults(timezone: str, now: Optional[datetime] = None) -> Dict[str, Optional[str]]:
    """Blank form values: start is "now" in ``timezone``, no deadline."""
    try:
        tz = ZoneInfo(timezone)
    except (ZoneInfoNotFoundError, ValueError):
        tz = None
    local = now.astimezone(tz) if now and tz else (now or datetime.now(tz))
    return {
        "title": "",
        "start_date": local.date().isoformat(),
        "start_time": f"{local:%H:%M}",
        "end_date": None,
        "end_time": DEFAULT_END_TIME,
        "workload": "",
        "link": "",
        "subject": "",
    }
