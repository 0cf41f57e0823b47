"""Plain value types stored inside the shared user document.

Every entity round-trips through ``to_dict``/``from_dict`` as JSON-friendly
dicts. ``from_dict`` also accepts the camelCase keys and epoch-millisecond
timestamps used by older exports so that JSON imports keep working.
"""
from __future__ import annotations

import math
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, Optional


def _now() -> datetime:
    return datetime.now().replace(microsecond=0)


def _pick(data: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in data and data[key] not in (None, ""):
            return data[key]
    return None


def parse_timestamp(raw: Any) -> Optional[datetime]:
    if raw is None or raw == "":
        return None
    if isinstance(raw, datetime):
        value = raw
    elif isinstance(raw, (int, float)):
        try:
            return datetime.fromtimestamp(float(raw) / 1000.0)
        except (OverflowError, OSError, ValueError):
            return None
    else:
        text = str(raw).strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            value = datetime.fromisoformat(text)
        except ValueError:
            return None
    # Stored datetimes are naive local time.
    if value.tzinfo is not None:
        value = value.astimezone().replace(tzinfo=None)
    return value


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _optional_float(raw: Any) -> Optional[float]:
    if raw is None or raw == "":
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    return value if math.isfinite(value) else None


@dataclass(frozen=True)
class Task:
    id: str
    title: str
    start_date: str
    start_time: Optional[str] = None
    end_date: Optional[str] = None
    end_time: Optional[str] = None
    workload: Optional[float] = None
    link: Optional[str] = None
    subject: Optional[str] = None
    created_at: datetime = field(default_factory=_now)
    completed_at: Optional[datetime] = None

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None

    def completed(self, when: Optional[datetime] = None) -> "Task":
        return replace(self, completed_at=when or _now())

    def reopened(self) -> "Task":
        return replace(self, completed_at=None)

    def to_dict(self) -> Dict[str, Any]:
        # None values are dropped so the stored document stays compact.
        data = {
            "id": self.id,
            "title": self.title,
            "start_date": self.start_date,
            "start_time": self.start_time,
            "end_date": self.end_date,
            "end_time": self.end_time,
            "workload": self.workload,
            "link": self.link,
            "subject": self.subject,
            "created_at": _iso(self.created_at),
            "completed_at": _iso(self.completed_at),
        }
        return {k: v for k, v in data.items() if v is not None}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Task":
        created = parse_timestamp(_pick(data, "created_at", "createdAt")) or _now()
        start_date = _pick(data, "start_date", "startDate") or created.date().isoformat()
        return cls(
            id=str(_pick(data, "id") or uuid.uuid4()),
            title=str(_pick(data, "title") or "Untitled"),
            start_date=str(start_date),
            start_time=_pick(data, "start_time", "startTime"),
            end_date=_pick(data, "end_date", "endDate"),
            end_time=_pick(data, "end_time", "endTime"),
            workload=_optional_float(_pick(data, "workload")),
            link=_pick(data, "link"),
            subject=_pick(data, "subject"),
            created_at=created,
            completed_at=parse_timestamp(_pick(data, "completed_at", "completedAt")),
        )


@dataclass(frozen=True)
class Quote:
    id: str
    text: str
    author: str
    pinned_at: datetime = field(default_factory=_now)

    def same_as(self, text: str, author: str) -> bool:
        return self.text == text and self.author == author

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "author": self.author,
            "pinned_at": _iso(self.pinned_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Quote":
        return cls(
            id=str(_pick(data, "id") or uuid.uuid4()),
            text=str(data.get("text") or ""),
            author=str(data.get("author") or ""),
            pinned_at=parse_timestamp(_pick(data, "pinned_at", "pinnedAt")) or _now(),
        )


@dataclass(frozen=True)
class XPData:
    xp: int = 0
    level: int = 1


@dataclass(frozen=True)
class ThemeSettings:
    theme_id: str = "default"
    is_dark_mode: bool = False


def new_id() -> str:
    return str(uuid.uuid4())
