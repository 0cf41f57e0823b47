"""Dashboard analytics computed from the active and completed task lists."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Sequence

from taskquest.models import Task
from taskquest.schedule import due_at, start_at

NO_SUBJECT = "No Subject"
TREND_WEEKS = 8


@dataclass
class SubjectStats:
    total: int = 0
    completed: int = 0
    active: int = 0

    @property
    def completion_rate(self) -> float:
        return (self.completed / self.total) * 100 if self.total else 0.0


@dataclass(frozen=True)
class WeekBucket:
    label: str
    start: datetime
    end: datetime
    completions: int


@dataclass
class Analytics:
    active_tasks: int
    completed_tasks: int
    total_tasks: int
    completion_rate: float
    average_completion_time: timedelta
    average_planned_duration: timedelta
    tasks_with_duration: int
    subject_stats: Dict[str, SubjectStats] = field(default_factory=dict)
    overdue_tasks: int = 0
    weekly_trends: List[WeekBucket] = field(default_factory=list)
    on_time_rate: float = 0.0
    productivity_score: float = 0.0


def _mean(values: Sequence[timedelta]) -> timedelta:
    if not values:
        return timedelta(0)
    return sum(values, timedelta(0)) / len(values)


def weekly_trends(completed: Sequence[Task], now: datetime, weeks: int = TREND_WEEKS) -> List[WeekBucket]:
    """Completions per rolling 7-day window, oldest first."""
    buckets = []
    for i in range(weeks):
        start = now - timedelta(days=i * 7 + 7)
        end = now - timedelta(days=i * 7)
        count = sum(1 for t in completed if t.completed_at and start <= t.completed_at < end)
        buckets.append(WeekBucket(label=f"{start:%b} {start.day}", start=start, end=end, completions=count))
    buckets.reverse()
    return buckets


def compute_analytics(active: Sequence[Task], completed: Sequence[Task], now: Optional[datetime] = None) -> Analytics:
    now = now or datetime.now()
    all_tasks = list(active) + list(completed)
    total = len(all_tasks)
    completion_rate = (len(completed) / total) * 100 if total else 0.0

    timed = [t for t in completed if t.start_date and t.completed_at and t.end_date]
    actual = [t.completed_at - start_at(t) for t in timed]
    planned = [due_at(t) - start_at(t) for t in timed]

    subjects: Dict[str, SubjectStats] = {}
    for t in all_tasks:
        stats = subjects.setdefault(t.subject or NO_SUBJECT, SubjectStats())
        stats.total += 1
        if t.completed_at:
            stats.completed += 1
        else:
            stats.active += 1

    overdue = 0
    for t in active:
        due = due_at(t)
        if due is not None and due < now:
            overdue += 1

    on_time = 0
    for t in completed:
        due = due_at(t)
        if due is None or (t.completed_at is not None and t.completed_at <= due):
            on_time += 1
    on_time_rate = (on_time / len(completed)) * 100 if completed else 0.0

    return Analytics(
        active_tasks=len(active),
        completed_tasks=len(completed),
        total_tasks=total,
        completion_rate=completion_rate,
        average_completion_time=_mean(actual),
        average_planned_duration=_mean(planned),
        tasks_with_duration=len(timed),
        subject_stats=subjects,
        overdue_tasks=overdue,
        weekly_trends=weekly_trends(completed, now),
        on_time_rate=on_time_rate,
        productivity_score=completion_rate * 0.6 + on_time_rate * 0.4,
    )


def productivity_label(score: float) -> str:
    if score >= 80:
        return "Excellent"
    if score >= 60:
        return "Good"
    if score >= 40:
        return "Fair"
    return "Needs Improvement"


def productivity_color(score: float) -> str:
    if score >= 80:
        return "#198754"
    if score >= 60:
        return "#ffc107"
    return "#dc3545"


def format_duration(value: timedelta) -> str:
    if value == timedelta(0):
        return "No data"
    hours = int(value.total_seconds() // 3600)
    days, rem_hours = divmod(hours, 24)
    if days > 0:
        return f"{days}d {rem_hours}h"
    return f"{hours}h"


def efficiency_ratio(a: Analytics) -> Optional[float]:
    """Planned over actual duration as a percentage; above 100 means faster than planned."""
    actual = a.average_completion_time.total_seconds()
    planned = a.average_planned_duration.total_seconds()
    if planned <= 0 or actual == 0:
        return None
    return planned / actual * 100


def insights(a: Analytics) -> List[str]:
    out = []
    if a.completion_rate > 70:
        out.append("🎉 Great job! You're maintaining a high completion rate.")
    if a.overdue_tasks > 0:
        plural = "s" if a.overdue_tasks > 1 else ""
        out.append(f"⚠️ You have {a.overdue_tasks} overdue task{plural}. Consider prioritizing them.")
    if a.on_time_rate < 60:
        out.append("💡 Try breaking down large tasks into smaller, more manageable pieces.")
    trends = a.weekly_trends
    if len(trends) >= 2 and trends[-1].completions > trends[-2].completions:
        out.append("📈 Your productivity is trending upward this week!")
    return out


# Shown when a metric card is expanded.
EXPLANATIONS: Dict[str, Dict[str, str]] = {
    "completion_rate": {
        "title": "📈 Completion Rate",
        "body": (
            "The percentage of all your tasks that have been completed: "
            "(Completed Tasks ÷ Total Tasks) × 100. Above 70% means you finish what you start; "
            "below 40% suggests breaking tasks into smaller pieces."
        ),
    },
    "productivity_score": {
        "title": "⚡ Productivity Score",
        "body": (
            "(Completion Rate × 0.6) + (On-Time Rate × 0.4). 80-100 Excellent, 60-79 Good, "
            "40-59 Fair, below 40 Needs Improvement."
        ),
    },
    "average_completion_time": {
        "title": "⏱️ Average Completion Time",
        "body": (
            "Average time from a task's start to its completion. Only completed tasks with both "
            "start and end dates are included."
        ),
    },
    "on_time_rate": {
        "title": "🎯 On-Time Completion Rate",
        "body": (
            "(Tasks completed by their due date ÷ Total completed tasks) × 100. "
            "Tasks without a due date count as on time."
        ),
    },
    "weekly_trends": {
        "title": "📅 Weekly Completion Trend",
        "body": "Completions per week over the last 8 weeks, oldest on the left.",
    },
    "subject_breakdown": {
        "title": "🏷️ Subject Breakdown",
        "body": "Completed and active task counts per subject, with each subject's completion rate.",
    },
    "time_analysis": {
        "title": "⏰ Time Analysis",
        "body": (
            "Compares planned and actual durations. Efficiency Ratio = Planned ÷ Actual; "
            "above 100% means you finish faster than planned."
        ),
    },
}
