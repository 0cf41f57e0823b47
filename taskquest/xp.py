"""Experience points and levels.

XP for a completed task is ``(base + workload bonus + responsiveness bonus)``
scaled by a difficulty multiplier. Levels use exponentially growing
thresholds, so each level needs 1.5x the XP of the previous one.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from taskquest.models import Task

BASE_XP = 500
WORKLOAD_XP_PER_HOUR = 300
WORKLOAD_XP_CAP = 3000
FIRST_LEVEL_THRESHOLD = 10000
LEVEL_GROWTH = 1.5

# (max hours to complete, bonus); anything slower earns the fallback.
RESPONSIVENESS_TIERS: Tuple[Tuple[float, int], ...] = (
    (0.5, 4000),
    (2, 3500),
    (6, 3000),
    (12, 2500),
    (24, 2000),
    (48, 1500),
    (72, 1000),
    (168, 500),
)
SLOW_COMPLETION_BONUS = 100


@dataclass(frozen=True)
class XPAward:
    task_id: str
    total: int
    base: int
    workload: int
    responsiveness: int
    multiplier: float

    @property
    def difficulty_bonus_pct(self) -> int:
        return int(round((self.multiplier - 1) * 100))


@dataclass(frozen=True)
class LevelProgress:
    level: int
    xp_in_level: int
    xp_to_next: int

    @property
    def percent(self) -> float:
        return (self.xp_in_level / self.xp_to_next) * 100 if self.xp_to_next else 0.0


def responsiveness_bonus(hours: float) -> int:
    for limit, bonus in RESPONSIVENESS_TIERS:
        if hours <= limit:
            return bonus
    return SLOW_COMPLETION_BONUS


def difficulty_multiplier(workload: float) -> float:
    if workload >= 8:
        return 1.5
    if workload >= 5:
        return 1.25
    if workload >= 3:
        return 1.1
    return 1.0


def calculate_task_xp(task: Task, now: Optional[datetime] = None) -> XPAward:
    # A task without a workload counts as one hour, for the bonus and the multiplier.
    workload = task.workload or 1
    workload_bonus = int(min(workload * WORKLOAD_XP_PER_HOUR, WORKLOAD_XP_CAP))

    finished = task.completed_at or now or datetime.now()
    hours = (finished - task.created_at).total_seconds() / 3600
    speed_bonus = responsiveness_bonus(hours)

    multiplier = difficulty_multiplier(workload)
    total = math.floor((BASE_XP + workload_bonus + speed_bonus) * multiplier)
    return XPAward(
        task_id=task.id,
        total=int(total),
        base=BASE_XP,
        workload=workload_bonus,
        responsiveness=speed_bonus,
        multiplier=multiplier,
    )


def level_threshold(level: int) -> int:
    return math.floor(FIRST_LEVEL_THRESHOLD * LEVEL_GROWTH ** (level - 1))


def level_from_xp(total_xp: int) -> LevelProgress:
    level = 1
    xp_in_level = max(0, int(total_xp))
    xp_to_next = level_threshold(1)
    while xp_in_level >= xp_to_next:
        xp_in_level -= xp_to_next
        level += 1
        xp_to_next = level_threshold(level)
    return LevelProgress(level=level, xp_in_level=xp_in_level, xp_to_next=xp_to_next)


@dataclass(frozen=True)
class AwardResult:
    xp: int
    level: int
    gained: int
    awards: List[XPAward]

    @property
    def latest(self) -> Optional[XPAward]:
        return self.awards[-1] if self.awards else None


def award_completions(current_xp: int, tasks: Iterable[Task], now: Optional[datetime] = None) -> AwardResult:
    awards = [calculate_task_xp(t, now) for t in tasks]
    gained = sum(a.total for a in awards)
    new_total = int(current_xp) + gained
    return AwardResult(xp=new_total, level=level_from_xp(new_total).level, gained=gained, awards=awards)


# ---------------- Level badge cosmetics ----------------

NEUTRAL_BADGE_COLORS = [
    "#8B7D6B", "#A8967A", "#B8A68A", "#C8B69A",
    "#D4C4A8", "#E0D2B6", "#ECDFC4", "#F2E8D8",
    "#FFD700", "#FFA500", "#FF6B6B", "#4ECDC4",
    "#45B7D1", "#96CEB4", "#FFEAA7", "#DDA0DD",
]
EXTREME_BADGE_COLORS = [
    "#FF0000", "#00FF00", "#0000FF", "#FFFF00", "#FF00FF", "#00FFFF",
    "#FF4500", "#8A2BE2", "#FF1493", "#00CED1", "#FFD700", "#FF6347",
    "#32CD32", "#FF69B4", "#00FA9A", "#FF8C00", "#DC143C", "#7B68EE",
]
MAJOR_EFFECTS = ["rainbow", "shake", "morph", "explode"]


@dataclass(frozen=True)
class BadgeEffects:
    color: str = "#8B7D6B"
    size: float = 1.0
    glow: bool = False
    pulse: bool = False
    sparkle: bool = False
    shadow: bool = False
    major_effect: Optional[str] = None

    @property
    def major_change(self) -> bool:
        return self.major_effect is not None


def _seeded(level: int):
    def rand(multiplier: float = 1.0) -> float:
        x = math.sin(level * multiplier) * 10000
        return x - math.floor(x)
    return rand


def badge_effects(level: int) -> BadgeEffects:
    """Deterministic badge styling for a level; every 8-12 levels is a major change."""
    rand = _seeded(level)
    interval = 8 + math.floor(rand(1.7) * 5)

    if level % interval == 0:
        return BadgeEffects(
            color=EXTREME_BADGE_COLORS[math.floor(rand(3.1) * len(EXTREME_BADGE_COLORS))],
            size=0.8 + level / 50 + rand(4.7) * 0.4,
            glow=True,
            pulse=True,
            sparkle=True,
            shadow=True,
            major_effect=MAJOR_EFFECTS[math.floor(rand(2.3) * len(MAJOR_EFFECTS))],
        )

    if level >= 20:
        color_idx = math.floor(rand(6.1) * len(NEUTRAL_BADGE_COLORS))
    elif level >= 10:
        color_idx = math.floor(rand(7.3) * 12)
    elif level >= 5:
        color_idx = math.floor(rand(8.7) * 8)
    else:
        color_idx = math.floor(rand(9.1) * 2)

    glow = pulse = sparkle = shadow = False
    if level >= 25:
        glow, sparkle, shadow = rand(10.1) > 0.3, rand(11.3) > 0.2, rand(12.7) > 0.4
    elif level >= 15:
        glow, sparkle, shadow = rand(13.1) > 0.5, rand(14.3) > 0.3, rand(15.7) > 0.6
    elif level >= 10:
        glow, pulse = rand(16.1) > 0.7, rand(17.3) > 0.3
    elif level >= 5:
        pulse = rand(18.7) > 0.2

    if level >= 20:
        size = 1 + level / 100 + rand(19.1) * 0.1
    elif level >= 10:
        size = 1 + level / 150 + rand(19.1) * 0.05
    elif level >= 5:
        size = 1 + level / 200 + rand(19.1) * 0.03
    else:
        size = 1 + level / 300 + rand(19.1) * 0.02

    return BadgeEffects(
        color=NEUTRAL_BADGE_COLORS[color_idx],
        size=size,
        glow=glow,
        pulse=pulse,
        sparkle=sparkle,
        shadow=shadow,
    )
