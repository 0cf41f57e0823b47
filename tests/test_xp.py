from datetime import datetime

from taskquest.xp import (
    EXTREME_BADGE_COLORS,
    MAJOR_EFFECTS,
    NEUTRAL_BADGE_COLORS,
    award_completions,
    badge_effects,
    calculate_task_xp,
    difficulty_multiplier,
    level_from_xp,
    level_threshold,
    responsiveness_bonus,
)

CREATED = datetime(2024, 1, 1, 9, 0)


def test_responsiveness_tiers():
    assert responsiveness_bonus(0.5) == 4000
    assert responsiveness_bonus(0.51) == 3500
    assert responsiveness_bonus(24) == 2000
    assert responsiveness_bonus(168) == 500
    assert responsiveness_bonus(169) == 100


def test_difficulty_multiplier():
    assert difficulty_multiplier(8) == 1.5
    assert difficulty_multiplier(5) == 1.25
    assert difficulty_multiplier(3) == 1.1
    assert difficulty_multiplier(2.9) == 1.0


def test_quick_task_without_workload(make_task):
    task = make_task(created_at=CREATED, completed_at=datetime(2024, 1, 1, 9, 20))
    award = calculate_task_xp(task)
    assert (award.base, award.workload, award.responsiveness) == (500, 300, 4000)
    assert award.multiplier == 1.0
    assert award.total == 4800
    assert award.difficulty_bonus_pct == 0


def test_heavy_task_caps_workload_bonus(make_task):
    task = make_task(workload=10, created_at=CREATED, completed_at=datetime(2024, 1, 2, 15, 0))
    award = calculate_task_xp(task)
    assert award.workload == 3000
    assert award.responsiveness == 1500
    assert award.total == 7500
    assert award.difficulty_bonus_pct == 50


def test_medium_and_slow_tasks(make_task):
    medium = make_task(workload=5, created_at=CREATED, completed_at=datetime(2024, 1, 1, 12, 0))
    assert calculate_task_xp(medium).total == 6250
    slow = make_task(workload=3, created_at=CREATED, completed_at=datetime(2024, 1, 5, 13, 0))
    assert calculate_task_xp(slow).total == 2090


def test_uncompleted_task_measured_against_now(make_task):
    task = make_task(created_at=CREATED)
    assert calculate_task_xp(task, now=datetime(2024, 1, 1, 10, 0)).responsiveness == 3500


def test_level_thresholds():
    assert [level_threshold(n) for n in range(1, 5)] == [10000, 15000, 22500, 33750]


def test_level_from_xp():
    start = level_from_xp(0)
    assert (start.level, start.xp_in_level, start.xp_to_next) == (1, 0, 10000)
    assert level_from_xp(10000).level == 2
    third = level_from_xp(30000)
    assert (third.level, third.xp_in_level, third.xp_to_next) == (3, 5000, 22500)
    assert round(third.percent, 2) == 22.22


def test_award_completions(make_task):
    task = make_task(created_at=CREATED, completed_at=datetime(2024, 1, 1, 9, 20))
    result = award_completions(9000, [task])
    assert result.gained == 4800
    assert result.xp == 13800
    assert result.level == 2
    assert result.latest.task_id == task.id
    assert award_completions(0, []).latest is None


def test_badge_effects_are_deterministic():
    assert badge_effects(7) == badge_effects(7)


def test_low_levels_use_the_plain_badges():
    for level in range(1, 5):
        fx = badge_effects(level)
        assert fx.color in NEUTRAL_BADGE_COLORS[:2]
        assert not fx.major_change
        assert not fx.glow


def test_major_changes_turn_every_effect_on():
    for level in range(1, 80):
        fx = badge_effects(level)
        if fx.major_change:
            assert fx.major_effect in MAJOR_EFFECTS
            assert fx.color in EXTREME_BADGE_COLORS
            assert fx.glow and fx.pulse and fx.sparkle and fx.shadow
