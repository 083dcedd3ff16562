"""Tests for GamificationEngine: XP ledger, level-ups, streaks, achievements."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from agent_lounge.domain.entities import Achievement, Performance
from agent_lounge.domain.enums import XPType
from agent_lounge.domain.events import AchievementUnlocked, LevelUp, StreakUpdated, XPAwarded
from agent_lounge.domain.exceptions import InvalidAmountError, NotFoundError
from agent_lounge.domain.values import AgentStats
from agent_lounge.infrastructure.config import GamificationConfig
from agent_lounge.services.gamification import (
    STREAK_CONTINUED,
    GamificationEngine,
    default_achievements,
)


@pytest.fixture
def engine(bus, clock) -> GamificationEngine:
    return GamificationEngine(event_bus=bus, clock=clock, source_id="agent-1")


# ========= #
# XP ledger #
# ========= #


class TestAddXP:
    def test_simple_award(self, engine, recorder) -> None:
        gain = engine.add_xp(10, "Call logged")
        assert engine.performance.xp == 10
        assert gain.amount == 10
        assert gain.bonus == 0
        assert engine.pending_xp_gain == gain
        event = recorder[-1]
        assert isinstance(event, XPAwarded)
        assert event.total_xp == 10
        assert event.source_id == "agent-1"

    def test_zero_is_allowed(self, engine) -> None:
        engine.add_xp(0, "Nothing")
        assert engine.performance.xp == 0

    def test_negative_rejected(self, engine) -> None:
        with pytest.raises(InvalidAmountError):
            engine.add_xp(-1, "Oops")
        assert engine.performance.xp == 0

    def test_level_up_grants_bonus_in_same_call(self, bus, clock, recorder) -> None:
        engine = GamificationEngine(performance=Performance(xp=950), event_bus=bus, clock=clock)
        gain = engine.add_xp(75, "Achievement")
        assert engine.performance.xp == 1125
        assert engine.performance.level == 2
        assert gain.bonus == 100
        level_events = [e for e in recorder if isinstance(e, LevelUp)]
        assert [(e.new_level, e.bonus) for e in level_events] == [(2, 100)]
        assert engine.pending_level_up == 2

    def test_multiple_boundaries_in_one_award(self, bus, recorder) -> None:
        engine = GamificationEngine(event_bus=bus)
        engine.add_xp(2000, "Huge")
        # 2000 -> level 3 (+200 bonus) -> 2200
        assert engine.performance.xp == 2200
        assert [e.new_level for e in recorder if isinstance(e, LevelUp)] == [2, 3]

    def test_bonus_can_cross_another_boundary(self, bus, recorder) -> None:
        engine = GamificationEngine(performance=Performance(xp=950), event_bus=bus)
        engine.add_xp(1000, "Big")
        # 1950 -> level 2, +100 -> 2050 -> level 3, +100 -> 2150
        assert engine.performance.xp == 2150
        assert [e.new_level for e in recorder if isinstance(e, LevelUp)] == [2, 3]

    def test_level_invariant_holds(self, engine) -> None:
        for amount in (300, 450, 999, 1, 5000):
            engine.add_xp(amount, "x")
            perf = engine.performance
            assert perf.level == perf.xp // perf.xp_per_level + 1

    def test_custom_config(self) -> None:
        engine = GamificationEngine(config=GamificationConfig(xp_per_level=100, level_up_bonus=0))
        engine.add_xp(250, "x")
        assert engine.performance.level == 3
        assert engine.performance.xp == 250


class TestTransientCells:
    def test_xp_toast_latest_wins(self, engine) -> None:
        engine.add_xp(10, "first")
        engine.add_xp(20, "second")
        gain = engine.consume_xp_gain()
        assert gain.reason == "second"
        assert engine.pending_xp_gain is None
        assert engine.consume_xp_gain() is None

    def test_level_up_cell_consumed(self) -> None:
        engine = GamificationEngine(performance=Performance(xp=990))
        engine.add_xp(20, "x")
        assert engine.consume_level_up() == 2
        assert engine.pending_level_up is None


# ======= #
# Streaks #
# ======= #


class TestStreaks:
    def test_first_activity_starts_streak_without_xp(self, engine, recorder) -> None:
        assert engine.record_qualifying_activity(date(2025, 6, 10)) == 1
        assert engine.performance.xp == 0
        event = recorder[-1]
        assert isinstance(event, StreakUpdated)
        assert event.reset is False

    def test_consecutive_day_continues_and_awards(self, engine) -> None:
        day = date(2025, 6, 10)
        engine.record_qualifying_activity(day)
        assert engine.record_qualifying_activity(day + timedelta(days=1)) == 2
        assert engine.performance.xp == 25
        gain = engine.pending_xp_gain
        assert gain.reason == STREAK_CONTINUED
        assert gain.xp_type == XPType.STREAK

    def test_same_day_is_noop(self, engine, recorder) -> None:
        day = date(2025, 6, 10)
        engine.record_qualifying_activity(day)
        count = len(recorder)
        assert engine.record_qualifying_activity(day) == 1
        assert len(recorder) == count
        assert engine.performance.xp == 0

    def test_gap_resets_to_one(self, engine, recorder) -> None:
        perf = engine.performance
        perf.current_streak = 4
        perf.longest_streak = 4
        perf.last_activity_date = date(2025, 6, 10)
        assert engine.record_qualifying_activity(date(2025, 6, 12)) == 1
        assert perf.longest_streak == 4
        assert perf.xp == 0
        assert recorder[-1].reset is True

    def test_longest_streak_tracks_max(self, engine) -> None:
        start = date(2025, 6, 1)
        for offset in range(5):
            engine.record_qualifying_activity(start + timedelta(days=offset))
        assert engine.performance.longest_streak == 5
        engine.record_qualifying_activity(start + timedelta(days=10))
        assert engine.performance.current_streak == 1
        assert engine.performance.longest_streak == 5


# ============ #
# Achievements #
# ============ #


class TestAchievements:
    def test_default_catalogue(self) -> None:
        ids = [a.id for a in default_achievements()]
        assert ids == [
            "first-steps",
            "closer",
            "streak-starter",
            "week-warrior",
            "call-champion",
            "top-producer",
            "knowledge-master",
            "consistency-king",
        ]

    def test_catalogue_copies_are_independent(self) -> None:
        a = default_achievements()
        a[0].unlocked = True
        assert not default_achievements()[0].unlocked

    def test_unlock_awards_xp_once(self, engine, recorder, clock) -> None:
        stats = AgentStats(closed_deals=1)
        unlocked = engine.evaluate_achievements(stats)
        assert [a.id for a in unlocked] == ["closer"]
        closer = engine.get_achievement("closer")
        assert closer.unlocked
        assert closer.unlocked_date == clock.now
        assert engine.performance.xp == 200
        assert engine.pending_xp_gain.xp_type == XPType.ACHIEVEMENT
        assert any(isinstance(e, AchievementUnlocked) for e in recorder)

        assert engine.evaluate_achievements(stats) == []
        assert engine.performance.xp == 200

    def test_knowledge_master_needs_courses(self, engine) -> None:
        assert engine.evaluate_achievements(AgentStats(total_courses=0)) == []
        unlocked = engine.evaluate_achievements(
            AgentStats(modules_completed=5, courses_completed=2, total_courses=2)
        )
        assert {a.id for a in unlocked} == {"first-steps", "knowledge-master"}

    def test_custom_catalogue(self) -> None:
        badge = Achievement(
            id="ten-tasks",
            name="Ten Tasks",
            predicate=lambda s: s.tasks_completed >= 10,
            xp_reward=0,
        )
        engine = GamificationEngine(achievements=[badge])
        assert engine.evaluate_achievements(AgentStats(tasks_completed=10)) == [badge]
        assert engine.performance.xp == 0
        assert engine.unlocked_achievements == [badge]

    def test_unknown_achievement(self, engine) -> None:
        with pytest.raises(NotFoundError):
            engine.get_achievement("nope")
