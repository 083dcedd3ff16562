"""Tests for domain entities: Lead, Reminder, Performance, Course, DailyChallenge."""

from __future__ import annotations

from datetime import date, datetime

from agent_lounge.domain.entities import (
    Course,
    DailyChallenge,
    LeaderboardEntry,
    Lead,
    Performance,
    Reminder,
    TrainingModule,
)
from agent_lounge.domain.enums import ChallengeType, LeadStatus, Period, Trend


# ===== #
# Lead  #
# ===== #


class TestLead:
    def test_defaults(self) -> None:
        lead = Lead(id="lead-1", name="Michael Chen")
        assert lead.status == LeadStatus.NEW
        assert lead.tags == set()
        assert lead.notes == []
        assert lead.reminders == []
        assert lead.last_contact_date is None
        assert isinstance(lead.created_at, datetime)

    def test_open_reminders_excludes_completed(self) -> None:
        lead = Lead(id="lead-1", name="Michael Chen")
        done = Reminder("r1", date(2025, 6, 1), "09:00", "call", completed=True)
        open_ = Reminder("r2", date(2025, 6, 2), "10:00", "email")
        lead.reminders.extend([done, open_])
        assert lead.open_reminders == [open_]

    def test_find_reminder(self) -> None:
        lead = Lead(id="lead-1", name="Michael Chen")
        reminder = Reminder("r1", date(2025, 6, 1), "09:00", "call")
        lead.reminders.append(reminder)
        assert lead.find_reminder("r1") is reminder
        assert lead.find_reminder("missing") is None

    def test_terminal_statuses(self) -> None:
        assert LeadStatus.CLOSED.is_terminal
        assert LeadStatus.LOST.is_terminal
        assert not LeadStatus.PROPOSAL.is_terminal


class TestReminder:
    def test_complete_is_one_way(self) -> None:
        reminder = Reminder("r1", date(2025, 6, 1), "09:00", "call")
        assert reminder.complete() is True
        assert reminder.completed is True
        assert reminder.complete() is False
        assert reminder.completed is True


# =========== #
# Performance #
# =========== #


class TestPerformance:
    def test_level_derived_from_xp(self) -> None:
        perf = Performance()
        assert perf.level == 1
        perf.xp = 999
        assert perf.level == 1
        perf.xp = 1000
        assert perf.level == 2
        perf.xp = 2450
        assert perf.level == 3

    def test_progress_within_level(self) -> None:
        perf = Performance(xp=2450)
        assert perf.xp_into_level == 450
        assert perf.xp_to_next_level == 550

    def test_custom_xp_per_level(self) -> None:
        perf = Performance(xp=250, xp_per_level=100)
        assert perf.level == 3


# ======================= #
# Training and challenges #
# ======================= #


class TestCourse:
    def test_progress_and_completion(self) -> None:
        course = Course(
            "c1",
            "Term Life Basics",
            modules=[TrainingModule("m1", "One", completed=True), TrainingModule("m2", "Two")],
        )
        assert course.progress == 0.5
        assert not course.is_complete
        course.modules[1].completed = True
        assert course.progress == 1.0
        assert course.is_complete

    def test_empty_course_is_not_complete(self) -> None:
        course = Course("c1", "Empty")
        assert course.progress == 0.0
        assert not course.is_complete

    def test_find_module(self) -> None:
        module = TrainingModule("m1", "One")
        course = Course("c1", "Course", modules=[module])
        assert course.find_module("m1") is module
        assert course.find_module("m9") is None


class TestDailyChallenge:
    def test_remaining_never_negative(self) -> None:
        challenge = DailyChallenge("dc-1", "Call Crusher", ChallengeType.CALLS, target=10, xp_reward=50, current=7)
        assert challenge.remaining == 3
        challenge.current = 12
        assert challenge.remaining == 0


class TestLeaderboardEntry:
    def test_every_period_starts_at_zero(self) -> None:
        entry = LeaderboardEntry(id="a1", name="Agent")
        assert set(entry.ap) == set(Period)
        assert all(v == 0.0 for v in entry.ap.values())
        assert entry.trend == Trend.SAME

    def test_ap_maps_are_independent(self) -> None:
        a = LeaderboardEntry(id="a1", name="A")
        b = LeaderboardEntry(id="a2", name="B")
        a.ap[Period.DAILY] = 100.0
        assert b.ap[Period.DAILY] == 0.0
