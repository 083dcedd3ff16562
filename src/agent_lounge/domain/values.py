"""Value objects for the Agent Lounge engine.

All types here are frozen dataclasses -- immutable, compared by value.
They represent log records, transient payloads, and aggregate measurements
that have no lifecycle of their own.
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from .enums import ActivityType, Disposition, LeadStatus, Trend, XPType


def new_id(prefix: str) -> str:
    """Return ``<prefix>-<epoch millis>-<random suffix>``.

    The random suffix keeps ids unique when several records are created
    within the same millisecond.
    """
    return f"{prefix}-{int(time.time() * 1000)}-{uuid.uuid4().hex[:6]}"


# ---------------------------------------------------------------------------
# Agent identity
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AgentProfile:
    """The agent a session belongs to."""

    agent_id: str
    name: str
    email: str = ""


# ---------------------------------------------------------------------------
# Lead history records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ActivityLog:
    """A call / text / email / meeting / note attached to a lead.

    Created only through the pipeline's ``add_activity`` operation.
    """

    id: str
    type: ActivityType
    notes: str
    timestamp: datetime
    disposition: Disposition | None = None
    agent_id: str = ""


@dataclass(frozen=True)
class StatusChange:
    """One entry of a lead's append-only status history."""

    from_status: LeadStatus
    to_status: LeadStatus
    timestamp: datetime


# ---------------------------------------------------------------------------
# Gamification payloads
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class XPGain:
    """Payload of the transient XP toast.

    ``bonus`` holds any level-up bonus granted within the same call.
    """

    amount: int
    reason: str
    xp_type: XPType = XPType.XP
    bonus: int = 0

    @property
    def total(self) -> int:
        return self.amount + self.bonus


@dataclass(frozen=True)
class AgentStats:
    """Aggregate counters that achievement predicates and the dashboard read.

    ``conversion_rate`` is the percentage of added leads that closed.
    """

    total_calls: int = 0
    weekly_calls: int = 0
    closed_deals: int = 0
    monthly_closes: int = 0
    current_streak: int = 0
    longest_streak: int = 0
    modules_completed: int = 0
    courses_completed: int = 0
    total_courses: int = 0
    tasks_completed: int = 0
    leads_added: int = 0
    quotes_created: int = 0
    calls_today: int = 0
    closes_today: int = 0
    daily_calls_target: int = 0
    daily_closes_target: int = 0
    conversion_rate: float = 0.0


@dataclass(frozen=True)
class DailyActivity:
    """Calls and closed deals on one calendar day."""

    day: date
    calls: int = 0
    deals: int = 0


# ---------------------------------------------------------------------------
# Bulk operation results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ImportResult:
    """Outcome of a bulk lead import."""

    created: tuple[str, ...] = ()
    skipped_invalid: int = 0
    duplicates: tuple[str, ...] = ()

    @property
    def created_count(self) -> int:
        return len(self.created)


@dataclass(frozen=True)
class RankedEntry:
    """A leaderboard row as produced by a single ``rank`` call."""

    position: int
    agent_id: str
    name: str
    level: int
    streak: int
    ap: float
    trend: Trend
    closed_deals: int = 0


@dataclass(frozen=True)
class DateWindow:
    """Inclusive calendar-day window used for weekly / monthly counters."""

    start: date
    end: date

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    @classmethod
    def week_of(cls, day: date) -> DateWindow:
        """Monday-to-Sunday week containing *day*."""
        start = day - timedelta(days=day.weekday())
        return cls(start, start + timedelta(days=6))

    @classmethod
    def month_of(cls, day: date) -> DateWindow:
        """Calendar month containing *day*."""
        start = day.replace(day=1)
        next_month = (start + timedelta(days=32)).replace(day=1)
        return cls(start, next_month - timedelta(days=1))
