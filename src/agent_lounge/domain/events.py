"""Domain events for the Agent Lounge engine.

Every event is a frozen dataclass inheriting from ``DomainEvent``.  Events are
the integration mechanism between the engine's components: services emit
events; sinks (notification center, activity feed, event store, UI adapters)
react.

All events carry a ``source_id`` identifying the originating agent or
component, and a ``timestamp`` the event bus fills from the session clock
when the event is published.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from .enums import ActivityType, LeadStatus, XPType

# ---------------------------------------------------------------------------
# Base event
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DomainEvent:
    """Base class for all domain events."""

    timestamp: datetime | None = None
    source_id: str = ""


# ---------------------------------------------------------------------------
# Pipeline events
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LeadCreated(DomainEvent):
    lead_id: str = ""
    lead_name: str = ""


@dataclass(frozen=True)
class LeadStatusChanged(DomainEvent):
    """A lead moved between pipeline stages (never emitted for no-ops)."""

    lead_id: str = ""
    lead_name: str = ""
    from_status: LeadStatus = LeadStatus.NEW
    to_status: LeadStatus = LeadStatus.NEW


@dataclass(frozen=True)
class ActivityLogged(DomainEvent):
    lead_id: str = ""
    activity_id: str = ""
    activity_type: ActivityType = ActivityType.NOTE


# ---------------------------------------------------------------------------
# Task events
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TaskCompleted(DomainEvent):
    task_id: str = ""
    title: str = ""
    xp_awarded: int = 0


@dataclass(frozen=True)
class TaskReopened(DomainEvent):
    task_id: str = ""
    title: str = ""


# ---------------------------------------------------------------------------
# Gamification events
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class XPAwarded(DomainEvent):
    amount: int = 0
    reason: str = ""
    xp_type: XPType = XPType.XP
    total_xp: int = 0


@dataclass(frozen=True)
class LevelUp(DomainEvent):
    """The agent crossed a level boundary; ``bonus`` XP was granted."""

    new_level: int = 1
    bonus: int = 0


@dataclass(frozen=True)
class StreakUpdated(DomainEvent):
    current_streak: int = 0
    longest_streak: int = 0
    reset: bool = False


@dataclass(frozen=True)
class AchievementUnlocked(DomainEvent):
    achievement_id: str = ""
    achievement_name: str = ""
    xp_reward: int = 0


@dataclass(frozen=True)
class ChallengeCompleted(DomainEvent):
    challenge_id: str = ""
    title: str = ""
    xp_reward: int = 0


# ---------------------------------------------------------------------------
# Sales events
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class QuoteCreated(DomainEvent):
    quote_id: str = ""
    client_name: str = ""
    monthly_premium: float = 0.0


@dataclass(frozen=True)
class CallLogged(DomainEvent):
    lead_id: str | None = None
    duration_minutes: int = 0
    xp_awarded: int = 0


@dataclass(frozen=True)
class ModuleCompleted(DomainEvent):
    course_id: str = ""
    module_id: str = ""
    course_completed: bool = False
