"""Domain entities for the Agent Lounge engine.

Entities have *identity* (a unique id that persists across mutations) and a
mutable lifecycle.  They are mutated only through the services that own them;
UI layers receive deep copies via ``AgentSession.snapshot()``.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, datetime

from .enums import (
    AchievementCategory,
    ChallengeType,
    FeedItemType,
    LeadStatus,
    NotificationType,
    Period,
    Priority,
    Product,
    QuoteStatus,
    TaskCategory,
    Trend,
)
from .values import ActivityLog, AgentStats, StatusChange

# ---------------------------------------------------------------------------
# Lead
# ---------------------------------------------------------------------------

@dataclass
class Reminder:
    """A follow-up reminder attached to a lead.

    ``completed`` only ever moves from ``False`` to ``True``.
    """

    id: str
    date: date
    time: str
    message: str
    completed: bool = False

    def complete(self) -> bool:
        """Mark complete.  Returns ``False`` if it already was."""
        if self.completed:
            return False
        self.completed = True
        return True


@dataclass
class Lead:
    """A prospect moving through the sales pipeline."""

    id: str
    name: str
    email: str = ""
    phone: str = ""
    state: str = ""
    product: str = ""
    source: str = ""
    assigned_to: str = ""
    created_at: datetime = field(default_factory=datetime.now)
    last_contact_date: date | None = None
    status: LeadStatus = LeadStatus.NEW
    tags: set[str] = field(default_factory=set)
    notes: list[ActivityLog] = field(default_factory=list)
    reminders: list[Reminder] = field(default_factory=list)
    status_history: list[StatusChange] = field(default_factory=list)

    @property
    def open_reminders(self) -> list[Reminder]:
        return [r for r in self.reminders if not r.completed]

    def find_reminder(self, reminder_id: str) -> Reminder | None:
        for reminder in self.reminders:
            if reminder.id == reminder_id:
                return reminder
        return None


# ---------------------------------------------------------------------------
# Task
# ---------------------------------------------------------------------------

@dataclass
class Task:
    """A to-do item whose completion is worth ``performance_impact`` XP."""

    id: str
    title: str
    description: str = ""
    category: TaskCategory = TaskCategory.ADMIN
    due_date: str = ""
    performance_impact: int = 0
    completed: bool = False
    assigned_to: str = ""
    priority: Priority = Priority.MEDIUM


# ---------------------------------------------------------------------------
# Gamification
# ---------------------------------------------------------------------------

@dataclass
class Performance:
    """One agent's XP ledger and streak counters.

    ``level`` is always derived from ``xp`` so the two can never disagree.
    """

    xp: int = 0
    current_streak: int = 0
    longest_streak: int = 0
    last_activity_date: date | None = None
    xp_per_level: int = 1000

    @property
    def level(self) -> int:
        return self.xp // self.xp_per_level + 1

    @property
    def xp_into_level(self) -> int:
        """XP earned since the current level started."""
        return self.xp % self.xp_per_level

    @property
    def xp_to_next_level(self) -> int:
        return self.xp_per_level - self.xp_into_level


AchievementPredicate = Callable[[AgentStats], bool]


@dataclass
class Achievement:
    """A badge unlocked once when ``predicate`` first holds."""

    id: str
    name: str
    predicate: AchievementPredicate
    xp_reward: int = 0
    description: str = ""
    category: AchievementCategory = AchievementCategory.MILESTONE
    icon: str = ""
    unlocked: bool = False
    unlocked_date: datetime | None = None


# ---------------------------------------------------------------------------
# Leaderboard
# ---------------------------------------------------------------------------

def _zero_ap() -> dict[Period, float]:
    return {period: 0.0 for period in Period}


@dataclass
class LeaderboardEntry:
    """Per-agent leaderboard row; ``ap`` maps each period to its AP total."""

    id: str
    name: str
    level: int = 1
    streak: int = 0
    ap: dict[Period, float] = field(default_factory=_zero_ap)
    trend: Trend = Trend.SAME
    closed_deals: int = 0


# ---------------------------------------------------------------------------
# Notifications and feed
# ---------------------------------------------------------------------------

@dataclass
class Notification:
    id: str
    type: NotificationType
    title: str
    description: str
    timestamp: datetime
    read: bool = False


@dataclass
class FeedItem:
    """One entry of the cross-agent activity feed."""

    id: str
    type: FeedItemType
    agent_name: str
    message: str
    timestamp: datetime
    highlight: bool = False


# ---------------------------------------------------------------------------
# Quotes, challenges, training
# ---------------------------------------------------------------------------

@dataclass
class Quote:
    id: str
    client_name: str
    product: Product
    coverage_amount: float
    monthly_premium: float
    created_date: date
    expires_date: date
    client_email: str = ""
    client_phone: str = ""
    lead_id: str | None = None
    term: int | None = None
    status: QuoteStatus = QuoteStatus.DRAFT
    agent_id: str = ""
    notes: str = ""


@dataclass
class DailyChallenge:
    id: str
    title: str
    type: ChallengeType
    target: int
    xp_reward: int
    description: str = ""
    current: int = 0
    bonus_xp: int = 0
    completed: bool = False

    @property
    def remaining(self) -> int:
        return max(0, self.target - self.current)


@dataclass
class TrainingModule:
    id: str
    title: str
    duration: str = ""
    completed: bool = False


@dataclass
class Course:
    id: str
    title: str
    description: str = ""
    category: str = "product"
    required: bool = False
    modules: list[TrainingModule] = field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        return bool(self.modules) and all(m.completed for m in self.modules)

    @property
    def progress(self) -> float:
        """Fraction of modules completed, in ``[0, 1]``."""
        if not self.modules:
            return 0.0
        return sum(1 for m in self.modules if m.completed) / len(self.modules)

    def find_module(self, module_id: str) -> TrainingModule | None:
        for module in self.modules:
            if module.id == module_id:
                return module
        return None

