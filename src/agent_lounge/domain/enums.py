"""Domain enumerations for the Agent Lounge engine.

These enums capture the fixed vocabularies used across the domain layer:
pipeline stages, activity and disposition kinds, task categories, leaderboard
periods and trends, notification and feed item types, quote lifecycle, and
the error taxonomy.
"""

from enum import Enum


class LeadStatus(Enum):
    """Pipeline stage of a lead.

    ``CLOSED`` and ``LOST`` are terminal by convention only; any stage is
    reachable from any other stage.
    """

    NEW = "new"
    CONTACTED = "contacted"
    QUALIFIED = "qualified"
    PROPOSAL = "proposal"
    CLOSED = "closed"
    LOST = "lost"

    @property
    def is_terminal(self) -> bool:
        return self in (LeadStatus.CLOSED, LeadStatus.LOST)


class ActivityType(Enum):
    """Kind of contact event logged against a lead."""

    CALL = "call"
    TEXT = "text"
    EMAIL = "email"
    MEETING = "meeting"
    NOTE = "note"


class Disposition(Enum):
    """Outcome of a contact attempt."""

    INTERESTED = "interested"
    CALLBACK = "callback"
    NOT_INTERESTED = "not_interested"
    NO_ANSWER = "no_answer"
    VOICEMAIL = "voicemail"
    APPOINTMENT_SET = "appointment_set"


class TaskCategory(Enum):
    CALLS = "calls"
    TRAINING = "training"
    ADMIN = "admin"
    FOLLOWUP = "followup"


class Priority(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Period(Enum):
    """Leaderboard time bucket for Annual Premium figures."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class Trend(Enum):
    """Rank movement relative to the previous snapshot of the same period."""

    UP = "up"
    DOWN = "down"
    SAME = "same"


class AchievementCategory(Enum):
    SALES = "sales"
    TRAINING = "training"
    STREAK = "streak"
    MILESTONE = "milestone"


class NotificationType(Enum):
    ACHIEVEMENT = "achievement"
    MESSAGE = "message"
    ALERT = "alert"
    REMINDER = "reminder"
    EARNING = "earning"
    TRAINING = "training"


class FeedItemType(Enum):
    DEAL = "deal"
    CALL = "call"
    LEAD = "lead"
    ACHIEVEMENT = "achievement"
    STREAK = "streak"
    TRAINING = "training"
    EARNING = "earning"


class XPType(Enum):
    """Presentation hint carried by an XP toast."""

    XP = "xp"
    STREAK = "streak"
    ACHIEVEMENT = "achievement"
    BONUS = "bonus"


class Product(Enum):
    TERM = "term"
    WHOLE = "whole"
    IUL = "iul"
    FINAL_EXPENSE = "final_expense"


class QuoteStatus(Enum):
    DRAFT = "draft"
    SENT = "sent"
    VIEWED = "viewed"
    ACCEPTED = "accepted"
    EXPIRED = "expired"


class ChallengeType(Enum):
    CALLS = "calls"
    LEADS = "leads"
    TRAINING = "training"
    STREAK = "streak"
    SPECIAL = "special"


class ErrorKind(Enum):
    """Error taxonomy surfaced to callers of the engine."""

    NOT_FOUND = "not_found"
    DUPLICATE_LEAD = "duplicate_lead"
    INVALID_AMOUNT = "invalid_amount"
