"""Domain layer for the Agent Lounge engine.

Re-exports all public domain types so that consumers can write::

    from agent_lounge.domain import Lead, LeadStatus, NotFoundError
"""

# -- Enumerations -------------------------------------------------------------
from .enums import (
    AchievementCategory,
    ActivityType,
    ChallengeType,
    Disposition,
    ErrorKind,
    FeedItemType,
    LeadStatus,
    NotificationType,
    Period,
    Priority,
    Product,
    QuoteStatus,
    TaskCategory,
    Trend,
    XPType,
)

# -- Value Objects ------------------------------------------------------------
from .values import (
    ActivityLog,
    AgentProfile,
    AgentStats,
    ImportResult,
    RankedEntry,
    StatusChange,
    XPGain,
    new_id,
)

# -- Entities -----------------------------------------------------------------
from .entities import (
    Achievement,
    Course,
    DailyChallenge,
    FeedItem,
    Lead,
    LeaderboardEntry,
    Notification,
    Performance,
    Quote,
    Reminder,
    Task,
    TrainingModule,
)

# -- Domain Events ------------------------------------------------------------
from .events import (
    AchievementUnlocked,
    ActivityLogged,
    CallLogged,
    ChallengeCompleted,
    DomainEvent,
    LeadCreated,
    LeadStatusChanged,
    LevelUp,
    ModuleCompleted,
    QuoteCreated,
    StreakUpdated,
    TaskCompleted,
    TaskReopened,
    XPAwarded,
)

# -- Exceptions ---------------------------------------------------------------
from .exceptions import (
    AgentLoungeError,
    DuplicateLeadError,
    InvalidAmountError,
    NotFoundError,
)

__all__ = [
    # Enums
    "AchievementCategory",
    "ActivityType",
    "ChallengeType",
    "Disposition",
    "ErrorKind",
    "FeedItemType",
    "LeadStatus",
    "NotificationType",
    "Period",
    "Priority",
    "Product",
    "QuoteStatus",
    "TaskCategory",
    "Trend",
    "XPType",
    # Values
    "ActivityLog",
    "AgentProfile",
    "AgentStats",
    "ImportResult",
    "RankedEntry",
    "StatusChange",
    "XPGain",
    "new_id",
    # Entities
    "Achievement",
    "Course",
    "DailyChallenge",
    "FeedItem",
    "Lead",
    "LeaderboardEntry",
    "Notification",
    "Performance",
    "Quote",
    "Reminder",
    "Task",
    "TrainingModule",
    # Events
    "AchievementUnlocked",
    "ActivityLogged",
    "CallLogged",
    "ChallengeCompleted",
    "DomainEvent",
    "LeadCreated",
    "LeadStatusChanged",
    "LevelUp",
    "ModuleCompleted",
    "QuoteCreated",
    "StreakUpdated",
    "TaskCompleted",
    "TaskReopened",
    "XPAwarded",
    # Exceptions
    "AgentLoungeError",
    "DuplicateLeadError",
    "InvalidAmountError",
    "NotFoundError",
]
