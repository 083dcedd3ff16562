"""Service layer for the Agent Lounge engine.

Re-exports public service types for convenient top-level access::

    from agent_lounge.services import (
        AgentSession, LeadPipeline, TaskEngine, GamificationEngine,
        LeaderboardAggregator, NotificationCenter, ActivityFeed,
        ManualScheduler, AsyncioScheduler, parse_command,
    )
"""

from agent_lounge.services.activity_feed import ActivityFeed, FeedTemplate
from agent_lounge.services.challenges import ChallengeBoard
from agent_lounge.services.commands import (
    COMMAND_TYPES,
    BaseCommand,
    Command,
    CommandDispatcher,
    command_kinds,
    parse_command,
)
from agent_lounge.services.gamification import GamificationEngine, default_achievements
from agent_lounge.services.leaderboard import LeaderboardAggregator
from agent_lounge.services.notifications import NotificationCenter
from agent_lounge.services.pipeline import LeadPipeline, normalize_email, normalize_phone
from agent_lounge.services.quotes import QuoteBook
from agent_lounge.services.scheduling import (
    AsyncioScheduler,
    CancellationToken,
    ManualScheduler,
    Scheduler,
    TimerHandle,
)
from agent_lounge.services.session import AgentSession, SessionSnapshot
from agent_lounge.services.tasks import TaskEngine
from agent_lounge.services.training import CourseCatalog

__all__ = [
    # session
    "AgentSession",
    "SessionSnapshot",
    # engines
    "LeadPipeline",
    "normalize_email",
    "normalize_phone",
    "TaskEngine",
    "GamificationEngine",
    "default_achievements",
    "LeaderboardAggregator",
    "NotificationCenter",
    "ActivityFeed",
    "FeedTemplate",
    "QuoteBook",
    "ChallengeBoard",
    "CourseCatalog",
    # scheduling
    "Scheduler",
    "ManualScheduler",
    "AsyncioScheduler",
    "CancellationToken",
    "TimerHandle",
    # commands
    "BaseCommand",
    "Command",
    "COMMAND_TYPES",
    "CommandDispatcher",
    "command_kinds",
    "parse_command",
]
