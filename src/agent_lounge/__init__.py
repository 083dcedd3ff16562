"""Agent Lounge engine.

In-memory domain engine for an insurance agent productivity portal: lead
pipeline, tasks, XP / levels / streaks / achievements, leaderboard
aggregation, notifications and a live activity feed.
"""

__version__ = "0.1.0"

from agent_lounge.domain.values import AgentProfile
from agent_lounge.services.session import AgentSession, SessionSnapshot

__all__ = [
    "AgentProfile",
    "AgentSession",
    "SessionSnapshot",
]
