"""Shared fixtures for the Agent Lounge test suite."""

from __future__ import annotations

from collections.abc import Iterator
from datetime import datetime, timedelta

import pytest

from agent_lounge.domain.entities import Course, DailyChallenge, TrainingModule
from agent_lounge.domain.enums import ChallengeType, FeedItemType
from agent_lounge.domain.values import AgentProfile
from agent_lounge.infrastructure.event_bus import EventBus
from agent_lounge.services.activity_feed import FeedTemplate
from agent_lounge.services.scheduling import ManualScheduler
from agent_lounge.services.session import AgentSession

# ---------------------------------------------------------------------------
# Time
# ---------------------------------------------------------------------------


class FakeClock:
    """Settable wall clock; call it to read the current time."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    """Wednesday 2025-06-11, 10:00."""
    return FakeClock(datetime(2025, 6, 11, 10, 0, 0))


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def bus(clock: FakeClock) -> EventBus:
    return EventBus(clock=clock)


@pytest.fixture
def recorder(bus: EventBus) -> list:
    """Every event published on ``bus``, in order."""
    events: list = []
    bus.subscribe_all(events.append)
    return events


# ---------------------------------------------------------------------------
# Catalogue fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def profile() -> AgentProfile:
    return AgentProfile(agent_id="agent-1", name="Alex Johnson", email="agent@example.com")


def make_courses() -> list[Course]:
    return [
        Course(
            "course-1",
            "Term Life Basics",
            required=True,
            modules=[
                TrainingModule("mod-1", "What is Term Life?"),
                TrainingModule("mod-2", "Policy Riders"),
            ],
        ),
        Course(
            "course-2",
            "Sales Fundamentals",
            modules=[TrainingModule("mod-3", "Building Rapport")],
        ),
    ]


def make_challenges() -> list[DailyChallenge]:
    return [
        DailyChallenge("dc-1", "Call Crusher", ChallengeType.CALLS, target=3, xp_reward=50),
        DailyChallenge("dc-2", "Lead Machine", ChallengeType.LEADS, target=2, xp_reward=30),
        DailyChallenge("dc-3", "Knowledge Seeker", ChallengeType.TRAINING, target=1, xp_reward=25, bonus_xp=10),
    ]


TEMPLATES = (
    FeedTemplate(FeedItemType.DEAL, "Sarah Mitchell", "closed a $750K Whole Life policy!", highlight=True),
    FeedTemplate(FeedItemType.CALL, "Marcus Chen", "logged a 25min call"),
)


@pytest.fixture
def session(profile: AgentProfile, clock: FakeClock, scheduler: ManualScheduler) -> Iterator[AgentSession]:
    """A fresh session with two courses, three challenges and feed templates."""
    s = AgentSession(
        profile,
        clock=clock,
        scheduler=scheduler,
        courses=make_courses(),
        challenges=make_challenges(),
        feed_templates=TEMPLATES,
    )
    yield s
    s.close()
