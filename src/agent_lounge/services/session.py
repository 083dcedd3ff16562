"""AgentSession -- the explicit per-agent handle over the whole engine.

A session is created once per signed-in agent and torn down with
:meth:`AgentSession.close`.  It owns the agent's pipeline, tasks,
gamification state, notifications, activity feed, quotes, challenges and
courses, and wires them together through a private ``EventBus``.  Nothing in
the engine is module-global: UI layers receive the session (or a
``SessionSnapshot``) explicitly.

Composite operations (``log_call``, ``add_lead``, ``create_quote`` ...)
reproduce the product's multi-step workflows and re-evaluate achievements
when they finish.
"""

from __future__ import annotations

import copy
import logging
import random
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any

from agent_lounge.domain.entities import (
    Achievement,
    Course,
    DailyChallenge,
    FeedItem,
    Lead,
    Notification,
    Performance,
    Quote,
    Reminder,
    Task,
)
from agent_lounge.domain.enums import (
    ActivityType,
    ChallengeType,
    Disposition,
    FeedItemType,
    LeadStatus,
    NotificationType,
    Period,
    Priority,
    Product,
    QuoteStatus,
    TaskCategory,
)
from agent_lounge.domain.events import (
    AchievementUnlocked,
    CallLogged,
    ChallengeCompleted,
    LevelUp,
    ModuleCompleted,
)
from agent_lounge.domain.exceptions import InvalidAmountError
from agent_lounge.domain.values import (
    ActivityLog,
    AgentProfile,
    AgentStats,
    DailyActivity,
    DateWindow,
    RankedEntry,
    XPGain,
)
from agent_lounge.infrastructure.config import FeedConfig, GamificationConfig, SessionConfig
from agent_lounge.infrastructure.event_bus import EventBus, EventStore
from agent_lounge.infrastructure.preferences import ONBOARDING_COMPLETED, PreferenceStore
from agent_lounge.services.activity_feed import ActivityFeed, FeedTemplate
from agent_lounge.services.challenges import ChallengeBoard
from agent_lounge.services.commands import BaseCommand, CommandDispatcher
from agent_lounge.services.gamification import GamificationEngine
from agent_lounge.services.leaderboard import LeaderboardAggregator
from agent_lounge.services.notifications import NotificationCenter
from agent_lounge.services.pipeline import LeadPipeline
from agent_lounge.services.quotes import QuoteBook
from agent_lounge.services.scheduling import ManualScheduler, Scheduler
from agent_lounge.services.tasks import TaskEngine
from agent_lounge.services.training import CourseCatalog

logger = logging.getLogger(__name__)

LEAD_ADDED = "Lead added"
CALL_LOGGED = "Call logged"
QUOTE_CREATED = "Quote created"


@dataclass(frozen=True)
class SessionSnapshot:
    """Immutable view of a session for rendering.

    Collections are deep copies: mutating them never touches engine state.
    """

    profile: AgentProfile
    performance: Performance
    stats: AgentStats
    leads: tuple[Lead, ...]
    tasks: tuple[Task, ...]
    achievements: tuple[Achievement, ...]
    notifications: tuple[Notification, ...]
    unread_count: int
    feed: tuple[FeedItem, ...]
    quotes: tuple[Quote, ...]
    challenges: tuple[DailyChallenge, ...]
    courses: tuple[Course, ...]
    pending_xp_gain: XPGain | None
    pending_level_up: int | None
    onboarding_completed: bool

    @property
    def level(self) -> int:
        return self.performance.level


class AgentSession:
    """One agent's engine instance.

    Parameters
    ----------
    profile:
        The signed-in agent.
    gamification_config, feed_config, session_config:
        Typed configuration; defaults are the product values.
    clock:
        Returns the current time for every timestamp the session creates.
    scheduler:
        Timer source for the activity feed.  Defaults to a
        ``ManualScheduler`` (nothing fires until it is advanced).
    leaderboard:
        Shared cross-agent aggregator.  The session registers its agent and
        links the live ``Performance`` record; a private aggregator is
        created when omitted.
    preferences:
        Key-value scope holding the onboarding flag.
    achievements:
        Custom achievement catalogue (default catalogue when omitted).
    courses, challenges:
        Initial training catalogue and daily challenges.
    feed_templates:
        Canned events for the simulated activity feed.
    """

    def __init__(
        self,
        profile: AgentProfile,
        gamification_config: GamificationConfig | None = None,
        feed_config: FeedConfig | None = None,
        session_config: SessionConfig | None = None,
        clock: Callable[[], datetime] = datetime.now,
        scheduler: Scheduler | None = None,
        leaderboard: LeaderboardAggregator | None = None,
        preferences: PreferenceStore | None = None,
        achievements: Iterable[Achievement] | None = None,
        courses: Iterable[Course] = (),
        challenges: Iterable[DailyChallenge] = (),
        feed_templates: Sequence[FeedTemplate] = (),
    ) -> None:
        self._profile = profile
        self._feed_config = feed_config or FeedConfig()
        self._feed_config.validate()
        self._session_config = session_config or SessionConfig()
        self._session_config.validate()
        self._clock = clock
        self._scheduler = scheduler or ManualScheduler()
        self._preferences = preferences or PreferenceStore()
        self._feed_templates = tuple(feed_templates)
        self._closed = False

        agent_id = profile.agent_id
        self.event_bus = EventBus(clock=clock)
        self.event_store = EventStore(max_size=self._session_config.event_history)
        self.event_bus.subscribe_all(self.event_store.append)

        self.gamification = GamificationEngine(
            config=gamification_config,
            achievements=achievements,
            event_bus=self.event_bus,
            clock=clock,
            source_id=agent_id,
        )
        self.pipeline = LeadPipeline(owner_id=agent_id, clock=clock, event_bus=self.event_bus)
        self.tasks = TaskEngine(self.gamification, clock=clock, event_bus=self.event_bus, owner_id=agent_id)
        self.notifications = NotificationCenter(clock=clock)
        self.feed = ActivityFeed(
            self._scheduler,
            capacity=self._feed_config.capacity,
            highlight_seconds=self._feed_config.highlight_seconds,
            clock=clock,
        )
        self.quotes = QuoteBook(
            validity_days=self._session_config.quote_validity_days,
            clock=clock,
            event_bus=self.event_bus,
            owner_id=agent_id,
        )
        self.challenges = ChallengeBoard(self.gamification, challenges, event_bus=self.event_bus, owner_id=agent_id)
        self.courses = CourseCatalog(courses, event_bus=self.event_bus, owner_id=agent_id)

        self.leaderboard = leaderboard if leaderboard is not None else LeaderboardAggregator()
        self.leaderboard.register(agent_id, profile.name, performance=self.gamification.performance)

        self._call_dates: list[date] = []
        self._close_dates: list[date] = []

        self._wire_events()
        self._dispatcher = CommandDispatcher(self)

        if self._feed_config.simulate and self._feed_templates:
            self.start_feed_simulation()
        logger.info("AgentSession opened for %s (%s)", profile.name, agent_id)

    # ===================================================================== #
    #  Event wiring                                                          #
    # ===================================================================== #

    def _wire_events(self) -> None:
        self.event_bus.subscribe(AchievementUnlocked, self._on_achievement_unlocked)
        self.event_bus.subscribe(LevelUp, self._on_level_up)
        self.event_bus.subscribe(ChallengeCompleted, self._on_challenge_completed)
        self.event_bus.subscribe(ModuleCompleted, self._on_module_completed)

    def _on_achievement_unlocked(self, event: AchievementUnlocked) -> None:
        self.notifications.notify(
            NotificationType.ACHIEVEMENT,
            "Achievement Unlocked!",
            f'You earned "{event.achievement_name}" (+{event.xp_reward} XP)',
        )
        self.feed.post(
            FeedItemType.ACHIEVEMENT,
            self._profile.name,
            f'unlocked "{event.achievement_name}" badge',
        )

    def _on_level_up(self, event: LevelUp) -> None:
        self.notifications.notify(
            NotificationType.ALERT,
            "Level Up!",
            f"You reached level {event.new_level} (+{event.bonus} bonus XP)",
        )

    def _on_challenge_completed(self, event: ChallengeCompleted) -> None:
        self.notifications.notify(
            NotificationType.EARNING,
            "Challenge Complete",
            f"{event.title}: +{event.xp_reward} XP",
        )

    def _on_module_completed(self, event: ModuleCompleted) -> None:
        if event.course_completed:
            course = self.courses.get(event.course_id)
            self.feed.post(FeedItemType.TRAINING, self._profile.name, f'completed "{course.title}" course')

    # ===================================================================== #
    #  Accessors                                                             #
    # ===================================================================== #

    @property
    def profile(self) -> AgentProfile:
        return self._profile

    @property
    def performance(self) -> Performance:
        return self.gamification.performance

    @property
    def scheduler(self) -> Scheduler:
        return self._scheduler

    @property
    def preferences(self) -> PreferenceStore:
        return self._preferences

    @property
    def closed(self) -> bool:
        return self._closed

    def today(self) -> date:
        return self._clock().date()

    def stats(self) -> AgentStats:
        """Aggregate counters for achievement predicates and dashboards."""
        today = self.today()
        week = DateWindow.week_of(today)
        month = DateWindow.month_of(today)
        perf = self.gamification.performance
        cfg = self.gamification.config
        closed = len(self._close_dates)
        leads = len(self.pipeline)
        return AgentStats(
            total_calls=len(self._call_dates),
            weekly_calls=sum(1 for d in self._call_dates if week.contains(d)),
            closed_deals=closed,
            monthly_closes=sum(1 for d in self._close_dates if month.contains(d)),
            current_streak=perf.current_streak,
            longest_streak=perf.longest_streak,
            modules_completed=self.courses.modules_completed,
            courses_completed=self.courses.courses_completed,
            total_courses=len(self.courses.courses),
            tasks_completed=self.tasks.completed_count,
            leads_added=leads,
            quotes_created=len(self.quotes),
            calls_today=self.calls_on(today),
            closes_today=self._close_dates.count(today),
            daily_calls_target=cfg.daily_calls_target,
            daily_closes_target=cfg.daily_closes_target,
            conversion_rate=100.0 * closed / leads if leads else 0.0,
        )

    def calls_on(self, day: date) -> int:
        return sum(1 for d in self._call_dates if d == day)

    def weekly_history(self, days: int = 7) -> list[DailyActivity]:
        """Calls and closes per day for the last *days* days, oldest first."""
        today = self.today()
        history = []
        for offset in range(days - 1, -1, -1):
            day = today - timedelta(days=offset)
            history.append(
                DailyActivity(day=day, calls=self.calls_on(day), deals=self._close_dates.count(day))
            )
        return history

    def evaluate_achievements(self) -> list[Achievement]:
        return self.gamification.evaluate_achievements(self.stats())

    # ===================================================================== #
    #  Leads                                                                 #
    # ===================================================================== #

    def add_lead(
        self,
        name: str,
        email: str = "",
        phone: str = "",
        state: str = "",
        product: str = "",
        source: str = "",
    ) -> Lead:
        """Create a lead, award ``lead_added_xp`` and advance lead challenges."""
        lead = self.pipeline.create_lead(
            name=name, email=email, phone=phone, state=state, product=product, source=source
        )
        self.gamification.add_xp(self.gamification.config.lead_added_xp, LEAD_ADDED)
        self.challenges.progress(ChallengeType.LEADS)
        self.evaluate_achievements()
        return lead

    def update_lead_status(
        self,
        lead_id: str,
        status: LeadStatus,
        annual_premium: float | None = None,
    ) -> bool:
        """Move a lead between pipeline stages.

        Moving a lead into ``closed`` counts a close, credits the sale's AP
        on the leaderboard and publishes a highlighted ``deal`` feed item.
        When *annual_premium* is omitted the AP is taken from the lead's most
        recent quote not yet accepted (``monthly_premium * 12``), if any.
        A lead reopened and closed again is credited only once.
        """
        if annual_premium is not None and annual_premium < 0:
            raise InvalidAmountError(annual_premium)
        changed = self.pipeline.update_status(lead_id, status)
        if changed and status == LeadStatus.CLOSED:
            self._record_close(self.pipeline.get(lead_id), annual_premium)
        self.evaluate_achievements()
        return changed

    def _record_close(self, lead: Lead, annual_premium: float | None) -> None:
        closes = sum(1 for change in lead.status_history if change.to_status == LeadStatus.CLOSED)
        if closes > 1:
            # a reopened lead closing again is the same sale
            logger.info("Lead %s re-closed; sale already credited", lead.id)
            return
        self._close_dates.append(self.today())
        agent_id = self._profile.agent_id
        self.leaderboard.record_close(agent_id)

        open_quotes = [q for q in self.quotes.for_lead(lead.id) if q.status != QuoteStatus.ACCEPTED]
        if annual_premium is None and open_quotes:
            latest = open_quotes[-1]
            annual_premium = latest.monthly_premium * 12
            self.quotes.update_status(latest.id, QuoteStatus.ACCEPTED)
        if annual_premium:
            self.leaderboard.record_ap(agent_id, annual_premium)
            message = f"closed a ${annual_premium:,.0f} AP policy with {lead.name}!"
        else:
            message = f"closed a deal with {lead.name}!"
        self.feed.post(FeedItemType.DEAL, self._profile.name, message, highlight=True)

    def log_activity(
        self,
        lead_id: str,
        activity_type: ActivityType,
        notes: str = "",
        disposition: Disposition | None = None,
    ) -> ActivityLog:
        return self.pipeline.add_activity(lead_id, activity_type, notes, disposition)

    def add_reminder(self, lead_id: str, day: date, time: str, message: str) -> Reminder:
        return self.pipeline.add_reminder(lead_id, day, time, message)

    def complete_reminder(self, lead_id: str, reminder_id: str) -> bool:
        return self.pipeline.complete_reminder(lead_id, reminder_id)

    # ===================================================================== #
    #  Calls                                                                 #
    # ===================================================================== #

    def log_call(
        self,
        duration_minutes: int,
        disposition: Disposition | None = None,
        notes: str = "",
        lead_id: str | None = None,
    ) -> XPGain:
        """Log a phone call.

        Awards ``min(duration * call_xp_per_minute, call_xp_cap)`` XP, counts
        the call, advances call challenges, counts as a qualifying activity
        and posts a ``call`` feed item.  When *lead_id* is given a ``call``
        activity is appended to that lead first (unknown ids raise
        ``NotFoundError`` before anything else changes).
        """
        if duration_minutes < 0:
            raise InvalidAmountError(duration_minutes)
        if lead_id is not None:
            self.pipeline.add_activity(lead_id, ActivityType.CALL, notes, disposition)

        cfg = self.gamification.config
        xp = min(duration_minutes * cfg.call_xp_per_minute, cfg.call_xp_cap)
        gain = self.gamification.add_xp(xp, CALL_LOGGED)
        today = self.today()
        self._call_dates.append(today)
        self.challenges.progress(ChallengeType.CALLS)
        self.gamification.record_qualifying_activity(today)
        self.feed.post(FeedItemType.CALL, self._profile.name, f"logged a {duration_minutes}min call")
        self.event_bus.publish(
            CallLogged(
                source_id=self._profile.agent_id,
                lead_id=lead_id,
                duration_minutes=duration_minutes,
                xp_awarded=xp,
            )
        )
        self.evaluate_achievements()
        return gain

    # ===================================================================== #
    #  Tasks and training                                                    #
    # ===================================================================== #

    def add_task(
        self,
        title: str,
        description: str = "",
        category: TaskCategory = TaskCategory.ADMIN,
        due_date: str = "",
        performance_impact: int = 0,
        priority: Priority = Priority.MEDIUM,
    ) -> Task:
        return self.tasks.add_task(
            title=title,
            description=description,
            category=category,
            due_date=due_date,
            performance_impact=performance_impact,
            priority=priority,
        )

    def complete_task(self, task_id: str) -> bool:
        """Toggle a task; see :meth:`TaskEngine.complete_task`."""
        completed = self.tasks.complete_task(task_id)
        self.evaluate_achievements()
        return completed

    def complete_module(self, course_id: str, module_id: str) -> bool:
        """Complete a training module.

        Returns ``False`` (and changes nothing) if it was already complete.
        """
        if not self.courses.complete_module(course_id, module_id):
            return False
        self.gamification.record_qualifying_activity(self.today())
        self.challenges.progress(ChallengeType.TRAINING)
        self.evaluate_achievements()
        return True

    # ===================================================================== #
    #  Quotes                                                                #
    # ===================================================================== #

    def create_quote(
        self,
        client_name: str,
        product: Product,
        coverage_amount: float,
        monthly_premium: float,
        client_email: str = "",
        client_phone: str = "",
        lead_id: str | None = None,
        term: int | None = None,
        notes: str = "",
    ) -> Quote:
        """Draft a quote, award ``quote_created_xp`` and post a feed item."""
        if lead_id is not None:
            self.pipeline.get(lead_id)
        quote = self.quotes.create(
            client_name=client_name,
            product=product,
            coverage_amount=coverage_amount,
            monthly_premium=monthly_premium,
            client_email=client_email,
            client_phone=client_phone,
            lead_id=lead_id,
            term=term,
            notes=notes,
        )
        self.gamification.add_xp(self.gamification.config.quote_created_xp, QUOTE_CREATED)
        self.feed.post(
            FeedItemType.LEAD,
            self._profile.name,
            f"created a new quote for {client_name}",
            highlight=True,
        )
        self.evaluate_achievements()
        return quote

    # ===================================================================== #
    #  Leaderboard, onboarding, commands                                     #
    # ===================================================================== #

    def rank_leaderboard(self, period: Period = Period.WEEKLY) -> list[RankedEntry]:
        return self.leaderboard.rank(period)

    @property
    def onboarding_completed(self) -> bool:
        return self._preferences.get_flag(ONBOARDING_COMPLETED)

    def complete_onboarding(self) -> None:
        self._preferences.set(ONBOARDING_COMPLETED, True)

    def dispatch(self, command: BaseCommand | dict[str, Any]) -> Any:
        """Run a typed command (or raw command payload) against this session."""
        return self._dispatcher.dispatch(command)

    # ===================================================================== #
    #  Feed lifecycle                                                        #
    # ===================================================================== #

    def start_feed_simulation(self, rng: random.Random | None = None) -> None:
        if not self._feed_templates:
            raise ValueError("No feed templates configured for simulation")
        self.feed.start_simulation(
            self._feed_templates,
            interval=self._feed_config.simulation_interval,
            rng=rng,
        )

    def stop_feed_simulation(self) -> None:
        self.feed.stop_simulation()

    # ===================================================================== #
    #  Snapshot / lifecycle                                                  #
    # ===================================================================== #

    def snapshot(self) -> SessionSnapshot:
        """Deep-copied, immutable view of the whole session."""
        gam = self.gamification
        return SessionSnapshot(
            profile=self._profile,
            performance=copy.deepcopy(gam.performance),
            stats=self.stats(),
            leads=tuple(copy.deepcopy(self.pipeline.leads)),
            tasks=tuple(copy.deepcopy(self.tasks.tasks)),
            achievements=tuple(copy.deepcopy(gam.achievements)),
            notifications=tuple(copy.deepcopy(self.notifications.notifications)),
            unread_count=self.notifications.unread_count,
            feed=tuple(copy.deepcopy(self.feed.items)),
            quotes=tuple(copy.deepcopy(self.quotes.quotes)),
            challenges=tuple(copy.deepcopy(self.challenges.challenges)),
            courses=tuple(copy.deepcopy(self.courses.courses)),
            pending_xp_gain=gam.pending_xp_gain,
            pending_level_up=gam.pending_level_up,
            onboarding_completed=self.onboarding_completed,
        )

    def restore_counters(self, call_dates: Iterable[date], close_dates: Iterable[date]) -> None:
        """Reload call and close history (used when restoring a snapshot)."""
        self._call_dates = list(call_dates)
        self._close_dates = list(close_dates)

    @property
    def call_dates(self) -> list[date]:
        return list(self._call_dates)

    @property
    def close_dates(self) -> list[date]:
        return list(self._close_dates)

    def close(self) -> None:
        """Tear down the session's timers.  Idempotent."""
        if self._closed:
            return
        self._closed = True
        self.feed.close()
        logger.info("AgentSession closed for %s", self._profile.agent_id)

    def __enter__(self) -> AgentSession:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
