"""Gamification engine: XP ledger, leveling, streaks and achievements.

The engine owns one agent's ``Performance`` record and achievement catalogue.
Two transient UI cells are modelled explicitly as single-slot, latest-wins
values with a ``consume`` operation:

* ``pending_xp_gain`` -- the XP toast.  A second ``add_xp`` call before the
  toast is consumed overwrites it; XP gains are therefore **not**
  individually observable through this cell (subscribe to ``XPAwarded`` on
  the event bus for that).
* ``pending_level_up`` -- the level-up celebration, holding the highest level
  reached since it was last consumed.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import date, datetime, timedelta

from agent_lounge.domain.entities import Achievement, Performance
from agent_lounge.domain.enums import AchievementCategory, XPType
from agent_lounge.domain.events import AchievementUnlocked, LevelUp, StreakUpdated, XPAwarded
from agent_lounge.domain.exceptions import InvalidAmountError, NotFoundError
from agent_lounge.domain.values import AgentStats, XPGain
from agent_lounge.infrastructure.config import GamificationConfig
from agent_lounge.infrastructure.event_bus import EventBus

logger = logging.getLogger(__name__)

STREAK_CONTINUED = "Streak continued!"


# ===================================================================== #
#  Default achievement catalogue                                         #
# ===================================================================== #

def default_achievements() -> list[Achievement]:
    """Fresh copies of the stock achievement catalogue."""
    return [
        Achievement(
            id="first-steps",
            name="First Steps",
            description="Complete your first training module",
            category=AchievementCategory.TRAINING,
            icon="graduation-cap",
            xp_reward=50,
            predicate=lambda s: s.modules_completed >= 1,
        ),
        Achievement(
            id="closer",
            name="Closer",
            description="Close your first deal",
            category=AchievementCategory.SALES,
            icon="handshake",
            xp_reward=200,
            predicate=lambda s: s.closed_deals >= 1,
        ),
        Achievement(
            id="streak-starter",
            name="Streak Starter",
            description="Maintain a 3-day activity streak",
            category=AchievementCategory.STREAK,
            icon="flame",
            xp_reward=100,
            predicate=lambda s: s.current_streak >= 3,
        ),
        Achievement(
            id="week-warrior",
            name="Week Warrior",
            description="Maintain a 7-day activity streak",
            category=AchievementCategory.STREAK,
            icon="fire",
            xp_reward=250,
            predicate=lambda s: s.current_streak >= 7,
        ),
        Achievement(
            id="call-champion",
            name="Call Champion",
            description="Make 100 calls in a single week",
            category=AchievementCategory.MILESTONE,
            icon="phone",
            xp_reward=300,
            predicate=lambda s: s.weekly_calls >= 100,
        ),
        Achievement(
            id="top-producer",
            name="Top Producer",
            description="Close 10 deals in a single month",
            category=AchievementCategory.SALES,
            icon="trophy",
            xp_reward=500,
            predicate=lambda s: s.monthly_closes >= 10,
        ),
        Achievement(
            id="knowledge-master",
            name="Knowledge Master",
            description="Complete every training course",
            category=AchievementCategory.TRAINING,
            icon="brain",
            xp_reward=400,
            predicate=lambda s: s.total_courses > 0 and s.courses_completed >= s.total_courses,
        ),
        Achievement(
            id="consistency-king",
            name="Consistency King",
            description="Maintain a 30-day activity streak",
            category=AchievementCategory.STREAK,
            icon="crown",
            xp_reward=1000,
            predicate=lambda s: s.current_streak >= 30,
        ),
    ]


# ===================================================================== #
#  Engine                                                                #
# ===================================================================== #

class GamificationEngine:
    """XP, level, streak and achievement bookkeeping for one agent.

    Parameters
    ----------
    config:
        Point values; defaults to ``GamificationConfig()``.
    performance:
        Existing performance record to mutate in place.  A fresh one is
        created when omitted.
    achievements:
        Achievement catalogue.  Defaults to :func:`default_achievements`.
    event_bus:
        Receives ``XPAwarded``, ``LevelUp``, ``StreakUpdated`` and
        ``AchievementUnlocked`` events.
    clock:
        Source of ``unlocked_date`` timestamps.
    source_id:
        Agent id stamped on published events.
    """

    def __init__(
        self,
        config: GamificationConfig | None = None,
        performance: Performance | None = None,
        achievements: Iterable[Achievement] | None = None,
        event_bus: EventBus | None = None,
        clock: Callable[[], datetime] = datetime.now,
        source_id: str = "",
    ) -> None:
        self._config = config or GamificationConfig()
        self._config.validate()
        self._performance = performance or Performance(xp_per_level=self._config.xp_per_level)
        self._performance.xp_per_level = self._config.xp_per_level
        catalogue = list(achievements) if achievements is not None else default_achievements()
        self._achievements: dict[str, Achievement] = {a.id: a for a in catalogue}
        self._event_bus = event_bus
        self._clock = clock
        self._source_id = source_id
        self._pending_xp_gain: XPGain | None = None
        self._pending_level_up: int | None = None

    # -- state ----------------------------------------------------------------

    @property
    def performance(self) -> Performance:
        return self._performance

    @property
    def config(self) -> GamificationConfig:
        return self._config

    @property
    def achievements(self) -> list[Achievement]:
        return list(self._achievements.values())

    @property
    def unlocked_achievements(self) -> list[Achievement]:
        return [a for a in self._achievements.values() if a.unlocked]

    def get_achievement(self, achievement_id: str) -> Achievement:
        achievement = self._achievements.get(achievement_id)
        if achievement is None:
            raise NotFoundError("Achievement", achievement_id)
        return achievement

    # -- transient UI cells ---------------------------------------------------

    @property
    def pending_xp_gain(self) -> XPGain | None:
        return self._pending_xp_gain

    def consume_xp_gain(self) -> XPGain | None:
        """Return and clear the pending XP toast."""
        gain, self._pending_xp_gain = self._pending_xp_gain, None
        return gain

    @property
    def pending_level_up(self) -> int | None:
        return self._pending_level_up

    def consume_level_up(self) -> int | None:
        """Return and clear the pending level-up celebration."""
        level, self._pending_level_up = self._pending_level_up, None
        return level

    # -- XP ledger ------------------------------------------------------------

    def add_xp(self, amount: int, reason: str, xp_type: XPType = XPType.XP) -> XPGain:
        """Credit *amount* XP, applying level-up bonuses in the same call.

        Every level boundary crossed publishes ``LevelUp`` and grants
        ``level_up_bonus``; the bonus itself may cross a further boundary.

        Raises ``InvalidAmountError`` for negative amounts.
        """
        if amount < 0:
            raise InvalidAmountError(amount)

        perf = self._performance
        level = perf.level
        perf.xp += amount
        bonus = 0
        while perf.level > level:
            level += 1
            bonus += self._config.level_up_bonus
            perf.xp += self._config.level_up_bonus
            self._pending_level_up = level
            logger.info("Agent %s reached level %d", self._source_id or "?", level)
            self._emit(LevelUp(source_id=self._source_id, new_level=level, bonus=self._config.level_up_bonus))

        gain = XPGain(amount=amount, reason=reason, xp_type=xp_type, bonus=bonus)
        self._pending_xp_gain = gain
        logger.debug("+%d XP (%s), total %d", amount, reason, perf.xp)
        self._emit(
            XPAwarded(
                source_id=self._source_id,
                amount=amount,
                reason=reason,
                xp_type=xp_type,
                total_xp=perf.xp,
            )
        )
        return gain

    # -- streaks --------------------------------------------------------------

    def record_qualifying_activity(self, day: date) -> int:
        """Update the daily streak for an activity on *day*.

        Returns the resulting ``current_streak``.
        """
        perf = self._performance
        last = perf.last_activity_date
        if last == day:
            return perf.current_streak

        if last is not None and last + timedelta(days=1) == day:
            perf.current_streak += 1
            reset = False
        else:
            perf.current_streak = 1
            reset = last is not None
        perf.longest_streak = max(perf.longest_streak, perf.current_streak)
        perf.last_activity_date = day

        self._emit(
            StreakUpdated(
                source_id=self._source_id,
                current_streak=perf.current_streak,
                longest_streak=perf.longest_streak,
                reset=reset,
            )
        )
        if not reset and last is not None and self._config.streak_continue_xp:
            self.add_xp(self._config.streak_continue_xp, STREAK_CONTINUED, XPType.STREAK)
        return perf.current_streak

    # -- achievements ---------------------------------------------------------

    def evaluate_achievements(self, stats: AgentStats) -> list[Achievement]:
        """Unlock every locked achievement whose predicate now holds.

        Already-unlocked achievements are skipped, so repeated calls never
        re-award XP.  Returns the achievements unlocked by this call.
        """
        unlocked: list[Achievement] = []
        for achievement in self._achievements.values():
            if achievement.unlocked or not achievement.predicate(stats):
                continue
            achievement.unlocked = True
            achievement.unlocked_date = self._clock()
            unlocked.append(achievement)
            logger.info("Achievement unlocked: %s", achievement.name)
            self._emit(
                AchievementUnlocked(
                    source_id=self._source_id,
                    achievement_id=achievement.id,
                    achievement_name=achievement.name,
                    xp_reward=achievement.xp_reward,
                )
            )
            if achievement.xp_reward:
                self.add_xp(achievement.xp_reward, achievement.name, XPType.ACHIEVEMENT)
        return unlocked

    def _emit(self, event) -> None:
        if self._event_bus is not None:
            self._event_bus.publish(event)
