"""Daily challenges: short-lived targets that pay out XP once."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from agent_lounge.domain.entities import DailyChallenge
from agent_lounge.domain.enums import ChallengeType, XPType
from agent_lounge.domain.events import ChallengeCompleted
from agent_lounge.domain.exceptions import NotFoundError
from agent_lounge.infrastructure.event_bus import EventBus
from agent_lounge.services.gamification import GamificationEngine

logger = logging.getLogger(__name__)


class ChallengeBoard:
    """Tracks progress on the day's challenges.

    Reaching a challenge's target completes it exactly once and awards
    ``xp_reward + bonus_xp`` through the gamification engine.
    """

    def __init__(
        self,
        gamification: GamificationEngine,
        challenges: Iterable[DailyChallenge] = (),
        event_bus: EventBus | None = None,
        owner_id: str = "",
    ) -> None:
        self._gamification = gamification
        self._event_bus = event_bus
        self._owner_id = owner_id
        self._challenges: dict[str, DailyChallenge] = {c.id: c for c in challenges}

    @property
    def challenges(self) -> list[DailyChallenge]:
        return list(self._challenges.values())

    @property
    def active(self) -> list[DailyChallenge]:
        return [c for c in self._challenges.values() if not c.completed]

    def get(self, challenge_id: str) -> DailyChallenge:
        challenge = self._challenges.get(challenge_id)
        if challenge is None:
            raise NotFoundError("DailyChallenge", challenge_id)
        return challenge

    def add(self, challenge: DailyChallenge) -> None:
        self._challenges[challenge.id] = challenge

    def replace_all(self, challenges: Iterable[DailyChallenge]) -> None:
        """Swap in the next day's set of challenges."""
        self._challenges = {c.id: c for c in challenges}

    def progress(self, type: ChallengeType, amount: int = 1) -> list[DailyChallenge]:
        """Advance every open challenge of *type*.

        Returns the challenges completed by this call.
        """
        if amount < 0:
            raise ValueError(f"amount must be >= 0, got {amount}")
        completed = []
        for challenge in self._challenges.values():
            if challenge.completed or challenge.type != type:
                continue
            challenge.current = min(challenge.target, challenge.current + amount)
            if challenge.current >= challenge.target:
                self._complete(challenge)
                completed.append(challenge)
        return completed

    def _complete(self, challenge: DailyChallenge) -> None:
        challenge.completed = True
        reward = challenge.xp_reward + challenge.bonus_xp
        logger.info("Challenge completed: %s (+%d XP)", challenge.title, reward)
        if self._event_bus is not None:
            self._event_bus.publish(
                ChallengeCompleted(
                    source_id=self._owner_id,
                    challenge_id=challenge.id,
                    title=challenge.title,
                    xp_reward=reward,
                )
            )
        if reward:
            self._gamification.add_xp(reward, challenge.title, XPType.BONUS)
