"""Leaderboard aggregator.

Ranks agents by Annual Premium (AP) per period.  Ordering is a stable
descending sort on the period's AP with no secondary key, so tied agents keep
their registration order.  Each ``rank(period)`` call is a snapshot: an
entry's ``trend`` compares its position with the previous snapshot of the
same period.

The aggregator only reads each agent's ``Performance`` (for level and
streak); it never writes to it.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

import numpy as np

from agent_lounge.domain.entities import LeaderboardEntry, Performance
from agent_lounge.domain.enums import Period, Trend
from agent_lounge.domain.exceptions import InvalidAmountError, NotFoundError
from agent_lounge.domain.values import RankedEntry

logger = logging.getLogger(__name__)


def _trend(previous: int | None, current: int) -> Trend:
    if previous is None or previous == current:
        return Trend.SAME
    return Trend.UP if current < previous else Trend.DOWN


class LeaderboardAggregator:
    """Cross-agent AP rankings.

    Usage::

        board = LeaderboardAggregator()
        board.register("agent-1", "Alex", ap={Period.WEEKLY: 12_000})
        rows = board.rank(Period.WEEKLY)
    """

    def __init__(self) -> None:
        self._entries: dict[str, LeaderboardEntry] = {}
        self._performance: dict[str, Performance] = {}
        # period -> {agent_id: 1-based position in the last snapshot}
        self._snapshots: dict[Period, dict[str, int]] = {}

    # -- registration ---------------------------------------------------------

    def register(
        self,
        agent_id: str,
        name: str,
        ap: Mapping[Period, float] | None = None,
        performance: Performance | None = None,
        level: int | None = None,
        streak: int | None = None,
        closed_deals: int | None = None,
    ) -> LeaderboardEntry:
        """Add an agent (or replace its display data if already present).

        When *performance* is given, ``level`` and ``streak`` are read from it
        on every ranking instead of the static values.  Display fields left
        as ``None`` keep their current value.
        """
        entry = self._entries.get(agent_id)
        if entry is None:
            entry = LeaderboardEntry(id=agent_id, name=name)
            self._entries[agent_id] = entry
        entry.name = name
        if level is not None:
            entry.level = level
        if streak is not None:
            entry.streak = streak
        if closed_deals is not None:
            entry.closed_deals = closed_deals
        for period, amount in (ap or {}).items():
            if amount < 0:
                raise InvalidAmountError(amount)
            entry.ap[Period(period)] = float(amount)
        if performance is not None:
            self._performance[agent_id] = performance
            self._refresh(entry)
        return entry

    def __contains__(self, agent_id: object) -> bool:
        return agent_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> list[LeaderboardEntry]:
        return list(self._entries.values())

    def get(self, agent_id: str) -> LeaderboardEntry:
        entry = self._entries.get(agent_id)
        if entry is None:
            raise NotFoundError("LeaderboardEntry", agent_id)
        return entry

    # -- AP bookkeeping -------------------------------------------------------

    def record_ap(self, agent_id: str, amount: float) -> None:
        """Add a sale's AP to every period bucket of *agent_id*."""
        if amount < 0:
            raise InvalidAmountError(amount)
        entry = self.get(agent_id)
        for period in Period:
            entry.ap[period] += amount
        logger.debug("Recorded %.2f AP for %s", amount, agent_id)

    def record_close(self, agent_id: str) -> None:
        self.get(agent_id).closed_deals += 1

    def reset_period(self, period: Period) -> None:
        """Zero one bucket for every agent (period rollover)."""
        for entry in self._entries.values():
            entry.ap[period] = 0.0
        logger.info("Leaderboard %s period reset", period.value)

    # -- ranking --------------------------------------------------------------

    def rank(self, period: Period) -> list[RankedEntry]:
        """Snapshot the ranking for *period*, updating each entry's trend."""
        entries = list(self._entries.values())
        if not entries:
            self._snapshots[period] = {}
            return []

        ap = np.array([e.ap[period] for e in entries], dtype=float)
        order = np.argsort(-ap, kind="stable")

        previous = self._snapshots.get(period, {})
        current: dict[str, int] = {}
        result: list[RankedEntry] = []
        for position, idx in enumerate(order, start=1):
            entry = entries[int(idx)]
            self._refresh(entry)
            entry.trend = _trend(previous.get(entry.id), position)
            current[entry.id] = position
            result.append(
                RankedEntry(
                    position=position,
                    agent_id=entry.id,
                    name=entry.name,
                    level=entry.level,
                    streak=entry.streak,
                    ap=entry.ap[period],
                    trend=entry.trend,
                    closed_deals=entry.closed_deals,
                )
            )
        self._snapshots[period] = current
        return result

    def position(self, agent_id: str, period: Period) -> int:
        """1-based position of *agent_id* in the current ordering.

        Does not record a snapshot, so trends are unaffected.
        """
        self.get(agent_id)
        entries = list(self._entries.values())
        ap = np.array([e.ap[period] for e in entries], dtype=float)
        order = np.argsort(-ap, kind="stable")
        ids = [entries[int(i)].id for i in order]
        return ids.index(agent_id) + 1

    def team_total(self, period: Period) -> float:
        """Sum of every agent's AP for *period*."""
        if not self._entries:
            return 0.0
        return float(np.sum([e.ap[period] for e in self._entries.values()]))

    def _refresh(self, entry: LeaderboardEntry) -> None:
        perf = self._performance.get(entry.id)
        if perf is not None:
            entry.level = perf.level
            entry.streak = perf.current_streak
