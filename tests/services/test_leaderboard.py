"""Tests for LeaderboardAggregator ranking, trends and AP bookkeeping."""

from __future__ import annotations

import pytest

from agent_lounge.domain.entities import Performance
from agent_lounge.domain.enums import Period, Trend
from agent_lounge.domain.exceptions import InvalidAmountError, NotFoundError
from agent_lounge.services.leaderboard import LeaderboardAggregator


@pytest.fixture
def board() -> LeaderboardAggregator:
    board = LeaderboardAggregator()
    board.register("agent-top-1", "Sarah Mitchell", ap={Period.WEEKLY: 28500}, level=7, streak=15)
    board.register("agent-top-2", "Marcus Chen", ap={Period.WEEKLY: 22400}, level=6, streak=12)
    board.register("agent-1", "Alex Johnson", ap={Period.WEEKLY: 12600})
    return board


class TestRegister:
    def test_entries(self, board) -> None:
        assert len(board) == 3
        assert "agent-1" in board
        assert board.get("agent-top-1").level == 7

    def test_reregister_keeps_unspecified_fields(self, board) -> None:
        board.register("agent-top-1", "Sarah M.")
        entry = board.get("agent-top-1")
        assert entry.name == "Sarah M."
        assert entry.level == 7
        assert entry.ap[Period.WEEKLY] == 28500

    def test_negative_ap_rejected(self) -> None:
        with pytest.raises(InvalidAmountError):
            LeaderboardAggregator().register("a", "A", ap={Period.DAILY: -1})

    def test_unknown_agent(self, board) -> None:
        with pytest.raises(NotFoundError):
            board.get("ghost")


class TestRank:
    def test_descending_by_period_ap(self, board) -> None:
        rows = board.rank(Period.WEEKLY)
        assert [r.agent_id for r in rows] == ["agent-top-1", "agent-top-2", "agent-1"]
        assert [r.position for r in rows] == [1, 2, 3]
        assert rows[0].ap == 28500

    def test_ties_keep_registration_order(self) -> None:
        board = LeaderboardAggregator()
        for agent_id in ("b", "a", "c"):
            board.register(agent_id, agent_id.upper(), ap={Period.DAILY: 100})
        assert [r.agent_id for r in board.rank(Period.DAILY)] == ["b", "a", "c"]

    def test_first_snapshot_trend_is_same(self, board) -> None:
        assert all(r.trend == Trend.SAME for r in board.rank(Period.WEEKLY))

    def test_trend_compares_with_previous_snapshot(self, board) -> None:
        board.rank(Period.WEEKLY)
        board.record_ap("agent-1", 20000)
        rows = {r.agent_id: r for r in board.rank(Period.WEEKLY)}
        assert rows["agent-1"].position == 1
        assert rows["agent-1"].trend == Trend.UP
        assert rows["agent-top-1"].trend == Trend.DOWN
        assert rows["agent-top-2"].trend == Trend.DOWN
        assert board.get("agent-1").trend == Trend.UP

        rows = board.rank(Period.WEEKLY)
        assert all(r.trend == Trend.SAME for r in rows)

    def test_snapshots_are_per_period(self, board) -> None:
        board.rank(Period.WEEKLY)
        board.record_ap("agent-1", 20000)
        assert all(r.trend == Trend.SAME for r in board.rank(Period.MONTHLY))

    def test_linked_performance_is_read_live(self) -> None:
        perf = Performance(xp=2450, current_streak=5)
        board = LeaderboardAggregator()
        board.register("agent-1", "Alex", performance=perf)
        perf.xp = 5000
        perf.current_streak = 6
        row = board.rank(Period.DAILY)[0]
        assert (row.level, row.streak) == (6, 6)

    def test_empty_board(self) -> None:
        assert LeaderboardAggregator().rank(Period.WEEKLY) == []

    def test_position_does_not_snapshot(self, board) -> None:
        board.rank(Period.WEEKLY)
        board.record_ap("agent-1", 20000)
        assert board.position("agent-1", Period.WEEKLY) == 1
        assert board.rank(Period.WEEKLY)[0].trend == Trend.UP


class TestAP:
    def test_record_ap_hits_every_period(self, board) -> None:
        board.record_ap("agent-1", 500)
        entry = board.get("agent-1")
        assert entry.ap[Period.WEEKLY] == 13100
        assert entry.ap[Period.DAILY] == 500
        assert entry.ap[Period.YEARLY] == 500

    def test_record_ap_negative(self, board) -> None:
        with pytest.raises(InvalidAmountError):
            board.record_ap("agent-1", -10)

    def test_record_close(self, board) -> None:
        board.record_close("agent-1")
        assert board.get("agent-1").closed_deals == 1

    def test_reset_period(self, board) -> None:
        board.record_ap("agent-1", 500)
        board.reset_period(Period.DAILY)
        assert all(e.ap[Period.DAILY] == 0 for e in board.entries)
        assert board.get("agent-1").ap[Period.WEEKLY] == 13100

    def test_team_total(self, board) -> None:
        assert board.team_total(Period.WEEKLY) == pytest.approx(63500)
        assert LeaderboardAggregator().team_total(Period.WEEKLY) == 0.0
