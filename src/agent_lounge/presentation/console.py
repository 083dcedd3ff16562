"""Rich-based console dashboard for session snapshots.

:class:`ConsoleDashboard` renders the leaderboard, the agent's performance
card, notifications, the activity feed and the pipeline board as ``rich``
tables.  Pass ``use_rich=False`` for undecorated text (log files, CI
output).
"""

from __future__ import annotations

import sys
from collections.abc import Sequence
from typing import Any

from rich.console import Console as RichConsole
from rich.table import Table as RichTable

from agent_lounge.domain.entities import FeedItem, Lead, Notification
from agent_lounge.domain.enums import LeadStatus, Period, Trend
from agent_lounge.domain.values import RankedEntry
from agent_lounge.services.session import SessionSnapshot

# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------

_TREND_MARK = {Trend.UP: "▲", Trend.DOWN: "▼", Trend.SAME: "-"}
_TREND_STYLE = {Trend.UP: "green", Trend.DOWN: "red", Trend.SAME: "dim"}

_PROGRESS_WIDTH = 20


def _money(amount: float) -> str:
    return f"${amount:,.0f}"


def _progress_bar(fraction: float, width: int = _PROGRESS_WIDTH) -> str:
    """Return a block-character bar for *fraction* in ``[0, 1]``."""
    fraction = max(0.0, min(1.0, fraction))
    filled = int(round(fraction * width))
    return "█" * filled + "░" * (width - filled)


# ---------------------------------------------------------------------------
# ConsoleDashboard
# ---------------------------------------------------------------------------

class ConsoleDashboard:
    """Console presentation layer for an agent session.

    Parameters
    ----------
    use_rich:
        Render styled tables (``True``, default) or plain text.
    file:
        Output stream.  Defaults to ``sys.stdout``.
    """

    def __init__(self, use_rich: bool = True, file: Any = None) -> None:
        self._file = file or sys.stdout
        self._use_rich = use_rich
        self._console = RichConsole(file=self._file, highlight=False) if use_rich else None

    # -- helpers -----------------------------------------------------------

    def _plain_print(self, *args: Any, **kwargs: Any) -> None:
        kwargs.setdefault("file", self._file)
        print(*args, **kwargs)

    def _emit_table(self, table: RichTable, rows: list[tuple[str, ...]], headers: tuple[str, ...]) -> None:
        if self._console is not None:
            for row in rows:
                table.add_row(*row)
            self._console.print()
            self._console.print(table)
            return
        self._plain_print()
        self._plain_print(table.title or "")
        self._plain_print("  ".join(headers))
        for row in rows:
            self._plain_print("  ".join(row))

    # -- public API --------------------------------------------------------

    def print_leaderboard(self, rows: Sequence[RankedEntry], period: Period) -> None:
        """Print a ranking as returned by ``LeaderboardAggregator.rank``."""
        if not rows:
            self._plain_print("[leaderboard is empty]")
            return
        headers = ("#", "Agent", "Level", "Streak", f"AP ({period.value})", "Trend")
        table = RichTable(title=f"Leaderboard: {period.value}", header_style="bold cyan")
        for header in headers:
            table.add_column(header, justify="right" if header != "Agent" else "left")
        body = []
        for row in rows:
            mark = _TREND_MARK[row.trend]
            if self._use_rich:
                style = _TREND_STYLE[row.trend]
                mark = f"[{style}]{mark}[/{style}]"
            body.append((
                str(row.position),
                row.name,
                str(row.level),
                str(row.streak),
                _money(row.ap),
                mark,
            ))
        self._emit_table(table, body, headers)

    def print_performance(self, snapshot: SessionSnapshot) -> None:
        """Print the agent's XP, level, streak and achievement summary."""
        perf = snapshot.performance
        stats = snapshot.stats
        unlocked = sum(1 for a in snapshot.achievements if a.unlocked)
        bar = _progress_bar(perf.xp_into_level / perf.xp_per_level)
        lines = [
            f"{snapshot.profile.name}  Level {perf.level}",
            f"XP {perf.xp:,}  {bar}  {perf.xp_to_next_level:,} to next level",
            f"Streak {perf.current_streak} days (best {perf.longest_streak})",
            f"Calls {stats.total_calls} (this week {stats.weekly_calls})  "
            f"Closed {stats.closed_deals} (this month {stats.monthly_closes})",
            f"Today {stats.calls_today}/{stats.daily_calls_target} calls  "
            f"{stats.closes_today}/{stats.daily_closes_target} closes  "
            f"conversion {stats.conversion_rate:.0f}%",
            f"Achievements {unlocked}/{len(snapshot.achievements)}",
        ]
        if self._console is not None:
            self._console.print()
            self._console.print(f"[bold]{lines[0]}[/bold]")
            for line in lines[1:]:
                self._console.print(f"  {line}")
        else:
            self._plain_print()
            for line in lines:
                self._plain_print(line)

    def print_notifications(self, notifications: Sequence[Notification], unread_count: int) -> None:
        headers = ("", "Type", "Title", "Description")
        table = RichTable(title=f"Notifications ({unread_count} unread)", header_style="bold cyan")
        for header in headers:
            table.add_column(header)
        body = [
            ("*" if not n.read else "", n.type.value, n.title, n.description)
            for n in notifications
        ]
        self._emit_table(table, body, headers)

    def print_feed(self, items: Sequence[FeedItem], new_ids: frozenset[str] = frozenset()) -> None:
        """Print the activity feed, newest first; *new_ids* get a badge."""
        headers = ("", "Agent", "Activity")
        table = RichTable(title="Live Activity", header_style="bold cyan")
        for header in headers:
            table.add_column(header)
        body = []
        for item in items:
            badge = "NEW" if item.id in new_ids else ""
            message = item.message
            if item.highlight and self._use_rich:
                message = f"[bold yellow]{message}[/bold yellow]"
            body.append((badge, item.agent_name, message))
        self._emit_table(table, body, headers)

    def print_pipeline(self, leads: Sequence[Lead]) -> None:
        """Print a pipeline board: one column per stage, lead names below."""
        columns: dict[LeadStatus, list[str]] = {status: [] for status in LeadStatus}
        for lead in leads:
            columns[lead.status].append(lead.name)
        headers = tuple(f"{s.value} ({len(columns[s])})" for s in LeadStatus)
        table = RichTable(title="Pipeline", header_style="bold cyan")
        for header in headers:
            table.add_column(header)
        depth = max((len(names) for names in columns.values()), default=0)
        body = [
            tuple(columns[s][i] if i < len(columns[s]) else "" for s in LeadStatus)
            for i in range(depth)
        ]
        self._emit_table(table, body, headers)

    def print_snapshot(self, snapshot: SessionSnapshot) -> None:
        """Print performance, notifications, feed and pipeline in one go."""
        self.print_performance(snapshot)
        self.print_notifications(snapshot.notifications, snapshot.unread_count)
        self.print_feed(snapshot.feed)
        self.print_pipeline(snapshot.leads)
