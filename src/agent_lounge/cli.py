"""Command-line interface for the Agent Lounge engine.

Runs the engine against the built-in demo data set: a scripted workday,
leaderboard views, snapshot dumps and version information.

Entry point
-----------
The ``main()`` function is registered as a console script in
``pyproject.toml``::

    [project.scripts]
    agent-lounge = "agent_lounge.cli:main"

Usage examples::

    agent-lounge demo --simulate 90 --seed 7
    agent-lounge leaderboard --period monthly
    agent-lounge snapshot --format yaml
    agent-lounge --config lounge.yaml demo
    agent-lounge info
"""

from __future__ import annotations

import argparse
import logging
import random
import sys
from pathlib import Path
from typing import Any


def _build_parser() -> argparse.ArgumentParser:
    """Build the top-level argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="agent-lounge",
        description="Agent Lounge -- in-memory engine for an insurance agent workspace.",
    )
    parser.add_argument(
        "--version",
        action="store_true",
        default=False,
        help="Show engine version and exit.",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        default=False,
        help="Log engine activity to stderr.",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="YAML or JSON file with gamification/feed/session sections.",
    )
    parser.add_argument(
        "--plain",
        action="store_true",
        default=False,
        help="Print undecorated text instead of rich tables.",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available subcommands")

    # -- demo --------------------------------------------------------------
    demo_parser = subparsers.add_parser(
        "demo",
        help="Run a scripted workday on the demo session.",
        description="Log a call, add a lead, close a deal and show the dashboard.",
    )
    demo_parser.add_argument(
        "--simulate",
        type=float,
        default=0.0,
        help="Seconds of simulated live feed to run before printing. (default: 0)",
    )
    demo_parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for the simulated feed.",
    )

    # -- leaderboard -------------------------------------------------------
    board_parser = subparsers.add_parser(
        "leaderboard",
        help="Show the demo leaderboard.",
    )
    board_parser.add_argument(
        "--period",
        type=str,
        default="weekly",
        choices=["daily", "weekly", "monthly", "yearly"],
        help="AP period to rank by. (default: weekly)",
    )

    # -- snapshot ----------------------------------------------------------
    snap_parser = subparsers.add_parser(
        "snapshot",
        help="Dump the demo session as JSON or YAML.",
    )
    snap_parser.add_argument(
        "--format",
        type=str,
        default="json",
        choices=["json", "yaml"],
        help="Output format. (default: json)",
    )

    # -- info --------------------------------------------------------------
    subparsers.add_parser(
        "info",
        help="Show engine version, dependencies and configuration defaults.",
    )

    return parser


# =========================================================================
# Helpers
# =========================================================================

def _session_kwargs(args: argparse.Namespace) -> dict[str, Any]:
    """Translate ``--config`` into ``AgentSession`` keyword arguments."""
    if args.config is None:
        return {}
    from agent_lounge.infrastructure.config import load_config_from_json, load_config_from_yaml

    path = Path(args.config)
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        sections = load_config_from_json(text)
    else:
        sections = load_config_from_yaml(text)
    kwargs: dict[str, Any] = {}
    for section in ("gamification", "feed", "session"):
        if section in sections:
            kwargs[f"{section}_config"] = sections[section]
    return kwargs


def _open_session(args: argparse.Namespace) -> Any:
    """Build the CLI session, seeded unless ``session.seed_demo_data`` is off."""
    from agent_lounge.demo import DEMO_PROFILE, build_demo_session
    from agent_lounge.services.session import AgentSession

    kwargs = _session_kwargs(args)
    session_config = kwargs.get("session_config")
    if session_config is not None and not session_config.seed_demo_data:
        return AgentSession(DEMO_PROFILE, **kwargs)
    return build_demo_session(**kwargs)


def _dashboard(args: argparse.Namespace) -> Any:
    from agent_lounge.presentation.console import ConsoleDashboard

    return ConsoleDashboard(use_rich=not args.plain)


# =========================================================================
# Subcommand handlers
# =========================================================================

def _cmd_demo(args: argparse.Namespace) -> int:
    """Handle the ``demo`` subcommand."""
    from agent_lounge.domain.enums import Disposition, LeadStatus, Period, Product

    dashboard = _dashboard(args)
    with _open_session(args) as session:
        james = next((lead for lead in session.pipeline.leads if lead.name == "James Rodriguez"), None)
        if james is None:
            james = session.add_lead("James Rodriguez", "jrod@email.com", "(219) 555-9999", "Indiana")
        gain = session.log_call(12, Disposition.INTERESTED, "Wants a 20-year term quote", lead_id=james.id)
        print(f"+{gain.amount} XP ({gain.reason})")

        session.create_quote(
            client_name=james.name,
            product=Product.TERM,
            coverage_amount=500_000,
            monthly_premium=42.50,
            lead_id=james.id,
            term=20,
        )
        session.update_lead_status(james.id, LeadStatus.CLOSED)
        session.add_lead("Priya Shah", "pshah@email.com", "(773) 555-0101", "Illinois", "IUL", "Referral")

        if args.simulate > 0:
            rng = random.Random(args.seed)
            session.start_feed_simulation(rng=rng)
            fired = session.scheduler.advance(args.simulate)
            print(f"Simulated {args.simulate:g}s of live feed ({fired} timer callbacks)")

        snapshot = session.snapshot()
        dashboard.print_snapshot(snapshot)
        dashboard.print_leaderboard(session.rank_leaderboard(Period.WEEKLY), Period.WEEKLY)
    return 0


def _cmd_leaderboard(args: argparse.Namespace) -> int:
    """Handle the ``leaderboard`` subcommand."""
    from agent_lounge.domain.enums import Period

    period = Period(args.period)
    with _open_session(args) as session:
        rows = session.rank_leaderboard(period)
        _dashboard(args).print_leaderboard(rows, period)
        print(f"Team total: ${session.leaderboard.team_total(period):,.0f}")
    return 0


def _cmd_snapshot(args: argparse.Namespace) -> int:
    """Handle the ``snapshot`` subcommand."""
    from agent_lounge.infrastructure.serialization import to_json, to_yaml

    with _open_session(args) as session:
        if args.format == "yaml":
            print(to_yaml(session), end="")
        else:
            print(to_json(session))
    return 0


def _cmd_info(args: argparse.Namespace) -> int:
    """Handle the ``info`` subcommand."""
    from agent_lounge import __version__
    from agent_lounge.infrastructure.config import FeedConfig, GamificationConfig, SessionConfig
    from agent_lounge.services.commands import command_kinds

    print(f"Agent Lounge v{__version__}")
    print()

    print("Dependencies:")
    for pkg in ("numpy", "pydantic", "yaml", "rich"):
        mod = __import__(pkg)
        print(f"  {pkg} {getattr(mod, '__version__', 'unknown')}")
    print()

    print("Configuration defaults:")
    for name, cfg in (
        ("gamification", GamificationConfig()),
        ("feed", FeedConfig()),
        ("session", SessionConfig()),
    ):
        values = ", ".join(f"{k}={v}" for k, v in cfg.to_dict().items())
        print(f"  {name}: {values}")
    print()

    print("Commands:")
    for kind in command_kinds():
        print(f"  - {kind}")
    return 0


# =========================================================================
# Main entry point
# =========================================================================

def main(argv: list[str] | None = None) -> None:
    """CLI entry point.

    Parameters
    ----------
    argv:
        Command-line arguments.  Defaults to ``sys.argv[1:]``.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if args.version:
        from agent_lounge import __version__
        print(f"agent-lounge {__version__}")
        sys.exit(0)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    handlers: dict[str, Any] = {
        "demo": _cmd_demo,
        "leaderboard": _cmd_leaderboard,
        "snapshot": _cmd_snapshot,
        "info": _cmd_info,
    }

    handler = handlers.get(args.command)
    if handler is None:
        parser.print_help()
        sys.exit(1)

    try:
        exit_code = handler(args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        exit_code = 130
    except Exception as exc:
        print(f"Error: {exc}", file=sys.stderr)
        exit_code = 1

    sys.exit(exit_code)
