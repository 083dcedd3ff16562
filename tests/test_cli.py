"""Tests for the agent-lounge command-line interface."""

from __future__ import annotations

import json

import pytest
import yaml

from agent_lounge import __version__
from agent_lounge.cli import _build_parser, main


def _run(argv: list[str]) -> int:
    with pytest.raises(SystemExit) as exc_info:
        main(argv)
    return exc_info.value.code


class TestParser:
    def test_defaults(self) -> None:
        args = _build_parser().parse_args(["demo"])
        assert args.command == "demo"
        assert args.simulate == 0.0
        assert args.seed is None
        assert not args.plain

    def test_invalid_period_rejected(self) -> None:
        with pytest.raises(SystemExit):
            _build_parser().parse_args(["leaderboard", "--period", "hourly"])


class TestMain:
    def test_version(self, capsys) -> None:
        assert _run(["--version"]) == 0
        assert capsys.readouterr().out.strip() == f"agent-lounge {__version__}"

    def test_no_command_prints_help(self, capsys) -> None:
        assert _run([]) == 0
        assert "usage: agent-lounge" in capsys.readouterr().out

    def test_info(self, capsys) -> None:
        assert _run(["info"]) == 0
        out = capsys.readouterr().out
        assert f"Agent Lounge v{__version__}" in out
        assert "numpy" in out
        assert "xp_per_level=1000" in out
        assert "  - log-call" in out

    def test_leaderboard(self, capsys) -> None:
        assert _run(["--plain", "leaderboard", "--period", "monthly"]) == 0
        out = capsys.readouterr().out
        assert "3  Alex Johnson  3  5  $50,400  -" in out
        assert "Team total: $310,800" in out

    def test_snapshot_json(self, capsys) -> None:
        assert _run(["snapshot"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["version"] == 1
        assert data["profile"]["name"] == "Alex Johnson"
        assert len(data["leads"]) == 6

    def test_snapshot_yaml(self, capsys) -> None:
        assert _run(["snapshot", "--format", "yaml"]) == 0
        data = yaml.safe_load(capsys.readouterr().out)
        assert data["performance"]["xp"] == 2450

    def test_demo(self, capsys) -> None:
        assert _run(["--plain", "demo", "--simulate", "60", "--seed", "7"]) == 0
        out = capsys.readouterr().out
        assert "+20 XP (Call logged)" in out
        assert "Simulated 60s of live feed" in out
        assert "closed a $510 AP policy with James Rodriguez!" in out
        assert "Leaderboard: weekly" in out

    def test_unseeded_session_from_yaml_config(self, tmp_path, capsys) -> None:
        path = tmp_path / "lounge.yaml"
        path.write_text("session:\n  seed_demo_data: false\n", encoding="utf-8")
        assert _run(["--config", str(path), "snapshot"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["leads"] == []

    def test_demo_without_seed_data(self, tmp_path, capsys) -> None:
        path = tmp_path / "lounge.yaml"
        path.write_text("session:\n  seed_demo_data: false\n", encoding="utf-8")
        assert _run(["--plain", "--config", str(path), "demo"]) == 0
        assert "James Rodriguez" in capsys.readouterr().out

    def test_json_config(self, tmp_path, capsys) -> None:
        path = tmp_path / "lounge.json"
        path.write_text(json.dumps({"gamification": {"xp_per_level": 500}}), encoding="utf-8")
        assert _run(["--plain", "--config", str(path), "leaderboard"]) == 0
        assert "3  Alex Johnson  5  5  $12,600  -" in capsys.readouterr().out

    def test_handler_error_exits_one(self, tmp_path, capsys) -> None:
        assert _run(["--config", str(tmp_path / "missing.yaml"), "snapshot"]) == 1
        assert capsys.readouterr().err.startswith("Error:")

    def test_invalid_config_value(self, tmp_path, capsys) -> None:
        path = tmp_path / "lounge.yaml"
        path.write_text("feed:\n  capacity: 0\n", encoding="utf-8")
        assert _run(["--config", str(path), "info"]) == 0
        assert _run(["--config", str(path), "snapshot"]) == 1
        assert "capacity" in capsys.readouterr().err
