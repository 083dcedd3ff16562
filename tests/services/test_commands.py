"""Tests for typed commands, payload validation and the dispatcher."""

from __future__ import annotations

from datetime import date

import pytest
from pydantic import ValidationError

from agent_lounge.domain.enums import LeadStatus, Period, Product
from agent_lounge.domain.values import RankedEntry, XPGain
from agent_lounge.services.commands import (
    COMMAND_TYPES,
    AddLead,
    AddReminder,
    BaseCommand,
    CommandDispatcher,
    CompleteTask,
    LogCall,
    UpdateLeadStatus,
    command_kinds,
    parse_command,
)


# ========== #
# Validation #
# ========== #


class TestParseCommand:
    def test_discriminated_by_kind(self) -> None:
        command = parse_command({"kind": "log-call", "duration_minutes": 12, "disposition": "interested"})
        assert isinstance(command, LogCall)
        assert command.duration_minutes == 12

    def test_enum_fields_coerced(self) -> None:
        command = parse_command({"kind": "update-lead-status", "lead_id": "lead-1", "status": "closed"})
        assert isinstance(command, UpdateLeadStatus)
        assert command.status == LeadStatus.CLOSED

    def test_date_field_parsed(self) -> None:
        command = parse_command({"kind": "add-reminder", "lead_id": "lead-1", "day": "2025-06-12"})
        assert isinstance(command, AddReminder)
        assert command.day == date(2025, 6, 12)

    @pytest.mark.parametrize(
        "payload",
        [
            {"kind": "log-call", "duration_minutes": -1},
            {"kind": "add-lead", "name": ""},
            {"kind": "update-lead-status", "lead_id": "x", "status": "closed", "annual_premium": -5},
            {"kind": "create-quote", "client_name": "A", "product": "term", "coverage_amount": 1, "monthly_premium": 1, "term": 0},
            {"kind": "log-call", "duration_minutes": 5, "unexpected": True},
            {"kind": "no-such-command"},
        ],
    )
    def test_invalid_payloads(self, payload: dict) -> None:
        with pytest.raises(ValidationError):
            parse_command(payload)

    def test_commands_are_frozen(self) -> None:
        command = CompleteTask(task_id="task-1")
        with pytest.raises(ValidationError):
            command.task_id = "task-2"  # type: ignore[misc]

    def test_every_kind_is_unique(self) -> None:
        kinds = command_kinds()
        assert len(kinds) == len(set(kinds)) == len(COMMAND_TYPES)


# ========== #
# Dispatcher #
# ========== #


class TestDispatcher:
    def test_dispatch_model(self, session) -> None:
        gain = session.dispatch(LogCall(duration_minutes=5))
        assert isinstance(gain, XPGain)
        assert gain.amount == 10

    def test_dispatch_raw_payload(self, session) -> None:
        lead = session.dispatch({"kind": "add-lead", "name": "Michael Chen", "email": "mchen@email.com"})
        assert lead.id in session.pipeline
        assert session.dispatch({"kind": "update-lead-status", "lead_id": lead.id, "status": "contacted"}) is True

    def test_full_workflow_through_commands(self, session) -> None:
        lead = session.dispatch(AddLead(name="David Park", email="dpark@email.com"))
        session.dispatch({"kind": "log-activity", "lead_id": lead.id, "activity_type": "call"})
        reminder = session.dispatch({"kind": "add-reminder", "lead_id": lead.id, "day": "2025-06-12", "time": "09:00"})
        assert session.dispatch({"kind": "complete-reminder", "lead_id": lead.id, "reminder_id": reminder.id}) is True
        task = session.dispatch({"kind": "add-task", "title": "Call back", "performance_impact": 4})
        assert session.dispatch({"kind": "complete-task", "task_id": task.id}) is True
        assert session.dispatch({"kind": "complete-module", "course_id": "course-1", "module_id": "mod-1"}) is True
        quote = session.dispatch({
            "kind": "create-quote",
            "client_name": "David Park",
            "product": "iul",
            "coverage_amount": 250000,
            "monthly_premium": 120,
            "lead_id": lead.id,
        })
        assert quote.product == Product.IUL
        rows = session.dispatch({"kind": "show-leaderboard", "period": "monthly"})
        assert all(isinstance(r, RankedEntry) for r in rows)
        assert session.dispatch({"kind": "mark-all-notifications-read"}) >= 0
        session.dispatch({"kind": "complete-onboarding"})
        assert session.onboarding_completed

    def test_override_handler(self, session) -> None:
        seen: list[BaseCommand] = []
        dispatcher = CommandDispatcher(session, handlers={CompleteTask: seen.append})
        dispatcher.dispatch(CompleteTask(task_id="task-1"))
        assert len(seen) == 1

    def test_missing_handler_refuses_construction(self, session) -> None:
        class PartialDispatcher(CommandDispatcher):
            def _default_handlers(self, session):
                return {LogCall: lambda c: None}

        with pytest.raises(TypeError, match="AddLead"):
            PartialDispatcher(session)

    def test_unknown_command_type(self, session) -> None:
        class Rogue(BaseCommand):
            pass

        with pytest.raises(TypeError, match="Rogue"):
            session.dispatch(Rogue())

    def test_show_leaderboard_default_period(self, session) -> None:
        session.leaderboard.register("peer", "Peer", ap={Period.WEEKLY: 10})
        rows = session.dispatch({"kind": "show-leaderboard"})
        assert rows[0].agent_id == "peer"
