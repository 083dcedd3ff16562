"""Closed set of typed session commands and their dispatcher.

Each command is a pydantic model tagged by a literal ``kind``.  The
``Command`` union is discriminated on that tag, so a raw payload such as
``{"kind": "log-call", "duration_minutes": 12}`` validates straight into a
``LogCall`` instance (or raises ``pydantic.ValidationError``).

``CommandDispatcher`` maps every command class to exactly one session
operation and refuses to construct if any command class lacks a handler.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date
from typing import TYPE_CHECKING, Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from agent_lounge.domain.enums import (
    ActivityType,
    Disposition,
    LeadStatus,
    Period,
    Priority,
    Product,
    TaskCategory,
)

if TYPE_CHECKING:
    from agent_lounge.services.session import AgentSession

logger = logging.getLogger(__name__)


class BaseCommand(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


# ===================================================================== #
#  Lead and call commands                                                #
# ===================================================================== #

class LogCall(BaseCommand):
    kind: Literal["log-call"] = "log-call"
    duration_minutes: int = Field(ge=0, description="Call length in minutes")
    disposition: Disposition | None = Field(default=None, description="Call outcome")
    notes: str = Field(default="", description="Free-text call notes")
    lead_id: str | None = Field(default=None, description="Lead the call was made to")


class AddLead(BaseCommand):
    kind: Literal["add-lead"] = "add-lead"
    name: str = Field(min_length=1, description="Contact name")
    email: str = ""
    phone: str = ""
    state: str = ""
    product: str = ""
    source: str = ""


class UpdateLeadStatus(BaseCommand):
    kind: Literal["update-lead-status"] = "update-lead-status"
    lead_id: str
    status: LeadStatus
    annual_premium: float | None = Field(
        default=None, ge=0, description="AP of the sale when closing"
    )


class LogActivity(BaseCommand):
    kind: Literal["log-activity"] = "log-activity"
    lead_id: str
    activity_type: ActivityType
    notes: str = ""
    disposition: Disposition | None = None


class AddReminder(BaseCommand):
    kind: Literal["add-reminder"] = "add-reminder"
    lead_id: str
    day: date
    time: str = ""
    message: str = ""


class CompleteReminder(BaseCommand):
    kind: Literal["complete-reminder"] = "complete-reminder"
    lead_id: str
    reminder_id: str


# ===================================================================== #
#  Task, training and quote commands                                     #
# ===================================================================== #

class AddTask(BaseCommand):
    kind: Literal["add-task"] = "add-task"
    title: str = Field(min_length=1)
    description: str = ""
    category: TaskCategory = TaskCategory.ADMIN
    due_date: str = ""
    performance_impact: int = Field(default=0, ge=0, description="XP awarded on completion")
    priority: Priority = Priority.MEDIUM


class CompleteTask(BaseCommand):
    kind: Literal["complete-task"] = "complete-task"
    task_id: str


class CompleteModule(BaseCommand):
    kind: Literal["complete-module"] = "complete-module"
    course_id: str
    module_id: str


class CreateQuote(BaseCommand):
    kind: Literal["create-quote"] = "create-quote"
    client_name: str = Field(min_length=1)
    product: Product
    coverage_amount: float = Field(ge=0)
    monthly_premium: float = Field(ge=0)
    client_email: str = ""
    client_phone: str = ""
    lead_id: str | None = None
    term: int | None = Field(default=None, ge=1, description="Term length in years")
    notes: str = ""


# ===================================================================== #
#  View commands                                                         #
# ===================================================================== #

class ShowLeaderboard(BaseCommand):
    kind: Literal["show-leaderboard"] = "show-leaderboard"
    period: Period = Period.WEEKLY


class MarkAllNotificationsRead(BaseCommand):
    kind: Literal["mark-all-notifications-read"] = "mark-all-notifications-read"


class CompleteOnboarding(BaseCommand):
    kind: Literal["complete-onboarding"] = "complete-onboarding"


COMMAND_TYPES: tuple[type[BaseCommand], ...] = (
    LogCall,
    AddLead,
    UpdateLeadStatus,
    LogActivity,
    AddReminder,
    CompleteReminder,
    AddTask,
    CompleteTask,
    CompleteModule,
    CreateQuote,
    ShowLeaderboard,
    MarkAllNotificationsRead,
    CompleteOnboarding,
)

Command = Annotated[
    Union[
        LogCall,
        AddLead,
        UpdateLeadStatus,
        LogActivity,
        AddReminder,
        CompleteReminder,
        AddTask,
        CompleteTask,
        CompleteModule,
        CreateQuote,
        ShowLeaderboard,
        MarkAllNotificationsRead,
        CompleteOnboarding,
    ],
    Field(discriminator="kind"),
]

_COMMAND_ADAPTER: TypeAdapter[Any] = TypeAdapter(Command)


def parse_command(data: dict[str, Any]) -> BaseCommand:
    """Validate a raw payload into its command model."""
    return _COMMAND_ADAPTER.validate_python(data)


def command_kinds() -> list[str]:
    return [cls.model_fields["kind"].default for cls in COMMAND_TYPES]


# ===================================================================== #
#  Dispatcher                                                            #
# ===================================================================== #

def _fields(command: BaseModel) -> dict[str, Any]:
    return {name: getattr(command, name) for name in type(command).model_fields if name != "kind"}


class CommandDispatcher:
    """Routes each command to its ``AgentSession`` operation.

    Parameters
    ----------
    session:
        The session every command acts on.
    handlers:
        Optional overrides keyed by command class.

    Raises
    ------
    TypeError
        If any command class is left without a handler.
    """

    def __init__(
        self,
        session: AgentSession,
        handlers: dict[type[BaseCommand], Callable[[Any], Any]] | None = None,
    ) -> None:
        self._handlers = self._default_handlers(session)
        if handlers:
            self._handlers.update(handlers)
        missing = [cls.__name__ for cls in COMMAND_TYPES if cls not in self._handlers]
        if missing:
            raise TypeError(f"No handler for command(s): {', '.join(missing)}")

    def _default_handlers(
        self, session: AgentSession
    ) -> dict[type[BaseCommand], Callable[[Any], Any]]:
        return {
            LogCall: lambda c: session.log_call(**_fields(c)),
            AddLead: lambda c: session.add_lead(**_fields(c)),
            UpdateLeadStatus: lambda c: session.update_lead_status(**_fields(c)),
            LogActivity: lambda c: session.log_activity(**_fields(c)),
            AddReminder: lambda c: session.add_reminder(c.lead_id, c.day, c.time, c.message),
            CompleteReminder: lambda c: session.complete_reminder(c.lead_id, c.reminder_id),
            AddTask: lambda c: session.add_task(**_fields(c)),
            CompleteTask: lambda c: session.complete_task(c.task_id),
            CompleteModule: lambda c: session.complete_module(c.course_id, c.module_id),
            CreateQuote: lambda c: session.create_quote(**_fields(c)),
            ShowLeaderboard: lambda c: session.rank_leaderboard(c.period),
            MarkAllNotificationsRead: lambda c: session.notifications.mark_all_read(),
            CompleteOnboarding: lambda c: session.complete_onboarding(),
        }

    def dispatch(self, command: BaseCommand | dict[str, Any]) -> Any:
        """Run *command* (a model or a raw payload) and return the result."""
        if isinstance(command, dict):
            command = parse_command(command)
        handler = self._handlers.get(type(command))
        if handler is None:
            raise TypeError(f"Unsupported command type {type(command).__name__}")
        logger.debug("Dispatching %s", command.kind)
        return handler(command)
