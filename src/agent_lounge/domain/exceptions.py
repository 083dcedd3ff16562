"""Domain exceptions for the Agent Lounge engine.

All domain-specific exceptions inherit from ``AgentLoungeError`` so callers
can catch the full family with a single ``except`` clause when needed.  Each
exception also exposes an ``ErrorKind`` so UI layers can branch on the kind
without importing every class.
"""

from __future__ import annotations

from typing import Any

from .enums import ErrorKind


class AgentLoungeError(Exception):
    """Base exception for all Agent Lounge domain errors."""

    kind: ErrorKind | None = None

    def __init__(self, message: str = "", details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.details: dict[str, Any] = details or {}


class NotFoundError(AgentLoungeError):
    """Raised when a mutating operation references an unknown id.

    Defensive operations (completing a reminder, removing a tag, clearing a
    notification) never raise this; they treat unknown ids as no-ops.
    """

    kind = ErrorKind.NOT_FOUND

    def __init__(
        self,
        entity: str,
        entity_id: str,
        message: str = "",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message or f"{entity} {entity_id!r} not found", details)
        self.entity = entity
        self.entity_id = entity_id


class DuplicateLeadError(AgentLoungeError):
    """Raised when a new lead's normalized email or phone is already taken."""

    kind = ErrorKind.DUPLICATE_LEAD

    def __init__(
        self,
        field: str,
        value: str,
        existing_id: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            f"Lead with {field} {value!r} already exists ({existing_id})",
            details,
        )
        self.field = field
        self.value = value
        self.existing_id = existing_id


class InvalidAmountError(AgentLoungeError):
    """Raised for negative XP or AP deltas."""

    kind = ErrorKind.INVALID_AMOUNT

    def __init__(
        self,
        amount: float,
        message: str = "",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message or f"Amount must be >= 0, got {amount}", details)
        self.amount = amount
