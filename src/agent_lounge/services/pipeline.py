"""Lead registry and pipeline state machine.

Owns every lead record of one agent together with its tags, reminders,
activity log and status history.  The pipeline is deliberately permissive:
any stage is reachable from any other stage (the pipeline board allows free
drag between columns), including reopening ``closed`` or ``lost`` leads.

Invariants enforced here:

* every real status change appends exactly one ``StatusChange``;
  same-status updates are no-ops;
* ``notes`` and ``status_history`` only ever grow;
* no two leads share a normalized email or a normalized phone number.
"""

from __future__ import annotations

import csv
import io
import logging
import re
from collections import Counter
from collections.abc import Callable, Iterable, Mapping
from datetime import date, datetime
from typing import Any

from agent_lounge.domain.entities import Lead, Reminder
from agent_lounge.domain.enums import ActivityType, Disposition, LeadStatus
from agent_lounge.domain.events import ActivityLogged, LeadCreated, LeadStatusChanged
from agent_lounge.domain.exceptions import DuplicateLeadError, NotFoundError
from agent_lounge.domain.values import ActivityLog, ImportResult, StatusChange, new_id
from agent_lounge.infrastructure.event_bus import EventBus

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

_NON_DIGITS = re.compile(r"\D")

EXPORT_HEADERS = (
    "Name",
    "Email",
    "Phone",
    "Status",
    "Source",
    "Product",
    "State",
    "Created Date",
    "Last Contact",
)

_IMPORT_COLUMNS = ("name", "email", "phone", "source", "product", "state")


def normalize_email(email: str) -> str:
    """Lower-case and strip surrounding whitespace."""
    return (email or "").strip().lower()


def normalize_phone(phone: str) -> str:
    """Digits only, without a leading US country code."""
    digits = _NON_DIGITS.sub("", phone or "")
    if len(digits) == 11 and digits.startswith("1"):
        digits = digits[1:]
    return digits


class LeadPipeline:
    """Aggregate root for one agent's leads.

    Parameters
    ----------
    owner_id:
        Agent id stamped on new leads and activity log entries.
    clock:
        Returns the current time; injectable for deterministic tests.
    event_bus:
        Optional bus receiving ``LeadCreated``, ``LeadStatusChanged`` and
        ``ActivityLogged`` events.
    """

    def __init__(
        self,
        owner_id: str = "",
        clock: Clock = datetime.now,
        event_bus: EventBus | None = None,
    ) -> None:
        self._owner_id = owner_id
        self._clock = clock
        self._event_bus = event_bus
        self._leads: dict[str, Lead] = {}
        self._by_email: dict[str, str] = {}
        self._by_phone: dict[str, str] = {}

    # -- queries --------------------------------------------------------------

    @property
    def leads(self) -> list[Lead]:
        """All leads in creation order."""
        return list(self._leads.values())

    def __len__(self) -> int:
        return len(self._leads)

    def __contains__(self, lead_id: object) -> bool:
        return lead_id in self._leads

    def get(self, lead_id: str) -> Lead:
        """Return the lead or raise ``NotFoundError``."""
        lead = self._leads.get(lead_id)
        if lead is None:
            raise NotFoundError("Lead", lead_id)
        return lead

    def by_status(self, status: LeadStatus) -> list[Lead]:
        return [lead for lead in self._leads.values() if lead.status == status]

    def status_counts(self) -> dict[LeadStatus, int]:
        """Lead count per pipeline column (every stage present)."""
        counts = Counter(lead.status for lead in self._leads.values())
        return {status: counts.get(status, 0) for status in LeadStatus}

    def search(self, text: str) -> list[Lead]:
        """Case-insensitive substring match on name, email or phone."""
        needle = text.strip().lower()
        if not needle:
            return self.leads
        return [
            lead
            for lead in self._leads.values()
            if needle in lead.name.lower()
            or needle in lead.email.lower()
            or needle in lead.phone
        ]

    def find_duplicate(self, email: str = "", phone: str = "") -> tuple[str, str] | None:
        """Return ``(field, existing_lead_id)`` if either key is taken."""
        key = normalize_email(email)
        if key and key in self._by_email:
            return "email", self._by_email[key]
        key = normalize_phone(phone)
        if key and key in self._by_phone:
            return "phone", self._by_phone[key]
        return None

    # -- creation -------------------------------------------------------------

    def create_lead(
        self,
        name: str,
        email: str = "",
        phone: str = "",
        state: str = "",
        product: str = "",
        source: str = "",
    ) -> Lead:
        """Create a lead in the ``new`` stage.

        Raises ``DuplicateLeadError`` if the normalized email or phone
        matches an existing lead.
        """
        duplicate = self.find_duplicate(email, phone)
        if duplicate is not None:
            field_name, existing_id = duplicate
            value = email if field_name == "email" else phone
            logger.warning("Rejected duplicate lead (%s=%r matches %s)", field_name, value, existing_id)
            raise DuplicateLeadError(field_name, value, existing_id)

        lead = Lead(
            id=new_id("lead"),
            name=name.strip(),
            email=email.strip(),
            phone=phone.strip(),
            state=state,
            product=product,
            source=source,
            assigned_to=self._owner_id,
            created_at=self._clock(),
        )
        self._leads[lead.id] = lead
        self._index(lead)
        logger.debug("Created lead %s (%s)", lead.id, lead.name)
        self._emit(LeadCreated(source_id=self._owner_id, lead_id=lead.id, lead_name=lead.name))
        return lead

    def restore(self, lead: Lead) -> None:
        """Re-insert a previously serialized lead, keeping its id and history."""
        self._leads[lead.id] = lead
        self._index(lead)

    def _index(self, lead: Lead) -> None:
        email_key = normalize_email(lead.email)
        if email_key:
            self._by_email[email_key] = lead.id
        phone_key = normalize_phone(lead.phone)
        if phone_key:
            self._by_phone[phone_key] = lead.id

    # -- status transitions ---------------------------------------------------

    def update_status(self, lead_id: str, new_status: LeadStatus) -> bool:
        """Move a lead to *new_status*.

        Returns ``True`` if the status changed, ``False`` for a same-status
        no-op.  Raises ``NotFoundError`` for unknown leads.
        """
        lead = self.get(lead_id)
        old_status = lead.status
        if new_status == old_status:
            return False
        lead.status_history.append(
            StatusChange(from_status=old_status, to_status=new_status, timestamp=self._clock())
        )
        lead.status = new_status
        logger.debug("Lead %s: %s -> %s", lead_id, old_status.value, new_status.value)
        self._emit(
            LeadStatusChanged(
                source_id=self._owner_id,
                lead_id=lead_id,
                lead_name=lead.name,
                from_status=old_status,
                to_status=new_status,
            )
        )
        return True

    def bulk_update_status(self, lead_ids: Iterable[str], new_status: LeadStatus) -> int:
        """Apply ``update_status`` to several leads, all or nothing.

        Every id is checked before anything changes.  Returns the number of
        leads whose status actually changed.
        """
        ids = list(lead_ids)
        for lead_id in ids:
            self.get(lead_id)
        return sum(1 for lead_id in ids if self.update_status(lead_id, new_status))

    # -- activity log ---------------------------------------------------------

    def add_activity(
        self,
        lead_id: str,
        activity_type: ActivityType,
        notes: str = "",
        disposition: Disposition | None = None,
    ) -> ActivityLog:
        """Append an immutable activity entry; the status is left untouched."""
        lead = self.get(lead_id)
        now = self._clock()
        entry = ActivityLog(
            id=new_id("log"),
            type=activity_type,
            notes=notes,
            timestamp=now,
            disposition=disposition,
            agent_id=self._owner_id,
        )
        lead.notes.append(entry)
        lead.last_contact_date = now.date()
        self._emit(
            ActivityLogged(
                source_id=self._owner_id,
                lead_id=lead_id,
                activity_id=entry.id,
                activity_type=activity_type,
            )
        )
        return entry

    # -- tags -----------------------------------------------------------------

    def add_tag(self, lead_id: str, tag: str) -> bool:
        """Add *tag*; returns ``False`` if it was already present."""
        lead = self.get(lead_id)
        tag = tag.strip()
        if not tag or tag in lead.tags:
            return False
        lead.tags.add(tag)
        return True

    def remove_tag(self, lead_id: str, tag: str) -> bool:
        """Remove *tag*; unknown leads and absent tags are no-ops."""
        lead = self._leads.get(lead_id)
        if lead is None or tag not in lead.tags:
            return False
        lead.tags.discard(tag)
        return True

    # -- reminders ------------------------------------------------------------

    def add_reminder(self, lead_id: str, day: date, time: str, message: str) -> Reminder:
        lead = self.get(lead_id)
        reminder = Reminder(id=new_id("rem"), date=day, time=time, message=message)
        lead.reminders.append(reminder)
        return reminder

    def complete_reminder(self, lead_id: str, reminder_id: str) -> bool:
        """Complete a reminder.

        Unknown leads, unknown reminders and already-completed reminders are
        all no-ops returning ``False``.
        """
        lead = self._leads.get(lead_id)
        if lead is None:
            return False
        reminder = lead.find_reminder(reminder_id)
        if reminder is None:
            return False
        return reminder.complete()

    def due_reminders(self, day: date) -> list[tuple[Lead, Reminder]]:
        """Open reminders dated on or before *day*, oldest first."""
        due = [
            (lead, reminder)
            for lead in self._leads.values()
            for reminder in lead.open_reminders
            if reminder.date <= day
        ]
        due.sort(key=lambda pair: (pair[1].date, pair[1].time))
        return due

    # -- CSV import / export --------------------------------------------------

    def import_rows(self, rows: Iterable[Mapping[str, Any]], default_source: str = "CSV Import") -> ImportResult:
        """Bulk-create leads from mapping rows.

        Rows without a name or email are skipped as invalid; duplicates
        (against existing leads or earlier rows) are skipped and reported.
        """
        created: list[str] = []
        duplicates: list[str] = []
        invalid = 0
        for row in rows:
            fields = {
                k.strip().lower(): str(v).strip()
                for k, v in row.items()
                if k is not None and v is not None
            }
            name, email = fields.get("name", ""), fields.get("email", "")
            if not name or not email:
                invalid += 1
                continue
            try:
                lead = self.create_lead(
                    name=name,
                    email=email,
                    phone=fields.get("phone", ""),
                    state=fields.get("state", ""),
                    product=fields.get("product", ""),
                    source=fields.get("source") or default_source,
                )
            except DuplicateLeadError:
                duplicates.append(email)
                continue
            created.append(lead.id)
        logger.info(
            "Imported %d leads (%d duplicates, %d invalid)",
            len(created), len(duplicates), invalid,
        )
        return ImportResult(
            created=tuple(created),
            skipped_invalid=invalid,
            duplicates=tuple(duplicates),
        )

    def import_csv(self, text: str) -> ImportResult:
        """Parse CSV text with a header row and import its rows."""
        reader = csv.DictReader(io.StringIO(text))
        rows = (
            {k: v for k, v in row.items() if k and k.strip().lower() in _IMPORT_COLUMNS}
            for row in reader
        )
        return self.import_rows(rows)

    def export_csv(self, lead_ids: Iterable[str] | None = None) -> str:
        """Export leads (all, or the given ids) as CSV text."""
        if lead_ids is None:
            leads = self.leads
        else:
            leads = [self.get(lead_id) for lead_id in lead_ids]
        buf = io.StringIO()
        writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
        writer.writerow(EXPORT_HEADERS)
        for lead in leads:
            writer.writerow([
                lead.name,
                lead.email,
                lead.phone,
                lead.status.value,
                lead.source,
                lead.product,
                lead.state,
                lead.created_at.date().isoformat(),
                lead.last_contact_date.isoformat() if lead.last_contact_date else "",
            ])
        return buf.getvalue()

    # -- internal -------------------------------------------------------------

    def _emit(self, event: Any) -> None:
        if self._event_bus is not None:
            self._event_bus.publish(event)
