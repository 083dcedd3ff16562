"""Tests for LeadPipeline: creation, duplicates, status moves, activity, tags,
reminders and CSV import/export."""

from __future__ import annotations

import csv
import io
from datetime import date

import pytest

from agent_lounge.domain.enums import ActivityType, Disposition, LeadStatus
from agent_lounge.domain.events import ActivityLogged, LeadCreated, LeadStatusChanged
from agent_lounge.domain.exceptions import DuplicateLeadError, NotFoundError
from agent_lounge.services.pipeline import (
    EXPORT_HEADERS,
    LeadPipeline,
    normalize_email,
    normalize_phone,
)


@pytest.fixture
def pipeline(clock, bus) -> LeadPipeline:
    return LeadPipeline(owner_id="agent-1", clock=clock, event_bus=bus)


# ============= #
# Normalization #
# ============= #


class TestNormalization:
    def test_email(self) -> None:
        assert normalize_email("  MChen@Email.COM ") == "mchen@email.com"
        assert normalize_email("") == ""

    @pytest.mark.parametrize(
        "raw",
        ["(630) 555-1234", "630.555.1234", "630-555-1234", "+1 630 555 1234", "16305551234"],
    )
    def test_phone_formats_collapse(self, raw: str) -> None:
        assert normalize_phone(raw) == "6305551234"

    def test_phone_without_digits(self) -> None:
        assert normalize_phone("n/a") == ""


# ======== #
# Creation #
# ======== #


class TestCreateLead:
    def test_new_lead_defaults(self, pipeline, clock, recorder) -> None:
        lead = pipeline.create_lead("Michael Chen", "mchen@email.com", "(630) 555-1234", "Illinois", "Term Life", "Website")
        assert lead.status == LeadStatus.NEW
        assert lead.assigned_to == "agent-1"
        assert lead.created_at == clock.now
        assert lead.id in pipeline
        assert len(pipeline) == 1
        assert isinstance(recorder[-1], LeadCreated)
        assert recorder[-1].lead_id == lead.id

    def test_duplicate_email_is_rejected(self, pipeline) -> None:
        first = pipeline.create_lead("Michael Chen", "mchen@email.com")
        with pytest.raises(DuplicateLeadError) as exc_info:
            pipeline.create_lead("M. Chen", "  MCHEN@email.com")
        assert exc_info.value.field == "email"
        assert exc_info.value.existing_id == first.id
        assert len(pipeline) == 1

    def test_duplicate_phone_in_another_format(self, pipeline) -> None:
        pipeline.create_lead("Michael Chen", "mchen@email.com", "(630) 555-1234")
        with pytest.raises(DuplicateLeadError) as exc_info:
            pipeline.create_lead("Someone Else", "other@email.com", "630.555.1234")
        assert exc_info.value.field == "phone"

    def test_blank_contact_fields_never_collide(self, pipeline) -> None:
        pipeline.create_lead("A")
        pipeline.create_lead("B")
        assert len(pipeline) == 2

    def test_get_unknown_raises(self, pipeline) -> None:
        with pytest.raises(NotFoundError):
            pipeline.get("lead-missing")


class TestQueries:
    def test_search(self, pipeline) -> None:
        pipeline.create_lead("Michael Chen", "mchen@email.com", "(630) 555-1234")
        pipeline.create_lead("Sarah Williams", "swilliams@email.com", "(312) 555-5678")
        assert [lead.name for lead in pipeline.search("chen")] == ["Michael Chen"]
        assert [lead.name for lead in pipeline.search("312")] == ["Sarah Williams"]
        assert len(pipeline.search("  ")) == 2

    def test_status_counts_cover_every_stage(self, pipeline) -> None:
        lead = pipeline.create_lead("Michael Chen")
        pipeline.update_status(lead.id, LeadStatus.QUALIFIED)
        counts = pipeline.status_counts()
        assert set(counts) == set(LeadStatus)
        assert counts[LeadStatus.QUALIFIED] == 1
        assert counts[LeadStatus.NEW] == 0
        assert pipeline.by_status(LeadStatus.QUALIFIED)[0] is lead


# ================== #
# Status transitions #
# ================== #


class TestUpdateStatus:
    def test_records_history_and_event(self, pipeline, recorder) -> None:
        lead = pipeline.create_lead("Michael Chen")
        assert pipeline.update_status(lead.id, LeadStatus.CONTACTED) is True
        assert lead.status == LeadStatus.CONTACTED
        change = lead.status_history[-1]
        assert (change.from_status, change.to_status) == (LeadStatus.NEW, LeadStatus.CONTACTED)
        event = recorder[-1]
        assert isinstance(event, LeadStatusChanged)
        assert event.to_status == LeadStatus.CONTACTED

    def test_same_status_is_noop(self, pipeline, recorder) -> None:
        lead = pipeline.create_lead("Michael Chen")
        count = len(recorder)
        assert pipeline.update_status(lead.id, LeadStatus.NEW) is False
        assert lead.status_history == []
        assert len(recorder) == count

    def test_any_stage_reachable(self, pipeline) -> None:
        lead = pipeline.create_lead("Michael Chen")
        pipeline.update_status(lead.id, LeadStatus.CLOSED)
        assert pipeline.update_status(lead.id, LeadStatus.NEW) is True

    def test_unknown_lead(self, pipeline) -> None:
        with pytest.raises(NotFoundError):
            pipeline.update_status("nope", LeadStatus.CLOSED)

    def test_bulk_update_counts_changes(self, pipeline) -> None:
        a = pipeline.create_lead("A")
        b = pipeline.create_lead("B")
        pipeline.update_status(b.id, LeadStatus.LOST)
        assert pipeline.bulk_update_status([a.id, b.id], LeadStatus.LOST) == 1

    def test_bulk_update_is_all_or_nothing(self, pipeline) -> None:
        a = pipeline.create_lead("A")
        with pytest.raises(NotFoundError):
            pipeline.bulk_update_status([a.id, "missing"], LeadStatus.LOST)
        assert a.status == LeadStatus.NEW


# ========================= #
# Activity, tags, reminders #
# ========================= #


class TestActivity:
    def test_add_activity(self, pipeline, clock, recorder) -> None:
        lead = pipeline.create_lead("Michael Chen")
        pipeline.update_status(lead.id, LeadStatus.QUALIFIED)
        entry = pipeline.add_activity(lead.id, ActivityType.CALL, "Interested", Disposition.INTERESTED)
        assert lead.notes == [entry]
        assert entry.agent_id == "agent-1"
        assert entry.timestamp == clock.now
        assert lead.last_contact_date == clock.now.date()
        assert lead.status == LeadStatus.QUALIFIED
        assert isinstance(recorder[-1], ActivityLogged)

    def test_activity_on_unknown_lead(self, pipeline) -> None:
        with pytest.raises(NotFoundError):
            pipeline.add_activity("nope", ActivityType.NOTE)


class TestTags:
    def test_add_and_remove(self, pipeline) -> None:
        lead = pipeline.create_lead("Michael Chen")
        assert pipeline.add_tag(lead.id, " hot ") is True
        assert pipeline.add_tag(lead.id, "hot") is False
        assert pipeline.add_tag(lead.id, "") is False
        assert lead.tags == {"hot"}
        assert pipeline.remove_tag(lead.id, "hot") is True
        assert pipeline.remove_tag(lead.id, "hot") is False

    def test_remove_on_unknown_lead_is_noop(self, pipeline) -> None:
        assert pipeline.remove_tag("nope", "hot") is False

    def test_add_on_unknown_lead_raises(self, pipeline) -> None:
        with pytest.raises(NotFoundError):
            pipeline.add_tag("nope", "hot")


class TestReminders:
    def test_complete_reminder(self, pipeline) -> None:
        lead = pipeline.create_lead("Michael Chen")
        reminder = pipeline.add_reminder(lead.id, date(2025, 6, 12), "09:00", "Call back")
        assert lead.open_reminders == [reminder]
        assert pipeline.complete_reminder(lead.id, reminder.id) is True
        assert pipeline.complete_reminder(lead.id, reminder.id) is False
        assert lead.open_reminders == []

    def test_complete_unknown_is_noop(self, pipeline) -> None:
        lead = pipeline.create_lead("Michael Chen")
        assert pipeline.complete_reminder(lead.id, "rem-missing") is False
        assert pipeline.complete_reminder("lead-missing", "rem-missing") is False

    def test_due_reminders_sorted(self, pipeline) -> None:
        a = pipeline.create_lead("A")
        b = pipeline.create_lead("B")
        late = pipeline.add_reminder(a.id, date(2025, 6, 11), "15:00", "late")
        early = pipeline.add_reminder(b.id, date(2025, 6, 10), "09:00", "early")
        pipeline.add_reminder(b.id, date(2025, 6, 20), "09:00", "future")
        due = pipeline.due_reminders(date(2025, 6, 11))
        assert [r for _, r in due] == [early, late]


# ================ #
# CSV import/export #
# ================ #


class TestImport:
    def test_import_rows(self, pipeline) -> None:
        pipeline.create_lead("Existing", "taken@email.com")
        result = pipeline.import_rows([
            {"Name": "Emily Thompson", "Email": "ethompson@email.com", "Phone": "(847) 555-3333"},
            {"Name": "", "Email": "noname@email.com"},
            {"Name": "No Email"},
            {"Name": "Dup", "Email": "TAKEN@email.com"},
            {"Name": "Dup Row", "Email": "ethompson@email.com"},
        ])
        assert result.created_count == 1
        assert result.skipped_invalid == 2
        assert result.duplicates == ("TAKEN@email.com", "ethompson@email.com")
        lead = pipeline.get(result.created[0])
        assert lead.source == "CSV Import"

    def test_import_csv_headers_case_insensitive(self, pipeline) -> None:
        text = "NAME,Email,phone,Source,Ignored\nDavid Park,dpark@email.com,(312) 555-7777,Referral,x\n"
        result = pipeline.import_csv(text)
        assert result.created_count == 1
        lead = pipeline.get(result.created[0])
        assert lead.name == "David Park"
        assert lead.source == "Referral"


class TestExport:
    def test_export_all(self, pipeline, clock) -> None:
        lead = pipeline.create_lead("Lisa Martinez", "lmartinez@email.com", "(630) 555-4444", "Illinois", "Whole Life", "Website")
        pipeline.add_activity(lead.id, ActivityType.NOTE)
        rows = list(csv.reader(io.StringIO(pipeline.export_csv())))
        assert tuple(rows[0]) == EXPORT_HEADERS
        assert rows[1] == [
            "Lisa Martinez",
            "lmartinez@email.com",
            "(630) 555-4444",
            "new",
            "Website",
            "Whole Life",
            "Illinois",
            "2025-06-11",
            "2025-06-11",
        ]

    def test_export_quotes_every_field(self, pipeline) -> None:
        pipeline.create_lead("Chen, Michael", "mchen@email.com")
        text = pipeline.export_csv()
        assert text.splitlines()[1].startswith('"Chen, Michael","mchen@email.com"')

    def test_export_selected(self, pipeline) -> None:
        a = pipeline.create_lead("A")
        pipeline.create_lead("B")
        rows = list(csv.reader(io.StringIO(pipeline.export_csv([a.id]))))
        assert len(rows) == 2

    def test_export_then_import_into_empty_pipeline(self, pipeline, clock) -> None:
        pipeline.create_lead("Michael Chen", "mchen@email.com", "(630) 555-1234", source="Website")
        other = LeadPipeline(clock=clock)
        result = other.import_csv(pipeline.export_csv())
        assert result.created_count == 1
        assert other.leads[0].source == "Website"
