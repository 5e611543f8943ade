"""Unit tests for the status audit trail and notes log."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from pydantic import ValidationError

from grant_liaison.liaison.models import ApplicationStatus, GrantApplication
from grant_liaison.liaison.workflow import audit

T0 = datetime(2024, 10, 1, 9, 0, tzinfo=UTC)


def _app() -> GrantApplication:
    return GrantApplication(
        id="app-1", proposal_title="P", funder_name="F", application_date=T0, last_contact=T0
    )


def _entry(at: datetime, to: ApplicationStatus = ApplicationStatus.UNDER_REVIEW):
    return audit.new_entry(
        previous_status=ApplicationStatus.PENDING_SUBMISSION,
        new_status=to,
        reason="r",
        changed_by="tester",
        changed_at=at,
    )


def test_append_entry_returns_new_application() -> None:
    app = _app()
    updated = audit.append_entry(app, _entry(T0))

    assert app.status_history == ()
    assert updated.status == ApplicationStatus.UNDER_REVIEW
    assert audit.latest_entry(updated) == updated.status_history[0]


def test_append_entry_rejects_out_of_order_timestamps() -> None:
    updated = audit.append_entry(_app(), _entry(T0))
    with pytest.raises(audit.AuditTrailError):
        audit.append_entry(updated, _entry(T0 - timedelta(seconds=1)))


def test_history_entries_are_frozen() -> None:
    entry = _entry(T0)
    with pytest.raises(ValidationError):
        entry.reason = "rewritten"


def test_notes_are_appended_with_date_prefix() -> None:
    notes = audit.append_note("", "first", at=T0)
    notes = audit.append_note(notes, "second", at=T0 + timedelta(days=1))
    assert notes == "[Oct 01, 2024] first\n\n[Oct 02, 2024] second"


def test_status_change_note_optional_lines() -> None:
    entry = audit.new_entry(
        previous_status=ApplicationStatus.UNDER_REVIEW,
        new_status=ApplicationStatus.APPROVED,
        reason="funded",
        changed_by="tester",
        changed_at=T0,
        milestone="Final Review",
    )
    assert audit.status_change_note(entry) == (
        "Status changed: Under Review → Approved\nReason: funded\nMilestone: Final Review"
    )


def test_next_timestamp_never_goes_backwards() -> None:
    updated = audit.append_entry(_app(), _entry(T0))

    assert audit.next_timestamp(_app(), T0 - timedelta(days=1)) == T0 - timedelta(days=1)
    assert audit.next_timestamp(updated, T0 - timedelta(seconds=1)) == T0
    assert audit.next_timestamp(updated, T0 + timedelta(seconds=1)) == T0 + timedelta(seconds=1)
