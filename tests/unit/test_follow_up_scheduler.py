"""Unit tests for follow-up call scheduling and outcomes."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from grant_liaison.liaison.clock import FixedClock
from grant_liaison.liaison.errors import DoubleCompletionError, NotFound, ValidationError
from grant_liaison.liaison.models import (
    CallStatus,
    CallType,
    GrantApplication,
    OutcomeStatus,
    Priority,
)
from grant_liaison.liaison.service import LiaisonService


def _schedule(service: LiaisonService, app: GrantApplication, **overrides: object):
    fields: dict[str, object] = {
        "title": "Budget clarification",
        "date_time": "2024-10-03T14:00:00Z",
        "type": "Clarification",
        "participants": "Dr. Sarah Johnson, PI",
    }
    fields.update(overrides)
    return service.schedule_call(app.id, **fields)


def test_schedule_call_defaults(service: LiaisonService, application: GrantApplication) -> None:
    call = _schedule(service, application)

    assert call.status == CallStatus.SCHEDULED
    assert call.outcome is None
    assert call.duration == 30
    assert call.reminder_before == 15
    assert call.location == "Phone Call"
    assert call.priority == Priority.MEDIUM
    assert call.date_time == datetime(2024, 10, 3, 14, 0, tzinfo=UTC)

    notes = service.get_application(application.id).notes
    assert notes.endswith("Scheduled call: Budget clarification - Oct 03, 2024 at 14:00")


def test_schedule_call_validation(service: LiaisonService, application: GrantApplication) -> None:
    with pytest.raises(ValidationError):
        _schedule(service, application, title="")
    with pytest.raises(ValidationError):
        _schedule(service, application, date_time="soon")
    with pytest.raises(ValidationError):
        _schedule(service, application, duration=0)
    with pytest.raises(ValidationError):
        _schedule(service, application, type="Lunch")

    assert service.list_calls() == []
    assert service.get_application(application.id).notes == ""


def test_schedule_call_unknown_application(service: LiaisonService) -> None:
    with pytest.raises(NotFound):
        service.schedule_call("missing", title="t", date_time="2024-10-03T14:00:00Z")


def test_outcome_with_follow_up_chains_a_call(
    service: LiaisonService, application: GrantApplication, clock: FixedClock
) -> None:
    call = _schedule(service, application)
    clock.advance(timedelta(days=2, hours=5))
    follow_up_at = datetime(2024, 10, 10, 15, 0, tzinfo=UTC)

    result = service.record_outcome(
        call.id,
        status="Successful",
        summary="Budget approved",
        next_steps="Send revised budget",
        follow_up_date=follow_up_at,
        follow_up_type="Final Review",
        rating=4,
    )

    completed = result.call
    assert completed.status == CallStatus.COMPLETED
    assert completed.outcome is not None
    assert completed.outcome.status == OutcomeStatus.SUCCESSFUL
    assert completed.outcome.rating == 4
    assert completed.outcome.completed_at == clock.now()

    follow_up = result.follow_up_call
    assert follow_up is not None
    assert follow_up.type == CallType.FINAL_REVIEW
    assert follow_up.title == "Follow-up: Final Review"
    assert follow_up.date_time == follow_up_at
    assert follow_up.participants == "Dr. Sarah Johnson, PI"
    assert follow_up.agenda == "Follow-up from previous call: Budget clarification"
    assert follow_up.status == CallStatus.SCHEDULED

    assert {c.id for c in service.calls_for_application(application.id)} == {
        call.id,
        follow_up.id,
    }
    notes = service.get_application(application.id).notes
    assert "Call completed: Budget clarification" in notes
    assert "Outcome: Successful" in notes


def test_outcome_needs_both_follow_up_fields(
    service: LiaisonService, application: GrantApplication
) -> None:
    call = _schedule(service, application)
    result = service.record_outcome(
        call.id,
        status="No Answer",
        summary="Voicemail",
        follow_up_date="2024-10-10T15:00:00Z",
    )
    assert result.follow_up_call is None
    assert len(service.list_calls()) == 1


def test_double_completion_wins_over_bad_input(
    service: LiaisonService, application: GrantApplication
) -> None:
    call = _schedule(service, application)
    service.record_outcome(call.id, status="Successful", summary="done")

    with pytest.raises(DoubleCompletionError):
        service.record_outcome(call.id, status="Successful", summary="again")
    with pytest.raises(DoubleCompletionError):
        service.record_outcome(call.id, status="", summary="", rating=99)


@pytest.mark.parametrize("rating", [0, 6, "five", True])
def test_rating_out_of_range(
    service: LiaisonService, application: GrantApplication, rating: object
) -> None:
    call = _schedule(service, application)
    with pytest.raises(ValidationError):
        service.record_outcome(call.id, status="Successful", summary="ok", rating=rating)
    assert service.get_call(call.id).status == CallStatus.SCHEDULED


def test_outcome_unknown_call(service: LiaisonService) -> None:
    with pytest.raises(NotFound):
        service.record_outcome("missing", status="Successful", summary="ok")


def test_due_calls(
    service: LiaisonService, application: GrantApplication, clock: FixedClock
) -> None:
    early = _schedule(service, application, title="early", date_time="2024-10-02T09:00:00Z")
    late = _schedule(service, application, title="late", date_time="2024-10-05T09:00:00Z")

    assert service.due_calls() == []

    clock.advance(timedelta(days=2))
    assert service.due_calls() == [early]

    clock.advance(timedelta(days=10))
    assert [c.id for c in service.due_calls()] == [early.id, late.id]

    service.record_outcome(early.id, status="Successful", summary="done")
    assert [c.id for c in service.due_calls()] == [late.id]


def test_list_calls_by_status(
    service: LiaisonService, application: GrantApplication, clock: FixedClock
) -> None:
    first = _schedule(service, application, title="first")
    clock.advance(timedelta(minutes=1))
    second = _schedule(service, application, title="second")
    service.record_outcome(first.id, status="Postponed", summary="later")

    assert [c.id for c in service.list_calls()] == [second.id, first.id]
    assert [c.id for c in service.list_calls(status="Completed")] == [first.id]
    with pytest.raises(ValidationError):
        service.list_calls(status="Cancelled")
