"""Follow-up call scheduling and outcome recording.

Calls are created manually, as a side effect of a status change, or chained
from a recorded outcome. Nothing here runs in the background: whether a call
is due is decided at read time against the injected clock.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime

from grant_liaison.liaison.clock import Clock, SystemClock
from grant_liaison.liaison.errors import DoubleCompletionError, NotFound
from grant_liaison.liaison.models import (
    CallOutcome,
    CallStatus,
    CallType,
    GrantApplication,
    OutcomeStatus,
    Priority,
    ScheduledCall,
)
from grant_liaison.liaison.store import LiaisonStore
from grant_liaison.liaison.validation import (
    optional_datetime,
    optional_enum,
    optional_text,
    parse_datetime,
    parse_enum,
    parse_int,
    require_text,
)
from grant_liaison.liaison.workflow import audit

logger = logging.getLogger(__name__)

DEFAULT_DURATION_MINUTES = 30
DEFAULT_REMINDER_MINUTES = 15
DEFAULT_LOCATION = "Phone Call"


@dataclass(frozen=True, slots=True)
class OutcomeResult:
    call: ScheduledCall
    follow_up_call: ScheduledCall | None = None


class FollowUpScheduler:
    """Creates, tracks and resolves scheduled calls."""

    def __init__(self, store: LiaisonStore, clock: Clock | None = None) -> None:
        self._store = store
        self._clock = clock or SystemClock()

    def plan_call(
        self,
        application: GrantApplication,
        *,
        title: object,
        date_time: object,
        duration: object = DEFAULT_DURATION_MINUTES,
        type: object = CallType.FOLLOW_UP,  # noqa: A002 (domain field name)
        priority: object = Priority.MEDIUM,
        agenda: str = "",
        participants: str = "",
        location: str = DEFAULT_LOCATION,
        reminder_before: object = DEFAULT_REMINDER_MINUTES,
        notes: str = "",
    ) -> tuple[GrantApplication, ScheduledCall]:
        """Build a call for `application` without persisting anything.

        Returns the application updated with the scheduling note and contact
        time, and the new call. Used by every path that creates a call so the
        caller can commit both together.
        """

        now = self._clock.now()
        call = ScheduledCall(
            id=uuid.uuid4().hex,
            application_id=application.id,
            title=require_text(title, "title"),
            date_time=parse_datetime(date_time, "date_time"),
            duration=parse_int(duration, "duration", minimum=1),
            type=parse_enum(CallType, type, "type"),
            priority=parse_enum(Priority, priority, "priority"),
            agenda=agenda or "",
            participants=participants or "",
            location=location or DEFAULT_LOCATION,
            reminder_before=parse_int(reminder_before, "reminder_before", minimum=0),
            notes=notes or "",
            status=CallStatus.SCHEDULED,
            outcome=None,
            created_at=now,
        )
        updated = application.model_copy(
            update={
                "notes": audit.append_note(
                    application.notes,
                    audit.call_scheduled_note(call.title, call.date_time),
                    at=now,
                ),
                "last_contact": now,
            }
        )
        return updated, call

    def schedule(
        self,
        application_id: str,
        *,
        title: object,
        date_time: object,
        duration: object = DEFAULT_DURATION_MINUTES,
        type: object = CallType.FOLLOW_UP,  # noqa: A002 (domain field name)
        priority: object = Priority.MEDIUM,
        agenda: str = "",
        participants: str = "",
        location: str = DEFAULT_LOCATION,
        reminder_before: object = DEFAULT_REMINDER_MINUTES,
        notes: str = "",
    ) -> ScheduledCall:
        with self._store.application_lock(application_id):
            application = self._store.get_application(application_id)
            if application is None:
                raise NotFound("Application", application_id)

            updated, call = self.plan_call(
                application,
                title=title,
                date_time=date_time,
                duration=duration,
                type=type,
                priority=priority,
                agenda=agenda,
                participants=participants,
                location=location,
                reminder_before=reminder_before,
                notes=notes,
            )
            self._store.commit(applications=[updated], calls=[call])

        logger.info(
            "Call scheduled",
            extra={
                "application_id": application_id,
                "call_id": call.id,
                "call_type": call.type.value,
                "date_time": call.date_time.isoformat(),
            },
        )
        return call

    def record_outcome(
        self,
        call_id: str,
        *,
        status: object,
        summary: object,
        next_steps: object = None,
        follow_up_date: object = None,
        follow_up_type: object = None,
        rating: object = 5,
    ) -> OutcomeResult:
        """Complete a scheduled call and optionally chain a follow-up.

        A completed call always fails with :class:`DoubleCompletionError`,
        before any other input is looked at. Wall-clock ordering against the
        call's date_time is not enforced here.
        """

        existing = self._store.get_call(call_id)
        if existing is None:
            raise NotFound("Call", call_id)

        with self._store.application_lock(existing.application_id):
            call = self._store.get_call(call_id)
            if call is None:
                raise NotFound("Call", call_id)
            if call.status == CallStatus.COMPLETED:
                raise DoubleCompletionError(call_id)

            outcome_status = parse_enum(OutcomeStatus, status, "status")
            summary_text = require_text(summary, "summary")
            steps = optional_text(next_steps, "next_steps")
            follow_up_at = optional_datetime(follow_up_date, "follow_up_date")
            follow_up_kind = optional_enum(CallType, follow_up_type, "follow_up_type")
            score = parse_int(rating, "rating", minimum=1, maximum=5)

            application = self._store.get_application(call.application_id)
            if application is None:
                raise NotFound("Application", call.application_id)

            now = self._clock.now()
            completed = call.model_copy(
                update={
                    "status": CallStatus.COMPLETED,
                    "outcome": CallOutcome(
                        status=outcome_status,
                        summary=summary_text,
                        next_steps=steps,
                        follow_up_date=follow_up_at,
                        follow_up_type=follow_up_kind,
                        rating=score,
                        completed_at=now,
                    ),
                }
            )
            application = application.model_copy(
                update={
                    "notes": audit.append_note(
                        application.notes,
                        audit.call_completed_note(
                            call.title, outcome_status.value, summary_text, steps
                        ),
                        at=now,
                    ),
                    "last_contact": now,
                }
            )

            follow_up: ScheduledCall | None = None
            if follow_up_at is not None and follow_up_kind is not None:
                application, follow_up = self.plan_call(
                    application,
                    title=f"Follow-up: {follow_up_kind.value}",
                    date_time=follow_up_at,
                    type=follow_up_kind,
                    priority=Priority.MEDIUM,
                    agenda=f"Follow-up from previous call: {call.title}",
                    participants=call.participants or application.contact_person,
                    notes=f"Scheduled as follow-up from call on {audit.format_note_date(now)}",
                )

            written = [completed] if follow_up is None else [completed, follow_up]
            self._store.commit(applications=[application], calls=written)

        logger.info(
            "Call outcome recorded",
            extra={
                "call_id": call_id,
                "application_id": completed.application_id,
                "outcome": outcome_status.value,
                "follow_up_call_id": follow_up.id if follow_up is not None else None,
            },
        )
        return OutcomeResult(call=completed, follow_up_call=follow_up)

    def list_calls(self, *, status: CallStatus | None = None) -> list[ScheduledCall]:
        """All calls, newest-created first."""

        calls = self._store.calls()
        if status is not None:
            calls = [c for c in calls if c.status == status]
        calls.sort(key=lambda c: c.created_at, reverse=True)
        return calls

    def calls_for_application(self, application_id: str) -> list[ScheduledCall]:
        return [c for c in self.list_calls() if c.application_id == application_id]

    def due_calls(self, *, now: datetime | None = None) -> list[ScheduledCall]:
        """Scheduled calls whose time has passed and that await an outcome."""

        at = now or self._clock.now()
        due = [c for c in self.list_calls(status=CallStatus.SCHEDULED) if c.date_time <= at]
        due.sort(key=lambda c: c.date_time)
        return due
