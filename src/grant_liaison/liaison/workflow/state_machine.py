from __future__ import annotations

import logging
from dataclasses import dataclass

from grant_liaison.liaison.clock import Clock, SystemClock
from grant_liaison.liaison.errors import InvalidTransitionError, NotFound, ValidationError
from grant_liaison.liaison.models import (
    ApplicationStatus,
    CallType,
    GrantApplication,
    Priority,
    ScheduledCall,
    Visibility,
)
from grant_liaison.liaison.scheduling.follow_up import FollowUpScheduler
from grant_liaison.liaison.store import LiaisonStore
from grant_liaison.liaison.validation import (
    optional_date,
    optional_datetime,
    optional_text,
    parse_enum,
    require_text,
)
from grant_liaison.liaison.workflow import audit
from grant_liaison.liaison.workflow.definition import is_allowed, milestones_for

logger = logging.getLogger(__name__)

# Only these two statuses move priority; every other status leaves it alone.
PRIORITY_ON_STATUS: dict[ApplicationStatus, Priority] = {
    ApplicationStatus.APPROVED: Priority.HIGH,
    ApplicationStatus.REJECTED: Priority.LOW,
}


def transition(*, current: ApplicationStatus, to: ApplicationStatus) -> ApplicationStatus:
    if not is_allowed(current, to):
        raise InvalidTransitionError(current.value, to.value)
    return to


def priority_after(priority: Priority, new_status: ApplicationStatus) -> Priority:
    return PRIORITY_ON_STATUS.get(new_status, priority)


@dataclass(frozen=True, slots=True)
class StatusUpdateResult:
    application: GrantApplication
    follow_up_call: ScheduledCall | None = None


class ApplicationStateMachine:
    """Validates and applies status transitions, recording each one."""

    def __init__(
        self,
        store: LiaisonStore,
        scheduler: FollowUpScheduler,
        clock: Clock | None = None,
    ) -> None:
        self._store = store
        self._scheduler = scheduler
        self._clock = clock or SystemClock()

    def update_status(
        self,
        application_id: str,
        *,
        new_status: object,
        reason: object,
        milestone: object = None,
        expected_date: object = None,
        next_steps: object = None,
        follow_up_date: object = None,
        visibility: object = Visibility.INTERNAL,
        changed_by: str = "User",
    ) -> StatusUpdateResult:
        """Move an application to `new_status`.

        The history append, status/priority/notes update and the optional
        follow-up call are committed together; any error leaves the
        application exactly as it was.
        """

        target = parse_enum(ApplicationStatus, new_status, "new_status")
        reason_text = require_text(reason, "reason")
        milestone_text = optional_text(milestone, "milestone")
        steps = optional_text(next_steps, "next_steps")
        expected = optional_date(expected_date, "expected_date")
        follow_up_at = optional_datetime(follow_up_date, "follow_up_date")
        shared_with = parse_enum(Visibility, visibility, "visibility")

        with self._store.application_lock(application_id):
            application = self._store.get_application(application_id)
            if application is None:
                raise NotFound("Application", application_id)

            previous = application.status
            transition(current=previous, to=target)

            if milestone_text is not None and milestone_text not in milestones_for(previous):
                raise ValidationError(
                    f"Milestone {milestone_text!r} is not defined for status {previous.value!r}",
                    field="milestone",
                )

            now = self._clock.now()
            entry = audit.new_entry(
                previous_status=previous,
                new_status=target,
                reason=reason_text,
                milestone=milestone_text,
                expected_date=expected,
                next_steps=steps,
                changed_by=changed_by.strip() or "User",
                changed_at=audit.next_timestamp(application, now),
                visibility=shared_with,
            )
            updated = audit.append_entry(application, entry)
            updated = updated.model_copy(
                update={
                    "last_contact": now,
                    "priority": priority_after(application.priority, target),
                    "notes": audit.append_note(
                        application.notes, audit.status_change_note(entry), at=now
                    ),
                }
            )

            follow_up: ScheduledCall | None = None
            if follow_up_at is not None:
                updated, follow_up = self._scheduler.plan_call(
                    updated,
                    title=f"Status Follow-up: {target.value}",
                    date_time=follow_up_at,
                    type=CallType.STATUS_UPDATE,
                    priority=Priority.MEDIUM,
                    agenda=(
                        f"Follow-up after status change to {target.value}. "
                        f"{steps or 'Discuss next steps.'}"
                    ),
                    participants=application.contact_person,
                    notes=f"Scheduled after status change from {previous.value} to {target.value}",
                )

            self._store.commit(
                applications=[updated], calls=[follow_up] if follow_up is not None else []
            )

        logger.info(
            "Application status updated",
            extra={
                "application_id": application_id,
                "previous_status": previous.value,
                "new_status": target.value,
                "history_length": len(updated.status_history),
                "follow_up_call_id": follow_up.id if follow_up is not None else None,
            },
        )
        return StatusUpdateResult(application=updated, follow_up_call=follow_up)
