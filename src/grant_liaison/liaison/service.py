"""Service facade over the liaison engine.

This is the single entry point used by the REST server and the CLI. It owns
application CRUD and read queries and delegates status changes to
:class:`ApplicationStateMachine` and call handling to :class:`FollowUpScheduler`.
"""

from __future__ import annotations

import logging
import uuid
from datetime import timedelta

import pydantic
from pydantic import BaseModel

from grant_liaison.liaison.clock import Clock, SystemClock
from grant_liaison.liaison.config import LiaisonSettings
from grant_liaison.liaison.errors import NotFound, ValidationError
from grant_liaison.liaison.models import (
    ApplicationStatus,
    ApplicationUpdate,
    CallStatus,
    EmailThread,
    GrantApplication,
    NewApplication,
    Priority,
    ScheduledCall,
    StatusHistoryEntry,
    Visibility,
)
from grant_liaison.liaison.scheduling.follow_up import FollowUpScheduler, OutcomeResult
from grant_liaison.liaison.stats import LiaisonStats, compute_stats
from grant_liaison.liaison.store import LiaisonStore
from grant_liaison.liaison.validation import optional_enum, require_text
from grant_liaison.liaison.workflow import audit
from grant_liaison.liaison.workflow.definition import (
    allowed_transitions,
    milestones_for,
    ordered,
    suggested_actions_for,
)
from grant_liaison.liaison.workflow.state_machine import (
    ApplicationStateMachine,
    StatusUpdateResult,
)

logger = logging.getLogger(__name__)

_EMAIL_PREVIEW_CHARS = 100


class WorkflowOptions(BaseModel):
    """What the caller may do next with an application."""

    current_status: ApplicationStatus
    next_statuses: list[ApplicationStatus]
    milestones: list[str]
    suggested_actions: dict[str, list[str]]


def _from_pydantic(error: pydantic.ValidationError) -> ValidationError:
    first = error.errors()[0] if error.errors() else {"loc": (), "msg": str(error)}
    field = ".".join(str(p) for p in first.get("loc", ())) or None
    message = f"{field}: {first['msg']}" if field else str(first["msg"])
    return ValidationError(message, field=field)


class LiaisonService:
    def __init__(
        self,
        store: LiaisonStore,
        *,
        clock: Clock | None = None,
        default_follow_up_days: int = 30,
        default_changed_by: str = "User",
    ) -> None:
        self._store = store
        self._clock = clock or SystemClock()
        self._default_follow_up = timedelta(days=default_follow_up_days)
        self._default_changed_by = default_changed_by
        self.scheduler = FollowUpScheduler(store, self._clock)
        self.state_machine = ApplicationStateMachine(store, self.scheduler, self._clock)

    @classmethod
    def from_settings(cls, settings: LiaisonSettings, *, clock: Clock | None = None) -> LiaisonService:
        return cls(
            LiaisonStore(settings.state_file),
            clock=clock,
            default_follow_up_days=settings.default_follow_up_days,
            default_changed_by=settings.default_changed_by,
        )

    # Applications

    def list_applications(
        self,
        *,
        status: object = None,
        priority: object = None,
        search: str | None = None,
    ) -> list[GrantApplication]:
        """Filter applications; all given filters must match.

        `search` is a case-insensitive substring match against the proposal
        title, funder name and contact person.
        """

        status_filter = optional_enum(ApplicationStatus, status, "status")
        priority_filter = optional_enum(Priority, priority, "priority")
        needle = (search or "").strip().lower()

        out: list[GrantApplication] = []
        for app in self._store.applications():
            if status_filter is not None and app.status != status_filter:
                continue
            if priority_filter is not None and app.priority != priority_filter:
                continue
            if needle and not any(
                needle in field.lower()
                for field in (app.proposal_title, app.funder_name, app.contact_person)
            ):
                continue
            out.append(app)
        return out

    def create_application(self, **fields: object) -> GrantApplication:
        try:
            draft = NewApplication.model_validate(fields)
        except pydantic.ValidationError as e:
            raise _from_pydantic(e) from e

        now = self._clock.now()
        application = GrantApplication(
            id=uuid.uuid4().hex,
            application_date=now,
            last_contact=now,
            **draft.model_dump(exclude={"follow_up_date"}),
            follow_up_date=draft.follow_up_date or now + self._default_follow_up,
        )
        self._store.commit(applications=[application])

        logger.info(
            "Application created",
            extra={"application_id": application.id, "status": application.status.value},
        )
        return application

    def get_application(self, application_id: str) -> GrantApplication:
        application = self._store.get_application(application_id)
        if application is None:
            raise NotFound("Application", application_id)
        return application

    def update_application(self, application_id: str, **fields: object) -> GrantApplication:
        """Edit detail fields. Status, history and notes are not editable here."""

        try:
            changes = ApplicationUpdate.model_validate(fields)
        except pydantic.ValidationError as e:
            raise _from_pydantic(e) from e

        # Only follow_up_date may be cleared; other fields ignore an explicit null.
        update = {
            k: v
            for k, v in changes.model_dump(exclude_unset=True).items()
            if v is not None or k == "follow_up_date"
        }

        with self._store.application_lock(application_id):
            application = self.get_application(application_id)
            updated = application.model_copy(
                update={**update, "last_contact": self._clock.now()}
            )
            self._store.commit(applications=[updated])
        return updated

    def delete_application(self, application_id: str) -> None:
        """Remove an application together with its calls."""

        with self._store.application_lock(application_id):
            self.get_application(application_id)
            self._store.commit(delete_application_ids=[application_id])
        logger.info("Application deleted", extra={"application_id": application_id})

    # Workflow

    def update_status(
        self, application_id: str, *, changed_by: str | None = None, **kwargs: object
    ) -> StatusUpdateResult:
        return self.state_machine.update_status(
            application_id,
            changed_by=changed_by or self._default_changed_by,
            **kwargs,  # type: ignore[arg-type]
        )

    def status_history(
        self, application_id: str, *, visibility: object = None
    ) -> list[StatusHistoryEntry]:
        shared_with = optional_enum(Visibility, visibility, "visibility")
        return audit.history(self.get_application(application_id), visibility=shared_with)

    def workflow_options(self, application_id: str) -> WorkflowOptions:
        current = self.get_application(application_id).status
        candidates = ordered(allowed_transitions(current))
        return WorkflowOptions(
            current_status=current,
            next_statuses=candidates,
            milestones=list(milestones_for(current)),
            suggested_actions={s.value: list(suggested_actions_for(s)) for s in candidates},
        )

    # Calls

    def schedule_call(self, application_id: str, **kwargs: object) -> ScheduledCall:
        return self.scheduler.schedule(application_id, **kwargs)  # type: ignore[arg-type]

    def record_outcome(self, call_id: str, **kwargs: object) -> OutcomeResult:
        return self.scheduler.record_outcome(call_id, **kwargs)

    def get_call(self, call_id: str) -> ScheduledCall:
        call = self._store.get_call(call_id)
        if call is None:
            raise NotFound("Call", call_id)
        return call

    def list_calls(self, *, status: object = None) -> list[ScheduledCall]:
        return self.scheduler.list_calls(status=optional_enum(CallStatus, status, "status"))

    def calls_for_application(self, application_id: str) -> list[ScheduledCall]:
        self.get_application(application_id)
        return self.scheduler.calls_for_application(application_id)

    def due_calls(self) -> list[ScheduledCall]:
        return self.scheduler.due_calls()

    # Email log

    def log_email_thread(
        self,
        application_id: str,
        *,
        subject: object,
        body: object,
        participants: list[str] | None = None,
    ) -> EmailThread:
        subject_text = require_text(subject, "subject")
        body_text = require_text(body, "body")

        with self._store.application_lock(application_id):
            application = self.get_application(application_id)
            now = self._clock.now()
            preview = body_text[:_EMAIL_PREVIEW_CHARS]
            if len(body_text) > _EMAIL_PREVIEW_CHARS:
                preview += "..."
            thread = EmailThread(
                id=uuid.uuid4().hex,
                subject=subject_text,
                last_message=preview,
                message_count=1,
                last_message_date=now,
                participants=tuple(participants or [application.contact_email]),
            )
            updated = application.model_copy(
                update={
                    "email_threads": (*application.email_threads, thread),
                    "last_contact": now,
                    "notes": audit.append_note(
                        application.notes, audit.email_logged_note(subject_text), at=now
                    ),
                }
            )
            self._store.commit(applications=[updated])
        return thread

    # Stats

    def stats(self) -> LiaisonStats:
        return compute_stats(self._store.applications(), self._store.calls(), now=self._clock.now())
