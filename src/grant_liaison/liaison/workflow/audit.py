"""Append-only audit trail of status transitions.

The structured `status_history` is the source of truth. The free-text `notes`
log is a display convenience derived from the same events; helpers for its
line formats live here too so every writer produces the same text.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime

from grant_liaison.liaison.models import (
    ApplicationStatus,
    GrantApplication,
    StatusHistoryEntry,
    Visibility,
)

_NOTE_DATE_FORMAT = "%b %d, %Y"
_NOTE_DATETIME_FORMAT = "%b %d, %Y at %H:%M"


class AuditTrailError(RuntimeError):
    """Raised when an append would break the ordering of the trail."""


def new_entry(
    *,
    previous_status: ApplicationStatus | None,
    new_status: ApplicationStatus,
    reason: str,
    changed_by: str,
    changed_at: datetime,
    milestone: str | None = None,
    expected_date: date | None = None,
    next_steps: str | None = None,
    visibility: Visibility = Visibility.INTERNAL,
) -> StatusHistoryEntry:
    return StatusHistoryEntry(
        id=uuid.uuid4().hex,
        previous_status=previous_status,
        new_status=new_status,
        reason=reason,
        milestone=milestone,
        expected_date=expected_date,
        next_steps=next_steps,
        changed_by=changed_by,
        changed_at=changed_at,
        visibility=visibility,
    )


def append_entry(application: GrantApplication, entry: StatusHistoryEntry) -> GrantApplication:
    """Return a copy of `application` with `entry` appended to its history.

    Existing entries are carried over untouched; the entry's `new_status`
    becomes the application's status.
    """

    history = application.status_history
    if history and entry.changed_at < history[-1].changed_at:
        raise AuditTrailError(
            f"History entry for {application.id} predates the last recorded transition"
        )
    return application.model_copy(
        update={"status_history": (*history, entry), "status": entry.new_status}
    )


def next_timestamp(application: GrantApplication, now: datetime) -> datetime:
    """Timestamp for the next entry; never earlier than the last one recorded."""

    last = latest_entry(application)
    if last is None or now >= last.changed_at:
        return now
    return last.changed_at


def history(
    application: GrantApplication, *, visibility: Visibility | None = None
) -> list[StatusHistoryEntry]:
    entries = list(application.status_history)
    if visibility is None:
        return entries
    return [e for e in entries if e.visibility == visibility]


def latest_entry(application: GrantApplication) -> StatusHistoryEntry | None:
    if not application.status_history:
        return None
    return application.status_history[-1]


def append_note(notes: str, text: str, *, at: datetime) -> str:
    line = f"[{at.strftime(_NOTE_DATE_FORMAT)}] {text}"
    if not notes:
        return line
    return f"{notes}\n\n{line}"


def status_change_note(entry: StatusHistoryEntry) -> str:
    previous = entry.previous_status.value if entry.previous_status is not None else "New"
    lines = [
        f"Status changed: {previous} → {entry.new_status.value}",
        f"Reason: {entry.reason}",
    ]
    if entry.milestone:
        lines.append(f"Milestone: {entry.milestone}")
    if entry.next_steps:
        lines.append(f"Next Steps: {entry.next_steps}")
    return "\n".join(lines)


def call_scheduled_note(title: str, when: datetime) -> str:
    return f"Scheduled call: {title} - {when.strftime(_NOTE_DATETIME_FORMAT)}"


def call_completed_note(
    title: str, outcome_status: str, summary: str, next_steps: str | None
) -> str:
    lines = [f"Call completed: {title}", f"Outcome: {outcome_status}", f"Summary: {summary}"]
    if next_steps:
        lines.append(f"Next Steps: {next_steps}")
    return "\n".join(lines)


def email_logged_note(subject: str) -> str:
    return f"Email sent: {subject}"


def format_note_date(value: datetime) -> str:
    return value.strftime(_NOTE_DATE_FORMAT)
