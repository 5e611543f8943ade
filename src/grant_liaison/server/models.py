"""Request bodies for the REST server.

Fields are plain strings; the liaison engine validates them. Recording an
outcome on a completed call reports the double completion even when the rest
of the body is invalid.
"""

from __future__ import annotations

from pydantic import BaseModel


class StatusUpdateRequest(BaseModel):
    new_status: str = ""
    reason: str = ""
    milestone: str | None = None
    expected_date: str | None = None
    next_steps: str | None = None
    follow_up_date: str | None = None
    visibility: str = "Internal"
    changed_by: str | None = None


class CallRequest(BaseModel):
    title: str = ""
    date_time: str = ""
    duration: int | str | None = 30
    type: str = "Follow-up"
    priority: str = "Medium"
    agenda: str = ""
    participants: str = ""
    location: str = "Phone Call"
    reminder_before: int | str | None = 15
    notes: str = ""


class OutcomeRequest(BaseModel):
    status: str = ""
    summary: str = ""
    next_steps: str | None = None
    follow_up_date: str | None = None
    follow_up_type: str | None = None
    rating: int | str | None = 5


class EmailThreadRequest(BaseModel):
    subject: str = ""
    body: str = ""
    participants: list[str] | None = None
