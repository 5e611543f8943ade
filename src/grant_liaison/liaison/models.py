"""Domain models for grant applications, their audit trail and follow-up calls.

All persisted models are frozen: updates produce new instances through
`model_copy(update=...)`, so history entries and outcomes can never be edited
in place once recorded.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

from grant_liaison.liaison.clock import ensure_utc

UtcDatetime = Annotated[datetime, AfterValidator(ensure_utc)]


class ApplicationStatus(str, Enum):
    PENDING_SUBMISSION = "Pending Submission"
    UNDER_REVIEW = "Under Review"
    REVISION_REQUESTED = "Revision Requested"
    ADDITIONAL_INFO_REQUIRED = "Additional Info Required"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    CONTRACT_NEGOTIATION = "Contract Negotiation"
    ACTIVE = "Active"
    CANCELLED = "Cancelled"
    COMPLETED = "Completed"
    SUSPENDED = "Suspended"
    TERMINATED = "Terminated"
    DECLINED = "Declined"
    REAPPLIED = "Reapplied"
    APPEALED = "Appealed"
    CLOSED = "Closed"
    RESUBMITTED = "Resubmitted"
    WITHDRAWN = "Withdrawn"
    INFORMATION_SUBMITTED = "Information Submitted"
    RENEGOTIATION = "Renegotiation"


class FunderType(str, Enum):
    FEDERAL = "Federal"
    PRIVATE = "Private"
    INTERNATIONAL = "International"
    CORPORATE = "Corporate"


class Priority(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class Visibility(str, Enum):
    INTERNAL = "Internal"
    SHARED = "Shared"


class CallStatus(str, Enum):
    SCHEDULED = "Scheduled"
    COMPLETED = "Completed"


class CallType(str, Enum):
    FOLLOW_UP = "Follow-up"
    STATUS_UPDATE = "Status Update"
    CLARIFICATION = "Clarification"
    NEGOTIATION = "Negotiation"
    FINAL_REVIEW = "Final Review"
    DOCUMENT_REVIEW = "Document Review"
    FINAL_DECISION = "Final Decision"
    CONTRACT_DISCUSSION = "Contract Discussion"


class OutcomeStatus(str, Enum):
    SUCCESSFUL = "Successful"
    PARTIALLY_SUCCESSFUL = "Partially Successful"
    NO_ANSWER = "No Answer"
    POSTPONED = "Postponed"
    UNSUCCESSFUL = "Unsuccessful"


class StatusHistoryEntry(BaseModel):
    """One recorded transition. Never modified after it is appended."""

    model_config = ConfigDict(frozen=True)

    id: str
    previous_status: ApplicationStatus | None = None
    new_status: ApplicationStatus
    reason: str = Field(min_length=1)
    milestone: str | None = None
    expected_date: date | None = None
    next_steps: str | None = None
    changed_by: str
    changed_at: UtcDatetime
    visibility: Visibility = Visibility.INTERNAL


class EmailThread(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    subject: str = Field(min_length=1)
    last_message: str
    message_count: int = Field(default=1, ge=1)
    last_message_date: UtcDatetime
    participants: tuple[str, ...] = ()


class GrantApplication(BaseModel):
    """A funding application tracked by the liaison desk."""

    model_config = ConfigDict(frozen=True)

    id: str
    proposal_title: str = Field(min_length=1)
    funder_name: str = Field(min_length=1)
    funder_type: FunderType = FunderType.FEDERAL
    contact_person: str = ""
    contact_email: str = ""
    contact_phone: str = ""
    grant_amount: Decimal = Field(default=Decimal("0"), ge=0)
    status: ApplicationStatus = ApplicationStatus.PENDING_SUBMISSION
    priority: Priority = Priority.MEDIUM
    application_date: UtcDatetime
    follow_up_date: UtcDatetime | None = None
    last_contact: UtcDatetime

    # Human-readable log; the structured status_history is authoritative.
    notes: str = ""
    status_history: tuple[StatusHistoryEntry, ...] = ()
    email_threads: tuple[EmailThread, ...] = ()


class CallOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: OutcomeStatus
    summary: str = Field(min_length=1)
    next_steps: str | None = None
    follow_up_date: UtcDatetime | None = None
    follow_up_type: CallType | None = None
    rating: int = Field(ge=1, le=5)
    completed_at: UtcDatetime


class ScheduledCall(BaseModel):
    """A follow-up communication task attached to an application."""

    model_config = ConfigDict(frozen=True)

    id: str
    application_id: str
    title: str = Field(min_length=1)
    date_time: UtcDatetime
    duration: int = Field(default=30, gt=0)
    type: CallType = CallType.FOLLOW_UP
    priority: Priority = Priority.MEDIUM
    agenda: str = ""
    participants: str = ""
    location: str = "Phone Call"
    reminder_before: int = Field(default=15, ge=0)
    notes: str = ""
    status: CallStatus = CallStatus.SCHEDULED
    outcome: CallOutcome | None = None
    created_at: UtcDatetime


class NewApplication(BaseModel):
    """Caller-supplied fields for creating an application."""

    model_config = ConfigDict(extra="forbid")

    proposal_title: str = Field(min_length=1)
    funder_name: str = Field(min_length=1)
    funder_type: FunderType = FunderType.FEDERAL
    contact_person: str = ""
    contact_email: str = ""
    contact_phone: str = ""
    grant_amount: Decimal = Field(default=Decimal("0"), ge=0)
    status: ApplicationStatus = ApplicationStatus.PENDING_SUBMISSION
    priority: Priority = Priority.MEDIUM
    follow_up_date: UtcDatetime | None = None
    notes: str = ""


class ApplicationUpdate(BaseModel):
    """Editable detail fields. Status only changes through the workflow."""

    model_config = ConfigDict(extra="forbid")

    proposal_title: str | None = Field(default=None, min_length=1)
    funder_name: str | None = Field(default=None, min_length=1)
    funder_type: FunderType | None = None
    contact_person: str | None = None
    contact_email: str | None = None
    contact_phone: str | None = None
    grant_amount: Decimal | None = Field(default=None, ge=0)
    priority: Priority | None = None
    follow_up_date: UtcDatetime | None = None
