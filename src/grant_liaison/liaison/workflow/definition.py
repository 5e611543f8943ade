from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType

from grant_liaison.liaison.models import ApplicationStatus

S = ApplicationStatus

# Reachable from every status, in addition to the table below.
ESCAPE_STATUS = S.CANCELLED


@dataclass(frozen=True, slots=True)
class StatusWorkflow:
    """What may follow a status, and the advisory vocabulary for leaving it."""

    next: frozenset[ApplicationStatus]
    milestones: tuple[str, ...]
    suggested_actions: tuple[str, ...]


_EMPTY = StatusWorkflow(next=frozenset(), milestones=(), suggested_actions=())

WORKFLOW: MappingProxyType[ApplicationStatus, StatusWorkflow] = MappingProxyType(
    {
        S.PENDING_SUBMISSION: StatusWorkflow(
            next=frozenset({S.UNDER_REVIEW, S.CANCELLED}),
            milestones=("Application Completed", "Documentation Gathered", "Review Ready"),
            suggested_actions=(
                "Complete application form",
                "Gather required documents",
                "Internal review",
            ),
        ),
        S.UNDER_REVIEW: StatusWorkflow(
            next=frozenset(
                {S.APPROVED, S.REJECTED, S.REVISION_REQUESTED, S.ADDITIONAL_INFO_REQUIRED}
            ),
            milestones=("Initial Review", "Committee Review", "Final Review"),
            suggested_actions=(
                "Follow up with reviewer",
                "Prepare for questions",
                "Submit additional docs if needed",
            ),
        ),
        S.REVISION_REQUESTED: StatusWorkflow(
            next=frozenset({S.UNDER_REVIEW, S.RESUBMITTED, S.WITHDRAWN}),
            milestones=("Revisions Identified", "Revisions Completed", "Resubmission Ready"),
            suggested_actions=(
                "Address reviewer comments",
                "Revise application",
                "Schedule revision review",
            ),
        ),
        S.ADDITIONAL_INFO_REQUIRED: StatusWorkflow(
            next=frozenset({S.UNDER_REVIEW, S.INFORMATION_SUBMITTED, S.WITHDRAWN}),
            milestones=("Info Request Received", "Info Gathered", "Info Submitted"),
            suggested_actions=(
                "Gather required information",
                "Contact relevant parties",
                "Submit information",
            ),
        ),
        S.APPROVED: StatusWorkflow(
            next=frozenset({S.CONTRACT_NEGOTIATION, S.ACTIVE, S.DECLINED}),
            milestones=(
                "Approval Received",
                "Contract Sent",
                "Contract Signed",
                "Funding Released",
            ),
            suggested_actions=(
                "Review contract terms",
                "Negotiate if needed",
                "Set up project structure",
            ),
        ),
        S.REJECTED: StatusWorkflow(
            next=frozenset({S.REAPPLIED, S.APPEALED, S.CLOSED}),
            milestones=("Rejection Received", "Feedback Analyzed", "Next Steps Planned"),
            suggested_actions=(
                "Review feedback",
                "Plan reapplication",
                "Consider alternative funding",
            ),
        ),
        S.CONTRACT_NEGOTIATION: StatusWorkflow(
            next=frozenset({S.ACTIVE, S.DECLINED, S.RENEGOTIATION}),
            milestones=("Contract Review", "Terms Agreed", "Contract Signed"),
            suggested_actions=("Review contract terms", "Legal review", "Negotiate terms"),
        ),
        S.ACTIVE: StatusWorkflow(
            next=frozenset({S.COMPLETED, S.SUSPENDED, S.TERMINATED}),
            milestones=("Project Started", "Milestone 1", "Milestone 2", "Final Report"),
            suggested_actions=("Project kickoff", "Regular reporting", "Milestone tracking"),
        ),
    }
)


def workflow_for(status: ApplicationStatus) -> StatusWorkflow:
    return WORKFLOW.get(status, _EMPTY)


def allowed_transitions(status: ApplicationStatus) -> frozenset[ApplicationStatus]:
    """Statuses reachable from `status`, including the universal escape."""

    return workflow_for(status).next | {ESCAPE_STATUS}


def is_allowed(current: ApplicationStatus, target: ApplicationStatus) -> bool:
    return target in allowed_transitions(current)


def milestones_for(status: ApplicationStatus) -> tuple[str, ...]:
    return workflow_for(status).milestones


def suggested_actions_for(status: ApplicationStatus) -> tuple[str, ...]:
    return workflow_for(status).suggested_actions


def ordered(statuses: frozenset[ApplicationStatus]) -> list[ApplicationStatus]:
    """Stable ordering (enum declaration order) for display."""

    order = {s: idx for idx, s in enumerate(ApplicationStatus)}
    return sorted(statuses, key=order.__getitem__)
