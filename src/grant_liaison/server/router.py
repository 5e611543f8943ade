"""Liaison REST API.

All routes are mounted under `/api`. Handlers are thin: they translate HTTP
input into service calls and domain errors into HTTP errors.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from fastapi import APIRouter, HTTPException, Query, Request

from grant_liaison import __version__
from grant_liaison.liaison.errors import (
    DoubleCompletionError,
    InvalidTransitionError,
    LiaisonError,
    NotFound,
    ValidationError,
)
from grant_liaison.liaison.models import ApplicationStatus
from grant_liaison.liaison.service import LiaisonService
from grant_liaison.liaison.workflow.definition import (
    allowed_transitions,
    milestones_for,
    ordered,
    suggested_actions_for,
)
from grant_liaison.server.models import (
    CallRequest,
    EmailThreadRequest,
    OutcomeRequest,
    StatusUpdateRequest,
)

router = APIRouter()

_STATUS_CODES: dict[type[LiaisonError], int] = {
    ValidationError: 422,
    NotFound: 404,
    InvalidTransitionError: 409,
    DoubleCompletionError: 409,
}


def _service(request: Request) -> LiaisonService:
    service = getattr(request.app.state, "service", None)
    if not isinstance(service, LiaisonService):
        raise HTTPException(status_code=500, detail="Liaison service not configured")
    return service


@contextmanager
def _domain_errors() -> Iterator[None]:
    try:
        yield
    except LiaisonError as e:
        status_code = next(
            (code for kind, code in _STATUS_CODES.items() if isinstance(e, kind)), 400
        )
        raise HTTPException(
            status_code=status_code, detail={"error": type(e).__name__, "message": e.message}
        ) from e


@router.get("/health")
def health() -> dict[str, object]:
    return {"status": "ok", "version": __version__}


@router.get("/workflow")
def workflow() -> dict[str, object]:
    """The full transition table, for building status pickers."""

    return {
        status.value: {
            "next": [s.value for s in ordered(allowed_transitions(status))],
            "milestones": list(milestones_for(status)),
            "suggestedActions": list(suggested_actions_for(status)),
        }
        for status in ApplicationStatus
    }


@router.get("/applications")
def list_applications(
    request: Request,
    status: str | None = Query(default=None),
    priority: str | None = Query(default=None),
    search: str | None = Query(default=None),
) -> list[dict[str, object]]:
    with _domain_errors():
        apps = _service(request).list_applications(
            status=status, priority=priority, search=search
        )
    return [a.model_dump(mode="json") for a in apps]


@router.post("/applications", status_code=201)
def create_application(request: Request, payload: dict[str, Any]) -> dict[str, object]:
    with _domain_errors():
        created = _service(request).create_application(**payload)
    return created.model_dump(mode="json")


@router.get("/applications/{application_id}")
def get_application(request: Request, application_id: str) -> dict[str, object]:
    with _domain_errors():
        app = _service(request).get_application(application_id)
    return app.model_dump(mode="json")


@router.patch("/applications/{application_id}")
def update_application(
    request: Request, application_id: str, payload: dict[str, Any]
) -> dict[str, object]:
    with _domain_errors():
        updated = _service(request).update_application(application_id, **payload)
    return updated.model_dump(mode="json")


@router.delete("/applications/{application_id}")
def delete_application(request: Request, application_id: str) -> dict[str, object]:
    with _domain_errors():
        _service(request).delete_application(application_id)
    return {"ok": True}


@router.post("/applications/{application_id}/status")
def update_status(
    request: Request, application_id: str, payload: StatusUpdateRequest
) -> dict[str, object]:
    with _domain_errors():
        result = _service(request).update_status(application_id, **payload.model_dump())
    return {
        "application": result.application.model_dump(mode="json"),
        "followUpCall": (
            None
            if result.follow_up_call is None
            else result.follow_up_call.model_dump(mode="json")
        ),
    }


@router.get("/applications/{application_id}/history")
def status_history(
    request: Request, application_id: str, visibility: str | None = Query(default=None)
) -> list[dict[str, object]]:
    with _domain_errors():
        entries = _service(request).status_history(application_id, visibility=visibility)
    return [e.model_dump(mode="json") for e in entries]


@router.get("/applications/{application_id}/workflow")
def workflow_options(request: Request, application_id: str) -> dict[str, object]:
    with _domain_errors():
        options = _service(request).workflow_options(application_id)
    return options.model_dump(mode="json")


@router.get("/applications/{application_id}/calls")
def application_calls(request: Request, application_id: str) -> list[dict[str, object]]:
    with _domain_errors():
        calls = _service(request).calls_for_application(application_id)
    return [c.model_dump(mode="json") for c in calls]


@router.post("/applications/{application_id}/calls", status_code=201)
def schedule_call(
    request: Request, application_id: str, payload: CallRequest
) -> dict[str, object]:
    with _domain_errors():
        call = _service(request).schedule_call(application_id, **payload.model_dump())
    return call.model_dump(mode="json")


@router.post("/applications/{application_id}/emails", status_code=201)
def log_email_thread(
    request: Request, application_id: str, payload: EmailThreadRequest
) -> dict[str, object]:
    with _domain_errors():
        thread = _service(request).log_email_thread(
            application_id,
            subject=payload.subject,
            body=payload.body,
            participants=payload.participants,
        )
    return thread.model_dump(mode="json")


@router.get("/calls")
def list_calls(
    request: Request, status: str | None = Query(default=None)
) -> list[dict[str, object]]:
    with _domain_errors():
        calls = _service(request).list_calls(status=status)
    return [c.model_dump(mode="json") for c in calls]


@router.get("/calls/due")
def due_calls(request: Request) -> list[dict[str, object]]:
    return [c.model_dump(mode="json") for c in _service(request).due_calls()]


@router.post("/calls/{call_id}/outcome")
def record_outcome(request: Request, call_id: str, payload: OutcomeRequest) -> dict[str, object]:
    with _domain_errors():
        result = _service(request).record_outcome(call_id, **payload.model_dump())
    return {
        "call": result.call.model_dump(mode="json"),
        "followUpCall": (
            None
            if result.follow_up_call is None
            else result.follow_up_call.model_dump(mode="json")
        ),
    }


@router.get("/stats")
def stats(request: Request) -> dict[str, object]:
    return _service(request).stats().model_dump(mode="json")
