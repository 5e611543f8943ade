from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from grant_liaison.liaison.clock import FixedClock
from grant_liaison.liaison.service import LiaisonService
from grant_liaison.liaison.store import LiaisonStore
from grant_liaison.server.app import create_app
from grant_liaison.server.config import ServerSettings


@pytest.fixture
def client(monkeypatch: pytest.MonkeyPatch, tmp_path: Path, clock: FixedClock) -> TestClient:
    monkeypatch.setenv("LIAISON_STATE_PATH", str(tmp_path / "liaison_state"))
    settings = ServerSettings()
    service = LiaisonService(LiaisonStore(settings.state_file), clock=clock)
    return TestClient(create_app(service=service, settings=settings))


def _create(client: TestClient, **overrides: object) -> dict:
    body = {
        "proposal_title": "Community Health Data Commons",
        "funder_name": "Gates Foundation",
        "funder_type": "Private",
        "contact_person": "Michael Chen",
        "contact_email": "m.chen@gatesfoundation.org",
        "grant_amount": "275000.00",
    }
    body.update(overrides)
    res = client.post("/api/applications", json=body)
    assert res.status_code == 201, res.text
    return res.json()


def test_health_and_workflow(client: TestClient) -> None:
    health = client.get("/api/health").json()
    assert health["status"] == "ok"
    assert "version" in health

    table = client.get("/api/workflow").json()
    assert table["Pending Submission"]["next"] == ["Under Review", "Cancelled"]
    assert table["Closed"]["next"] == ["Cancelled"]


def test_application_lifecycle(client: TestClient, tmp_path: Path) -> None:
    app = _create(client)
    assert app["status"] == "Pending Submission"
    assert app["grant_amount"] == "275000.00"

    res = client.post(
        f"/api/applications/{app['id']}/status",
        json={"new_status": "Under Review", "reason": "submitted"},
    )
    assert res.status_code == 200, res.text
    assert res.json()["followUpCall"] is None

    res = client.post(
        f"/api/applications/{app['id']}/status",
        json={
            "new_status": "Approved",
            "reason": "funded",
            "follow_up_date": "2024-10-08T09:00:00Z",
            "visibility": "Shared",
        },
    )
    body = res.json()
    assert body["application"]["priority"] == "High"
    assert body["followUpCall"]["type"] == "Status Update"

    history = client.get(f"/api/applications/{app['id']}/history").json()
    assert [h["new_status"] for h in history] == ["Under Review", "Approved"]
    shared = client.get(
        f"/api/applications/{app['id']}/history", params={"visibility": "Shared"}
    ).json()
    assert len(shared) == 1

    calls = client.get(f"/api/applications/{app['id']}/calls").json()
    assert len(calls) == 1

    stats = client.get("/api/stats").json()
    assert stats["per_status_counts"] == {"Approved": 1}
    assert stats["total_approved_funding"] == "275000.00"
    assert stats["upcoming_calls"] == 1

    assert (tmp_path / "liaison_state" / "liaison.json").exists()


def test_domain_errors_map_to_status_codes(client: TestClient) -> None:
    app = _create(client)

    res = client.post(
        f"/api/applications/{app['id']}/status",
        json={"new_status": "Approved", "reason": "skip"},
    )
    assert res.status_code == 409
    assert res.json()["detail"]["error"] == "InvalidTransitionError"

    res = client.post(
        f"/api/applications/{app['id']}/status",
        json={"new_status": "Under Review", "reason": ""},
    )
    assert res.status_code == 422

    assert client.get("/api/applications/missing").status_code == 404

    res = client.post("/api/applications", json={"proposal_title": "", "funder_name": "F"})
    assert res.status_code == 422


def test_call_outcome_and_double_completion(client: TestClient) -> None:
    app = _create(client)
    call = client.post(
        f"/api/applications/{app['id']}/calls",
        json={"title": "Kickoff", "date_time": "2024-10-02T15:00:00Z", "type": "Negotiation"},
    ).json()
    assert call["status"] == "Scheduled"

    res = client.post(
        f"/api/calls/{call['id']}/outcome",
        json={
            "status": "Successful",
            "summary": "Agreed terms",
            "follow_up_date": "2024-10-09T15:00:00Z",
            "follow_up_type": "Contract Discussion",
            "rating": 5,
        },
    )
    assert res.status_code == 200, res.text
    assert res.json()["call"]["outcome"]["rating"] == 5
    assert res.json()["followUpCall"]["title"] == "Follow-up: Contract Discussion"

    res = client.post(f"/api/calls/{call['id']}/outcome", json={"rating": 99})
    assert res.status_code == 409
    assert res.json()["detail"]["error"] == "DoubleCompletionError"

    res = client.post(
        f"/api/calls/{call['id']}/outcome", json={"status": "", "summary": "", "rating": "x"}
    )
    assert res.status_code == 409
    assert res.json()["detail"]["error"] == "DoubleCompletionError"

    follow_up_id = client.get("/api/calls", params={"status": "Scheduled"}).json()[0]["id"]
    res = client.post(
        f"/api/calls/{follow_up_id}/outcome",
        json={"status": "Successful", "summary": "ok", "rating": "x"},
    )
    assert res.status_code == 422
    assert res.json()["detail"]["error"] == "ValidationError"

    res = client.post(
        f"/api/applications/{app['id']}/calls",
        json={"title": "Bad", "date_time": "2024-10-02T15:00:00Z", "duration": "long"},
    )
    assert res.status_code == 422
    assert res.json()["detail"]["error"] == "ValidationError"

    scheduled = client.get("/api/calls", params={"status": "Scheduled"}).json()
    assert len(scheduled) == 1


def test_update_email_and_delete(client: TestClient) -> None:
    app = _create(client)

    res = client.patch(f"/api/applications/{app['id']}", json={"contact_phone": "+1-555-0100"})
    assert res.json()["contact_phone"] == "+1-555-0100"

    res = client.patch(f"/api/applications/{app['id']}", json={"status": "Approved"})
    assert res.status_code == 422

    res = client.post(
        f"/api/applications/{app['id']}/emails",
        json={"subject": "Budget", "body": "x" * 150},
    )
    assert res.status_code == 201
    thread = res.json()
    assert thread["last_message"] == "x" * 100 + "..."
    assert thread["participants"] == ["m.chen@gatesfoundation.org"]

    assert client.delete(f"/api/applications/{app['id']}").json() == {"ok": True}
    assert client.get("/api/applications").json() == []


def test_list_filters(client: TestClient) -> None:
    _create(client, proposal_title="Ocean Sensors", priority="Low")
    _create(client, proposal_title="Soil Carbon")

    found = client.get("/api/applications", params={"search": "ocean"}).json()
    assert [a["proposal_title"] for a in found] == ["Ocean Sensors"]
    low = client.get("/api/applications", params={"priority": "Low"}).json()
    assert len(low) == 1
    assert client.get("/api/applications", params={"status": "Bogus"}).status_code == 422
