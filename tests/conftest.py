"""Test configuration and fixtures."""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

import pytest

from grant_liaison.liaison.clock import FixedClock
from grant_liaison.liaison.models import GrantApplication
from grant_liaison.liaison.service import LiaisonService
from grant_liaison.liaison.store import LiaisonStore

T0 = datetime(2024, 10, 1, 9, 0, tzinfo=UTC)


@pytest.fixture
def clock() -> FixedClock:
    """Provide a clock frozen at T0."""
    return FixedClock(current=T0)


@pytest.fixture
def store() -> LiaisonStore:
    """Provide an in-memory store."""
    return LiaisonStore()


@pytest.fixture
def file_store(tmp_path: Path) -> LiaisonStore:
    """Provide a store persisted under a temporary directory."""
    return LiaisonStore(tmp_path / "liaison_state" / "liaison.json")


@pytest.fixture
def service(store: LiaisonStore, clock: FixedClock) -> LiaisonService:
    """Provide a service over the in-memory store."""
    return LiaisonService(store, clock=clock, default_changed_by="Dr. Test")


@pytest.fixture
def application(service: LiaisonService) -> GrantApplication:
    """Provide an application in 'Pending Submission'."""
    return service.create_application(
        proposal_title="AI-Driven Cardiovascular Risk Assessment Platform",
        funder_name="National Science Foundation",
        funder_type="Federal",
        contact_person="Dr. Sarah Johnson",
        contact_email="sarah.johnson@nsf.gov",
        contact_phone="+1-555-123-4567",
        grant_amount="450000.00",
    )
