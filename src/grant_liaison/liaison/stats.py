"""Read-side statistics over applications and calls.

Always computed from the collections passed in; nothing is cached, since either
collection may change between reads.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from grant_liaison.liaison.models import (
    ApplicationStatus,
    CallStatus,
    GrantApplication,
    ScheduledCall,
)


class LiaisonStats(BaseModel):
    per_status_counts: dict[str, int] = Field(default_factory=dict)
    total_approved_funding: Decimal = Decimal("0")
    per_call_status_counts: dict[str, int] = Field(default_factory=dict)
    upcoming_calls: int = 0
    overdue_calls: int = 0
    total_applications: int = 0
    total_calls: int = 0


def compute_stats(
    applications: Iterable[GrantApplication],
    calls: Iterable[ScheduledCall],
    *,
    now: datetime,
) -> LiaisonStats:
    apps = list(applications)
    all_calls = list(calls)

    per_status = Counter(a.status.value for a in apps)
    approved_total = sum(
        (a.grant_amount for a in apps if a.status == ApplicationStatus.APPROVED),
        Decimal("0"),
    )

    per_call_status = {s.value: 0 for s in CallStatus}
    per_call_status.update(Counter(c.status.value for c in all_calls))

    scheduled = [c for c in all_calls if c.status == CallStatus.SCHEDULED]
    upcoming = sum(1 for c in scheduled if c.date_time > now)

    return LiaisonStats(
        per_status_counts=dict(per_status),
        total_approved_funding=approved_total,
        per_call_status_counts=per_call_status,
        upcoming_calls=upcoming,
        overdue_calls=len(scheduled) - upcoming,
        total_applications=len(apps),
        total_calls=len(all_calls),
    )
