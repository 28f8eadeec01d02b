"""Pydantic schemas for subscription API endpoints."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from signdesk.domain.models.subscription import SubscriptionSnapshot


class SubscriptionResponse(BaseModel):
    """Cached subscription snapshot; ``refreshed_at`` tells how stale it may be."""

    subscription_id: Optional[str]
    status: Optional[str]
    plan_name: Optional[str]
    current_period_start: Optional[datetime]
    current_period_end: Optional[datetime]
    is_active: bool
    refreshed_at: datetime

    @classmethod
    def from_snapshot(cls, snapshot: SubscriptionSnapshot) -> "SubscriptionResponse":
        return cls(
            subscription_id=snapshot.subscription_id,
            status=snapshot.status.value if snapshot.status else None,
            plan_name=snapshot.plan_name,
            current_period_start=snapshot.current_period_start,
            current_period_end=snapshot.current_period_end,
            is_active=snapshot.is_billable(),
            refreshed_at=snapshot.refreshed_at,
        )
