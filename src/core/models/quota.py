"""Subscription and quota ledger models."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, NonNegativeInt, StrictStr

from core.utils.constants import UNLIMITED


class SubscriptionPlan(str, Enum):
    FREE = "free"
    CLASSIC = "classic"
    PRO = "pro"
    MAX = "max"


class SubscriptionStatus(str, Enum):
    ACTIVE = "active"
    EXPIRED = "expired"
    CANCELLED = "cancelled"
    PENDING = "pending"


class PlanConfig(BaseModel):
    """Catalog entry describing a subscription tier."""

    plan: SubscriptionPlan
    name: str
    description: str
    image_quota: int = Field(..., description="Uploads per period, negative for unlimited")
    price: float
    currency: str = "USD"
    features: list[str] = Field(default_factory=list)


class QuotaEntry(BaseModel):
    """Per-owner usage ledger entry. At most one is current per owner."""

    entry_id: StrictStr = Field(..., description="Identifier of this ledger entry")
    owner_id: StrictStr = Field(..., description="Owner the entry is attributed to")
    plan: SubscriptionPlan
    status: SubscriptionStatus
    usage_count: NonNegativeInt = Field(0, description="Uploads recorded in the current period")
    usage_limit: int = Field(..., description="Upload limit, negative for unlimited")
    period_start: datetime
    period_end: datetime
    created_at: datetime
    updated_at: datetime

    @property
    def is_unlimited(self) -> bool:
        return self.usage_limit < 0

    def has_capacity(self, pending: int = 0) -> bool:
        """Whether one more upload fits, counting in-flight reservations."""
        return self.is_unlimited or self.usage_count + pending < self.usage_limit

    def is_current(self, now: datetime) -> bool:
        return self.status == SubscriptionStatus.ACTIVE and now <= self.period_end


class QuotaUsage(BaseModel):
    """Usage report for an owner's current entry."""

    owner_id: str
    plan: SubscriptionPlan
    status: SubscriptionStatus
    usage_count: int
    usage_limit: int = Field(..., description=f"Upload limit, {UNLIMITED} for unlimited")
    quota_usage_percent: int
    days_remaining: int
