"""Pydantic request/response schemas for the Subscriptions API."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Plans
# ---------------------------------------------------------------------------
class CreatePlanRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    tier: str = Field(min_length=1, max_length=50)
    price_monthly: float = Field(ge=0)
    price_yearly: float = Field(ge=0)
    max_listings: int = Field(ge=0)
    features: str | None = None
    is_active: bool = True
    display_order: int = 0

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Studio",
                    "tier": "pro",
                    "price_monthly": 19.0,
                    "price_yearly": 190.0,
                    "max_listings": 50,
                    "features": "Up to 50 active listings\nPriority support",
                    "display_order": 2,
                }
            ]
        }
    }


class UpdatePlanRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    tier: str | None = Field(default=None, max_length=50)
    price_monthly: float | None = Field(default=None, ge=0)
    price_yearly: float | None = Field(default=None, ge=0)
    max_listings: int | None = Field(default=None, ge=0)
    features: str | None = None
    is_active: bool | None = None
    display_order: int | None = None


class PlanResponse(BaseModel):
    id: str
    name: str
    tier: str
    price_monthly: float
    price_yearly: float
    max_listings: int
    features: str | None = None
    is_active: bool
    display_order: int
    created_at: datetime | None = None
    updated_at: datetime | None = None


class PlanListResponse(BaseModel):
    plans: list[PlanResponse]


# ---------------------------------------------------------------------------
# Subscriptions
# ---------------------------------------------------------------------------
class SubscribeRequest(BaseModel):
    plan_id: str
    billing_period: Literal["monthly", "yearly"] = "monthly"
    session_id: str = Field(min_length=1)
    auto_renew: bool = True


class ExtendSubscriptionRequest(BaseModel):
    days: int = Field(ge=1, le=365)


class QuotaSchema(BaseModel):
    max_listings: int
    current_listings: int
    remaining: int
    can_activate: bool
    subscribed: bool


class SubscriptionResponse(BaseModel):
    id: str
    user_id: str
    plan_id: str
    plan_name: str | None = None
    tier: str
    billing_period: str
    max_listings: int
    start_date: datetime
    end_date: datetime
    status: str
    stored_status: str
    auto_renew: bool
    payment_reference: str | None = None
    cancelled_at: datetime | None = None
    expired_at: datetime | None = None
    renewed_at: datetime | None = None
    quota: QuotaSchema | None = None


class MySubscriptionResponse(BaseModel):
    subscription: SubscriptionResponse | None = None
    quota: QuotaSchema


class SubscriptionListResponse(BaseModel):
    subscriptions: list[SubscriptionResponse]


class SweepResponse(BaseModel):
    expired: int
    listings_deactivated: int
