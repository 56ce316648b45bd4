"""Pydantic request/response schemas for the Ordering API.

These are external contracts, kept separate from internal Protean commands.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class ListingSnapshotSchema(BaseModel):
    listing_id: str
    title: str
    unit_price: float = Field(ge=0)
    return_days: int | None = None
    returns_info: str | None = None
    weight_oz: float | None = Field(default=None, gt=0)
    length_in: float | None = Field(default=None, gt=0)
    width_in: float | None = Field(default=None, gt=0)
    height_in: float | None = Field(default=None, gt=0)


class EconomicsSchema(BaseModel):
    unit_price: float
    quantity: int
    subtotal: float
    shipping_cost: float
    total_price: float
    platform_fee: float
    seller_earnings: float
    currency: str


class TrackingSchema(BaseModel):
    carrier: str | None = None
    tracking_number: str | None = None
    tracking_url: str | None = None
    label_url: str | None = None


class ReturnEligibilitySchema(BaseModel):
    eligible: bool
    reason: str
    days_left: int | None = None


# ---------------------------------------------------------------------------
# Request Schemas
# ---------------------------------------------------------------------------
class PlaceOrderRequest(BaseModel):
    seller_id: str
    listing: ListingSnapshotSchema
    quantity: int = Field(ge=1, default=1)
    shipping_address: str = Field(min_length=1)
    shipping_cost: float = Field(ge=0, default=0.0)
    payment_reference: str | None = None
    currency: str = Field(default="USD", max_length=3)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "seller_id": "artist-17",
                    "listing": {
                        "listing_id": "lst-204",
                        "title": "Harbour at Dusk (oil on canvas)",
                        "unit_price": 240.0,
                        "return_days": 30,
                        "weight_oz": 48,
                        "length_in": 30,
                        "width_in": 24,
                        "height_in": 2,
                    },
                    "quantity": 1,
                    "shipping_address": "Ada Buyer\n12 Elm St\nPortland, OR 97201\nUS",
                    "shipping_cost": 15.0,
                    "payment_reference": "pi_3PqB2C",
                }
            ]
        }
    }


class RecordPaymentRequest(BaseModel):
    payment_reference: str | None = None


class MarkShippedRequest(BaseModel):
    carrier: str | None = None
    tracking_number: str | None = None
    tracking_url: str | None = None


class CancelOrderRequest(BaseModel):
    reason: str | None = Field(default=None, max_length=500)


class RequestReturnRequest(BaseModel):
    reason: str = Field(min_length=1)


class RespondReturnRequest(BaseModel):
    decision: Literal["approved", "denied"]


class PurchaseLabelRequest(BaseModel):
    rate_id: str


class ForceStatusRequest(BaseModel):
    status: Literal["pending", "paid", "shipped", "delivered", "cancelled"]


class UpdateShippingRequest(BaseModel):
    carrier: str | None = None
    tracking_number: str | None = None
    tracking_url: str | None = None
    label_url: str | None = None


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class OrderResponse(BaseModel):
    id: str
    order_number: str
    buyer_id: str
    seller_id: str
    status: str
    listing: ListingSnapshotSchema
    economics: EconomicsSchema
    shipping_address: str
    tracking: TrackingSchema | None = None
    payment_reference: str | None = None
    paid_at: datetime | None = None
    funds_released_at: datetime | None = None
    shipped_at: datetime | None = None
    delivered_at: datetime | None = None
    cancelled_at: datetime | None = None
    cancellation_reason: str | None = None
    return_status: str | None = None
    return_reason: str | None = None
    return_requested_at: datetime | None = None
    return_resolved_at: datetime | None = None
    return_eligibility: ReturnEligibilitySchema
    created_at: datetime | None = None
    updated_at: datetime | None = None


class OrderListResponse(BaseModel):
    orders: list[OrderResponse]


class RateSchema(BaseModel):
    rate_id: str
    provider: str | None = None
    service_level: str | None = None
    amount: float
    currency: str = "USD"
    estimated_days: int | None = None


class RatesResponse(BaseModel):
    rates: list[RateSchema]
    message: str | None = None


class TrackingEventSchema(BaseModel):
    status: str | None = None
    location: str | None = None
    status_details: str | None = None
    occurred_at: str | None = None


class TrackingStatusResponse(BaseModel):
    carrier: str
    tracking_number: str
    status: str
    status_date: str | None = None
    location: str | None = None
    eta: str | None = None
    tracking_url: str | None = None
    events: list[TrackingEventSchema] = []
