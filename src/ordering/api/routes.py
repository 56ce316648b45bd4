"""FastAPI routes for the Ordering domain: orders, shipping and admin overrides."""

import json
from datetime import UTC, datetime

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from ordering.api.schemas import (
    CancelOrderRequest,
    EconomicsSchema,
    ForceStatusRequest,
    ListingSnapshotSchema,
    MarkShippedRequest,
    OrderListResponse,
    OrderResponse,
    PlaceOrderRequest,
    PurchaseLabelRequest,
    RatesResponse,
    RateSchema,
    RecordPaymentRequest,
    RequestReturnRequest,
    RespondReturnRequest,
    ReturnEligibilitySchema,
    TrackingSchema,
    TrackingStatusResponse,
    UpdateShippingRequest,
)
from ordering.order.admin import ForceOrderStatus, UpdateShippingDetails
from ordering.order.cancellation import CancelOrder
from ordering.order.creation import PlaceOrder
from ordering.order.delivery import ConfirmDelivery
from ordering.order.payment import RecordPayment
from ordering.order.queries import OrderRole, get_order, list_orders
from ordering.order.returns import RequestReturn, RespondToReturn
from ordering.order.shipping import MarkShipped
from ordering.shipment.purchase import purchase_and_apply
from ordering.shipment.rates import get_shipping_rates, track_shipment
from shared.api import current_principal
from shared.identity import Principal


def order_response(order, now: datetime | None = None) -> OrderResponse:
    """Serialize an order together with its derived return eligibility."""
    eligibility = order.return_eligibility(now or datetime.now(UTC))
    listing, economics, tracking = order.listing, order.economics, order.tracking
    return OrderResponse(
        id=str(order.id),
        order_number=order.order_number,
        buyer_id=str(order.buyer_id),
        seller_id=str(order.seller_id),
        status=order.status,
        listing=ListingSnapshotSchema(
            listing_id=str(listing.listing_id),
            title=listing.title,
            unit_price=listing.unit_price,
            return_days=listing.return_days,
            returns_info=listing.returns_info,
            weight_oz=listing.weight_oz,
            length_in=listing.length_in,
            width_in=listing.width_in,
            height_in=listing.height_in,
        ),
        economics=EconomicsSchema(
            unit_price=economics.unit_price,
            quantity=economics.quantity,
            subtotal=economics.subtotal,
            shipping_cost=economics.shipping_cost or 0.0,
            total_price=economics.total_price,
            platform_fee=economics.platform_fee,
            seller_earnings=economics.seller_earnings,
            currency=economics.currency or "USD",
        ),
        shipping_address=order.shipping_address,
        tracking=(
            TrackingSchema(
                carrier=tracking.carrier,
                tracking_number=tracking.tracking_number,
                tracking_url=tracking.tracking_url,
                label_url=tracking.label_url,
            )
            if tracking
            else None
        ),
        payment_reference=order.payment_reference,
        paid_at=order.paid_at,
        funds_released_at=order.funds_released_at,
        shipped_at=order.shipped_at,
        delivered_at=order.delivered_at,
        cancelled_at=order.cancelled_at,
        cancellation_reason=order.cancellation_reason,
        return_status=order.return_status,
        return_reason=order.return_reason,
        return_requested_at=order.return_requested_at,
        return_resolved_at=order.return_resolved_at,
        return_eligibility=ReturnEligibilitySchema(**eligibility.to_dict()),
        created_at=order.created_at,
        updated_at=order.updated_at,
    )


def _process_and_read(command, principal: Principal) -> OrderResponse:
    order_id = current_domain.process(command, asynchronous=False)
    return order_response(get_order(order_id, principal))


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderResponse)
async def place_order(body: PlaceOrderRequest, principal: Principal = Depends(current_principal)) -> OrderResponse:
    command = PlaceOrder(
        **principal.as_actor(),
        seller_id=body.seller_id,
        listing=json.dumps(body.listing.model_dump()),
        quantity=body.quantity,
        shipping_address=body.shipping_address,
        shipping_cost=body.shipping_cost,
        payment_reference=body.payment_reference,
        currency=body.currency,
    )
    return _process_and_read(command, principal)


@order_router.get("", response_model=OrderListResponse)
async def get_orders(
    role: OrderRole = OrderRole.BUYER,
    principal: Principal = Depends(current_principal),
) -> OrderListResponse:
    now = datetime.now(UTC)
    return OrderListResponse(orders=[order_response(o, now) for o in list_orders(principal, role)])


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order_detail(order_id: str, principal: Principal = Depends(current_principal)) -> OrderResponse:
    return order_response(get_order(order_id, principal))


@order_router.put("/{order_id}/payment", response_model=OrderResponse)
async def record_payment(
    order_id: str,
    body: RecordPaymentRequest | None = None,
    principal: Principal = Depends(current_principal),
) -> OrderResponse:
    command = RecordPayment(
        order_id=order_id,
        **principal.as_actor(),
        payment_reference=body.payment_reference if body else None,
    )
    return _process_and_read(command, principal)


@order_router.put("/{order_id}/ship", response_model=OrderResponse)
async def mark_shipped(
    order_id: str,
    body: MarkShippedRequest | None = None,
    principal: Principal = Depends(current_principal),
) -> OrderResponse:
    body = body or MarkShippedRequest()
    command = MarkShipped(
        order_id=order_id,
        **principal.as_actor(),
        carrier=body.carrier,
        tracking_number=body.tracking_number,
        tracking_url=body.tracking_url,
    )
    return _process_and_read(command, principal)


# Carrier-backed routes are sync so FastAPI runs the blocking HTTP client in its threadpool
@order_router.post("/{order_id}/shipping/rates", response_model=RatesResponse)
def shipping_rates(order_id: str, principal: Principal = Depends(current_principal)) -> RatesResponse:
    rates = get_shipping_rates(order_id, principal)
    return RatesResponse(
        rates=[RateSchema(**rate.to_dict()) for rate in rates],
        message=None if rates else "No shipping service is available for this route",
    )


@order_router.post("/{order_id}/shipping/label", response_model=OrderResponse)
def purchase_label(
    order_id: str,
    body: PurchaseLabelRequest,
    principal: Principal = Depends(current_principal),
) -> OrderResponse:
    purchase_and_apply(order_id, body.rate_id, principal)
    return order_response(get_order(order_id, principal))


@order_router.put("/{order_id}/delivery", response_model=OrderResponse)
async def confirm_delivery(order_id: str, principal: Principal = Depends(current_principal)) -> OrderResponse:
    return _process_and_read(ConfirmDelivery(order_id=order_id, **principal.as_actor()), principal)


@order_router.put("/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(
    order_id: str,
    body: CancelOrderRequest | None = None,
    principal: Principal = Depends(current_principal),
) -> OrderResponse:
    command = CancelOrder(order_id=order_id, **principal.as_actor(), reason=body.reason if body else None)
    return _process_and_read(command, principal)


@order_router.post("/{order_id}/return", response_model=OrderResponse)
async def request_return(
    order_id: str,
    body: RequestReturnRequest,
    principal: Principal = Depends(current_principal),
) -> OrderResponse:
    command = RequestReturn(order_id=order_id, **principal.as_actor(), reason=body.reason)
    return _process_and_read(command, principal)


@order_router.put("/{order_id}/return", response_model=OrderResponse)
async def respond_to_return(
    order_id: str,
    body: RespondReturnRequest,
    principal: Principal = Depends(current_principal),
) -> OrderResponse:
    command = RespondToReturn(order_id=order_id, **principal.as_actor(), decision=body.decision)
    return _process_and_read(command, principal)


# ---------------------------------------------------------------------------
# Shipping Router
# ---------------------------------------------------------------------------
shipping_router = APIRouter(prefix="/shipping", tags=["shipping"])


@shipping_router.get("/track/{tracking_number}", response_model=TrackingStatusResponse)
def track(
    tracking_number: str,
    carrier: str = "usps",
    principal: Principal = Depends(current_principal),  # noqa: ARG001
) -> TrackingStatusResponse:
    status = track_shipment(carrier, tracking_number)
    return TrackingStatusResponse(
        carrier=status.carrier,
        tracking_number=status.tracking_number,
        status=status.status,
        status_date=status.status_date,
        location=status.location,
        eta=status.eta,
        tracking_url=status.tracking_url,
        events=status.events,
    )


# ---------------------------------------------------------------------------
# Admin Router
# ---------------------------------------------------------------------------
admin_order_router = APIRouter(prefix="/admin/orders", tags=["admin"])


@admin_order_router.put("/{order_id}/status", response_model=OrderResponse)
async def force_status(
    order_id: str,
    body: ForceStatusRequest,
    principal: Principal = Depends(current_principal),
) -> OrderResponse:
    command = ForceOrderStatus(order_id=order_id, **principal.as_actor(), status=body.status)
    return _process_and_read(command, principal)


@admin_order_router.put("/{order_id}/shipping", response_model=OrderResponse)
async def update_shipping(
    order_id: str,
    body: UpdateShippingRequest,
    principal: Principal = Depends(current_principal),
) -> OrderResponse:
    command = UpdateShippingDetails(
        order_id=order_id,
        **principal.as_actor(),
        carrier=body.carrier,
        tracking_number=body.tracking_number,
        tracking_url=body.tracking_url,
        label_url=body.label_url,
    )
    return _process_and_read(command, principal)
