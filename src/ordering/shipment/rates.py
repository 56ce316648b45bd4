"""Read-side carrier queries: rate quotes for an order and shipment tracking."""

import structlog

from ordering.carrier import get_carrier
from ordering.carrier.addresses import build_parcel, get_address_book, parse_shipping_address
from ordering.carrier.port import CarrierError, Rate, TrackingStatus
from ordering.order.access import authorize, load_order
from ordering.order.order import OrderStatus
from ordering.shipment.label import label_for_order
from shared.errors import Ineligible, InvalidTransition, UpstreamFailure
from shared.identity import Principal

logger = structlog.get_logger(__name__)


def get_shipping_rates(order_id: str, principal: Principal) -> list[Rate]:
    """Quote carrier rates for shipping a paid order from the seller to the buyer."""
    order = load_order(order_id, principal)
    authorize(order, principal, "get shipping rates", "seller")

    current = OrderStatus(order.status)
    if current != OrderStatus.PAID:
        raise InvalidTransition(
            current.value,
            f"Order must be paid before getting shipping rates (order is {current.value})",
        )
    if order.has_tracking_data or label_for_order(order.id) is not None:
        raise Ineligible("Label already purchased for this order", field="tracking")

    address_from = get_address_book().get_ship_from(order.seller_id)
    if address_from is None:
        raise Ineligible("Seller has not set a ship-from address", field="address_from")

    address_to = parse_shipping_address(order.shipping_address)
    if address_to is None:
        raise Ineligible("Invalid shipping address on order", field="shipping_address")

    parcel = build_parcel(order.listing, order.economics.quantity)
    try:
        rates = get_carrier().get_rates(address_from, address_to, parcel)
    except CarrierError as exc:
        logger.warning("shipping_rates_failed", order_id=str(order.id), error=str(exc))
        raise UpstreamFailure("carrier", str(exc)) from exc

    logger.info("shipping_rates_quoted", order_id=str(order.id), rate_count=len(rates))
    return rates


def track_shipment(carrier: str, tracking_number: str) -> TrackingStatus:
    try:
        return get_carrier().get_tracking(carrier, tracking_number)
    except CarrierError as exc:
        logger.warning("tracking_lookup_failed", tracking_number=tracking_number, error=str(exc))
        raise UpstreamFailure("carrier", str(exc)) from exc
