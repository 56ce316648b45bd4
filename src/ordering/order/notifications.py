"""User-facing notifications sent after order transitions."""

from ordering.notifier import dispatch


def _link(order) -> str:
    return f"/orders?order={order.id}"


def new_sale(order) -> None:
    body = f"Order {order.order_number} for {order.listing.title}"
    dispatch(order.seller_id, "New sale", body, link=_link(order), severity="success")
    dispatch(order.buyer_id, "Order confirmed", body, link=_link(order), severity="success")


def order_shipped(order) -> None:
    dispatch(order.buyer_id, "Order shipped", f"Order {order.order_number} has been shipped.", link=_link(order))


def order_delivered(order) -> None:
    dispatch(
        order.seller_id,
        "Order delivered",
        f"Order {order.order_number} has been confirmed delivered.",
        link=_link(order),
        severity="success",
    )


def order_cancelled(order, notify_user_id: str) -> None:
    dispatch(
        notify_user_id,
        "Order cancelled",
        f"Order {order.order_number} has been cancelled.",
        link=_link(order),
        severity="warning",
    )


def return_requested(order) -> None:
    body = f"Buyer requested a return for order {order.order_number}."
    if order.return_reason:
        body += f" Reason: {order.return_reason}"
    dispatch(order.seller_id, "Return requested", body, link=_link(order), severity="warning")


def return_resolved(order) -> None:
    outcome = order.return_status
    dispatch(
        order.buyer_id,
        f"Return {outcome}",
        f"Your return request for order {order.order_number} has been {outcome}.",
        link=_link(order),
    )
