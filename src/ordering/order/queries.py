"""Order reads for buyers, sellers and administrators."""

from enum import Enum

from protean.utils.globals import current_domain

from ordering.order.access import load_order
from ordering.order.order import Order
from shared.identity import Principal


class OrderRole(Enum):
    BUYER = "buyer"
    SELLER = "seller"


def get_order(order_id: str, principal: Principal) -> Order:
    return load_order(order_id, principal)


def list_orders(principal: Principal, role: OrderRole = OrderRole.BUYER) -> list[Order]:
    """The principal's purchases (``buyer``) or sales queue (``seller``), newest first."""
    field = "buyer_id" if role == OrderRole.BUYER else "seller_id"
    orders = current_domain.repository_for(Order)._dao.query.filter(**{field: principal.user_id}).all().items
    return sorted(orders, key=lambda o: o.created_at, reverse=True)
