"""Order visibility and role checks shared by every order command.

Callers who are neither party to the order nor administrators see the order
as missing. A party holding the wrong role gets an authorization failure.
"""

from protean.utils.globals import current_domain

from ordering.order.order import Order
from shared.errors import AuthorizationFailure, NotVisible
from shared.identity import Principal


def load_order(order_id: str, principal: Principal) -> Order:
    """Fetch an order the principal is allowed to see."""
    order = current_domain.repository_for(Order).get(order_id)
    if not principal.is_admin and not order.is_party(principal.user_id):
        raise NotVisible("Order", order_id)
    return order


def authorize(order: Order, principal: Principal, action: str, *roles: str, allow_admin: bool = True) -> None:
    """Require the principal to hold one of ``roles`` ("buyer", "seller") on the order."""
    if allow_admin and principal.is_admin:
        return
    if not principal.is_admin and not order.is_party(principal.user_id):
        raise NotVisible("Order", str(order.id))
    for role in roles:
        if str(getattr(order, f"{role}_id")) == principal.user_id:
            return
    raise AuthorizationFailure(f"Only the {' or '.join(roles)} can {action}")
