"""Return eligibility: a pure function of the order, its listing snapshot and a clock reading.

Used by the return-request command (write path) and by every order read, so
the buyer sees exactly the rule that will be enforced.
"""

import math
from dataclasses import dataclass
from datetime import datetime

from ordering.order.order import OrderStatus
from shared.clock import as_utc

SECONDS_PER_DAY = 24 * 60 * 60


@dataclass(frozen=True)
class ReturnEligibility:
    eligible: bool
    reason: str
    days_left: int | None = None

    def to_dict(self) -> dict:
        return {"eligible": self.eligible, "reason": self.reason, "days_left": self.days_left}


def delivery_timestamp(order) -> datetime | None:
    """When the return window started.

    Older orders were delivered before ``delivered_at`` was recorded; for those
    the last update (or creation) time stands in.
    """
    return as_utc(order.delivered_at or order.updated_at or order.created_at)


def evaluate(order, listing_snapshot, now: datetime) -> ReturnEligibility:
    if OrderStatus(order.status) != OrderStatus.DELIVERED:
        return ReturnEligibility(False, "Order not yet delivered")

    if order.return_status:
        return ReturnEligibility(False, f"Return {order.return_status}")

    return_days = listing_snapshot.return_days if listing_snapshot is not None else None
    if return_days is None or return_days <= 0:
        return ReturnEligibility(False, "No returns accepted")

    delivered = delivery_timestamp(order)
    elapsed = (as_utc(now) - delivered).total_seconds() if delivered else 0.0
    days_since = max(0, math.floor(elapsed / SECONDS_PER_DAY))
    if days_since > return_days:
        return ReturnEligibility(False, "Return window expired")

    days_left = return_days - days_since
    return ReturnEligibility(True, f"{days_left} days left to return", days_left)
