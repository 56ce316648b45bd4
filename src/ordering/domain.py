"""Ordering bounded context: order fulfillment, shipping labels and returns.

Orders move pending → paid → shipped → delivered (or are cancelled before
shipment). Returns nest inside a delivered order. Carrier, payment and
notification collaborators are reached through ports.
"""

from protean.domain import Domain

from shared.logging import configure_logging, get_logger

configure_logging()

ordering = Domain(name="ordering")

logger = get_logger(__name__)
