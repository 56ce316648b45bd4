"""Ship-from and ship-to addresses plus parcel construction for carrier requests.

Sellers keep their return address in their profile, which this subsystem
reaches through the ``SellerAddressBook`` port. Buyer addresses are stored on
the order as newline-delimited text::

    Name
    Street
    City, ST 12345
    Country
"""

import re
from abc import ABC, abstractmethod

_CITY_STATE_ZIP = re.compile(r"^(.+),\s*([A-Za-z]{2})\s+(\d{5}(-\d{4})?)$")

DEFAULT_PARCEL = {"length": 24.0, "width": 18.0, "height": 3.0, "weight": 24.0}


def parse_shipping_address(text: str | None) -> dict | None:
    """Parse an order's shipping address into carrier address fields.

    Returns None when the street or zip code cannot be recovered.
    """
    lines = [line.strip() for line in (text or "").split("\n") if line.strip()]
    address = {
        "name": lines[0] if lines else "Recipient",
        "street1": lines[1] if len(lines) > 1 else "",
        "street2": "",
        "city": "",
        "state": "",
        "zip": "",
        "country": lines[3] if len(lines) > 3 else "US",
    }
    match = _CITY_STATE_ZIP.match(lines[2]) if len(lines) > 2 else None
    if match:
        address["city"] = match.group(1).strip()
        address["state"] = match.group(2)
        address["zip"] = match.group(3)

    if not address["street1"] or not address["zip"]:
        return None
    return address


def build_parcel(listing, quantity: int) -> dict:
    """Single parcel for the order, sized from the listing snapshot."""
    weight = listing.weight_oz * (quantity or 1) if listing.weight_oz else DEFAULT_PARCEL["weight"]
    return {
        "length": str(listing.length_in or DEFAULT_PARCEL["length"]),
        "width": str(listing.width_in or DEFAULT_PARCEL["width"]),
        "height": str(listing.height_in or DEFAULT_PARCEL["height"]),
        "weight": str(weight),
        "distance_unit": "in",
        "mass_unit": "oz",
    }


class SellerAddressBook(ABC):
    """Port to the seller profile store."""

    @abstractmethod
    def get_ship_from(self, seller_id: str) -> dict | None:
        """Return the seller's ship-from address, or None when not set up."""
        ...


class InMemoryAddressBook(SellerAddressBook):
    def __init__(self):
        self.addresses: dict[str, dict] = {}

    def set_address(
        self,
        seller_id: str,
        street1: str,
        city: str,
        state: str,
        zip_code: str,
        name: str = "Seller",
        street2: str = "",
        country: str = "US",
    ) -> None:
        self.addresses[str(seller_id)] = {
            "name": name,
            "street1": street1,
            "street2": street2,
            "city": city,
            "state": state,
            "zip": zip_code,
            "country": country,
        }

    def get_ship_from(self, seller_id: str) -> dict | None:
        address = self.addresses.get(str(seller_id))
        if not address or not address.get("street1") or not address.get("zip"):
            return None
        return dict(address)


_address_book = None


def get_address_book() -> SellerAddressBook:
    global _address_book
    if _address_book is None:
        _address_book = InMemoryAddressBook()
    return _address_book


def set_address_book(address_book: SellerAddressBook) -> None:
    global _address_book
    _address_book = address_book


def reset_address_book() -> None:
    global _address_book
    _address_book = None
