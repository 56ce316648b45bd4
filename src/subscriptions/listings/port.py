"""Listing directory port: the listing catalogue owned by another service.

The subscription workflow only needs to count a seller's active listings
(for quota) and to deactivate them when the subscription lapses.
"""

from abc import ABC, abstractmethod


class ListingDirectory(ABC):
    @abstractmethod
    def count_active_listings(self, user_id: str) -> int:
        ...

    @abstractmethod
    def deactivate_active_listings(self, user_id: str) -> int:
        """Deactivate every active listing of ``user_id``; returns how many changed."""
        ...
