"""In-memory listing directory for development and testing."""

from subscriptions.listings.port import ListingDirectory


class InMemoryListingDirectory(ListingDirectory):
    def __init__(self) -> None:
        self.active: dict[str, int] = {}
        self.deactivated: dict[str, int] = {}

    def set_active_listings(self, user_id: str, count: int) -> None:
        self.active[str(user_id)] = count

    def count_active_listings(self, user_id: str) -> int:
        return self.active.get(str(user_id), 0)

    def deactivate_active_listings(self, user_id: str) -> int:
        count = self.active.pop(str(user_id), 0)
        if count:
            self.deactivated[str(user_id)] = self.deactivated.get(str(user_id), 0) + count
        return count
