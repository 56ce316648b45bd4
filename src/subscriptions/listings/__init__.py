"""Listing directory factory, selected by the LISTING_DIRECTORY environment variable."""

import os

from subscriptions.listings.port import ListingDirectory

_directory: ListingDirectory | None = None


def get_listing_directory() -> ListingDirectory:
    global _directory
    if _directory is None:
        adapter = os.environ.get("LISTING_DIRECTORY", "memory")
        if adapter == "memory":
            from subscriptions.listings.fake_adapter import InMemoryListingDirectory

            _directory = InMemoryListingDirectory()
        else:
            raise ValueError(f"Unknown listing directory: {adapter}")
    return _directory


def set_listing_directory(directory: ListingDirectory) -> None:
    global _directory
    _directory = directory


def reset_listing_directory() -> None:
    global _directory
    _directory = None
