"""Notifier adapter registry and fire-and-forget dispatch.

Notifications never roll back or fail an order transition: delivery errors
are logged and dropped.
"""

import os

import structlog

logger = structlog.get_logger(__name__)

_notifier_instance = None


def get_notifier():
    """Return the configured notifier adapter (singleton).

    Uses FakeNotifier by default. Configure via the NOTIFIER_ADAPTER
    environment variable.
    """
    global _notifier_instance
    if _notifier_instance is None:
        adapter = os.environ.get("NOTIFIER_ADAPTER", "fake")
        if adapter == "fake":
            from ordering.notifier.fake_adapter import FakeNotifier

            _notifier_instance = FakeNotifier()
        else:
            raise ValueError(f"Unknown notifier adapter: {adapter}")
    return _notifier_instance


def set_notifier(notifier) -> None:
    global _notifier_instance
    _notifier_instance = notifier


def reset_notifier():
    """Reset the notifier singleton (useful for testing)."""
    global _notifier_instance
    _notifier_instance = None


def dispatch(user_id: str, title: str, body: str, link: str | None = None, severity: str = "info") -> None:
    """Send a notification, logging instead of raising on failure."""
    try:
        result = get_notifier().notify(str(user_id), title, body, link=link, severity=severity)
    except Exception as exc:  # noqa: BLE001
        logger.warning("notification_dispatch_failed", user_id=str(user_id), title=title, error=str(exc))
        return

    if result.get("status") != "sent":
        logger.warning("notification_not_delivered", user_id=str(user_id), title=title, error=result.get("error"))
