"""Fake notifier: records notifications in memory for test assertions."""

from uuid import uuid4

from ordering.notifier.port import NotifierPort


class FakeNotifier(NotifierPort):
    def __init__(self):
        self.sent: list[dict] = []
        self.should_succeed = True
        self.failure_reason = "Notification delivery failed"
        self.raise_on_send = False

    def configure(
        self,
        should_succeed: bool = True,
        failure_reason: str = "Notification delivery failed",
        raise_on_send: bool = False,
    ):
        """Configure the fake adapter behavior for testing."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.raise_on_send = raise_on_send

    def notify(
        self,
        user_id: str,
        title: str,
        body: str,
        link: str | None = None,
        severity: str = "info",
    ) -> dict:
        if self.raise_on_send:
            raise ConnectionError(self.failure_reason)
        if not self.should_succeed:
            return {"notification_id": None, "status": "failed", "error": self.failure_reason}

        notification_id = f"ntf-{uuid4().hex[:12]}"
        self.sent.append(
            {
                "notification_id": notification_id,
                "user_id": str(user_id),
                "title": title,
                "body": body,
                "link": link,
                "severity": severity,
            }
        )
        return {"notification_id": notification_id, "status": "sent"}

    def sent_to(self, user_id: str) -> list[dict]:
        return [n for n in self.sent if n["user_id"] == str(user_id)]

    def reset(self):
        """Clear sent notifications (useful between tests)."""
        self.sent.clear()
        self.should_succeed = True
        self.failure_reason = "Notification delivery failed"
        self.raise_on_send = False
