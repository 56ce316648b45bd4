"""Tests for fire-and-forget notification dispatch."""

from ordering.notifier import dispatch, get_notifier, reset_notifier, set_notifier
from ordering.notifier.fake_adapter import FakeNotifier


class TestDispatch:
    def test_records_notification(self):
        dispatch("user-1", "Hello", "Body", link="/orders", severity="success")
        sent = get_notifier().sent_to("user-1")
        assert sent[0]["title"] == "Hello"
        assert sent[0]["severity"] == "success"

    def test_exception_is_swallowed(self):
        get_notifier().configure(raise_on_send=True)
        dispatch("user-1", "Hello", "Body")
        assert get_notifier().sent == []

    def test_failed_delivery_is_not_recorded(self):
        get_notifier().configure(should_succeed=False)
        dispatch("user-1", "Hello", "Body")
        assert get_notifier().sent == []

    def test_set_and_reset(self):
        custom = FakeNotifier()
        set_notifier(custom)
        assert get_notifier() is custom
        reset_notifier()
        assert get_notifier() is not custom
