"""
Tests for the subscription stub adapter.
"""

from datetime import UTC, datetime

import pytest

from src.adapters.subscription_stub import SubscriptionStubAdapter
from src.components.billing import SubscriptionNotFound, SubscriptionSnapshot

SNAPSHOT = SubscriptionSnapshot(
    id="sub_1",
    status="active",
    current_period_start=datetime(2026, 10, 1, tzinfo=UTC),
    current_period_end=datetime(2027, 10, 1, tzinfo=UTC),
)


class TestSubscriptionStub:
    def test_disabled_by_default(self) -> None:
        assert SubscriptionStubAdapter().is_enabled() is False

    def test_put_enables_and_returns_snapshot(self) -> None:
        stub = SubscriptionStubAdapter()
        stub.put(SNAPSHOT)
        assert stub.is_enabled() is True
        assert stub.get_subscription("sub_1") == SNAPSHOT

    def test_unknown_id_raises(self) -> None:
        stub = SubscriptionStubAdapter(enabled=True)
        with pytest.raises(SubscriptionNotFound) as exc:
            stub.get_subscription("sub_x")
        assert exc.value.subscription_id == "sub_x"

    def test_remove_and_clear(self) -> None:
        stub = SubscriptionStubAdapter()
        stub.put(SNAPSHOT)
        stub.remove("sub_1")
        with pytest.raises(SubscriptionNotFound):
            stub.get_subscription("sub_1")
        stub.put(SNAPSHOT)
        stub.clear()
        with pytest.raises(SubscriptionNotFound):
            stub.get_subscription("sub_1")
