"""
Subscription stub adapter (dev/tests).

In-memory implementation of SubscriptionProviderPort. Holds canned
subscription snapshots; unknown ids raise SubscriptionNotFound like a real
provider would. When disabled, sync keeps the stored member state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from src.components.billing import SubscriptionNotFound, SubscriptionSnapshot

logger = logging.getLogger(__name__)


@dataclass
class SubscriptionStubAdapter:
    """
    Stub subscription provider.

    This adapter satisfies the SubscriptionProviderPort protocol.
    """

    enabled: bool = False
    _subscriptions: dict[str, SubscriptionSnapshot] = field(default_factory=dict)

    def is_enabled(self) -> bool:
        return self.enabled

    def get_subscription(self, subscription_id: str) -> SubscriptionSnapshot:
        """
        Look up a canned subscription.

        Raises:
            SubscriptionNotFound: No snapshot registered for the id
        """
        snapshot = self._subscriptions.get(subscription_id)
        logger.debug(
            "SubscriptionStubAdapter.get_subscription: id=%s, found=%s",
            subscription_id,
            snapshot is not None,
        )
        if snapshot is None:
            raise SubscriptionNotFound(subscription_id)
        return snapshot

    # --- Testing Helpers ---

    def put(self, snapshot: SubscriptionSnapshot) -> None:
        """Register or replace a subscription snapshot."""
        self._subscriptions[snapshot.id] = snapshot
        self.enabled = True

    def remove(self, subscription_id: str) -> None:
        self._subscriptions.pop(subscription_id, None)

    def clear(self) -> None:
        self._subscriptions.clear()
