"""
Listener registry for cache updates.

Observers get the full entity snapshot after every cache mutation, in
registration order, synchronously.
"""
import logging
import threading
from typing import Callable, List, Sequence

from scoring_client.models import RecommendationEntity

logger = logging.getLogger(__name__)

Listener = Callable[[List[RecommendationEntity]], None]


class _Subscription:
    __slots__ = ("callback", "active")

    def __init__(self, callback: Listener):
        self.callback = callback
        self.active = True


class ListenerRegistry:
    """Subscribe/notify hub with explicit disposers."""

    def __init__(self):
        self._lock = threading.Lock()
        self._subscriptions: List[_Subscription] = []

    def subscribe(self, callback: Listener) -> Callable[[], None]:
        """Register ``callback``; returns a function that unsubscribes it.

        The disposer is idempotent and safe to call from inside a
        notification pass.
        """
        if not callable(callback):
            raise TypeError("listener must be callable")
        subscription = _Subscription(callback)
        with self._lock:
            self._subscriptions.append(subscription)

        def unsubscribe() -> None:
            with self._lock:
                subscription.active = False
                if subscription in self._subscriptions:
                    self._subscriptions.remove(subscription)

        return unsubscribe

    def notify(self, snapshot: Sequence[RecommendationEntity]) -> None:
        """Deliver ``snapshot`` to every listener still subscribed."""
        with self._lock:
            subscriptions = list(self._subscriptions)
        for subscription in subscriptions:
            # Removed earlier in this same pass
            if not subscription.active:
                continue
            try:
                subscription.callback(list(snapshot))
            except Exception as e:
                logger.exception(f"Error notifying cache listener: {e}")

    def __len__(self) -> int:
        with self._lock:
            return len(self._subscriptions)
