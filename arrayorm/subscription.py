"""
Subscriber registrations for observable collections.

Each call to ``subscribe`` produces its own Subscription handle, even for
the same callback. Handles are compared by identity, so registering a
function twice gives two registrations that are cancelled separately.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

from loguru import logger


Callback = Callable[[list], Any]


class Subscription:
    """
    Opaque handle for one registration.

    Calling the handle (or ``unsubscribe()``) removes this registration
    from its owner. Only the first call has any effect.
    """

    __slots__ = ("callback", "_owner")

    def __init__(self, callback: Callback, owner: "SubscriberList"):
        self.callback = callback
        self._owner: Optional[SubscriberList] = owner

    @property
    def active(self) -> bool:
        return self._owner is not None

    def unsubscribe(self) -> None:
        owner = self._owner
        if owner is None:
            return
        self._owner = None
        owner.discard(self)

    def __call__(self) -> None:
        self.unsubscribe()

    def __repr__(self) -> str:
        state = "active" if self.active else "cancelled"
        name = getattr(self.callback, "__qualname__", repr(self.callback))
        return f"<Subscription {name} {state}>"


class SubscriberList:
    """Registered subscriptions, notified in registration order."""

    def __init__(self):
        self._subscriptions: list[Subscription] = []

    def __len__(self) -> int:
        return len(self._subscriptions)

    def add(self, callback: Callback) -> Subscription:
        subscription = Subscription(callback, self)
        self._subscriptions.append(subscription)
        return subscription

    def discard(self, subscription: Subscription) -> None:
        # identity match: equal-comparing handles must not remove each other
        for i, candidate in enumerate(self._subscriptions):
            if candidate is subscription:
                del self._subscriptions[i]
                return

    def notify(self, current: Callable[[], list]) -> int:
        """
        Invoke every active callback once with the owner's records.

        ``current`` is read again for each callback: a list replaced
        mid-pass reaches every remaining subscriber.

        Iterates over a snapshot: subscriptions added during the pass wait
        for the next one, and subscriptions cancelled during the pass are
        skipped. Returns the number of callbacks invoked.
        """
        delivered = 0
        for subscription in tuple(self._subscriptions):
            if not subscription.active:
                continue
            subscription.callback(current())
            delivered += 1

        logger.trace("Notified {} subscriber(s)", delivered)
        return delivered
