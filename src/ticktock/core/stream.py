"""Synchronous multi-subscriber broadcast with explicit subscriptions."""

from __future__ import annotations

import logging
from typing import Callable, Generic, TypeVar

from ticktock.core.errors import StreamFault

logger = logging.getLogger(__name__)

T = TypeVar("T")

ErrorCallback = Callable[[Exception], None]


class Subscription(Generic[T]):
    """Handle returned by :meth:`Broadcast.subscribe`.  Cancel it exactly when done."""

    def __init__(
        self,
        owner: Broadcast[T],
        on_value: Callable[[T], None],
        on_error: ErrorCallback | None,
    ) -> None:
        self._owner = owner
        self._on_value = on_value
        self._on_error = on_error
        self._active = True

    @property
    def is_active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        """Stop receiving values.  Idempotent."""
        if not self._active:
            return
        self._active = False
        self._owner._detach(self)

    def _deliver(self, value: T) -> None:
        if not self._active:
            return
        try:
            self._on_value(value)
        except Exception as exc:
            if self._on_error is None:
                raise
            logger.warning("Subscriber raised while handling %r: %s", value, exc)
            self._on_error(exc)

    def _deliver_error(self, exc: Exception) -> None:
        if not self._active:
            return
        if self._on_error is None:
            logger.warning("Dropping stream error for subscriber without on_error: %s", exc)
            return
        self._on_error(exc)


class Broadcast(Generic[T]):
    """Delivers each published value to every live subscription, in order.

    Delivery is synchronous: ``publish`` returns after every subscriber has
    handled the value.  A subscription cancelled while a value is being
    delivered receives nothing further, even later in the same delivery.
    """

    def __init__(self) -> None:
        self._subscriptions: list[Subscription[T]] = []
        self._closed = False

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def subscribe(
        self,
        on_value: Callable[[T], None],
        on_error: ErrorCallback | None = None,
    ) -> Subscription[T]:
        if self._closed:
            raise StreamFault("cannot subscribe to a closed stream")
        subscription = Subscription(self, on_value, on_error)
        self._subscriptions.append(subscription)
        return subscription

    def publish(self, value: T) -> None:
        """Deliver *value* to every live subscriber.

        A subscriber without ``on_error`` that raises does not starve the
        ones after it: the first such exception is re-raised once every
        subscriber has been offered the value.
        """
        if self._closed:
            return
        failure: Exception | None = None
        for subscription in list(self._subscriptions):
            try:
                subscription._deliver(value)
            except Exception as exc:
                if failure is None:
                    failure = exc
        if failure is not None:
            raise failure

    def add_error(self, exc: Exception) -> None:
        """Deliver *exc* to every subscriber's ``on_error``; others are skipped."""
        if self._closed:
            return
        for subscription in list(self._subscriptions):
            subscription._deliver_error(exc)

    def close(self) -> None:
        """Cancel every subscription and refuse new ones.  Idempotent."""
        self._closed = True
        for subscription in list(self._subscriptions):
            subscription.cancel()

    def _detach(self, subscription: Subscription[T]) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)
