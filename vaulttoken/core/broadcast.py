"""In-process publish/subscribe hub for login-state and settings events."""

from __future__ import annotations

import itertools
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

logger = logging.getLogger(__name__)


class Topic(StrEnum):
    """Event kinds carried by the broadcaster."""

    LOGIN_STATE = "login-state"
    SETTINGS_CHANGED = "settings-changed"


# Topics whose observers are called with the payload; the rest get no arguments.
_PAYLOAD_TOPICS = frozenset({Topic.LOGIN_STATE})


@dataclass(frozen=True)
class Subscription:
    """Handle returned by ``subscribe``; pass it back to ``unsubscribe``."""

    subscription_id: int
    topic: Topic
    observer: Callable[..., Any]


class StateBroadcaster:
    """Delivers each published event to every observer subscribed at publish time.

    Delivery works on a snapshot of the subscriber set and runs outside the
    internal lock, so observers may subscribe, unsubscribe or publish from
    inside a callback. An observer that raises is logged and skipped.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._subscriptions: dict[Topic, dict[int, Subscription]] = {topic: {} for topic in Topic}

    def subscribe(self, topic: Topic | str, observer: Callable[..., Any]) -> Subscription:
        """Register *observer* for *topic*."""
        resolved = Topic(topic)
        with self._lock:
            subscription = Subscription(
                subscription_id=next(self._ids),
                topic=resolved,
                observer=observer,
            )
            self._subscriptions[resolved][subscription.subscription_id] = subscription
        return subscription

    def unsubscribe(self, subscription: Subscription) -> bool:
        """Remove a subscription. Returns True if it was still registered."""
        with self._lock:
            removed = self._subscriptions[subscription.topic].pop(subscription.subscription_id, None)
        return removed is not None

    def subscriber_count(self, topic: Topic | str) -> int:
        with self._lock:
            return len(self._subscriptions[Topic(topic)])

    def publish(self, topic: Topic | str, payload: Any = None) -> int:
        """Deliver *payload* to the current subscribers of *topic*.

        Returns the number of observers that handled the event without raising.
        """
        resolved = Topic(topic)
        with self._lock:
            snapshot = list(self._subscriptions[resolved].values())

        delivered = 0
        for subscription in snapshot:
            try:
                if resolved in _PAYLOAD_TOPICS:
                    subscription.observer(payload)
                else:
                    subscription.observer()
            except Exception:
                logger.exception(
                    "Observer %r failed while handling %s",
                    subscription.observer,
                    resolved.value,
                )
                continue
            delivered += 1
        return delivered

    def publish_login_state(self, in_progress: bool) -> int:
        return self.publish(Topic.LOGIN_STATE, bool(in_progress))

    def publish_settings_changed(self) -> int:
        return self.publish(Topic.SETTINGS_CHANGED)
