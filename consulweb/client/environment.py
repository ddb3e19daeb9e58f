"""Host environment visibility signal and listener bookkeeping."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional


@dataclass(frozen=True)
class VisibilityChange:
    hidden: bool


VisibilityListener = Callable[[VisibilityChange], None]


class Subscription:
    """Handle for one registered listener. ``remove()`` only acts once."""

    def __init__(self, unsubscribe: Callable[[], None]):
        self._unsubscribe: Optional[Callable[[], None]] = unsubscribe

    @property
    def active(self) -> bool:
        return self._unsubscribe is not None

    def remove(self) -> None:
        unsubscribe, self._unsubscribe = self._unsubscribe, None
        if unsubscribe is not None:
            unsubscribe()


class HostEnvironment:
    """Interface for the surface the client runs in."""

    @property
    def hidden(self) -> bool:
        raise NotImplementedError

    def subscribe(self, callback: VisibilityListener) -> Subscription:
        raise NotImplementedError


class Visibility(HostEnvironment):
    """In-process visibility state, driven by ``set_hidden``."""

    def __init__(self, hidden: bool = False):
        self._hidden = hidden
        self._listeners: List[VisibilityListener] = []

    @property
    def hidden(self) -> bool:
        return self._hidden

    def subscribe(self, callback: VisibilityListener) -> Subscription:
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return Subscription(unsubscribe)

    def set_hidden(self, hidden: bool) -> None:
        if hidden == self._hidden:
            return
        self._hidden = hidden
        event = VisibilityChange(hidden=hidden)
        # listeners may unsubscribe while being notified
        for callback in list(self._listeners):
            callback(event)

    def __len__(self) -> int:
        return len(self._listeners)


class Listeners:
    """Subscriptions owned by one client, released together on teardown."""

    def __init__(self):
        self._subscriptions: List[Subscription] = []

    def add(self, environment: HostEnvironment, callback: VisibilityListener) -> Subscription:
        subscription = environment.subscribe(callback)
        self._subscriptions = [s for s in self._subscriptions if s.active]
        self._subscriptions.append(subscription)
        return subscription

    def remove(self) -> None:
        subscriptions, self._subscriptions = self._subscriptions, []
        for subscription in subscriptions:
            subscription.remove()

    def __len__(self) -> int:
        return sum(1 for subscription in self._subscriptions if subscription.active)
