"""Observable state cells.

A ``StateCell`` holds one value and pushes every new value to its
subscribers synchronously, before ``set`` returns. Subscribers therefore
always observe a complete post-mutation snapshot.
"""
from typing import Callable, Generic, List, TypeVar

from trip_budget.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

Observer = Callable[[T], None]


class Subscription:
    """Cancellation handle returned by ``StateCell.subscribe``."""

    def __init__(self, cell: "StateCell", observer: Observer):
        self._cell = cell
        self._observer = observer
        self.active = True

    def unsubscribe(self) -> None:
        if not self.active:
            return
        self.active = False
        self._cell._remove(self)

    def _deliver(self, value) -> None:
        if self.active:
            self._observer(value)


class StateCell(Generic[T]):
    """Value holder with a registry of synchronously notified observers."""

    def __init__(self, initial: T, name: str = "cell"):
        self.name = name
        self._value = initial
        self._subscriptions: List[Subscription] = []

    @property
    def value(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        """Replace the value and notify every current observer in subscription order."""
        self._value = value
        # Snapshot so observers may (un)subscribe during delivery
        for subscription in list(self._subscriptions):
            try:
                subscription._deliver(value)
            except Exception:
                logger.exception(f"Observer of {self.name} raised; continuing broadcast")

    def subscribe(self, observer: Observer, emit_current: bool = False) -> Subscription:
        """Register ``observer``; with ``emit_current`` it receives the current value immediately."""
        subscription = Subscription(self, observer)
        self._subscriptions.append(subscription)
        if emit_current:
            subscription._deliver(self._value)
        return subscription

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def _remove(self, subscription: Subscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)
