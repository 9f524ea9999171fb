"""In-process publish/subscribe feeds for realtime state."""

import logging
import threading
from collections.abc import Callable, Hashable
from dataclasses import dataclass, field
from typing import Generic, TypeVar

T = TypeVar("T")

_logger = logging.getLogger(__name__)


@dataclass
class Subscription:
    """Handle returned by ``ChangeFeed.subscribe``."""

    _unsubscribe: Callable[[], None]
    active: bool = True

    def remove(self) -> None:
        """Stop receiving updates."""
        if self.active:
            self.active = False
            self._unsubscribe()


@dataclass
class ChangeFeed(Generic[T]):
    """Keyed feed that pushes the latest value to subscribers.

    New subscribers immediately receive the latest published value for their
    key, if any.
    """

    name: str
    _listeners: dict[Hashable, list[Callable[[T], None]]] = field(
        default_factory=dict, repr=False
    )
    _latest: dict[Hashable, T] = field(default_factory=dict, repr=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    def subscribe(self, key: Hashable, callback: Callable[[T], None]) -> Subscription:
        with self._lock:
            self._listeners.setdefault(key, []).append(callback)
            has_latest = key in self._latest
            latest = self._latest.get(key)

        def unsubscribe() -> None:
            with self._lock:
                listeners = self._listeners.get(key, [])
                if callback in listeners:
                    listeners.remove(callback)
                if not listeners:
                    self._listeners.pop(key, None)

        if has_latest:
            self._deliver(key, callback, latest)  # type: ignore[arg-type]
        return Subscription(_unsubscribe=unsubscribe)

    def publish(self, key: Hashable, value: T) -> None:
        with self._lock:
            self._latest[key] = value
            listeners = list(self._listeners.get(key, []))
        for callback in listeners:
            self._deliver(key, callback, value)

    def latest(self, key: Hashable) -> T | None:
        with self._lock:
            return self._latest.get(key)

    def discard(self, key: Hashable) -> None:
        """Forget the latest value for a key without notifying anyone."""
        with self._lock:
            self._latest.pop(key, None)

    def subscriber_count(self, key: Hashable) -> int:
        with self._lock:
            return len(self._listeners.get(key, []))

    def _deliver(self, key: Hashable, callback: Callable[[T], None], value: T) -> None:
        try:
            callback(value)
        except Exception:
            _logger.exception("Feed subscriber failed", extra={"feed": self.name})
