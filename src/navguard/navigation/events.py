"""Navigation history events and the location-change stream.

Free-threading safety:
    - NavigationEvent is a frozen dataclass (immutable, safe to share)
    - LocationBus uses a Lock to protect the subscriber set
    - Each subscriber gets its own asyncio.Queue (no shared mutable state)
"""

import asyncio
import threading
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from enum import Enum
from time import time


class NavigationType(Enum):
    """What kind of transition a history event records."""

    GO = "go"
    PUSH = "push"
    REPLACE = "replace"
    POP = "pop"
    REDIRECTED = "redirected"
    REJECTED = "rejected"


@dataclass(frozen=True, slots=True)
class NavigationEvent:
    """One recorded navigation transition.

    For ``REDIRECTED`` events ``to_location`` is where the navigator
    ended up and ``redirected_from`` is what the caller asked for. For
    ``REJECTED`` events ``to_location`` is the refused destination and
    the navigator stayed on ``from_location``.
    """

    from_location: str
    to_location: str
    type: NavigationType
    redirected_from: str | None = None
    reason: str | None = None
    timestamp: float = field(default_factory=time)

    def __str__(self) -> str:
        text = f"{self.type.value}: {self.from_location} -> {self.to_location}"
        if self.redirected_from is not None:
            text += f" (redirected from {self.redirected_from})"
        if self.reason is not None:
            text += f" ({self.reason})"
        return text


class LocationBus:
    """Async broadcast channel for location changes.

    Each call to ``subscribe()`` returns an async iterator backed by its
    own ``asyncio.Queue``. ``publish()`` places the location into every
    active subscriber's queue.

    Usage::

        async for location in navigator.locations():
            print("now at", location)
    """

    __slots__ = ("_closed", "_lock", "_maxsize", "_subscribers")

    def __init__(self, maxsize: int = 256) -> None:
        self._subscribers: set[asyncio.Queue[str | None]] = set()
        self._lock = threading.Lock()
        self._maxsize = maxsize
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def publish(self, location: str) -> None:
        """Broadcast *location* to all active subscribers."""
        with self._lock:
            subscribers = set(self._subscribers)
        for queue in subscribers:
            try:
                queue.put_nowait(location)
            except asyncio.QueueFull:
                # Drop for slow consumers rather than blocking navigation
                pass

    async def subscribe(self) -> AsyncIterator[str]:
        """Subscribe to location changes.

        The subscription is cleaned up when the iterator exits. A closed
        bus yields nothing.
        """
        queue: asyncio.Queue[str | None] = asyncio.Queue(maxsize=self._maxsize)
        with self._lock:
            if self._closed:
                return
            self._subscribers.add(queue)
        try:
            while True:
                location = await queue.get()
                if location is None:
                    break
                yield location
        finally:
            with self._lock:
                self._subscribers.discard(queue)

    def close(self) -> None:
        """Signal all subscribers to stop.

        Puts ``None`` into every queue, which causes the async iterator
        to break cleanly.
        """
        with self._lock:
            self._closed = True
            for queue in self._subscribers:
                try:
                    queue.put_nowait(None)
                except asyncio.QueueFull:
                    # Make room for the sentinel
                    queue.get_nowait()
                    queue.put_nowait(None)
            self._subscribers.clear()
