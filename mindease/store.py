"""
In-memory feeds for the MindEase companion.

This module provides the mood history that backs the mood chart and the feed
of escalation advisories. Both are append-only and support real-time
streaming to multiple subscribers.
"""

import asyncio
from collections.abc import AsyncGenerator, Iterable
from contextlib import asynccontextmanager
from typing import Generic, TypeVar

from .models import Advisory, MoodPoint

T = TypeVar("T")


class Feed(Generic[T]):
    """
    Append-only sequence with streaming subscribers.

    Subscribers wait on a condition variable and are woken whenever a new
    item is appended. Items are never removed or reordered.
    """

    def __init__(self, items: Iterable[T] = ()) -> None:
        self._items: list[T] = list(items)
        self._condition = asyncio.Condition()

    def __len__(self) -> int:
        return len(self._items)

    async def _append(self, item: T) -> None:
        async with self._condition:
            self._items.append(item)

            # Notify all waiting subscribers
            self._condition.notify_all()

    def all(self) -> tuple[T, ...]:
        """Return every item in insertion order."""
        return tuple(self._items)

    @asynccontextmanager
    async def stream(
        self, replay: bool = True
    ) -> AsyncGenerator[AsyncGenerator[T, None], None]:
        """
        Stream items to a subscriber.

        Args:
            replay: Yield the items already present before waiting for new ones

        Yields:
            An async generator of items in insertion order
        """
        start = 0 if replay else len(self._items)

        async def item_generator() -> AsyncGenerator[T, None]:
            seen = start
            while True:
                async with self._condition:
                    await self._condition.wait_for(lambda: len(self._items) > seen)
                    batch = self._items[seen:]
                    seen = len(self._items)

                # Yield outside the lock so slow consumers never block writers
                for item in batch:
                    yield item

        yield item_generator()


class MoodHistory(Feed[MoodPoint]):
    """Chronological mood time series, one point per user message."""

    async def record(self, point: MoodPoint) -> None:
        """
        Append a mood point and notify all subscribers.

        Args:
            point: The mood point to record
        """
        await self._append(point)


class AdvisoryFeed(Feed[Advisory]):
    """Escalation advisories fired during the session."""

    async def publish(self, advisory: Advisory) -> None:
        """
        Append an advisory and notify all subscribers.

        Args:
            advisory: The advisory to publish
        """
        await self._append(advisory)
