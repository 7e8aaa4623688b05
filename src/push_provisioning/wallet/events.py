"""Wallet change notifications as an explicit event channel.

Platform adapters forward pass library notifications (added, replaced and
removed passes) into ``WalletEvents.publish``; long-lived consumers iterate a
subscription and re-run classification on every event instead of caching
tokenization status.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Optional

from ..logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ChangedPass:
    primary_account_identifier: Optional[str]
    primary_account_number_suffix: Optional[str] = None


@dataclass(frozen=True)
class WalletChangeEvent:
    added: tuple[ChangedPass, ...] = field(default_factory=tuple)
    replaced: tuple[ChangedPass, ...] = field(default_factory=tuple)
    removed: tuple[ChangedPass, ...] = field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        return not (self.added or self.replaced or self.removed)


_CLOSED = object()


class WalletSubscription:
    """Async iterator over wallet change events for one subscriber."""

    def __init__(self, channel: "WalletEvents") -> None:
        self._channel = channel
        self._queue: asyncio.Queue = asyncio.Queue()
        self._closed = False
        self._pending = 0

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending(self) -> int:
        """Events published to this subscriber but not yet taken off the queue."""
        return self._pending

    def _deliver(self, event: WalletChangeEvent) -> None:
        if not self._closed:
            self._pending += 1
            self._queue.put_nowait(event)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._channel._unsubscribe(self)
        self._queue.put_nowait(_CLOSED)

    async def get(self) -> Optional[WalletChangeEvent]:
        """Next event, or None once the subscription is closed."""
        item = await self._queue.get()
        if item is _CLOSED:
            return None
        self._pending -= 1
        return item

    def __aiter__(self) -> "WalletSubscription":
        return self

    async def __anext__(self) -> WalletChangeEvent:
        event = await self.get()
        if event is None:
            raise StopAsyncIteration
        return event


class WalletEvents:
    """Fan-out channel for wallet change events."""

    def __init__(self) -> None:
        self._subscribers: list[WalletSubscription] = []

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self) -> WalletSubscription:
        subscription = WalletSubscription(self)
        self._subscribers.append(subscription)
        return subscription

    def _unsubscribe(self, subscription: WalletSubscription) -> None:
        if subscription in self._subscribers:
            self._subscribers.remove(subscription)

    def publish(self, event: WalletChangeEvent) -> None:
        """Deliver an event to every subscriber without blocking."""
        if event.is_empty:
            return
        logger.debug(
            "Wallet changed: %d added, %d replaced, %d removed",
            len(event.added),
            len(event.replaced),
            len(event.removed),
        )
        for subscription in list(self._subscribers):
            subscription._deliver(event)

    def close(self) -> None:
        for subscription in list(self._subscribers):
            subscription.close()
