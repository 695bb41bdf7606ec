"""Internal event bus — the downstream side of the message consumer.

``MessageBus`` is the interface the consumer publishes translated events
to. ``MemoryMessageBus`` delivers in-process; subscriber errors propagate
to the publisher so the consumer can reject the source message.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from bitcoind_adapter.domain.events import BitcoinMessage

logger = logging.getLogger(__name__)

EVENTS_CHANNEL = "events"


class MessageBus(ABC):
    """Abstract event bus interface."""

    @abstractmethod
    async def publish(self, message: BitcoinMessage, channel: str = EVENTS_CHANNEL) -> None:
        """Publish *message* to *channel*."""


class MemoryMessageBus(MessageBus):
    """In-memory bus for single-process deployments and tests."""

    def __init__(self) -> None:
        self._subscribers: dict[str, list[Callable[[BitcoinMessage], Awaitable[None]]]] = {}

    def subscribe(
        self, channel: str, callback: Callable[[BitcoinMessage], Awaitable[None]]
    ) -> None:
        """Register a callback for a channel."""
        self._subscribers.setdefault(channel, []).append(callback)

    async def publish(self, message: BitcoinMessage, channel: str = EVENTS_CHANNEL) -> None:
        """Deliver *message* to all subscribers of *channel*, in order."""
        subscribers = self._subscribers.get(channel, [])
        if not subscribers:
            logger.debug("No subscribers on %s for %s", channel, message.type)
        for cb in subscribers:
            await cb(message)
