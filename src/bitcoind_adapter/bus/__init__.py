"""Bus — publication of translated events to the internal event channel."""

from __future__ import annotations

from bitcoind_adapter.bus.message_bus import EVENTS_CHANNEL, MemoryMessageBus, MessageBus

__all__ = ["EVENTS_CHANNEL", "MemoryMessageBus", "MessageBus"]
