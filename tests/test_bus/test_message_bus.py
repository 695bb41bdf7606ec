"""Tests for the in-memory event bus."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from bitcoind_adapter.bus.message_bus import EVENTS_CHANNEL, MemoryMessageBus, MessageBus
from bitcoind_adapter.domain.events import BitcoinTransactionHashReceived
from bitcoind_adapter.domain.models import Hash

EVENT = BitcoinTransactionHashReceived(
    hash=Hash("abcd"), received_at=datetime(2024, 1, 1, tzinfo=UTC)
)


class TestMemoryMessageBus:
    def test_is_message_bus(self) -> None:
        assert isinstance(MemoryMessageBus(), MessageBus)

    async def test_publish_delivers_in_order(self) -> None:
        bus = MemoryMessageBus()
        seen = []

        async def first(event):
            seen.append(("first", event))

        async def second(event):
            seen.append(("second", event))

        bus.subscribe(EVENTS_CHANNEL, first)
        bus.subscribe(EVENTS_CHANNEL, second)
        await bus.publish(EVENT)

        assert seen == [("first", EVENT), ("second", EVENT)]

    async def test_channels_are_isolated(self) -> None:
        bus = MemoryMessageBus()
        seen = []

        async def on_other(event):
            seen.append(event)

        bus.subscribe("other", on_other)
        await bus.publish(EVENT, EVENTS_CHANNEL)
        assert seen == []

    async def test_no_subscribers_is_fine(self) -> None:
        await MemoryMessageBus().publish(EVENT)

    async def test_subscriber_error_propagates(self) -> None:
        bus = MemoryMessageBus()
        later = []

        async def failing(event):
            raise RuntimeError("subscriber failed")

        async def after(event):
            later.append(event)

        bus.subscribe(EVENTS_CHANNEL, failing)
        bus.subscribe(EVENTS_CHANNEL, after)
        with pytest.raises(RuntimeError, match="subscriber failed"):
            await bus.publish(EVENT)
        assert later == []
