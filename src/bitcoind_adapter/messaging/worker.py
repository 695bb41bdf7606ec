"""Bitcoind message worker — consume node notifications from the broker.

One worker owns one channel with a prefetch of exactly one message, so a
message is always acked or rejected before the broker delivers the next
one. Per message:

- translated event → publish to the event bus, then ack
- unrecognised routing key → ack without publishing
- domain error while translating/publishing → log, reject without requeue

Errors that are not ``AdapterError`` propagate and stop the worker; the
broker redelivers the unacknowledged message to the next consumer.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

import aio_pika

from bitcoind_adapter.bus.message_bus import EVENTS_CHANNEL
from bitcoind_adapter.errors.adapter_errors import AdapterError
from bitcoind_adapter.errors.payment_errors import PaymentServiceUnavailable
from bitcoind_adapter.messaging.translator import translate
from bitcoind_adapter.metrics.collector import (
    OUTCOME_DROPPED,
    OUTCOME_PUBLISHED,
    OUTCOME_REJECTED,
)

if TYPE_CHECKING:
    from aio_pika.abc import AbstractConnection, AbstractIncomingMessage

    from bitcoind_adapter.bus.message_bus import MessageBus
    from bitcoind_adapter.config.settings import BrokerConfig
    from bitcoind_adapter.metrics.collector import AdapterMetrics

logger = logging.getLogger(__name__)


class BitcoindMessageWorker:
    """Sequential consumer for the bitcoind notification queue.

    Usage::

        worker = BitcoindMessageWorker(config.broker, bus)
        await worker.connect()
        try:
            await worker.run()          # until stop() is called
        finally:
            await worker.close()
    """

    def __init__(
        self,
        config: BrokerConfig,
        message_bus: MessageBus,
        *,
        metrics: AdapterMetrics | None = None,
        connection: AbstractConnection | None = None,
    ) -> None:
        self._config = config
        self._bus = message_bus
        self._metrics = metrics
        self._connection = connection
        self._owns_connection = connection is None
        self._iterator: Any = None
        self._stopping = asyncio.Event()

    async def connect(self) -> None:
        """Open the broker connection unless one was injected."""
        if self._connection is None:
            self._connection = await aio_pika.connect_robust(self._config.url)
            logger.info("Connected to broker")

    async def close(self) -> None:
        """Close the broker connection if this worker opened it."""
        if self._connection is not None and self._owns_connection:
            await self._connection.close()
            self._connection = None

    @property
    def is_consuming(self) -> bool:
        return self._iterator is not None

    async def run(self, queue_name: str | None = None) -> None:
        """Consume *queue_name* until the consumer is cancelled.

        Args:
            queue_name: Queue to consume; defaults to the configured queue.
        """
        queue_name = queue_name or self._config.queue
        if not queue_name or not queue_name.strip():
            msg = "queue name must not be blank"
            raise ValueError(msg)

        if self._stopping.is_set():
            logger.info("Stop requested before consuming %s", queue_name)
            return

        if self._connection is None:
            await self.connect()

        async with self._connection.channel() as channel:
            await channel.set_qos(prefetch_count=self._config.prefetch_count)
            # topology is provisioned externally; only check the queue exists
            queue = await channel.get_queue(queue_name, ensure=True)

            logger.info("Consuming bitcoind messages from %s", queue_name)
            async with queue.iterator() as messages:
                self._iterator = messages
                try:
                    # stop() may have run while the channel was being set up
                    if self._stopping.is_set():
                        await messages.close()
                    async for message in messages:
                        await self.handle(message)
                finally:
                    self._iterator = None
        logger.info("Stopped consuming %s", queue_name)

    def request_stop(self) -> None:
        """Mark the worker as stopping without awaiting; safe from signal handlers.

        ``run`` checks the flag before consuming and after the queue iterator
        is opened. Use ``stop`` to also cancel an active consumer.
        """
        self._stopping.set()

    async def stop(self) -> None:
        """Cancel the consumer; the message in progress is still resolved."""
        self.request_stop()
        if self._iterator is not None:
            await self._iterator.close()

    async def handle(self, message: AbstractIncomingMessage) -> None:
        """Translate, publish and acknowledge a single delivery."""
        routing_key = message.routing_key or ""
        try:
            event = translate(routing_key, message.body, message.timestamp)
            if event is not None:
                await self._bus.publish(event, EVENTS_CHANNEL)
        except AdapterError as exc:
            level = logging.WARNING if isinstance(exc, PaymentServiceUnavailable) else logging.ERROR
            logger.log(
                level, "Error handling bitcoind message '%s'.", routing_key, exc_info=exc
            )
            await message.reject(requeue=False)
            self._record(routing_key, OUTCOME_REJECTED)
            return

        await message.ack()
        self._record(routing_key, OUTCOME_PUBLISHED if event is not None else OUTCOME_DROPPED)

    def _record(self, routing_key: str, outcome: str) -> None:
        if self._metrics is not None:
            self._metrics.record_message(routing_key, outcome)
