"""Translate node notifications into domain events.

The node publishes ZMQ notifications that are relayed onto the broker
with routing keys ``bitcoind.message.<topic>``. Only ``hashblock`` and
``hashtx`` are understood; anything else translates to ``None`` and is
dropped by the consumer.
"""

from __future__ import annotations

from datetime import UTC, datetime

from bitcoind_adapter.domain.events import (
    BitcoinBlockHashReceived,
    BitcoinMessage,
    BitcoinTransactionHashReceived,
)
from bitcoind_adapter.domain.models import Hash
from bitcoind_adapter.errors.adapter_errors import MessageHandlingError

MESSAGE_BLOCK_HASH = "bitcoind.message.hashblock"
MESSAGE_TRANSACTION_HASH = "bitcoind.message.hashtx"

_MESSAGE_TYPES: dict[str, type[BitcoinMessage]] = {
    MESSAGE_BLOCK_HASH: BitcoinBlockHashReceived,
    MESSAGE_TRANSACTION_HASH: BitcoinTransactionHashReceived,
}


def translate(
    routing_key: str,
    body: bytes,
    timestamp: datetime | float | None,
) -> BitcoinMessage | None:
    """Build the domain event for a notification.

    Args:
        routing_key: Broker routing key selecting the event type.
        body: Raw hash bytes.
        timestamp: Delivery timestamp header (datetime or unix time).

    Returns:
        The event, or ``None`` for unrecognised routing keys.

    Raises:
        MessageHandlingError: Missing timestamp or empty body.
    """
    message_type = _MESSAGE_TYPES.get(routing_key)
    if message_type is None:
        return None

    if not body:
        msg = f"Empty body for '{routing_key}' message"
        raise MessageHandlingError(msg)

    return message_type(hash=Hash(body.hex()), received_at=_received_at(routing_key, timestamp))


def _received_at(routing_key: str, timestamp: datetime | float | None) -> datetime:
    if timestamp is None:
        msg = f"Missing timestamp header on '{routing_key}' message"
        raise MessageHandlingError(msg)
    if isinstance(timestamp, datetime):
        if timestamp.tzinfo is None:
            return timestamp.replace(tzinfo=UTC)
        return timestamp
    try:
        return datetime.fromtimestamp(timestamp, tz=UTC)
    except (OverflowError, OSError, ValueError, TypeError) as exc:
        msg = f"Invalid timestamp header on '{routing_key}' message: {timestamp!r}"
        raise MessageHandlingError(msg) from exc
