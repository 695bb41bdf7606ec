"""Domain events emitted for node notifications.

One event instance is created per broker message:
- ``BitcoinBlockHashReceived`` — the node connected a new block
- ``BitcoinTransactionHashReceived`` — the node saw a wallet/mempool transaction
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar

if TYPE_CHECKING:
    from datetime import datetime

    from bitcoind_adapter.domain.models import Hash


@dataclass(frozen=True)
class BitcoinMessage:
    """Base notification event."""

    type: ClassVar[str] = "bitcoin.message"

    hash: Hash
    received_at: datetime

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain dict."""
        return {
            "type": self.type,
            "hash": str(self.hash),
            "receivedAt": self.received_at.isoformat(),
        }


@dataclass(frozen=True)
class BitcoinBlockHashReceived(BitcoinMessage):
    type: ClassVar[str] = "bitcoin.block_hash_received"


@dataclass(frozen=True)
class BitcoinTransactionHashReceived(BitcoinMessage):
    type: ClassVar[str] = "bitcoin.transaction_hash_received"
