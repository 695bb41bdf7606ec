"""Domain — typed Bitcoin values and notification events."""

from bitcoind_adapter.domain.events import (
    BitcoinBlockHashReceived,
    BitcoinMessage,
    BitcoinTransactionHashReceived,
)
from bitcoind_adapter.domain.models import (
    Address,
    BitcoinBlock,
    BitcoinTransaction,
    Hash,
    Output,
    OutputList,
)

__all__ = [
    "Address",
    "BitcoinBlock",
    "BitcoinBlockHashReceived",
    "BitcoinMessage",
    "BitcoinTransaction",
    "BitcoinTransactionHashReceived",
    "Hash",
    "Output",
    "OutputList",
]
