"""Messaging — broker notification consumption and translation."""

from __future__ import annotations

from bitcoind_adapter.messaging.translator import (
    MESSAGE_BLOCK_HASH,
    MESSAGE_TRANSACTION_HASH,
    translate,
)
from bitcoind_adapter.messaging.worker import BitcoindMessageWorker

__all__ = [
    "MESSAGE_BLOCK_HASH",
    "MESSAGE_TRANSACTION_HASH",
    "BitcoindMessageWorker",
    "translate",
]
