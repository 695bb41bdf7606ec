"""Bitcoin domain values — addresses, hashes, outputs, transactions, blocks.

Every type here is immutable. ``BitcoinTransaction.with_values`` returns a
new version of a transaction as it moves through the payment pipeline
(address assignment, funding, signing, broadcast).
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from bitcoind_adapter.money.currency import Currency, Money

if TYPE_CHECKING:
    from collections.abc import Iterator
    from datetime import datetime


@dataclass(frozen=True)
class Address:
    """A Bitcoin address as reported by the node."""

    value: str

    def __post_init__(self) -> None:
        if not self.value or not self.value.strip():
            msg = "Address must not be empty"
            raise ValueError(msg)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Hash:
    """A block or transaction hash in hex."""

    value: str

    def __post_init__(self) -> None:
        if not self.value:
            msg = "Hash must not be empty"
            raise ValueError(msg)
        try:
            bytes.fromhex(self.value)
        except ValueError:
            msg = f"Hash must be hex encoded: {self.value!r}"
            raise ValueError(msg) from None

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Output:
    """A single payment output (address + value)."""

    address: Address
    value: Money

    def to_dict(self) -> dict[str, str]:
        return {"address": str(self.address), "value": str(self.value)}


@dataclass(frozen=True)
class OutputList:
    """Ordered outputs of a transaction."""

    outputs: tuple[Output, ...] = ()

    def __iter__(self) -> Iterator[Output]:
        return iter(self.outputs)

    def __len__(self) -> int:
        return len(self.outputs)

    @property
    def total(self) -> Money:
        """Sum of all output values in MSAT."""
        return Money(sum(o.value.msat for o in self.outputs), Currency.MSAT)

    def to_list(self) -> list[dict[str, str]]:
        return [o.to_dict() for o in self.outputs]


@dataclass(frozen=True)
class BitcoinTransaction:
    """A payment handled by the node wallet.

    Attributes:
        amount: Requested (or, for fetched transactions, settled) amount.
        id: Transaction id; ``None`` until broadcast.
        label: Wallet label passed to ``getnewaddress``.
        outputs: Payment outputs.
        confirmations: Confirmation count reported by the node.
        fee_rate: Requested fee rate per kvB; ``None`` lets the node estimate.
        fee_settled: Fee actually applied, in MSAT.
        rbf: Whether the transaction signals replace-by-fee.
        conf_target: Confirmation target requested from the payer.
    """

    amount: Money
    id: Hash | None = None
    label: str = ""
    outputs: OutputList = field(default_factory=OutputList)
    confirmations: int = 0
    fee_rate: Money | None = None
    fee_settled: Money | None = None
    rbf: bool = False
    conf_target: int | None = None

    def with_values(self, **changes: Any) -> BitcoinTransaction:
        """Return a copy with *changes* applied."""
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id) if self.id is not None else None,
            "label": self.label,
            "amount": str(self.amount),
            "outputs": self.outputs.to_list(),
            "confirmations": self.confirmations,
            "feeRate": str(self.fee_rate) if self.fee_rate is not None else None,
            "feeSettled": str(self.fee_settled) if self.fee_settled is not None else None,
            "rbf": self.rbf,
            "confTarget": self.conf_target,
        }


@dataclass(frozen=True)
class BitcoinBlock:
    """A block as returned by ``getblock`` (verbosity 1)."""

    hash: Hash
    merkle_root: Hash
    confirmations: int
    transactions: tuple[Hash, ...]
    height: int
    timestamp: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "hash": str(self.hash),
            "merkleRoot": str(self.merkle_root),
            "confirmations": self.confirmations,
            "transactions": [str(t) for t in self.transactions],
            "height": self.height,
            "timestamp": self.timestamp.isoformat(),
        }
