"""Tests for domain values and events."""

from __future__ import annotations

import dataclasses
from datetime import UTC, datetime

import pytest

from bitcoind_adapter.domain.events import (
    BitcoinBlockHashReceived,
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
from bitcoind_adapter.money.currency import Currency, Money

# ---------------------------------------------------------------------------
# Identifiers
# ---------------------------------------------------------------------------


class TestIdentifiers:
    def test_address_equality_by_value(self) -> None:
        assert Address("1BoatSLRHtKNngkdXEeobR76b53LETtpyT") == Address(
            "1BoatSLRHtKNngkdXEeobR76b53LETtpyT"
        )
        assert str(Address("bc1qxyz")) == "bc1qxyz"

    def test_empty_address_rejected(self) -> None:
        with pytest.raises(ValueError, match="empty"):
            Address("  ")

    def test_hash_must_be_hex(self) -> None:
        assert str(Hash("abcd")) == "abcd"
        with pytest.raises(ValueError, match="hex"):
            Hash("not-hex")

    def test_empty_hash_rejected(self) -> None:
        with pytest.raises(ValueError, match="empty"):
            Hash("")


# ---------------------------------------------------------------------------
# Outputs
# ---------------------------------------------------------------------------


class TestOutputList:
    def test_total(self) -> None:
        outputs = OutputList(
            (
                Output(Address("addr1"), Money(1_000, Currency.SAT)),
                Output(Address("addr2"), Money(2_500, Currency.MSAT)),
            )
        )
        assert len(outputs) == 2
        assert outputs.total == Money(3_500)
        assert [str(o.address) for o in outputs] == ["addr1", "addr2"]

    def test_empty_total(self) -> None:
        assert OutputList().total.is_zero()

    def test_to_list(self) -> None:
        outputs = OutputList((Output(Address("addr1"), Money(1_000, Currency.SAT)),))
        assert outputs.to_list() == [{"address": "addr1", "value": "1SAT"}]


# ---------------------------------------------------------------------------
# Transaction
# ---------------------------------------------------------------------------


class TestBitcoinTransaction:
    def test_defaults(self) -> None:
        tx = BitcoinTransaction(amount=Money(1_000))
        assert tx.id is None
        assert tx.label == ""
        assert len(tx.outputs) == 0
        assert tx.fee_rate is None
        assert tx.fee_settled is None

    def test_with_values_returns_new_version(self) -> None:
        tx = BitcoinTransaction(amount=Money(1_000), label="order-1")
        updated = tx.with_values(id=Hash("ab" * 32), conf_target=3)
        assert updated is not tx
        assert tx.id is None
        assert str(updated.id) == "ab" * 32
        assert updated.label == "order-1"
        assert updated.conf_target == 3

    def test_immutable(self) -> None:
        tx = BitcoinTransaction(amount=Money(1_000))
        with pytest.raises(dataclasses.FrozenInstanceError):
            tx.label = "x"  # type: ignore[misc]

    def test_to_dict(self) -> None:
        tx = BitcoinTransaction(amount=Money(1_000, Currency.SAT), rbf=True)
        data = tx.to_dict()
        assert data["id"] is None
        assert data["amount"] == "1SAT"
        assert data["rbf"] is True


class TestBitcoinBlock:
    def test_to_dict(self) -> None:
        block = BitcoinBlock(
            hash=Hash("00" * 32),
            merkle_root=Hash("11" * 32),
            confirmations=2,
            transactions=(Hash("22" * 32),),
            height=800_000,
            timestamp=datetime(2023, 7, 24, tzinfo=UTC),
        )
        data = block.to_dict()
        assert data["height"] == 800_000
        assert data["transactions"] == ["22" * 32]
        assert data["timestamp"].startswith("2023-07-24")


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


class TestEvents:
    def test_event_types_differ(self) -> None:
        assert BitcoinBlockHashReceived.type != BitcoinTransactionHashReceived.type

    def test_to_dict(self) -> None:
        at = datetime(2024, 1, 1, tzinfo=UTC)
        event = BitcoinBlockHashReceived(hash=Hash("abcd"), received_at=at)
        assert event.to_dict() == {
            "type": "bitcoin.block_hash_received",
            "hash": "abcd",
            "receivedAt": at.isoformat(),
        }

    def test_events_are_values(self) -> None:
        at = datetime(2024, 1, 1, tzinfo=UTC)
        assert BitcoinTransactionHashReceived(Hash("ab"), at) == BitcoinTransactionHashReceived(
            Hash("ab"), at
        )
