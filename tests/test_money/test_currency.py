"""Tests for Money and CurrencyConverter."""

from __future__ import annotations

from decimal import Decimal

import pytest

from bitcoind_adapter.errors.adapter_errors import InvalidAmountError
from bitcoind_adapter.money.currency import Currency, CurrencyConverter, Money

converter = CurrencyConverter()

# ---------------------------------------------------------------------------
# Money value object
# ---------------------------------------------------------------------------


class TestMoney:
    def test_amount_in_currency(self) -> None:
        assert Money(150_000, Currency.SAT).amount == Decimal(150)
        assert Money(100_000_000_000, Currency.BTC).amount == Decimal(1)

    def test_satoshis(self) -> None:
        assert Money(1_500).satoshis == 1

    def test_equality_ignores_display_currency(self) -> None:
        assert Money(1_000, Currency.SAT) == Money(1_000, Currency.MSAT)
        assert hash(Money(1_000, Currency.SAT)) == hash(Money(1_000, Currency.MSAT))

    def test_ordering(self) -> None:
        assert Money(999) < Money(1_000)
        assert Money(1_000) >= Money(1_000)
        assert Money(1_001) > Money(1_000)

    def test_add(self) -> None:
        assert (Money(1) + Money(2)).msat == 3

    def test_str(self) -> None:
        assert str(Money(1_000, Currency.SAT)) == "1SAT"
        assert str(Money(100_000_000, Currency.BTC)) == "0.001BTC"
        assert str(Money(1_000)) == "1000MSAT"

    def test_is_zero(self) -> None:
        assert Money(0).is_zero()


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


class TestParse:
    @pytest.mark.parametrize(
        ("text", "msat"),
        [
            ("1SAT", 1_000),
            ("1500MSAT", 1_500),
            ("0.001BTC", 100_000_000),
            ("0.00000001BTC", 1_000),
            ("21btc", 2_100_000_000_000),
            (" 2 SAT ", 2_000),
        ],
    )
    def test_parse(self, text: str, msat: int) -> None:
        assert converter.parse(text).msat == msat

    def test_parse_keeps_currency(self) -> None:
        assert converter.parse("0.5BTC").currency == Currency.BTC

    def test_malformed(self) -> None:
        with pytest.raises(InvalidAmountError):
            converter.parse("BTC")

    def test_unknown_currency(self) -> None:
        with pytest.raises(InvalidAmountError, match="Unsupported currency"):
            converter.parse("1EUR")

    def test_sub_msat_rejected(self) -> None:
        with pytest.raises(InvalidAmountError, match="millisatoshi"):
            converter.parse("0.5MSAT")


# ---------------------------------------------------------------------------
# Conversion & formatting
# ---------------------------------------------------------------------------


class TestConvertAndFormat:
    def test_convert_keeps_amount(self) -> None:
        money = converter.convert(converter.parse("1SAT"), Currency.BTC)
        assert money.currency == Currency.BTC
        assert money.msat == 1_000

    def test_format_btc_eight_decimals(self) -> None:
        assert converter.format(converter.parse("0.001BTC")) == "0.00100000"

    def test_format_truncates_sub_satoshi(self) -> None:
        assert converter.format(Money(1_999, Currency.BTC)) == "0.00000001"

    def test_format_sat(self) -> None:
        assert converter.format(Money(12_000, Currency.SAT)) == "12"

    def test_to_rpc(self) -> None:
        assert converter.to_rpc(converter.parse("150000SAT")) == "0.00150000"

    def test_from_btc_string(self) -> None:
        money = converter.from_btc("0.00000001")
        assert money.msat == 1_000
        assert money.currency == Currency.MSAT

    def test_from_btc_strips_sign(self) -> None:
        assert converter.from_btc("-0.00001410").msat == 1_410_000

    def test_from_btc_decimal_and_int(self) -> None:
        assert converter.from_btc(Decimal("0.5")).msat == 50_000_000_000
        assert converter.from_btc(0).msat == 0

    def test_from_btc_exponent(self) -> None:
        assert converter.from_btc("1e-08").msat == 1_000

    def test_from_btc_garbage(self) -> None:
        with pytest.raises(InvalidAmountError):
            converter.from_btc("lots")

    @pytest.mark.parametrize("text", ["1SAT", "0.12345678BTC", "20999999.9769BTC", "0SAT"])
    def test_round_trip_is_idempotent(self, text: str) -> None:
        money = converter.parse(text)
        again = converter.from_btc(converter.to_rpc(money))
        assert again.msat == money.msat
        assert converter.from_btc(converter.to_rpc(again)).msat == money.msat
