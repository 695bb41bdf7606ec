"""Money value object and conversions between BTC, satoshi and millisatoshi.

All amounts are held as an integer count of millisatoshi (``MSAT``), the
internal minor unit. ``Decimal`` is used only while parsing and formatting;
floats never enter the conversion path.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from decimal import ROUND_DOWN, Decimal, InvalidOperation
from functools import total_ordering

from bitcoind_adapter.errors.adapter_errors import InvalidAmountError


class Currency(enum.StrEnum):
    """Bitcoin denominations understood by the adapter."""

    BTC = "BTC"
    SAT = "SAT"
    MSAT = "MSAT"

    @property
    def msat_factor(self) -> int:
        """Number of millisatoshi in one unit of this currency."""
        return _MSAT_FACTORS[self]

    @property
    def decimals(self) -> int:
        """Decimal places used when formatting this currency."""
        return _DECIMALS[self]


_MSAT_FACTORS = {
    Currency.BTC: 100_000_000_000,
    Currency.SAT: 1_000,
    Currency.MSAT: 1,
}

_DECIMALS = {
    Currency.BTC: 8,
    Currency.SAT: 0,
    Currency.MSAT: 0,
}

_MONEY_RE = re.compile(r"^\s*(-?\d+(?:\.\d+)?)\s*([A-Za-z]+)\s*$")


@total_ordering
@dataclass(frozen=True, eq=False)
class Money:
    """An exact Bitcoin amount.

    Attributes:
        msat: Amount in millisatoshi.
        currency: Denomination used for display and formatting.
    """

    msat: int
    currency: Currency = Currency.MSAT

    @property
    def amount(self) -> Decimal:
        """Amount expressed in ``currency`` units."""
        return Decimal(self.msat) / Decimal(self.currency.msat_factor)

    @property
    def satoshis(self) -> int:
        """Whole satoshis (sub-satoshi remainder truncated)."""
        return self.msat // Currency.SAT.msat_factor

    def is_zero(self) -> bool:
        return self.msat == 0

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        return self.msat == other.msat

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        return self.msat < other.msat

    def __hash__(self) -> int:
        return hash(self.msat)

    def __add__(self, other: Money) -> Money:
        return Money(self.msat + other.msat, self.currency)

    def __str__(self) -> str:
        return f"{format(self.amount.normalize(), 'f')}{self.currency}"


class CurrencyConverter:
    """Parses, converts and formats ``Money`` values.

    Usage::

        converter = CurrencyConverter()
        fee = converter.from_btc("-0.00001410")   # 1410 SAT, sign stripped
        converter.to_rpc(fee)                     # "0.00001410"
    """

    def parse(self, value: str) -> Money:
        """Parse an ``<amount><currency>`` string such as ``"0.001BTC"``.

        Raises:
            InvalidAmountError: On malformed input, unknown currency or an
                amount that is not a whole number of millisatoshi.
        """
        match = _MONEY_RE.match(value)
        if match is None:
            msg = f"Invalid money string: {value!r}"
            raise InvalidAmountError(msg)
        number, code = match.groups()
        try:
            currency = Currency(code.upper())
        except ValueError:
            msg = f"Unsupported currency: {code!r}"
            raise InvalidAmountError(msg) from None
        return Money(_to_msat(Decimal(number), currency), currency)

    def convert(self, money: Money, currency: Currency = Currency.MSAT) -> Money:
        """Re-denominate *money*; the underlying amount never changes."""
        return Money(money.msat, currency)

    def format(self, money: Money) -> str:
        """Format the amount in its own currency with fixed decimals.

        BTC is always rendered with 8 decimals (``"0.00100000"``); sub-unit
        remainders are truncated.
        """
        quantum = Decimal(1).scaleb(-money.currency.decimals)
        return format(money.amount.quantize(quantum, rounding=ROUND_DOWN), "f")

    def to_rpc(self, money: Money) -> str:
        """Format as the node's BTC amount string."""
        return self.format(self.convert(money, Currency.BTC))

    def from_btc(self, value: str | Decimal | int) -> Money:
        """Convert a node-reported BTC amount into MSAT.

        The node reports fees and sent amounts as negative numbers; the sign
        is stripped.
        """
        text = str(value).strip().lstrip("-")
        try:
            number = Decimal(text)
        except InvalidOperation:
            msg = f"Invalid BTC amount from node: {value!r}"
            raise InvalidAmountError(msg) from None
        return Money(_to_msat(number, Currency.BTC), Currency.MSAT)


def _to_msat(number: Decimal, currency: Currency) -> int:
    if not number.is_finite():
        msg = f"Invalid amount: {number}"
        raise InvalidAmountError(msg)
    scaled = number * currency.msat_factor
    if scaled != scaled.to_integral_value():
        msg = f"{number}{currency} is not a whole number of millisatoshi"
        raise InvalidAmountError(msg)
    return int(scaled)
