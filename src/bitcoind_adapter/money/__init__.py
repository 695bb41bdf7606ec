"""Money — exact Bitcoin amounts and denomination conversion."""

from bitcoind_adapter.money.currency import Currency, CurrencyConverter, Money

__all__ = ["Currency", "CurrencyConverter", "Money"]
