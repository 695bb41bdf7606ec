"""bitcoind-adapter — Bitcoin Core RPC and notification bridge."""

__version__ = "0.1.0"
