"""Service — payment operations against the node wallet."""

from bitcoind_adapter.service.bitcoind_service import BitcoindService

__all__ = ["BitcoindService"]
