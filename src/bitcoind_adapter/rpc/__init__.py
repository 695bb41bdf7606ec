"""RPC — JSON-RPC gateway to the Bitcoin node."""

from bitcoind_adapter.rpc.gateway import BitcoindRpcGateway, decode_response, quote_bare_numbers

__all__ = ["BitcoindRpcGateway", "decode_response", "quote_bare_numbers"]
