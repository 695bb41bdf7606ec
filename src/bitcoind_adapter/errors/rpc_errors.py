"""Node RPC errors and the node error codes the adapter distinguishes."""

from __future__ import annotations

from bitcoind_adapter.errors.adapter_errors import AdapterError

# Bitcoin Core ``RPCErrorCode`` values with special handling
RPC_WALLET_INSUFFICIENT_FUNDS = -4
RPC_INVALID_ADDRESS_OR_KEY = -5


class RpcError(AdapterError):
    """Error reported by the node for a single RPC command.

    Attributes:
        rpc_code: Integer error code from the node's ``error.code`` field.
        command: RPC command that failed.
    """

    def __init__(self, message: str, *, rpc_code: int = 0, command: str = "") -> None:
        super().__init__(message, code="rpc-error")
        self.rpc_code = rpc_code
        self.command = command

    @property
    def is_insufficient_funds(self) -> bool:
        return self.rpc_code == RPC_WALLET_INSUFFICIENT_FUNDS

    @property
    def is_unrecognised_id(self) -> bool:
        return self.rpc_code == RPC_INVALID_ADDRESS_OR_KEY


class RpcTransportError(RpcError):
    """The node could not be reached or returned an unreadable body."""

    def __init__(self, message: str, *, command: str = "") -> None:
        super().__init__(message, rpc_code=0, command=command)
        self.code = "rpc-transport-error"
