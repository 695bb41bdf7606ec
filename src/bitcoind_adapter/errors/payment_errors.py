"""Payment service error taxonomy surfaced to callers of ``BitcoindService``.

- ``PaymentServiceUnavailable``: operationally blocked (insufficient wallet
  funds, node unreachable). Callers may retry later.
- ``PaymentServiceFailed``: terminal for the current operation.
- ``PaymentServiceIneligible``: rejected by configuration before any RPC call.
"""

from __future__ import annotations

from bitcoind_adapter.errors.adapter_errors import AdapterError


class PaymentServiceError(AdapterError):
    """Base class for payment service failures.

    Attributes:
        command: RPC command that triggered the failure, if any.
        rpc_code: Node error code, if the node reported one.
    """

    def __init__(
        self,
        message: str,
        *,
        command: str = "",
        rpc_code: int | None = None,
        code: str = "payment-service-error",
    ) -> None:
        super().__init__(message, code=code)
        self.command = command
        self.rpc_code = rpc_code


class PaymentServiceUnavailable(PaymentServiceError):
    """The node cannot serve the request right now."""

    def __init__(self, message: str, *, command: str = "", rpc_code: int | None = None) -> None:
        super().__init__(
            message, command=command, rpc_code=rpc_code, code="payment-service-unavailable"
        )


class PaymentServiceFailed(PaymentServiceError):
    """The operation failed and will not succeed if repeated as-is."""

    def __init__(self, message: str, *, command: str = "", rpc_code: int | None = None) -> None:
        super().__init__(
            message, command=command, rpc_code=rpc_code, code="payment-service-failed"
        )


class PaymentServiceIneligible(PaymentServiceError):
    """The amount or operation is not allowed by configuration."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="payment-service-ineligible")
