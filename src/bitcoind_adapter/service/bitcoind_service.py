"""Bitcoind payment service — request, send, fee estimation and lookups.

Orchestrates node RPC commands for payment-service operations and maps
node errors into the payment error taxonomy:

- insufficient wallet funds (-4) or an unreachable node → ``PaymentServiceUnavailable``
- unrecognised transaction id (-5) in ``get_transaction`` → ``None``
- any other node error or an incomplete signature → ``PaymentServiceFailed``
- amount below the configured minimum / operation disabled → ``PaymentServiceIneligible``

``send`` runs create → fund → sign → broadcast; ``estimate_fee`` stops
after funding.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from bitcoind_adapter.domain.models import (
    Address,
    BitcoinBlock,
    BitcoinTransaction,
    Hash,
    Output,
    OutputList,
)
from bitcoind_adapter.errors.payment_errors import (
    PaymentServiceFailed,
    PaymentServiceIneligible,
    PaymentServiceUnavailable,
)
from bitcoind_adapter.errors.rpc_errors import (
    RPC_INVALID_ADDRESS_OR_KEY,
    RpcError,
    RpcTransportError,
)
from bitcoind_adapter.money.currency import Currency, CurrencyConverter, Money

if TYPE_CHECKING:
    from bitcoind_adapter.config.settings import AdapterConfig
    from bitcoind_adapter.rpc.gateway import BitcoindRpcGateway

logger = logging.getLogger(__name__)


class BitcoindService:
    """Payment service backed by a Bitcoin Core wallet.

    Usage::

        rpc = BitcoindRpcGateway(config.rpc)
        await rpc.connect()
        service = BitcoindService(config, rpc)
        tx = await service.request(BitcoinTransaction(amount=amount, label="order-1"))
    """

    def __init__(
        self,
        config: AdapterConfig,
        gateway: BitcoindRpcGateway,
        *,
        converter: CurrencyConverter | None = None,
    ) -> None:
        self._config = config
        self._gateway = gateway
        self._converter = converter or CurrencyConverter()

    # ------------------------------------------------------------------
    # Eligibility
    # ------------------------------------------------------------------

    def can_request(self, amount: Money) -> bool:
        """Whether a payment request for *amount* is allowed. No RPC."""
        settings = self._config.request
        return settings.enabled and amount >= self._converter.parse(settings.minimum)

    def can_send(self, amount: Money) -> bool:
        """Whether sending *amount* is allowed. No RPC."""
        settings = self._config.send
        return settings.enabled and amount >= self._converter.parse(settings.minimum)

    # ------------------------------------------------------------------
    # Payment operations
    # ------------------------------------------------------------------

    async def request(self, transaction: BitcoinTransaction) -> BitcoinTransaction:
        """Assign a fresh receiving address to *transaction*.

        Raises:
            PaymentServiceIneligible: Requests disabled or amount below minimum.
        """
        if not self.can_request(transaction.amount):
            msg = "Bitcoind service cannot request given amount."
            raise PaymentServiceIneligible(msg)

        settings = self._config.request
        address = await self._call(
            "getnewaddress", [transaction.label, settings.address_type.value]
        )
        return transaction.with_values(
            outputs=OutputList((Output(Address(str(address)), transaction.amount),)),
            conf_target=settings.conf_target,
        )

    async def send(self, transaction: BitcoinTransaction) -> BitcoinTransaction:
        """Fund, sign and broadcast *transaction* from the node wallet.

        Returns:
            The transaction with its broadcast ``id`` and ``fee_settled``.

        Raises:
            PaymentServiceIneligible: Sending disabled, amount below minimum or
                an output that is not a whole number of satoshi.
            PaymentServiceUnavailable: Insufficient wallet funds.
            PaymentServiceFailed: Node error or incomplete signature.
        """
        if not self.can_send(transaction.amount):
            msg = "Bitcoind service cannot send given amount."
            raise PaymentServiceIneligible(msg)

        funded = await self._create_funded_transaction(transaction)
        signed = await self._call("signrawtransactionwithwallet", [funded["hex"]])
        if signed.get("complete") is not True:
            raise PaymentServiceFailed(
                "Incomplete transaction.", command="signrawtransactionwithwallet"
            )

        # maxfeerate 0 disables the node's absurd-fee check
        txid = await self._call("sendrawtransaction", [signed["hex"], 0])
        logger.info("Broadcast transaction %s", txid)

        return transaction.with_values(
            id=Hash(str(txid)),
            fee_settled=self._converter.from_btc(funded["fee"]),
        )

    async def estimate_fee(self, transaction: BitcoinTransaction) -> Money:
        """Fee the node would apply to *transaction*, in MSAT."""
        funded = await self._create_funded_transaction(transaction)
        return self._converter.from_btc(funded["fee"])

    async def validate_address(self, address: Address) -> bool:
        result = await self._call("validateaddress", [str(address)])
        return result.get("isvalid") is True

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    async def get_block(self, block_id: Hash) -> BitcoinBlock:
        result = await self._call("getblock", [str(block_id)])
        return BitcoinBlock(
            hash=Hash(result["hash"]),
            merkle_root=Hash(result["merkleroot"]),
            confirmations=int(result["confirmations"]),
            transactions=tuple(Hash(str(txid)) for txid in result.get("tx", [])),
            height=int(result["height"]),
            timestamp=datetime.fromtimestamp(int(result["time"]), tz=UTC),
        )

    async def get_transaction(self, txid: Hash) -> BitcoinTransaction | None:
        """Look up a wallet transaction.

        Returns:
            The transaction, or ``None`` if the node does not know *txid*.
        """
        try:
            result = await self._call("gettransaction", [str(txid)])
        except PaymentServiceFailed as exc:
            if exc.rpc_code == RPC_INVALID_ADDRESS_OR_KEY:
                return None
            raise

        outputs = self._make_output_list(result.get("details", []))
        fee = result.get("fee")
        return BitcoinTransaction(
            id=Hash(result["txid"]),
            amount=outputs.total,
            outputs=outputs,
            confirmations=int(result.get("confirmations", 0)),
            fee_settled=self._converter.from_btc(fee) if fee is not None else None,
            rbf=result.get("bip125-replaceable") == "yes",
        )

    async def get_confirmed_balance(self, address: Address, confirmations: int) -> Money:
        """Total received by *address* with at least *confirmations*."""
        if confirmations < 0:
            msg = "confirmations must be a natural number"
            raise ValueError(msg)
        result = await self._call(
            "listreceivedbyaddress", [confirmations, False, False, str(address)]
        )
        amount = result[0].get("amount", "0") if result else "0"
        return self._converter.from_btc(amount)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _call(self, command: str, params: list[Any]) -> Any:
        """Run *command* through the gateway, mapping errors to the taxonomy."""
        try:
            return await self._gateway.call(command, params)
        except RpcTransportError as exc:
            raise PaymentServiceUnavailable(exc.message, command=command) from exc
        except RpcError as exc:
            if exc.is_insufficient_funds:
                raise PaymentServiceUnavailable(
                    exc.message, command=command, rpc_code=exc.rpc_code
                ) from exc
            raise PaymentServiceFailed(
                f"Bitcoind '{command}' error.", command=command, rpc_code=exc.rpc_code
            ) from exc

    async def _create_funded_transaction(self, transaction: BitcoinTransaction) -> dict[str, Any]:
        # TODO: coin control once inputs can be reserved across concurrent sends
        raw = await self._call(
            "createrawtransaction",
            [[], self._outputs_for_rpc(transaction.outputs), 0, self._config.send.rbf],
        )

        options: dict[str, Any] = {}
        if transaction.fee_rate is not None:
            options["feeRate"] = self._converter.format(
                self._converter.convert(transaction.fee_rate, Currency.BTC)
            )
        options["change_type"] = self._config.send.change_type.value

        return await self._call("fundrawtransaction", [raw, options])

    def _outputs_for_rpc(self, outputs: OutputList) -> list[dict[str, str]]:
        rpc_outputs = []
        for output in outputs:
            # the node takes 8 BTC decimals; formatting would drop the millisatoshi
            if output.value.msat % Currency.SAT.msat_factor:
                msg = (
                    f"Output to {output.address} is not a whole number of satoshi: "
                    f"{output.value}"
                )
                raise PaymentServiceIneligible(msg)
            rpc_outputs.append({str(output.address): self._converter.to_rpc(output.value)})
        return rpc_outputs

    def _make_output_list(self, details: list[dict[str, Any]]) -> OutputList:
        return OutputList(
            tuple(
                Output(Address(entry["address"]), self._converter.from_btc(entry["amount"]))
                for entry in details
                if entry.get("category") == "send" and entry.get("address")
            )
        )
