"""Command-line entry point for the bitcoind adapter.

    # Consume node notifications until SIGINT/SIGTERM
    bitcoind-adapter worker [--queue NAME] [--config PATH]

    # One-off node queries through the payment service
    bitcoind-adapter validate <address> [--config PATH]
    bitcoind-adapter balance <address> [confirmations] [--config PATH]
    bitcoind-adapter block <hash> [--config PATH]
    bitcoind-adapter tx <txid> [--config PATH]
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import signal
import sys
from typing import TYPE_CHECKING

from prometheus_client import start_http_server

from bitcoind_adapter.bus.message_bus import EVENTS_CHANNEL, MemoryMessageBus
from bitcoind_adapter.config.settings import AdapterConfig
from bitcoind_adapter.domain.models import Address, Hash
from bitcoind_adapter.errors.adapter_errors import AdapterError
from bitcoind_adapter.messaging.worker import BitcoindMessageWorker
from bitcoind_adapter.metrics.collector import AdapterMetrics
from bitcoind_adapter.money.currency import CurrencyConverter
from bitcoind_adapter.rpc.gateway import BitcoindRpcGateway
from bitcoind_adapter.service.bitcoind_service import BitcoindService

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from bitcoind_adapter.config.settings import LoggingConfig
    from bitcoind_adapter.domain.events import BitcoinMessage

logger = logging.getLogger(__name__)


def configure_logging(config: LoggingConfig) -> None:
    """Apply level and format to the root logger."""
    logging.basicConfig(level=config.level.upper(), format=config.format, force=True)


def load_config(args: list[str]) -> tuple[AdapterConfig, list[str]]:
    """Strip ``--config PATH`` from *args* and build the config."""
    rest: list[str] = []
    config_path = ""
    it = iter(args)
    for arg in it:
        if arg == "--config":
            config_path = next(it, "")
        else:
            rest.append(arg)
    config = AdapterConfig.from_yaml(config_path) if config_path else AdapterConfig()
    return config, rest


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


async def _log_event(message: BitcoinMessage) -> None:
    logger.info("Event %s", json.dumps(message.to_dict()))


async def run_worker(config: AdapterConfig, queue: str | None = None) -> None:
    """Run the message worker until a termination signal arrives."""
    metrics = AdapterMetrics() if config.metrics.enabled else None
    if metrics is not None:
        start_http_server(config.metrics.port, registry=metrics.registry)
        logger.info("Metrics exposed on :%d", config.metrics.port)

    bus = MemoryMessageBus()
    bus.subscribe(EVENTS_CHANNEL, _log_event)
    worker = BitcoindMessageWorker(config.broker, bus, metrics=metrics)

    loop = asyncio.get_running_loop()
    stop_tasks: list[asyncio.Task[None]] = []

    def _on_signal() -> None:
        worker.request_stop()
        stop_tasks.append(loop.create_task(worker.stop()))

    for sig in (signal.SIGINT, signal.SIGTERM):
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, _on_signal)

    try:
        await worker.connect()
        await worker.run(queue)
    finally:
        if stop_tasks:
            await asyncio.gather(*stop_tasks)
        await worker.close()


async def _with_service(
    config: AdapterConfig, action: Callable[[BitcoindService], Awaitable[object]]
) -> object:
    gateway = BitcoindRpcGateway(config.rpc)
    await gateway.connect()
    try:
        return await action(BitcoindService(config, gateway))
    finally:
        await gateway.close()


def _print(value: object) -> None:
    if hasattr(value, "to_dict"):
        value = value.to_dict()
    print(json.dumps(value, indent=2, default=str))


def _option(params: list[str], name: str) -> str | None:
    if name not in params:
        return None
    index = params.index(name) + 1
    return params[index] if index < len(params) else None


def _usage() -> None:
    print(__doc__)


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    config, args = load_config(sys.argv[1:] if argv is None else argv)
    if not args or args[0] in ("help", "-h", "--help"):
        _usage()
        sys.exit(0 if args else 1)

    configure_logging(config.logging)
    cmd, params = args[0].lower(), args[1:]

    try:
        if cmd == "worker":
            asyncio.run(run_worker(config, _option(params, "--queue")))
        elif cmd == "validate" and params:
            address = Address(params[0])
            _print(asyncio.run(_with_service(config, lambda s: s.validate_address(address))))
        elif cmd == "balance" and params:
            address = Address(params[0])
            confs = int(params[1]) if len(params) > 1 else 1
            balance = asyncio.run(
                _with_service(config, lambda s: s.get_confirmed_balance(address, confs))
            )
            _print(f"{CurrencyConverter().to_rpc(balance)} BTC")
        elif cmd == "block" and params:
            block_id = Hash(params[0])
            _print(asyncio.run(_with_service(config, lambda s: s.get_block(block_id))))
        elif cmd == "tx" and params:
            txid = Hash(params[0])
            _print(asyncio.run(_with_service(config, lambda s: s.get_transaction(txid))))
        else:
            print(f"Unknown command or missing argument: {' '.join(args)}")
            _usage()
            sys.exit(1)
    except (AdapterError, ValueError) as exc:
        logger.error("%s failed: %s", cmd, exc)
        sys.exit(1)


if __name__ == "__main__":
    main()
