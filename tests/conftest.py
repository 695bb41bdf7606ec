"""Shared test fixtures for the bitcoind-adapter test suite."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import httpx
import pytest

from bitcoind_adapter.config.settings import AdapterConfig, RpcConfig
from bitcoind_adapter.rpc.gateway import BitcoindRpcGateway

if TYPE_CHECKING:
    from collections.abc import AsyncIterator


class FakeNode:
    """Scripted bitcoind JSON-RPC endpoint for ``httpx.MockTransport``.

    Results are registered as raw JSON text so tests control exactly how
    numbers are serialised, the way the real node does it.
    """

    def __init__(self) -> None:
        self.results: dict[str, str] = {}
        self.errors: dict[str, tuple[int, str]] = {}
        self.calls: list[tuple[str, list[Any]]] = []

    def result(self, method: str, raw_json: str) -> None:
        self.results[method] = raw_json

    def error(self, method: str, code: int, message: str) -> None:
        self.errors[method] = (code, message)

    @property
    def methods(self) -> list[str]:
        return [method for method, _ in self.calls]

    def params(self, method: str) -> list[Any]:
        for name, params in self.calls:
            if name == method:
                return params
        msg = f"{method} was not called"
        raise AssertionError(msg)

    def handler(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        method, params, req_id = payload["method"], payload["params"], payload["id"]
        self.calls.append((method, params))

        if method in self.errors:
            code, message = self.errors[method]
            body = json.dumps(
                {"result": None, "error": {"code": code, "message": message}, "id": req_id},
                separators=(",", ":"),
            )
            return httpx.Response(500, text=body)

        if method not in self.results:
            body = json.dumps(
                {"result": None, "error": {"code": -32601, "message": "Method not found"},
                 "id": req_id},
                separators=(",", ":"),
            )
            return httpx.Response(404, text=body)

        body = f'{{"result":{self.results[method]},"error":null,"id":{req_id}}}'
        return httpx.Response(200, text=body)


@pytest.fixture
def adapter_config() -> AdapterConfig:
    """Provide a test AdapterConfig with safe defaults."""
    return AdapterConfig(rpc=RpcConfig(url="http://node.test:8332", user="rpc", password="pw"))


@pytest.fixture
def fake_node() -> FakeNode:
    return FakeNode()


@pytest.fixture
async def rpc_gateway(adapter_config, fake_node) -> AsyncIterator[BitcoindRpcGateway]:
    """A gateway whose HTTP client talks to ``fake_node``."""
    gateway = BitcoindRpcGateway(adapter_config.rpc)
    gateway._client = httpx.AsyncClient(
        transport=httpx.MockTransport(fake_node.handler), base_url="http://node.test:8332"
    )
    yield gateway
    await gateway.close()
