"""Bitcoin node JSON-RPC gateway.

Issues single RPC commands over HTTP and normalises the node's numeric
encoding before the body is parsed. The node serialises amounts as bare
JSON numbers (``"amount":0.00000001``); a regular JSON decoder would turn
them into binary floats. Every bare number that follows an object key is
therefore rewritten to a quoted string first, and any remaining number
(e.g. inside arrays) is parsed as ``Decimal``.
"""

from __future__ import annotations

import itertools
import json
import logging
import re
from decimal import Decimal
from typing import TYPE_CHECKING, Any

import httpx

from bitcoind_adapter.errors.rpc_errors import RpcError, RpcTransportError

if TYPE_CHECKING:
    from bitcoind_adapter.config.settings import RpcConfig
    from bitcoind_adapter.metrics.collector import AdapterMetrics

logger = logging.getLogger(__name__)

# "key":<number> followed by , } or ]
_BARE_NUMBER_RE = re.compile(
    r'"([\w-]+?)"(\s*):(\s*)(-?\d+(?:\.\d+)?(?:[eE][-+]?\d+)?)(\s*[,}\]])'
)


def quote_bare_numbers(body: str) -> str:
    """Rewrite ``"key":123.45`` to ``"key":"123.45"`` without parsing numbers."""
    return _BARE_NUMBER_RE.sub(r'"\1"\2:\3"\4"\5', body)


def decode_response(body: str) -> dict[str, Any]:
    """Decode a raw node response body with amounts kept exact.

    Raises:
        ValueError: If the body is not a JSON object.
    """
    data = json.loads(quote_bare_numbers(body), parse_float=Decimal)
    if not isinstance(data, dict):
        msg = "RPC response is not a JSON object"
        raise ValueError(msg)
    return data


class BitcoindRpcGateway:
    """Async JSON-RPC client for a single Bitcoin node.

    Usage::

        rpc = BitcoindRpcGateway(config.rpc)
        await rpc.connect()
        try:
            address = await rpc.call("getnewaddress", ["label", "legacy"])
        finally:
            await rpc.close()
    """

    def __init__(self, config: RpcConfig, *, metrics: AdapterMetrics | None = None) -> None:
        """Initialize the gateway.

        Args:
            config: RPC connection settings (url, credentials, wallet, timeout).
            metrics: Optional metrics sink for call durations and errors.
        """
        self._config = config
        self._metrics = metrics
        self._client: httpx.AsyncClient | None = None
        self._ids = itertools.count(1)

    async def connect(self) -> None:
        """Create the underlying HTTP client."""
        auth = None
        if self._config.user:
            auth = httpx.BasicAuth(self._config.user, self._config.password)

        self._client = httpx.AsyncClient(
            base_url=self._config.url.rstrip("/"),
            auth=auth,
            headers={"Content-Type": "application/json"},
            timeout=self._config.timeout,
        )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def is_connected(self) -> bool:
        """Check if the HTTP client is active."""
        return self._client is not None

    @property
    def path(self) -> str:
        """Request path; wallet-scoped when a wallet name is configured."""
        if self._config.wallet:
            return f"/wallet/{self._config.wallet}"
        return "/"

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def call(self, command: str, params: list[Any] | None = None) -> Any:
        """Execute one RPC command and return its ``result``.

        Args:
            command: RPC method name, e.g. ``"getblock"``.
            params: Positional parameters.

        Returns:
            The ``result`` member of the response, with every keyed number
            converted to a string.

        Raises:
            RpcError: The node reported an error (top-level ``error`` or a
                non-empty ``result.errors`` array).
            RpcTransportError: The request failed or the body was unreadable.
        """
        client = self._ensure_connected(command)
        payload = {
            "jsonrpc": "1.0",
            "id": next(self._ids),
            "method": command,
            "params": params or [],
        }

        if self._metrics is not None:
            with self._metrics.track_rpc(command):
                response = await self._post(client, command, payload)
        else:
            response = await self._post(client, command, payload)

        try:
            data = decode_response(response.text)
        except ValueError as exc:
            raise RpcTransportError(
                f"Bitcoind '{command}' returned an unreadable response "
                f"(HTTP {response.status_code})",
                command=command,
            ) from exc

        error = data.get("error")
        if error:
            self._raise_rpc_error(command, error)

        result = data.get("result")
        if isinstance(result, dict) and result.get("errors"):
            self._raise_rpc_error(command, {"code": 0, "message": _join_errors(result["errors"])})

        return result

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _ensure_connected(self, command: str) -> httpx.AsyncClient:
        """Return the HTTP client, raising if not connected."""
        if self._client is None:
            msg = "RPC gateway not connected. Call connect() first."
            raise RpcTransportError(msg, command=command)
        return self._client

    async def _post(
        self, client: httpx.AsyncClient, command: str, payload: dict[str, Any]
    ) -> httpx.Response:
        try:
            return await client.post(self.path, json=payload)
        except httpx.HTTPError as exc:
            logger.error("Bitcoind '%s' request failed: %s", command, exc)
            msg = f"Bitcoind '{command}' request failed: {exc}"
            raise RpcTransportError(msg, command=command) from exc

    def _raise_rpc_error(self, command: str, error: Any) -> None:
        if isinstance(error, dict):
            code = _to_int(error.get("code"))
            message = str(error.get("message", ""))
        else:
            code = 0
            message = str(error)

        logger.error("Bitcoind '%s' error %d: %s", command, code, message)
        if self._metrics is not None:
            self._metrics.record_rpc_error(command, code)
        raise RpcError(
            message or f"Bitcoind '{command}' request failed.", rpc_code=code, command=command
        )


def _to_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _join_errors(errors: Any) -> str:
    if not isinstance(errors, list):
        return str(errors)
    parts = []
    for entry in errors:
        if isinstance(entry, dict):
            parts.append(str(entry.get("error", entry)))
        else:
            parts.append(str(entry))
    return "; ".join(parts)
