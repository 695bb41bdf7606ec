"""Metrics collector — Prometheus counters and histograms.

- ``bitcoind_rpc_histogram{command}`` — RPC call duration
- ``bitcoind_rpc_errors_total{command,code}`` — node-reported RPC errors
- ``bitcoind_messages_total{routing_key,outcome}`` — broker messages by outcome
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import TYPE_CHECKING

from prometheus_client import CollectorRegistry, Counter, Histogram

if TYPE_CHECKING:
    from collections.abc import Iterator


_PREFIX = "bitcoind"

OUTCOME_PUBLISHED = "published"
OUTCOME_DROPPED = "dropped"
OUTCOME_REJECTED = "rejected"


class MetricsCollector:
    """Low-level Prometheus collector that owns the registry.

    Use :class:`AdapterMetrics` for the high-level tracking interface.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self._registry = registry or CollectorRegistry()

    @property
    def registry(self) -> CollectorRegistry:
        """Return the underlying Prometheus registry."""
        return self._registry

    def histogram(self, name: str, doc: str, labels: tuple[str, ...] = ()) -> Histogram:
        """Register and return a Histogram."""
        return Histogram(name, doc, labels, registry=self._registry)

    def counter(self, name: str, doc: str, labels: tuple[str, ...] = ()) -> Counter:
        """Register and return a Counter."""
        return Counter(name, doc, labels, registry=self._registry)


class AdapterMetrics:
    """High-level adapter metrics for RPC calls and message consumption."""

    def __init__(self, collector: MetricsCollector | None = None) -> None:
        self._collector = collector or MetricsCollector()

        self._rpc = self._collector.histogram(
            f"{_PREFIX}_rpc_histogram",
            "Duration of node RPC calls",
            ("command",),
        )
        self._rpc_errors = self._collector.counter(
            f"{_PREFIX}_rpc_errors",
            "Node-reported RPC errors",
            ("command", "code"),
        )
        self._messages = self._collector.counter(
            f"{_PREFIX}_messages",
            "Broker messages handled, by outcome",
            ("routing_key", "outcome"),
        )

    @property
    def registry(self) -> CollectorRegistry:
        """Return the underlying Prometheus registry."""
        return self._collector.registry

    @contextmanager
    def track_rpc(self, command: str) -> Iterator[None]:
        """Track the duration of a single RPC command."""
        start = time.monotonic()
        try:
            yield
        finally:
            self._rpc.labels(command=command).observe(time.monotonic() - start)

    def record_rpc_error(self, command: str, code: int) -> None:
        """Count a node-reported error for *command*."""
        self._rpc_errors.labels(command=command, code=str(code)).inc()

    def record_message(self, routing_key: str, outcome: str) -> None:
        """Count a handled broker message."""
        self._messages.labels(routing_key=routing_key, outcome=outcome).inc()
