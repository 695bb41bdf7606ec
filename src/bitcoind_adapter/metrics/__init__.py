"""Metrics — Prometheus metrics collection and exposure."""

from __future__ import annotations

from bitcoind_adapter.metrics.collector import AdapterMetrics, MetricsCollector

__all__ = ["AdapterMetrics", "MetricsCollector"]
