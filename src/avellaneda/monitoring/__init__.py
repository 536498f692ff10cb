"""Monitoring for quoting sessions (Prometheus metrics)."""

from avellaneda.monitoring.metrics import MetricsCollector, get_metrics, init_metrics

__all__ = ["MetricsCollector", "get_metrics", "init_metrics"]
