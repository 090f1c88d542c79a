"""
Monitoring Module

Pipeline metrics exported through Prometheus.
"""

from .metrics import METRIC_DEFINITIONS, MetricDefinition, MetricsCollector

__all__ = [
    "METRIC_DEFINITIONS",
    "MetricDefinition",
    "MetricsCollector",
]
