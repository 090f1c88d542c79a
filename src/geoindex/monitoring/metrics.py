"""
Metrics Collection

Counters and histograms for the ingestion pipeline, exported through
Prometheus. In-process totals are kept alongside so that callers and tests
can read values back without scraping.
"""

import json
import threading
import time
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple, Union

import structlog
from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest


@dataclass
class MetricDefinition:
    """Declares a metric exposed by the pipeline."""
    name: str
    metric_type: str  # counter, histogram
    description: str
    labels: List[str] = field(default_factory=list)


METRIC_DEFINITIONS = [
    MetricDefinition('tiles_processed', 'counter', 'Tiles decoded and schemified'),
    MetricDefinition('tile_failures', 'counter', 'Tiles that failed to ingest', ['error_type']),
    MetricDefinition('features_seen', 'counter', 'Tile features inspected'),
    MetricDefinition('features_dropped', 'counter', 'Tile features that were not POIs'),
    MetricDefinition('pois_submitted', 'counter', 'POI documents submitted to the index writer'),
    MetricDefinition('ingestion_success', 'counter', 'Successful ingestion runs'),
    MetricDefinition('ingestion_failure', 'counter', 'Failed ingestion runs'),
    MetricDefinition('tile_processing_duration', 'histogram', 'Seconds spent processing one tile'),
    MetricDefinition('ingestion_duration', 'histogram', 'Seconds spent in one ingestion run'),
]


class MetricsCollector:
    """
    Metrics collector for the ingestion pipeline.

    Unknown metric names are tracked in-process only; declared metrics are
    also exported to the Prometheus registry when enabled.
    """

    def __init__(
        self,
        enable_prometheus: bool = True,
        namespace: str = "geoindex",
        definitions: Optional[List[MetricDefinition]] = None
    ):
        """
        Initialize the metrics collector.

        Args:
            enable_prometheus: Register metrics with a Prometheus registry
            namespace: Prefix for exported metric names
            definitions: Metric declarations, defaults to METRIC_DEFINITIONS
        """
        self.enable_prometheus = enable_prometheus
        self.namespace = namespace

        self.logger = structlog.get_logger(collector_type="MetricsCollector")
        self.lock = threading.RLock()

        self.counters: Dict[Tuple[str, Tuple[Tuple[str, str], ...]], float] = defaultdict(float)
        self.histograms: Dict[str, List[float]] = defaultdict(list)
        self.start_time = time.time()

        self.prometheus_registry = CollectorRegistry()
        self.prometheus_counters: Dict[str, Counter] = {}
        self.prometheus_histograms: Dict[str, Histogram] = {}

        if self.enable_prometheus:
            for definition in definitions or METRIC_DEFINITIONS:
                self._create_prometheus_metric(definition)

    def _create_prometheus_metric(self, definition: MetricDefinition) -> None:
        if definition.metric_type == 'counter':
            self.prometheus_counters[definition.name] = Counter(
                definition.name, definition.description, definition.labels,
                namespace=self.namespace,
                registry=self.prometheus_registry
            )
        elif definition.metric_type == 'histogram':
            self.prometheus_histograms[definition.name] = Histogram(
                definition.name, definition.description, definition.labels,
                namespace=self.namespace,
                registry=self.prometheus_registry
            )
        else:
            raise ValueError(f"Unsupported metric type: {definition.metric_type}")

    def increment_counter(
        self,
        name: str,
        value: Union[int, float] = 1,
        labels: Optional[Dict[str, str]] = None
    ) -> None:
        """
        Increment a counter metric.

        Args:
            name: Metric name
            value: Value to increment by
            labels: Metric labels
        """
        labels = labels or {}

        with self.lock:
            self.counters[(name, tuple(sorted(labels.items())))] += value

            counter = self.prometheus_counters.get(name)
            if counter is not None:
                if labels:
                    counter.labels(**labels).inc(value)
                else:
                    counter.inc(value)

    def record_histogram(
        self,
        name: str,
        value: Union[int, float],
        labels: Optional[Dict[str, str]] = None
    ) -> None:
        """Record an observation for a histogram metric."""
        labels = labels or {}

        with self.lock:
            self.histograms[name].append(value)

            histogram = self.prometheus_histograms.get(name)
            if histogram is not None:
                if labels:
                    histogram.labels(**labels).observe(value)
                else:
                    histogram.observe(value)

    def get_counter(self, name: str, labels: Optional[Dict[str, str]] = None) -> float:
        """
        Current value of a counter.

        Without labels, the value summed over every label set is returned.
        """
        with self.lock:
            if labels is not None:
                return self.counters.get((name, tuple(sorted(labels.items()))), 0)
            return sum(value for (metric, _), value in self.counters.items() if metric == name)

    def get_metrics_summary(self) -> Dict[str, Any]:
        """Totals for every counter and basic statistics per histogram."""
        with self.lock:
            counters: Dict[str, float] = defaultdict(float)
            for (name, _), value in self.counters.items():
                counters[name] += value

            histograms = {}
            for name, values in self.histograms.items():
                if values:
                    histograms[name] = {
                        'count': len(values),
                        'min': min(values),
                        'max': max(values),
                        'avg': sum(values) / len(values),
                    }

        return {
            'uptime_seconds': time.time() - self.start_time,
            'counters': dict(counters),
            'histograms': histograms,
        }

    def export_metrics(self, format: str = "json") -> str:
        """Export metrics as JSON or in the Prometheus text format."""
        if format.lower() == "json":
            summary = self.get_metrics_summary()
            summary['export_timestamp'] = datetime.now(timezone.utc).isoformat()
            return json.dumps(summary, indent=2)
        elif format.lower() == "prometheus":
            return generate_latest(self.prometheus_registry).decode('utf-8')

        raise ValueError(f"Unsupported export format: {format}")
