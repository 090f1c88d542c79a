"""
Base Ingester

Common workflow for ingestion operations: extract, validate, transform and
load, with structured logging, metrics and run statistics.
"""

import time
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import structlog

from ..errors import GeoIndexError
from ..monitoring.metrics import MetricsCollector
from ..utils.config import Config


class BaseIngester(ABC):
    """
    Abstract base class for ingestion operations.

    Subclasses supply the four workflow steps; ``ingest`` runs them in order
    and reports the outcome as a result dictionary.
    """

    def __init__(
        self,
        config: Config,
        metrics_collector: Optional[MetricsCollector] = None
    ):
        """
        Initialize the base ingester.

        Args:
            config: Configuration object
            metrics_collector: Optional metrics collector for monitoring
        """
        self.config = config
        self.metrics = metrics_collector or MetricsCollector(
            enable_prometheus=config.metrics.enable_prometheus,
            namespace=config.metrics.namespace
        )

        self.logger = structlog.get_logger(
            ingester_type=self.__class__.__name__,
            config_env=config.environment
        )

        self.reset_stats()

    def reset_stats(self) -> None:
        self.stats = {
            'tiles_processed': 0,
            'tiles_failed': 0,
            'features_seen': 0,
            'features_dropped': 0,
            'pois_submitted': 0,
            'start_time': None,
            'end_time': None,
            'errors': []
        }

    @abstractmethod
    def extract(self, source: Any) -> Any:
        """
        Extract raw data from the source.

        Args:
            source: Data source specification

        Returns:
            Extracted data in appropriate format
        """

    @abstractmethod
    def validate(self, data: Any) -> bool:
        """Check the extracted data before it is transformed."""

    @abstractmethod
    def transform(self, data: Any, source: Any) -> Any:
        """
        Transform extracted data into index documents.

        Args:
            data: Raw extracted data
            source: The source the data came from

        Returns:
            Documents ready to load
        """

    @abstractmethod
    def load(self, data: Any) -> int:
        """Hand documents to the destination and return how many were loaded."""

    def ingest(self, source: Any, validate_data: bool = True) -> Dict[str, Any]:
        """
        Complete ingestion workflow: extract, validate, transform, and load.

        Ingestion errors are reported in the result rather than raised; the
        stats record the error message.

        Args:
            source: Data source specification
            validate_data: Whether to perform data validation

        Returns:
            Dictionary containing ingestion results and statistics
        """
        self.stats['start_time'] = time.time()

        try:
            self.logger.info("Starting data ingestion", source=str(source))

            data = self.extract(source)

            if validate_data and not self.validate(data):
                raise GeoIndexError(f"Data validation failed for {source}")

            documents = self.transform(data, source)
            loaded = self.load(documents)

            self.stats['end_time'] = time.time()
            duration = self.stats['end_time'] - self.stats['start_time']

            self.logger.info(
                "Data ingestion completed successfully",
                documents=loaded,
                duration_seconds=duration
            )

            self.metrics.increment_counter('ingestion_success')
            self.metrics.record_histogram('ingestion_duration', duration)

            return {
                'success': True,
                'stats': self.stats,
                'message': 'Ingestion completed successfully'
            }

        except (GeoIndexError, OSError, ValueError) as e:
            self.stats['end_time'] = time.time()
            self.stats['errors'].append(str(e))

            self.logger.error(
                "Data ingestion failed",
                error=str(e),
                error_type=type(e).__name__,
                duration_seconds=self.stats['end_time'] - self.stats['start_time']
            )

            self.metrics.increment_counter('ingestion_failure')

            return {
                'success': False,
                'stats': self.stats,
                'error_type': type(e).__name__,
                'message': f'Ingestion failed: {e}'
            }
