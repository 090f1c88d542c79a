"""Configuration and logging helpers."""

from .config import Config, IngestionConfig, MetricsConfig
from .logging import configure_logging

__all__ = [
    "Config",
    "IngestionConfig",
    "MetricsConfig",
    "configure_logging",
]
