"""
Configuration

Configuration objects handed to ingesters. Values come from defaults,
explicit keyword arguments or ``GEOINDEX_*`` environment variables.
"""

import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from ..tiles.coordinates import DEFAULT_EXTENT

ENV_PREFIX = "GEOINDEX_"

_TRUE_VALUES = {'1', 'true', 'yes', 'on'}
_FALSE_VALUES = {'0', 'false', 'no', 'off'}


@dataclass
class IngestionConfig:
    """Settings for tile ingestion."""
    default_language: str = "en"
    default_extent: int = DEFAULT_EXTENT
    layers: List[str] = field(default_factory=list)  # empty means every layer
    max_workers: int = 4
    manage_transaction: bool = True

    def __post_init__(self):
        if self.default_extent <= 0:
            raise ValueError(f"default_extent must be positive, got {self.default_extent}")
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {self.max_workers}")


@dataclass
class MetricsConfig:
    enable_prometheus: bool = True
    namespace: str = "geoindex"


@dataclass
class Config:
    """Top-level configuration object."""
    environment: str = "development"
    log_level: str = "INFO"
    log_json: bool = True
    ingestion: IngestionConfig = field(default_factory=IngestionConfig)
    metrics: MetricsConfig = field(default_factory=MetricsConfig)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Config":
        """
        Build a configuration from ``GEOINDEX_*`` environment variables.

        Args:
            environ: Mapping to read from, defaults to ``os.environ``

        Returns:
            Config with unset variables left at their defaults

        Raises:
            ValueError: If a numeric or boolean variable cannot be parsed
        """
        env = os.environ if environ is None else environ

        def get(name: str, default: Optional[str] = None) -> Optional[str]:
            return env.get(ENV_PREFIX + name, default)

        ingestion = IngestionConfig(
            default_language=get("LANGUAGE", "en"),
            default_extent=_parse_int("EXTENT", get("EXTENT"), DEFAULT_EXTENT),
            layers=[name.strip() for name in (get("LAYERS") or "").split(",") if name.strip()],
            max_workers=_parse_int("MAX_WORKERS", get("MAX_WORKERS"), 4),
            manage_transaction=_parse_bool("MANAGE_TRANSACTION", get("MANAGE_TRANSACTION"), True),
        )

        metrics = MetricsConfig(
            enable_prometheus=_parse_bool("PROMETHEUS", get("PROMETHEUS"), True),
            namespace=get("METRICS_NAMESPACE", "geoindex"),
        )

        return cls(
            environment=get("ENV", "development"),
            log_level=get("LOG_LEVEL", "INFO").upper(),
            log_json=_parse_bool("LOG_JSON", get("LOG_JSON"), True),
            ingestion=ingestion,
            metrics=metrics,
        )


def _parse_int(name: str, value: Optional[str], default: int) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{ENV_PREFIX}{name} must be an integer, got {value!r}") from None


def _parse_bool(name: str, value: Optional[str], default: bool) -> bool:
    if value is None or value == "":
        return default
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"{ENV_PREFIX}{name} must be a boolean, got {value!r}")
