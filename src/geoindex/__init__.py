"""
Geocoding Index Builder

Ingestion core of a geocoding search-index builder: converts points of
interest from vector tiles into normalized, S2-indexed, full-text searchable
documents and hands them to an index writer.
"""

__version__ = "1.0.0"

from . import data_ingestion
from . import indexing
from . import monitoring
from . import tiles
from . import utils
from .errors import (
    GeoIndexError,
    IndexWriterError,
    InvalidIngestionState,
    SubstitutionRuleError,
    TileDecodeError,
)
from .indexing.schema import PointOfInterest

__all__ = [
    "data_ingestion",
    "indexing",
    "monitoring",
    "tiles",
    "utils",
    "GeoIndexError",
    "IndexWriterError",
    "InvalidIngestionState",
    "SubstitutionRuleError",
    "TileDecodeError",
    "PointOfInterest",
]
