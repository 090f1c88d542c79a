"""
Data Ingestion Module

Extracts POIs from vector tile features and drives tile ingestion into an
index writer.
"""

from .base_ingester import BaseIngester
from .poi_extractor import extract
from .tile_ingestion import TileResult, TileSource, VectorTileIngester, iter_tile_directory

__all__ = [
    "BaseIngester",
    "extract",
    "TileResult",
    "TileSource",
    "VectorTileIngester",
    "iter_tile_directory",
]
