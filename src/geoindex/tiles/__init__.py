"""
Tile Module

Vector tile decoding and tile-pixel to WGS84 coordinate transformation.
"""

from .coordinates import (
    DEFAULT_EXTENT,
    TileSpec,
    line,
    lnglat_to_tile,
    rectangle,
    transform_geometry,
    transform_point,
    triangle,
)
from .decoder import TileFeature, decode_tile, features_from_layers

__all__ = [
    "DEFAULT_EXTENT",
    "TileSpec",
    "TileFeature",
    "decode_tile",
    "features_from_layers",
    "line",
    "lnglat_to_tile",
    "rectangle",
    "transform_geometry",
    "transform_point",
    "triangle",
]
