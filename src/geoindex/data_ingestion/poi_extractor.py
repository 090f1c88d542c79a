"""
POI Extraction

Decides whether a tile feature is a point of interest and pulls out the
fields the search index needs: names, address parts, and the S2 cell of the
feature's centroid.
"""

import math
from collections.abc import Mapping
from typing import Iterable, List, Optional, Tuple, Union

from shapely.geometry.base import BaseGeometry

from ..indexing.s2_cells import cell_id
from ..indexing.schema import InputPoi
from ..tiles.coordinates import transform_geometry

HOUSE_NUMBER_TAG = 'addr:housenumber'
STREET_TAG = 'addr:street'
UNIT_TAG = 'addr:unit'

Tags = Union[Mapping[str, str], Iterable[Tuple[str, str]]]


def is_name_key(key: str) -> bool:
    # Substring match also picks up keys such as "official_name:en"
    return key == 'name' or 'name:' in key


def collect_names(tags: List[Tuple[str, str]]) -> List[str]:
    return [value for key, value in tags if is_name_key(key)]


def _first(tags: List[Tuple[str, str]], key: str) -> Optional[str]:
    return next((value for tag_key, value in tags if tag_key == key), None)


def extract(
    language: str,
    geometry: Optional[BaseGeometry],
    tags: Tags,
    tile_x: int,
    tile_y: int,
    tile_z: int,
    extent: int
) -> Optional[InputPoi]:
    """
    Build an InputPoi from a tile feature.

    A feature is kept when it has at least one name, or both a house number
    and a street. Features whose geometry cannot be projected or has no
    centroid are dropped as well.

    Args:
        language: Language declared for the tile
        geometry: Feature geometry in tile-pixel space
        tags: Feature tags as a mapping or (key, value) pairs
        tile_x: Tile column
        tile_y: Tile row
        tile_z: Zoom level
        extent: Tile extent in pixels

    Returns:
        InputPoi, or None if the feature is not a POI
    """
    tag_pairs = list(tags.items()) if isinstance(tags, Mapping) else list(tags)

    house_number = _first(tag_pairs, HOUSE_NUMBER_TAG)
    road = _first(tag_pairs, STREET_TAG)
    unit = _first(tag_pairs, UNIT_TAG)
    names = collect_names(tag_pairs)

    if (house_number is None or road is None) and not names:
        return None

    transformed = transform_geometry(geometry, tile_x, tile_y, tile_z, extent)
    if transformed is None or transformed.is_empty:
        return None

    centroid = transformed.centroid
    if centroid.is_empty or not (math.isfinite(centroid.x) and math.isfinite(centroid.y)):
        return None

    return InputPoi(
        names=names,
        house_number=house_number,
        road=road,
        unit=unit,
        admins=[],
        s2cell=cell_id(centroid.y, centroid.x),
        tags=tag_pairs,
        languages=[language]
    )
