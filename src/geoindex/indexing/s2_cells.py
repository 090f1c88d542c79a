"""
S2 Cell Indexing

Hierarchical spatial cell ids for POIs. Every POI is tagged with its leaf
cell and the ids of all of that cell's ancestors so that region queries can
match on a coarse cell id without recomputing containment.
"""

from typing import List, Tuple

import s2sphere

MAX_LEVEL = s2sphere.CellId.MAX_LEVEL


def cell_id(lat: float, lng: float) -> int:
    """Leaf-level S2 cell id (unsigned 64-bit) containing the point."""
    latlng = s2sphere.LatLng.from_degrees(lat, lng)
    return s2sphere.CellId.from_lat_lng(latlng).id()


def cell_level(cell: int) -> int:
    return s2sphere.CellId(cell).level()


def ancestor_chain(cell: int) -> List[int]:
    """
    Ancestor cell ids from level 0 up to, but excluding, the cell's level.

    Args:
        cell: S2 cell id

    Returns:
        One id per level, coarsest first; its length equals the cell level
    """
    cell_id_ = s2sphere.CellId(cell)
    return [cell_id_.parent(level).id() for level in range(cell_id_.level())]


def is_ancestor(ancestor: int, cell: int) -> bool:
    """True if ``ancestor`` is a strictly coarser cell containing ``cell``."""
    outer = s2sphere.CellId(ancestor)
    inner = s2sphere.CellId(cell)
    return outer.level() < inner.level() and outer.contains(inner)


def cell_center(cell: int) -> Tuple[float, float]:
    """(lat, lng) in degrees of the cell centre."""
    latlng = s2sphere.CellId(cell).to_lat_lng()
    return (latlng.lat().degrees, latlng.lng().degrees)
