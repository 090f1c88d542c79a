"""
Tile Coordinate Transformation

Maps vector tile geometry from tile-pixel space into WGS84 longitude/latitude
using the inverse Web Mercator projection. Every function takes the tile
address and extent explicitly so the transforms stay pure.

Geometry is handled as shapely objects. Lines, rectangles and triangles have
no dedicated shapely type, so ``line``, ``rectangle`` and ``triangle`` build
them as a two-point LineString and Polygons respectively.
"""

import math
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from shapely.geometry import (
    GeometryCollection,
    LinearRing,
    LineString,
    MultiLineString,
    MultiPoint,
    MultiPolygon,
    Point,
    Polygon,
    box,
)
from shapely.geometry.base import BaseGeometry

# MVT standard extent
DEFAULT_EXTENT = 4096

Coordinate = Tuple[float, float]


@dataclass(frozen=True)
class TileSpec:
    """Address of a single tile in the z/x/y slippy-map scheme."""
    x: int
    y: int
    z: int
    extent: int = DEFAULT_EXTENT

    @property
    def tile_id(self) -> str:
        """Get unique tile identifier."""
        return f"{self.z}/{self.x}/{self.y}"

    @property
    def bbox(self) -> Tuple[float, float, float, float]:
        """Tile bounds in degrees as (lon_min, lat_min, lon_max, lat_max)."""
        lon_min, lat_max = self.to_lnglat((0, 0))
        lon_max, lat_min = self.to_lnglat((self.extent, self.extent))
        return (lon_min, lat_min, lon_max, lat_max)

    @property
    def center(self) -> Coordinate:
        """Longitude/latitude of the tile's centre pixel."""
        half = self.extent / 2.0
        return self.to_lnglat((half, half))

    def to_lnglat(self, coord: Sequence[float]) -> Coordinate:
        return transform_point(coord, self.x, self.y, self.z, self.extent)


def transform_point(
    coord: Sequence[float],
    tile_x: int,
    tile_y: int,
    tile_z: int,
    extent: int
) -> Coordinate:
    """
    Convert a tile-pixel coordinate to (longitude, latitude).

    Pixel values outside ``[0, extent)`` are legal (tile buffers) and are
    projected like any other value.

    Args:
        coord: (x, y) in tile pixels, origin top-left
        tile_x: Tile column
        tile_y: Tile row
        tile_z: Zoom level
        extent: Tile extent in pixels

    Returns:
        (lng, lat) in degrees
    """
    # Position within the whole world, normalized to [0, 1)
    n = float(1 << tile_z)
    x = (tile_x + coord[0] / extent) / n
    y = (tile_y + coord[1] / extent) / n

    lng = x * 360.0 - 180.0
    lat = math.degrees(math.atan(math.sinh(math.pi * (1.0 - 2.0 * y))))

    return (lng, lat)


def lnglat_to_tile(lng: float, lat: float, zoom: int) -> Tuple[int, int]:
    """Convert longitude/latitude to the (x, y) of the containing tile."""
    n = 2.0 ** zoom

    x = int((lng + 180.0) / 360.0 * n)

    lat_rad = math.radians(lat)
    y = int((1.0 - math.asinh(math.tan(lat_rad)) / math.pi) / 2.0 * n)

    return (x, y)


def line(start: Coordinate, end: Coordinate) -> LineString:
    """Build a single line segment."""
    return LineString([start, end])


def rectangle(min_corner: Coordinate, max_corner: Coordinate) -> Polygon:
    """Build an axis-aligned rectangle from two opposite corners."""
    return box(min_corner[0], min_corner[1], max_corner[0], max_corner[1])


def triangle(a: Coordinate, b: Coordinate, c: Coordinate) -> Polygon:
    """Build a triangle from its three corners."""
    return Polygon([a, b, c])


def transform_geometry(
    geometry: Optional[BaseGeometry],
    tile_x: int,
    tile_y: int,
    tile_z: int,
    extent: int
) -> Optional[BaseGeometry]:
    """
    Transform every coordinate of a geometry from tile pixels to lng/lat.

    Collections are transformed member by member; members that cannot be
    transformed are dropped. Returns None when the geometry type is not
    supported or when every member of a non-empty collection fails, which
    callers treat as "drop this feature".
    """
    def project(coords):
        return [transform_point(c, tile_x, tile_y, tile_z, extent) for c in coords]

    def project_members(members):
        return [
            transform_geometry(member, tile_x, tile_y, tile_z, extent)
            for member in members
        ]

    if geometry is None:
        return None

    geom_type = geometry.geom_type

    if geometry.is_empty and geom_type != 'GeometryCollection':
        return geometry

    if geom_type == 'Point':
        return Point(transform_point(geometry.coords[0], tile_x, tile_y, tile_z, extent))
    elif geom_type == 'LineString':
        return LineString(project(geometry.coords))
    elif geom_type == 'LinearRing':
        return LinearRing(project(geometry.coords))
    elif geom_type == 'Polygon':
        return Polygon(
            project(geometry.exterior.coords),
            [project(interior.coords) for interior in geometry.interiors]
        )
    elif geom_type == 'MultiPoint':
        return MultiPoint(project_members(geometry.geoms))
    elif geom_type == 'MultiLineString':
        return MultiLineString(project_members(geometry.geoms))
    elif geom_type == 'MultiPolygon':
        return MultiPolygon(project_members(geometry.geoms))
    elif geom_type == 'GeometryCollection':
        members = list(geometry.geoms)
        transformed = [member for member in project_members(members) if member is not None]
        if members and not transformed:
            return None
        return GeometryCollection(transformed)

    return None
