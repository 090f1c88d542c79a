"""
Vector Tile Decoding

Thin adapter over ``mapbox_vector_tile`` that turns tile bytes into
``TileFeature`` records with shapely geometry in tile-pixel space.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

import mapbox_vector_tile
from shapely.errors import ShapelyError
from shapely.geometry import shape
from shapely.geometry.base import BaseGeometry

from ..errors import TileDecodeError
from .coordinates import DEFAULT_EXTENT


@dataclass
class TileFeature:
    """A single decoded feature, still in tile-pixel coordinates."""
    layer: str
    geometry: Optional[BaseGeometry]
    tags: List[Tuple[str, str]] = field(default_factory=list)
    extent: int = DEFAULT_EXTENT
    feature_id: Optional[int] = None

    @property
    def tag_dict(self) -> Dict[str, str]:
        return dict(self.tags)


def decode_tile(data: bytes, tile_id: str = "") -> Dict[str, Any]:
    """
    Decode MVT bytes into the ``mapbox_vector_tile`` layer dictionary.

    Coordinates keep the tile convention of a top-left origin.

    Raises:
        TileDecodeError: If the bytes are not a valid vector tile
    """
    try:
        return mapbox_vector_tile.decode(data, default_options={'y_coord_down': True})
    except Exception as e:
        raise TileDecodeError(f"Failed to decode tile {tile_id or '<unknown>'}: {e}", tile_id) from e


def tag_value_to_string(value: Any) -> str:
    """Render a vector tile property value as a tag string."""
    if isinstance(value, bool):
        return 'true' if value else 'false'
    return str(value)


def features_from_layers(
    layers: Dict[str, Any],
    layer_names: Optional[Sequence[str]] = None,
    default_extent: int = DEFAULT_EXTENT
) -> Iterator[TileFeature]:
    """
    Iterate over the features of decoded layers.

    Args:
        layers: Output of ``decode_tile``
        layer_names: Optional allow-list of layers; all layers when empty
        default_extent: Extent used when a layer does not declare one

    Yields:
        TileFeature per feature; geometry is None when it cannot be built
    """
    for layer_name, layer in layers.items():
        if layer_names and layer_name not in layer_names:
            continue

        extent = layer.get('extent') or default_extent

        for feature in layer.get('features', []):
            try:
                geometry = shape(feature['geometry'])
            except (KeyError, ValueError, TypeError, ShapelyError):
                geometry = None

            tags = [
                (str(key), tag_value_to_string(value))
                for key, value in (feature.get('properties') or {}).items()
                if value is not None
            ]

            yield TileFeature(
                layer=layer_name,
                geometry=geometry,
                tags=tags,
                extent=int(extent),
                feature_id=feature.get('id')
            )
