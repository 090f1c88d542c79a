"""
POI Document Schema

Record types that flow through the ingestion core and the conversion of an
extracted POI into its indexable document form.

Content tokens are written as ``"<prefix>=<value>"``. The prefix is empty for
names, address parts and admins, so those tokens read ``"=value"``; tag
tokens use the tag key as prefix (``"cuisine=pizza"``).
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from .s2_cells import ancestor_chain
from .substitutions import permute_road

Tag = Tuple[str, str]
Permute = Callable[[str, str], Sequence[str]]

# Multi-valued tags use ";" as separator in vector tiles
TAG_VALUE_SEPARATOR = ';'


@dataclass(frozen=True)
class KvPair:
    key: str
    value: str


@dataclass(frozen=True)
class PointOfInterest:
    """
    Public POI record.

    ``tags`` keeps insertion order and may repeat a key. ``tag_dict`` and
    ``tag`` resolve repeats differently: the mapping keeps the last value
    while the single lookup returns the first.
    """
    lat: float
    lng: float
    tags: Tuple[KvPair, ...] = ()

    @classmethod
    def from_tags(cls, lat: float, lng: float, tags: Iterable[Tag]) -> "PointOfInterest":
        return cls(lat=lat, lng=lng, tags=tuple(KvPair(key, value) for key, value in tags))

    def tag_dict(self) -> Dict[str, str]:
        """All tags as a mapping; the last value wins for a repeated key."""
        return {pair.key: pair.value for pair in self.tags}

    def tag(self, key: str) -> Optional[str]:
        """Value of the first tag named ``key``, or None."""
        return next((pair.value for pair in self.tags if pair.key == key), None)


@dataclass
class InputPoi:
    """A POI extracted from one tile feature, before schemification."""
    names: List[str]
    house_number: Optional[str]
    road: Optional[str]
    unit: Optional[str]
    s2cell: int
    tags: List[Tag]
    languages: List[str]
    # Not populated yet; kept so the document shape is stable
    admins: List[str] = field(default_factory=list)


@dataclass
class SchemafiedPoi:
    """Indexable document handed to the index writer."""
    content: List[str]
    s2cell: int
    s2cell_parents: List[int]
    tags: List[Tag]


def prefix_strings(prefix: str, values: Iterable[str]) -> List[str]:
    return [f"{prefix}={value}" for value in values]


def schemify(poi: InputPoi, permute: Permute = permute_road) -> SchemafiedPoi:
    """
    Convert an extracted POI into its document form.

    Args:
        poi: Extracted POI
        permute: Road permutation collaborator, called once per language

    Returns:
        SchemafiedPoi with content tokens, S2 ancestors and the raw tags
    """
    content = []
    content.extend(prefix_strings("", poi.names))
    if poi.house_number is not None:
        content.extend(prefix_strings("", [poi.house_number]))
    if poi.road is not None:
        for language in poi.languages:
            content.extend(prefix_strings("", permute(poi.road, language)))
    if poi.unit is not None:
        content.extend(prefix_strings("", [poi.unit]))
    content.extend(prefix_strings("", poi.admins))

    for key, value in poi.tags:
        content.extend(prefix_strings(key, value.split(TAG_VALUE_SEPARATOR)))

    return SchemafiedPoi(
        content=content,
        s2cell=poi.s2cell,
        s2cell_parents=ancestor_chain(poi.s2cell),
        tags=list(poi.tags)
    )
