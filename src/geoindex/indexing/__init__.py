"""
Indexing Module

Document schema, S2 cell tagging, road name permutation and the index
writer contract.
"""

from .s2_cells import ancestor_chain, cell_center, cell_id, cell_level, is_ancestor
from .schema import InputPoi, KvPair, PointOfInterest, SchemafiedPoi, schemify
from .substitutions import RoadPermuter, permute_road
from .writer import IndexWriter, InMemoryIndexWriter

__all__ = [
    "ancestor_chain",
    "cell_center",
    "cell_id",
    "cell_level",
    "is_ancestor",
    "InputPoi",
    "KvPair",
    "PointOfInterest",
    "SchemafiedPoi",
    "schemify",
    "RoadPermuter",
    "permute_road",
    "IndexWriter",
    "InMemoryIndexWriter",
]
