"""
Unit Tests for the POI Document Schema

Tests the public PointOfInterest record and the conversion of extracted POIs
into indexable documents.
"""

import sys
import unittest
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).parent.parent.parent / "src"))

from geoindex.indexing.s2_cells import ancestor_chain, cell_id
from geoindex.indexing.schema import (
    InputPoi,
    KvPair,
    PointOfInterest,
    SchemafiedPoi,
    prefix_strings,
    schemify,
)


def identity_permute(road, language):
    return [road]


class TestPointOfInterest(unittest.TestCase):
    """Test suite for the public POI record."""

    def test_construction_from_pairs(self):
        """Test tags keep order and duplicates."""
        poi = PointOfInterest.from_tags(1.5, 2.5, [("k", "a"), ("x", "y"), ("k", "b")])

        self.assertEqual(poi.lat, 1.5)
        self.assertEqual(poi.lng, 2.5)
        self.assertEqual(poi.tags, (KvPair("k", "a"), KvPair("x", "y"), KvPair("k", "b")))

    def test_mapping_accessor_last_value_wins(self):
        """Test the mapping keeps the last value of a repeated key."""
        poi = PointOfInterest.from_tags(0.0, 0.0, [("k", "a"), ("k", "b")])

        self.assertEqual(poi.tag_dict(), {"k": "b"})

    def test_single_lookup_first_value_wins(self):
        """Test the single lookup returns the first value of a repeated key."""
        poi = PointOfInterest.from_tags(0.0, 0.0, [("k", "a"), ("k", "b")])

        self.assertEqual(poi.tag("k"), "a")

    def test_single_lookup_missing_key(self):
        """Test a missing key yields None."""
        poi = PointOfInterest.from_tags(0.0, 0.0, [("name", "Cafe X")])

        self.assertIsNone(poi.tag("cuisine"))

    def test_record_is_immutable(self):
        """Test records cannot be modified in place."""
        poi = PointOfInterest.from_tags(0.0, 0.0, [])

        with self.assertRaises(AttributeError):
            poi.lat = 1.0


class TestSchemify(unittest.TestCase):
    """Test suite for document conversion."""

    def setUp(self):
        """Set up a fully populated POI."""
        self.cell = cell_id(48.1374, 11.5755)
        self.poi = InputPoi(
            names=["Cafe X"],
            house_number="12",
            road="Main St",
            unit="3B",
            s2cell=self.cell,
            tags=[("name", "Cafe X"), ("cuisine", "italian;pizza")],
            languages=["en"]
        )

    def test_content_tokens_in_order(self):
        """Test the token list for a fully populated POI."""
        document = schemify(self.poi, identity_permute)

        self.assertEqual(document.content, [
            "=Cafe X",
            "=12",
            "=Main St",
            "=3B",
            "name=Cafe X",
            "cuisine=italian",
            "cuisine=pizza",
        ])

    def test_multi_valued_tag_is_split(self):
        """Test a ";" separated tag value yields one token per piece."""
        document = schemify(self.poi, identity_permute)
        cuisine_tokens = [token for token in document.content if token.startswith("cuisine=")]

        self.assertEqual(cuisine_tokens, ["cuisine=italian", "cuisine=pizza"])

    def test_empty_prefix_for_names(self):
        """Test name tokens use the empty prefix."""
        self.poi.names = ["A", "B"]
        document = schemify(self.poi, identity_permute)

        self.assertEqual(document.content[:2], ["=A", "=B"])

    def test_missing_address_parts_emit_nothing(self):
        """Test absent address fields do not produce tokens."""
        poi = InputPoi(
            names=["Park"],
            house_number=None,
            road=None,
            unit=None,
            s2cell=self.cell,
            tags=[],
            languages=["en"]
        )

        self.assertEqual(schemify(poi, identity_permute).content, ["=Park"])

    def test_permute_not_called_without_road(self):
        """Test the road collaborator is only consulted when a road is present."""
        calls = []
        self.poi.road = None

        schemify(self.poi, lambda road, language: calls.append((road, language)) or [road])

        self.assertEqual(calls, [])

    def test_road_fan_out_over_languages(self):
        """Test every variant for every language is emitted without deduplication."""
        self.poi.languages = ["en", "fr"]
        self.poi.tags = []
        self.poi.names = []
        self.poi.house_number = None
        self.poi.unit = None

        def permute(road, language):
            return [road, f"{road} ({language})"]

        document = schemify(self.poi, permute)

        self.assertEqual(document.content, [
            "=Main St",
            "=Main St (en)",
            "=Main St",
            "=Main St (fr)",
        ])

    def test_default_permuter_is_used(self):
        """Test the built-in rules expand street abbreviations."""
        document = schemify(self.poi)

        self.assertIn("=Main St", document.content)
        self.assertIn("=Main Street", document.content)

    def test_admins_use_empty_prefix(self):
        """Test admin values are emitted when present."""
        self.poi.admins = ["Bavaria", "Germany"]
        document = schemify(self.poi, identity_permute)

        self.assertIn("=Bavaria", document.content)
        self.assertIn("=Germany", document.content)

    def test_s2_fields(self):
        """Test the cell and its ancestor chain are attached."""
        document = schemify(self.poi, identity_permute)

        self.assertEqual(document.s2cell, self.cell)
        self.assertEqual(document.s2cell_parents, ancestor_chain(self.cell))
        self.assertEqual(len(document.s2cell_parents), 30)

    def test_tags_pass_through(self):
        """Test raw tags are carried over unchanged."""
        document = schemify(self.poi, identity_permute)

        self.assertIsInstance(document, SchemafiedPoi)
        self.assertEqual(document.tags, self.poi.tags)
        self.assertIsNot(document.tags, self.poi.tags)

    def test_collaborator_errors_propagate(self):
        """Test errors from the road collaborator are not swallowed."""
        def failing_permute(road, language):
            raise RuntimeError("rule table unavailable")

        with self.assertRaises(RuntimeError):
            schemify(self.poi, failing_permute)


@pytest.mark.parametrize("prefix,values,expected", [
    ("", ["a"], ["=a"]),
    ("cuisine", ["italian", "pizza"], ["cuisine=italian", "cuisine=pizza"]),
    ("", [], []),
])
def test_prefix_strings(prefix, values, expected):
    """Test token formatting."""
    assert prefix_strings(prefix, values) == expected
