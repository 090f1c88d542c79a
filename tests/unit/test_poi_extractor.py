"""
Unit Tests for POI Extraction

Tests the inclusion filter, name collection and centroid tagging of tile
features.
"""

import sys
import unittest
from pathlib import Path

from shapely.geometry import GeometryCollection, LineString, Point, Polygon

sys.path.append(str(Path(__file__).parent.parent.parent / "src"))

from geoindex.data_ingestion.poi_extractor import collect_names, extract, is_name_key
from geoindex.indexing.s2_cells import cell_center, cell_id
from geoindex.tiles.coordinates import transform_point

EXTENT = 4096


class TestPOIExtractor(unittest.TestCase):
    """Test suite for POI extraction from tile features."""

    def setUp(self):
        """Set up a geometry at the centre of the world tile."""
        self.center_point = Point(2048, 2048)

    def extract_at_center(self, tags, geometry=None, language="en"):
        return extract(
            language,
            geometry if geometry is not None else self.center_point,
            tags,
            0, 0, 0,
            EXTENT
        )

    def test_feature_with_name_only_is_kept(self):
        """Test a named feature without an address is a POI."""
        poi = self.extract_at_center({"name": "Cafe X"})

        self.assertIsNotNone(poi)
        self.assertEqual(poi.names, ["Cafe X"])
        self.assertIsNone(poi.house_number)
        self.assertIsNone(poi.road)

    def test_feature_with_address_only_is_kept(self):
        """Test house number plus street is enough without a name."""
        poi = self.extract_at_center({"addr:housenumber": "12", "addr:street": "Main St"})

        self.assertIsNotNone(poi)
        self.assertEqual(poi.names, [])
        self.assertEqual(poi.house_number, "12")
        self.assertEqual(poi.road, "Main St")

    def test_feature_without_name_or_address_is_dropped(self):
        """Test features with neither names nor a full address are dropped."""
        self.assertIsNone(self.extract_at_center({"amenity": "bench"}))

    def test_partial_address_is_dropped(self):
        """Test a house number without a street does not qualify."""
        self.assertIsNone(self.extract_at_center({"addr:housenumber": "12", "amenity": "cafe"}))
        self.assertIsNone(self.extract_at_center({"addr:street": "Main St"}))

    def test_other_tags_do_not_admit_features(self):
        """Test the unit tag alone does not make a feature a POI."""
        self.assertIsNone(self.extract_at_center({"addr:unit": "4B", "shop": "bakery"}))

    def test_localized_names_are_collected(self):
        """Test name and name:<lang> keys are all collected in tag order."""
        poi = self.extract_at_center([
            ("name", "Munich"),
            ("name:de", "München"),
            ("name:it", "Monaco di Baviera"),
            ("place", "city"),
        ])

        self.assertEqual(poi.names, ["Munich", "München", "Monaco di Baviera"])

    def test_name_substring_match_is_broad(self):
        """Test keys containing "name:" anywhere count as names."""
        poi = self.extract_at_center({"official_name:en": "Central Station"})

        self.assertIsNotNone(poi)
        self.assertEqual(poi.names, ["Central Station"])
        self.assertTrue(is_name_key("alt_name:fr"))
        self.assertFalse(is_name_key("alt_name"))
        self.assertFalse(is_name_key("names"))

    def test_collect_names_ignores_other_keys(self):
        """Test non-name keys are ignored."""
        self.assertEqual(collect_names([("brand", "X"), ("name", "Y")]), ["Y"])

    def test_unit_is_extracted(self):
        """Test addr:unit is carried over."""
        poi = self.extract_at_center({"name": "Flat", "addr:unit": "4B"})

        self.assertEqual(poi.unit, "4B")

    def test_s2cell_of_point(self):
        """Test the cell id is computed from the projected point."""
        poi = self.extract_at_center({"name": "Null Island"})

        self.assertEqual(poi.s2cell, cell_id(0.0, 0.0))

    def test_s2cell_of_polygon_uses_centroid(self):
        """Test polygon features are located at their centroid."""
        square = Polygon([(1024, 1024), (3072, 1024), (3072, 3072), (1024, 3072)])
        poi = extract("en", square, {"name": "Square"}, 2, 1, 2, EXTENT)

        west, north = transform_point((1024, 1024), 2, 1, 2, EXTENT)
        east, south = transform_point((3072, 3072), 2, 1, 2, EXTENT)
        lat, lng = cell_center(poi.s2cell)

        self.assertAlmostEqual(lng, (west + east) / 2, places=6)
        self.assertAlmostEqual(lat, (north + south) / 2, places=6)

    def test_s2cell_of_line_uses_centroid(self):
        """Test line features are located at their centroid."""
        segment = LineString([(1024, 2048), (3072, 2048)])
        poi = extract("en", segment, {"name": "Main Road"}, 2, 1, 2, EXTENT)

        expected_lng, expected_lat = transform_point((2048, 2048), 2, 1, 2, EXTENT)
        lat, lng = cell_center(poi.s2cell)

        self.assertAlmostEqual(lng, expected_lng, places=6)
        self.assertAlmostEqual(lat, expected_lat, places=6)

    def test_s2cell_uses_tile_address(self):
        """Test the tile address shifts the projected location."""
        poi = extract("en", Point(0, 0), {"name": "Corner"}, 1, 0, 1, EXTENT)

        lng, lat = transform_point((0, 0), 1, 0, 1, EXTENT)
        self.assertEqual(poi.s2cell, cell_id(lat, lng))

    def test_empty_geometry_is_dropped(self):
        """Test features without a centroid are dropped silently."""
        self.assertIsNone(self.extract_at_center({"name": "Nowhere"}, geometry=Point()))
        self.assertIsNone(self.extract_at_center({"name": "Nowhere"}, geometry=GeometryCollection()))

    def test_missing_geometry_is_dropped(self):
        """Test features whose geometry could not be decoded are dropped."""
        poi = extract("en", None, {"name": "Broken"}, 0, 0, 0, EXTENT)

        self.assertIsNone(poi)

    def test_tags_are_copied_verbatim(self):
        """Test every tag is kept in order, including duplicates."""
        tags = [("name", "A"), ("cuisine", "italian;pizza"), ("name", "B")]
        poi = self.extract_at_center(tags)

        self.assertEqual(poi.tags, tags)
        self.assertIsNot(poi.tags, tags)

    def test_language_and_admins(self):
        """Test the tile language is the only language and admins stay empty."""
        poi = self.extract_at_center({"name": "Bäckerei"}, language="de")

        self.assertEqual(poi.languages, ["de"])
        self.assertEqual(poi.admins, [])
