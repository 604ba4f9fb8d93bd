"""Tests for Region records and the RegionStore."""

import math
import unittest

import pytest
from parameterized import parameterized
from shapely.geometry import MultiPolygon, Point, Polygon

from tests.utils import square
from tzlocate.errors import GeometryDefectError, RegionLoadError, StoreFrozenError
from tzlocate.geo.envelope import Envelope
from tzlocate.geo.regions import RegionStore

pytestmark = pytest.mark.unit

DONUT = [
    [(0, 0), (0, 10), (10, 10), (10, 0)],
    [(3, 3), (7, 3), (7, 7), (3, 7)],
]


class TestRegionStoreAdd(unittest.TestCase):
    """Admission rules for RegionStore.add."""

    def setUp(self):
        self.store = RegionStore()

    def test_add_returns_dense_handles(self):
        self.assertEqual(self.store.add(square(0, 0), "Zone/A"), 0)
        self.assertEqual(self.store.add(square(10, 0), "Zone/B"), 1)
        self.assertEqual(len(self.store), 2)
        self.assertEqual([r.zone_id for r in self.store], ["Zone/A", "Zone/B"])

    def test_envelope_computed_on_add(self):
        handle = self.store.add([[(1, 2), (5, -3), (4, 9)]], "Zone/T")
        self.assertEqual(self.store.get(handle).envelope, Envelope(1, -3, 5, 9))

    @parameterized.expand(
        [
            ("none", None),
            ("empty", ""),
            ("blank", "   "),
            ("not_a_string", 42),
        ]
    )
    def test_missing_zone_id_rejected(self, _name, zone_id):
        with self.assertRaises(RegionLoadError):
            self.store.add(square(0, 0), zone_id)
        self.assertEqual(len(self.store), 0)

    @parameterized.expand(
        [
            ("no_rings", []),
            ("empty_ring", [[]]),
            ("none", None),
            ("string", "POLYGON"),
            ("bad_coordinate", [[(0, 0), ("x", 1), (1, 1)]]),
            ("short_coordinate", [[(0,), (1, 1), (2, 0)]]),
            ("nan", [[(0, 0), (math.nan, 1), (1, 1)]]),
            ("inf", [[(0, 0), (math.inf, 1), (1, 1)]]),
        ]
    )
    def test_bad_geometry_rejected(self, _name, geometry):
        with self.assertRaises(RegionLoadError):
            self.store.add(geometry, "Zone/X")

    def test_unsupported_geojson_type_rejected(self):
        with self.assertRaises(RegionLoadError):
            self.store.add({"type": "Point", "coordinates": [1, 2]}, "Zone/X")

    def test_unsupported_shapely_type_rejected(self):
        with self.assertRaises(RegionLoadError):
            self.store.add(Point(1, 2), "Zone/X")

    def test_frozen_store_rejects_add(self):
        self.store.add(square(0, 0), "Zone/A")
        self.store.freeze()
        self.assertTrue(self.store.frozen)
        with self.assertRaises(StoreFrozenError):
            self.store.add(square(10, 0), "Zone/B")

    def test_get_unknown_handle(self):
        self.store.add(square(0, 0), "Zone/A")
        with self.assertRaises(KeyError):
            self.store.get(1)
        with self.assertRaises(KeyError):
            self.store.get(-1)


class TestRegionGeometry(unittest.TestCase):
    """Exact geometry built from each accepted input form."""

    def setUp(self):
        self.store = RegionStore()

    def test_ring_sequence_with_hole_uses_even_odd_rule(self):
        region = self.store.get(self.store.add(DONUT, "Zone/Donut"))
        self.assertTrue(region.covers_point(Point(1, 1)))
        self.assertFalse(region.covers_point(Point(5, 5)))
        self.assertTrue(region.covers_point(Point(3, 5)))  # hole edge is polygon boundary
        self.assertEqual(len(region.rings), 2)

    def test_disjoint_rings_form_multi_part(self):
        region = self.store.get(self.store.add(square(0, 0, 2) + square(5, 0, 2), "Zone/Multi"))
        self.assertTrue(region.covers_point(Point(1, 1)))
        self.assertTrue(region.covers_point(Point(6, 1)))
        self.assertFalse(region.covers_point(Point(3.5, 1)))
        self.assertEqual(region.envelope, Envelope(0, 0, 7, 2))

    def test_geojson_polygon(self):
        geometry = {"type": "Polygon", "coordinates": [[[0, 0], [0, 10], [10, 10], [10, 0], [0, 0]]]}
        region = self.store.get(self.store.add(geometry, "Zone/A"))
        self.assertTrue(region.covers_point(Point(10, 10)))
        self.assertIsNone(region.defect)

    def test_geojson_multipolygon_with_z(self):
        geometry = {
            "type": "MultiPolygon",
            "coordinates": [[[[0, 0, 5], [0, 1, 5], [1, 1, 5], [1, 0, 5], [0, 0, 5]]]],
        }
        region = self.store.get(self.store.add(geometry, "Zone/Z"))
        self.assertEqual(region.envelope, Envelope(0, 0, 1, 1))
        self.assertTrue(region.covers_point(Point(0.5, 0.5)))

    def test_shapely_input(self):
        poly = Polygon([(0, 0), (0, 4), (4, 4), (4, 0)], holes=[[(1, 1), (3, 1), (3, 3), (1, 3)]])
        multi = MultiPolygon([poly, Polygon([(10, 10), (10, 11), (11, 11)])])
        region = self.store.get(self.store.add(multi, "Zone/S"))
        self.assertEqual(region.envelope, Envelope(0, 0, 11, 11))
        self.assertEqual(len(region.rings), 3)
        self.assertFalse(region.covers_point(Point(2, 2)))
        self.assertTrue(region.covers_point(Point(0.5, 0.5)))

    def test_short_ring_is_admitted_with_defect(self):
        with self.assertLogs("tzlocate.geo.regions", level="WARNING"):
            handle = self.store.add([[(0, 0), (5, 5)]], "Zone/Broken")
        region = self.store.get(handle)
        self.assertIsNotNone(region.defect)
        self.assertIsNone(region.shape)
        self.assertEqual(region.envelope, Envelope(0, 0, 5, 5))
        self.assertEqual(self.store.defective(), [region])
        with self.assertRaises(GeometryDefectError):
            region.covers_point(Point(1, 1))

    def test_short_geojson_ring_is_admitted_with_defect(self):
        geometry = {"type": "Polygon", "coordinates": [[[0, 0], [1, 1], [0, 0]]]}
        region = self.store.get(self.store.add(geometry, "Zone/Broken"))
        self.assertIsNotNone(region.defect)


class TestFromPairs(unittest.TestCase):
    """Bulk admission and the raise/skip policy."""

    def test_raise_on_first_error(self):
        pairs = [(square(0, 0), "Zone/A"), (square(10, 0), None), (square(20, 0), "Zone/C")]
        with self.assertRaises(RegionLoadError) as ctx:
            RegionStore.from_pairs(pairs)
        self.assertIn("#1", str(ctx.exception))

    def test_skip_continues(self):
        pairs = [(square(0, 0), "Zone/A"), (square(10, 0), None), (square(20, 0), "Zone/C")]
        with self.assertLogs("tzlocate.geo.regions", level="WARNING"):
            store = RegionStore.from_pairs(pairs, on_error="skip")
        self.assertEqual([r.zone_id for r in store], ["Zone/A", "Zone/C"])
        self.assertEqual([r.handle for r in store], [0, 1])

    def test_unknown_policy(self):
        with self.assertRaises(ValueError):
            RegionStore.from_pairs([], on_error="ignore")

    def test_envelopes_and_zone_ids(self):
        store = RegionStore.from_pairs([(square(0, 0), "Zone/A"), (square(0, 20), "Zone/A")])
        self.assertEqual(store.envelopes(), [(Envelope(0, 0, 10, 10), 0), (Envelope(0, 20, 10, 30), 1)])
        self.assertEqual(store.zone_ids(), {"Zone/A"})
