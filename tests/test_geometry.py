# -*- coding: utf-8 -*-
"""Tests for the area, precision and centroid functions."""

import copy

import pytest

from agrichain.exceptions import AreaCalculationFailed
from agrichain.eudr_compliance.geometry import (
    calculate_total_area,
    centroid,
    decimal_precision,
    enrich_with_area,
    min_decimal_precision,
    polygon_area_hectares,
)
from agrichain.eudr_compliance.models import GeoCollection

OUTER = [[0.0, 0.0], [0.002, 0.0], [0.002, 0.002], [0.0, 0.002], [0.0, 0.0]]
HOLE = [
    [0.0005, 0.0005], [0.0015, 0.0005], [0.0015, 0.0015],
    [0.0005, 0.0015], [0.0005, 0.0005],
]


# =============================================================================
# Precision
# =============================================================================


class TestDecimalPrecision:
    """Tests for decimal_precision and min_decimal_precision."""

    @pytest.mark.parametrize("value,expected", [
        (3.123456, 6),
        (7.1, 1),
        (5, 0),
        (5.0, 0),
        (-122.4194155, 7),
        (1e-07, 7),
        (1.5e-05, 6),
        (100.0, 0),
    ])
    def test_decimal_precision(self, value, expected):
        """Digits after the decimal point of the shortest decimal form."""
        assert decimal_precision(value) == expected

    def test_rejects_non_numbers(self):
        """Booleans and strings are not coordinates."""
        with pytest.raises(TypeError):
            decimal_precision(True)
        with pytest.raises(TypeError):
            decimal_precision("7.123456")

    def test_minimum_across_values(self):
        """The geometry precision is the minimum across all values."""
        point = {"type": "Point", "coordinates": [3.123456, 7.1]}
        assert min_decimal_precision(point) == 1

    def test_polygon_minimum(self):
        """Every ring position of a polygon is inspected."""
        ring = [
            [7.123451, 5.612341], [7.124451, 5.612341],
            [7.124451, 5.613], [7.123451, 5.612341],
        ]
        assert min_decimal_precision({"type": "Polygon", "coordinates": [ring]}) == 3

    def test_empty_geometry(self):
        """A geometry without coordinates has precision 0."""
        assert min_decimal_precision({"type": "Polygon", "coordinates": []}) == 0


# =============================================================================
# Area
# =============================================================================


class TestPolygonArea:
    """Tests for polygon_area_hectares."""

    def test_square_plot_area(self, polygon_geometry):
        """A 0.001 degree square near the equator is about 1.22 ha."""
        area = polygon_area_hectares(polygon_geometry["coordinates"])
        assert 1.1 < area < 1.35

    def test_orientation_does_not_matter(self):
        """Clockwise and counter-clockwise rings have the same area."""
        reversed_ring = list(reversed(OUTER))
        assert polygon_area_hectares([OUTER]) == pytest.approx(
            polygon_area_hectares([reversed_ring]),
        )

    def test_holes_are_subtracted(self):
        """An interior ring covering a quarter of the plot removes a quarter."""
        full = polygon_area_hectares([OUTER])
        with_hole = polygon_area_hectares([OUTER, HOLE])
        assert with_hole == pytest.approx(full * 0.75, rel=1e-3)

    def test_degenerate_ring(self):
        """Rings with fewer than four positions fail."""
        with pytest.raises(AreaCalculationFailed) as exc_info:
            polygon_area_hectares([[[0.0, 0.0], [1.0, 0.0], [0.0, 0.0]]])
        assert exc_info.value.reason == "degenerate_ring"

    def test_unclosed_ring(self):
        """Rings whose first and last positions differ fail."""
        with pytest.raises(AreaCalculationFailed) as exc_info:
            polygon_area_hectares([OUTER[:-1] + [[0.0, 0.001]]])
        assert exc_info.value.reason == "unclosed_ring"

    def test_empty_polygon(self):
        """A polygon without rings fails."""
        with pytest.raises(AreaCalculationFailed) as exc_info:
            polygon_area_hectares([])
        assert exc_info.value.reason == "empty_polygon"

    def test_holes_larger_than_outer(self):
        """Holes covering more than the outer ring fail."""
        with pytest.raises(AreaCalculationFailed) as exc_info:
            polygon_area_hectares([HOLE, OUTER])
        assert exc_info.value.reason == "holes_exceed_outer"


# =============================================================================
# Centroid
# =============================================================================


class TestCentroid:
    """Tests for centroid."""

    def test_empty_collection(self):
        """An empty collection has centroid (0, 0)."""
        assert centroid(GeoCollection()) == (0.0, 0.0)

    def test_mean_of_points(self):
        """Points contribute their coordinates."""
        collection = GeoCollection(features=[
            {"type": "Feature", "geometry": {"type": "Point", "coordinates": [0.0, 0.0]}},
            {"type": "Feature", "geometry": {"type": "Point", "coordinates": [2.0, 4.0]}},
        ])
        assert centroid(collection) == pytest.approx((1.0, 2.0))

    def test_polygon_and_point(self):
        """A polygon contributes its own centroid, unweighted by area."""
        square = [[0.0, 0.0], [2.0, 0.0], [2.0, 2.0], [0.0, 2.0], [0.0, 0.0]]
        collection = GeoCollection(features=[
            {"type": "Feature", "geometry": {"type": "Polygon", "coordinates": [square]}},
            {"type": "Feature", "geometry": {"type": "Point", "coordinates": [3.0, 3.0]}},
        ])
        assert centroid(collection) == pytest.approx((2.0, 2.0))

    def test_skips_unusable_features(self):
        """Members without a usable geometry do not contribute."""
        collection = GeoCollection(features=[
            "not a feature",
            {"type": "Feature", "geometry": None},
            {"type": "Feature", "geometry": {"type": "Point", "coordinates": []}},
            {"type": "Feature", "geometry": {"type": "Point", "coordinates": [4.0, 6.0]}},
        ])
        assert centroid(collection) == pytest.approx((4.0, 6.0))

    def test_skips_polygon_with_empty_ring(self):
        """A Polygon whose outer ring holds no positions does not contribute."""
        collection = GeoCollection(features=[
            {"type": "Feature", "geometry": {"type": "Polygon", "coordinates": [[]]}},
            {"type": "Feature", "geometry": {"type": "Point", "coordinates": [4.0, 6.0]}},
        ])
        assert centroid(collection) == pytest.approx((4.0, 6.0))

    def test_only_empty_polygon(self):
        """A collection with nothing usable falls back to (0, 0)."""
        collection = GeoCollection(features=[
            {"type": "Feature", "geometry": {"type": "Polygon", "coordinates": [[]]}},
        ])
        assert centroid(collection) == (0.0, 0.0)


# =============================================================================
# Collection helpers
# =============================================================================


class TestCollectionHelpers:
    """Tests for enrich_with_area and calculate_total_area."""

    def test_enrich_sets_polygon_area(self, polygon_feature, point_feature):
        """Polygon features gain a rounded area_ha; points are untouched."""
        collection = GeoCollection(features=[polygon_feature, point_feature])
        original = copy.deepcopy(collection.to_geojson())

        enriched = enrich_with_area(collection)

        polygon_props = enriched.features[0]["properties"]
        assert polygon_props["area_ha"] == round(
            polygon_area_hectares(polygon_feature["geometry"]["coordinates"]), 3,
        )
        assert polygon_props["plot_id"] == "P1"
        assert enriched.features[1] == point_feature
        assert collection.to_geojson() == original

    def test_enrich_skips_broken_polygons(self):
        """Polygons whose area fails are left unchanged."""
        broken = {
            "type": "Feature",
            "geometry": {"type": "Polygon", "coordinates": [[[0.0, 0.0], [1.0, 1.0]]]},
            "properties": {"plot_id": "X"},
        }
        enriched = enrich_with_area(GeoCollection(features=[broken]))
        assert enriched.features[0]["properties"] == {"plot_id": "X"}

    def test_total_area_includes_declared_point_area(self, polygon_feature, point_feature):
        """Statement total = polygon areas + declared point areas."""
        collection = GeoCollection(features=[polygon_feature, point_feature])
        polygon_area = polygon_area_hectares(polygon_feature["geometry"]["coordinates"])

        assert calculate_total_area(collection) == round(polygon_area + 2.5, 3)

    def test_total_area_empty(self):
        """An empty collection has no area."""
        assert calculate_total_area(GeoCollection()) == 0.0
