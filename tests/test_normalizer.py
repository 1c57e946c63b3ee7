# -*- coding: utf-8 -*-
"""Tests for the GeometryNormalizer."""

import json

import pytest

from agrichain.exceptions import InputTooLarge, MalformedGeometry
from agrichain.eudr_compliance.config import EUDRComplianceConfig
from agrichain.eudr_compliance.models import GeoInputKind
from agrichain.eudr_compliance.normalizer import (
    GeometryNormalizer,
    classify_input,
    serialized_size,
)


class TestClassifyInput:
    """Tests for the single shape dispatch."""

    def test_feature_collection(self, feature_collection):
        """A FeatureCollection with a feature list is recognized."""
        assert classify_input(feature_collection) is GeoInputKind.FEATURE_COLLECTION

    def test_feature(self, polygon_feature):
        """A Feature with a geometry is recognized."""
        assert classify_input(polygon_feature) is GeoInputKind.FEATURE

    @pytest.mark.parametrize("geometry_fixture", ["point_geometry", "polygon_geometry"])
    def test_bare_geometry(self, geometry_fixture, request):
        """Bare Point and Polygon geometries are recognized."""
        value = request.getfixturevalue(geometry_fixture)
        assert classify_input(value) is GeoInputKind.BARE_GEOMETRY

    @pytest.mark.parametrize("value", [
        [1, 2],
        "FeatureCollection",
        None,
        {"type": "LineString", "coordinates": [[0.0, 0.0], [1.0, 1.0]]},
        {"type": "Feature", "properties": {}},
        {"type": "FeatureCollection", "features": "nope"},
        {"coordinates": [7.123456, 5.612345]},
    ])
    def test_rejects_unrecognized_shapes(self, value):
        """Anything else is MalformedGeometry with a reason."""
        with pytest.raises(MalformedGeometry) as exc_info:
            classify_input(value)
        assert exc_info.value.reason


class TestGeometryNormalizer:
    """Tests for GeometryNormalizer.normalize and load."""

    def test_feature_collection_passes_through(self, feature_collection):
        """Features of a collection are kept in order."""
        second = {
            "type": "Feature",
            "geometry": {"type": "Point", "coordinates": [7.223456, 5.712345]},
            "properties": {"plot_id": "P9"},
        }
        feature_collection["features"].append(second)

        collection = GeometryNormalizer().normalize(feature_collection)

        assert collection.features == feature_collection["features"]

    def test_feature_is_wrapped(self, polygon_feature):
        """A single Feature becomes a one-element collection."""
        collection = GeometryNormalizer().normalize(polygon_feature)
        assert collection.type == "FeatureCollection"
        assert collection.features == [polygon_feature]

    def test_bare_geometry_is_wrapped(self, point_geometry):
        """A bare geometry becomes a Feature with empty properties."""
        collection = GeometryNormalizer().normalize(point_geometry)
        assert collection.features == [
            {"type": "Feature", "geometry": point_geometry, "properties": {}},
        ]

    def test_same_geometry_normalizes_identically(self, point_geometry):
        """All three input shapes of one geometry give the same collection."""
        feature = {"type": "Feature", "geometry": point_geometry, "properties": {}}
        collection = {"type": "FeatureCollection", "features": [feature]}
        normalizer = GeometryNormalizer()

        results = [
            normalizer.normalize(value).to_geojson()
            for value in (collection, feature, point_geometry)
        ]

        assert results[0] == results[1] == results[2]

    @pytest.mark.parametrize("extra", [{}, {"properties": None}], ids=["missing", "null"])
    def test_missing_or_null_properties_become_empty(self, point_geometry, extra):
        """A Feature without properties normalizes like the bare geometry."""
        feature = {"type": "Feature", "geometry": point_geometry, **extra}
        normalizer = GeometryNormalizer()

        bare = normalizer.normalize(point_geometry).to_geojson()
        single = normalizer.normalize(feature).to_geojson()
        member = normalizer.normalize(
            {"type": "FeatureCollection", "features": [feature]},
        ).to_geojson()

        assert single == bare
        assert member == bare
        assert single["features"][0]["properties"] == {}

    def test_properties_fill_does_not_mutate_input(self, point_geometry):
        """Filling in properties leaves the caller's feature untouched."""
        feature = {"type": "Feature", "geometry": point_geometry, "properties": None}
        GeometryNormalizer().normalize(feature)
        assert feature["properties"] is None

    def test_input_is_not_mutated(self, feature_collection):
        """Normalization does not modify the caller's value."""
        before = json.dumps(feature_collection, sort_keys=True)
        GeometryNormalizer().normalize(feature_collection)
        assert json.dumps(feature_collection, sort_keys=True) == before

    def test_size_cap_rejects_before_normalization(self, feature_collection):
        """Oversized input raises InputTooLarge, even if it is malformed."""
        normalizer = GeometryNormalizer(EUDRComplianceConfig(max_geojson_size_bytes=64))

        with pytest.raises(InputTooLarge) as exc_info:
            normalizer.normalize(feature_collection)
        assert exc_info.value.limit_bytes == 64
        assert exc_info.value.size_bytes > 64

        with pytest.raises(InputTooLarge):
            normalizer.normalize({"type": "Unknown", "padding": "x" * 100})

    def test_enforce_size_limit_returns_size(self, point_geometry):
        """enforce_size_limit returns the compact serialized size."""
        size = GeometryNormalizer().enforce_size_limit(point_geometry)
        assert size == serialized_size(point_geometry)
        assert size == len(json.dumps(point_geometry, separators=(",", ":")))

    def test_non_serializable_input(self):
        """NaN values cannot be serialized and are malformed."""
        with pytest.raises(MalformedGeometry):
            GeometryNormalizer().normalize(
                {"type": "Point", "coordinates": [float("nan"), 5.612345]},
            )

    def test_load_text(self, feature_collection):
        """load parses GeoJSON text."""
        collection = GeometryNormalizer().load(json.dumps(feature_collection))
        assert collection.features == feature_collection["features"]

    def test_load_invalid_json(self):
        """load rejects text that is not JSON."""
        with pytest.raises(MalformedGeometry) as exc_info:
            GeometryNormalizer().load("{not json")
        assert exc_info.value.message == "Failed to parse GeoJSON"

    def test_load_checks_raw_size(self):
        """load applies the size cap to the raw bytes."""
        normalizer = GeometryNormalizer(EUDRComplianceConfig(max_geojson_size_bytes=10))
        with pytest.raises(InputTooLarge):
            normalizer.load(b'{"type": "Point", "coordinates": [1, 2]}')
