# -*- coding: utf-8 -*-
"""
Area and Precision Calculator - EUDR Compliance Engine

Pure geometric functions over GeoJSON plot geometries:

- polygon_area_hectares: geodesic area on the WGS84 ellipsoid (pyproj.Geod)
  of the outer ring minus any interior rings (holes), in hectares
- min_decimal_precision: minimum number of decimal places across every
  coordinate value of a geometry
- centroid: unweighted mean of Point positions and Polygon centroids
- enrich_with_area / calculate_total_area: collection-level helpers used
  when anchoring geolocation and assembling statements

Decimal precision is measured on the shortest round-tripping decimal form
of each value (``repr``), so ``7.1`` has precision 1, ``5.0`` and ``5``
have precision 0 and ``1e-07`` has precision 7.

None of the functions mutate their inputs.
"""

from __future__ import annotations

import copy
import logging
import math
from decimal import Decimal
from typing import Any, Iterator, List, Mapping, Sequence, Tuple

from pyproj import Geod
from pyproj.exceptions import GeodError
from shapely.errors import ShapelyError
from shapely.geometry import Polygon

from agrichain.exceptions import AreaCalculationFailed
from agrichain.eudr_compliance.models import GeoCollection

logger = logging.getLogger(__name__)

_GEOD = Geod(ellps="WGS84")

SQUARE_METERS_PER_HECTARE = 10_000.0


# ---------------------------------------------------------------------------
# Precision
# ---------------------------------------------------------------------------


def decimal_precision(value: Any) -> int:
    """Return the number of decimal places of a single coordinate value.

    Args:
        value: Coordinate value (int or float).

    Returns:
        Digits after the decimal point; 0 for integers and integral floats.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"Coordinate value must be numeric, got {type(value).__name__}")
    if isinstance(value, int) or not math.isfinite(value):
        return 0
    exponent = Decimal(repr(value)).normalize().as_tuple().exponent
    return max(0, -int(exponent))


def iter_positions(geometry: Mapping[str, Any]) -> Iterator[Sequence[Any]]:
    """Yield every position of a Point or Polygon geometry mapping."""
    geom_type = geometry.get("type")
    coordinates = geometry.get("coordinates")
    if geom_type == "Point":
        yield coordinates
    elif geom_type == "Polygon":
        for ring in coordinates or []:
            for position in ring:
                yield position


def min_decimal_precision(geometry: Mapping[str, Any]) -> int:
    """Return the minimum decimal precision across all coordinate values.

    Args:
        geometry: GeoJSON Point or Polygon geometry mapping.

    Returns:
        Minimum precision, or 0 when the geometry holds no coordinates.
    """
    precisions = [
        decimal_precision(value)
        for position in iter_positions(geometry)
        for value in position
    ]
    if not precisions:
        return 0
    return min(precisions)


# ---------------------------------------------------------------------------
# Area
# ---------------------------------------------------------------------------


def _ring_area_m2(ring: Sequence[Sequence[float]], ring_index: int) -> float:
    """Return the unsigned geodesic area of a closed linear ring in m2."""
    try:
        size = len(ring)
        closed = size > 0 and list(ring[0][:2]) == list(ring[-1][:2])
        lons = [float(position[0]) for position in ring]
        lats = [float(position[1]) for position in ring]
    except (TypeError, IndexError, ValueError) as exc:
        raise AreaCalculationFailed(
            f"Ring {ring_index} has malformed positions",
            reason="malformed_ring",
            context={"ring_index": ring_index},
        ) from exc

    if size < 4:
        raise AreaCalculationFailed(
            f"Ring {ring_index} must have at least 4 positions, got {size}",
            reason="degenerate_ring",
            context={"ring_index": ring_index},
        )
    if not closed:
        raise AreaCalculationFailed(
            f"Ring {ring_index} is not closed (first and last positions differ)",
            reason="unclosed_ring",
            context={"ring_index": ring_index},
        )
    try:
        area, _perimeter = _GEOD.polygon_area_perimeter(lons, lats)
    except (ValueError, TypeError, GeodError) as exc:
        raise AreaCalculationFailed(
            f"Geodesic area of ring {ring_index} could not be computed: {exc}",
            reason="geodesic_failure",
            context={"ring_index": ring_index},
        ) from exc
    if not math.isfinite(area):
        raise AreaCalculationFailed(
            f"Geodesic area of ring {ring_index} is not finite",
            reason="geodesic_failure",
            context={"ring_index": ring_index},
        )
    return abs(area)


def polygon_area_hectares(rings: Sequence[Sequence[Sequence[float]]]) -> float:
    """Compute the geodesic area of a polygon in hectares.

    The first ring is the outer boundary; every further ring is a hole whose
    area is subtracted.

    Args:
        rings: Polygon coordinates as a sequence of closed linear rings.

    Returns:
        Area in hectares (unrounded).

    Raises:
        AreaCalculationFailed: If a ring is degenerate or unclosed, or the
            holes cover more than the outer ring.
    """
    if not rings:
        raise AreaCalculationFailed(
            "Polygon has no rings",
            reason="empty_polygon",
        )

    outer_m2 = _ring_area_m2(rings[0], 0)
    holes_m2 = sum(
        _ring_area_m2(ring, index)
        for index, ring in enumerate(rings[1:], start=1)
    )
    if holes_m2 > outer_m2:
        raise AreaCalculationFailed(
            "Polygon holes cover more area than the outer ring",
            reason="holes_exceed_outer",
            context={"outer_m2": outer_m2, "holes_m2": holes_m2},
        )
    return (outer_m2 - holes_m2) / SQUARE_METERS_PER_HECTARE


# ---------------------------------------------------------------------------
# Centroid
# ---------------------------------------------------------------------------


def _polygon_centroid(rings: Sequence[Sequence[Sequence[float]]]) -> Tuple[float, float]:
    """Return the area-weighted centroid of a polygon.

    Zero-area polygons fall back to the mean of the outer ring's vertices.

    Raises:
        ValueError: If the outer ring holds no positions.
    """
    shell = [(float(p[0]), float(p[1])) for p in rings[0]]
    holes = [[(float(p[0]), float(p[1])) for p in ring] for ring in rings[1:]]
    point = Polygon(shell, holes).centroid
    if not point.is_empty:
        return point.x, point.y

    vertices = shell[:-1] if len(shell) > 1 and shell[0] == shell[-1] else shell
    if not vertices:
        raise ValueError("Polygon outer ring has no positions")
    return (
        sum(v[0] for v in vertices) / len(vertices),
        sum(v[1] for v in vertices) / len(vertices),
    )


def centroid(collection: GeoCollection) -> Tuple[float, float]:
    """Return the unweighted mean location of all plots in a collection.

    Each Point contributes its position and each Polygon its centroid;
    members that are not Point/Polygon features or whose polygon cannot be
    built are skipped.

    Args:
        collection: Normalized collection.

    Returns:
        (longitude, latitude), or (0.0, 0.0) when nothing contributes.
    """
    locations: List[Tuple[float, float]] = []

    for index, feature in enumerate(collection.features):
        if not isinstance(feature, Mapping):
            continue
        geometry = feature.get("geometry")
        if not isinstance(geometry, Mapping):
            continue
        try:
            if geometry.get("type") == "Point":
                coords = geometry["coordinates"]
                locations.append((float(coords[0]), float(coords[1])))
            elif geometry.get("type") == "Polygon":
                locations.append(_polygon_centroid(geometry["coordinates"]))
        except (KeyError, IndexError, TypeError, ValueError, ShapelyError) as exc:
            logger.debug("Skipping feature %d in centroid: %s", index, exc)

    if not locations:
        return 0.0, 0.0

    return (
        sum(loc[0] for loc in locations) / len(locations),
        sum(loc[1] for loc in locations) / len(locations),
    )


# ---------------------------------------------------------------------------
# Collection helpers
# ---------------------------------------------------------------------------


def enrich_with_area(collection: GeoCollection) -> GeoCollection:
    """Return a copy whose Polygon features carry a computed ``area_ha``.

    Areas are rounded to 3 decimal places. Polygons whose area cannot be
    computed are left untouched.

    Args:
        collection: Validated collection.

    Returns:
        New GeoCollection; the input is not modified.
    """
    data = copy.deepcopy(collection.to_geojson())

    for index, feature in enumerate(data["features"]):
        geometry = feature.get("geometry") if isinstance(feature, dict) else None
        if not isinstance(geometry, Mapping) or geometry.get("type") != "Polygon":
            continue
        try:
            area_ha = polygon_area_hectares(geometry.get("coordinates") or [])
        except AreaCalculationFailed as exc:
            logger.warning("Feature %d: area enrichment skipped: %s", index, exc.message)
            continue
        properties = dict(feature.get("properties") or {})
        properties["area_ha"] = round(area_ha, 3)
        feature["properties"] = properties

    return GeoCollection.model_validate(data)


def calculate_total_area(collection: GeoCollection) -> float:
    """Return the total plot area declared in a statement, in hectares.

    Polygons contribute their computed area; Points contribute their
    declared ``area_ha`` property when present.

    Args:
        collection: Validated collection.

    Returns:
        Total area rounded to 3 decimal places.
    """
    total = 0.0

    for index, feature in enumerate(collection.features):
        if not isinstance(feature, Mapping):
            continue
        geometry = feature.get("geometry")
        if not isinstance(geometry, Mapping):
            continue
        if geometry.get("type") == "Polygon":
            try:
                total += polygon_area_hectares(geometry.get("coordinates") or [])
            except AreaCalculationFailed as exc:
                logger.warning("Feature %d: excluded from total area: %s", index, exc.message)
        elif geometry.get("type") == "Point":
            declared = (feature.get("properties") or {}).get("area_ha")
            if isinstance(declared, (int, float)) and not isinstance(declared, bool):
                total += float(declared)

    return round(total, 3)


__all__ = [
    "SQUARE_METERS_PER_HECTARE",
    "decimal_precision",
    "iter_positions",
    "min_decimal_precision",
    "polygon_area_hectares",
    "centroid",
    "enrich_with_area",
    "calculate_total_area",
]
