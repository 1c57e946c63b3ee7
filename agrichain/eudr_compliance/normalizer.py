# -*- coding: utf-8 -*-
"""
Geometry Normalizer - EUDR Compliance Engine

Accepts heterogeneous, externally supplied geolocation input and produces
the canonical FeatureCollection shape that every other engine consumes.

Accepted shapes, in priority order:
    1. FeatureCollection (``features`` is a list) -> passed through
    2. Feature (has a ``geometry``) -> wrapped in a one-element collection
    3. Bare Point or Polygon geometry -> wrapped as a Feature with empty
       properties

The shape is resolved once, by ``classify_input``. No geometry validity is
checked here; that is the GeometryValidator's job.

Example:
    >>> from agrichain.eudr_compliance.normalizer import GeometryNormalizer
    >>> normalizer = GeometryNormalizer()
    >>> collection = normalizer.normalize(
    ...     {"type": "Point", "coordinates": [7.123456, 5.612345]}
    ... )
    >>> len(collection.features)
    1
"""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping, Optional, Union

from agrichain.exceptions import InputTooLarge, MalformedGeometry
from agrichain.eudr_compliance.config import EUDRComplianceConfig
from agrichain.eudr_compliance.models import GeoCollection, GeoInputKind

logger = logging.getLogger(__name__)

BARE_GEOMETRY_TYPES = frozenset({"Point", "Polygon"})


def classify_input(value: Any) -> GeoInputKind:
    """Resolve which accepted GeoJSON shape a parsed value has.

    Args:
        value: Arbitrary parsed JSON value.

    Returns:
        The GeoInputKind of the value.

    Raises:
        MalformedGeometry: If the value matches none of the accepted shapes.
    """
    if not isinstance(value, Mapping):
        raise MalformedGeometry(
            "Invalid GeoJSON input",
            reason=f"input must be a JSON object, got {type(value).__name__}",
        )

    geo_type = value.get("type")

    if geo_type == "FeatureCollection" and isinstance(value.get("features"), (list, tuple)):
        return GeoInputKind.FEATURE_COLLECTION
    if geo_type == "Feature" and value.get("geometry"):
        return GeoInputKind.FEATURE
    if geo_type in BARE_GEOMETRY_TYPES:
        return GeoInputKind.BARE_GEOMETRY

    raise MalformedGeometry(
        "Unable to parse as valid GeoJSON",
        reason=(
            "expected FeatureCollection, Feature, Point, or Polygon, "
            f"got type={geo_type!r}"
        ),
    )


def serialized_size(value: Any) -> int:
    """Return the size in bytes of the compact UTF-8 JSON form of a value.

    Raises:
        MalformedGeometry: If the value is not JSON serializable.
    """
    try:
        text = json.dumps(value, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise MalformedGeometry(
            "Geolocation input is not JSON serializable",
            reason=str(exc),
        ) from exc
    return len(text.encode("utf-8"))


class GeometryNormalizer:
    """Normalizes geolocation input into a canonical GeoCollection.

    Attributes:
        _config: EUDRComplianceConfig providing the input size cap.
    """

    def __init__(self, config: Optional[EUDRComplianceConfig] = None) -> None:
        """Initialize GeometryNormalizer.

        Args:
            config: Optional EUDRComplianceConfig; defaults are used if omitted.
        """
        self._config = config or EUDRComplianceConfig()

    def enforce_size_limit(self, value: Any) -> int:
        """Reject input whose serialized size exceeds the configured cap.

        Args:
            value: Parsed JSON value.

        Returns:
            Serialized size in bytes.

        Raises:
            InputTooLarge: If the cap is exceeded.
            MalformedGeometry: If the value cannot be serialized.
        """
        size = serialized_size(value)
        self._check_size(size)
        return size

    def load(self, raw: Union[str, bytes]) -> GeoCollection:
        """Parse GeoJSON text and normalize it.

        The size cap is applied to the raw text before parsing.

        Args:
            raw: GeoJSON document as text or UTF-8 bytes.

        Returns:
            Canonical GeoCollection.

        Raises:
            InputTooLarge: If the document exceeds the size cap.
            MalformedGeometry: If the document is not valid JSON or not a
                recognized GeoJSON shape.
        """
        data = raw.encode("utf-8") if isinstance(raw, str) else raw
        self._check_size(len(data))
        try:
            value = json.loads(data)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise MalformedGeometry(
                "Failed to parse GeoJSON",
                reason=str(exc),
            ) from exc
        return self._normalize(value)

    def normalize(self, value: Any) -> GeoCollection:
        """Size-check and normalize a parsed geolocation value.

        Args:
            value: Parsed JSON value (FeatureCollection, Feature, or bare
                Point/Polygon geometry).

        Returns:
            Canonical GeoCollection.

        Raises:
            InputTooLarge: If the serialized input exceeds the size cap.
            MalformedGeometry: If the value is not a recognized shape.
        """
        self.enforce_size_limit(value)
        return self._normalize(value)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _check_size(self, size: int) -> None:
        limit = self._config.max_geojson_size_bytes
        if size > limit:
            raise InputTooLarge(
                f"Geolocation input is {size} bytes, exceeding the {limit} byte limit",
                size_bytes=size,
                limit_bytes=limit,
            )

    def _normalize(self, value: Any) -> GeoCollection:
        kind = classify_input(value)

        if kind is GeoInputKind.FEATURE_COLLECTION:
            data = dict(value)
            data["features"] = [_with_properties(member) for member in value["features"]]
            collection = GeoCollection.model_validate(data)
        elif kind is GeoInputKind.FEATURE:
            collection = GeoCollection(features=[_with_properties(value)])
        else:
            collection = GeoCollection(
                features=[{
                    "type": "Feature",
                    "geometry": value,
                    "properties": {},
                }],
            )

        logger.debug(
            "Normalized %s input into %d feature(s)",
            kind.value, len(collection.features),
        )
        return collection


def _with_properties(member: Any) -> Any:
    """Give a feature mapping an empty ``properties`` when missing or null."""
    if isinstance(member, Mapping) and member.get("properties") is None:
        member = dict(member)
        member["properties"] = {}
    return member


__all__ = [
    "BARE_GEOMETRY_TYPES",
    "GeometryNormalizer",
    "classify_input",
    "serialized_size",
]
