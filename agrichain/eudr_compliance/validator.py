# -*- coding: utf-8 -*-
"""
Geometry Validator - EUDR Compliance Engine

Applies EUDR Article 9 geolocation rules to a normalized GeoCollection and
produces an itemized ValidationReport. The validator never raises on bad
input: every finding is captured as an error or a warning so that callers
get complete diagnostics for partially broken collections.

Rules, per feature i:
    - member must be a ``Feature`` with a Point or Polygon geometry whose
      coordinates are numeric positions (otherwise: error, feature skipped)
    - every coordinate value must carry at least ``min_coordinate_precision``
      decimal places
    - coordinates must lie within WGS84 bounds (when enforced)
    - Polygon: geodesic area is accumulated into the total; a failed area
      calculation is only a warning
    - Point: a declared ``area_ha`` at or above ``large_plot_threshold_ha``
      is an error (Polygon required); no declared area is a warning
    - ``plot_id`` must be unique across the collection; a missing plot_id
      is a warning

An empty collection is a single top-level error and no per-feature rules run.

Example:
    >>> from agrichain.eudr_compliance.validator import GeometryValidator
    >>> report = GeometryValidator().validate(collection)
    >>> report.valid, report.total_area_ha
    (True, 1.225)
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Mapping, Optional

from pydantic import ValidationError

from agrichain.exceptions import (
    AreaCalculationFailed,
    GeolocationException,
    InputTooLarge,
    MalformedGeometry,
)
from agrichain.eudr_compliance.config import EUDRComplianceConfig
from agrichain.eudr_compliance.geometry import (
    iter_positions,
    min_decimal_precision,
    polygon_area_hectares,
)
from agrichain.eudr_compliance.metrics import (
    observe_duration,
    record_plot_area,
    record_processing_error,
    record_validation,
)
from agrichain.eudr_compliance.models import (
    FeatureReport,
    GeoCollection,
    GeoFeature,
    GeometryType,
    ValidationReport,
)
from agrichain.eudr_compliance.normalizer import GeometryNormalizer

logger = logging.getLogger(__name__)

EMPTY_COLLECTION_ERROR = "FeatureCollection must contain at least one feature"


def _format_pydantic_errors(exc: ValidationError) -> str:
    """Render pydantic errors as ``loc: msg`` pairs joined by semicolons."""
    parts = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()))
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts)


class GeometryValidator:
    """EUDR geolocation validation engine.

    Attributes:
        _config: EUDRComplianceConfig with precision, threshold and bounds rules.
        _normalizer: GeometryNormalizer used by ``validate_raw``.
    """

    def __init__(
        self,
        config: Optional[EUDRComplianceConfig] = None,
        normalizer: Optional[GeometryNormalizer] = None,
    ) -> None:
        """Initialize GeometryValidator.

        Args:
            config: Optional EUDRComplianceConfig; defaults are used if omitted.
            normalizer: Optional GeometryNormalizer for raw input.
        """
        self._config = config or EUDRComplianceConfig()
        self._normalizer = normalizer or GeometryNormalizer(self._config)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def validate_raw(self, value: Any) -> ValidationReport:
        """Normalize and validate untrusted input without raising.

        Oversized or unrecognizable input produces an invalid report whose
        single error describes the rejection.

        Args:
            value: Arbitrary parsed JSON value.

        Returns:
            ValidationReport.
        """
        try:
            collection = self._normalizer.normalize(value)
        except (MalformedGeometry, InputTooLarge) as exc:
            return self.rejection_report(exc)
        return self.validate(collection)

    @staticmethod
    def rejection_report(exc: GeolocationException) -> ValidationReport:
        """Build the invalid report for input the normalizer rejected.

        Args:
            exc: MalformedGeometry or InputTooLarge raised by the normalizer.

        Returns:
            ValidationReport whose single error describes the rejection.
        """
        record_processing_error("normalizer", type(exc).__name__)
        record_validation(valid=False)
        reason = getattr(exc, "reason", None)
        message = f"{exc.message}: {reason}" if reason else exc.message
        return ValidationReport(valid=False, errors=[message])

    def validate(self, collection: GeoCollection) -> ValidationReport:
        """Validate a normalized collection against the EUDR rules.

        Args:
            collection: Canonical GeoCollection.

        Returns:
            ValidationReport with itemized errors and warnings.
        """
        start_time = time.monotonic()
        features = collection.features

        if not features:
            record_validation(valid=False)
            return ValidationReport(valid=False, errors=[EMPTY_COLLECTION_ERROR])

        errors: List[str] = []
        warnings: List[str] = []
        reports: List[FeatureReport] = []
        seen_plot_ids: Dict[str, int] = {}
        total_area_ha = 0.0
        polygon_required_count = 0

        for index, raw in enumerate(features):
            feature = self._parse_feature(index, raw, errors)
            if feature is None:
                continue
            geometry = raw["geometry"]
            geom_type = GeometryType(feature.geometry.type)

            # Coordinate precision
            precision = min_decimal_precision(geometry)
            required = self._config.min_coordinate_precision
            if precision < required:
                errors.append(
                    f"Feature {index}: Coordinates must have at least {required} "
                    f"decimal places (found {precision})"
                )

            # Coordinate bounds
            if self._config.enforce_coordinate_bounds:
                out_of_range = self._first_out_of_range(geometry)
                if out_of_range is not None:
                    errors.append(
                        f"Feature {index}: Coordinate {out_of_range} is outside "
                        "WGS84 bounds (longitude within [-180, 180], latitude "
                        "within [-90, 90])"
                    )

            # Area
            area_ha: Optional[float] = None
            if geom_type is GeometryType.POLYGON:
                try:
                    area_ha = polygon_area_hectares(feature.geometry.coordinates)
                    total_area_ha += area_ha
                    record_plot_area(area_ha)
                except AreaCalculationFailed as exc:
                    record_processing_error("geometry", "area_calculation")
                    warnings.append(
                        f"Feature {index}: Could not calculate area ({exc.message})"
                    )
            else:
                threshold = self._config.large_plot_threshold_ha
                declared = feature.properties.area_ha
                if not declared:
                    warnings.append(
                        f"Feature {index}: Point geometry without area_ha property; "
                        "cannot assess size without polygon or declared area "
                        f"(plots >= {threshold:g} ha require Polygon geometry)"
                    )
                elif declared >= threshold:
                    errors.append(
                        f"Feature {index}: Plot is {declared:g} ha "
                        f"(>= {threshold:g} ha) - must use Polygon geometry"
                    )
                    polygon_required_count += 1

            # plot_id uniqueness
            plot_id = feature.properties.plot_id
            plot_key = None if plot_id in (None, "") else str(plot_id)
            if plot_key is None:
                warnings.append(
                    f"Feature {index}: Missing plot_id property "
                    "(recommended for traceability)"
                )
            elif plot_key in seen_plot_ids:
                errors.append(
                    f"Feature {index}: Duplicate plot_id \"{plot_key}\" "
                    f"(first used by feature {seen_plot_ids[plot_key]})"
                )
            else:
                seen_plot_ids[plot_key] = index

            reports.append(FeatureReport(
                index=index,
                geometry_type=geom_type,
                area_ha=round(area_ha, 3) if area_ha is not None else None,
                plot_id=plot_key,
                coordinate_precision=precision,
            ))

        report = ValidationReport(
            valid=not errors,
            errors=errors,
            warnings=warnings,
            features=reports,
            total_area_ha=round(total_area_ha, 3),
            polygon_required_count=polygon_required_count,
            feature_count=len(features),
        )

        elapsed = time.monotonic() - start_time
        record_validation(valid=report.valid)
        observe_duration("validate", elapsed)
        logger.info(
            "Validated geolocation: features=%d, valid=%s, errors=%d, "
            "warnings=%d, total_area=%.3fha (%.1f ms)",
            report.feature_count, report.valid, len(errors),
            len(warnings), report.total_area_ha, elapsed * 1000,
        )
        return report

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _parse_feature(
        self,
        index: int,
        raw: Any,
        errors: List[str],
    ) -> Optional[GeoFeature]:
        """Apply the structural rules; return the typed feature or None."""
        if not isinstance(raw, Mapping) or raw.get("type") != "Feature":
            errors.append(f"Feature {index}: Must be of type \"Feature\"")
            return None

        geometry = raw.get("geometry")
        if not geometry:
            errors.append(f"Feature {index}: Missing geometry")
            return None

        geom_type = geometry.get("type") if isinstance(geometry, Mapping) else None
        if geom_type not in ("Point", "Polygon"):
            errors.append(
                f"Feature {index}: Geometry must be Point or Polygon, got {geom_type}"
            )
            return None

        try:
            return GeoFeature.model_validate(raw)
        except ValidationError as exc:
            errors.append(
                f"Feature {index}: Invalid feature ({_format_pydantic_errors(exc)})"
            )
            return None

    @staticmethod
    def _first_out_of_range(geometry: Mapping[str, Any]) -> Optional[List[Any]]:
        """Return the first position outside WGS84 bounds, if any."""
        for position in iter_positions(geometry):
            lon, lat = position[0], position[1]
            if not (-180.0 <= lon <= 180.0) or not (-90.0 <= lat <= 90.0):
                return list(position)
        return None


__all__ = [
    "EMPTY_COLLECTION_ERROR",
    "GeometryValidator",
]
