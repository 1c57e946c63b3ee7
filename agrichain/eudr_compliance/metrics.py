# -*- coding: utf-8 -*-
"""
Prometheus Metrics - AgriChain EUDR Compliance Engine

Metrics:
    1. agrichain_eudr_validations_total (Counter) [result]
    2. agrichain_eudr_dds_generated_total (Counter) [risk_level]
    3. agrichain_eudr_risk_assessments_total (Counter) [risk_level]
    4. agrichain_eudr_geolocation_hashes_total (Counter) []
    5. agrichain_eudr_processing_errors_total (Counter) [engine, error_type]
    6. agrichain_eudr_processing_duration_seconds (Histogram) [operation]
    7. agrichain_eudr_plot_area_hectares (Histogram) []

Metrics are registered on the default prometheus_client registry at import.
"""

from __future__ import annotations

import logging

from prometheus_client import Counter, Histogram

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Metric definitions
# ---------------------------------------------------------------------------

# 1. Geolocation validations by outcome
validations_total = Counter(
    "agrichain_eudr_validations_total",
    "Total geolocation validations performed",
    labelnames=["result"],
)

# 2. Due diligence statements generated by risk level
dds_generated_total = Counter(
    "agrichain_eudr_dds_generated_total",
    "Total due diligence statements generated",
    labelnames=["risk_level"],
)

# 3. Risk assessments by resulting level
risk_assessments_total = Counter(
    "agrichain_eudr_risk_assessments_total",
    "Total risk assessments performed",
    labelnames=["risk_level"],
)

# 4. Geolocation content hashes computed
geolocation_hashes_total = Counter(
    "agrichain_eudr_geolocation_hashes_total",
    "Total geolocation content hashes computed",
)

# 5. Processing errors by engine and error type
processing_errors_total = Counter(
    "agrichain_eudr_processing_errors_total",
    "Total processing errors encountered",
    labelnames=["engine", "error_type"],
)

# 6. Operation duration histogram
processing_duration_seconds = Histogram(
    "agrichain_eudr_processing_duration_seconds",
    "Compliance engine operation duration in seconds",
    labelnames=["operation"],
    buckets=(
        0.001, 0.005, 0.01, 0.025, 0.05, 0.1,
        0.25, 0.5, 1.0, 2.5, 5.0, 10.0,
    ),
)

# 7. Plot area distribution (hectares)
plot_area_hectares = Histogram(
    "agrichain_eudr_plot_area_hectares",
    "Computed polygon plot area in hectares",
    buckets=(0.1, 0.5, 1.0, 2.0, 4.0, 10.0, 25.0, 50.0, 100.0, 500.0),
)


# ---------------------------------------------------------------------------
# Helper functions
# ---------------------------------------------------------------------------


def record_validation(valid: bool) -> None:
    """Record a geolocation validation.

    Args:
        valid: Whether the report was valid.
    """
    validations_total.labels(result="valid" if valid else "invalid").inc()


def record_dds_generated(risk_level: str) -> None:
    """Record a generated due diligence statement.

    Args:
        risk_level: Risk level declared on the statement.
    """
    dds_generated_total.labels(risk_level=risk_level).inc()


def record_risk_assessment(risk_level: str) -> None:
    """Record a risk assessment.

    Args:
        risk_level: Resulting risk level.
    """
    risk_assessments_total.labels(risk_level=risk_level).inc()


def record_geolocation_hash() -> None:
    """Record a geolocation content hash computation."""
    geolocation_hashes_total.inc()


def record_processing_error(engine: str, error_type: str) -> None:
    """Record a processing error.

    Args:
        engine: Engine that encountered the error (normalizer, geometry,
            statement, service).
        error_type: Error classification.
    """
    processing_errors_total.labels(engine=engine, error_type=error_type).inc()


def observe_duration(operation: str, seconds: float) -> None:
    """Observe the duration of an engine operation.

    Args:
        operation: Operation name (validate, assess_risk, generate_dds, ...).
        seconds: Elapsed wall-clock seconds.
    """
    processing_duration_seconds.labels(operation=operation).observe(seconds)


def record_plot_area(area_ha: float) -> None:
    """Observe a computed polygon plot area.

    Args:
        area_ha: Area in hectares.
    """
    plot_area_hectares.observe(area_ha)


__all__ = [
    "validations_total",
    "dds_generated_total",
    "risk_assessments_total",
    "geolocation_hashes_total",
    "processing_errors_total",
    "processing_duration_seconds",
    "plot_area_hectares",
    "record_validation",
    "record_dds_generated",
    "record_risk_assessment",
    "record_geolocation_hash",
    "record_processing_error",
    "observe_duration",
    "record_plot_area",
]
