"""Tests for the AgriChain exception hierarchy.

Covers:
- Error code generation
- Rich error context
- Exception serialization
- Exception chain formatting
"""

import json
from datetime import datetime

import pytest

from agrichain.exceptions import (
    AgriChainException,
    AreaCalculationFailed,
    GeolocationException,
    GeolocationInvalid,
    InputTooLarge,
    MalformedGeometry,
    format_exception_chain,
)


# ==============================================================================
# Base Exception Tests
# ==============================================================================

class TestAgriChainException:
    """Tests for base AgriChainException."""

    def test_create_basic_exception(self):
        """Can create basic exception with message."""
        exc = AgriChainException("Something went wrong")

        assert exc.message == "Something went wrong"
        assert exc.error_code == "AC_AGRI_CHAIN_EXCEPTION"
        assert exc.context == {}
        assert isinstance(exc.timestamp, datetime)

    def test_explicit_error_code(self):
        """An explicit error code overrides the generated one."""
        exc = AgriChainException("Test error", error_code="AC_TEST_001")
        assert exc.error_code == "AC_TEST_001"

    def test_str_representation(self):
        """String form is '[code] - message'."""
        exc = AgriChainException("Test error", error_code="AC_TEST_001")
        assert str(exc) == "[AC_TEST_001] - Test error"

    def test_to_dict_and_json(self):
        """Exception serializes to dict and JSON."""
        exc = AgriChainException("Test error", context={"key": "value"})

        data = exc.to_dict()
        assert data["error_type"] == "AgriChainException"
        assert data["context"] == {"key": "value"}

        parsed = json.loads(exc.to_json())
        assert parsed["message"] == "Test error"
        assert "timestamp" in parsed


# ==============================================================================
# Geolocation Exception Tests
# ==============================================================================

class TestGeolocationExceptions:
    """Tests for the geolocation error kinds."""

    @pytest.mark.parametrize("exc_class,code", [
        (MalformedGeometry, "AC_GEO_MALFORMED_GEOMETRY"),
        (GeolocationInvalid, "AC_GEO_GEOLOCATION_INVALID"),
        (AreaCalculationFailed, "AC_GEO_AREA_CALCULATION_FAILED"),
        (InputTooLarge, "AC_GEO_INPUT_TOO_LARGE"),
    ])
    def test_error_codes(self, exc_class, code):
        """Each kind gets an AC_GEO-prefixed code and shares the base class."""
        exc = exc_class("message")
        assert exc.error_code == code
        assert isinstance(exc, GeolocationException)
        assert isinstance(exc, AgriChainException)

    def test_malformed_geometry_reason(self):
        """MalformedGeometry keeps its reason in the context."""
        exc = MalformedGeometry("Invalid GeoJSON input", reason="not an object")
        assert exc.reason == "not an object"
        assert exc.context["reason"] == "not an object"

    def test_geolocation_invalid_carries_findings(self):
        """GeolocationInvalid exposes itemized errors and warnings."""
        exc = GeolocationInvalid(
            "Invalid EUDR geolocation data",
            errors=["Feature 0: Missing geometry"],
            warnings=["Feature 1: Missing plot_id property"],
        )
        assert exc.errors == ["Feature 0: Missing geometry"]
        assert exc.warnings == ["Feature 1: Missing plot_id property"]
        assert exc.context["errors"] == exc.errors
        assert exc.report is None

    def test_input_too_large_sizes(self):
        """InputTooLarge records the size and the limit."""
        exc = InputTooLarge("too big", size_bytes=2048, limit_bytes=1024)
        assert exc.size_bytes == 2048
        assert exc.context == {"size_bytes": 2048, "limit_bytes": 1024}


# ==============================================================================
# Utility Tests
# ==============================================================================

class TestFormatExceptionChain:
    """Tests for format_exception_chain."""

    def test_formats_cause_chain(self):
        """Chained causes are rendered in order."""
        try:
            try:
                raise ValueError("bad json")
            except ValueError as cause:
                raise MalformedGeometry("Failed to parse GeoJSON") from cause
        except MalformedGeometry as exc:
            text = format_exception_chain(exc)

        lines = text.splitlines()
        assert lines[0] == "[AC_GEO_MALFORMED_GEOMETRY] - Failed to parse GeoJSON"
        assert "ValueError: bad json" in lines
