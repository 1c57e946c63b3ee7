"""AgriChain Exception Hierarchy.

Exception hierarchy for the AgriChain EUDR compliance engine with rich error
context for API responses, logging, and monitoring.

Exception Hierarchy:
    AgriChainException (base)
    └── GeolocationException
        ├── MalformedGeometry
        ├── GeolocationInvalid
        ├── AreaCalculationFailed
        └── InputTooLarge

All exceptions include:
- error_code: Unique error identifier (e.g. "AC_GEO_MALFORMED_GEOMETRY")
- context: Dictionary with error-specific details
- timestamp: When the error occurred

None of these errors is retried by the engine. A caller recovers by
correcting the offending input and calling again.

Example:
    >>> from agrichain.exceptions import MalformedGeometry
    >>> raise MalformedGeometry(
    ...     "Unable to parse as valid GeoJSON",
    ...     reason="expected FeatureCollection, Feature, Point, or Polygon",
    ... )
"""

import json
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


# ==============================================================================
# Base Exception
# ==============================================================================

class AgriChainException(Exception):
    """Base exception for all AgriChain errors.

    Attributes:
        message: Human-readable error message
        error_code: Unique error identifier
        context: Dictionary with error-specific details
        timestamp: When the error occurred (UTC)
    """

    ERROR_PREFIX = "AC"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        """Initialize exception with rich context.

        Args:
            message: Human-readable error message
            error_code: Unique error identifier (auto-generated if not provided)
            context: Dictionary with error-specific details
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self._generate_error_code()
        self.context = context or {}
        self.timestamp = datetime.now(timezone.utc)

    def _generate_error_code(self) -> str:
        """Generate an error code from the class name.

        Returns:
            Error code like "AC_GEO_MALFORMED_GEOMETRY"
        """
        error_type = re.sub(r'(?<!^)(?=[A-Z])', '_', self.__class__.__name__).upper()
        return f"{self.ERROR_PREFIX}_{error_type}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
        }

    def to_json(self) -> str:
        """Convert exception to JSON string."""
        return json.dumps(self.to_dict(), indent=2, default=str)

    def __str__(self) -> str:
        return f"[{self.error_code}] - {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message='{self.message}', "
            f"error_code='{self.error_code}')"
        )


# ==============================================================================
# Geolocation Exceptions
# ==============================================================================

class GeolocationException(AgriChainException):
    """Base exception for geolocation processing errors."""
    ERROR_PREFIX = "AC_GEO"


class MalformedGeometry(GeolocationException):
    """Input is not parseable as any recognized GeoJSON shape.

    Example:
        >>> raise MalformedGeometry(
        ...     "Invalid GeoJSON input",
        ...     reason="input must be a JSON object, got list",
        ... )
    """

    def __init__(
        self,
        message: str,
        reason: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        """Initialize malformed geometry error.

        Args:
            message: Error message
            reason: Human-readable reason the input was rejected
            context: Error context
        """
        context = context or {}
        if reason:
            context["reason"] = reason
        self.reason = reason
        super().__init__(message, context=context)


class GeolocationInvalid(GeolocationException):
    """Geolocation is structurally parseable but fails compliance rules.

    Carries the itemized errors and warnings of the validation report so
    a caller can pinpoint the offending feature.
    """

    def __init__(
        self,
        message: str,
        errors: Optional[List[str]] = None,
        warnings: Optional[List[str]] = None,
        report: Any = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        """Initialize geolocation invalid error.

        Args:
            message: Error message
            errors: Validation errors
            warnings: Validation warnings
            report: ValidationReport that produced the failure
            context: Error context
        """
        self.errors = list(errors or [])
        self.warnings = list(warnings or [])
        self.report = report
        context = context or {}
        context["errors"] = self.errors
        context["warnings"] = self.warnings
        super().__init__(message, context=context)


class AreaCalculationFailed(GeolocationException):
    """Polygon area could not be computed (degenerate or malformed ring).

    Never fatal: the validator downgrades it to a warning.
    """

    def __init__(
        self,
        message: str,
        reason: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        context = context or {}
        if reason:
            context["reason"] = reason
        self.reason = reason
        super().__init__(message, context=context)


class InputTooLarge(GeolocationException):
    """Serialized geolocation input exceeds the configured size cap."""

    def __init__(
        self,
        message: str,
        size_bytes: Optional[int] = None,
        limit_bytes: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        """Initialize input too large error.

        Args:
            message: Error message
            size_bytes: Serialized size of the rejected input
            limit_bytes: Configured maximum size
            context: Error context
        """
        context = context or {}
        if size_bytes is not None:
            context["size_bytes"] = size_bytes
        if limit_bytes is not None:
            context["limit_bytes"] = limit_bytes
        self.size_bytes = size_bytes
        self.limit_bytes = limit_bytes
        super().__init__(message, context=context)


# ==============================================================================
# Utilities
# ==============================================================================

def format_exception_chain(exc: BaseException) -> str:
    """Format exception chain for logging/display.

    Args:
        exc: Exception to format

    Returns:
        Formatted string with full exception chain
    """
    lines = []
    current: Optional[BaseException] = exc

    while current is not None:
        if isinstance(current, AgriChainException):
            lines.append(str(current))
            lines.append(f"  Context: {current.context}")
        else:
            lines.append(f"{type(current).__name__}: {current}")
        current = current.__cause__

    return "\n".join(lines)


__all__ = [
    "AgriChainException",
    "GeolocationException",
    "MalformedGeometry",
    "GeolocationInvalid",
    "AreaCalculationFailed",
    "InputTooLarge",
    "format_exception_chain",
]
