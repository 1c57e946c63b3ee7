# -*- coding: utf-8 -*-
"""
EUDR Compliance Engine Configuration

Centralized configuration for the EUDR compliance engine covering:
- Geolocation rules: coordinate precision, large-plot polygon threshold,
  coordinate bounds enforcement, input size cap
- Product defaults: HS code, commodity and scientific name
- Statement defaults: activity type, country of production, operator country,
  attestation text, generator version, verification number length
- Ledger references: blockchain network label and contract address
- Sensor aggregation: carbon estimate per buffered reading
- Logging level

All settings can be overridden via environment variables with the
``AGRICHAIN_EUDR_`` prefix (e.g. ``AGRICHAIN_EUDR_MIN_COORDINATE_PRECISION``).

Example:
    >>> from agrichain.eudr_compliance.config import get_config
    >>> cfg = get_config()
    >>> print(cfg.min_coordinate_precision, cfg.large_plot_threshold_ha)
    6 4.0
"""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass
from typing import Any, Optional

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Environment variable prefix
# ---------------------------------------------------------------------------

_ENV_PREFIX = "AGRICHAIN_EUDR_"

DEFAULT_ATTESTATION_TEXT = (
    "I confirm that due diligence was conducted in accordance with "
    "Regulation (EU) 2023/1115 and the risk is assessed as indicated above."
)


# ---------------------------------------------------------------------------
# EUDRComplianceConfig
# ---------------------------------------------------------------------------


@dataclass
class EUDRComplianceConfig:
    """Complete configuration for the AgriChain EUDR compliance engine.

    Attributes:
        min_coordinate_precision: Minimum decimal places required on every
            coordinate value.
        large_plot_threshold_ha: Declared plot size (inclusive) from which
            Polygon geometry is mandatory.
        max_geojson_size_bytes: Maximum serialized size of geolocation input.
        enforce_coordinate_bounds: Reject longitudes outside [-180, 180] and
            latitudes outside [-90, 90].
        default_hs_code: HS code used when the facts omit one.
        default_commodity_name: Commodity name used when the facts omit one.
        default_scientific_name: Scientific name used when the facts omit one.
        default_activity_type: Activity type declared on generated statements.
        country_of_production: ISO alpha-2 country of production.
        default_operator_country: ISO alpha-2 country of the operator.
        blockchain_network: Label of the ledger the statements reference.
        contract_address: Address of the traceability contract.
        attestation_text: Declaration text embedded in every statement.
        generator_version: Version stamped on generated statements.
        verification_number_length: Length of the statement security token.
        sensor_carbon_grams_per_reading: Carbon estimate per buffered reading.
        log_level: Logging level for the ``agrichain`` logger.
    """

    # -- Geolocation rules ---------------------------------------------------
    min_coordinate_precision: int = 6
    large_plot_threshold_ha: float = 4.0
    max_geojson_size_bytes: int = 5 * 1024 * 1024
    enforce_coordinate_bounds: bool = True

    # -- Product defaults ----------------------------------------------------
    default_hs_code: str = "180100"
    default_commodity_name: str = "cocoa beans"
    default_scientific_name: str = "Theobroma cacao"

    # -- Statement defaults --------------------------------------------------
    default_activity_type: str = "EXPORT"
    country_of_production: str = "NG"
    default_operator_country: str = "NG"
    attestation_text: str = DEFAULT_ATTESTATION_TEXT
    generator_version: str = "1.0.0"
    verification_number_length: int = 12

    # -- Ledger references ---------------------------------------------------
    blockchain_network: str = "Base"
    contract_address: str = ""

    # -- Sensor aggregation --------------------------------------------------
    sensor_carbon_grams_per_reading: float = 10.0

    # -- Logging -------------------------------------------------------------
    log_level: str = "INFO"

    # ------------------------------------------------------------------
    # Factory helpers
    # ------------------------------------------------------------------

    @classmethod
    def from_env(cls) -> EUDRComplianceConfig:
        """Build an EUDRComplianceConfig from environment variables.

        Every field can be overridden via ``AGRICHAIN_EUDR_<FIELD_UPPER>``.
        Boolean values accept ``true/1/yes`` (case-insensitive).
        Integer values are parsed via ``int()``.
        Float values are parsed via ``float()``.

        Returns:
            Populated EUDRComplianceConfig instance.
        """
        prefix = _ENV_PREFIX

        def _env(name: str, default: Any = None) -> Optional[str]:
            return os.environ.get(f"{prefix}{name}", default)

        def _bool(name: str, default: bool) -> bool:
            val = _env(name)
            if val is None:
                return default
            return val.lower() in ("true", "1", "yes")

        def _int(name: str, default: int) -> int:
            val = _env(name)
            if val is None:
                return default
            try:
                return int(val)
            except ValueError:
                logger.warning(
                    "Invalid integer for %s%s=%s, using default %d",
                    prefix, name, val, default,
                )
                return default

        def _float(name: str, default: float) -> float:
            val = _env(name)
            if val is None:
                return default
            try:
                return float(val)
            except ValueError:
                logger.warning(
                    "Invalid float for %s%s=%s, using default %f",
                    prefix, name, val, default,
                )
                return default

        def _str(name: str, default: str) -> str:
            val = _env(name)
            if val is None:
                return default
            return val

        config = cls(
            min_coordinate_precision=_int(
                "MIN_COORDINATE_PRECISION", cls.min_coordinate_precision,
            ),
            large_plot_threshold_ha=_float(
                "LARGE_PLOT_THRESHOLD_HA", cls.large_plot_threshold_ha,
            ),
            max_geojson_size_bytes=_int(
                "MAX_GEOJSON_SIZE_BYTES", cls.max_geojson_size_bytes,
            ),
            enforce_coordinate_bounds=_bool(
                "ENFORCE_COORDINATE_BOUNDS", cls.enforce_coordinate_bounds,
            ),
            default_hs_code=_str("DEFAULT_HS_CODE", cls.default_hs_code),
            default_commodity_name=_str(
                "DEFAULT_COMMODITY_NAME", cls.default_commodity_name,
            ),
            default_scientific_name=_str(
                "DEFAULT_SCIENTIFIC_NAME", cls.default_scientific_name,
            ),
            default_activity_type=_str(
                "DEFAULT_ACTIVITY_TYPE", cls.default_activity_type,
            ),
            country_of_production=_str(
                "COUNTRY_OF_PRODUCTION", cls.country_of_production,
            ),
            default_operator_country=_str(
                "DEFAULT_OPERATOR_COUNTRY", cls.default_operator_country,
            ),
            attestation_text=_str("ATTESTATION_TEXT", cls.attestation_text),
            generator_version=_str(
                "GENERATOR_VERSION", cls.generator_version,
            ),
            verification_number_length=_int(
                "VERIFICATION_NUMBER_LENGTH", cls.verification_number_length,
            ),
            blockchain_network=_str(
                "BLOCKCHAIN_NETWORK", cls.blockchain_network,
            ),
            contract_address=_str("CONTRACT_ADDRESS", cls.contract_address),
            sensor_carbon_grams_per_reading=_float(
                "SENSOR_CARBON_GRAMS_PER_READING",
                cls.sensor_carbon_grams_per_reading,
            ),
            log_level=_str("LOG_LEVEL", cls.log_level),
        )

        logger.info(
            "EUDRComplianceConfig loaded: precision=%d, "
            "polygon_threshold=%.1fha, max_size=%dB, bounds=%s, "
            "hs_code=%s, activity=%s, country=%s, network=%s",
            config.min_coordinate_precision,
            config.large_plot_threshold_ha,
            config.max_geojson_size_bytes,
            config.enforce_coordinate_bounds,
            config.default_hs_code,
            config.default_activity_type,
            config.country_of_production,
            config.blockchain_network,
        )
        return config


# ---------------------------------------------------------------------------
# Thread-safe singleton accessor
# ---------------------------------------------------------------------------

_config_instance: Optional[EUDRComplianceConfig] = None
_config_lock = threading.Lock()


def get_config() -> EUDRComplianceConfig:
    """Return the singleton EUDRComplianceConfig, creating from env if needed.

    Returns:
        EUDRComplianceConfig singleton instance.
    """
    global _config_instance
    if _config_instance is None:
        with _config_lock:
            if _config_instance is None:
                _config_instance = EUDRComplianceConfig.from_env()
    return _config_instance


def set_config(config: EUDRComplianceConfig) -> None:
    """Replace the singleton EUDRComplianceConfig (useful for testing).

    Args:
        config: New configuration to install.
    """
    global _config_instance
    with _config_lock:
        _config_instance = config
    logger.info("EUDRComplianceConfig replaced programmatically")


def reset_config() -> None:
    """Reset the singleton (primarily for test teardown)."""
    global _config_instance
    with _config_lock:
        _config_instance = None


__all__ = [
    "DEFAULT_ATTESTATION_TEXT",
    "EUDRComplianceConfig",
    "get_config",
    "set_config",
    "reset_config",
]
