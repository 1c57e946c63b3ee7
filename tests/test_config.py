# -*- coding: utf-8 -*-
"""Tests for EUDRComplianceConfig and the singleton accessors."""

from agrichain.eudr_compliance.config import (
    EUDRComplianceConfig,
    get_config,
    reset_config,
    set_config,
)


class TestEUDRComplianceConfig:
    """Tests for configuration defaults and env overrides."""

    def test_defaults(self):
        """Defaults encode the EUDR geolocation rules."""
        cfg = EUDRComplianceConfig()
        assert cfg.min_coordinate_precision == 6
        assert cfg.large_plot_threshold_ha == 4.0
        assert cfg.max_geojson_size_bytes == 5 * 1024 * 1024
        assert cfg.enforce_coordinate_bounds is True
        assert cfg.default_hs_code == "180100"
        assert cfg.verification_number_length == 12

    def test_from_env_overrides(self, monkeypatch):
        """AGRICHAIN_EUDR_ variables override defaults."""
        monkeypatch.setenv("AGRICHAIN_EUDR_MIN_COORDINATE_PRECISION", "5")
        monkeypatch.setenv("AGRICHAIN_EUDR_LARGE_PLOT_THRESHOLD_HA", "2.5")
        monkeypatch.setenv("AGRICHAIN_EUDR_ENFORCE_COORDINATE_BOUNDS", "no")
        monkeypatch.setenv("AGRICHAIN_EUDR_COUNTRY_OF_PRODUCTION", "GH")

        cfg = EUDRComplianceConfig.from_env()
        assert cfg.min_coordinate_precision == 5
        assert cfg.large_plot_threshold_ha == 2.5
        assert cfg.enforce_coordinate_bounds is False
        assert cfg.country_of_production == "GH"

    def test_from_env_invalid_number_keeps_default(self, monkeypatch):
        """Unparseable numbers fall back to the default."""
        monkeypatch.setenv("AGRICHAIN_EUDR_MAX_GEOJSON_SIZE_BYTES", "lots")
        monkeypatch.setenv("AGRICHAIN_EUDR_SENSOR_CARBON_GRAMS_PER_READING", "x")

        cfg = EUDRComplianceConfig.from_env()
        assert cfg.max_geojson_size_bytes == 5 * 1024 * 1024
        assert cfg.sensor_carbon_grams_per_reading == 10.0


class TestConfigSingleton:
    """Tests for get_config / set_config / reset_config."""

    def test_get_config_returns_same_instance(self):
        """get_config caches the instance."""
        assert get_config() is get_config()

    def test_set_and_reset(self):
        """set_config installs an instance; reset_config drops it."""
        custom = EUDRComplianceConfig(min_coordinate_precision=4)
        set_config(custom)
        assert get_config() is custom

        reset_config()
        assert get_config() is not custom
