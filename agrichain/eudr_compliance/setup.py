# -*- coding: utf-8 -*-
"""
EUDR Compliance Service Facade - AgriChain

Provides the main service class composing the compliance engines:
- EUDRComplianceService: single entry point for the validate, mint/update,
  risk, statement and sensor workflows, with provenance and logging

The engines themselves stay pure; the facade owns the provenance log and
the sensor buffer store.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional, Tuple

from agrichain.exceptions import (
    AgriChainException,
    GeolocationInvalid,
    InputTooLarge,
    MalformedGeometry,
    format_exception_chain,
)
from agrichain.eudr_compliance.config import EUDRComplianceConfig
from agrichain.eudr_compliance.due_diligence import DueDiligenceEngine
from agrichain.eudr_compliance.geometry import enrich_with_area
from agrichain.eudr_compliance.hasher import compute_geolocation_hash
from agrichain.eudr_compliance.metrics import observe_duration, record_processing_error
from agrichain.eudr_compliance.models import (
    BatchDescriptors,
    ComplianceFacts,
    DueDiligenceStatement,
    GeoCollection,
    RiskAssessment,
    SensorAggregate,
    SensorReading,
    ValidationReport,
)
from agrichain.eudr_compliance.normalizer import GeometryNormalizer
from agrichain.eudr_compliance.provenance import ProvenanceTracker
from agrichain.eudr_compliance.risk_assessment import RiskAssessmentEngine
from agrichain.eudr_compliance.sensor_buffer import SensorBufferStore
from agrichain.eudr_compliance.validator import GeometryValidator

logger = logging.getLogger(__name__)


class EUDRComplianceService:
    """Facade composing all EUDR compliance engines.

    Attributes:
        config: EUDRComplianceConfig instance.
        normalizer: GeometryNormalizer instance.
        validator: GeometryValidator instance.
        risk_assessment: RiskAssessmentEngine instance.
        due_diligence: DueDiligenceEngine instance.
        provenance: ProvenanceTracker instance.
        sensor_buffer: SensorBufferStore instance.
    """

    def __init__(
        self,
        config: Optional[EUDRComplianceConfig] = None,
        provenance: Optional[ProvenanceTracker] = None,
        sensor_buffer: Optional[SensorBufferStore] = None,
    ):
        """Initialize the EUDR Compliance Service with all engines.

        Args:
            config: EUDRComplianceConfig instance. If None, loads from env.
            provenance: Optional ProvenanceTracker to share.
            sensor_buffer: Optional SensorBufferStore to share.
        """
        if config is None:
            from agrichain.eudr_compliance.config import get_config
            config = get_config()

        self.config = config
        logging.getLogger("agrichain").setLevel(config.log_level.upper())

        self.normalizer = GeometryNormalizer(config)
        self.validator = GeometryValidator(config, self.normalizer)
        self.risk_assessment = RiskAssessmentEngine()
        self.due_diligence = DueDiligenceEngine(
            config=config,
            normalizer=self.normalizer,
            validator=self.validator,
            risk_engine=self.risk_assessment,
        )
        self.provenance = provenance or ProvenanceTracker()
        self.sensor_buffer = sensor_buffer or SensorBufferStore(
            config.sensor_carbon_grams_per_reading,
        )

        logger.info("EUDRComplianceService initialized")

    # =========================================================================
    # Geolocation
    # =========================================================================

    def validate_geolocation(self, raw: Any) -> Tuple[ValidationReport, Optional[str]]:
        """Validate geolocation input without raising.

        Args:
            raw: Parsed GeoJSON value of any accepted shape.

        Returns:
            Tuple of (report, geolocation hash). The hash is that of the
            area-enriched collection, i.e. the value a mint would anchor,
            and is None when the report is invalid.
        """
        try:
            collection = self.normalizer.normalize(raw)
        except (MalformedGeometry, InputTooLarge) as exc:
            report = self.validator.rejection_report(exc)
        else:
            report = self.validator.validate(collection)

        geolocation_hash = None
        if report.valid:
            geolocation_hash = compute_geolocation_hash(enrich_with_area(collection))

        self.provenance.record(
            "geolocation_validation",
            geolocation_hash or "rejected",
            "validate",
            self.provenance.build_hash(report.model_dump(mode="json")),
        )
        return report, geolocation_hash

    def prepare_geolocation(self, raw: Any) -> Tuple[GeoCollection, str]:
        """Prepare geolocation for anchoring on the ledger.

        Normalizes and validates the input, enriches Polygon features with
        their computed area and hashes the result.

        Args:
            raw: Parsed GeoJSON value of any accepted shape.

        Returns:
            Tuple of (enriched collection, geolocation hash).

        Raises:
            InputTooLarge: If the input exceeds the size cap.
            MalformedGeometry: If the input is not a recognized shape.
            GeolocationInvalid: If the geolocation fails validation.
        """
        start_time = time.monotonic()
        try:
            collection = self.normalizer.normalize(raw)
            report = self.validator.validate(collection)
            if not report.valid:
                raise GeolocationInvalid(
                    "Invalid EUDR geolocation data",
                    errors=report.errors,
                    warnings=report.warnings,
                    report=report,
                )
        except AgriChainException as exc:
            record_processing_error("service", exc.error_code)
            logger.error("Geolocation rejected: %s", format_exception_chain(exc))
            raise

        enriched = enrich_with_area(collection)
        geolocation_hash = compute_geolocation_hash(enriched)
        self.provenance.record(
            "geolocation_hash", geolocation_hash, "hash", geolocation_hash[2:],
        )

        elapsed = time.monotonic() - start_time
        observe_duration("prepare_geolocation", elapsed)
        logger.info(
            "Prepared geolocation %s: features=%d, area=%.3fha (%.1f ms)",
            geolocation_hash[:18], report.feature_count,
            report.total_area_ha, elapsed * 1000,
        )
        return enriched, geolocation_hash

    # =========================================================================
    # Risk Assessment
    # =========================================================================

    def assess_risk(
        self,
        report: ValidationReport,
        facts: ComplianceFacts,
    ) -> RiskAssessment:
        """Assess risk. Delegates to RiskAssessmentEngine.

        Args:
            report: Geolocation validation report.
            facts: Compliance facts.

        Returns:
            RiskAssessment instance.
        """
        assessment = self.risk_assessment.assess(report, facts)
        data_hash = self.provenance.build_hash(assessment.model_dump(mode="json"))
        self.provenance.record("risk_assessment", data_hash, "assess", data_hash)
        return assessment

    # =========================================================================
    # Due Diligence Statements
    # =========================================================================

    def generate_dds(
        self,
        token_reference: int,
        facts: ComplianceFacts,
        raw_geolocation: Any,
        batch: Optional[BatchDescriptors] = None,
    ) -> DueDiligenceStatement:
        """Generate a statement and record it in the provenance log.

        Args:
            token_reference: Ledger token identifier of the batch.
            facts: Compliance facts.
            raw_geolocation: Parsed GeoJSON value of any accepted shape.
            batch: Batch descriptors fetched by the caller.

        Returns:
            DueDiligenceStatement instance.

        Raises:
            InputTooLarge, MalformedGeometry, GeolocationInvalid: As raised
                by DueDiligenceEngine.generate_dds.
        """
        statement = self._build_statement(token_reference, facts, raw_geolocation, batch)
        self.provenance.record(
            "dds_generation",
            str(token_reference),
            "generate",
            self.provenance.build_hash(statement.model_dump(mode="json")),
        )
        return statement

    def preview_dds(
        self,
        token_reference: int,
        facts: ComplianceFacts,
        raw_geolocation: Any,
        batch: Optional[BatchDescriptors] = None,
    ) -> DueDiligenceStatement:
        """Build a statement for review without recording it."""
        return self._build_statement(token_reference, facts, raw_geolocation, batch)

    def export_dds_json(self, statement: DueDiligenceStatement) -> str:
        """Serialize a statement for the storage collaborator."""
        return statement.to_json()

    # =========================================================================
    # Sensor Data
    # =========================================================================

    def record_sensor_reading(self, token_reference: int, reading: SensorReading) -> int:
        """Buffer a sensor reading. Delegates to SensorBufferStore.

        Returns:
            Number of readings pending for the token.
        """
        return self.sensor_buffer.add(token_reference, reading)

    def aggregate_sensor_data(self, token_reference: int) -> SensorAggregate:
        """Aggregate and clear the readings buffered for a token.

        Raises:
            LookupError: If no readings are buffered for the token.
        """
        aggregate = self.sensor_buffer.aggregate(token_reference)
        self.provenance.record(
            "sensor_aggregation",
            str(token_reference),
            "aggregate",
            self.provenance.build_hash(aggregate.model_dump(mode="json")),
        )
        return aggregate

    # =========================================================================
    # Statistics
    # =========================================================================

    def get_statistics(self) -> Dict[str, Any]:
        """Get service statistics.

        Returns:
            Dictionary with provenance and buffer counts.
        """
        return {
            "service": "agrichain-eudr-compliance",
            "generator_version": self.config.generator_version,
            "provenance_entries": self.provenance.entry_count,
            "buffered_tokens": self.sensor_buffer.token_count,
        }

    # =========================================================================
    # Internal helpers
    # =========================================================================

    def _build_statement(
        self,
        token_reference: int,
        facts: ComplianceFacts,
        raw_geolocation: Any,
        batch: Optional[BatchDescriptors],
    ) -> DueDiligenceStatement:
        try:
            return self.due_diligence.generate_dds(
                token_reference, facts, raw_geolocation, batch,
            )
        except AgriChainException as exc:
            record_processing_error("service", exc.error_code)
            logger.error(
                "DDS generation failed for token %d: %s",
                token_reference, format_exception_chain(exc),
            )
            raise


__all__ = [
    "EUDRComplianceService",
]
