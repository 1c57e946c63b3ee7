# -*- coding: utf-8 -*-
"""
Due Diligence Engine - EUDR Compliance Engine

Assembles a Due Diligence Statement (DDS) per EUDR Article 4 from a batch's
raw geolocation, its compliance facts and the batch descriptors fetched by
the caller from the ledger and storage collaborators.

Generation pipeline:
    1. normalize the raw geolocation (MalformedGeometry / InputTooLarge)
    2. validate it; an invalid report aborts with GeolocationInvalid before
       any risk or hash computation
    3. derive total area, plot count and centroid
    4. assess risk
    5. hash the area-enriched collection
    6. build the immutable statement with fresh reference and verification
       numbers

Nothing is persisted here: the caller stores ``statement.to_json()`` and
anchors ``statement.geolocation_hash``.

Example:
    >>> from agrichain.eudr_compliance.due_diligence import DueDiligenceEngine
    >>> engine = DueDiligenceEngine()
    >>> dds = engine.generate_dds(42, facts, geojson, batch)
    >>> dds.dds_reference_number
    'DDS-1767225600000-000042'
"""

from __future__ import annotations

import logging
import secrets
import string
import time
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from agrichain.exceptions import GeolocationInvalid
from agrichain.eudr_compliance.config import EUDRComplianceConfig
from agrichain.eudr_compliance.geometry import (
    calculate_total_area,
    centroid,
    enrich_with_area,
)
from agrichain.eudr_compliance.hasher import compute_geolocation_hash
from agrichain.eudr_compliance.metrics import (
    observe_duration,
    record_dds_generated,
    record_processing_error,
)
from agrichain.eudr_compliance.models import (
    ActivityType,
    BatchDescriptors,
    ComplianceFacts,
    DDSDeclaration,
    DDSOperator,
    DDSProduct,
    DeforestationEvidence,
    DueDiligenceStatement,
    GeoCollection,
    LegalityDocumentReference,
)
from agrichain.eudr_compliance.normalizer import GeometryNormalizer
from agrichain.eudr_compliance.risk_assessment import RiskAssessmentEngine
from agrichain.eudr_compliance.validator import GeometryValidator

logger = logging.getLogger(__name__)

VERIFICATION_ALPHABET = string.ascii_uppercase + string.digits

UNKNOWN_OPERATOR = "Unknown Operator"


def _utcnow() -> datetime:
    """Return current UTC datetime with microseconds zeroed."""
    return datetime.now(timezone.utc).replace(microsecond=0)


def generate_reference_number(token_reference: int, now_ms: Optional[int] = None) -> str:
    """Return a DDS reference number ``DDS-<epoch-millis>-<token:06d>``."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"DDS-{now_ms}-{token_reference:06d}"


def generate_verification_number(length: int = 12) -> str:
    """Return a random security token of uppercase letters and digits."""
    return "".join(secrets.choice(VERIFICATION_ALPHABET) for _ in range(length))


class DueDiligenceEngine:
    """Statement assembler orchestrating normalization, validation and risk.

    Attributes:
        _config: EUDRComplianceConfig with product and statement defaults.
        _normalizer: GeometryNormalizer.
        _validator: GeometryValidator.
        _risk_engine: RiskAssessmentEngine.
        _hasher: Callable producing the geolocation digest of a collection.
    """

    def __init__(
        self,
        config: Optional[EUDRComplianceConfig] = None,
        normalizer: Optional[GeometryNormalizer] = None,
        validator: Optional[GeometryValidator] = None,
        risk_engine: Optional[RiskAssessmentEngine] = None,
        hasher: Optional[Callable[[GeoCollection], str]] = None,
    ) -> None:
        """Initialize DueDiligenceEngine.

        Args:
            config: Optional EUDRComplianceConfig; defaults are used if omitted.
            normalizer: Optional GeometryNormalizer.
            validator: Optional GeometryValidator.
            risk_engine: Optional RiskAssessmentEngine.
            hasher: Optional digest function; defaults to
                ``compute_geolocation_hash``.
        """
        self._config = config or EUDRComplianceConfig()
        self._normalizer = normalizer or GeometryNormalizer(self._config)
        self._validator = validator or GeometryValidator(self._config, self._normalizer)
        self._risk_engine = risk_engine or RiskAssessmentEngine()
        self._hasher = hasher or compute_geolocation_hash

    def generate_dds(
        self,
        token_reference: int,
        facts: ComplianceFacts,
        raw_geolocation: Any,
        batch: Optional[BatchDescriptors] = None,
    ) -> DueDiligenceStatement:
        """Generate a Due Diligence Statement for a batch.

        Args:
            token_reference: Ledger token identifier of the batch.
            facts: Compliance facts supplied by the caller.
            raw_geolocation: GeoJSON value (FeatureCollection, Feature or bare
                Point/Polygon geometry).
            batch: Batch descriptors; empty descriptors if omitted.

        Returns:
            Immutable DueDiligenceStatement.

        Raises:
            InputTooLarge: If the geolocation exceeds the size cap.
            MalformedGeometry: If the geolocation is not a recognized shape.
            GeolocationInvalid: If the geolocation fails validation.
        """
        start_time = time.monotonic()
        batch = batch or BatchDescriptors()
        cfg = self._config

        collection = self._normalizer.normalize(raw_geolocation)
        report = self._validator.validate(collection)
        if not report.valid:
            record_processing_error("statement", "geolocation_invalid")
            raise GeolocationInvalid(
                f"Geolocation validation failed with {len(report.errors)} error(s)",
                errors=report.errors,
                warnings=report.warnings,
                report=report,
                context={"token_reference": token_reference},
            )

        enriched = enrich_with_area(collection)
        total_area_ha = calculate_total_area(collection)
        plot_count = len(collection.features)
        center = centroid(collection)

        risk = self._risk_engine.assess(report, facts)
        geolocation_hash = self._hasher(enriched)

        check = facts.deforestation_check
        evidence = None
        if check is not None:
            evidence = DeforestationEvidence(
                source=check.source,
                checked_date=check.checked_date,
                evidence_locator=check.evidence_locator,
            )

        now = _utcnow()
        statement = DueDiligenceStatement(
            dds_reference_number=generate_reference_number(token_reference),
            verification_number=generate_verification_number(
                cfg.verification_number_length,
            ),
            company_internal_reference=batch.batch_id,
            activity_type=ActivityType(cfg.default_activity_type),
            operator=DDSOperator(
                name=batch.origin_farmers[0] if batch.origin_farmers else UNKNOWN_OPERATOR,
                address=batch.origin or cfg.country_of_production,
                country=cfg.default_operator_country,
            ),
            product=DDSProduct(
                hs_code=facts.hs_code or cfg.default_hs_code,
                commodity_name=facts.commodity_name or cfg.default_commodity_name,
                scientific_name=facts.scientific_name or cfg.default_scientific_name,
                description=batch.description or batch.name,
                quantity_net_mass_kg=facts.quantity_kg or 0.0,
            ),
            country_of_production=cfg.country_of_production,
            geolocation=enriched.to_geojson(),
            total_area_ha=total_area_ha,
            plot_count=plot_count,
            centroid=center,
            deforestation_free=check is not None and check.status is True,
            deforestation_evidence=evidence,
            legality_compliant=len(facts.legality_documents) > 0,
            legality_documents=[
                LegalityDocumentReference(
                    type=doc.type,
                    issuer=doc.issuer,
                    reference=doc.document_reference or doc.reference_hash,
                )
                for doc in facts.legality_documents
            ],
            risk_assessment=risk,
            declaration=DDSDeclaration(
                timestamp=now,
                attestation=cfg.attestation_text,
            ),
            token_reference=token_reference,
            geolocation_hash=geolocation_hash,
            metadata_locator=batch.metadata_locator or "",
            blockchain_network=cfg.blockchain_network,
            contract_address=cfg.contract_address,
            generated_at=now,
            generator_version=cfg.generator_version,
        )

        elapsed = time.monotonic() - start_time
        record_dds_generated(risk.level.value)
        observe_duration("generate_dds", elapsed)
        logger.info(
            "Generated DDS %s for token %d: plots=%d, area=%.3fha, risk=%s (%.1f ms)",
            statement.dds_reference_number, token_reference, plot_count,
            total_area_ha, risk.level.value, elapsed * 1000,
        )
        return statement


__all__ = [
    "DueDiligenceEngine",
    "UNKNOWN_OPERATOR",
    "VERIFICATION_ALPHABET",
    "generate_reference_number",
    "generate_verification_number",
]
