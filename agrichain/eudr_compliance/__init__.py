# -*- coding: utf-8 -*-
"""
AgriChain EUDR Compliance Engine
================================

Validates externally supplied plot geolocation against the EU Deforestation
Regulation (Regulation (EU) 2023/1115), produces a deterministic hash for
ledger anchoring and assembles Due Diligence Statements (DDS) with a
computed risk classification. It supports:

- GeoJSON FeatureCollection, Feature and bare Point/Polygon input
- Coordinate precision, large-plot polygon, plot_id and bounds rules
- Geodesic polygon area (WGS84) with hole subtraction and centroids
- Canonical-JSON SHA-256 geolocation hashes
- Monotonic risk escalation with itemized mitigations
- Sensor reading buffering and aggregation
- SHA-256 provenance chain tracking
- Prometheus metrics
- Thread-safe configuration with AGRICHAIN_EUDR_ env prefix

Key Components:
    - config: EUDRComplianceConfig with AGRICHAIN_EUDR_ env prefix
    - models: Pydantic v2 models for all data structures
    - normalizer: GeometryNormalizer
    - validator: GeometryValidator
    - geometry: area, precision and centroid functions
    - hasher: canonical JSON and geolocation hash
    - risk_assessment: RiskAssessmentEngine
    - due_diligence: DueDiligenceEngine (statement assembler)
    - sensor_buffer: SensorBufferStore
    - provenance: SHA-256 chain-hashed audit trails
    - metrics: Prometheus metrics
    - setup: EUDRComplianceService facade

Example:
    >>> from agrichain.eudr_compliance import EUDRComplianceService
    >>> service = EUDRComplianceService()
    >>> report, geolocation_hash = service.validate_geolocation(geojson)
    >>> report.valid
    True
"""

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------
from agrichain.eudr_compliance.config import (
    EUDRComplianceConfig,
    get_config,
    set_config,
    reset_config,
)

# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------
from agrichain.eudr_compliance.models import (
    # Enumerations
    GeometryType,
    GeoInputKind,
    RiskLevel,
    DeforestationSource,
    LegalityDocumentType,
    ActivityType,
    # Geolocation
    PointGeometry,
    PolygonGeometry,
    PlotProperties,
    GeoFeature,
    GeoCollection,
    # Validation
    FeatureReport,
    ValidationReport,
    # Compliance facts
    DeforestationCheck,
    LegalityDocument,
    ComplianceFacts,
    HarvestPeriod,
    BatchDescriptors,
    # Risk
    Finding,
    RiskAssessment,
    # Statement
    DDSOperator,
    DDSProduct,
    DeforestationEvidence,
    LegalityDocumentReference,
    DDSDeclaration,
    DueDiligenceStatement,
    # Sensor buffer
    SensorReading,
    SensorAggregate,
)

# ---------------------------------------------------------------------------
# Engines
# ---------------------------------------------------------------------------
from agrichain.eudr_compliance.normalizer import GeometryNormalizer, classify_input
from agrichain.eudr_compliance.validator import GeometryValidator
from agrichain.eudr_compliance.geometry import (
    calculate_total_area,
    centroid,
    decimal_precision,
    enrich_with_area,
    min_decimal_precision,
    polygon_area_hectares,
)
from agrichain.eudr_compliance.hasher import (
    canonical_json,
    compute_geolocation_hash,
    verify_geolocation_hash,
)
from agrichain.eudr_compliance.risk_assessment import RiskAssessmentEngine
from agrichain.eudr_compliance.due_diligence import DueDiligenceEngine
from agrichain.eudr_compliance.sensor_buffer import SensorBufferStore
from agrichain.eudr_compliance.provenance import ProvenanceTracker

# ---------------------------------------------------------------------------
# Service facade
# ---------------------------------------------------------------------------
from agrichain.eudr_compliance.setup import EUDRComplianceService

__all__ = [
    # Configuration
    "EUDRComplianceConfig",
    "get_config",
    "set_config",
    "reset_config",
    # Enumerations
    "GeometryType",
    "GeoInputKind",
    "RiskLevel",
    "DeforestationSource",
    "LegalityDocumentType",
    "ActivityType",
    # Geolocation
    "PointGeometry",
    "PolygonGeometry",
    "PlotProperties",
    "GeoFeature",
    "GeoCollection",
    # Validation
    "FeatureReport",
    "ValidationReport",
    # Compliance facts
    "DeforestationCheck",
    "LegalityDocument",
    "ComplianceFacts",
    "HarvestPeriod",
    "BatchDescriptors",
    # Risk
    "Finding",
    "RiskAssessment",
    # Statement
    "DDSOperator",
    "DDSProduct",
    "DeforestationEvidence",
    "LegalityDocumentReference",
    "DDSDeclaration",
    "DueDiligenceStatement",
    # Sensor buffer
    "SensorReading",
    "SensorAggregate",
    # Engines
    "GeometryNormalizer",
    "classify_input",
    "GeometryValidator",
    "calculate_total_area",
    "centroid",
    "decimal_precision",
    "enrich_with_area",
    "min_decimal_precision",
    "polygon_area_hectares",
    "canonical_json",
    "compute_geolocation_hash",
    "verify_geolocation_hash",
    "RiskAssessmentEngine",
    "DueDiligenceEngine",
    "SensorBufferStore",
    "ProvenanceTracker",
    # Service facade
    "EUDRComplianceService",
]
