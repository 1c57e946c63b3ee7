# -*- coding: utf-8 -*-
"""
EUDR Compliance Engine Data Models

Pydantic v2 data models for the AgriChain EUDR compliance engine. Defines
the enumerations, geolocation models, validation report, compliance facts,
risk assessment, and the Due Diligence Statement (DDS) record.

EU Deforestation Regulation (EUDR - Regulation (EU) 2023/1115) requires
operators placing specific commodities on the EU market to geolocate every
plot of production, to demonstrate that products are deforestation-free and
legally produced, and to file a due diligence statement.

Models:
    - Enumerations: GeometryType, GeoInputKind, RiskLevel, DeforestationSource,
        LegalityDocumentType, ActivityType
    - Geolocation: PointGeometry, PolygonGeometry, PlotProperties, GeoFeature,
        GeoCollection
    - Validation: FeatureReport, ValidationReport
    - Compliance facts: DeforestationCheck, LegalityDocument, ComplianceFacts,
        HarvestPeriod, BatchDescriptors
    - Risk: Finding, RiskAssessment
    - Statement: DDSOperator, DDSProduct, DeforestationEvidence,
        LegalityDocumentReference, DDSDeclaration, DueDiligenceStatement
    - Sensor buffer: SensorReading, SensorAggregate
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Tuple, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictInt,
    StrictStr,
    field_validator,
    model_validator,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _utcnow() -> datetime:
    """Return current UTC datetime with microseconds zeroed."""
    return datetime.now(timezone.utc).replace(microsecond=0)


# =============================================================================
# Enumerations
# =============================================================================


class GeometryType(str, Enum):
    """Geometry types accepted for EUDR plot geolocation."""

    POINT = "Point"
    POLYGON = "Polygon"


class GeoInputKind(str, Enum):
    """Shapes of geolocation input accepted by the normalizer."""

    FEATURE_COLLECTION = "FeatureCollection"
    FEATURE = "Feature"
    BARE_GEOMETRY = "BareGeometry"


class RiskLevel(str, Enum):
    """Risk classification assigned to a batch in its due diligence statement.

    Levels are ordered by severity:
    negligible < low < standard < non-negligible.
    """

    NEGLIGIBLE = "negligible"
    LOW = "low"
    STANDARD = "standard"
    NON_NEGLIGIBLE = "non-negligible"

    @property
    def severity(self) -> int:
        """Rank of this level in the severity ordering (0 = least severe)."""
        return _RISK_SEVERITY[self]

    @classmethod
    def escalate(cls, current: RiskLevel, proposed: RiskLevel) -> RiskLevel:
        """Return the more severe of ``current`` and ``proposed``."""
        if proposed.severity > current.severity:
            return proposed
        return current


_RISK_SEVERITY: Dict[RiskLevel, int] = {
    RiskLevel.NEGLIGIBLE: 0,
    RiskLevel.LOW: 1,
    RiskLevel.STANDARD: 2,
    RiskLevel.NON_NEGLIGIBLE: 3,
}


class DeforestationSource(str, Enum):
    """Source of a deforestation-free verification."""

    MANUAL = "manual"
    GLOBAL_FOREST_WATCH = "global_forest_watch"
    SATELLITE = "satellite"
    OTHER = "other"


class LegalityDocumentType(str, Enum):
    """Legality evidence document types recognised in a DDS."""

    LAND_TENURE = "land_tenure"
    HARVEST_PERMIT = "harvest_permit"
    EXPORT_LICENSE = "export_license"
    TAX_COMPLIANCE = "tax_compliance"
    PHYTOSANITARY_CERTIFICATE = "phytosanitary_certificate"
    OTHER = "other"


class ActivityType(str, Enum):
    """Market activity declared in Box 2 of the statement."""

    IMPORT = "IMPORT"
    EXPORT = "EXPORT"
    DOMESTIC_PRODUCTION = "DOMESTIC_PRODUCTION"
    TRADE = "TRADE"
    PLACING_ON_MARKET = "PLACING_ON_MARKET"


# =============================================================================
# Geolocation Models
# =============================================================================

#: A single coordinate value: an int or a finite float, never a bool or str.
Coordinate = Union[
    StrictInt,
    Annotated[float, Field(strict=True, allow_inf_nan=False)],
]

#: A GeoJSON position: [longitude, latitude] with an optional altitude.
Position = Annotated[List[Coordinate], Field(min_length=2, max_length=3)]


class PointGeometry(BaseModel):
    """GeoJSON Point geometry for a plot below the polygon threshold."""

    type: Literal["Point"] = "Point"
    coordinates: Position = Field(
        ...,
        description="[longitude, latitude] of the plot (WGS84)",
    )


class PolygonGeometry(BaseModel):
    """GeoJSON Polygon geometry: an outer ring followed by optional holes."""

    type: Literal["Polygon"] = "Polygon"
    coordinates: List[List[Position]] = Field(
        ...,
        min_length=1,
        description=(
            "Linear rings of [longitude, latitude] positions; the first ring "
            "is the outer boundary, any further rings are holes"
        ),
    )


class PlotProperties(BaseModel):
    """Properties attached to a plot feature.

    Unknown keys are preserved so the hashed document matches what the
    operator supplied. Only ``plot_id`` and ``area_ha`` are type-checked;
    the other properties are informational and accept any JSON value.

    Attributes:
        plot_id: Unique persistent identifier of the plot.
        farm_id: Parent farm identifier.
        area_ha: Declared or computed plot area in hectares.
        farmer_name: Farmer or owner name.
    """

    model_config = ConfigDict(extra="allow")

    plot_id: Optional[Union[StrictStr, StrictInt]] = Field(
        None,
        description="Unique persistent identifier of the plot",
    )
    farm_id: Any = Field(
        None,
        description="Parent farm identifier (informational, any JSON value)",
    )
    area_ha: Optional[float] = Field(
        None,
        ge=0.0,
        description="Declared or computed plot area in hectares",
    )
    farmer_name: Any = Field(
        None,
        description="Farmer or owner name (informational, any JSON value)",
    )


class GeoFeature(BaseModel):
    """A plot: one GeoJSON Feature with Point or Polygon geometry."""

    model_config = ConfigDict(extra="allow")

    type: Literal["Feature"] = "Feature"
    geometry: Annotated[
        Union[PointGeometry, PolygonGeometry],
        Field(discriminator="type"),
    ]
    properties: PlotProperties = Field(default_factory=PlotProperties)

    @field_validator("properties", mode="before")
    @classmethod
    def validate_properties(cls, v: Any) -> Any:
        """GeoJSON allows ``"properties": null``; treat it as empty."""
        if v is None:
            return {}
        return v


class GeoCollection(BaseModel):
    """Canonical FeatureCollection produced by the normalizer.

    Features are kept as the raw mappings supplied by the caller, in their
    original order, so that broken members can still be diagnosed by index.
    """

    model_config = ConfigDict(extra="allow")

    type: Literal["FeatureCollection"] = "FeatureCollection"
    features: List[Any] = Field(
        default_factory=list,
        description="Raw feature mappings in insertion order",
    )

    def to_geojson(self) -> Dict[str, Any]:
        """Return the collection as a plain GeoJSON mapping."""
        return self.model_dump()


# =============================================================================
# Validation Report
# =============================================================================


class FeatureReport(BaseModel):
    """Per-feature diagnostics for a feature that passed structural checks."""

    index: int = Field(..., ge=0, description="Position in the collection")
    geometry_type: GeometryType = Field(..., description="Point or Polygon")
    area_ha: Optional[float] = Field(
        None,
        description="Computed polygon area in hectares",
    )
    plot_id: Optional[str] = Field(None, description="Plot identifier")
    coordinate_precision: int = Field(
        ...,
        ge=0,
        description="Minimum decimal places across all coordinate values",
    )


class ValidationReport(BaseModel):
    """Outcome of validating a GeoCollection against EUDR geolocation rules.

    Attributes:
        valid: True iff no errors were recorded.
        errors: Rule violations, each prefixed with the feature index.
        warnings: Advisory findings that never affect validity.
        features: Diagnostics for features that passed structural checks.
        total_area_ha: Sum of polygon areas, rounded to 3 decimals.
        polygon_required_count: Point features at or above the polygon threshold.
        feature_count: Number of members in the validated collection.
    """

    valid: bool
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    features: List[FeatureReport] = Field(default_factory=list)
    total_area_ha: float = Field(default=0.0, ge=0.0)
    polygon_required_count: int = Field(default=0, ge=0)
    feature_count: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def validate_validity_matches_errors(self) -> ValidationReport:
        """Ensure ``valid`` agrees with the presence of errors."""
        if self.valid != (len(self.errors) == 0):
            raise ValueError(
                f"valid={self.valid} is inconsistent with "
                f"{len(self.errors)} recorded error(s)"
            )
        return self

    @property
    def all_plots_identified(self) -> bool:
        """True when every feature in the collection carries a plot_id."""
        return (
            self.feature_count > 0
            and len(self.features) == self.feature_count
            and all(f.plot_id for f in self.features)
        )


# =============================================================================
# Compliance Facts
# =============================================================================


class DeforestationCheck(BaseModel):
    """Result of an external deforestation-free verification."""

    status: bool = Field(
        ...,
        description="True when the plots are verified deforestation-free",
    )
    checked_date: str = Field(..., description="ISO 8601 date of the check")
    source: DeforestationSource = Field(
        default=DeforestationSource.MANUAL,
        description="Verification source",
    )
    evidence_locator: Optional[str] = Field(
        None,
        description="Storage locator of the evidence (report, screenshot)",
    )
    notes: Optional[str] = None


class LegalityDocument(BaseModel):
    """Reference to an uploaded legality document."""

    type: LegalityDocumentType = Field(..., description="Document category")
    issuer: str = Field(..., description="Issuing authority")
    issue_date: str = Field(..., description="ISO 8601 issue date")
    expiry_date: Optional[str] = Field(None, description="ISO 8601 expiry date")
    reference_hash: str = Field(
        ...,
        description="Content hash or locator of the stored document",
    )
    document_reference: Optional[str] = Field(
        None,
        description="Official document number",
    )

    @field_validator("issuer")
    @classmethod
    def validate_issuer(cls, v: str) -> str:
        """Validate issuer is non-empty."""
        if not v or not v.strip():
            raise ValueError("issuer must be non-empty")
        return v


class ComplianceFacts(BaseModel):
    """Externally supplied compliance facts for a batch."""

    deforestation_check: Optional[DeforestationCheck] = None
    legality_documents: List[LegalityDocument] = Field(default_factory=list)
    hs_code: Optional[str] = Field(None, description="Harmonized System code")
    commodity_name: Optional[str] = Field(None, description="e.g. cocoa beans")
    scientific_name: Optional[str] = Field(None, description="e.g. Theobroma cacao")
    quantity_kg: Optional[float] = Field(
        None,
        ge=0.0,
        description="Net mass of the batch in kilograms",
    )


class HarvestPeriod(BaseModel):
    """Harvest window of a batch."""

    start_date: str
    end_date: str


class BatchDescriptors(BaseModel):
    """Batch facts fetched from the ledger and storage collaborators."""

    batch_id: Optional[str] = Field(None, description="Company internal reference")
    name: Optional[str] = None
    description: Optional[str] = None
    origin: Optional[str] = Field(None, description="Origin address or region")
    supplier_id: Optional[str] = None
    origin_farmers: List[str] = Field(default_factory=list)
    metadata_locator: Optional[str] = Field(
        None,
        description="Locator of the batch metadata document in storage",
    )
    harvest_period: Optional[HarvestPeriod] = None


# =============================================================================
# Risk Models
# =============================================================================


class Finding(BaseModel):
    """A single risk finding proposed by one assessment rule."""

    model_config = ConfigDict(frozen=True)

    level: RiskLevel
    mitigation: str
    rule: str


class RiskAssessment(BaseModel):
    """Risk classification of a batch with the measures required to mitigate it."""

    level: RiskLevel = Field(default=RiskLevel.NEGLIGIBLE)
    mitigations: List[str] = Field(default_factory=list)
    assessed_at: datetime = Field(default_factory=_utcnow)


# =============================================================================
# Due Diligence Statement
# =============================================================================


class DDSOperator(BaseModel):
    """Box 3: operator placing the products on the market."""

    name: str
    address: str
    country: str = Field(..., min_length=2, max_length=2)
    eori_number: Optional[str] = None


class DDSProduct(BaseModel):
    """Box 4: product descriptors."""

    hs_code: str
    commodity_name: str
    scientific_name: Optional[str] = None
    description: Optional[str] = None
    quantity_net_mass_kg: float = Field(default=0.0, ge=0.0)


class DeforestationEvidence(BaseModel):
    """Box 6: evidence behind the deforestation-free declaration."""

    source: DeforestationSource
    checked_date: str
    evidence_locator: Optional[str] = None


class LegalityDocumentReference(BaseModel):
    """Box 7: legality document as referenced in the statement."""

    type: LegalityDocumentType
    issuer: str
    reference: Optional[str] = None


class DDSDeclaration(BaseModel):
    """Operator declaration closing the statement."""

    timestamp: datetime
    attestation: str


class DueDiligenceStatement(BaseModel):
    """Due Diligence Statement (DDS) following the TRACES / Annex II boxes.

    Immutable once built; a fresh statement is assembled for every
    generation request.
    """

    model_config = ConfigDict(frozen=True)

    # Box 1: References
    dds_reference_number: str
    verification_number: str
    company_internal_reference: Optional[str] = None

    # Box 2: Activity
    activity_type: ActivityType
    upstream_dds_references: List[str] = Field(default_factory=list)

    # Box 3: Operator
    operator: DDSOperator

    # Box 4: Product
    product: DDSProduct

    # Box 5: Origin & Geolocation
    country_of_production: str
    geolocation: Dict[str, Any]
    total_area_ha: float = Field(..., ge=0.0)
    plot_count: int = Field(..., ge=0)
    centroid: Tuple[float, float]

    # Box 6: Deforestation Status
    deforestation_free: bool
    deforestation_evidence: Optional[DeforestationEvidence] = None

    # Box 7: Legality Status
    legality_compliant: bool
    legality_documents: List[LegalityDocumentReference] = Field(default_factory=list)

    # Box 8: Risk Assessment
    risk_assessment: RiskAssessment

    # Declaration
    declaration: DDSDeclaration

    # Ledger references
    token_reference: int = Field(..., ge=0)
    geolocation_hash: str
    metadata_locator: str = ""
    blockchain_network: str
    contract_address: str = ""

    # Generation info
    generated_at: datetime
    generator_version: str

    def to_json(self) -> str:
        """Serialize the statement for the storage collaborator."""
        return self.model_dump_json(indent=2)


# =============================================================================
# Sensor Buffer Models
# =============================================================================


class SensorReading(BaseModel):
    """One environmental reading reported by a device for a batch."""

    device_id: str = "unknown"
    temperature: float
    humidity: float
    location: Optional[Dict[str, Any]] = None
    timestamp: datetime = Field(default_factory=_utcnow)
    received_at: datetime = Field(default_factory=_utcnow)


class SensorAggregate(BaseModel):
    """Averages of the readings buffered for a batch."""

    token_reference: int
    data_points: int = Field(..., ge=1)
    average_temperature: float
    average_humidity: float
    carbon_estimate_g: float = Field(..., ge=0.0)
    aggregated_at: datetime = Field(default_factory=_utcnow)
    readings: List[SensorReading] = Field(default_factory=list)


__all__ = [
    # Enumerations
    "GeometryType",
    "GeoInputKind",
    "RiskLevel",
    "DeforestationSource",
    "LegalityDocumentType",
    "ActivityType",
    # Geolocation
    "Coordinate",
    "Position",
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
]
