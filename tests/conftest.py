# -*- coding: utf-8 -*-
"""Pytest configuration and shared fixtures."""

import copy
from typing import Any, Dict

import pytest

from agrichain.eudr_compliance.config import EUDRComplianceConfig, reset_config
from agrichain.eudr_compliance.models import (
    BatchDescriptors,
    ComplianceFacts,
    DeforestationCheck,
    DeforestationSource,
    LegalityDocument,
    LegalityDocumentType,
)

# A ~1.22 ha square plot in Nigeria; every coordinate has 6 decimal places.
PLOT_RING = [
    [7.123451, 5.612341],
    [7.124451, 5.612341],
    [7.124451, 5.613341],
    [7.123451, 5.613341],
    [7.123451, 5.612341],
]

PLOT_POINT = [7.123456, 5.612345]


@pytest.fixture(autouse=True)
def _reset_config():
    """Reset the configuration singleton around every test."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def config() -> EUDRComplianceConfig:
    """Default configuration."""
    return EUDRComplianceConfig()


@pytest.fixture
def polygon_geometry() -> Dict[str, Any]:
    """Valid Polygon geometry."""
    return {"type": "Polygon", "coordinates": [copy.deepcopy(PLOT_RING)]}


@pytest.fixture
def point_geometry() -> Dict[str, Any]:
    """Valid Point geometry."""
    return {"type": "Point", "coordinates": list(PLOT_POINT)}


@pytest.fixture
def polygon_feature(polygon_geometry) -> Dict[str, Any]:
    """Polygon plot feature with a plot_id."""
    return {
        "type": "Feature",
        "geometry": polygon_geometry,
        "properties": {"plot_id": "P1", "farmer_name": "Adaeze Okafor"},
    }


@pytest.fixture
def point_feature(point_geometry) -> Dict[str, Any]:
    """Point plot feature with a declared area below the polygon threshold."""
    return {
        "type": "Feature",
        "geometry": point_geometry,
        "properties": {"plot_id": "P2", "area_ha": 2.5},
    }


@pytest.fixture
def feature_collection(polygon_feature) -> Dict[str, Any]:
    """FeatureCollection holding one valid polygon plot."""
    return {"type": "FeatureCollection", "features": [polygon_feature]}


@pytest.fixture
def compliance_facts() -> ComplianceFacts:
    """Complete compliance facts for a negligible-risk batch."""
    return ComplianceFacts(
        deforestation_check=DeforestationCheck(
            status=True,
            checked_date="2025-11-02",
            source=DeforestationSource.GLOBAL_FOREST_WATCH,
            evidence_locator="ipfs://bafyevidence",
        ),
        legality_documents=[
            LegalityDocument(
                type=LegalityDocumentType.LAND_TENURE,
                issuer="Ondo State Ministry of Lands",
                issue_date="2024-03-15",
                reference_hash="0xabc123",
                document_reference="OND-LT-2024-0042",
            ),
        ],
        quantity_kg=1250.0,
    )


@pytest.fixture
def batch() -> BatchDescriptors:
    """Batch descriptors as fetched from the ledger."""
    return BatchDescriptors(
        batch_id="BATCH-2025-0042",
        name="Ondo cocoa lot 42",
        origin="Idanre, Ondo State, Nigeria",
        origin_farmers=["Adaeze Okafor", "Tunde Bello"],
        metadata_locator="ipfs://bafymetadata",
    )
