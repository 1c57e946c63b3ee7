# -*- coding: utf-8 -*-
"""
Content Hasher - EUDR Compliance Engine

Deterministic digest of a normalized GeoCollection for anchoring on an
immutable ledger.

Serialization convention (fixed; independent verifiers must reproduce it):
    - the collection as plain GeoJSON (``GeoCollection.to_geojson()``)
    - ``json.dumps`` with ``sort_keys=True``, ``separators=(",", ":")``,
      ``ensure_ascii=False`` and ``allow_nan=False``
    - encoded as UTF-8
    - digest: SHA-256, rendered as ``0x`` followed by 64 lowercase hex digits

Floats are written in Python's shortest round-tripping form, so
``7.1234560`` and ``7.123456`` hash identically while any change of value
changes the digest. Numbers keep their JSON type: an integer ``5`` is
written as ``5`` and a float ``5.0`` as ``5.0``, so the two are distinct
content and hash differently. Computed ``area_ha`` values are always floats.
"""

from __future__ import annotations

import hashlib
import hmac
import json
import logging

from agrichain.eudr_compliance.metrics import record_geolocation_hash
from agrichain.eudr_compliance.models import GeoCollection

logger = logging.getLogger(__name__)

HASH_PREFIX = "0x"


def canonical_json(collection: GeoCollection) -> str:
    """Return the canonical JSON text of a collection.

    Raises:
        ValueError: If the collection holds NaN or infinite numbers.
    """
    return json.dumps(
        collection.to_geojson(),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    )


def compute_geolocation_hash(collection: GeoCollection) -> str:
    """Compute the ``0x``-prefixed SHA-256 digest of a collection.

    Args:
        collection: Normalized collection.

    Returns:
        Digest string, e.g. ``0x3f7a...``.
    """
    payload = canonical_json(collection).encode("utf-8")
    digest = HASH_PREFIX + hashlib.sha256(payload).hexdigest()
    record_geolocation_hash()
    logger.debug(
        "Computed geolocation hash %s over %d bytes (%d features)",
        digest[:18], len(payload), len(collection.features),
    )
    return digest


def verify_geolocation_hash(collection: GeoCollection, expected: str) -> bool:
    """Check that a collection matches a previously anchored digest.

    Comparison is case-insensitive on the hex digits and tolerates a
    missing ``0x`` prefix.
    """
    normalized = expected.strip().lower()
    if not normalized.startswith(HASH_PREFIX):
        normalized = HASH_PREFIX + normalized
    return hmac.compare_digest(compute_geolocation_hash(collection), normalized)


__all__ = [
    "HASH_PREFIX",
    "canonical_json",
    "compute_geolocation_hash",
    "verify_geolocation_hash",
]
