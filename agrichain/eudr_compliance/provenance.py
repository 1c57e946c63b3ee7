# -*- coding: utf-8 -*-
"""
Provenance Tracking - AgriChain EUDR Compliance Engine

SHA-256 chain-hashed audit trail of compliance operations. Every entry links
to the previous one so that any later edit of the log is detectable.

Operation Types:
    - geolocation_validation: Geolocation validated for a batch or upload
    - geolocation_hash: Canonical geolocation hash computed for anchoring
    - risk_assessment: Risk level derived from validation and facts
    - dds_generation: Due diligence statement assembled
    - sensor_aggregation: Buffered sensor readings aggregated for a batch

Example:
    >>> from agrichain.eudr_compliance.provenance import ProvenanceTracker
    >>> tracker = ProvenanceTracker()
    >>> tracker.record("dds_generation", "42", "generate", "ab12...")
    >>> valid, chain = tracker.verify_chain("42")
    >>> assert valid is True
"""

from __future__ import annotations

import hashlib
import json
import logging
import threading
from datetime import datetime, timezone
from typing import Any, Dict, List, Tuple

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    """Return current UTC datetime with microseconds zeroed."""
    return datetime.now(timezone.utc).replace(microsecond=0)


VALID_OPERATION_TYPES = frozenset({
    "geolocation_validation",
    "geolocation_hash",
    "risk_assessment",
    "dds_generation",
    "sensor_aggregation",
})


# =============================================================================
# ProvenanceTracker
# =============================================================================


class ProvenanceTracker:
    """Chain-hashed provenance log grouped by entity.

    Attributes:
        _chain_store: Entries grouped by entity_id.
        _global_chain: All entries in insertion order.
        _last_chain_hash: Chain hash of the most recent entry.
    """

    _GENESIS_HASH = hashlib.sha256(b"agrichain-eudr-compliance-genesis").hexdigest()

    def __init__(self) -> None:
        """Initialize ProvenanceTracker."""
        self._chain_store: Dict[str, List[Dict[str, Any]]] = {}
        self._global_chain: List[Dict[str, Any]] = []
        self._last_chain_hash: str = self._GENESIS_HASH
        self._lock = threading.Lock()

    def record(
        self,
        entity_type: str,
        entity_id: str,
        action: str,
        data_hash: str,
        user_id: str = "system",
    ) -> str:
        """Record a provenance entry.

        Args:
            entity_type: One of VALID_OPERATION_TYPES.
            entity_id: Entity identifier (token reference, hash, upload id).
            action: Action performed (validate, hash, assess, generate,
                aggregate).
            data_hash: SHA-256 hash of the operation data.
            user_id: Actor that triggered the operation.

        Returns:
            Chain hash of the new entry.

        Raises:
            ValueError: If entity_type is not a known operation type.
        """
        if entity_type not in VALID_OPERATION_TYPES:
            raise ValueError(f"Unknown provenance operation type: {entity_type}")

        timestamp = _utcnow().isoformat()
        with self._lock:
            chain_hash = self._compute_chain_hash(
                self._last_chain_hash, data_hash, action, timestamp,
            )
            entry = {
                "entity_type": entity_type,
                "entity_id": entity_id,
                "action": action,
                "data_hash": data_hash,
                "user_id": user_id,
                "timestamp": timestamp,
                "previous_hash": self._last_chain_hash,
                "chain_hash": chain_hash,
            }
            self._chain_store.setdefault(entity_id, []).append(entry)
            self._global_chain.append(entry)
            self._last_chain_hash = chain_hash

        logger.debug(
            "Recorded provenance: %s/%s action=%s hash=%s",
            entity_type, entity_id, action, chain_hash[:16],
        )
        return chain_hash

    def verify_chain(self, entity_id: str) -> Tuple[bool, List[Dict[str, Any]]]:
        """Recompute the chain hashes of an entity's entries.

        Args:
            entity_id: Entity whose entries to verify.

        Returns:
            Tuple of (is_valid, chain_entries).
        """
        chain = self.get_chain(entity_id)
        for index, entry in enumerate(chain):
            expected = self._compute_chain_hash(
                entry["previous_hash"], entry["data_hash"],
                entry["action"], entry["timestamp"],
            )
            if expected != entry["chain_hash"]:
                logger.warning(
                    "Chain verification failed for %s at index %d",
                    entity_id, index,
                )
                return False, chain
        return True, chain

    def get_chain(self, entity_id: str) -> List[Dict[str, Any]]:
        """Return the entries of an entity, oldest first."""
        with self._lock:
            return list(self._chain_store.get(entity_id, []))

    def get_global_chain(self, limit: int = 100) -> List[Dict[str, Any]]:
        """Return up to ``limit`` entries across all entities, newest first."""
        with self._lock:
            return list(reversed(self._global_chain[-limit:]))

    @property
    def entry_count(self) -> int:
        """Return the total number of provenance entries."""
        return len(self._global_chain)

    def export_json(self) -> str:
        """Export all provenance entries as a JSON string."""
        with self._lock:
            return json.dumps(self._global_chain, indent=2, default=str)

    def build_hash(self, data: Any) -> str:
        """Build a SHA-256 hex digest of arbitrary JSON-able data."""
        serialized = json.dumps(data, sort_keys=True, default=str)
        return hashlib.sha256(serialized.encode("utf-8")).hexdigest()

    @staticmethod
    def _compute_chain_hash(
        previous_hash: str,
        data_hash: str,
        action: str,
        timestamp: str,
    ) -> str:
        combined = json.dumps({
            "previous": previous_hash,
            "data": data_hash,
            "action": action,
            "timestamp": timestamp,
        }, sort_keys=True)
        return hashlib.sha256(combined.encode("utf-8")).hexdigest()


__all__ = [
    "ProvenanceTracker",
    "VALID_OPERATION_TYPES",
]
