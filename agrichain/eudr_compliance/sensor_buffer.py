# -*- coding: utf-8 -*-
"""
Sensor Buffer Store - EUDR Compliance Engine

Holds environmental sensor readings reported for a batch until they are
aggregated into a summary for the ledger. The store is an explicit object
handed to whoever needs it; readings for a token are cleared when they are
aggregated.

Example:
    >>> from agrichain.eudr_compliance.sensor_buffer import SensorBufferStore
    >>> store = SensorBufferStore()
    >>> store.add(42, SensorReading(temperature=24.5, humidity=61.0))
    1
    >>> store.aggregate(42).average_temperature
    24.5
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, List

from agrichain.eudr_compliance.models import SensorAggregate, SensorReading

logger = logging.getLogger(__name__)


class SensorBufferStore:
    """Per-token buffer of sensor readings.

    Attributes:
        _carbon_grams_per_reading: Carbon estimate attributed to each reading.
        _buffers: Readings keyed by token reference, in arrival order.
    """

    def __init__(self, carbon_grams_per_reading: float = 10.0) -> None:
        """Initialize SensorBufferStore.

        Args:
            carbon_grams_per_reading: Carbon estimate per buffered reading.
        """
        self._carbon_grams_per_reading = carbon_grams_per_reading
        self._buffers: Dict[int, List[SensorReading]] = {}
        self._lock = threading.Lock()

    def add(self, token_reference: int, reading: SensorReading) -> int:
        """Buffer a reading and return the number pending for the token."""
        with self._lock:
            buffer = self._buffers.setdefault(token_reference, [])
            buffer.append(reading)
            count = len(buffer)
        logger.debug(
            "Buffered reading from %s for token %d (%d pending)",
            reading.device_id, token_reference, count,
        )
        return count

    def pending(self, token_reference: int) -> List[SensorReading]:
        """Return a copy of the readings buffered for a token."""
        with self._lock:
            return list(self._buffers.get(token_reference, []))

    def aggregate(self, token_reference: int) -> SensorAggregate:
        """Average the buffered readings of a token and clear its buffer.

        Args:
            token_reference: Ledger token identifier of the batch.

        Returns:
            SensorAggregate with averages rounded to one decimal place.

        Raises:
            LookupError: If no readings are buffered for the token.
        """
        with self._lock:
            readings = self._buffers.pop(token_reference, [])
        if not readings:
            raise LookupError(f"No buffered sensor data for token {token_reference}")

        count = len(readings)
        aggregate = SensorAggregate(
            token_reference=token_reference,
            data_points=count,
            average_temperature=round(sum(r.temperature for r in readings) / count, 1),
            average_humidity=round(sum(r.humidity for r in readings) / count, 1),
            carbon_estimate_g=count * self._carbon_grams_per_reading,
            readings=readings,
        )
        logger.info(
            "Aggregated %d sensor readings for token %d: temp=%.1f, humidity=%.1f",
            count, token_reference,
            aggregate.average_temperature, aggregate.average_humidity,
        )
        return aggregate

    @property
    def token_count(self) -> int:
        """Number of tokens with pending readings."""
        with self._lock:
            return len(self._buffers)


__all__ = [
    "SensorBufferStore",
]
