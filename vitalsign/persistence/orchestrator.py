# =============================================================================
# DISCLAIMER: This software is NOT a medical device and is NOT intended for
# medical monitoring, diagnosis, or treatment. This is a proof of concept for
# educational purposes only. Do not rely on this system for health decisions.
# =============================================================================
"""Retry policy for sink writes.

On a failed write the sink is reconnected once (itself a bounded retry
loop) and the write is retried exactly once. A record that still fails is
dropped; there is no local spool.
"""

import logging
from typing import Dict

from vitalsign.models.record import ExtractedRecord

logger = logging.getLogger(__name__)


class PersistenceOrchestrator:
    """Writes records to a sink with a single reconnect-and-retry.

    The sink must provide:
        async write(record) -> bool
        async reconnect(max_attempts, delay_ms) -> bool

    Attributes:
        written: Records stored (first try or retry)
        retried: Records that needed the retry
        dropped: Records lost after the retry policy was exhausted
    """

    def __init__(self, sink, reconnect_attempts: int = 3, reconnect_delay_ms: int = 1000):
        """Initialize orchestrator.

        Args:
            sink: Database-like sink
            reconnect_attempts: Attempts inside the single reconnect
            reconnect_delay_ms: Delay between those attempts
        """
        self.sink = sink
        self.reconnect_attempts = reconnect_attempts
        self.reconnect_delay_ms = reconnect_delay_ms

        self.written = 0
        self.retried = 0
        self.dropped = 0

    @classmethod
    def from_config(cls, config, sink) -> "PersistenceOrchestrator":
        return cls(
            sink,
            reconnect_attempts=config.database.retry_attempts,
            reconnect_delay_ms=config.database.retry_delay_ms,
        )

    @property
    def stats(self) -> Dict[str, int]:
        return {"written": self.written, "retried": self.retried, "dropped": self.dropped}

    async def persist(self, record: ExtractedRecord) -> bool:
        """Write a record, reconnecting and retrying once on failure.

        Returns:
            True if the record was stored
        """
        if await self.sink.write(record):
            self.written += 1
            return True

        logger.warning("Write failed, reconnecting sink before retry")
        if not await self.sink.reconnect(self.reconnect_attempts, self.reconnect_delay_ms):
            self.dropped += 1
            logger.error(f"Sink reconnect failed, dropping record from {record.time_str}")
            return False

        self.retried += 1
        if await self.sink.write(record):
            self.written += 1
            logger.info("Write succeeded after reconnect")
            return True

        self.dropped += 1
        logger.error(f"Retry after reconnect failed, dropping record from {record.time_str}")
        return False
