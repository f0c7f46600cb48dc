"""
ArtifactStore: in-process keyed storage with a fixed TTL and consume-on-read.

All operations run under one table-wide lock and never block on I/O, so
operations on the same id are totally ordered. Expiry is checked lazily on
every access; expire_sweep() additionally clears records nobody touches.
"""
from __future__ import annotations

import logging
import threading
import time
from typing import Callable

from app.artifacts.models import ArtifactRecord, PaymentState
from app.core.errors import ArtifactNotFound, DuplicateArtifactError
from app.utils.metrics import artifacts_expired_total, artifacts_live

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class ArtifactStore:
    def __init__(self, ttl_seconds: float, clock: Clock = time.monotonic) -> None:
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._records: dict[str, ArtifactRecord] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def now(self) -> float:
        return self.clock()

    def _is_expired(self, record: ArtifactRecord, now: float) -> bool:
        return record.created_at + self.ttl_seconds <= now

    def _live(self, artifact_id: str) -> ArtifactRecord:
        """Return the live record or raise ArtifactNotFound. Caller holds the lock."""
        record = self._records.get(artifact_id)
        if record is None:
            raise ArtifactNotFound()
        if self._is_expired(record, self.clock()):
            del self._records[artifact_id]
            self._on_removed(expired=1)
            logger.info("artifact_expired", extra={"artifact_id": artifact_id})
            raise ArtifactNotFound()
        return record

    def _on_removed(self, expired: int = 0) -> None:
        artifacts_live.set(len(self._records))
        if expired:
            artifacts_expired_total.inc(expired)

    def put(self, record: ArtifactRecord) -> str:
        with self._lock:
            if record.id in self._records:
                raise DuplicateArtifactError(detail={"artifact_id": record.id})
            self._records[record.id] = record
            artifacts_live.set(len(self._records))
        return record.id

    def get_and_remove(self, artifact_id: str) -> ArtifactRecord:
        """Atomically look up and delete; at most one caller ever gets the record."""
        with self._lock:
            record = self._live(artifact_id)
            del self._records[artifact_id]
            self._on_removed()
        return record.model_copy(update={"delivered": True})

    def peek_status(self, artifact_id: str) -> PaymentState:
        with self._lock:
            return self._live(artifact_id).payment_state

    def mark_paid(self, artifact_id: str) -> bool:
        """Pending -> Paid. Returns False if the record was already paid (no-op)."""
        with self._lock:
            record = self._live(artifact_id)
            if record.payment_state == PaymentState.PAID:
                return False
            self._records[artifact_id] = record.model_copy(update={"payment_state": PaymentState.PAID})
            return True

    def expire_sweep(self, now: float | None = None) -> int:
        """Remove every record with created_at + TTL <= now; returns how many were removed."""
        with self._lock:
            if now is None:
                now = self.clock()
            expired = [aid for aid, rec in self._records.items() if self._is_expired(rec, now)]
            for aid in expired:
                del self._records[aid]
            self._on_removed(expired=len(expired))
        if expired:
            logger.info("artifacts_swept", extra={"expired": len(expired), "remaining": len(self)})
        return len(expired)
