"""
Processing tracker for recommendation generation.
Tracks the latest generate/refresh attempt of each care request.
"""
import logging
import threading
from dataclasses import replace
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from .models import ProcessingState, ProcessingStatusRecord

logger = logging.getLogger(__name__)


class ProcessingTracker:
    """Thread-safe tracker of per-request processing status.

    Any transition is accepted from any state; the last write wins. A retry
    simply restarts the record.
    """

    def __init__(self):
        self._lock = threading.RLock()
        # Key: entity id, Value: latest attempt
        self._records: Dict[int, ProcessingStatusRecord] = {}

    def get_status(self, entity_id: int) -> Optional[ProcessingStatusRecord]:
        """Latest record for ``entity_id``, None when it was never attempted (idle)."""
        with self._lock:
            record = self._records.get(entity_id)
            return replace(record) if record is not None else None

    def is_processing(self, entity_id: int) -> bool:
        """Check if a request is currently being processed."""
        with self._lock:
            record = self._records.get(entity_id)
            return record is not None and record.status == ProcessingState.PROCESSING

    def start(self, entity_id: int) -> ProcessingStatusRecord:
        """Start (or restart) tracking a processing attempt."""
        with self._lock:
            record = ProcessingStatusRecord(
                entity_id=entity_id,
                status=ProcessingState.PROCESSING,
                started_at=datetime.now(),
            )
            self._records[entity_id] = record
            return record

    def start_many(self, entity_ids: Iterable[int]) -> None:
        """Mark every id as processing in one step."""
        with self._lock:
            ids = list(entity_ids)
            for entity_id in ids:
                self.start(entity_id)
            logger.info(f"Started processing {len(ids)} request(s), tracked total: {len(self._records)}")

    def succeed(self, entity_id: int) -> ProcessingStatusRecord:
        """Mark a processing attempt as completed."""
        with self._lock:
            record = self._existing_or_new(entity_id)
            record.status = ProcessingState.COMPLETED
            record.completed_at = datetime.now()
            record.error = None
            logger.debug(f"Marked recommendation as completed for request {entity_id}")
            return record

    def fail(self, entity_id: int, error: Optional[str] = None) -> ProcessingStatusRecord:
        """Mark a processing attempt as failed."""
        with self._lock:
            record = self._existing_or_new(entity_id)
            record.status = ProcessingState.FAILED
            record.completed_at = datetime.now()
            record.error = error
            logger.info(f"Marked recommendation as failed for request {entity_id}: {error}")
            return record

    def fail_many(self, entity_ids: Iterable[int], error: str) -> None:
        """Fail every id with the same error."""
        with self._lock:
            for entity_id in entity_ids:
                self.fail(entity_id, error)

    def get_processing_ids(self) -> List[int]:
        """Ids whose latest attempt is still in flight."""
        with self._lock:
            return [
                entity_id
                for entity_id, record in self._records.items()
                if record.status == ProcessingState.PROCESSING
            ]

    def clear(self) -> None:
        """Forget every record; all ids return to idle."""
        with self._lock:
            count = len(self._records)
            self._records.clear()
            if count:
                logger.info(f"Cleared {count} processing record(s)")

    def _existing_or_new(self, entity_id: int) -> ProcessingStatusRecord:
        # Lenient: a terminal transition without a prior start creates the record
        record = self._records.get(entity_id)
        if record is None:
            record = ProcessingStatusRecord(
                entity_id=entity_id,
                status=ProcessingState.PROCESSING,
                started_at=datetime.now(),
            )
            self._records[entity_id] = record
        return record
