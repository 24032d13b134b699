"""
Durable feedback queue and best-effort uploader.

The queue is a JSON array of ``FeedbackRecord`` objects under one store key,
appended in resolution order. ``FeedbackUploader.flush()`` sends the entire
queue in one request:

  - empty queue           → nothing to do
  - upload succeeds       → uploaded records are removed (normally the whole queue)
  - upload fails (any way) → queue untouched, retried in full on the next flush

There is no per-record retry, backoff or partial-success tracking; flushes
are triggered opportunistically on start, on foreground resume and after each
resolved prompt. Delivery is at-least-once.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable, Optional, Protocol, Sequence

from pydantic import ValidationError

from lureiq.models.feedback import FeedbackRecord
from lureiq.storage.kv_store import KeyValueStore, read_json, write_json
from lureiq.utils.time_utils import MS_PER_DAY, now_ms

logger = logging.getLogger(__name__)

KEY_QUEUE = "lureiq_feedback_queue"


class FeedbackCollector(Protocol):
    async def upload(self, records: Sequence[FeedbackRecord]) -> None: ...


class FeedbackQueue:
    """Append-only queue of ``FeedbackRecord`` in a ``KeyValueStore``."""

    def __init__(self, store: KeyValueStore, key: str = KEY_QUEUE) -> None:
        self.store = store
        self.key = key

    def read_all(self) -> list[FeedbackRecord]:
        """All queued records in append order.

        A corrupt queue reads as empty. Individual entries that fail
        validation are skipped with a warning.
        """
        raw = read_json(self.store, self.key, fallback=[])
        if not isinstance(raw, list):
            logger.warning("Feedback queue is not a list; treating as empty")
            return []
        records: list[FeedbackRecord] = []
        for entry in raw:
            try:
                records.append(FeedbackRecord.model_validate(entry))
            except ValidationError as exc:
                logger.warning("Skipping unreadable feedback record: %s", exc)
        return records

    def append(self, record: FeedbackRecord) -> int:
        """Append ``record``; returns the new queue length."""
        records = self.read_all()
        records.append(record)
        self._write(records)
        logger.debug("Queued feedback %s (%d pending)", record.id, len(records))
        return len(records)

    def remove(self, record_ids: Iterable[str]) -> int:
        """Drop the given records; returns how many remain."""
        drop = set(record_ids)
        remaining = [r for r in self.read_all() if r.id not in drop]
        if remaining:
            self._write(remaining)
        else:
            self.clear()
        return len(remaining)

    def clear(self) -> None:
        write_json(self.store, self.key, [])

    def pending_count(self) -> int:
        return len(self.read_all())

    def records_since(self, days: float, now: Optional[int] = None) -> list[FeedbackRecord]:
        """Records created within the last ``days`` days."""
        cutoff = (now if now is not None else now_ms()) - int(days * MS_PER_DAY)
        return [r for r in self.read_all() if r.timestamp >= cutoff]

    def _write(self, records: list[FeedbackRecord]) -> None:
        write_json(self.store, self.key, [r.model_dump(mode="json") for r in records])


class FeedbackUploader:
    """Flushes the whole queue to the collector in one request.

    Concurrent ``flush()`` calls are serialized so a batch is never in
    flight twice at once.
    """

    def __init__(self, queue: FeedbackQueue, collector: FeedbackCollector) -> None:
        self.queue = queue
        self.collector = collector
        self._lock = asyncio.Lock()

    async def flush(self) -> bool:
        """Upload everything queued.

        Returns:
            ``True`` if the queue was empty or the upload succeeded,
            ``False`` if the upload failed and the queue was kept.
        """
        async with self._lock:
            batch = self.queue.read_all()
            if not batch:
                return True
            try:
                await self.collector.upload(batch)
            except Exception as exc:
                logger.warning(
                    "Feedback upload failed; keeping %d record(s) for retry: %s",
                    len(batch), exc,
                )
                return False

            # Records appended while the upload was in flight stay queued
            remaining = self.queue.remove(r.id for r in batch)
            logger.info("Uploaded %d feedback record(s); %d pending", len(batch), remaining)
            return True
