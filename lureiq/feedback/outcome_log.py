"""
Local log of "did this plan work?" answers.

Separate from the prompt-driven ``FeedbackQueue``: an entry is written the
moment the user answers under a freshly shown plan, and it carries the full
``Conditions`` plus the plan itself. The log is never uploaded automatically;
a periodic export drains it with ``pop_all()``.
"""

from __future__ import annotations

import logging
import uuid
from typing import Callable, Optional

from pydantic import ValidationError

from lureiq.models.conditions import Conditions
from lureiq.models.feedback import OutcomeEntry, OutcomePlan
from lureiq.storage.kv_store import KeyValueStore, read_json, write_json
from lureiq.utils.time_utils import MS_PER_DAY, now_ms

logger = logging.getLogger(__name__)

KEY_OUTCOMES = "lureiq_outcome_log"


class OutcomeLog:
    """Append-only list of ``OutcomeEntry`` under one store key."""

    def __init__(
        self,
        store: KeyValueStore,
        key: str = KEY_OUTCOMES,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.store = store
        self.key = key
        self.clock = clock

    def read_all(self) -> list[OutcomeEntry]:
        raw = read_json(self.store, self.key, fallback=[])
        if not isinstance(raw, list):
            logger.warning("Outcome log is not a list; treating as empty")
            return []
        entries: list[OutcomeEntry] = []
        for item in raw:
            try:
                entries.append(OutcomeEntry.model_validate(item))
            except ValidationError as exc:
                logger.warning("Skipping unreadable outcome entry: %s", exc)
        return entries

    def record(self, success: bool, conditions: Conditions, plan: OutcomePlan) -> OutcomeEntry:
        """Append one answer and return it."""
        entry = OutcomeEntry(
            id=uuid.uuid4().hex,
            timestamp=self.clock(),
            success=success,
            conditions=conditions,
            plan=plan,
        )
        entries = self.read_all()
        entries.append(entry)
        self._write(entries)
        logger.info("Logged outcome for %s (success=%s)", plan.lure_name, success)
        return entry

    def since_days(self, days: float, now: Optional[int] = None) -> list[OutcomeEntry]:
        """Entries recorded within the last ``days`` days."""
        cutoff = (now if now is not None else self.clock()) - int(days * MS_PER_DAY)
        return [e for e in self.read_all() if e.timestamp >= cutoff]

    def pop_all(self) -> list[OutcomeEntry]:
        """Return every entry and empty the log."""
        entries = self.read_all()
        self._write([])
        return entries

    def pending_count(self) -> int:
        return len(self.read_all())

    def _write(self, entries: list[OutcomeEntry]) -> None:
        write_json(self.store, self.key, [e.model_dump(mode="json") for e in entries])
