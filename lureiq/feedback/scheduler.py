"""
Feedback scheduler — the single-slot "did it work?" prompt.

State machine::

    IDLE ──schedule()──▶ SCHEDULED ──timer / refresh()──▶ DUE ──resolve()──▶ IDLE
      ▲                     │                              │
      └──── dismiss() ──────┴────────── dismiss() ─────────┘

The prompt lives in the key-value store under ``KEY_SCHEDULED`` and survives
restarts. ``refresh()`` (on start and on every foreground resume) re-reads the
slot: a past-due prompt becomes DUE at once, a future one re-arms the
one-shot timer for the remaining delay, an empty slot leaves no timer armed.

``resolve()`` is two-phase. The prompt is hidden synchronously, then a
background task captures location, queues a ``FeedbackRecord`` built from the
prompt that was showing, clears the slot unless a newer prompt replaced it,
and flushes the queue. The task is returned so callers (and tests) may
await it; it never raises.
"""

from __future__ import annotations

import asyncio
import logging
import math
from enum import StrEnum
from typing import Callable, Optional

from pydantic import ValidationError

from lureiq.feedback.queue import FeedbackUploader
from lureiq.feedback.timer import OneShotTimer
from lureiq.ingestion.location import LocationProvider, no_location
from lureiq.models.conditions import Coordinates
from lureiq.models.feedback import FeedbackOutcome, FeedbackRecord, ScheduledPrompt
from lureiq.models.recommendation import RecommendationRecord
from lureiq.storage.kv_store import KeyValueStore, read_json, write_json
from lureiq.utils.time_utils import MS_PER_MINUTE, MS_PER_SECOND, now_ms

logger = logging.getLogger(__name__)

KEY_SCHEDULED = "lureiq_feedback_scheduled"
DEFAULT_DELAY_MINUTES = 90
LOCATION_TIMEOUT_S = 10.0


class PromptState(StrEnum):
    IDLE = "idle"
    SCHEDULED = "scheduled"
    DUE = "due"


class FeedbackScheduler:
    """Owns the prompt slot, its timer and the resolve/dismiss flow.

    Args:
        store: Durable key-value store shared with the feedback queue.
        uploader: Flushes the feedback queue.
        location_provider: Best-effort position for resolved records.
        clock: Returns epoch milliseconds.
        on_due: Called with the prompt each time it becomes visible.
    """

    def __init__(
        self,
        store: KeyValueStore,
        uploader: FeedbackUploader,
        location_provider: LocationProvider = no_location,
        clock: Callable[[], int] = now_ms,
        on_due: Optional[Callable[[ScheduledPrompt], None]] = None,
    ) -> None:
        self.store = store
        self.uploader = uploader
        self.location_provider = location_provider
        self.clock = clock
        self.on_due = on_due
        self._timer = OneShotTimer(self._on_timer, name="feedback-prompt")
        self._state = PromptState.IDLE
        self._scheduled: Optional[ScheduledPrompt] = None
        self._background: set[asyncio.Task] = set()

    # ── Read-only view ────────────────────────────────────────────────────────

    @property
    def state(self) -> PromptState:
        return self._state

    @property
    def scheduled(self) -> Optional[ScheduledPrompt]:
        return self._scheduled

    @property
    def prompt_visible(self) -> bool:
        return self._state == PromptState.DUE

    @property
    def timer_armed(self) -> bool:
        return self._timer.armed

    # ── Slot persistence ──────────────────────────────────────────────────────

    def load_slot(self) -> Optional[ScheduledPrompt]:
        """Read the persisted prompt; corrupt or missing → ``None``."""
        raw = read_json(self.store, KEY_SCHEDULED)
        if raw is None:
            return None
        try:
            return ScheduledPrompt.model_validate(raw)
        except ValidationError as exc:
            logger.warning("Discarding unreadable scheduled prompt: %s", exc)
            return None

    def _save_slot(self, prompt: ScheduledPrompt) -> None:
        write_json(self.store, KEY_SCHEDULED, prompt.model_dump(mode="json"))

    def _clear_slot(self) -> None:
        self.store.delete(KEY_SCHEDULED)

    # ── Transitions ───────────────────────────────────────────────────────────

    def _sync_to(self, prompt: Optional[ScheduledPrompt]) -> None:
        """Align state and timer with ``prompt`` (cancel-then-arm, never stack)."""
        self._scheduled = prompt
        if prompt is None:
            self._timer.cancel()
            self._state = PromptState.IDLE
            return

        now = self.clock()
        if prompt.is_due(now):
            self._timer.cancel()
            self._show(prompt)
        else:
            self._timer.cancel_and_reschedule((prompt.due_at - now) / MS_PER_SECOND)
            self._state = PromptState.SCHEDULED

    def _show(self, prompt: ScheduledPrompt) -> None:
        if self._state == PromptState.DUE:
            return
        self._state = PromptState.DUE
        logger.info("Feedback prompt due for %s", prompt.lure_name)
        if self.on_due is not None:
            self.on_due(prompt)

    def _on_timer(self) -> None:
        if self._scheduled is not None:
            self._show(self._scheduled)

    # ── Public operations ─────────────────────────────────────────────────────

    async def schedule(
        self,
        recommendation: RecommendationRecord,
        delay_minutes: float = DEFAULT_DELAY_MINUTES,
    ) -> ScheduledPrompt:
        """Persist a prompt for ``recommendation``, replacing any existing one.

        ``delay_minutes <= 0`` makes the prompt due immediately; otherwise
        whole minutes are used.
        """
        now = self.clock()
        if delay_minutes <= 0:
            due_at = now
        else:
            due_at = now + math.floor(delay_minutes) * MS_PER_MINUTE

        prompt = ScheduledPrompt(
            recommendation_id=recommendation.id,
            lure_name=recommendation.lure_name,
            due_at=due_at,
        )
        self._save_slot(prompt)
        # A new prompt is a new prompt even if the previous one was showing
        self._state = PromptState.IDLE
        self._sync_to(prompt)
        logger.info(
            "Scheduled feedback prompt for %s in %d min",
            prompt.lure_name, max(0, (due_at - now) // MS_PER_MINUTE),
        )
        return prompt

    async def refresh(self, flush: bool = True) -> PromptState:
        """Re-read the slot and re-arm; call on start and every foreground resume."""
        self._sync_to(self.load_slot())
        if flush:
            await self.uploader.flush()
        return self._state

    async def start(self) -> PromptState:
        return await self.refresh()

    async def resume(self) -> PromptState:
        return await self.refresh()

    def resolve(self, outcome: FeedbackOutcome) -> Optional[asyncio.Task]:
        """Hide the prompt now; record the outcome in the background.

        Returns:
            The background task (resolving to the queued ``FeedbackRecord``
            or ``None``), or ``None`` when no prompt is scheduled.
        """
        self._state = PromptState.IDLE
        prompt = self.load_slot()
        if prompt is None:
            logger.debug("resolve() with no scheduled prompt; ignoring")
            self._sync_to(None)
            return None

        self._timer.cancel()
        task = asyncio.get_running_loop().create_task(self._record_outcome(prompt, outcome))
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    async def dismiss(self) -> None:
        """Drop the prompt without recording anything."""
        self._clear_slot()
        self._sync_to(None)
        logger.info("Feedback prompt dismissed")

    async def force_prompt_now(self) -> bool:
        """Make the scheduled prompt due immediately; ``False`` if none exists."""
        prompt = self.load_slot()
        if prompt is None:
            return False
        prompt = prompt.model_copy(update={"due_at": self.clock()})
        self._save_slot(prompt)
        self._sync_to(prompt)
        return True

    async def drain(self) -> None:
        """Wait for background resolve work to finish."""
        if self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    def close(self) -> None:
        """Cancel the prompt timer (teardown)."""
        self._timer.cancel()

    # ── Background phase ──────────────────────────────────────────────────────

    async def _capture_location(self) -> Optional[Coordinates]:
        try:
            return await asyncio.wait_for(self.location_provider(), timeout=LOCATION_TIMEOUT_S)
        except Exception as exc:
            logger.debug("Location unavailable for feedback record: %s", exc)
            return None

    async def _record_outcome(
        self, prompt: ScheduledPrompt, outcome: FeedbackOutcome
    ) -> Optional[FeedbackRecord]:
        try:
            location = await self._capture_location()
            current = self.load_slot()
            if current is None:
                logger.debug("Scheduled prompt vanished before the outcome was recorded")
                return None

            record = FeedbackRecord.from_prompt(
                prompt, outcome, timestamp=self.clock(), location=location
            )
            self.uploader.queue.append(record)
            # A prompt scheduled during the location wait stays in place
            if current.recommendation_id == prompt.recommendation_id:
                self._clear_slot()
                self._sync_to(None)
            logger.info(
                "Recorded feedback for %s (caught=%s)", record.lure_name, record.caught
            )

            await self.uploader.flush()
            return record
        except Exception as exc:
            logger.error("Recording feedback failed: %s", exc, exc_info=True)
            return None
