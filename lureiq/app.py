"""
Application wiring: one ``LureAdvisor`` owns every long-lived component.

Lifecycle::

    advisor = build_advisor(config, location_provider=...)
    await advisor.start()              # weights, prompt slot, first conditions
    record = await advisor.recommend(Clarity.STAINED, Cover.WOOD)
    advisor.record_outcome(True)       # optional "did it work?" under the plan
    ...                                # prompt is scheduled after a short pause
    await advisor.foreground()         # on every resume
    await advisor.close()

Weight overrides are fetched once in ``start()``. After a result is shown the
advisor waits ``feedback.auto_prompt_delay_s`` and then schedules the
feedback prompt ``feedback.prompt_delay_minutes`` out; a newer result or
``close()`` cancels that wait.
"""

from __future__ import annotations

import asyncio
import functools
import logging
import random
from typing import Awaitable, Callable, Optional

import httpx

from lureiq.conditions.service import ConditionsService
from lureiq.config import AppConfig
from lureiq.feedback.outcome_log import OutcomeLog
from lureiq.feedback.queue import FeedbackCollector, FeedbackQueue, FeedbackUploader
from lureiq.feedback.scheduler import FeedbackScheduler, PromptState
from lureiq.ingestion.collector_client import CollectorClient
from lureiq.ingestion.geocoding_client import GeocodingClient
from lureiq.ingestion.location import LocationProvider, no_location
from lureiq.ingestion.weather_client import WeatherClient
from lureiq.ingestion.weights_client import fetch_override_weights
from lureiq.models.conditions import NormalizedConditions
from lureiq.models.feedback import OutcomeEntry, OutcomePlan, ScheduledPrompt
from lureiq.models.recommendation import RecommendationRecord
from lureiq.session import RecommendationSession
from lureiq.storage.kv_store import KeyValueStore, SqliteKeyValueStore
from lureiq.taxonomy.conditions import Clarity, Cover

logger = logging.getLogger(__name__)

WeightsLoader = Callable[[], Awaitable[Optional[dict[str, float]]]]


async def _no_weights() -> Optional[dict[str, float]]:
    return None


class LureAdvisor:
    """Ties the session, conditions service and feedback loop together."""

    def __init__(
        self,
        config: AppConfig,
        store: KeyValueStore,
        conditions_service: ConditionsService,
        collector: FeedbackCollector,
        location_provider: LocationProvider = no_location,
        weights_loader: WeightsLoader = _no_weights,
        rng: Optional[random.Random] = None,
        on_prompt_due: Optional[Callable[[ScheduledPrompt], None]] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.config = config
        self.store = store
        self.conditions_service = conditions_service
        self.weights_loader = weights_loader

        self.queue = FeedbackQueue(store)
        self.outcome_log = OutcomeLog(store)
        self.uploader = FeedbackUploader(self.queue, collector)
        self.scheduler = FeedbackScheduler(
            store,
            self.uploader,
            location_provider=location_provider,
            on_due=on_prompt_due,
        )
        self.session = RecommendationSession(
            scoring_delay_s=config.session.scoring_delay_s,
            rng=rng,
            jitter=config.session.jitter,
        )

        self._http = http_client
        self._auto_prompt_task: Optional[asyncio.Task] = None

    async def start(self, zip_code: Optional[str] = None) -> NormalizedConditions:
        """Fetch overrides, restore the prompt slot and detect conditions."""
        overrides = await self.weights_loader()
        self.session.overrides = overrides
        await self.scheduler.start()
        return await self.refresh_conditions(zip_code)

    async def foreground(self) -> PromptState:
        """Resume hook: re-arm the prompt and flush pending feedback."""
        return await self.scheduler.resume()

    async def refresh_conditions(self, zip_code: Optional[str] = None) -> NormalizedConditions:
        """Start a fresh session and autofill it from current conditions."""
        self.session.reset()
        normalized = await self.conditions_service.detect(zip_code)
        self.session.apply_autofill(normalized)
        return normalized

    async def recommend(
        self,
        clarity: Optional[Clarity] = None,
        cover: Optional[Cover] = None,
        schedule_prompt: bool = True,
    ) -> Optional[RecommendationRecord]:
        """Confirm any given answers, score, and queue the follow-up prompt.

        Returns ``None`` when the session is not ready to score.
        """
        if clarity is not None:
            self.session.confirm_clarity(clarity)
        if cover is not None:
            self.session.confirm_cover(cover)

        task = self.session.trigger()
        if task is None:
            return None
        record = await task

        if schedule_prompt:
            self._arm_auto_prompt(record)
        return record

    def record_outcome(self, success: bool) -> Optional[OutcomeEntry]:
        """Log whether the plan on screen worked, tagged with its conditions.

        Returns ``None`` when no result is showing.
        """
        result = self.session.result
        if result is None:
            logger.debug("record_outcome() with no result showing; ignoring")
            return None
        plan = OutcomePlan(
            lure_name=result.lure, color=result.color, short_how_to=result.retrieve
        )
        return self.outcome_log.record(success, self.session.conditions, plan)

    def _arm_auto_prompt(self, record: RecommendationRecord) -> None:
        self._cancel_auto_prompt()
        self._auto_prompt_task = asyncio.get_running_loop().create_task(
            self._auto_prompt(record)
        )

    async def _auto_prompt(self, record: RecommendationRecord) -> None:
        await asyncio.sleep(self.config.feedback.auto_prompt_delay_s)
        await self.scheduler.schedule(
            record, delay_minutes=self.config.feedback.prompt_delay_minutes
        )

    def _cancel_auto_prompt(self) -> None:
        if self._auto_prompt_task is not None and not self._auto_prompt_task.done():
            self._auto_prompt_task.cancel()
        self._auto_prompt_task = None

    async def close(self) -> None:
        """Cancel all deferred work and release the HTTP client."""
        self.session.close()
        self._cancel_auto_prompt()
        self.scheduler.close()
        await self.scheduler.drain()
        if self._http is not None:
            await self._http.aclose()
            self._http = None


def build_advisor(
    config: AppConfig,
    location_provider: LocationProvider = no_location,
    store: Optional[KeyValueStore] = None,
    http_client: Optional[httpx.AsyncClient] = None,
    rng: Optional[random.Random] = None,
    on_prompt_due: Optional[Callable[[ScheduledPrompt], None]] = None,
) -> LureAdvisor:
    """Build a ``LureAdvisor`` with real clients from ``config``.

    One ``httpx.AsyncClient`` is shared by every client and closed by
    ``LureAdvisor.close()``.
    """
    http = http_client or httpx.AsyncClient()
    if store is None:
        store = SqliteKeyValueStore(
            config.store.db_path,
            wal_mode=config.store.wal_mode,
            busy_timeout_ms=config.store.busy_timeout_ms,
        )

    conditions_service = ConditionsService(
        weather=WeatherClient(config.weather.base_url, config.weather.timeout_s, http),
        geocoder=GeocodingClient(config.geocoding.base_url, config.geocoding.timeout_s, http),
        location_provider=location_provider,
    )
    collector = CollectorClient(config.feedback.collector_url, config.feedback.timeout_s, http)
    if collector.is_stub:
        logger.info("No collector URL configured; feedback uploads are simulated")

    weights_loader = functools.partial(
        fetch_override_weights, config.weights.override_url, config.weights.timeout_s, http
    )

    return LureAdvisor(
        config=config,
        store=store,
        conditions_service=conditions_service,
        collector=collector,
        location_provider=location_provider,
        weights_loader=weights_loader,
        rng=rng,
        on_prompt_due=on_prompt_due,
        http_client=http,
    )
