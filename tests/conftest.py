"""
Shared pytest fixtures for the LureIQ test suite.

Provides:
  - ``memory_store``: A fresh ``InMemoryKeyValueStore`` per test.
  - ``sqlite_store``: A ``SqliteKeyValueStore`` in the test's tmp directory.
  - ``fake_clock``: A settable epoch-millisecond clock.
  - ``RecordingCollector`` / ``FailingCollector``: collector doubles.
  - Sample conditions, recommendation and prompt factories.
"""

from __future__ import annotations

from typing import Sequence

import pytest

from lureiq.feedback.queue import FeedbackQueue, FeedbackUploader
from lureiq.ingestion.exceptions import CollectorError
from lureiq.models.conditions import Conditions, Coordinates
from lureiq.models.feedback import FeedbackOutcome, FeedbackRecord
from lureiq.models.recommendation import RecommendationRecord
from lureiq.storage.kv_store import InMemoryKeyValueStore, SqliteKeyValueStore
from lureiq.taxonomy.conditions import Clarity, Cover, Season, SpawnPhase, TimeOfDay

# 2024-05-01T12:00:00Z
T0_MS = 1_714_564_800_000


# ── Clock ─────────────────────────────────────────────────────────────────────

class FakeClock:
    """Callable epoch-ms clock that only moves when told to."""

    def __init__(self, start_ms: int = T0_MS) -> None:
        self.now = start_ms

    def __call__(self) -> int:
        return self.now

    def advance(self, *, ms: int = 0, seconds: float = 0, minutes: float = 0) -> int:
        self.now += ms + int(seconds * 1000) + int(minutes * 60_000)
        return self.now


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


# ── Collectors ────────────────────────────────────────────────────────────────

class RecordingCollector:
    """Accepts every batch and remembers it."""

    def __init__(self) -> None:
        self.batches: list[list[FeedbackRecord]] = []

    async def upload(self, records: Sequence[FeedbackRecord]) -> None:
        self.batches.append(list(records))


class FailingCollector:
    """Rejects every batch."""

    def __init__(self) -> None:
        self.attempts = 0

    async def upload(self, records: Sequence[FeedbackRecord]) -> None:
        self.attempts += 1
        raise CollectorError("collector unavailable", source="test", status_code=503)


@pytest.fixture
def recording_collector() -> RecordingCollector:
    return RecordingCollector()


@pytest.fixture
def failing_collector() -> FailingCollector:
    return FailingCollector()


# ── Stores and queue ──────────────────────────────────────────────────────────

@pytest.fixture
def memory_store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def sqlite_store(tmp_path) -> SqliteKeyValueStore:
    """Durable store in a per-test directory."""
    return SqliteKeyValueStore(str(tmp_path / "db" / "lureiq.db"))


@pytest.fixture
def feedback_queue(memory_store) -> FeedbackQueue:
    return FeedbackQueue(memory_store)


@pytest.fixture
def uploader(feedback_queue, recording_collector) -> FeedbackUploader:
    return FeedbackUploader(feedback_queue, recording_collector)


# ── Sample domain objects ─────────────────────────────────────────────────────

@pytest.fixture
def sample_coordinates() -> Coordinates:
    return Coordinates(lat=41.6717, lon=-72.9426)


@pytest.fixture
def sample_conditions(sample_coordinates) -> Conditions:
    """Fully resolved, scoreable conditions."""
    return Conditions(
        clarity=Clarity.STAINED,
        cover=Cover.WOOD,
        time_of_day=TimeOfDay.MORNING,
        season=Season.SPRING,
        spawn_phase=SpawnPhase.PRE_SPAWN,
        coordinates=sample_coordinates,
    )


@pytest.fixture
def sample_recommendation() -> RecommendationRecord:
    return RecommendationRecord(
        id="Flipping Jig|Chartreuse/White or Junebug|Morning|Spring|Stained|Wood|Pre-Spawn|nocoords|1",
        lure_name="Flipping Jig",
        color="Chartreuse/White or Junebug",
        depth="1-15 ft",
    )


@pytest.fixture
def caught_outcome() -> FeedbackOutcome:
    return FeedbackOutcome(caught=True, count=2, notes="two on the dock")


@pytest.fixture
def make_record():
    """Factory for queued ``FeedbackRecord`` objects."""

    def _make(
        record_id: str = "rec-1",
        timestamp: int = T0_MS,
        caught: bool = True,
        lure_name: str = "Chatterbait",
    ) -> FeedbackRecord:
        return FeedbackRecord(
            id=record_id,
            recommendation_id=f"{record_id}-rec",
            lure_name=lure_name,
            caught=caught,
            timestamp=timestamp,
        )

    return _make
