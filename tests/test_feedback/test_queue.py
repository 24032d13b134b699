"""
Tests for FeedbackQueue and FeedbackUploader (lureiq/feedback/queue.py).

What we test
------------
FeedbackQueue:
  - Append order is preserved; append returns the new length.
  - Corrupt or non-list storage reads as empty; bad entries are skipped.
  - remove() drops only the named ids; records_since() filters by age.
FeedbackUploader.flush():
  - Empty queue → no request, True.
  - Success → one request carrying the whole queue, queue emptied.
  - Failure → queue untouched, False; the next flush retries everything.
  - Records appended during an upload survive it.
"""

from __future__ import annotations

import asyncio
import json

import pytest

from lureiq.feedback.queue import KEY_QUEUE, FeedbackQueue, FeedbackUploader
from lureiq.utils.time_utils import MS_PER_DAY


class TestFeedbackQueue:
    def test_append_preserves_order(self, feedback_queue, make_record):
        assert feedback_queue.append(make_record("a")) == 1
        assert feedback_queue.append(make_record("b")) == 2
        assert [r.id for r in feedback_queue.read_all()] == ["a", "b"]
        assert feedback_queue.pending_count() == 2

    def test_stored_under_queue_key(self, feedback_queue, memory_store, make_record):
        feedback_queue.append(make_record("a"))
        stored = json.loads(memory_store.get(KEY_QUEUE))
        assert stored[0]["id"] == "a"

    def test_corrupt_storage_reads_empty(self, feedback_queue, memory_store, make_record):
        memory_store.set(KEY_QUEUE, "][")
        assert feedback_queue.read_all() == []
        # appending over corrupt data starts a fresh queue
        assert feedback_queue.append(make_record("a")) == 1

    def test_non_list_storage_reads_empty(self, feedback_queue, memory_store):
        memory_store.set(KEY_QUEUE, json.dumps({"id": "a"}))
        assert feedback_queue.read_all() == []

    def test_invalid_entries_skipped(self, feedback_queue, memory_store, make_record):
        good = make_record("good").model_dump(mode="json")
        memory_store.set(KEY_QUEUE, json.dumps([{"id": "broken"}, good]))
        assert [r.id for r in feedback_queue.read_all()] == ["good"]

    def test_remove_named_ids(self, feedback_queue, make_record):
        for rid in ("a", "b", "c"):
            feedback_queue.append(make_record(rid))
        assert feedback_queue.remove(["a", "c"]) == 1
        assert [r.id for r in feedback_queue.read_all()] == ["b"]
        assert feedback_queue.remove(["b"]) == 0
        assert feedback_queue.read_all() == []

    def test_records_since(self, feedback_queue, make_record, fake_clock):
        now = fake_clock()
        feedback_queue.append(make_record("old", timestamp=now - 10 * MS_PER_DAY))
        feedback_queue.append(make_record("recent", timestamp=now - 2 * MS_PER_DAY))
        assert [r.id for r in feedback_queue.records_since(7, now=now)] == ["recent"]
        assert len(feedback_queue.records_since(30, now=now)) == 2


class TestFeedbackUploader:
    @pytest.mark.asyncio
    async def test_empty_queue_is_noop(self, uploader, recording_collector):
        assert await uploader.flush() is True
        assert recording_collector.batches == []

    @pytest.mark.asyncio
    async def test_success_uploads_whole_queue_once(
        self, uploader, feedback_queue, recording_collector, make_record
    ):
        for rid in ("a", "b", "c"):
            feedback_queue.append(make_record(rid))

        assert await uploader.flush() is True
        assert len(recording_collector.batches) == 1
        assert [r.id for r in recording_collector.batches[0]] == ["a", "b", "c"]
        assert feedback_queue.pending_count() == 0

    @pytest.mark.asyncio
    async def test_failure_keeps_queue_for_retry(
        self, feedback_queue, failing_collector, recording_collector, make_record
    ):
        feedback_queue.append(make_record("a"))
        feedback_queue.append(make_record("b"))

        assert await FeedbackUploader(feedback_queue, failing_collector).flush() is False
        assert failing_collector.attempts == 1
        assert [r.id for r in feedback_queue.read_all()] == ["a", "b"]

        assert await FeedbackUploader(feedback_queue, recording_collector).flush() is True
        assert [r.id for r in recording_collector.batches[0]] == ["a", "b"]
        assert feedback_queue.pending_count() == 0

    @pytest.mark.asyncio
    async def test_record_appended_mid_upload_survives(self, feedback_queue, make_record):
        release = asyncio.Event()

        class SlowCollector:
            def __init__(self):
                self.batches = []

            async def upload(self, records):
                self.batches.append(list(records))
                await release.wait()

        collector = SlowCollector()
        uploader = FeedbackUploader(feedback_queue, collector)
        feedback_queue.append(make_record("a"))

        flush = asyncio.create_task(uploader.flush())
        await asyncio.sleep(0)
        feedback_queue.append(make_record("late"))
        release.set()

        assert await flush is True
        assert [r.id for r in collector.batches[0]] == ["a"]
        assert [r.id for r in feedback_queue.read_all()] == ["late"]

    @pytest.mark.asyncio
    async def test_concurrent_flushes_do_not_double_send(self, feedback_queue, make_record):
        class CountingCollector:
            def __init__(self):
                self.batches = []

            async def upload(self, records):
                await asyncio.sleep(0.01)
                self.batches.append(list(records))

        collector = CountingCollector()
        uploader = FeedbackUploader(feedback_queue, collector)
        feedback_queue.append(make_record("a"))

        results = await asyncio.gather(uploader.flush(), uploader.flush())

        assert results == [True, True]
        assert len(collector.batches) == 1
        assert feedback_queue.pending_count() == 0
