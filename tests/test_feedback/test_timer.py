"""Tests for OneShotTimer — cancel-then-arm with stale-fire protection."""

from __future__ import annotations

import asyncio

import pytest

from lureiq.feedback.timer import OneShotTimer


class _Counter:
    def __init__(self):
        self.fired = 0

    def __call__(self):
        self.fired += 1


@pytest.mark.asyncio
async def test_fires_once_after_delay():
    counter = _Counter()
    timer = OneShotTimer(counter)
    timer.cancel_and_reschedule(0.01)
    assert timer.armed

    await asyncio.sleep(0.05)
    assert counter.fired == 1
    assert not timer.armed


@pytest.mark.asyncio
async def test_rescheduling_never_stacks():
    counter = _Counter()
    timer = OneShotTimer(counter)
    for _ in range(5):
        timer.cancel_and_reschedule(0.01)

    await asyncio.sleep(0.05)
    assert counter.fired == 1


@pytest.mark.asyncio
async def test_cancel_prevents_fire():
    counter = _Counter()
    timer = OneShotTimer(counter)
    timer.cancel_and_reschedule(0.01)
    timer.cancel()

    await asyncio.sleep(0.05)
    assert counter.fired == 0
    assert not timer.armed


@pytest.mark.asyncio
async def test_stale_generation_is_ignored():
    counter = _Counter()
    timer = OneShotTimer(counter)
    timer.cancel_and_reschedule(10)
    stale = timer.generation
    timer.cancel()

    timer._fire(stale)
    assert counter.fired == 0


@pytest.mark.asyncio
async def test_negative_delay_fires_immediately():
    counter = _Counter()
    timer = OneShotTimer(counter)
    timer.cancel_and_reschedule(-5)

    await asyncio.sleep(0.01)
    assert counter.fired == 1


def test_cancel_without_loop_is_safe():
    timer = OneShotTimer(_Counter())
    timer.cancel()
    assert not timer.armed
