"""
One-shot deferred trigger on the running asyncio loop.

At most one timer is outstanding per ``OneShotTimer``. Every
``cancel_and_reschedule`` bumps a generation counter and cancels the previous
handle; a callback that still fires compares its generation with the current
one and does nothing when stale. Repeated re-arming therefore never stacks
triggers.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class OneShotTimer:
    """Cancel-then-arm wrapper around ``loop.call_later``.

    Args:
        callback: Invoked with no arguments when the timer fires.
        name: Label used in debug logs.
    """

    def __init__(self, callback: Callable[[], None], name: str = "timer") -> None:
        self._callback = callback
        self._name = name
        self._handle: Optional[asyncio.TimerHandle] = None
        self._generation = 0

    @property
    def armed(self) -> bool:
        return self._handle is not None

    @property
    def generation(self) -> int:
        return self._generation

    def cancel_and_reschedule(self, delay_s: float) -> None:
        """Cancel any outstanding trigger and arm a new one ``delay_s`` from now.

        Must be called from inside a running event loop.
        """
        self.cancel()
        loop = asyncio.get_running_loop()
        generation = self._generation
        self._handle = loop.call_later(max(0.0, delay_s), self._fire, generation)
        logger.debug("%s armed for %.1fs (generation %d)", self._name, delay_s, generation)

    def cancel(self) -> None:
        """Cancel the outstanding trigger, if any."""
        self._generation += 1
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self, generation: int) -> None:
        if generation != self._generation:
            return
        self._handle = None
        self._callback()
