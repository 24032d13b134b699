"""
Clock helpers.

Persisted timestamps (``ScheduledPrompt.due_at``, ``FeedbackRecord.timestamp``)
are integer epoch milliseconds. Condition inference works on naive local
datetimes because the weather source reports hourly samples in the
location's local time (``timezone=auto``).
"""

from __future__ import annotations

import time
from datetime import datetime

MS_PER_SECOND = 1000
MS_PER_MINUTE = 60 * MS_PER_SECOND
MS_PER_HOUR = 60 * MS_PER_MINUTE
MS_PER_DAY = 24 * MS_PER_HOUR


def now_ms() -> int:
    """Return the current wall-clock time as integer epoch milliseconds."""
    return int(time.time() * MS_PER_SECOND)


def local_now() -> datetime:
    """Return the current local time as a naive datetime."""
    return datetime.now()


def as_naive_local(dt: datetime) -> datetime:
    """Drop timezone info from ``dt`` after converting it to local time.

    Naive inputs are returned unchanged.
    """
    if dt.tzinfo is None:
        return dt
    return dt.astimezone().replace(tzinfo=None)


def hours_between(later: datetime, earlier: datetime) -> float:
    """Signed hours from ``earlier`` to ``later``."""
    return (later - earlier).total_seconds() / 3600.0
