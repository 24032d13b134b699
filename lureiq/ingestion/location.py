"""
Device location providers.

A location provider is any ``async () -> Coordinates | None`` callable;
``None`` means permission denied or no fix. Providers may also raise; every
caller treats location as best-effort.
"""

from __future__ import annotations

from typing import Awaitable, Callable, Optional

from lureiq.models.conditions import Coordinates

LocationProvider = Callable[[], Awaitable[Optional[Coordinates]]]


class StaticLocationProvider:
    """Returns a fixed position (CLI ``--lat/--lon``, tests)."""

    def __init__(self, coordinates: Optional[Coordinates] = None) -> None:
        self.coordinates = coordinates

    async def __call__(self) -> Optional[Coordinates]:
        return self.coordinates


async def no_location() -> Optional[Coordinates]:
    """Provider for when location access is unavailable."""
    return None
