"""
Condition taxonomy for lure selection.

Five orthogonal dimensions describe the fishing situation:
  - ``Clarity``    — water turbidity
  - ``Cover``      — dominant structure at the spot
  - ``TimeOfDay``  — light window
  - ``Season``     — calendar season (Northern hemisphere)
  - ``SpawnPhase`` — bass reproductive stage

Values are the display labels; they are also what gets persisted and what
the CLI accepts.

This module has NO imports from any other ``lureiq`` package.
"""

from enum import StrEnum


class Clarity(StrEnum):
    """Water turbidity estimate."""

    CLEAR = "Clear"
    STAINED = "Stained"
    MUDDY = "Muddy"


class Cover(StrEnum):
    """Dominant underwater or surface structure."""

    GRASS = "Grass"
    WOOD = "Wood"
    ROCK = "Rock"
    OPEN = "Open"


class TimeOfDay(StrEnum):
    """Light window relative to sunrise and sunset."""

    MORNING = "Morning"
    MIDDAY = "Midday"
    EVENING = "Evening"
    NIGHT = "Night"


class Season(StrEnum):
    """Calendar season."""

    SPRING = "Spring"
    SUMMER = "Summer"
    FALL = "Fall"
    WINTER = "Winter"


class SpawnPhase(StrEnum):
    """Spawn stage inferred from water temperature and the spring window."""

    NONE = "None"
    PRE_SPAWN = "Pre-Spawn"
    SPAWN = "Spawn"
    POST_SPAWN = "Post-Spawn"
