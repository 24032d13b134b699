"""
Conditional score adjustments for the lure scorer.

Five rule groups, applied in this order (order is irrelevant to the result
because every delta is additive):

  cover    — structure-specific presentations
  clarity  — visibility and vibration
  time     — light window
  season   — seasonal patterns
  spawn    — spawn-stage behaviour

Each ``Rule`` pairs a predicate over ``Conditions`` with a ``{lure: delta}``
map. Every rule whose predicate holds contributes its deltas; several rules in
the same group may fire together.

Predicates only ever compare enum fields, so a ``None`` field simply fails
any equality check.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from lureiq.catalog.lures import (
    BLADE_BAIT,
    CAROLINA_RIG,
    CHATTERBAIT,
    DROP_SHOT,
    FLIPPING_JIG,
    FOOTBALL_JIG,
    JERKBAIT,
    LIPLESS,
    NED_RIG,
    POPPING_FROG,
    SENKO,
    SOFT_SWIMBAIT,
    SPINNERBAIT,
    SQUAREBILL,
    SWIM_JIG,
    TEXAS_RIG,
    UNDERSPIN,
    WALKING_TOPWATER,
)
from lureiq.models.conditions import Conditions
from lureiq.taxonomy.conditions import Clarity, Cover, Season, SpawnPhase, TimeOfDay

RULE_GROUPS: tuple[str, ...] = ("cover", "clarity", "time", "season", "spawn")

Predicate = Callable[[Conditions], bool]


@dataclass(frozen=True)
class Rule:
    """One conditional adjustment.

    Attributes:
        group: One of ``RULE_GROUPS``.
        name: Short description, surfaced in score explanations.
        predicate: Fires the rule when it returns ``True``.
        deltas: Lure name → score change (may be negative).
    """

    group: str
    name: str
    predicate: Predicate
    deltas: dict[str, int]

    def applies(self, conditions: Conditions) -> bool:
        return self.predicate(conditions)


# ── Predicate helpers ─────────────────────────────────────────────────────────

_LOW_LIGHT = (TimeOfDay.MORNING, TimeOfDay.EVENING)


def _low_light(c: Conditions) -> bool:
    return c.time_of_day in _LOW_LIGHT


def _cold_or_prespawn(c: Conditions) -> bool:
    return c.season == Season.WINTER or c.spawn_phase == SpawnPhase.PRE_SPAWN


# ── Rule table ────────────────────────────────────────────────────────────────

COVER_RULES: tuple[Rule, ...] = (
    # Grass
    Rule("cover", "grass", lambda c: c.cover == Cover.GRASS,
         {SWIM_JIG: 3, CHATTERBAIT: 3}),
    Rule("cover", "grass in fall", lambda c: c.cover == Cover.GRASS and c.season == Season.FALL,
         {LIPLESS: 3}),
    Rule("cover", "grass, summer low light",
         lambda c: c.cover == Cover.GRASS and c.season == Season.SUMMER and _low_light(c),
         {POPPING_FROG: 3}),
    # Wood
    Rule("cover", "wood", lambda c: c.cover == Cover.WOOD,
         {FLIPPING_JIG: 3, TEXAS_RIG: 2}),
    Rule("cover", "wood, summer midday/evening",
         lambda c: (
             c.cover == Cover.WOOD
             and c.season == Season.SUMMER
             and c.time_of_day in (TimeOfDay.MIDDAY, TimeOfDay.EVENING)
         ),
         {CAROLINA_RIG: 2}),
    # Rock
    Rule("cover", "rock", lambda c: c.cover == Cover.ROCK,
         {FOOTBALL_JIG: 3}),
    Rule("cover", "rock in spring/fall",
         lambda c: c.cover == Cover.ROCK and c.season in (Season.SPRING, Season.FALL),
         {SQUAREBILL: 2}),
    Rule("cover", "rock in summer", lambda c: c.cover == Cover.ROCK and c.season == Season.SUMMER,
         {CAROLINA_RIG: 2}),
    Rule("cover", "rock, clear winter water",
         lambda c: c.cover == Cover.ROCK and c.season == Season.WINTER and c.clarity == Clarity.CLEAR,
         {JERKBAIT: 3}),
    Rule("cover", "rock in winter", lambda c: c.cover == Cover.ROCK and c.season == Season.WINTER,
         {BLADE_BAIT: 3}),
    # Open water
    Rule("cover", "open water", lambda c: c.cover == Cover.OPEN,
         {DROP_SHOT: 1}),
    Rule("cover", "open water, low light", lambda c: c.cover == Cover.OPEN and _low_light(c),
         {WALKING_TOPWATER: 3}),
    Rule("cover", "open, clear spring/fall",
         lambda c: (
             c.cover == Cover.OPEN
             and c.clarity == Clarity.CLEAR
             and c.season in (Season.FALL, Season.SPRING)
         ),
         {SOFT_SWIMBAIT: 3}),
    Rule("cover", "open, cold or pre-spawn, not muddy",
         lambda c: c.cover == Cover.OPEN and c.clarity != Clarity.MUDDY and _cold_or_prespawn(c),
         {UNDERSPIN: 2}),
    Rule("cover", "open, clear", lambda c: c.cover == Cover.OPEN and c.clarity == Clarity.CLEAR,
         {NED_RIG: 2}),
    Rule("cover", "open, off-color", lambda c: c.cover == Cover.OPEN and c.clarity != Clarity.CLEAR,
         {SENKO: 1}),
)

CLARITY_RULES: tuple[Rule, ...] = (
    Rule("clarity", "clear", lambda c: c.clarity == Clarity.CLEAR,
         {SOFT_SWIMBAIT: 1, NED_RIG: 2, SPINNERBAIT: -1}),
    Rule("clarity", "clear, cold or pre-spawn",
         lambda c: c.clarity == Clarity.CLEAR and _cold_or_prespawn(c),
         {JERKBAIT: 2}),
    Rule("clarity", "clear, warm", lambda c: c.clarity == Clarity.CLEAR and not _cold_or_prespawn(c),
         {JERKBAIT: 1}),
    Rule("clarity", "stained", lambda c: c.clarity == Clarity.STAINED,
         {CHATTERBAIT: 1, SPINNERBAIT: 1}),
    Rule("clarity", "muddy", lambda c: c.clarity == Clarity.MUDDY,
         {CHATTERBAIT: 2, SPINNERBAIT: 2, LIPLESS: -2, JERKBAIT: -3, NED_RIG: -2}),
)

TIME_RULES: tuple[Rule, ...] = (
    Rule("time", "low light", _low_light,
         {WALKING_TOPWATER: 2, CHATTERBAIT: 1}),
    Rule("time", "low light over grass", lambda c: _low_light(c) and c.cover == Cover.GRASS,
         {POPPING_FROG: 2}),
    Rule("time", "midday", lambda c: c.time_of_day == TimeOfDay.MIDDAY,
         {CAROLINA_RIG: 1, FOOTBALL_JIG: 1, DROP_SHOT: 1}),
)

SEASON_RULES: tuple[Rule, ...] = (
    Rule("season", "winter", lambda c: c.season == Season.WINTER,
         {BLADE_BAIT: 2, FOOTBALL_JIG: 1, DROP_SHOT: 1, WALKING_TOPWATER: -3, POPPING_FROG: -4}),
    Rule("season", "clear winter water", lambda c: c.season == Season.WINTER and c.clarity == Clarity.CLEAR,
         {JERKBAIT: 2}),
    Rule("season", "spring", lambda c: c.season == Season.SPRING,
         {CHATTERBAIT: 2, SENKO: 1, TEXAS_RIG: 1}),
    Rule("season", "summer", lambda c: c.season == Season.SUMMER,
         {CAROLINA_RIG: 1, SWIM_JIG: 1, WALKING_TOPWATER: 1}),
    Rule("season", "summer grass", lambda c: c.season == Season.SUMMER and c.cover == Cover.GRASS,
         {POPPING_FROG: 2}),
    Rule("season", "fall", lambda c: c.season == Season.FALL,
         {LIPLESS: 2}),
    Rule("season", "fall, not muddy", lambda c: c.season == Season.FALL and c.clarity != Clarity.MUDDY,
         {SPINNERBAIT: 2}),
    Rule("season", "clear fall water", lambda c: c.season == Season.FALL and c.clarity == Clarity.CLEAR,
         {SOFT_SWIMBAIT: 1}),
)

SPAWN_RULES: tuple[Rule, ...] = (
    Rule("spawn", "pre-spawn", lambda c: c.spawn_phase == SpawnPhase.PRE_SPAWN,
         {CHATTERBAIT: 2}),
    Rule("spawn", "pre-spawn, clear",
         lambda c: c.spawn_phase == SpawnPhase.PRE_SPAWN and c.clarity == Clarity.CLEAR,
         {JERKBAIT: 1}),
    Rule("spawn", "spawn", lambda c: c.spawn_phase == SpawnPhase.SPAWN,
         {SENKO: 3, TEXAS_RIG: 3, JERKBAIT: -3, LIPLESS: -2}),
    Rule("spawn", "post-spawn", lambda c: c.spawn_phase == SpawnPhase.POST_SPAWN,
         {SOFT_SWIMBAIT: 2, WALKING_TOPWATER: 2, SWIM_JIG: 1}),
)

ALL_RULES: tuple[Rule, ...] = (
    COVER_RULES + CLARITY_RULES + TIME_RULES + SEASON_RULES + SPAWN_RULES
)


def rules_firing(conditions: Conditions, rules: tuple[Rule, ...] = ALL_RULES) -> list[Rule]:
    """Return the rules whose predicates hold, in table order."""
    return [rule for rule in rules if rule.applies(conditions)]
