"""Tests for the conditional rule table in lureiq/recommendations/rules.py."""

from __future__ import annotations

from lureiq.catalog.lures import lure_names
from lureiq.models.conditions import Conditions
from lureiq.recommendations.rules import ALL_RULES, RULE_GROUPS, rules_firing
from lureiq.taxonomy.conditions import Clarity, Cover, Season, SpawnPhase, TimeOfDay


class TestRuleTable:
    def test_every_delta_names_a_catalog_lure(self):
        names = set(lure_names())
        for rule in ALL_RULES:
            assert set(rule.deltas) <= names, rule.name

    def test_every_rule_has_known_group(self):
        assert {rule.group for rule in ALL_RULES} <= set(RULE_GROUPS)

    def test_groups_appear_in_order(self):
        seen = [rule.group for rule in ALL_RULES]
        first_index = [seen.index(group) for group in RULE_GROUPS]
        assert first_index == sorted(first_index)


class TestRulesFiring:
    def test_empty_conditions_fire_nothing(self):
        assert rules_firing(Conditions()) == []

    def test_multiple_rules_in_one_group(self):
        cond = Conditions(
            clarity=Clarity.CLEAR,
            cover=Cover.ROCK,
            season=Season.WINTER,
            time_of_day=TimeOfDay.MIDDAY,
        )
        cover_rules = [r.name for r in rules_firing(cond) if r.group == "cover"]
        assert cover_rules == ["rock", "rock, clear winter water", "rock in winter"]

    def test_low_light_covers_morning_and_evening(self):
        for tod in (TimeOfDay.MORNING, TimeOfDay.EVENING):
            names = [r.name for r in rules_firing(Conditions(time_of_day=tod))]
            assert "low light" in names
        names = [r.name for r in rules_firing(Conditions(time_of_day=TimeOfDay.NIGHT))]
        assert "low light" not in names

    def test_prespawn_counts_as_cold_for_clear_water(self):
        cond = Conditions(clarity=Clarity.CLEAR, season=Season.SPRING, spawn_phase=SpawnPhase.PRE_SPAWN)
        names = [r.name for r in rules_firing(cond)]
        assert "clear, cold or pre-spawn" in names
        assert "clear, warm" not in names

    def test_spawn_rule(self):
        names = [r.name for r in rules_firing(Conditions(spawn_phase=SpawnPhase.SPAWN))]
        assert names == ["spawn"]
