"""
Lure scoring: converts ``Conditions`` into a single recommended lure with
color, retrieve and depth guidance.

Algorithm
---------
1. Seed every catalog lure with its base weight. An override map
   (lure name → weight) *replaces* the base weight for the lures it names;
   unknown names are ignored.
2. Add the deltas of every firing rule from ``rules.ALL_RULES``
   (cover, clarity, time, season, spawn).
3. Pick the highest score. When several lures share the exact top score, a
   random perturbation drawn from the injected ``random.Random`` decides
   among *those lures only*, so a strictly higher score always wins and
   exactly tied lures win with equal probability. With ``jitter=False`` the
   first tied lure in catalog order wins.
4. Color comes from clarity; retrieve and depth from the winner's profile.

Everything here is pure: no I/O, no logging, no global RNG.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Mapping, Optional

from lureiq.catalog.lures import COLOR_BY_CLARITY, LURE_CATALOG, catalog_by_name
from lureiq.models.conditions import Conditions
from lureiq.models.recommendation import LureProfile, ScoredRecommendation
from lureiq.recommendations.rules import ALL_RULES, Rule, rules_firing


@dataclass
class ScoreBreakdown:
    """Final per-lure scores and the rules that produced them.

    Attributes:
        scores: Lure name → final score, in catalog order.
        fired_rules: Rules that fired, in table order.
    """

    scores: dict[str, float]
    fired_rules: list[Rule] = field(default_factory=list)

    @property
    def top_score(self) -> float:
        return max(self.scores.values())

    def tied_leaders(self) -> list[str]:
        """Lures sharing the top score, in catalog order."""
        top = self.top_score
        return [name for name, value in self.scores.items() if value == top]

    def ranked(self) -> list[tuple[str, float]]:
        """(lure, score) pairs, best first; ties keep catalog order."""
        return sorted(self.scores.items(), key=lambda kv: kv[1], reverse=True)


def seed_scores(
    catalog: tuple[LureProfile, ...] = LURE_CATALOG,
    overrides: Optional[Mapping[str, float]] = None,
) -> dict[str, float]:
    """Starting score for each lure: override weight if present, else base weight."""
    overrides = overrides or {}
    scores: dict[str, float] = {}
    for profile in catalog:
        override = overrides.get(profile.name)
        if isinstance(override, (int, float)) and not isinstance(override, bool):
            scores[profile.name] = float(override)
        else:
            scores[profile.name] = float(profile.base_weight)
    return scores


def compute_scores(
    conditions: Conditions,
    catalog: tuple[LureProfile, ...] = LURE_CATALOG,
    overrides: Optional[Mapping[str, float]] = None,
    rules: tuple[Rule, ...] = ALL_RULES,
) -> ScoreBreakdown:
    """Seed and adjust every lure's score for ``conditions``.

    Deltas naming lures absent from ``catalog`` are skipped, which lets a
    trimmed catalog reuse the full rule table.
    """
    scores = seed_scores(catalog, overrides)
    fired = rules_firing(conditions, rules)
    for rule in fired:
        for lure, delta in rule.deltas.items():
            if lure in scores:
                scores[lure] += delta
    return ScoreBreakdown(scores=scores, fired_rules=fired)


def select_winner(
    breakdown: ScoreBreakdown,
    rng: Optional[random.Random] = None,
    jitter: bool = True,
) -> str:
    """Return the winning lure name.

    Args:
        breakdown: Output of ``compute_scores``.
        rng: Source for the tie-break perturbation. A fresh unseeded
            ``random.Random`` is used when ``None``.
        jitter: ``False`` disables the perturbation (first tied lure wins).
    """
    leaders = breakdown.tied_leaders()
    if len(leaders) == 1 or not jitter:
        return leaders[0]
    rng = rng or random.Random()
    # Perturbation in [0, 0.01) only among exact ties
    return max(leaders, key=lambda _name: rng.random() * 0.01)


def score(
    conditions: Conditions,
    catalog: tuple[LureProfile, ...] = LURE_CATALOG,
    overrides: Optional[Mapping[str, float]] = None,
    rng: Optional[random.Random] = None,
    jitter: bool = True,
) -> ScoredRecommendation:
    """Recommend one lure for ``conditions``.

    Raises:
        ValueError: If clarity or cover is unset, or the catalog is empty.
            Callers are expected to gate on ``Conditions.is_scoreable``.
    """
    if not conditions.is_scoreable:
        raise ValueError("Scoring requires both clarity and cover to be set.")
    if not catalog:
        raise ValueError("Lure catalog is empty.")

    breakdown = compute_scores(conditions, catalog, overrides)
    winner = select_winner(breakdown, rng=rng, jitter=jitter)
    profile = catalog_by_name(catalog)[winner]

    return ScoredRecommendation(
        lure=winner,
        color=COLOR_BY_CLARITY[conditions.clarity],
        retrieve=profile.retrieve,
        depth=profile.depth,
    )


def build_reasoning(breakdown: ScoreBreakdown, winner: str) -> str:
    """Semicolon-separated list of the rules that favoured ``winner``.

    Returns e.g. ``"grass (+3); muddy (+2); low light (+1)"``.
    """
    reasons = [
        f"{rule.name} ({rule.deltas[winner]:+d})"
        for rule in breakdown.fired_rules
        if rule.deltas.get(winner)
    ]
    return "; ".join(reasons) or "Base weight only"
