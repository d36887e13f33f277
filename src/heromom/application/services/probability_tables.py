from __future__ import annotations

import random
from typing import Mapping, Sequence

from heromom.application.services.balance_tables import TierRates


WEIGHT_EPSILON = 1e-6


def validate_table(table: Sequence[TierRates]) -> None:
    """Reject tables whose tiers overlap, run backwards, or whose weights do not sum to 1."""
    if not table:
        raise ValueError("Probability table must define at least one tier")
    previous_max: int | None = None
    for tier in table:
        if tier.min_level > tier.max_level:
            raise ValueError(f"Tier {tier.min_level}-{tier.max_level} is inverted")
        if previous_max is not None and tier.min_level <= previous_max:
            raise ValueError(f"Tier starting at {tier.min_level} overlaps the previous tier")
        if any(float(weight) < 0 for weight in tier.rates.values()):
            raise ValueError(f"Tier {tier.min_level}-{tier.max_level} has a negative weight")
        total = sum(float(weight) for weight in tier.rates.values())
        if abs(total - 1.0) > WEIGHT_EPSILON:
            raise ValueError(f"Tier {tier.min_level}-{tier.max_level} weights sum to {total}, expected 1.0")
        previous_max = tier.max_level


def resolve_distribution(table: Sequence[TierRates], level: int) -> Mapping[str, float]:
    if not table:
        raise ValueError("Probability table must define at least one tier")
    level = int(level)
    if level < table[0].min_level:
        return table[0].rates
    for tier in table:
        if tier.min_level <= level <= tier.max_level:
            return tier.rates
    return table[-1].rates


def draw_outcome(distribution: Mapping[str, float], rng: random.Random) -> str:
    candidates = [(category, float(weight)) for category, weight in distribution.items() if float(weight) > 0]
    if not candidates:
        raise ValueError("Distribution has no selectable outcome")
    total = sum(weight for _, weight in candidates)
    roll = rng.random() * total
    cumulative = 0.0
    for category, weight in candidates:
        cumulative += weight
        if roll < cumulative:
            return category
    return candidates[-1][0]


def draw_from_table(table: Sequence[TierRates], level: int, rng: random.Random) -> str:
    return draw_outcome(resolve_distribution(table, level), rng)
