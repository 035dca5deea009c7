"""
Declarative score rules.

A score is an ordered list of ``ScoreRule`` objects evaluated against a
context. Each rule contributes ``weight × strength`` where strength comes from
its predicate: ``True``/``False`` for all-or-nothing criteria, or a fraction in
``[0, 1]`` for partial credit (amenity overlap). Rules that fire add their
reason text to the explanation.

    rules = (
        ScoreRule("location", 0.4, lambda c: c.in_area, "Location match"),
        ScoreRule("amenities", 0.1, lambda c: c.overlap, "Amenities match"),
    )
    outcome = evaluate(rules, ctx)
    outcome.score, outcome.reasons
"""

from dataclasses import dataclass
from typing import Any, Callable, Sequence, Tuple, Union

Strength = Union[bool, float]


@dataclass(frozen=True)
class ScoreRule:
    name: str
    weight: float
    predicate: Callable[[Any], Strength]
    # Plain text, or a callable building the text from the context
    reason: Union[str, Callable[[Any], str]]

    def strength(self, ctx) -> float:
        value = self.predicate(ctx)
        if value is True:
            return 1.0
        if not value:
            return 0.0
        return max(0.0, min(float(value), 1.0))

    def describe(self, ctx) -> str:
        return self.reason(ctx) if callable(self.reason) else self.reason


@dataclass(frozen=True)
class ScoreOutcome:
    score: float
    matched: Tuple[str, ...]
    reasons: Tuple[str, ...]


def evaluate(rules: Sequence[ScoreRule], ctx, cap: float = 1.0) -> ScoreOutcome:
    """Sum the weighted strengths of ``rules`` over ``ctx``, clamped to ``cap``."""
    total = 0.0
    matched = []
    reasons = []
    for rule in rules:
        strength = rule.strength(ctx)
        if strength <= 0:
            continue
        total += rule.weight * strength
        matched.append(rule.name)
        reasons.append(rule.describe(ctx))
    return ScoreOutcome(score=min(total, cap), matched=tuple(matched), reasons=tuple(reasons))
