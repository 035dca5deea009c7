"""
Generic ordered pattern matcher.

Intent detection, entity extraction and natural-language suggestions are all
"try each pattern in order, build a result from every hit". They share this
one evaluator instead of three hand-written loops.

    matcher = PatternMatcher([
        PatternRule.literal("lekki", lambda m: Entity(...)),
        PatternRule.regex(r"(\\d+)\\s*bed", lambda m: int(m.group(1))),
    ])
    for hit in matcher.scan(text):
        hit.value, hit.span
"""

import re
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Iterator, List, Optional, Pattern, Tuple


@dataclass(frozen=True)
class PatternRule:
    """
    ``build`` turns a regex match into a result; returning ``None`` rejects
    the match. ``multiple`` controls whether every accepted occurrence is
    reported or only the first.
    """
    pattern: Pattern
    build: Callable[["re.Match"], Optional[Any]]
    multiple: bool = True

    @classmethod
    def literal(cls, phrase: str, build, multiple: bool = False) -> "PatternRule":
        """Case-insensitive substring match on ``phrase``."""
        return cls(re.compile(re.escape(phrase.lower()), re.IGNORECASE), build, multiple)

    @classmethod
    def regex(cls, expression: str, build, multiple: bool = True, flags: int = re.IGNORECASE) -> "PatternRule":
        return cls(re.compile(expression, flags), build, multiple)


@dataclass(frozen=True)
class PatternHit:
    rule: PatternRule
    value: Any
    span: Tuple[int, int]
    text: str


class PatternMatcher:
    """Evaluates rules in declaration order; hits come back in that order."""

    def __init__(self, rules: Iterable[PatternRule]):
        self.rules = tuple(rules)

    def scan(self, text: str) -> Iterator[PatternHit]:
        if not text:
            return
        for rule in self.rules:
            for match in rule.pattern.finditer(text):
                value = rule.build(match)
                if value is None:
                    continue
                yield PatternHit(rule=rule, value=value, span=match.span(), text=match.group(0))
                # Single-hit rules stop at their first accepted match
                if not rule.multiple:
                    break

    def collect(self, text: str) -> List[Any]:
        return [hit.value for hit in self.scan(text)]
