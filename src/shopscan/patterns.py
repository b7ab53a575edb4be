"""Weighted pattern matching shared by the HTML analyzers.

Each rule carries a weight tuned to how specific its signal is: a generic
keyword gets a low weight, a unique CDN host or JS API a high one. A single
strong signal can pass a 50% threshold on its own, weak ones have to occur
together.
"""

import re
from dataclasses import dataclass
from typing import Iterable, Pattern

from shopscan.models import DetectionOutcome

MAX_CONFIDENCE = 100


@dataclass(frozen=True)
class PatternRule:
    """A (matcher, weight, evidence label) triple."""

    matcher: Pattern
    weight: int
    evidence: str

    def matches(self, text: str) -> bool:
        return self.matcher.search(text) is not None


def rule(pattern: str, weight: int, evidence: str, flags: int = re.IGNORECASE) -> PatternRule:
    """Build a rule from a regex source; matching is case-insensitive by default."""
    return PatternRule(re.compile(pattern, flags), weight, evidence)


def detect_patterns(text: str, rules: Iterable[PatternRule]) -> DetectionOutcome:
    """Evaluate every rule against the text.

    All rules are evaluated, so the evidence list follows rule order and the
    total weight reflects every matching signal.

    Args:
        text: Content to search (usually raw HTML)
        rules: Rules in evaluation order

    Returns:
        DetectionOutcome with confidence capped at 100
    """
    total_weight = 0
    evidence = []

    for pattern_rule in rules:
        if pattern_rule.matches(text):
            total_weight += pattern_rule.weight
            evidence.append(pattern_rule.evidence)

    return DetectionOutcome(
        detected=bool(evidence),
        confidence=min(MAX_CONFIDENCE, total_weight),
        evidence=evidence,
    )
