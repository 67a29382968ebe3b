"""Drug combination and interaction language detection."""
from __future__ import annotations

import logging
import re

from .models import DrugInteraction, InteractionType, Severity

logger = logging.getLogger(__name__)

# Two word/hyphen tokens joined by "and", "with", "plus" or "+"
_COMBINATION_PATTERN = re.compile(
    r"(?<![\w-])(?P<first>[\w-]+)(?:\s+(?:and|with|plus)\s+|\s*\+\s*)(?P<second>[\w-]+)",
    re.IGNORECASE,
)

# Plain substrings, tested in this order over the whole document
_INTERACTION_PATTERNS: tuple[tuple[InteractionType, re.Pattern[str]], ...] = (
    (InteractionType.SYNERGISTIC, re.compile(r"synerg|potentiat|enhance|augment", re.IGNORECASE)),
    (InteractionType.ANTAGONISTIC, re.compile(r"antagoni|inhibit|block|reduce", re.IGNORECASE)),
    (InteractionType.ADDITIVE, re.compile(r"additive|cumulative|combined", re.IGNORECASE)),
    (InteractionType.CONTRAINDICATED, re.compile(r"contraindic|avoid|dangerous|toxic", re.IGNORECASE)),
)

# First matching severity wins
_SEVERITY_PATTERNS: tuple[tuple[Severity, re.Pattern[str]], ...] = (
    (Severity.SEVERE, re.compile(r"severe|fatal|death|toxic|dangerous", re.IGNORECASE)),
    (Severity.MODERATE, re.compile(r"moderate|caution|monitor", re.IGNORECASE)),
    (Severity.MILD, re.compile(r"mild|minor|slight", re.IGNORECASE)),
)

INTERACTION_CONFIDENCE = 0.7


def find_combinations(text: str) -> list[tuple[str, str]]:
    """Return ``(compound1, compound2)`` surface-form pairs in text order."""
    return [(match.group("first"), match.group("second")) for match in _COMBINATION_PATTERN.finditer(text)]


def detect_interaction_types(text: str) -> list[InteractionType]:
    return [interaction_type for interaction_type, pattern in _INTERACTION_PATTERNS if pattern.search(text)]


def assess_severity(text: str) -> Severity:
    for severity, pattern in _SEVERITY_PATTERNS:
        if pattern.search(text):
            return severity
    return Severity.UNKNOWN


def describe_interaction(interaction_type: InteractionType, compound1: str, compound2: str) -> str:
    return f"{interaction_type.value} interaction between {compound1} and {compound2}"


class InteractionExtractor:
    """Pair drug combinations with the interaction vocabulary of the document.

    Interaction type and severity are document-level signals: every matching
    interaction vocabulary yields one record per combination, so a single pair
    can carry several interaction types.
    """

    def extract(self, text: str | None) -> list[DrugInteraction]:
        if not text or not text.strip():
            return []

        combinations = find_combinations(text)
        if not combinations:
            return []
        interaction_types = detect_interaction_types(text)
        if not interaction_types:
            return []
        severity = assess_severity(text)

        interactions = [
            DrugInteraction(
                compound1=compound1,
                compound2=compound2,
                interaction_type=interaction_type,
                severity=severity,
                description=describe_interaction(interaction_type, compound1, compound2),
                confidence=INTERACTION_CONFIDENCE,
            )
            for compound1, compound2 in combinations
            for interaction_type in interaction_types
        ]
        logger.debug(
            "Detected %d combinations with %d interaction types",
            len(combinations),
            len(interaction_types),
        )
        return interactions


__all__ = [
    "INTERACTION_CONFIDENCE",
    "InteractionExtractor",
    "assess_severity",
    "describe_interaction",
    "detect_interaction_types",
    "find_combinations",
]
