"""Clinical-trial phase detection and document-level trial attributes."""
from __future__ import annotations

import logging
import re
from typing import Iterable, Optional

from .models import ClinicalTrial, TrialPhase

logger = logging.getLogger(__name__)

# Output order of detected phases
_PHASE_PATTERNS: tuple[tuple[TrialPhase, re.Pattern[str]], ...] = (
    (TrialPhase.PHASE_I, re.compile(r"\bphase\s*(?:i|1)\b", re.IGNORECASE)),
    (TrialPhase.PHASE_II, re.compile(r"\bphase\s*(?:ii|2)\b", re.IGNORECASE)),
    (TrialPhase.PHASE_III, re.compile(r"\bphase\s*(?:iii|3)\b", re.IGNORECASE)),
    (TrialPhase.PHASE_IV, re.compile(r"\bphase\s*(?:iv|4)\b", re.IGNORECASE)),
    (TrialPhase.PRECLINICAL, re.compile(r"preclinical|in\s*vitro|in\s*vivo", re.IGNORECASE)),
)

_COUNT = r"\d{1,3}(?:,\d{3})+|\d+"

# "120 patients", "48 subjects" and "n = 420"; the leftmost match in the text wins
_SAMPLE_SIZE_PATTERN = re.compile(
    rf"\b(?P<count>{_COUNT})\s*(?:patients?|subjects?)\b|\bn\s*=\s*(?P<n_count>{_COUNT})",
    re.IGNORECASE,
)

_EFFICACY_PATTERN = re.compile(
    r"efficacy|effective|response\s*rate|survival|improvement",
    re.IGNORECASE,
)

_DURATION_PATTERN = re.compile(
    r"\b(?P<value>\d{1,3})[\s-]*(?P<unit>days?|weeks?|months?|years?)\b",
    re.IGNORECASE,
)

_ADVERSE_EVENT_TERMS: tuple[str, ...] = (
    "nausea",
    "vomiting",
    "diarrhea",
    "headache",
    "fatigue",
    "dizziness",
    "rash",
    "hepatotoxicity",
    "nephrotoxicity",
    "neutropenia",
    "anemia",
    "thrombocytopenia",
    "bleeding",
    "hypoglycemia",
    "hypotension",
    "infection",
)
_ADVERSE_EVENT_PATTERN = re.compile(
    r"\b(" + "|".join(_ADVERSE_EVENT_TERMS) + r")\b",
    re.IGNORECASE,
)

_PRIMARY_ENDPOINT_PATTERN = re.compile(
    r"\bprimary\s+(?:end\s*-?\s*point|outcome)s?\s*(?:was|were|is|:)\s*(?P<value>[^.;]+)",
    re.IGNORECASE,
)
_SECONDARY_ENDPOINT_PATTERN = re.compile(
    r"\bsecondary\s+(?:end\s*-?\s*point|outcome)s?\s*(?:were|was|included|include|are|:)\s*(?P<value>[^.;]+)",
    re.IGNORECASE,
)
_LIST_SPLIT = re.compile(r"\s*,\s*(?:and\s+)?|\s+and\s+", re.IGNORECASE)


def highest_trial_phase(trials: Optional[Iterable[ClinicalTrial]]) -> TrialPhase:
    """Return the most advanced phase among ``trials``; UNKNOWN when none is ordered."""
    highest = TrialPhase.UNKNOWN
    for trial in trials or ():
        if trial.phase.rank > highest.rank:
            highest = trial.phase
    return highest


def extract_sample_size(text: str) -> int | None:
    match = _SAMPLE_SIZE_PATTERN.search(text)
    if not match:
        return None
    raw = match.group("count") or match.group("n_count")
    try:
        return int(raw.replace(",", ""))
    except (TypeError, ValueError):
        return None


def extract_duration(text: str) -> str | None:
    match = _DURATION_PATTERN.search(text)
    if not match:
        return None
    return f"{int(match.group('value'))} {match.group('unit').lower()}"


def extract_adverse_events(text: str) -> tuple[str, ...] | None:
    seen: dict[str, None] = {}
    for match in _ADVERSE_EVENT_PATTERN.finditer(text):
        seen.setdefault(match.group(1).lower(), None)
    return tuple(seen) or None


def extract_endpoints(text: str) -> tuple[str | None, tuple[str, ...] | None]:
    primary_match = _PRIMARY_ENDPOINT_PATTERN.search(text)
    primary = primary_match.group("value").strip() if primary_match else None

    secondary: tuple[str, ...] | None = None
    secondary_match = _SECONDARY_ENDPOINT_PATTERN.search(text)
    if secondary_match:
        parts = [part.strip() for part in _LIST_SPLIT.split(secondary_match.group("value")) if part.strip()]
        secondary = tuple(parts) or None
    return primary or None, secondary


class TrialPhaseExtractor:
    """Detect clinical-trial phases mentioned in a paper.

    Each detected phase produces one record. Sample size, efficacy, duration,
    adverse events and endpoints are read from the whole document, so every
    phase record of the same paper carries the same values.
    """

    def extract(self, text: str | None) -> list[ClinicalTrial]:
        if not text or not text.strip():
            return []

        phase_counts = [(phase, len(pattern.findall(text))) for phase, pattern in _PHASE_PATTERNS]
        phase_counts = [(phase, count) for phase, count in phase_counts if count]
        if not phase_counts:
            return []

        sample_size = extract_sample_size(text)
        efficacy = "mentioned" if _EFFICACY_PATTERN.search(text) else None
        duration = extract_duration(text)
        adverse_events = extract_adverse_events(text)
        primary_endpoint, secondary_endpoints = extract_endpoints(text)

        trials = [
            ClinicalTrial(
                phase=phase,
                confidence=min(1.0, count / 10),
                sample_size=sample_size,
                duration=duration,
                efficacy=efficacy,
                adverse_events=adverse_events,
                primary_endpoint=primary_endpoint,
                secondary_endpoints=secondary_endpoints,
            )
            for phase, count in phase_counts
        ]
        logger.debug("Detected trial phases: %s", [trial.phase.value for trial in trials])
        return trials


__all__ = [
    "TrialPhaseExtractor",
    "extract_adverse_events",
    "extract_duration",
    "extract_endpoints",
    "extract_sample_size",
    "highest_trial_phase",
]
