"""Evidence-quality assessment and real-world-evidence detection."""
from __future__ import annotations

import re
from typing import Iterable, Optional

from .models import ClinicalTrial, EvidenceQuality, TrialPhase

# Hyphen and space variants ("real-world", "real world", "realworld") all match
_REAL_WORLD_EVIDENCE_PATTERN = re.compile(
    r"\b(?:"
    r"real[\s-]*world|real[\s-]*life|retrospective|cohort|registry|registries|"
    r"electronic[\s-]*health[\s-]*records?|population[\s-]*based|"
    r"post[\s-]*marketing|pharmacovigilance"
    r")",
    re.IGNORECASE,
)

LARGE_SAMPLE_THRESHOLD = 500

# (minimum score, verdict), evaluated top-down
_QUALITY_THRESHOLDS: tuple[tuple[int, EvidenceQuality], ...] = (
    (7, EvidenceQuality.HIGH),
    (4, EvidenceQuality.MEDIUM),
)


def has_real_world_evidence(text: str | None) -> bool:
    """True when the text uses retrospective, registry or other observational vocabulary."""
    if not text:
        return False
    return _REAL_WORLD_EVIDENCE_PATTERN.search(text) is not None


class EvidenceQualityAssessor:
    """Combine trial rigor, sample size, real-world evidence and citations into a verdict."""

    def score(
        self,
        trials: Optional[Iterable[ClinicalTrial]],
        has_real_world_evidence: bool,
        citation_count: Optional[int] = None,
    ) -> int:
        trials = list(trials or ())
        phases = {trial.phase for trial in trials}
        points = 0

        if TrialPhase.PHASE_IV in phases:
            points += 3
        elif TrialPhase.PHASE_III in phases:
            points += 2
        elif trials:
            points += 1

        if any((trial.sample_size or 0) > LARGE_SAMPLE_THRESHOLD for trial in trials):
            points += 2
        if has_real_world_evidence:
            points += 2

        citations = citation_count or 0
        if citations > 100:
            points += 2
        elif citations > 50:
            points += 1
        return points

    def assess(
        self,
        trials: Optional[Iterable[ClinicalTrial]],
        has_real_world_evidence: bool,
        citation_count: Optional[int] = None,
    ) -> EvidenceQuality:
        points = self.score(trials, has_real_world_evidence, citation_count)
        for minimum, verdict in _QUALITY_THRESHOLDS:
            if points >= minimum:
                return verdict
        return EvidenceQuality.LOW


__all__ = ["EvidenceQualityAssessor", "LARGE_SAMPLE_THRESHOLD", "has_real_world_evidence"]
