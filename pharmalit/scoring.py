"""Paper quality and pharmaceutical relevance scoring."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Union

from .evidence import has_real_world_evidence
from .models import (
    ClinicalTrial,
    EvidenceQuality,
    PaperScores,
    PharmaceuticalAnalysis,
    RecommendationLevel,
    TrialPhase,
)
from .paper_schema import ResearchPaper, coerce_paper
from .trial_extractor import highest_trial_phase

logger = logging.getLogger(__name__)

MAX_SCORE = 100.0

_HIGH_IMPACT_JOURNALS: tuple[str, ...] = (
    "nature",
    "science",
    "cell",
    "new england journal of medicine",
    "lancet",
    "jama",
    "nature medicine",
    "nature biotechnology",
)

_MEDIUM_IMPACT_JOURNALS: tuple[str, ...] = (
    "plos one",
    "scientific reports",
    "journal of medicinal chemistry",
    "drug discovery today",
    "pharmaceutical research",
)

# First tier whose list matches wins
_JOURNAL_TIERS: tuple[tuple[tuple[str, ...], float], ...] = (
    (_HIGH_IMPACT_JOURNALS, 20.0),
    (_MEDIUM_IMPACT_JOURNALS, 12.0),
)
_DEFAULT_JOURNAL_POINTS = 5.0

_PHASE_POINTS: dict[TrialPhase, float] = {
    TrialPhase.PHASE_IV: 25.0,
    TrialPhase.PHASE_III: 20.0,
    TrialPhase.PHASE_II: 15.0,
    TrialPhase.PHASE_I: 10.0,
    TrialPhase.PRECLINICAL: 5.0,
    TrialPhase.UNKNOWN: 0.0,
}

_EVIDENCE_POINTS: dict[EvidenceQuality, float] = {
    EvidenceQuality.HIGH: 20.0,
    EvidenceQuality.MEDIUM: 12.0,
    EvidenceQuality.LOW: 5.0,
}

# (minimum combined score, level), evaluated top-down
_RECOMMENDATION_THRESHOLDS: tuple[tuple[float, RecommendationLevel], ...] = (
    (80.0, RecommendationLevel.HIGHLY_RECOMMENDED),
    (60.0, RecommendationLevel.RECOMMENDED),
    (40.0, RecommendationLevel.CONSIDER),
)

REAL_WORLD_EVIDENCE_POINTS = 10.0


@dataclass
class QualityBreakdown:
    citations: float
    journal: float
    trial_phase: float
    sample_size: float
    real_world_evidence: float

    @property
    def total(self) -> float:
        raw = self.citations + self.journal + self.trial_phase + self.sample_size + self.real_world_evidence
        return min(raw, MAX_SCORE)

    def to_dict(self) -> dict[str, float]:
        return {
            "citations": self.citations,
            "journal": self.journal,
            "trial_phase": self.trial_phase,
            "sample_size": self.sample_size,
            "real_world_evidence": self.real_world_evidence,
        }


@dataclass
class RelevanceBreakdown:
    compounds: float
    trials: float
    interactions: float
    evidence: float

    @property
    def total(self) -> float:
        return min(self.compounds + self.trials + self.interactions + self.evidence, MAX_SCORE)

    def to_dict(self) -> dict[str, float]:
        return {
            "compounds": self.compounds,
            "trials": self.trials,
            "interactions": self.interactions,
            "evidence": self.evidence,
        }


def phase_points(phase: TrialPhase) -> float:
    return _PHASE_POINTS.get(phase, 0.0)


def journal_points(journal: Optional[str]) -> float:
    """Points for the journal tier, matched by case-insensitive substring."""
    journal_lower = (journal or "").lower()
    if journal_lower:
        for journals, points in _JOURNAL_TIERS:
            if any(name in journal_lower for name in journals):
                return points
    return _DEFAULT_JOURNAL_POINTS


def max_sample_size(trials: Iterable[ClinicalTrial]) -> int:
    return max((trial.sample_size or 0 for trial in trials), default=0)


class ScoringEngine:
    """Turn extracted signals and paper metadata into ranking scores.

    Both scores are sums of capped contributions and are themselves capped at
    100. A paper without an analysis scores 0 for pharmaceutical relevance.
    """

    def quality_breakdown(
        self,
        paper: Union[ResearchPaper, dict],
        analysis: Optional[PharmaceuticalAnalysis] = None,
    ) -> QualityBreakdown:
        paper = coerce_paper(paper)
        trials = analysis.clinical_trials if analysis is not None else ()

        citations = paper.citations_count or 0
        largest_sample = max_sample_size(trials)
        if analysis is not None:
            real_world = analysis.real_world_evidence
        else:
            real_world = has_real_world_evidence(paper.text)

        return QualityBreakdown(
            citations=min(citations / 10, 30.0),
            journal=journal_points(paper.journal),
            trial_phase=phase_points(highest_trial_phase(trials)),
            sample_size=min(largest_sample / 100, 15.0) if largest_sample > 0 else 0.0,
            real_world_evidence=REAL_WORLD_EVIDENCE_POINTS if real_world else 0.0,
        )

    def quality_score(
        self,
        paper: Union[ResearchPaper, dict],
        analysis: Optional[PharmaceuticalAnalysis] = None,
    ) -> float:
        return self.quality_breakdown(paper, analysis).total

    def relevance_breakdown(self, analysis: PharmaceuticalAnalysis) -> RelevanceBreakdown:
        trials = analysis.clinical_trials
        return RelevanceBreakdown(
            compounds=min(len(analysis.drug_compounds) * 5.0, 25.0),
            trials=5.0 * len(trials) + phase_points(highest_trial_phase(trials)),
            interactions=min(len(analysis.drug_interactions) * 10.0, 20.0),
            evidence=_EVIDENCE_POINTS[analysis.evidence_quality],
        )

    def pharmaceutical_score(self, analysis: Optional[PharmaceuticalAnalysis]) -> float:
        if analysis is None:
            return 0.0
        return self.relevance_breakdown(analysis).total

    def recommendation_level(self, pharmaceutical_score: float, quality_score: float) -> RecommendationLevel:
        combined = (pharmaceutical_score + quality_score) / 2
        for minimum, level in _RECOMMENDATION_THRESHOLDS:
            if combined >= minimum:
                return level
        return RecommendationLevel.NOT_RECOMMENDED

    def score_paper(
        self,
        paper: Union[ResearchPaper, dict],
        analysis: Optional[PharmaceuticalAnalysis] = None,
    ) -> PaperScores:
        quality = self.quality_score(paper, analysis)
        pharmaceutical = self.pharmaceutical_score(analysis)
        level = self.recommendation_level(pharmaceutical, quality)
        logger.debug("Scored paper: quality=%.1f pharmaceutical=%.1f level=%s", quality, pharmaceutical, level.value)
        return PaperScores(
            quality_score=quality,
            pharmaceutical_score=pharmaceutical,
            recommendation_level=level,
        )

    def explain(
        self,
        paper: Union[ResearchPaper, dict],
        analysis: Optional[PharmaceuticalAnalysis] = None,
    ) -> str:
        """Return a human-readable explanation of both scores."""
        quality = self.quality_breakdown(paper, analysis)
        parts = [f"quality {quality.total:.1f}"]
        parts.extend(f"{key.replace('_', ' ')} {value:.1f}" for key, value in quality.to_dict().items())
        if analysis is None:
            parts.append("pharmaceutical 0.0 (no analysis)")
        else:
            relevance = self.relevance_breakdown(analysis)
            parts.append(f"pharmaceutical {relevance.total:.1f}")
            parts.extend(f"{key} {value:.1f}" for key, value in relevance.to_dict().items())
        return ", ".join(parts)


__all__ = [
    "MAX_SCORE",
    "QualityBreakdown",
    "RelevanceBreakdown",
    "ScoringEngine",
    "journal_points",
    "max_sample_size",
    "phase_points",
]
