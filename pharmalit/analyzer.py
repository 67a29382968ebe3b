"""Per-paper analysis pipeline and cross-paper ranking."""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Union

from pydantic import ValidationError

from .compound_extractor import CompoundExtractor, EntitySource, deduplicate_compounds
from .config import AnalysisConfig
from .entity_recognition import shared_recognizer
from .evidence import EvidenceQualityAssessor, has_real_world_evidence
from .interaction_extractor import InteractionExtractor
from .models import (
    DrugCompound,
    DrugInteraction,
    InteractionType,
    PaperScores,
    PharmaceuticalAnalysis,
    ProcessingStatus,
    Severity,
)
from .paper_schema import ResearchPaper, coerce_paper
from .scoring import ScoringEngine
from .trial_extractor import TrialPhaseExtractor

logger = logging.getLogger(__name__)

PaperLike = Union[ResearchPaper, Dict[str, Any]]

_RECOMMENDABLE_TYPES = {InteractionType.SYNERGISTIC, InteractionType.ADDITIVE}


@dataclass
class AnalyzedPaper:
    """A paper together with the analysis and scores it owns."""

    paper: Optional[ResearchPaper]
    status: ProcessingStatus = ProcessingStatus.PENDING
    analysis: Optional[PharmaceuticalAnalysis] = None
    scores: Optional[PaperScores] = None
    error: Optional[str] = None

    @property
    def combined_score(self) -> float:
        return self.scores.combined_score if self.scores is not None else 0.0

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = self.paper.as_dict() if self.paper is not None else {}
        data["processingStatus"] = self.status.value
        data["pharmaceuticalAnalysis"] = self.analysis.to_dict() if self.analysis is not None else None
        data["scores"] = self.scores.to_dict() if self.scores is not None else None
        if self.error:
            data["error"] = self.error
        return data


@dataclass
class DrugSearchResult:
    papers: List[AnalyzedPaper] = field(default_factory=list)
    total_results: int = 0
    has_more: bool = False
    top_compounds: List[DrugCompound] = field(default_factory=list)
    recommended_combinations: List[DrugInteraction] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "papers": [paper.to_dict() for paper in self.papers],
            "totalResults": self.total_results,
            "hasMore": self.has_more,
            "topCompounds": [compound.to_dict() for compound in self.top_compounds],
            "recommendedCombinations": [interaction.to_dict() for interaction in self.recommended_combinations],
        }


class PaperAnalyzer:
    """Run the extractors, evidence assessment and scoring for research papers.

    Components are stateless, so one analyzer can serve many threads. When no
    tagger is passed and entity recognition is enabled in the configuration,
    the process-wide recognizer for the configured model is used.
    """

    def __init__(
        self,
        config: Optional[AnalysisConfig] = None,
        *,
        tagger: Optional[EntitySource] = None,
        compound_extractor: Optional[CompoundExtractor] = None,
        trial_extractor: Optional[TrialPhaseExtractor] = None,
        interaction_extractor: Optional[InteractionExtractor] = None,
        evidence_assessor: Optional[EvidenceQualityAssessor] = None,
        scoring_engine: Optional[ScoringEngine] = None,
    ) -> None:
        self.config = config or AnalysisConfig()
        if compound_extractor is None:
            compound_extractor = CompoundExtractor(
                tagger if tagger is not None else shared_recognizer(self.config),
                lexicon_path=self.config.drug_lexicon_path,
            )
        self.compound_extractor = compound_extractor
        self.trial_extractor = trial_extractor or TrialPhaseExtractor()
        self.interaction_extractor = interaction_extractor or InteractionExtractor()
        self.evidence_assessor = evidence_assessor or EvidenceQualityAssessor()
        self.scoring_engine = scoring_engine or ScoringEngine()

    def build_analysis(self, paper: ResearchPaper) -> PharmaceuticalAnalysis:
        """Extract signals from the paper text; scores are filled in by :meth:`analyze`."""
        text = paper.text
        compounds = self.compound_extractor.extract(text)
        trials = self.trial_extractor.extract(text)
        interactions = self.interaction_extractor.extract(text)
        real_world = has_real_world_evidence(text)
        return PharmaceuticalAnalysis(
            drug_compounds=tuple(compounds),
            clinical_trials=tuple(trials),
            drug_interactions=tuple(interactions),
            real_world_evidence=real_world,
            evidence_quality=self.evidence_assessor.assess(trials, real_world, paper.citations_count),
        )

    def analyze(self, paper: PaperLike) -> AnalyzedPaper:
        try:
            record = coerce_paper(paper)
        except (TypeError, ValidationError) as exc:
            logger.warning("Skipping malformed paper record: %s", exc)
            return AnalyzedPaper(paper=None, status=ProcessingStatus.FAILED, error=str(exc))

        result = AnalyzedPaper(paper=record, status=ProcessingStatus.PROCESSING)
        analysis = self.build_analysis(record)
        scores = self.scoring_engine.score_paper(record, analysis)
        result.analysis = analysis.with_scores(scores.pharmaceutical_score, scores.recommendation_level)
        result.scores = scores
        result.status = ProcessingStatus.COMPLETED
        logger.debug(
            "Analyzed paper %s: %d compounds, %d trials, %d interactions, %s",
            record.id or record.title or "<untitled>",
            len(analysis.drug_compounds),
            len(analysis.clinical_trials),
            len(analysis.drug_interactions),
            scores.recommendation_level.value,
        )
        return result

    def analyze_many(self, papers: Iterable[PaperLike]) -> List[AnalyzedPaper]:
        """Analyze papers concurrently, returning results in input order."""
        entries = list(papers)
        if not entries:
            return []
        workers = min(self.config.max_workers, len(entries))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="paper-analyzer") as executor:
            results = list(executor.map(self.analyze, entries))
        failed = sum(1 for result in results if result.status is ProcessingStatus.FAILED)
        logger.info("Analyzed %d papers (%d failed)", len(results), failed)
        return results

    def search_result(self, papers: Iterable[PaperLike]) -> DrugSearchResult:
        """Analyze and rank papers, summarising compounds and combinations across them."""
        results = self.analyze_many(papers)
        completed = [result for result in results if result.status is ProcessingStatus.COMPLETED]
        failed = [result for result in results if result.status is not ProcessingStatus.COMPLETED]
        ranked = sorted(completed, key=lambda result: -result.combined_score)

        return DrugSearchResult(
            papers=ranked + failed,
            total_results=len(results),
            has_more=False,
            top_compounds=self.top_compounds(ranked),
            recommended_combinations=self.recommended_combinations(ranked),
        )

    def explain(self, result: AnalyzedPaper) -> Optional[str]:
        """Human-readable score breakdown for an analyzed paper; None when it failed."""
        if result.paper is None:
            return None
        return self.scoring_engine.explain(result.paper, result.analysis)

    def top_compounds(self, results: Iterable[AnalyzedPaper]) -> List[DrugCompound]:
        compounds = [
            compound
            for result in results
            if result.analysis is not None
            for compound in result.analysis.drug_compounds
        ]
        return deduplicate_compounds(compounds)[: self.config.top_compounds_limit]

    def recommended_combinations(self, results: Iterable[AnalyzedPaper]) -> List[DrugInteraction]:
        """Synergistic or additive, non-severe combinations, most frequently reported first."""
        counts: Dict[tuple, int] = {}
        first_seen: Dict[tuple, DrugInteraction] = {}
        for result in results:
            if result.analysis is None:
                continue
            for interaction in result.analysis.drug_interactions:
                if interaction.interaction_type not in _RECOMMENDABLE_TYPES:
                    continue
                if interaction.severity is Severity.SEVERE:
                    continue
                pair = frozenset((interaction.compound1.lower(), interaction.compound2.lower()))
                key = (pair, interaction.interaction_type)
                counts[key] = counts.get(key, 0) + 1
                first_seen.setdefault(key, interaction)
        ordered = sorted(first_seen, key=lambda key: -counts[key])
        return [first_seen[key] for key in ordered][: self.config.recommended_combinations_limit]


__all__ = ["AnalyzedPaper", "DrugSearchResult", "PaperAnalyzer"]
