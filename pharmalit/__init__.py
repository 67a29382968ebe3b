"""
Rule-based pharmaceutical literature analysis and ranking.
"""

__version__ = "1.0.0"
__description__ = "Drug, trial and interaction signal extraction for ranking research papers"

from .analyzer import AnalyzedPaper, DrugSearchResult, PaperAnalyzer
from .compound_extractor import CompoundExtractor
from .config import AnalysisConfig
from .entity_recognition import EntityRecognitionUnavailable, LazyEntityRecognizer, TaggedEntity
from .evidence import EvidenceQualityAssessor, has_real_world_evidence
from .interaction_extractor import InteractionExtractor
from .models import (
    ClinicalTrial,
    CompoundType,
    DrugCompound,
    DrugInteraction,
    EvidenceQuality,
    InteractionType,
    PaperScores,
    PharmaceuticalAnalysis,
    ProcessingStatus,
    RecommendationLevel,
    Severity,
    TrialPhase,
)
from .paper_schema import ResearchPaper, coerce_paper
from .scoring import ScoringEngine
from .trial_extractor import TrialPhaseExtractor, highest_trial_phase

__all__ = [
    "AnalysisConfig",
    "AnalyzedPaper",
    "ClinicalTrial",
    "CompoundExtractor",
    "CompoundType",
    "DrugCompound",
    "DrugInteraction",
    "DrugSearchResult",
    "EntityRecognitionUnavailable",
    "EvidenceQuality",
    "EvidenceQualityAssessor",
    "InteractionExtractor",
    "InteractionType",
    "LazyEntityRecognizer",
    "PaperAnalyzer",
    "PaperScores",
    "PharmaceuticalAnalysis",
    "ProcessingStatus",
    "RecommendationLevel",
    "ResearchPaper",
    "ScoringEngine",
    "Severity",
    "TaggedEntity",
    "TrialPhase",
    "TrialPhaseExtractor",
    "coerce_paper",
    "has_real_world_evidence",
    "highest_trial_phase",
]
