"""Structured records produced by the pharmaceutical literature analysis engine."""
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any


class CompoundType(str, Enum):
    """Role a drug compound plays in the paper."""

    ACTIVE_INGREDIENT = "active_ingredient"
    EXCIPIENT = "excipient"
    METABOLITE = "metabolite"
    COMBINATION = "combination"


class TrialPhase(str, Enum):
    """Clinical development phase mentioned in a paper."""

    PRECLINICAL = "preclinical"
    PHASE_I = "phase_i"
    PHASE_II = "phase_ii"
    PHASE_III = "phase_iii"
    PHASE_IV = "phase_iv"
    UNKNOWN = "unknown"

    @property
    def rank(self) -> int:
        """Position in the development order; ``UNKNOWN`` sits outside it (-1)."""
        try:
            return PHASE_ORDER.index(self)
        except ValueError:
            return -1


PHASE_ORDER: tuple[TrialPhase, ...] = (
    TrialPhase.PRECLINICAL,
    TrialPhase.PHASE_I,
    TrialPhase.PHASE_II,
    TrialPhase.PHASE_III,
    TrialPhase.PHASE_IV,
)


class InteractionType(str, Enum):
    """How two co-mentioned compounds affect each other."""

    SYNERGISTIC = "synergistic"
    ANTAGONISTIC = "antagonistic"
    ADDITIVE = "additive"
    CONTRAINDICATED = "contraindicated"


class Severity(str, Enum):
    """Clinical severity of a drug interaction."""

    MILD = "mild"
    MODERATE = "moderate"
    SEVERE = "severe"
    UNKNOWN = "unknown"


class EvidenceQuality(str, Enum):
    """Categorical evidence verdict, ordered low < medium < high."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return {"low": 0, "medium": 1, "high": 2}[self.value]


class RecommendationLevel(str, Enum):
    """Reading recommendation derived from the combined score."""

    HIGHLY_RECOMMENDED = "highly_recommended"
    RECOMMENDED = "recommended"
    CONSIDER = "consider"
    NOT_RECOMMENDED = "not_recommended"


class ProcessingStatus(str, Enum):
    """Lifecycle of a paper through the analysis pipeline."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class DrugCompound:
    """A drug compound mention aggregated over a document."""

    name: str
    type: CompoundType = CompoundType.ACTIVE_INGREDIENT
    confidence: float = 0.0
    mentions: int = 1
    dosage: str | None = None
    chemical_formula: str | None = None

    @property
    def key(self) -> str:
        """Deduplication key: the lower-cased surface form."""
        return self.name.lower()

    def merge(self, other: DrugCompound) -> DrugCompound:
        """Fold another record with the same key into this one.

        Keeps this record's surface form and type, the higher confidence and the
        sum of both mention counts.
        """
        if other.key != self.key:
            raise ValueError(f"Cannot merge compound '{other.name}' into '{self.name}'")
        return replace(
            self,
            confidence=max(self.confidence, other.confidence),
            mentions=self.mentions + other.mentions,
            dosage=self.dosage or other.dosage,
            chemical_formula=self.chemical_formula or other.chemical_formula,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "chemicalFormula": self.chemical_formula,
            "type": self.type.value,
            "dosage": self.dosage,
            "confidence": self.confidence,
            "mentions": self.mentions,
        }


@dataclass(frozen=True)
class ClinicalTrial:
    """A clinical-trial phase mention with document-level trial attributes."""

    phase: TrialPhase
    confidence: float = 0.0
    sample_size: int | None = None
    duration: str | None = None
    efficacy: str | None = None
    adverse_events: tuple[str, ...] | None = None
    primary_endpoint: str | None = None
    secondary_endpoints: tuple[str, ...] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "phase": self.phase.value,
            "sampleSize": self.sample_size,
            "duration": self.duration,
            "efficacy": self.efficacy,
            "adverseEvents": list(self.adverse_events) if self.adverse_events is not None else None,
            "primaryEndpoint": self.primary_endpoint,
            "secondaryEndpoints": (
                list(self.secondary_endpoints) if self.secondary_endpoints is not None else None
            ),
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class DrugInteraction:
    """A drug combination and the interaction language surrounding it."""

    compound1: str
    compound2: str
    interaction_type: InteractionType
    severity: Severity = Severity.UNKNOWN
    description: str = ""
    confidence: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "compound1": self.compound1,
            "compound2": self.compound2,
            "interactionType": self.interaction_type.value,
            "severity": self.severity.value,
            "description": self.description,
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class PharmaceuticalAnalysis:
    """Everything extracted from, and concluded about, a single paper."""

    drug_compounds: tuple[DrugCompound, ...] = ()
    clinical_trials: tuple[ClinicalTrial, ...] = ()
    drug_interactions: tuple[DrugInteraction, ...] = ()
    real_world_evidence: bool = False
    evidence_quality: EvidenceQuality = EvidenceQuality.LOW
    pharmaceutical_score: float = 0.0
    recommendation_level: RecommendationLevel = RecommendationLevel.NOT_RECOMMENDED

    def with_scores(
        self,
        pharmaceutical_score: float,
        recommendation_level: RecommendationLevel,
    ) -> PharmaceuticalAnalysis:
        return replace(
            self,
            pharmaceutical_score=pharmaceutical_score,
            recommendation_level=recommendation_level,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "drugCompounds": [compound.to_dict() for compound in self.drug_compounds],
            "clinicalTrials": [trial.to_dict() for trial in self.clinical_trials],
            "drugInteractions": [interaction.to_dict() for interaction in self.drug_interactions],
            "realWorldEvidence": self.real_world_evidence,
            "evidenceQuality": self.evidence_quality.value,
            "pharmaceuticalScore": self.pharmaceutical_score,
            "recommendationLevel": self.recommendation_level.value,
        }


@dataclass(frozen=True)
class PaperScores:
    quality_score: float
    pharmaceutical_score: float
    recommendation_level: RecommendationLevel

    @property
    def combined_score(self) -> float:
        return (self.quality_score + self.pharmaceutical_score) / 2

    def to_dict(self) -> dict[str, Any]:
        return {
            "qualityScore": self.quality_score,
            "pharmaceuticalScore": self.pharmaceutical_score,
            "combinedScore": self.combined_score,
            "recommendationLevel": self.recommendation_level.value,
        }


__all__ = [
    "PHASE_ORDER",
    "ClinicalTrial",
    "CompoundType",
    "DrugCompound",
    "DrugInteraction",
    "EvidenceQuality",
    "InteractionType",
    "PaperScores",
    "PharmaceuticalAnalysis",
    "ProcessingStatus",
    "RecommendationLevel",
    "Severity",
    "TrialPhase",
]
