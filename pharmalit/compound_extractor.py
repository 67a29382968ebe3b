"""Drug compound detection from biomedical free text."""
from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Callable, Iterable, Optional, Sequence

from .entity_recognition import TaggedEntity
from .models import CompoundType, DrugCompound

logger = logging.getLogger(__name__)

_COMMON_DRUG_NAMES: tuple[str, ...] = (
    "aspirin",
    "ibuprofen",
    "acetaminophen",
    "morphine",
    "codeine",
    "insulin",
    "metformin",
    "atorvastatin",
)

# Drug class stems recognised without a lexicon entry
_DRUG_SUFFIX_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\b\w+cillin\b", re.IGNORECASE),
    re.compile(r"\b\w+mycin\b", re.IGNORECASE),
    re.compile(r"\b\w+pril\b", re.IGNORECASE),
    re.compile(r"\b\w+sartan\b", re.IGNORECASE),
)

_DOSAGE_TAIL = r"\s+(?P<dosage>\d+(?:\.\d+)?\s*(?:mg|mcg|ml|g|μg|µg|units?)\b)"

_DRUG_ENTITY_TAGS = {"CHEMICAL", "DRUG"}

FALLBACK_CONFIDENCE = 0.8

EntitySource = Callable[[str], Sequence[Any]]


def classify_compound_type(surface_form: str) -> CompoundType:
    """Classify a tagged entity by its surface form."""
    lowered = surface_form.lower()
    if "placebo" in lowered or "excipient" in lowered:
        return CompoundType.EXCIPIENT
    if "metabolite" in lowered:
        return CompoundType.METABOLITE
    if "/" in surface_form or "+" in surface_form:
        return CompoundType.COMBINATION
    return CompoundType.ACTIVE_INGREDIENT


def count_mentions(text: str, surface_form: str) -> int:
    """Count case-insensitive, non-overlapping occurrences of a surface form."""
    if not surface_form:
        return 0
    return text.lower().count(surface_form.lower())


def extract_dosage(text: str, surface_form: str) -> str | None:
    """Return the dose written directly after a compound name, e.g. ``"500 mg"``."""
    if not surface_form:
        return None
    match = re.search(re.escape(surface_form) + _DOSAGE_TAIL, text, re.IGNORECASE)
    return match.group("dosage") if match else None


def deduplicate_compounds(compounds: Iterable[DrugCompound]) -> list[DrugCompound]:
    """Merge records sharing a lower-cased name and order them by mentions.

    Merged records keep the highest confidence and the summed mention count;
    ties keep first-seen order.
    """
    merged: dict[str, DrugCompound] = {}
    for compound in compounds:
        existing = merged.get(compound.key)
        merged[compound.key] = existing.merge(compound) if existing is not None else compound
    return sorted(merged.values(), key=lambda item: -item.mentions)


class CompoundExtractor:
    """Extract drug compounds with an optional learned tagger and a lexicon fallback.

    The tagger is any callable returning entities (``TaggedEntity`` or
    token-classification mappings), typically a shared
    :class:`~pharmalit.entity_recognition.LazyEntityRecognizer`. When it is
    absent or raises, a curated lexicon plus drug-class suffix patterns is used.
    Callers can extend the lexicon with a newline-delimited file via
    ``lexicon_path``.
    """

    def __init__(
        self,
        tagger: Optional[EntitySource] = None,
        *,
        lexicon_path: str | None = None,
        extra_drug_names: Iterable[str] | None = None,
    ) -> None:
        self.tagger = tagger
        self.drug_names: set[str] = set(_COMMON_DRUG_NAMES)
        if extra_drug_names:
            self.drug_names.update(name.strip().lower() for name in extra_drug_names if name and name.strip())
        if lexicon_path:
            try:
                self.drug_names.update(self._load_lexicon_file(lexicon_path))
                logger.info("Loaded drug lexicon from %s", lexicon_path)
            except ValueError as exc:
                logger.warning("Failed to load drug lexicon: %s", exc)
        self._update_lexicon_pattern()

    def _update_lexicon_pattern(self) -> None:
        """Compile the lexicon into one word-bounded alternation, longest names first."""
        names = sorted(self.drug_names, key=lambda name: (-len(name), name))
        self.lexicon_pattern: re.Pattern[str] = re.compile(
            r"\b(?:" + "|".join(re.escape(name) for name in names) + r")\b",
            re.IGNORECASE,
        )

    def extract(self, text: str | None) -> list[DrugCompound]:
        """Return deduplicated compounds mentioned in ``text``, most mentioned first."""
        if not text or not text.strip():
            return []

        if self.tagger is not None:
            try:
                return self._extract_with_tagger(text)
            except Exception as exc:
                logger.warning("Entity tagger failed, using lexicon fallback: %s", exc)
        return self._extract_with_lexicon(text)

    def _extract_with_tagger(self, text: str) -> list[DrugCompound]:
        compounds: list[DrugCompound] = []
        for raw in self.tagger(text) or []:  # type: ignore[misc]
            entity = TaggedEntity.from_raw(raw)
            if _normalise_tag(entity.category_tag) not in _DRUG_ENTITY_TAGS:
                continue
            name = entity.surface_form.strip()
            if not name:
                continue
            compounds.append(
                self._build_compound(
                    text,
                    name,
                    compound_type=classify_compound_type(name),
                    confidence=min(max(entity.score, 0.0), 1.0),
                )
            )
        logger.debug("Tagger produced %d compound mentions", len(compounds))
        return deduplicate_compounds(compounds)

    def _extract_with_lexicon(self, text: str) -> list[DrugCompound]:
        compounds: list[DrugCompound] = []
        for pattern in (self.lexicon_pattern, *_DRUG_SUFFIX_PATTERNS):
            for match in pattern.finditer(text):
                compounds.append(
                    self._build_compound(
                        text,
                        match.group(0),
                        compound_type=CompoundType.ACTIVE_INGREDIENT,
                        confidence=FALLBACK_CONFIDENCE,
                    )
                )
        return deduplicate_compounds(compounds)

    @staticmethod
    def _build_compound(text: str, name: str, *, compound_type: CompoundType, confidence: float) -> DrugCompound:
        return DrugCompound(
            name=name,
            type=compound_type,
            confidence=confidence,
            mentions=max(count_mentions(text, name), 1),
            dosage=extract_dosage(text, name),
        )

    def _load_lexicon_file(self, path: str) -> set[str]:
        """Load lowercase drug names from a lexicon (one drug per line)."""
        file_path = Path(path)
        try:
            content = file_path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ValueError(f"Unable to read lexicon file '{path}': {exc}") from exc

        entries: set[str] = set()
        for line in content.splitlines():
            term = line.strip()
            if not term or term.startswith("#"):
                continue
            entries.add(term.lower())
        if not entries:
            logger.warning("Lexicon file '%s' did not contain any usable entries", path)
        return entries


def _normalise_tag(tag: str) -> str:
    # Token-level taggers emit BIO prefixes such as "B-CHEMICAL"
    tag = tag.strip().upper()
    if len(tag) > 2 and tag[1] == "-" and tag[0] in {"B", "I", "E", "S"}:
        tag = tag[2:]
    return tag


__all__ = [
    "CompoundExtractor",
    "FALLBACK_CONFIDENCE",
    "classify_compound_type",
    "count_mentions",
    "deduplicate_compounds",
    "extract_dosage",
]
