"""Canonical research paper schema consumed by the analysis engine."""

from __future__ import annotations

import html
import re
from typing import Any, Dict, List, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class ResearchPaper(BaseModel):
    """Normalized literature record as delivered by the search layer.

    Accepts both the camelCase keys used by literature search APIs
    (``fullText``, ``citationsCount``) and snake_case field names.
    """

    id: str = ""
    title: str = ""
    authors: List[str] = Field(default_factory=list)
    abstract: str = ""
    full_text: Optional[str] = Field(default=None, validation_alias=AliasChoices("full_text", "fullText"))
    journal: str = ""
    published_date: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("published_date", "publishedDate")
    )
    doi: Optional[str] = None
    pmid: Optional[str] = None
    url: Optional[str] = None
    citations_count: Optional[int] = Field(
        default=None, ge=0, validation_alias=AliasChoices("citations_count", "citationsCount")
    )
    keywords: List[str] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    @field_validator("abstract", "journal", "title", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("doi", mode="before")
    @classmethod
    def _clean_doi(cls, value: Any) -> Any:
        if isinstance(value, str):
            return normalize_doi(clean_identifier(value)) or None
        return value

    @field_validator("pmid", mode="before")
    @classmethod
    def _clean_pmid(cls, value: Any) -> Any:
        if isinstance(value, int):
            value = str(value)
        if isinstance(value, str):
            return normalize_pmid(value) or None
        return value

    @field_validator("authors", mode="before")
    @classmethod
    def _split_authors(cls, value: Any) -> Any:
        # Search APIs often return a single comma-delimited author string
        if value is None:
            return []
        if isinstance(value, str):
            return [author.strip() for author in value.split(",") if author.strip()]
        return value

    @property
    def text(self) -> str:
        """Return the abstract followed by the full text, when present."""
        if self.full_text:
            return f"{self.abstract}\n{self.full_text}" if self.abstract else self.full_text
        return self.abstract

    def as_dict(self) -> Dict[str, Any]:
        """Return the record with the camelCase keys of the search layer."""
        result: Dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "authors": list(self.authors),
            "abstract": self.abstract,
            "fullText": self.full_text,
            "journal": self.journal,
            "publishedDate": self.published_date,
            "doi": self.doi,
            "pmid": self.pmid,
            "url": self.url,
            "citationsCount": self.citations_count,
            "keywords": list(self.keywords),
        }
        extra = getattr(self, "model_extra", None)
        if extra:
            for key, value in extra.items():
                result.setdefault(key, value)
        return result


def coerce_paper(entry: Union[ResearchPaper, Dict[str, Any]]) -> ResearchPaper:
    """Return a `ResearchPaper` instance for the supplied entry."""
    if isinstance(entry, ResearchPaper):
        return entry
    if isinstance(entry, dict):
        return ResearchPaper.model_validate(entry)
    raise TypeError("Paper entries must be mappings or ResearchPaper models.")


def clean_identifier(identifier: str) -> str:
    """Strip zero-width characters and decode HTML entities."""
    if not identifier:
        return identifier

    cleaned = identifier.replace('\u200b', '').replace('\u200c', '').replace('\u200d', '').replace('\ufeff', '')
    return html.unescape(cleaned)


def normalize_doi(doi: str) -> str:
    """Normalize DOI by removing resolver prefixes and converting to lowercase.

    Args:
        doi: Raw DOI string

    Returns:
        Normalized DOI string
    """
    if not doi:
        return ""

    normalized = doi.lower().strip()

    prefixes_to_strip = [
        'doi:',
        'https://doi.org/',
        'http://doi.org/',
        'doi.org/',
        'www.doi.org/',
    ]
    for prefix in prefixes_to_strip:
        if normalized.startswith(prefix):
            normalized = normalized[len(prefix):].lstrip('/')
            break

    return normalized.rstrip('.,;)').strip()


def normalize_pmid(pmid: str) -> str:
    """Keep only the digits of a PMID."""
    if not pmid:
        return ""
    return re.sub(r'[^\d]', '', clean_identifier(pmid).strip())


__all__ = [
    "ResearchPaper",
    "clean_identifier",
    "coerce_paper",
    "normalize_doi",
    "normalize_pmid",
]
