"""Central configuration for the literature analysis engine."""
from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Mapping, Optional

logger = logging.getLogger(__name__)

_BOOL_TRUE = {"1", "true", "yes", "on", "enabled"}
_BOOL_FALSE = {"0", "false", "no", "off", "disabled"}
_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

DEFAULT_NER_MODEL = "alvaroalon2/biobert_chemical_ner"


def _get_env(env: Mapping[str, str], key: str) -> Optional[str]:
    value = env.get(key)
    return value.strip() if isinstance(value, str) else value


def _as_bool(env: Mapping[str, str], key: str, default: bool) -> bool:
    raw = _get_env(env, key)
    if raw is None or raw == "":
        return default
    lowered = raw.lower()
    if lowered in _BOOL_TRUE:
        return True
    if lowered in _BOOL_FALSE:
        return False
    raise ValueError(f"Environment variable {key} must be boolean-like, got: {raw}")


def _as_int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = _get_env(env, key)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"Environment variable {key} must be an integer, got: {raw}") from exc


def _as_float(env: Mapping[str, str], key: str, default: float) -> float:
    raw = _get_env(env, key)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"Environment variable {key} must be numeric, got: {raw}") from exc


@dataclass
class AnalysisConfig:
    """Configuration snapshot for extraction, scoring and batch analysis."""

    # Optional learned entity tagger
    enable_entity_recognition: bool = False
    ner_model: str = DEFAULT_NER_MODEL
    ner_init_timeout_seconds: float = 30.0

    # Extra newline-delimited drug names for the lexicon fallback
    drug_lexicon_path: Optional[str] = None

    # Batch analysis and result aggregation
    max_workers: int = 4
    top_compounds_limit: int = 10
    recommended_combinations_limit: int = 5

    log_level: str = "INFO"

    warnings: list[str] = field(default_factory=list)

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "AnalysisConfig":
        """Build a configuration snapshot from ``PHARMALIT_*`` environment variables."""
        env_map: Mapping[str, str] = env if env is not None else os.environ

        config = cls(
            enable_entity_recognition=_as_bool(env_map, "PHARMALIT_ENABLE_ENTITY_RECOGNITION", False),
            ner_model=_get_env(env_map, "PHARMALIT_NER_MODEL") or DEFAULT_NER_MODEL,
            ner_init_timeout_seconds=_as_float(env_map, "PHARMALIT_NER_INIT_TIMEOUT_SECONDS", 30.0),
            drug_lexicon_path=_get_env(env_map, "PHARMALIT_DRUG_LEXICON") or None,
            max_workers=_as_int(env_map, "PHARMALIT_MAX_WORKERS", 4),
            top_compounds_limit=_as_int(env_map, "PHARMALIT_TOP_COMPOUNDS_LIMIT", 10),
            recommended_combinations_limit=_as_int(env_map, "PHARMALIT_RECOMMENDED_COMBINATIONS_LIMIT", 5),
            log_level=(_get_env(env_map, "PHARMALIT_LOG_LEVEL") or "INFO").upper(),
        )
        config._validate()
        for warning in config.warnings:
            logger.warning("Configuration: %s", warning)
        return config

    def _validate(self) -> None:
        self.warnings.clear()

        if self.ner_init_timeout_seconds <= 0:
            self.warnings.append("NER init timeout must be positive; defaulting to 30 seconds.")
            self.ner_init_timeout_seconds = 30.0

        if self.max_workers < 1:
            self.warnings.append("Max workers must be at least 1; using 1.")
            self.max_workers = 1

        if self.top_compounds_limit < 0:
            self.warnings.append("Top compounds limit cannot be negative; using 0.")
            self.top_compounds_limit = 0

        if self.recommended_combinations_limit < 0:
            self.warnings.append("Recommended combinations limit cannot be negative; using 0.")
            self.recommended_combinations_limit = 0

        if self.log_level not in _LOG_LEVELS:
            self.warnings.append("Unknown log level '%s'; defaulting to INFO." % self.log_level)
            self.log_level = "INFO"

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data.pop("warnings", None)
        return data


__all__ = ["AnalysisConfig", "DEFAULT_NER_MODEL"]
