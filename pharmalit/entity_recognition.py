"""Optional learned entity tagger exposed as a lazily initialised shared capability.

The analysis engine never depends on a model being present. A recognizer wraps
a loader callable that builds the tagger on first use; loading happens at most
once per recognizer, under a lock and bounded by a timeout. When the loader
fails or times out the recognizer stays unavailable for the rest of the process
and callers fall back to deterministic text rules.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Protocol, Sequence

from .config import AnalysisConfig

logger = logging.getLogger(__name__)


class EntityRecognitionUnavailable(RuntimeError):
    """Raised when the learned tagger cannot be used for this call."""


@dataclass(frozen=True)
class TaggedEntity:
    surface_form: str
    category_tag: str
    score: float

    @classmethod
    def from_raw(cls, raw: Any) -> "TaggedEntity":
        """Accept either a TaggedEntity or a token-classification result mapping."""
        if isinstance(raw, TaggedEntity):
            return raw
        if isinstance(raw, Mapping):
            surface = raw.get("surface_form") or raw.get("word") or ""
            category = raw.get("category_tag") or raw.get("entity_group") or raw.get("entity") or ""
            return cls(surface_form=str(surface), category_tag=str(category), score=float(raw.get("score", 0.0)))
        raise TypeError(f"Unsupported entity payload: {type(raw).__name__}")


class EntityTagger(Protocol):
    def __call__(self, text: str) -> Sequence[Any]:
        ...


TaggerLoader = Callable[[], EntityTagger]


class LazyEntityRecognizer:
    """Thread-safe, load-once wrapper around an entity tagger."""

    def __init__(self, loader: TaggerLoader, *, init_timeout_seconds: float = 30.0, name: str = "entity-tagger"):
        self._loader = loader
        self._timeout = init_timeout_seconds
        self.name = name
        self._lock = threading.Lock()
        self._tagger: Optional[EntityTagger] = None
        self._attempted = False
        self.last_error: Optional[str] = None

    @property
    def available(self) -> bool:
        return self._tagger is not None

    def ensure_ready(self) -> bool:
        """Initialise the tagger if that has not been attempted yet.

        Returns True when the tagger is usable. Never raises; failures are
        logged once and remembered. The loader runs in a daemon thread, so a
        load that outlives the timeout never holds up interpreter exit.
        """
        if self._attempted:
            return self._tagger is not None
        with self._lock:
            if self._attempted:
                return self._tagger is not None
            logger.info("Initialising %s", self.name)
            outcome: dict[str, Any] = {}
            finished = threading.Event()

            def _load() -> None:
                try:
                    outcome["tagger"] = self._loader()
                except Exception as exc:
                    outcome["error"] = exc
                finally:
                    finished.set()

            threading.Thread(target=_load, name="ner-init", daemon=True).start()
            if not finished.wait(self._timeout):
                self.last_error = f"initialisation timed out after {self._timeout:.1f}s"
                logger.warning("%s unavailable: %s", self.name, self.last_error)
            elif "error" in outcome:
                exc = outcome["error"]
                self.last_error = str(exc) or type(exc).__name__
                logger.warning("%s unavailable: %s", self.name, self.last_error)
            else:
                self._tagger = outcome.get("tagger")
                logger.info("%s initialised", self.name)
            self._attempted = True
        return self._tagger is not None

    def tag(self, text: str) -> list[TaggedEntity]:
        if not self.ensure_ready():
            raise EntityRecognitionUnavailable(self.last_error or f"{self.name} is not available")
        try:
            raw_entities = self._tagger(text)  # type: ignore[misc]
        except Exception as exc:
            raise EntityRecognitionUnavailable(f"{self.name} failed: {exc}") from exc
        return [TaggedEntity.from_raw(entity) for entity in raw_entities or []]

    __call__ = tag


def load_transformers_tagger(model_name: str) -> TaggerLoader:
    """Return a loader that builds a Hugging Face token-classification pipeline.

    ``transformers`` is an optional extra; a missing install surfaces as a
    loader failure and the recognizer stays unavailable.
    """

    def _load() -> EntityTagger:
        from transformers import pipeline  # type: ignore

        return pipeline("token-classification", model=model_name, aggregation_strategy="simple")

    return _load


_shared_lock = threading.Lock()
_shared_recognizers: dict[str, LazyEntityRecognizer] = {}


def shared_recognizer(config: AnalysisConfig) -> Optional[LazyEntityRecognizer]:
    """Process-wide recognizer for the configured model, or None when disabled."""
    if not config.enable_entity_recognition:
        return None
    with _shared_lock:
        recognizer = _shared_recognizers.get(config.ner_model)
        if recognizer is None:
            recognizer = LazyEntityRecognizer(
                load_transformers_tagger(config.ner_model),
                init_timeout_seconds=config.ner_init_timeout_seconds,
                name=f"NER model {config.ner_model}",
            )
            _shared_recognizers[config.ner_model] = recognizer
        return recognizer


__all__ = [
    "EntityRecognitionUnavailable",
    "EntityTagger",
    "LazyEntityRecognizer",
    "TaggedEntity",
    "load_transformers_tagger",
    "shared_recognizer",
]
