import logging
import os
import subprocess
import sys
import textwrap
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest

from pharmalit import entity_recognition
from pharmalit.config import AnalysisConfig
from pharmalit.entity_recognition import (
    EntityRecognitionUnavailable,
    LazyEntityRecognizer,
    TaggedEntity,
    shared_recognizer,
)


def test_loader_runs_once_under_concurrent_callers():
    calls = []
    calls_lock = threading.Lock()

    def loader():
        with calls_lock:
            calls.append(1)
        time.sleep(0.05)
        return lambda text: [{"word": "aspirin", "entity_group": "DRUG", "score": 0.9}]

    recognizer = LazyEntityRecognizer(loader, init_timeout_seconds=5.0)

    with ThreadPoolExecutor(max_workers=8) as executor:
        results = list(executor.map(lambda _: recognizer.ensure_ready(), range(16)))

    assert results == [True] * 16
    assert len(calls) == 1
    assert recognizer.available
    assert recognizer.tag("aspirin") == [TaggedEntity("aspirin", "DRUG", 0.9)]


def test_timeout_leaves_recognizer_unavailable(caplog):
    release = threading.Event()

    def slow_loader():
        release.wait(5.0)
        return lambda text: []

    recognizer = LazyEntityRecognizer(slow_loader, init_timeout_seconds=0.05, name="slow tagger")
    try:
        with caplog.at_level(logging.WARNING, logger="pharmalit.entity_recognition"):
            assert recognizer.ensure_ready() is False
        assert "timed out" in recognizer.last_error
        assert "slow tagger unavailable" in caplog.text
        with pytest.raises(EntityRecognitionUnavailable):
            recognizer.tag("aspirin")
    finally:
        release.set()


def test_stalled_loader_does_not_block_interpreter_exit():
    script = textwrap.dedent(
        """
        import time

        from pharmalit.compound_extractor import CompoundExtractor
        from pharmalit.entity_recognition import LazyEntityRecognizer

        def stalled_loader():
            time.sleep(20)
            return lambda text: []

        recognizer = LazyEntityRecognizer(stalled_loader, init_timeout_seconds=0.1)
        print(CompoundExtractor(recognizer).extract("aspirin 81 mg")[0].name)
        """
    )
    project_root = str(Path(__file__).resolve().parents[1])
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [project_root, env.get("PYTHONPATH")]))

    started = time.monotonic()
    completed = subprocess.run([sys.executable, "-c", script], capture_output=True, text=True, env=env, timeout=30)
    elapsed = time.monotonic() - started

    assert completed.returncode == 0, completed.stderr
    assert completed.stdout.strip() == "aspirin"
    assert elapsed < 10


def test_loader_failure_is_remembered():
    calls = []

    def broken_loader():
        calls.append(1)
        raise ImportError("No module named 'transformers'")

    recognizer = LazyEntityRecognizer(broken_loader, init_timeout_seconds=1.0)

    assert recognizer.ensure_ready() is False
    assert recognizer.ensure_ready() is False
    assert len(calls) == 1
    assert "transformers" in recognizer.last_error
    with pytest.raises(EntityRecognitionUnavailable, match="transformers"):
        recognizer("aspirin")


def test_tagger_errors_surface_as_unavailable():
    def loader():
        def tagger(text):
            raise RuntimeError("CUDA out of memory")

        return tagger

    recognizer = LazyEntityRecognizer(loader, init_timeout_seconds=1.0)
    with pytest.raises(EntityRecognitionUnavailable, match="CUDA out of memory"):
        recognizer.tag("metformin")


def test_tagged_entity_from_raw():
    assert TaggedEntity.from_raw({"word": "warfarin", "entity": "B-CHEMICAL", "score": "0.5"}) == TaggedEntity(
        "warfarin", "B-CHEMICAL", 0.5
    )
    entity = TaggedEntity("heparin", "DRUG", 0.8)
    assert TaggedEntity.from_raw(entity) is entity
    with pytest.raises(TypeError):
        TaggedEntity.from_raw(("heparin", "DRUG"))


def test_shared_recognizer_is_lazy_singleton(monkeypatch):
    monkeypatch.setattr(entity_recognition, "_shared_recognizers", {})

    assert shared_recognizer(AnalysisConfig()) is None

    config = AnalysisConfig(enable_entity_recognition=True, ner_model="example/chem-ner")
    first = shared_recognizer(config)
    second = shared_recognizer(AnalysisConfig(enable_entity_recognition=True, ner_model="example/chem-ner"))

    assert first is second
    assert first.available is False
    assert "example/chem-ner" in first.name
