import os
from unittest.mock import Mock

import pytest
from dotenv import find_dotenv, load_dotenv

from pharmalit.entity_recognition import TaggedEntity


@pytest.fixture(autouse=True, scope="session")
def load_dotenv_if_available():
    """Load environment variables from .env when one is present.

    Keeps tests flexible for local runs without committing settings.
    """
    env_path = find_dotenv(usecwd=True)
    if env_path:
        load_dotenv(env_path)


@pytest.fixture(autouse=True)
def clear_pharmalit_env(monkeypatch):
    """Isolate tests from PHARMALIT_* settings picked up from the shell or .env."""
    for key in list(os.environ):
        if key.startswith("PHARMALIT_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def mock_tagger():
    """Tagger double returning one drug, one chemical and one non-drug entity."""
    tagger = Mock()
    tagger.return_value = [
        TaggedEntity(surface_form="Imatinib", category_tag="DRUG", score=0.97),
        {"word": "imatinib metabolite", "entity_group": "CHEMICAL", "score": 0.64},
        TaggedEntity(surface_form="chronic myeloid leukemia", category_tag="DISEASE", score=0.99),
    ]
    return tagger


@pytest.fixture
def failing_tagger():
    tagger = Mock()
    tagger.side_effect = RuntimeError("model backend crashed")
    return tagger


@pytest.fixture
def sample_papers():
    """Three paper records of clearly different pharmaceutical strength."""
    return [
        {
            "id": "weak",
            "title": "Editorial on research culture",
            "abstract": "We reflect on how laboratories share results.",
            "journal": "Lab Notes",
            "citationsCount": 2,
        },
        {
            "id": "strong",
            "title": "Post-marketing study of metformin",
            "abstract": (
                "This Phase IV real-world registry study followed 1,200 patients receiving metformin 500 mg. "
                "Metformin and sitagliptin showed an additive, synergistic effect; mild hypoglycemia occurred. "
                "Efficacy was sustained over 52 weeks."
            ),
            "journal": "Nature Medicine",
            "citationsCount": 640,
        },
        {
            "id": "medium",
            "title": "Phase II study of lisinopril",
            "abstract": "A phase 2 trial of lisinopril enrolled 80 subjects; blood pressure improvement was observed.",
            "journal": "PLOS ONE",
            "citationsCount": 30,
        },
    ]
