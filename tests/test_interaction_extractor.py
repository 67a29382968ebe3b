import pytest

from pharmalit.interaction_extractor import (
    INTERACTION_CONFIDENCE,
    InteractionExtractor,
    assess_severity,
    describe_interaction,
    find_combinations,
)
from pharmalit.models import InteractionType, Severity


def test_contraindicated_combination_with_severe_risk():
    interactions = InteractionExtractor().extract(
        "Concomitant aspirin with warfarin is contraindicated due to severe bleeding risk."
    )

    assert len(interactions) == 1
    interaction = interactions[0]
    assert (interaction.compound1, interaction.compound2) == ("aspirin", "warfarin")
    assert interaction.interaction_type is InteractionType.CONTRAINDICATED
    assert interaction.severity is Severity.SEVERE
    assert interaction.confidence == INTERACTION_CONFIDENCE
    assert interaction.description == "contraindicated interaction between aspirin and warfarin"


def test_one_record_per_matching_vocabulary():
    interactions = InteractionExtractor().extract(
        "Drug-A with drug-B showed synergistic but also inhibitory effects; monitor closely."
    )

    assert [interaction.interaction_type for interaction in interactions] == [
        InteractionType.SYNERGISTIC,
        InteractionType.ANTAGONISTIC,
    ]
    assert {(i.compound1, i.compound2) for i in interactions} == {("Drug-A", "drug-B")}
    assert {i.severity for i in interactions} == {Severity.MODERATE}


def test_records_are_pair_major():
    interactions = InteractionExtractor().extract(
        "Aspirin plus clopidogrel and heparin + enoxaparin reduced ischemia; combined therapy was well tolerated."
    )

    assert [(i.compound1, i.compound2, i.interaction_type) for i in interactions] == [
        ("Aspirin", "clopidogrel", InteractionType.ANTAGONISTIC),
        ("Aspirin", "clopidogrel", InteractionType.ADDITIVE),
        ("heparin", "enoxaparin", InteractionType.ANTAGONISTIC),
        ("heparin", "enoxaparin", InteractionType.ADDITIVE),
    ]
    assert all(i.severity is Severity.UNKNOWN for i in interactions)


@pytest.mark.parametrize(
    "text",
    [
        "",
        None,
        "Metformin monotherapy showed synergistic benefit.",
        "Aspirin and clopidogrel were prescribed.",
    ],
)
def test_no_interactions_without_pair_and_vocabulary(text):
    assert InteractionExtractor().extract(text) == []


def test_combination_joiners_need_whitespace():
    assert find_combinations("standard of care") == []
    assert find_combinations("lopinavir+ritonavir") == [("lopinavir", "ritonavir")]
    assert find_combinations("ezetimibe WITH simvastatin") == [("ezetimibe", "simvastatin")]


@pytest.mark.parametrize(
    "text, expected",
    [
        ("mild nausea but potentially fatal arrhythmia", Severity.SEVERE),
        ("use with caution; minor rash", Severity.MODERATE),
        ("slight increase in exposure", Severity.MILD),
        ("no qualifiers", Severity.UNKNOWN),
        ("hepatotoxicity was observed", Severity.SEVERE),
        ("cardiotoxic effects", Severity.SEVERE),
        ("toxicity was observed", Severity.SEVERE),
    ],
)
def test_assess_severity(text, expected):
    assert assess_severity(text) is expected


def test_describe_interaction():
    assert (
        describe_interaction(InteractionType.SYNERGISTIC, "trimethoprim", "sulfamethoxazole")
        == "synergistic interaction between trimethoprim and sulfamethoxazole"
    )


def test_dangerous_language_marks_contraindicated_and_severe():
    interactions = InteractionExtractor().extract("aspirin and warfarin showed a dangerous interaction")

    assert [(i.compound1, i.compound2, i.interaction_type, i.severity) for i in interactions] == [
        ("aspirin", "warfarin", InteractionType.CONTRAINDICATED, Severity.SEVERE)
    ]


def test_vocabulary_matches_inside_compound_words():
    interactions = InteractionExtractor().extract("Isoniazid and rifampicin caused hepatotoxicity.")

    assert [(i.compound1, i.compound2, i.interaction_type, i.severity) for i in interactions] == [
        ("Isoniazid", "rifampicin", InteractionType.CONTRAINDICATED, Severity.SEVERE)
    ]


@pytest.mark.parametrize("text", ["Drug-A and drug-B showed enhancing trends.", "Drug-A and drug-B: dose reduction."])
def test_vocabulary_uses_full_terms(text):
    assert InteractionExtractor().extract(text) == []


def test_extract_is_idempotent():
    extractor = InteractionExtractor()
    text = "Aspirin plus clopidogrel potentiated bleeding; heparin with warfarin should be avoided."
    assert extractor.extract(text) == extractor.extract(text)
