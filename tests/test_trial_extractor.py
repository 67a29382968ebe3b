import pytest

from pharmalit.models import ClinicalTrial, TrialPhase
from pharmalit.trial_extractor import (
    TrialPhaseExtractor,
    extract_adverse_events,
    extract_duration,
    extract_endpoints,
    extract_sample_size,
    highest_trial_phase,
)


def test_phase_iii_trial_with_sample_size_and_efficacy():
    trials = TrialPhaseExtractor().extract(
        "This Phase III randomized trial enrolled 420 patients and showed improved efficacy."
    )

    assert len(trials) == 1
    trial = trials[0]
    assert trial.phase is TrialPhase.PHASE_III
    assert trial.sample_size == 420
    assert trial.efficacy == "mentioned"
    assert trial.confidence == pytest.approx(0.1)


def test_every_phase_record_shares_document_attributes():
    text = (
        "Following preclinical in vivo work, the phase 1 and phase II studies enrolled n = 1,250 "
        "over 24-month follow-up."
    )

    trials = TrialPhaseExtractor().extract(text)

    assert [trial.phase for trial in trials] == [
        TrialPhase.PHASE_I,
        TrialPhase.PHASE_II,
        TrialPhase.PRECLINICAL,
    ]
    assert {trial.sample_size for trial in trials} == {1250}
    assert {trial.duration for trial in trials} == {"24 month"}
    assert trials[-1].confidence == pytest.approx(0.2)
    assert all(trial.efficacy is None for trial in trials)


def test_confidence_saturates_at_one():
    trials = TrialPhaseExtractor().extract("phase III " * 12)
    assert trials[0].confidence == 1.0


def test_phase_numbers_are_word_bounded():
    assert TrialPhaseExtractor().extract("Table 12 lists phase 12 of the rollout.") == []


@pytest.mark.parametrize("text", ["", None, "No trial language here."])
def test_no_phase_mentions_yield_no_trials(text):
    assert TrialPhaseExtractor().extract(text) == []


def test_highest_trial_phase():
    assert highest_trial_phase([]) is TrialPhase.UNKNOWN
    assert highest_trial_phase(None) is TrialPhase.UNKNOWN

    trials = [ClinicalTrial(phase=phase) for phase in (TrialPhase.PHASE_II, TrialPhase.PHASE_IV, TrialPhase.PHASE_I)]
    assert highest_trial_phase(trials) is TrialPhase.PHASE_IV

    mixed = [ClinicalTrial(phase=TrialPhase.UNKNOWN), ClinicalTrial(phase=TrialPhase.PRECLINICAL)]
    assert highest_trial_phase(mixed) is TrialPhase.PRECLINICAL


def test_sample_size_takes_first_mention():
    assert extract_sample_size("Of 48 subjects screened, 30 patients were randomized.") == 48
    assert extract_sample_size("n=2,400 adults") == 2400
    assert extract_sample_size("No counts reported.") is None


def test_duration_adverse_events_and_endpoints():
    assert extract_duration("Treatment continued for 12 Weeks.") == "12 weeks"
    assert extract_duration("single dose") is None

    assert extract_adverse_events("Nausea and headache were common; nausea resolved.") == ("nausea", "headache")
    assert extract_adverse_events("Well tolerated.") is None

    primary, secondary = extract_endpoints(
        "The primary endpoint was overall survival. "
        "Secondary endpoints included response rate, quality of life and safety."
    )
    assert primary == "overall survival"
    assert secondary == ("response rate", "quality of life", "safety")
    assert extract_endpoints("No endpoints described.") == (None, None)


def test_trial_records_carry_adverse_events():
    trials = TrialPhaseExtractor().extract("In the phase 4 study, neutropenia and rash occurred.")
    assert trials[0].adverse_events == ("neutropenia", "rash")
    assert trials[0].to_dict()["adverseEvents"] == ["neutropenia", "rash"]


def test_n_equals_form_in_phase_iii_summary():
    trials = TrialPhaseExtractor().extract("Phase III trial, n = 420 patients, efficacy was demonstrated")

    assert [(trial.phase, trial.sample_size, trial.efficacy) for trial in trials] == [
        (TrialPhase.PHASE_III, 420, "mentioned")
    ]


def test_efficacy_vocabulary_matches_inside_words():
    trials = TrialPhaseExtractor().extract("The phase II drug was ineffective.")
    assert trials[0].efficacy == "mentioned"


def test_preclinical_vocabulary_is_not_word_bounded():
    trials = TrialPhaseExtractor().extract("Invitro screening preceded the preclinical_models work.")
    assert [trial.phase for trial in trials] == [TrialPhase.PRECLINICAL]
    assert trials[0].confidence == pytest.approx(0.2)


def test_extract_is_idempotent():
    extractor = TrialPhaseExtractor()
    text = "A phase 2 and phase III program in 640 patients; the primary endpoint was survival."
    assert extractor.extract(text) == extractor.extract(text)
