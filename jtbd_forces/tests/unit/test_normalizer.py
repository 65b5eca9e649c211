"""
Unit tests for ResponseNormalizer
"""

import pytest

from jtbd_forces.domain.vocabulary import JTBDForce
from jtbd_forces.schemas import SurveyResponse
from jtbd_forces.services.forces.normalizer import ResponseNormalizer, is_non_answer
from jtbd_forces.tests.conftest import make_mapping


@pytest.fixture
def normalizer():
    return ResponseNormalizer()


@pytest.mark.parametrize("value", ["", "   ", "N/A", "n/a", "NA", "none", "-", "null", "No answer", " skip "])
def test_non_answers(value):
    assert is_non_answer(value)


@pytest.mark.parametrize("value", ["No", "not applicable to us", "none of the above fit", "3"])
def test_real_answers_are_kept(value):
    assert not is_non_answer(value)


class TestForceIntensity:
    def test_likert_value_taken_as_is(self, normalizer):
        intensity = normalizer.score_force_intensity("4", JTBDForce.PAIN_OF_OLD)
        assert intensity.score == 4.0
        assert intensity.confidence == 0.9
        assert intensity.keywords == []

    def test_likert_decimal_code(self, normalizer):
        assert normalizer.score_force_intensity(" 2.0 ", JTBDForce.PULL_OF_NEW).score == 2.0

    def test_single_anchor(self, normalizer):
        intensity = normalizer.score_force_intensity("It is frustrating", JTBDForce.PAIN_OF_OLD)
        assert intensity.score == 3.5
        assert intensity.keywords == ["frustrating"]

    def test_amplifier_raises_score(self, normalizer):
        intensity = normalizer.score_force_intensity("I am extremely frustrated", JTBDForce.PAIN_OF_OLD)
        assert intensity.score == 4.5
        assert intensity.keywords == ["extremely", "frustrated"]

    def test_diminisher_lowers_score(self, normalizer):
        intensity = normalizer.score_force_intensity("slightly annoying", JTBDForce.PAIN_OF_OLD)
        assert intensity.score == 2.0

    def test_two_word_modifier(self, normalizer):
        intensity = normalizer.score_force_intensity("It is a bit slow", JTBDForce.PAIN_OF_OLD)
        assert intensity.score == 2.5
        assert "a bit" in intensity.keywords

    def test_extra_anchor_adds_bonus(self, normalizer):
        intensity = normalizer.score_force_intensity(
            "Current system is slow and unreliable", JTBDForce.PAIN_OF_OLD
        )
        assert intensity.score == 3.75
        assert set(intensity.keywords) == {"slow", "unreliable"}

    def test_negated_anchor_is_mirrored(self, normalizer):
        intensity = normalizer.score_force_intensity("It is not frustrating", JTBDForce.PAIN_OF_OLD)
        assert intensity.score == 2.5

    def test_negation_skips_modifiers(self, normalizer):
        intensity = normalizer.score_force_intensity("not very worried", JTBDForce.ANXIETY_OF_NEW)
        # 6 - 3.5 mirrored, then the "very" shift
        assert intensity.score == 3.25

    @pytest.mark.parametrize("text", ["Not at all worried", "not that worried", "Never particularly worried"])
    def test_negation_skips_fillers(self, normalizer, text):
        negated = normalizer.score_force_intensity(text, JTBDForce.ANXIETY_OF_NEW)
        plain = normalizer.score_force_intensity("Worried", JTBDForce.ANXIETY_OF_NEW)

        assert negated.score == 2.5
        assert plain.score == 3.5

    def test_filler_without_negator_is_not_negation(self, normalizer):
        intensity = normalizer.score_force_intensity("Worried at all times", JTBDForce.ANXIETY_OF_NEW)
        assert intensity.score == 3.5

    def test_score_is_bounded(self, normalizer):
        intensity = normalizer.score_force_intensity(
            "Absolutely terrible, broken and unbearable", JTBDForce.PAIN_OF_OLD
        )
        assert intensity.score == 5.0

    def test_sentiment_fallback_follows_force_polarity(self, normalizer):
        text = "It is good"
        assert normalizer.score_force_intensity(text, JTBDForce.PULL_OF_NEW).score == 4.5
        assert normalizer.score_force_intensity(text, JTBDForce.PAIN_OF_OLD).score == 1.5
        assert normalizer.score_force_intensity(text, JTBDForce.ANCHORS_TO_OLD).score == 3.0

    def test_confidence_grows_with_evidence(self, normalizer):
        none = normalizer.score_force_intensity("meh", JTBDForce.PAIN_OF_OLD)
        one = normalizer.score_force_intensity("slow", JTBDForce.PAIN_OF_OLD)
        two = normalizer.score_force_intensity("very slow and buggy", JTBDForce.PAIN_OF_OLD)
        assert none.confidence < one.confidence < two.confidence <= 0.95

    def test_demographic_frequency(self, normalizer):
        assert normalizer.score_force_intensity("I use it daily", JTBDForce.DEMOGRAPHIC).score == 4.0
        assert normalizer.score_force_intensity("rarely", JTBDForce.DEMOGRAPHIC).score == 1.5


class TestSentiment:
    def test_positive(self, normalizer):
        result = normalizer.analyze_sentiment("I love how fast and easy it is")
        assert result.label == "positive"
        assert result.score == 1.0
        assert result.magnitude == 3.0

    def test_negative(self, normalizer):
        result = normalizer.analyze_sentiment("Terrible, slow and buggy")
        assert result.label == "negative"
        assert result.score == -1.0

    def test_mixed_is_neutral(self, normalizer):
        result = normalizer.analyze_sentiment("Good support but slow")
        assert result.label == "neutral"
        assert result.score == 0.0

    def test_no_sentiment_words(self, normalizer):
        result = normalizer.analyze_sentiment("We use it on Mondays")
        assert result.score == 0.0
        assert result.magnitude == 0.0
        assert result.label == "neutral"


def test_normalize_filters_and_fans_out(normalizer):
    responses = [
        SurveyResponse(question_id="q1", session_id="s1", value="Very slow"),
        SurveyResponse(question_id="q1", session_id="s2", value="N/A"),
        SurveyResponse(question_id="q2", session_id="s1", value="We need automation"),
        SurveyResponse(question_id="q-unmapped", session_id="s1", value="Something"),
    ]
    mappings = [
        make_mapping("q1", JTBDForce.PAIN_OF_OLD),
        make_mapping("q2", JTBDForce.PULL_OF_NEW),
        make_mapping("q2", JTBDForce.ANXIETY_OF_NEW, weight=0.5),
    ]

    normalized = normalizer.normalize(responses, mappings)

    assert [(n.response_index, n.force) for n in normalized] == [
        (0, JTBDForce.PAIN_OF_OLD),
        (2, JTBDForce.PULL_OF_NEW),
        (2, JTBDForce.ANXIETY_OF_NEW),
    ]
    assert normalized[0].intensity == 3.75
    assert normalized[2].weight == 0.5
    assert all(1.0 <= n.intensity <= 5.0 for n in normalized)


def test_numeric_response_value_is_coerced():
    response = SurveyResponse(question_id="q1", session_id="s1", value=5)
    assert response.value == "5"
