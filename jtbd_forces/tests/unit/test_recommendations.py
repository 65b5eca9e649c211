"""
Unit tests for RecommendationEngine
"""

import pytest

from jtbd_forces.domain.vocabulary import JTBDForce
from jtbd_forces.schemas import Recommendation
from jtbd_forces.services.forces.exceptions import ValidationError
from jtbd_forces.services.forces.recommendations import (
    RecommendationEngine,
    priority_for_score,
    resolve_priority_weights,
)
from jtbd_forces.tests.conftest import make_result

CORE_CATEGORIES = {"messaging", "product", "marketing", "sales"}


@pytest.fixture
def engine():
    return RecommendationEngine()


def make_recommendation(rec_id, confidence, priority="medium", impact="medium", effort="medium"):
    return Recommendation(
        id=rec_id,
        category="product",
        content="Do something",
        rationale="Because",
        priority=priority,
        impact=impact,
        effort=effort,
        confidence=confidence,
    )


def test_high_pain_low_barriers(engine):
    result = make_result(
        {
            JTBDForce.PAIN_OF_OLD: 4.5,
            JTBDForce.PULL_OF_NEW: 3.5,
            JTBDForce.ANCHORS_TO_OLD: 1.5,
            JTBDForce.ANXIETY_OF_NEW: 1.5,
        },
        switch_likelihood=0.8,
        primary_drivers=[JTBDForce.PAIN_OF_OLD, JTBDForce.PULL_OF_NEW],
    )

    recommendations = engine.generate(result)
    by_id = {rec.id: rec for rec in recommendations}

    assert by_id["rec_high_pain_messaging"].category == "messaging"
    assert by_id["rec_high_pain_messaging"].priority == "high"
    assert "pain points" in by_id["rec_high_pain_messaging"].content
    assert by_id["rec_high_switch_sales"].category == "sales"
    assert CORE_CATEGORIES <= {rec.category for rec in recommendations}
    assert "rec_research_sample_size" not in by_id


def test_strong_anchors(engine):
    result = make_result(
        {JTBDForce.PAIN_OF_OLD: 3.5, JTBDForce.ANCHORS_TO_OLD: 4.5},
        barriers=[JTBDForce.ANCHORS_TO_OLD],
    )

    recommendations = engine.generate(result)
    by_id = {rec.id: rec for rec in recommendations}

    assert by_id["rec_migration_tooling"].category == "product"
    pilot = by_id["rec_pilot_program"]
    assert pilot.category == "sales"
    assert "pilot" in pilot.content.lower()
    assert "gradual" in pilot.content.lower()
    assert pilot.related_forces == [JTBDForce.ANCHORS_TO_OLD]
    assert "rec_high_pain_messaging" not in by_id


def test_high_pain_with_borderline_anxiety(engine):
    result = make_result(
        {
            JTBDForce.PAIN_OF_OLD: 4.8,
            JTBDForce.PULL_OF_NEW: 3.5,
            JTBDForce.ANCHORS_TO_OLD: 1.5,
            JTBDForce.ANXIETY_OF_NEW: 2.0,
        },
        switch_likelihood=0.85,
        primary_drivers=[JTBDForce.PAIN_OF_OLD, JTBDForce.PULL_OF_NEW],
    )

    by_id = {rec.id: rec for rec in engine.generate(result)}

    # Anxiety is not below the barrier threshold, so the baseline messaging carries the pain
    assert "rec_high_pain_messaging" not in by_id
    assert by_id["rec_messaging_pain_of_old"].priority == "high"


def test_baseline_messaging_stays_medium_for_moderate_driver(engine):
    result = make_result({JTBDForce.PAIN_OF_OLD: 3.5}, primary_drivers=[JTBDForce.PAIN_OF_OLD])
    by_id = {rec.id: rec for rec in engine.generate(result)}
    assert by_id["rec_messaging_pain_of_old"].priority == "medium"


def test_baseline_covers_every_core_category(engine):
    result = make_result({JTBDForce.PAIN_OF_OLD: 3.0, JTBDForce.PULL_OF_NEW: 3.0})
    recommendations = engine.generate(result)
    assert CORE_CATEGORIES <= {rec.category for rec in recommendations}


def test_small_sample_adds_research_recommendation(engine):
    result = make_result({JTBDForce.PAIN_OF_OLD: 3.5}, sample_size=12)
    recommendations = engine.generate(result)

    research = [rec for rec in recommendations if rec.category == "research"]
    assert len(research) == 1
    assert research[0].content.startswith("Insufficient sample size")


def test_low_confidence_adds_research_recommendation(engine):
    result = make_result({JTBDForce.PAIN_OF_OLD: 3.5}, confidence=0.3)
    recommendations = engine.generate(result)
    assert any(rec.id == "rec_research_sample_size" for rec in recommendations)


def test_recommendation_confidence_stays_in_range(engine):
    result = make_result({force: 3.0 for force in JTBDForce}, confidence=0.9)
    assert all(0.0 <= rec.confidence <= 1.0 for rec in engine.generate(result))


class TestPrioritization:
    def test_confidence_outranks_nominal_priority(self, engine):
        low = make_recommendation("rec_low", 0.2, priority="high")
        high = make_recommendation("rec_high", 0.9, priority="low")

        ranked = engine.prioritize_recommendations([low, high])

        assert [rec.id for rec in ranked] == ["rec_high", "rec_low"]

    def test_priority_breaks_exact_ties(self, engine):
        first = make_recommendation("rec_b", 0.5, priority="high")
        second = make_recommendation("rec_a", 0.5, priority="low")
        ranked = engine.prioritize_recommendations([second, first])
        assert [rec.id for rec in ranked] == ["rec_b", "rec_a"]

    def test_low_effort_ranks_higher(self, engine):
        cheap = make_recommendation("rec_cheap", 0.5, effort="low")
        costly = make_recommendation("rec_costly", 0.5, effort="high")
        ranked = engine.prioritize_recommendations([costly, cheap])
        assert ranked[0].id == "rec_cheap"

    def test_custom_weights_change_order(self, engine):
        impactful = make_recommendation("rec_impact", 0.3, impact="high")
        confident = make_recommendation("rec_confident", 0.9, impact="medium")

        by_impact = engine.prioritize_recommendations(
            [confident, impactful], {"impact": 1.0, "effort": 0.0, "confidence": 0.01}
        )
        by_confidence = engine.prioritize_recommendations([confident, impactful])

        assert by_impact[0].id == "rec_impact"
        assert by_confidence[0].id == "rec_confident"

    def test_priority_is_rederived_from_score(self, engine):
        pain_messaging = make_recommendation("1", 0.9, priority="medium", impact="high", effort="low")
        migration = make_recommendation("2", 0.7, priority="low", impact="medium", effort="high")

        ranked = engine.prioritize_recommendations(
            [migration, pain_messaging], {"weight_impact": 0.6, "weight_effort": 0.4}
        )

        assert [(rec.id, rec.priority) for rec in ranked] == [("1", "high"), ("2", "medium")]
        assert pain_messaging.priority == "medium"

    @pytest.mark.parametrize(
        "score, priority",
        [(0.96, "high"), (0.75, "high"), (0.6, "medium"), (0.5, "medium"), (0.3, "low")],
    )
    def test_priority_bands(self, score, priority):
        assert priority_for_score(score) == priority

    def test_input_list_is_not_modified(self, engine):
        recs = [make_recommendation("rec_a", 0.1), make_recommendation("rec_b", 0.9)]
        engine.prioritize_recommendations(recs)
        assert [rec.id for rec in recs] == ["rec_a", "rec_b"]


class TestPriorityWeights:
    def test_defaults_sum_to_one(self):
        weights = resolve_priority_weights()
        assert weights == pytest.approx({"impact": 0.4, "effort": 0.2, "confidence": 0.4})

    def test_aliases_and_normalisation(self):
        weights = resolve_priority_weights({"weight_impact": 2.0, "weight_effort": 0.0, "weight_confidence": 2.0})
        assert weights == pytest.approx({"impact": 0.5, "effort": 0.0, "confidence": 0.5})

    @pytest.mark.parametrize(
        "weights",
        [
            {"confidence": 0.0},
            {"confidence": -1.0},
            {"impact": -0.1},
            {"urgency": 0.5},
        ],
    )
    def test_invalid_weights_raise(self, weights):
        with pytest.raises(ValidationError):
            resolve_priority_weights(weights)
