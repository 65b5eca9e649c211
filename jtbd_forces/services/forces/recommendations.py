"""
Recommendation generation for JTBD forces analysis.

This module turns an analysis result into rule-based, actionable
recommendations and ranks them by impact, effort and confidence.
"""

import logging
from typing import Dict, List, Mapping, Optional

from jtbd_forces.config.forces_config import DEFAULT_FORCES_CONFIG, ForcesConfig
from jtbd_forces.schemas import AnalysisResult, Recommendation
from jtbd_forces.services.forces.exceptions import ValidationError
from jtbd_forces.domain.vocabulary import (
    FORCE_GROUPS,
    FORCE_LABELS,
    ForceGroup,
    JTBDForce,
    rank_forces,
    require_all_forces,
)

logger = logging.getLogger(__name__)

LEVEL_VALUES: Dict[str, float] = {"low": 1 / 3, "medium": 2 / 3, "high": 1.0}

DEFAULT_PRIORITY_WEIGHTS: Dict[str, float] = {"impact": 0.4, "effort": 0.2, "confidence": 0.4}

WEIGHT_ALIASES: Dict[str, str] = {
    "weight_impact": "impact",
    "weight_effort": "effort",
    "weight_confidence": "confidence",
}

# Lowest score for each priority band, highest band first
PRIORITY_BANDS = ((0.75, "high"), (0.5, "medium"))

# Messaging angle for the strongest driver
DRIVER_MESSAGING: Dict[JTBDForce, str] = {
    JTBDForce.PAIN_OF_OLD: "Lead messaging with the concrete pain points respondents report about their current solution",
    JTBDForce.PULL_OF_NEW: "Lead messaging with the outcomes and capabilities respondents say they are looking for",
    JTBDForce.ANCHORS_TO_OLD: "Acknowledge the investment in the current solution and frame the switch as building on it",
    JTBDForce.ANXIETY_OF_NEW: "Address adoption risks up front with proof points, guarantees and customer evidence",
    JTBDForce.DEMOGRAPHIC: "Tailor messaging to the roles and usage patterns that dominate the respondent base",
}

# Product work that weakens a barrier or strengthens a driver
FORCE_PRODUCT: Dict[JTBDForce, str] = {
    JTBDForce.PAIN_OF_OLD: "Prioritise features that remove the most frequently reported pain points",
    JTBDForce.PULL_OF_NEW: "Double down on the capabilities respondents find most attractive",
    JTBDForce.ANCHORS_TO_OLD: "Reduce switching cost with import tools, integrations and familiar workflows",
    JTBDForce.ANXIETY_OF_NEW: "Reduce perceived risk with trials, rollback options and transparent security documentation",
    JTBDForce.DEMOGRAPHIC: "Segment onboarding by role and usage frequency",
}

require_all_forces(DRIVER_MESSAGING, "DRIVER_MESSAGING")
require_all_forces(FORCE_PRODUCT, "FORCE_PRODUCT")


def resolve_priority_weights(weights: Optional[Mapping[str, float]] = None) -> Dict[str, float]:
    """
    Merge caller weights over the defaults and normalise them to sum to 1.

    Raises:
        ValidationError: Unknown keys, negative weights or a non-positive confidence weight
    """
    resolved = dict(DEFAULT_PRIORITY_WEIGHTS)
    for key, value in (weights or {}).items():
        name = WEIGHT_ALIASES.get(key, key)
        if name not in resolved:
            raise ValidationError(f"Unknown prioritisation weight: {key}")
        resolved[name] = float(value)

    if resolved["confidence"] <= 0:
        raise ValidationError("The confidence weight must be positive")
    if resolved["impact"] < 0 or resolved["effort"] < 0:
        raise ValidationError("Prioritisation weights must not be negative")

    total = sum(resolved.values())
    return {name: value / total for name, value in resolved.items()}


def priority_for_score(score: float) -> str:
    for floor, priority in PRIORITY_BANDS:
        if score >= floor:
            return priority
    return "low"


class RecommendationEngine:
    """Generator for actionable JTBD recommendations."""

    def __init__(self, config: Optional[ForcesConfig] = None):
        self.config = config or DEFAULT_FORCES_CONFIG

    def generate(self, analysis_result: AnalysisResult) -> List[Recommendation]:
        """
        Generate recommendations for an analysis result.

        Args:
            analysis_result: Result whose distribution and balance drive the rules

        Returns:
            Prioritised list of recommendations
        """
        cfg = self.config
        distribution = analysis_result.force_distribution
        strengths = {force: s.strength for force, s in distribution.forces.items()}
        evidenced = {s.force: s.strength for s in distribution.evidenced()}
        recommendations: List[Recommendation] = []

        pain = strengths[JTBDForce.PAIN_OF_OLD]
        anchors = strengths[JTBDForce.ANCHORS_TO_OLD]
        anxiety = strengths[JTBDForce.ANXIETY_OF_NEW]

        if (
            pain > cfg.HIGH_PAIN_THRESHOLD
            and anchors < cfg.LOW_BARRIER_THRESHOLD
            and anxiety < cfg.LOW_BARRIER_THRESHOLD
        ):
            related = [JTBDForce.PAIN_OF_OLD]
            recommendations.append(
                self._build(
                    analysis_result,
                    "rec_high_pain_messaging",
                    "messaging",
                    "Lead with pain points: make the cost of the current solution the headline of every message",
                    f"Pain of the old solution is high ({pain:.2f}) while anchors ({anchors:.2f}) "
                    f"and anxiety ({anxiety:.2f}) are low",
                    priority="high",
                    impact="high",
                    effort="low",
                    related=related,
                )
            )
            recommendations.append(
                self._build(
                    analysis_result,
                    "rec_high_switch_sales",
                    "sales",
                    "Capitalise on the high switch likelihood with a short, direct sales cycle and a clear start date",
                    f"Switch likelihood is {analysis_result.switch_likelihood:.2f} with few barriers in the way",
                    priority="high",
                    impact="high",
                    effort="medium",
                    related=related,
                )
            )

        if anchors > cfg.HIGH_ANCHORS_THRESHOLD:
            related = [JTBDForce.ANCHORS_TO_OLD]
            recommendations.append(
                self._build(
                    analysis_result,
                    "rec_migration_tooling",
                    "product",
                    "Build migration tooling that imports existing data and configuration from the current solution",
                    f"Anchors to the old solution are strong ({anchors:.2f}); switching cost is the main obstacle",
                    priority="high",
                    impact="high",
                    effort="high",
                    related=related,
                )
            )
            recommendations.append(
                self._build(
                    analysis_result,
                    "rec_pilot_program",
                    "sales",
                    "Offer a pilot program with a gradual, phased rollout alongside the current solution",
                    f"Strong anchors ({anchors:.2f}) make an all-at-once switch unlikely",
                    priority="high",
                    impact="medium",
                    effort="medium",
                    related=related,
                )
            )

        recommendations.extend(self._baseline(analysis_result, evidenced, recommendations))

        total = distribution.total_responses
        if (
            analysis_result.confidence < cfg.LOW_CONFIDENCE_THRESHOLD
            or total < cfg.SMALL_SAMPLE_THRESHOLD
        ):
            recommendations.append(
                Recommendation(
                    id="rec_research_sample_size",
                    category="research",
                    content=(
                        "Insufficient sample size: collect more survey responses before acting "
                        "on these results"
                    ),
                    rationale=(
                        f"Analysis confidence is {analysis_result.confidence:.2f} from {total} responses; "
                        f"at least {cfg.SMALL_SAMPLE_THRESHOLD} responses are recommended"
                    ),
                    priority="high",
                    impact="high",
                    effort="low",
                    confidence=0.9,
                    related_forces=[],
                )
            )

        logger.info(
            f"Generated {len(recommendations)} recommendations for survey {analysis_result.survey_id}"
        )
        return self._rank(recommendations, resolve_priority_weights())

    def _baseline(
        self,
        result: AnalysisResult,
        evidenced: Dict[JTBDForce, float],
        existing: List[Recommendation],
    ) -> List[Recommendation]:
        """One recommendation for each core category not yet covered by a rule."""
        covered = {rec.category for rec in existing}
        baseline: List[Recommendation] = []
        ranked = rank_forces(evidenced)
        drivers = [f for f in ranked if FORCE_GROUPS[f] in (ForceGroup.PUSH, ForceGroup.PULL)]
        strongest_driver = result.primary_drivers[0] if result.primary_drivers else (
            drivers[0] if drivers else JTBDForce.PAIN_OF_OLD
        )
        driver_strength = evidenced.get(strongest_driver, 0.0)
        likelihood = result.switch_likelihood

        if "messaging" not in covered:
            baseline.append(
                self._build(
                    result,
                    f"rec_messaging_{strongest_driver.value}",
                    "messaging",
                    DRIVER_MESSAGING[strongest_driver],
                    f"The {FORCE_LABELS[strongest_driver]} is the strongest driver "
                    f"({driver_strength:.2f})",
                    priority="high" if driver_strength > self.config.HIGH_PAIN_THRESHOLD else "medium",
                    impact="high",
                    effort="low",
                    related=[strongest_driver],
                )
            )

        if "product" not in covered:
            focus = result.barriers[0] if result.barriers else strongest_driver
            reason = (
                f"The {FORCE_LABELS[focus]} is the strongest barrier ({evidenced.get(focus, 0.0):.2f})"
                if result.barriers
                else f"No barrier exceeds {self.config.BARRIER_THRESHOLD}; reinforce the strongest driver"
            )
            baseline.append(
                self._build(
                    result,
                    f"rec_product_{focus.value}",
                    "product",
                    FORCE_PRODUCT[focus],
                    reason,
                    priority="medium",
                    impact="high" if result.barriers else "medium",
                    effort="high" if result.barriers else "medium",
                    related=[focus],
                )
            )

        if likelihood >= self.config.HIGH_SWITCH_LIKELIHOOD:
            marketing = ("rec_marketing_acceleration", "Invest in demand capture: comparison pages, switching guides and referral incentives", "medium")
            sales = ("rec_sales_fast_track", "Fast-track qualified prospects with a standard switching offer", "medium")
        elif likelihood <= 1 - self.config.HIGH_SWITCH_LIKELIHOOD:
            marketing = ("rec_marketing_education", "Run education campaigns that build awareness of the problem before promoting the product", "high")
            sales = ("rec_sales_nurture", "Qualify carefully and nurture long-cycle prospects instead of pushing for a quick close", "low")
        else:
            marketing = ("rec_marketing_nurture", "Use case studies and proof points to move undecided prospects toward switching", "medium")
            sales = ("rec_sales_consultative", "Use a consultative sales approach that maps the current workflow before proposing a switch", "medium")

        if "marketing" not in covered:
            baseline.append(
                self._build(
                    result,
                    marketing[0],
                    "marketing",
                    marketing[1],
                    f"Switch likelihood is {likelihood:.2f}",
                    priority="medium",
                    impact="medium",
                    effort=marketing[2],
                    related=drivers[:1],
                )
            )

        if "sales" not in covered:
            baseline.append(
                self._build(
                    result,
                    sales[0],
                    "sales",
                    sales[1],
                    f"Switch likelihood is {likelihood:.2f}",
                    priority="medium",
                    impact="medium",
                    effort=sales[2],
                    related=list(result.barriers[:1]) or drivers[:1],
                )
            )

        return baseline

    def _build(
        self,
        result: AnalysisResult,
        rec_id: str,
        category: str,
        content: str,
        rationale: str,
        priority: str,
        impact: str,
        effort: str,
        related: List[JTBDForce],
    ) -> Recommendation:
        distribution = result.force_distribution
        confidences = [result.confidence] + [
            distribution.forces[f].confidence for f in related if distribution.forces[f].has_evidence
        ]
        return Recommendation(
            id=rec_id,
            category=category,
            content=content,
            rationale=rationale,
            priority=priority,
            impact=impact,
            effort=effort,
            confidence=round(sum(confidences) / len(confidences), 4),
            related_forces=list(related),
        )

    def score_recommendation(self, recommendation: Recommendation, weights: Dict[str, float]) -> float:
        inverse_effort = 1.0 + LEVEL_VALUES["low"] - LEVEL_VALUES[recommendation.effort]
        return (
            weights["impact"] * LEVEL_VALUES[recommendation.impact]
            + weights["effort"] * inverse_effort
            + weights["confidence"] * recommendation.confidence
        )

    def prioritize_recommendations(
        self,
        recommendations: List[Recommendation],
        weights: Optional[Mapping[str, float]] = None,
    ) -> List[Recommendation]:
        """
        Rank recommendations by impact, inverse effort and confidence.

        Args:
            recommendations: Recommendations to rank
            weights: Optional weights keyed by impact/effort/confidence (or weight_* aliases)

        Returns:
            New list ordered by descending score; nominal priority only breaks ties
            and each copy carries the priority band of its score
        """
        resolved = resolve_priority_weights(weights)
        return [
            rec.model_copy(update={"priority": priority_for_score(self.score_recommendation(rec, resolved))})
            for rec in self._rank(recommendations, resolved)
        ]

    def _rank(self, recommendations: List[Recommendation], weights: Dict[str, float]) -> List[Recommendation]:
        return sorted(
            recommendations,
            key=lambda rec: (
                -round(self.score_recommendation(rec, weights), 10),
                -LEVEL_VALUES[rec.priority],
                rec.id,
            ),
        )
