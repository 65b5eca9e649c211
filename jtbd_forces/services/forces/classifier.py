"""
Question force classifier.

Maps survey question text onto one of the five JTBD forces using the
keyword dictionaries in the lexicon module.
"""

import logging
import math
from typing import Dict, List, Mapping, Optional

import numpy as np

from jtbd_forces.config.forces_config import DEFAULT_FORCES_CONFIG, ForcesConfig
from jtbd_forces.schemas import ForceCoverage, ForceCoverageReport, QuestionForceMapping
from jtbd_forces.services.forces.lexicon import (
    LEXICON_VERSION,
    QUESTION_PATTERNS,
    content_words,
    tokenize,
)
from jtbd_forces.domain.vocabulary import (
    ALL_FORCES,
    FORCE_LABELS,
    FORCE_PRIORITY,
    JTBDForce,
    rank_forces,
)

logger = logging.getLogger(__name__)


class QuestionForceClassifier:
    """
    Classifier that assigns a JTBD force to a survey question.
    """

    def __init__(self, config: Optional[ForcesConfig] = None):
        """
        Initialize the question force classifier.

        Args:
            config: Threshold configuration (defaults to DEFAULT_FORCES_CONFIG)
        """
        self.config = config or DEFAULT_FORCES_CONFIG
        self.lexicon_version = LEXICON_VERSION

    def score_question(self, question_text: str) -> Dict[JTBDForce, float]:
        """
        Keyword hit density per force.

        Args:
            question_text: Question text to score

        Returns:
            Dictionary mapping every force to hits / content-word count
        """
        text = (question_text or "").lower()
        words = content_words(tokenize(text))
        denominator = max(len(words), 1)

        scores = {}
        for force in FORCE_PRIORITY:
            hits = sum(1 for _, pattern in QUESTION_PATTERNS[force] if pattern.search(text))
            scores[force] = hits / denominator
        return scores

    def density_confidence(self, density: float) -> float:
        """Saturating confidence for a keyword hit density."""
        if density <= 0:
            return 0.0
        confidence = self.config.CLASSIFIER_MAX_CONFIDENCE * (
            1.0 - math.exp(-self.config.CLASSIFIER_SATURATION * density)
        )
        if density < self.config.CLASSIFIER_MIN_DENSITY:
            confidence = min(confidence, 0.49)
        return round(confidence, 4)

    def classify(
        self, question_text: str, question_id: str, survey_id: str
    ) -> QuestionForceMapping:
        """
        Classify a question into a JTBD force.

        Args:
            question_text: Question text to classify
            question_id: Identifier of the question
            survey_id: Survey the question belongs to

        Returns:
            A classified QuestionForceMapping with weight 1.0
        """
        scores = self.score_question(question_text)
        best_force = rank_forces(scores)[0]
        density = scores[best_force]
        confidence = self.density_confidence(density)

        if density < self.config.CLASSIFIER_MIN_DENSITY:
            rationale = (
                f"No force keywords above threshold; defaulted to {best_force.value} "
                f"by priority order (lexicon {self.lexicon_version})"
            )
            logger.debug(f"Ambiguous question {question_id}: {question_text!r}")
        else:
            rationale = (
                f"Mapped to {best_force.value} by keyword density {density:.2f} "
                f"(lexicon {self.lexicon_version})"
            )

        return QuestionForceMapping(
            question_id=question_id,
            survey_id=survey_id,
            force=best_force,
            weight=1.0,
            confidence=confidence,
            source="classified",
            rationale=rationale,
        )

    def validate_force_coverage(
        self, questions: Mapping[str, str], survey_id: str = ""
    ) -> ForceCoverageReport:
        """
        Check how well a survey's questions cover the five forces.

        Args:
            questions: Question texts keyed by question id
            survey_id: Survey the questions belong to

        Returns:
            ForceCoverageReport with per-force coverage, balance score and recommendations
        """
        mappings = [
            self.classify(text, question_id, survey_id)
            for question_id, text in questions.items()
        ]

        coverage: Dict[JTBDForce, ForceCoverage] = {}
        for force in ALL_FORCES:
            force_mappings = [m for m in mappings if m.force == force]
            count = len(force_mappings)
            avg_confidence = (
                sum(m.confidence for m in force_mappings) / count if count else 0.0
            )
            coverage[force] = ForceCoverage(
                question_count=count,
                question_ids=[m.question_id for m in force_mappings],
                coverage_quality=self._coverage_quality(count, avg_confidence),
            )

        missing = [force for force in ALL_FORCES if coverage[force].question_count == 0]

        total = len(mappings)
        counts = np.array([coverage[f].question_count for f in ALL_FORCES], dtype=float)
        variance = float(np.mean((counts - total / len(ALL_FORCES)) ** 2))
        balance_score = int(round(max(0.0, min(100.0, 100.0 - variance * 10))))

        report = ForceCoverageReport(
            all_forces_covered=not missing,
            missing_forces=missing,
            force_coverage=coverage,
            balance_score=balance_score,
            recommendations=self._coverage_recommendations(coverage, missing, balance_score, total),
        )
        logger.info(
            f"Force coverage for survey {survey_id or '<unnamed>'}: "
            f"{total} questions, {len(missing)} missing forces, balance {balance_score}"
        )
        return report

    def _coverage_quality(self, count: int, avg_confidence: float) -> str:
        if count == 0 or avg_confidence < 0.3:
            return "poor"
        if count >= 2 and avg_confidence >= 0.7:
            return "excellent"
        if avg_confidence >= 0.5:
            return "good"
        return "fair"

    def _coverage_recommendations(
        self,
        coverage: Dict[JTBDForce, ForceCoverage],
        missing: List[JTBDForce],
        balance_score: int,
        total_questions: int,
    ) -> List[str]:
        recommendations = []

        for force in missing:
            recommendations.append(f"Add questions to cover the {FORCE_LABELS[force]} force")

        for force, item in coverage.items():
            if item.coverage_quality == "poor" and item.question_count > 0:
                recommendations.append(
                    f"Improve question wording for the {FORCE_LABELS[force]} force"
                )

        if balance_score < self.config.MIN_BALANCE_SCORE:
            recommendations.append(
                "Rebalance questions across JTBD forces for more comprehensive analysis"
            )

        if total_questions < self.config.MIN_SURVEY_QUESTIONS:
            recommendations.append("Consider adding more questions for deeper insights")
        elif total_questions > self.config.MAX_SURVEY_QUESTIONS:
            recommendations.append("Survey may be too long - consider prioritizing key questions")

        return recommendations
