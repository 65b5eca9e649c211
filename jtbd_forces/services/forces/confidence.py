"""
Confidence estimation for JTBD force strengths.

Provides t-distribution confidence intervals per force and an overall
confidence score for a force distribution.
"""

import logging
import math
from typing import Dict, List, Optional

import numpy as np
from scipy import stats

from jtbd_forces.config.forces_config import DEFAULT_FORCES_CONFIG, ForcesConfig
from jtbd_forces.schemas import (
    ConfidenceInterval,
    ForceDistribution,
    ForceStrength,
    OverallConfidence,
)
from jtbd_forces.services.forces.exceptions import InsufficientDataError, ValidationError
from jtbd_forces.domain.vocabulary import ALL_FORCES, FORCE_LABELS

logger = logging.getLogger(__name__)


class ConfidenceIntervalEstimator:
    """
    Estimator for per-force confidence intervals and overall analysis confidence.
    """

    def __init__(self, config: Optional[ForcesConfig] = None):
        self.config = config or DEFAULT_FORCES_CONFIG

    def critical_value(self, confidence_level: float, sample_size: int) -> float:
        """Two-sided t critical value; a single response uses one degree of freedom."""
        degrees_of_freedom = max(sample_size - 1, 1)
        return float(stats.t.ppf((1.0 + confidence_level) / 2.0, degrees_of_freedom))

    def small_sample_inflation(self, sample_size: int) -> float:
        threshold = self.config.SMALL_SAMPLE_THRESHOLD
        if sample_size >= threshold:
            return 1.0
        return 1.0 + self.config.SMALL_SAMPLE_INFLATION * (threshold - sample_size) / threshold

    def estimate(
        self, force_strength: ForceStrength, confidence_level: float = 0.95
    ) -> ConfidenceInterval:
        """
        Estimate the confidence interval of a force strength.

        Args:
            force_strength: Strength to bound
            confidence_level: Two-sided confidence level in (0, 1)

        Returns:
            ConfidenceInterval centred on the strength

        Raises:
            ValidationError: confidence_level outside (0, 1)
            InsufficientDataError: The force has no contributing responses
        """
        if not 0.0 < confidence_level < 1.0:
            raise ValidationError(
                f"confidence_level must be between 0 and 1 (exclusive), got {confidence_level}"
            )

        n = force_strength.sample_size
        if n <= 0:
            raise InsufficientDataError(
                f"Cannot estimate a confidence interval for {force_strength.force.value} without responses",
                force=force_strength.force.value,
                sample_size=0,
                minimum_sample_size=1,
            )

        std = max(force_strength.standard_deviation, self.config.MIN_STANDARD_DEVIATION)
        margin = (
            self.critical_value(confidence_level, n)
            * std
            / math.sqrt(n)
            * self.small_sample_inflation(n)
        )

        return ConfidenceInterval(
            force=force_strength.force,
            lower_bound=force_strength.strength - margin,
            upper_bound=force_strength.strength + margin,
            confidence_level=confidence_level,
            margin_of_error=margin,
        )

    def calculate_overall_confidence(self, distribution: ForceDistribution) -> OverallConfidence:
        """
        Blend force confidence, sample adequacy and force coverage.

        Args:
            distribution: Force distribution of a survey

        Returns:
            OverallConfidence with the factor breakdown and improvement hints
        """
        strengths = [distribution.forces[f] for f in ALL_FORCES]
        saturation = self.config.SAMPLE_SATURATION

        force_confidence = float(np.mean([s.confidence for s in strengths]))
        sample_adequacy = float(
            np.mean([s.sample_size / (s.sample_size + saturation) for s in strengths])
        )
        coverage = sum(1 for s in strengths if s.has_evidence) / len(strengths)

        confidence = 0.5 * force_confidence + 0.3 * sample_adequacy + 0.2 * coverage
        factors: Dict[str, float] = {
            "force_confidence": round(force_confidence, 4),
            "sample_adequacy": round(sample_adequacy, 4),
            "force_coverage": round(coverage, 4),
        }

        hints: List[str] = []
        if distribution.total_responses < self.config.SMALL_SAMPLE_THRESHOLD:
            hints.append(
                f"Collect more responses: {distribution.total_responses} analysed, "
                f"at least {self.config.SMALL_SAMPLE_THRESHOLD} recommended"
            )
        for strength in strengths:
            if not strength.has_evidence:
                hints.append(f"Add questions measuring the {FORCE_LABELS[strength.force]} force")
            elif strength.confidence < self.config.LOW_CONFIDENCE_THRESHOLD:
                hints.append(
                    f"Strengthen evidence for the {FORCE_LABELS[strength.force]} force "
                    f"(confidence {strength.confidence:.2f})"
                )

        return OverallConfidence(
            confidence=round(min(max(confidence, 0.0), 1.0), 4),
            factors=factors,
            recommendations=hints,
        )
