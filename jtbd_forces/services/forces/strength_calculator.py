"""
Force strength calculator for JTBD forces analysis.

Aggregates normalized response intensities into one ForceStrength per force
and assembles the five-force distribution for a survey.
"""

import logging
from collections import defaultdict
from typing import Dict, List, Optional, Sequence, Set, Tuple

import numpy as np
from scipy import stats

from jtbd_forces.config.forces_config import DEFAULT_FORCES_CONFIG, ForcesConfig
from jtbd_forces.schemas import (
    AnalysisRequest,
    ForceDistribution,
    ForceStrength,
    NormalizedResponse,
    QuestionForceMapping,
    SurveyResponse,
)
from jtbd_forces.services.forces.exceptions import ComputationError, InsufficientDataError
from jtbd_forces.services.forces.normalizer import ResponseNormalizer
from jtbd_forces.domain.vocabulary import (
    ALL_FORCES,
    AggregationMethod,
    JTBDForce,
    NEUTRAL_FORCE_STRENGTH,
    is_valid_strength,
)

logger = logging.getLogger(__name__)


class ForceStrengthCalculator:
    """
    Calculator for per-force strengths and survey force distributions.
    """

    def __init__(
        self,
        normalizer: Optional[ResponseNormalizer] = None,
        config: Optional[ForcesConfig] = None,
    ):
        """
        Initialize the force strength calculator.

        Args:
            normalizer: Response normalizer (a new one is created if omitted)
            config: Threshold configuration (defaults to DEFAULT_FORCES_CONFIG)
        """
        self.normalizer = normalizer or ResponseNormalizer()
        self.config = config or DEFAULT_FORCES_CONFIG

    def calculate_force_strength(
        self,
        force: JTBDForce,
        responses: Sequence[SurveyResponse],
        mappings: Sequence[QuestionForceMapping],
        method: AggregationMethod = AggregationMethod.WEIGHTED_AVERAGE,
        minimum_sample_size: int = 1,
        exclude_outliers: bool = False,
    ) -> ForceStrength:
        """
        Calculate the strength of a single force.

        Args:
            force: Force to calculate
            responses: Survey responses
            mappings: Question-to-force mappings
            method: Aggregation method
            minimum_sample_size: Smallest acceptable number of contributing responses
            exclude_outliers: Drop IQR outliers before aggregating

        Returns:
            ForceStrength for the force

        Raises:
            InsufficientDataError: No contributing responses, or fewer than minimum_sample_size
            ComputationError: Aggregation produced a value outside [1, 5]
        """
        force = JTBDForce(force)
        normalized = self.normalizer.normalize(responses, mappings)
        contributions = [n for n in normalized if n.force == force]
        strength, _ = self.aggregate(
            force,
            contributions,
            method=method,
            minimum_sample_size=max(minimum_sample_size, 1),
            exclude_outliers=exclude_outliers,
        )
        return strength

    def aggregate(
        self,
        force: JTBDForce,
        contributions: Sequence[NormalizedResponse],
        method: AggregationMethod = AggregationMethod.WEIGHTED_AVERAGE,
        minimum_sample_size: int = 1,
        exclude_outliers: bool = False,
    ) -> Tuple[ForceStrength, Set[int]]:
        """
        Aggregate already-normalized contributions for one force.

        Returns:
            The ForceStrength and the request indices of the responses that counted
        """
        items = list(contributions)
        if not items:
            raise InsufficientDataError(
                f"No valid responses for force {force.value}",
                force=force.value,
                sample_size=0,
                minimum_sample_size=minimum_sample_size,
            )

        if exclude_outliers:
            items = self._exclude_outliers(force, items)

        sample_size = len(items)
        if sample_size < minimum_sample_size:
            raise InsufficientDataError(
                f"Insufficient sample size for reliable analysis: {force.value} has "
                f"{sample_size} valid responses, {minimum_sample_size} required",
                force=force.value,
                sample_size=sample_size,
                minimum_sample_size=minimum_sample_size,
            )

        intensities = np.array([item.intensity for item in items], dtype=float)
        weights = np.array([item.weight * item.mapping_confidence for item in items], dtype=float)

        value = self._apply_method(AggregationMethod(method), intensities, weights)
        strength = round(float(value), 2)

        if not np.isfinite(strength) or not is_valid_strength(strength):
            context = {
                "force": force.value,
                "method": AggregationMethod(method).value,
                "raw_value": float(value),
                "sample_size": sample_size,
                "intensities": intensities.tolist(),
                "weights": weights.tolist(),
            }
            logger.error(f"Aggregation produced an out-of-range strength: {context}")
            raise ComputationError(
                f"Aggregated strength {value} for {force.value} is outside [1, 5]",
                context=context,
            )

        std = float(np.std(intensities, ddof=1)) if sample_size > 1 else 0.0

        force_strength = ForceStrength(
            force=force,
            strength=strength,
            confidence=self._force_confidence(items),
            sample_size=sample_size,
            standard_deviation=round(std, 4),
        )
        return force_strength, {item.response_index for item in items}

    def _apply_method(
        self, method: AggregationMethod, intensities: np.ndarray, weights: np.ndarray
    ) -> float:
        if method is AggregationMethod.WEIGHTED_AVERAGE:
            if weights.sum() <= 0:
                logger.warning("All contribution weights are zero; using the unweighted mean")
                return float(np.mean(intensities))
            return float(np.average(intensities, weights=weights))

        if method is AggregationMethod.MEDIAN:
            return float(np.median(intensities))

        if method is AggregationMethod.MODE:
            # Half-up rounding; scipy resolves ties to the smallest value
            rounded = np.floor(intensities + 0.5)
            return float(stats.mode(rounded, keepdims=False).mode)

        if method is AggregationMethod.TRIMMED_MEAN:
            return float(stats.trim_mean(intensities, self.config.TRIM_PROPORTION))

        raise ComputationError(f"Unsupported aggregation method: {method}", context={"method": str(method)})

    def _exclude_outliers(
        self, force: JTBDForce, items: List[NormalizedResponse]
    ) -> List[NormalizedResponse]:
        if len(items) < self.config.OUTLIER_MIN_SAMPLE:
            return items

        values = np.array([item.intensity for item in items], dtype=float)
        q1, q3 = np.percentile(values, [25, 75])
        spread = self.config.OUTLIER_IQR_MULTIPLIER * (q3 - q1)
        lower, upper = q1 - spread, q3 + spread

        kept = [item for item in items if lower <= item.intensity <= upper]
        removed = len(items) - len(kept)
        if removed:
            logger.info(
                f"Excluded {removed} outlier responses for {force.value} "
                f"outside [{lower:.2f}, {upper:.2f}]"
            )
        return kept

    def _force_confidence(self, items: Sequence[NormalizedResponse]) -> float:
        """Mean effective mapping confidence scaled by a saturating sample-size factor."""
        effective = [
            item.mapping_confidence
            * (self.config.CLASSIFIED_MAPPING_DISCOUNT if item.source == "classified" else 1.0)
            for item in items
        ]
        n = len(items)
        sample_factor = n / (n + self.config.SAMPLE_SATURATION)
        confidence = float(np.mean(effective)) * (0.4 + 0.6 * sample_factor)
        return round(min(max(confidence, 0.0), 1.0), 4)

    def placeholder_strength(self, force: JTBDForce) -> ForceStrength:
        """Neutral strength for a force without any evidence."""
        return ForceStrength(
            force=force,
            strength=NEUTRAL_FORCE_STRENGTH,
            confidence=0.0,
            sample_size=0,
            standard_deviation=0.0,
        )

    def calculate_force_distribution(
        self,
        request: AnalysisRequest,
        normalized: Optional[List[NormalizedResponse]] = None,
    ) -> ForceDistribution:
        """
        Calculate the strength of all five forces for a survey.

        Args:
            request: Analysis request (mappings must already include any classified questions)
            normalized: Pre-computed normalized responses to reuse

        Returns:
            ForceDistribution covering every force

        Raises:
            InsufficientDataError: A force has some but too few responses, or no force has any
        """
        options = request.options
        if normalized is None:
            normalized = self.normalizer.normalize(request.responses, request.question_mappings)

        by_force: Dict[JTBDForce, List[NormalizedResponse]] = defaultdict(list)
        for item in normalized:
            by_force[item.force].append(item)

        forces: Dict[JTBDForce, ForceStrength] = {}
        contributing: Set[int] = set()
        missing: List[JTBDForce] = []

        for force in ALL_FORCES:
            items = by_force.get(force, [])
            if not items:
                missing.append(force)
                forces[force] = self.placeholder_strength(force)
                continue

            strength, indices = self.aggregate(
                force,
                items,
                method=options.aggregation_method,
                minimum_sample_size=options.minimum_sample_size,
                exclude_outliers=options.exclude_outliers,
            )
            forces[force] = strength
            contributing |= indices

        if len(missing) == len(ALL_FORCES):
            raise InsufficientDataError(
                f"No valid responses for any JTBD force in survey {request.survey_id}",
                sample_size=0,
                minimum_sample_size=options.minimum_sample_size,
            )
        if missing:
            logger.warning(
                f"Survey {request.survey_id} has no evidence for "
                f"{', '.join(f.value for f in missing)}; using neutral placeholders"
            )

        return ForceDistribution(
            survey_id=request.survey_id,
            forces=forces,
            total_responses=len(contributing),
            methodology=options.aggregation_method,
        )
