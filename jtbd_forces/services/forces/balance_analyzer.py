"""
Force balance analysis.

Combines the five force strengths into push, pull and barrier groups, a
switch likelihood and ranked drivers.
"""

import logging
from typing import List, Optional

import numpy as np

from jtbd_forces.config.forces_config import DEFAULT_FORCES_CONFIG, ForcesConfig
from jtbd_forces.schemas import ForceBalance, ForceDistribution
from jtbd_forces.services.forces.confidence import ConfidenceIntervalEstimator
from jtbd_forces.domain.vocabulary import (
    BARRIER_FORCES,
    FORCE_GROUPS,
    ForceGroup,
    MAX_FORCE_STRENGTH,
    MIN_FORCE_STRENGTH,
    NEUTRAL_FORCE_STRENGTH,
    PULL_FORCES,
    PUSH_FORCES,
    rank_forces,
)

logger = logging.getLogger(__name__)


class ForceBalanceAnalyzer:
    """
    Analyzer for the balance between motivating and resisting forces.
    """

    def __init__(
        self,
        config: Optional[ForcesConfig] = None,
        estimator: Optional[ConfidenceIntervalEstimator] = None,
    ):
        """
        Initialize the force balance analyzer.

        Args:
            config: Threshold configuration (defaults to DEFAULT_FORCES_CONFIG)
            estimator: Estimator used for the overall-confidence baseline
        """
        self.config = config or DEFAULT_FORCES_CONFIG
        self.estimator = estimator or ConfidenceIntervalEstimator(self.config)

    def _group_strength(self, distribution: ForceDistribution, forces) -> float:
        """Mean strength of the evidenced forces in a group; neutral when none have evidence."""
        values = [
            distribution.forces[f].strength for f in forces if distribution.forces[f].has_evidence
        ]
        return float(np.mean(values)) if values else NEUTRAL_FORCE_STRENGTH

    def analyze(self, distribution: ForceDistribution) -> ForceBalance:
        """
        Analyze the force balance of a distribution.

        Args:
            distribution: Force distribution to analyze

        Returns:
            ForceBalance with switch likelihood, drivers, barriers and confidence
        """
        evidenced = {s.force: s.strength for s in distribution.evidenced()}

        push = self._group_strength(distribution, PUSH_FORCES)
        pull = self._group_strength(distribution, PULL_FORCES)
        resisting = self._group_strength(distribution, BARRIER_FORCES)
        motivating = (push + pull) / 2.0
        net_force = motivating - resisting

        span = MAX_FORCE_STRENGTH - MIN_FORCE_STRENGTH
        switch_likelihood = (net_force + span) / (2 * span)
        switch_likelihood = min(max(switch_likelihood, 0.0), 1.0)

        barriers = [
            force
            for force in rank_forces(evidenced)
            if FORCE_GROUPS[force] is ForceGroup.BARRIER
            and evidenced[force] > self.config.BARRIER_THRESHOLD
        ]

        primary_drivers = [
            force
            for force in rank_forces(evidenced)
            if evidenced[force] > self.config.PRIMARY_DRIVER_THRESHOLD
        ]
        secondary_drivers = [
            force
            for force in rank_forces(evidenced)
            if FORCE_GROUPS[force] in (ForceGroup.PUSH, ForceGroup.PULL)
            and force not in primary_drivers
        ]

        confidence = self._balance_confidence(distribution, list(evidenced.values()))

        logger.info(
            f"Force balance for {distribution.survey_id}: motivating={motivating:.2f}, "
            f"resisting={resisting:.2f}, switch_likelihood={switch_likelihood:.3f}"
        )

        return ForceBalance(
            push_forces=list(PUSH_FORCES),
            pull_forces=list(PULL_FORCES),
            barriers=barriers,
            switch_likelihood=round(switch_likelihood, 4),
            primary_drivers=primary_drivers,
            secondary_drivers=secondary_drivers,
            confidence=confidence,
            net_force=round(net_force, 4),
        )

    def _balance_confidence(self, distribution: ForceDistribution, strengths: List[float]) -> float:
        """Overall confidence reduced when the forces are not clearly separated."""
        overall = self.estimator.calculate_overall_confidence(distribution).confidence
        spread = (max(strengths) - min(strengths)) if strengths else 0.0
        separation = min(1.0, spread / self.config.SEPARATION_SCALE)
        return round(overall * (0.5 + 0.5 * separation), 4)
