"""
JTBD Forces Configuration
Centralized thresholds for forces analysis to eliminate hardcoded values.
"""

import logging
import os
from dataclasses import dataclass, fields
from typing import Dict

logger = logging.getLogger(__name__)

ENV_PREFIX = "JTBD_"


@dataclass
class ForcesConfig:
    """Thresholds used by the forces analysis pipeline"""

    # Recommendation rules
    HIGH_PAIN_THRESHOLD: float = 4.0
    LOW_BARRIER_THRESHOLD: float = 2.0
    HIGH_ANCHORS_THRESHOLD: float = 4.0
    HIGH_SWITCH_LIKELIHOOD: float = 0.6
    LOW_CONFIDENCE_THRESHOLD: float = 0.5
    SMALL_SAMPLE_THRESHOLD: int = 30

    # Force balance
    BARRIER_THRESHOLD: float = 2.0
    PRIMARY_DRIVER_THRESHOLD: float = 3.0
    SEPARATION_SCALE: float = 2.0

    # Aggregation
    TRIM_PROPORTION: float = 0.1
    OUTLIER_IQR_MULTIPLIER: float = 1.5
    OUTLIER_MIN_SAMPLE: int = 4
    CLASSIFIED_MAPPING_DISCOUNT: float = 0.7
    SAMPLE_SATURATION: float = 10.0

    # Confidence intervals
    SMALL_SAMPLE_INFLATION: float = 0.25
    MIN_STANDARD_DEVIATION: float = 0.1

    # Question classification
    CLASSIFIER_MIN_DENSITY: float = 0.1
    CLASSIFIER_SATURATION: float = 4.0
    CLASSIFIER_MAX_CONFIDENCE: float = 0.95

    # Survey design
    MIN_SURVEY_QUESTIONS: int = 10
    MAX_SURVEY_QUESTIONS: int = 25
    MIN_BALANCE_SCORE: int = 70

    def __post_init__(self):
        if not 0.0 <= self.TRIM_PROPORTION < 0.5:
            raise ValueError("TRIM_PROPORTION must be in [0, 0.5)")
        if not 0.0 < self.CLASSIFIED_MAPPING_DISCOUNT <= 1.0:
            raise ValueError("CLASSIFIED_MAPPING_DISCOUNT must be in (0, 1]")
        if self.SEPARATION_SCALE <= 0:
            raise ValueError("SEPARATION_SCALE must be positive")
        if self.SAMPLE_SATURATION <= 0:
            raise ValueError("SAMPLE_SATURATION must be positive")
        if self.MIN_STANDARD_DEVIATION <= 0:
            raise ValueError("MIN_STANDARD_DEVIATION must be positive")

    def as_dict(self) -> Dict[str, float]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


# Environment-based configuration
def get_forces_config() -> ForcesConfig:
    """Get forces configuration, applying JTBD_* environment overrides"""
    overrides = {}
    for field in fields(ForcesConfig):
        raw = os.getenv(f"{ENV_PREFIX}{field.name}")
        if raw is None:
            continue
        try:
            overrides[field.name] = int(raw) if field.type in (int, "int") else float(raw)
        except ValueError:
            logger.warning(f"Ignoring invalid value for {ENV_PREFIX}{field.name}: {raw!r}")

    if overrides:
        logger.info(f"Applying forces config overrides: {sorted(overrides)}")
    return ForcesConfig(**overrides)


DEFAULT_FORCES_CONFIG = ForcesConfig()
