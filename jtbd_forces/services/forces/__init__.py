"""
JTBD forces analysis package.

Turns survey responses into a quantitative model of the five JTBD forces:
- QuestionForceClassifier maps unmapped question text onto a force
- ResponseNormalizer scores each response's intensity for its forces
- ForceStrengthCalculator aggregates intensities into per-force strengths
- ConfidenceIntervalEstimator bounds each strength
- ForceBalanceAnalyzer derives switch likelihood, drivers and barriers
- RecommendationEngine emits prioritised, rule-based recommendations
- AnalysisCache stores results and coalesces identical concurrent requests

JTBDForcesFacade wires the components into a single pipeline.
"""
from .exceptions import (
    ComputationError,
    ForcesAnalysisError,
    InsufficientDataError,
    ValidationError,
)
from jtbd_forces.domain.vocabulary import AggregationMethod, JTBDForce
from .classifier import QuestionForceClassifier
from .normalizer import ResponseNormalizer
from .strength_calculator import ForceStrengthCalculator
from .confidence import ConfidenceIntervalEstimator
from .balance_analyzer import ForceBalanceAnalyzer
from .recommendations import RecommendationEngine
from .clustering import ResponseClusterer
from .cache import AnalysisCache
from .validation import ForcesAnalysisValidation
from .facade import JTBDForcesFacade, build_cache_key

__all__ = [
    "ComputationError",
    "ForcesAnalysisError",
    "InsufficientDataError",
    "ValidationError",
    "AggregationMethod",
    "JTBDForce",
    "QuestionForceClassifier",
    "ResponseNormalizer",
    "ForceStrengthCalculator",
    "ConfidenceIntervalEstimator",
    "ForceBalanceAnalyzer",
    "RecommendationEngine",
    "ResponseClusterer",
    "AnalysisCache",
    "ForcesAnalysisValidation",
    "JTBDForcesFacade",
    "build_cache_key",
]
