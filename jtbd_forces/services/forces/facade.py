"""
JTBD Forces Analysis Facade

Orchestrates the forces pipeline (classification, normalization, strength
aggregation, confidence, balance and recommendations) and wraps it in the
analysis cache.
"""

from typing import Any, Dict, List, Mapping, Optional, Union
import asyncio
import hashlib
import json
import logging

from jtbd_forces.config.forces_config import ForcesConfig, get_forces_config
from jtbd_forces.infrastructure.config.settings import Settings, settings as default_settings
from jtbd_forces.schemas import (
    AnalysisOptions,
    AnalysisRequest,
    AnalysisResult,
    ConfidenceInterval,
    ForceCoverageReport,
    NormalizedResponse,
    QuestionForceMapping,
    ResponseCluster,
)
from jtbd_forces.services.forces.balance_analyzer import ForceBalanceAnalyzer
from jtbd_forces.services.forces.cache import CACHE_KEY_PREFIX, AnalysisCache
from jtbd_forces.services.forces.classifier import QuestionForceClassifier
from jtbd_forces.services.forces.clustering import ResponseClusterer
from jtbd_forces.services.forces.confidence import ConfidenceIntervalEstimator
from jtbd_forces.services.forces.normalizer import ResponseNormalizer
from jtbd_forces.services.forces.recommendations import RecommendationEngine
from jtbd_forces.services.forces.strength_calculator import ForceStrengthCalculator
from jtbd_forces.services.forces.validation import ForcesAnalysisValidation
from jtbd_forces.domain.vocabulary import ALL_FORCES, JTBDForce

logger = logging.getLogger(__name__)

MAPPING_KEY_EXCLUDE = {"created_at", "updated_at"}


def build_cache_key(request: AnalysisRequest) -> str:
    """
    Derive the cache key of a request.

    The digest covers every response, every mapping (without timestamps), the
    question texts and the options, so any input change yields a new key.
    """
    payload = {
        "responses": [r.model_dump(mode="json") for r in request.responses],
        "mappings": [
            m.model_dump(mode="json", exclude=MAPPING_KEY_EXCLUDE)
            for m in request.question_mappings
        ],
        "questions": request.questions,
        "options": request.options.model_dump(mode="json"),
    }
    canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    digest = hashlib.sha256(canonical.encode("utf-8")).hexdigest()
    return f"{CACHE_KEY_PREFIX}:{request.survey_id}:{digest}"


class JTBDForcesFacade:
    """
    Facade for JTBD forces analysis that orchestrates the individual components.
    """

    def __init__(
        self,
        cache: Optional[AnalysisCache] = None,
        config: Optional[ForcesConfig] = None,
        settings: Optional[Settings] = None,
    ):
        """
        Initialize the facade.

        Args:
            cache: Result cache; one is built from settings when omitted and caching is enabled
            config: Threshold configuration (defaults to get_forces_config())
            settings: Engine settings (defaults to the global settings instance)
        """
        self.config = config or get_forces_config()
        system_config = (settings or default_settings).get_config()
        self.default_options = AnalysisOptions(
            minimum_sample_size=system_config.analysis.minimum_sample_size,
            confidence_level=system_config.analysis.confidence_level,
            aggregation_method=system_config.analysis.aggregation_method,
            exclude_outliers=system_config.analysis.exclude_outliers,
            cache_ttl_seconds=system_config.cache.ttl_seconds,
        )

        if cache is None and system_config.cache.enabled:
            cache = AnalysisCache(
                default_ttl_seconds=system_config.cache.ttl_seconds,
                max_entries=system_config.cache.max_entries,
            )
        self.cache = cache

        # Initialize pipeline components
        self.validator = ForcesAnalysisValidation()
        self.classifier = QuestionForceClassifier(self.config)
        self.normalizer = ResponseNormalizer()
        self.calculator = ForceStrengthCalculator(self.normalizer, self.config)
        self.estimator = ConfidenceIntervalEstimator(self.config)
        self.balance_analyzer = ForceBalanceAnalyzer(self.config, self.estimator)
        self.clusterer = ResponseClusterer(self.normalizer)
        self.recommendation_engine = RecommendationEngine(self.config)

    def run_analysis(self, request: AnalysisRequest) -> AnalysisResult:
        """
        Run the full forces pipeline synchronously.

        Args:
            request: Analysis request

        Returns:
            A new AnalysisResult

        Raises:
            ValidationError: Malformed request
            InsufficientDataError: Too few responses for a force or none at all
            ComputationError: Aggregation invariant violated
        """
        request = self.validator.validate_request(request)
        options = request.options
        logger.info(
            f"Starting JTBD forces analysis for survey {request.survey_id}: "
            f"{len(request.responses)} responses, {len(request.question_mappings)} mappings"
        )

        # Phase 1: Classify unmapped questions
        mappings = self._with_classified_mappings(request)
        if len(mappings) != len(request.question_mappings):
            request = request.model_copy(update={"question_mappings": mappings})

        # Phase 2: Normalize responses
        normalized = self.normalizer.normalize(request.responses, mappings)

        # Phase 3: Force strengths
        distribution = self.calculator.calculate_force_distribution(request, normalized)

        # Phase 4: Confidence
        overall = self.estimator.calculate_overall_confidence(distribution)
        intervals: Dict[JTBDForce, ConfidenceInterval] = {}
        if options.include_confidence_intervals:
            for strength in distribution.evidenced():
                intervals[strength.force] = self.estimator.estimate(strength, options.confidence_level)

        # Phase 5: Themes
        themes: Dict[JTBDForce, List[ResponseCluster]] = {}
        if options.include_themes:
            themes = self._cluster_themes(normalized)

        # Phase 6: Force balance
        balance = self.balance_analyzer.analyze(distribution)

        result = AnalysisResult(
            survey_id=request.survey_id,
            force_distribution=distribution,
            switch_likelihood=balance.switch_likelihood,
            primary_drivers=balance.primary_drivers,
            secondary_drivers=balance.secondary_drivers,
            barriers=balance.barriers,
            confidence=balance.confidence,
            confidence_intervals=intervals,
            force_themes=themes,
            overall_confidence=overall,
        )

        # Phase 7: Recommendations
        if options.include_recommendations:
            result = result.model_copy(
                update={"recommendations": self.recommendation_engine.generate(result)}
            )

        logger.info(
            f"JTBD forces analysis completed for survey {request.survey_id}: "
            f"switch_likelihood={result.switch_likelihood:.3f}, confidence={result.confidence:.3f}"
        )
        return result

    async def perform_analysis(
        self, request: Union[AnalysisRequest, Mapping[str, Any]]
    ) -> AnalysisResult:
        """
        Run an analysis off the event loop, reusing cached or in-flight results.

        Args:
            request: AnalysisRequest, or a dict validated into one (configured
                default options apply when the dict has none)

        Returns:
            AnalysisResult for the request
        """
        if isinstance(request, Mapping) and "options" not in request:
            request = {**request, "options": self.default_options.model_dump()}
        request = self.validator.parse_request(request)
        self.validator.validate_request(request)

        if not request.options.cache_results or self.cache is None:
            return await self._run_in_executor(request)

        key = build_cache_key(request)
        return await self.cache.get_or_compute(
            key,
            lambda: self._run_in_executor(request),
            ttl_seconds=request.options.cache_ttl_seconds,
        )

    async def _run_in_executor(self, request: AnalysisRequest) -> AnalysisResult:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.run_analysis, request)

    def assess_survey_coverage(
        self, questions: Mapping[str, str], survey_id: str = ""
    ) -> ForceCoverageReport:
        """Check a question set for coverage of all five forces."""
        return self.classifier.validate_force_coverage(questions, survey_id)

    def invalidate_survey(self, survey_id: str) -> int:
        if self.cache is None:
            return 0
        return self.cache.invalidate_survey(survey_id)

    def _with_classified_mappings(self, request: AnalysisRequest) -> List[QuestionForceMapping]:
        mappings = list(request.question_mappings)
        if not request.questions:
            return mappings

        mapped = {m.question_id for m in mappings}
        answered = {r.question_id for r in request.responses}
        for question_id in sorted(answered - mapped):
            text = request.questions.get(question_id)
            if not text:
                continue
            mapping = self.classifier.classify(text, question_id, request.survey_id)
            logger.info(
                f"Classified unmapped question {question_id} as {mapping.force.value} "
                f"(confidence {mapping.confidence:.2f})"
            )
            mappings.append(mapping)
        return mappings

    def _cluster_themes(
        self, normalized: List[NormalizedResponse]
    ) -> Dict[JTBDForce, List[ResponseCluster]]:
        themes: Dict[JTBDForce, List[ResponseCluster]] = {}
        for force in ALL_FORCES:
            texts = [n.response.value for n in normalized if n.force == force]
            if texts:
                themes[force] = self.clusterer.cluster_responses(texts, force)
        return themes
