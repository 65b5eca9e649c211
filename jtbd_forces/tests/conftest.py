"""
PyTest configuration and fixtures.
"""

from typing import Dict, List, Optional

import pytest

from jtbd_forces.domain.vocabulary import ALL_FORCES, JTBDForce
from jtbd_forces.infrastructure.config.settings import Settings
from jtbd_forces.schemas import (
    AnalysisOptions,
    AnalysisRequest,
    AnalysisResult,
    ForceDistribution,
    ForceStrength,
    NormalizedResponse,
    QuestionForceMapping,
    SurveyResponse,
)
from jtbd_forces.services.forces.cache import AnalysisCache
from jtbd_forces.services.forces.facade import JTBDForcesFacade

SURVEY_ID = "survey-123"


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_mapping(
    question_id: str,
    force: JTBDForce,
    weight: float = 1.0,
    confidence: float = 0.9,
    survey_id: str = SURVEY_ID,
) -> QuestionForceMapping:
    return QuestionForceMapping(
        question_id=question_id,
        survey_id=survey_id,
        force=force,
        weight=weight,
        confidence=confidence,
    )


def make_responses(question_id: str, values: List[str]) -> List[SurveyResponse]:
    return [
        SurveyResponse(question_id=question_id, session_id=f"session-{i}", value=value)
        for i, value in enumerate(values)
    ]


def make_contribution(
    intensity: float,
    force: JTBDForce = JTBDForce.PAIN_OF_OLD,
    index: int = 0,
    weight: float = 1.0,
    mapping_confidence: float = 1.0,
    source: str = "explicit",
) -> NormalizedResponse:
    return NormalizedResponse(
        response=SurveyResponse(question_id="q1", session_id=f"session-{index}", value=str(intensity)),
        response_index=index,
        force=force,
        weight=weight,
        mapping_confidence=mapping_confidence,
        source=source,
        intensity=intensity,
        intensity_confidence=0.9,
    )


def make_distribution(
    strengths: Dict[JTBDForce, float],
    sample_size: int = 50,
    confidence: float = 0.8,
    total_responses: Optional[int] = None,
) -> ForceDistribution:
    """Distribution with the given forces evidenced and the rest as neutral placeholders."""
    forces = {}
    for force in ALL_FORCES:
        if force in strengths:
            forces[force] = ForceStrength(
                force=force,
                strength=strengths[force],
                confidence=confidence,
                sample_size=sample_size,
                standard_deviation=0.5,
            )
        else:
            forces[force] = ForceStrength(
                force=force, strength=3.0, confidence=0.0, sample_size=0, standard_deviation=0.0
            )
    return ForceDistribution(
        survey_id=SURVEY_ID,
        forces=forces,
        total_responses=sample_size if total_responses is None else total_responses,
    )


def make_result(
    strengths: Dict[JTBDForce, float],
    switch_likelihood: float = 0.5,
    confidence: float = 0.8,
    primary_drivers: Optional[List[JTBDForce]] = None,
    barriers: Optional[List[JTBDForce]] = None,
    sample_size: int = 50,
) -> AnalysisResult:
    return AnalysisResult(
        survey_id=SURVEY_ID,
        force_distribution=make_distribution(strengths, sample_size=sample_size),
        switch_likelihood=switch_likelihood,
        confidence=confidence,
        primary_drivers=primary_drivers or [],
        barriers=barriers or [],
    )


@pytest.fixture
def fake_clock():
    """Fixture for a manually advanced clock."""
    return FakeClock()


@pytest.fixture
def cache(fake_clock):
    """Fixture for an analysis cache driven by the fake clock."""
    return AnalysisCache(default_ttl_seconds=60.0, max_entries=3, clock=fake_clock)


@pytest.fixture
def sample_result():
    """Fixture for a minimal analysis result."""
    return make_result({JTBDForce.PAIN_OF_OLD: 4.0})


@pytest.fixture
def engine_settings(monkeypatch):
    """Fixture for settings isolated from the process environment and any .env file."""
    for key in (
        "JTBD_CACHE_ENABLED",
        "JTBD_CACHE_TTL_SECONDS",
        "JTBD_CACHE_MAX_ENTRIES",
        "JTBD_MINIMUM_SAMPLE_SIZE",
        "JTBD_CONFIDENCE_LEVEL",
        "JTBD_AGGREGATION_METHOD",
        "JTBD_EXCLUDE_OUTLIERS",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(key, raising=False)
    return Settings(env_file=None)


@pytest.fixture
def facade(engine_settings):
    """Fixture for a facade with its own cache."""
    return JTBDForcesFacade(cache=AnalysisCache(), settings=engine_settings)


@pytest.fixture
def two_response_request():
    """Fixture for the two-response pain/pull survey."""
    return AnalysisRequest(
        survey_id=SURVEY_ID,
        responses=[
            SurveyResponse(
                question_id="q-pain",
                session_id="session-1",
                value="Current system is slow and unreliable",
            ),
            SurveyResponse(
                question_id="q-pull",
                session_id="session-1",
                value="Need faster performance",
            ),
        ],
        question_mappings=[
            make_mapping("q-pain", JTBDForce.PAIN_OF_OLD),
            make_mapping("q-pull", JTBDForce.PULL_OF_NEW),
        ],
        options=AnalysisOptions(minimum_sample_size=1, cache_results=False),
    )
