"""
Pydantic models for JTBD forces analysis input and output.

This module defines the data structures exchanged with the analysis engine:
- Survey responses and question-to-force mappings (input)
- Per-force strengths, distributions and confidence intervals (derived)
- Force balance, recommendations and the final analysis result (output)

Derived models reject out-of-range values instead of clamping them, so an
upstream defect surfaces as a validation failure.
"""

import uuid
from datetime import datetime, timezone
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from jtbd_forces.domain.vocabulary import (
    ALL_FORCES,
    AggregationMethod,
    JTBDForce,
    MAX_FORCE_STRENGTH,
    MIN_FORCE_STRENGTH,
)

__all__ = [
    "JTBDForce",
    "AggregationMethod",
    "SurveyResponse",
    "QuestionForceMapping",
    "NormalizedResponse",
    "ForceIntensity",
    "SentimentResult",
    "ForceStrength",
    "ForceDistribution",
    "ConfidenceInterval",
    "OverallConfidence",
    "ForceBalance",
    "ResponseCluster",
    "Recommendation",
    "AnalysisOptions",
    "AnalysisRequest",
    "AnalysisResult",
    "ForceCoverage",
    "ForceCoverageReport",
    "CacheStats",
]

Level = Literal["low", "medium", "high"]
RecommendationCategory = Literal["messaging", "product", "marketing", "sales", "research"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# Input Models


class SurveyResponse(BaseModel):
    """
    One respondent's answer to one survey question.
    """

    question_id: str = Field(..., description="Question the response answers")
    session_id: str = Field(..., description="Groups responses from one respondent")
    value: str = Field(..., description="Free-form answer text or coded choice")
    id: Optional[str] = Field(None, description="Upstream response identifier")
    answered_at: Optional[datetime] = None
    time_spent: Optional[float] = Field(
        None, ge=0.0, description="Seconds spent answering"
    )

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "example": {
                "question_id": "q2-pain",
                "session_id": "session-1",
                "value": "Current solution is too slow and crashes frequently",
                "time_spent": 45,
            }
        },
    }

    @field_validator("value", mode="before")
    def coerce_value(cls, v):
        """Accept numeric Likert codes as text"""
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v


class QuestionForceMapping(BaseModel):
    """
    Associates a survey question with the JTBD force it measures.
    """

    question_id: str
    survey_id: str
    force: JTBDForce
    weight: float = Field(
        default=1.0, gt=0.0, le=2.0, description="Relative influence on the force score"
    )
    confidence: float = Field(
        default=1.0, ge=0.0, le=1.0, description="Reliability of the mapping"
    )
    source: Literal["explicit", "classified"] = Field(
        "explicit", description="Whether the mapping was supplied or auto-classified"
    )
    rationale: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


# Derived Models


class ForceIntensity(BaseModel):
    """
    Intensity of a single response for a given force.
    """

    score: float = Field(..., ge=MIN_FORCE_STRENGTH, le=MAX_FORCE_STRENGTH)
    confidence: float = Field(..., ge=0.0, le=1.0)
    keywords: List[str] = Field(default_factory=list)


class SentimentResult(BaseModel):
    score: float = Field(..., ge=-1.0, le=1.0)
    magnitude: float = Field(..., ge=0.0)
    label: Literal["positive", "neutral", "negative"]


class NormalizedResponse(BaseModel):
    """
    A valid response scored for one of the forces its question maps to.
    """

    response: SurveyResponse
    response_index: int = Field(..., ge=0, description="Position in the request")
    force: JTBDForce
    weight: float = Field(..., gt=0.0, le=2.0)
    mapping_confidence: float = Field(..., ge=0.0, le=1.0)
    source: Literal["explicit", "classified"] = "explicit"
    intensity: float = Field(..., ge=MIN_FORCE_STRENGTH, le=MAX_FORCE_STRENGTH)
    intensity_confidence: float = Field(..., ge=0.0, le=1.0)
    keywords: List[str] = Field(default_factory=list)


class ForceStrength(BaseModel):
    """
    Aggregated strength of one force across the contributing responses.
    """

    force: JTBDForce
    strength: float = Field(..., ge=MIN_FORCE_STRENGTH, le=MAX_FORCE_STRENGTH)
    confidence: float = Field(..., ge=0.0, le=1.0)
    sample_size: int = Field(..., ge=0, description="Valid contributing responses")
    standard_deviation: float = Field(..., ge=0.0)
    created_at: datetime = Field(default_factory=_utcnow)

    @property
    def has_evidence(self) -> bool:
        return self.sample_size > 0


class ForceDistribution(BaseModel):
    """
    One ForceStrength per JTBD force for a survey.
    """

    survey_id: str
    forces: Dict[JTBDForce, ForceStrength]
    total_responses: int = Field(..., ge=0)
    analysis_date: datetime = Field(default_factory=_utcnow)
    methodology: AggregationMethod = AggregationMethod.WEIGHTED_AVERAGE

    @model_validator(mode="after")
    def check_forces(self):
        if set(self.forces.keys()) != set(ALL_FORCES):
            raise ValueError("distribution must contain exactly the five JTBD forces")
        for force, strength in self.forces.items():
            if strength.force != force:
                raise ValueError(f"strength for {strength.force.value} stored under {force.value}")
        total_samples = sum(s.sample_size for s in self.forces.values())
        if total_samples < self.total_responses:
            raise ValueError(
                f"sum of sample sizes ({total_samples}) is below total_responses ({self.total_responses})"
            )
        return self

    def strength_of(self, force: JTBDForce) -> float:
        return self.forces[JTBDForce(force)].strength

    def evidenced(self) -> List[ForceStrength]:
        """Forces backed by at least one response, in canonical order"""
        return [self.forces[f] for f in ALL_FORCES if self.forces[f].has_evidence]


class ConfidenceInterval(BaseModel):
    force: JTBDForce
    lower_bound: float
    upper_bound: float
    confidence_level: float = Field(..., gt=0.0, lt=1.0)
    margin_of_error: float = Field(..., gt=0.0)

    @model_validator(mode="after")
    def check_bounds(self):
        if not self.lower_bound < self.upper_bound:
            raise ValueError("lower_bound must be below upper_bound")
        return self


class OverallConfidence(BaseModel):
    """
    Overall analysis confidence with the factors that produced it.
    """

    confidence: float = Field(..., ge=0.0, le=1.0)
    factors: Dict[str, float] = Field(default_factory=dict)
    recommendations: List[str] = Field(default_factory=list)


class ForceBalance(BaseModel):
    push_forces: List[JTBDForce]
    pull_forces: List[JTBDForce]
    barriers: List[JTBDForce]
    switch_likelihood: float = Field(..., ge=0.0, le=1.0)
    primary_drivers: List[JTBDForce]
    secondary_drivers: List[JTBDForce]
    confidence: float = Field(..., ge=0.0, le=1.0)
    net_force: float = Field(..., description="Motivating minus resisting strength")


class ResponseCluster(BaseModel):
    """
    A group of responses for one force sharing a theme.
    """

    theme: str
    responses: List[str]
    keywords: List[str] = Field(default_factory=list)
    strength: float = Field(..., ge=MIN_FORCE_STRENGTH, le=MAX_FORCE_STRENGTH)
    confidence: float = Field(..., ge=0.0, le=1.0)


class Recommendation(BaseModel):
    """
    Model representing an actionable recommendation derived from the forces.
    """

    id: str
    category: RecommendationCategory
    content: str
    rationale: str
    priority: Level
    impact: Level
    effort: Level
    confidence: float = Field(..., ge=0.0, le=1.0)
    related_forces: List[JTBDForce] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_utcnow)


# Request / Result Models


class AnalysisOptions(BaseModel):
    """
    Options controlling one analysis run.

    Range checks live in the request validator so that every bad option is
    reported through the package's own ValidationError.
    """

    include_confidence_intervals: bool = True
    include_recommendations: bool = True
    minimum_sample_size: int = 30
    confidence_level: float = 0.95
    aggregation_method: AggregationMethod = AggregationMethod.WEIGHTED_AVERAGE
    exclude_outliers: bool = True
    cache_results: bool = True
    include_themes: bool = True
    cache_ttl_seconds: Optional[float] = Field(
        None, description="Cache lifetime; falls back to the configured default"
    )


class AnalysisRequest(BaseModel):
    """
    Request model for a JTBD forces analysis.
    """

    survey_id: str
    responses: List[SurveyResponse]
    question_mappings: List[QuestionForceMapping]
    options: AnalysisOptions = Field(default_factory=AnalysisOptions)
    questions: Dict[str, str] = Field(
        default_factory=dict,
        description="Question texts keyed by question id, used to classify unmapped questions",
    )
    requested_at: datetime = Field(default_factory=_utcnow)

    model_config = {
        "json_schema_extra": {
            "example": {
                "survey_id": "survey-123",
                "responses": [
                    {
                        "question_id": "q2-pain",
                        "session_id": "session-1",
                        "value": "Current system is slow and unreliable",
                    }
                ],
                "question_mappings": [
                    {
                        "question_id": "q2-pain",
                        "survey_id": "survey-123",
                        "force": "pain_of_old",
                        "weight": 1.0,
                        "confidence": 0.9,
                    }
                ],
                "options": {"minimum_sample_size": 1},
            }
        }
    }


class AnalysisResult(BaseModel):
    """
    Top-level output of a JTBD forces analysis. Immutable once created.
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    survey_id: str
    force_distribution: ForceDistribution
    switch_likelihood: float = Field(..., ge=0.0, le=1.0)
    primary_drivers: List[JTBDForce] = Field(default_factory=list)
    secondary_drivers: List[JTBDForce] = Field(default_factory=list)
    barriers: List[JTBDForce] = Field(default_factory=list)
    confidence: float = Field(..., ge=0.0, le=1.0)
    recommendations: List[Recommendation] = Field(default_factory=list)
    confidence_intervals: Dict[JTBDForce, ConfidenceInterval] = Field(default_factory=dict)
    force_themes: Dict[JTBDForce, List[ResponseCluster]] = Field(default_factory=dict)
    overall_confidence: Optional[OverallConfidence] = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    model_config = {"frozen": True}


# Survey design / cache reporting


class ForceCoverage(BaseModel):
    question_count: int = Field(..., ge=0)
    question_ids: List[str] = Field(default_factory=list)
    coverage_quality: Literal["poor", "fair", "good", "excellent"]


class ForceCoverageReport(BaseModel):
    """
    How well a survey's questions cover the five JTBD forces.
    """

    all_forces_covered: bool
    missing_forces: List[JTBDForce]
    force_coverage: Dict[JTBDForce, ForceCoverage]
    balance_score: int = Field(..., ge=0, le=100)
    recommendations: List[str] = Field(default_factory=list)


class CacheStats(BaseModel):
    hits: int = 0
    misses: int = 0
    evictions: int = 0
    expirations: int = 0
    size: int = 0
    in_flight: int = 0
    hit_rate: float = Field(0.0, ge=0.0, le=1.0)
