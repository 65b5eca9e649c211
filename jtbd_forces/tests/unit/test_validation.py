"""
Unit tests for ForcesAnalysisValidation
"""

import pytest

from jtbd_forces.domain.vocabulary import JTBDForce
from jtbd_forces.schemas import AnalysisOptions, AnalysisRequest
from jtbd_forces.services.forces.exceptions import ForcesAnalysisError, ValidationError
from jtbd_forces.services.forces.validation import ForcesAnalysisValidation
from jtbd_forces.tests.conftest import SURVEY_ID, make_mapping, make_responses


@pytest.fixture
def validator():
    return ForcesAnalysisValidation()


def build_request(**overrides):
    fields = {
        "survey_id": SURVEY_ID,
        "responses": make_responses("q1", ["4"]),
        "question_mappings": [make_mapping("q1", JTBDForce.PAIN_OF_OLD)],
        "options": AnalysisOptions(minimum_sample_size=1),
    }
    fields.update(overrides)
    return AnalysisRequest(**fields)


def test_valid_request_passes(validator):
    request = build_request()
    assert validator.validate_request(request) is request
    assert validator.collect_errors(request) == []


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"survey_id": "  "}, "survey_id must not be empty"),
        ({"responses": []}, "at least one response"),
        ({"question_mappings": []}, "at least one question mapping"),
        (
            {"question_mappings": [make_mapping("q1", JTBDForce.PAIN_OF_OLD, survey_id="other")]},
            "belongs to survey other",
        ),
        ({"options": AnalysisOptions(minimum_sample_size=0)}, "minimum_sample_size"),
        ({"options": AnalysisOptions(confidence_level=1.0)}, "confidence_level"),
        ({"options": AnalysisOptions(cache_ttl_seconds=0)}, "cache_ttl_seconds"),
    ],
)
def test_invalid_requests(validator, overrides, message):
    with pytest.raises(ValidationError, match=message):
        validator.validate_request(build_request(**overrides))


def test_all_problems_are_reported(validator):
    request = build_request(responses=[], options=AnalysisOptions(minimum_sample_size=0))
    errors = validator.collect_errors(request)
    assert len(errors) == 2


def test_parse_request_accepts_dict(validator):
    request = validator.parse_request(
        {
            "survey_id": SURVEY_ID,
            "responses": [{"question_id": "q1", "session_id": "s1", "value": 4}],
            "question_mappings": [
                {"question_id": "q1", "survey_id": SURVEY_ID, "force": "pain_of_old"}
            ],
            "options": {"aggregation_method": "median"},
        }
    )

    assert isinstance(request, AnalysisRequest)
    assert request.responses[0].value == "4"
    assert request.question_mappings[0].force == JTBDForce.PAIN_OF_OLD
    assert request.options.aggregation_method == "median"


def test_parse_request_passes_models_through(validator):
    request = build_request()
    assert validator.parse_request(request) is request


@pytest.mark.parametrize(
    "payload",
    [
        {"survey_id": SURVEY_ID, "responses": [], "question_mappings": [
            {"question_id": "q1", "survey_id": SURVEY_ID, "force": "curiosity"}
        ]},
        {"survey_id": SURVEY_ID, "responses": [], "question_mappings": [
            {"question_id": "q1", "survey_id": SURVEY_ID, "force": "pain_of_old", "weight": 3.0}
        ]},
        {"survey_id": SURVEY_ID},
    ],
)
def test_parse_request_wraps_schema_errors(validator, payload):
    with pytest.raises(ValidationError) as exc_info:
        validator.parse_request(payload)
    assert isinstance(exc_info.value, ForcesAnalysisError)
