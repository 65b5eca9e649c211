"""
Forces Analysis Validation Module

Validates analysis requests before any processing happens.
"""

from typing import Any, Dict, List, Mapping, Union
import logging

from pydantic import ValidationError as PydanticValidationError

from jtbd_forces.schemas import AnalysisRequest
from jtbd_forces.services.forces.exceptions import ValidationError

logger = logging.getLogger(__name__)


class ForcesAnalysisValidation:
    """
    Validation utilities for JTBD forces analysis requests.
    """

    def __init__(self):
        self.validation_rules = self._initialize_validation_rules()

    def _initialize_validation_rules(self) -> Dict[str, Any]:
        """Initialize validation rules for analysis requests."""
        return {
            "min_sample_size": 1,
            "min_confidence_level": 0.0,
            "max_confidence_level": 1.0,
            "max_weight": 2.0,
        }

    def parse_request(self, payload: Union[AnalysisRequest, Mapping[str, Any]]) -> AnalysisRequest:
        """
        Coerce a payload into an AnalysisRequest.

        Raises:
            ValidationError: The payload does not match the request schema
        """
        if isinstance(payload, AnalysisRequest):
            return payload
        try:
            return AnalysisRequest.model_validate(payload)
        except PydanticValidationError as e:
            logger.warning(f"Rejected malformed analysis request: {e.error_count()} errors")
            raise ValidationError(f"Invalid analysis request: {e}") from e

    def collect_errors(self, request: AnalysisRequest) -> List[str]:
        """Return every problem found in a request (empty when valid)."""
        rules = self.validation_rules
        errors = []

        if not request.survey_id or not request.survey_id.strip():
            errors.append("survey_id must not be empty")
        if not request.responses:
            errors.append("at least one response is required")
        if not request.question_mappings:
            errors.append("at least one question mapping is required")

        for mapping in request.question_mappings:
            if mapping.survey_id != request.survey_id:
                errors.append(
                    f"mapping for question {mapping.question_id} belongs to survey "
                    f"{mapping.survey_id}, not {request.survey_id}"
                )
            if not 0.0 < mapping.weight <= rules["max_weight"]:
                errors.append(f"mapping weight for {mapping.question_id} must be in (0, 2]")
            if not 0.0 <= mapping.confidence <= 1.0:
                errors.append(f"mapping confidence for {mapping.question_id} must be in [0, 1]")

        options = request.options
        if options.minimum_sample_size < rules["min_sample_size"]:
            errors.append("minimum_sample_size must be at least 1")
        if not rules["min_confidence_level"] < options.confidence_level < rules["max_confidence_level"]:
            errors.append("confidence_level must be between 0 and 1 (exclusive)")
        if options.cache_ttl_seconds is not None and options.cache_ttl_seconds <= 0:
            errors.append("cache_ttl_seconds must be positive")

        return errors

    def validate_request(self, request: AnalysisRequest) -> AnalysisRequest:
        """
        Validate an analysis request.

        Args:
            request: Request to validate

        Returns:
            The same request when valid

        Raises:
            ValidationError: Listing every problem found
        """
        errors = self.collect_errors(request)
        if errors:
            logger.warning(f"Analysis request for survey {request.survey_id!r} failed validation: {errors}")
            raise ValidationError("; ".join(errors))
        return request
