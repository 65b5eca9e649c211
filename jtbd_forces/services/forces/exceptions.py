from typing import Any, Dict, Optional


class ForcesAnalysisError(Exception):
    """Base exception for JTBD forces analysis."""
    pass


class ValidationError(ForcesAnalysisError):
    """Exception for malformed analysis input or options."""
    pass


class InsufficientDataError(ForcesAnalysisError):
    """Exception for a force with too few valid responses to produce a strength."""

    def __init__(
        self,
        message: str,
        force: Optional[str] = None,
        sample_size: int = 0,
        minimum_sample_size: int = 1,
    ):
        super().__init__(message)
        self.force = force
        self.sample_size = sample_size
        self.minimum_sample_size = minimum_sample_size


class ComputationError(ForcesAnalysisError):
    """Exception for an internal invariant violation during aggregation."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
