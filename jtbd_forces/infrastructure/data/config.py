from dataclasses import dataclass
import logging

logger = logging.getLogger(__name__)

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
VALID_AGGREGATION_METHODS = ["weighted_average", "median", "mode", "trimmed_mean"]


class ConfigurationError(Exception):
    """Base class for configuration related errors"""
    pass


class AnalysisConfigError(ConfigurationError):
    """Raised when analysis default configuration is invalid"""
    pass


class CacheConfigError(ConfigurationError):
    """Raised when cache configuration is invalid"""
    pass


@dataclass
class AnalysisDefaultsConfig:
    minimum_sample_size: int = 30
    confidence_level: float = 0.95
    aggregation_method: str = "weighted_average"
    exclude_outliers: bool = True

    def __post_init__(self):
        self.validate()

    def validate(self):
        """Validate analysis defaults"""
        if self.minimum_sample_size < 1:
            raise AnalysisConfigError("minimum_sample_size must be at least 1")

        if not (0.0 < self.confidence_level < 1.0):
            raise AnalysisConfigError("confidence_level must be between 0.0 and 1.0 (exclusive)")

        if self.aggregation_method not in VALID_AGGREGATION_METHODS:
            raise AnalysisConfigError(
                f"Unsupported aggregation_method: {self.aggregation_method}. "
                f"Supported methods are: {', '.join(VALID_AGGREGATION_METHODS)}"
            )


@dataclass
class CacheConfig:
    enabled: bool = True
    ttl_seconds: float = 3600.0
    max_entries: int = 500

    def __post_init__(self):
        self.validate()

    def validate(self):
        """Validate cache configuration"""
        if self.ttl_seconds <= 0:
            raise CacheConfigError("ttl_seconds must be positive")

        if self.max_entries <= 0:
            raise CacheConfigError("max_entries must be positive")


@dataclass
class SystemConfig:
    analysis: AnalysisDefaultsConfig
    cache: CacheConfig
    debug_mode: bool = False
    log_level: str = "INFO"

    def __post_init__(self):
        self.validate()

    def validate(self, strict: bool = False):
        """Validate complete system configuration"""
        try:
            self.analysis.validate()
            self.cache.validate()

            if self.log_level not in VALID_LOG_LEVELS:
                raise ConfigurationError(f"Invalid log_level: {self.log_level}")

        except ConfigurationError as e:
            if strict:
                logger.error(f"Configuration validation failed: {str(e)}")
                raise
            else:
                logger.warning(f"Configuration validation issue (non-strict mode): {str(e)}")

