"""Engine settings and configuration"""

import os
import logging
from typing import Optional

from dotenv import dotenv_values

from jtbd_forces.infrastructure.data.config import (
    SystemConfig,
    AnalysisDefaultsConfig,
    CacheConfig,
)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class Settings:
    """Manages engine settings and configuration"""

    def __init__(self, env_file: Optional[str] = ".env"):
        self.logger = logging.getLogger(__name__)
        self._config: Optional[SystemConfig] = None
        self._env_file = env_file
        self._env_vars = {}

        # Cache settings
        self.cache_enabled = os.getenv("JTBD_CACHE_ENABLED", "true").lower() in ("true", "1", "yes", "on")
        self.cache_ttl_seconds = float(os.getenv("JTBD_CACHE_TTL_SECONDS", "3600"))
        self.cache_max_entries = int(os.getenv("JTBD_CACHE_MAX_ENTRIES", "500"))

        # Logging
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()

    def load_config(self) -> SystemConfig:
        """Load system configuration"""
        try:
            self._load_env_vars()

            self._config = SystemConfig(
                analysis=self._create_analysis_config(),
                cache=self._create_cache_config(),
                debug_mode=self._get_bool("DEBUG_MODE", False),
                log_level=self._get_str("LOG_LEVEL", "INFO").upper(),
            )

            return self._config

        except Exception as e:
            error_msg = f"Error loading config: {str(e)}"
            self.logger.error(error_msg)
            raise ValueError(error_msg)

    def get_config(self) -> SystemConfig:
        """Get current configuration"""
        if not self._config:
            return self.load_config()
        return self._config

    def _load_env_vars(self):
        """Load environment variables"""
        self._env_vars = {}
        if self._env_file and os.path.exists(self._env_file):
            self._env_vars.update(
                {k: v for k, v in dotenv_values(self._env_file).items() if v is not None}
            )

        # Override with actual environment variables
        self._env_vars.update(os.environ)

    def _get_str(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Get string value from environment"""
        return self._env_vars.get(key, default)

    def _get_int(self, key: str, default: Optional[int] = None) -> Optional[int]:
        """Get integer value from environment"""
        value = self._get_str(key)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            return default

    def _get_float(self, key: str, default: Optional[float] = None) -> Optional[float]:
        """Get float value from environment"""
        value = self._get_str(key)
        if value is None:
            return default
        try:
            return float(value)
        except ValueError:
            return default

    def _get_bool(self, key: str, default: Optional[bool] = None) -> Optional[bool]:
        """Get boolean value from environment"""
        value = self._get_str(key)
        if value is None:
            return default
        return value.lower() in ("true", "1", "yes", "on")

    def _create_analysis_config(self) -> AnalysisDefaultsConfig:
        """Create analysis defaults configuration"""
        return AnalysisDefaultsConfig(
            minimum_sample_size=self._get_int("JTBD_MINIMUM_SAMPLE_SIZE", 30),
            confidence_level=self._get_float("JTBD_CONFIDENCE_LEVEL", 0.95),
            aggregation_method=self._get_str("JTBD_AGGREGATION_METHOD", "weighted_average"),
            exclude_outliers=self._get_bool("JTBD_EXCLUDE_OUTLIERS", True),
        )

    def _create_cache_config(self) -> CacheConfig:
        """Create cache configuration"""
        return CacheConfig(
            enabled=self._get_bool("JTBD_CACHE_ENABLED", self.cache_enabled),
            ttl_seconds=self._get_float("JTBD_CACHE_TTL_SECONDS", self.cache_ttl_seconds),
            max_entries=self._get_int("JTBD_CACHE_MAX_ENTRIES", self.cache_max_entries),
        )


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging for applications embedding the engine."""
    resolved = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(level=getattr(logging, resolved, logging.INFO), format=LOG_FORMAT)


# Global instance
settings = Settings()
