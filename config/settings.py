"""
Configuration management for the campaign performance dashboard.
Handles the data source location and display settings.
"""

import logging
import os
import streamlit as st
from typing import Optional
from dataclasses import dataclass
from dotenv import load_dotenv

from models.data_models import RegionMetric

logger = logging.getLogger(__name__)

# Pick up a local .env file before reading the environment
load_dotenv()


@dataclass
class AppConfig:
    """Application configuration settings."""
    data_source: str = "sample_data/marketing_data.json"
    cache_ttl_minutes: int = 15
    request_timeout_seconds: float = 10.0
    default_region_metric: str = RegionMetric.REVENUE.value
    top_regions_limit: int = 7


class ConfigManager:
    """Manages application configuration and settings."""

    def __init__(self):
        self._config: Optional[AppConfig] = None

    def load_config(self) -> AppConfig:
        """Load configuration from Streamlit secrets and environment."""
        if self._config is not None:
            return self._config

        defaults = AppConfig()
        self._config = AppConfig(
            data_source=self._get_setting("MARKETING_DATA_SOURCE", defaults.data_source),
            cache_ttl_minutes=self._get_int_setting("CACHE_TTL_MINUTES", defaults.cache_ttl_minutes),
            request_timeout_seconds=self._get_float_setting(
                "REQUEST_TIMEOUT_SECONDS", defaults.request_timeout_seconds
            ),
            default_region_metric=self._get_region_metric(
                "DEFAULT_REGION_METRIC", defaults.default_region_metric
            ),
            top_regions_limit=self._get_int_setting("TOP_REGIONS_LIMIT", defaults.top_regions_limit),
        )

        return self._config

    def reset(self):
        """Forget the loaded configuration so the next load re-reads settings."""
        self._config = None

    def _get_secret_or_env(self, key: str) -> Optional[str]:
        """Get value from Streamlit secrets or environment variables."""
        # Try Streamlit secrets first
        try:
            if hasattr(st, 'secrets') and key in st.secrets:
                return st.secrets[key]
        except Exception:
            # No secrets.toml present
            pass

        # Fall back to environment variables
        return os.getenv(key)

    def _get_setting(self, key: str, default: str) -> str:
        """Get string setting with default value."""
        value = self._get_secret_or_env(key)
        return value if value is not None else default

    def _get_int_setting(self, key: str, default: int) -> int:
        """Get integer setting with default value."""
        value = self._get_secret_or_env(key)
        if value is not None:
            try:
                return int(value)
            except ValueError:
                logger.warning(f"Invalid integer for {key}: {value!r}, using {default}")
        return default

    def _get_float_setting(self, key: str, default: float) -> float:
        value = self._get_secret_or_env(key)
        if value is not None:
            try:
                return float(value)
            except ValueError:
                logger.warning(f"Invalid number for {key}: {value!r}, using {default}")
        return default

    def _get_region_metric(self, key: str, default: str) -> str:
        value = self._get_setting(key, default)
        try:
            return RegionMetric.parse(value).value
        except ValueError:
            logger.warning(f"Unknown region metric for {key}: {value!r}, using {default}")
            return default

    def get_data_source(self) -> str:
        """Get the configured dataset location."""
        return self.load_config().data_source


# Global configuration manager instance
config_manager = ConfigManager()
