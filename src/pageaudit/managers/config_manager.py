# src/pageaudit/managers/config_manager.py
import json
import logging
import os
from typing import Any, Dict, Optional

from pageaudit.model import AnalyzerConfig, ScoringThresholds
from pageaudit.utils.path_utils import PathUtils

logger = logging.getLogger(__name__)

SEO_API_URL_ENV = "SEO_API_URL"


class ConfigManager:
    """
    A singleton class to manage the application's configuration.
    It loads settings from a file and exposes them through dotted key paths.
    """
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(ConfigManager, cls).__new__(cls)
            cls._instance._initialize()
        return cls._instance

    def _initialize(self):
        """Loads the configuration from the file."""
        self._config: Dict[str, Any] = {}
        self.reset()
        logger.debug("ConfigManager initialized.")

    def get_all(self) -> Dict[str, Any]:
        """Returns the entire current configuration dictionary."""
        return self._config

    def get_nested(self, key_path: str, default: Optional[Any] = None) -> Any:
        """
        Safely retrieves a nested value from the configuration.
        e.g., 'seo_api.url'.
        """
        keys = key_path.split('.')
        value = self._config
        for key in keys:
            if isinstance(value, dict):
                value = value.get(key)
            else:
                return default
        return value if value is not None else default

    def reset(self):
        """Resets the in-memory configuration from the settings.json file."""
        config_path = PathUtils.get_settings_file()
        if not config_path.exists():
            logger.warning("settings.json not found at %s. Using built-in defaults.", config_path)
            self._config = {}
            return
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                self._config = json.load(f)
            logger.debug("Configuration has been (re)loaded from settings.json.")
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Failed to load settings.json: %s", e, exc_info=True)
            self._config = {}

    def build_analyzer_config(self, api_url: Optional[str] = None) -> AnalyzerConfig:
        """
        Builds the explicit AnalyzerConfig handed to the analyzers.

        The scoring endpoint is resolved as: `api_url` argument, then the
        SEO_API_URL environment variable, then 'seo_api.url' from settings.json.
        """
        defaults = AnalyzerConfig()
        url = api_url or os.environ.get(SEO_API_URL_ENV) or self.get_nested("seo_api.url", defaults.seo_api_url)

        thresholds = dict(self.get_nested("scoring", {}))
        thresholds.update(self.get_nested("link_audit", {}))

        return AnalyzerConfig(
            seo_api_url=url,
            # An explicit null in settings.json disables the client-side timeout
            seo_api_timeout=self.get_all().get("seo_api", {}).get("timeout", defaults.seo_api_timeout),
            thresholds=ScoringThresholds(**thresholds),
            grade_thresholds=self.get_nested("grades", defaults.grade_thresholds),
        )


# The global singleton instance that the entire application will use.
config_manager = ConfigManager()
