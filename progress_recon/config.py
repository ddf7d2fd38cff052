"""
Configuration loader for the Progress Reconciliation engine.

Loads settings from progress_recon_config.yaml and provides typed access
to all configuration sections.
"""
import os
from pathlib import Path
from typing import Any, Optional
from functools import lru_cache

import yaml


# Default config ships inside the package
DEFAULT_CONFIG_PATH = Path(__file__).parent / "progress_recon_config.yaml"
CONFIG_ENV_VAR = "PROGRESS_RECON_CONFIG"


class ConfigurationError(Exception):
    """Raised when configuration loading or validation fails."""
    pass


class ProgressConfig:
    """
    Configuration manager for the Progress Reconciliation engine.

    Loads YAML configuration and provides typed access to all sections.
    Use get_config() to obtain the singleton instance.
    """

    def __init__(self, config_path: Optional[Path] = None):
        env_path = os.environ.get(CONFIG_ENV_VAR)
        self._config_path = config_path or (Path(env_path) if env_path else DEFAULT_CONFIG_PATH)
        self._config: dict = {}
        self._load()

    def _load(self) -> None:
        """Load configuration from YAML file."""
        if not self._config_path.exists():
            raise ConfigurationError(f"Config file not found: {self._config_path}")

        try:
            with open(self._config_path, 'r') as f:
                self._config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in config file: {e}")

        if not isinstance(self._config, dict):
            raise ConfigurationError("Config file must contain a YAML mapping")

    def reload(self) -> None:
        """Reload configuration from disk."""
        self._load()
        get_config.cache_clear()

    @property
    def path(self) -> Path:
        return self._config_path

    @property
    def version(self) -> str:
        """Configuration file version."""
        return self._config.get("version", "unknown")

    # =========================================================================
    # Identifiers
    # =========================================================================

    @property
    def identifiers(self) -> dict:
        """Project identifier configuration."""
        return self._config.get("identifiers", {})

    @property
    def code_separators(self) -> tuple[str, ...]:
        """Characters separating a base code from its sub-code."""
        separators = self.identifiers.get("separators", ["-"])
        if not separators or not all(isinstance(s, str) and len(s) == 1 for s in separators):
            raise ConfigurationError("identifiers.separators must be a list of single characters")
        return tuple(separators)

    @property
    def default_separator(self) -> str:
        """Separator used when composing code + sub-code."""
        return self.identifiers.get("default_separator", "-")

    # =========================================================================
    # Zones
    # =========================================================================

    @property
    def unzoned_sentinels(self) -> tuple[str, ...]:
        """Zone values meaning 'not zoned' (compared case-insensitively)."""
        zones = self._config.get("zones", {})
        return tuple(str(z) for z in zones.get("unzoned_sentinels", ["Enabling Division", "0"]))

    # =========================================================================
    # Classification
    # =========================================================================

    @property
    def classification(self) -> dict:
        """Classification thresholds."""
        return self._config.get("classification", {})

    @property
    def status_band_pct(self) -> float:
        """Variance percentage band for the on-track status."""
        return float(self.classification.get("status_band_pct", 5.0))

    def get_health_thresholds(self, tier: str) -> dict:
        """
        Get health tier thresholds.

        Args:
            tier: One of 'excellent', 'good', 'warning'

        Returns:
            Dict with min_progress and max_delayed_share
        """
        defaults = {
            "excellent": {"min_progress": 90.0, "max_delayed_share": 0.0},
            "good": {"min_progress": 70.0, "max_delayed_share": 0.20},
            "warning": {"min_progress": 50.0, "max_delayed_share": 0.40},
        }
        health = self.classification.get("health", {})
        return health.get(tier, defaults.get(tier, {}))

    def get_risk_thresholds(self, level: str) -> dict:
        """
        Get risk level thresholds.

        Args:
            level: One of 'low', 'medium', 'high'

        Returns:
            Dict with max_delayed_share and max_average_delay
        """
        defaults = {
            "low": {"max_delayed_share": 0.0, "max_average_delay": 5.0},
            "medium": {"max_delayed_share": 0.20, "max_average_delay": 15.0},
            "high": {"max_delayed_share": 0.40, "max_average_delay": 30.0},
        }
        risk = self.classification.get("risk", {})
        return risk.get(level, defaults.get(level, {}))

    @property
    def on_schedule_progress(self) -> float:
        """Activity progress at which an activity counts as on schedule."""
        return float(self.classification.get("on_schedule_progress", 80.0))

    # =========================================================================
    # Recommendations
    # =========================================================================

    @property
    def significantly_behind_progress(self) -> float:
        """Actual progress under which a delayed project is significantly behind."""
        recommendations = self._config.get("recommendations", {})
        return float(recommendations.get("significantly_behind_progress", 50.0))

    @property
    def min_schedule_performance(self) -> float:
        """Earned / planned value ratio under which schedule performance is flagged."""
        recommendations = self._config.get("recommendations", {})
        return float(recommendations.get("min_schedule_performance", 0.8))

    # =========================================================================
    # Ingestion
    # =========================================================================

    @property
    def field_aliases(self) -> dict:
        """Field name -> list of accepted column spellings."""
        ingestion = self._config.get("ingestion", {})
        return ingestion.get("field_aliases", {})

    def get_field_aliases(self, field_name: str) -> list[str]:
        """Get column spellings for a field, falling back to the field name."""
        return self.field_aliases.get(field_name, [field_name])

    # =========================================================================
    # Data Quality
    # =========================================================================

    @property
    def suggestion_min_score(self) -> int:
        """Minimum fuzzy score (0-100) to suggest a project for an unmatched code."""
        data_quality = self._config.get("data_quality", {})
        return int(data_quality.get("suggestion_min_score", 80))

    # =========================================================================
    # Write-back
    # =========================================================================

    @property
    def database_url(self) -> str:
        """Database URL for the optional write-back path."""
        write_back = self._config.get("write_back", {})
        return write_back.get("database_url", "sqlite:///./progress_recon.db")

    # =========================================================================
    # UI Configuration
    # =========================================================================

    @property
    def currency_config(self) -> dict:
        """Currency formatting configuration."""
        ui = self._config.get("ui", {})
        return ui.get("currency", {
            "symbol": "AED ",
            "decimal_places": 2,
            "thousands_separator": ","
        })

    # =========================================================================
    # Raw Access
    # =========================================================================

    def get(self, key: str, default: Any = None) -> Any:
        """Get a top-level config value by key."""
        return self._config.get(key, default)

    def __getitem__(self, key: str) -> Any:
        """Dictionary-style access to config."""
        return self._config[key]

    def __contains__(self, key: str) -> bool:
        """Check if key exists in config."""
        return key in self._config


@lru_cache(maxsize=1)
def get_config(config_path: Optional[str] = None) -> ProgressConfig:
    """
    Get the singleton configuration instance.

    Args:
        config_path: Optional path to config file. Only used on first call.

    Returns:
        ProgressConfig singleton instance
    """
    path = Path(config_path) if config_path else None
    return ProgressConfig(path)


def reload_config() -> ProgressConfig:
    """Reload configuration from disk and return new instance."""
    get_config.cache_clear()
    return get_config()
