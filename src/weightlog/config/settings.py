"""Application settings and configuration management."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from weightlog.tracking.models import WeightUnit


def _default_config_dir() -> Path:
    """Return the default configuration directory."""
    return Path.home() / ".weightlog"


def _default_db_path() -> Path:
    """Return the default database path."""
    return _default_config_dir() / "weightlog.db"


def default_config_path() -> Path:
    """Return the default config.yaml location."""
    return _default_config_dir() / "config.yaml"


@dataclass
class DatabaseConfig:
    """Database configuration."""

    path: Path = field(default_factory=_default_db_path)


@dataclass
class AnalyticsConfig:
    """Trend and projection configuration.

    The ±0.1 kg stable tolerance is fixed and deliberately not listed here.
    """

    regression_window_days: int = 30
    projection_horizon_days: int = 30
    max_goal_horizon_days: int = 365


@dataclass
class DefaultsConfig:
    """Default values for various operations."""

    unit: WeightUnit = WeightUnit.KG
    history_days: int = 30


@dataclass
class Settings:
    """Main application settings."""

    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    analytics: AnalyticsConfig = field(default_factory=AnalyticsConfig)
    defaults: DefaultsConfig = field(default_factory=DefaultsConfig)

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "Settings":
        """Load settings from YAML file or return defaults.

        Args:
            config_path: Path to config.yaml. If None, uses ~/.weightlog/config.yaml

        Returns:
            Settings instance
        """
        if config_path is None:
            config_path = default_config_path()

        if not config_path.exists():
            return cls()

        with open(config_path) as f:
            data = yaml.safe_load(f) or {}

        settings = cls()

        if "database" in data:
            db_data = data["database"]
            if "path" in db_data:
                settings.database.path = Path(db_data["path"]).expanduser()

        if "analytics" in data:
            an_data = data["analytics"]
            for key in (
                "regression_window_days",
                "projection_horizon_days",
                "max_goal_horizon_days",
            ):
                if key in an_data:
                    value = int(an_data[key])
                    if value <= 0:
                        raise ValueError(f"analytics.{key} must be positive, got {value}")
                    setattr(settings.analytics, key, value)

        if "defaults" in data:
            def_data = data["defaults"]
            if "unit" in def_data:
                settings.defaults.unit = WeightUnit(def_data["unit"])
            if "history_days" in def_data:
                history_days = int(def_data["history_days"])
                if history_days <= 0:
                    raise ValueError(f"defaults.history_days must be positive, got {history_days}")
                settings.defaults.history_days = history_days

        return settings

    def save(self, config_path: Optional[Path] = None) -> None:
        """Save current settings to YAML file.

        Args:
            config_path: Path to save config.yaml. If None, uses ~/.weightlog/config.yaml
        """
        if config_path is None:
            config_path = default_config_path()

        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

    def to_dict(self) -> dict:
        """Plain dict in the config.yaml layout."""
        return {
            "database": {
                "path": str(self.database.path),
            },
            "analytics": {
                "regression_window_days": self.analytics.regression_window_days,
                "projection_horizon_days": self.analytics.projection_horizon_days,
                "max_goal_horizon_days": self.analytics.max_goal_horizon_days,
            },
            "defaults": {
                "unit": self.defaults.unit.value,
                "history_days": self.defaults.history_days,
            },
        }


# Global settings instance (lazy loaded)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance, loading from disk if needed."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings


def reload_settings(config_path: Optional[Path] = None) -> Settings:
    """Force reload settings from disk."""
    global _settings
    _settings = Settings.load(config_path)
    return _settings
