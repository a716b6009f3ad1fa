"""Configuration management."""

from weightlog.config.settings import (
    Settings,
    default_config_path,
    get_settings,
    reload_settings,
)

__all__ = ["Settings", "default_config_path", "get_settings", "reload_settings"]
