"""Configuration package for runtime settings and startup validation."""

from .logging_setup import logging_configure
from .settings import AppSettings, SettingsLoadError, config_load_settings

__all__ = ["AppSettings", "SettingsLoadError", "config_load_settings", "logging_configure"]
