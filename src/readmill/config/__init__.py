"""Configuration models and the lazily loaded global settings."""

from .config import (
    ClassifierSettings,
    Config,
    ConverterSettings,
    FilterSettings,
    LazyConfig,
    MonitoringConfig,
    OutputSettings,
    find_config_file,
    settings,
)

__all__ = [
    "ClassifierSettings",
    "Config",
    "ConverterSettings",
    "FilterSettings",
    "LazyConfig",
    "MonitoringConfig",
    "OutputSettings",
    "find_config_file",
    "settings",
]
