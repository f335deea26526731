"""Ambient services: logging and settings."""
from .logging_config import LoggingConfigurator, LoggingOptions
from .settings_manager import SettingsManager, StepSettings

__all__ = [
    "LoggingConfigurator",
    "LoggingOptions",
    "SettingsManager",
    "StepSettings",
]
