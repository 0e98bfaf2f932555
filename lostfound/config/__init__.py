"""Configuration management for the matching service."""

from .environment import EnvironmentConfig, load_environment_config
from .exceptions import ConfigurationError
from .loader import load_config, parse_app_config
from .models import (
    AppConfig,
    CampusMatchingConfig,
    DispatchConfig,
    EmailConfig,
    LogFormat,
    LoggingConfig,
    LogLevel,
    MatchingConfig,
    ScoringWeights,
)

__all__ = [
    # Loader functions
    "load_config",
    "parse_app_config",
    "load_environment_config",
    # Configuration models
    "AppConfig",
    "MatchingConfig",
    "CampusMatchingConfig",
    "ScoringWeights",
    "EmailConfig",
    "LoggingConfig",
    "DispatchConfig",
    "EnvironmentConfig",
    # Enums
    "LogLevel",
    "LogFormat",
    # Exceptions
    "ConfigurationError",
]
