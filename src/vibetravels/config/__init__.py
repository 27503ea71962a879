"""Configuration management for VibeTravels."""

from .environment import EnvironmentSubstitutionError, substitute_environment_variables
from .loader import load_app_config
from .models import DEFAULT_BASE_URL, AppConfig, GenerationConfig, ServiceConfig

__all__ = [
    "AppConfig",
    "DEFAULT_BASE_URL",
    "EnvironmentSubstitutionError",
    "GenerationConfig",
    "ServiceConfig",
    "load_app_config",
    "substitute_environment_variables",
]
