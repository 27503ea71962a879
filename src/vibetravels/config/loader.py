"""YAML configuration loader for VibeTravels."""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from .environment import (
    find_environment_references,
    is_sensitive_var,
    substitute_environment_variables,
)
from .models import ENVIRONMENT_FIELDS, AppConfig, GenerationConfig, ServiceConfig

logger = logging.getLogger(__name__)

# Environment variable -> GenerationConfig field
GENERATION_ENVIRONMENT_FIELDS = {
    "USE_MOCK_AI": "use_mock_ai",
    "PLAN_GENERATION_LIMIT": "plan_limit",
    "PLAN_GENERATION_WINDOW": "plan_window",
}


def load_app_config(
    file_path: Optional[Union[str, Path]] = None,
    environ: Optional[Mapping[str, str]] = None,
    env_strict: bool = False,
) -> AppConfig:
    """Load application configuration from YAML and the environment.

    Values come from, in increasing precedence: model defaults, the YAML file
    (after ``${VAR}`` substitution), then ``OPENROUTER_*`` / generation
    environment variables.

    Args:
        file_path: Optional path to a YAML file with ``openrouter`` and
            ``generation`` sections
        environ: Mapping to read variables from (defaults to ``os.environ``)
        env_strict: Whether environment variable substitution is strict

    Returns:
        Validated AppConfig object

    Raises:
        FileNotFoundError: If the file doesn't exist
        yaml.YAMLError: If the YAML is invalid
        pydantic.ValidationError: If the configuration doesn't match the schema
        EnvironmentSubstitutionError: If environment variable substitution fails
    """
    environ = os.environ if environ is None else environ
    data: Dict[str, Any] = {}

    if file_path is not None:
        data = _read_yaml(Path(file_path))
        referenced = find_environment_references(data)
        if referenced:
            logger.debug(
                "Configuration references environment variables: "
                + ", ".join(
                    f"{name} (sensitive)" if is_sensitive_var(name) else name
                    for name in sorted(set(referenced))
                )
            )
        data = substitute_environment_variables(data, strict=env_strict, environ=environ)

    openrouter = dict(data.get("openrouter") or {})
    # Tuning variables alone do not enable the adapter; a key or a YAML section does
    has_openrouter = bool(openrouter) or environ.get("OPENROUTER_API_KEY") not in (None, "")
    for var, field in ENVIRONMENT_FIELDS.items():
        if environ.get(var) not in (None, ""):
            openrouter[field] = environ[var]
    if not has_openrouter and openrouter:
        logger.debug(
            "Ignoring OPENROUTER_* settings without OPENROUTER_API_KEY: "
            + ", ".join(sorted(openrouter))
        )

    generation = dict(data.get("generation") or {})
    for var, field in GENERATION_ENVIRONMENT_FIELDS.items():
        if environ.get(var) not in (None, ""):
            generation[field] = environ[var]

    config = AppConfig(
        openrouter=ServiceConfig(**openrouter) if has_openrouter else None,
        generation=GenerationConfig(**generation),
    )

    if config.openrouter is not None:
        logger.debug(f"Loaded OpenRouter configuration: {config.openrouter.safe_dump()}")
    return config


def _read_yaml(path: Path) -> Dict[str, Any]:
    """Read a YAML mapping from disk."""
    if not path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {path}. "
            f"Suggestion: Check the path or create the file"
        )

    if path.suffix.lower() not in {".yaml", ".yml"}:
        raise ValueError(
            f"Invalid file extension: {path.suffix}. "
            f"Suggestion: Use .yaml or .yml extension for configuration files."
        )

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(
            f"Configuration file {path} must contain a mapping, "
            f"got {type(data).__name__}"
        )
    return data

