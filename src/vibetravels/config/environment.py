"""Environment variable substitution for VibeTravels configuration files."""

import os
import re
from typing import Any, List, Mapping, Optional, Union

_VARIABLE_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)([:?-].*?)?\}")


class EnvironmentSubstitutionError(Exception):
    """Exception raised when environment variable substitution fails."""

    pass


def substitute_environment_variables(
    value: Any,
    strict: bool = False,
    environ: Optional[Mapping[str, str]] = None,
) -> Any:
    """Substitute environment variables in configuration values.

    Supports the following formats:
    - ${VAR} - Required variable, left untouched if missing (error in strict mode)
    - ${VAR:default} - Optional variable with default value
    - ${VAR:-default} - Optional variable with default (bash-style)
    - ${VAR:?error_message} - Required with custom error message

    Args:
        value: Value to process (can be string, dict, list, or primitive)
        strict: If True, all variables must be defined (no defaults allowed)
        environ: Mapping to read variables from (defaults to ``os.environ``)

    Returns:
        Value with environment variables substituted

    Raises:
        EnvironmentSubstitutionError: If required variables are missing
    """
    environ = os.environ if environ is None else environ

    if isinstance(value, str):
        return _substitute_in_string(value, strict, environ)
    elif isinstance(value, dict):
        return {
            k: substitute_environment_variables(v, strict, environ)
            for k, v in value.items()
        }
    elif isinstance(value, list):
        return [substitute_environment_variables(item, strict, environ) for item in value]
    else:
        return value


def _substitute_in_string(
    text: str, strict: bool, environ: Mapping[str, str]
) -> Union[str, int, float, bool]:
    """Substitute environment variables in a string value."""
    if "${" not in text:
        return text

    def replace_var(match: Any) -> str:
        var_name = match.group(1)
        modifier = match.group(2)

        env_value = environ.get(var_name)
        if env_value is not None:
            return env_value

        if modifier is None:
            if strict:
                raise EnvironmentSubstitutionError(
                    f"Required environment variable '{var_name}' is not set. "
                    f"Suggestion: Set the variable with 'export {var_name}=value'"
                )
            # Leave unchanged so the validation error points at the placeholder
            return str(match.group(0))

        if modifier.startswith(":?"):
            error_msg = modifier[2:] or f"Variable {var_name} is required"
            raise EnvironmentSubstitutionError(
                f"Environment variable substitution failed: {error_msg}. "
                f"Suggestion: Set the variable with 'export {var_name}=value'"
            )

        if modifier.startswith(":"):
            if strict:
                raise EnvironmentSubstitutionError(
                    f"Environment variable '{var_name}' is not set and strict mode "
                    f"is enabled. Suggestion: Set the variable with 'export "
                    f"{var_name}=value'"
                )
            return modifier[2:] if modifier.startswith(":-") else modifier[1:]

        raise EnvironmentSubstitutionError(
            f"Invalid environment variable syntax: {match.group(0)}. "
            "Supported formats: ${VAR}, ${VAR:default}, ${VAR:-default}, "
            "${VAR:?message}"
        )

    result = _VARIABLE_PATTERN.sub(replace_var, text)

    # A value that was a single placeholder gets a typed result
    whole = _VARIABLE_PATTERN.fullmatch(text)
    if whole is not None and result != text:
        return _coerce_type(result)
    return result


def _coerce_type(value: str) -> Union[str, int, float, bool]:
    """Coerce string value to appropriate type."""
    lowered = value.lower()
    if lowered in ("true", "yes", "on"):
        return True
    if lowered in ("false", "no", "off"):
        return False

    try:
        if "." not in value and "e" not in lowered:
            return int(value)
        return float(value)
    except ValueError:
        return value


def find_environment_references(value: Any) -> List[str]:
    """List the variable names referenced anywhere in a configuration value."""
    names: List[str] = []
    if isinstance(value, str):
        names.extend(match.group(1) for match in _VARIABLE_PATTERN.finditer(value))
    elif isinstance(value, dict):
        for item in value.values():
            names.extend(find_environment_references(item))
    elif isinstance(value, list):
        for item in value:
            names.extend(find_environment_references(item))
    return names


def is_sensitive_var(var_name: str) -> bool:
    """Check if an environment variable is likely to contain sensitive data."""
    sensitive_keywords = [
        "key",
        "secret",
        "token",
        "password",
        "pass",
        "credential",
        "auth",
        "private",
    ]

    var_lower = var_name.lower()
    return any(keyword in var_lower for keyword in sensitive_keywords)
