"""Utilities for turning pydantic models into strict structured-output schemas."""

import copy
import logging
from typing import Any, Dict, Type

from pydantic import BaseModel

logger = logging.getLogger(__name__)

# Keys the provider's strict mode rejects or that only add noise
_DROPPED_KEYS = ("title", "$defs", "definitions", "default")


class SchemaError(Exception):
    """Exception raised for schema-related errors."""

    pass


def to_strict_json_schema(model: Type[BaseModel]) -> Dict[str, Any]:
    """Build a strict JSON schema for a pydantic model.

    All ``$ref`` pointers are inlined, every object node gets
    ``additionalProperties: false`` and ``required`` lists all of its
    properties, so the provider can only emit conforming JSON.

    Args:
        model: Pydantic model class describing the expected response

    Returns:
        Self-contained JSON schema dictionary with a top-level object type

    Raises:
        SchemaError: If the model does not describe a JSON object
    """
    if not (isinstance(model, type) and issubclass(model, BaseModel)):
        raise SchemaError(f"Expected a pydantic model class, got {model!r}")

    raw = model.model_json_schema()
    definitions = raw.get("$defs", {})
    schema = _strictify(_inline_refs(raw, definitions, set()))

    if schema.get("type") != "object":
        raise SchemaError(
            f"Structured output schema for {model.__name__} must be an object, "
            f"got {schema.get('type')!r}"
        )

    return schema


def _inline_refs(node: Any, definitions: Dict[str, Any], seen: set) -> Any:
    """Replace ``{"$ref": "#/$defs/X"}`` with a copy of the definition."""
    if isinstance(node, list):
        return [_inline_refs(item, definitions, seen) for item in node]
    if not isinstance(node, dict):
        return node

    ref = node.get("$ref")
    if ref is not None:
        name = ref.rsplit("/", 1)[-1]
        if name not in definitions:
            raise SchemaError(f"Unresolvable schema reference: {ref}")
        if name in seen:
            raise SchemaError(f"Recursive schema reference is not supported: {ref}")
        resolved = copy.deepcopy(definitions[name])
        siblings = {k: v for k, v in node.items() if k != "$ref"}
        resolved.update(siblings)
        return _inline_refs(resolved, definitions, seen | {name})

    return {
        key: _inline_refs(value, definitions, seen)
        for key, value in node.items()
        if key not in ("$defs", "definitions")
    }


def _strictify(node: Any) -> Any:
    """Apply strict-mode rules to every object node in the schema."""
    if isinstance(node, list):
        return [_strictify(item) for item in node]
    if not isinstance(node, dict):
        return node

    result = {}
    for key, value in node.items():
        if key in _DROPPED_KEYS:
            continue
        if key == "properties" and isinstance(value, dict):
            # property names are data, not schema keywords
            result[key] = {name: _strictify(prop) for name, prop in value.items()}
        else:
            result[key] = _strictify(value)

    if result.get("type") == "object" or "properties" in result:
        extra = result.get("additionalProperties", False)
        if "properties" not in result or extra is not False:
            # dict fields and extra="allow" models have no fixed key set
            raise SchemaError(
                "Open-ended objects (dict fields or models allowing extra keys) "
                "cannot be expressed in strict mode; use a model with named fields"
            )
        result["type"] = "object"
        properties = result["properties"]
        result["required"] = list(properties.keys())
        result["additionalProperties"] = False

    return result


def build_response_format(
    schema_data: Dict[str, Any], schema_name: str, description: str = ""
) -> Dict[str, Any]:
    """Wrap a JSON schema in the chat-completions ``response_format`` envelope.

    Args:
        schema_data: Strict JSON schema dictionary
        schema_name: Identifier for the schema
        description: Optional human-readable description

    Returns:
        ``response_format`` dictionary for the request body
    """
    json_schema: Dict[str, Any] = {"name": schema_name, "strict": True}
    if description:
        json_schema["description"] = description
    json_schema["schema"] = schema_data
    return {"type": "json_schema", "json_schema": json_schema}
