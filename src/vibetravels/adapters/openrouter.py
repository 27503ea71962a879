"""OpenRouter chat-completions adapter with schema-validated structured output.

The adapter shapes a request from role-tagged messages and a pydantic response
model, sends it with timeout and retry handling, and returns a
:class:`ChatResult` whose ``data`` has passed validation against that model.
Nothing unvalidated crosses this boundary: every failure is a
:class:`ChatServiceError` with a single taxonomy code.

Classes:
    OpenRouterAdapter: Structured-output client for ``/chat/completions``.
"""

import itertools
import json
import logging
import re
import secrets
import time
from typing import Any, Dict, List, Optional, Sequence

from pydantic import BaseModel, ValidationError

from ..config.models import ServiceConfig
from .base import (
    OPENROUTER_MODEL,
    ChatMessage,
    ChatResult,
    ConnectionStatus,
    RequestParameters,
    ResponseSchemaSpec,
    T,
    Usage,
)
from .errors import ChatServiceError
from .http_base import BaseHTTPAdapter
from .schema_utils import SchemaError, build_response_format, to_strict_json_schema

logger = logging.getLogger(__name__)

_FENCE_PATTERN = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)

_OPTIONAL_PARAMETERS = ("top_p", "frequency_penalty", "presence_penalty", "stop")

CONNECTION_TEST_TIMEOUT = 30.0


class _ConnectionProbe(BaseModel):
    status: str


class OpenRouterAdapter(BaseHTTPAdapter):
    """Structured-output client for OpenRouter's chat completions endpoint.

    The model is fixed to :data:`OPENROUTER_MODEL`; callers only choose the
    messages, the response schema and sampling parameters.

    Example:
        >>> config = ServiceConfig.from_env()
        >>> async with OpenRouterAdapter(config) as adapter:
        ...     result = await adapter.chat(messages, ITINERARY_SCHEMA)
        >>> result.data.days[0].day_index
        1
    """

    model = OPENROUTER_MODEL

    def __init__(self, config: ServiceConfig):
        super().__init__(config)
        self._request_ids = itertools.count(1)

        if self.config.logging_enabled:
            logger.info(
                f"OpenRouter adapter initialized: base_url={self.base_url}, "
                f"model={self.model}, timeout={self.config.default_timeout}s, "
                f"retry_attempts={self.config.retry_attempts}"
            )

    def generate_request_id(self) -> str:
        """Unique request identifier: ``or_<millis>_<counter>_<random>``."""
        return (
            f"or_{int(time.time() * 1000)}_{next(self._request_ids)}_"
            f"{secrets.token_hex(2)}"
        )

    def build_request_payload(
        self,
        messages: Sequence[ChatMessage],
        response_schema: ResponseSchemaSpec,
        parameters: Optional[RequestParameters] = None,
    ) -> Dict[str, Any]:
        """Build the request body for ``/chat/completions``.

        Args:
            messages: Ordered conversation; must not be empty
            response_schema: Schema the provider must follow
            parameters: Optional per-call overrides

        Returns:
            Request body dictionary. Optional sampling fields appear only when
            set by the caller.

        Raises:
            ChatServiceError: VALIDATION_ERROR for empty messages or a schema
                that cannot be expressed as a strict JSON object schema
        """
        if not messages:
            raise ChatServiceError.validation("Messages array cannot be empty")

        parameters = parameters or RequestParameters()

        try:
            schema_data = to_strict_json_schema(response_schema.model)
        except SchemaError as e:
            raise ChatServiceError.validation(
                f"Invalid response schema '{response_schema.name}': {e}"
            ) from e

        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": message.role.value, "content": message.content}
                for message in messages
            ],
            "response_format": build_response_format(
                schema_data, response_schema.name, response_schema.description
            ),
            "temperature": (
                parameters.temperature
                if parameters.temperature is not None
                else self.config.default_temperature
            ),
            "max_tokens": (
                parameters.max_tokens
                if parameters.max_tokens is not None
                else self.config.default_max_tokens
            ),
        }

        for field in _OPTIONAL_PARAMETERS:
            value = getattr(parameters, field)
            if value is not None:
                payload[field] = list(value) if field == "stop" else value

        return payload

    def parse_and_validate_response(
        self,
        envelope: Dict[str, Any],
        response_schema: ResponseSchemaSpec,
        request_id: str,
    ) -> ChatResult:
        """Validate the provider envelope and its JSON content.

        Args:
            envelope: Decoded provider response body
            response_schema: Schema the content must satisfy
            request_id: Identifier of the originating call

        Returns:
            ChatResult carrying the validated model instance

        Raises:
            ChatServiceError: API_ERROR for a malformed envelope,
                VALIDATION_ERROR for malformed JSON or a schema mismatch
        """
        choice = _first_choice(envelope)
        content = (choice.get("message") or {}).get("content") if choice else None

        if not isinstance(content, str) or not content.strip():
            raise ChatServiceError.api(
                "Invalid response structure from OpenRouter API",
                200,
                {"received_keys": sorted(envelope.keys()) if isinstance(envelope, dict) else []},
            )

        finish_reason = choice.get("finish_reason") or "unknown"
        if finish_reason == "length":
            logger.warning(
                f"[{request_id}] Response truncated due to token limit. "
                f"Consider increasing max_tokens."
            )

        text = content.strip()
        fenced = _FENCE_PATTERN.match(text)
        if fenced:
            text = fenced.group(1)

        try:
            parsed = json.loads(text)
        except json.JSONDecodeError as e:
            raise ChatServiceError.validation(
                "Response content is not valid JSON",
                {
                    "parse_error": e.msg,
                    "line": e.lineno,
                    "column": e.colno,
                    "finish_reason": finish_reason,
                },
            ) from e

        try:
            data = response_schema.model.model_validate(parsed)
        except ValidationError as e:
            raise ChatServiceError.validation(
                f"Response data does not match expected schema "
                f"'{response_schema.name}' ({e.error_count()} errors)",
                {"errors": _validation_diagnostics(e)},
            ) from e

        usage = envelope.get("usage") or {}
        return ChatResult(
            data=data,
            model=envelope.get("model") or self.model,
            usage=Usage(
                prompt_tokens=usage.get("prompt_tokens", 0),
                completion_tokens=usage.get("completion_tokens", 0),
                total_tokens=usage.get("total_tokens", 0),
            ),
            finish_reason=finish_reason,
            request_id=request_id,
        )

    async def chat(
        self,
        messages: Sequence[ChatMessage],
        response_schema: ResponseSchemaSpec,
        parameters: Optional[RequestParameters] = None,
    ) -> ChatResult[T]:
        """Send a chat completion request with structured output validation.

        Args:
            messages: Ordered conversation; must not be empty
            response_schema: Schema the response must satisfy
            parameters: Optional per-call overrides

        Returns:
            ChatResult with validated, typed data

        Raises:
            ChatServiceError: With one of the taxonomy codes on any failure
        """
        payload = self.build_request_payload(messages, response_schema, parameters)
        timeout = (
            parameters.timeout
            if parameters is not None and parameters.timeout is not None
            else self.config.default_timeout
        )

        request_id = self.generate_request_id()
        start = time.monotonic()
        self._log_request(request_id, len(messages), response_schema.name)

        try:
            envelope = await self._request(
                "POST",
                "chat/completions",
                json_data=payload,
                timeout=timeout,
                label=f"[{request_id}]",
            )
            result = self.parse_and_validate_response(envelope, response_schema, request_id)
        except ChatServiceError as e:
            self._log_failure(request_id, e, time.monotonic() - start)
            raise

        self._log_success(request_id, result.usage.total_tokens, time.monotonic() - start)
        return result

    async def test_connection(self) -> ConnectionStatus:
        """Probe API connectivity and authentication.

        Sends one minimal structured request without retries. Never raises.

        Returns:
            ConnectionStatus with success flag and latency in seconds
        """
        start = time.monotonic()
        payload = self.build_request_payload(
            [ChatMessage.user("Test connection")],
            ResponseSchemaSpec(name="test_response", model=_ConnectionProbe),
            RequestParameters(temperature=0.1, max_tokens=50),
        )

        try:
            await self._request(
                "POST",
                "chat/completions",
                json_data=payload,
                timeout=CONNECTION_TEST_TIMEOUT,
                retry=False,
                label="[connection-test]",
            )
        except ChatServiceError as e:
            if self.config.logging_enabled:
                logger.error(f"Connection test failed: {e.code.value} - {e.message}")
            return ConnectionStatus(success=False, latency=time.monotonic() - start)

        return ConnectionStatus(success=True, latency=time.monotonic() - start)

    def _log_request(self, request_id: str, message_count: int, schema_name: str) -> None:
        if not self.config.logging_enabled:
            return
        logger.info(
            f"OpenRouter request [{request_id}] model={self.model} "
            f"messages={message_count} schema={schema_name}"
        )

    def _log_success(self, request_id: str, tokens: int, duration: float) -> None:
        if not self.config.logging_enabled:
            return
        logger.info(
            f"OpenRouter response [{request_id}] success tokens={tokens} "
            f"duration={duration * 1000:.0f}ms"
        )

    def _log_failure(
        self, request_id: str, error: ChatServiceError, duration: float
    ) -> None:
        if not self.config.logging_enabled:
            return
        logger.error(
            f"OpenRouter error [{request_id}] code={error.code.value} "
            f"status={error.status_code} message={error.message} "
            f"duration={duration * 1000:.0f}ms"
        )


def _first_choice(envelope: Any) -> Optional[Dict[str, Any]]:
    if not isinstance(envelope, dict):
        return None
    choices = envelope.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return None
    return choices[0]


def _validation_diagnostics(error: ValidationError) -> List[Dict[str, Any]]:
    """Structured pydantic errors without the offending input values."""
    return [
        {"loc": list(item["loc"]), "type": item["type"], "msg": item["msg"]}
        for item in error.errors(include_url=False, include_input=False)
    ]
