from .base import (
    OPENROUTER_MODEL,
    ChatMessage,
    ChatResult,
    ConnectionStatus,
    MessageRole,
    RequestParameters,
    ResponseSchemaSpec,
    Usage,
)
from .errors import ChatServiceError, ErrorCode
from .openrouter import OpenRouterAdapter

__all__ = [
    "OPENROUTER_MODEL",
    "ChatMessage",
    "ChatResult",
    "ChatServiceError",
    "ConnectionStatus",
    "ErrorCode",
    "MessageRole",
    "OpenRouterAdapter",
    "RequestParameters",
    "ResponseSchemaSpec",
    "Usage",
]
