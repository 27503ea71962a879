"""Request and result types for structured chat completions."""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, List, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T", bound=BaseModel)

# Hardcoded model for all requests - cheap and efficient for travel planning
OPENROUTER_MODEL = "openai/gpt-4o-mini-2024-07-18"


class MessageRole(str, Enum):
    """Role of a message in conversation."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class ChatMessage(BaseModel):
    """Single message in conversation."""

    model_config = ConfigDict(frozen=True)

    role: MessageRole
    content: str

    @classmethod
    def system(cls, content: str) -> "ChatMessage":
        return cls(role=MessageRole.SYSTEM, content=content)

    @classmethod
    def user(cls, content: str) -> "ChatMessage":
        return cls(role=MessageRole.USER, content=content)

    @classmethod
    def assistant(cls, content: str) -> "ChatMessage":
        return cls(role=MessageRole.ASSISTANT, content=content)


class ResponseSchemaSpec(BaseModel):
    """Structured-output contract for one call.

    ``model`` is the pydantic model the provider's JSON is validated against;
    its JSON schema is also what the provider is instructed to emit.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str = Field(..., pattern=r"^[A-Za-z0-9_-]{1,64}$")
    description: str = ""
    model: Type[BaseModel]


class RequestParameters(BaseModel):
    """Per-call sampling overrides. ``None`` means "use the service default"."""

    model_config = ConfigDict(frozen=True)

    temperature: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    max_tokens: Optional[int] = Field(default=None, gt=0)
    timeout: Optional[float] = Field(
        default=None, gt=0, description="Per-attempt timeout in seconds"
    )
    top_p: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    frequency_penalty: Optional[float] = Field(default=None, ge=-2.0, le=2.0)
    presence_penalty: Optional[float] = Field(default=None, ge=-2.0, le=2.0)
    stop: Optional[List[str]] = None


@dataclass(frozen=True)
class Usage:
    """Token accounting copied from the provider envelope."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


@dataclass(frozen=True)
class ChatResult(Generic[T]):
    """Validated structured response."""

    data: T
    model: str
    usage: Usage
    finish_reason: str
    request_id: str


@dataclass(frozen=True)
class ConnectionStatus:
    """Outcome of a connectivity probe."""

    success: bool
    latency: float
