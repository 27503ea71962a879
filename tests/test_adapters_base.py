"""Tests for adapter request and result types."""

from dataclasses import FrozenInstanceError

import pytest
from pydantic import BaseModel, ValidationError

from vibetravels.adapters.base import (
    ChatMessage,
    ChatResult,
    MessageRole,
    RequestParameters,
    ResponseSchemaSpec,
    Usage,
)


class Answer(BaseModel):
    text: str


class TestChatMessage:
    """Tests for ChatMessage."""

    def test_constructors(self):
        """Test role helpers."""
        assert ChatMessage.system("a").role == MessageRole.SYSTEM
        assert ChatMessage.user("b").role == MessageRole.USER
        assert ChatMessage.assistant("c").role == MessageRole.ASSISTANT

    def test_role_from_string(self):
        """Test roles accept their wire values."""
        assert ChatMessage(role="user", content="hi").role == MessageRole.USER

    def test_unknown_role(self):
        """Test roles outside the enum are rejected."""
        with pytest.raises(ValidationError):
            ChatMessage(role="tool", content="hi")

    def test_frozen(self):
        """Test messages are immutable."""
        message = ChatMessage.user("hi")
        with pytest.raises(ValidationError):
            message.content = "changed"


class TestResponseSchemaSpec:
    """Tests for ResponseSchemaSpec."""

    @pytest.mark.parametrize("name", ["travel_itinerary", "a", "A-1", "x" * 64])
    def test_valid_names(self, name):
        """Test accepted schema names."""
        assert ResponseSchemaSpec(name=name, model=Answer).name == name

    @pytest.mark.parametrize("name", ["", "has space", "dots.not.allowed", "x" * 65])
    def test_invalid_names(self, name):
        """Test rejected schema names."""
        with pytest.raises(ValidationError):
            ResponseSchemaSpec(name=name, model=Answer)

    def test_default_description(self):
        """Test the description defaults to empty."""
        assert ResponseSchemaSpec(name="answer", model=Answer).description == ""


class TestRequestParameters:
    """Tests for RequestParameters."""

    def test_defaults_unset(self):
        """Test every field defaults to None."""
        assert all(value is None for value in RequestParameters().model_dump().values())

    @pytest.mark.parametrize(
        "field,value",
        [
            ("temperature", 1.5),
            ("temperature", -0.1),
            ("max_tokens", 0),
            ("timeout", 0),
            ("top_p", 1.1),
            ("frequency_penalty", 2.5),
            ("presence_penalty", -3),
        ],
    )
    def test_out_of_range(self, field, value):
        """Test values outside their ranges are rejected."""
        with pytest.raises(ValidationError):
            RequestParameters(**{field: value})

    def test_boundaries(self):
        """Test inclusive range boundaries are accepted."""
        parameters = RequestParameters(
            temperature=1.0, top_p=0.0, frequency_penalty=-2.0, presence_penalty=2.0
        )
        assert parameters.temperature == 1.0
        assert parameters.presence_penalty == 2.0


class TestChatResult:
    """Tests for ChatResult."""

    def test_immutable(self):
        """Test results cannot be modified."""
        result = ChatResult(
            data=Answer(text="hi"),
            model="m",
            usage=Usage(1, 2, 3),
            finish_reason="stop",
            request_id="r",
        )
        with pytest.raises(FrozenInstanceError):
            result.model = "other"
