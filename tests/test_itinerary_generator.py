"""Tests for the itinerary generation service."""

import random
from unittest.mock import AsyncMock, MagicMock

import pytest

from vibetravels.adapters import ChatServiceError, ErrorCode, OpenRouterAdapter
from vibetravels.adapters.base import ChatResult, RequestParameters, Usage
from vibetravels.config import AppConfig, GenerationConfig, ServiceConfig
from vibetravels.itinerary import ITINERARY_SCHEMA, Itinerary, ItineraryGenerator
from vibetravels.itinerary.generator import (
    FAILURE_MESSAGE,
    TIMEOUT_MESSAGE,
    ItineraryGenerationError,
)
from vibetravels.services import GenerationRateLimiter, RateLimitExceeded

from .conftest import TEST_API_KEY
from .factories.provider_factory import ProviderFactory


def _result(days: int) -> ChatResult:
    return ChatResult(
        data=Itinerary.model_validate(ProviderFactory.itinerary_content(days=days)),
        model="openai/gpt-4o-mini-2024-07-18",
        usage=Usage(100, 200, 300),
        finish_reason="stop",
        request_id="or_1_1_abcd",
    )


@pytest.fixture
def mock_adapter():
    """Adapter stand-in with an async chat method."""
    adapter = MagicMock(spec=OpenRouterAdapter)
    adapter.chat = AsyncMock()
    return adapter


class TestMockMode:
    """Tests for the offline generator path."""

    async def test_generates_itinerary(self, plan_factory):
        """Test mock mode needs no adapter."""
        generator = ItineraryGenerator(use_mock=True, mock_delay=0, rng=random.Random(3))
        itinerary = await generator.generate(plan_factory.plan(days=4))
        assert len(itinerary.days) == 4

    async def test_adapter_unused(self, plan_factory, mock_adapter):
        """Test the adapter is ignored in mock mode."""
        generator = ItineraryGenerator(adapter=mock_adapter, use_mock=True, mock_delay=0)
        await generator.generate(plan_factory.plan())
        mock_adapter.chat.assert_not_called()


class TestLiveMode:
    """Tests for the adapter-backed path."""

    def test_requires_adapter(self):
        """Test live mode cannot be built without an adapter."""
        with pytest.raises(ValueError):
            ItineraryGenerator(use_mock=False)

    async def test_calls_adapter(self, plan_factory, mock_adapter):
        """Test the adapter is called with the itinerary schema and parameters."""
        parameters = RequestParameters(temperature=0.5)
        mock_adapter.chat.return_value = _result(days=3)
        generator = ItineraryGenerator(
            adapter=mock_adapter, use_mock=False, parameters=parameters
        )

        itinerary = await generator.generate(plan_factory.plan(days=3))

        assert len(itinerary.days) == 3
        messages, schema, passed = mock_adapter.chat.call_args.args
        assert schema is ITINERARY_SCHEMA
        assert passed is parameters
        assert "3-day travel itinerary" in messages[1].content

    async def test_day_count_mismatch(self, plan_factory, mock_adapter):
        """Test an itinerary with the wrong number of days is rejected."""
        mock_adapter.chat.return_value = _result(days=2)
        generator = ItineraryGenerator(adapter=mock_adapter, use_mock=False)

        with pytest.raises(ItineraryGenerationError) as exc_info:
            await generator.generate(plan_factory.plan(days=3))

        assert str(exc_info.value) == FAILURE_MESSAGE
        assert exc_info.value.code is None

    async def test_timeout_message(self, plan_factory, mock_adapter):
        """Test timeouts get their own user-facing message."""
        mock_adapter.chat.side_effect = ChatServiceError.timeout(60.0)
        generator = ItineraryGenerator(adapter=mock_adapter, use_mock=False)

        with pytest.raises(ItineraryGenerationError) as exc_info:
            await generator.generate(plan_factory.plan())

        error = exc_info.value
        assert str(error) == TIMEOUT_MESSAGE
        assert error.code == ErrorCode.TIMEOUT
        assert error.cause.code == ErrorCode.TIMEOUT
        assert error.retryable is True

    @pytest.mark.parametrize(
        "cause,retryable",
        [
            (ChatServiceError.auth(), False),
            (ChatServiceError.validation("bad"), False),
            (ChatServiceError.rate_limit(), True),
            (ChatServiceError.api("down", 503), True),
        ],
    )
    async def test_adapter_failures(self, plan_factory, mock_adapter, cause, retryable):
        """Test adapter errors are wrapped with the generic failure message."""
        mock_adapter.chat.side_effect = cause
        generator = ItineraryGenerator(adapter=mock_adapter, use_mock=False)

        with pytest.raises(ItineraryGenerationError) as exc_info:
            await generator.generate(plan_factory.plan())

        error = exc_info.value
        assert str(error) == FAILURE_MESSAGE
        assert error.code == cause.code
        assert error.cause is cause
        assert error.__cause__ is cause
        assert error.retryable is retryable


class TestRateLimiting:
    """Tests for per-user generation limits."""

    async def test_enforced_per_user(self, plan_factory, mock_adapter):
        """Test generations beyond the limit are refused before the adapter is called."""
        mock_adapter.chat.return_value = _result(days=3)
        generator = ItineraryGenerator(
            adapter=mock_adapter,
            use_mock=False,
            rate_limiter=GenerationRateLimiter(limit=2),
        )
        plan = plan_factory.plan(days=3)

        await generator.generate(plan, user_id="user-1")
        await generator.generate(plan, user_id="user-1")
        with pytest.raises(RateLimitExceeded):
            await generator.generate(plan, user_id="user-1")

        assert mock_adapter.chat.call_count == 2
        await generator.generate(plan, user_id="user-2")

    async def test_anonymous_not_limited(self, plan_factory):
        """Test calls without a user id skip the limiter."""
        generator = ItineraryGenerator(
            mock_delay=0, rate_limiter=GenerationRateLimiter(limit=1)
        )
        plan = plan_factory.plan(days=1)
        for _ in range(3):
            await generator.generate(plan)


class TestFromConfig:
    """Tests for ItineraryGenerator.from_config."""

    def test_mock_settings(self):
        """Test generation settings are applied."""
        config = AppConfig(
            generation=GenerationConfig(mock_delay=0.1, plan_limit=4, plan_window=60)
        )
        generator = ItineraryGenerator.from_config(config)

        assert generator.use_mock is True
        assert generator.mock_delay == 0.1
        assert generator.rate_limiter.limit == 4
        assert generator.rate_limiter.window == 60.0

    def test_live_settings(self, mock_adapter):
        """Test live mode takes the given adapter."""
        config = AppConfig(
            openrouter=ServiceConfig(api_key=TEST_API_KEY),
            generation=GenerationConfig(use_mock_ai=False),
        )
        generator = ItineraryGenerator.from_config(config, adapter=mock_adapter)

        assert generator.use_mock is False
        assert generator.adapter is mock_adapter
