"""Itinerary generation service.

Chooses between the offline mock generator and the OpenRouter adapter, and
turns adapter failures into user-facing generation errors. Callers can still
inspect the underlying :class:`ChatServiceError` via ``error.cause``.
"""

import asyncio
import logging
import random
from typing import Optional

from ..adapters.base import RequestParameters
from ..adapters.errors import ChatServiceError, ErrorCode
from ..adapters.openrouter import OpenRouterAdapter
from ..config.models import AppConfig
from ..services.rate_limiter import GenerationRateLimiter
from .mock import generate_mock_itinerary
from .models import Itinerary, PlanRequest
from .prompts import ITINERARY_SCHEMA, build_itinerary_messages

logger = logging.getLogger(__name__)

TIMEOUT_MESSAGE = "Itinerary generation timed out. Please try again"
FAILURE_MESSAGE = "Failed to generate itinerary"


class ItineraryGenerationError(Exception):
    """Raised when an itinerary could not be produced.

    Attributes:
        code: Adapter error code, or ``None`` for domain failures
        cause: The underlying adapter error, if any
    """

    def __init__(
        self,
        message: str,
        code: Optional[ErrorCode] = None,
        cause: Optional[ChatServiceError] = None,
    ):
        super().__init__(message)
        self.code = code
        self.cause = cause

    @property
    def retryable(self) -> bool:
        """Whether asking the user to try again later makes sense."""
        return self.code in (
            ErrorCode.TIMEOUT,
            ErrorCode.RATE_LIMIT,
            ErrorCode.NETWORK_ERROR,
        ) or (self.cause is not None and self.cause.retryable)


class ItineraryGenerator:
    """Produce itineraries for plan requests.

    Args:
        adapter: Adapter used in live mode
        use_mock: Use the offline generator instead of the API
        mock_delay: Simulated latency for the mock, in seconds
        parameters: Sampling overrides for live requests
        rng: Random source for the mock generator
        rate_limiter: Per-user limiter applied when a user id is given
    """

    def __init__(
        self,
        adapter: Optional[OpenRouterAdapter] = None,
        use_mock: bool = True,
        mock_delay: float = 0.5,
        parameters: Optional[RequestParameters] = None,
        rng: Optional[random.Random] = None,
        rate_limiter: Optional[GenerationRateLimiter] = None,
    ):
        if not use_mock and adapter is None:
            raise ValueError("An OpenRouterAdapter is required when use_mock is False")
        self.adapter = adapter
        self.use_mock = use_mock
        self.mock_delay = mock_delay
        self.parameters = parameters
        self._rng = rng
        self.rate_limiter = rate_limiter

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        adapter: Optional[OpenRouterAdapter] = None,
        use_mock: Optional[bool] = None,
    ) -> "ItineraryGenerator":
        """Build a generator from application settings.

        ``use_mock`` overrides ``config.generation.use_mock_ai`` when given.
        """
        generation = config.generation
        return cls(
            adapter=adapter,
            use_mock=generation.use_mock_ai if use_mock is None else use_mock,
            mock_delay=generation.mock_delay,
            rate_limiter=GenerationRateLimiter(
                limit=generation.plan_limit, window=generation.plan_window
            ),
        )

    async def generate(self, plan: PlanRequest, user_id: Optional[str] = None) -> Itinerary:
        """Generate an itinerary for ``plan``.

        Raises:
            RateLimitExceeded: If ``user_id`` has used up its generations
            ItineraryGenerationError: If the adapter fails or returns the wrong
                number of days
        """
        if self.rate_limiter is not None and user_id is not None:
            self.rate_limiter.enforce(user_id)

        if self.use_mock:
            logger.info("Using mock itinerary generator")
            if self.mock_delay:
                await asyncio.sleep(self.mock_delay)
            return generate_mock_itinerary(plan, self._rng)

        logger.info(f"Requesting itinerary for {plan.destination_text} from OpenRouter")
        try:
            result = await self.adapter.chat(
                build_itinerary_messages(plan), ITINERARY_SCHEMA, self.parameters
            )
        except ChatServiceError as e:
            logger.error(f"AI service error: {e.code.value} - {e.message}")
            message = TIMEOUT_MESSAGE if e.code == ErrorCode.TIMEOUT else FAILURE_MESSAGE
            raise ItineraryGenerationError(message, code=e.code, cause=e) from e

        itinerary: Itinerary = result.data
        if len(itinerary.days) != plan.trip_length_days:
            logger.error(
                f"[{result.request_id}] Expected {plan.trip_length_days} days, "
                f"got {len(itinerary.days)}"
            )
            raise ItineraryGenerationError(FAILURE_MESSAGE)

        logger.info(
            f"[{result.request_id}] Generated {len(itinerary.days)}-day itinerary "
            f"({result.usage.total_tokens} tokens)"
        )
        return itinerary
