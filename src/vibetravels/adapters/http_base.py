"""Base HTTP adapter with timeout handling, error mapping and retry logic."""

import asyncio
import logging
import random
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

import aiohttp
from aiohttp import ClientError, ClientSession, ClientTimeout

from ..config.models import ServiceConfig
from .errors import ChatServiceError

logger = logging.getLogger(__name__)

R = TypeVar("R")


def parse_retry_after(value: Optional[str]) -> Optional[float]:
    """Parse a ``Retry-After`` header given in seconds.

    HTTP-date values and garbage are ignored rather than guessed at.
    """
    if not value:
        return None
    try:
        seconds = float(value.strip())
    except ValueError:
        return None
    return seconds if seconds >= 0 else None


class RetryHandler:
    """Run a coroutine with bounded retries on transient failures.

    Per call: ``Sending -> Succeeded | RetryWait -> Sending | Failed``.
    At most ``1 + retry_attempts`` attempts are made; only errors whose
    ``retryable`` flag is set enter ``RetryWait``.
    """

    def __init__(
        self,
        retry_attempts: int = 2,
        retry_delay: float = 1.0,
        backoff: float = 1.0,
        jitter: bool = False,
        max_delay: float = 30.0,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        """Initialize retry handler.

        Args:
            retry_attempts: Additional attempts after the first one
            retry_delay: Base delay between attempts in seconds
            backoff: Multiplier applied per retry (1.0 = fixed delay)
            jitter: Scale each delay by a random factor in [0.5, 1.5)
            max_delay: Upper bound for any single wait
            sleep: Awaitable used for waiting (swappable in tests)
        """
        self.retry_attempts = retry_attempts
        self.retry_delay = retry_delay
        self.backoff = backoff
        self.jitter = jitter
        self.max_delay = max_delay
        self._sleep = sleep

    @classmethod
    def from_config(cls, config: ServiceConfig) -> "RetryHandler":
        return cls(
            retry_attempts=config.retry_attempts,
            retry_delay=config.retry_delay,
            backoff=config.retry_backoff,
            jitter=config.retry_jitter,
            max_delay=config.max_retry_delay,
        )

    def compute_delay(self, retry_number: int, error: ChatServiceError) -> float:
        """Delay before retry number ``retry_number`` (1-based)."""
        delay = self.retry_delay * (self.backoff ** (retry_number - 1))
        if self.jitter:
            delay *= 0.5 + random.random()
        if error.retry_after:
            delay = max(delay, error.retry_after)
        return min(delay, self.max_delay)

    async def execute(self, func: Callable[[], Awaitable[R]], label: str = "") -> R:
        """Execute ``func`` with retries.

        Args:
            func: Zero-argument coroutine function performing one attempt
            label: Identifier used in log messages

        Returns:
            Result of the first successful attempt

        Raises:
            ChatServiceError: The error of the last attempt
        """
        total_attempts = self.retry_attempts + 1
        attempt = 1

        while True:
            try:
                return await func()
            except ChatServiceError as e:
                if not e.retryable:
                    logger.debug(f"{label} non-retryable error: {e.code.value}")
                    raise
                if attempt >= total_attempts:
                    logger.warning(
                        f"{label} all {total_attempts} attempts failed. "
                        f"Last error: {e.code.value} - {e.message}"
                    )
                    raise

                delay = self.compute_delay(attempt, e)
                logger.warning(
                    f"{label} attempt {attempt}/{total_attempts} failed with "
                    f"{e.code.value}. Retrying in {delay:.2f} seconds..."
                )
                await self._sleep(delay)
                attempt += 1


class BaseHTTPAdapter:
    """Base adapter for HTTP JSON APIs with bearer authentication."""

    def __init__(self, config: ServiceConfig):
        """Initialize HTTP adapter.

        Args:
            config: Immutable service configuration
        """
        self.config = config
        self.base_url = config.base_url
        self.retry_handler = RetryHandler.from_config(config)

        self._session: Optional[ClientSession] = None
        self._request_count = 0
        self._error_count = 0

    async def initialize(self) -> None:
        """Open the pooled HTTP session."""
        if self._session is None:
            connector = aiohttp.TCPConnector(limit=100, limit_per_host=30)
            # Per-attempt timeouts are enforced in _send
            self._session = ClientSession(
                connector=connector,
                timeout=ClientTimeout(total=None),
                headers=self._build_headers(),
            )

    async def cleanup(self) -> None:
        """Close the HTTP session."""
        if self._session:
            await self._session.close()
            self._session = None

    def _build_headers(self) -> Dict[str, str]:
        """Build request headers."""
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "Authorization": f"Bearer {self.config.api_key.get_secret_value()}",
        }
        if self.config.http_referer:
            headers["HTTP-Referer"] = self.config.http_referer
        if self.config.app_title:
            headers["X-Title"] = self.config.app_title
        return headers

    async def _send(
        self,
        method: str,
        url: str,
        json_data: Optional[Dict[str, Any]],
        timeout: float,
    ) -> Dict[str, Any]:
        """Perform one attempt and map failures onto the error taxonomy."""
        self._request_count += 1

        async def _attempt() -> Dict[str, Any]:
            async with self._session.request(method, url, json=json_data) as response:
                if response.status == 401:
                    raise ChatServiceError.auth()

                if response.status == 429:
                    raise ChatServiceError.rate_limit(
                        retry_after=parse_retry_after(response.headers.get("Retry-After"))
                    )

                if response.status >= 400:
                    text = await response.text(errors="replace")
                    raise ChatServiceError.api(
                        f"OpenRouter API error: {response.status}",
                        response.status,
                        {"error_text": text[:1000]},
                    )

                try:
                    return await response.json(content_type=None)
                except ValueError as e:
                    raise ChatServiceError.api(
                        "Response body is not valid JSON",
                        response.status,
                        {"parse_error": str(e)},
                    ) from e

        try:
            # wait_for first: aiohttp's timeout errors also subclass ClientError
            return await asyncio.wait_for(_attempt(), timeout=timeout)
        except asyncio.TimeoutError as e:
            self._error_count += 1
            raise ChatServiceError.timeout(timeout) from e
        except ChatServiceError:
            self._error_count += 1
            raise
        except ClientError as e:
            self._error_count += 1
            raise ChatServiceError.network(f"Network request failed: {e}") from e

    async def _request(
        self,
        method: str,
        endpoint: str,
        json_data: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
        retry: bool = True,
        label: str = "",
    ) -> Dict[str, Any]:
        """Make HTTP request with timeout and retry handling.

        Args:
            method: HTTP method
            endpoint: API endpoint relative to the base URL
            json_data: JSON data for request body
            timeout: Per-attempt timeout in seconds (defaults to config)
            retry: Whether transient failures are retried
            label: Identifier used in log messages

        Returns:
            Decoded JSON response body

        Raises:
            ChatServiceError: On any request failure
        """
        if not self._session:
            await self.initialize()

        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        timeout = timeout if timeout is not None else self.config.default_timeout

        async def _make_request():
            return await self._send(method, url, json_data, timeout)

        if not retry:
            return await _make_request()
        return await self.retry_handler.execute(_make_request, label=label)

    async def get_usage_stats(self) -> Dict[str, Any]:
        """Get usage statistics."""
        return {
            "request_count": self._request_count,
            "error_count": self._error_count,
            "error_rate": (
                self._error_count / self._request_count
                if self._request_count > 0
                else 0
            ),
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(base_url={self.base_url!r})"

    async def __aenter__(self):
        """Async context manager entry."""
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.cleanup()
