"""Error taxonomy for the chat-completion adapter.

Every failure raised by the adapter is a :class:`ChatServiceError` carrying
exactly one :class:`ErrorCode`. Callers switch on ``error.code`` rather than
on exception subclasses.
"""

from enum import Enum
from typing import Any, Optional


class ErrorCode(str, Enum):
    """Machine-readable failure reason."""

    AUTH_ERROR = "AUTH_ERROR"
    RATE_LIMIT = "RATE_LIMIT"
    TIMEOUT = "TIMEOUT"
    NETWORK_ERROR = "NETWORK_ERROR"
    API_ERROR = "API_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"


class ChatServiceError(Exception):
    """Typed failure raised by the adapter.

    Attributes:
        code: Taxonomy code for this failure
        message: Human-readable summary
        status_code: HTTP status code, when the provider answered
        details: Structured diagnostics (never the API key, never raw content)
        retry_after: Seconds the provider asked us to wait (429 only)
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Any] = None,
        retry_after: Optional[float] = None,
    ):
        super().__init__(message)
        self.code = ErrorCode(code)
        self.message = message
        self.status_code = status_code
        self.details = details
        self.retry_after = retry_after

    @property
    def retryable(self) -> bool:
        """Whether the retry policy may attempt the call again."""
        if self.code in (ErrorCode.RATE_LIMIT, ErrorCode.NETWORK_ERROR):
            return True
        if self.code == ErrorCode.API_ERROR:
            return self.status_code is not None and self.status_code >= 500
        return False

    def to_dict(self) -> dict:
        """Serializable view, suitable for an HTTP error body."""
        data = {"code": self.code.value, "message": self.message}
        if self.status_code is not None:
            data["status_code"] = self.status_code
        if self.details is not None:
            data["details"] = self.details
        return data

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(code={self.code.value}, "
            f"message={self.message!r}, status_code={self.status_code})"
        )

    @classmethod
    def auth(cls, message: str = "Invalid API key or authentication failed"):
        return cls(ErrorCode.AUTH_ERROR, message, status_code=401)

    @classmethod
    def rate_limit(
        cls, message: str = "Rate limit exceeded", retry_after: Optional[float] = None
    ):
        return cls(ErrorCode.RATE_LIMIT, message, status_code=429, retry_after=retry_after)

    @classmethod
    def timeout(cls, timeout: float):
        return cls(
            ErrorCode.TIMEOUT,
            f"Request timeout after {timeout:g}s",
            details={"timeout": timeout},
        )

    @classmethod
    def network(cls, message: str = "Network request failed"):
        return cls(ErrorCode.NETWORK_ERROR, message)

    @classmethod
    def api(cls, message: str, status_code: Optional[int], details: Optional[Any] = None):
        return cls(ErrorCode.API_ERROR, message, status_code=status_code, details=details)

    @classmethod
    def validation(cls, message: str, details: Optional[Any] = None):
        return cls(ErrorCode.VALIDATION_ERROR, message, details=details)
