"""Tests for configuration models."""

import pytest
from pydantic import ValidationError

from vibetravels.config import DEFAULT_BASE_URL, AppConfig, GenerationConfig, ServiceConfig

from .conftest import TEST_API_KEY


class TestServiceConfig:
    """Tests for ServiceConfig."""

    def test_defaults(self):
        """Test default values."""
        config = ServiceConfig(api_key=TEST_API_KEY)
        assert config.base_url == DEFAULT_BASE_URL
        assert config.default_timeout == 60.0
        assert config.default_temperature == 0.7
        assert config.default_max_tokens == 4000
        assert config.logging_enabled is False
        assert config.retry_attempts == 2
        assert config.retry_delay == 1.0
        assert config.retry_backoff == 1.0
        assert config.retry_jitter is False

    @pytest.mark.parametrize("key", ["", "   "])
    def test_api_key_required(self, key):
        """Test empty keys are rejected."""
        with pytest.raises(ValidationError, match="API key is required"):
            ServiceConfig(api_key=key)

    def test_api_key_missing(self):
        """Test the key has no default."""
        with pytest.raises(ValidationError):
            ServiceConfig()

    def test_api_key_masked(self):
        """Test the key does not show in repr, str or safe dumps."""
        config = ServiceConfig(api_key=TEST_API_KEY)
        assert TEST_API_KEY not in repr(config)
        assert TEST_API_KEY not in str(config)
        assert config.safe_dump()["api_key"] == "***"
        assert config.api_key.get_secret_value() == TEST_API_KEY

    def test_trailing_slash_stripped(self):
        """Test the base URL is normalized."""
        config = ServiceConfig(api_key=TEST_API_KEY, base_url="https://example.com/api/")
        assert config.base_url == "https://example.com/api"

    def test_https_required(self):
        """Test plain HTTP needs an explicit opt-in."""
        with pytest.raises(ValidationError, match="HTTPS"):
            ServiceConfig(api_key=TEST_API_KEY, base_url="http://localhost:8080")

        config = ServiceConfig(
            api_key=TEST_API_KEY, base_url="http://localhost:8080", allow_insecure=True
        )
        assert config.base_url == "http://localhost:8080"

    def test_non_http_url(self):
        """Test other schemes are rejected."""
        with pytest.raises(ValidationError):
            ServiceConfig(api_key=TEST_API_KEY, base_url="ftp://example.com")

    @pytest.mark.parametrize(
        "field,value",
        [
            ("default_timeout", 0),
            ("default_temperature", 1.5),
            ("default_max_tokens", 0),
            ("retry_attempts", -1),
            ("retry_attempts", 11),
            ("retry_delay", -1),
            ("retry_backoff", 0.5),
        ],
    )
    def test_out_of_range(self, field, value):
        """Test numeric bounds."""
        with pytest.raises(ValidationError):
            ServiceConfig(api_key=TEST_API_KEY, **{field: value})

    def test_max_delay_below_delay(self):
        """Test the delay cap cannot be below the base delay."""
        with pytest.raises(ValidationError, match="max_retry_delay"):
            ServiceConfig(api_key=TEST_API_KEY, retry_delay=10.0, max_retry_delay=5.0)

    def test_frozen(self):
        """Test configuration is immutable after construction."""
        config = ServiceConfig(api_key=TEST_API_KEY)
        with pytest.raises(ValidationError):
            config.retry_attempts = 5


class TestServiceConfigFromEnv:
    """Tests for ServiceConfig.from_env."""

    def test_reads_variables(self):
        """Test OPENROUTER_* variables are read and coerced."""
        config = ServiceConfig.from_env(
            {
                "OPENROUTER_API_KEY": TEST_API_KEY,
                "OPENROUTER_BASE_URL": "https://proxy.example.com/v1/",
                "OPENROUTER_TIMEOUT": "30",
                "OPENROUTER_TEMPERATURE": "0.4",
                "OPENROUTER_MAX_TOKENS": "2000",
                "OPENROUTER_LOGGING": "true",
                "OPENROUTER_RETRY_ATTEMPTS": "3",
                "OPENROUTER_RETRY_DELAY": "0.5",
            }
        )
        assert config.api_key.get_secret_value() == TEST_API_KEY
        assert config.base_url == "https://proxy.example.com/v1"
        assert config.default_timeout == 30.0
        assert config.default_temperature == 0.4
        assert config.default_max_tokens == 2000
        assert config.logging_enabled is True
        assert config.retry_attempts == 3
        assert config.retry_delay == 0.5

    def test_empty_values_ignored(self):
        """Test empty variables fall back to defaults."""
        config = ServiceConfig.from_env(
            {"OPENROUTER_API_KEY": TEST_API_KEY, "OPENROUTER_TIMEOUT": ""}
        )
        assert config.default_timeout == 60.0

    def test_overrides_win(self):
        """Test keyword overrides take precedence."""
        config = ServiceConfig.from_env(
            {"OPENROUTER_API_KEY": TEST_API_KEY, "OPENROUTER_RETRY_ATTEMPTS": "5"},
            retry_attempts=0,
        )
        assert config.retry_attempts == 0

    def test_missing_key(self):
        """Test a missing key is a validation error."""
        with pytest.raises(ValidationError):
            ServiceConfig.from_env({})

    def test_invalid_value(self):
        """Test unparsable values are reported."""
        with pytest.raises(ValidationError):
            ServiceConfig.from_env(
                {"OPENROUTER_API_KEY": TEST_API_KEY, "OPENROUTER_TIMEOUT": "soon"}
            )


class TestAppConfig:
    """Tests for AppConfig and GenerationConfig."""

    def test_defaults(self):
        """Test mock mode needs no adapter configuration."""
        config = AppConfig()
        assert config.openrouter is None
        assert config.generation == GenerationConfig()
        assert config.generation.use_mock_ai is True
        assert config.generation.plan_limit == 10
        assert config.generation.plan_window == 3600.0

    def test_live_mode_requires_openrouter(self):
        """Test live generation without adapter configuration is rejected."""
        with pytest.raises(ValidationError, match="openrouter"):
            AppConfig(generation=GenerationConfig(use_mock_ai=False))

    def test_live_mode(self):
        """Test live generation with adapter configuration."""
        config = AppConfig(
            openrouter=ServiceConfig(api_key=TEST_API_KEY),
            generation=GenerationConfig(use_mock_ai=False),
        )
        assert config.generation.use_mock_ai is False
