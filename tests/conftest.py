"""Shared pytest fixtures and configuration."""

from pydantic import BaseModel
from pytest import fixture

from vibetravels.adapters import OpenRouterAdapter, ResponseSchemaSpec
from vibetravels.config import ServiceConfig

from .factories.provider_factory import PlanFactory, ProviderFactory

TEST_API_KEY = "sk-or-test-key-1234"


class Destination(BaseModel):
    """Small response model used across adapter tests."""

    city: str
    country: str
    highlights: list[str]


@fixture
def service_config() -> ServiceConfig:
    """Configuration with instant retries so retry tests stay fast."""
    return ServiceConfig(api_key=TEST_API_KEY, retry_attempts=2, retry_delay=0.0)


@fixture
async def adapter(service_config):
    """Adapter with an open session, closed after the test."""
    async with OpenRouterAdapter(service_config) as adapter:
        yield adapter


@fixture
def destination_schema() -> ResponseSchemaSpec:
    return ResponseSchemaSpec(
        name="destination",
        description="A destination with highlights",
        model=Destination,
    )


@fixture
def destination_content() -> dict:
    return {"city": "Lisbon", "country": "Portugal", "highlights": ["Alfama", "Belém"]}


@fixture
def provider_factory():
    """Provide ProviderFactory for fake envelopes and responses."""
    return ProviderFactory


@fixture
def plan_factory():
    """Provide PlanFactory for valid trip requests."""
    return PlanFactory
