"""Itinerary domain: trip requests, prompts, generation and metrics."""

from .generator import ItineraryGenerationError, ItineraryGenerator
from .metrics import (
    calculate_block_metrics,
    calculate_trip_length_days,
    generate_plan_name,
    summarize_itinerary,
)
from .mock import generate_mock_itinerary
from .models import (
    BlockType,
    BudgetLevel,
    ComfortLevel,
    Itinerary,
    PlanRequest,
    TransportMode,
    TripType,
)
from .prompts import ITINERARY_SCHEMA, build_itinerary_messages

__all__ = [
    "BlockType",
    "BudgetLevel",
    "ComfortLevel",
    "ITINERARY_SCHEMA",
    "Itinerary",
    "ItineraryGenerationError",
    "ItineraryGenerator",
    "PlanRequest",
    "TransportMode",
    "TripType",
    "build_itinerary_messages",
    "calculate_block_metrics",
    "calculate_trip_length_days",
    "generate_mock_itinerary",
    "generate_plan_name",
    "summarize_itinerary",
]
