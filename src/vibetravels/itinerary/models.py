"""Trip request and itinerary models."""

from datetime import date
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, ValidationInfo, field_validator, model_validator

MAX_TRIP_DAYS = 30


class TripType(str, Enum):
    LEISURE = "leisure"
    BUSINESS = "business"


class ComfortLevel(str, Enum):
    RELAX = "relax"
    BALANCED = "balanced"
    INTENSE = "intense"


class BudgetLevel(str, Enum):
    BUDGET = "budget"
    MODERATE = "moderate"
    LUXURY = "luxury"


class TransportMode(str, Enum):
    CAR = "car"
    WALK = "walk"
    PUBLIC = "public"


class BlockType(str, Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"


class PlanRequest(BaseModel):
    """Parameters for generating a travel plan.

    The start date may not lie in the past unless validated with
    ``context={"allow_past": True}`` (used when regenerating old plans).
    """

    destination_text: str = Field(..., min_length=1, max_length=160)
    date_start: date
    date_end: date
    note_text: str = Field(default="", max_length=20000)
    people_count: int = Field(default=1, ge=1, le=20)
    trip_type: TripType = TripType.LEISURE
    comfort: ComfortLevel = ComfortLevel.BALANCED
    budget: BudgetLevel = BudgetLevel.MODERATE
    transport_modes: Optional[List[TransportMode]] = None

    @field_validator("destination_text")
    @classmethod
    def strip_destination(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Destination cannot be blank")
        return value

    @field_validator("date_start")
    @classmethod
    def validate_not_past(cls, value: date, info: ValidationInfo) -> date:
        context = info.context or {}
        if not context.get("allow_past") and value < date.today():
            raise ValueError("Start date cannot be in the past")
        return value

    @model_validator(mode="after")
    def validate_date_range(self) -> "PlanRequest":
        if self.date_end < self.date_start:
            raise ValueError("End date must be equal to or after start date")
        if (self.date_end - self.date_start).days > MAX_TRIP_DAYS:
            raise ValueError(f"Trip duration cannot exceed {MAX_TRIP_DAYS} days")
        return self

    @property
    def trip_length_days(self) -> int:
        """Number of days in the trip, inclusive."""
        return (self.date_end - self.date_start).days + 1


class ItineraryActivity(BaseModel):
    """Single activity in a time block."""

    title: str = Field(..., min_length=1)
    duration_minutes: int = Field(..., ge=5, le=720)
    transport_minutes: Optional[int] = Field(..., ge=0, le=720)


class DayActivities(BaseModel):
    """Activities grouped by time of day."""

    morning: List[ItineraryActivity]
    afternoon: List[ItineraryActivity]
    evening: List[ItineraryActivity]

    def block(self, block_type: BlockType) -> List[ItineraryActivity]:
        return getattr(self, BlockType(block_type).value)


class ItineraryDay(BaseModel):
    day_index: int = Field(..., ge=1)
    activities: DayActivities


class Itinerary(BaseModel):
    """AI-generated itinerary: one entry per trip day."""

    days: List[ItineraryDay] = Field(..., min_length=1)

    @model_validator(mode="after")
    def validate_day_order(self) -> "Itinerary":
        indexes = [day.day_index for day in self.days]
        if indexes != list(range(1, len(indexes) + 1)):
            raise ValueError(
                f"day_index values must run 1..{len(indexes)} in order, got {indexes}"
            )
        return self
