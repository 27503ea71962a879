"""Prompt construction for itinerary generation."""

from typing import List

from ..adapters.base import ChatMessage, ResponseSchemaSpec
from .models import Itinerary, PlanRequest

ITINERARY_SCHEMA = ResponseSchemaSpec(
    name="travel_itinerary",
    description="Day-by-day travel itinerary with morning, afternoon and evening activities",
    model=Itinerary,
)

SYSTEM_PROMPT = (
    "You are an expert travel planning assistant. Create detailed, realistic "
    "travel itineraries based on user preferences. Return responses in valid "
    "JSON format only."
)

_COMFORT_HINT = (
    "relax=leisurely pace, balanced=moderate pace, intense=packed schedule"
)

_GUIDELINES = """Guidelines:
- Each block should have 1-3 activities
- duration_minutes: 60-180 for main activities
- transport_minutes: 5-30 for travel between locations (null if walking distance)
- Consider the comfort level when scheduling activities
- Match budget level with activity choices
- Include specific, actionable activities (not generic descriptions)"""


def build_user_prompt(plan: PlanRequest) -> str:
    """Describe the trip for the model."""
    day_count = plan.trip_length_days
    travellers = "person" if plan.people_count == 1 else "people"

    if plan.transport_modes:
        transport = "Preferred transport: " + ", ".join(
            mode.value for mode in plan.transport_modes
        )
    else:
        transport = "Transport: flexible (choose best options)"

    notes = plan.note_text.strip() or "none"

    return f"""Create a detailed {day_count}-day travel itinerary for {plan.destination_text}.

Trip Details:
- Dates: {plan.date_start.isoformat()} to {plan.date_end.isoformat()}
- Travelers: {plan.people_count} {travellers}
- Trip Type: {plan.trip_type.value}
- Comfort Level: {plan.comfort.value} ({_COMFORT_HINT})
- Budget: {plan.budget.value}
- {transport}

User Notes: {notes}

Create an itinerary with activities for morning, afternoon, and evening for each day.
Number the days with day_index starting at 1 and return exactly {day_count} days.

{_GUIDELINES}"""


def build_itinerary_messages(plan: PlanRequest) -> List[ChatMessage]:
    """System and user messages requesting an itinerary for ``plan``."""
    return [
        ChatMessage.system(SYSTEM_PROMPT),
        ChatMessage.user(build_user_prompt(plan)),
    ]
