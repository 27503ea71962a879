"""Offline itinerary generator for development and tests."""

import random
from typing import Dict, List, Optional

from .models import (
    BlockType,
    ComfortLevel,
    DayActivities,
    Itinerary,
    ItineraryActivity,
    ItineraryDay,
    PlanRequest,
)

ACTIVITY_POOL: Dict[ComfortLevel, Dict[BlockType, List[str]]] = {
    ComfortLevel.RELAX: {
        BlockType.MORNING: [
            "Leisurely breakfast at hotel",
            "Morning walk in the park",
            "Visit local café",
            "Gentle sightseeing tour",
        ],
        BlockType.AFTERNOON: [
            "Lunch at scenic restaurant",
            "Visit museum at own pace",
            "Shopping in local markets",
            "Relax at spa",
        ],
        BlockType.EVENING: [
            "Sunset viewing",
            "Dinner at recommended restaurant",
            "Evening stroll",
            "Local cultural show",
        ],
    },
    ComfortLevel.BALANCED: {
        BlockType.MORNING: [
            "Breakfast and city exploration",
            "Guided walking tour",
            "Visit main attractions",
            "Local market tour",
        ],
        BlockType.AFTERNOON: [
            "Lunch at traditional restaurant",
            "Museum or gallery visit",
            "Afternoon activity or workshop",
            "Explore neighborhood",
        ],
        BlockType.EVENING: [
            "Dinner at popular restaurant",
            "Evening entertainment",
            "Night market visit",
            "Local nightlife experience",
        ],
    },
    ComfortLevel.INTENSE: {
        BlockType.MORNING: [
            "Early start with breakfast",
            "Full morning tour",
            "Adventure activity",
            "Multiple attraction visits",
        ],
        BlockType.AFTERNOON: [
            "Quick lunch break",
            "Afternoon adventures",
            "Active exploration",
            "Sports or outdoor activity",
        ],
        BlockType.EVENING: [
            "Dinner on the go",
            "Evening activities",
            "Nightlife exploration",
            "Late-night sightseeing",
        ],
    },
}

# (min duration, duration spread, min transport, transport spread) in minutes
_BLOCK_TIMINGS = {
    BlockType.MORNING: (120, 60, 5, 20),
    BlockType.AFTERNOON: (90, 90, 5, 25),
    BlockType.EVENING: (90, 60, 5, 20),
}


def generate_mock_itinerary(
    plan: PlanRequest, rng: Optional[random.Random] = None
) -> Itinerary:
    """Generate a plausible itinerary without calling the API.

    One activity per block, cycling through the pool for the plan's comfort
    level. The destination is prefixed to the first morning activity.

    Args:
        plan: Trip parameters
        rng: Random source; pass a seeded instance for reproducible output

    Returns:
        Itinerary with one day per trip day
    """
    rng = rng or random.Random()
    pool = ACTIVITY_POOL.get(plan.comfort, ACTIVITY_POOL[ComfortLevel.BALANCED])

    days = []
    for i in range(plan.trip_length_days):
        day_index = i + 1
        blocks = {}
        for block_type in BlockType:
            titles = pool[block_type]
            title = titles[i % len(titles)]
            if day_index == 1 and block_type == BlockType.MORNING:
                title = f"{plan.destination_text} - {title}"

            base, spread, transport_base, transport_spread = _BLOCK_TIMINGS[block_type]
            if day_index == 1 and block_type == BlockType.MORNING:
                transport = 15
            else:
                transport = transport_base + rng.randrange(transport_spread)

            blocks[block_type.value] = [
                ItineraryActivity(
                    title=title,
                    duration_minutes=base + rng.randrange(spread),
                    transport_minutes=transport,
                )
            ]

        days.append(ItineraryDay(day_index=day_index, activities=DayActivities(**blocks)))

    return Itinerary(days=days)
