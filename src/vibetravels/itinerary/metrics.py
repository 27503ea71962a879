"""Plan naming and per-block workload metrics."""

from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Optional, Sequence

from .models import BlockType, Itinerary, ItineraryActivity

# Minutes above which a block is flagged as packed
BLOCK_WARNING_THRESHOLDS: Dict[BlockType, int] = {
    BlockType.MORNING: 240,
    BlockType.AFTERNOON: 300,
    BlockType.EVENING: 240,
}


@dataclass
class BlockMetrics:
    block_type: BlockType
    total_duration_minutes: int
    warning: Optional[str] = None


@dataclass
class DaySummary:
    day_index: int
    day_date: date
    blocks: List[BlockMetrics]

    @property
    def total_duration_minutes(self) -> int:
        return sum(block.total_duration_minutes for block in self.blocks)

    @property
    def warnings(self) -> List[str]:
        return [block.warning for block in self.blocks if block.warning]


def generate_plan_name(destination: str, date_start: date, date_end: date) -> str:
    """Automatic plan name, e.g. ``"Kraków, Poland, 2025-06-15 – 2025-06-20"``."""
    return f"{destination}, {date_start.isoformat()} – {date_end.isoformat()}"


def calculate_trip_length_days(date_start: date, date_end: date) -> int:
    """Number of days in the trip, inclusive of both ends."""
    return (date_end - date_start).days + 1


def calculate_block_metrics(
    activities: Sequence[ItineraryActivity], block_type: BlockType
) -> BlockMetrics:
    """Total time for a block, with a warning when it exceeds its threshold."""
    block_type = BlockType(block_type)
    total = sum(
        activity.duration_minutes + (activity.transport_minutes or 0)
        for activity in activities
    )

    warning = None
    if total > BLOCK_WARNING_THRESHOLDS[block_type]:
        hours = round(total / 60, 1)
        warning = (
            f"This {block_type.value} block is quite packed ({hours:g} hours). "
            f"Consider spacing activities."
        )

    return BlockMetrics(block_type=block_type, total_duration_minutes=total, warning=warning)


def summarize_itinerary(itinerary: Itinerary, date_start: date) -> List[DaySummary]:
    """Per-day block metrics with calendar dates assigned from ``date_start``."""
    summaries = []
    for offset, day in enumerate(itinerary.days):
        blocks = [
            calculate_block_metrics(day.activities.block(block_type), block_type)
            for block_type in BlockType
        ]
        summaries.append(
            DaySummary(
                day_index=day.day_index,
                day_date=date.fromordinal(date_start.toordinal() + offset),
                blocks=blocks,
            )
        )
    return summaries
