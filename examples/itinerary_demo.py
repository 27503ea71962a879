#!/usr/bin/env python3
"""Demonstration of the VibeTravels itinerary engine.

Runs the offline mock generator, prints the request that would be sent to
OpenRouter, and, when OPENROUTER_API_KEY is set, makes one live call.
"""

import asyncio
import json
import os
from datetime import date, timedelta

from vibetravels.adapters import ChatServiceError, OpenRouterAdapter
from vibetravels.config import ServiceConfig
from vibetravels.itinerary import (
    ITINERARY_SCHEMA,
    ItineraryGenerationError,
    ItineraryGenerator,
    PlanRequest,
    build_itinerary_messages,
    generate_plan_name,
    summarize_itinerary,
)


def build_plan() -> PlanRequest:
    start = date.today() + timedelta(days=21)
    return PlanRequest(
        destination_text="Lisbon, Portugal",
        date_start=start,
        date_end=start + timedelta(days=2),
        people_count=2,
        comfort="relax",
        note_text="Seafood, viewpoints and a day trip to Sintra",
    )


def print_itinerary(plan, itinerary):
    print(f"📍 {generate_plan_name(plan.destination_text, plan.date_start, plan.date_end)}")
    for day, summary in zip(itinerary.days, summarize_itinerary(itinerary, plan.date_start)):
        print(f"\nDay {day.day_index} ({summary.day_date}), {summary.total_duration_minutes} min")
        for block in summary.blocks:
            for activity in day.activities.block(block.block_type):
                print(f"  {block.block_type.value:<10} {activity.title}")
        for warning in summary.warnings:
            print(f"  ⚠️  {warning}")


async def demo_mock(plan):
    """Generate an itinerary without calling the API."""
    print("=== Mock Generation Demo ===\n")
    itinerary = await ItineraryGenerator(use_mock=True, mock_delay=0).generate(plan)
    print_itinerary(plan, itinerary)
    print()


def demo_request_payload(plan):
    """Show the request body sent to OpenRouter (no network access)."""
    print("=== Request Payload Demo ===\n")
    adapter = OpenRouterAdapter(ServiceConfig(api_key="demo-key-not-used"))
    payload = adapter.build_request_payload(build_itinerary_messages(plan), ITINERARY_SCHEMA)
    payload["messages"] = [
        {**m, "content": m["content"][:60] + "..."} for m in payload["messages"]
    ]
    print(json.dumps(payload, indent=2, ensure_ascii=False)[:1500])
    print()


async def demo_live(plan):
    """Make one real call when an API key is available."""
    print("=== Live Generation Demo ===\n")
    if not os.getenv("OPENROUTER_API_KEY"):
        print("ℹ️  OPENROUTER_API_KEY not set, skipping live call\n")
        return

    async with OpenRouterAdapter(ServiceConfig.from_env(logging_enabled=True)) as adapter:
        status = await adapter.test_connection()
        print(f"Connection: {'✅' if status.success else '❌'} ({status.latency:.2f}s)")
        if not status.success:
            return
        try:
            itinerary = await ItineraryGenerator(adapter=adapter, use_mock=False).generate(plan)
        except ItineraryGenerationError as e:
            if isinstance(e.cause, ChatServiceError):
                print(f"❌ {e.cause.code.value}: {e.cause.message}")
            else:
                print(f"❌ {e}")
            return
        print_itinerary(plan, itinerary)
        print(f"\n📊 {await adapter.get_usage_stats()}")


async def main():
    plan = build_plan()
    await demo_mock(plan)
    demo_request_payload(plan)
    await demo_live(plan)


if __name__ == "__main__":
    asyncio.run(main())
