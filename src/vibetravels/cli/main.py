import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

import click
import yaml
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table

from .. import __version__
from ..adapters.openrouter import OpenRouterAdapter
from ..adapters.schema_utils import build_response_format, to_strict_json_schema
from ..config import AppConfig, EnvironmentSubstitutionError, load_app_config
from ..itinerary import (
    ITINERARY_SCHEMA,
    Itinerary,
    ItineraryGenerationError,
    ItineraryGenerator,
    PlanRequest,
    generate_plan_name,
    summarize_itinerary,
)
from ..services import RateLimitExceeded

console = Console()


def display_itinerary(plan: PlanRequest, itinerary: Itinerary) -> None:
    """Print an itinerary as one table per day."""
    name = generate_plan_name(plan.destination_text, plan.date_start, plan.date_end)
    console.print(f"\n[bold magenta]{name}[/bold magenta]\n")

    summaries = summarize_itinerary(itinerary, plan.date_start)
    for day, summary in zip(itinerary.days, summaries):
        table = Table(title=f"Day {day.day_index} ({summary.day_date.isoformat()})")
        table.add_column("Block", style="cyan")
        table.add_column("Activity", style="white")
        table.add_column("Duration", justify="right", style="green")
        table.add_column("Transport", justify="right", style="blue")

        for block in summary.blocks:
            for activity in day.activities.block(block.block_type):
                transport = (
                    f"{activity.transport_minutes} min"
                    if activity.transport_minutes is not None
                    else "-"
                )
                table.add_row(
                    block.block_type.value,
                    activity.title,
                    f"{activity.duration_minutes} min",
                    transport,
                )

        console.print(table)
        for warning in summary.warnings:
            console.print(f"[yellow]⚠️  {warning}[/yellow]")


def _load_plan(path: Path) -> PlanRequest:
    with open(path, "r", encoding="utf-8") as f:
        if path.suffix.lower() == ".json":
            data = json.load(f)
        else:
            data = yaml.safe_load(f)
    return PlanRequest.model_validate(data or {})


def _load_config(ctx: click.Context) -> AppConfig:
    try:
        return load_app_config(ctx.obj.get("config_path"))
    except (ValidationError, EnvironmentSubstitutionError, FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Configuration error:[/bold red] {escape(str(e))}")
        ctx.exit(2)


@click.group()
@click.version_option(__version__, prog_name="vibetravels")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML configuration file",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def vibetravels(ctx: click.Context, config_path: Optional[Path], verbose: bool) -> None:
    """VibeTravels - AI travel itinerary generation."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


@vibetravels.command()
@click.argument("plan_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--mock/--live",
    "use_mock",
    default=None,
    help="Force the offline mock generator or the OpenRouter API",
)
@click.option("--output", "-o", type=click.Path(path_type=Path), help="Write itinerary JSON here")
@click.option("--user", "user_id", help="User id checked against the generation limit")
@click.pass_context
def generate(
    ctx: click.Context,
    plan_file: Path,
    use_mock: Optional[bool],
    output: Optional[Path],
    user_id: Optional[str],
) -> None:
    """Generate an itinerary for the trip described in PLAN_FILE (YAML or JSON)."""
    try:
        plan = _load_plan(plan_file)
    except (ValidationError, yaml.YAMLError, json.JSONDecodeError) as e:
        console.print(f"[bold red]Invalid plan file {plan_file}:[/bold red] {escape(str(e))}")
        ctx.exit(2)

    config = _load_config(ctx)
    mock = config.generation.use_mock_ai if use_mock is None else use_mock
    if not mock and config.openrouter is None:
        console.print(
            "[bold red]Error:[/bold red] OPENROUTER_API_KEY is required for --live"
        )
        ctx.exit(2)

    async def _run() -> Itinerary:
        if mock:
            generator = ItineraryGenerator.from_config(config, use_mock=True)
            return await generator.generate(plan, user_id=user_id)
        async with OpenRouterAdapter(config.openrouter) as adapter:
            generator = ItineraryGenerator.from_config(config, adapter=adapter, use_mock=False)
            return await generator.generate(plan, user_id=user_id)

    source = "mock generator" if mock else "OpenRouter"
    console.print(
        f"[bold blue]Generating {plan.trip_length_days}-day itinerary for "
        f"{plan.destination_text} via {source}...[/bold blue]"
    )

    try:
        itinerary = asyncio.run(_run())
    except ItineraryGenerationError as e:
        code = e.code.value if e.code else "GENERATION_ERROR"
        console.print(f"[bold red]Error ({code}):[/bold red] {escape(str(e))}")
        ctx.exit(1)
    except RateLimitExceeded as e:
        console.print(f"[bold red]Error (RATE_LIMIT_EXCEEDED):[/bold red] {e}")
        ctx.exit(1)

    display_itinerary(plan, itinerary)

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        with open(output, "w", encoding="utf-8") as f:
            json.dump(itinerary.model_dump(mode="json"), f, indent=2, ensure_ascii=False)
        console.print(f"\n[green]✓ Itinerary saved to {output}[/green]")


@vibetravels.command(name="test-connection")
@click.pass_context
def test_connection(ctx: click.Context) -> None:
    """Check OpenRouter connectivity and authentication."""
    config = _load_config(ctx)
    if config.openrouter is None:
        console.print("[bold red]Error:[/bold red] OPENROUTER_API_KEY is not set")
        ctx.exit(2)

    async def _run():
        async with OpenRouterAdapter(config.openrouter) as adapter:
            return await adapter.test_connection()

    status = asyncio.run(_run())
    latency_ms = status.latency * 1000
    if status.success:
        console.print(f"[green]✓ Connected to {config.openrouter.base_url}[/green] ({latency_ms:.0f} ms)")
    else:
        console.print(f"[bold red]✗ Connection failed[/bold red] ({latency_ms:.0f} ms)")
        ctx.exit(1)


@vibetravels.command()
def schema() -> None:
    """Print the structured-output schema sent with itinerary requests."""
    response_format = build_response_format(
        to_strict_json_schema(ITINERARY_SCHEMA.model),
        ITINERARY_SCHEMA.name,
        ITINERARY_SCHEMA.description,
    )
    content = json.dumps(response_format, indent=2)
    console.print(Syntax(content, "json", theme="monokai", line_numbers=False))


if __name__ == "__main__":
    vibetravels()
