"""Run command: execute a single cleanup cycle now."""

import asyncio
from pathlib import Path

import typer

from stravabot.cli.utils import (
    DEFAULT_CONFIG_PATH,
    display_error,
    display_info,
    display_success,
    handle_errors,
    load_config,
)
from stravabot.models.activity import CleanupResult
from stravabot.observability.context import correlation_id_context, new_correlation_id
from stravabot.orchestration.bot import StravaBot
from stravabot.utils.exceptions import CycleAbortedError


def print_summary(result: CleanupResult) -> None:
    if not result.hidden:
        display_info("No duplicate indoor rides found.")
        return

    display_success(f"Hidden {len(result.hidden)} duplicate indoor ride(s):")
    for match in result.matches:
        indoor = match.indoor_activity
        virtual = match.virtual_ride
        typer.echo(
            f"  - {indoor.id} '{indoor.name}' ({indoor.start_date}) "
            f"duplicates {virtual.id} '{virtual.name}' ({virtual.start_date})"
        )


@handle_errors
def run_command(
    config_path: Path = typer.Option(
        DEFAULT_CONFIG_PATH,
        "--config",
        "-c",
        help="Path to optional bot config YAML",
    ),
):
    """Run one duplicate cleanup cycle immediately."""
    config = load_config(config_path)
    bot = StravaBot.from_config(config)

    try:
        with correlation_id_context(new_correlation_id("run")):
            result = asyncio.run(bot.run_cycle())
    except CycleAbortedError as e:
        display_error(f"Cycle failed: {e}")
        if e.partial_result.hidden:
            print_summary(e.partial_result)
        raise typer.Exit(code=1)

    print_summary(result)
