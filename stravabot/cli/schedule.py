"""Schedule commands for the cleanup daemon."""

import asyncio
from pathlib import Path
from typing import Optional

import typer

from stravabot.cli.utils import DEFAULT_CONFIG_PATH, display_warning, load_config, logger

schedule_app = typer.Typer(help="Run the cleanup scheduler")


@schedule_app.command(name="start")
def schedule_start(
    config_path: Path = typer.Option(
        DEFAULT_CONFIG_PATH,
        "--config",
        "-c",
        help="Path to optional bot config YAML",
    ),
    health_port: Optional[int] = typer.Option(
        None, "--health-port", "-p", help="Port for health server (overrides config)"
    ),
    enable_health: bool = typer.Option(
        True, "--health/--no-health", help="Serve health and metrics endpoints"
    ),
):
    """Start the scheduler daemon.

    Runs a cleanup cycle every 15 minutes (at :00, :15, :30, :45 by default).
    Press Ctrl+C to stop gracefully.
    """
    config = load_config(config_path)
    if health_port is not None:
        config.settings.health_port = health_port
    if not enable_health:
        config.settings.enable_health_server = False

    try:
        asyncio.run(_run_scheduler(config))
    except KeyboardInterrupt:
        display_warning("\nScheduler stopped.")
    except Exception as e:
        logger.exception("scheduler_failed")
        typer.secho(f"Scheduler failed: {e}", fg=typer.colors.RED)
        raise typer.Exit(code=1)


async def _run_scheduler(config) -> None:
    """Run the scheduler with the optional health server."""
    from stravabot.health import HealthChecker, set_health_checker
    from stravabot.health.server import run_health_server_async
    from stravabot.orchestration import StravaBot
    from stravabot.scheduling import BotScheduler, DuplicateCleanupJob

    settings = config.settings

    typer.secho("Starting Strava duplicate cleanup bot", fg=typer.colors.CYAN, bold=True)
    typer.echo(f"  Schedule: minute={settings.schedule_minute} ({settings.timezone})")
    if settings.enable_health_server:
        typer.echo(f"  Health endpoint: http://localhost:{settings.health_port}/health")
        typer.echo(f"  Metrics endpoint: http://localhost:{settings.health_port}/metrics")
    typer.echo("\nPress Ctrl+C to stop.\n")

    bot = StravaBot.from_config(config)
    scheduler = BotScheduler(timezone=settings.timezone)
    scheduler.schedule_cleanup(DuplicateCleanupJob(bot), minute=settings.schedule_minute)

    if not settings.enable_health_server:
        await scheduler.start()
        return

    set_health_checker(HealthChecker(bot=bot, scheduler=scheduler))
    await asyncio.gather(
        run_health_server_async(host=settings.health_host, port=settings.health_port),
        scheduler.start(),
    )
