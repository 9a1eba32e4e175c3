"""Validate command for configuration."""

from pathlib import Path

import typer

from stravabot.cli.utils import DEFAULT_CONFIG_PATH, handle_errors, display_success, display_error
from stravabot.services.config_manager import ConfigManager, ConfigValidationError


@handle_errors
def validate_command(
    config_path: Path = typer.Option(
        DEFAULT_CONFIG_PATH, "--config", "-c", help="Config file to validate"
    ),
):
    """Validate configuration file and required environment variables."""
    try:
        config = ConfigManager(config_path=str(config_path)).load_config()
    except ConfigValidationError as e:
        display_error(f"Validation failed: {e}")
        raise typer.Exit(code=1)

    display_success("Configuration is valid!")
    typer.echo(f"  Client ID: {config.strava.client_id}")
    typer.echo(f"  Schedule: minute={config.settings.schedule_minute}")
    typer.echo(f"  Page size: {config.settings.page_size}")
