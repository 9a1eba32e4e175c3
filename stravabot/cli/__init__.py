"""Strava dedup bot CLI package.

Usage:
    python -m stravabot.cli run
    python -m stravabot.cli validate --config config/stravabot.yaml
    python -m stravabot.cli schedule start
"""

import typer

from stravabot.cli.run import run_command
from stravabot.cli.validate import validate_command
from stravabot.cli.schedule import schedule_app

app = typer.Typer(help="Hide duplicate indoor ride activities on Strava")

app.command(name="run")(run_command)
app.command(name="validate")(validate_command)
app.add_typer(schedule_app, name="schedule")

__all__ = [
    "app",
    "run_command",
    "validate_command",
    "schedule_app",
]
