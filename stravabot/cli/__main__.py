"""CLI entry point.

Allows running the CLI as a module: python -m stravabot.cli
"""

from stravabot.cli import app

if __name__ == "__main__":
    app()
