"""Bot orchestration.

Usage:
    from stravabot.orchestration import StravaBot

    bot = StravaBot.from_config(config)
    result = await bot.run_cycle()
"""

from stravabot.orchestration.bot import StravaBot

__all__ = ["StravaBot"]
