"""structlog setup.

Each log line carries the level, a UTC timestamp, the emitting function and
line, and the correlation id of the cycle that produced it. Production runs
render JSON to stderr; ``json_logs: false`` switches to the console renderer.
"""

import logging
import sys
from typing import Any, List

import structlog
from structlog.typing import EventDict, WrappedLogger

from stravabot.observability.context import get_correlation_id

NO_CORRELATION_ID = "none"


def add_correlation_id_processor(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    event_dict["correlation_id"] = get_correlation_id() or NO_CORRELATION_ID
    return event_dict


def _resolve_level(level: str) -> int:
    numeric = logging.getLevelName(level.upper())
    # getLevelName returns "Level X" for names it does not know
    return numeric if isinstance(numeric, int) else logging.INFO


def _build_processors(json_output: bool, add_timestamp: bool) -> List[Any]:
    processors: List[Any] = [
        structlog.contextvars.merge_contextvars,
        add_correlation_id_processor,
        structlog.processors.add_log_level,
    ]
    if add_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso", utc=True))
    processors += [
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FUNC_NAME,
                structlog.processors.CallsiteParameter.LINENO,
            ]
        ),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
    ]
    return processors


def configure_logging(
    level: str = "INFO",
    json_output: bool = True,
    add_timestamp: bool = True,
) -> None:
    """Apply BotSettings.log_level / json_logs to structlog.

    An unknown level name falls back to INFO.
    """
    structlog.configure(
        processors=_build_processors(json_output, add_timestamp),
        wrapper_class=structlog.make_filtering_bound_logger(_resolve_level(level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )
