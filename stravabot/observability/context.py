"""Correlation ids for tracing one cleanup cycle through the logs.

The id lives in a ContextVar, so it follows the cycle across awaits and
never leaks into a concurrently running task.
"""

import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Iterator, Optional

_correlation_id: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)


def get_correlation_id() -> Optional[str]:
    return _correlation_id.get()


def new_correlation_id(prefix: Optional[str] = None) -> str:
    """``<prefix>-YYYYmmdd-HHMMSS`` in UTC, or a random UUID without a prefix"""
    if prefix is None:
        return str(uuid.uuid4())
    return f"{prefix}-{datetime.now(timezone.utc).strftime('%Y%m%d-%H%M%S')}"


@contextmanager
def correlation_id_context(corr_id: Optional[str] = None) -> Iterator[str]:
    """Bind a correlation id for the duration of the block.

    The previous id (usually none) is restored on exit, even when the
    block raises.
    """
    corr_id = corr_id or new_correlation_id()
    token = _correlation_id.set(corr_id)
    try:
        yield corr_id
    finally:
        _correlation_id.reset(token)
