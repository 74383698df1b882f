"""
HTTP session lifecycle for upstream API access.

Every report run owns exactly one aiohttp ClientSession, opened at the start
of the run and closed when the run ends (successfully or not). Requests made
through the session are strictly sequential; the session is never shared
between runs.

Usage:
    async with upstream_session() as session:
        token = await authenticate(session)
        ...
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import aiohttp

from opsreport.core.config import Settings, get_settings

logger = logging.getLogger(__name__)


def build_timeout(settings: Optional[Settings] = None) -> aiohttp.ClientTimeout:
    """Total-request timeout taken from settings."""
    settings = settings or get_settings()
    return aiohttp.ClientTimeout(total=settings.http_timeout_seconds)


@asynccontextmanager
async def upstream_session(
    settings: Optional[Settings] = None,
) -> AsyncIterator[aiohttp.ClientSession]:
    """
    Open an aiohttp session for the duration of one report run.

    The session is closed on every exit path, including errors raised by the
    caller inside the ``async with`` block.

    Args:
        settings: Optional settings override (defaults to get_settings()).

    Yields:
        aiohttp.ClientSession configured with the upstream timeout.
    """
    session = aiohttp.ClientSession(timeout=build_timeout(settings))
    try:
        yield session
    finally:
        await session.close()
        logger.debug("Upstream HTTP session closed")
