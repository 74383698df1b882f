"""
Core infrastructure package for the reporting service.

Provides:
- Configuration management via pydantic-settings
- The exception taxonomy shared by services and jobs
- Upstream HTTP session lifecycle via aiohttp

This module re-exports key components from submodules for convenient importing:

    from opsreport.core import get_settings, UpstreamRequestError
"""

from opsreport.core.config import Settings, get_settings
from opsreport.core.errors import (
    ReportError,
    InvalidRangeError,
    AuthenticationError,
    UpstreamRequestError,
    TicketFeedError,
    NotificationChannelError,
    MessagingStartupTimeout,
)
from opsreport.core.http import upstream_session

__all__ = [
    # Configuration management (from config.py)
    'Settings',
    'get_settings',
    # Error taxonomy (from errors.py)
    'ReportError',
    'InvalidRangeError',
    'AuthenticationError',
    'UpstreamRequestError',
    'TicketFeedError',
    'NotificationChannelError',
    'MessagingStartupTimeout',
    # HTTP session lifecycle (from http.py)
    'upstream_session',
]
