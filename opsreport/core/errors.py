"""
Exception taxonomy for the operations reporting service.

Propagation rules:
- InvalidRangeError, AuthenticationError, UpstreamRequestError: fatal to the
  run that raised them. The run reports the failure and produces no report.
- TicketFeedError: recovered inside the ticket scanner. Urgent tickets are a
  supplementary signal and never abort a run.
- NotificationChannelError: recovered at the run level. The failure is
  reported and the other channel is still attempted.
"""

from typing import Optional


class ReportError(Exception):
    """Base class for all errors raised by the reporting pipeline."""


class InvalidRangeError(ReportError, ValueError):
    """Malformed date string or a range whose start is after its end."""


class AuthenticationError(ReportError):
    """The search API rejected the login request."""

    def __init__(self, status: int):
        self.status = status
        super().__init__(f"Authentication failed with status {status}")


class UpstreamRequestError(ReportError):
    """A search or claims page request returned a non-success status."""

    def __init__(self, status: int, endpoint: Optional[str] = None):
        self.status = status
        self.endpoint = endpoint
        where = f" for {endpoint}" if endpoint else ""
        super().__init__(f"Upstream request failed{where}: {status}")


class TicketFeedError(ReportError):
    """The ticket feed returned a non-success status."""

    def __init__(self, status: int):
        self.status = status
        super().__init__(f"Ticket feed request failed: {status}")


class NotificationChannelError(ReportError):
    """Delivery through one notification channel failed."""

    def __init__(self, channel: str, message: str):
        self.channel = channel
        super().__init__(f"[{channel}] {message}")


class MessagingStartupTimeout(NotificationChannelError):
    """The messaging session never reached a ready state."""

    def __init__(self, timeout_seconds: float):
        self.timeout_seconds = timeout_seconds
        super().__init__(
            'messaging',
            f"Session not ready after {timeout_seconds:.0f} seconds",
        )
