"""
Upstream API clients.

Two upstreams feed the reports:
- The search API (SGCOR): token login, then paginated POST searches for
  production and claims. Pages are 1-based (`?page=N`).
- The ticket feed (SULTS): GET with a raw token, paginated by `start`
  (0-based page index) and `limit`, filtered by `abertoStart`.

Clients only perform single requests and translate non-success statuses into
the error taxonomy. Pagination, delays and filtering live in the services
that use them.
"""

import logging
from typing import Any, Dict, Optional

import aiohttp

from opsreport.core.config import Settings, get_settings
from opsreport.core.errors import AuthenticationError, TicketFeedError, UpstreamRequestError
from opsreport.models.schemas import SearchPage, TicketPage

logger = logging.getLogger(__name__)


def _is_success(status: int) -> bool:
    return 200 <= status < 300


async def authenticate(
    session: aiohttp.ClientSession,
    settings: Optional[Settings] = None,
) -> str:
    """
    Log into the search API and return the bearer token.

    Args:
        session: Open upstream session.
        settings: Optional settings override.

    Returns:
        str: Token found at `data.token` of the login response.

    Raises:
        AuthenticationError: If the login is rejected or carries no token.
    """
    settings = settings or get_settings()
    payload = {
        'email': settings.sgcor_username,
        'senha': settings.sgcor_password,
    }
    async with session.post(settings.sgcor_login_url, json=payload) as response:
        if not _is_success(response.status):
            raise AuthenticationError(response.status)
        body = await response.json(content_type=None)

    token = ((body or {}).get('data') or {}).get('token')
    if not token:
        raise AuthenticationError(response.status)
    logger.info("Authenticated against search API")
    return token


class SearchClient:
    """
    Authenticated client for the production/claims search API.

    Attributes:
        session: Open aiohttp session owned by the report run.
        token: Bearer token from authenticate().
        base_url: API base URL, without trailing slash.
    """

    def __init__(self, session: aiohttp.ClientSession, token: str, base_url: str):
        self.session = session
        self.token = token
        self.base_url = base_url.rstrip('/')

    async def search_page(
        self,
        endpoint: str,
        page: int,
        body: Dict[str, Any],
    ) -> SearchPage:
        """
        Request one page of a search endpoint.

        Raises:
            UpstreamRequestError: On any non-success status.
        """
        url = f"{self.base_url}{endpoint}"
        headers = {'Authorization': f"Bearer {self.token}"}
        async with self.session.post(
            url, params={'page': page}, json=body, headers=headers
        ) as response:
            if not _is_success(response.status):
                raise UpstreamRequestError(response.status, endpoint)
            payload = await response.json(content_type=None)
        return SearchPage.model_validate(payload or {})


class TicketClient:
    """Client for the ticket feed."""

    def __init__(self, session: aiohttp.ClientSession, access_token: str, url: str):
        self.session = session
        self.access_token = access_token
        self.url = url

    async def ticket_page(self, start: int, limit: int, opened_after: str) -> TicketPage:
        """
        Request one page of tickets opened after `opened_after`.

        Raises:
            TicketFeedError: On any non-success status.
        """
        params = {
            'start': start,
            'limit': limit,
            'abertoStart': opened_after,
        }
        headers = {
            'Authorization': self.access_token,
            'Content-Type': 'application/json;charset=UTF-8',
        }
        async with self.session.get(self.url, params=params, headers=headers) as response:
            if not _is_success(response.status):
                raise TicketFeedError(response.status)
            payload = await response.json(content_type=None)
        return TicketPage.model_validate(payload or {})


def build_ticket_client(
    session: aiohttp.ClientSession,
    settings: Optional[Settings] = None,
) -> Optional[TicketClient]:
    """Ticket client, or None when no ticket feed token is configured."""
    settings = settings or get_settings()
    if not settings.sults_access_token:
        return None
    return TicketClient(session, settings.sults_access_token, settings.sults_api_url)
