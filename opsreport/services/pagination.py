"""
Paginated fetching against the search API.

`fetch_all_pages` drives one search endpoint to exhaustion: page 1, 2, ...
until the response carries no next link, with a fixed pause after every page.
A failing page aborts the whole fetch; no partial page set is ever returned.

`fetch_window` adds the single-day policy used by every caller that asks for
an equal start and end date: the upstream range filter does not return the
records of a one-day window, so the request goes out with the end date moved
one day later. Callers still filter the result against their original dates,
which keeps the next day's records out of the report.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional

from opsreport.core.config import get_settings
from opsreport.models.schemas import Record
from opsreport.services.calendar import shift_date

logger = logging.getLogger(__name__)


BodyFactory = Callable[[str, str], Dict[str, Any]]


async def fetch_all_pages(
    client,
    endpoint: str,
    request_body: Dict[str, Any],
    page_delay: Optional[float] = None,
) -> List[Record]:
    """
    Fetch every page of a search endpoint.

    Args:
        client: Object exposing `async search_page(endpoint, page, body) -> SearchPage`.
        endpoint: Endpoint path, e.g. "/producao/pesquisar".
        request_body: JSON body sent with every page request.
        page_delay: Seconds to wait after each page (default from settings).

    Returns:
        All records of all pages, in page order.

    Raises:
        UpstreamRequestError: If any page request fails.
    """
    if page_delay is None:
        page_delay = get_settings().page_delay_seconds

    results: List[Record] = []
    page = 1
    while True:
        response = await client.search_page(endpoint, page, request_body)
        results.extend(response.data)
        logger.debug(f"{endpoint} page {page}: {len(response.data)} records")
        page += 1
        await asyncio.sleep(page_delay)
        if not response.has_next:
            break

    logger.info(f"{endpoint}: fetched {len(results)} records in {page - 1} pages")
    return results


def upstream_end_date(start: str, end: str) -> str:
    """End date actually sent upstream for a start/end window."""
    if start == end:
        return shift_date(end, 1)
    return end


async def fetch_window(
    client,
    endpoint: str,
    body_factory: BodyFactory,
    start: str,
    end: str,
    page_delay: Optional[float] = None,
) -> List[Record]:
    """
    Fetch all pages for a start/end window, applying the single-day policy.

    Args:
        client: Search client.
        endpoint: Endpoint path.
        body_factory: Builds the request body from (start, upstream_end).
        start: First date of the window.
        end: Last date of the window.
        page_delay: Seconds to wait after each page.

    Returns:
        Unfiltered records for the (possibly widened) window.
    """
    api_end = upstream_end_date(start, end)
    if api_end != end:
        logger.info(
            f"Single-day window: requesting {start} to {api_end}, filtering only {start}"
        )
    return await fetch_all_pages(client, endpoint, body_factory(start, api_end), page_delay)
