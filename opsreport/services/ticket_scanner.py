"""
Incremental scan of the ticket feed for urgent assistance tickets.

The feed is requested from a window opening a few days before the target
date (a margin against clock and propagation skew) and is ordered by
opening date, so the scan can stop early:

    SCANNING -> (each page) FILTER_AND_DEDUP -> CHECK_STOP

- FILTER_AND_DEDUP: keep tickets whose title carries the urgent assistance
  marker and whose opened date is the target date; add those whose id was
  not seen yet. The same ticket can show up on consecutive pages while
  upstream is being written to.
- CHECK_STOP: once a page holds a ticket opened after the target date and at
  least one match was found, later pages only hold newer tickets. Otherwise
  continue while the page index is within the reported page count.

The scan fails soft: a failing page ends the loop and whatever was gathered
so far is returned. Urgent tickets are a supplementary signal and must never
abort a report run.
"""

import asyncio
import logging
from typing import List, Optional, Set

import aiohttp

from opsreport.core.config import get_settings
from opsreport.core.errors import TicketFeedError
from opsreport.models.schemas import Record
from opsreport.services.calendar import shift_date
from opsreport.services.record_filter import date_prefix

logger = logging.getLogger(__name__)


# Observed title variants, matched as exact substrings
URGENT_TITLE_MARKERS = (
    "Solicitação: Assistência Urgente",
    "Solicitação: Assistência urgente",
)


def is_urgent_ticket(ticket: Record) -> bool:
    title = ticket.get('titulo')
    if not title:
        return False
    return any(marker in str(title) for marker in URGENT_TITLE_MARKERS)


def opened_after_param(target_date: str, lookback_days: int) -> str:
    """`abertoStart` value: midnight UTC `lookback_days` before the target."""
    return f"{shift_date(target_date, -lookback_days)}T00:00:00Z"


async def scan_urgent_tickets(
    client,
    target_date: str,
    *,
    page_size: Optional[int] = None,
    page_delay: Optional[float] = None,
    lookback_days: Optional[int] = None,
) -> List[Record]:
    """
    Collect unique urgent assistance tickets opened on `target_date`.

    Args:
        client: Ticket client exposing `async ticket_page(start, limit, opened_after)`,
            or None when no ticket credential is configured.
        target_date: "YYYY-MM-DD".
        page_size: Tickets per page (default from settings).
        page_delay: Seconds to wait between pages (default from settings).
        lookback_days: Days before the target where the window opens (default from settings).

    Returns:
        Matching tickets in the order they were first seen. Never raises for
        feed failures.
    """
    if client is None:
        logger.warning("Ticket feed token not configured; skipping urgent tickets")
        return []

    settings = get_settings()
    page_size = page_size if page_size is not None else settings.ticket_page_size
    page_delay = page_delay if page_delay is not None else settings.ticket_page_delay_seconds
    lookback_days = lookback_days if lookback_days is not None else settings.ticket_lookback_days

    opened_after = opened_after_param(target_date, lookback_days)
    logger.info(f"Scanning tickets opened since {opened_after} for {target_date}")

    found: List[Record] = []
    seen_ids: Set = set()
    processed = 0
    page = 0

    while True:
        try:
            response = await client.ticket_page(page, page_size, opened_after)
        except (TicketFeedError, aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.error(f"Ticket feed page {page} failed, keeping {len(found)} tickets: {e}")
            break

        tickets = response.data
        total_pages = response.total_page if response.total_page is not None else page
        processed += len(tickets)

        for ticket in tickets:
            if not is_urgent_ticket(ticket):
                continue
            if date_prefix(ticket.get('aberto')) != target_date:
                continue
            ticket_id = ticket.get('id')
            if ticket_id in seen_ids:
                continue
            seen_ids.add(ticket_id)
            found.append(ticket)
            logger.info(f"Urgent ticket {ticket_id}: {str(ticket.get('titulo', ''))[:50]}")

        logger.info(
            f"Ticket page {page}/{total_pages} | processed {processed} | "
            f"urgent on {target_date}: {len(found)}"
        )

        has_newer = any(
            (date_prefix(ticket.get('aberto')) or '') > target_date
            for ticket in tickets
        )
        if has_newer and found:
            logger.info("Reached tickets newer than the target date; stopping scan")
            break

        page += 1
        if page > total_pages:
            break
        await asyncio.sleep(page_delay)

    logger.info(f"Urgent tickets on {target_date}: {len(found)}")
    return found
