"""
Period aggregation over day-level fetches.

A single-day period calls a day adapter once. A multi-day period walks the
calendar dates of the period in order and concatenates each day's result.
Days are fetched one after the other; the pause between days comes from the
per-page delay of the fetchers. Each day's result is already filtered to that
day, so no cross-day deduplication is needed.
"""

import logging
from datetime import date
from typing import Awaitable, Callable, List, Optional, TypeVar

from opsreport.core.config import get_settings
from opsreport.models.schemas import Period, PeriodRecords
from opsreport.services import adapters
from opsreport.services.calendar import date_range

logger = logging.getLogger(__name__)


T = TypeVar('T')

DayFetch = Callable[[str], Awaitable[T]]


def period_days(period: Period) -> List[str]:
    """Dates covered by a period, in order."""
    if period.is_single_day:
        return [period.start_str]
    return date_range(period.start, period.end)


async def aggregate(period: Period, fetch_day: DayFetch) -> T:
    """
    Concatenate a day adapter's results over every date of `period`.

    Day results are combined with `+`, so record lists and PeriodRecords
    both aggregate the same way.

    Args:
        period: Period to cover.
        fetch_day: Coroutine function taking "YYYY-MM-DD".

    Returns:
        Results of all days, in date order.
    """
    if period.is_single_day:
        return await fetch_day(period.start_str)

    results = None
    for day in period_days(period):
        day_result = await fetch_day(day)
        results = day_result if results is None else results + day_result
    return results


def day_records_fetcher(client, ticket_client=None, *, today: Optional[date] = None) -> DayFetch:
    """
    Day adapter returning one day's PeriodRecords.

    Categories run in order: transmissions, issued policies, claims and
    urgent tickets.
    """
    settings = get_settings()

    async def fetch_day(day: str) -> PeriodRecords:
        logger.info(f"Processing day {day}")
        transmissions = await adapters.fetch_transmissions(client, day, today=today)
        issued_policies = await adapters.fetch_issued_policies(client, day, today=today)
        claims = await adapters.fetch_claims(client, day, today=today)
        urgent_tickets = await adapters.fetch_urgent_tickets(
            ticket_client,
            day,
            page_size=settings.ticket_page_size,
            page_delay=settings.ticket_page_delay_seconds,
            lookback_days=settings.ticket_lookback_days,
        )
        return PeriodRecords(
            transmissions=transmissions,
            issued_policies=issued_policies,
            claims=claims,
            urgent_tickets=urgent_tickets,
        )

    return fetch_day


async def collect_period_records(
    period: Period,
    client,
    ticket_client=None,
    *,
    today: Optional[date] = None,
) -> PeriodRecords:
    """
    Fetch every record category for a period.

    Each date is aggregated through `day_records_fetcher`, then production
    for the whole period is fetched for the spreadsheet. Everything runs
    sequentially.

    Args:
        period: Period to cover.
        client: Authenticated search client.
        ticket_client: Ticket client, or None to skip urgent tickets.
        today: Override for "today" (the upper bound of the fetch windows).

    Returns:
        PeriodRecords with all categories filled.

    Raises:
        UpstreamRequestError: If any search or claims fetch fails.
    """
    logger.info(f"Collecting records for {period.label} ({len(period_days(period))} days)")

    records = await aggregate(period, day_records_fetcher(client, ticket_client, today=today))
    records.full_production = await adapters.fetch_full_production(
        client, period.start_str, period.end_str
    )

    counts = records.summary_counts()
    logger.info(
        f"{period.label}: {counts.transmissions} transmissions, "
        f"{counts.issued_policies} issued policies, {counts.claims} claims, "
        f"{counts.urgent_tickets} urgent tickets, "
        f"{len(records.full_production)} production rows"
    )
    return records
