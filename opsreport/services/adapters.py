"""
Domain fetch adapters, one per record category.

Each adapter composes the paginated fetcher with the record filter:
1. Build the category request body (date filter kind plus category codes)
2. Fetch the window from the target date up to today
3. Keep only records whose category date field falls on the target date

The search API filters on a coarse window; the exact day is decided here.
`fetch_full_production` works on a whole period instead of a single day and
feeds the production sheet of the spreadsheet.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from opsreport.models.enums import DateFilterKind
from opsreport.models.schemas import Record
from opsreport.services.calendar import date_range, format_date
from opsreport.services.pagination import fetch_window
from opsreport.services.record_filter import field_selector, filter_by_date, filter_by_dates
from opsreport.services.ticket_scanner import scan_urgent_tickets

logger = logging.getLogger(__name__)


# =============================================================================
# Endpoints and category filters
# =============================================================================

PRODUCTION_ENDPOINT = "/producao/pesquisar"
CLAIMS_ENDPOINT = "/sinistros/pesquisar"

# Policy levels and types included in production figures
PRODUCTION_LEVELS: List[str] = ["1", "2"]
PRODUCTION_TYPES: List[str] = ["0", "2", "4"]

# Production statuses; null and empty status are legitimate upstream values
PRODUCTION_STATUSES: List[Optional[str]] = ["0", None, "", "1", "3", "4", "5", "6", "7"]


def production_body(filter_kind: DateFilterKind, start: str, end: str) -> Dict[str, Any]:
    return {
        'tipoData': filter_kind.value,
        'dataInicial': start,
        'dataFinal': end,
        'nivel': list(PRODUCTION_LEVELS),
        'tipo': list(PRODUCTION_TYPES),
        'status': list(PRODUCTION_STATUSES),
    }


def claims_body(start: str, end: str) -> Dict[str, Any]:
    return {
        'tipoData': DateFilterKind.CLAIM_NOTICE_DATE.value,
        'dataInicial': start,
        'dataFinal': end,
    }


# =============================================================================
# Single-day adapters
# =============================================================================

async def _fetch_day(
    client,
    endpoint: str,
    filter_kind: DateFilterKind,
    body_factory,
    target_date: str,
    today: Optional[date],
    page_delay: Optional[float],
) -> List[Record]:
    records = await fetch_window(
        client,
        endpoint,
        body_factory,
        target_date,
        format_date(0, today),
        page_delay,
    )
    matched = filter_by_date(target_date, records, field_selector(filter_kind.value))
    logger.info(
        f"{filter_kind.value} = {target_date}: {len(matched)} of {len(records)} records"
    )
    return matched


async def fetch_transmissions(
    client,
    target_date: str,
    *,
    today: Optional[date] = None,
    page_delay: Optional[float] = None,
) -> List[Record]:
    """Production whose effective date (dataVigenciaInicial) is `target_date`."""
    return await _fetch_day(
        client,
        PRODUCTION_ENDPOINT,
        DateFilterKind.EFFECTIVE_DATE,
        lambda start, end: production_body(DateFilterKind.EFFECTIVE_DATE, start, end),
        target_date,
        today,
        page_delay,
    )


async def fetch_issued_policies(
    client,
    target_date: str,
    *,
    today: Optional[date] = None,
    page_delay: Optional[float] = None,
) -> List[Record]:
    """Production whose issue date (dataEmitida) is `target_date`."""
    return await _fetch_day(
        client,
        PRODUCTION_ENDPOINT,
        DateFilterKind.ISSUE_DATE,
        lambda start, end: production_body(DateFilterKind.ISSUE_DATE, start, end),
        target_date,
        today,
        page_delay,
    )


async def fetch_claims(
    client,
    target_date: str,
    *,
    today: Optional[date] = None,
    page_delay: Optional[float] = None,
) -> List[Record]:
    """Claims whose notice date (dataAviso) is `target_date`."""
    return await _fetch_day(
        client,
        CLAIMS_ENDPOINT,
        DateFilterKind.CLAIM_NOTICE_DATE,
        claims_body,
        target_date,
        today,
        page_delay,
    )


async def fetch_urgent_tickets(ticket_client, target_date: str, **scan_options) -> List[Record]:
    """Urgent assistance tickets opened on `target_date` (best effort)."""
    return await scan_urgent_tickets(ticket_client, target_date, **scan_options)


# =============================================================================
# Period adapter
# =============================================================================

async def fetch_full_production(
    client,
    start: str,
    end: str,
    *,
    page_delay: Optional[float] = None,
) -> List[Record]:
    """
    Production by effective date for a whole period.

    The window sent upstream is start..end (widened by one day when the
    period is a single day); the result is filtered against every date of
    the original period.

    Raises:
        InvalidRangeError: If start is after end.
        UpstreamRequestError: If any page request fails.
    """
    dates = date_range(start, end)
    records = await fetch_window(
        client,
        PRODUCTION_ENDPOINT,
        lambda window_start, window_end: production_body(
            DateFilterKind.EFFECTIVE_DATE, window_start, window_end
        ),
        start,
        end,
        page_delay,
    )
    matched = filter_by_dates(
        dates, records, field_selector(DateFilterKind.EFFECTIVE_DATE.value)
    )
    logger.info(f"Full production {start} to {end}: {len(matched)} records")
    return matched
