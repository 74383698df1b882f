"""
Services Module

Business logic of the period aggregation pipeline. Every service performs
sequential I/O only through the clients it is given, which keeps them easy
to test with mocks.

Services:
- calendar: Period boundaries and date sequences
- record_filter: Date-prefix filtering of upstream records
- upstream: Search API and ticket feed clients, login
- pagination: Paginated fetching and the single-day window policy
- adapters: One fetch adapter per record category
- ticket_scanner: Incremental scan for urgent assistance tickets
- aggregator: Period aggregation over day-level fetches
- spreadsheet: Three-sheet workbook rendering
"""

# =============================================================================
# Calendar and filtering
# =============================================================================

from opsreport.services.calendar import (
    parse_ymd,
    format_date,
    shift_date,
    date_range,
    last_week_range,
    last_month_range,
    period_for,
)
from opsreport.services.record_filter import (
    date_prefix,
    field_selector,
    filter_by_date,
    filter_by_dates,
)

# =============================================================================
# Upstream access
# =============================================================================

from opsreport.services.upstream import (
    authenticate,
    SearchClient,
    TicketClient,
    build_ticket_client,
)
from opsreport.services.pagination import (
    fetch_all_pages,
    fetch_window,
)

# =============================================================================
# Adapters and aggregation
# =============================================================================

from opsreport.services.adapters import (
    fetch_transmissions,
    fetch_issued_policies,
    fetch_claims,
    fetch_urgent_tickets,
    fetch_full_production,
)
from opsreport.services.ticket_scanner import scan_urgent_tickets
from opsreport.services.aggregator import (
    aggregate,
    collect_period_records,
    day_records_fetcher,
)

# =============================================================================
# Rendering
# =============================================================================

from opsreport.services.spreadsheet import render_spreadsheet

__all__ = [
    # Calendar
    'parse_ymd',
    'format_date',
    'shift_date',
    'date_range',
    'last_week_range',
    'last_month_range',
    'period_for',
    # Record filter
    'date_prefix',
    'field_selector',
    'filter_by_date',
    'filter_by_dates',
    # Upstream
    'authenticate',
    'SearchClient',
    'TicketClient',
    'build_ticket_client',
    'fetch_all_pages',
    'fetch_window',
    # Adapters
    'fetch_transmissions',
    'fetch_issued_policies',
    'fetch_claims',
    'fetch_urgent_tickets',
    'fetch_full_production',
    'scan_urgent_tickets',
    # Aggregation
    'aggregate',
    'collect_period_records',
    'day_records_fetcher',
    # Rendering
    'render_spreadsheet',
]
