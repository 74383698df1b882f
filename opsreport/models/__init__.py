"""
Package initialization file for reporting models.

Re-exports enums and schemas so other modules can import them from
opsreport.models directly:

    from opsreport.models import Period, ReportKind, SummaryCounts
"""

from opsreport.models.enums import (
    ReportKind,
    DateFilterKind,
)
from opsreport.models.schemas import (
    Record,
    Period,
    PeriodRecords,
    ArtifactHandle,
    PageLinks,
    SearchPage,
    TicketPage,
    SummaryCounts,
    RunResult,
    ScheduleEntry,
)

__all__ = [
    # Enums
    'ReportKind',
    'DateFilterKind',
    # Run-scoped state
    'Record',
    'Period',
    'PeriodRecords',
    'ArtifactHandle',
    # Upstream responses
    'PageLinks',
    'SearchPage',
    'TicketPage',
    # API values
    'SummaryCounts',
    'RunResult',
    'ScheduleEntry',
]
