"""
Enumeration definitions for the reporting service.

All enums inherit from both `str` and `Enum` so they serialize cleanly through
Pydantic models and FastAPI path parameters.
"""

from enum import Enum


class ReportKind(str, Enum):
    """
    Reporting period families, one per scheduled run.

    - daily: previous calendar day
    - weekly: Monday to Friday of the previous ISO week
    - monthly: first to last day of the previous month
    """
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"

    @property
    def display_name(self) -> str:
        """Portuguese title used in e-mail subjects and messages."""
        return {
            ReportKind.DAILY: "Diário",
            ReportKind.WEEKLY: "Semanal",
            ReportKind.MONTHLY: "Mensal",
        }[self]


class DateFilterKind(str, Enum):
    """
    Date field used by the search API range filter (`tipoData`).

    The same names are the record fields inspected by the record filter.
    """
    EFFECTIVE_DATE = "dataVigenciaInicial"
    ISSUE_DATE = "dataEmitida"
    CLAIM_NOTICE_DATE = "dataAviso"
