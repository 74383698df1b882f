"""
Data models for the reporting service.

Two families live here:
- Dataclasses for run-scoped state (Period, PeriodRecords, ArtifactHandle).
  They are created and discarded within one report run.
- Pydantic models for upstream responses (SearchPage, TicketPage) and for
  values exposed through the API (SummaryCounts, RunResult, ScheduleEntry).

Records themselves are plain dicts sourced verbatim from upstream and are
never mutated.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from opsreport.core.errors import InvalidRangeError
from opsreport.models.enums import ReportKind


Record = Dict[str, Any]


# =============================================================================
# Run-scoped state
# =============================================================================

@dataclass(frozen=True)
class Period:
    """
    A contiguous local-date range plus a human label.

    Attributes:
        start: First calendar date of the period (inclusive).
        end: Last calendar date of the period (inclusive).
        label: Human label used in file names, subjects and messages.
        kind: Report family that produced the period.

    Raises:
        InvalidRangeError: If start is after end.
    """
    start: date
    end: date
    label: str
    kind: ReportKind = ReportKind.DAILY

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise InvalidRangeError(
                f"Period start {self.start.isoformat()} is after end {self.end.isoformat()}"
            )

    @property
    def is_single_day(self) -> bool:
        return self.start == self.end

    @property
    def start_str(self) -> str:
        return self.start.isoformat()

    @property
    def end_str(self) -> str:
        return self.end.isoformat()

    @property
    def description(self) -> str:
        """Period as shown to readers: one date, or 'start até end'."""
        if self.is_single_day:
            return self.start_str
        if self.kind == ReportKind.MONTHLY:
            return self.label
        return f"{self.start_str} até {self.end_str}"


@dataclass
class PeriodRecords:
    """Aggregated record lists for one report run."""
    transmissions: List[Record] = field(default_factory=list)
    issued_policies: List[Record] = field(default_factory=list)
    claims: List[Record] = field(default_factory=list)
    urgent_tickets: List[Record] = field(default_factory=list)
    full_production: List[Record] = field(default_factory=list)

    def __add__(self, other: 'PeriodRecords') -> 'PeriodRecords':
        """Concatenate every category list, self first."""
        if not isinstance(other, PeriodRecords):
            return NotImplemented
        return PeriodRecords(
            transmissions=self.transmissions + other.transmissions,
            issued_policies=self.issued_policies + other.issued_policies,
            claims=self.claims + other.claims,
            urgent_tickets=self.urgent_tickets + other.urgent_tickets,
            full_production=self.full_production + other.full_production,
        )

    def summary_counts(self) -> 'SummaryCounts':
        return SummaryCounts(
            transmissions=len(self.transmissions),
            issued_policies=len(self.issued_policies),
            claims=len(self.claims),
            urgent_tickets=len(self.urgent_tickets),
        )


@dataclass(frozen=True)
class ArtifactHandle:
    """Location of a rendered spreadsheet on disk."""
    file_path: Path
    file_name: str


# =============================================================================
# Upstream responses
# =============================================================================

class PageLinks(BaseModel):
    """Pagination links of a search response."""
    model_config = ConfigDict(extra='ignore')

    next: Optional[Any] = None


class SearchPage(BaseModel):
    """
    One page of the production/claims search endpoint.

    Missing keys are tolerated: no `data` means an empty page, no `links`
    means there is no next page.
    """
    model_config = ConfigDict(extra='ignore')

    data: List[Record] = Field(default_factory=list)
    links: PageLinks = Field(default_factory=PageLinks)

    @property
    def has_next(self) -> bool:
        return self.links.next is not None


class TicketPage(BaseModel):
    """One page of the ticket feed."""
    model_config = ConfigDict(extra='ignore', populate_by_name=True)

    data: List[Record] = Field(default_factory=list)
    total_page: Optional[int] = Field(default=None, alias='totalPage')


# =============================================================================
# Values exposed through jobs and the API
# =============================================================================

class SummaryCounts(BaseModel):
    """Counts shown in the e-mail body and the messaging summary."""
    transmissions: int = Field(default=0, ge=0, description="Transmissions (production by effective date)")
    issued_policies: int = Field(default=0, ge=0, description="Policies issued")
    claims: int = Field(default=0, ge=0, description="Claims opened")
    urgent_tickets: int = Field(default=0, ge=0, description="Urgent assistance tickets")


class RunResult(BaseModel):
    """Outcome of one report run."""
    kind: ReportKind
    period_label: str
    success: bool = True
    counts: SummaryCounts = Field(default_factory=SummaryCounts)
    artifact_name: Optional[str] = None
    channel_errors: Dict[str, str] = Field(
        default_factory=dict,
        description="Channel name to error message for channels that failed"
    )


class ScheduleEntry(BaseModel):
    """Next fire time of one scheduled report."""
    kind: ReportKind
    description: str
    next_run: datetime
