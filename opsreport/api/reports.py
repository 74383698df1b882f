"""
FastAPI router for report schedule status and manual triggers.

Implements GET /reports/schedule (next fire time per report kind) and
POST /reports/{kind}/run (run one report in the background).

Manual runs go through the scheduler lock, so they queue behind a scheduled
run already in progress instead of running concurrently with it.
"""

import logging
from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request
from pydantic import BaseModel, Field

from opsreport.jobs.scheduler import ReportScheduler
from opsreport.models.enums import ReportKind
from opsreport.models.schemas import ScheduleEntry


# Configure logging
logger = logging.getLogger(__name__)


# =============================================================================
# Local Pydantic Models for API Responses
# =============================================================================

class ScheduleResponse(BaseModel):
    """Response model for the schedule endpoint."""
    running: bool = Field(..., description="Whether the background scheduler is running")
    timezone: str = Field(..., description="Timezone the schedule is expressed in")
    entries: List[ScheduleEntry] = Field(default_factory=list)


class RunAcceptedResponse(BaseModel):
    """Response model for a manual trigger."""
    kind: ReportKind
    status: str = Field(default="accepted")
    message: str


# =============================================================================
# Dependencies
# =============================================================================

def get_scheduler(request: Request) -> ReportScheduler:
    scheduler = getattr(request.app.state, 'scheduler', None)
    if scheduler is None:
        raise HTTPException(status_code=503, detail="Report scheduler not initialized")
    return scheduler


# =============================================================================
# Router Definition
# =============================================================================

router = APIRouter()


@router.get("/schedule", response_model=ScheduleResponse)
async def get_schedule(
    scheduler: ReportScheduler = Depends(get_scheduler),
) -> ScheduleResponse:
    """Next fire time of every scheduled report."""
    return ScheduleResponse(
        running=scheduler.running,
        timezone=str(scheduler.timezone),
        entries=scheduler.schedule_entries(),
    )


@router.post("/{kind}/run", response_model=RunAcceptedResponse, status_code=202)
async def trigger_report(
    kind: ReportKind,
    background_tasks: BackgroundTasks,
    scheduler: ReportScheduler = Depends(get_scheduler),
) -> RunAcceptedResponse:
    """
    Run one report now, in the background.

    Args:
        kind: daily, weekly or monthly.

    Returns:
        RunAcceptedResponse; the outcome is delivered through the report
        channels and, on failure, the failure e-mail.
    """
    logger.info(f"Manual {kind.value} report requested")
    background_tasks.add_task(scheduler.run_now, kind)
    return RunAcceptedResponse(
        kind=kind,
        message=f"Relatório {kind.display_name} agendado para execução",
    )
