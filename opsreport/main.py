"""
FastAPI application entry point for the operations reporting service.

The application hosts the report scheduler: the lifespan starts it (unless
disabled by SCHEDULER_ENABLED=false), installs the crash hook that e-mails
unhandled errors, and stops the scheduler on shutdown. Reports can also be
triggered manually through the /reports endpoints.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from opsreport import __version__
from opsreport.api import api_router
from opsreport.core.config import get_settings
from opsreport.jobs.failure_report import install_crash_hook
from opsreport.jobs.scheduler import ReportScheduler

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Lifespan context manager for FastAPI application startup and shutdown events.

    On startup:
        - Install the crash hook on the running loop
        - Create the report scheduler and start it when enabled

    On shutdown:
        - Stop the scheduler
    """
    settings = get_settings()
    logger.info("Operations reporting service starting")
    install_crash_hook(asyncio.get_running_loop())

    scheduler = ReportScheduler(timezone=settings.report_timezone)
    app.state.scheduler = scheduler
    if settings.scheduler_enabled:
        await scheduler.start()
    else:
        logger.info("Scheduler disabled; reports run only on manual trigger")

    yield

    logger.info("Operations reporting service shutting down")
    await scheduler.stop()


# Create FastAPI application
app = FastAPI(
    title="Operations Reporting API",
    version=__version__,
    description=(
        "Scheduled daily, weekly and monthly operations reports: production, "
        "claims and urgent assistance tickets, delivered by e-mail and messaging."
    ),
    lifespan=lifespan,
)

app.include_router(api_router)


@app.get("/health")
async def health_check():
    """
    Health check endpoint for monitoring and load balancer probes.

    Returns:
        Dict with status 'healthy'
    """
    return {"status": "healthy"}


# Run with uvicorn when executed directly
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "opsreport.main:app",
        host="0.0.0.0",
        port=8000,
    )
