"""
In-process report scheduler.

Default rules, in the report timezone (America/Sao_Paulo):
- daily:   Tuesday to Saturday at 06:00 (covers Monday to Friday)
- weekly:  Saturday at 06:15
- monthly: day 1 at 06:00

The scheduler runs as a background asyncio task started by the application
lifespan. It checks the rules periodically and runs due reports one after
the other; manual triggers from the API go through the same lock, so two
reports never run at the same time. Errors of a run are logged here; they
were already reported by the run itself.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Awaitable, Callable, Dict, FrozenSet, List, Optional
from zoneinfo import ZoneInfo

from opsreport.core.config import get_settings
from opsreport.jobs.report_runs import run_report
from opsreport.models.enums import ReportKind
from opsreport.models.schemas import RunResult, ScheduleEntry

logger = logging.getLogger(__name__)


ReportRunner = Callable[[ReportKind], Awaitable[RunResult]]


@dataclass(frozen=True)
class ScheduleRule:
    """
    When a report kind fires.

    Attributes:
        kind: Report kind to run.
        hour: Local hour of the run.
        minute: Local minute of the run.
        weekdays: ISO weekdays (1=Monday .. 7=Sunday) the rule fires on; None for any.
        day_of_month: Day of month the rule fires on; None for any.
        description: Human readable schedule.
    """
    kind: ReportKind
    hour: int
    minute: int = 0
    weekdays: Optional[FrozenSet[int]] = None
    day_of_month: Optional[int] = None
    description: str = ""

    def matches(self, day: date) -> bool:
        if self.weekdays is not None and day.isoweekday() not in self.weekdays:
            return False
        if self.day_of_month is not None and day.day != self.day_of_month:
            return False
        return True


DEFAULT_RULES: List[ScheduleRule] = [
    ScheduleRule(
        kind=ReportKind.DAILY,
        hour=6,
        weekdays=frozenset({2, 3, 4, 5, 6}),
        description="Terça a sábado às 06:00",
    ),
    ScheduleRule(
        kind=ReportKind.WEEKLY,
        hour=6,
        minute=15,
        weekdays=frozenset({6}),
        description="Sábados às 06:15",
    ),
    ScheduleRule(
        kind=ReportKind.MONTHLY,
        hour=6,
        day_of_month=1,
        description="Dia 1 de cada mês às 06:00",
    ),
]

# Longest gap between two fires of any supported rule
_SEARCH_DAYS = 366


def next_fire_time(rule: ScheduleRule, now: datetime) -> datetime:
    """
    First fire time of `rule` strictly after `now`.

    Args:
        rule: Schedule rule.
        now: Timezone-aware current time; the result is in the same zone.

    Raises:
        ValueError: If `now` is naive or the rule never fires.
    """
    if now.tzinfo is None:
        raise ValueError("now must be timezone-aware")

    day = now.date()
    for _ in range(_SEARCH_DAYS + 1):
        if rule.matches(day):
            candidate = datetime(day.year, day.month, day.day, rule.hour, rule.minute, tzinfo=now.tzinfo)
            if candidate > now:
                return candidate
        day += timedelta(days=1)
    raise ValueError(f"Rule for {rule.kind.value} never fires")


class ReportScheduler:
    """
    Background scheduler for report runs.

    Attributes:
        rules: Schedule rules, one per report kind.
        timezone: Zone the rules are expressed in.
        poll_seconds: Interval between due checks.
        running: True between start() and stop().
    """

    def __init__(
        self,
        rules: Optional[List[ScheduleRule]] = None,
        runner: Optional[ReportRunner] = None,
        timezone: Optional[str] = None,
        poll_seconds: float = 30.0,
    ):
        self.rules = list(rules if rules is not None else DEFAULT_RULES)
        self.runner = runner or run_report
        self.timezone = ZoneInfo(timezone or get_settings().report_timezone)
        self.poll_seconds = poll_seconds
        self.running = False
        self._task: Optional[asyncio.Task] = None
        self._run_lock = asyncio.Lock()
        self._next_runs: Dict[ReportKind, datetime] = {}

    def now(self) -> datetime:
        return datetime.now(self.timezone)

    def _compute_next_runs(self) -> None:
        now = self.now()
        self._next_runs = {rule.kind: next_fire_time(rule, now) for rule in self.rules}

    def schedule_entries(self) -> List[ScheduleEntry]:
        """Next fire time of every rule."""
        now = self.now()
        entries = []
        for rule in self.rules:
            next_run = self._next_runs.get(rule.kind) if self.running else None
            entries.append(ScheduleEntry(
                kind=rule.kind,
                description=rule.description,
                next_run=next_run or next_fire_time(rule, now),
            ))
        return entries

    async def run_now(self, kind: ReportKind) -> Optional[RunResult]:
        """
        Run one report, waiting for any run in progress to finish first.

        Returns:
            The RunResult, or None if the run failed (the failure was
            already reported by the run).
        """
        async with self._run_lock:
            try:
                return await self.runner(ReportKind(kind))
            except Exception as e:
                logger.error(f"Report run {ReportKind(kind).value} failed: {e}")
                return None

    async def start(self) -> None:
        if self.running:
            logger.warning("Report scheduler is already running")
            return
        self.running = True
        self._compute_next_runs()
        for kind, next_run in self._next_runs.items():
            logger.info(f"Scheduled {kind.value} report, next run {next_run.isoformat()}")
        self._task = asyncio.create_task(self._loop())

    async def stop(self) -> None:
        self.running = False
        if self._task and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                logger.info("Report scheduler stopped")
        self._task = None

    async def run_due(self) -> List[ReportKind]:
        """Run every report whose fire time has passed, in rule order."""
        ran = []
        for rule in self.rules:
            due_at = self._next_runs.get(rule.kind)
            if due_at is None or due_at > self.now():
                continue
            logger.info(f"Running scheduled {rule.kind.value} report (due {due_at.isoformat()})")
            await self.run_now(rule.kind)
            self._next_runs[rule.kind] = next_fire_time(rule, self.now())
            ran.append(rule.kind)
        return ran

    async def _loop(self) -> None:
        while self.running:
            await self.run_due()
            await asyncio.sleep(self.poll_seconds)
