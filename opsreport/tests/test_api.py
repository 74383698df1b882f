"""
Tests for the reports API.

Endpoint functions are awaited directly with their dependencies supplied, the
way FastAPI would resolve them. Route registration is checked through
url_path_for on the app and the route definitions of the reports router.
"""

from datetime import datetime
from types import SimpleNamespace
from typing import List
from zoneinfo import ZoneInfo

import pytest
from fastapi import BackgroundTasks, HTTPException

from opsreport.api.reports import get_schedule, get_scheduler, trigger_report
from opsreport.api.reports import router as reports_router
from opsreport.jobs.scheduler import ReportScheduler
from opsreport.main import app, health_check
from opsreport.models.enums import ReportKind
from opsreport.models.schemas import RunResult


pytestmark = pytest.mark.asyncio


class StubScheduler(ReportScheduler):

    def __init__(self):
        self.kinds: List[ReportKind] = []
        super().__init__(runner=self._run, timezone='America/Sao_Paulo')

    def now(self) -> datetime:
        return datetime(2026, 10, 19, 12, 0, tzinfo=ZoneInfo('America/Sao_Paulo'))

    async def _run(self, kind: ReportKind) -> RunResult:
        self.kinds.append(kind)
        return RunResult(kind=kind, period_label='2026-10-16')


def _request(scheduler=None) -> SimpleNamespace:
    state = SimpleNamespace()
    if scheduler is not None:
        state.scheduler = scheduler
    return SimpleNamespace(app=SimpleNamespace(state=state))


class TestRoutes:

    async def test_report_routes_registered(self) -> None:
        assert app.url_path_for('health_check') == '/health'
        assert app.url_path_for('get_schedule') == '/reports/schedule'
        assert app.url_path_for('trigger_report', kind='daily') == '/reports/daily/run'

    async def test_health(self) -> None:
        assert await health_check() == {'status': 'healthy'}


class TestScheduleEndpoint:

    async def test_lists_next_runs(self) -> None:
        response = await get_schedule(scheduler=StubScheduler())

        assert response.running is False
        assert response.timezone == 'America/Sao_Paulo'
        assert [entry.kind for entry in response.entries] == [
            ReportKind.DAILY, ReportKind.WEEKLY, ReportKind.MONTHLY,
        ]
        assert response.entries[2].next_run.date().isoformat() == '2026-11-01'

    async def test_missing_scheduler_is_unavailable(self) -> None:
        with pytest.raises(HTTPException) as exc_info:
            get_scheduler(_request())

        assert exc_info.value.status_code == 503

    async def test_scheduler_from_app_state(self) -> None:
        scheduler = StubScheduler()
        assert get_scheduler(_request(scheduler)) is scheduler


class TestTriggerEndpoint:

    async def test_run_is_queued_in_background(self) -> None:
        scheduler = StubScheduler()
        background_tasks = BackgroundTasks()

        response = await trigger_report(ReportKind.MONTHLY, background_tasks, scheduler=scheduler)

        assert response.status == 'accepted'
        assert response.message == 'Relatório Mensal agendado para execução'
        assert scheduler.kinds == []

        await background_tasks()

        assert scheduler.kinds == [ReportKind.MONTHLY]

    async def test_trigger_route_answers_accepted(self) -> None:
        route = next(route for route in reports_router.routes if getattr(route, 'name', None) == 'trigger_report')
        assert route.status_code == 202
        assert route.methods == {'POST'}
