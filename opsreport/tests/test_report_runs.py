"""
Tests for report run orchestration.

The upstream session, login and record collection are patched; the
spreadsheet is really rendered into the test's temporary directory so its
removal can be observed. Both delivery channels and the failure hook are
replaced with AsyncMocks.
"""

from contextlib import asynccontextmanager
from datetime import date
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from opsreport.core.errors import AuthenticationError, NotificationChannelError
from opsreport.jobs.report_runs import (
    failure_context,
    run_daily_report,
    run_monthly_report,
    run_report,
    run_weekly_report,
)
from opsreport.models.enums import ReportKind
from opsreport.models.schemas import PeriodRecords


pytestmark = pytest.mark.asyncio


@asynccontextmanager
async def fake_upstream_session(settings=None):
    yield SimpleNamespace(name='upstream-session')


@pytest.fixture
def pipeline(tmp_path):
    """Patch everything around run_report and expose the mocks."""
    records = PeriodRecords(
        transmissions=[{'id': 1}, {'id': 2}],
        issued_policies=[{'id': 3}],
        claims=[{'id': 10, 'segurado': {'nome': 'Maria'}}],
        urgent_tickets=[],
        full_production=[{'id': 1}, {'id': 2}, {'id': 3}],
    )
    mocks = SimpleNamespace(
        authenticate=AsyncMock(return_value='token-123'),
        collect=AsyncMock(return_value=records),
        send_email=AsyncMock(return_value='diretor@example.com'),
        send_messaging=AsyncMock(return_value=True),
        report_failure=AsyncMock(return_value=True),
        build_ticket_client=MagicMock(return_value=None),
        output_dir=tmp_path,
    )

    with patch('opsreport.jobs.report_runs.upstream_session', new=fake_upstream_session), \
            patch('opsreport.jobs.report_runs.authenticate', new=mocks.authenticate), \
            patch('opsreport.jobs.report_runs.build_ticket_client', new=mocks.build_ticket_client), \
            patch('opsreport.jobs.report_runs.collect_period_records', new=mocks.collect), \
            patch('opsreport.jobs.report_runs.report_failure', new=mocks.report_failure), \
            patch('opsreport.jobs.email_report.send_email_report', new=mocks.send_email), \
            patch('opsreport.jobs.messaging_report.send_messaging_report', new=mocks.send_messaging):
        yield mocks


class TestRunReport:

    async def test_successful_daily_run(self, pipeline) -> None:
        result = await run_daily_report(today=date(2026, 10, 17))

        assert result.success
        assert result.kind == ReportKind.DAILY
        assert result.period_label == '2026-10-16'
        assert result.artifact_name == 'relatorio_completo_2026-10-16.xlsx'
        assert (result.counts.transmissions, result.counts.issued_policies) == (2, 1)
        assert (result.counts.claims, result.counts.urgent_tickets) == (1, 0)
        assert result.channel_errors == {}

        period = pipeline.collect.await_args.args[0]
        assert (period.start, period.end) == (date(2026, 10, 16), date(2026, 10, 16))
        pipeline.send_email.assert_awaited_once()
        pipeline.send_messaging.assert_awaited_once()
        pipeline.report_failure.assert_not_awaited()

    async def test_spreadsheet_removed_after_delivery(self, pipeline) -> None:
        seen = []

        async def capture(period, counts, artifact):
            seen.append(artifact.file_path.exists())
            return True

        pipeline.send_messaging.side_effect = capture

        result = await run_weekly_report(today=date(2026, 10, 17))

        assert seen == [True]
        assert not (pipeline.output_dir / result.artifact_name).exists()

    async def test_email_failure_does_not_block_messaging(self, pipeline) -> None:
        pipeline.send_email.side_effect = NotificationChannelError('email', 'SMTP down')

        result = await run_daily_report(today=date(2026, 10, 17))

        assert not result.success
        assert list(result.channel_errors) == ['email']
        assert 'SMTP down' in result.channel_errors['email']
        pipeline.send_messaging.assert_awaited_once()

        title, _message, error, context = pipeline.report_failure.await_args.args
        assert title == 'Erro ao Enviar E-mail - Relatório Diário'
        assert isinstance(error, NotificationChannelError)
        assert context['etapa'] == 'envio_email'

    async def test_messaging_failure_recorded_after_email(self, pipeline) -> None:
        pipeline.send_messaging.side_effect = RuntimeError('workspace unreachable')

        result = await run_monthly_report(today=date(2026, 10, 1))

        assert result.channel_errors == {'messaging': 'workspace unreachable'}
        pipeline.send_email.assert_awaited_once()
        assert not (pipeline.output_dir / result.artifact_name).exists()

    async def test_authentication_failure_is_reported_and_raised(self, pipeline) -> None:
        pipeline.authenticate.side_effect = AuthenticationError(401)

        with pytest.raises(AuthenticationError):
            await run_report(ReportKind.WEEKLY, today=date(2026, 10, 17))

        pipeline.collect.assert_not_awaited()
        pipeline.send_email.assert_not_awaited()
        pipeline.send_messaging.assert_not_awaited()

        title, _message, error, context = pipeline.report_failure.await_args.args
        assert title == 'Erro ao Gerar Relatório Semanal'
        assert isinstance(error, AuthenticationError)
        assert context == {
            'tipo': 'Relatório Semanal',
            'periodo': '2026-10-05 até 2026-10-09',
            'etapa': 'autenticacao',
        }

    async def test_collection_failure_reports_stage(self, pipeline) -> None:
        pipeline.collect.side_effect = RuntimeError('boom')

        with pytest.raises(RuntimeError):
            await run_daily_report(today=date(2026, 10, 17))

        context = pipeline.report_failure.await_args.args[3]
        assert context['etapa'] == 'coleta'
        assert list(pipeline.output_dir.glob('*.xlsx')) == []

    async def test_kind_accepts_plain_value(self, pipeline) -> None:
        result = await run_report('monthly', today=date(2026, 10, 1))

        assert result.kind == ReportKind.MONTHLY
        assert result.period_label == 'setembro de 2026'


class TestFailureContext:

    async def test_unknown_period(self) -> None:
        assert failure_context(ReportKind.DAILY, None, 'periodo') == {
            'tipo': 'Relatório Diário',
            'periodo': 'desconhecido',
            'etapa': 'periodo',
        }
