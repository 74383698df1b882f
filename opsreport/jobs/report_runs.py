"""
Report run orchestration.

One run of a report kind goes through these stages:

1. Build the period from today's local date
2. Authenticate against the search API
3. Collect every record category for the period
4. Render the spreadsheet
5. Deliver by e-mail          (failure reported, run continues)
6. Deliver by messaging       (failure reported, run continues)
7. Remove the spreadsheet

A failure in stages 1-4 is fatal: it is reported through the failure hook
with the report kind, period and stage, and re-raised. Delivery channels are
isolated from each other; a failing channel is recorded in the RunResult.

Usage:
    result = await run_daily_report()
    result = await run_report(ReportKind.MONTHLY, today=date(2026, 10, 1))
"""

import logging
from datetime import date, datetime
from typing import Awaitable, Callable, Optional
from zoneinfo import ZoneInfo

from opsreport.core.config import get_settings
from opsreport.core.http import upstream_session
from opsreport.jobs import email_report, messaging_report
from opsreport.jobs.failure_report import report_failure
from opsreport.models.enums import ReportKind
from opsreport.models.schemas import ArtifactHandle, Period, RunResult, SummaryCounts
from opsreport.services.aggregator import collect_period_records
from opsreport.services.calendar import period_for
from opsreport.services.spreadsheet import render_spreadsheet
from opsreport.services.upstream import SearchClient, authenticate, build_ticket_client

logger = logging.getLogger(__name__)


ChannelSend = Callable[[Period, SummaryCounts, ArtifactHandle], Awaitable[object]]

# Channel name -> label used in failure notices
CHANNEL_LABELS = {
    email_report.CHANNEL: "E-mail",
    messaging_report.CHANNEL: "Mensagem",
}


def local_today(timezone_name: Optional[str] = None) -> date:
    """Current calendar date in the report timezone."""
    timezone_name = timezone_name or get_settings().report_timezone
    return datetime.now(ZoneInfo(timezone_name)).date()


def failure_context(kind: ReportKind, period: Optional[Period], stage: str) -> dict:
    return {
        'tipo': f"Relatório {kind.display_name}",
        'periodo': period.description if period is not None else "desconhecido",
        'etapa': stage,
    }


def remove_artifact(artifact: ArtifactHandle) -> None:
    try:
        artifact.file_path.unlink()
        logger.info(f"Removed temporary spreadsheet {artifact.file_name}")
    except OSError as e:
        logger.warning(f"Could not remove {artifact.file_path}: {e}")


async def _deliver(
    channel: str,
    send: ChannelSend,
    period: Period,
    counts: SummaryCounts,
    artifact: ArtifactHandle,
    result: RunResult,
) -> None:
    """Run one delivery channel; a failure is reported and recorded, never raised."""
    label = CHANNEL_LABELS[channel]
    logger.info(f"Delivering {period.kind.value} report via {channel}")
    try:
        await send(period, counts, artifact)
    except Exception as e:
        logger.exception(f"{channel} delivery failed for {period.label}")
        result.channel_errors[channel] = str(e)
        await report_failure(
            f"Erro ao Enviar {label} - Relatório {period.kind.display_name}",
            f"Ocorreu um erro ao enviar o relatório {period.kind.display_name.lower()} "
            f"via {label.lower()}. O relatório foi gerado, mas não foi entregue por este canal.",
            e,
            failure_context(period.kind, period, f"envio_{channel}"),
        )


async def run_report(kind: ReportKind, *, today: Optional[date] = None) -> RunResult:
    """
    Generate and deliver one report.

    Args:
        kind: Report family to run.
        today: Local date the run is considered to happen on (default: now
            in the report timezone).

    Returns:
        RunResult with counts and per-channel errors.

    Raises:
        ReportError: Any fatal failure, after it has been reported.
    """
    kind = ReportKind(kind)
    settings = get_settings()
    today = today or local_today(settings.report_timezone)
    period: Optional[Period] = None
    stage = 'periodo'

    try:
        period = period_for(kind, today)
        logger.info(f"Starting {kind.value} report for {period.description}")

        async with upstream_session(settings) as session:
            stage = 'autenticacao'
            token = await authenticate(session, settings)
            client = SearchClient(session, token, settings.sgcor_api_url)
            ticket_client = build_ticket_client(session, settings)

            stage = 'coleta'
            records = await collect_period_records(period, client, ticket_client, today=today)

        stage = 'planilha'
        artifact = render_spreadsheet(
            records.full_production,
            records.claims,
            records.urgent_tickets,
            period.label,
            settings.report_output_dir,
        )
    except Exception as e:
        logger.exception(f"{kind.value} report failed at stage '{stage}'")
        await report_failure(
            f"Erro ao Gerar Relatório {kind.display_name}",
            f"Ocorreu um erro crítico ao tentar gerar o relatório "
            f"{kind.display_name.lower()}. O processo foi interrompido.",
            e,
            failure_context(kind, period, stage),
        )
        raise

    counts = records.summary_counts()
    result = RunResult(
        kind=kind,
        period_label=period.label,
        counts=counts,
        artifact_name=artifact.file_name,
    )

    await _deliver(email_report.CHANNEL, email_report.send_email_report, period, counts, artifact, result)
    await _deliver(messaging_report.CHANNEL, messaging_report.send_messaging_report, period, counts, artifact, result)

    remove_artifact(artifact)

    result.success = not result.channel_errors
    logger.info(
        f"{kind.value} report for {period.description} finished "
        f"(channel errors: {sorted(result.channel_errors) or 'none'})"
    )
    return result


async def run_daily_report(today: Optional[date] = None) -> RunResult:
    return await run_report(ReportKind.DAILY, today=today)


async def run_weekly_report(today: Optional[date] = None) -> RunResult:
    return await run_report(ReportKind.WEEKLY, today=today)


async def run_monthly_report(today: Optional[date] = None) -> RunResult:
    return await run_report(ReportKind.MONTHLY, today=today)
