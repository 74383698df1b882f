"""
Messaging workspace delivery of report summaries.

A run posts a short summary text to the configured channel and then uploads
the spreadsheet. The session is the only long-lived resource of a run:

    CREATED -> start() -> READY -> send ... -> close() -> CLOSED
                   \\-> MessagingStartupTimeout (not ready in time)

`messaging_session()` guarantees close() on every path, including startup
failures. Each send is wrapped by the retry policy (3 attempts, 2s/4s waits
by default).

Environment Requirements:
- SLACK_BOT_TOKEN: Bot token with chat:write and files:write scopes
- SLACK_CHANNEL: Channel id receiving the reports; unset disables the channel
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import aiohttp
from slack_sdk.errors import SlackApiError
from slack_sdk.web.async_client import AsyncWebClient

from opsreport.core.config import Settings, get_settings
from opsreport.core.errors import MessagingStartupTimeout, NotificationChannelError
from opsreport.jobs.retry import RetryPolicy, linear_backoff
from opsreport.models.enums import ReportKind
from opsreport.models.schemas import ArtifactHandle, Period, SummaryCounts

logger = logging.getLogger(__name__)


CHANNEL = 'messaging'

SUMMARY_HEADINGS = {
    ReportKind.DAILY: "Resumo do Dia Anterior",
    ReportKind.WEEKLY: "Resumo da Semana",
    ReportKind.MONTHLY: "Resumo do Mês",
}


def build_summary_text(period: Period, counts: SummaryCounts) -> str:
    """Summary in workspace markup (bold with single asterisks)."""
    reference_label = "Data de Referência" if period.is_single_day else "Período"
    return "\n".join([
        f":bar_chart: *Relatório {period.kind.display_name} - Centro de Operações*",
        "",
        f":date: *{reference_label}:* {period.description}",
        "",
        f":chart_with_upwards_trend: *{SUMMARY_HEADINGS[period.kind]}:*",
        f"• Transmissões: *{counts.transmissions}*",
        f"• Apólices Emitidas: *{counts.issued_policies}*",
        f"• Sinistros Abertos: *{counts.claims}*",
        f"• Assistências Urgentes: *{counts.urgent_tickets}*",
        "",
        ":paperclip: Planilha completa em anexo.",
    ])


def build_retry_policy(settings: Optional[Settings] = None) -> RetryPolicy:
    settings = settings or get_settings()
    return RetryPolicy(
        max_attempts=settings.messaging_max_attempts,
        backoff=linear_backoff(settings.messaging_backoff_seconds),
    )


class MessagingSession:
    """
    Connection to the messaging workspace for one report run.

    Attributes:
        settings: Settings providing token, channel and timeouts.
        client: Web API client, available after start().
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.client: Optional[AsyncWebClient] = None
        self._http: Optional[aiohttp.ClientSession] = None

    @property
    def ready(self) -> bool:
        return self.client is not None

    async def start(self) -> 'MessagingSession':
        """
        Open the session and wait until the workspace accepts the token.

        Raises:
            NotificationChannelError: If no token is configured or the token
                is rejected.
            MessagingStartupTimeout: If readiness is not reached within
                `messaging_startup_timeout_seconds`.
        """
        if not self.settings.slack_bot_token:
            raise NotificationChannelError(CHANNEL, "SLACK_BOT_TOKEN not configured")

        timeout = self.settings.messaging_startup_timeout_seconds
        self._http = aiohttp.ClientSession()
        client = AsyncWebClient(token=self.settings.slack_bot_token, session=self._http)
        try:
            response = await asyncio.wait_for(client.auth_test(), timeout=timeout)
        except asyncio.TimeoutError as e:
            raise MessagingStartupTimeout(timeout) from e
        except SlackApiError as e:
            raise NotificationChannelError(
                CHANNEL, f"Authentication failed: {e.response.get('error')}"
            ) from e

        self.client = client
        logger.info(f"Messaging session ready as {response.get('user')}")
        return self

    async def close(self) -> None:
        self.client = None
        if self._http is not None:
            await self._http.close()
            self._http = None
            logger.info("Messaging session closed")

    async def post_text(self, channel: str, text: str) -> None:
        self._require_ready()
        await self.client.chat_postMessage(channel=channel, text=text)

    async def upload_file(self, channel: str, artifact: ArtifactHandle) -> None:
        self._require_ready()
        if not artifact.file_path.exists():
            raise NotificationChannelError(CHANNEL, f"Spreadsheet not found: {artifact.file_path}")
        await self.client.files_upload_v2(
            channel=channel,
            file=str(artifact.file_path),
            filename=artifact.file_name,
            title=artifact.file_name,
        )

    def _require_ready(self) -> None:
        if self.client is None:
            raise NotificationChannelError(CHANNEL, "Session used before start()")


@asynccontextmanager
async def messaging_session(settings: Optional[Settings] = None) -> AsyncIterator[MessagingSession]:
    """Started MessagingSession, closed on exit whatever happens."""
    session = MessagingSession(settings)
    try:
        await session.start()
        yield session
    finally:
        await session.close()


async def send_messaging_report(
    period: Period,
    counts: SummaryCounts,
    artifact: ArtifactHandle,
    settings: Optional[Settings] = None,
) -> bool:
    """
    Post the summary text and upload the spreadsheet.

    Returns:
        True if sent, False if the channel is not configured.

    Raises:
        NotificationChannelError: On startup failure or when a send still
            fails after all retries.
    """
    settings = settings or get_settings()
    if not settings.slack_channel:
        logger.info("Messaging channel not configured; skipping messaging delivery")
        return False

    policy = build_retry_policy(settings)
    text = build_summary_text(period, counts)

    async with messaging_session(settings) as session:
        try:
            await policy.run(
                lambda: session.post_text(settings.slack_channel, text),
                label="Messaging summary",
            )
            logger.info("Messaging summary sent")
            await policy.run(
                lambda: session.upload_file(settings.slack_channel, artifact),
                label="Messaging spreadsheet upload",
            )
            logger.info(f"Messaging spreadsheet {artifact.file_name} uploaded")
        except NotificationChannelError:
            raise
        except (SlackApiError, aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
            raise NotificationChannelError(CHANNEL, str(e)) from e

    return True
