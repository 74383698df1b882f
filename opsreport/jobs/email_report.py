"""
E-mail delivery of report summaries.

The summary goes to the director address (falling back to the sender
address) as an HTML body with the period spreadsheet attached. Delivery uses
SMTP with STARTTLS; the blocking smtplib conversation runs in a worker thread
so the event loop keeps serving the API and the scheduler.

`send_mail` is shared with the failure reporter.
"""

import asyncio
import logging
import smtplib
from datetime import datetime
from email.mime.application import MIMEApplication
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr, formatdate, make_msgid
from html import escape
from typing import Optional

from opsreport.core.config import Settings, get_settings
from opsreport.core.errors import NotificationChannelError
from opsreport.models.enums import ReportKind
from opsreport.models.schemas import ArtifactHandle, Period, SummaryCounts

logger = logging.getLogger(__name__)


CHANNEL = 'email'

XLSX_SUBTYPE = "vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# Per-kind wording: (summary heading, attachment note)
SUMMARY_WORDING = {
    ReportKind.DAILY: ("Resumo do dia anterior", "Em anexo, segue a planilha completa com a produção do dia anterior."),
    ReportKind.WEEKLY: ("Resumo da Semana", "Em anexo, planilha completa da semana."),
    ReportKind.MONTHLY: ("Resumo do Mês", "Em anexo, planilha completa do mês."),
}


# =============================================================================
# Message building
# =============================================================================

def build_subject(period: Period) -> str:
    """E.g. 'Relatório Semanal - Centro de Operações - 2026-10-05 a 2026-10-09'."""
    if period.kind == ReportKind.WEEKLY:
        reference = f"{period.start_str} a {period.end_str}"
    else:
        reference = period.description
    return f"Relatório {period.kind.display_name} - Centro de Operações - {reference}"


def _count_row(label: str, value: int, last: bool = False) -> str:
    border = "" if last else " border-bottom: 1px solid #e0e0e0;"
    return (
        f'<tr><td style="padding: 18px 0; font-size: 14px; color: #666666;{border}">{label}</td>'
        f'<td style="padding: 18px 0; font-size: 28px; color: #4A04A5; text-align: right;'
        f' font-weight: 300;{border}">{value}</td></tr>'
    )


def build_summary_html(
    period: Period,
    counts: SummaryCounts,
    generated_at: Optional[datetime] = None,
) -> str:
    """HTML body with the period, the four counts and the attachment note."""
    generated_at = generated_at or datetime.now()
    heading, attachment_note = SUMMARY_WORDING[period.kind]
    title = f"Relatório {period.kind.display_name}"
    reference_label = "Data de referência" if period.is_single_day else "Período"

    rows = "".join([
        _count_row("Transmissões", counts.transmissions),
        _count_row("Apólices emitidas", counts.issued_policies),
        _count_row("Sinistros abertos", counts.claims),
        _count_row("Assistências urgentes", counts.urgent_tickets, last=True),
    ])

    return f"""<!DOCTYPE html>
<html lang="pt-BR">
<head><meta charset="UTF-8"><title>{title} - Centro de Operações</title></head>
<body style="margin: 0; padding: 0; font-family: Arial, sans-serif; background-color: #f5f5f5;">
  <table role="presentation" cellspacing="0" cellpadding="0" border="0" width="100%">
    <tr><td style="padding: 30px 15px;">
      <table role="presentation" cellspacing="0" cellpadding="0" border="0" width="100%" style="max-width: 600px; margin: 0 auto; background-color: #ffffff;">
        <tr><td style="padding: 35px 40px 25px 40px; border-top: 3px solid #4A04A5;">
          <h1 style="margin: 0; font-size: 24px; font-weight: 400; color: #170138;">{title}</h1>
          <p style="margin: 8px 0 0 0; font-size: 14px; color: #666666;">Centro de Operações</p>
        </td></tr>
        <tr><td style="padding: 0 40px 30px 40px;">
          <p style="margin: 0; font-size: 13px; color: #666666;">{reference_label}: {escape(period.description)}</p>
          <p style="margin: 4px 0 0 0; font-size: 13px; color: #666666;">Gerado em: {generated_at.strftime('%d/%m/%Y %H:%M:%S')}</p>
        </td></tr>
        <tr><td style="padding: 0 40px;">
          <h2 style="margin: 0 0 20px 0; font-size: 16px; font-weight: 500; color: #170138; text-transform: uppercase;">{heading}</h2>
          <table role="presentation" cellspacing="0" cellpadding="0" border="0" width="100%">{rows}</table>
        </td></tr>
        <tr><td style="padding: 35px 40px 40px 40px;">
          <p style="margin: 0; font-size: 13px; color: #666666;">{attachment_note}</p>
        </td></tr>
        <tr><td style="padding: 25px 40px; background-color: #fafafa; border-top: 1px solid #e0e0e0;">
          <p style="margin: 0; font-size: 12px; color: #999999; text-align: center;">Tecnologia Rede Avantar</p>
        </td></tr>
      </table>
    </td></tr>
  </table>
</body>
</html>"""


def build_message(
    settings: Settings,
    recipient: str,
    subject: str,
    html_body: str,
    attachment: Optional[ArtifactHandle] = None,
    sender_name: Optional[str] = None,
) -> MIMEMultipart:
    msg = MIMEMultipart("mixed")
    msg["Subject"] = subject
    msg["From"] = formataddr((sender_name or settings.mail_sender_name, settings.mail_email))
    msg["To"] = recipient
    msg["Date"] = formatdate(localtime=True)
    msg["Message-ID"] = make_msgid()
    msg.attach(MIMEText(html_body, "html", "utf-8"))

    if attachment is not None:
        part = MIMEApplication(attachment.file_path.read_bytes(), _subtype=XLSX_SUBTYPE)
        part.add_header("Content-Disposition", "attachment", filename=attachment.file_name)
        msg.attach(part)
    return msg


# =============================================================================
# Delivery
# =============================================================================

def _deliver(settings: Settings, msg: MIMEMultipart) -> None:
    with smtplib.SMTP(settings.mail_host, settings.mail_port, timeout=settings.http_timeout_seconds) as server:
        server.starttls()
        server.login(settings.mail_email, settings.mail_password)
        server.send_message(msg)


async def send_mail(
    subject: str,
    html_body: str,
    attachment: Optional[ArtifactHandle] = None,
    *,
    sender_name: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> str:
    """
    Send one HTML e-mail to the report recipient.

    Returns:
        The recipient address.

    Raises:
        NotificationChannelError: If credentials are missing, the attachment
            does not exist, or the SMTP conversation fails.
    """
    settings = settings or get_settings()
    if not settings.mail_email or not settings.mail_password:
        raise NotificationChannelError(CHANNEL, "MAIL_EMAIL or MAIL_PASSWORD not configured")

    if attachment is not None and not attachment.file_path.exists():
        raise NotificationChannelError(CHANNEL, f"Attachment not found: {attachment.file_path}")

    recipient = settings.report_recipient
    msg = build_message(settings, recipient, subject, html_body, attachment, sender_name)

    logger.info(f"Sending e-mail to {recipient} via {settings.mail_host}:{settings.mail_port}")
    try:
        await asyncio.to_thread(_deliver, settings, msg)
    except (smtplib.SMTPException, OSError) as e:
        raise NotificationChannelError(CHANNEL, f"SMTP delivery failed: {e}") from e

    logger.info(f"E-mail sent to {recipient}: {subject}")
    return recipient


async def send_email_report(
    period: Period,
    counts: SummaryCounts,
    artifact: ArtifactHandle,
    settings: Optional[Settings] = None,
) -> str:
    """
    Send the report summary with the spreadsheet attached.

    Raises:
        NotificationChannelError: On missing configuration, missing artifact
            or delivery failure.
    """
    return await send_mail(
        build_subject(period),
        build_summary_html(period, counts),
        artifact,
        settings=settings,
    )
