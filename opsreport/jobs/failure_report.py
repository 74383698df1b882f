"""
Centralized failure reporting.

Every stage that fails (a whole run, a single notification channel, an
unhandled error in the process) ends up in `report_failure`, which e-mails
the error text, its traceback and a context mapping to the report recipient.

The hook itself never raises: if the failure e-mail cannot be sent, both the
delivery error and the original error are logged and the caller continues.
"""

import asyncio
import concurrent.futures
import logging
import sys
import threading
import traceback
from datetime import datetime
from html import escape
from typing import Any, Dict, Optional, Set

from opsreport.core.config import Settings, get_settings
from opsreport.core.errors import ReportError
from opsreport.jobs.email_report import send_mail

logger = logging.getLogger(__name__)


FAILURE_SENDER_NAME = "Sistema de Relatórios - Avantar"

_PRE_STYLE = "white-space: pre-wrap; background: #f5f5f5; padding: 10px; border-radius: 4px;"


def format_traceback(error: BaseException) -> str:
    return "".join(traceback.format_exception(type(error), error, error.__traceback__))


def build_failure_html(
    title: str,
    message: str,
    error: Optional[BaseException] = None,
    context: Optional[Dict[str, Any]] = None,
    occurred_at: Optional[datetime] = None,
) -> str:
    occurred_at = occurred_at or datetime.now()

    error_html = ""
    if error is not None:
        error_html = (
            f'<p><strong>Erro:</strong></p><pre style="{_PRE_STYLE}">{escape(str(error))}</pre>'
            f'<p><strong>Stack Trace:</strong></p>'
            f'<pre style="{_PRE_STYLE}">{escape(format_traceback(error)) or "N/A"}</pre>'
        )

    context_html = ""
    if context:
        items = "".join(
            f"<li><strong>{escape(str(key))}:</strong> {escape(str(value))}</li>"
            for key, value in context.items()
        )
        context_html = f"<p><strong>Contexto:</strong></p><ul>{items}</ul>"

    return f"""<!DOCTYPE html>
<html>
<head><meta charset="UTF-8"></head>
<body style="font-family: Arial, sans-serif; padding: 20px; background-color: #f5f5f5;">
  <div style="max-width: 600px; margin: 0 auto; background: white; padding: 30px; border-radius: 8px;">
    <h1 style="color: #d32f2f; margin-top: 0;">{escape(title)}</h1>
    <p style="font-size: 16px; line-height: 1.6;">{escape(message)}</p>
    <p style="color: #666; font-size: 14px;"><strong>Data/Hora:</strong> {occurred_at.strftime('%d/%m/%Y %H:%M:%S')}</p>
    {error_html}
    {context_html}
  </div>
</body>
</html>"""


async def report_failure(
    title: str,
    message: str,
    error: Optional[BaseException] = None,
    context: Optional[Dict[str, Any]] = None,
    settings: Optional[Settings] = None,
) -> bool:
    """
    E-mail a failure notice to the report recipient.

    Args:
        title: Short title, also used in the subject.
        message: Human explanation of what was interrupted.
        error: The exception that caused the failure, if any.
        context: Extra key/value pairs (report kind, period, stage).
        settings: Optional settings override.

    Returns:
        True if the notice was sent, False otherwise. Never raises.
    """
    try:
        subject = f"{title} - {datetime.now().strftime('%d/%m/%Y')}"
        html_body = build_failure_html(title, message, error, context)
        recipient = await send_mail(
            subject,
            html_body,
            sender_name=FAILURE_SENDER_NAME,
            settings=settings or get_settings(),
        )
        logger.info(f"Failure notice sent to {recipient}: {title}")
        return True
    except Exception as e:
        logger.error(f"Could not send failure notice '{title}': {e}")
        if error is not None:
            logger.error(f"Original error: {error!r}")
        return False


# =============================================================================
# Process-wide crash hook
# =============================================================================

# Upper bound a crashing worker thread waits for its failure notice
CRASH_REPORT_TIMEOUT_SECONDS = 60.0

# Failure notices scheduled on a running loop; referenced until they finish
_pending_reports: Set[asyncio.Task] = set()


def _track(task: asyncio.Task) -> asyncio.Task:
    _pending_reports.add(task)
    task.add_done_callback(_pending_reports.discard)
    return task


def _dispatch_report(loop: asyncio.AbstractEventLoop, title: str, message: str,
                     error: Optional[BaseException], context: Dict[str, Any]) -> None:
    """
    Send a failure notice from a crash handler, whatever thread it runs on.

    - On a thread with a running loop: scheduled as a task on that loop.
    - On another thread while `loop` runs: submitted to `loop`, and this
      thread waits for it up to CRASH_REPORT_TIMEOUT_SECONDS.
    - Otherwise (the loop stopped, e.g. the process is going down): sent
      in a fresh event loop before returning.
    """
    try:
        current = asyncio.get_running_loop()
    except RuntimeError:
        current = None

    if current is not None:
        _track(current.create_task(report_failure(title, message, error, context)))
        return

    if loop.is_running() and not loop.is_closed():
        future = asyncio.run_coroutine_threadsafe(report_failure(title, message, error, context), loop)
        try:
            future.result(timeout=CRASH_REPORT_TIMEOUT_SECONDS)
        except concurrent.futures.TimeoutError:
            future.cancel()
            logger.error(f"{title}: failure notice not sent within {CRASH_REPORT_TIMEOUT_SECONDS:.0f}s")
        return

    asyncio.run(report_failure(title, message, error, context))


def install_crash_hook(loop: asyncio.AbstractEventLoop) -> None:
    """
    Route unhandled errors to report_failure.

    Covers exceptions escaping the main thread (sys.excepthook), other
    threads (threading.excepthook), and exceptions nobody retrieved from
    tasks or callbacks on `loop`.
    """
    previous_excepthook = sys.excepthook
    previous_thread_excepthook = threading.excepthook

    def excepthook(exc_type, exc_value, exc_traceback):
        logger.critical("Unhandled exception", exc_info=(exc_type, exc_value, exc_traceback))
        _dispatch_report(
            loop,
            "Erro Crítico Não Tratado - Sistema de Relatórios",
            "Ocorreu um erro crítico não tratado que pode ter interrompido o sistema de relatórios.",
            exc_value,
            {'tipo': exc_type.__name__, 'timestamp': datetime.now().isoformat()},
        )
        previous_excepthook(exc_type, exc_value, exc_traceback)

    def thread_excepthook(args):
        thread_name = args.thread.name if args.thread is not None else "unknown"
        logger.critical(
            f"Unhandled exception in thread {thread_name}",
            exc_info=(args.exc_type, args.exc_value, args.exc_traceback),
        )
        _dispatch_report(
            loop,
            "Erro Crítico Não Tratado - Sistema de Relatórios",
            f"Ocorreu um erro não tratado na thread {thread_name}.",
            args.exc_value,
            {
                'tipo': args.exc_type.__name__,
                'thread': thread_name,
                'timestamp': datetime.now().isoformat(),
            },
        )
        previous_thread_excepthook(args)

    def loop_exception_handler(event_loop, handler_context):
        error = handler_context.get('exception')
        if isinstance(error, ReportError):
            # Run failures are reported where they happen
            logger.error(f"Unretrieved report error: {error}")
            return
        logger.error(f"Unhandled error in event loop: {handler_context.get('message')}")
        _track(event_loop.create_task(report_failure(
            "Tarefa Assíncrona Não Tratada - Sistema de Relatórios",
            "Uma tarefa assíncrona falhou e o erro não foi tratado.",
            error,
            {
                'tipo': 'unhandled_task_error',
                'mensagem': handler_context.get('message', ''),
                'timestamp': datetime.now().isoformat(),
            },
        )))

    sys.excepthook = excepthook
    threading.excepthook = thread_excepthook
    loop.set_exception_handler(loop_exception_handler)
    logger.info("Crash hook installed")
