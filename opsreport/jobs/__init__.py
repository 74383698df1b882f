"""
Report Jobs.

Everything that turns aggregated records into delivered reports:
- retry.py: Bounded retry with linear backoff for channel sends
- email_report.py: SMTP delivery of the summary with the spreadsheet attached
- messaging_report.py: Messaging workspace delivery (summary text + file)
- failure_report.py: Failure e-mails and the process-wide crash hook
- report_runs.py: Daily, weekly and monthly run orchestration
- scheduler.py: In-process scheduler firing the runs

Environment Requirements:
-------------------------
For e-mail delivery and failure notices:
- MAIL_EMAIL / MAIL_PASSWORD: SMTP sender credentials
- DIRETOR_EMAIL: Recipient (defaults to MAIL_EMAIL)

For messaging delivery:
- SLACK_BOT_TOKEN: Bot token
- SLACK_CHANNEL: Target channel; unset disables the channel

Usage Examples:
---------------
    from opsreport.jobs import run_daily_report, ReportScheduler

    result = await run_daily_report()

    scheduler = ReportScheduler()
    await scheduler.start()
"""

from opsreport.jobs.retry import RetryPolicy, linear_backoff
from opsreport.jobs.email_report import send_email_report, send_mail
from opsreport.jobs.messaging_report import (
    MessagingSession,
    messaging_session,
    send_messaging_report,
)
from opsreport.jobs.failure_report import report_failure, install_crash_hook
from opsreport.jobs.report_runs import (
    run_report,
    run_daily_report,
    run_weekly_report,
    run_monthly_report,
)
from opsreport.jobs.scheduler import (
    ScheduleRule,
    DEFAULT_RULES,
    next_fire_time,
    ReportScheduler,
)

__all__ = [
    'RetryPolicy',
    'linear_backoff',
    'send_email_report',
    'send_mail',
    'MessagingSession',
    'messaging_session',
    'send_messaging_report',
    'report_failure',
    'install_crash_hook',
    'run_report',
    'run_daily_report',
    'run_weekly_report',
    'run_monthly_report',
    'ScheduleRule',
    'DEFAULT_RULES',
    'next_fire_time',
    'ReportScheduler',
]
