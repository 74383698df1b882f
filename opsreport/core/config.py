"""
Settings and environment management module for the operations reporting service.

This module provides centralized configuration management using pydantic-settings,
which automatically loads settings from environment variables and .env files.

Key Features:
- Environment variable validation and type coercion
- Sensible defaults for the production upstreams (SGCOR and SULTS)
- Singleton pattern via @lru_cache for efficient access
- Optional credentials: a missing ticket token or messaging channel disables
  that feature instead of failing the run

Environment Variables:
- SGCOR_API_URL / SGCOR_LOGIN_URL: Production and claims search API
- SGCOR_USERNAME / SGCOR_PASSWORD: Login credentials for the search API
- SULTS_ACCESS_TOKEN: Ticket feed token (urgent tickets skipped when unset)
- MAIL_EMAIL / MAIL_PASSWORD: SMTP sender
- DIRETOR_EMAIL (or DIRECTOR_EMAIL): Report recipient
- SLACK_BOT_TOKEN / SLACK_CHANNEL: Messaging workspace delivery

Usage:
    from opsreport.core.config import get_settings

    settings = get_settings()
    delay = settings.page_delay_seconds
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        sgcor_api_url: Base URL of the production/claims search API.
        sgcor_login_url: Login endpoint returning the bearer token.
        sgcor_username: Login e-mail for the search API.
        sgcor_password: Login password for the search API.
        sults_api_url: Ticket feed endpoint.
        sults_access_token: Raw token for the ticket feed. Optional.
        page_delay_seconds: Fixed pause after every search page.
        ticket_page_delay_seconds: Fixed pause after every ticket feed page.
        ticket_page_size: Page size requested from the ticket feed.
        ticket_lookback_days: Days before the target date where the ticket window opens.
        http_timeout_seconds: Total timeout for a single upstream request.
        mail_host: SMTP host.
        mail_port: SMTP port (STARTTLS).
        mail_email: SMTP user and sender address.
        mail_password: SMTP password.
        director_email: Report recipient; falls back to mail_email.
        slack_bot_token: Messaging workspace bot token.
        slack_channel: Messaging channel receiving the summary and spreadsheet.
        messaging_startup_timeout_seconds: Upper bound for the session to become ready.
        messaging_max_attempts: Attempts per messaging delivery operation.
        messaging_backoff_seconds: Base of the linear backoff between attempts.
        report_output_dir: Directory where spreadsheets are written.
        report_timezone: Timezone of the schedule rules.
        scheduler_enabled: Start the in-process scheduler with the app.
    """

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore',
        case_sensitive=False,
    )

    # =========================================================================
    # Search API (production and claims)
    # =========================================================================

    sgcor_api_url: str = 'https://apirest.gruposgcor.com.br/api'
    sgcor_login_url: str = 'https://apirest.gruposgcor.com.br/api/login'
    sgcor_username: Optional[str] = None
    sgcor_password: Optional[str] = None

    # =========================================================================
    # Ticket feed (urgent assistance tickets)
    # =========================================================================

    sults_api_url: str = 'https://api.sults.com.br/api/v1/chamado/ticket'
    sults_access_token: Optional[str] = None

    # =========================================================================
    # Pagination and rate limiting
    # =========================================================================

    # Upstream APIs have not been verified to tolerate bursts, so every page
    # is followed by a fixed pause
    page_delay_seconds: float = Field(default=1.0, ge=0)
    ticket_page_delay_seconds: float = Field(default=0.5, ge=0)
    ticket_page_size: int = Field(default=100, ge=1)
    ticket_lookback_days: int = Field(default=7, ge=0)
    http_timeout_seconds: float = Field(default=60.0, gt=0)

    # =========================================================================
    # E-mail channel (also used for failure reports)
    # =========================================================================

    mail_host: str = 'smtp.dreamhost.com'
    mail_port: int = 587
    mail_email: Optional[str] = None
    mail_password: Optional[str] = None
    director_email: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices('director_email', 'diretor_email'),
    )
    mail_sender_name: str = 'Tecnologia Avantar'

    # =========================================================================
    # Messaging channel
    # =========================================================================

    slack_bot_token: Optional[str] = None
    slack_channel: Optional[str] = None
    messaging_startup_timeout_seconds: float = Field(default=300.0, gt=0)
    messaging_max_attempts: int = Field(default=3, ge=1)
    messaging_backoff_seconds: float = Field(default=2.0, ge=0)

    # =========================================================================
    # Output and scheduling
    # =========================================================================

    report_output_dir: Path = Path('.')
    report_timezone: str = 'America/Sao_Paulo'
    scheduler_enabled: bool = True

    @property
    def report_recipient(self) -> Optional[str]:
        """Recipient for reports and failure e-mails."""
        return self.director_email or self.mail_email


@lru_cache()
def get_settings() -> Settings:
    """
    Get the application settings singleton.

    Returns:
        Settings: The application settings instance with all configuration values.

    Note:
        To refresh settings in tests, clear the cache:
        >>> get_settings.cache_clear()
    """
    return Settings()
