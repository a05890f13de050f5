"""Runtime configuration for the payment monitor.

Settings come from environment variables. When SSM_PARAMETER_PREFIX is set,
secrets missing from the environment are looked up in SSM Parameter Store.
"""

import os
from collections.abc import Mapping
from functools import lru_cache

from pydantic import BaseModel, ConfigDict, Field

from payment_monitor.models.enums import SinkFailureMode
from payment_monitor.services.ssm_service import SSMService
from payment_monitor.utils.logging import get_logger

logger = get_logger(__name__)

# Settings field -> (environment variable, SSM parameter name)
SECRET_SOURCES: dict[str, tuple[str, str]] = {
    "stripe_secret_key": ("STRIPE_SECRET_KEY", "stripe/secret_key"),
    "stripe_webhook_secret": ("STRIPE_WEBHOOK_SECRET", "stripe/webhook_secret"),
    "airtable_api_key": ("AIRTABLE_API_KEY", "airtable/api_key"),
    "gmail_app_password": ("GMAIL_APP_PASSWORD", "gmail/app_password"),
}

PLAIN_SOURCES: dict[str, str] = {
    "webhook_tolerance_seconds": "STRIPE_WEBHOOK_TOLERANCE",
    "airtable_base_id": "AIRTABLE_BASE_ID",
    "airtable_table_name": "AIRTABLE_TABLE_NAME",
    "airtable_api_url": "AIRTABLE_API_URL",
    "gmail_user": "GMAIL_USER",
    "alert_recipient": "ALERT_RECIPIENT",
    "smtp_host": "SMTP_HOST",
    "smtp_port": "SMTP_PORT",
    "sink_failure_mode": "SINK_FAILURE_MODE",
    "port": "PORT",
    "ssm_parameter_prefix": "SSM_PARAMETER_PREFIX",
}


class MonitorSettings(BaseModel):
    """Credentials and behavior switches for the monitor."""

    model_config = ConfigDict(frozen=True)

    stripe_secret_key: str | None = None
    stripe_webhook_secret: str | None = Field(
        default=None,
        description="Webhook signing secret; unset means unsigned bodies are trusted",
    )
    webhook_tolerance_seconds: int = Field(default=300, ge=0)

    airtable_api_key: str | None = None
    airtable_base_id: str | None = None
    airtable_table_name: str = "Failed Payments"
    airtable_api_url: str = "https://api.airtable.com/v0"

    gmail_user: str | None = None
    gmail_app_password: str | None = None
    alert_recipient: str | None = None
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587

    sink_failure_mode: SinkFailureMode = SinkFailureMode.PER_SINK_INDEPENDENT
    port: int = 3000
    ssm_parameter_prefix: str | None = None

    @property
    def alert_to(self) -> str | None:
        """Alert recipient, defaulting to the sending account."""
        return self.alert_recipient or self.gmail_user

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        ssm: SSMService | None = None,
    ) -> "MonitorSettings":
        """Build settings from environment variables and, optionally, SSM.

        Args:
            environ: Variables to read. Defaults to os.environ.
            ssm: SSM lookup to use instead of creating one from SSM_PARAMETER_PREFIX.

        Raises:
            SSMServiceError: If SSM is consulted and fails for a reason other
                than a missing parameter.
        """
        env = os.environ if environ is None else environ
        values: dict[str, str] = {}

        for field_name, var in PLAIN_SOURCES.items():
            if env.get(var):
                values[field_name] = env[var]

        prefix = values.get("ssm_parameter_prefix")
        if ssm is None and prefix:
            ssm = SSMService(prefix)

        for field_name, (var, parameter) in SECRET_SOURCES.items():
            if env.get(var):
                values[field_name] = env[var]
            elif ssm is not None:
                secret = ssm.get_optional_parameter(parameter)
                if secret:
                    values[field_name] = secret

        settings = cls.model_validate(values)
        if not settings.stripe_webhook_secret:
            logger.warning(
                "STRIPE_WEBHOOK_SECRET not configured; webhook bodies are accepted unsigned"
            )
        return settings


@lru_cache(maxsize=1)
def get_settings() -> MonitorSettings:
    """Get the process-wide settings (read once)."""
    return MonitorSettings.from_env()
