"""FastAPI dependency injection providers for monitor services.

Each provider is cached with @lru_cache so the process shares one instance of
every external-service client. Routes receive them through Depends(), and
tests swap them via app.dependency_overrides.

Service Dependency Graph:
    MonitorSettings (get_settings)
        ├── StripeService
        ├── EmailSink ──────┐
        └── RecordSink ─────┼── EventDispatcher
                            │
    LogBuffer (get_log_buffer) ┘

Testing:
    Use reset_services() to clear cached instances between tests.
"""

from functools import lru_cache

from payment_monitor.config import get_settings
from payment_monitor.services.dispatcher import EventDispatcher
from payment_monitor.services.email_sink import EmailSink
from payment_monitor.services.log_buffer import get_log_buffer, reset_log_buffer
from payment_monitor.services.record_sink import AirtableClient, RecordSink
from payment_monitor.services.stripe_service import StripeService

__all__ = [
    "get_dispatcher",
    "get_email_sink",
    "get_log_buffer",
    "get_record_sink",
    "get_settings",
    "get_stripe_service",
    "reset_services",
]


@lru_cache
def get_stripe_service() -> StripeService:
    """Webhook verifier using the configured signing secret."""
    settings = get_settings()
    return StripeService(
        settings.stripe_webhook_secret,
        tolerance=settings.webhook_tolerance_seconds,
    )


@lru_cache
def get_email_sink() -> EmailSink:
    """Gmail alert sink writing to the shared log buffer."""
    settings = get_settings()
    return EmailSink(
        user=settings.gmail_user,
        password=settings.gmail_app_password,
        recipient=settings.alert_to,
        host=settings.smtp_host,
        port=settings.smtp_port,
        log_buffer=get_log_buffer(),
    )


@lru_cache
def get_record_sink() -> RecordSink:
    """Airtable record sink for the Failed Payments table."""
    settings = get_settings()
    client = AirtableClient(
        api_key=settings.airtable_api_key,
        base_id=settings.airtable_base_id,
        api_url=settings.airtable_api_url,
    )
    return RecordSink(
        client,
        log_buffer=get_log_buffer(),
        table_name=settings.airtable_table_name,
    )


@lru_cache
def get_dispatcher() -> EventDispatcher:
    """Event dispatcher wired to both sinks."""
    return EventDispatcher(
        get_email_sink(),
        get_record_sink(),
        get_log_buffer(),
        failure_mode=get_settings().sink_failure_mode,
    )


def reset_services() -> None:
    """Clear all cached service instances, settings and the log buffer.

    Example:
        @pytest.fixture(autouse=True)
        def reset_state():
            yield
            reset_services()
    """
    get_stripe_service.cache_clear()
    get_email_sink.cache_clear()
    get_record_sink.cache_clear()
    get_dispatcher.cache_clear()
    get_settings.cache_clear()
    reset_log_buffer()
