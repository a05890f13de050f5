"""Backend services for the Stripe payment monitor."""

from .dispatcher import EventDispatcher, FanoutResult, WebhookAck
from .email_sink import EmailSink
from .harness import SmokeTestResult, run_smoke_test
from .log_buffer import LogBuffer, get_log_buffer, reset_log_buffer
from .normalizer import normalize_payment
from .record_sink import AirtableClient, RecordSink
from .ssm_service import SSMService, SSMServiceError
from .startup import initialize_monitor
from .stripe_service import StripeService

__all__ = [
    "AirtableClient",
    "EmailSink",
    "EventDispatcher",
    "FanoutResult",
    "LogBuffer",
    "RecordSink",
    "SSMService",
    "SSMServiceError",
    "SmokeTestResult",
    "StripeService",
    "WebhookAck",
    "get_log_buffer",
    "initialize_monitor",
    "normalize_payment",
    "reset_log_buffer",
    "run_smoke_test",
]
