"""Enumeration types for the payment monitor."""

from enum import Enum


class LogLevel(str, Enum):
    """Severity of a diagnostic log entry."""

    INFO = "info"
    ERROR = "error"


class FailureEventType(str, Enum):
    """Stripe event types that describe a failed payment."""

    CHARGE_FAILED = "charge.failed"
    PAYMENT_INTENT_FAILED = "payment_intent.payment_failed"
    INVOICE_PAYMENT_FAILED = "invoice.payment_failed"
    PAYMENT_METHOD_ATTACH_FAILED = "payment_method.attach_failed"


class RecordStatus(str, Enum):
    """Status column written to the Failed Payments table."""

    FAILED = "Failed"
    TEST = "Test"


class SinkFailureMode(str, Enum):
    """How sink errors during fan-out affect the webhook acknowledgment."""

    PER_SINK_INDEPENDENT = "per_sink_independent"  # email contained, record propagates
    ANY_FAILURE_FAILS = "any_failure_fails"  # run every sink, then raise first error
    ALL_MUST_SUCCEED = "all_must_succeed"  # stop at the first failing sink
