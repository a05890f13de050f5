"""Pydantic models for the Stripe payment monitor."""

from .enums import FailureEventType, LogLevel, RecordStatus, SinkFailureMode
from .errors import (
    EmailSinkError,
    ErrorCode,
    ErrorResponse,
    InitializationError,
    MonitorError,
    RecordSinkError,
    TestHarnessError,
    VerificationError,
)
from .log_entry import LogEntry
from .payment import NOT_AVAILABLE, FailurePayment, SinkRecord, build_record_fields

__all__ = [
    # Enums
    "FailureEventType",
    "LogLevel",
    "RecordStatus",
    "SinkFailureMode",
    # Errors
    "EmailSinkError",
    "ErrorCode",
    "ErrorResponse",
    "InitializationError",
    "MonitorError",
    "RecordSinkError",
    "TestHarnessError",
    "VerificationError",
    # Log
    "LogEntry",
    # Payment
    "NOT_AVAILABLE",
    "FailurePayment",
    "SinkRecord",
    "build_record_fields",
]
