"""Error codes and exceptions for the payment monitor.

Every failure the monitor can surface is a MonitorError subclass carrying an
ErrorCode discriminant and the underlying library or service message. Messages
never include credentials.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict


class ErrorCode(str, Enum):
    """Error kinds, one per failure the monitor distinguishes."""

    VERIFICATION_FAILED = "ERR_VERIFICATION"
    EMAIL_SINK_FAILED = "ERR_EMAIL_SINK"
    RECORD_SINK_FAILED = "ERR_RECORD_SINK"
    INITIALIZATION_FAILED = "ERR_INITIALIZATION"
    TEST_HARNESS_FAILED = "ERR_TEST_HARNESS"


class ErrorResponse(BaseModel):
    """JSON body returned when a MonitorError reaches the HTTP layer."""

    model_config = ConfigDict(strict=True)

    success: bool = False
    error_code: ErrorCode
    error: str


class MonitorError(Exception):
    """Base exception for payment monitor failures."""

    code: ErrorCode = ErrorCode.VERIFICATION_FAILED

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert this exception to an ErrorResponse body."""
        return ErrorResponse(error_code=self.code, error=self.message)


class VerificationError(MonitorError):
    """Webhook signature mismatch or malformed body."""

    code = ErrorCode.VERIFICATION_FAILED


class EmailSinkError(MonitorError):
    """Sending the failed-payment email alert failed."""

    code = ErrorCode.EMAIL_SINK_FAILED


class RecordSinkError(MonitorError):
    """Creating the failed-payment record in the datastore failed."""

    code = ErrorCode.RECORD_SINK_FAILED


class InitializationError(MonitorError):
    """Startup-time setup failed. Logged, never fatal."""

    code = ErrorCode.INITIALIZATION_FAILED


class TestHarnessError(MonitorError):
    """A sink failed during an operator-triggered test run."""

    __test__ = False  # not a pytest test class

    code = ErrorCode.TEST_HARNESS_FAILED
