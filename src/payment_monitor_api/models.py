"""API response models.

Domain models (FailurePayment, LogEntry, ...) live in payment_monitor.models;
this module holds HTTP-layer shapes only.
"""

from pydantic import BaseModel, Field

from payment_monitor.models.errors import ErrorResponse
from payment_monitor.models.log_entry import LogEntry

__all__ = [
    "ErrorResponse",
    "HealthResponse",
    "LogsResponse",
    "StatusPage",
    "TestRunFailure",
    "TestRunResponse",
    "WebhookResponse",
]


class StatusPage(BaseModel):
    """Static service descriptor served at GET /."""

    name: str
    status: str
    endpoints: dict[str, str]
    description: str


class HealthResponse(BaseModel):
    status: str = "healthy"
    timestamp: str
    uptime: float = Field(..., description="Seconds since the process started")


class LogsResponse(BaseModel):
    """Recent diagnostic log entries."""

    logs: list[LogEntry]
    total: int = Field(
        ...,
        description="Entries currently held in the buffer (at most 100), not a lifetime count",
    )


class TestRunResponse(BaseModel):
    """Result of a successful POST /test."""

    __test__ = False

    success: bool = True
    message: str = "Test completed successfully"
    gmail_test: str
    airtable_test: str


class TestRunFailure(BaseModel):
    """Body returned when POST /test fails."""

    __test__ = False

    success: bool = False
    error: str


class WebhookResponse(BaseModel):
    """Acknowledgment for POST /webhook."""

    received: bool = True
