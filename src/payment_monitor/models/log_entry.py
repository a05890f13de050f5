"""Diagnostic log entry model."""

from pydantic import BaseModel, ConfigDict, Field

from .enums import LogLevel


class LogEntry(BaseModel):
    """One operational event recorded in the diagnostic log buffer."""

    model_config = ConfigDict(frozen=True)

    timestamp: str = Field(
        ...,
        description="ISO-8601 UTC timestamp",
        examples=["2026-01-15T10:30:00.000Z"],
    )
    level: LogLevel
    message: str
