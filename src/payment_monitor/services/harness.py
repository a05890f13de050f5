"""Operator-triggered smoke test of both notification sinks.

Bypasses verification and dispatch: sends a fixed test email and writes a
record with Status "Test" and a time-derived payment ID.
"""

import datetime as dt
import time

from pydantic import BaseModel

from payment_monitor.models.enums import LogLevel, RecordStatus
from payment_monitor.models.errors import MonitorError, TestHarnessError
from payment_monitor.services.email_sink import EmailSink
from payment_monitor.services.log_buffer import LogBuffer
from payment_monitor.services.record_sink import RecordSink


class SmokeTestResult(BaseModel):
    """Per-sink outcome text of a successful smoke test."""

    email_result: str
    record_result: str


def build_test_fields(now: dt.datetime | None = None) -> dict[str, str | float]:
    """Column values for the synthetic Failed Payments test row."""
    now = now or dt.datetime.now(dt.UTC)
    return {
        "Payment ID": f"TEST_{int(time.time() * 1000)}",
        "Amount": 99.99,
        "Currency": "USD",
        "Customer Email": "test@example.com",
        "Failure Code": "TEST",
        "Failure Message": "This is a test record",
        "Failed At": now.isoformat(),
        "Status": RecordStatus.TEST.value,
    }


async def run_smoke_test(
    email_sink: EmailSink,
    record_sink: RecordSink,
    log_buffer: LogBuffer,
) -> SmokeTestResult:
    """Exercise the Email Sink, then the Record Sink.

    Raises:
        TestHarnessError: If either sink fails, carrying its message.
    """
    log_buffer.append("Manual test run initiated")

    try:
        await email_sink.send_test()
        record_id = await record_sink.write(build_test_fields())
    except Exception as e:
        message = e.message if isinstance(e, MonitorError) else str(e)
        log_buffer.append(f"Manual test failed: {message}", LogLevel.ERROR)
        raise TestHarnessError(message) from e

    log_buffer.append("Manual test completed successfully")
    return SmokeTestResult(
        email_result="Email sent",
        record_result=f"Record created: {record_id}",
    )
