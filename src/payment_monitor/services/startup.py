"""Startup initialization. Failures are logged and never stop the process."""

from payment_monitor.models.enums import LogLevel
from payment_monitor.models.errors import InitializationError
from payment_monitor.services.log_buffer import LogBuffer
from payment_monitor.services.record_sink import RecordSink


def ensure_failed_payments_table(record_sink: RecordSink, log_buffer: LogBuffer) -> None:
    """Check the record store can accept Failed Payments rows.

    Airtable creates the columns on first write, so only configuration is checked.

    Raises:
        InitializationError: If the record store is not configured.
    """
    if not record_sink.is_configured:
        raise InitializationError(
            f"Record store not configured for table '{record_sink.table_name}'"
        )
    log_buffer.append("Failed Payments table structure ready")


def initialize_monitor(record_sink: RecordSink, log_buffer: LogBuffer) -> bool:
    """Run startup checks.

    Returns:
        True if initialization succeeded, False if the failure was logged.
    """
    try:
        ensure_failed_payments_table(record_sink, log_buffer)
    except InitializationError as e:
        log_buffer.append(f"Initialization error: {e.message}", LogLevel.ERROR)
        return False

    log_buffer.append("Stripe Payment Monitor initialized successfully")
    return True
