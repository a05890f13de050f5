"""Route verified Stripe events to the failed payment fan-out.

The four failure event types share one handler that normalizes the payload
and delivers it to the Email Sink, then the Record Sink, one after the other.
Every other event type is logged and acknowledged without touching a sink, so
Stripe does not keep retrying events the monitor does not care about.

Under the default per_sink_independent policy an email failure is contained
while a record failure propagates. A record failure therefore turns into an
HTTP 400 after the alert already went out, and Stripe's redelivery will send
the alert again.
"""

from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from pydantic import BaseModel

from payment_monitor.models.enums import FailureEventType, LogLevel, SinkFailureMode
from payment_monitor.models.errors import EmailSinkError, MonitorError, RecordSinkError
from payment_monitor.models.payment import FailurePayment, SinkRecord
from payment_monitor.services.email_sink import EmailSink
from payment_monitor.services.log_buffer import LogBuffer
from payment_monitor.services.normalizer import normalize_payment
from payment_monitor.services.record_sink import RecordSink
from payment_monitor.utils.logging import get_logger, log_webhook_event

logger = get_logger(__name__)

EventHandler = Callable[[Mapping[str, Any]], Awaitable[None]]


class WebhookAck(BaseModel):
    """Acknowledgment returned to Stripe once an event is accepted."""

    received: bool = True


class FanoutResult(BaseModel):
    """Outcome of delivering one failed payment to both sinks."""

    payment: FailurePayment
    email_sent: bool
    record: SinkRecord | None = None


class EventDispatcher:
    """Dispatches Stripe events by type.

    Usage:
        dispatcher = EventDispatcher(email_sink, record_sink, log_buffer)
        ack = await dispatcher.dispatch(event)
    """

    def __init__(
        self,
        email_sink: EmailSink,
        record_sink: RecordSink,
        log_buffer: LogBuffer,
        *,
        failure_mode: SinkFailureMode = SinkFailureMode.PER_SINK_INDEPENDENT,
    ) -> None:
        self._email = email_sink
        self._record = record_sink
        self._log = log_buffer
        self._failure_mode = failure_mode
        self._handlers: dict[FailureEventType, EventHandler] = {
            event_type: self._handle_failed_payment for event_type in FailureEventType
        }

    @property
    def failure_mode(self) -> SinkFailureMode:
        return self._failure_mode

    def handler_for(self, event_type: Any) -> EventHandler | None:
        """Handler registered for an event type string, or None if unhandled."""
        try:
            return self._handlers[FailureEventType(event_type)]
        except ValueError:
            return None

    async def dispatch(self, event: Mapping[str, Any]) -> WebhookAck:
        """Process one verified event.

        Raises:
            MonitorError: When the sink failure policy says the event failed.
        """
        event_type = event.get("type")
        event_id = str(event.get("id") or "unknown")
        handler = self.handler_for(event_type)

        if handler is None:
            self._log.append(f"Unhandled event type: {event_type}")
            log_webhook_event(logger, str(event_type), event_id, result="skipped")
            return WebhookAck()

        self._log.append(f"Received Stripe webhook: {event_type}")
        log_webhook_event(logger, str(event_type), event_id, result="received")
        try:
            await handler(event)
        except MonitorError as e:
            log_webhook_event(logger, str(event_type), event_id, result="error", error=e.message)
            raise

        log_webhook_event(logger, str(event_type), event_id, result="success")
        return WebhookAck()

    async def _handle_failed_payment(self, event: Mapping[str, Any]) -> None:
        data = event.get("data")
        raw = data.get("object") if isinstance(data, Mapping) else None
        await self.process_failed_payment(raw)

    async def process_failed_payment(self, raw: Any) -> FanoutResult:
        """Normalize a failed payment object and fan it out to both sinks.

        Raises:
            MonitorError: Logged, then re-raised, when the policy fails the event.
        """
        payment = normalize_payment(raw)
        self._log.append(
            f"Processing failed payment: {payment.id}, Amount: ${payment.display_amount}"
        )

        try:
            result = await self._fan_out(payment)
        except MonitorError as e:
            self._log.append(f"Error processing failed payment: {e.message}", LogLevel.ERROR)
            raise

        self._log.append(f"Successfully processed failed payment: {payment.id}")
        return result

    async def _fan_out(self, payment: FailurePayment) -> FanoutResult:
        if self._failure_mode is SinkFailureMode.PER_SINK_INDEPENDENT:
            email_sent = await self._email.send(payment)
            record = await self._record.create(payment)
            return FanoutResult(payment=payment, email_sent=email_sent, record=record)

        if self._failure_mode is SinkFailureMode.ALL_MUST_SUCCEED:
            await self._email.deliver(payment)
            record = await self._record.create(payment)
            return FanoutResult(payment=payment, email_sent=True, record=record)

        # ANY_FAILURE_FAILS: attempt every sink, then report the first failure
        email_error: EmailSinkError | None = None
        try:
            await self._email.deliver(payment)
        except EmailSinkError as e:
            email_error = e

        try:
            record = await self._record.create(payment)
        except RecordSinkError as e:
            raise (email_error or e) from None

        if email_error is not None:
            raise email_error
        return FanoutResult(payment=payment, email_sent=True, record=record)
