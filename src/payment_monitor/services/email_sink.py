"""Gmail alert sink for failed payments.

Sends an HTML alert through SMTP with STARTTLS and an app password. The
blocking smtplib conversation runs in a worker thread so the event loop keeps
serving other webhook deliveries while a message is in flight.

Security: the app password is never logged or included in error messages.
"""

import asyncio
import datetime as dt
import html
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from payment_monitor.models.enums import LogLevel
from payment_monitor.models.errors import EmailSinkError
from payment_monitor.models.payment import FailurePayment
from payment_monitor.services.log_buffer import LogBuffer
from payment_monitor.utils.logging import get_logger

logger = get_logger(__name__)

TEST_SUBJECT = "Test: Stripe Payment Monitor is Working"
TEST_BODY = (
    "<p>This is a test email to confirm your Stripe Payment Monitor is working correctly!</p>"
)


def render_alert(payment: FailurePayment, sent_at: dt.datetime | None = None) -> tuple[str, str]:
    """Build the subject and HTML body of a failed payment alert."""
    sent_at = sent_at or dt.datetime.now(dt.UTC)
    rows = [
        ("Time", sent_at.strftime("%Y-%m-%d %H:%M:%S %Z")),
        ("Amount", f"${payment.display_amount} {payment.currency}"),
        ("Customer", payment.customer_email),
        ("Customer ID", payment.customer_id),
        ("Payment ID", payment.id),
        ("Failure Code", payment.failure_code),
        ("Failure Message", payment.failure_message),
        ("Description", payment.description),
    ]
    lines = "\n".join(
        f"<p><strong>{label}:</strong> {html.escape(value)}</p>" for label, value in rows
    )
    body = (
        "<h2>Payment Failed Alert</h2>\n"
        f"{lines}\n"
        "<hr>\n"
        "<p><small>This is an automated alert from your Stripe Payment Monitor</small></p>"
    )
    return f"Payment Failed: ${payment.display_amount}", body


class EmailSink:
    """Failed payment alerts over Gmail SMTP.

    send() is fire-and-forget: any error is logged and swallowed. deliver()
    raises EmailSinkError instead, for callers whose policy needs the failure.
    """

    def __init__(
        self,
        *,
        user: str | None,
        password: str | None,
        log_buffer: LogBuffer,
        recipient: str | None = None,
        host: str = "smtp.gmail.com",
        port: int = 587,
        timeout: float | None = None,
    ) -> None:
        self._user = user or ""
        self._password = password or ""
        self._recipient = recipient or self._user
        self._host = host
        self._port = port
        self._timeout = timeout
        self._log = log_buffer

    @property
    def is_configured(self) -> bool:
        return bool(self._user and self._password and self._recipient)

    def _build_message(self, subject: str, html_body: str) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self._user
        msg["To"] = self._recipient
        msg.attach(MIMEText(html_body, "html"))
        return msg

    def _send_blocking(self, msg: MIMEMultipart) -> None:
        if not self.is_configured:
            raise EmailSinkError("Email not configured (missing GMAIL_USER/GMAIL_APP_PASSWORD)")

        kwargs = {} if self._timeout is None else {"timeout": self._timeout}
        try:
            with smtplib.SMTP(self._host, self._port, **kwargs) as server:
                server.starttls()
                server.login(self._user, self._password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            raise EmailSinkError(str(e)) from e

    async def send_message(self, subject: str, html_body: str) -> None:
        """Send an arbitrary HTML message to the alert recipient.

        Raises:
            EmailSinkError: If the message could not be sent.
        """
        try:
            msg = self._build_message(subject, html_body)
            await asyncio.to_thread(self._send_blocking, msg)
        except EmailSinkError:
            raise
        except Exception as e:
            raise EmailSinkError(f"{type(e).__name__}: {e}") from e

    async def deliver(self, payment: FailurePayment) -> None:
        """Send the alert for a payment, raising on failure.

        Raises:
            EmailSinkError: Logged to the buffer before being raised.
        """
        try:
            subject, body = render_alert(payment)
            await self.send_message(subject, body)
        except EmailSinkError as e:
            self._log.append(f"Error sending Gmail alert: {e.message}", LogLevel.ERROR)
            raise

        self._log.append(f"Failed payment alert sent via Gmail for payment {payment.id}")

    async def send(self, payment: FailurePayment) -> bool:
        """Send the alert for a payment without ever raising.

        Returns:
            True if the alert was sent, False if the failure was contained.
        """
        try:
            await self.deliver(payment)
        except EmailSinkError:
            return False
        return True

    async def send_test(self) -> None:
        """Send the operator smoke-test message.

        Raises:
            EmailSinkError: If the message could not be sent.
        """
        await self.send_message(TEST_SUBJECT, TEST_BODY)
