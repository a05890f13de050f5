"""Stripe webhook verification.

Authenticates inbound webhook bodies with Stripe's signed-payload scheme
(HMAC-SHA256 over "<timestamp>.<body>" with a timestamp tolerance). When no
signing secret is configured the body is parsed as trusted JSON without any
authentication; that mode is meant for local development only.
"""

import json
import logging
from typing import Any

import stripe

from payment_monitor.models.errors import VerificationError

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE_SECONDS = 300


class StripeService:
    """Verifies and parses Stripe webhook events.

    Usage:
        stripe_svc = StripeService(webhook_secret="whsec_...")
        event = stripe_svc.verify_event(raw_body, request.headers["Stripe-Signature"])
    """

    def __init__(
        self,
        webhook_secret: str | None = None,
        *,
        tolerance: int = DEFAULT_TOLERANCE_SECONDS,
    ) -> None:
        self._webhook_secret = webhook_secret or None
        self._tolerance = tolerance

    @property
    def signature_required(self) -> bool:
        return self._webhook_secret is not None

    def verify_event(self, payload: bytes, signature: str | None) -> dict[str, Any]:
        """Authenticate a webhook body and parse the event.

        Args:
            payload: Raw request body bytes, exactly as received.
            signature: Stripe-Signature header value (ignored when unsigned).

        Returns:
            Parsed event dictionary.

        Raises:
            VerificationError: On signature mismatch, stale timestamp,
                missing header, or a body that is not a JSON object.
        """
        try:
            text = payload.decode("utf-8")
        except UnicodeDecodeError as e:
            raise VerificationError(str(e)) from e

        if self._webhook_secret is not None:
            try:
                stripe.WebhookSignature.verify_header(
                    text, signature or "", self._webhook_secret, self._tolerance
                )
            except stripe.SignatureVerificationError as e:
                logger.warning("Invalid webhook signature: %s", e.user_message or str(e))
                raise VerificationError(e.user_message or str(e)) from e
        else:
            logger.debug("No webhook secret configured, trusting unsigned body")

        # ValueError also covers integers past the int-to-str digit limit
        try:
            event = json.loads(text)
        except ValueError as e:
            raise VerificationError(str(e)) from e

        if not isinstance(event, dict):
            raise VerificationError("Webhook body is not a JSON object")
        return event
