"""Stripe webhook endpoint.

No authentication beyond the Stripe-Signature header: the raw body is
verified against the webhook signing secret before any processing. Without a
configured secret the body is trusted as-is (local development only).
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse
from starlette.status import HTTP_400_BAD_REQUEST

from payment_monitor.models.enums import LogLevel
from payment_monitor.models.errors import MonitorError
from payment_monitor.services.dispatcher import EventDispatcher
from payment_monitor.services.log_buffer import LogBuffer, get_log_buffer
from payment_monitor.services.stripe_service import StripeService
from payment_monitor.utils.logging import get_logger
from payment_monitor_api.dependencies import get_dispatcher, get_stripe_service
from payment_monitor_api.exceptions import webhook_error_response
from payment_monitor_api.models import WebhookResponse

logger = get_logger(__name__)

router = APIRouter(tags=["webhooks"])

SIGNATURE_HEADER = "Stripe-Signature"


@router.post(
    "/webhook",
    summary="Receive Stripe webhook events",
    description="""
Handles failed payment events:
- charge.failed
- payment_intent.payment_failed
- invoice.payment_failed
- payment_method.attach_failed

Each one sends a Gmail alert and creates an Airtable record. Other event
types are acknowledged without processing.
""",
    response_model=WebhookResponse,
    responses={
        200: {"description": "Event received", "model": WebhookResponse},
        400: {
            "description": "Invalid signature, malformed body, or record store failure",
            "content": {"text/plain": {"example": "Webhook error: <message>"}},
        },
    },
)
async def handle_stripe_webhook(
    request: Request,
    stripe_service: StripeService = Depends(get_stripe_service),
    dispatcher: EventDispatcher = Depends(get_dispatcher),
    log_buffer: LogBuffer = Depends(get_log_buffer),
) -> WebhookResponse | PlainTextResponse:
    # Signature verification needs the exact bytes
    payload = await request.body()
    signature = request.headers.get(SIGNATURE_HEADER)

    try:
        event = stripe_service.verify_event(payload, signature)
        ack = await dispatcher.dispatch(event)
    except MonitorError as e:
        log_buffer.append(f"Webhook error: {e.message}", LogLevel.ERROR)
        return webhook_error_response(e)
    except Exception as e:
        logger.exception("Unexpected error processing webhook")
        log_buffer.append(f"Webhook error: {e}", LogLevel.ERROR)
        return PlainTextResponse(f"Webhook error: {e}", status_code=HTTP_400_BAD_REQUEST)

    return WebhookResponse(received=ack.received)
