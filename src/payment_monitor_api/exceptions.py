"""FastAPI exception handlers for converting MonitorError to HTTP responses.

The ErrorCode-to-HTTP status mapping:
- 400 Bad Request: verification failures and sink failures during webhook
  processing (Stripe redelivers the event)
- 500 Internal Server Error: startup and smoke-test failures

Usage:
    from payment_monitor_api.exceptions import register_exception_handlers
    register_exception_handlers(app)
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.status import HTTP_400_BAD_REQUEST, HTTP_500_INTERNAL_SERVER_ERROR

from payment_monitor.models.errors import ErrorCode, MonitorError

ERROR_CODE_TO_HTTP_STATUS: dict[ErrorCode, int] = {
    ErrorCode.VERIFICATION_FAILED: HTTP_400_BAD_REQUEST,
    ErrorCode.EMAIL_SINK_FAILED: HTTP_400_BAD_REQUEST,
    ErrorCode.RECORD_SINK_FAILED: HTTP_400_BAD_REQUEST,
    ErrorCode.INITIALIZATION_FAILED: HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.TEST_HARNESS_FAILED: HTTP_500_INTERNAL_SERVER_ERROR,
}


def get_http_status_for_error(code: ErrorCode) -> int:
    """HTTP status for an ErrorCode, defaulting to 400 if not mapped."""
    return ERROR_CODE_TO_HTTP_STATUS.get(code, HTTP_400_BAD_REQUEST)


def webhook_error_response(exc: MonitorError) -> PlainTextResponse:
    """Plain-text rejection returned to Stripe for a failed delivery."""
    return PlainTextResponse(
        f"Webhook error: {exc.message}",
        status_code=get_http_status_for_error(exc.code),
    )


async def monitor_error_handler(request: Request, exc: MonitorError) -> JSONResponse:
    """Convert an uncaught MonitorError into an ErrorResponse body.

    Args:
        request: The incoming request (unused but required by FastAPI)
        exc: The MonitorError exception
    """
    return JSONResponse(
        status_code=get_http_status_for_error(exc.code),
        content=exc.to_response().model_dump(mode="json"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app."""
    app.add_exception_handler(MonitorError, monitor_error_handler)  # type: ignore[arg-type]
