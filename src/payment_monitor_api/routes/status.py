"""Status, health and diagnostic log endpoints."""

import datetime as dt
import time

from fastapi import APIRouter, Depends

from payment_monitor.services.log_buffer import RECENT_LOGS_LIMIT, LogBuffer, get_log_buffer
from payment_monitor_api.models import HealthResponse, LogsResponse, StatusPage

router = APIRouter(tags=["status"])

_STARTED_AT = time.monotonic()

SERVICE_NAME = "Stripe Payment Monitor"

ENDPOINTS = {
    "GET /": "This status page",
    "GET /health": "Health check",
    "GET /logs": "View recent logs",
    "POST /test": "Manual test run",
    "POST /webhook": "Stripe webhook endpoint",
}


@router.get("/", response_model=StatusPage, summary="Service descriptor")
async def status_page() -> StatusPage:
    return StatusPage(
        name=SERVICE_NAME,
        status="active",
        endpoints=ENDPOINTS,
        description=(
            "Monitors Stripe for failed payments and sends alerts via Gmail and Airtable"
        ),
    )


@router.get("/health", response_model=HealthResponse, summary="Liveness probe")
async def health() -> HealthResponse:
    return HealthResponse(
        timestamp=dt.datetime.now(dt.UTC).isoformat(),
        uptime=time.monotonic() - _STARTED_AT,
    )


@router.get("/logs", response_model=LogsResponse, summary="View recent logs")
async def recent_logs(log_buffer: LogBuffer = Depends(get_log_buffer)) -> LogsResponse:
    """Last 50 diagnostic entries, oldest first.

    ``total`` is the current buffer occupancy (capped at 100), not the number
    of events processed since startup.
    """
    return LogsResponse(logs=log_buffer.recent(RECENT_LOGS_LIMIT), total=log_buffer.size())
