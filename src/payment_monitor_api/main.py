"""FastAPI application for the Stripe payment monitor.

Endpoints:
- GET /         service descriptor
- GET /health   liveness probe
- GET /logs     recent diagnostic log entries
- POST /test    manual smoke test of both sinks
- POST /webhook Stripe webhook ingestion
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import Any

from fastapi import FastAPI
from mangum import Mangum

from payment_monitor.config import get_settings
from payment_monitor.models.enums import LogLevel
from payment_monitor.services.log_buffer import get_log_buffer
from payment_monitor.services.ssm_service import SSMServiceError
from payment_monitor.services.startup import initialize_monitor
from payment_monitor.utils.logging import configure_logging, get_logger
from payment_monitor_api.dependencies import get_record_sink
from payment_monitor_api.exceptions import register_exception_handlers
from payment_monitor_api.middleware.correlation import CorrelationIdMiddleware
from payment_monitor_api.routes.harness import router as harness_router
from payment_monitor_api.routes.status import router as status_router
from payment_monitor_api.routes.webhooks import router as webhooks_router

logger = get_logger(__name__)
configure_logging()


@lru_cache(maxsize=1)
def start_monitor() -> bool:
    """Log startup and run initialization checks once per process (never fatal).

    Called from the lifespan under uvicorn, and from the Lambda handler on the
    first invocation of a container since Mangum runs with lifespan off.

    Returns:
        True if initialization succeeded.
    """
    log_buffer = get_log_buffer()
    try:
        settings = get_settings()
        record_sink = get_record_sink()
    except SSMServiceError as e:
        log_buffer.append(f"Initialization error: {e}", LogLevel.ERROR)
        return False

    log_buffer.append(f"Stripe Payment Monitor running on port {settings.port}")
    return initialize_monitor(record_sink, log_buffer)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    start_monitor()
    yield


app = FastAPI(
    title="Stripe Payment Monitor",
    description="Monitors Stripe for failed payments and sends alerts via Gmail and Airtable",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(CorrelationIdMiddleware)

register_exception_handlers(app)

app.include_router(status_router)
app.include_router(harness_router)
app.include_router(webhooks_router)


# Mangum wraps FastAPI for AWS Lambda + API Gateway
asgi_handler = Mangum(app, lifespan="off")


def handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """AWS Lambda entry point."""
    start_monitor()
    return asgi_handler(event, context)


def run_server(host: str = "0.0.0.0", port: int | None = None, reload: bool = False) -> None:
    """Run the FastAPI server.

    Args:
        host: Host to bind to (default: 0.0.0.0)
        port: Port to listen on (default: PORT env var, else 3000)
        reload: Enable hot reload for development (default: False)
    """
    import uvicorn

    port = port or get_settings().port
    if reload:
        # Use string reference for reload mode (uvicorn requirement)
        uvicorn.run("payment_monitor_api.main:app", host=host, port=port, reload=True)
    else:
        uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    run_server()
