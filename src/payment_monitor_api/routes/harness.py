"""Manual smoke-test endpoint for the notification sinks."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from starlette.status import HTTP_500_INTERNAL_SERVER_ERROR

from payment_monitor.models.errors import TestHarnessError
from payment_monitor.services.email_sink import EmailSink
from payment_monitor.services.harness import run_smoke_test
from payment_monitor.services.log_buffer import LogBuffer, get_log_buffer
from payment_monitor.services.record_sink import RecordSink
from payment_monitor_api.dependencies import get_email_sink, get_record_sink
from payment_monitor_api.models import TestRunFailure, TestRunResponse

router = APIRouter(tags=["test"])


@router.post(
    "/test",
    summary="Manual test run",
    description="Sends a test email and writes a Status=Test record, bypassing webhook verification.",
    response_model=TestRunResponse,
    responses={500: {"description": "A sink failed", "model": TestRunFailure}},
)
async def manual_test_run(
    email_sink: EmailSink = Depends(get_email_sink),
    record_sink: RecordSink = Depends(get_record_sink),
    log_buffer: LogBuffer = Depends(get_log_buffer),
) -> TestRunResponse | JSONResponse:
    try:
        result = await run_smoke_test(email_sink, record_sink, log_buffer)
    except TestHarnessError as e:
        return JSONResponse(
            status_code=HTTP_500_INTERNAL_SERVER_ERROR,
            content=TestRunFailure(error=e.message).model_dump(),
        )

    return TestRunResponse(gmail_test=result.email_result, airtable_test=result.record_result)
