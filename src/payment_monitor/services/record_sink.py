"""Airtable record sink for failed payments.

Each processed event creates one row in the Failed Payments table. There is
no deduplication key: a redelivered event produces a second row.
"""

import datetime as dt
from typing import Any

import httpx

from payment_monitor.models.enums import LogLevel, RecordStatus
from payment_monitor.models.errors import RecordSinkError
from payment_monitor.models.payment import FailurePayment, SinkRecord, build_record_fields
from payment_monitor.services.log_buffer import LogBuffer
from payment_monitor.utils.logging import get_logger

logger = get_logger(__name__)


class AirtableClient:
    """Minimal async client for the Airtable REST API.

    Only record creation is needed. The transport is injectable so tests can
    serve responses from httpx.MockTransport.
    """

    def __init__(
        self,
        *,
        api_key: str | None,
        base_id: str | None,
        api_url: str = "https://api.airtable.com/v0",
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key or ""
        self._base_id = base_id or ""
        self._api_url = api_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key and self._base_id)

    async def create_record(self, table: str, fields: dict[str, Any]) -> str:
        """Create one record and return its ID.

        Raises:
            RecordSinkError: On missing configuration, transport errors,
                non-2xx responses or an unexpected response body.
        """
        if not self.is_configured:
            raise RecordSinkError("Airtable not configured (missing AIRTABLE_API_KEY/AIRTABLE_BASE_ID)")

        url = f"{self._api_url}/{self._base_id}/{table}"
        headers = {"Authorization": f"Bearer {self._api_key}"}

        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            try:
                response = await client.post(
                    url, json={"records": [{"fields": fields}]}, headers=headers
                )
                response.raise_for_status()
                body = response.json()
            except httpx.HTTPStatusError as e:
                raise RecordSinkError(_describe_status_error(e.response)) from e
            except httpx.HTTPError as e:
                raise RecordSinkError(f"Airtable request failed: {e}") from e
            except ValueError as e:
                raise RecordSinkError(f"Invalid Airtable response: {e}") from e

        try:
            return body["records"][0]["id"]
        except (KeyError, IndexError, TypeError) as e:
            raise RecordSinkError("Invalid Airtable response: missing record id") from e


def _describe_status_error(response: httpx.Response) -> str:
    """Airtable error text for a failed response, without request credentials."""
    try:
        error = response.json().get("error")
    except ValueError:
        error = None

    if isinstance(error, dict):
        detail = error.get("message") or error.get("type")
    else:
        detail = error
    if detail:
        return f"Airtable error {response.status_code}: {detail}"
    return f"Airtable error {response.status_code}"


class RecordSink:
    """Writes FailurePayment rows to the Failed Payments table.

    Errors are logged to the buffer and then re-raised as RecordSinkError.
    """

    def __init__(
        self,
        client: AirtableClient,
        *,
        log_buffer: LogBuffer,
        table_name: str = "Failed Payments",
    ) -> None:
        self._client = client
        self._log = log_buffer
        self._table_name = table_name

    @property
    def table_name(self) -> str:
        return self._table_name

    @property
    def is_configured(self) -> bool:
        return self._client.is_configured

    async def write(self, fields: dict[str, Any]) -> str:
        """Create a row from raw column values, returning the record ID.

        Raises:
            RecordSinkError: If the datastore rejected or never received the write.
        """
        try:
            return await self._client.create_record(self._table_name, fields)
        except RecordSinkError as e:
            self._log.append(f"Error creating Airtable record: {e.message}", LogLevel.ERROR)
            raise

    async def create(
        self,
        payment: FailurePayment,
        status: RecordStatus = RecordStatus.FAILED,
    ) -> SinkRecord:
        """Create the Failed Payments row for a payment.

        Raises:
            RecordSinkError: Logged to the buffer before being raised.
        """
        failed_at = dt.datetime.now(dt.UTC).isoformat()
        fields = build_record_fields(payment, status=status, failed_at=failed_at)

        record_id = await self.write(fields)
        self._log.append(f"Failed payment record created in Airtable: {record_id}")
        return SinkRecord(record_id=record_id, status=status, fields=fields)
