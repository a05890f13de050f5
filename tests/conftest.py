"""Pytest configuration and fixtures for the Stripe payment monitor tests.

This module provides reusable fixtures for testing:
- Environment isolation and service cache resets
- SMTP mocking for the Gmail sink
- A fake Airtable API served through httpx.MockTransport
- Stripe webhook signature helpers
- A FastAPI TestClient wired to the fakes
"""

import hashlib
import hmac
import json
import os
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generator
from unittest.mock import MagicMock, patch

import httpx
import pytest
from fastapi.testclient import TestClient

from payment_monitor.config import PLAIN_SOURCES, SECRET_SOURCES
from payment_monitor.services.dispatcher import EventDispatcher
from payment_monitor.services.email_sink import EmailSink
from payment_monitor.services.log_buffer import LogBuffer, get_log_buffer
from payment_monitor.services.record_sink import AirtableClient, RecordSink
from payment_monitor.services.stripe_service import StripeService

# === Test Configuration ===

TEST_WEBHOOK_SECRET = "whsec_test_secret_for_testing"
TEST_GMAIL_USER = "alerts@example.com"
TEST_GMAIL_PASSWORD = "app-password-abcd"
TEST_AIRTABLE_KEY = "pat_test_airtable"
TEST_AIRTABLE_BASE = "appTEST123"

# Fake AWS credentials for moto
os.environ.setdefault("AWS_DEFAULT_REGION", "eu-west-1")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")


# === Environment / Singleton Fixtures ===


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Remove monitor configuration from the environment and reset caches.

    Tests never pick up real credentials from the developer's shell, and every
    test starts with a fresh log buffer and fresh service singletons.
    """
    from payment_monitor_api.dependencies import reset_services
    from payment_monitor_api.main import start_monitor

    for var in PLAIN_SOURCES.values():
        monkeypatch.delenv(var, raising=False)
    for var, _ in SECRET_SOURCES.values():
        monkeypatch.delenv(var, raising=False)

    reset_services()
    start_monitor.cache_clear()
    yield
    reset_services()
    start_monitor.cache_clear()


@pytest.fixture
def log_buffer() -> LogBuffer:
    """Fresh diagnostic log buffer."""
    return LogBuffer()


# === SMTP Fixtures ===


@pytest.fixture
def smtp_mock() -> Generator[MagicMock, None, None]:
    """Mock smtplib.SMTP used by the Gmail sink.

    The yielded mock is the SMTP class; ``smtp_mock.server`` is the connected
    server object returned by the context manager.
    """
    with patch("payment_monitor.services.email_sink.smtplib.SMTP") as mock_smtp_class:
        server = MagicMock()
        mock_smtp_class.return_value.__enter__.return_value = server
        mock_smtp_class.server = server
        yield mock_smtp_class


# === Airtable Fixtures ===


class FakeAirtable:
    """In-memory stand-in for the Airtable records endpoint."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.error_body: dict[str, Any] | None = None
        self.raise_error: Exception | None = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.raise_error is not None:
            raise self.raise_error
        if self.status_code >= 400:
            return httpx.Response(self.status_code, json=self.error_body or {})

        fields = json.loads(request.content)["records"][0]["fields"]
        record_id = f"rec{len(self.requests):05d}"
        return httpx.Response(
            self.status_code,
            json={"records": [{"id": record_id, "createdTime": "2026-01-01T00:00:00.000Z", "fields": fields}]},
        )

    def fail_with(self, status_code: int, message: str, error_type: str = "INVALID_REQUEST") -> None:
        self.status_code = status_code
        self.error_body = {"error": {"type": error_type, "message": message}}

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def created_fields(self) -> list[dict[str, Any]]:
        return [json.loads(r.content)["records"][0]["fields"] for r in self.requests]


@pytest.fixture
def fake_airtable() -> FakeAirtable:
    return FakeAirtable()


# === Sink Fixtures ===


@pytest.fixture
def email_sink(log_buffer: LogBuffer) -> EmailSink:
    return EmailSink(
        user=TEST_GMAIL_USER,
        password=TEST_GMAIL_PASSWORD,
        log_buffer=log_buffer,
    )


@pytest.fixture
def record_sink(log_buffer: LogBuffer, fake_airtable: FakeAirtable) -> RecordSink:
    client = AirtableClient(
        api_key=TEST_AIRTABLE_KEY,
        base_id=TEST_AIRTABLE_BASE,
        transport=fake_airtable.transport,
    )
    return RecordSink(client, log_buffer=log_buffer)


# === Stripe Fixtures ===


@pytest.fixture
def sign_payload() -> Callable[..., str]:
    """Build a valid Stripe-Signature header for a payload.

    Stripe signatures use HMAC-SHA256 with format: t={timestamp},v1={signature}
    """

    def _sign(payload: bytes, secret: str = TEST_WEBHOOK_SECRET, timestamp: int | None = None) -> str:
        ts = int(time.time()) if timestamp is None else timestamp
        signed_payload = f"{ts}.{payload.decode('utf-8')}"
        signature = hmac.new(
            secret.encode("utf-8"),
            signed_payload.encode("utf-8"),
            hashlib.sha256,
        ).hexdigest()
        return f"t={ts},v1={signature}"

    return _sign


@pytest.fixture
def charge_failed_event() -> dict[str, Any]:
    """Sample charge.failed webhook event."""
    return {
        "id": "evt_1ChargeFailed",
        "type": "charge.failed",
        "created": 1767225600,
        "data": {
            "object": {
                "id": "ch_1",
                "amount": 4999,
                "currency": "usd",
                "customer": "cus_ABC123",
                "failure_code": "card_declined",
                "failure_message": "Your card was declined.",
                "description": "Pro plan",
                "source": {"type": "card"},
            }
        },
    }


# === App Fixtures ===


@dataclass
class MonitorHarness:
    """TestClient plus the fakes behind it."""

    client: TestClient
    log_buffer: LogBuffer
    smtp: MagicMock
    airtable: FakeAirtable


@pytest.fixture
def monitor_app(
    log_buffer: LogBuffer,
    smtp_mock: MagicMock,
    fake_airtable: FakeAirtable,
    email_sink: EmailSink,
    record_sink: RecordSink,
) -> Generator[Callable[..., MonitorHarness], None, None]:
    """Factory for a TestClient wired to fake sinks.

    Call with ``webhook_secret=None`` for the unsigned development mode.
    """
    from payment_monitor_api.dependencies import (
        get_dispatcher,
        get_email_sink,
        get_record_sink,
        get_stripe_service,
    )
    from payment_monitor_api.main import app

    def _build(webhook_secret: str | None = TEST_WEBHOOK_SECRET, **dispatcher_kwargs: Any) -> MonitorHarness:
        dispatcher = EventDispatcher(email_sink, record_sink, log_buffer, **dispatcher_kwargs)
        app.dependency_overrides[get_stripe_service] = lambda: StripeService(webhook_secret)
        app.dependency_overrides[get_email_sink] = lambda: email_sink
        app.dependency_overrides[get_record_sink] = lambda: record_sink
        app.dependency_overrides[get_dispatcher] = lambda: dispatcher
        app.dependency_overrides[get_log_buffer] = lambda: log_buffer
        return MonitorHarness(
            client=TestClient(app),
            log_buffer=log_buffer,
            smtp=smtp_mock,
            airtable=fake_airtable,
        )

    yield _build
    app.dependency_overrides.clear()
