"""Unit tests for MonitorSettings and SSM secret lookup.

SSM is mocked with moto.
"""

from typing import Generator

import boto3
import pytest
from moto import mock_aws
from pydantic import ValidationError

from payment_monitor.config import MonitorSettings, get_settings
from payment_monitor.models.enums import SinkFailureMode
from payment_monitor.services.ssm_service import SSMService, SSMServiceError

SSM_PREFIX = "/payment-monitor/test"


@pytest.fixture
def ssm_client(monkeypatch: pytest.MonkeyPatch) -> Generator:
    monkeypatch.setenv("AWS_DEFAULT_REGION", "eu-west-1")
    with mock_aws():
        client = boto3.client("ssm", region_name="eu-west-1")
        client.put_parameter(
            Name=f"{SSM_PREFIX}/stripe/webhook_secret",
            Value="whsec_from_ssm",
            Type="SecureString",
        )
        client.put_parameter(
            Name=f"{SSM_PREFIX}/airtable/api_key",
            Value="pat_from_ssm",
            Type="SecureString",
        )
        yield client


class TestFromEnvironment:
    def test_defaults(self):
        settings = MonitorSettings.from_env({})

        assert settings.stripe_webhook_secret is None
        assert settings.webhook_tolerance_seconds == 300
        assert settings.airtable_table_name == "Failed Payments"
        assert settings.airtable_api_url == "https://api.airtable.com/v0"
        assert settings.smtp_host == "smtp.gmail.com"
        assert settings.smtp_port == 587
        assert settings.port == 3000
        assert settings.sink_failure_mode is SinkFailureMode.PER_SINK_INDEPENDENT

    def test_reads_environment_values(self):
        settings = MonitorSettings.from_env(
            {
                "STRIPE_SECRET_KEY": "sk_test_1",
                "STRIPE_WEBHOOK_SECRET": "whsec_1",
                "STRIPE_WEBHOOK_TOLERANCE": "600",
                "AIRTABLE_API_KEY": "pat_1",
                "AIRTABLE_BASE_ID": "app1",
                "AIRTABLE_TABLE_NAME": "Failures",
                "GMAIL_USER": "alerts@example.com",
                "GMAIL_APP_PASSWORD": "pw",
                "PORT": "8080",
                "SINK_FAILURE_MODE": "all_must_succeed",
            }
        )

        assert settings.stripe_secret_key == "sk_test_1"
        assert settings.stripe_webhook_secret == "whsec_1"
        assert settings.webhook_tolerance_seconds == 600
        assert settings.airtable_api_key == "pat_1"
        assert settings.airtable_base_id == "app1"
        assert settings.airtable_table_name == "Failures"
        assert settings.gmail_app_password == "pw"
        assert settings.port == 8080
        assert settings.sink_failure_mode is SinkFailureMode.ALL_MUST_SUCCEED

    def test_empty_values_fall_back_to_defaults(self):
        settings = MonitorSettings.from_env({"STRIPE_WEBHOOK_SECRET": "", "PORT": ""})

        assert settings.stripe_webhook_secret is None
        assert settings.port == 3000

    def test_invalid_failure_mode_rejected(self):
        with pytest.raises(ValidationError):
            MonitorSettings.from_env({"SINK_FAILURE_MODE": "best_effort"})

    def test_alert_recipient_defaults_to_sender(self):
        assert MonitorSettings.from_env({"GMAIL_USER": "a@example.com"}).alert_to == "a@example.com"
        settings = MonitorSettings.from_env(
            {"GMAIL_USER": "a@example.com", "ALERT_RECIPIENT": "ops@example.com"}
        )
        assert settings.alert_to == "ops@example.com"

    def test_get_settings_reads_os_environ_once(self, monkeypatch):
        monkeypatch.setenv("AIRTABLE_BASE_ID", "appFromEnv")

        first = get_settings()
        monkeypatch.setenv("AIRTABLE_BASE_ID", "appChanged")

        assert first.airtable_base_id == "appFromEnv"
        assert get_settings() is first


class TestSSMSecrets:
    def test_missing_secrets_loaded_from_ssm(self, ssm_client):
        settings = MonitorSettings.from_env({"SSM_PARAMETER_PREFIX": SSM_PREFIX})

        assert settings.stripe_webhook_secret == "whsec_from_ssm"
        assert settings.airtable_api_key == "pat_from_ssm"
        assert settings.gmail_app_password is None

    def test_environment_wins_over_ssm(self, ssm_client):
        settings = MonitorSettings.from_env(
            {"SSM_PARAMETER_PREFIX": SSM_PREFIX, "STRIPE_WEBHOOK_SECRET": "whsec_env"}
        )

        assert settings.stripe_webhook_secret == "whsec_env"

    def test_ssm_not_consulted_without_prefix(self, ssm_client):
        assert MonitorSettings.from_env({}).stripe_webhook_secret is None


class TestSSMService:
    def test_get_parameter_decrypts_and_caches(self, ssm_client):
        service = SSMService(SSM_PREFIX + "/", client=ssm_client)

        assert service.get_parameter("stripe/webhook_secret") == "whsec_from_ssm"
        ssm_client.delete_parameter(Name=f"{SSM_PREFIX}/stripe/webhook_secret")
        assert service.get_parameter("/stripe/webhook_secret") == "whsec_from_ssm"

    def test_missing_parameter_raises(self, ssm_client):
        service = SSMService(SSM_PREFIX, client=ssm_client)

        with pytest.raises(SSMServiceError, match="ParameterNotFound"):
            service.get_parameter("gmail/app_password")

    def test_optional_parameter_returns_none_when_missing(self, ssm_client):
        service = SSMService(SSM_PREFIX, client=ssm_client)

        assert service.get_optional_parameter("gmail/app_password") is None
