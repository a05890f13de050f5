"""SSM Parameter Store lookup for monitor secrets.

Used when SSM_PARAMETER_PREFIX is set and a secret (Stripe keys, Airtable
token, Gmail app password) is not present in the environment.
"""

import logging

import boto3
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)


class SSMServiceError(Exception):
    """Raised when SSM parameter retrieval fails."""

    pass


class SSMService:
    """Reads SecureString parameters below a path prefix.

    Values are decrypted and cached per instance.

    Usage:
        ssm = SSMService(prefix="/payment-monitor/prod")
        secret = ssm.get_optional_parameter("stripe/webhook_secret")
    """

    def __init__(self, prefix: str, client=None) -> None:
        self._prefix = prefix.rstrip("/")
        self._client = client or boto3.client("ssm")
        self._cache: dict[str, str] = {}

    def _full_name(self, name: str) -> str:
        return f"{self._prefix}/{name.lstrip('/')}"

    def get_parameter(self, name: str) -> str:
        """Retrieve a decrypted parameter value.

        Args:
            name: Parameter path relative to the prefix (e.g., "stripe/secret_key")

        Returns:
            The decrypted parameter value.

        Raises:
            SSMServiceError: If parameter cannot be retrieved.
        """
        full_name = self._full_name(name)
        if full_name in self._cache:
            return self._cache[full_name]

        try:
            logger.info("Fetching SSM parameter: %s", full_name)
            response = self._client.get_parameter(Name=full_name, WithDecryption=True)
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            logger.error("Failed to get SSM parameter %s: %s", full_name, error_code)
            raise SSMServiceError(f"Failed to retrieve {full_name}: {error_code}") from e

        value = response["Parameter"]["Value"]
        self._cache[full_name] = value
        return value

    def get_optional_parameter(self, name: str) -> str | None:
        """Like get_parameter, but a missing parameter returns None."""
        try:
            return self.get_parameter(name)
        except SSMServiceError as e:
            cause = e.__cause__
            if isinstance(cause, ClientError) and (
                cause.response.get("Error", {}).get("Code") == "ParameterNotFound"
            ):
                return None
            raise
