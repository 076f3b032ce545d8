"""
AWS Secrets Manager utility for fetching Appstore client credentials
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import boto3

from .errors import ConfigurationError
from .types import ClientCredentials

if TYPE_CHECKING:
    from .logger import Logger


def get_client_credentials_from_secrets_manager(
    logger: Logger, secret_arn: str
) -> ClientCredentials:
    """
    Fetches Appstore API client credentials from AWS Secrets Manager.
    The secret should be a JSON object with clientId and clientSecret fields.
    """
    try:
        region = _extract_region_from_secret_arn(secret_arn)
        client = boto3.client("secretsmanager", region_name=region)

        response = client.get_secret_value(SecretId=secret_arn)

        if not response.get("SecretString"):
            raise ValueError("secret value is empty or not a string")

        secret_value = json.loads(response["SecretString"])

        if not isinstance(secret_value, dict):
            raise ValueError("secret must be a JSON object")

        client_id = secret_value.get("clientId")
        client_secret = secret_value.get("clientSecret")

        if not isinstance(client_id, str) or not isinstance(client_secret, str):
            raise ValueError("secret must contain clientId and clientSecret as strings")
        if not client_id or not client_secret:
            raise ValueError("secret must contain non-empty clientId and clientSecret")

        logger.debugf("Retrieved Appstore client credentials from Secrets Manager")

        return ClientCredentials(client_id=client_id, client_secret=client_secret)

    except Exception as e:
        logger.errorf("Failed to retrieve credentials from Secrets Manager: %v", str(e))
        raise ConfigurationError(
            f"failed to retrieve client credentials from Secrets Manager: {e}"
        ) from e


def _extract_region_from_secret_arn(arn: str) -> str:
    """
    Extracts AWS region from Secrets Manager ARN.
    Format: arn:aws:secretsmanager:REGION:ACCOUNT:secret:NAME
    """
    parts = arn.split(":")
    if len(parts) < 4 or parts[0] != "arn" or parts[1] != "aws" or parts[2] != "secretsmanager":
        raise ValueError(f"invalid Secrets Manager ARN format: {arn}")
    return parts[3]
