"""
Client configuration resolved from explicit arguments, Secrets Manager and the environment
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .auth import DEFAULT_TOKEN_URL
from .client import DEFAULT_BASE_URL, AmazonAppstoreClient
from .errors import ConfigurationError
from .httpclient import HTTP_CLIENT_TIMEOUT, UrllibHTTPClient
from .logger import new_logger
from .secretsmanager import get_client_credentials_from_secrets_manager
from .utils import get_duration_from_env, get_from_env, validate_base_url

if TYPE_CHECKING:
    from .logger import Logger


@dataclass
class ClientConfig:
    """Settings needed to construct an AmazonAppstoreClient"""

    client_id: str | None = None
    client_secret: str | None = None
    base_url: str = DEFAULT_BASE_URL
    token_url: str = DEFAULT_TOKEN_URL
    timeout_ms: int = HTTP_CLIENT_TIMEOUT


def load_client_config(
    *,
    client_id: str | None = None,
    client_secret: str | None = None,
    secret_arn: str | None = None,
    base_url: str | None = None,
    token_url: str | None = None,
    timeout_ms: int | None = None,
    logger: Logger | None = None,
) -> ClientConfig:
    """
    Resolves client settings. Explicit arguments take precedence over the environment.
    Credentials priority: arguments > Secrets Manager (APPSTORE_SECRET_ARN) >
    APPSTORE_CLIENT_ID / APPSTORE_CLIENT_SECRET.
    """
    logger = logger or new_logger()

    resolved_client_id = client_id
    resolved_client_secret = client_secret

    if not (resolved_client_id and resolved_client_secret):
        arn = secret_arn or get_from_env("APPSTORE_SECRET_ARN", "")
        if arn:
            logger.infof("Fetching Appstore client credentials from Secrets Manager: %s", arn)
            credentials = get_client_credentials_from_secrets_manager(logger, arn)
            resolved_client_id = client_id or credentials.client_id
            resolved_client_secret = client_secret or credentials.client_secret
        else:
            resolved_client_id = resolved_client_id or get_from_env("APPSTORE_CLIENT_ID", "")
            resolved_client_secret = resolved_client_secret or get_from_env(
                "APPSTORE_CLIENT_SECRET", ""
            )

    try:
        resolved_base_url = validate_base_url(
            base_url or get_from_env("APPSTORE_BASE_URL", DEFAULT_BASE_URL)
        )
        resolved_token_url = token_url or get_from_env("APPSTORE_TOKEN_URL", DEFAULT_TOKEN_URL)
        validate_base_url(resolved_token_url)
    except ValueError as e:
        raise ConfigurationError(f"invalid API URL: {e}") from e

    if timeout_ms is None:
        timeout_ms = get_duration_from_env("APPSTORE_HTTP_TIMEOUT", HTTP_CLIENT_TIMEOUT)

    return ClientConfig(
        client_id=resolved_client_id or None,
        client_secret=resolved_client_secret or None,
        base_url=resolved_base_url,
        token_url=resolved_token_url,
        timeout_ms=timeout_ms,
    )


def new_client(
    config: ClientConfig | None = None, logger: Logger | None = None
) -> AmazonAppstoreClient:
    """Create a client from config, loading it from the environment when omitted"""
    logger = logger or new_logger()
    config = config or load_client_config(logger=logger)
    return AmazonAppstoreClient(
        config.client_id,
        config.client_secret,
        http_client=UrllibHTTPClient(logger=logger, timeout_ms=config.timeout_ms),
        base_url=config.base_url,
        token_url=config.token_url,
        logger=logger,
    )
