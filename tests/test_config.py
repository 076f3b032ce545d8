"""
Tests for client configuration loading
"""

from unittest.mock import patch

import pytest

from amazon_appstore.client import DEFAULT_BASE_URL, AmazonAppstoreClient
from amazon_appstore.config import ClientConfig, load_client_config, new_client
from amazon_appstore.errors import ConfigurationError
from amazon_appstore.types import ClientCredentials

ENV_KEYS = [
    "APPSTORE_CLIENT_ID",
    "APPSTORE_CLIENT_SECRET",
    "APPSTORE_SECRET_ARN",
    "APPSTORE_BASE_URL",
    "APPSTORE_TOKEN_URL",
    "APPSTORE_HTTP_TIMEOUT",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


class TestLoadClientConfig:
    """Tests for load_client_config"""

    def test_defaults(self, logger):
        """Should fall back to the public endpoints and no credentials"""
        config = load_client_config(logger=logger)

        assert config.client_id is None
        assert config.client_secret is None
        assert config.base_url == DEFAULT_BASE_URL
        assert config.token_url == "https://api.amazon.com/auth/o2/token"
        assert config.timeout_ms == 60000

    def test_reads_environment(self, monkeypatch, logger):
        monkeypatch.setenv("APPSTORE_CLIENT_ID", "env-id")
        monkeypatch.setenv("APPSTORE_CLIENT_SECRET", "env-secret")
        monkeypatch.setenv("APPSTORE_BASE_URL", "http://localhost:8080/api")
        monkeypatch.setenv("APPSTORE_HTTP_TIMEOUT", "5s")

        config = load_client_config(logger=logger)

        assert config == ClientConfig(
            client_id="env-id",
            client_secret="env-secret",
            base_url="http://localhost:8080/api/",
            token_url="https://api.amazon.com/auth/o2/token",
            timeout_ms=5000,
        )

    def test_arguments_take_precedence(self, monkeypatch, logger):
        """Should prefer explicit arguments over the environment"""
        monkeypatch.setenv("APPSTORE_CLIENT_ID", "env-id")
        monkeypatch.setenv("APPSTORE_CLIENT_SECRET", "env-secret")
        monkeypatch.setenv("APPSTORE_SECRET_ARN", "arn:aws:secretsmanager:us-east-1:1:secret:s")

        with patch(
            "amazon_appstore.config.get_client_credentials_from_secrets_manager"
        ) as mock_fetch:
            config = load_client_config(client_id="arg-id", client_secret="arg-secret", logger=logger)

        mock_fetch.assert_not_called()
        assert (config.client_id, config.client_secret) == ("arg-id", "arg-secret")

    def test_single_argument_kept_over_secrets_manager(self, monkeypatch, logger):
        """Should fill only the missing credential from Secrets Manager"""
        monkeypatch.setenv("APPSTORE_SECRET_ARN", "arn:aws:secretsmanager:us-east-1:1:secret:s")

        with patch(
            "amazon_appstore.config.get_client_credentials_from_secrets_manager",
            return_value=ClientCredentials("sm-id", "sm-secret"),
        ):
            config = load_client_config(client_id="arg-id", logger=logger)

        assert (config.client_id, config.client_secret) == ("arg-id", "sm-secret")

    def test_secrets_manager_takes_precedence_over_env(self, monkeypatch, logger):
        arn = "arn:aws:secretsmanager:us-east-1:1:secret:s"
        monkeypatch.setenv("APPSTORE_CLIENT_ID", "env-id")
        monkeypatch.setenv("APPSTORE_CLIENT_SECRET", "env-secret")
        monkeypatch.setenv("APPSTORE_SECRET_ARN", arn)

        with patch(
            "amazon_appstore.config.get_client_credentials_from_secrets_manager",
            return_value=ClientCredentials("sm-id", "sm-secret"),
        ) as mock_fetch:
            config = load_client_config(logger=logger)

        mock_fetch.assert_called_once_with(logger, arn)
        assert (config.client_id, config.client_secret) == ("sm-id", "sm-secret")

    def test_rejects_insecure_base_url(self, logger):
        with pytest.raises(ConfigurationError, match="must use HTTPS"):
            load_client_config(base_url="http://developer.amazon.com/api/appstore/", logger=logger)


class TestNewClient:
    """Tests for new_client"""

    def test_builds_client_from_config(self, logger):
        config = ClientConfig(client_id="id", client_secret="secret", timeout_ms=1000)

        client = new_client(config, logger=logger)

        assert isinstance(client, AmazonAppstoreClient)
        assert client.client_id == "id"
        assert client.client_secret == "secret"
        assert client.needs_authentication() is True
