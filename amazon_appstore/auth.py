"""
OAuth 2 client-credentials authentication with expiry tracking
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import TYPE_CHECKING, Optional

from .errors import ApiError, AuthenticationError, ConfigurationError
from .request import FormBody, OutboundRequest, RequestBuilder
from .types import APPSTORE_SCOPE, Credentials

if TYPE_CHECKING:
    from .httpclient import HTTPClient
    from .logger import Logger

DEFAULT_TOKEN_URL = "https://api.amazon.com/auth/o2/token"

# Returns the current wall-clock time in seconds since the epoch
Clock = Callable[[], float]


class AuthManager:
    """Holds the current OAuth credentials and when they were issued"""

    def __init__(
        self,
        client_id: str | None,
        client_secret: str | None,
        http_client: "HTTPClient",
        *,
        token_url: str = DEFAULT_TOKEN_URL,
        credentials: Credentials | None = None,
        request_builder: RequestBuilder | None = None,
        clock: Clock = time.time,
        logger: Optional["Logger"] = None,
    ) -> None:
        from .logger import new_logger

        self.client_id = client_id
        self.client_secret = client_secret
        self._http_client = http_client
        self._token_url = token_url
        self._request_builder = request_builder or RequestBuilder()
        self._clock = clock
        self._logger = logger or new_logger()
        self._credentials = credentials
        # Saved credentials count as issued now
        self._issued_at: float | None = clock() if credentials else None

    @property
    def credentials(self) -> Credentials | None:
        return self._credentials

    @property
    def issued_at(self) -> float | None:
        return self._issued_at

    def needs_authentication(self) -> bool:
        """True when there are no credentials or they expired at or before now"""
        if self._credentials is None or self._issued_at is None:
            return True
        return self._issued_at + self._credentials.expires_in <= self._clock()

    def authenticate_if_needed(self) -> Credentials:
        """Return cached credentials while valid, otherwise fetch new ones"""
        if self._credentials is not None and not self.needs_authentication():
            return self._credentials
        return self.authenticate()

    def authenticate(self) -> Credentials:
        """Exchange the client id and secret for new credentials, regardless of current state"""
        if not self.client_id or not self.client_secret:
            raise ConfigurationError("client_id and client_secret are required to authenticate")

        body = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "grant_type": "client_credentials",
            "scope": APPSTORE_SCOPE,
        }
        request = self._request_builder.build(
            OutboundRequest(url=self._token_url, method="POST", body=FormBody(body))
        )

        try:
            response = self._http_client.execute(request)
        except ApiError as e:
            self._logger.errorf("Token request was rejected with status %d", e.status_code)
            raise AuthenticationError(
                f"token request returned non-success status: {e.status_code}, body: {e.body}"
            ) from e

        token_response = response.body
        if not isinstance(token_response, dict) or not token_response.get("access_token"):
            raise AuthenticationError("missing access_token in token response")

        self._credentials = Credentials.from_token_response(token_response)
        self._issued_at = self._clock()
        self._logger.infof(
            "Authenticated client %s, token expires in %d seconds",
            self.client_id,
            self._credentials.expires_in,
        )
        return self._credentials
