"""
HTTP transport: executes built requests and decodes JSON responses. No retries.
"""

from __future__ import annotations

import json
import urllib.error
import urllib.request
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .errors import ApiError
from .utils import get_duration_from_env

if TYPE_CHECKING:
    from .logger import Logger

# Configuration from environment
HTTP_CLIENT_TIMEOUT = get_duration_from_env("APPSTORE_HTTP_TIMEOUT", 60000)


@dataclass
class HTTPResponse:
    """Status, decoded JSON body (None when empty) and response headers"""

    status: int
    body: Any = None
    headers: dict[str, str] = field(default_factory=dict)

    def header(self, name: str) -> str | None:
        for key, value in self.headers.items():
            if key.lower() == name.lower():
                return value
        return None

    @property
    def etag(self) -> str | None:
        return self.header("ETag")


class HTTPClient(ABC):
    """Abstract HTTP transport interface"""

    @abstractmethod
    def execute(self, request: urllib.request.Request) -> HTTPResponse:
        """Send request, returning the response or raising ApiError on a non-success status"""
        pass


def decode_body(raw: bytes, status: int, url: str, method: str) -> Any:
    """Decode a JSON response body; an empty body decodes to None"""
    if not raw.strip():
        return None
    try:
        return json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ApiError(
            status,
            raw.decode("utf-8", errors="replace"),
            url=url,
            method=method,
            message=f"failed to parse JSON response from {url}: {e}",
        ) from e


class UrllibHTTPClient(HTTPClient):
    """HTTP transport backed by urllib; TLS is negotiated for https URLs"""

    def __init__(self, logger: Logger | None = None, timeout_ms: int | None = None) -> None:
        self._logger = logger
        self._timeout_ms = timeout_ms if timeout_ms is not None else HTTP_CLIENT_TIMEOUT

    def execute(self, request: urllib.request.Request) -> HTTPResponse:
        method = request.get_method()
        url = request.full_url
        if self._logger:
            self._logger.debugf("%s %s", method, url)

        try:
            with urllib.request.urlopen(request, timeout=self._timeout_ms / 1000.0) as response:
                status = response.status
                raw: bytes = response.read()
                headers = dict(response.headers.items())
        except urllib.error.HTTPError as e:
            error_body = e.read().decode("utf-8", errors="replace") if e.fp else ""
            if self._logger:
                self._logger.errorf("%s %s returned status %d: %s", method, url, e.code, error_body)
            raise ApiError(e.code, error_body, url=url, method=method) from e

        if self._logger:
            self._logger.debugf("%s %s returned status %d", method, url, status)

        if not 200 <= status < 300:
            text = raw.decode("utf-8", errors="replace")
            raise ApiError(status, text, url=url, method=method)

        return HTTPResponse(
            status=status,
            body=decode_body(raw, status, url, method),
            headers=headers,
        )
