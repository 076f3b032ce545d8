"""
Shared fixtures: a recording HTTP transport and a controllable clock
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pytest

from amazon_appstore.client import AmazonAppstoreClient
from amazon_appstore.httpclient import HTTPClient, HTTPResponse
from amazon_appstore.logger import Logger
from amazon_appstore.types import Credentials


@dataclass
class RecordedRequest:
    method: str
    url: str
    headers: dict[str, str]
    body: bytes | None

    def header(self, name: str) -> str | None:
        for key, value in self.headers.items():
            if key.lower() == name.lower():
                return value
        return None


@dataclass
class FakeHTTPClient(HTTPClient):
    """Returns queued responses (or raises queued errors) and records each request"""

    responses: list[Any] = field(default_factory=list)
    requests: list[RecordedRequest] = field(default_factory=list)

    def queue(self, body: Any = None, etag: str | None = None, status: int = 200) -> None:
        headers = {"ETag": etag} if etag else {}
        self.responses.append(HTTPResponse(status=status, body=body, headers=headers))

    def queue_error(self, error: Exception) -> None:
        self.responses.append(error)

    def execute(self, request):
        data = request.data
        if data is None:
            body = None
        elif isinstance(data, bytes):
            body = data
        elif hasattr(data, "read"):
            body = data.read()
        else:
            body = b"".join(data)
        self.requests.append(
            RecordedRequest(
                method=request.get_method(),
                url=request.full_url,
                headers=dict(request.header_items()),
                body=body,
            )
        )
        result = self.responses.pop(0)
        if isinstance(result, Exception):
            raise result
        return result

    @property
    def last_request(self) -> RecordedRequest:
        return self.requests[-1]


class FakeClock:
    def __init__(self, now: float = 1_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def logger():
    """Create a logger instance"""
    return Logger()


@pytest.fixture
def http_client():
    return FakeHTTPClient()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def credentials():
    return Credentials(
        access_token="abc",
        token_type="bearer",
        scope="appstore::apps:readwrite",
        expires_in=3600,
    )


@pytest.fixture
def client(http_client, clock, logger, credentials):
    """A client holding saved, unexpired credentials"""
    return AmazonAppstoreClient(
        "client-id",
        "client-secret",
        credentials=credentials,
        http_client=http_client,
        clock=clock,
        logger=logger,
    )
