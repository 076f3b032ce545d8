"""
Data models shared by the client components
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

# Scope requested for every token exchange
APPSTORE_SCOPE = "appstore::apps:readwrite"

# Values accepted for the image_type path segment
IMAGE_TYPES: tuple[str, ...] = (
    "small-icons",
    "large-icons",
    "screenshots",
    "promo-images",
    "firetv-screenshots",
    "firetv-icons",
    "firetv-backgrounds",
    "firetv-featured-backgrounds",
    "firetv-featured-logos",
)

# Type alias for decoded JSON objects returned by the API
JSONObject = dict[str, Any]


@dataclass(frozen=True)
class ClientCredentials:
    """OAuth client id and secret used for the token exchange"""

    client_id: str
    client_secret: str


@dataclass(frozen=True)
class Credentials:
    """OAuth token response"""

    access_token: str
    token_type: str
    scope: str
    expires_in: int

    @classmethod
    def from_token_response(cls, data: JSONObject) -> Credentials:
        return cls(
            access_token=data["access_token"],
            token_type=data.get("token_type", ""),
            scope=data.get("scope", ""),
            expires_in=int(data.get("expires_in", 0)),
        )
