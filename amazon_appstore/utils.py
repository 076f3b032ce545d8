"""
Utility functions for configuration and upload handling
"""

import mimetypes
import os
import re
from urllib.parse import urlparse

DEFAULT_MIME_TYPE = "application/octet-stream"

# Asset types the Appstore accepts, checked before the mimetypes database
MIME_TYPES_BY_EXTENSION: dict[str, str] = {
    ".apk": "application/vnd.android.package-archive",
    ".aab": "application/octet-stream",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".mp4": "video/mp4",
    ".mov": "video/quicktime",
    ".m4v": "video/x-m4v",
    ".webm": "video/webm",
}


def get_from_env(key: str, default_value: str) -> str:
    """Retrieves a non-empty environment variable or returns default"""
    value = os.environ.get(key, "")
    if value:
        return value
    return default_value


def get_duration_from_env(key: str, default_value_ms: int) -> int:
    """
    Retrieves a duration from environment variable or returns default.
    Accepts duration strings like "100ms", "2s", "1m", etc.
    Returns value in milliseconds.
    """
    value = os.environ.get(key, "")
    if value:
        match = re.match(r"^(\d+)(ms|s|m|h)$", value)
        if match:
            num = int(match.group(1))
            multipliers = {
                "ms": 1,
                "s": 1000,
                "m": 60 * 1000,
                "h": 60 * 60 * 1000,
            }
            return num * multipliers[match.group(2)]
    return default_value_ms


def validate_base_url(url: str) -> str:
    """
    Validates an API base URL and returns it with a trailing slash.
    Requires HTTPS, except for localhost (testing).
    """
    if not url:
        raise ValueError("base URL cannot be empty")

    parsed_url = urlparse(url)

    is_localhost = parsed_url.hostname == "localhost" or (
        parsed_url.hostname is not None and parsed_url.hostname.startswith("127.")
    )

    if parsed_url.scheme != "https" and not (parsed_url.scheme == "http" and is_localhost):
        raise ValueError(f"base URL must use HTTPS scheme, got: {parsed_url.scheme}")
    if not parsed_url.netloc:
        raise ValueError("base URL must have a host")
    if parsed_url.query:
        raise ValueError(f"base URL cannot contain query parameters: {parsed_url.query}")
    if parsed_url.fragment:
        raise ValueError(f"base URL cannot contain fragment: {parsed_url.fragment}")

    # urljoin drops the last path segment unless the base ends with a slash
    if not url.endswith("/"):
        url += "/"
    return url


def mime_type_for_file(path: str) -> str:
    """Looks up the MIME type of an upload from its file extension"""
    extension = os.path.splitext(path)[1].lower()
    if extension in MIME_TYPES_BY_EXTENSION:
        return MIME_TYPES_BY_EXTENSION[extension]
    guessed, _ = mimetypes.guess_type(path)
    return guessed or DEFAULT_MIME_TYPE
