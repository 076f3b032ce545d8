"""
Request building: maps a verb, URL, body and headers onto a transport-ready request.

Outbound bodies are an explicit tagged union (JsonBody, FormBody, RawStreamBody,
MultipartBody) chosen by the caller. Untagged bodies are still accepted and are
classified from the Content-Type header and the body's shape.
"""

from __future__ import annotations

import json
import os
import urllib.request
import uuid
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any, BinaryIO, Union
from urllib.parse import urlencode

from .version import USER_AGENT

JSON_CONTENT_TYPE = "application/json"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
OCTET_STREAM_CONTENT_TYPE = "application/octet-stream"

SUPPORTED_VERBS = ("GET", "POST", "PUT", "DELETE")
QUERY_VERBS = ("GET", "DELETE")

# Block size used when streaming file parts of a multipart body
CHUNK_SIZE = 64 * 1024

CRLF = b"\r\n"


def default_headers() -> dict[str, str]:
    """Headers applied to every request before caller-supplied ones"""
    return {
        "User-Agent": USER_AGENT,
        "Accept": JSON_CONTENT_TYPE,
        "Content-Type": JSON_CONTENT_TYPE,
    }


@dataclass(frozen=True)
class JsonBody:
    data: Any


@dataclass(frozen=True)
class FormBody:
    data: Mapping[str, Any]


@dataclass(frozen=True)
class RawStreamBody:
    """A single byte stream sent as the whole payload"""

    stream: BinaryIO | bytes
    length: int | None = None


@dataclass(frozen=True)
class FilePart:
    """One named part of a multipart/form-data body"""

    name: str
    content: BinaryIO | bytes | str
    filename: str | None = None
    content_type: str | None = None


@dataclass(frozen=True)
class MultipartBody:
    parts: list[FilePart]
    boundary: str = field(default_factory=lambda: uuid.uuid4().hex)


RequestBody = Union[JsonBody, FormBody, RawStreamBody, MultipartBody]


@dataclass
class OutboundRequest:
    """A single API call before encoding. Constructed fresh per call."""

    url: str
    method: str = "GET"
    body: Any = None
    headers: dict[str, str] = field(default_factory=dict)


def merge_headers(base: Mapping[str, str], overrides: Mapping[str, str]) -> dict[str, str]:
    """Merges header mappings; names compare case-insensitively and overrides win"""
    merged = dict(base)
    for name, value in overrides.items():
        for existing in [key for key in merged if key.lower() == name.lower()]:
            del merged[existing]
        merged[name] = value
    return merged


def _header(headers: Mapping[str, str], name: str) -> str | None:
    for key, value in headers.items():
        if key.lower() == name.lower():
            return value
    return None


def _stream_length(content: BinaryIO | bytes | str) -> int | None:
    """Remaining length of content in bytes, or None when it cannot be known"""
    if isinstance(content, str):
        return len(content.encode("utf-8"))
    if isinstance(content, (bytes, bytearray)):
        return len(content)
    if not (hasattr(content, "seekable") and content.seekable()):
        return None
    position = content.tell()
    end = content.seek(0, os.SEEK_END)
    content.seek(position)
    return end - position


def _is_stream(body: Any) -> bool:
    return isinstance(body, (bytes, bytearray)) or hasattr(body, "read")


def _part_from_entry(name: str, value: Any) -> FilePart:
    if isinstance(value, FilePart):
        return value
    if isinstance(value, tuple):
        # (content, filename[, content_type])
        return FilePart(name, *value)
    filename = None
    if hasattr(value, "name") and isinstance(value.name, str):
        filename = os.path.basename(value.name)
    return FilePart(name, value, filename=filename)


def classify_body(body: Any, headers: Mapping[str, str]) -> RequestBody | None:
    """
    Picks the encoding for an untagged POST/PUT body:
    JSON or form when the Content-Type says so, otherwise an upload (a raw
    stream for a flat byte stream, multipart for a mapping or list of parts).
    """
    if body is None or isinstance(body, (JsonBody, FormBody, RawStreamBody, MultipartBody)):
        return body

    content_type = _header(headers, "Content-Type")
    if content_type == JSON_CONTENT_TYPE:
        return JsonBody(body)
    if content_type == FORM_CONTENT_TYPE:
        return FormBody(body)

    if isinstance(body, Mapping):
        return MultipartBody([_part_from_entry(name, value) for name, value in body.items()])
    if isinstance(body, list):
        return MultipartBody([_part_from_entry(name, value) for name, value in body])
    if _is_stream(body):
        return RawStreamBody(body)
    raise ValueError(f"cannot encode request body of type {type(body).__name__}")


class RequestBuilder:
    """Builds urllib requests from OutboundRequest values. Stateless."""

    def build(self, request: OutboundRequest) -> urllib.request.Request:
        method = request.method.upper()
        if method not in SUPPORTED_VERBS:
            raise ValueError(
                f"unknown HTTP verb {request.method}; supports {', '.join(SUPPORTED_VERBS)}"
            )

        headers = merge_headers(default_headers(), request.headers)

        if method in QUERY_VERBS:
            url = self._with_query(request.url, request.body)
            headers = merge_headers(headers, {"Content-Type": FORM_CONTENT_TYPE})
            return urllib.request.Request(url, headers=headers, method=method)

        body = classify_body(request.body, headers)
        data, encoding_headers = self._encode(body, headers)
        headers = merge_headers(headers, encoding_headers)
        return urllib.request.Request(request.url, data=data, headers=headers, method=method)

    def _with_query(self, url: str, body: Any) -> str:
        """GET and DELETE never carry a payload; their body becomes the query string"""
        if body is None:
            return url
        if isinstance(body, (JsonBody, FormBody)):
            body = body.data
        if not isinstance(body, (Mapping, list)):
            raise ValueError("query parameters must be a mapping or a list of pairs")
        if not body:
            return url
        separator = "&" if "?" in url else "?"
        return f"{url}{separator}{urlencode(body, doseq=True)}"

    def _encode(
        self, body: RequestBody | None, headers: Mapping[str, str]
    ) -> tuple[Any, dict[str, str]]:
        if body is None:
            return None, {}

        if isinstance(body, JsonBody):
            return json.dumps(body.data).encode("utf-8"), {"Content-Type": JSON_CONTENT_TYPE}

        if isinstance(body, FormBody):
            return urlencode(body.data, doseq=True).encode("utf-8"), {
                "Content-Type": FORM_CONTENT_TYPE
            }

        if isinstance(body, RawStreamBody):
            encoding_headers: dict[str, str] = {}
            content_type = _header(headers, "Content-Type")
            if content_type in (None, JSON_CONTENT_TYPE, FORM_CONTENT_TYPE):
                encoding_headers["Content-Type"] = OCTET_STREAM_CONTENT_TYPE
            length = body.length if body.length is not None else _stream_length(body.stream)
            if length is not None and _header(headers, "Content-Length") is None:
                encoding_headers["Content-Length"] = str(length)
            return body.stream, encoding_headers

        return self._encode_multipart(body)

    def _encode_multipart(self, body: MultipartBody) -> tuple[Any, dict[str, str]]:
        """Encodes parts lazily so file contents are streamed rather than loaded"""
        segments: list[bytes | BinaryIO] = []
        for part in body.parts:
            disposition = f'form-data; name="{_quote_param(part.name)}"'
            if part.filename:
                disposition += f'; filename="{_quote_param(part.filename)}"'
            head = [f"--{body.boundary}".encode("utf-8")]
            head.append(f"Content-Disposition: {disposition}".encode("utf-8"))
            if part.content_type or part.filename:
                content_type = part.content_type or OCTET_STREAM_CONTENT_TYPE
                head.append(f"Content-Type: {content_type}".encode("utf-8"))
            segments.append(CRLF.join(head) + CRLF + CRLF)
            content = part.content
            segments.append(content.encode("utf-8") if isinstance(content, str) else content)
            segments.append(CRLF)
        segments.append(f"--{body.boundary}--".encode("utf-8") + CRLF)

        headers = {"Content-Type": f"multipart/form-data; boundary={body.boundary}"}
        lengths = [_stream_length(segment) for segment in segments]
        if None not in lengths:
            headers["Content-Length"] = str(sum(length or 0 for length in lengths))
        return _iter_segments(segments), headers


def _iter_segments(segments: list[bytes | BinaryIO]) -> Iterator[bytes]:
    for segment in segments:
        if isinstance(segment, (bytes, bytearray)):
            yield bytes(segment)
            continue
        while True:
            chunk = segment.read(CHUNK_SIZE)
            if not chunk:
                break
            yield chunk


def _quote_param(value: str) -> str:
    """Escapes a Content-Disposition parameter; line breaks would end the header"""
    value = value.replace("\r", "").replace("\n", "")
    return value.replace("\\", "\\\\").replace('"', '\\"')
