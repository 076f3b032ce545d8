"""
Client for the Amazon Appstore submission API
"""

from .auth import AuthManager
from .client import AmazonAppstoreClient
from .config import ClientConfig, load_client_config, new_client
from .errors import ApiError, AppstoreError, AuthenticationError, ConfigurationError
from .etags import ETagStore
from .httpclient import HTTPClient, HTTPResponse, UrllibHTTPClient
from .request import (
    FilePart,
    FormBody,
    JsonBody,
    MultipartBody,
    OutboundRequest,
    RawStreamBody,
    RequestBuilder,
)
from .types import IMAGE_TYPES, ClientCredentials, Credentials
from .version import VERSION

__all__ = [
    "AmazonAppstoreClient",
    "ApiError",
    "AppstoreError",
    "AuthManager",
    "AuthenticationError",
    "ClientConfig",
    "ClientCredentials",
    "ConfigurationError",
    "Credentials",
    "ETagStore",
    "FilePart",
    "FormBody",
    "HTTPClient",
    "HTTPResponse",
    "IMAGE_TYPES",
    "JsonBody",
    "MultipartBody",
    "OutboundRequest",
    "RawStreamBody",
    "RequestBuilder",
    "UrllibHTTPClient",
    "VERSION",
    "load_client_config",
    "new_client",
]
