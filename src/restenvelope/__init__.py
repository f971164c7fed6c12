"""Client for JSON-envelope REST services.

Bearer-token and Ed25519 API-key authentication, envelope classification
with a single transparent token refresh, and chunked uploads with progress.
"""

from ._http import ClientConfig
from .auth import (
    APIKeyAuthentication,
    APIKeyError,
    InMemoryTokenStorage,
    RestAuthentication,
    StoredToken,
    TokenAuthentication,
    TokenResponse,
    TokenStorage,
)
from .client import AsyncRestClient, RestClient
from .errors import (
    APIError,
    DecodingError,
    HTTPError,
    InvalidResponseError,
    InvalidURLError,
    LoginRequiredError,
    NetworkError,
    NoClientIdError,
    NoDataError,
    NoRefreshTokenError,
    RedirectError,
    RestError,
    TokenExpiredError,
    UploadFailedError,
    UploadStalledError,
)
from .methods import HTTPMethod
from .response import AccessInfo, JSONValue, PagingInfo, RestResponse
from .upload import UploadNegotiation

__all__ = [
    "APIError",
    "APIKeyAuthentication",
    "APIKeyError",
    "AccessInfo",
    "AsyncRestClient",
    "ClientConfig",
    "DecodingError",
    "HTTPError",
    "HTTPMethod",
    "InMemoryTokenStorage",
    "InvalidResponseError",
    "InvalidURLError",
    "JSONValue",
    "LoginRequiredError",
    "NetworkError",
    "NoClientIdError",
    "NoDataError",
    "NoRefreshTokenError",
    "PagingInfo",
    "RedirectError",
    "RestAuthentication",
    "RestClient",
    "RestError",
    "RestResponse",
    "StoredToken",
    "TokenAuthentication",
    "TokenExpiredError",
    "TokenResponse",
    "TokenStorage",
    "UploadFailedError",
    "UploadNegotiation",
    "UploadStalledError",
]
