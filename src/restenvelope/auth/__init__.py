from .api_key import APIKeyAuthentication, APIKeyError
from .base import RestAuthentication
from .storage import InMemoryTokenStorage, StoredToken, TokenStorage
from .token import TOKEN_ENDPOINT, TokenAuthentication, TokenResponse

__all__ = [
    "APIKeyAuthentication",
    "APIKeyError",
    "InMemoryTokenStorage",
    "RestAuthentication",
    "StoredToken",
    "TOKEN_ENDPOINT",
    "TokenAuthentication",
    "TokenResponse",
    "TokenStorage",
]
