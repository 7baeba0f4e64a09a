"""Bitfinex API 연동 래퍼 패키지."""

from .auth import (
    AuthenticatedRequestBuilder,
    AuthHeaders,
    Credentials,
    PayloadEncoder,
    RequestSigner,
    build_auth_headers,
)
from .bitfinex_client import (
    BitfinexClient,
    BitfinexEndpoint,
    DEFAULT_USER_AGENT,
    HttpMethod,
    OrderRequest,
    normalize_currency,
    normalize_symbol,
)

__all__ = [
    "AuthHeaders",
    "AuthenticatedRequestBuilder",
    "BitfinexClient",
    "BitfinexEndpoint",
    "Credentials",
    "DEFAULT_USER_AGENT",
    "HttpMethod",
    "OrderRequest",
    "PayloadEncoder",
    "RequestSigner",
    "build_auth_headers",
    "normalize_currency",
    "normalize_symbol",
]
