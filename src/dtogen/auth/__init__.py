"""Credentials for catalog backends that need a bearer token."""

from .token_provider import (
    ClientCredentialsTokenProvider,
    StaticTokenProvider,
    TokenProvider,
    exchange_client_credentials,
    token_provider_for,
)

__all__ = [
    "ClientCredentialsTokenProvider",
    "StaticTokenProvider",
    "TokenProvider",
    "exchange_client_credentials",
    "token_provider_for",
]
