from __future__ import annotations

import logging
from typing import Optional, Protocol

import requests

from ..config import DatabaseConfig, OAuthConfig
from ..errors import AuthError, ConfigError

logger = logging.getLogger(__name__)


class TokenProvider(Protocol):
    def get_token(self) -> str: ...


class StaticTokenProvider:
    def __init__(self, token: str) -> None:
        self._token = token

    def get_token(self) -> str:
        return self._token


def exchange_client_credentials(
    oauth: OAuthConfig, session: Optional[requests.Session] = None
) -> str:
    """Trade the configured client id and secret for one warehouse access token."""
    form = {
        "grant_type": "client_credentials",
        "client_id": oauth.client_id,
        "client_secret": oauth.client_secret,
    }
    if oauth.scope:
        form["scope"] = oauth.scope

    http = session or requests.Session()
    try:
        response = http.post(oauth.token_url, data=form, timeout=10)
    except requests.RequestException as exc:
        raise AuthError(f"Failed to contact token endpoint {oauth.token_url}") from exc

    if response.status_code != 200:
        raise AuthError(f"Token endpoint returned {response.status_code}")
    try:
        token = response.json()["access_token"]
    except (ValueError, KeyError, TypeError) as exc:
        raise AuthError("Invalid token response payload") from exc

    logger.debug("Warehouse token issued")
    return token


class ClientCredentialsTokenProvider:
    """Fetches a token on demand; the catalog connects once per run."""

    def __init__(self, oauth: OAuthConfig, session: Optional[requests.Session] = None) -> None:
        self._oauth = oauth
        self._session = session

    def get_token(self) -> str:
        return exchange_client_credentials(self._oauth, self._session)


def token_provider_for(database: DatabaseConfig) -> TokenProvider:
    if database.access_token:
        return StaticTokenProvider(database.access_token)
    if database.oauth is not None:
        return ClientCredentialsTokenProvider(database.oauth)
    raise ConfigError("No Databricks credentials configured")
