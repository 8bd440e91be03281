"""Linear session state: static access token or OAuth authorization-code flow.

The session is process-wide. Only the linear_auth / linear_auth_callback
handlers change it; every other handler reads it through current_client().
"""
import logging
import secrets
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlencode

import httpx

from .config import Settings, get_settings
from .errors import AuthError, GatewayError
from .graphql_client import LinearGraphQLClient

logger = logging.getLogger("linear-mcp.auth")


@dataclass
class OAuthConfig:
    client_id: str
    client_secret: str
    redirect_uri: str


class LinearAuth:
    """Holds the current authentication state and hands out gateway clients."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self._settings = settings or get_settings()
        self._http_client = http_client
        self._oauth: Optional[OAuthConfig] = None
        self._pending_state: Optional[str] = None
        self._client: Optional[LinearGraphQLClient] = None

        if self._settings.linear_access_token:
            self.set_access_token(self._settings.linear_access_token)

    def is_authenticated(self) -> bool:
        return self._client is not None

    def current_client(self) -> LinearGraphQLClient:
        """Return a ready gateway client, or raise AuthError when there is no session."""
        if self._client is None:
            raise AuthError(
                "Not authenticated with Linear. Set LINEAR_ACCESS_TOKEN or call "
                "linear_auth followed by linear_auth_callback."
            )
        return self._client

    def set_access_token(self, access_token: str, bearer: bool = False) -> None:
        self._client = LinearGraphQLClient(
            access_token,
            bearer=bearer,
            api_url=self._settings.linear_api_url,
            timeout=self._settings.linear_request_timeout,
            http_client=self._http_client,
        )

    def initialize_oauth(self, client_id: str, client_secret: str, redirect_uri: str) -> str:
        """Store the OAuth client configuration and return the authorization URL."""
        self._oauth = OAuthConfig(client_id, client_secret, redirect_uri)
        self._pending_state = secrets.token_urlsafe(16)
        query = urlencode({
            "client_id": client_id,
            "redirect_uri": redirect_uri,
            "response_type": "code",
            "scope": self._settings.linear_oauth_scopes,
            "state": self._pending_state,
        })
        logger.info(f"OAuth flow initialized for client {client_id}")
        return f"{self._settings.linear_oauth_authorize_url}?{query}"

    async def handle_callback(self, code: str, state: Optional[str] = None) -> None:
        """Exchange an authorization code for an access token and start the session."""
        if self._oauth is None:
            raise AuthError("OAuth flow not initialized. Call linear_auth first.")
        if state is not None and state != self._pending_state:
            raise AuthError("OAuth state mismatch. Restart the flow with linear_auth.")

        form = {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": self._oauth.redirect_uri,
            "client_id": self._oauth.client_id,
            "client_secret": self._oauth.client_secret,
        }
        url = self._settings.linear_oauth_token_url
        try:
            if self._http_client is not None:
                response = await self._http_client.post(url, data=form)
            else:
                async with httpx.AsyncClient(timeout=self._settings.linear_request_timeout) as client:
                    response = await client.post(url, data=form)
        except httpx.RequestError as e:
            raise GatewayError(f"OAuth token exchange failed: {e}") from e

        if response.status_code >= 400:
            raise GatewayError(
                f"OAuth token exchange failed (HTTP {response.status_code}): {response.text}",
                status_code=response.status_code,
            )

        access_token = response.json().get("access_token")
        if not access_token:
            raise AuthError("OAuth token exchange returned no access token.")

        self.set_access_token(access_token, bearer=True)
        self._pending_state = None
        logger.info("OAuth flow completed, Linear session is active")
