# OAuth Manager: Microsoft identity platform auth code flow, refresh, sign-out.
# Created: 2026-10-19

from __future__ import annotations

import logging
import time
import urllib.parse

import httpx

from drivefinder.integrations.token_store import OAuthTokens, TokenStore

logger = logging.getLogger(__name__)

GRAPH_SERVICE = "microsoft_graph"

# Endpoint templates; {tenant} is filled from settings.
PROVIDERS: dict[str, dict[str, str]] = {
    "microsoft": {
        "auth_url": "https://login.microsoftonline.com/{tenant}/oauth2/v2.0/authorize",
        "token_url": "https://login.microsoftonline.com/{tenant}/oauth2/v2.0/token",
    },
}


def _endpoint(provider: str, key: str, tenant: str) -> str:
    config = PROVIDERS.get(provider)
    if not config:
        raise ValueError(f"Unknown OAuth provider: {provider}")
    return config[key].format(tenant=tenant)


class OAuthManager:
    """OAuth 2.0 authorization code flow + token refresh.

    Supports:
    - Authorization URL generation
    - Code exchange for tokens
    - Token refresh
    - Sign-out (local token revocation)
    """

    def __init__(self, token_store: TokenStore | None = None, tenant: str = "common"):
        self.store = token_store or TokenStore()
        self.tenant = tenant

    def get_auth_url(
        self,
        provider: str,
        client_id: str,
        redirect_uri: str,
        scopes: list[str],
        state: str = "",
    ) -> str:
        """Generate an OAuth authorization URL.

        Args:
            provider: Provider name (e.g. "microsoft").
            client_id: Application (client) ID.
            redirect_uri: Redirect URI registered for the application.
            scopes: OAuth scopes to request.
            state: Optional state parameter for CSRF protection.

        Returns:
            Authorization URL to open in a browser.
        """
        auth_url = _endpoint(provider, "auth_url", self.tenant)
        params = {
            "client_id": client_id,
            "redirect_uri": redirect_uri,
            "response_type": "code",
            "response_mode": "query",
            "scope": " ".join(scopes),
            "prompt": "select_account",
        }
        if state:
            params["state"] = state

        return f"{auth_url}?{urllib.parse.urlencode(params)}"

    async def exchange_code(
        self,
        provider: str,
        service: str,
        code: str,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        scopes: list[str] | None = None,
    ) -> OAuthTokens:
        """Exchange an authorization code for access + refresh tokens and store them."""
        token_url = _endpoint(provider, "token_url", self.tenant)
        data = {
            "code": code,
            "client_id": client_id,
            "redirect_uri": redirect_uri,
            "grant_type": "authorization_code",
        }
        if client_secret:
            data["client_secret"] = client_secret
        if scopes:
            data["scope"] = " ".join(scopes)

        async with httpx.AsyncClient(timeout=15) as client:
            resp = await client.post(token_url, data=data)
            resp.raise_for_status()
            payload = resp.json()

        expires_in = payload.get("expires_in", 3600)
        tokens = OAuthTokens(
            service=service,
            access_token=payload["access_token"],
            refresh_token=payload.get("refresh_token"),
            token_type=payload.get("token_type", "Bearer"),
            expires_at=time.time() + expires_in,
            scopes=scopes or [],
            tenant=self.tenant,
        )

        self.store.save(tokens)
        logger.info("OAuth tokens obtained for %s via %s", service, provider)
        return tokens

    async def refresh_token(
        self,
        provider: str,
        service: str,
        client_id: str,
        client_secret: str,
    ) -> OAuthTokens | None:
        """Refresh an expired access token using the refresh token.

        Returns updated OAuthTokens, or None if refresh fails.
        """
        tokens = self.store.load(service, self.tenant)
        if not tokens or not tokens.refresh_token:
            return None

        try:
            token_url = _endpoint(provider, "token_url", self.tenant)
        except ValueError:
            return None

        data = {
            "refresh_token": tokens.refresh_token,
            "client_id": client_id,
            "grant_type": "refresh_token",
        }
        if client_secret:
            data["client_secret"] = client_secret
        if tokens.scopes:
            data["scope"] = " ".join(tokens.scopes)

        try:
            async with httpx.AsyncClient(timeout=15) as client:
                resp = await client.post(token_url, data=data)
                resp.raise_for_status()
                payload = resp.json()
            access_token = payload["access_token"]
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as e:
            logger.warning("Token refresh failed for %s: %r", service, e)
            return None

        expires_in = payload.get("expires_in", 3600)
        tokens.access_token = access_token
        tokens.expires_at = time.time() + expires_in
        if "refresh_token" in payload:
            tokens.refresh_token = payload["refresh_token"]

        self.store.save(tokens)
        logger.info("Refreshed OAuth token for %s", service)
        return tokens

    async def get_valid_token(
        self,
        service: str,
        client_id: str,
        client_secret: str,
        provider: str = "microsoft",
    ) -> str | None:
        """Get a valid access token, refreshing if expired.

        Returns the access token string, or None if unavailable.
        """
        tokens = self.store.load(service, self.tenant)
        if not tokens:
            return None

        # Still valid with a 60s buffer
        if not tokens.expires_within(60):
            return tokens.access_token

        refreshed = await self.refresh_token(provider, service, client_id, client_secret)
        if refreshed:
            return refreshed.access_token

        return None

    async def sign_out(self, service: str = GRAPH_SERVICE) -> bool:
        """Forget the stored tokens for a service.

        The identity platform has no token revocation endpoint for v2.0 apps, so
        signing out only removes the local copy. Returns True if tokens existed.
        """
        removed = self.store.delete(service, self.tenant)
        if removed:
            logger.info("Signed out of %s", service)
        return removed
