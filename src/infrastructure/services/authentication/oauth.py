"""Shared plumbing for OAuth 2.0 sign-in provider adapters.

Adapters talk to the providers through authlib's `AsyncOAuth2Client`, an
httpx client that knows how to run the authorization code grant and how to
attach a bearer token to API calls.
"""

import time
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Mapping, Optional

import httpx
from authlib.integrations.httpx_client import AsyncOAuth2Client
from authlib.integrations.base_client import OAuthError
from structlog import get_logger

from src.core.exceptions import ProviderExchangeError, ProviderProfileError
from src.domain.interfaces.services import ISignInProviderAdapter

logger = get_logger(__name__)

DEFAULT_TOKEN_LIFETIME_SECONDS = 3600


class OAuthSignInAdapter(ISignInProviderAdapter):
    """Base class for authorization code sign-in providers.

    Subclasses provide the provider name, the token endpoint and the scopes
    the application requires, and implement the token and profile parsing.
    """

    provider_name: str = ""
    token_endpoint: str = ""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        required_scopes: Iterable[str],
        timeout: float,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.required_scopes = frozenset(required_scopes)
        self.timeout = timeout

    def has_required_scopes(self, scopes: Iterable[str]) -> bool:
        missing = self.required_scopes - set(scopes)
        if missing:
            logger.info(
                "Required scopes not granted",
                provider=self.provider_name,
                missing_scopes=sorted(missing),
            )
        return not missing

    def _client(self, **kwargs: Any) -> AsyncOAuth2Client:
        return AsyncOAuth2Client(
            client_id=self.client_id,
            client_secret=self.client_secret,
            timeout=self.timeout,
            **kwargs,
        )

    async def _fetch_token(self, code: str, origin_url: str) -> Dict[str, Any]:
        """Runs the authorization code grant.

        Raises:
            ProviderExchangeError: If the provider rejects the code or cannot
                be reached.
        """
        if not code:
            raise ProviderExchangeError("Authorization code is empty")
        try:
            async with self._client(redirect_uri=origin_url) as client:
                token = await client.fetch_token(
                    self.token_endpoint,
                    code=code,
                    grant_type="authorization_code",
                )
        except (OAuthError, httpx.HTTPError) as e:
            logger.warning(
                "Authorization code exchange failed",
                provider=self.provider_name,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise ProviderExchangeError() from e

        if not token or not token.get("access_token"):
            logger.warning("Token response without access token", provider=self.provider_name)
            raise ProviderExchangeError()
        return dict(token)

    async def _get_json(
        self, access_token: str, url: str, params: Optional[Mapping[str, str]] = None
    ) -> Dict[str, Any]:
        """Calls a provider API with the user's bearer token.

        Transport errors propagate so that callers can retry them; HTTP error
        statuses and malformed bodies raise `ProviderProfileError`.
        """
        bearer = {"access_token": access_token, "token_type": "Bearer"}
        async with self._client(token=bearer) as client:
            response = await client.get(url, params=params)
        if response.status_code != 200:
            logger.warning(
                "Provider API call failed",
                provider=self.provider_name,
                status_code=response.status_code,
            )
            raise ProviderProfileError(f"{self.provider_name} API returned {response.status_code}")
        try:
            body = response.json()
        except ValueError as e:
            raise ProviderProfileError(f"{self.provider_name} API returned malformed JSON") from e
        if not isinstance(body, dict):
            raise ProviderProfileError(f"{self.provider_name} API returned an unexpected body")
        return body


def token_expiry(token: Mapping[str, Any]) -> datetime:
    """Absolute expiry of a token response.

    Uses `expires_at` when authlib computed it, otherwise `expires_in`.
    """
    expires_at = token.get("expires_at")
    if expires_at is None:
        expires_in = token.get("expires_in") or DEFAULT_TOKEN_LIFETIME_SECONDS
        expires_at = time.time() + int(expires_in)
    return datetime.fromtimestamp(int(expires_at), tz=timezone.utc)
