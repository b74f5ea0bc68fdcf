"""Facebook Login adapter (OAuth 2.0 over the Graph API)."""

from typing import FrozenSet, Optional

import httpx
from structlog import get_logger
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_fixed

from src.core.config.settings import settings
from src.core.exceptions import ProviderExchangeError, ProviderProfileError
from src.domain.value_objects.provider_data import ProviderProfile, ProviderTokens
from src.infrastructure.services.authentication.oauth import OAuthSignInAdapter, token_expiry

logger = get_logger(__name__)

GRAPH_API_URL = "https://graph.facebook.com"


class FacebookSignInAdapter(OAuthSignInAdapter):
    """Exchanges Facebook authorization codes and reads the Graph profile.

    The token response carries no scopes, so the granted permissions are read
    from `/me/permissions` right after the exchange. Facebook only returns an
    email once the user confirmed it, so a present email counts as verified.
    """

    provider_name = "facebook"

    def __init__(
        self,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        graph_version: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        super().__init__(
            client_id=client_id or settings.FACEBOOK_CLIENT_ID,
            client_secret=client_secret or settings.FACEBOOK_CLIENT_SECRET.get_secret_value(),
            required_scopes=settings.FACEBOOK_REQUIRED_SCOPES,
            timeout=timeout or settings.OAUTH_HTTP_TIMEOUT_SECONDS,
        )
        self.graph_url = f"{GRAPH_API_URL}/{graph_version or settings.FACEBOOK_GRAPH_VERSION}"
        self.token_endpoint = f"{self.graph_url}/oauth/access_token"

    async def exchange_code(self, code: str, origin_url: str) -> ProviderTokens:
        token = await self._fetch_token(code, origin_url)
        try:
            scopes = await self._granted_permissions(token["access_token"])
        except (ProviderProfileError, httpx.HTTPError) as e:
            logger.warning("Facebook permissions lookup failed", error=str(e))
            raise ProviderExchangeError("Failed to read granted Facebook permissions") from e

        logger.debug("Facebook code exchanged", granted_scopes=sorted(scopes))
        return ProviderTokens(
            access_token=token["access_token"],
            refresh_token=token.get("refresh_token"),
            expires_at=token_expiry(token),
            scopes=scopes,
        )

    async def get_user_data(self, access_token: str) -> ProviderProfile:
        try:
            profile = await self._fetch_profile(access_token)
        except httpx.HTTPError as e:
            logger.warning("Facebook profile unreachable", error=str(e), error_type=type(e).__name__)
            raise ProviderProfileError() from e
        subject = profile.get("id")
        if not subject:
            raise ProviderProfileError("Facebook profile has no id")
        email = profile.get("email") or ""
        return ProviderProfile(id=str(subject), email=email, is_email_verified=bool(email))

    async def _granted_permissions(self, access_token: str) -> FrozenSet[str]:
        body = await self._get_json(access_token, f"{self.graph_url}/me/permissions")
        return frozenset(
            entry["permission"]
            for entry in body.get("data", [])
            if entry.get("status") == "granted" and entry.get("permission")
        )

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_fixed(1),
        retry=retry_if_exception_type(httpx.TransportError),
        reraise=True,
    )
    async def _fetch_profile(self, access_token: str) -> dict:
        return await self._get_json(access_token, f"{self.graph_url}/me", params={"fields": "id,email"})
