"""Google sign-in adapter (OAuth 2.0 / OpenID Connect)."""

from typing import Optional

import httpx
from structlog import get_logger
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_fixed

from src.core.config.settings import settings
from src.core.exceptions import ProviderProfileError
from src.domain.value_objects.provider_data import ProviderProfile, ProviderTokens
from src.infrastructure.services.authentication.oauth import OAuthSignInAdapter, token_expiry

logger = get_logger(__name__)

GOOGLE_TOKEN_ENDPOINT = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_ENDPOINT = "https://openidconnect.googleapis.com/v1/userinfo"


class GoogleSignInAdapter(OAuthSignInAdapter):
    """Exchanges Google authorization codes and reads the OpenID userinfo.

    Granted scopes come from the `scope` field of the token response.
    """

    provider_name = "google"
    token_endpoint = GOOGLE_TOKEN_ENDPOINT

    def __init__(
        self,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        super().__init__(
            client_id=client_id or settings.GOOGLE_CLIENT_ID,
            client_secret=client_secret or settings.GOOGLE_CLIENT_SECRET.get_secret_value(),
            required_scopes=settings.GOOGLE_REQUIRED_SCOPES,
            timeout=timeout or settings.OAUTH_HTTP_TIMEOUT_SECONDS,
        )

    async def exchange_code(self, code: str, origin_url: str) -> ProviderTokens:
        token = await self._fetch_token(code, origin_url)
        scopes = frozenset((token.get("scope") or "").split())
        logger.debug("Google code exchanged", granted_scopes=sorted(scopes))
        return ProviderTokens(
            access_token=token["access_token"],
            refresh_token=token.get("refresh_token"),
            expires_at=token_expiry(token),
            scopes=scopes,
        )

    async def get_user_data(self, access_token: str) -> ProviderProfile:
        try:
            userinfo = await self._fetch_userinfo(access_token)
        except httpx.HTTPError as e:
            logger.warning("Google userinfo unreachable", error=str(e), error_type=type(e).__name__)
            raise ProviderProfileError() from e
        subject = userinfo.get("sub")
        if not subject:
            raise ProviderProfileError("Google userinfo has no subject")
        return ProviderProfile(
            id=str(subject),
            email=userinfo.get("email") or "",
            is_email_verified=_is_true(userinfo.get("email_verified")),
        )

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_fixed(1),
        retry=retry_if_exception_type(httpx.TransportError),
        reraise=True,
    )
    async def _fetch_userinfo(self, access_token: str) -> dict:
        return await self._get_json(access_token, GOOGLE_USERINFO_ENDPOINT)


def _is_true(value) -> bool:
    # Older endpoints report the flag as the string "true".
    if isinstance(value, str):
        return value.lower() == "true"
    return value is True
