"""JWT access token adapter.

Access tokens are signed JWTs (RS256 unless configured otherwise) carrying the
account id as `sub`. They are never stored: the refresh token store is the
only server-side record of a session.
"""

import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jwt import PyJWTError
from jwt import decode as jwt_decode
from jwt import encode as jwt_encode
from structlog import get_logger

from src.core.config.settings import settings
from src.core.exceptions import AuthenticationError, ConfigurationError
from src.domain.interfaces.services import ITokenAdapter
from src.domain.value_objects.credentials import AccessGrant

logger = get_logger(__name__)


class JwtTokenAdapter(ITokenAdapter):
    """Mints signed access tokens with PyJWT.

    Attributes:
        private_key: PEM key used to sign tokens.
        public_key: PEM key used to verify tokens.
        algorithm: JWS algorithm.
        issuer: `iss` claim.
        audience: `aud` claim.
        ttl: Access token lifetime.
    """

    def __init__(
        self,
        private_key: Optional[str] = None,
        public_key: Optional[str] = None,
        algorithm: Optional[str] = None,
        issuer: Optional[str] = None,
        audience: Optional[str] = None,
        ttl: Optional[timedelta] = None,
    ):
        self.private_key = private_key or settings.JWT_PRIVATE_KEY.get_secret_value()
        self.public_key = public_key or settings.JWT_PUBLIC_KEY
        self.algorithm = algorithm or settings.JWT_ALGORITHM
        self.issuer = issuer or settings.JWT_ISSUER
        self.audience = audience or settings.JWT_AUDIENCE
        self.ttl = ttl or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    async def mint_access(self, account_id: str) -> AccessGrant:
        """Creates a signed access token for an account.

        Raises:
            ConfigurationError: If no signing key is configured.
            PyJWTError: If the key cannot sign with the configured algorithm.
        """
        if not self.private_key:
            raise ConfigurationError("JWT private key is not configured")

        issued_at = datetime.now(timezone.utc)
        expires_at = issued_at + self.ttl
        jti = secrets.token_urlsafe(32)
        payload = {
            "sub": account_id,
            "iss": self.issuer,
            "aud": self.audience,
            "iat": issued_at,
            "exp": expires_at,
            "jti": jti,
        }
        token = jwt_encode(payload, self.private_key, algorithm=self.algorithm)
        logger.debug("Access token created", account_id=account_id, jti=jti[:8] + "***")
        return AccessGrant(access_token=token, expires_at=expires_at.replace(microsecond=0))

    def verify_access(self, token: str) -> Dict[str, Any]:
        """Validates an access token and returns its claims.

        Raises:
            AuthenticationError: If the token is invalid or expired.
        """
        try:
            return jwt_decode(
                token,
                self.public_key,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                audience=self.audience,
                options={"require": ["sub", "exp", "iat", "jti"]},
            )
        except PyJWTError as e:
            logger.warning("Access token rejected", error=str(e), error_type=type(e).__name__)
            raise AuthenticationError("Invalid access token", "invalid_access_token") from e
