"""Value objects for issued session credentials."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class AccessGrant:
    """A signed access token and its expiry, as minted by the token adapter."""

    access_token: str
    expires_at: datetime

    def __repr__(self) -> str:
        return f"AccessGrant(access_token='***', expires_at={self.expires_at.isoformat()})"


@dataclass(frozen=True)
class AuthOutput:
    """Credentials returned by a successful sign-in.

    Attributes:
        access_token: Short-lived signed access token.
        refresh_token: Long-lived opaque refresh token.
        expires_at: Expiry of the access token.
        is_first_access: True when the account was created by the operation
            that produced these credentials (for exchange, by the passwordless
            request that produced the code).
    """

    access_token: str
    refresh_token: str
    expires_at: datetime
    is_first_access: bool = False

    def __repr__(self) -> str:
        return (
            "AuthOutput(access_token='***', refresh_token='***', "
            f"expires_at={self.expires_at.isoformat()}, is_first_access={self.is_first_access})"
        )
