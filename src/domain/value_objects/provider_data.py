"""Value objects for data returned by external sign-in providers."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import FrozenSet, Optional


@dataclass(frozen=True)
class ProviderTokens:
    """Tokens obtained by exchanging an authorization code with a provider.

    Attributes:
        access_token: Provider access token used to fetch the profile.
        refresh_token: Provider refresh token, when the provider issues one.
        expires_at: When the provider access token expires.
        scopes: Scopes the user actually granted.
    """

    access_token: str
    expires_at: datetime
    refresh_token: Optional[str] = None
    scopes: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self):
        if not self.access_token:
            raise ValueError("Provider access token must be a non-empty string")
        object.__setattr__(self, "scopes", frozenset(self.scopes))

    def __repr__(self) -> str:
        return (
            f"ProviderTokens(access_token='***', has_refresh_token={self.refresh_token is not None}, "
            f"expires_at={self.expires_at.isoformat()}, scopes={sorted(self.scopes)})"
        )


@dataclass(frozen=True)
class ProviderProfile:
    """Profile data fetched from a provider.

    Attributes:
        id: Provider-assigned subject id.
        email: Email address reported by the provider (normalized to lowercase).
        is_email_verified: Whether the provider vouches for the email address.
    """

    id: str
    email: str
    is_email_verified: bool

    def __post_init__(self):
        if not self.id:
            raise ValueError("Provider profile must contain a subject id")
        object.__setattr__(self, "email", (self.email or "").strip().lower())
