"""Transient, immutable copies of stored identity data.

Stores hand these out instead of live ORM instances so that the orchestrator
can never mutate entity state outside a store call.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from src.domain.entities.account import ProviderType


@dataclass(frozen=True)
class AccountRecord:
    id: str
    email: Optional[str] = None
    phone_country_code: Optional[str] = None
    phone_number: Optional[str] = None


@dataclass(frozen=True)
class RelatedIdentity:
    """A sign-in identity that shares a provider subject or an email with an
    incoming sign-in event.

    Attributes:
        account_id: Account owning the identity.
        provider_id: Provider subject id of the identity.
        provider_type: Provider type of the identity.
        email: Email of the owning account, if any.
    """

    account_id: str
    provider_id: str
    provider_type: ProviderType
    email: Optional[str] = None


@dataclass(frozen=True)
class NewSignInIdentity:
    """Data needed to bind a new sign-in identity to an account.

    Provider tokens are given in plain text; the store encrypts them.
    """

    provider_type: ProviderType
    provider_id: str
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    expires_at: Optional[datetime] = None

    def __repr__(self) -> str:
        return (
            f"NewSignInIdentity(provider_type={self.provider_type.value}, "
            f"provider_id={self.provider_id!r}, has_tokens={self.access_token is not None})"
        )


@dataclass(frozen=True)
class RefreshTokenRecord:
    account_id: str
    created_at: datetime


@dataclass(frozen=True)
class MagicLinkCodeRecord:
    account_id: str
    code: str
    is_first_access: bool
    expires_at: datetime

    def __repr__(self) -> str:
        return (
            f"MagicLinkCodeRecord(account_id={self.account_id!r}, code='***', "
            f"is_first_access={self.is_first_access}, expires_at={self.expires_at.isoformat()})"
        )
