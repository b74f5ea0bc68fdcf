from __future__ import annotations

"""Factories for generating fake identity data for testing."""

from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

from faker import Faker

from src.domain.entities.account import ProviderType
from src.domain.value_objects.identity_records import RelatedIdentity
from src.domain.value_objects.phone import Phone
from src.domain.value_objects.provider_data import ProviderProfile, ProviderTokens

fake = Faker()


def create_fake_email() -> str:
    """Create a unique, lower-case email address."""
    return fake.unique.email().lower()


def create_fake_phone(country_code: str = "55") -> Phone:
    """Create a phone with a random eleven digit national number."""
    return Phone(country_code=country_code, number=fake.numerify("119########"))


def create_fake_provider_tokens(
    access_token: Optional[str] = None,
    refresh_token: Optional[str] = None,
    scopes: Iterable[str] = (),
    expires_at: Optional[datetime] = None,
) -> ProviderTokens:
    """Create provider tokens as returned by a successful code exchange.

    Args:
        access_token (Optional[str]): Defaults to a fake token.
        refresh_token (Optional[str]): Defaults to None.
        scopes (Iterable[str]): Granted scopes, defaults to none.
        expires_at (Optional[datetime]): Defaults to one hour from now.

    Returns:
        ProviderTokens: The fake tokens.
    """
    return ProviderTokens(
        access_token=access_token or fake.sha256(),
        refresh_token=refresh_token,
        expires_at=expires_at or datetime.now(timezone.utc) + timedelta(hours=1),
        scopes=frozenset(scopes),
    )


def create_fake_provider_profile(
    id: Optional[str] = None,
    email: Optional[str] = None,
    is_email_verified: bool = True,
) -> ProviderProfile:
    return ProviderProfile(
        id=id or fake.numerify("1##################"),
        email=email if email is not None else create_fake_email(),
        is_email_verified=is_email_verified,
    )


def create_fake_related_identity(
    account_id: Optional[str] = None,
    provider_type: ProviderType = ProviderType.GOOGLE,
    provider_id: Optional[str] = None,
    email: Optional[str] = None,
) -> RelatedIdentity:
    return RelatedIdentity(
        account_id=account_id or fake.uuid4(),
        provider_id=provider_id or fake.numerify("1##################"),
        provider_type=provider_type,
        email=email,
    )
