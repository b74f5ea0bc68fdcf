import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlalchemy import DateTime, LargeBinary, String, UniqueConstraint
from sqlalchemy import Enum as SAEnum
from sqlmodel import Column, Field, Index, SQLModel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProviderType(str, Enum):
    """The closed set of ways a user can prove who they are.

    Stored as a database enum so that a misspelled provider can never create
    an unreachable identity row.

    Attributes:
        EMAIL: Passwordless sign-in with a code sent by email.
        PHONE: Passwordless sign-in with a code sent by SMS.
        GOOGLE: Google OAuth 2.0 / OpenID Connect.
        FACEBOOK: Facebook Login (OAuth 2.0).
    """

    EMAIL = "EMAIL"
    PHONE = "PHONE"
    GOOGLE = "GOOGLE"
    FACEBOOK = "FACEBOOK"


class Account(SQLModel, table=True):
    """The identity anchor every sign-in identity resolves to.

    Email and phone are both optional but each is unique across accounts when
    present. The store enforces this with unique constraints, since concurrent
    sign-ups can race past the orchestrator's own lookups.

    Attributes:
        id: Opaque account identifier (UUID string).
        email: Verified, lower-cased email address.
        phone_country_code: Country calling code of the verified phone.
        phone_number: National number of the verified phone.
        created_at: When the account was created.
    """

    __tablename__ = "accounts"

    id: str = Field(
        default_factory=lambda: str(uuid.uuid4()),
        sa_column=Column(String(36), primary_key=True),
        description="Opaque account identifier.",
    )
    email: Optional[str] = Field(
        default=None,
        sa_column=Column(String(254), unique=True, nullable=True),
        description="Verified email address, unique when present.",
    )
    phone_country_code: Optional[str] = Field(default=None, max_length=3)
    phone_number: Optional[str] = Field(default=None, max_length=14)
    created_at: datetime = Field(
        default_factory=_utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )

    __table_args__ = (
        UniqueConstraint("phone_country_code", "phone_number", name="uq_accounts_phone"),
        {"extend_existing": True},
    )


class SignInIdentity(SQLModel, table=True):
    """A verified credential claim bound to an account.

    One row per (provider type, provider subject id) across the whole system,
    and at most one row per provider type for a given account. Provider tokens
    are stored encrypted (Fernet) and are absent for EMAIL/PHONE identities.

    Attributes:
        id: Surrogate primary key.
        account_id: Owning account.
        provider_type: Which provider issued the claim.
        provider_id: Provider-assigned subject id (the email for EMAIL, the
            country code plus number for PHONE).
        access_token: Encrypted provider access token.
        refresh_token: Encrypted provider refresh token.
        expires_at: Expiry of the provider access token.
        created_at: When the identity was bound to the account.
        updated_at: Last time the stored provider tokens were refreshed.
    """

    __tablename__ = "sign_in_identities"

    id: Optional[int] = Field(default=None, primary_key=True)
    account_id: str = Field(foreign_key="accounts.id", nullable=False, max_length=36)
    provider_type: ProviderType = Field(
        sa_column=Column(SAEnum(ProviderType, name="provider_type"), nullable=False),
    )
    provider_id: str = Field(sa_column=Column(String(255), nullable=False))
    access_token: Optional[bytes] = Field(default=None, sa_column=Column(LargeBinary, nullable=True))
    refresh_token: Optional[bytes] = Field(default=None, sa_column=Column(LargeBinary, nullable=True))
    expires_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime(timezone=True), nullable=True)
    )
    created_at: datetime = Field(
        default_factory=_utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    updated_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime(timezone=True), nullable=True)
    )

    __table_args__ = (
        UniqueConstraint("provider_type", "provider_id", name="uq_sign_in_identities_provider"),
        UniqueConstraint("account_id", "provider_type", name="uq_sign_in_identities_account_provider"),
        Index("ix_sign_in_identities_account_id", "account_id"),
        {"extend_existing": True},
    )
