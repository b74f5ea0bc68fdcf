"""Identity Domain Events.

These events represent significant business occurrences in the identity domain
that other parts of the system may need to react to (audit logging, welcome
messages, analytics). They are published only after the transaction that
produced them has committed.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from src.domain.entities.account import ProviderType


@dataclass(frozen=True)
class BaseDomainEvent:
    """Base class for all domain events.

    Attributes:
        occurred_at: When the event occurred
        account_id: ID of the account associated with the event
        correlation_id: Optional correlation ID for tracking
    """

    occurred_at: datetime
    account_id: str
    correlation_id: Optional[str]

    def __post_init__(self):
        """Ensure occurred_at is timezone-aware."""
        if not self.occurred_at.tzinfo:
            object.__setattr__(self, "occurred_at", self.occurred_at.replace(tzinfo=timezone.utc))


@dataclass(frozen=True)
class AccountCreatedEvent(BaseDomainEvent):
    """Event published when a sign-in event created a new account.

    Attributes:
        provider_type: The sign-in method that created the account
    """

    provider_type: ProviderType

    @classmethod
    def create(
        cls,
        account_id: str,
        provider_type: ProviderType,
        correlation_id: Optional[str] = None,
    ) -> "AccountCreatedEvent":
        return cls(
            occurred_at=datetime.now(timezone.utc),
            account_id=account_id,
            correlation_id=correlation_id,
            provider_type=provider_type,
        )


@dataclass(frozen=True)
class SignInIdentityLinkedEvent(BaseDomainEvent):
    """Event published when an external identity was attached to an existing
    account because it shares the account's verified email.

    Attributes:
        provider_type: Provider of the newly attached identity
    """

    provider_type: ProviderType

    @classmethod
    def create(
        cls,
        account_id: str,
        provider_type: ProviderType,
        correlation_id: Optional[str] = None,
    ) -> "SignInIdentityLinkedEvent":
        return cls(
            occurred_at=datetime.now(timezone.utc),
            account_id=account_id,
            correlation_id=correlation_id,
            provider_type=provider_type,
        )


@dataclass(frozen=True)
class CredentialsIssuedEvent(BaseDomainEvent):
    """Event published when credentials were issued for an account.

    Attributes:
        method: The operation that issued them (e.g. "google", "magic_link",
            "refresh")
        with_refresh_token: Whether a refresh token was part of the issuance
    """

    method: str
    with_refresh_token: bool

    @classmethod
    def create(
        cls,
        account_id: str,
        method: str,
        with_refresh_token: bool,
        correlation_id: Optional[str] = None,
    ) -> "CredentialsIssuedEvent":
        return cls(
            occurred_at=datetime.now(timezone.utc),
            account_id=account_id,
            correlation_id=correlation_id,
            method=method,
            with_refresh_token=with_refresh_token,
        )
