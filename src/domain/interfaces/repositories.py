"""Repository interfaces for abstracting data persistence in the domain layer.

This module defines the abstract base classes (interfaces) for the stores the
identity orchestrator depends on. They act as "ports" in the context of
Hexagonal Architecture: the domain uses them without being coupled to any
specific storage engine.

Every method receives the transaction of the calling operation explicitly as
its first argument. A store never opens, commits or rolls back a transaction of
its own, and writes made under an uncommitted transaction must stay invisible to
other transactions.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from src.domain.entities.account import ProviderType
from src.domain.value_objects.identity_records import (
    AccountRecord,
    MagicLinkCodeRecord,
    NewSignInIdentity,
    RefreshTokenRecord,
    RelatedIdentity,
)
from src.domain.value_objects.phone import Phone


class IAccountRepository(ABC):
    """An interface defining the contract for account and sign-in identity
    persistence.

    The store owns the uniqueness invariants: email and phone are unique across
    accounts, (provider type, provider id) is unique across identities and an
    account holds at most one identity per provider type. Violations raise
    `StoreWriteError`.
    """

    @abstractmethod
    async def create(
        self,
        tx: AsyncSession,
        email: Optional[str] = None,
        phone: Optional[Phone] = None,
        identities: Sequence[NewSignInIdentity] = (),
    ) -> str:
        """Creates an account together with its sign-in identities.

        Args:
            tx: The caller's open transaction.
            email: Verified email of the account, if any.
            phone: Verified phone of the account, if any.
            identities: Identities to bind to the new account.

        Returns:
            The id of the new account.
        """
        raise NotImplementedError

    @abstractmethod
    async def get_by_email(self, tx: AsyncSession, email: str) -> Optional[AccountRecord]:
        """Retrieves the account holding an email address.

        Returns:
            An `AccountRecord`, or `None` when no account holds the email.
        """
        raise NotImplementedError

    @abstractmethod
    async def get_by_phone(
        self, tx: AsyncSession, country_code: str, number: str
    ) -> Optional[AccountRecord]:
        """Retrieves the account holding a phone number.

        Returns:
            An `AccountRecord`, or `None` when no account holds the phone.
        """
        raise NotImplementedError

    @abstractmethod
    async def get_many_by_provider(
        self,
        tx: AsyncSession,
        provider_id: str,
        provider_type: ProviderType,
        email: str,
    ) -> List[RelatedIdentity]:
        """Loads every identity that either has this (provider type, provider
        id) or belongs to an account holding this email, in one query.

        No ordering is guaranteed.
        """
        raise NotImplementedError

    @abstractmethod
    async def add_identity(
        self, tx: AsyncSession, account_id: str, identity: NewSignInIdentity
    ) -> None:
        """Binds a new sign-in identity to an existing account."""
        raise NotImplementedError

    @abstractmethod
    async def update_identity_tokens(self, tx: AsyncSession, identity: NewSignInIdentity) -> None:
        """Replaces the stored provider tokens of the identity matching
        `identity.provider_type` and `identity.provider_id`."""
        raise NotImplementedError


class IRefreshTokenRepository(ABC):
    """An interface defining the contract for refresh token persistence.

    Token values are generated by the store; they are opaque to the domain.
    """

    @abstractmethod
    async def create(self, tx: AsyncSession, account_id: str) -> str:
        """Generates and stores a new refresh token for an account.

        Returns:
            The token value. It is not recoverable from the store afterwards.
        """
        raise NotImplementedError

    @abstractmethod
    async def get(
        self, tx: AsyncSession, account_id: str, token: str
    ) -> Optional[RefreshTokenRecord]:
        """Retrieves the record of a refresh token issued to an account.

        Returns:
            The `RefreshTokenRecord`, or `None` when the token was not issued
            to this account.
        """
        raise NotImplementedError

    async def exists(self, tx: AsyncSession, account_id: str, token: str) -> bool:
        """Checks whether a refresh token was issued to an account."""
        return await self.get(tx, account_id, token) is not None


class IMagicLinkCodeRepository(ABC):
    """An interface defining the contract for magic link code persistence.

    Codes are generated by the store and are single use.
    """

    @abstractmethod
    async def upsert(
        self, tx: AsyncSession, account_id: str, is_first_access: bool
    ) -> MagicLinkCodeRecord:
        """Creates, or overwrites, the code of an account with a fresh value
        and expiry.

        Returns:
            The stored code.
        """
        raise NotImplementedError

    @abstractmethod
    async def get(
        self, tx: AsyncSession, account_id: str, code: str
    ) -> Optional[MagicLinkCodeRecord]:
        """Redeems a code.

        A matching, unexpired code is returned and removed within `tx`, so it
        validates at most once per committed transaction.

        Returns:
            The redeemed `MagicLinkCodeRecord`, or `None` when the code is
            wrong, expired or already consumed.
        """
        raise NotImplementedError
