"""Account Repository implementation using SQLAlchemy.

This module persists accounts and their sign-in identities. Every method runs
on the session of the calling operation and never commits: the transaction
manager owns commit and rollback.

Provider tokens are encrypted with `ProviderTokenCipher` before they are
written. Uniqueness of emails, phones and provider subjects is enforced by the
database; a violated constraint surfaces as `StoreWriteError`.
"""

from datetime import datetime, timezone
from typing import List, Optional, Sequence

from sqlalchemy import and_, or_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from src.core.exceptions import StoreReadError, StoreWriteError
from src.domain.entities.account import Account, ProviderType, SignInIdentity
from src.domain.interfaces.repositories import IAccountRepository
from src.domain.value_objects.email import Email
from src.domain.value_objects.identity_records import (
    AccountRecord,
    NewSignInIdentity,
    RelatedIdentity,
)
from src.domain.value_objects.phone import Phone
from src.infrastructure.services.authentication.token_encryption import ProviderTokenCipher

logger = get_logger(__name__)


class AccountRepository(IAccountRepository):
    """SQLAlchemy implementation of IAccountRepository.

    Responsibilities:
    - Account and sign-in identity persistence
    - Provider token encryption at rest
    - Translation of database failures into store errors
    - Secure logging with email masking
    """

    def __init__(self, token_cipher: Optional[ProviderTokenCipher] = None):
        self._cipher = token_cipher or ProviderTokenCipher()
        logger.debug("AccountRepository initialized", repository_type="infrastructure")

    async def create(
        self,
        tx: AsyncSession,
        email: Optional[str] = None,
        phone: Optional[Phone] = None,
        identities: Sequence[NewSignInIdentity] = (),
    ) -> str:
        account = Account(
            email=email,
            phone_country_code=phone.country_code if phone else None,
            phone_number=phone.number if phone else None,
        )
        try:
            tx.add(account)
            await tx.flush()
            for identity in identities:
                tx.add(self._to_entity(account.id, identity))
            await tx.flush()
        except IntegrityError as e:
            logger.warning(
                "Account creation violated a uniqueness constraint",
                email=_mask(email),
                identities=[identity.provider_type.value for identity in identities],
                operation="create",
            )
            raise StoreWriteError("Account already exists") from e
        except SQLAlchemyError as e:
            logger.error(
                "Error creating account",
                error=str(e),
                error_type=type(e).__name__,
                operation="create",
            )
            raise StoreWriteError("Failed to create account") from e

        logger.info(
            "Account created",
            account_id=account.id,
            email=_mask(email),
            identities=[identity.provider_type.value for identity in identities],
        )
        return account.id

    async def get_by_email(self, tx: AsyncSession, email: str) -> Optional[AccountRecord]:
        statement = select(Account).where(Account.email == email.strip().lower())
        account = await self._first(tx, statement, "get_by_email")
        logger.debug(
            "Account lookup by email completed",
            email=_mask(email),
            found=account is not None,
            operation="get_by_email",
        )
        return _to_record(account)

    async def get_by_phone(
        self, tx: AsyncSession, country_code: str, number: str
    ) -> Optional[AccountRecord]:
        statement = select(Account).where(
            Account.phone_country_code == country_code,
            Account.phone_number == number,
        )
        account = await self._first(tx, statement, "get_by_phone")
        logger.debug(
            "Account lookup by phone completed",
            found=account is not None,
            operation="get_by_phone",
        )
        return _to_record(account)

    async def get_many_by_provider(
        self,
        tx: AsyncSession,
        provider_id: str,
        provider_type: ProviderType,
        email: str,
    ) -> List[RelatedIdentity]:
        statement = (
            select(
                SignInIdentity.account_id,
                SignInIdentity.provider_id,
                SignInIdentity.provider_type,
                Account.email,
            )
            .join(Account, Account.id == SignInIdentity.account_id)
            .where(
                or_(
                    and_(
                        SignInIdentity.provider_type == provider_type,
                        SignInIdentity.provider_id == provider_id,
                    ),
                    Account.email == email,
                )
            )
        )
        try:
            result = await tx.execute(statement)
            rows = result.all()
        except SQLAlchemyError as e:
            logger.error(
                "Error loading related identities",
                provider_type=provider_type.value,
                error=str(e),
                error_type=type(e).__name__,
                operation="get_many_by_provider",
            )
            raise StoreReadError("Failed to load related identities") from e

        related = [
            RelatedIdentity(
                account_id=row.account_id,
                provider_id=row.provider_id,
                provider_type=ProviderType(row.provider_type),
                email=row.email,
            )
            for row in rows
        ]
        logger.debug(
            "Related identities loaded",
            provider_type=provider_type.value,
            email=_mask(email),
            count=len(related),
            operation="get_many_by_provider",
        )
        return related

    async def add_identity(
        self, tx: AsyncSession, account_id: str, identity: NewSignInIdentity
    ) -> None:
        try:
            tx.add(self._to_entity(account_id, identity))
            await tx.flush()
        except IntegrityError as e:
            logger.warning(
                "Identity already bound",
                account_id=account_id,
                provider_type=identity.provider_type.value,
                operation="add_identity",
            )
            raise StoreWriteError("Sign-in identity already exists") from e
        except SQLAlchemyError as e:
            logger.error(
                "Error adding sign-in identity",
                account_id=account_id,
                error=str(e),
                error_type=type(e).__name__,
                operation="add_identity",
            )
            raise StoreWriteError("Failed to add sign-in identity") from e

        logger.info(
            "Sign-in identity added",
            account_id=account_id,
            provider_type=identity.provider_type.value,
        )

    async def update_identity_tokens(self, tx: AsyncSession, identity: NewSignInIdentity) -> None:
        values = {
            "access_token": self._cipher.encrypt(identity.access_token),
            "expires_at": identity.expires_at,
            "updated_at": datetime.now(timezone.utc),
        }
        # Providers only return a refresh token on first consent.
        if identity.refresh_token is not None:
            values["refresh_token"] = self._cipher.encrypt(identity.refresh_token)

        statement = (
            update(SignInIdentity)
            .where(
                SignInIdentity.provider_type == identity.provider_type,
                SignInIdentity.provider_id == identity.provider_id,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await tx.execute(statement)
        except SQLAlchemyError as e:
            logger.error(
                "Error updating provider tokens",
                provider_type=identity.provider_type.value,
                error=str(e),
                error_type=type(e).__name__,
                operation="update_identity_tokens",
            )
            raise StoreWriteError("Failed to update provider tokens") from e

        if result.rowcount == 0:
            logger.warning(
                "No identity to update provider tokens for",
                provider_type=identity.provider_type.value,
                operation="update_identity_tokens",
            )
            raise StoreWriteError("Sign-in identity no longer exists")

        logger.debug(
            "Provider tokens updated",
            provider_type=identity.provider_type.value,
            has_refresh_token=identity.refresh_token is not None,
        )

    def _to_entity(self, account_id: str, identity: NewSignInIdentity) -> SignInIdentity:
        return SignInIdentity(
            account_id=account_id,
            provider_type=identity.provider_type,
            provider_id=identity.provider_id,
            access_token=self._cipher.encrypt(identity.access_token),
            refresh_token=self._cipher.encrypt(identity.refresh_token),
            expires_at=identity.expires_at,
        )

    async def _first(self, tx: AsyncSession, statement, operation: str) -> Optional[Account]:
        try:
            result = await tx.execute(statement)
            return result.scalars().first()
        except SQLAlchemyError as e:
            logger.error(
                "Error retrieving account",
                error=str(e),
                error_type=type(e).__name__,
                operation=operation,
            )
            raise StoreReadError("Failed to retrieve account") from e


def _to_record(account: Optional[Account]) -> Optional[AccountRecord]:
    if account is None:
        return None
    return AccountRecord(
        id=account.id,
        email=account.email,
        phone_country_code=account.phone_country_code,
        phone_number=account.phone_number,
    )


def _mask(email: Optional[str]) -> Optional[str]:
    if not email:
        return None
    try:
        return Email(email).mask_for_logging()
    except ValueError:
        return "***"
