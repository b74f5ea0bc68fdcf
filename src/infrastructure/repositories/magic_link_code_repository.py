"""Magic Link Code Repository implementation using SQLAlchemy.

Each account has at most one live code. `upsert` replaces it with a fresh
random numeric code; `get` redeems it by deleting the row inside the caller's
transaction, so a committed exchange can never be replayed while a rolled
back one leaves the code usable.
"""

import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from src.core.config.settings import settings
from src.core.exceptions import StoreReadError, StoreWriteError
from src.domain.entities.magic_link_code import MagicLinkCode
from src.domain.interfaces.repositories import IMagicLinkCodeRepository
from src.domain.value_objects.identity_records import MagicLinkCodeRecord

logger = get_logger(__name__)


def generate_code(length: int) -> str:
    return "".join(secrets.choice("0123456789") for _ in range(length))


class MagicLinkCodeRepository(IMagicLinkCodeRepository):
    """SQLAlchemy implementation of IMagicLinkCodeRepository.

    Attributes:
        code_length: Number of digits in a generated code.
        ttl: How long a generated code stays valid.
    """

    def __init__(self, code_length: Optional[int] = None, ttl: Optional[timedelta] = None):
        self.code_length = code_length or settings.MAGIC_LINK_CODE_LENGTH
        self.ttl = ttl or timedelta(minutes=settings.MAGIC_LINK_CODE_EXPIRE_MINUTES)

    async def upsert(
        self, tx: AsyncSession, account_id: str, is_first_access: bool
    ) -> MagicLinkCodeRecord:
        now = datetime.now(timezone.utc)
        code = generate_code(self.code_length)
        expires_at = now + self.ttl
        try:
            stored = await tx.get(MagicLinkCode, account_id)
            if stored is None:
                stored = MagicLinkCode(
                    account_id=account_id,
                    code=code,
                    is_first_access=is_first_access,
                    expires_at=expires_at,
                    created_at=now,
                )
                tx.add(stored)
            else:
                stored.code = code
                stored.is_first_access = is_first_access
                stored.expires_at = expires_at
                stored.created_at = now
            await tx.flush()
        except SQLAlchemyError as e:
            logger.error(
                "Error storing magic link code",
                account_id=account_id,
                error=str(e),
                error_type=type(e).__name__,
                operation="upsert",
            )
            raise StoreWriteError("Failed to store magic link code") from e

        logger.debug(
            "Magic link code stored",
            account_id=account_id,
            is_first_access=is_first_access,
            expires_at=expires_at.isoformat(),
        )
        return MagicLinkCodeRecord(
            account_id=account_id,
            code=code,
            is_first_access=is_first_access,
            expires_at=expires_at,
        )

    async def get(
        self, tx: AsyncSession, account_id: str, code: str
    ) -> Optional[MagicLinkCodeRecord]:
        if not code:
            return None

        try:
            result = await tx.execute(
                select(MagicLinkCode).where(
                    MagicLinkCode.account_id == account_id,
                    MagicLinkCode.code == code,
                )
            )
            stored = result.scalars().first()
        except SQLAlchemyError as e:
            logger.error(
                "Error retrieving magic link code",
                account_id=account_id,
                error=str(e),
                error_type=type(e).__name__,
                operation="get",
            )
            raise StoreReadError("Failed to retrieve magic link code") from e

        if stored is None:
            logger.debug("Magic link code lookup completed", account_id=account_id, found=False)
            return None

        expires_at = stored.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        if expires_at <= datetime.now(timezone.utc):
            logger.info("Magic link code expired", account_id=account_id)
            return None

        record = MagicLinkCodeRecord(
            account_id=stored.account_id,
            code=stored.code,
            is_first_access=stored.is_first_access,
            expires_at=expires_at,
        )
        try:
            # Only the transaction that actually removes the row redeems the code.
            result = await tx.execute(
                delete(MagicLinkCode)
                .where(
                    MagicLinkCode.account_id == account_id,
                    MagicLinkCode.code == code,
                )
                .execution_options(synchronize_session="fetch")
            )
        except SQLAlchemyError as e:
            logger.error(
                "Error consuming magic link code",
                account_id=account_id,
                error=str(e),
                error_type=type(e).__name__,
                operation="get",
            )
            raise StoreWriteError("Failed to consume magic link code") from e

        if result.rowcount != 1:
            logger.warning(
                "Magic link code already redeemed by a concurrent exchange",
                account_id=account_id,
                deleted_rows=result.rowcount,
            )
            return None

        logger.debug("Magic link code redeemed", account_id=account_id)
        return record
