"""Refresh Token Repository implementation using SQLAlchemy.

Refresh tokens are opaque random strings. Only their SHA-256 digest is
stored; the plain value is returned once, at creation.
"""

import hashlib
import secrets
from datetime import timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from src.core.exceptions import StoreReadError, StoreWriteError
from src.domain.entities.refresh_token import RefreshToken
from src.domain.interfaces.repositories import IRefreshTokenRepository
from src.domain.value_objects.identity_records import RefreshTokenRecord

logger = get_logger(__name__)

TOKEN_BYTES = 48


def hash_refresh_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class RefreshTokenRepository(IRefreshTokenRepository):
    """SQLAlchemy implementation of IRefreshTokenRepository."""

    async def create(self, tx: AsyncSession, account_id: str) -> str:
        token = secrets.token_urlsafe(TOKEN_BYTES)
        try:
            tx.add(RefreshToken(account_id=account_id, token_hash=hash_refresh_token(token)))
            await tx.flush()
        except SQLAlchemyError as e:
            logger.error(
                "Error storing refresh token",
                account_id=account_id,
                error=str(e),
                error_type=type(e).__name__,
                operation="create",
            )
            raise StoreWriteError("Failed to store refresh token") from e

        logger.debug("Refresh token stored", account_id=account_id)
        return token

    async def get(
        self, tx: AsyncSession, account_id: str, token: str
    ) -> Optional[RefreshTokenRecord]:
        if not token:
            return None

        statement = select(RefreshToken).where(
            RefreshToken.account_id == account_id,
            RefreshToken.token_hash == hash_refresh_token(token),
        )
        try:
            result = await tx.execute(statement)
            stored = result.scalars().first()
        except SQLAlchemyError as e:
            logger.error(
                "Error retrieving refresh token",
                account_id=account_id,
                error=str(e),
                error_type=type(e).__name__,
                operation="get",
            )
            raise StoreReadError("Failed to retrieve refresh token") from e

        logger.debug("Refresh token lookup completed", account_id=account_id, found=stored is not None)
        if stored is None:
            return None

        created_at = stored.created_at
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return RefreshTokenRecord(account_id=stored.account_id, created_at=created_at)
