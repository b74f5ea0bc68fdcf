"""SQLAlchemy implementation of the per-operation unit of work.

Each orchestrator operation opens one `AsyncSession`, begins a transaction on
it and passes the session to every store call. The transaction is committed
when the operation's block completes and rolled back when it raises.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import sessionmaker
from structlog import get_logger

from src.core.exceptions import StoreWriteError, TransactionStartError
from src.domain.interfaces.infrastructure import ITransactionManager

logger = get_logger(__name__)


class SQLAlchemyTransactionManager(ITransactionManager):
    """Opens one database transaction per operation.

    Attributes:
        session_factory: Factory producing fresh `AsyncSession` instances.
    """

    def __init__(self, session_factory: Optional[sessionmaker] = None):
        if session_factory is None:
            from src.infrastructure.database.async_db import AsyncSessionFactory

            session_factory = AsyncSessionFactory
        self.session_factory = session_factory

    @asynccontextmanager
    async def begin(self, operation: str) -> AsyncIterator[AsyncSession]:
        """Opens a transaction for `operation` and yields its session.

        Raises:
            TransactionStartError: If no connection could be acquired.
            StoreWriteError: If the final commit fails.
        """
        session: AsyncSession = self.session_factory()
        try:
            await session.begin()
            # Acquire the connection now so that an unreachable database is
            # reported before any step of the operation runs.
            await session.connection()
        except (SQLAlchemyError, OSError) as e:
            logger.error(
                "Failed to open transaction",
                operation=operation,
                error=str(e),
                error_type=type(e).__name__,
            )
            await session.close()
            raise TransactionStartError() from e

        logger.debug("Transaction opened", operation=operation)
        try:
            try:
                yield session
            except BaseException:
                await self._rollback(session, operation)
                raise

            try:
                await session.commit()
            except SQLAlchemyError as e:
                logger.error(
                    "Failed to commit transaction",
                    operation=operation,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                await self._rollback(session, operation)
                raise StoreWriteError(f"{operation} failed at commit") from e
            logger.debug("Transaction committed", operation=operation)
        finally:
            await session.close()

    async def _rollback(self, session: AsyncSession, operation: str) -> None:
        try:
            await session.rollback()
            logger.info("Transaction rolled back", operation=operation)
        except SQLAlchemyError as e:
            # The caller still receives the original failure.
            logger.error(
                "Failed to roll back transaction",
                operation=operation,
                error=str(e),
                error_type=type(e).__name__,
            )
