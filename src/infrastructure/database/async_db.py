from __future__ import annotations

"""
Asynchronous Database Utilities Module

This module provides the asynchronous SQLAlchemy engine and session factory the
identity stores run on. Sessions produced here are handed to the transaction
manager, which opens exactly one transaction per orchestrator operation.

**Security Note**: Ensure that the database connection URL (DATABASE_URL) is configured for SSL/TLS when
connecting over untrusted networks to prevent data interception (OWASP A02:2021 - Cryptographic Failures).
Note that asyncpg handles SSL differently, and 'sslmode' is not directly supported in connect_args; it must
be specified in the URL if required. Avoid logging sensitive connection details to prevent information
disclosure (OWASP A09:2021 - Security Logging and Monitoring Failures).

Key Components:
    - build_engine: Creates an asynchronous engine for a database URL.
    - engine: The application's asynchronous engine for PostgreSQL connections.
    - AsyncSessionFactory: A factory for creating asynchronous database sessions.
    - create_async_db_and_tables: Utility to create tables using the async engine.
"""

from typing import Optional

from sqlalchemy.engine import URL, make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel
from structlog import get_logger

import src.domain.entities  # noqa: F401 - registers the identity tables on SQLModel.metadata
from src.core.config.settings import settings

logger = get_logger(__name__)


def _build_async_url(database_url: str) -> URL:
    """
    Build the asynchronous database URL with proper handling of SSL parameters.

    Replaces a synchronous psycopg2 driver with asyncpg and strips query
    parameters like sslmode, which asyncpg handles differently.

    Returns:
        URL: The cleaned asynchronous database URL.
    """
    url = make_url(database_url)
    if url.drivername == "postgresql+psycopg2":
        url = url.set(drivername="postgresql+asyncpg")
    return url.difference_update_query(["sslmode"])


def build_engine(database_url: Optional[str] = None, echo: bool = False) -> AsyncEngine:
    """Creates an asynchronous engine.

    SQLite URLs (used by the test suites) get a single shared in-memory
    connection; PostgreSQL URLs get the configured connection pool.
    """
    url = _build_async_url(database_url or settings.DATABASE_URL)
    if url.get_backend_name() == "sqlite":
        return create_async_engine(
            url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_async_engine(
        url,
        echo=echo,
        pool_size=settings.POSTGRES_POOL_SIZE,
        max_overflow=settings.POSTGRES_MAX_OVERFLOW,
        pool_timeout=settings.POSTGRES_POOL_TIMEOUT,
        pool_pre_ping=True,
    )


def build_session_factory(bind: AsyncEngine) -> sessionmaker[AsyncSession]:  # type: ignore[type-arg]
    return sessionmaker(  # type: ignore[call-overload]
        bind=bind, class_=AsyncSession, expire_on_commit=False, autoflush=True
    )


engine = build_engine(echo=settings.DEBUG)

AsyncSessionFactory: sessionmaker[AsyncSession] = build_session_factory(engine)  # type: ignore[type-arg]


async def create_async_db_and_tables(bind: Optional[AsyncEngine] = None) -> None:  # noqa: D401
    """
    Create the identity tables using an async engine (mainly for test suites).

    Production schemas are managed by Alembic migrations.
    """
    logger.info("Creating async database tables")
    async with (bind or engine).begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    logger.info("Async database tables created")
