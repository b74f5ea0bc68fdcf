import os
from contextlib import asynccontextmanager
from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

os.environ.setdefault("APP_ENV", "test")

import pytest
import pytest_asyncio
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.fernet import Fernet

from src.core.logging import configure_logging
from src.domain.interfaces.infrastructure import ITransactionManager
from src.infrastructure.dependency_injection import get_identity_orchestrator
from src.infrastructure.database.async_db import build_engine, build_session_factory, create_async_db_and_tables
from src.infrastructure.database.unit_of_work import SQLAlchemyTransactionManager
from src.infrastructure.repositories import (
    AccountRepository,
    MagicLinkCodeRepository,
    RefreshTokenRepository,
)
from src.infrastructure.services.authentication.jwt_token_service import JwtTokenAdapter
from src.infrastructure.services.authentication.token_encryption import ProviderTokenCipher
from src.infrastructure.services.event_publisher import InMemoryEventPublisher

configure_logging(log_level="DEBUG", json_logs=False)


class RecordingTransactionManager(ITransactionManager):
    """Transaction manager double that records commits and rollbacks."""

    def __init__(self):
        self.session = MagicMock(name="tx")
        self.operations = []
        self.commits = 0
        self.rollbacks = 0

    @asynccontextmanager
    async def begin(self, operation):
        self.operations.append(operation)
        try:
            yield self.session
        except BaseException:
            self.rollbacks += 1
            raise
        self.commits += 1


@pytest.fixture
def transaction_manager():
    return RecordingTransactionManager()


@pytest.fixture(scope="session")
def rsa_key_pair():
    """PEM encoded RSA private and public keys for signing test tokens."""
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()
    public_pem = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode()
    return private_pem, public_pem


@pytest.fixture
def jwt_token_adapter(rsa_key_pair):
    private_pem, public_pem = rsa_key_pair
    return JwtTokenAdapter(
        private_key=private_pem,
        public_key=public_pem,
        algorithm="RS256",
        issuer="https://identity.test",
        audience="identity:test",
        ttl=timedelta(minutes=15),
    )


@pytest.fixture
def token_cipher():
    return ProviderTokenCipher(encryption_key=Fernet.generate_key().decode())


@pytest.fixture
def event_publisher():
    return InMemoryEventPublisher()


@pytest_asyncio.fixture
async def db_engine():
    engine = build_engine("sqlite+aiosqlite:///:memory:")
    await create_async_db_and_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return build_session_factory(db_engine)


@pytest.fixture
def sql_transaction_manager(session_factory):
    return SQLAlchemyTransactionManager(session_factory)


@pytest.fixture
def account_repository(token_cipher):
    return AccountRepository(token_cipher=token_cipher)


@pytest.fixture
def refresh_token_repository():
    return RefreshTokenRepository()


@pytest.fixture
def magic_link_code_repository():
    return MagicLinkCodeRepository(code_length=6, ttl=timedelta(minutes=15))


@pytest.fixture
def email_adapter():
    mock = MagicMock()
    mock.send_verification_code_email = AsyncMock(return_value=None)
    return mock


@pytest.fixture
def sms_adapter():
    mock = MagicMock()
    mock.send_verification_code_sms = AsyncMock(return_value=None)
    return mock


def _provider_adapter(name):
    mock = MagicMock(name=name)
    mock.exchange_code = AsyncMock()
    mock.get_user_data = AsyncMock()
    mock.has_required_scopes = MagicMock(return_value=True)
    return mock


@pytest.fixture
def google_adapter():
    return _provider_adapter("google_adapter")


@pytest.fixture
def facebook_adapter():
    return _provider_adapter("facebook_adapter")


@pytest.fixture
def sql_orchestrator(
    sql_transaction_manager,
    account_repository,
    refresh_token_repository,
    magic_link_code_repository,
    google_adapter,
    facebook_adapter,
    jwt_token_adapter,
    email_adapter,
    sms_adapter,
    event_publisher,
):
    """Orchestrator wired to SQLite, a real token adapter and mocked remote services."""
    return get_identity_orchestrator(
        transaction_manager=sql_transaction_manager,
        account_repository=account_repository,
        refresh_token_repository=refresh_token_repository,
        magic_link_code_repository=magic_link_code_repository,
        google_adapter=google_adapter,
        facebook_adapter=facebook_adapter,
        token_adapter=jwt_token_adapter,
        email_adapter=email_adapter,
        sms_adapter=sms_adapter,
        event_publisher=event_publisher,
    )
