"""Composition root for the identity orchestrator.

This module wires concrete infrastructure (database session factory,
repositories, provider adapters, notification adapters, token adapter and
event publisher) into an `IdentityOrchestrator`. Each factory can be replaced
independently, which is how the test suites plug in SQLite and mocks.
"""

from typing import Optional

from sqlalchemy.orm import sessionmaker

from src.domain.interfaces import (
    IAccountRepository,
    IEmailNotificationAdapter,
    IEventPublisher,
    IMagicLinkCodeRepository,
    IRefreshTokenRepository,
    ISignInProviderAdapter,
    ISmsNotificationAdapter,
    ITokenAdapter,
    ITransactionManager,
)
from src.domain.services.identity import IdentityOrchestrator
from src.infrastructure.database.unit_of_work import SQLAlchemyTransactionManager
from src.infrastructure.repositories import (
    AccountRepository,
    MagicLinkCodeRepository,
    RefreshTokenRepository,
)
from src.infrastructure.services import (
    FacebookSignInAdapter,
    GoogleSignInAdapter,
    HttpSmsService,
    InMemoryEventPublisher,
    JwtTokenAdapter,
    VerificationEmailService,
)

# ---------------------------------------------------------------------------
# Infrastructure Layer Dependencies
# ---------------------------------------------------------------------------


def get_transaction_manager(
    session_factory: Optional[sessionmaker] = None,
) -> ITransactionManager:
    """Factory that returns the unit of work implementation.

    Args:
        session_factory: Session factory to open transactions with. Defaults
            to the application's PostgreSQL session factory.
    """
    return SQLAlchemyTransactionManager(session_factory)


def get_account_repository() -> IAccountRepository:
    return AccountRepository()


def get_refresh_token_repository() -> IRefreshTokenRepository:
    return RefreshTokenRepository()


def get_magic_link_code_repository() -> IMagicLinkCodeRepository:
    return MagicLinkCodeRepository()


def get_google_adapter() -> ISignInProviderAdapter:
    return GoogleSignInAdapter()


def get_facebook_adapter() -> ISignInProviderAdapter:
    return FacebookSignInAdapter()


def get_token_adapter() -> ITokenAdapter:
    return JwtTokenAdapter()


def get_email_adapter() -> IEmailNotificationAdapter:
    return VerificationEmailService()


def get_sms_adapter() -> ISmsNotificationAdapter:
    return HttpSmsService()


def get_event_publisher() -> IEventPublisher:
    """Factory that returns event publisher implementation.

    Note:
        Events are only published after commit. A durable publisher (message
        broker, outbox table) can replace the in-memory one here.
    """
    return InMemoryEventPublisher()


# ---------------------------------------------------------------------------
# Domain Service Dependencies
# ---------------------------------------------------------------------------


def get_identity_orchestrator(
    session_factory: Optional[sessionmaker] = None,
    transaction_manager: Optional[ITransactionManager] = None,
    account_repository: Optional[IAccountRepository] = None,
    refresh_token_repository: Optional[IRefreshTokenRepository] = None,
    magic_link_code_repository: Optional[IMagicLinkCodeRepository] = None,
    google_adapter: Optional[ISignInProviderAdapter] = None,
    facebook_adapter: Optional[ISignInProviderAdapter] = None,
    token_adapter: Optional[ITokenAdapter] = None,
    email_adapter: Optional[IEmailNotificationAdapter] = None,
    sms_adapter: Optional[ISmsNotificationAdapter] = None,
    event_publisher: Optional[IEventPublisher] = None,
) -> IdentityOrchestrator:
    """Builds a fully wired IdentityOrchestrator.

    Any collaborator that is not given is built from settings by its factory.

    Returns:
        IdentityOrchestrator: Ready-to-use orchestrator
    """
    return IdentityOrchestrator(
        transaction_manager=transaction_manager or get_transaction_manager(session_factory),
        account_repository=account_repository or get_account_repository(),
        refresh_token_repository=refresh_token_repository or get_refresh_token_repository(),
        magic_link_code_repository=magic_link_code_repository or get_magic_link_code_repository(),
        google_adapter=google_adapter or get_google_adapter(),
        facebook_adapter=facebook_adapter or get_facebook_adapter(),
        token_adapter=token_adapter or get_token_adapter(),
        email_adapter=email_adapter or get_email_adapter(),
        sms_adapter=sms_adapter or get_sms_adapter(),
        event_publisher=event_publisher or get_event_publisher(),
    )
