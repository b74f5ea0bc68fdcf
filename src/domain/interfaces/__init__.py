"""Domain Interfaces for dependency inversion.

These interfaces define contracts that infrastructure layers must implement,
ensuring clean separation between the identity orchestrator and the storage
engine, the OAuth providers, the notification channels and the token signer.
"""

from .infrastructure import IEventPublisher, ITransactionManager
from .repositories import IAccountRepository, IMagicLinkCodeRepository, IRefreshTokenRepository
from .services import (
    IEmailNotificationAdapter,
    ISignInProviderAdapter,
    ISmsNotificationAdapter,
    ITokenAdapter,
)

__all__ = [
    "IAccountRepository",
    "IEmailNotificationAdapter",
    "IEventPublisher",
    "IMagicLinkCodeRepository",
    "IRefreshTokenRepository",
    "ISignInProviderAdapter",
    "ISmsNotificationAdapter",
    "ITokenAdapter",
    "ITransactionManager",
]
