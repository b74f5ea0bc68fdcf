"""Infrastructure Services.

Concrete implementations of the adapters the identity orchestrator depends on.

Service Categories:
- Authentication: Google/Facebook sign-in, JWT access tokens, token encryption
- Email: Verification code emails (fastapi-mail)
- SMS: Verification code texts (HTTP gateway)
- Events: Domain event publishing
"""

from .authentication import (
    FacebookSignInAdapter,
    GoogleSignInAdapter,
    JwtTokenAdapter,
    ProviderTokenCipher,
)
from .email import VerificationEmailService
from .event_publisher import InMemoryEventPublisher
from .sms import HttpSmsService

__all__ = [
    "FacebookSignInAdapter",
    "GoogleSignInAdapter",
    "HttpSmsService",
    "InMemoryEventPublisher",
    "JwtTokenAdapter",
    "ProviderTokenCipher",
    "VerificationEmailService",
]
