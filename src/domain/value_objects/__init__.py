"""Domain Value Objects for the identity domain.

Value objects are immutable objects that describe domain concepts by their attributes
rather than their identity. They are essential building blocks in Domain-Driven Design.
"""

from .credentials import AccessGrant, AuthOutput
from .email import Email
from .identity_records import (
    AccountRecord,
    MagicLinkCodeRecord,
    NewSignInIdentity,
    RefreshTokenRecord,
    RelatedIdentity,
)
from .phone import Phone
from .provider_data import ProviderProfile, ProviderTokens

__all__ = [
    "AccessGrant",
    "AuthOutput",
    "AccountRecord",
    "Email",
    "MagicLinkCodeRecord",
    "NewSignInIdentity",
    "Phone",
    "ProviderProfile",
    "ProviderTokens",
    "RefreshTokenRecord",
    "RelatedIdentity",
]
