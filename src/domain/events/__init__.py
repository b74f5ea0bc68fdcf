"""Domain events published by the identity orchestrator."""

from .identity_events import (
    AccountCreatedEvent,
    BaseDomainEvent,
    CredentialsIssuedEvent,
    SignInIdentityLinkedEvent,
)

__all__ = [
    "AccountCreatedEvent",
    "BaseDomainEvent",
    "CredentialsIssuedEvent",
    "SignInIdentityLinkedEvent",
]
