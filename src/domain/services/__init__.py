"""Domain Services for the Identity Bounded Context.

All services use dependency injection through interfaces for loose coupling
and testability.

Identity Domain Services:
- Identity Orchestrator: Passwordless and OAuth sign-in, code exchange, refresh
- Account Linking: Rules relating provider identities to accounts
- Credential Issuance: Access and refresh token issuance inside a transaction
"""

from .identity import CredentialIssuer, IdentityOrchestrator, LinkAction, LinkResolution, resolve_account

__all__ = [
    "IdentityOrchestrator",
    "CredentialIssuer",
    "LinkAction",
    "LinkResolution",
    "resolve_account",
]
