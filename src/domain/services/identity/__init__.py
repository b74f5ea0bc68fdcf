"""Identity domain services: account linking, credential issuance and the
orchestrator that composes them into sign-in operations."""

from .account_linking import LinkAction, LinkResolution, resolve_account
from .credential_issuance import CredentialIssuer
from .identity_orchestrator import IdentityOrchestrator

__all__ = [
    "CredentialIssuer",
    "IdentityOrchestrator",
    "LinkAction",
    "LinkResolution",
    "resolve_account",
]
