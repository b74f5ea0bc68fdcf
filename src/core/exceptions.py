from __future__ import annotations

"""Centralized, structured exception hierarchy for the identity orchestrator.

Each exception carries a machine-readable `code` for programmatic error handling
and a human-readable `message` for logging and caller feedback. The codes are the
stable failure categories of the orchestrator; underlying causes are chained with
`raise ... from` and logged, never exposed verbatim.

The hierarchy is designed to:
- Provide one specific error per failure site of an orchestrator operation.
- Map cleanly to HTTP status codes in whatever API layer sits on top.
- Offer a consistent structure for logging and monitoring.
"""

from typing import Final

__all__: Final = [
    "IdentityError",
    "ConfigurationError",
    "TransactionStartError",
    "StoreError",
    "StoreReadError",
    "StoreWriteError",
    "AuthenticationError",
    "AccountLinkingError",
    "ProviderError",
    "ProviderExchangeError",
    "ProviderProfileError",
    "InsufficientScopesError",
    "UnverifiedEmailError",
    "NotificationDeliveryError",
    "MagicLinkCodeNotFoundError",
    "RefreshTokenNotFoundError",
    "CredentialIssuanceError",
]


class IdentityError(Exception):
    """Base exception class for all custom errors of the identity orchestrator.

    Attributes:
        message (str): A human-readable error message, suitable for logging.
        code (str): A unique, machine-readable error code for identifying
                    the type of error programmatically.
    """

    message: str
    code: str = "generic_error"

    def __init__(self, message: str, code: str = "generic_error"):
        self.message = message
        self.code = code
        Exception.__init__(self, self.message)

    def __str__(self) -> str:
        return self.message


class ConfigurationError(IdentityError):
    """Raised when an adapter is missing configuration it cannot work without."""

    def __init__(self, message: str, code: str = "configuration_error"):
        super().__init__(message, code)


# ---------------------------------------------------------------------------
# Persistence errors (typically map to 500 Internal Server Error)
# ---------------------------------------------------------------------------


class TransactionStartError(IdentityError):
    """Raised when the unit of work for an operation cannot be opened."""

    def __init__(self, message: str = "Failed to open transaction", code: str = "transaction_start_error"):
        super().__init__(message, code)


class StoreError(IdentityError):
    """Base class for failures reported by a store."""

    def __init__(self, message: str, code: str = "store_error"):
        super().__init__(message, code)


class StoreReadError(StoreError):
    """Raised when a store lookup fails."""

    def __init__(self, message: str, code: str = "store_read_error"):
        super().__init__(message, code)


class StoreWriteError(StoreError):
    """Raised when a store write fails, including unique constraint violations
    caused by concurrent account creation."""

    def __init__(self, message: str, code: str = "store_write_error"):
        super().__init__(message, code)


# ---------------------------------------------------------------------------
# Authentication errors (typically map to 401 Unauthorized / 403 Forbidden)
# ---------------------------------------------------------------------------


class AuthenticationError(IdentityError):
    """Base class for rejected authentication events."""

    def __init__(self, message: str, code: str = "authentication_error"):
        super().__init__(message, code)


class AccountLinkingError(AuthenticationError):
    """Raised when a provider identity cannot be related to exactly one account.

    This is a conservative fallback: an arbitrary candidate is never picked.
    Maps to a `409 Conflict` HTTP status.
    """

    def __init__(self, message: str = "Unable to relate account", code: str = "account_linking_error"):
        super().__init__(message, code)


class ProviderError(AuthenticationError):
    """Base class for failures while talking to an external identity provider."""

    def __init__(self, message: str, code: str = "provider_error"):
        super().__init__(message, code)


class ProviderExchangeError(ProviderError):
    """Raised when the authorization code cannot be exchanged for provider tokens."""

    def __init__(self, message: str = "Failed to exchange authorization code", code: str = "provider_exchange_error"):
        super().__init__(message, code)


class ProviderProfileError(ProviderError):
    """Raised when the provider profile cannot be fetched or parsed."""

    def __init__(self, message: str = "Failed to fetch provider user data", code: str = "provider_profile_error"):
        super().__init__(message, code)


class InsufficientScopesError(ProviderError):
    """Raised when the user did not grant every required scope."""

    def __init__(self, message: str = "Missing required scopes", code: str = "insufficient_scopes"):
        super().__init__(message, code)


class UnverifiedEmailError(ProviderError):
    """Raised when the provider does not vouch for the user's email address."""

    def __init__(self, message: str = "Provider email is not verified", code: str = "unverified_email"):
        super().__init__(message, code)


class MagicLinkCodeNotFoundError(AuthenticationError):
    """Raised when a magic link code is wrong, expired or already consumed."""

    def __init__(self, message: str = "Magic link code doesn't exist", code: str = "magic_link_code_not_found"):
        super().__init__(message, code)


class RefreshTokenNotFoundError(AuthenticationError):
    """Raised when a refresh token does not exist for the given account."""

    def __init__(self, message: str = "Refresh token doesn't exist", code: str = "refresh_token_not_found"):
        super().__init__(message, code)


# ---------------------------------------------------------------------------
# Operational errors (typically map to 502 Bad Gateway / 503 Service Unavailable)
# ---------------------------------------------------------------------------


class NotificationDeliveryError(IdentityError):
    """Raised when a verification code cannot be delivered by email or SMS."""

    def __init__(self, message: str = "Failed to deliver verification code", code: str = "notification_delivery_error"):
        super().__init__(message, code)


class CredentialIssuanceError(IdentityError):
    """Raised when access and refresh tokens cannot both be issued.

    Partial issuance is never returned: the surrounding transaction is rolled
    back and this single generic error is raised instead.
    """

    def __init__(self, message: str = "Failed to generate auth output", code: str = "credential_issuance_error"):
        super().__init__(message, code)
