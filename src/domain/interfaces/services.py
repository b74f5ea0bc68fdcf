"""Adapter interfaces consumed by the identity orchestrator.

These interfaces define contracts for the external collaborators: sign-in
providers, verification code delivery and access token minting.
"""

from abc import ABC, abstractmethod
from typing import Iterable

from src.domain.value_objects.credentials import AccessGrant
from src.domain.value_objects.provider_data import ProviderProfile, ProviderTokens


class ISignInProviderAdapter(ABC):
    """Interface for an external OAuth identity provider."""

    @abstractmethod
    async def exchange_code(self, code: str, origin_url: str) -> ProviderTokens:
        """Exchanges an authorization code for provider tokens.

        Args:
            code: Authorization code returned to the client by the provider.
            origin_url: Redirect URI the code was issued for.

        Raises:
            ProviderExchangeError: If the provider rejects the exchange.
        """
        pass

    @abstractmethod
    def has_required_scopes(self, scopes: Iterable[str]) -> bool:
        """Checks that every scope the application needs was granted."""
        pass

    @abstractmethod
    async def get_user_data(self, access_token: str) -> ProviderProfile:
        """Fetches the user's provider profile.

        Raises:
            ProviderProfileError: If the profile cannot be fetched.
        """
        pass


class IEmailNotificationAdapter(ABC):
    """Interface for verification code delivery by email."""

    @abstractmethod
    async def send_verification_code_email(self, to: str, code: str) -> None:
        """Sends a verification code to an email address.

        Raises:
            NotificationDeliveryError: If the email could not be delivered.
        """
        pass


class ISmsNotificationAdapter(ABC):
    """Interface for verification code delivery by SMS."""

    @abstractmethod
    async def send_verification_code_sms(self, to: str, code: str) -> None:
        """Sends a verification code to a phone number.

        Args:
            to: Country code followed by the national number, digits only.
            code: The verification code.

        Raises:
            NotificationDeliveryError: If the SMS could not be delivered.
        """
        pass


class ITokenAdapter(ABC):
    """Interface for access token minting."""

    @abstractmethod
    async def mint_access(self, account_id: str) -> AccessGrant:
        """Mints a signed access token for an account."""
        pass
