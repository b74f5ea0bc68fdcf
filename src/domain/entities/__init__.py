"""Export identity domain entities for use across the application.

This module provides a clean interface for importing the Account, SignInIdentity,
RefreshToken and MagicLinkCode table models.
"""

from .account import Account, ProviderType, SignInIdentity
from .magic_link_code import MagicLinkCode
from .refresh_token import RefreshToken

__all__ = ["Account", "ProviderType", "SignInIdentity", "RefreshToken", "MagicLinkCode"]
