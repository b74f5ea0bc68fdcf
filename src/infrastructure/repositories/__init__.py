"""Repository implementations for the infrastructure layer."""

from .account_repository import AccountRepository
from .magic_link_code_repository import MagicLinkCodeRepository
from .refresh_token_repository import RefreshTokenRepository

__all__ = ["AccountRepository", "MagicLinkCodeRepository", "RefreshTokenRepository"]
