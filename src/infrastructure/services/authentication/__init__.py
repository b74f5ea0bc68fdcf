"""Infrastructure Authentication Services.

Concrete implementations of the sign-in and credential adapters:

- Google and Facebook sign-in providers (authlib over httpx)
- JWT access token minting (PyJWT)
- Provider token encryption at rest (Fernet)
"""

from .facebook import FacebookSignInAdapter
from .google import GoogleSignInAdapter
from .jwt_token_service import JwtTokenAdapter
from .token_encryption import ProviderTokenCipher

__all__ = [
    "FacebookSignInAdapter",
    "GoogleSignInAdapter",
    "JwtTokenAdapter",
    "ProviderTokenCipher",
]
