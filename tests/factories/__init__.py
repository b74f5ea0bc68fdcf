from __future__ import annotations

"""Re-export factory functions for generating fake test data."""

# flake8: noqa: F401 – re-export
from .identity import (
    create_fake_email,
    create_fake_phone,
    create_fake_provider_profile,
    create_fake_provider_tokens,
    create_fake_related_identity,
)
from .oauth import (
    create_fake_facebook_permissions,
    create_fake_facebook_profile,
    create_fake_google_token,
    create_fake_google_userinfo,
)
