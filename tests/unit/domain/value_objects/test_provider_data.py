"""Tests for provider token and profile value objects and credential outputs."""

from datetime import datetime, timezone

import pytest

from src.domain.value_objects.credentials import AccessGrant, AuthOutput
from src.domain.value_objects.provider_data import ProviderProfile, ProviderTokens

EXPIRES_AT = datetime(2030, 1, 1, tzinfo=timezone.utc)


class TestProviderTokens:
    def test_scopes_are_frozen(self):
        tokens = ProviderTokens(access_token="at", expires_at=EXPIRES_AT, scopes=["email", "openid"])
        assert tokens.scopes == frozenset({"email", "openid"})

    def test_requires_access_token(self):
        with pytest.raises(ValueError):
            ProviderTokens(access_token="", expires_at=EXPIRES_AT)

    def test_repr_hides_tokens(self):
        tokens = ProviderTokens(access_token="secret-access", expires_at=EXPIRES_AT, refresh_token="secret-refresh")
        assert "secret" not in repr(tokens)


class TestProviderProfile:
    def test_email_is_normalized(self):
        profile = ProviderProfile(id="123", email=" Person@Example.COM", is_email_verified=True)
        assert profile.email == "person@example.com"

    def test_missing_email_becomes_empty(self):
        profile = ProviderProfile(id="123", email=None, is_email_verified=False)
        assert profile.email == ""

    def test_requires_subject(self):
        with pytest.raises(ValueError):
            ProviderProfile(id="", email="a@example.com", is_email_verified=True)


class TestCredentials:
    def test_auth_output_defaults_to_returning_user(self):
        output = AuthOutput(access_token="a", refresh_token="r", expires_at=EXPIRES_AT)
        assert output.is_first_access is False

    def test_reprs_hide_tokens(self):
        output = AuthOutput(access_token="jwt-value", refresh_token="refresh-value", expires_at=EXPIRES_AT)
        grant = AccessGrant(access_token="jwt-value", expires_at=EXPIRES_AT)
        assert "jwt-value" not in repr(output)
        assert "refresh-value" not in repr(output)
        assert "jwt-value" not in repr(grant)
