"""Tests for the JWT access token adapter."""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from src.core.exceptions import AuthenticationError, ConfigurationError
from src.infrastructure.services.authentication.jwt_token_service import JwtTokenAdapter


class TestJwtTokenAdapter:
    @pytest.mark.asyncio
    async def test_mint_access_signs_expected_claims(self, jwt_token_adapter, rsa_key_pair):
        _, public_pem = rsa_key_pair

        grant = await jwt_token_adapter.mint_access("acc-1")

        claims = jwt.decode(
            grant.access_token,
            public_pem,
            algorithms=["RS256"],
            audience="identity:test",
            issuer="https://identity.test",
        )
        assert claims["sub"] == "acc-1"
        assert claims["jti"]
        assert claims["exp"] == int(grant.expires_at.timestamp())
        assert grant.expires_at - datetime.now(timezone.utc) <= timedelta(minutes=15)

    @pytest.mark.asyncio
    async def test_each_token_has_its_own_jti(self, jwt_token_adapter):
        first = await jwt_token_adapter.mint_access("acc-1")
        second = await jwt_token_adapter.mint_access("acc-1")

        assert jwt_token_adapter.verify_access(first.access_token)["jti"] != (
            jwt_token_adapter.verify_access(second.access_token)["jti"]
        )

    @pytest.mark.asyncio
    async def test_missing_private_key_is_a_configuration_error(self, rsa_key_pair, mocker):
        adapter = JwtTokenAdapter(private_key="placeholder", public_key=rsa_key_pair[1])
        mocker.patch.object(adapter, "private_key", "")

        with pytest.raises(ConfigurationError):
            await adapter.mint_access("acc-1")

    def test_verify_rejects_tampered_token(self, jwt_token_adapter):
        with pytest.raises(AuthenticationError) as exc_info:
            jwt_token_adapter.verify_access("not.a.jwt")

        assert exc_info.value.code == "invalid_access_token"

    @pytest.mark.asyncio
    async def test_verify_rejects_other_audience(self, rsa_key_pair):
        private_pem, public_pem = rsa_key_pair
        minting = JwtTokenAdapter(private_key=private_pem, public_key=public_pem, audience="someone-else")
        verifying = JwtTokenAdapter(private_key=private_pem, public_key=public_pem, audience="identity:test")
        grant = await minting.mint_access("acc-1")

        with pytest.raises(AuthenticationError):
            verifying.verify_access(grant.access_token)
