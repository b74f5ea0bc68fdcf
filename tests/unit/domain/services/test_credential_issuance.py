"""Tests for CredentialIssuer."""

import asyncio
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.core.exceptions import CredentialIssuanceError
from src.domain.services.identity.credential_issuance import CredentialIssuer
from src.domain.value_objects.credentials import AccessGrant

EXPIRES_AT = datetime(2030, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def mock_refresh_token_repository():
    return AsyncMock()


@pytest.fixture
def mock_token_adapter():
    mock = MagicMock()
    mock.mint_access = AsyncMock(return_value=AccessGrant(access_token="jwt", expires_at=EXPIRES_AT))
    return mock


@pytest.fixture
def issuer(mock_refresh_token_repository, mock_token_adapter):
    return CredentialIssuer(mock_refresh_token_repository, mock_token_adapter)


class TestCredentialIssuer:
    @pytest.mark.asyncio
    async def test_issue_session_returns_both_tokens(self, issuer, mock_refresh_token_repository, mock_token_adapter):
        tx = MagicMock(name="tx")
        mock_refresh_token_repository.create.return_value = "refresh-value"

        output = await issuer.issue_session(tx, "acc-1", is_first_access=True)

        assert output.access_token == "jwt"
        assert output.refresh_token == "refresh-value"
        assert output.expires_at == EXPIRES_AT
        assert output.is_first_access is True
        mock_token_adapter.mint_access.assert_awaited_once_with("acc-1")
        mock_refresh_token_repository.create.assert_awaited_once_with(tx, "acc-1")

    @pytest.mark.asyncio
    async def test_mint_and_refresh_write_run_concurrently(self, mock_refresh_token_repository, mock_token_adapter):
        both_started = asyncio.Event()
        started = []

        async def mint(account_id):
            started.append("mint")
            if len(started) == 2:
                both_started.set()
            await asyncio.wait_for(both_started.wait(), timeout=1)
            return AccessGrant(access_token="jwt", expires_at=EXPIRES_AT)

        async def create(tx, account_id):
            started.append("refresh")
            if len(started) == 2:
                both_started.set()
            await asyncio.wait_for(both_started.wait(), timeout=1)
            return "refresh-value"

        mock_token_adapter.mint_access.side_effect = mint
        mock_refresh_token_repository.create.side_effect = create
        issuer = CredentialIssuer(mock_refresh_token_repository, mock_token_adapter)

        output = await issuer.issue_session(MagicMock(), "acc-1")

        assert sorted(started) == ["mint", "refresh"]
        assert output.refresh_token == "refresh-value"

    @pytest.mark.asyncio
    async def test_mint_failure_fails_the_whole_issuance(self, issuer, mock_refresh_token_repository, mock_token_adapter):
        mock_token_adapter.mint_access.side_effect = RuntimeError("signer down")
        mock_refresh_token_repository.create.return_value = "refresh-value"

        with pytest.raises(CredentialIssuanceError) as exc_info:
            await issuer.issue_session(MagicMock(), "acc-1")

        assert exc_info.value.message == "Failed to generate auth output"
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    @pytest.mark.asyncio
    async def test_refresh_write_failure_fails_the_whole_issuance(self, issuer, mock_refresh_token_repository):
        mock_refresh_token_repository.create.side_effect = RuntimeError("disk full")

        with pytest.raises(CredentialIssuanceError):
            await issuer.issue_session(MagicMock(), "acc-1")

    @pytest.mark.asyncio
    async def test_both_failures_are_reported_as_one_error(self, issuer, mock_refresh_token_repository, mock_token_adapter):
        mock_token_adapter.mint_access.side_effect = RuntimeError("signer down")
        mock_refresh_token_repository.create.side_effect = RuntimeError("disk full")

        with pytest.raises(CredentialIssuanceError):
            await issuer.issue_session(MagicMock(), "acc-1")

    @pytest.mark.asyncio
    async def test_empty_refresh_token_is_rejected(self, issuer, mock_refresh_token_repository):
        mock_refresh_token_repository.create.return_value = ""

        with pytest.raises(CredentialIssuanceError):
            await issuer.issue_session(MagicMock(), "acc-1")

    @pytest.mark.asyncio
    async def test_issue_access_does_not_create_refresh_token(self, issuer, mock_refresh_token_repository):
        grant = await issuer.issue_access(MagicMock(), "acc-1")

        assert grant.access_token == "jwt"
        mock_refresh_token_repository.create.assert_not_awaited()
