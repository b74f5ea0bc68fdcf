"""Credential issuance within an operation's open transaction.

The refresh token write and the access token mint do not depend on each other,
so they run concurrently and are joined before the caller's transaction is
committed or rolled back. Each keeps its own outcome; the issuance succeeds
only if both did.
"""

import asyncio
from typing import Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from src.core.exceptions import CredentialIssuanceError
from src.domain.interfaces.repositories import IRefreshTokenRepository
from src.domain.interfaces.services import ITokenAdapter
from src.domain.value_objects.credentials import AccessGrant, AuthOutput

logger = get_logger(__name__)


class CredentialIssuer:
    """Issues access and refresh tokens for a resolved account.

    Failures are reported as a single `CredentialIssuanceError`; raising it
    inside the caller's transaction block rolls back the refresh token write,
    so a partially issued pair is never observable.
    """

    def __init__(
        self,
        refresh_token_repository: IRefreshTokenRepository,
        token_adapter: ITokenAdapter,
    ):
        self._refresh_token_repository = refresh_token_repository
        self._token_adapter = token_adapter

    async def issue_session(
        self, tx: AsyncSession, account_id: str, is_first_access: bool = False
    ) -> AuthOutput:
        """Issues an access token and a new refresh token.

        Args:
            tx: The caller's open transaction, used for the refresh token write.
            account_id: Account to issue credentials for.
            is_first_access: Carried through to the output unchanged.

        Returns:
            AuthOutput: Both tokens and the access token expiry.

        Raises:
            CredentialIssuanceError: If either token could not be produced.
        """
        grant, refresh_token = await self._issue(tx, account_id, with_refresh_token=True)
        return AuthOutput(
            access_token=grant.access_token,
            refresh_token=refresh_token,
            expires_at=grant.expires_at,
            is_first_access=is_first_access,
        )

    async def issue_access(self, tx: AsyncSession, account_id: str) -> AccessGrant:
        """Mints an access token only."""
        grant, _ = await self._issue(tx, account_id, with_refresh_token=False)
        return grant

    async def _issue(
        self, tx: AsyncSession, account_id: str, with_refresh_token: bool
    ) -> Tuple[AccessGrant, Optional[str]]:
        mint = self._token_adapter.mint_access(account_id)
        if with_refresh_token:
            grant_result, refresh_result = await asyncio.gather(
                mint,
                self._refresh_token_repository.create(tx, account_id),
                return_exceptions=True,
            )
        else:
            (grant_result,) = await asyncio.gather(mint, return_exceptions=True)
            refresh_result = None

        failures = {
            step: result
            for step, result in (("mint_access", grant_result), ("create_refresh_token", refresh_result))
            if isinstance(result, BaseException)
        }
        if failures:
            for step, error in failures.items():
                logger.error(
                    "Credential issuance step failed",
                    step=step,
                    account_id=account_id,
                    error=str(error),
                    error_type=type(error).__name__,
                )
            raise CredentialIssuanceError() from next(iter(failures.values()))

        if not grant_result.access_token or (with_refresh_token and not refresh_result):
            logger.error("Credential issuance produced an empty token", account_id=account_id)
            raise CredentialIssuanceError()

        logger.debug(
            "Credentials issued",
            account_id=account_id,
            with_refresh_token=with_refresh_token,
        )
        return grant_result, refresh_result
