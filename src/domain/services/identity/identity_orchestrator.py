"""Identity Orchestrator Domain Service.

This service resolves authentication events (a verified email, a verified phone
number or a completed OAuth handshake) to a single internal account and issues
session credentials for it.

Every public operation runs as one atomic unit of work: the transaction is
opened when the operation starts, handed explicitly to every store call, and
committed only when every step succeeded. Any failure rolls the whole unit back
before the error reaches the caller, so an account is never visible without its
identity and a code is never issued for an account that does not exist.

Operations:
- create_from_email / create_from_phone: passwordless sign-in, step one
- exchange_code: passwordless sign-in, step two
- create_from_google_provider / create_from_facebook_provider: OAuth sign-in
- refresh_token: a new access token for a valid refresh token
"""

from contextlib import contextmanager
from typing import Awaitable, Callable, Iterator, List, Optional, Type

from structlog import get_logger

from src.core.exceptions import (
    AuthenticationError,
    CredentialIssuanceError,
    IdentityError,
    InsufficientScopesError,
    MagicLinkCodeNotFoundError,
    NotificationDeliveryError,
    ProviderExchangeError,
    ProviderProfileError,
    RefreshTokenNotFoundError,
    StoreError,
    StoreReadError,
    StoreWriteError,
    UnverifiedEmailError,
)
from src.domain.entities.account import ProviderType
from src.domain.events.identity_events import (
    AccountCreatedEvent,
    BaseDomainEvent,
    CredentialsIssuedEvent,
    SignInIdentityLinkedEvent,
)
from src.domain.interfaces.infrastructure import IEventPublisher, ITransactionManager
from src.domain.interfaces.repositories import (
    IAccountRepository,
    IMagicLinkCodeRepository,
    IRefreshTokenRepository,
)
from src.domain.interfaces.services import (
    IEmailNotificationAdapter,
    ISignInProviderAdapter,
    ISmsNotificationAdapter,
    ITokenAdapter,
)
from src.domain.services.identity.account_linking import LinkAction, resolve_account
from src.domain.services.identity.credential_issuance import CredentialIssuer
from src.domain.value_objects.credentials import AccessGrant, AuthOutput
from src.domain.value_objects.email import Email
from src.domain.value_objects.identity_records import AccountRecord, NewSignInIdentity
from src.domain.value_objects.phone import Phone

logger = get_logger(__name__)

# Categories a step may raise as they are; anything else is mapped to the
# category of the step that failed.
OPERATION_ERRORS = (
    StoreError,
    AuthenticationError,
    NotificationDeliveryError,
    CredentialIssuanceError,
)


class IdentityOrchestrator:
    """Domain service orchestrating account resolution and credential issuance.

    Collaborators are injected through interfaces: the transaction manager and
    the three stores for persistence, one provider adapter per OAuth provider,
    one notification adapter per passwordless channel, the token adapter for
    access tokens, and an optional event publisher for committed outcomes.
    """

    def __init__(
        self,
        transaction_manager: ITransactionManager,
        account_repository: IAccountRepository,
        refresh_token_repository: IRefreshTokenRepository,
        magic_link_code_repository: IMagicLinkCodeRepository,
        google_adapter: ISignInProviderAdapter,
        facebook_adapter: ISignInProviderAdapter,
        token_adapter: ITokenAdapter,
        email_adapter: IEmailNotificationAdapter,
        sms_adapter: ISmsNotificationAdapter,
        event_publisher: Optional[IEventPublisher] = None,
    ):
        self._transactions = transaction_manager
        self._account_repository = account_repository
        self._refresh_token_repository = refresh_token_repository
        self._magic_link_code_repository = magic_link_code_repository
        self._provider_adapters = {
            ProviderType.GOOGLE: google_adapter,
            ProviderType.FACEBOOK: facebook_adapter,
        }
        self._email_adapter = email_adapter
        self._sms_adapter = sms_adapter
        self._event_publisher = event_publisher
        self._credential_issuer = CredentialIssuer(refresh_token_repository, token_adapter)

        logger.info(
            "IdentityOrchestrator initialized",
            service_type="domain_service",
            providers=[provider.value for provider in self._provider_adapters],
        )

    # ------------------------------------------------------------------
    # Passwordless sign-in
    # ------------------------------------------------------------------

    async def create_from_email(self, email: str) -> str:
        """Prepares a passwordless sign-in by email.

        Finds or creates the account holding the email, stores a fresh magic
        link code for it and emails the code. Nothing is committed unless the
        email was handed to the delivery service.

        Args:
            email: Email address the user wants to sign in with.

        Returns:
            str: The account id the code was issued for.

        Raises:
            ValueError: If the email is malformed.
            NotificationDeliveryError: If the code could not be emailed.
        """
        address = Email(email)
        return await self._start_passwordless(
            operation="create_from_email",
            provider_type=ProviderType.EMAIL,
            masked_destination=address.mask_for_logging(),
            lookup=lambda tx: self._account_repository.get_by_email(tx, address.value),
            create=lambda tx: self._account_repository.create(
                tx,
                email=address.value,
                identities=[NewSignInIdentity(ProviderType.EMAIL, address.value)],
            ),
            deliver=lambda code: self._email_adapter.send_verification_code_email(address.value, code),
        )

    async def create_from_phone(self, phone: Phone) -> str:
        """Prepares a passwordless sign-in by SMS.

        Same flow as `create_from_email`, keyed by country code and number.

        Args:
            phone: Phone number the user wants to sign in with.

        Returns:
            str: The account id the code was issued for.

        Raises:
            NotificationDeliveryError: If the code could not be texted.
        """
        return await self._start_passwordless(
            operation="create_from_phone",
            provider_type=ProviderType.PHONE,
            masked_destination=phone.mask_for_logging(),
            lookup=lambda tx: self._account_repository.get_by_phone(tx, phone.country_code, phone.number),
            create=lambda tx: self._account_repository.create(
                tx,
                phone=phone,
                identities=[NewSignInIdentity(ProviderType.PHONE, phone.subject)],
            ),
            deliver=lambda code: self._sms_adapter.send_verification_code_sms(phone.subject, code),
        )

    async def exchange_code(self, account_id: str, code: str) -> AuthOutput:
        """Redeems a magic link code for credentials.

        The code is consumed and the credentials are issued in the same
        transaction: if issuance fails the code stays valid, and once the
        exchange commits the code can never validate again.

        Args:
            account_id: Account the code was issued for.
            code: The code the user received.

        Returns:
            AuthOutput: Access and refresh tokens; `is_first_access` tells
                whether the passwordless request created the account.

        Raises:
            MagicLinkCodeNotFoundError: If the code is wrong, expired or used.
            CredentialIssuanceError: If the tokens could not be issued.
        """
        operation = "exchange_code"
        async with self._transactions.begin(operation) as tx:
            with self._failure_site(operation, "get_magic_link_code", StoreReadError):
                magic_link_code = await self._magic_link_code_repository.get(tx, account_id, code)

            if magic_link_code is None:
                logger.warning("Magic link code not found", account_id=account_id, operation=operation)
                raise MagicLinkCodeNotFoundError()

            output = await self._credential_issuer.issue_session(
                tx, account_id, is_first_access=magic_link_code.is_first_access
            )

        logger.info("Magic link code exchanged", account_id=account_id, is_first_access=output.is_first_access)
        await self._publish([CredentialsIssuedEvent.create(account_id, "magic_link", True)])
        return output

    # ------------------------------------------------------------------
    # External provider sign-in
    # ------------------------------------------------------------------

    async def create_from_google_provider(self, code: str, origin_url: str) -> AuthOutput:
        """Signs in with a Google authorization code.

        Raises:
            ProviderExchangeError, InsufficientScopesError, ProviderProfileError,
            UnverifiedEmailError, AccountLinkingError, CredentialIssuanceError
        """
        return await self._create_from_external(ProviderType.GOOGLE, code, origin_url)

    async def create_from_facebook_provider(self, code: str, origin_url: str) -> AuthOutput:
        """Signs in with a Facebook authorization code.

        Raises:
            ProviderExchangeError, InsufficientScopesError, ProviderProfileError,
            UnverifiedEmailError, AccountLinkingError, CredentialIssuanceError
        """
        return await self._create_from_external(ProviderType.FACEBOOK, code, origin_url)

    # ------------------------------------------------------------------
    # Refresh
    # ------------------------------------------------------------------

    async def refresh_token(self, account_id: str, refresh_token: str) -> AccessGrant:
        """Mints a new access token for a refresh token issued to the account.

        No new refresh token is created and nothing is written.

        Raises:
            RefreshTokenNotFoundError: If the token was not issued to the account.
            CredentialIssuanceError: If the access token could not be minted.
        """
        operation = "refresh_token"
        async with self._transactions.begin(operation) as tx:
            with self._failure_site(operation, "get_refresh_token", StoreReadError):
                record = await self._refresh_token_repository.get(tx, account_id, refresh_token)

            if record is None:
                logger.warning("Refresh token not found", account_id=account_id, operation=operation)
                raise RefreshTokenNotFoundError()

            grant = await self._credential_issuer.issue_access(tx, account_id)

        logger.info("Access token refreshed", account_id=account_id)
        await self._publish([CredentialsIssuedEvent.create(account_id, "refresh", False)])
        return grant

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _start_passwordless(
        self,
        operation: str,
        provider_type: ProviderType,
        masked_destination: str,
        lookup: Callable[..., Awaitable[Optional[AccountRecord]]],
        create: Callable[..., Awaitable[str]],
        deliver: Callable[[str], Awaitable[None]],
    ) -> str:
        async with self._transactions.begin(operation) as tx:
            with self._failure_site(operation, "get_account", StoreReadError):
                existing_account = await lookup(tx)

            if existing_account is None:
                with self._failure_site(operation, "create_account", StoreWriteError):
                    account_id = await create(tx)
                is_first_access = True
            else:
                account_id = existing_account.id
                is_first_access = False

            with self._failure_site(operation, "upsert_magic_link_code", StoreWriteError):
                magic_link_code = await self._magic_link_code_repository.upsert(
                    tx, account_id, is_first_access
                )

            with self._failure_site(operation, "send_verification_code", NotificationDeliveryError):
                await deliver(magic_link_code.code)

        logger.info(
            "Verification code sent",
            operation=operation,
            account_id=account_id,
            destination=masked_destination,
            is_first_access=is_first_access,
        )
        if is_first_access:
            await self._publish([AccountCreatedEvent.create(account_id, provider_type)])
        return account_id

    async def _create_from_external(
        self, provider_type: ProviderType, code: str, origin_url: str
    ) -> AuthOutput:
        operation = f"create_from_{provider_type.value.lower()}_provider"
        adapter = self._provider_adapters[provider_type]
        events: List[BaseDomainEvent] = []

        async with self._transactions.begin(operation) as tx:
            with self._failure_site(operation, "exchange_code", ProviderExchangeError):
                provider_tokens = await adapter.exchange_code(code, origin_url)

            if not adapter.has_required_scopes(provider_tokens.scopes):
                logger.warning(
                    "Provider sign-in rejected - missing scopes",
                    provider_type=provider_type.value,
                    granted_scopes=sorted(provider_tokens.scopes),
                )
                raise InsufficientScopesError()

            with self._failure_site(operation, "get_user_data", ProviderProfileError):
                profile = await adapter.get_user_data(provider_tokens.access_token)

            if not profile.is_email_verified or not profile.email:
                logger.warning(
                    "Provider sign-in rejected - unverified email",
                    provider_type=provider_type.value,
                )
                raise UnverifiedEmailError()

            with self._failure_site(operation, "get_related_identities", StoreReadError):
                related = await self._account_repository.get_many_by_provider(
                    tx, profile.id, provider_type, profile.email
                )

            resolution = resolve_account(provider_type, profile.id, profile.email, related)
            identity = NewSignInIdentity(
                provider_type=provider_type,
                provider_id=profile.id,
                access_token=provider_tokens.access_token,
                refresh_token=provider_tokens.refresh_token,
                expires_at=provider_tokens.expires_at,
            )

            if resolution.action is LinkAction.CREATE_ACCOUNT:
                with self._failure_site(operation, "create_account", StoreWriteError):
                    account_id = await self._account_repository.create(
                        tx, email=profile.email, identities=[identity]
                    )
                events.append(AccountCreatedEvent.create(account_id, provider_type))
            elif resolution.action is LinkAction.LINK_BY_EMAIL:
                account_id = resolution.account_id
                with self._failure_site(operation, "add_identity", StoreWriteError):
                    await self._account_repository.add_identity(tx, account_id, identity)
                events.append(SignInIdentityLinkedEvent.create(account_id, provider_type))
            else:
                account_id = resolution.account_id
                with self._failure_site(operation, "update_identity_tokens", StoreWriteError):
                    await self._account_repository.update_identity_tokens(tx, identity)

            output = await self._credential_issuer.issue_session(
                tx, account_id, is_first_access=resolution.is_first_access
            )

        logger.info(
            "Provider sign-in succeeded",
            provider_type=provider_type.value,
            account_id=account_id,
            resolution=resolution.action.value,
            is_first_access=output.is_first_access,
        )
        events.append(CredentialsIssuedEvent.create(account_id, provider_type.value.lower(), True))
        await self._publish(events)
        return output

    @contextmanager
    def _failure_site(
        self, operation: str, step: str, error_class: Type[IdentityError]
    ) -> Iterator[None]:
        """Maps an unexpected failure of one step to its stable error category.

        Errors that already carry a category pass through untouched.
        """
        try:
            yield
        except OPERATION_ERRORS:
            raise
        except Exception as e:
            logger.error(
                "Identity operation step failed",
                operation=operation,
                step=step,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise error_class(f"{operation} failed at {step}") from e

    async def _publish(self, events: List[BaseDomainEvent]) -> None:
        if self._event_publisher is not None and events:
            await self._event_publisher.publish_many(events)
