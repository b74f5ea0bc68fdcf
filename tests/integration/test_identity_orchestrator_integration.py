"""Orchestrator tests against SQLite with mocked remote services."""

import jwt
import pytest
from sqlalchemy import func, select

from src.core.exceptions import (
    AccountLinkingError,
    CredentialIssuanceError,
    MagicLinkCodeNotFoundError,
    NotificationDeliveryError,
)
from src.domain.entities.account import Account, ProviderType, SignInIdentity
from src.domain.entities.magic_link_code import MagicLinkCode
from src.domain.entities.refresh_token import RefreshToken
from src.domain.events.identity_events import AccountCreatedEvent, SignInIdentityLinkedEvent
from tests.factories import (
    create_fake_email,
    create_fake_phone,
    create_fake_provider_profile,
    create_fake_provider_tokens,
)

pytestmark = pytest.mark.integration


async def _count(session_factory, model):
    async with session_factory() as session:
        return (await session.execute(select(func.count()).select_from(model))).scalar_one()


def _sent_email_code(email_adapter):
    return email_adapter.send_verification_code_email.await_args.args[1]


class TestPasswordlessFlow:
    @pytest.mark.asyncio
    async def test_email_sign_in_creates_account_with_email_identity(
        self, sql_orchestrator, session_factory, email_adapter, jwt_token_adapter
    ):
        email = create_fake_email()

        account_id = await sql_orchestrator.create_from_email(email)
        output = await sql_orchestrator.exchange_code(account_id, _sent_email_code(email_adapter))

        assert output.is_first_access is True
        assert jwt_token_adapter.verify_access(output.access_token)["sub"] == account_id
        async with session_factory() as session:
            identity = (await session.execute(select(SignInIdentity))).scalars().one()
        assert identity.provider_type == ProviderType.EMAIL
        assert identity.provider_id == email
        assert await _count(session_factory, MagicLinkCode) == 0
        assert await _count(session_factory, RefreshToken) == 1

    @pytest.mark.asyncio
    async def test_second_request_reuses_account(self, sql_orchestrator, session_factory, email_adapter):
        email = create_fake_email()

        first = await sql_orchestrator.create_from_email(email)
        second = await sql_orchestrator.create_from_email(email.upper())
        output = await sql_orchestrator.exchange_code(second, _sent_email_code(email_adapter))

        assert first == second
        assert output.is_first_access is False
        assert await _count(session_factory, Account) == 1

    @pytest.mark.asyncio
    async def test_phone_sign_in_texts_the_full_number(
        self, sql_orchestrator, session_factory, sms_adapter
    ):
        phone = create_fake_phone()

        account_id = await sql_orchestrator.create_from_phone(phone)

        to, code = sms_adapter.send_verification_code_sms.await_args.args
        assert to == phone.subject
        output = await sql_orchestrator.exchange_code(account_id, code)
        assert output.is_first_access is True
        async with session_factory() as session:
            account = (await session.execute(select(Account))).scalars().one()
        assert (account.phone_country_code, account.phone_number) == (phone.country_code, phone.number)

    @pytest.mark.asyncio
    async def test_failed_delivery_leaves_no_account(
        self, sql_orchestrator, session_factory, email_adapter
    ):
        email_adapter.send_verification_code_email.side_effect = NotificationDeliveryError()

        with pytest.raises(NotificationDeliveryError):
            await sql_orchestrator.create_from_email(create_fake_email())

        assert await _count(session_factory, Account) == 0
        assert await _count(session_factory, MagicLinkCode) == 0

    @pytest.mark.asyncio
    async def test_failed_issuance_keeps_code_usable(
        self, sql_orchestrator, email_adapter, jwt_token_adapter, mocker
    ):
        account_id = await sql_orchestrator.create_from_email(create_fake_email())
        code = _sent_email_code(email_adapter)
        mocker.patch.object(jwt_token_adapter, "mint_access", side_effect=RuntimeError("signer down"))

        with pytest.raises(CredentialIssuanceError):
            await sql_orchestrator.exchange_code(account_id, code)

        mocker.stopall()
        output = await sql_orchestrator.exchange_code(account_id, code)
        assert output.refresh_token

    @pytest.mark.asyncio
    async def test_code_is_bound_to_its_account(self, sql_orchestrator, email_adapter):
        first = await sql_orchestrator.create_from_email(create_fake_email())
        code = _sent_email_code(email_adapter)
        await sql_orchestrator.create_from_email(create_fake_email())

        with pytest.raises(MagicLinkCodeNotFoundError):
            await sql_orchestrator.exchange_code("unknown-account", code)
        assert (await sql_orchestrator.exchange_code(first, code)).is_first_access is True


class TestProviderFlow:
    @pytest.mark.asyncio
    async def test_google_sign_in_links_to_email_account(
        self, sql_orchestrator, session_factory, google_adapter, email_adapter, event_publisher
    ):
        email = create_fake_email()
        account_id = await sql_orchestrator.create_from_email(email)
        google_adapter.exchange_code.return_value = create_fake_provider_tokens()
        google_adapter.get_user_data.return_value = create_fake_provider_profile(email=email)

        output = await sql_orchestrator.create_from_google_provider("auth-code", "https://app.test/cb")

        assert output.is_first_access is False
        async with session_factory() as session:
            types = (await session.execute(select(SignInIdentity.provider_type))).scalars().all()
        assert sorted(t.value for t in types) == ["EMAIL", "GOOGLE"]
        assert [e.account_id for e in event_publisher.get_published_events(SignInIdentityLinkedEvent)] == [account_id]

    @pytest.mark.asyncio
    async def test_returning_google_user_keeps_account(
        self, sql_orchestrator, session_factory, google_adapter, event_publisher
    ):
        profile = create_fake_provider_profile()
        google_adapter.get_user_data.return_value = profile
        google_adapter.exchange_code.return_value = create_fake_provider_tokens(refresh_token="1//first")

        first = await sql_orchestrator.create_from_google_provider("code-1", "https://app.test/cb")
        google_adapter.exchange_code.return_value = create_fake_provider_tokens()
        second = await sql_orchestrator.create_from_google_provider("code-2", "https://app.test/cb")

        assert first.is_first_access is True
        assert second.is_first_access is False
        assert await _count(session_factory, Account) == 1
        assert len(event_publisher.get_published_events(AccountCreatedEvent)) == 1

    @pytest.mark.asyncio
    async def test_facebook_user_with_email_of_other_facebook_account_is_rejected(
        self, sql_orchestrator, session_factory, facebook_adapter
    ):
        email = create_fake_email()
        facebook_adapter.exchange_code.return_value = create_fake_provider_tokens()
        facebook_adapter.get_user_data.return_value = create_fake_provider_profile(id="fb-1", email=email)
        await sql_orchestrator.create_from_facebook_provider("code-1", "https://app.test/cb")

        facebook_adapter.get_user_data.return_value = create_fake_provider_profile(id="fb-2", email=email)
        with pytest.raises(AccountLinkingError):
            await sql_orchestrator.create_from_facebook_provider("code-2", "https://app.test/cb")

        assert await _count(session_factory, SignInIdentity) == 1
        assert await _count(session_factory, RefreshToken) == 1


class TestRefresh:
    @pytest.mark.asyncio
    async def test_refresh_mints_access_token_without_writes(
        self, sql_orchestrator, session_factory, email_adapter, jwt_token_adapter
    ):
        account_id = await sql_orchestrator.create_from_email(create_fake_email())
        output = await sql_orchestrator.exchange_code(account_id, _sent_email_code(email_adapter))

        grant = await sql_orchestrator.refresh_token(account_id, output.refresh_token)

        claims = jwt.decode(grant.access_token, options={"verify_signature": False})
        assert claims["sub"] == account_id
        assert jwt_token_adapter.verify_access(grant.access_token)["sub"] == account_id
        assert await _count(session_factory, RefreshToken) == 1
