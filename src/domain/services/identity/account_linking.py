"""Account linking rules for external sign-in identities.

Decides whether a provider identity belongs to an existing account, should be
attached to the account that holds its verified email, or needs a brand new
account. The rules, in order of precedence:

1. No related identity at all: create a new account.
2. An identity with the same (provider type, provider id) exists: it is the same
   user, even if the email stored for the account no longer matches (the user
   may have changed it at the provider or with us).
3. An identity of a *different* provider type belongs to the account holding
   this email, and that account has no identity of this provider type yet:
   attach the new identity to that account.
4. Anything else is ambiguous and is rejected rather than guessed.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from structlog import get_logger

from src.core.exceptions import AccountLinkingError
from src.domain.entities.account import ProviderType
from src.domain.value_objects.identity_records import RelatedIdentity

logger = get_logger(__name__)


class LinkAction(str, Enum):
    CREATE_ACCOUNT = "create_account"
    SAME_PROVIDER = "same_provider"
    LINK_BY_EMAIL = "link_by_email"


@dataclass(frozen=True)
class LinkResolution:
    """Outcome of account linking.

    Attributes:
        action: What the caller must do with the incoming identity.
        account_id: The resolved account, `None` when a new one must be created.
    """

    action: LinkAction
    account_id: Optional[str] = None

    @property
    def is_first_access(self) -> bool:
        return self.action is LinkAction.CREATE_ACCOUNT


def resolve_account(
    provider_type: ProviderType,
    provider_id: str,
    email: str,
    candidates: Iterable[RelatedIdentity],
) -> LinkResolution:
    """Resolves an incoming provider identity against related identities.

    The scan keeps the first same-email match of another provider type and
    stops at the first same-provider match, which decides the outcome on its
    own. Candidate order is not significant otherwise.

    Args:
        provider_type: Provider the user just signed in with.
        provider_id: Subject id assigned by that provider.
        email: Provider-verified email, lower-cased.
        candidates: Identities sharing the subject id or the email.

    Returns:
        LinkResolution: The action to take and the resolved account id.

    Raises:
        AccountLinkingError: If no rule relates the identity to an account.
    """
    candidates = list(candidates)
    if not candidates:
        return LinkResolution(action=LinkAction.CREATE_ACCOUNT)

    same_provider: Optional[RelatedIdentity] = None
    same_email: Optional[RelatedIdentity] = None
    email_has_provider_type = False

    for candidate in candidates:
        if candidate.provider_type == provider_type and candidate.provider_id == provider_id:
            same_provider = candidate
            break
        if candidate.email and candidate.email == email:
            if candidate.provider_type == provider_type:
                email_has_provider_type = True
            elif same_email is None:
                same_email = candidate

    if same_provider is not None:
        return LinkResolution(action=LinkAction.SAME_PROVIDER, account_id=same_provider.account_id)

    if same_email is not None and not email_has_provider_type:
        return LinkResolution(action=LinkAction.LINK_BY_EMAIL, account_id=same_email.account_id)

    logger.warning(
        "Unable to relate provider identity to an account",
        provider_type=provider_type.value,
        candidates=len(candidates),
        email_has_provider_type=email_has_provider_type,
    )
    raise AccountLinkingError()
