from datetime import datetime, timezone

from sqlalchemy import DateTime, String
from sqlmodel import Column, Field, SQLModel


class MagicLinkCode(SQLModel, table=True):
    """A single-use passwordless verification code.

    There is at most one live code per account: every passwordless request
    overwrites it, and a successful exchange deletes it.

    Attributes:
        account_id: Account the code signs in to (primary key).
        code: Numeric verification code.
        is_first_access: Whether the passwordless request that produced the code
            created the account.
        expires_at: After this instant the code no longer validates.
        created_at: When the current code was generated.
    """

    __tablename__ = "magic_link_codes"

    account_id: str = Field(foreign_key="accounts.id", primary_key=True, max_length=36)
    code: str = Field(sa_column=Column(String(12), nullable=False))
    is_first_access: bool = Field(default=False, nullable=False)
    expires_at: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False))
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )

    __table_args__ = ({"extend_existing": True},)
