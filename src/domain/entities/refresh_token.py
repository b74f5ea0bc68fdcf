from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, String
from sqlmodel import Column, Field, Index, SQLModel


class RefreshToken(SQLModel, table=True):
    """A long-lived session credential.

    Only the SHA-256 digest of the opaque token is persisted, so a leaked table
    does not leak usable tokens. Rows are created at sign-in and read on refresh;
    they are never mutated.

    Attributes:
        id: Surrogate primary key.
        account_id: Account the token was issued to.
        token_hash: Hex SHA-256 digest of the token value.
        created_at: Issuance time.
    """

    __tablename__ = "refresh_tokens"

    id: Optional[int] = Field(default=None, primary_key=True)
    account_id: str = Field(foreign_key="accounts.id", nullable=False, max_length=36)
    token_hash: str = Field(sa_column=Column(String(64), nullable=False, unique=True))
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )

    __table_args__ = (
        Index("ix_refresh_tokens_account_id", "account_id"),
        {"extend_existing": True},
    )
