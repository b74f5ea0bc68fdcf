"""Create identity tables

Revision ID: 0001_create_identity_tables
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '0001_create_identity_tables'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

provider_type = sa.Enum('EMAIL', 'PHONE', 'GOOGLE', 'FACEBOOK', name='provider_type')


def upgrade() -> None:
    """Create accounts, sign_in_identities, refresh_tokens and magic_link_codes."""
    op.create_table(
        'accounts',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('email', sa.String(length=254), nullable=True),
        sa.Column('phone_country_code', sa.String(length=3), nullable=True),
        sa.Column('phone_number', sa.String(length=14), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint('email'),
        sa.UniqueConstraint('phone_country_code', 'phone_number', name='uq_accounts_phone'),
    )

    op.create_table(
        'sign_in_identities',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('account_id', sa.String(length=36), sa.ForeignKey('accounts.id'), nullable=False),
        sa.Column('provider_type', provider_type, nullable=False),
        sa.Column('provider_id', sa.String(length=255), nullable=False),
        sa.Column('access_token', sa.LargeBinary(), nullable=True),
        sa.Column('refresh_token', sa.LargeBinary(), nullable=True),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint('provider_type', 'provider_id', name='uq_sign_in_identities_provider'),
        sa.UniqueConstraint('account_id', 'provider_type', name='uq_sign_in_identities_account_provider'),
    )
    op.create_index('ix_sign_in_identities_account_id', 'sign_in_identities', ['account_id'], unique=False)

    op.create_table(
        'refresh_tokens',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('account_id', sa.String(length=36), sa.ForeignKey('accounts.id'), nullable=False),
        sa.Column('token_hash', sa.String(length=64), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint('token_hash'),
    )
    op.create_index('ix_refresh_tokens_account_id', 'refresh_tokens', ['account_id'], unique=False)

    op.create_table(
        'magic_link_codes',
        sa.Column('account_id', sa.String(length=36), sa.ForeignKey('accounts.id'), primary_key=True),
        sa.Column('code', sa.String(length=12), nullable=False),
        sa.Column('is_first_access', sa.Boolean(), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )


def downgrade() -> None:
    """Drop the identity tables."""
    op.drop_table('magic_link_codes')
    op.drop_index('ix_refresh_tokens_account_id', table_name='refresh_tokens')
    op.drop_table('refresh_tokens')
    op.drop_index('ix_sign_in_identities_account_id', table_name='sign_in_identities')
    op.drop_table('sign_in_identities')
    op.drop_table('accounts')
    provider_type.drop(op.get_bind(), checkfirst=True)
