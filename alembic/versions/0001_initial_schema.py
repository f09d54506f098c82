"""
Initial schema: identity, outbox, ledger, assignments

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-01-12 09:00:00
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('(CURRENT_TIMESTAMP)')),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('(CURRENT_TIMESTAMP)')),
    ]


def _owned(table: str, *columns: sa.Column, **kw) -> None:
    """Create a user-owned, soft-deletable table with a public id."""
    op.create_table(
        table,
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('public_id', sa.String(length=32), nullable=False, unique=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('user.id', ondelete='CASCADE'), nullable=False),
        *columns,
        *_timestamps(),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        **kw,
    )
    op.create_index(f'ix_{table}_user_id', table, ['user_id'])


def upgrade() -> None:
    op.create_table(
        'user',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('public_id', sa.String(length=32), nullable=False, unique=True),
        *_timestamps(),
    )

    op.create_table(
        'user_email',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('user.id', ondelete='CASCADE'), nullable=False),
        sa.Column('email', sa.String(length=320), nullable=False, unique=True),
        sa.Column('verified_at', sa.DateTime(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_user_email_user_id', 'user_email', ['user_id'])

    op.create_table(
        'auth_method',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('user.id', ondelete='CASCADE'), nullable=False),
        sa.Column('method_type', sa.String(length=32), nullable=False),
        sa.Column('label', sa.String(length=320), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("method_type IN ('magic_link_email', 'passkey')", name='ck_auth_method_type'),
    )
    op.create_index('ix_auth_method_user_id', 'auth_method', ['user_id'])

    op.create_table(
        'user_session',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('user.id', ondelete='CASCADE'), nullable=False),
        sa.Column('token_hash', sa.String(length=64), nullable=False, unique=True),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('revoked_at', sa.DateTime(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_user_session_user_id', 'user_session', ['user_id'])

    op.create_table(
        'magic_link_token',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('email', sa.String(length=320), nullable=False),
        sa.Column('token_hash', sa.String(length=64), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('consumed_at', sa.DateTime(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_magic_link_token_email', 'magic_link_token', ['email'])
    op.create_index('ix_magic_link_token_token_hash', 'magic_link_token', ['token_hash'])

    op.create_table(
        'email_outbox',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('to_email', sa.String(length=320), nullable=False),
        sa.Column('subject', sa.String(length=200), nullable=False),
        sa.Column('body', sa.Text(), nullable=False),
        sa.Column('sent_at', sa.DateTime(), nullable=True),
        sa.Column('last_error', sa.Text(), nullable=True),
        *_timestamps(),
    )

    _owned(
        'budget',
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('currency_code', sa.String(length=3), nullable=False, server_default='USD'),
        sa.Column('is_default', sa.Boolean(), nullable=False, server_default=sa.text('0')),
    )
    _owned(
        'account',
        sa.Column('budget_id', sa.Integer(), sa.ForeignKey('budget.id'), nullable=False, index=True),
        sa.Column('name', sa.String(length=120), nullable=False),
    )
    _owned(
        'supercategory',
        sa.Column('budget_id', sa.Integer(), sa.ForeignKey('budget.id'), nullable=False, index=True),
        sa.Column('name', sa.String(length=120), nullable=False),
    )
    _owned(
        'category',
        sa.Column('budget_id', sa.Integer(), sa.ForeignKey('budget.id'), nullable=False, index=True),
        sa.Column('supercategory_id', sa.Integer(), sa.ForeignKey('supercategory.id'), nullable=False, index=True),
        sa.Column('name', sa.String(length=120), nullable=False),
    )
    _owned(
        'transaction',
        sa.Column('budget_id', sa.Integer(), sa.ForeignKey('budget.id'), nullable=False, index=True),
        sa.Column('account_id', sa.Integer(), sa.ForeignKey('account.id'), nullable=False, index=True),
        sa.Column('tx_date', sa.Date(), nullable=False),
        sa.Column('payee', sa.String(length=200), nullable=True),
        sa.Column('memo', sa.Text(), nullable=True),
    )
    op.create_index('ix_transaction_user_date', 'transaction', ['user_id', 'tx_date'])
    _owned(
        'transaction_split',
        sa.Column('transaction_id', sa.Integer(), sa.ForeignKey('transaction.id'), nullable=False, index=True),
        sa.Column('category_id', sa.Integer(), sa.ForeignKey('category.id'), nullable=False, index=True),
        sa.Column('memo', sa.Text(), nullable=True),
        sa.Column('inflow', sa.BigInteger(), nullable=False, server_default=sa.text('0')),
        sa.Column('outflow', sa.BigInteger(), nullable=False, server_default=sa.text('0')),
        sa.CheckConstraint('inflow >= 0 AND outflow >= 0', name='ck_split_non_negative'),
        sa.CheckConstraint('(inflow > 0) != (outflow > 0)', name='ck_split_one_side'),
    )
    _owned(
        'category_assignment',
        sa.Column('budget_id', sa.Integer(), sa.ForeignKey('budget.id'), nullable=False, index=True),
        sa.Column('category_id', sa.Integer(), sa.ForeignKey('category.id'), nullable=False),
        sa.Column('month', sa.Date(), nullable=False),
        sa.Column('amount', sa.BigInteger(), nullable=False),
    )
    op.create_index('ix_category_assignment_category_month', 'category_assignment', ['category_id', 'month'])


def downgrade() -> None:
    for table in (
        'category_assignment',
        'transaction_split',
        'transaction',
        'category',
        'supercategory',
        'account',
        'budget',
        'email_outbox',
        'magic_link_token',
        'user_session',
        'auth_method',
        'user_email',
        'user',
    ):
        op.drop_table(table)
