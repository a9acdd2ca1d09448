"""Initial platform schema.

Revision ID: 20260101_000001
Revises:
Create Date: 2026-01-01 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '20260101_000001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

MONEY = sa.DECIMAL(18, 8)


def _timestamp(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        nullable=nullable,
        server_default=None if nullable else sa.text('now()'),
    )


def upgrade() -> None:
    """Create users, wallets, ledger, VIP, sessions, referrals and payments."""

    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('full_name', sa.String(255), nullable=True),
        sa.Column('referral_code', sa.String(20), nullable=True),
        sa.Column('telegram_id', sa.BigInteger(), nullable=True),
        sa.Column('referred_by', sa.Integer(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        _timestamp('created_at'),
        _timestamp('updated_at'),
        sa.ForeignKeyConstraint(['referred_by'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('phone'),
        sa.CheckConstraint(
            'referred_by IS NULL OR referred_by <> id',
            name='check_user_not_self_referred',
        ),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_referral_code', 'users', ['referral_code'], unique=True)
    op.create_index('ix_users_telegram_id', 'users', ['telegram_id'], unique=True)
    op.create_index('ix_users_referred_by', 'users', ['referred_by'])

    op.create_table(
        'wallets',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('balance', MONEY, nullable=False, server_default='0'),
        sa.Column('total_deposits', MONEY, nullable=False, server_default='0'),
        sa.Column('total_earnings', MONEY, nullable=False, server_default='0'),
        sa.Column('total_referral_bonus', MONEY, nullable=False, server_default='0'),
        sa.Column('daily_earnings', MONEY, nullable=False, server_default='0'),
        _timestamp('last_withdrawal_at', nullable=True),
        _timestamp('created_at'),
        _timestamp('updated_at'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('balance >= 0', name='check_wallet_balance_non_negative'),
        sa.CheckConstraint(
            'total_deposits >= 0',
            name='check_wallet_total_deposits_non_negative',
        ),
    )
    op.create_index('ix_wallets_user_id', 'wallets', ['user_id'], unique=True)

    op.create_table(
        'transactions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('type', sa.String(32), nullable=False),
        sa.Column('amount', MONEY, nullable=False, comment='Signed: credits positive, debits negative'),
        sa.Column('balance_before', MONEY, nullable=False),
        sa.Column('balance_after', MONEY, nullable=False),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('reference_id', sa.String(64), nullable=True),
        _timestamp('created_at'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_transactions_user_id', 'transactions', ['user_id'])
    op.create_index('ix_transactions_created_at', 'transactions', ['created_at'])
    op.create_index('idx_transactions_user_type', 'transactions', ['user_id', 'type'])
    op.create_index(
        'idx_transactions_type_reference', 'transactions', ['type', 'reference_id']
    )
    op.create_index(
        'uq_transactions_vip_earnings_reference',
        'transactions',
        ['reference_id'],
        unique=True,
        postgresql_where=sa.text("type = 'VIP_EARNINGS'"),
    )

    op.create_table(
        'vip_levels',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('amount', MONEY, nullable=False),
        sa.Column('daily_earning', MONEY, nullable=False),
        sa.Column('bicycle_model', sa.String(255), nullable=True),
        sa.Column('bicycle_color', sa.String(100), nullable=True),
        sa.Column('bicycle_features', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        _timestamp('created_at'),
        _timestamp('updated_at'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
        sa.CheckConstraint('amount > 0', name='check_vip_level_amount_positive'),
        sa.CheckConstraint(
            'daily_earning >= 0',
            name='check_vip_level_daily_earning_non_negative',
        ),
    )

    op.create_table(
        'user_vips',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('vip_level_id', sa.Integer(), nullable=False),
        sa.Column('total_paid', MONEY, nullable=False, server_default='0'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        _timestamp('created_at'),
        _timestamp('updated_at'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['vip_level_id'], ['vip_levels.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_user_vips_user_id', 'user_vips', ['user_id'], unique=True)
    op.create_index('ix_user_vips_vip_level_id', 'user_vips', ['vip_level_id'])

    op.create_table(
        'earnings_sessions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('vip_level_id', sa.Integer(), nullable=False),
        _timestamp('start_time'),
        sa.Column('expected_end_time', sa.DateTime(timezone=True), nullable=False),
        _timestamp('actual_end_time', nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='ACTIVE'),
        sa.Column('daily_earning_rate', MONEY, nullable=False, comment='Rate snapshot taken at start'),
        sa.Column('total_earnings', MONEY, nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['vip_level_id'], ['vip_levels.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_earnings_sessions_user_id', 'earnings_sessions', ['user_id'])
    op.create_index(
        'idx_earnings_sessions_user_status', 'earnings_sessions', ['user_id', 'status']
    )
    op.create_index(
        'idx_earnings_sessions_status_expected_end',
        'earnings_sessions',
        ['status', 'expected_end_time'],
    )
    op.create_index(
        'uq_earnings_sessions_one_active_per_user',
        'earnings_sessions',
        ['user_id'],
        unique=True,
        postgresql_where=sa.text("status = 'ACTIVE'"),
    )

    op.create_table(
        'referral_bonuses',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('referrer_id', sa.Integer(), nullable=False),
        sa.Column('referred_id', sa.Integer(), nullable=False),
        sa.Column('bonus_amount', MONEY, nullable=False),
        sa.Column('bonus_rate', sa.DECIMAL(10, 4), nullable=False),
        sa.Column('level', sa.Integer(), nullable=False),
        sa.Column('deposit_id', sa.Integer(), nullable=True),
        sa.Column('vip_level_id', sa.Integer(), nullable=True),
        sa.Column('transaction_id', sa.Integer(), nullable=True),
        _timestamp('created_at'),
        sa.ForeignKeyConstraint(['referrer_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['transaction_id'], ['transactions.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('level >= 1 AND level <= 3', name='check_referral_bonus_level_range'),
        sa.CheckConstraint('bonus_amount > 0', name='check_referral_bonus_amount_positive'),
    )
    op.create_index('ix_referral_bonuses_referrer_id', 'referral_bonuses', ['referrer_id'])
    op.create_index('ix_referral_bonuses_referred_id', 'referral_bonuses', ['referred_id'])
    op.create_index(
        'idx_referral_bonuses_referrer_level', 'referral_bonuses', ['referrer_id', 'level']
    )

    op.create_table(
        'deposits',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('amount', MONEY, nullable=False),
        sa.Column('currency', sa.String(20), nullable=False, server_default='USDT'),
        sa.Column('network', sa.String(20), nullable=True),
        sa.Column('tx_hash', sa.String(255), nullable=True),
        sa.Column('block_number', sa.BigInteger(), nullable=True),
        sa.Column('sender_address', sa.String(255), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='PENDING'),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        _timestamp('created_at'),
        _timestamp('confirmed_at', nullable=True),
        _timestamp('last_checked_at', nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('tx_hash'),
        sa.CheckConstraint('amount > 0', name='check_deposit_amount_positive'),
    )
    op.create_index('ix_deposits_user_id', 'deposits', ['user_id'])
    op.create_index('ix_deposits_status', 'deposits', ['status'])

    op.create_table(
        'withdrawals',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('amount', MONEY, nullable=False),
        sa.Column('fee_amount', MONEY, nullable=False, server_default='0'),
        sa.Column('currency', sa.String(20), nullable=False),
        sa.Column('network', sa.String(20), nullable=True),
        sa.Column('wallet_address', sa.String(255), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='PENDING'),
        sa.Column('transaction_hash', sa.String(255), nullable=True),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        sa.Column('earnings_deduction', MONEY, nullable=True),
        sa.Column('bonus_deduction', MONEY, nullable=True),
        sa.Column('processed_by', sa.Integer(), nullable=True),
        _timestamp('processed_at', nullable=True),
        _timestamp('created_at'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('amount > 0', name='check_withdrawal_amount_positive'),
        sa.CheckConstraint('fee_amount >= 0', name='check_withdrawal_fee_non_negative'),
    )
    op.create_index('ix_withdrawals_user_id', 'withdrawals', ['user_id'])
    op.create_index('ix_withdrawals_status', 'withdrawals', ['status'])


def downgrade() -> None:
    """Drop the platform schema."""
    op.drop_table('withdrawals')
    op.drop_table('deposits')
    op.drop_table('referral_bonuses')
    op.drop_table('earnings_sessions')
    op.drop_table('user_vips')
    op.drop_table('vip_levels')
    op.drop_table('transactions')
    op.drop_table('wallets')
    op.drop_table('users')
