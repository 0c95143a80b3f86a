"""create users, categories, transactions, budgets, debts and goals tables

Revision ID: 3c1f9a2b7d40
Revises: 
Create Date: 2026-10-17 13:30:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3c1f9a2b7d40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


category_type = sa.Enum('INCOME', 'EXPENSE', name='categorytype')
transaction_type = sa.Enum('INCOME', 'EXPENSE', name='transactiontype')
debt_type = sa.Enum('OWE', 'LEND', name='debttype')
debt_status = sa.Enum('ACTIVE', 'PAID_OFF', 'OVERDUE', name='debtstatus')


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('db_id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('username', sa.String(100), nullable=False),
        sa.Column('created_at', sa.DateTime, nullable=True),
        sa.UniqueConstraint('email', name='uq_user_email'),
        sa.UniqueConstraint('username', name='uq_user_username'),
    )
    op.create_index('idx_users_email', 'users', ['email'])

    op.create_table(
        'categories',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.db_id'), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('color', sa.String(7), nullable=True),
        sa.Column('icon', sa.String(50), nullable=True),
        sa.Column('category_type', category_type, nullable=False),
        sa.Column('created_at', sa.DateTime, nullable=True),
        sa.UniqueConstraint('user_id', 'name', name='uq_user_category_name'),
    )
    op.create_index('idx_categories_user', 'categories', ['user_id'])

    op.create_table(
        'transactions',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.db_id'), nullable=False),
        sa.Column('category_id', sa.Integer, sa.ForeignKey('categories.id'), nullable=True),
        sa.Column('amount', sa.DECIMAL(15, 2), nullable=False),
        sa.Column('description', sa.String(500), nullable=False),
        sa.Column('transaction_date', sa.Date, nullable=False),
        sa.Column('transaction_type', transaction_type, nullable=False),
        sa.Column('created_at', sa.DateTime, nullable=True),
        sa.Column('updated_at', sa.DateTime, nullable=True),
    )
    op.create_index('idx_transactions_user_date', 'transactions', ['user_id', 'transaction_date'])
    op.create_index('idx_transactions_user_category', 'transactions', ['user_id', 'category_id'])
    op.create_index('idx_transactions_user_type', 'transactions', ['user_id', 'transaction_type'])

    op.create_table(
        'budgets',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.db_id'), nullable=False),
        sa.Column('category_id', sa.Integer, sa.ForeignKey('categories.id'), nullable=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('amount', sa.DECIMAL(15, 2), nullable=False),
        sa.Column('start_date', sa.Date, nullable=False),
        sa.Column('end_date', sa.Date, nullable=False),
        sa.Column('created_at', sa.DateTime, nullable=True),
        sa.Column('updated_at', sa.DateTime, nullable=True),
    )
    op.create_index('idx_budgets_user_period', 'budgets', ['user_id', 'start_date', 'end_date'])

    op.create_table(
        'debts',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.db_id'), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('debt_type', debt_type, nullable=False),
        sa.Column('total_amount', sa.DECIMAL(15, 2), nullable=False),
        sa.Column('interest_rate', sa.DECIMAL(7, 4), nullable=True),
        sa.Column('creditor_name', sa.String(255), nullable=True),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('start_date', sa.Date, nullable=False),
        sa.Column('due_date', sa.Date, nullable=True),
        sa.Column('remaining_amount', sa.DECIMAL(15, 2), nullable=False),
        sa.Column('status', debt_status, nullable=True),
        sa.Column('created_at', sa.DateTime, nullable=True),
        sa.Column('updated_at', sa.DateTime, nullable=True),
    )
    op.create_index('idx_debts_user_type', 'debts', ['user_id', 'debt_type'])
    op.create_index('idx_debts_user_status', 'debts', ['user_id', 'status'])

    op.create_table(
        'debt_payments',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.db_id'), nullable=False),
        sa.Column('debt_id', sa.Integer, sa.ForeignKey('debts.id'), nullable=False),
        sa.Column('amount', sa.DECIMAL(15, 2), nullable=False),
        sa.Column('payment_date', sa.Date, nullable=False),
        sa.Column('description', sa.String(500), nullable=True),
        sa.Column('created_at', sa.DateTime, nullable=True),
    )
    op.create_index('idx_debt_payments_debt', 'debt_payments', ['debt_id'])
    op.create_index('idx_debt_payments_user_date', 'debt_payments', ['user_id', 'payment_date'])

    op.create_table(
        'goals',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.db_id'), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('target_amount', sa.DECIMAL(15, 2), nullable=False),
        sa.Column('current_amount', sa.DECIMAL(15, 2), nullable=True),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('target_date', sa.Date, nullable=False),
        sa.Column('created_at', sa.DateTime, nullable=True),
        sa.Column('updated_at', sa.DateTime, nullable=True),
    )
    op.create_index('idx_goals_user_target_date', 'goals', ['user_id', 'target_date'])


def downgrade() -> None:
    op.drop_table('goals')
    op.drop_table('debt_payments')
    op.drop_table('debts')
    op.drop_table('budgets')
    op.drop_table('transactions')
    op.drop_table('categories')
    op.drop_table('users')
    for enum_type in (debt_status, debt_type, transaction_type, category_type):
        enum_type.drop(op.get_bind(), checkfirst=True)
