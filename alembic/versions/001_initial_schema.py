"""Initial schema - price alerts and alert history.

Revision ID: 001
Revises: 
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Create price_alerts table
    op.create_table(
        'price_alerts',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('symbol', sa.String(), nullable=False),
        sa.Column('current_price', sa.Float(), nullable=False),
        sa.Column('target_price', sa.Float(), nullable=False),
        sa.Column('direction', sa.String(), nullable=False),
        sa.Column('active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.BigInteger(), nullable=False),
        sa.Column('user_id', sa.String(), nullable=False),
    )
    op.create_index('ix_price_alerts_symbol', 'price_alerts', ['symbol'])
    op.create_index('ix_price_alerts_user_id', 'price_alerts', ['user_id'])
    op.create_index('ix_price_alerts_user_active', 'price_alerts', ['user_id', 'active'])

    # Create alert_history table
    op.create_table(
        'alert_history',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('alert_id', sa.String(), nullable=False),
        sa.Column('symbol', sa.String(), nullable=False),
        sa.Column('target_price', sa.Float(), nullable=False),
        sa.Column('actual_price', sa.Float(), nullable=False),
        sa.Column('direction', sa.String(), nullable=False),
        sa.Column('triggered_at', sa.BigInteger(), nullable=False),
        sa.Column('user_id', sa.String(), nullable=False),
    )
    op.create_index('ix_alert_history_alert_id', 'alert_history', ['alert_id'])
    op.create_index('ix_alert_history_triggered_at', 'alert_history', ['triggered_at'])
    op.create_index('ix_alert_history_user_id', 'alert_history', ['user_id'])


def downgrade() -> None:
    op.drop_index('ix_alert_history_user_id', table_name='alert_history')
    op.drop_index('ix_alert_history_triggered_at', table_name='alert_history')
    op.drop_index('ix_alert_history_alert_id', table_name='alert_history')
    op.drop_table('alert_history')

    op.drop_index('ix_price_alerts_user_active', table_name='price_alerts')
    op.drop_index('ix_price_alerts_user_id', table_name='price_alerts')
    op.drop_index('ix_price_alerts_symbol', table_name='price_alerts')
    op.drop_table('price_alerts')
