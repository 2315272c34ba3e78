"""Create CRM tables: customers, products, campaigns, user_profiles

Revision ID: 001_initial_crm_tables
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001_initial_crm_tables'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the tenant-partitioned CRM tables."""
    op.create_table(
        'customers',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('tenant_id', sa.String(length=100), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('likes', sa.Text(), nullable=True),
        sa.Column('dislikes', sa.Text(), nullable=True),
        sa.Column('preferences', sa.String(length=20), nullable=False, server_default='mail'),
        sa.Column('activity', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_customers_tenant_id', 'customers', ['tenant_id'], unique=False)

    op.create_table(
        'products',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('tenant_id', sa.String(length=100), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('price', sa.Float(), nullable=True),
        sa.Column('category', sa.String(length=100), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('keywords', sa.Text(), nullable=True),
        sa.Column('likeestimate', sa.Integer(), nullable=True),
        sa.Column('customers', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint('likeestimate IS NULL OR likeestimate BETWEEN 0 AND 100', name='chk_product_likeestimate'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_products_tenant_id', 'products', ['tenant_id'], unique=False)

    op.create_table(
        'campaigns',
        sa.Column('uid', sa.String(length=36), nullable=False),
        sa.Column('tenant_id', sa.String(length=100), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('keywords', sa.Text(), nullable=True),
        sa.Column('product_id', sa.String(length=36), nullable=True),
        sa.Column('campaign_date', sa.Date(), nullable=True),
        sa.Column('likeestimate', sa.Integer(), nullable=True),
        sa.Column('customers', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint('likeestimate IS NULL OR likeestimate BETWEEN 0 AND 100', name='chk_campaign_likeestimate'),
        sa.ForeignKeyConstraint(['product_id'], ['products.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('uid')
    )
    op.create_index('ix_campaigns_tenant_id', 'campaigns', ['tenant_id'], unique=False)

    op.create_table(
        'user_profiles',
        sa.Column('tenant_id', sa.String(length=100), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('profession', sa.JSON(), nullable=True),
        sa.Column('style', sa.JSON(), nullable=True),
        sa.Column('chat_history', sa.JSON(), nullable=True),
        sa.Column('onboarded_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('tenant_id')
    )


def downgrade() -> None:
    """Drop the CRM tables."""
    op.drop_table('user_profiles')
    op.drop_index('ix_campaigns_tenant_id', table_name='campaigns')
    op.drop_table('campaigns')
    op.drop_index('ix_products_tenant_id', table_name='products')
    op.drop_table('products')
    op.drop_index('ix_customers_tenant_id', table_name='customers')
    op.drop_table('customers')
