"""Create categories table.

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create categories table."""
    op.create_table(
        'categories',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('slug', sa.String(100), nullable=False),
        sa.Column('parent_id', sa.Integer(),
                  sa.ForeignKey('categories.id', ondelete='RESTRICT'), nullable=True),
        sa.Column('image_url', sa.String(1000), nullable=True),
        sa.Column('image_id', sa.String(255), nullable=True),
        sa.Column('meta_title', sa.String(255), nullable=True),
        sa.Column('meta_keywords', sa.String(500), nullable=True),
        sa.Column('sort_order', sa.Integer(), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('is_popular', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('view_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('cart_add_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('order_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_week_order_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_month_order_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_revenue', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('last_order_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
    )

    op.create_index('ix_categories_slug', 'categories', ['slug'], unique=True)
    op.create_index('ix_categories_parent_id', 'categories', ['parent_id'])
    op.create_index('ix_categories_active', 'categories', ['active'])


def downgrade() -> None:
    """Drop categories table."""
    op.drop_index('ix_categories_active', table_name='categories')
    op.drop_index('ix_categories_parent_id', table_name='categories')
    op.drop_index('ix_categories_slug', table_name='categories')
    op.drop_table('categories')
