"""Create product table with unique code index

Revision ID: 3f1c2a9d7b40
Revises:
Create Date: 2026-10-19 09:12:44.201113

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3f1c2a9d7b40'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'product',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('code', sa.String(length=9), nullable=False),
        sa.Column('name', sa.String(length=90), nullable=False),
        sa.Column('category', sa.String(length=28), nullable=False),
        sa.Column('brand', sa.String(length=28), nullable=True),
        sa.Column('type', sa.String(length=21), nullable=True),
        sa.Column('description', sa.String(length=180), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_product_code', 'product', ['code'], unique=True)


def downgrade() -> None:
    op.drop_index('ix_product_code', table_name='product')
    op.drop_table('product')
