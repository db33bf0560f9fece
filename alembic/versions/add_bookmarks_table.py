"""Add bookmarks table

Revision ID: add_bookmarks_001
Revises: add_deals_001
Create Date: 2025-02-03

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'add_bookmarks_001'
down_revision: Union[str, None] = 'add_deals_001'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'bookmarks',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(64), nullable=False),
        sa.Column('deal_id', sa.String(36), sa.ForeignKey('deals.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
        # Un user ne peut pas avoir le même deal en bookmark 2 fois
        sa.UniqueConstraint('user_id', 'deal_id', name='uq_bookmarks_user_deal'),
    )

    # Listing paginé par utilisateur, plus récents d'abord
    op.create_index('ix_bookmarks_user_created', 'bookmarks', ['user_id', 'created_at'])

    # Recomptage par deal
    op.create_index('ix_bookmarks_deal_id', 'bookmarks', ['deal_id'])


def downgrade() -> None:
    op.drop_index('ix_bookmarks_deal_id', table_name='bookmarks')
    op.drop_index('ix_bookmarks_user_created', table_name='bookmarks')
    op.drop_table('bookmarks')
