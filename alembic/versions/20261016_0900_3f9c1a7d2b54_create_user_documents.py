"""create_user_documents

Revision ID: 3f9c1a7d2b54
Revises:
Create Date: 2026-10-16 09:00:00.000000

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '3f9c1a7d2b54'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table('user_documents',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('owner_id', sa.String(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('file_name', sa.String(length=255), nullable=False),
        sa.Column('file_type', sa.String(length=100), nullable=False),
        sa.Column('file_size', sa.Integer(), nullable=False),
        sa.Column('content_key', sa.Text(), nullable=False),
        sa.Column('category', sa.String(length=100), nullable=False),
        sa.Column('tags', sa.JSON().with_variant(postgresql.JSONB(), 'postgresql'), nullable=False),
        sa.Column(
            'status',
            sa.Enum('draft', 'review', 'approved', 'archived', name='document_status', native_enum=False),
            nullable=False,
        ),
        sa.Column('starred', sa.Boolean(), nullable=False),
        sa.Column('is_folder_placeholder', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_user_documents_owner_id'), 'user_documents', ['owner_id'], unique=False)
    op.create_index(op.f('ix_user_documents_category'), 'user_documents', ['category'], unique=False)

    # One placeholder per folder name (case-insensitive) per owner
    op.create_index(
        'uq_user_documents_folder_placeholder',
        'user_documents',
        ['owner_id', sa.text('lower(category)')],
        unique=True,
        postgresql_where=sa.text('is_folder_placeholder'),
    )


def downgrade() -> None:
    op.drop_index('uq_user_documents_folder_placeholder', table_name='user_documents')
    op.drop_index(op.f('ix_user_documents_category'), table_name='user_documents')
    op.drop_index(op.f('ix_user_documents_owner_id'), table_name='user_documents')
    op.drop_table('user_documents')
