"""create_profiles_table

Revision ID: 4b7e2d9c1a30
Revises:
Create Date: 2026-10-17 09:12:44.318204

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "4b7e2d9c1a30"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create the profiles table."""
    op.create_table(
        "profiles",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("greeting", sa.String(length=255), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("image_url", sa.String(length=500), nullable=True),
        sa.Column("face_encoding", postgresql.JSONB(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("length(trim(name)) > 0", name="ck_profiles_name_not_blank"),
        sa.PrimaryKeyConstraint("id"),
    )
    # Profile list is ordered newest first
    op.create_index("ix_profiles_created_at", "profiles", ["created_at"], unique=False)


def downgrade() -> None:
    """Drop the profiles table."""
    op.drop_index("ix_profiles_created_at", table_name="profiles")
    op.drop_table("profiles")
