"""add note folders

Revision ID: 8c1f4e02b7d9
Revises: 3b7e21c9d4a0
Create Date: 2026-10-18 12:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "8c1f4e02b7d9"
down_revision: str | Sequence[str] | None = "3b7e21c9d4a0"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "note_folders",
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column("seq", sa.Integer(), sa.Identity(), nullable=False),
        sa.Column(
            "owner_id",
            sa.String(length=64),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column(
            "notes",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'[]'::jsonb"),
        ),
    )
    op.create_index("ix_note_folders_owner_id", "note_folders", ["owner_id"])


def downgrade() -> None:
    op.drop_index("ix_note_folders_owner_id", table_name="note_folders")
    op.drop_table("note_folders")
