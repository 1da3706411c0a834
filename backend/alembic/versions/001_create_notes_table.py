"""Create notes table

Revision ID: 001
Revises: None
Create Date: 2026-10-17 00:00:00.000000+00:00

What:  Creates the `notes` table used by the database record store.
How:   Columns mirror the GraphQL Note type (id, name, description, image)
       plus created_at for list ordering. See notesync/models/note.py.

Rollback: downgrade() drops the table entirely (destructive — all data lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "notes",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column(
            "name",
            sa.String(255),
            nullable=False,
            comment="Display title and default blob key",
        ),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column(
            "image",
            sa.String(255),
            nullable=True,
            comment="Original filename of the attached image",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )

    # Every list() orders by insertion time
    op.create_index("idx_notes_created_at", "notes", ["created_at"])


def downgrade() -> None:
    op.drop_index("idx_notes_created_at", table_name="notes")
    op.drop_table("notes")
