"""create memes and evolutions

Revision ID: 3f1a9c2d7b10
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "3f1a9c2d7b10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "memes",
        sa.Column("id", sa.String(length=32), nullable=False),
        sa.Column("session_id", sa.String(), nullable=True),
        sa.Column("parent_id", sa.String(length=32), nullable=True),
        sa.Column("template_id", sa.String(), nullable=False),
        sa.Column("caption", sa.Text(), nullable=False),
        sa.Column("alt_text", sa.Text(), nullable=True),
        sa.Column("image_url", sa.String(), nullable=False),
        sa.Column("language", sa.String(), nullable=False),
        sa.Column("tone", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("generation_time_ms", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["parent_id"], ["memes.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_memes_session_id", "memes", ["session_id"], unique=False)
    op.create_index("idx_memes_parent_id", "memes", ["parent_id"], unique=False)

    op.create_table(
        "evolutions",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("parent_meme_id", sa.String(length=32), nullable=False),
        sa.Column("child_meme_id", sa.String(length=32), nullable=False),
        sa.Column("mutation_type", sa.String(), nullable=True),
        sa.Column("feedback", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["parent_meme_id"], ["memes.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["child_meme_id"], ["memes.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "idx_evolutions_parent_meme_id", "evolutions", ["parent_meme_id"], unique=False
    )
    op.create_index(
        "idx_evolutions_child_meme_id", "evolutions", ["child_meme_id"], unique=False
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("idx_evolutions_child_meme_id", table_name="evolutions")
    op.drop_index("idx_evolutions_parent_meme_id", table_name="evolutions")
    op.drop_table("evolutions")

    op.drop_index("idx_memes_parent_id", table_name="memes")
    op.drop_index("idx_memes_session_id", table_name="memes")
    op.drop_table("memes")
