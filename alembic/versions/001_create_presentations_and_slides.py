"""Create presentations and slides tables

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates `presentations` and `slides` with their indexes.
How:   Portable column types (sa.Uuid, TIMESTAMP WITH TIME ZONE) so the same
       revision runs on PostgreSQL and SQLite. UUIDs are generated by the
       application.

Ordering:
    uq_slides_presentation_order makes (presentation_id, "order") unique.
    There is no CHECK on "order" >= 0: position shifts park rows at negative
    values inside their transaction.

Rollback: downgrade() drops both tables (all decks are lost).
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
        "presentations",
        sa.Column("id", sa.Uuid(), nullable=False, comment="Unique identifier"),
        sa.Column("title", sa.String(255), nullable=False, comment="Deck title, 1-255 characters"),
        sa.Column("description", sa.Text(), nullable=True, comment="Optional free-text description"),
        sa.Column(
            "theme",
            sa.String(32),
            nullable=False,
            server_default=sa.text("'default'"),
            comment="Visual theme: default, dark, minimal, corporate, creative",
        ),
        sa.Column(
            "is_public",
            sa.Boolean(),
            nullable=False,
            server_default=sa.false(),
            comment="Visibility flag",
        ),
        sa.Column(
            "slide_count",
            sa.Integer(),
            nullable=False,
            server_default=sa.text("0"),
            comment="Denormalized live count of slides",
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column(
            "last_modified",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
            comment="Refreshed on every mutation of the deck or its slides",
        ),
        sa.CheckConstraint("slide_count >= 0", name="ck_presentations_slide_count"),
        sa.PrimaryKeyConstraint("id"),
    )

    # Dashboard search and "recently modified first" ordering
    op.create_index("idx_presentations_title", "presentations", ["title"])
    op.create_index(
        "idx_presentations_last_modified",
        "presentations",
        [sa.text("last_modified DESC")],
    )

    op.create_table(
        "slides",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("presentation_id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column(
            "content",
            sa.Text(),
            nullable=False,
            server_default=sa.text("''"),
            comment="Markdown source",
        ),
        sa.Column(
            "layout",
            sa.String(32),
            nullable=False,
            server_default=sa.text("'title-content'"),
        ),
        sa.Column(
            "order",
            sa.Integer(),
            nullable=False,
            comment="Zero-based dense position within the presentation",
        ),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column(
            "duration",
            sa.Integer(),
            nullable=True,
            comment="Expected duration in seconds for this slide",
        ),
        sa.Column("background_color", sa.String(7), nullable=True),
        sa.Column("text_color", sa.String(7), nullable=True),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.CheckConstraint("duration IS NULL OR duration >= 0", name="ck_slides_duration"),
        sa.ForeignKeyConstraint(["presentation_id"], ["presentations.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_index(
        "uq_slides_presentation_order",
        "slides",
        ["presentation_id", "order"],
        unique=True,
    )
    op.create_index("idx_slides_presentation_id", "slides", ["presentation_id"])


def downgrade() -> None:
    """Drop both tables. Destructive: every presentation and slide is lost."""
    op.drop_index("idx_slides_presentation_id", table_name="slides")
    op.drop_index("uq_slides_presentation_order", table_name="slides")
    op.drop_table("slides")
    op.drop_index("idx_presentations_last_modified", table_name="presentations")
    op.drop_index("idx_presentations_title", table_name="presentations")
    op.drop_table("presentations")
