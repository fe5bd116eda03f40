"""
MarkDeck — Presentation SQLAlchemy Model
=========================================

What:  ORM model representing the `presentations` table.
How:   Inherits from SQLAlchemy's DeclarativeBase; Alembic reads this for migrations.
Who:   Used by PresentationService and SlideService for CRUD operations.

Table Design:
    - UUID primary key, generated in Python so SQLite and PostgreSQL behave alike
    - theme: default, dark, minimal, corporate or creative (short string)
    - slide_count: denormalized count of slides, rewritten by every slide
      mutation inside the same transaction
    - last_modified: bumped on every mutation of the deck or any of its slides

    Indexes on title (search) and last_modified (dashboard ordering).
"""

import uuid
from datetime import datetime, timezone
from typing import List, TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Index,
    Integer,
    String,
    Text,
    Uuid,
    false,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from markdeck.database import Base

if TYPE_CHECKING:
    from markdeck.models.slide import Slide


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Presentation(Base):
    """
    A slide deck.

    Lifecycle:
        1. Created with one seeded "Welcome" slide (slide_count = 1)
        2. Slides are added, edited, reordered and removed; each change
           rewrites slide_count and last_modified
        3. Deleted together with all of its slides (ORM cascade + FK cascade)
    """

    __tablename__ = "presentations"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
        comment="Unique identifier",
    )

    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Deck title, 1-255 characters",
    )

    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        default=None,
        comment="Optional free-text description",
    )

    theme: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default="default",
        server_default=text("'default'"),
        comment="Visual theme: default, dark, minimal, corporate, creative",
    )

    is_public: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
        comment="Visibility flag",
    )

    slide_count: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default=text("0"),
        comment="Denormalized live count of slides",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    last_modified: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
        comment="Refreshed on every mutation of the deck or its slides",
    )

    # Ordered by slide order so selectinload() returns display order
    slides: Mapped[List["Slide"]] = relationship(
        back_populates="presentation",
        cascade="all, delete-orphan",
        order_by="Slide.order",
    )

    __table_args__ = (
        CheckConstraint("slide_count >= 0", name="ck_presentations_slide_count"),
        Index("idx_presentations_title", "title"),
        Index("idx_presentations_last_modified", last_modified.desc()),
    )

    def touch(self) -> None:
        """Marks the deck as modified now."""
        self.last_modified = utcnow()

    def __repr__(self) -> str:
        return (
            f"<Presentation(id={self.id}, title='{self.title}', "
            f"slide_count={self.slide_count})>"
        )
