"""
MarkDeck — Slide SQLAlchemy Model
==================================

What:  ORM model representing the `slides` table.
Who:   Written by SlideService and the ordering maintainer; read by the
       render endpoints and the HTML views.

The `order` column:
    Zero-based position of the slide inside its presentation. For a fixed
    presentation the values are exactly {0, ..., N-1}. The unique index on
    (presentation_id, order) enforces "no duplicates" at the database level;
    "no gaps" is maintained by the ordering maintainer.

    No CHECK (order >= 0) exists: shifts temporarily park
    rows at negative values inside one transaction (see services/ordering_service.py).
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from markdeck.database import Base
from markdeck.models.presentation import utcnow

if TYPE_CHECKING:
    from markdeck.models.presentation import Presentation


class Slide(Base):
    """A single markdown slide belonging to one presentation."""

    __tablename__ = "slides"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    presentation_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("presentations.id", ondelete="CASCADE"),
        nullable=False,
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)

    content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
        server_default=text("''"),
        comment="Markdown source",
    )

    layout: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default="title-content",
        server_default=text("'title-content'"),
    )

    order: Mapped[int] = mapped_column(
        "order",
        Integer,
        nullable=False,
        comment="Zero-based dense position within the presentation",
    )

    notes: Mapped[str | None] = mapped_column(Text, nullable=True, default="")

    duration: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
        comment="Expected duration in seconds for this slide",
    )

    background_color: Mapped[str | None] = mapped_column(String(7), nullable=True)
    text_color: Mapped[str | None] = mapped_column(String(7), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    presentation: Mapped["Presentation"] = relationship(back_populates="slides")

    __table_args__ = (
        CheckConstraint(
            "duration IS NULL OR duration >= 0", name="ck_slides_duration"
        ),
        Index("uq_slides_presentation_order", "presentation_id", "order", unique=True),
        Index("idx_slides_presentation_id", "presentation_id"),
    )

    # Columns copied when a slide is duplicated (everything but id and order)
    COPY_FIELDS = (
        "title",
        "content",
        "layout",
        "notes",
        "duration",
        "background_color",
        "text_color",
    )

    def copy_fields(self) -> dict:
        return {name: getattr(self, name) for name in self.COPY_FIELDS}

    def __repr__(self) -> str:
        return (
            f"<Slide(id={self.id}, presentation_id={self.presentation_id}, "
            f"order={self.order}, title='{self.title}')>"
        )
