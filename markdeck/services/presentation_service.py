"""
MarkDeck — Presentation Service
================================

What:  Business logic for presentations: create, list/search, get, update,
       delete, duplicate and render.
How:   Stateless methods that receive the request's AsyncSession. Queries
       eager-load slides (async sessions cannot lazy-load); responses are
       built from the loaded ORM objects.
Who:   Called by routes/presentations.py and routes/views.py.

Creation Seed:
    Every new presentation starts with exactly one slide:

        title   "Welcome"
        layout  "title-content"
        order   0
        content "# Welcome to Your Presentation\\n\\nEdit this slide to get started!"

Error Handling Strategy:
    MarkDeckError subclasses (ValidationError, NotFoundError) propagate
    unchanged. Anything else is logged with a traceback and wrapped in
    DatabaseError so clients only ever see a generic 500 message.
"""

import logging
import math
from typing import Optional
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from markdeck.config import settings
from markdeck.exceptions import DatabaseError, MarkDeckError, NotFoundError, ValidationError
from markdeck.models.presentation import Presentation
from markdeck.models.slide import Slide
from markdeck.schemas.common import MessageResponse
from markdeck.schemas.presentation import (
    PresentationCreate,
    PresentationListItem,
    PresentationListResponse,
    PresentationRenderResponse,
    PresentationResponse,
    PresentationUpdate,
)
from markdeck.services.markdown_service import markdown_service

logger = logging.getLogger(__name__)

WELCOME_SLIDE_TITLE = "Welcome"
WELCOME_SLIDE_CONTENT = "# Welcome to Your Presentation\n\nEdit this slide to get started!"
COPY_SUFFIX = " (Copy)"


class PresentationService:
    """
    Business logic layer for presentation operations.

    Responsibilities:
        - create_presentation(): deck + seeded Welcome slide
        - list_presentations(): search, offset pagination, newest-modified first
        - get_presentation() / render_presentation(): single deck reads
        - update_presentation(): partial metadata update
        - delete_presentation(): deck and all of its slides
        - duplicate_presentation(): deep copy with slide orders preserved
    """

    async def load(
        self,
        db: AsyncSession,
        presentation_id: UUID,
        lock: bool = False,
    ) -> Presentation:
        """
        Fetch a presentation with its slides, or raise NotFoundError.

        lock=True takes a row lock (SELECT ... FOR UPDATE) for the rest of
        the transaction; SQLite ignores it and serialises writers itself.
        """
        query = (
            select(Presentation)
            .where(Presentation.id == presentation_id)
            .options(selectinload(Presentation.slides))
            .execution_options(populate_existing=True)
        )
        if lock:
            query = query.with_for_update()

        result = await db.execute(query)
        presentation = result.scalar_one_or_none()
        if presentation is None:
            raise NotFoundError(resource="presentation", resource_id=str(presentation_id))
        return presentation

    async def create_presentation(
        self, db: AsyncSession, data: PresentationCreate
    ) -> PresentationResponse:
        """
        Create a deck with one seeded "Welcome" slide.

        Raises:
            ValidationError: title missing or blank (→ 400 "Title is required")
            DatabaseError: insert failed
        """
        if data.title is None or not data.title.strip():
            raise ValidationError(message="Title is required", field="title")

        try:
            presentation = Presentation(
                title=data.title.strip(),
                description=data.description,
                theme=data.theme,
                is_public=data.is_public,
                slide_count=1,
                slides=[
                    Slide(
                        title=WELCOME_SLIDE_TITLE,
                        content=WELCOME_SLIDE_CONTENT,
                        layout="title-content",
                        order=0,
                    )
                ],
            )
            db.add(presentation)
            await db.flush()
            logger.info("Presentation created: %s (%r)", presentation.id, presentation.title)

            presentation = await self.load(db, presentation.id)
            return PresentationResponse.model_validate(presentation)

        except MarkDeckError:
            raise
        except Exception as e:
            logger.error("Database error creating presentation: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not create the presentation. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def list_presentations(
        self,
        db: AsyncSession,
        page: int = 1,
        limit: Optional[int] = None,
        search: Optional[str] = None,
    ) -> PresentationListResponse:
        """
        One page of presentations, most recently modified first.

        Search:
            Case-insensitive substring match on title OR description.

        Pagination:
            offset = (page - 1) * limit; total_pages = ceil(total / limit)
            (0 when nothing matches).
        """
        limit = limit or settings.default_page_size
        page = max(page, 1)

        try:
            filters = []
            if search and search.strip():
                term = search.strip()
                filters.append(
                    or_(
                        Presentation.title.icontains(term, autoescape=True),
                        Presentation.description.icontains(term, autoescape=True),
                    )
                )

            query = (
                select(Presentation)
                .where(*filters)
                .options(selectinload(Presentation.slides))
                .order_by(Presentation.last_modified.desc(), Presentation.created_at.desc())
                .offset((page - 1) * limit)
                .limit(limit)
            )
            result = await db.execute(query)
            presentations = list(result.scalars().all())

            count_result = await db.execute(
                select(func.count(Presentation.id)).where(*filters)
            )
            total_count = count_result.scalar() or 0

            return PresentationListResponse(
                presentations=[
                    PresentationListItem.model_validate(presentation)
                    for presentation in presentations
                ],
                total_count=total_count,
                current_page=page,
                total_pages=math.ceil(total_count / limit),
            )

        except Exception as e:
            logger.error("Database error listing presentations: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve presentations. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def get_presentation(
        self, db: AsyncSession, presentation_id: UUID
    ) -> PresentationResponse:
        try:
            presentation = await self.load(db, presentation_id)
            return PresentationResponse.model_validate(presentation)
        except MarkDeckError:
            raise
        except Exception as e:
            logger.error("Database error fetching presentation %s: %s", presentation_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the presentation. Please try again.",
                context={"presentation_id": str(presentation_id)},
            )

    async def update_presentation(
        self,
        db: AsyncSession,
        presentation_id: UUID,
        data: PresentationUpdate,
    ) -> PresentationResponse:
        """
        Apply the fields present in `data`; absent fields are untouched.

        A title that is present but blank is rejected. theme / isPublic sent
        as null are ignored (both columns are NOT NULL); description may be
        cleared with null.
        """
        changes = data.model_dump(exclude_unset=True)
        if "title" in changes:
            title = changes["title"]
            if title is None or not title.strip():
                raise ValidationError(message="Title is required", field="title")
            changes["title"] = title.strip()

        try:
            presentation = await self.load(db, presentation_id, lock=True)
            for field, value in changes.items():
                if value is None and field in ("theme", "is_public"):
                    continue
                setattr(presentation, field, value)
            presentation.touch()
            await db.flush()
            logger.info("Presentation updated: %s (%s)", presentation_id, ", ".join(changes) or "no fields")

            return PresentationResponse.model_validate(presentation)

        except MarkDeckError:
            raise
        except Exception as e:
            logger.error("Database error updating presentation %s: %s", presentation_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not update the presentation. Please try again.",
                context={"presentation_id": str(presentation_id)},
            )

    async def delete_presentation(
        self, db: AsyncSession, presentation_id: UUID
    ) -> MessageResponse:
        """Delete a deck; its slides go with it (ORM cascade, FK ON DELETE CASCADE)."""
        try:
            presentation = await self.load(db, presentation_id, lock=True)
            slide_total = len(presentation.slides)
            await db.delete(presentation)
            await db.flush()
            logger.info("Presentation deleted: %s (%d slides)", presentation_id, slide_total)
            return MessageResponse(message="Presentation deleted successfully")

        except MarkDeckError:
            raise
        except Exception as e:
            logger.error("Database error deleting presentation %s: %s", presentation_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not delete the presentation. Please try again.",
                context={"presentation_id": str(presentation_id)},
            )

    async def duplicate_presentation(
        self, db: AsyncSession, presentation_id: UUID
    ) -> PresentationResponse:
        """
        Deep copy: title + " (Copy)", private, every slide copied with its
        order unchanged (the copy's orders are dense because the source's are).
        """
        try:
            source = await self.load(db, presentation_id)
            copy = Presentation(
                title=(source.title + COPY_SUFFIX)[:255],
                description=source.description,
                theme=source.theme,
                is_public=False,
                slide_count=len(source.slides),
                slides=[
                    Slide(order=slide.order, **slide.copy_fields())
                    for slide in source.slides
                ],
            )
            db.add(copy)
            await db.flush()
            logger.info("Presentation %s duplicated as %s", presentation_id, copy.id)

            copy = await self.load(db, copy.id)
            return PresentationResponse.model_validate(copy)

        except MarkDeckError:
            raise
        except Exception as e:
            logger.error("Database error duplicating presentation %s: %s", presentation_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not duplicate the presentation. Please try again.",
                context={"presentation_id": str(presentation_id)},
            )

    async def render_presentation(
        self, db: AsyncSession, presentation_id: UUID
    ) -> PresentationRenderResponse:
        """Every slide of a deck passed through the Markdown Transformer."""
        try:
            presentation = await self.load(db, presentation_id)
        except MarkDeckError:
            raise
        except Exception as e:
            logger.error("Database error rendering presentation %s: %s", presentation_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the presentation. Please try again.",
                context={"presentation_id": str(presentation_id)},
            )

        return PresentationRenderResponse(
            id=presentation.id,
            title=presentation.title,
            theme=presentation.theme,
            slide_count=presentation.slide_count,
            slides=[markdown_service.render_slide(slide) for slide in presentation.slides],
        )


# ── Singleton Instance ────────────────────────────────────────────────────
presentation_service = PresentationService()
