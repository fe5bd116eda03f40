"""
MarkDeck — Slide Service
=========================

What:  Business logic for slides: list, get, create (append or insert),
       update, delete, reorder, duplicate and render.
How:   Every operation that changes slide positions follows the same steps
       inside the request's single transaction:

           1. lock the owning presentation row (SELECT ... FOR UPDATE)
           2. read the current {slide_id: order} mapping
           3. plan the shift with markdeck.ordering (pure)
           4. write the plan with ordering_maintainer.apply()
           5. insert/delete the slide itself
           6. recompute presentation.slide_count and touch last_modified

       The lock serialises concurrent mutations of one presentation; the
       transaction makes the whole shift-and-set sequence all-or-nothing.
Who:   Called by routes/slides.py and routes/views.py.
"""

import logging
from typing import List
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from markdeck.exceptions import DatabaseError, MarkDeckError, NotFoundError, ValidationError
from markdeck.models.presentation import Presentation, utcnow
from markdeck.models.slide import Slide
from markdeck.ordering import (
    plan_append,
    plan_delete,
    plan_duplicate,
    plan_insert,
    plan_reorder,
)
from markdeck.schemas.common import MessageResponse
from markdeck.schemas.slide import (
    RenderedSlide,
    SlideCreate,
    SlideDetailResponse,
    SlideReorder,
    SlideResponse,
    SlideUpdate,
)
from markdeck.services.markdown_service import markdown_service
from markdeck.services.ordering_service import ordering_maintainer

logger = logging.getLogger(__name__)

# Slide columns that are NOT NULL; a null for them in an update body is ignored
_REQUIRED_FIELDS = ("content", "layout")


class SlideService:
    """
    Business logic layer for slide operations.

    Error Handling Strategy:
        Same as PresentationService: MarkDeckError subclasses propagate,
        anything else is wrapped in DatabaseError. A failure anywhere in a
        shift sequence rolls the whole transaction back (get_db_session).
    """

    # ── Loading helpers ───────────────────────────────────────────────────

    async def _load_slide(self, db: AsyncSession, slide_id: UUID) -> Slide:
        result = await db.execute(
            select(Slide)
            .where(Slide.id == slide_id)
            .options(joinedload(Slide.presentation))
            .execution_options(populate_existing=True)
        )
        slide = result.scalar_one_or_none()
        if slide is None:
            raise NotFoundError(resource="slide", resource_id=str(slide_id))
        return slide

    async def _lock_presentation(self, db: AsyncSession, presentation_id: UUID) -> Presentation:
        result = await db.execute(
            select(Presentation)
            .where(Presentation.id == presentation_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        presentation = result.scalar_one_or_none()
        if presentation is None:
            raise NotFoundError(resource="presentation", resource_id=str(presentation_id))
        return presentation

    async def _ordered_slides(self, db: AsyncSession, presentation_id: UUID) -> List[Slide]:
        # populate_existing: identity-map copies are stale after a bulk shift
        result = await db.execute(
            select(Slide)
            .where(Slide.presentation_id == presentation_id)
            .order_by(Slide.order)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def _sync_presentation(self, db: AsyncSession, presentation: Presentation) -> None:
        """Rewrite slide_count from the live rows and bump last_modified."""
        count_result = await db.execute(
            select(func.count(Slide.id)).where(Slide.presentation_id == presentation.id)
        )
        presentation.slide_count = count_result.scalar() or 0
        presentation.touch()
        await db.flush()

    # ── Reads ─────────────────────────────────────────────────────────────

    async def list_slides(self, db: AsyncSession, presentation_id: UUID) -> List[SlideResponse]:
        """All slides of a presentation in display order."""
        try:
            exists = await db.execute(
                select(Presentation.id).where(Presentation.id == presentation_id)
            )
            if exists.scalar_one_or_none() is None:
                raise NotFoundError(resource="presentation", resource_id=str(presentation_id))

            slides = await self._ordered_slides(db, presentation_id)
            return [SlideResponse.model_validate(slide) for slide in slides]

        except MarkDeckError:
            raise
        except Exception as e:
            logger.error("Database error listing slides of %s: %s", presentation_id, str(e))
            raise DatabaseError(
                message="Could not retrieve slides. Please try again.",
                context={"presentation_id": str(presentation_id)},
            )

    async def get_slide(self, db: AsyncSession, slide_id: UUID) -> SlideDetailResponse:
        """One slide together with its owning presentation's id, title and theme."""
        try:
            slide = await self._load_slide(db, slide_id)
            return SlideDetailResponse.model_validate(slide)
        except MarkDeckError:
            raise
        except Exception as e:
            logger.error("Database error fetching slide %s: %s", slide_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the slide. Please try again.",
                context={"slide_id": str(slide_id)},
            )

    async def render_slide(self, db: AsyncSession, slide_id: UUID) -> RenderedSlide:
        slide = await self.get_slide(db, slide_id)
        return markdown_service.render_slide(slide)

    # ── Position-changing mutations ───────────────────────────────────────

    async def create_slide(self, db: AsyncSession, data: SlideCreate) -> SlideResponse:
        """
        Create a slide at the end (order omitted) or at `order`, shifting
        every slide at or after that position up by one.

        Raises:
            ValidationError: presentationId or title missing, negative order
            NotFoundError: presentation does not exist
        """
        if data.presentation_id is None or data.title is None or not data.title.strip():
            raise ValidationError(
                message="Presentation ID and title are required",
                field="title" if data.presentation_id else "presentationId",
            )

        try:
            presentation = await self._lock_presentation(db, data.presentation_id)
            current = await ordering_maintainer.current_orders(db, presentation.id)

            if data.order is None:
                position, plan = plan_append(current)
            else:
                position, plan = plan_insert(current, data.order)
            await ordering_maintainer.apply(db, presentation.id, plan)

            slide = Slide(
                presentation_id=presentation.id,
                title=data.title.strip(),
                content=data.content,
                layout=data.layout,
                order=position,
                notes=data.notes,
                duration=data.duration,
                background_color=data.background_color,
                text_color=data.text_color,
            )
            db.add(slide)
            await db.flush()
            await self._sync_presentation(db, presentation)
            await db.refresh(slide)

            logger.info(
                "Slide %s created in presentation %s at order %d (%d shifted)",
                slide.id, presentation.id, position, len(plan),
            )
            return SlideResponse.model_validate(slide)

        except MarkDeckError:
            raise
        except Exception as e:
            logger.error("Database error creating slide: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not create the slide. Please try again.",
                context={"presentation_id": str(data.presentation_id)},
            )

    async def delete_slide(self, db: AsyncSession, slide_id: UUID) -> MessageResponse:
        """Delete a slide; every later slide moves down by one."""
        try:
            slide = await self._load_slide(db, slide_id)
            presentation = await self._lock_presentation(db, slide.presentation_id)
            current = await ordering_maintainer.current_orders(db, presentation.id)
            plan = plan_delete(current, slide.id)

            await db.delete(slide)
            await db.flush()
            await ordering_maintainer.apply(db, presentation.id, plan)
            await self._sync_presentation(db, presentation)

            logger.info(
                "Slide %s deleted from presentation %s (%d shifted)",
                slide_id, presentation.id, len(plan),
            )
            return MessageResponse(message="Slide deleted successfully")

        except MarkDeckError:
            raise
        except Exception as e:
            logger.error("Database error deleting slide %s: %s", slide_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not delete the slide. Please try again.",
                context={"slide_id": str(slide_id)},
            )

    async def reorder_slide(
        self,
        db: AsyncSession,
        slide_id: UUID,
        data: SlideReorder,
    ) -> List[SlideResponse]:
        """
        Move a slide to `newOrder` and return the presentation's full slide
        list in its new order. A target past the end moves the slide last.
        """
        if data.new_order is None or data.new_order < 0:
            raise ValidationError(message="Valid new order is required", field="newOrder")

        try:
            slide = await self._load_slide(db, slide_id)
            presentation = await self._lock_presentation(db, slide.presentation_id)
            current = await ordering_maintainer.current_orders(db, presentation.id)
            plan = plan_reorder(current, slide.id, data.new_order)

            await ordering_maintainer.apply(db, presentation.id, plan)
            await self._sync_presentation(db, presentation)

            logger.info(
                "Slide %s moved %d → %d in presentation %s",
                slide_id, current[slide.id], plan.get(slide.id, current[slide.id]), presentation.id,
            )
            slides = await self._ordered_slides(db, presentation.id)
            return [SlideResponse.model_validate(item) for item in slides]

        except MarkDeckError:
            raise
        except Exception as e:
            logger.error("Database error reordering slide %s: %s", slide_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not reorder the slide. Please try again.",
                context={"slide_id": str(slide_id)},
            )

    async def duplicate_slide(self, db: AsyncSession, slide_id: UUID) -> SlideResponse:
        """
        Insert a copy directly after the source slide. Every field but id
        and order is copied, title included.
        """
        try:
            source = await self._load_slide(db, slide_id)
            presentation = await self._lock_presentation(db, source.presentation_id)
            current = await ordering_maintainer.current_orders(db, presentation.id)
            position, plan = plan_duplicate(current, source.id)

            await ordering_maintainer.apply(db, presentation.id, plan)

            copy = Slide(
                presentation_id=presentation.id,
                order=position,
                **source.copy_fields(),
            )
            db.add(copy)
            await db.flush()
            await self._sync_presentation(db, presentation)
            await db.refresh(copy)

            logger.info("Slide %s duplicated as %s at order %d", slide_id, copy.id, position)
            return SlideResponse.model_validate(copy)

        except MarkDeckError:
            raise
        except Exception as e:
            logger.error("Database error duplicating slide %s: %s", slide_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not duplicate the slide. Please try again.",
                context={"slide_id": str(slide_id)},
            )

    # ── Content mutation ──────────────────────────────────────────────────

    async def update_slide(
        self,
        db: AsyncSession,
        slide_id: UUID,
        data: SlideUpdate,
    ) -> SlideResponse:
        """Apply the fields present in `data`. Order is never changed here."""
        changes = data.model_dump(exclude_unset=True)
        if "title" in changes:
            title = changes["title"]
            if title is None or not title.strip():
                raise ValidationError(message="Title is required", field="title")
            changes["title"] = title.strip()

        try:
            slide = await self._load_slide(db, slide_id)
            for field, value in changes.items():
                if value is None and field in _REQUIRED_FIELDS:
                    continue
                setattr(slide, field, value)
            slide.updated_at = utcnow()
            slide.presentation.touch()
            await db.flush()

            logger.info("Slide %s updated (%s)", slide_id, ", ".join(changes) or "no fields")
            return SlideResponse.model_validate(slide)

        except MarkDeckError:
            raise
        except Exception as e:
            logger.error("Database error updating slide %s: %s", slide_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not update the slide. Please try again.",
                context={"slide_id": str(slide_id)},
            )


# ── Singleton Instance ────────────────────────────────────────────────────
slide_service = SlideService()
