"""
MarkDeck — Ordering Store Applier
==================================

What:  Writes slide ordering plans (see markdeck/ordering.py) to the database.
How:   Two statements inside the caller's transaction:

           1. park:   every changed row → -(new_order) - 1   (unique, negative)
           2. settle: every negative row → -order - 1        (= new_order)

       The (presentation_id, order) unique index is checked row by row on both
       PostgreSQL and SQLite, so a plain `SET order = order + 1` can collide
       with a neighbour that has not been shifted yet. Parked values are
       distinct because final orders are distinct.
Who:   Called by SlideService after it has locked the presentation row.
"""

import logging
from typing import Dict, Mapping
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from markdeck.models.slide import Slide

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Store applier
# ══════════════════════════════════════════════════════════════════════════

class OrderingMaintainer:
    """
    Writes ordering plans for one presentation's slides.

    Must run inside the request's transaction, after the caller has locked
    the presentation row. Identity-map objects are not synchronised; callers
    reload slides (populate_existing) after apply().
    """

    async def current_orders(
        self, db: AsyncSession, presentation_id: UUID
    ) -> Dict[UUID, int]:
        result = await db.execute(
            select(Slide.id, Slide.order).where(Slide.presentation_id == presentation_id)
        )
        return {row.id: row.order for row in result}

    async def apply(
        self,
        db: AsyncSession,
        presentation_id: UUID,
        plan: Mapping[UUID, int],
    ) -> None:
        if not plan:
            return

        # ── Step 1: park changed rows at unique negative values ───────────
        await db.execute(
            update(Slide),
            [{"id": slide_id, "order": -new_order - 1} for slide_id, new_order in plan.items()],
        )

        # ── Step 2: settle parked rows at their final order ───────────────
        await db.execute(
            update(Slide)
            .where(Slide.presentation_id == presentation_id, Slide.order < 0)
            .values(order=-Slide.order - 1)
            .execution_options(synchronize_session=False)
        )

        logger.debug(
            "Applied ordering plan to presentation %s: %d slide(s) moved",
            presentation_id,
            len(plan),
        )


# ── Singleton Instance ────────────────────────────────────────────────────
ordering_maintainer = OrderingMaintainer()
