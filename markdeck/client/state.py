"""
MarkDeck — Client State Container
==================================

What:  Holds what a MarkDeck front end shows: the presentation list, the open
       presentation, the current slide, loading/error flags and editor state.
How:   PresentationState is an immutable snapshot. PresentationStore owns the
       current snapshot and a list of subscribers; every action builds a new
       snapshot with model_copy() and notifies subscribers synchronously.

       Slide mutations keep the local slide list dense with the same planners
       the server uses (markdeck.ordering). reorder_slide() is optimistic: the
       local list moves immediately, is replaced by the server's list on
       success and restored on failure.

Error Semantics:
    A failed call sets `error` to the server message. Reads (fetch_*) swallow
    the ApiError after recording it; mutations record it and re-raise.

Usage:
    client = MarkDeckClient()
    store = PresentationStore(client)
    unsubscribe = store.subscribe(lambda state: print(state.current_slide_index))
    await store.fetch_presentation(deck_id)
    store.next_slide()
"""

import logging
from typing import Callable, List, Optional, Sequence, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from markdeck.client.api import ApiError, MarkDeckClient
from markdeck.ordering import plan_delete, plan_insert, reorder_list
from markdeck.schemas.presentation import (
    PresentationCreate,
    PresentationListItem,
    PresentationResponse,
    PresentationUpdate,
)
from markdeck.schemas.slide import SlideCreate, SlideResponse, SlideUpdate

logger = logging.getLogger(__name__)


class PresentationState(BaseModel):
    """One immutable snapshot of client state."""

    model_config = ConfigDict(frozen=True)

    presentations: List[Union[PresentationListItem, PresentationResponse]] = Field(default_factory=list)
    current_presentation: Optional[PresentationResponse] = None
    current_slide_index: int = 0
    is_loading: bool = False
    error: Optional[str] = None
    search_query: str = ""
    is_edit_mode: bool = False
    selected_slide_id: Optional[UUID] = None


Listener = Callable[[PresentationState], None]


def _renumbered(slides: Sequence[SlideResponse], plan: dict) -> List[SlideResponse]:
    return [
        slide.model_copy(update={"order": plan[slide.id]}) if slide.id in plan else slide
        for slide in slides
    ]


class PresentationStore:
    """
    Explicit state container, constructed once by the application root and
    passed by reference to whatever needs it.
    """

    def __init__(self, client: MarkDeckClient, initial: Optional[PresentationState] = None):
        self.client = client
        self._state = initial or PresentationState()
        self._listeners: List[Listener] = []

    @property
    def state(self) -> PresentationState:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Registers `listener`; returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ── Internal helpers ──────────────────────────────────────────────────

    def _replace(self, state: PresentationState) -> None:
        self._state = state
        for listener in list(self._listeners):
            listener(state)

    def _set(self, **changes) -> None:
        self._replace(self._state.model_copy(update=changes))

    def _fail(self, error: ApiError) -> None:
        logger.warning("Store action failed: %s", error.message)
        self._set(error=error.message, is_loading=False)

    def _current_slides(self) -> List[SlideResponse]:
        current = self._state.current_presentation
        return sorted(current.slides, key=lambda slide: slide.order) if current else []

    def _owns(self, presentation_id: UUID) -> bool:
        current = self._state.current_presentation
        return current is not None and current.id == presentation_id

    def _with_slides(self, slides: Sequence[SlideResponse]) -> PresentationResponse:
        ordered = sorted(slides, key=lambda slide: slide.order)
        return self._state.current_presentation.model_copy(
            update={"slides": ordered, "slide_count": len(ordered)}
        )

    # ── Presentations ─────────────────────────────────────────────────────

    async def fetch_presentations(self, search: Optional[str] = None) -> None:
        query = self._state.search_query if search is None else search
        self._set(is_loading=True)
        try:
            result = await self.client.list_presentations(search=query or None)
        except ApiError as e:
            self._fail(e)
            return
        self._set(presentations=result.presentations, is_loading=False)

    async def fetch_presentation(self, presentation_id: UUID) -> None:
        self._set(is_loading=True)
        try:
            presentation = await self.client.get_presentation(presentation_id)
        except ApiError as e:
            self._fail(e)
            return
        self._set(
            current_presentation=presentation,
            current_slide_index=0,
            selected_slide_id=None,
            is_loading=False,
        )

    async def create_presentation(self, data: PresentationCreate) -> PresentationResponse:
        self._set(is_loading=True)
        try:
            presentation = await self.client.create_presentation(data)
        except ApiError as e:
            self._fail(e)
            raise
        self._set(presentations=[presentation, *self._state.presentations], is_loading=False)
        return presentation

    async def update_presentation(
        self, presentation_id: UUID, changes: PresentationUpdate
    ) -> PresentationResponse:
        try:
            updated = await self.client.update_presentation(presentation_id, changes)
        except ApiError as e:
            self._fail(e)
            raise
        self._set(
            presentations=[
                updated if item.id == presentation_id else item
                for item in self._state.presentations
            ],
            current_presentation=(
                updated if self._owns(presentation_id) else self._state.current_presentation
            ),
        )
        return updated

    async def delete_presentation(self, presentation_id: UUID) -> None:
        try:
            await self.client.delete_presentation(presentation_id)
        except ApiError as e:
            self._fail(e)
            raise
        self._set(
            presentations=[item for item in self._state.presentations if item.id != presentation_id],
            current_presentation=(
                None if self._owns(presentation_id) else self._state.current_presentation
            ),
        )

    async def duplicate_presentation(self, presentation_id: UUID) -> PresentationResponse:
        self._set(is_loading=True)
        try:
            copy = await self.client.duplicate_presentation(presentation_id)
        except ApiError as e:
            self._fail(e)
            raise
        self._set(presentations=[copy, *self._state.presentations], is_loading=False)
        return copy

    # ── Navigation & editor state ─────────────────────────────────────────

    def set_current_slide_index(self, index: int) -> None:
        last = len(self._current_slides()) - 1
        self._set(current_slide_index=max(0, min(index, last)) if last >= 0 else 0)

    def next_slide(self) -> None:
        if self._state.current_slide_index < len(self._current_slides()) - 1:
            self._set(current_slide_index=self._state.current_slide_index + 1)

    def previous_slide(self) -> None:
        if self._state.current_slide_index > 0:
            self._set(current_slide_index=self._state.current_slide_index - 1)

    def set_search_query(self, query: str) -> None:
        self._set(search_query=query)

    def set_edit_mode(self, edit_mode: bool) -> None:
        self._set(is_edit_mode=edit_mode)

    def set_selected_slide(self, slide_id: Optional[UUID]) -> None:
        self._set(selected_slide_id=slide_id)

    def clear_error(self) -> None:
        self._set(error=None)

    # ── Slides ────────────────────────────────────────────────────────────

    async def create_slide(self, data: SlideCreate) -> SlideResponse:
        try:
            slide = await self.client.create_slide(data)
        except ApiError as e:
            self._fail(e)
            raise

        if self._owns(slide.presentation_id):
            slides = self._current_slides()
            _, plan = plan_insert({item.id: item.order for item in slides}, slide.order)
            self._set(current_presentation=self._with_slides([*_renumbered(slides, plan), slide]))
        return slide

    async def update_slide(self, slide_id: UUID, changes: SlideUpdate) -> SlideResponse:
        try:
            updated = await self.client.update_slide(slide_id, changes)
        except ApiError as e:
            self._fail(e)
            raise

        if self._owns(updated.presentation_id):
            slides = [updated if item.id == slide_id else item for item in self._current_slides()]
            self._set(current_presentation=self._with_slides(slides))
        return updated

    async def delete_slide(self, slide_id: UUID) -> None:
        try:
            await self.client.delete_slide(slide_id)
        except ApiError as e:
            self._fail(e)
            raise

        slides = self._current_slides()
        orders = {item.id: item.order for item in slides}
        if slide_id not in orders:
            return

        plan = plan_delete(orders, slide_id)
        remaining = _renumbered([item for item in slides if item.id != slide_id], plan)
        self._set(
            current_presentation=self._with_slides(remaining),
            current_slide_index=max(0, min(self._state.current_slide_index, len(remaining) - 1)),
            selected_slide_id=(
                None if self._state.selected_slide_id == slide_id else self._state.selected_slide_id
            ),
        )

    async def reorder_slide(self, slide_id: UUID, new_order: int) -> List[SlideResponse]:
        """
        Move a slide, optimistically.

        The local list is reordered first; the server's list then replaces
        it. On failure the snapshot from before the move is restored (with
        `error` set) and the ApiError re-raised.
        """
        previous = self._state
        slides = self._current_slides()
        source = next((i for i, item in enumerate(slides) if item.id == slide_id), None)

        # A negative target is left for the server to reject with a 400
        if source is not None and new_order >= 0:
            moved = reorder_list(slides, source, new_order)
            optimistic = [item.model_copy(update={"order": i}) for i, item in enumerate(moved)]
            self._set(current_presentation=self._with_slides(optimistic))

        try:
            server_slides = await self.client.reorder_slide(slide_id, new_order)
        except ApiError as e:
            logger.warning("Reorder of slide %s rolled back: %s", slide_id, e.message)
            self._replace(previous.model_copy(update={"error": e.message, "is_loading": False}))
            raise

        if server_slides and self._owns(server_slides[0].presentation_id):
            self._set(current_presentation=self._with_slides(server_slides))
        return server_slides

    async def duplicate_slide(self, slide_id: UUID) -> SlideResponse:
        try:
            copy = await self.client.duplicate_slide(slide_id)
        except ApiError as e:
            self._fail(e)
            raise

        if self._owns(copy.presentation_id):
            slides = self._current_slides()
            _, plan = plan_insert({item.id: item.order for item in slides}, copy.order)
            self._set(current_presentation=self._with_slides([*_renumbered(slides, plan), copy]))
        return copy
