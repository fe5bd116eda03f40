"""
MarkDeck — Slide Route Handlers
================================

What:  /api/slides endpoints.
Who:   Called by markdeck.client and the editor page.

Endpoints:
    GET    /api/slides/presentation/{pid}    slides of a deck in display order
    GET    /api/slides/{id}                  one slide with its owning deck
    POST   /api/slides                       create (append, or insert at `order`)
    PUT    /api/slides/{id}                  partial content update
    DELETE /api/slides/{id}                  delete, close the gap
    PUT    /api/slides/{id}/reorder          move to `newOrder`, returns all slides
    POST   /api/slides/{id}/duplicate        copy directly after the source
    GET    /api/slides/{id}/render           slide through the Markdown Transformer

Every position-changing endpoint leaves the deck's orders at exactly 0..N-1.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from markdeck.database import get_db_session
from markdeck.schemas.common import ErrorResponse, MessageResponse
from markdeck.schemas.slide import (
    RenderedSlide,
    SlideCreate,
    SlideDetailResponse,
    SlideReorder,
    SlideResponse,
    SlideUpdate,
)
from markdeck.services.slide_service import slide_service

router = APIRouter(prefix="/api/slides", tags=["Slides"])

_BAD_REQUEST = {400: {"description": "Invalid input", "model": ErrorResponse}}
_NOT_FOUND = {404: {"description": "Slide or presentation not found", "model": ErrorResponse}}


@router.get(
    "/presentation/{presentation_id}",
    response_model=List[SlideResponse],
    responses={**_NOT_FOUND},
    summary="List the slides of a presentation",
)
async def list_slides(
    presentation_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> List[SlideResponse]:
    return await slide_service.list_slides(db=db, presentation_id=presentation_id)


@router.get(
    "/{slide_id}",
    response_model=SlideDetailResponse,
    responses={**_NOT_FOUND},
    summary="Get a slide",
)
async def get_slide(
    slide_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> SlideDetailResponse:
    return await slide_service.get_slide(db=db, slide_id=slide_id)


@router.post(
    "",
    response_model=SlideResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**_BAD_REQUEST, **_NOT_FOUND},
    summary="Create a slide",
    description=(
        "Without `order` the slide is appended. With `order` it is inserted at "
        "that position and later slides shift up by one; positions past the end append."
    ),
)
async def create_slide(
    body: SlideCreate,
    db: AsyncSession = Depends(get_db_session),
) -> SlideResponse:
    return await slide_service.create_slide(db=db, data=body)


@router.put(
    "/{slide_id}",
    response_model=SlideResponse,
    responses={**_BAD_REQUEST, **_NOT_FOUND},
    summary="Update a slide",
)
async def update_slide(
    slide_id: UUID,
    body: SlideUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> SlideResponse:
    return await slide_service.update_slide(db=db, slide_id=slide_id, data=body)


@router.delete(
    "/{slide_id}",
    response_model=MessageResponse,
    responses={**_NOT_FOUND},
    summary="Delete a slide",
)
async def delete_slide(
    slide_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    return await slide_service.delete_slide(db=db, slide_id=slide_id)


@router.put(
    "/{slide_id}/reorder",
    response_model=List[SlideResponse],
    responses={**_BAD_REQUEST, **_NOT_FOUND},
    summary="Move a slide to a new position",
    description="Returns every slide of the presentation in its new order.",
)
async def reorder_slide(
    slide_id: UUID,
    body: SlideReorder,
    db: AsyncSession = Depends(get_db_session),
) -> List[SlideResponse]:
    return await slide_service.reorder_slide(db=db, slide_id=slide_id, data=body)


@router.post(
    "/{slide_id}/duplicate",
    response_model=SlideResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**_NOT_FOUND},
    summary="Duplicate a slide",
)
async def duplicate_slide(
    slide_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> SlideResponse:
    return await slide_service.duplicate_slide(db=db, slide_id=slide_id)


@router.get(
    "/{slide_id}/render",
    response_model=RenderedSlide,
    responses={**_NOT_FOUND},
    summary="Render a slide",
)
async def render_slide(
    slide_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> RenderedSlide:
    return await slide_service.render_slide(db=db, slide_id=slide_id)
