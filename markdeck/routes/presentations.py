"""
MarkDeck — Presentation Route Handlers
=======================================

What:  /api/presentations CRUD, duplicate and render endpoints.
How:   Extracts path/query/body, delegates to PresentationService, returns
       JSON. No business logic lives here.
Who:   Called by markdeck.client and the editor/dashboard pages.

Endpoints:
    GET    /api/presentations                   paginated list (?page, ?limit, ?search)
    GET    /api/presentations/{id}              single deck with slides
    POST   /api/presentations                   create (seeds one Welcome slide)
    PUT    /api/presentations/{id}              partial update
    DELETE /api/presentations/{id}              delete deck and slides
    POST   /api/presentations/{id}/duplicate    deep copy
    GET    /api/presentations/{id}/render       all slides through the Markdown Transformer
"""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from markdeck.config import settings
from markdeck.database import get_db_session
from markdeck.schemas.common import ErrorResponse, MessageResponse
from markdeck.schemas.presentation import (
    PresentationCreate,
    PresentationListResponse,
    PresentationRenderResponse,
    PresentationResponse,
    PresentationUpdate,
)
from markdeck.services.presentation_service import presentation_service

logger = logging.getLogger(__name__)

# ── Router Configuration ──────────────────────────────────────────────────
router = APIRouter(prefix="/api/presentations", tags=["Presentations"])

_NOT_FOUND = {404: {"description": "Presentation not found", "model": ErrorResponse}}
_SERVER_ERROR = {500: {"description": "Server error", "model": ErrorResponse}}


@router.get(
    "",
    response_model=PresentationListResponse,
    responses={**_SERVER_ERROR},
    summary="List presentations",
    description=(
        "Returns one page of presentations ordered by last modification, newest "
        "first. `search` matches title or description case-insensitively."
    ),
)
async def list_presentations(
    response: Response,
    page: int = Query(default=1, ge=1, description="1-based page number"),
    limit: int = Query(
        default=settings.default_page_size,
        ge=1,
        le=settings.max_page_size,
        description="Items per page",
    ),
    search: Optional[str] = Query(default=None, description="Title/description filter"),
    db: AsyncSession = Depends(get_db_session),
) -> PresentationListResponse:
    result = await presentation_service.list_presentations(
        db=db, page=page, limit=limit, search=search
    )
    response.headers["X-Total-Count"] = str(result.total_count)
    return result


@router.get(
    "/{presentation_id}",
    response_model=PresentationResponse,
    responses={**_NOT_FOUND, **_SERVER_ERROR},
    summary="Get a presentation with its slides",
)
async def get_presentation(
    presentation_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> PresentationResponse:
    return await presentation_service.get_presentation(db=db, presentation_id=presentation_id)


@router.post(
    "",
    response_model=PresentationResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Title is required", "model": ErrorResponse}, **_SERVER_ERROR},
    summary="Create a presentation",
    description="Creates a presentation seeded with a single 'Welcome' slide at order 0.",
)
async def create_presentation(
    body: PresentationCreate,
    db: AsyncSession = Depends(get_db_session),
) -> PresentationResponse:
    return await presentation_service.create_presentation(db=db, data=body)


@router.put(
    "/{presentation_id}",
    response_model=PresentationResponse,
    responses={400: {"model": ErrorResponse}, **_NOT_FOUND, **_SERVER_ERROR},
    summary="Update presentation metadata",
)
async def update_presentation(
    presentation_id: UUID,
    body: PresentationUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> PresentationResponse:
    return await presentation_service.update_presentation(
        db=db, presentation_id=presentation_id, data=body
    )


@router.delete(
    "/{presentation_id}",
    response_model=MessageResponse,
    responses={**_NOT_FOUND, **_SERVER_ERROR},
    summary="Delete a presentation and all of its slides",
)
async def delete_presentation(
    presentation_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    return await presentation_service.delete_presentation(db=db, presentation_id=presentation_id)


@router.post(
    "/{presentation_id}/duplicate",
    response_model=PresentationResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**_NOT_FOUND, **_SERVER_ERROR},
    summary="Duplicate a presentation",
    description="Copies the deck and every slide. The copy is titled '<title> (Copy)' and is private.",
)
async def duplicate_presentation(
    presentation_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> PresentationResponse:
    return await presentation_service.duplicate_presentation(
        db=db, presentation_id=presentation_id
    )


@router.get(
    "/{presentation_id}/render",
    response_model=PresentationRenderResponse,
    responses={**_NOT_FOUND, **_SERVER_ERROR},
    summary="Render every slide of a presentation",
)
async def render_presentation(
    presentation_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> PresentationRenderResponse:
    return await presentation_service.render_presentation(db=db, presentation_id=presentation_id)
