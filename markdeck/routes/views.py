"""
MarkDeck — HTML Views
======================

What:  Server-rendered pages: dashboard, editor and full-screen viewer.
How:   Jinja2 templates under markdeck/templates, fed by the same services
       as the JSON API. Unknown presentations render the HTML 404 page
       instead of the JSON error body.

Pages:
    GET /                                 dashboard (?search, ?page)
    GET /presentations/{id}/edit          slide list + preview of ?slide=N
    GET /presentations/{id}/view          viewer at ?slide=N (clamped to the deck)
"""

import logging
from pathlib import Path
from typing import Any, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from fastapi.responses import HTMLResponse
from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup
from sqlalchemy.ext.asyncio import AsyncSession

from markdeck.database import get_db_session
from markdeck.exceptions import NotFoundError
from markdeck.services.markdown_service import markdown_service
from markdeck.services.presentation_service import presentation_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Views"], include_in_schema=False)

TEMPLATES_DIR = Path(__file__).resolve().parents[1] / "templates"
env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)), autoescape=select_autoescape(["html"])
)


def render_page(template: str, status_code: int = 200, **context: Any) -> HTMLResponse:
    html = env.get_template(template).render(**context)
    return HTMLResponse(content=html, status_code=status_code)


def not_found_page(exc: NotFoundError) -> HTMLResponse:
    logger.info("View 404: %s", exc.message)
    return render_page("not_found.html", status_code=404, message=exc.message)


def clamp_index(index: Optional[int], count: int) -> int:
    """Keeps a slide index inside 0..count-1 (0 for an empty deck)."""
    if not index or count == 0:
        return 0
    return min(max(index, 0), count - 1)


@router.get("/", response_class=HTMLResponse)
async def dashboard(
    search: Optional[str] = Query(default=None),
    page: int = Query(default=1, ge=1),
    db: AsyncSession = Depends(get_db_session),
) -> HTMLResponse:
    listing = await presentation_service.list_presentations(db=db, page=page, search=search)
    return render_page("dashboard.html", listing=listing, search=search or "")


@router.get("/presentations/{presentation_id}/edit", response_class=HTMLResponse)
async def editor(
    presentation_id: UUID,
    slide: Optional[int] = Query(default=None),
    db: AsyncSession = Depends(get_db_session),
) -> HTMLResponse:
    try:
        presentation = await presentation_service.get_presentation(db=db, presentation_id=presentation_id)
    except NotFoundError as e:
        return not_found_page(e)

    index = clamp_index(slide, len(presentation.slides))
    selected = presentation.slides[index] if presentation.slides else None
    preview = markdown_service.render_slide(selected) if selected else None
    return render_page(
        "editor.html",
        presentation=presentation,
        selected=selected,
        selected_index=index,
        preview_html=Markup(preview.html) if preview else None,
    )


@router.get("/presentations/{presentation_id}/view", response_class=HTMLResponse)
async def viewer(
    presentation_id: UUID,
    slide: Optional[int] = Query(default=None),
    db: AsyncSession = Depends(get_db_session),
) -> HTMLResponse:
    try:
        deck = await presentation_service.render_presentation(db=db, presentation_id=presentation_id)
    except NotFoundError as e:
        return not_found_page(e)

    index = clamp_index(slide, len(deck.slides))
    current = deck.slides[index] if deck.slides else None
    return render_page(
        "viewer.html",
        deck=deck,
        current=current,
        current_html=Markup(current.html) if current else None,
        index=index,
        has_previous=index > 0,
        has_next=index < len(deck.slides) - 1,
    )
