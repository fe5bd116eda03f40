"""
MarkDeck — Slide Request/Response Schemas
==========================================

What:  API contract for the /api/slides endpoints.
How:   Request models are permissive about *presence* of required fields
       (title, presentationId, newOrder) so that the service layer can answer
       with the exact 400 messages clients expect; everything else (enums,
       colour patterns, lengths) is validated here.
"""

import uuid
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field

from markdeck.schemas.common import APIModel
from markdeck.schemas.markdown import RenderedNode


HEX_COLOR_PATTERN = r"^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$"

Layout = Literal[
    "title-content",
    "title-only",
    "content-only",
    "two-column",
    "full-image",
    "code-focus",
]


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class SlideCreate(APIModel):
    """
    Body of POST /api/slides.

    order: omitted → append at the end; given → insert at that position,
           shifting later slides up by one.
    """
    presentation_id: Optional[uuid.UUID] = None
    title: Optional[str] = Field(default=None, max_length=255)
    content: str = ""
    layout: Layout = "title-content"
    order: Optional[int] = None
    notes: Optional[str] = ""
    duration: Optional[int] = Field(default=None, ge=0, description="Seconds")
    background_color: Optional[str] = Field(default=None, pattern=HEX_COLOR_PATTERN)
    text_color: Optional[str] = Field(default=None, pattern=HEX_COLOR_PATTERN)


class SlideUpdate(APIModel):
    """
    Body of PUT /api/slides/{id}. Only fields present in the body are applied;
    `order` is changed through the reorder endpoint instead.
    """
    title: Optional[str] = Field(default=None, max_length=255)
    content: Optional[str] = None
    layout: Optional[Layout] = None
    notes: Optional[str] = None
    duration: Optional[int] = Field(default=None, ge=0)
    background_color: Optional[str] = Field(default=None, pattern=HEX_COLOR_PATTERN)
    text_color: Optional[str] = Field(default=None, pattern=HEX_COLOR_PATTERN)


class SlideReorder(APIModel):
    """Body of PUT /api/slides/{id}/reorder."""
    new_order: Optional[int] = Field(default=None, description="Target zero-based position")


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class SlideSummary(APIModel):
    """Compact slide entry embedded in presentation list items."""
    id: uuid.UUID
    title: str
    order: int


class SlideResponse(APIModel):
    """Full slide representation."""
    id: uuid.UUID
    presentation_id: uuid.UUID
    title: str
    content: str
    layout: str
    order: int
    notes: Optional[str] = None
    duration: Optional[int] = None
    background_color: Optional[str] = None
    text_color: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class SlideOwner(APIModel):
    """The presentation a slide belongs to, as embedded in GET /api/slides/{id}."""
    id: uuid.UUID
    title: str
    theme: str


class SlideDetailResponse(SlideResponse):
    presentation: SlideOwner


class RenderedSlide(APIModel):
    """A slide passed through the Markdown Transformer, as consumed by the viewer."""
    id: uuid.UUID
    title: str
    order: int
    layout: str
    extracted_title: str = Field(description="Text of the first heading, or 'Untitled Slide'")
    notes: Optional[str] = None
    duration: Optional[int] = None
    background_color: Optional[str] = None
    text_color: Optional[str] = None
    nodes: List[RenderedNode]
    html: str
