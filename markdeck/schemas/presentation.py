"""
MarkDeck — Presentation Request/Response Schemas
=================================================

What:  API contract for the /api/presentations endpoints.
Who:   Route handlers (validation + serialization) and markdeck.client
       (parsing responses back into typed objects).
"""

import uuid
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field

from markdeck.schemas.common import APIModel
from markdeck.schemas.slide import RenderedSlide, SlideResponse, SlideSummary


Theme = Literal["default", "dark", "minimal", "corporate", "creative"]


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class PresentationCreate(APIModel):
    """
    Body of POST /api/presentations.

    title is Optional here so that a missing title yields the service's
    "Title is required" message rather than a generic schema error.
    """
    title: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = None
    theme: Theme = "default"
    is_public: bool = False


class PresentationUpdate(APIModel):
    """Body of PUT /api/presentations/{id}. Only fields present are applied."""
    title: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = None
    theme: Optional[Theme] = None
    is_public: Optional[bool] = None


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class PresentationResponse(APIModel):
    """Full presentation with its slides in display order."""
    id: uuid.UUID
    title: str
    description: Optional[str] = None
    theme: str
    is_public: bool
    slide_count: int
    created_at: datetime
    last_modified: datetime
    slides: List[SlideResponse] = Field(default_factory=list)


class PresentationListItem(APIModel):
    """Dashboard card: presentation metadata plus a slide outline."""
    id: uuid.UUID
    title: str
    description: Optional[str] = None
    theme: str
    is_public: bool
    slide_count: int
    created_at: datetime
    last_modified: datetime
    slides: List[SlideSummary] = Field(default_factory=list)


class PresentationListResponse(APIModel):
    """
    Paginated response for GET /api/presentations.

    Offset pagination: offset = (current_page - 1) * limit,
    total_pages = ceil(total_count / limit).
    """
    presentations: List[PresentationListItem]
    total_count: int
    current_page: int
    total_pages: int


class PresentationRenderResponse(APIModel):
    """Everything the full-screen viewer needs for one deck."""
    id: uuid.UUID
    title: str
    theme: str
    slide_count: int
    slides: List[RenderedSlide]
