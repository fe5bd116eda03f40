"""
MarkDeck — Markdown Preview Route
==================================

What:  POST /api/markdown/render, the editor's live preview.
How:   Stateless: no database access. Always answers 200; malformed input
       comes back as a fallback node with isValid=false.
"""

from fastapi import APIRouter

from markdeck.schemas.markdown import MarkdownRenderRequest, MarkdownRenderResponse
from markdeck.services.markdown_service import markdown_service

router = APIRouter(prefix="/api/markdown", tags=["Markdown"])


@router.post(
    "/render",
    response_model=MarkdownRenderResponse,
    summary="Render markdown",
    description="Returns the extracted title, rendered node tree, HTML and validation result.",
)
async def render_markdown(body: MarkdownRenderRequest) -> MarkdownRenderResponse:
    return markdown_service.render_markdown(body.content)
