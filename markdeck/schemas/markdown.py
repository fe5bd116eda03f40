"""
MarkDeck — Markdown Tree & Rendered Node Schemas
=================================================

What:  The two tree shapes produced by the Markdown Transformer.

    MarkdownNode   generic document tree, one node per markdown construct,
                   tagged by NodeType (before any presentational decision)
    RenderedNode   presentational element: tag name, props, children, text

Both serialize to JSON for the render endpoints and the API client.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import Field

from markdeck.schemas.common import APIModel


class NodeType(str, Enum):
    """Closed set of markdown tree node kinds."""

    ROOT = "root"
    HEADING = "heading"
    PARAGRAPH = "paragraph"
    STRONG = "strong"
    EMPHASIS = "emphasis"
    LINK = "link"
    IMAGE = "image"
    CODE = "code"
    INLINE_CODE = "inlineCode"
    LIST = "list"
    LIST_ITEM = "listItem"
    BLOCKQUOTE = "blockquote"
    TABLE = "table"
    TABLE_HEAD = "tableHead"
    TABLE_BODY = "tableBody"
    TABLE_ROW = "tableRow"
    TABLE_CELL = "tableCell"
    THEMATIC_BREAK = "thematicBreak"
    TEXT = "text"
    BREAK = "break"


class MarkdownNode(APIModel):
    """
    One node of the markdown tree.

    Only the attributes relevant to a node's type are set:
        heading     depth
        list        ordered, start
        link        url, title
        image       url, title, alt
        code        lang, value
        inlineCode  value
        text        value
        tableCell   align, header
    """
    type: NodeType
    children: List["MarkdownNode"] = Field(default_factory=list)
    value: Optional[str] = None
    depth: Optional[int] = None
    ordered: Optional[bool] = None
    start: Optional[int] = None
    url: Optional[str] = None
    title: Optional[str] = None
    alt: Optional[str] = None
    lang: Optional[str] = None
    align: Optional[str] = None
    header: Optional[bool] = None


class RenderedNode(APIModel):
    """
    One presentational element.

    element is an HTML tag name, or "#text" for a bare text node (in which
    case `text` holds the literal and there are no children).
    """
    element: str
    props: Dict[str, Any] = Field(default_factory=dict)
    children: List["RenderedNode"] = Field(default_factory=list)
    text: Optional[str] = None


MarkdownNode.model_rebuild()
RenderedNode.model_rebuild()


class MarkdownRenderRequest(APIModel):
    """Body of POST /api/markdown/render (editor live preview)."""
    content: Any = Field(default="", description="Markdown source")


class MarkdownRenderResponse(APIModel):
    title: str
    nodes: List[RenderedNode]
    html: str
    is_valid: bool
    errors: List[str] = Field(default_factory=list)
