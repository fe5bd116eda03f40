"""
MarkDeck — Markdown Transformer
================================

What:  Turns slide markdown into presentational output.
How:   Three stages, each usable on its own:

       1. parse_markdown_to_tree()  markdown-it-py tokens → SyntaxTreeNode
                                    → generic MarkdownNode tree (NodeType)
       2. render_tree()             depth-first walk through a fixed
                                    NodeType → renderer table, producing
                                    RenderedNode elements
       3. render_html()             RenderedNode list → escaped HTML

       plus extract_slide_title() (first heading's text) and
       validate_markdown().
Who:   Slide/presentation render endpoints, the editor preview endpoint and
       the HTML views.

Failure Semantics:
    Nothing in this module raises to its caller.
    - non-string input or a parser exception → one-node document reading
      "Error parsing markdown content"
    - empty / whitespace-only input         → one-node document reading
      "Empty slide"
    - parser node kinds outside NodeType    → logged at WARNING, skipped
    - renderer exception                    → single div.error node
    Every path logs a diagnostic.

Presentational Mapping:
    heading        h1..h6.heading-N        list       ul|ol.list.(un)ordered
    paragraph      p.paragraph             listItem   li.list-item
    strong         strong.strong           blockquote blockquote.blockquote
    emphasis       em.emphasis             table      div.table-container > table.table
    link           a.link (new tab)        tableHead  thead.table-head
    image          img.image               tableBody  tbody.table-body
    code           div.code-block > pre > code.language-X
    inlineCode     code.inline-code        tableRow   tr.table-row
    thematicBreak  hr.thematic-break       tableCell  th|td.table-cell
    text           #text                   break      br
"""

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from markdown_it import MarkdownIt
from markdown_it.tree import SyntaxTreeNode
from markupsafe import Markup, escape

from markdeck.schemas.markdown import (
    MarkdownNode,
    MarkdownRenderResponse,
    NodeType,
    RenderedNode,
)
from markdeck.schemas.slide import RenderedSlide

logger = logging.getLogger(__name__)

UNTITLED_SLIDE = "Untitled Slide"
PARSE_ERROR_TEXT = "Error parsing markdown content"
EMPTY_SLIDE_TEXT = "Empty slide"
RENDER_ERROR_TEXT = "Error rendering content"

TEXT_ELEMENT = "#text"
VOID_ELEMENTS = frozenset({"br", "hr", "img"})


def fallback_document(message: str) -> MarkdownNode:
    """A root holding a single paragraph with `message`."""
    return MarkdownNode(
        type=NodeType.ROOT,
        children=[
            MarkdownNode(
                type=NodeType.PARAGRAPH,
                children=[MarkdownNode(type=NodeType.TEXT, value=message)],
            )
        ],
    )


def _text(value: str) -> RenderedNode:
    return RenderedNode(element=TEXT_ELEMENT, text=value)


class MarkdownService:
    """
    Markdown Transformer (stateless apart from the configured parser).

    The parser is markdown-it-py's CommonMark preset with GFM tables
    enabled. Raw HTML is parsed but not rendered (html_block / html_inline
    are not NodeTypes and are skipped).
    """

    def __init__(self) -> None:
        self.markdown_processor = MarkdownIt("commonmark").enable("table")

        # SyntaxTreeNode.type → converter producing one MarkdownNode
        self._converters: Dict[str, Callable[[SyntaxTreeNode], MarkdownNode]] = {
            "heading": self._convert_heading,
            "paragraph": self._container(NodeType.PARAGRAPH),
            "strong": self._container(NodeType.STRONG),
            "em": self._container(NodeType.EMPHASIS),
            "link": self._convert_link,
            "image": self._convert_image,
            "fence": self._convert_code_block,
            "code_block": self._convert_code_block,
            "code_inline": self._convert_inline_code,
            "bullet_list": self._convert_list,
            "ordered_list": self._convert_list,
            "list_item": self._container(NodeType.LIST_ITEM),
            "blockquote": self._container(NodeType.BLOCKQUOTE),
            "table": self._container(NodeType.TABLE),
            "thead": self._container(NodeType.TABLE_HEAD),
            "tbody": self._container(NodeType.TABLE_BODY),
            "tr": self._container(NodeType.TABLE_ROW),
            "th": self._convert_table_cell,
            "td": self._convert_table_cell,
            "hr": lambda node: MarkdownNode(type=NodeType.THEMATIC_BREAK),
            "text": lambda node: MarkdownNode(type=NodeType.TEXT, value=node.content),
            "softbreak": lambda node: MarkdownNode(type=NodeType.TEXT, value="\n"),
            "hardbreak": lambda node: MarkdownNode(type=NodeType.BREAK),
        }

        # NodeType → renderer producing one RenderedNode
        self._renderers: Dict[NodeType, Callable[[MarkdownNode, List[RenderedNode]], RenderedNode]] = {
            NodeType.HEADING: self._render_heading,
            NodeType.PARAGRAPH: self._element("p", "paragraph"),
            NodeType.STRONG: self._element("strong", "strong"),
            NodeType.EMPHASIS: self._element("em", "emphasis"),
            NodeType.LINK: self._render_link,
            NodeType.IMAGE: self._render_image,
            NodeType.CODE: self._render_code,
            NodeType.INLINE_CODE: self._render_inline_code,
            NodeType.LIST: self._render_list,
            NodeType.LIST_ITEM: self._element("li", "list-item"),
            NodeType.BLOCKQUOTE: self._element("blockquote", "blockquote"),
            NodeType.TABLE: self._render_table,
            NodeType.TABLE_HEAD: self._element("thead", "table-head"),
            NodeType.TABLE_BODY: self._element("tbody", "table-body"),
            NodeType.TABLE_ROW: self._element("tr", "table-row"),
            NodeType.TABLE_CELL: self._render_table_cell,
            NodeType.THEMATIC_BREAK: self._element("hr", "thematic-break"),
            NodeType.TEXT: lambda node, children: _text(node.value or ""),
            NodeType.BREAK: lambda node, children: RenderedNode(element="br"),
        }

    # ══════════════════════════════════════════════════════════════════════
    # Stage 1: markdown → MarkdownNode tree
    # ══════════════════════════════════════════════════════════════════════

    def parse_markdown_to_tree(self, markdown: Any) -> MarkdownNode:
        """
        Parse markdown into a MarkdownNode tree rooted at NodeType.ROOT.

        Never raises; see the module docstring for the fallback documents.
        """
        if not isinstance(markdown, str):
            logger.error(
                "Error parsing markdown: expected str, got %s", type(markdown).__name__
            )
            return fallback_document(PARSE_ERROR_TEXT)

        if not markdown.strip():
            return fallback_document(EMPTY_SLIDE_TEXT)

        try:
            tokens = self.markdown_processor.parse(markdown)
            syntax_tree = SyntaxTreeNode(tokens)
            return MarkdownNode(
                type=NodeType.ROOT,
                children=self._convert_children(syntax_tree.children),
            )
        except Exception as e:
            logger.error("Error parsing markdown: %s", str(e), exc_info=True)
            return fallback_document(PARSE_ERROR_TEXT)

    def _convert(self, node: SyntaxTreeNode) -> List[MarkdownNode]:
        # "inline" is markdown-it's wrapper around a block's inline content;
        # its children belong directly to the enclosing block
        if node.type == "inline":
            return self._convert_children(node.children)

        # markdown-it-py 4 emits an empty text token before inline marks
        if node.type == "text" and not node.content:
            return []

        converter = self._converters.get(node.type)
        if converter is None:
            logger.warning("Unknown markdown node type skipped: %s", node.type)
            return []
        return [converter(node)]

    def _convert_children(self, nodes: Iterable[SyntaxTreeNode]) -> List[MarkdownNode]:
        converted: List[MarkdownNode] = []
        for child in nodes:
            for item in self._convert(child):
                # Adjacent text runs (text + softbreak + text) merge into one
                if (
                    item.type == NodeType.TEXT
                    and converted
                    and converted[-1].type == NodeType.TEXT
                ):
                    converted[-1].value = (converted[-1].value or "") + (item.value or "")
                else:
                    converted.append(item)
        return converted

    def _container(self, node_type: NodeType) -> Callable[[SyntaxTreeNode], MarkdownNode]:
        def convert(node: SyntaxTreeNode) -> MarkdownNode:
            return MarkdownNode(type=node_type, children=self._convert_children(node.children))
        return convert

    def _convert_heading(self, node: SyntaxTreeNode) -> MarkdownNode:
        return MarkdownNode(
            type=NodeType.HEADING,
            depth=int(node.tag[1:]),
            children=self._convert_children(node.children),
        )

    def _convert_link(self, node: SyntaxTreeNode) -> MarkdownNode:
        return MarkdownNode(
            type=NodeType.LINK,
            url=str(node.attrs.get("href", "")),
            title=node.attrs.get("title"),
            children=self._convert_children(node.children),
        )

    def _convert_image(self, node: SyntaxTreeNode) -> MarkdownNode:
        return MarkdownNode(
            type=NodeType.IMAGE,
            url=str(node.attrs.get("src", "")),
            title=node.attrs.get("title"),
            alt=node.content,
        )

    def _convert_code_block(self, node: SyntaxTreeNode) -> MarkdownNode:
        info = (node.info or "").strip() if node.type == "fence" else ""
        return MarkdownNode(
            type=NodeType.CODE,
            lang=info.split()[0] if info else None,
            value=node.content.rstrip("\n"),
        )

    def _convert_inline_code(self, node: SyntaxTreeNode) -> MarkdownNode:
        return MarkdownNode(type=NodeType.INLINE_CODE, value=node.content)

    def _convert_list(self, node: SyntaxTreeNode) -> MarkdownNode:
        ordered = node.type == "ordered_list"
        start = node.attrs.get("start") if ordered else None
        return MarkdownNode(
            type=NodeType.LIST,
            ordered=ordered,
            start=int(start) if start is not None else (1 if ordered else None),
            children=self._convert_children(node.children),
        )

    def _convert_table_cell(self, node: SyntaxTreeNode) -> MarkdownNode:
        # markdown-it encodes alignment as style="text-align:left"
        style = str(node.attrs.get("style", ""))
        align = style.split(":", 1)[1].strip() if ":" in style else None
        return MarkdownNode(
            type=NodeType.TABLE_CELL,
            align=align,
            header=node.type == "th",
            children=self._convert_children(node.children),
        )

    # ══════════════════════════════════════════════════════════════════════
    # Stage 2: MarkdownNode tree → RenderedNode elements
    # ══════════════════════════════════════════════════════════════════════

    def render_tree(self, tree: Optional[MarkdownNode]) -> List[RenderedNode]:
        """
        Render the children of a root node. A missing or non-root tree
        renders nothing; a renderer failure renders a single error node.
        """
        if tree is None or tree.type != NodeType.ROOT:
            return []
        try:
            return self._render_children(tree.children)
        except Exception as e:
            logger.error("Error rendering markdown tree: %s", str(e), exc_info=True)
            return [
                RenderedNode(
                    element="div",
                    props={"class": "error"},
                    children=[_text(RENDER_ERROR_TEXT)],
                )
            ]

    def _render_node(self, node: MarkdownNode) -> Optional[RenderedNode]:
        renderer = self._renderers.get(node.type)
        if renderer is None:
            logger.warning("No renderer for markdown node type: %s", node.type)
            return None
        return renderer(node, self._render_children(node.children))

    def _render_children(self, nodes: Iterable[MarkdownNode]) -> List[RenderedNode]:
        rendered = (self._render_node(child) for child in nodes)
        return [item for item in rendered if item is not None]

    @staticmethod
    def _element(tag: str, css_class: str) -> Callable[[MarkdownNode, List[RenderedNode]], RenderedNode]:
        def render(node: MarkdownNode, children: List[RenderedNode]) -> RenderedNode:
            return RenderedNode(element=tag, props={"class": css_class}, children=children)
        return render

    def _render_heading(self, node: MarkdownNode, children: List[RenderedNode]) -> RenderedNode:
        level = min(max(node.depth or 1, 1), 6)
        return RenderedNode(
            element=f"h{level}",
            props={"class": f"heading-{level}"},
            children=children,
        )

    def _render_link(self, node: MarkdownNode, children: List[RenderedNode]) -> RenderedNode:
        return RenderedNode(
            element="a",
            props={
                "class": "link",
                "href": node.url,
                "title": node.title,
                "target": "_blank",
                "rel": "noopener noreferrer",
            },
            children=children,
        )

    def _render_image(self, node: MarkdownNode, children: List[RenderedNode]) -> RenderedNode:
        return RenderedNode(
            element="img",
            props={"class": "image", "src": node.url, "alt": node.alt or "", "title": node.title},
        )

    def _render_code(self, node: MarkdownNode, children: List[RenderedNode]) -> RenderedNode:
        language = node.lang or "text"
        return RenderedNode(
            element="div",
            props={"class": "code-block", "data-language": language},
            children=[
                RenderedNode(
                    element="pre",
                    children=[
                        RenderedNode(
                            element="code",
                            props={"class": f"language-{language}"},
                            children=[_text(node.value or "")],
                        )
                    ],
                )
            ],
        )

    def _render_inline_code(self, node: MarkdownNode, children: List[RenderedNode]) -> RenderedNode:
        return RenderedNode(
            element="code",
            props={"class": "inline-code"},
            children=[_text(node.value or "")],
        )

    def _render_list(self, node: MarkdownNode, children: List[RenderedNode]) -> RenderedNode:
        if node.ordered:
            props: Dict[str, Any] = {"class": "list ordered"}
            if node.start not in (None, 1):
                props["start"] = node.start
            return RenderedNode(element="ol", props=props, children=children)
        return RenderedNode(element="ul", props={"class": "list unordered"}, children=children)

    def _render_table(self, node: MarkdownNode, children: List[RenderedNode]) -> RenderedNode:
        return RenderedNode(
            element="div",
            props={"class": "table-container"},
            children=[RenderedNode(element="table", props={"class": "table"}, children=children)],
        )

    def _render_table_cell(self, node: MarkdownNode, children: List[RenderedNode]) -> RenderedNode:
        props: Dict[str, Any] = {"class": "table-cell"}
        if node.align:
            props["style"] = f"text-align: {node.align}"
        return RenderedNode(element="th" if node.header else "td", props=props, children=children)

    # ══════════════════════════════════════════════════════════════════════
    # Stage 3: RenderedNode elements → HTML
    # ══════════════════════════════════════════════════════════════════════

    def render_html(self, nodes: Iterable[RenderedNode]) -> Markup:
        """Serialize rendered nodes to HTML. Text and attribute values are escaped."""
        return Markup("").join(self._node_html(node) for node in nodes)

    def _node_html(self, node: RenderedNode) -> Markup:
        if node.element == TEXT_ELEMENT:
            return escape(node.text or "")

        attributes = Markup("").join(
            Markup(' {}="{}"').format(name, value)
            for name, value in node.props.items()
            if value is not None
        )
        if node.element in VOID_ELEMENTS:
            return Markup("<{}{}>").format(node.element, attributes)

        inner = self.render_html(node.children)
        return Markup("<{0}{1}>{2}</{0}>").format(node.element, attributes, inner)

    # ══════════════════════════════════════════════════════════════════════
    # Convenience entry points
    # ══════════════════════════════════════════════════════════════════════

    def parse_and_render(self, markdown: Any) -> List[RenderedNode]:
        return self.render_tree(self.parse_markdown_to_tree(markdown))

    def extract_slide_title(self, markdown: Any) -> str:
        """
        Text of the first heading in `markdown`.

        Depth-first search for the first heading node; returns its first
        text child (stripped). Falls back to "Untitled Slide" for empty or
        non-string input, documents without headings, and headings without
        a text child.
        """
        if not isinstance(markdown, str) or not markdown.strip():
            return UNTITLED_SLIDE

        heading = self._find_first(self.parse_markdown_to_tree(markdown), NodeType.HEADING)
        if heading is None:
            return UNTITLED_SLIDE

        for child in heading.children:
            if child.type == NodeType.TEXT and child.value and child.value.strip():
                return child.value.strip()
        return UNTITLED_SLIDE

    def _find_first(self, node: MarkdownNode, node_type: NodeType) -> Optional[MarkdownNode]:
        if node.type == node_type:
            return node
        for child in node.children:
            found = self._find_first(child, node_type)
            if found is not None:
                return found
        return None

    def validate_markdown(self, markdown: Any) -> Tuple[bool, List[str]]:
        """Returns (is_valid, errors). Parse failures are reported, never raised."""
        if not isinstance(markdown, str):
            return False, [f"Markdown content must be a string, got {type(markdown).__name__}"]
        try:
            self.markdown_processor.parse(markdown)
        except Exception as e:
            logger.warning("Markdown validation failed: %s", str(e))
            return False, [str(e)]
        return True, []

    def render_markdown(self, markdown: Any) -> MarkdownRenderResponse:
        """Full preview payload for one markdown document."""
        nodes = self.parse_and_render(markdown)
        is_valid, errors = self.validate_markdown(markdown)
        return MarkdownRenderResponse(
            title=self.extract_slide_title(markdown),
            nodes=nodes,
            html=str(self.render_html(nodes)),
            is_valid=is_valid,
            errors=errors,
        )

    def render_slide(self, slide: Any) -> RenderedSlide:
        """Render one Slide (ORM object or SlideResponse) for the viewer."""
        nodes = self.parse_and_render(slide.content)
        return RenderedSlide(
            id=slide.id,
            title=slide.title,
            order=slide.order,
            layout=slide.layout,
            extracted_title=self.extract_slide_title(slide.content),
            notes=slide.notes,
            duration=slide.duration,
            background_color=slide.background_color,
            text_color=slide.text_color,
            nodes=nodes,
            html=str(self.render_html(nodes)),
        )


# ── Singleton Instance ────────────────────────────────────────────────────
markdown_service = MarkdownService()
