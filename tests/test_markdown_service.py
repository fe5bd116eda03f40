"""
MarkDeck — Markdown Transformer Unit Tests
===========================================

What:  Tests for MarkdownService: parse → tree, tree → rendered nodes,
       HTML serialization, title extraction and the fallback paths.
"""

from unittest.mock import patch

import pytest

from markdeck.schemas.markdown import MarkdownNode, NodeType
from markdeck.services.markdown_service import (
    EMPTY_SLIDE_TEXT,
    PARSE_ERROR_TEXT,
    RENDER_ERROR_TEXT,
    UNTITLED_SLIDE,
    MarkdownService,
)


@pytest.fixture
def service():
    return MarkdownService()


def only_text(node: MarkdownNode) -> str:
    assert len(node.children) == 1
    assert node.children[0].type == NodeType.TEXT
    return node.children[0].value


class TestParse:
    """Markdown source to MarkdownNode tree."""

    def test_heading_and_paragraph(self, service):
        tree = service.parse_markdown_to_tree("# Hello\n\nWorld")
        assert tree.type == NodeType.ROOT
        heading, paragraph = tree.children
        assert heading.type == NodeType.HEADING
        assert heading.depth == 1
        assert only_text(heading) == "Hello"
        assert paragraph.type == NodeType.PARAGRAPH
        assert only_text(paragraph) == "World"

    def test_inline_marks(self, service):
        paragraph = service.parse_markdown_to_tree("**bold** and *em* and `code`").children[0]
        kinds = [child.type for child in paragraph.children]
        assert kinds == [
            NodeType.STRONG,
            NodeType.TEXT,
            NodeType.EMPHASIS,
            NodeType.TEXT,
            NodeType.INLINE_CODE,
        ]
        assert paragraph.children[4].value == "code"

    def test_no_empty_text_nodes(self, service):
        """Leading inline marks do not produce empty text nodes."""
        paragraph = service.parse_markdown_to_tree("**bold** start").children[0]
        assert [child.type for child in paragraph.children] == [NodeType.STRONG, NodeType.TEXT]
        assert paragraph.children[1].value == " start"

        rendered = service.parse_and_render("*em* then")[0]
        assert [child.element for child in rendered.children] == ["em", "#text"]

    def test_soft_breaks_merge_into_text(self, service):
        """Soft line breaks stay inside one text node."""
        paragraph = service.parse_markdown_to_tree("line one\nline two").children[0]
        assert only_text(paragraph) == "line one\nline two"

    def test_link_and_image(self, service):
        paragraph = service.parse_markdown_to_tree(
            '[site](https://example.com "Example") ![logo](/logo.png)'
        ).children[0]
        link, _, image = paragraph.children
        assert link.type == NodeType.LINK
        assert link.url == "https://example.com"
        assert link.title == "Example"
        assert only_text(link) == "site"
        assert image.type == NodeType.IMAGE
        assert image.url == "/logo.png"
        assert image.alt == "logo"

    def test_fenced_code(self, service):
        code = service.parse_markdown_to_tree("```python\nprint('hi')\n```").children[0]
        assert code.type == NodeType.CODE
        assert code.lang == "python"
        assert code.value == "print('hi')"

    def test_lists(self, service):
        tree = service.parse_markdown_to_tree("- one\n- two\n\n3. three\n4. four")
        bullets, numbered = tree.children
        assert bullets.type == NodeType.LIST and bullets.ordered is False
        assert [item.type for item in bullets.children] == [NodeType.LIST_ITEM] * 2
        assert numbered.ordered is True
        assert numbered.start == 3

    def test_table_alignment_and_header(self, service):
        table = service.parse_markdown_to_tree(
            "| Name | Score |\n| :--- | ---: |\n| Ada | 10 |"
        ).children[0]
        assert table.type == NodeType.TABLE
        head, body = table.children
        assert head.type == NodeType.TABLE_HEAD
        assert body.type == NodeType.TABLE_BODY
        header_cells = head.children[0].children
        assert [cell.header for cell in header_cells] == [True, True]
        assert [cell.align for cell in header_cells] == ["left", "right"]
        assert body.children[0].children[0].header is False

    def test_blockquote_and_rule(self, service):
        quote, rule = service.parse_markdown_to_tree("> quoted\n\n---").children
        assert quote.type == NodeType.BLOCKQUOTE
        assert rule.type == NodeType.THEMATIC_BREAK

    def test_raw_html_is_skipped(self, service):
        """Raw HTML blocks produce no node."""
        tree = service.parse_markdown_to_tree("<div>raw</div>\n\n# Title")
        assert [child.type for child in tree.children] == [NodeType.HEADING]

    def test_empty_input_gives_placeholder(self, service):
        for content in ("", "   \n\t"):
            tree = service.parse_markdown_to_tree(content)
            assert len(tree.children) == 1
            assert only_text(tree.children[0]) == EMPTY_SLIDE_TEXT

    @pytest.mark.parametrize("content", [None, 42, ["# list"]])
    def test_non_string_gives_parse_error_node(self, service, content):
        tree = service.parse_markdown_to_tree(content)
        assert len(tree.children) == 1
        assert only_text(tree.children[0]) == PARSE_ERROR_TEXT

    def test_parser_exception_gives_parse_error_node(self, service):
        with patch.object(service.markdown_processor, "parse", side_effect=RuntimeError("boom")):
            tree = service.parse_markdown_to_tree("# Hi")
        assert only_text(tree.children[0]) == PARSE_ERROR_TEXT


class TestRender:
    """MarkdownNode tree to RenderedNode elements."""

    def test_element_mapping(self, service):
        nodes = service.parse_and_render("## Sub\n\nText with [a link](https://x.io)")
        heading, paragraph = nodes
        assert heading.element == "h2"
        assert heading.props["class"] == "heading-2"
        assert paragraph.element == "p"
        link = paragraph.children[1]
        assert link.element == "a"
        assert link.props["href"] == "https://x.io"
        assert link.props["target"] == "_blank"
        assert link.props["rel"] == "noopener noreferrer"

    def test_code_block_structure(self, service):
        block = service.parse_and_render("```js\nlet x = 1\n```")[0]
        assert block.element == "div"
        assert block.props["class"] == "code-block"
        pre = block.children[0]
        code = pre.children[0]
        assert (pre.element, code.element) == ("pre", "code")
        assert code.props["class"] == "language-js"
        assert code.children[0].text == "let x = 1"

    def test_table_is_wrapped(self, service):
        wrapper = service.parse_and_render("| a |\n| - |\n| b |")[0]
        assert wrapper.props["class"] == "table-container"
        assert wrapper.children[0].element == "table"

    def test_unknown_node_type_is_skipped(self, service):
        tree = service.parse_markdown_to_tree("# Kept")
        service._renderers.pop(NodeType.HEADING)
        assert service.render_tree(tree) == []

    def test_renderer_failure_gives_error_node(self, service):
        """A renderer exception replaces the output with one error node."""
        tree = service.parse_markdown_to_tree("Some text")

        def explode(node, children):
            raise RuntimeError("renderer bug")

        service._renderers[NodeType.PARAGRAPH] = explode
        nodes = service.render_tree(tree)
        assert len(nodes) == 1
        assert nodes[0].props["class"] == "error"
        assert nodes[0].children[0].text == RENDER_ERROR_TEXT

    def test_non_root_renders_nothing(self, service):
        assert service.render_tree(None) == []
        assert service.render_tree(MarkdownNode(type=NodeType.PARAGRAPH)) == []


class TestHtml:
    """RenderedNode serialization."""

    def test_serializes_and_escapes(self, service):
        """Text is escaped; raw HTML never reaches the output."""
        html = service.render_html(service.parse_and_render("# A & B\n\nText <script>x</script> **hi**"))
        assert '<h1 class="heading-1">A &amp; B</h1>' in html
        assert "<script>" not in html
        assert '<strong class="strong">hi</strong>' in html

    def test_void_elements(self, service):
        html = str(service.render_html(service.parse_and_render("one  \ntwo\n\n---")))
        assert "<br>" in html
        assert '<hr class="thematic-break">' in html
        assert "</br>" not in html


class TestTitleAndValidation:
    """Title extraction, validation and the preview payload."""

    @pytest.mark.parametrize(
        "content, expected",
        [
            ("# Intro\n\nBody", "Intro"),
            ("Body first\n\n## Second level", "Second level"),
            ("No heading at all", UNTITLED_SLIDE),
            ("", UNTITLED_SLIDE),
            (None, UNTITLED_SLIDE),
            ("# **Bold only**", UNTITLED_SLIDE),
            ("# First\n\n# Second", "First"),
        ],
    )
    def test_extract_slide_title(self, service, content, expected):
        assert service.extract_slide_title(content) == expected

    def test_validate_markdown(self, service):
        assert service.validate_markdown("# ok") == (True, [])
        is_valid, errors = service.validate_markdown(123)
        assert is_valid is False
        assert errors

    def test_render_markdown_payload(self, service):
        result = service.render_markdown("# Deck\n\nHello")
        assert result.title == "Deck"
        assert result.is_valid is True
        assert result.html.startswith('<h1 class="heading-1">Deck</h1>')
        assert [node.element for node in result.nodes] == ["h1", "p"]
