"""Tests for the Markdown AST builder."""

from report.markdown_ast_builder import MarkdownASTBuilder
from report.markdown_ast_node import (
    MarkdownASTBlockquoteNode,
    MarkdownASTBoldNode,
    MarkdownASTCodeBlockNode,
    MarkdownASTEmphasisNode,
    MarkdownASTHeadingNode,
    MarkdownASTHorizontalRuleNode,
    MarkdownASTInlineCodeNode,
    MarkdownASTLinkNode,
    MarkdownASTListItemNode,
    MarkdownASTOrderedListNode,
    MarkdownASTParagraphNode,
    MarkdownASTTableNode,
    MarkdownASTTextNode,
    MarkdownASTUnorderedListNode,
)


def build(text):
    """Build a document and return its top-level children."""
    return MarkdownASTBuilder().build(text).children


class TestBlocks:
    """Test block-level parsing."""

    def test_empty_document(self):
        """Test that empty text gives an empty document."""
        assert build("") == []

    def test_headings(self):
        """Test heading levels and anchors."""
        children = build("# Summary\n\n### Details ###\n")

        assert len(children) == 2
        assert isinstance(children[0], MarkdownASTHeadingNode)
        assert children[0].level == 1
        assert children[0].anchor_id == "summary"
        assert children[1].level == 3
        assert children[1].children[0].content == "Details"

    def test_duplicate_heading_anchors_are_unique(self):
        """Test that repeated headings get distinct anchors."""
        children = build("## Issues\n## Issues\n## Issues\n")
        assert [child.anchor_id for child in children] == ["issues", "issues-1", "issues-2"]

    def test_paragraph_lines_joined(self):
        """Test that consecutive lines form one paragraph."""
        children = build("first line\nsecond line\n\nnext paragraph")

        assert len(children) == 2
        assert all(isinstance(child, MarkdownASTParagraphNode) for child in children)
        assert children[0].children[0].content == "first line\nsecond line"

    def test_fenced_code_block(self):
        """Test a fenced code block keeps its content verbatim."""
        children = build("```python\ndef f():\n    return '**not bold**'\n```\nafter")

        code = children[0]
        assert isinstance(code, MarkdownASTCodeBlockNode)
        assert code.language_name == "python"
        assert code.content == "def f():\n    return '**not bold**'"
        assert isinstance(children[1], MarkdownASTParagraphNode)

    def test_tilde_fence_and_unterminated_fence(self):
        """Test tilde fences and a fence left open to the end."""
        children = build("~~~\nraw\n~~~\n```mermaid\ngraph TD\nA-->B")

        assert children[0].language_name == ""
        assert children[0].content == "raw"
        assert children[1].language_name == "mermaid"
        assert children[1].content == "graph TD\nA-->B"

    def test_horizontal_rule(self):
        """Test horizontal rules."""
        children = build("above\n\n---\n\nbelow")
        assert isinstance(children[1], MarkdownASTHorizontalRuleNode)

    def test_blockquote(self):
        """Test a block quote containing a paragraph and a list."""
        children = build("> Note:\n> - one\n> - two\n")

        quote = children[0]
        assert isinstance(quote, MarkdownASTBlockquoteNode)
        assert isinstance(quote.children[0], MarkdownASTParagraphNode)
        assert isinstance(quote.children[1], MarkdownASTUnorderedListNode)


class TestLists:
    """Test list parsing."""

    def test_unordered_list(self):
        """Test a simple bullet list."""
        children = build("- alpha\n- beta\n* gamma\n")

        assert len(children) == 1
        items = children[0].children
        assert isinstance(children[0], MarkdownASTUnorderedListNode)
        assert len(items) == 3
        assert all(isinstance(item, MarkdownASTListItemNode) for item in items)
        assert children[0].tight is True

    def test_ordered_list_start(self):
        """Test an ordered list keeps its starting number."""
        children = build("3. third\n4. fourth\n")

        assert isinstance(children[0], MarkdownASTOrderedListNode)
        assert children[0].start == 3
        assert len(children[0].children) == 2

    def test_nested_list(self):
        """Test that indented items form a nested list."""
        children = build("1. Summary\n   - point one\n   - point two\n2. Issues\n")

        outer = children[0]
        assert len(outer.children) == 2
        first_item = outer.children[0]
        assert isinstance(first_item.children[0], MarkdownASTParagraphNode)
        nested = first_item.children[1]
        assert isinstance(nested, MarkdownASTUnorderedListNode)
        assert len(nested.children) == 2

    def test_loose_list(self):
        """Test that blank lines between items make the list loose."""
        children = build("- one\n\n- two\n")

        assert len(children) == 1
        assert children[0].tight is False
        assert len(children[0].children) == 2

    def test_list_ends_at_paragraph(self):
        """Test that an unindented paragraph after a blank line ends the list."""
        children = build("- one\n\nplain text\n")

        assert isinstance(children[0], MarkdownASTUnorderedListNode)
        assert isinstance(children[1], MarkdownASTParagraphNode)


class TestTables:
    """Test pipe table parsing."""

    def test_table(self):
        """Test a table with alignment and escaped pipes."""
        children = build("| File | Risk |\n|:-----|:----:|\n| `a.py` | high \\| urgent |\n| b.py |\n")

        table = children[0]
        assert isinstance(table, MarkdownASTTableNode)
        header, body = table.children
        header_cells = header.children[0].children
        assert [cell.is_header for cell in header_cells] == [True, True]
        assert [cell.alignment for cell in header_cells] == ["left", "center"]

        rows = body.children
        assert len(rows) == 2
        assert isinstance(rows[0].children[0].children[0], MarkdownASTInlineCodeNode)
        assert rows[0].children[1].children[0].content == "high | urgent"

        # Short rows are padded to the header width
        assert len(rows[1].children) == 2


class TestInline:
    """Test inline formatting."""

    def test_bold_emphasis_code(self):
        """Test the inline node types."""
        paragraph = build("Use **bold**, *em*, _also em_ and `code`.")[0]
        kinds = [type(child) for child in paragraph.children]

        assert MarkdownASTBoldNode in kinds
        assert kinds.count(MarkdownASTEmphasisNode) == 2
        assert MarkdownASTInlineCodeNode in kinds

    def test_nested_emphasis_in_bold(self):
        """Test emphasis inside bold."""
        bold = build("**very *important***")[0].children[0]
        assert isinstance(bold, MarkdownASTBoldNode)

    def test_link_with_title(self):
        """Test a link with a title."""
        link = build('See [the docs](https://example.com/docs "Docs") now')[0].children[1]

        assert isinstance(link, MarkdownASTLinkNode)
        assert link.url == "https://example.com/docs"
        assert link.title == "Docs"
        assert link.children[0].content == "the docs"

    def test_underscores_inside_words_are_text(self):
        """Test that snake_case names are not emphasis."""
        paragraph = build("call some_function_name here")[0]
        assert len(paragraph.children) == 1
        assert isinstance(paragraph.children[0], MarkdownASTTextNode)

    def test_code_span_protects_markup(self):
        """Test that markup inside a code span is literal."""
        code = build("`**x**`")[0].children[0]
        assert isinstance(code, MarkdownASTInlineCodeNode)
        assert code.content == "**x**"
