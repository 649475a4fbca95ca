"""
Visitor that renders a Markdown AST as an HTML fragment.
"""
import html
from typing import List

from report.markdown_ast_node import (
    MarkdownASTVisitor, MarkdownASTNode, MarkdownASTDocumentNode, MarkdownASTParagraphNode,
    MarkdownASTHeadingNode, MarkdownASTBlockquoteNode, MarkdownASTOrderedListNode,
    MarkdownASTUnorderedListNode, MarkdownASTListItemNode, MarkdownASTTextNode, MarkdownASTBoldNode,
    MarkdownASTEmphasisNode, MarkdownASTInlineCodeNode, MarkdownASTLinkNode, MarkdownASTCodeBlockNode,
    MarkdownASTTableNode, MarkdownASTTableHeaderNode, MarkdownASTTableBodyNode, MarkdownASTTableRowNode,
    MarkdownASTTableCellNode, MarkdownASTHorizontalRuleNode
)


_UNSAFE_URL_SCHEMES = ("javascript:", "vbscript:", "data:")


class HtmlRenderer(MarkdownASTVisitor):
    """Visitor that renders each node to an HTML string."""

    def render(self, document: MarkdownASTDocumentNode) -> str:
        """
        Render a document to HTML.

        Args:
            document: The document root node

        Returns:
            HTML fragment for the document body
        """
        return self.visit(document)

    def _render_children(self, node: MarkdownASTNode, separator: str = "") -> str:
        return separator.join(self.visit(child) for child in node.children)

    def generic_visit(self, node: MarkdownASTNode) -> str:  # type: ignore[override]
        return self._render_children(node)

    def visit_MarkdownASTDocumentNode(self, node: MarkdownASTDocumentNode) -> str:  # pylint: disable=invalid-name
        return self._render_children(node, "\n")

    def visit_MarkdownASTParagraphNode(self, node: MarkdownASTParagraphNode) -> str:  # pylint: disable=invalid-name
        """
        Render a paragraph.

        Paragraphs directly inside an item of a tight list are rendered without
        the <p> wrapper so the list keeps its compact spacing.
        """
        content = self._render_children(node)
        item = node.parent
        if isinstance(item, MarkdownASTListItemNode):
            owner = item.parent
            if isinstance(owner, (MarkdownASTOrderedListNode, MarkdownASTUnorderedListNode)) and owner.tight:
                return content

        return f"<p>{content}</p>"

    def visit_MarkdownASTHeadingNode(self, node: MarkdownASTHeadingNode) -> str:  # pylint: disable=invalid-name
        anchor = html.escape(node.anchor_id, quote=True)
        return f'<h{node.level} id="{anchor}">{self._render_children(node)}</h{node.level}>'

    def visit_MarkdownASTBlockquoteNode(self, node: MarkdownASTBlockquoteNode) -> str:  # pylint: disable=invalid-name
        inner = self._render_children(node, "\n")
        return f"<blockquote>\n{inner}\n</blockquote>"

    def visit_MarkdownASTOrderedListNode(self, node: MarkdownASTOrderedListNode) -> str:  # pylint: disable=invalid-name
        start = f' start="{node.start}"' if node.start != 1 else ""
        inner = self._render_children(node, "\n")
        return f"<ol{start}>\n{inner}\n</ol>"

    def visit_MarkdownASTUnorderedListNode(self, node: MarkdownASTUnorderedListNode) -> str:  # pylint: disable=invalid-name
        inner = self._render_children(node, "\n")
        return f"<ul>\n{inner}\n</ul>"

    def visit_MarkdownASTListItemNode(self, node: MarkdownASTListItemNode) -> str:  # pylint: disable=invalid-name
        parts: List[str] = [self.visit(child) for child in node.children]
        return "<li>" + "\n".join(parts) + "</li>"

    def visit_MarkdownASTTextNode(self, node: MarkdownASTTextNode) -> str:  # pylint: disable=invalid-name
        return html.escape(node.content, quote=False)

    def visit_MarkdownASTBoldNode(self, node: MarkdownASTBoldNode) -> str:  # pylint: disable=invalid-name
        return f"<strong>{self._render_children(node)}</strong>"

    def visit_MarkdownASTEmphasisNode(self, node: MarkdownASTEmphasisNode) -> str:  # pylint: disable=invalid-name
        return f"<em>{self._render_children(node)}</em>"

    def visit_MarkdownASTInlineCodeNode(self, node: MarkdownASTInlineCodeNode) -> str:  # pylint: disable=invalid-name
        return f"<code>{html.escape(node.content, quote=False)}</code>"

    def visit_MarkdownASTLinkNode(self, node: MarkdownASTLinkNode) -> str:  # pylint: disable=invalid-name
        """
        Render a link.

        URLs using a script-capable scheme are replaced with "#".
        """
        url = node.url
        if url.strip().lower().startswith(_UNSAFE_URL_SCHEMES):
            url = "#"

        title = f' title="{html.escape(node.title, quote=True)}"' if node.title else ""
        return f'<a href="{html.escape(url, quote=True)}"{title}>{self._render_children(node)}</a>'

    def visit_MarkdownASTCodeBlockNode(self, node: MarkdownASTCodeBlockNode) -> str:  # pylint: disable=invalid-name
        """
        Render a fenced code block.

        Mermaid blocks become diagram containers that the Mermaid script
        in the page template renders client-side.
        """
        content = html.escape(node.content, quote=False)
        language = node.language_name.lower()
        if language == "mermaid":
            return f'<div class="mermaid">\n{content}\n</div>'

        if language:
            return f'<pre><code class="language-{html.escape(language, quote=True)}">{content}</code></pre>'

        return f"<pre><code>{content}</code></pre>"

    def visit_MarkdownASTTableNode(self, node: MarkdownASTTableNode) -> str:  # pylint: disable=invalid-name
        inner = self._render_children(node, "\n")
        return f"<table>\n{inner}\n</table>"

    def visit_MarkdownASTTableHeaderNode(self, node: MarkdownASTTableHeaderNode) -> str:  # pylint: disable=invalid-name
        inner = self._render_children(node, "\n")
        return f"<thead>\n{inner}\n</thead>"

    def visit_MarkdownASTTableBodyNode(self, node: MarkdownASTTableBodyNode) -> str:  # pylint: disable=invalid-name
        inner = self._render_children(node, "\n")
        return f"<tbody>\n{inner}\n</tbody>"

    def visit_MarkdownASTTableRowNode(self, node: MarkdownASTTableRowNode) -> str:  # pylint: disable=invalid-name
        return f"<tr>{self._render_children(node)}</tr>"

    def visit_MarkdownASTTableCellNode(self, node: MarkdownASTTableCellNode) -> str:  # pylint: disable=invalid-name
        tag = "th" if node.is_header else "td"
        style = f' style="text-align: {node.alignment}"' if node.alignment else ""
        return f"<{tag}{style}>{self._render_children(node)}</{tag}>"

    def visit_MarkdownASTHorizontalRuleNode(self, node: MarkdownASTHorizontalRuleNode) -> str:  # pylint: disable=invalid-name
        return "<hr>"
