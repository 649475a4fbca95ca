"""
Builds a Markdown AST from text.

Covers the subset of Markdown that language models use in review replies:
ATX headings, paragraphs, fenced code blocks, nested bullet and numbered
lists, block quotes, horizontal rules, pipe tables, and inline bold,
emphasis, code and links.
"""

import logging
import re
from typing import Dict, List

from report.markdown_ast_node import (
    MarkdownASTBlockquoteNode,
    MarkdownASTBoldNode,
    MarkdownASTCodeBlockNode,
    MarkdownASTDocumentNode,
    MarkdownASTEmphasisNode,
    MarkdownASTHeadingNode,
    MarkdownASTHorizontalRuleNode,
    MarkdownASTInlineCodeNode,
    MarkdownASTLinkNode,
    MarkdownASTListItemNode,
    MarkdownASTNode,
    MarkdownASTOrderedListNode,
    MarkdownASTParagraphNode,
    MarkdownASTTableBodyNode,
    MarkdownASTTableCellNode,
    MarkdownASTTableHeaderNode,
    MarkdownASTTableNode,
    MarkdownASTTableRowNode,
    MarkdownASTTextNode,
    MarkdownASTUnorderedListNode,
)


_HEADING_PATTERN = re.compile(r'^\s{0,3}(#{1,6})\s+(.*?)(?:\s+#+)?\s*$')
_FENCE_PATTERN = re.compile(r'^(\s*)(`{3,}|~{3,})\s*([^\s`]*)')
_HORIZONTAL_RULE_PATTERN = re.compile(r'^\s{0,3}([-*_])(?:\s*\1){2,}\s*$')
_UNORDERED_ITEM_PATTERN = re.compile(r'^(\s*)[-*+]\s+(.*)$')
_ORDERED_ITEM_PATTERN = re.compile(r'^(\s*)(\d{1,9})[.)]\s+(.*)$')
_BLOCKQUOTE_PATTERN = re.compile(r'^\s{0,3}>\s?(.*)$')
_TABLE_SEPARATOR_PATTERN = re.compile(r'^\s*\|?\s*:?-+:?\s*(?:\|\s*:?-+:?\s*)*\|?\s*$')
_TABLE_CELL_SPLIT_PATTERN = re.compile(r'(?<!\\)\|')

_INLINE_PATTERN = re.compile(
    r'(?P<code_fence>`+)(?P<code>.+?)(?P=code_fence)'
    r'|\*\*(?P<bold>.+?)\*\*'
    r'|__(?P<bold_underscore>.+?)__'
    r'|\*(?P<emphasis>[^*\s](?:[^*]*[^*\s])?)\*'
    r'|(?<!\w)_(?P<emphasis_underscore>[^_\s](?:[^_]*[^_\s])?)_(?!\w)'
    r'|\[(?P<link_text>[^\]]+)\]\((?P<link_url>[^)\s]+)(?:\s+"(?P<link_title>[^"]*)")?\)'
)


def _leading_spaces(line: str) -> int:
    return len(line) - len(line.lstrip(' '))


class MarkdownASTBuilder:
    """Builds an AST from Markdown text."""

    def __init__(self) -> None:
        """Initialize the builder."""
        self._logger = logging.getLogger("MarkdownASTBuilder")
        self._anchor_counts: Dict[str, int] = {}

    def build(self, text: str) -> MarkdownASTDocumentNode:
        """
        Parse Markdown text into a document AST.

        Args:
            text: Markdown text

        Returns:
            The document root node
        """
        self._anchor_counts = {}
        document = MarkdownASTDocumentNode()
        lines = text.replace('\r\n', '\n').split('\n')
        self._parse_blocks(lines, document)
        return document

    def _make_anchor(self, heading_text: str) -> str:
        """Create a unique anchor id from heading text."""
        base = re.sub(r'[^\w\- ]', '', heading_text.lower()).strip().replace(' ', '-') or "section"
        count = self._anchor_counts.get(base, 0)
        self._anchor_counts[base] = count + 1
        return base if count == 0 else f"{base}-{count}"

    def _parse_blocks(self, lines: List[str], parent: MarkdownASTNode) -> None:
        paragraph: List[str] = []

        def flush_paragraph() -> None:
            if paragraph:
                node = parent.add_child(MarkdownASTParagraphNode())
                self._parse_inline("\n".join(paragraph), node)
                paragraph.clear()

        i = 0
        while i < len(lines):
            line = lines[i]

            if not line.strip():
                flush_paragraph()
                i += 1
                continue

            fence = _FENCE_PATTERN.match(line)
            if fence:
                flush_paragraph()
                i = self._parse_code_block(lines, i, parent)
                continue

            heading = _HEADING_PATTERN.match(line)
            if heading:
                flush_paragraph()
                heading_text = heading.group(2)
                node = parent.add_child(MarkdownASTHeadingNode(len(heading.group(1)), self._make_anchor(heading_text)))
                self._parse_inline(heading_text, node)
                i += 1
                continue

            if _HORIZONTAL_RULE_PATTERN.match(line):
                flush_paragraph()
                parent.add_child(MarkdownASTHorizontalRuleNode())
                i += 1
                continue

            if _BLOCKQUOTE_PATTERN.match(line):
                flush_paragraph()
                i = self._parse_blockquote(lines, i, parent)
                continue

            if '|' in line and i + 1 < len(lines) and _TABLE_SEPARATOR_PATTERN.match(lines[i + 1]):
                flush_paragraph()
                i = self._parse_table(lines, i, parent)
                continue

            if _UNORDERED_ITEM_PATTERN.match(line) or _ORDERED_ITEM_PATTERN.match(line):
                flush_paragraph()
                i = self._parse_list(lines, i, parent)
                continue

            paragraph.append(line.strip())
            i += 1

        flush_paragraph()

    def _parse_code_block(self, lines: List[str], start: int, parent: MarkdownASTNode) -> int:
        match = _FENCE_PATTERN.match(lines[start])
        assert match is not None
        indent, fence, language_name = match.group(1), match.group(2), match.group(3)

        content: List[str] = []
        i = start + 1
        while i < len(lines):
            stripped = lines[i].strip()
            if stripped.startswith(fence) and not stripped.strip(fence[0]):
                i += 1
                break

            line = lines[i]
            content.append(line[len(indent):] if line.startswith(indent) else line.lstrip())
            i += 1

        else:
            self._logger.debug("Unterminated code fence starting at line %d", start + 1)

        parent.add_child(MarkdownASTCodeBlockNode(language_name, "\n".join(content)))
        return i

    def _parse_blockquote(self, lines: List[str], start: int, parent: MarkdownASTNode) -> int:
        quoted: List[str] = []
        i = start
        while i < len(lines):
            match = _BLOCKQUOTE_PATTERN.match(lines[i])
            if not match:
                break

            quoted.append(match.group(1))
            i += 1

        node = parent.add_child(MarkdownASTBlockquoteNode())
        self._parse_blocks(quoted, node)
        return i

    def _split_table_row(self, line: str) -> List[str]:
        row = line.strip()
        if row.startswith('|'):
            row = row[1:]

        if row.endswith('|') and not row.endswith('\\|'):
            row = row[:-1]

        return [cell.strip().replace('\\|', '|') for cell in _TABLE_CELL_SPLIT_PATTERN.split(row)]

    def _cell_alignment(self, separator: str) -> str | None:
        separator = separator.strip()
        if separator.startswith(':') and separator.endswith(':'):
            return "center"

        if separator.endswith(':'):
            return "right"

        if separator.startswith(':'):
            return "left"

        return None

    def _parse_table(self, lines: List[str], start: int, parent: MarkdownASTNode) -> int:
        headers = self._split_table_row(lines[start])
        alignments = [self._cell_alignment(cell) for cell in self._split_table_row(lines[start + 1])]

        def alignment_for(column: int) -> str | None:
            return alignments[column] if column < len(alignments) else None

        table = parent.add_child(MarkdownASTTableNode())
        header_row = table.add_child(MarkdownASTTableHeaderNode()).add_child(MarkdownASTTableRowNode())
        for column, text in enumerate(headers):
            cell = header_row.add_child(MarkdownASTTableCellNode(True, alignment_for(column)))
            self._parse_inline(text, cell)

        body = table.add_child(MarkdownASTTableBodyNode())
        i = start + 2
        while i < len(lines) and lines[i].strip() and '|' in lines[i]:
            row = body.add_child(MarkdownASTTableRowNode())
            cells = self._split_table_row(lines[i])

            # Rows are padded or cut to the header width
            cells = (cells + [""] * len(headers))[:len(headers)]
            for column, text in enumerate(cells):
                cell = row.add_child(MarkdownASTTableCellNode(False, alignment_for(column)))
                self._parse_inline(text, cell)

            i += 1

        return i

    def _parse_list(self, lines: List[str], start: int, parent: MarkdownASTNode) -> int:
        first_ordered = _ORDERED_ITEM_PATTERN.match(lines[start])
        ordered = first_ordered is not None
        pattern = _ORDERED_ITEM_PATTERN if ordered else _UNORDERED_ITEM_PATTERN
        indent = _leading_spaces(lines[start])

        list_node: MarkdownASTOrderedListNode | MarkdownASTUnorderedListNode
        if first_ordered:
            list_node = MarkdownASTOrderedListNode(indent, int(first_ordered.group(2)))

        else:
            list_node = MarkdownASTUnorderedListNode(indent)

        parent.add_child(list_node)

        i = start
        while i < len(lines):
            line = lines[i]
            if not line.strip():
                next_index = self._next_non_blank(lines, i)
                if next_index < len(lines) and self._continues_list(lines[next_index], pattern, indent):
                    list_node.tight = False
                    i = next_index
                    continue

                break

            match = pattern.match(line)
            if not match or _leading_spaces(line) != indent:
                break

            content_indent = match.start(match.lastindex or 0)
            item_lines = [match.group(match.lastindex or 0)]
            i += 1

            while i < len(lines):
                following = lines[i]
                if not following.strip():
                    next_index = self._next_non_blank(lines, i)
                    if next_index < len(lines) and _leading_spaces(lines[next_index]) > indent:
                        list_node.tight = False
                        item_lines.extend([""] * (next_index - i))
                        i = next_index
                        continue

                    break

                lead = _leading_spaces(following)
                if lead <= indent:
                    break

                item_lines.append(following[content_indent:] if lead >= content_indent else following.lstrip())
                i += 1

            item = list_node.add_child(MarkdownASTListItemNode())
            self._parse_blocks(item_lines, item)

        return i

    def _next_non_blank(self, lines: List[str], start: int) -> int:
        i = start
        while i < len(lines) and not lines[i].strip():
            i += 1

        return i

    def _continues_list(self, line: str, pattern: re.Pattern, indent: int) -> bool:
        return pattern.match(line) is not None and _leading_spaces(line) == indent

    def _parse_inline(self, text: str, parent: MarkdownASTNode) -> None:
        """
        Parse inline formatting into child nodes of parent.

        Args:
            text: Inline text
            parent: Node to add the parsed children to
        """
        position = 0
        for match in _INLINE_PATTERN.finditer(text):
            if match.start() > position:
                parent.add_child(MarkdownASTTextNode(text[position:match.start()]))

            if match.group('code') is not None:
                parent.add_child(MarkdownASTInlineCodeNode(match.group('code')))

            elif match.group('bold') is not None or match.group('bold_underscore') is not None:
                node = parent.add_child(MarkdownASTBoldNode())
                self._parse_inline(match.group('bold') or match.group('bold_underscore'), node)

            elif match.group('emphasis') is not None or match.group('emphasis_underscore') is not None:
                node = parent.add_child(MarkdownASTEmphasisNode())
                self._parse_inline(match.group('emphasis') or match.group('emphasis_underscore'), node)

            else:
                node = parent.add_child(MarkdownASTLinkNode(match.group('link_url'), match.group('link_title')))
                self._parse_inline(match.group('link_text'), node)

            position = match.end()

        if position < len(text):
            parent.add_child(MarkdownASTTextNode(text[position:]))
