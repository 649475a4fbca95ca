"""
Types and classes for representing the AST (Abstract Syntax Tree)
of a Markdown document.
"""

from typing import Any, List


class MarkdownASTNode:
    """Base class for all Markdown AST nodes."""

    def __init__(self) -> None:
        """Initialize a node with no parent and no children."""
        self.parent: MarkdownASTNode | None = None
        self.children: List[MarkdownASTNode] = []

    def add_child(self, child: 'MarkdownASTNode') -> 'MarkdownASTNode':
        """
        Add a child node to this node.

        Args:
            child: The child node to add

        Returns:
            The added child node for method chaining
        """
        child.parent = self
        self.children.append(child)
        return child

    def accept(self, visitor: 'MarkdownASTVisitor') -> Any:
        """
        Accept a visitor to process this node.

        Args:
            visitor: The visitor to accept

        Returns:
            The result of the visitor's visit method
        """
        return visitor.visit(self)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}[{len(self.children)}]"


class MarkdownASTVisitor:
    """
    Base visitor class for Markdown AST traversal.

    Dispatches to visit_<ClassName> methods, falling back to generic_visit.
    """

    def visit(self, node: MarkdownASTNode) -> Any:
        """
        Visit a node and dispatch to the appropriate visit method.

        Args:
            node: The node to visit

        Returns:
            The result of visiting the node
        """
        method_name = f'visit_{node.__class__.__name__}'
        visitor = getattr(self, method_name, self.generic_visit)
        return visitor(node)

    def generic_visit(self, node: MarkdownASTNode) -> List[Any]:
        """
        Default visit method for nodes without specific handlers.

        Args:
            node: The node to visit

        Returns:
            A list of results from visiting each child
        """
        return [self.visit(child) for child in node.children]


class MarkdownASTDocumentNode(MarkdownASTNode):
    """Root node representing an entire document."""


class MarkdownASTParagraphNode(MarkdownASTNode):
    """Node representing a paragraph (<p>)."""


class MarkdownASTHeadingNode(MarkdownASTNode):
    """Node representing a heading (<h1> through <h6>)."""
    def __init__(self, level: int, anchor_id: str) -> None:
        """
        Initialize a heading node.

        Args:
            level: The heading level (1-6)
            anchor_id: Unique id used to link to the heading
        """
        super().__init__()
        self.level = max(1, min(6, level))
        self.anchor_id = anchor_id


class MarkdownASTBlockquoteNode(MarkdownASTNode):
    """Node representing a block quote (<blockquote>)."""


class MarkdownASTOrderedListNode(MarkdownASTNode):
    """Node representing an ordered list (<ol>)."""
    def __init__(self, indent: int = 0, start: int = 1) -> None:
        super().__init__()
        self.indent = indent
        self.start = start

        # Track whether this list should render tightly (without paragraph spacing)
        self.tight = True


class MarkdownASTUnorderedListNode(MarkdownASTNode):
    """Node representing an unordered list (<ul>)."""
    def __init__(self, indent: int = 0) -> None:
        super().__init__()
        self.indent = indent
        self.tight = True


class MarkdownASTListItemNode(MarkdownASTNode):
    """Node representing a list item (<li>)."""


class MarkdownASTTextNode(MarkdownASTNode):
    """Node representing plain text content."""
    def __init__(self, content: str) -> None:
        super().__init__()
        self.content = content


class MarkdownASTBoldNode(MarkdownASTNode):
    """Node representing bold text (<strong>)."""


class MarkdownASTEmphasisNode(MarkdownASTNode):
    """Node representing emphasized text (<em>)."""


class MarkdownASTInlineCodeNode(MarkdownASTNode):
    """Node representing inline code (<code>)."""
    def __init__(self, content: str = "") -> None:
        super().__init__()
        self.content = content


class MarkdownASTLinkNode(MarkdownASTNode):
    """Node representing a link (<a>)."""
    def __init__(self, url: str = "", title: str | None = None) -> None:
        """
        Initialize a link node.

        Args:
            url: The link URL
            title: Optional title attribute
        """
        super().__init__()
        self.url = url
        self.title = title


class MarkdownASTCodeBlockNode(MarkdownASTNode):
    """Node representing a fenced code block (<pre><code>)."""
    def __init__(self, language_name: str, content: str) -> None:
        """
        Initialize a code block node.

        Args:
            language_name: Language given after the opening fence, may be empty
            content: The code content
        """
        super().__init__()
        self.language_name = language_name
        self.content = content


class MarkdownASTTableNode(MarkdownASTNode):
    """Node representing a table (<table>)."""


class MarkdownASTTableHeaderNode(MarkdownASTNode):
    """Node representing the header row section of a table (<thead>)."""


class MarkdownASTTableBodyNode(MarkdownASTNode):
    """Node representing the body section of a table (<tbody>)."""


class MarkdownASTTableRowNode(MarkdownASTNode):
    """Node representing a table row (<tr>)."""


class MarkdownASTTableCellNode(MarkdownASTNode):
    """Node representing a table cell (<td> or <th>)."""
    def __init__(self, is_header: bool = False, alignment: str | None = None) -> None:
        """
        Initialize a table cell node.

        Args:
            is_header: Whether this is a header cell (<th>) or a data cell (<td>)
            alignment: Cell alignment ('left', 'center', 'right') or None for the default
        """
        super().__init__()
        self.is_header = is_header
        self.alignment = alignment


class MarkdownASTHorizontalRuleNode(MarkdownASTNode):
    """Node representing a horizontal rule (<hr>)."""
