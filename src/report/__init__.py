"""HTML report rendering for review output."""

from report.html_renderer import HtmlRenderer
from report.html_report_generator import HtmlReportGenerator
from report.markdown_ast_builder import MarkdownASTBuilder
from report.markdown_ast_node import (
    MarkdownASTNode, MarkdownASTVisitor, MarkdownASTDocumentNode
)
from report.report_exceptions import ReportError

__all__ = [
    # Rendering
    "HtmlRenderer",
    "HtmlReportGenerator",
    "MarkdownASTBuilder",

    # AST
    "MarkdownASTNode",
    "MarkdownASTVisitor",
    "MarkdownASTDocumentNode",

    # Errors
    "ReportError",
]
