"""Generates standalone HTML review reports from Markdown."""

import asyncio
from datetime import datetime
import html
import logging
import os

from report.html_renderer import HtmlRenderer
from report.markdown_ast_builder import MarkdownASTBuilder
from report.report_exceptions import ReportError
from report.report_template import MERMAID_SCRIPT_URL, REPORT_TEMPLATE


class HtmlReportGenerator:
    """
    Converts a Markdown review into a styled HTML page.

    Fenced mermaid blocks become diagram containers rendered in the browser
    by the Mermaid script the page loads.
    """

    def __init__(
        self,
        branch_name: str = "unknown",
        mode: str = "review",
        version: str = "0.0.0",
        html_lang: str = "zh-CN"
    ) -> None:
        """
        Initialize the generator.

        Args:
            branch_name: Branch shown in the report header
            mode: Review mode shown in the report header
            version: Tool version shown in the footer
            html_lang: Value of the page's lang attribute
        """
        self.branch_name = branch_name or "unknown"
        self.mode = mode or "review"
        self.version = version
        self.html_lang = html_lang
        self._logger = logging.getLogger("HtmlReportGenerator")

    def generate_html(self, markdown: str, timestamp: datetime | None = None) -> str:
        """
        Generate a complete HTML document.

        Args:
            markdown: Markdown content to render
            timestamp: Generation time shown in the header, defaults to now

        Returns:
            The HTML document
        """
        document = MarkdownASTBuilder().build(markdown)
        content = HtmlRenderer().render(document)
        when = (timestamp or datetime.now()).strftime("%Y-%m-%d %H:%M:%S")

        return REPORT_TEMPLATE.substitute(
            html_lang=html.escape(self.html_lang, quote=True),
            branch_name=html.escape(self.branch_name, quote=True),
            mode=html.escape(self.mode, quote=True),
            timestamp=when,
            version=html.escape(self.version, quote=True),
            content=content,
            mermaid_url=MERMAID_SCRIPT_URL
        )

    def _write_report_sync(self, path: str, document: str) -> None:
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        with open(path, 'w', encoding='utf-8') as f:
            f.write(document)

    async def save_report(self, markdown: str, path: str) -> str:
        """
        Render Markdown to HTML and write it to a file.

        Args:
            markdown: Markdown content to render
            path: Destination file path

        Returns:
            The path written

        Raises:
            ReportError: If the file cannot be written
        """
        document = self.generate_html(markdown)

        try:
            await asyncio.get_event_loop().run_in_executor(None, self._write_report_sync, path, document)

        except OSError as e:
            raise ReportError(
                f"Failed to write report to {path}: {str(e)}",
                {"path": path, "error": str(e)}
            ) from e

        self._logger.info("HTML report saved to %s", path)
        return path
