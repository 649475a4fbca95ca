"""Review pipeline: git diff, parse, serialize, ask the model, write the report."""

import asyncio
from dataclasses import dataclass
import logging
import os
from pathlib import Path
import shutil
import tempfile
from typing import Any, Callable, List
import webbrowser

from ai import AIBackend, AIMessage
from ai.openai.openai_backend import OpenAIBackend
from diff import DiffParser, DiffSerializer
from pr_reviewer.review_exceptions import ReviewError
from pr_reviewer.review_prompts import ReviewLanguage, ReviewMode, build_system_prompt
from pr_reviewer.review_settings import ReviewSettings
from report import HtmlReportGenerator
from vcs import GitOperator, VCSError


@dataclass
class ReviewOptions:
    """What to review and where to put the result."""
    branch: str | None = None
    local: bool = False
    mode: ReviewMode = ReviewMode.REVIEW
    target_branch: str = "development"
    output: str = ""
    language: ReviewLanguage = ReviewLanguage.ZH
    open_browser: bool = False
    repo_path: str = "."


class PRReviewer:
    """
    Runs one review from start to finish.

    Intermediate files live in a private temporary directory that is always
    removed when the run ends.  Reports go to the output folder, which
    defaults to a new directory under the system temp location.
    """

    DIFF_FILENAME = "pr_diff.txt"
    CHANGES_FILENAME = "pr_changes_for_llm.txt"

    def __init__(
        self,
        options: ReviewOptions,
        settings: ReviewSettings,
        version: str,
        git: GitOperator | None = None,
        backend: AIBackend | None = None
    ) -> None:
        """
        Initialize the reviewer.

        Args:
            options: What to review and where to write the result
            settings: Model and output settings
            version: Tool version shown in HTML reports
            git: Git operator, created from the options if not given
            backend: AI backend, an OpenAI backend built from the settings if not given
        """
        if not options.local and not options.branch:
            raise ValueError("Either a branch or local mode must be given")

        if options.local and options.branch:
            raise ValueError("Branch and local mode are mutually exclusive")

        self._options = options
        self._settings = settings
        self._version = version
        self._git = git or GitOperator(options.repo_path, settings.remote)
        self._backend = backend
        self._parser = DiffParser()
        self._serializer = DiffSerializer()
        self._logger = logging.getLogger("PRReviewer")

        self.review_text: str | None = None

    async def _in_executor(self, func: Callable[..., Any], *args: Any) -> Any:
        return await asyncio.get_event_loop().run_in_executor(None, func, *args)

    def _write_text_sync(self, path: str, text: str) -> None:
        with open(path, 'w', encoding='utf-8') as f:
            f.write(text)

    def _get_backend(self) -> AIBackend:
        if self._backend is None:
            if not self._settings.api_key:
                raise ReviewError(
                    "An API key is required: set OPENAI_API_KEY or add api_key to the settings file"
                )

            self._backend = OpenAIBackend(self._settings.backend_settings())

        return self._backend

    async def _obtain_diff(self) -> str:
        """
        Get the raw diff for the requested review.

        Raises:
            InputUnavailableError: If git cannot produce the diff
        """
        if self._options.local:
            self._logger.info("Running in local mode, reviewing uncommitted changes")
            return await self._in_executor(self._git.generate_local_diff)

        assert self._options.branch is not None
        await self._in_executor(self._git.fetch_latest_changes)
        await self._in_executor(self._git.checkout_branch, self._options.branch)
        return await self._in_executor(self._git.generate_diff, self._options.target_branch)

    def _branch_label(self) -> str:
        if self._options.branch:
            return self._options.branch

        try:
            return self._git.current_branch()

        except VCSError as e:
            self._logger.debug("Unable to read current branch: %s", str(e))
            return "local"

    async def _ask_model(self, changes_text: str) -> str:
        """
        Send the serialized changes to the model.

        Raises:
            ReviewError: If the model request fails
        """
        backend = self._get_backend()

        try:
            conversation_settings = self._settings.conversation_settings()

        except ValueError as e:
            raise ReviewError(str(e), {"temperature": self._settings.temperature}) from e

        messages = [
            AIMessage.system(build_system_prompt(self._options.mode, self._options.language)),
            AIMessage.user(changes_text)
        ]

        self._logger.info("Sending structured diff to %s for %s", conversation_settings.model, self._options.mode.value)
        response = await backend.complete(messages, conversation_settings)
        if response.error:
            raise ReviewError(
                f"Model request failed: {response.error.message}",
                {"code": response.error.code, "details": response.error.details}
            )

        return response.content

    def _output_folder(self) -> str:
        folder = self._options.output or tempfile.mkdtemp(prefix="pr-review-")
        os.makedirs(folder, exist_ok=True)
        return folder

    async def _write_reports(self, review: str) -> List[str]:
        """
        Write the review in the configured formats.

        Returns:
            Paths written, text report first
        """
        mode = self._options.mode.value
        output_format = self._settings.output_format
        outputs: List[str] = []

        try:
            folder = self._output_folder()
            if output_format.writes_txt:
                txt_path = os.path.join(folder, f"output_{mode}.txt")
                await self._in_executor(self._write_text_sync, txt_path, review)
                self._logger.info("Text report saved to %s", txt_path)
                outputs.append(txt_path)

        except OSError as e:
            raise ReviewError(f"Failed to write report: {str(e)}", {"output": self._options.output}) from e

        if output_format.writes_html:
            generator = HtmlReportGenerator(
                branch_name=self._branch_label(),
                mode=mode,
                version=self._version,
                html_lang=self._options.language.html_lang
            )
            html_path = await generator.save_report(review, os.path.join(folder, f"output_{mode}.html"))
            outputs.append(html_path)

            if self._options.open_browser:
                self._open_in_browser(html_path)

        return outputs

    def _open_in_browser(self, path: str) -> None:
        try:
            opened = webbrowser.open(Path(path).resolve().as_uri())

        except webbrowser.Error as e:
            self._logger.warning("Could not open browser: %s", str(e))
            opened = False

        if not opened:
            self._logger.info("Open the report manually: %s", path)

    def _cleanup(self, tmp_dir: str) -> None:
        try:
            shutil.rmtree(tmp_dir)
            self._logger.debug("Cleaned up temporary files in %s", tmp_dir)

        except OSError as e:
            self._logger.error("Failed to clean up temporary files in %s: %s", tmp_dir, str(e))

    async def run(self) -> str | None:
        """
        Run the review.

        Returns:
            Path of the first report written, or None if there was nothing to review

        Raises:
            InputUnavailableError: If git cannot produce the diff
            ReviewError: If the model request fails or a report cannot be written
            DiffSerializationError: If the structured changes cannot be written
            ReportError: If the HTML report cannot be written
        """
        tmp_dir = tempfile.mkdtemp(prefix="pr_diff-")

        try:
            diff_text = await self._obtain_diff()
            if not diff_text.strip():
                self._logger.warning("No changes found, nothing to review")
                return None

            diff_path = os.path.join(tmp_dir, self.DIFF_FILENAME)
            await self._in_executor(self._write_text_sync, diff_path, diff_text)
            self._logger.info("Diff saved to %s", diff_path)

            result = self._parser.parse_with_anomalies(diff_text)
            if result.anomalies:
                self._logger.warning("Diff parsed with %d recovered problems", len(result.anomalies))

            if not result.changes:
                self._logger.warning("Diff contained no file changes, nothing to review")
                return None

            changes_path = os.path.join(tmp_dir, self.CHANGES_FILENAME)
            changes_text = await self._in_executor(self._serializer.write, result.changes, changes_path)
            self._logger.info("Structured changes for %d files saved to %s", len(result.changes), changes_path)

            self.review_text = await self._ask_model(changes_text)

            outputs = await self._write_reports(self.review_text)
            self._logger.info("Review saved to %s", outputs[0])
            return outputs[0]

        finally:
            self._cleanup(tmp_dir)
