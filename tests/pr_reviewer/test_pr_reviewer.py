"""Tests for the review pipeline."""

import asyncio
import os
import tempfile
from unittest.mock import AsyncMock, MagicMock, call, patch

import pytest

from ai.ai_message_source import AIMessageSource
from ai.ai_response import AIError, AIResponse
from diff import DiffSerializer
from pr_reviewer.pr_reviewer import PRReviewer, ReviewOptions
from pr_reviewer.review_exceptions import ReviewError
from pr_reviewer.review_prompts import ReviewLanguage, ReviewMode
from pr_reviewer.review_settings import OutputFormat, ReviewSettings
from vcs import GitOperator, InputUnavailableError, VCSError


SAMPLE_DIFF = """diff --git a/src/a.py b/src/a.py
index 1111111..2222222 100644
--- a/src/a.py
+++ b/src/a.py
@@ -1,2 +1,2 @@
 keep
-old
+new
"""


@pytest.fixture
def private_tmp(tmp_path, monkeypatch):
    """Send the reviewer's temporary directories to a per-test folder."""
    scratch = tmp_path / "scratch"
    scratch.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(scratch))
    return scratch


@pytest.fixture
def git():
    """A git operator returning the sample diff."""
    operator = MagicMock(spec=GitOperator)
    operator.generate_local_diff.return_value = SAMPLE_DIFF
    operator.generate_diff.return_value = SAMPLE_DIFF
    operator.current_branch.return_value = "feature/work"
    return operator


@pytest.fixture
def backend():
    """A backend that answers with a fixed review."""
    mock_backend = MagicMock()
    mock_backend.complete = AsyncMock(return_value=AIResponse(content="## Review\n\nLooks good."))
    return mock_backend


def make_reviewer(git, backend, tmp_path, output_format=OutputFormat.TXT, **option_values):
    """Create a reviewer writing into tmp_path."""
    values = {"local": True, "output": str(tmp_path / "out")}
    values.update(option_values)
    settings = ReviewSettings(api_key="sk-test", output_format=output_format)
    return PRReviewer(ReviewOptions(**values), settings, "1.0.0", git=git, backend=backend)


def leftover_work_dirs(scratch):
    return [name for name in os.listdir(scratch) if name.startswith("pr_diff-")]


class TestPRReviewerOptions:
    """Test option validation."""

    def test_requires_branch_or_local(self, git, backend):
        """Test that one of branch or local is required."""
        with pytest.raises(ValueError):
            PRReviewer(ReviewOptions(), ReviewSettings(), "1.0.0", git=git, backend=backend)

    def test_branch_and_local_exclusive(self, git, backend):
        """Test that branch and local cannot both be given."""
        with pytest.raises(ValueError):
            PRReviewer(ReviewOptions(branch="x", local=True), ReviewSettings(), "1.0.0", git=git, backend=backend)


class TestPRReviewerRun:
    """Test running a review."""

    def test_local_review_writes_text_report(self, git, backend, tmp_path, private_tmp):
        """Test a local review end to end."""
        reviewer = make_reviewer(git, backend, tmp_path)

        result = asyncio.run(reviewer.run())

        assert result == str(tmp_path / "out" / "output_review.txt")
        with open(result, 'r', encoding='utf-8') as f:
            assert f.read() == "## Review\n\nLooks good."

        assert reviewer.review_text == "## Review\n\nLooks good."
        git.generate_local_diff.assert_called_once_with()
        git.fetch_latest_changes.assert_not_called()
        assert leftover_work_dirs(private_tmp) == []

    def test_model_receives_prompt_and_changes(self, git, backend, tmp_path, private_tmp):
        """Test the messages sent to the model."""
        reviewer = make_reviewer(git, backend, tmp_path, mode=ReviewMode.DESCRIPTION, language=ReviewLanguage.EN)

        asyncio.run(reviewer.run())

        messages, conversation_settings = backend.complete.call_args.args
        assert [m.source for m in messages] == [AIMessageSource.SYSTEM, AIMessageSource.USER]
        assert messages[0].content.endswith("Please respond in English.")
        assert "FILE: src/a.py" in messages[1].content
        assert "-old" in messages[1].content
        assert "+new" in messages[1].content
        assert conversation_settings.model == "gpt-4o-mini"

    def test_changes_serialized_once(self, git, backend, tmp_path, private_tmp):
        """Test that the model gets exactly the text written to the changes file."""
        original_write = DiffSerializer.write
        written = []

        def recording_write(serializer, changes, path):
            text = original_write(serializer, changes, path)
            written.append(text)
            return text

        reviewer = make_reviewer(git, backend, tmp_path)

        original_serialize = DiffSerializer.serialize
        with patch.object(DiffSerializer, "serialize", autospec=True, side_effect=original_serialize) as serialize, \
                patch.object(DiffSerializer, "write", autospec=True, side_effect=recording_write):
            asyncio.run(reviewer.run())

        assert serialize.call_count == 1
        messages = backend.complete.call_args.args[0]
        assert written == [messages[1].content]

    def test_branch_review_order(self, git, backend, tmp_path, private_tmp):
        """Test that branch mode fetches, checks out, then diffs."""
        reviewer = make_reviewer(git, backend, tmp_path, local=False, branch="feature/x", target_branch="main")

        asyncio.run(reviewer.run())

        assert git.method_calls[:3] == [
            call.fetch_latest_changes(),
            call.checkout_branch("feature/x"),
            call.generate_diff("main"),
        ]
        git.generate_local_diff.assert_not_called()

    def test_empty_diff_returns_none(self, git, backend, tmp_path, private_tmp):
        """Test that an empty diff skips the model."""
        git.generate_local_diff.return_value = "  \n"
        reviewer = make_reviewer(git, backend, tmp_path)

        assert asyncio.run(reviewer.run()) is None
        backend.complete.assert_not_called()
        assert leftover_work_dirs(private_tmp) == []

    def test_diff_without_changes_returns_none(self, git, backend, tmp_path, private_tmp):
        """Test that output with no file changes skips the model."""
        git.generate_local_diff.return_value = "this is not a diff\n"
        reviewer = make_reviewer(git, backend, tmp_path)

        assert asyncio.run(reviewer.run()) is None
        backend.complete.assert_not_called()

    def test_both_formats(self, git, backend, tmp_path, private_tmp):
        """Test writing text and HTML reports."""
        reviewer = make_reviewer(git, backend, tmp_path, output_format=OutputFormat.BOTH)

        result = asyncio.run(reviewer.run())

        out = tmp_path / "out"
        assert result == str(out / "output_review.txt")
        assert (out / "output_review.html").exists()
        html = (out / "output_review.html").read_text(encoding='utf-8')
        assert "Branch: feature/work" in html
        assert '<h2 id="review">Review</h2>' in html

    def test_html_only_opens_browser(self, git, backend, tmp_path, private_tmp):
        """Test that an HTML report can be opened in a browser."""
        reviewer = make_reviewer(git, backend, tmp_path, output_format=OutputFormat.HTML, open_browser=True)

        with patch("pr_reviewer.pr_reviewer.webbrowser.open", return_value=True) as mock_open:
            result = asyncio.run(reviewer.run())

        assert result == str(tmp_path / "out" / "output_review.html")
        assert not (tmp_path / "out" / "output_review.txt").exists()
        mock_open.assert_called_once()
        assert mock_open.call_args.args[0].startswith("file://")

    def test_branch_label_falls_back_to_local(self, git, backend, tmp_path, private_tmp):
        """Test the HTML branch label when git cannot name the branch."""
        git.current_branch.side_effect = VCSError("detached")
        reviewer = make_reviewer(git, backend, tmp_path, output_format=OutputFormat.HTML)

        asyncio.run(reviewer.run())

        html = (tmp_path / "out" / "output_review.html").read_text(encoding='utf-8')
        assert "Branch: local" in html

    def test_default_output_folder(self, git, backend, private_tmp, tmp_path):
        """Test that reports go to a new folder that survives the run."""
        reviewer = make_reviewer(git, backend, tmp_path, output="")

        result = asyncio.run(reviewer.run())

        assert os.path.exists(result)
        assert os.path.basename(os.path.dirname(result)).startswith("pr-review-")
        assert leftover_work_dirs(private_tmp) == []

    def test_model_error(self, git, backend, tmp_path, private_tmp):
        """Test that a model failure raises ReviewError and cleans up."""
        backend.complete.return_value = AIResponse(
            content="",
            error=AIError(code="401", message="Unauthorized", details={"status": 401})
        )
        reviewer = make_reviewer(git, backend, tmp_path)

        with pytest.raises(ReviewError) as exc_info:
            asyncio.run(reviewer.run())

        assert exc_info.value.error_details["code"] == "401"
        assert not (tmp_path / "out").exists()
        assert leftover_work_dirs(private_tmp) == []

    def test_git_error_propagates(self, git, backend, tmp_path, private_tmp):
        """Test that git failures propagate and clean up."""
        git.generate_local_diff.side_effect = InputUnavailableError("no repo")
        reviewer = make_reviewer(git, backend, tmp_path)

        with pytest.raises(InputUnavailableError):
            asyncio.run(reviewer.run())

        assert leftover_work_dirs(private_tmp) == []

    def test_missing_api_key(self, git, tmp_path, private_tmp):
        """Test that a review without an API key fails clearly."""
        reviewer = PRReviewer(
            ReviewOptions(local=True, output=str(tmp_path / "out")),
            ReviewSettings(api_key=""),
            "1.0.0",
            git=git
        )

        with pytest.raises(ReviewError, match="API key"):
            asyncio.run(reviewer.run())

    def test_missing_api_key_not_needed_for_empty_diff(self, git, tmp_path, private_tmp):
        """Test that no key is needed when there is nothing to review."""
        git.generate_local_diff.return_value = ""
        reviewer = PRReviewer(ReviewOptions(local=True), ReviewSettings(api_key=""), "1.0.0", git=git)

        assert asyncio.run(reviewer.run()) is None

    def test_report_write_failure(self, git, backend, tmp_path, private_tmp):
        """Test that an unusable output folder raises ReviewError."""
        blocker = tmp_path / "blocker"
        blocker.write_text("file", encoding='utf-8')
        reviewer = make_reviewer(git, backend, tmp_path, output=str(blocker / "out"))

        with pytest.raises(ReviewError):
            asyncio.run(reviewer.run())
