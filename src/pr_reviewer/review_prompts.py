"""Review modes and the system prompts sent with each."""

from enum import Enum
from typing import Dict


class ReviewMode(Enum):
    """Kind of output requested from the model."""
    REVIEW = "review"
    DESCRIPTION = "description"


class ReviewLanguage(Enum):
    """Language the model is asked to reply in."""
    ZH = "zh"
    EN = "en"

    @classmethod
    def from_code(cls, code: str | None) -> "ReviewLanguage":
        """
        Look up a language by its code.

        Unknown or missing codes fall back to Chinese.

        Args:
            code: Language code such as "zh" or "en"

        Returns:
            The matching language
        """
        try:
            return cls((code or "").strip().lower())

        except ValueError:
            return cls.ZH

    @property
    def html_lang(self) -> str:
        """Value for an HTML lang attribute."""
        return "zh-CN" if self is ReviewLanguage.ZH else "en"


_CHANGES_FORMAT_NOTE = (
    "The changes are given one file per section.  Each section starts with a "
    "'FILE: <path> [<change type>]' line, followed by unified-diff hunks where "
    "'+' marks an added line, '-' a removed line and ' ' unchanged context.  "
    "Sections are separated by a line of '=' characters."
)


PROMPTS: Dict[ReviewMode, str] = {
    ReviewMode.REVIEW: (
        "You are a senior software engineer reviewing a pull request.\n\n"
        f"{_CHANGES_FORMAT_NOTE}\n\n"
        "Review the changes and reply in Markdown with these sections:\n"
        "1. Summary: what the change does, in a few sentences.\n"
        "2. Issues: bugs, security problems, race conditions, error handling gaps "
        "and performance concerns.  For each, name the file and the relevant lines, "
        "explain the problem and suggest a fix.\n"
        "3. Suggestions: readability, naming, structure and test coverage.\n"
        "4. Verdict: approve, approve with minor changes, or request changes.\n\n"
        "Only comment on the lines that changed.  Do not invent code that is not shown."
    ),
    ReviewMode.DESCRIPTION: (
        "You are a senior software engineer writing the description of a pull request.\n\n"
        f"{_CHANGES_FORMAT_NOTE}\n\n"
        "Reply in Markdown with these sections:\n"
        "1. Title: one line describing the change.\n"
        "2. Background: why the change is needed.\n"
        "3. Changes: the main changes grouped by area, naming the files involved.\n"
        "4. Flow: where it helps, a mermaid diagram (in a ```mermaid code block) "
        "showing the changed control or data flow.\n"
        "5. Testing: how the change can be verified.\n"
        "6. Risks: anything reviewers should look at closely."
    ),
}


LANGUAGE_INSTRUCTIONS: Dict[ReviewLanguage, str] = {
    ReviewLanguage.ZH: "请用中文回复。",
    ReviewLanguage.EN: "Please respond in English.",
}


def build_system_prompt(mode: ReviewMode, language: ReviewLanguage) -> str:
    """
    Build the system prompt for a review.

    Args:
        mode: Review mode
        language: Reply language

    Returns:
        The mode prompt followed by the language instruction
    """
    return f"{PROMPTS[mode]}\n\n{LANGUAGE_INSTRUCTIONS[language]}"
