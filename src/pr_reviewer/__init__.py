"""Automated pull request reviews using a language model."""

from pr_reviewer.pr_reviewer import PRReviewer, ReviewOptions
from pr_reviewer.review_exceptions import ReviewError
from pr_reviewer.review_prompts import LANGUAGE_INSTRUCTIONS, PROMPTS, ReviewLanguage, ReviewMode
from pr_reviewer.review_settings import OutputFormat, ReviewSettings

__version__ = "1.0.0"

__all__ = [
    "LANGUAGE_INSTRUCTIONS",
    "OutputFormat",
    "PROMPTS",
    "PRReviewer",
    "ReviewError",
    "ReviewLanguage",
    "ReviewMode",
    "ReviewOptions",
    "ReviewSettings",
    "__version__"
]
