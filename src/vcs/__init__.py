"""Version control access for obtaining diffs to review."""

from vcs.git_operator import GitOperator
from vcs.vcs_exceptions import InputUnavailableError, VCSError

__all__ = [
    "GitOperator",
    "InputUnavailableError",
    "VCSError"
]
