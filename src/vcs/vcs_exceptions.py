"""Exceptions for version control operations."""

from typing import Any


class VCSError(Exception):
    """Base exception for version control operations."""

    def __init__(self, message: str, error_details: dict[str, Any] | None = None):
        """
        Initialize the exception.

        Args:
            message: Error message
            error_details: Optional dictionary with detailed error information
        """
        super().__init__(message)
        self.error_details = error_details


class InputUnavailableError(VCSError):
    """Raised when the diff to review cannot be obtained."""
