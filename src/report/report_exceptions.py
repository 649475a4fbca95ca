"""Exceptions raised while producing review reports."""

from typing import Any, Dict


class ReportError(Exception):
    """Base exception for report errors."""

    def __init__(self, message: str, error_details: Dict[str, Any] | None = None) -> None:
        """
        Initialise report error.

        Args:
            message: Error message
            error_details: Optional dictionary with additional error details
        """
        super().__init__(message)
        self.error_details = error_details or {}
