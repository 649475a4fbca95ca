"""Exceptions raised by the review pipeline."""

from typing import Any, Dict


class ReviewError(Exception):
    """Raised when a review cannot be completed."""

    def __init__(self, message: str, error_details: Dict[str, Any] | None = None) -> None:
        """
        Initialise review error.

        Args:
            message: Error message
            error_details: Optional dictionary with additional error details
        """
        super().__init__(message)
        self.error_details = error_details or {}
