"""Message sources."""

from enum import Enum


class AIMessageSource(Enum):
    """Enumeration of possible message sources."""
    SYSTEM = "system"
    USER = "user"
    AI = "ai"
