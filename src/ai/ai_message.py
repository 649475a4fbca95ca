"""Conversation message support."""

from dataclasses import dataclass

from ai.ai_message_source import AIMessageSource


@dataclass(frozen=True)
class AIMessage:
    """
    A single message sent to, or received from, a chat model.

    Messages are independent of any backend's wire format; each backend
    converts them when building its request.
    """
    source: AIMessageSource
    content: str

    @classmethod
    def system(cls, content: str) -> "AIMessage":
        """Create a system prompt message."""
        return cls(AIMessageSource.SYSTEM, content)

    @classmethod
    def user(cls, content: str) -> "AIMessage":
        """Create a user message."""
        return cls(AIMessageSource.USER, content)
