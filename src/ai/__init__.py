"""AI framework."""

from ai.ai_backend import AIBackend, RequestConfig
from ai.ai_backend_settings import AIBackendSettings
from ai.ai_conversation_settings import AIConversationSettings
from ai.ai_message import AIMessage
from ai.ai_message_source import AIMessageSource
from ai.ai_model import AIModel
from ai.ai_response import AIError, AIResponse
from ai.ai_usage import AIUsage

__all__ = [
    "AIBackend",
    "AIBackendSettings",
    "AIConversationSettings",
    "AIError",
    "AIMessage",
    "AIMessageSource",
    "AIModel",
    "AIResponse",
    "AIUsage",
    "RequestConfig"
]
