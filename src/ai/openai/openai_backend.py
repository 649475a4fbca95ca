"""OpenAI backend implementation."""
from typing import Any, Dict, List

from ai.ai_backend import AIBackend, RequestConfig
from ai.ai_conversation_settings import AIConversationSettings
from ai.ai_message import AIMessage
from ai.ai_message_source import AIMessageSource
from ai.openai.openai_stream_response import OpenAIStreamResponse


class OpenAIBackend(AIBackend):
    """
    OpenAI chat completions backend with streaming support.

    Also works with any service exposing an OpenAI-compatible
    /v1/chat/completions endpoint, by setting a custom URL.
    """

    _ROLES = {
        AIMessageSource.SYSTEM: "system",
        AIMessageSource.USER: "user",
        AIMessageSource.AI: "assistant",
    }

    @classmethod
    def get_default_url(cls) -> str:
        """
        Get the default API URL.

        Returns:
            The default URL
        """
        return "https://api.openai.com/v1/chat/completions"

    def _format_messages_for_provider(self, messages: List[AIMessage]) -> List[Dict[str, Any]]:
        """
        Convert messages to OpenAI's format.

        Args:
            messages: Messages to convert

        Returns:
            List of role/content dictionaries
        """
        return [
            {"role": self._ROLES[message.source], "content": message.content}
            for message in messages
        ]

    def _build_request_config(
        self,
        messages: List[AIMessage],
        settings: AIConversationSettings
    ) -> RequestConfig:
        """Build complete request configuration for OpenAI."""
        data: Dict[str, Any] = {
            "model": settings.model,
            "messages": self._format_messages_for_provider(messages),
            "stream": True,
            "stream_options": {"include_usage": True}
        }

        # Only include temperature if set and supported by model
        if settings.temperature is not None and AIConversationSettings.supports_temperature(settings.model):
            data["temperature"] = settings.temperature

        self._logger.debug("stream message to %s with %d messages", settings.model, len(messages))

        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._api_key}"
        }

        return RequestConfig(
            url=self._api_url,
            headers=headers,
            data=data
        )

    def _create_stream_response_handler(self) -> OpenAIStreamResponse:
        """Create an OpenAI-specific stream response handler."""
        return OpenAIStreamResponse()
