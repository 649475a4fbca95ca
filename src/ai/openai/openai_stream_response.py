"""Handles streaming response from OpenAI API."""

from typing import Dict

from ai.ai_stream_response import AIStreamResponse


class OpenAIStreamResponse(AIStreamResponse):
    """Handles streaming response from OpenAI API."""

    def update_from_chunk(self, chunk: Dict) -> None:
        """
        Update from a response chunk.

        Args:
            chunk: Response chunk from OpenAI API
        """
        if "error" in chunk:
            error = chunk["error"]
            code = "stream_error"
            if isinstance(error, dict):
                code = error.get("code") or error.get("type") or code

            self._handle_error(error, str(code))
            return

        if chunk.get("model"):
            self.model = chunk["model"]

        usage = chunk.get("usage")
        if usage:
            self._update_usage(
                prompt_tokens=usage.get("prompt_tokens", 0),
                completion_tokens=usage.get("completion_tokens", 0),
                total_tokens=usage.get("total_tokens", 0)
            )

        choices = chunk.get("choices")
        if not choices:
            return

        delta = choices[0].get("delta", {})
        new_content = delta.get("content")
        if new_content:
            self._append_content(new_content)
