"""Accumulation of streamed chat completion chunks."""

import logging
from abc import ABC, abstractmethod
from typing import Dict

from ai.ai_response import AIError, AIResponse
from ai.ai_usage import AIUsage


class AIStreamResponse(ABC):
    """
    Collects the chunks of one streamed reply.

    Each provider subclass decodes its own chunk format in update_from_chunk
    and feeds the text, usage and errors it finds into the shared state here.
    """

    def __init__(self) -> None:
        self.content = ""
        self.model: str | None = None
        self.usage: AIUsage | None = None
        self.error: AIError | None = None
        self._chunk_count = 0
        self._logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def update_from_chunk(self, chunk: Dict) -> None:
        """
        Update internal state from one decoded server-sent event.

        Args:
            chunk: Decoded JSON payload of the event
        """

    def _append_content(self, text: str) -> None:
        self.content += text
        self._chunk_count += 1

    def _handle_error(self, error_data: Dict, error_code: str = "stream_error") -> None:
        """
        Record an error reported inside the stream.

        Errors reported mid-stream are not retried, so the error is marked as
        final.

        Args:
            error_data: Error object from the provider
            error_code: Code to report for the error
        """
        self._logger.debug("Stream reported an error after %d content chunks: %s", self._chunk_count, error_data)

        error_message = "Unknown error"
        if isinstance(error_data, dict):
            nested = error_data.get("error")
            if "message" in error_data:
                error_message = str(error_data["message"])

            elif isinstance(nested, dict) and "message" in nested:
                error_message = str(nested["message"])

        self.error = AIError(
            code=error_code,
            message=error_message,
            retries_exhausted=True,
            details=error_data
        )

    def _update_usage(self, prompt_tokens: int, completion_tokens: int, total_tokens: int) -> None:
        self.usage = AIUsage(
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=total_tokens
        )

    def snapshot(self) -> AIResponse:
        """
        Build a response from everything received so far.

        Returns:
            The error if one was reported, otherwise the content collected so far
        """
        if self.error:
            return AIResponse(content="", error=self.error, model=self.model)

        return AIResponse(content=self.content, usage=self.usage, model=self.model)
