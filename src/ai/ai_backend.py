"""Base class for AI backends."""

from abc import ABC, abstractmethod
import asyncio
from dataclasses import dataclass
import json
import logging
import ssl
from typing import Any, AsyncGenerator, Dict, List

import aiohttp
from aiohttp import ClientConnectorError, ClientError
import certifi

from ai.ai_backend_settings import AIBackendSettings
from ai.ai_conversation_settings import AIConversationSettings
from ai.ai_message import AIMessage
from ai.ai_response import AIError, AIResponse
from ai.ai_stream_response import AIStreamResponse


@dataclass
class RequestConfig:
    """Complete configuration for an API request."""
    url: str
    headers: Dict[str, str]
    data: Dict[str, Any]


class AIBackend(ABC):
    """Abstract base class for AI backends."""

    # HTTP statuses that mean "try again later"
    RETRYABLE_STATUSES = {
        429: ("rate_limit", "Rate limit exceeded"),
        503: ("overloaded", "Server is overloaded"),
    }

    @classmethod
    def get_default_url(cls) -> str:
        """
        Get the default API URL for this backend.

        Returns:
            The default URL for this backend.
        """
        return ""

    def __init__(self, settings: AIBackendSettings) -> None:
        """
        Initialize common attributes.

        Args:
            settings: API key, URL and retry settings for this backend
        """
        self._api_key = settings.api_key
        self._api_url = settings.url or self.get_default_url()
        self._max_retries = max(1, settings.max_retries)
        self._base_delay = 2
        self._logger = logging.getLogger(self.__class__.__name__)

        self._ssl_context = ssl.create_default_context(cafile=certifi.where())

    @abstractmethod
    def _build_request_config(
        self,
        messages: List[AIMessage],
        settings: AIConversationSettings
    ) -> RequestConfig:
        """
        Build complete request configuration for this backend.

        Args:
            messages: Messages to send
            settings: Conversation settings

        Returns:
            RequestConfig containing URL, headers, and request data
        """

    @abstractmethod
    def _create_stream_response_handler(self) -> AIStreamResponse:
        """Create a backend-specific stream response handler."""

    def _create_session(self) -> aiohttp.ClientSession:
        """Create the HTTP session used for one request attempt."""
        return aiohttp.ClientSession(connector=aiohttp.TCPConnector(ssl=self._ssl_context))

    def _decode_stream_line(self, line: bytes) -> tuple[bool, Dict | None]:
        """
        Decode one line of a streamed response.

        Args:
            line: Raw line from the response body

        Returns:
            Tuple of (end of stream reached, decoded JSON chunk or None if the
            line carries no chunk)

        Raises:
            json.JSONDecodeError: If the line is not valid JSON
        """
        decoded_line = line.decode('utf-8').strip()
        if not decoded_line:
            return False, None

        # Comments, event names and ids carry no payload
        if not decoded_line.startswith("data:"):
            return False, None

        payload = decoded_line[5:].strip()
        if payload == "[DONE]":
            return True, None

        return False, json.loads(payload)

    @staticmethod
    def _extract_error_message(response_message: str) -> tuple[str, Dict]:
        error_data = json.loads(response_message)
        error_msg = error_data.get("error", {})
        if not isinstance(error_msg, str):
            error_msg = error_msg.get("message", "Unknown error")

        return error_msg, error_data

    async def stream_message(
        self,
        messages: List[AIMessage],
        settings: AIConversationSettings
    ) -> AsyncGenerator[AIResponse, None]:
        """
        Send messages to the AI backend and stream the response.

        Each yielded response holds everything received so far.  Responses
        carrying an error with retries_exhausted False are progress notices
        for a retry; an error with retries_exhausted True ends the stream.

        Args:
            messages: Messages to send
            settings: Conversation settings

        Yields:
            Cumulative AIResponse updates
        """
        config = self._build_request_config(messages, settings)

        attempt = 0
        while attempt < self._max_retries:
            try:
                post_timeout = aiohttp.ClientTimeout(
                    total=None,
                    sock_connect=20,
                    sock_read=120
                )

                async with self._create_session() as session:
                    async with session.post(
                        config.url,
                        headers=config.headers,
                        json=config.data,
                        timeout=post_timeout
                    ) as response:
                        if response.status != 200:
                            response_message = await response.text()

                            try:
                                error_msg, error_data = self._extract_error_message(response_message)

                            except (json.JSONDecodeError, AttributeError) as e:
                                self._logger.warning("Unable to parse: %s (%s)", response_message, str(e))
                                error_data = {}
                                error_msg = "Unknown error"

                            self._logger.debug("API error: %d: %s", response.status, error_data)

                            if response.status in self.RETRYABLE_STATUSES and attempt < self._max_retries - 1:
                                code, reason = self.RETRYABLE_STATUSES[response.status]
                                delay = self._base_delay * (2 ** attempt)
                                yield AIResponse(
                                    content="",
                                    error=AIError(
                                        code=code,
                                        message=f"{reason}.  Retrying in {delay} seconds...",
                                        retries_exhausted=False,
                                        details=error_data
                                    )
                                )
                                await asyncio.sleep(delay)
                                attempt += 1
                                continue

                            yield AIResponse(
                                content="",
                                error=AIError(
                                    code=str(response.status),
                                    message=f"API error {response.status}: {error_msg}",
                                    retries_exhausted=True,
                                    details=error_data
                                )
                            )
                            return

                        # We got a success code.  Generate an AIResponse update for each event we see.
                        response_handler = self._create_stream_response_handler()
                        async for line in response.content:
                            try:
                                done, chunk = self._decode_stream_line(line)

                            except json.JSONDecodeError as e:
                                self._logger.exception("JSON exception: %s", e)
                                continue

                            if done:
                                break

                            if chunk is None:
                                continue

                            response_handler.update_from_chunk(chunk)
                            yield response_handler.snapshot()
                            if response_handler.error:
                                return

                        # Successfully processed response, exit retry loop
                        break

            except (ClientConnectorError, ClientError, asyncio.TimeoutError) as e:
                self._logger.warning("Network error (attempt %d/%d): %s", attempt + 1, self._max_retries, str(e))
                delay = self._base_delay * (2 ** attempt)

                if attempt < self._max_retries - 1:
                    yield AIResponse(
                        content="",
                        error=AIError(
                            code="network_error",
                            message=f"Network error: {str(e)}. Retrying in {delay} seconds...",
                            retries_exhausted=False,
                            details={"type": type(e).__name__, "attempt": attempt + 1}
                        )
                    )
                    await asyncio.sleep(delay)
                    attempt += 1
                    continue

                yield AIResponse(
                    content="",
                    error=AIError(
                        code="network_error",
                        message=f"Network error: {str(e)}",
                        retries_exhausted=True,
                        details={"type": type(e).__name__}
                    )
                )
                return

    async def complete(
        self,
        messages: List[AIMessage],
        settings: AIConversationSettings
    ) -> AIResponse:
        """
        Send messages and wait for the whole reply.

        Args:
            messages: Messages to send
            settings: Conversation settings

        Returns:
            The final response.  If the request failed, its error is set and
            marked retries_exhausted.
        """
        final = AIResponse(
            content="",
            error=AIError(code="empty_response", message="No response received", retries_exhausted=True)
        )

        async for response in self.stream_message(messages, settings):
            if response.error and not response.error.retries_exhausted:
                self._logger.warning(response.error.message)
                continue

            final = response

        if final.usage:
            self._logger.info(
                "Token usage: %d prompt, %d completion, %d total",
                final.usage.prompt_tokens,
                final.usage.completion_tokens,
                final.usage.total_tokens
            )

        return final
