"""Settings for running a review."""

from dataclasses import dataclass
from enum import Enum
import json
import logging
import os
from typing import Mapping

from ai import AIBackendSettings, AIConversationSettings


DEFAULT_SETTINGS_PATH = os.path.expanduser("~/.pr-reviewer/settings.json")


class OutputFormat(Enum):
    """Which report files a review writes."""
    TXT = "txt"
    HTML = "html"
    BOTH = "both"

    @property
    def writes_txt(self) -> bool:
        """True if a plain text report is written."""
        return self in (OutputFormat.TXT, OutputFormat.BOTH)

    @property
    def writes_html(self) -> bool:
        """True if an HTML report is written."""
        return self in (OutputFormat.HTML, OutputFormat.BOTH)


@dataclass
class ReviewSettings:
    """
    Model and output settings for a review.

    Values come from the settings file, then the environment, then the
    command line, each overriding the last.
    """
    model: str = AIConversationSettings.DEFAULT_MODEL
    temperature: float | None = None
    api_key: str = ""
    api_url: str = ""
    max_retries: int = 6
    output_format: OutputFormat = OutputFormat.TXT
    remote: str = "origin"

    @classmethod
    def load(cls, path: str) -> "ReviewSettings":
        """
        Load settings from a JSON file.

        Args:
            path: Path to the settings file

        Returns:
            ReviewSettings with the file's values over the defaults

        Raises:
            json.JSONDecodeError: If the file contains invalid JSON
            ValueError: If a value has the wrong type or is not recognised
        """
        settings = cls()

        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)

        if not isinstance(data, dict):
            raise ValueError(f"Settings file {path} must contain a JSON object")

        settings.model = str(data.get("model", settings.model))
        settings.api_key = str(data.get("api_key", settings.api_key))
        settings.api_url = str(data.get("api_url", settings.api_url))
        settings.remote = str(data.get("remote", settings.remote))
        settings.max_retries = int(data.get("max_retries", settings.max_retries))

        temperature = data.get("temperature")
        if temperature is not None:
            settings.temperature = float(temperature)

        output_format = data.get("format")
        if output_format is not None:
            settings.output_format = OutputFormat(output_format)

        return settings

    @classmethod
    def load_default(cls, path: str = DEFAULT_SETTINGS_PATH) -> "ReviewSettings":
        """
        Load settings from the user's settings file if there is one.

        A missing file gives the defaults.  A broken file is logged and
        ignored.

        Args:
            path: Path to the settings file

        Returns:
            ReviewSettings object
        """
        if not os.path.exists(path):
            return cls()

        try:
            return cls.load(path)

        except (OSError, json.JSONDecodeError, ValueError, TypeError) as e:
            logging.getLogger("ReviewSettings").warning("Ignoring settings file %s: %s", path, str(e))
            return cls()

    def apply_environment(self, environ: Mapping[str, str] | None = None) -> None:
        """
        Override settings from environment variables.

        OPENAI_API_KEY takes precedence over the older OPEN_API_KEY name.

        Args:
            environ: Environment to read, defaults to os.environ
        """
        env = os.environ if environ is None else environ

        api_key = env.get("OPENAI_API_KEY") or env.get("OPEN_API_KEY")
        if api_key:
            self.api_key = api_key

        api_url = env.get("OPENAI_BASE_URL")
        if api_url:
            self.api_url = self._chat_completions_url(api_url)

        model = env.get("PR_REVIEWER_MODEL")
        if model:
            self.model = model

    @staticmethod
    def _chat_completions_url(base_url: str) -> str:
        """Turn an OpenAI-style base URL into the chat completions endpoint."""
        url = base_url.rstrip("/")
        if url.endswith("/chat/completions"):
            return url

        return f"{url}/chat/completions"

    def backend_settings(self) -> AIBackendSettings:
        """Connection settings for the AI backend."""
        return AIBackendSettings(api_key=self.api_key, url=self.api_url, max_retries=self.max_retries)

    def conversation_settings(self) -> AIConversationSettings:
        """
        Request settings for the AI backend.

        Raises:
            ValueError: If the temperature is out of range
        """
        return AIConversationSettings(model=self.model, temperature=self.temperature)
