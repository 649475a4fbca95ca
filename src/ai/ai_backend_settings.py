"""Connection settings for an AI backend."""

from dataclasses import dataclass


@dataclass
class AIBackendSettings:
    """Settings for a specific AI backend."""
    api_key: str = ""
    url: str = ""
    max_retries: int = 6
