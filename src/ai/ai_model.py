"""Model capability descriptions."""

from dataclasses import dataclass


@dataclass(frozen=True)
class AIModel:
    """Capabilities of one chat model."""
    name: str
    context_window: int
    max_output_tokens: int
    supports_temperature: bool = True
