"""Settings for a single request to a chat model."""

from typing import Dict, List

from ai.ai_model import AIModel


class AIConversationSettings:
    """Data class for conversation settings."""

    MODELS: Dict[str, AIModel] = {
        "gpt-4o-mini": AIModel(
            name="gpt-4o-mini",
            context_window=128000,
            max_output_tokens=16384
        ),
        "gpt-4o": AIModel(
            name="gpt-4o",
            context_window=128000,
            max_output_tokens=16384
        ),
        "gpt-4.1": AIModel(
            name="gpt-4.1",
            context_window=1047576,
            max_output_tokens=32768
        ),
        "gpt-4.1-mini": AIModel(
            name="gpt-4.1-mini",
            context_window=1047576,
            max_output_tokens=32768
        ),
        "o4-mini": AIModel(
            name="o4-mini",
            context_window=200000,
            max_output_tokens=100000,
            supports_temperature=False
        ),
    }

    DEFAULT_MODEL = "gpt-4o-mini"
    DEFAULT_CONTEXT_WINDOW = 8192
    DEFAULT_MAX_OUTPUT_TOKENS = 2048

    def __init__(self, model: str = DEFAULT_MODEL, temperature: float | None = None) -> None:
        """
        Initialize conversation settings.

        Args:
            model: Model name; unknown names are passed through to the API unchanged
            temperature: Optional temperature (0.0-2.0); None leaves the API default

        Raises:
            ValueError: If temperature is out of valid range (0.0-2.0)
        """
        if temperature is not None and not 0 <= temperature <= 2:
            raise ValueError("Temperature must be between 0.0 and 2.0")

        self.model = model
        self.temperature = temperature

        model_config = self.MODELS.get(model)
        if model_config:
            self.context_window = model_config.context_window
            self.max_output_tokens = model_config.max_output_tokens

        else:
            # Fallback for unknown models
            self.context_window = self.DEFAULT_CONTEXT_WINDOW
            self.max_output_tokens = self.DEFAULT_MAX_OUTPUT_TOKENS

    @classmethod
    def get_available_models(cls) -> List[str]:
        """Return the names of all known models."""
        return list(cls.MODELS.keys())

    @classmethod
    def supports_temperature(cls, model: str) -> bool:
        """
        Check if model supports temperature setting.

        Args:
            model: Name of the model

        Returns:
            True if the model supports temperature.  Unknown models are assumed to.
        """
        model_config = cls.MODELS.get(model)
        if model_config:
            return model_config.supports_temperature

        return True
