"""
Model Configuration - Per-request generation settings for the remote model.

The reasoning knobs depend on the model tier named in the identifier:
a "flash" model gets a thinking token budget, a "pro" model gets a
qualitative thinking level. Knobs that do not apply are omitted entirely
rather than sent as empty values.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from google.genai import types

logger = logging.getLogger(__name__)

FAST_TIER_MARKER = "flash"
HIGH_TIER_MARKER = "pro"


@dataclass(frozen=True)
class ModelConfig:
    """Generation settings for one chat session."""

    model: str
    include_thoughts: bool = True
    thinking_budget: Optional[int] = None  # fast tier only
    thinking_level: Optional[str] = None  # high-capability tier only

    @classmethod
    def for_model(cls, model: str, runtime_config) -> "ModelConfig":
        """Build the config for a model identifier from runtime settings.

        Args:
            model: Model identifier, e.g. "gemini-2.5-flash"
            runtime_config: RuntimeConfig supplying budget, level and thought flag

        Returns:
            ModelConfig with only the knobs that apply to the model's tier
        """
        name = model.lower()
        budget = runtime_config.thinking_budget if FAST_TIER_MARKER in name else None
        level = runtime_config.thinking_level if HIGH_TIER_MARKER in name else None
        # A zero budget or empty level means "not set"
        return cls(
            model=model,
            include_thoughts=runtime_config.include_thoughts,
            thinking_budget=budget or None,
            thinking_level=level or None,
        )

    def thinking_config(self) -> Dict[str, Any]:
        """Thinking settings with unused knobs left out."""
        config: Dict[str, Any] = {"include_thoughts": self.include_thoughts}
        if self.thinking_budget:
            config["thinking_budget"] = self.thinking_budget
        if self.thinking_level:
            config["thinking_level"] = self.thinking_level
        return config

    def to_generate_config(self, declarations: List[Dict[str, Any]]) -> types.GenerateContentConfig:
        """SDK generation config carrying the tool declarations.

        Automatic function calling stays off: the orchestration loop runs
        tools itself so every call is visible to the client.
        """
        thinking = self.thinking_config()
        if "thinking_level" in thinking:
            thinking["thinking_level"] = types.ThinkingLevel(thinking["thinking_level"].upper())

        config_kwargs: Dict[str, Any] = {
            "thinking_config": types.ThinkingConfig(**thinking),
            "automatic_function_calling": types.AutomaticFunctionCallingConfig(disable=True),
        }
        if declarations:
            config_kwargs["tools"] = [
                types.Tool(
                    function_declarations=[types.FunctionDeclaration.model_validate(d) for d in declarations]
                )
            ]
        return types.GenerateContentConfig(**config_kwargs)
