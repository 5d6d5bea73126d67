"""
Runtime Configuration for the chatbot backend.

Provides a RuntimeConfig dataclass whose values default from environment
variables, range-checked when the config is built. Only plain values
live here: model clients are built per request from these values.

Usage:
    from config import runtime_config
    budget = runtime_config.thinking_budget
"""

import os
import re
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Any, List, Optional

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).parent
DEFAULT_STATIC_DIR = BASE_DIR.parent / "public"

# Model identifiers: alphanumeric, colons, dots, dashes only
MODEL_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9._:-]+$")
MODEL_NAME_MAX_LENGTH = 100

DEFAULT_MODEL = "gemini-2.5-flash"


def _env_bool(key: str, default: str) -> bool:
    return os.environ.get(key, default).strip().lower() == "true"


def is_valid_model_name(value: Any) -> bool:
    """Check a model identifier before it is sent upstream."""
    return (
        isinstance(value, str)
        and 0 < len(value) <= MODEL_NAME_MAX_LENGTH
        and MODEL_NAME_PATTERN.match(value) is not None
    )


@dataclass
class RuntimeConfig:
    """
    Service configuration.

    All values have defaults from environment variables. Numeric values
    outside their accepted range are clamped with a warning.
    """

    # Remote model access
    gemini_api_key: str = field(default_factory=lambda: os.environ.get("GEMINI_API_KEY", ""))
    default_model: str = field(default_factory=lambda: os.environ.get("GEMINI_MODEL", DEFAULT_MODEL))
    available_models: str = field(
        default_factory=lambda: os.environ.get("GEMINI_MODELS", "gemini-2.5-flash,gemini-3-pro-preview")
    )  # Comma-separated, offered by the client's model selector

    # Reasoning knobs
    thinking_budget: int = field(
        default_factory=lambda: int(os.environ.get("GEMINI_THINKING_BUDGET", "1024"))
    )  # Token budget for the fast ("flash") tier
    thinking_level: str = field(
        default_factory=lambda: os.environ.get("GEMINI_THINKING_LEVEL", "low")
    )  # Qualitative level for the high-capability ("pro") tier
    include_thoughts: bool = field(default_factory=lambda: _env_bool("GEMINI_INCLUDE_THOUGHTS", "true"))

    # Retry on upstream overload (503): delay grows linearly with the attempt number
    retry_max_attempts: int = field(default_factory=lambda: int(os.environ.get("LLM_RETRY_MAX_ATTEMPTS", "3")))
    retry_base_delay: float = field(
        default_factory=lambda: float(os.environ.get("LLM_RETRY_BASE_DELAY", "2.0"))
    )

    # Tool loop guard. 0 = unbounded (the loop runs until the model stops calling tools)
    max_tool_iterations: int = field(default_factory=lambda: int(os.environ.get("MAX_TOOL_ITERATIONS", "0")))

    # Tool settings
    find_files_max_results: int = field(
        default_factory=lambda: int(os.environ.get("FIND_FILES_MAX_RESULTS", "20"))
    )

    # Server
    static_dir: str = field(default_factory=lambda: os.environ.get("STATIC_DIR", str(DEFAULT_STATIC_DIR)))
    host: str = field(default_factory=lambda: os.environ.get("HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: int(os.environ.get("PORT", "3000")))
    log_level: str = field(default_factory=lambda: os.environ.get("LOG_LEVEL", "INFO").upper())

    # Accepted ranges for numeric values; out-of-range settings are clamped
    _VALIDATION_RANGES: Dict[str, tuple] = field(default_factory=lambda: {
        "thinking_budget": (0, 32768),
        "retry_max_attempts": (1, 10),
        "retry_base_delay": (0.0, 60.0),
        "max_tool_iterations": (0, 1000),
        "find_files_max_results": (1, 1000),
        "port": (1, 65535),
    }, repr=False, compare=False)

    _SECRET_FIELDS = ("gemini_api_key",)

    def __post_init__(self):
        for key, (lo, hi) in self._VALIDATION_RANGES.items():
            value = getattr(self, key)
            if not (lo <= value <= hi):
                clamped = min(max(value, lo), hi)
                logger.warning(f"Config {key}={value} out of range ({lo}-{hi}), using {clamped}")
                setattr(self, key, clamped)

        if not is_valid_model_name(self.default_model):
            logger.warning(f"Config rejected invalid model name {self.default_model!r}, using {DEFAULT_MODEL}")
            self.default_model = DEFAULT_MODEL

    def get_available_models(self) -> List[str]:
        """Get the model identifiers offered to the client, default first."""
        models = [m.strip() for m in self.available_models.split(",") if m.strip()]
        if self.default_model in models:
            models.remove(self.default_model)
        return [self.default_model] + models

    def get_max_tool_iterations(self) -> Optional[int]:
        """Tool loop guard, or None when the loop is unbounded."""
        return self.max_tool_iterations or None

    def to_dict(self) -> Dict[str, Any]:
        """Export current config as dict (excludes internal fields, masks secrets)."""
        from dataclasses import fields as dataclass_fields

        result = {}
        for field_info in dataclass_fields(self):
            if field_info.name.startswith("_"):
                continue
            value = getattr(self, field_info.name)
            if field_info.name in self._SECRET_FIELDS:
                value = "***" if value else ""
            result[field_info.name] = value
        return result


# Process-wide instance (values only)
runtime_config = RuntimeConfig()


