"""
Chatbot Services - Remote model access.

- model_session: turn-based session interface and part types
- llm_config: per-model generation settings (thinking knobs, tools)
- gemini_session: google-genai implementation of the session
"""

from .model_session import ModelSession
from .llm_config import ModelConfig
from .gemini_session import GeminiChatSession

__all__ = ["ModelSession", "ModelConfig", "GeminiChatSession"]
