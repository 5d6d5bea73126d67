"""
Chat Router - Streaming chat endpoint

POST /chat runs one exchange (with any tool calls the model makes) and
streams its events back as NDJSON:

    {"type": "thought", "data": "..."}
    {"type": "text", "data": "..."}
    {"type": "tool", "data": {"name": ..., "args": ..., "result": ...}}
    {"type": "history", "data": [...]}      # only on success
    {"type": "error", "data": "..."}        # terminal

The client stores the history payload and sends it back verbatim with the
next message; the server keeps no conversation state between requests.
"""

import logging
from functools import partial
from typing import Any, Dict, List, Optional

from fastapi import APIRouter
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from config import MODEL_NAME_MAX_LENGTH, is_valid_model_name, runtime_config
from errors import ErrorCode, ValidationError
from logging_config import log_message_in
from services.gemini_session import GeminiChatSession
from services.llm_config import ModelConfig
from services.model_session import ModelSession
from tools.registry import ToolRegistry

from .chat_orchestration import run_exchange
from .chat_streaming import MEDIA_TYPE, relay_events

logger = logging.getLogger(__name__)

router = APIRouter()


class ChatRequest(BaseModel):
    message: str = Field(..., min_length=1)
    history: List[Any] = Field(default_factory=list)
    model: Optional[str] = None


def _resolve_model(requested: Optional[str]) -> str:
    """Pick the model for a request, rejecting malformed identifiers."""
    if requested is None or requested == "":
        return runtime_config.default_model
    if not is_valid_model_name(requested):
        raise ValidationError(
            "Invalid model identifier",
            details=f"Use letters, digits, '.', '_', ':' or '-' (max {MODEL_NAME_MAX_LENGTH} chars)",
            parameter="model",
            received=requested[:MODEL_NAME_MAX_LENGTH],
            code=ErrorCode.VALIDATION_INVALID_FORMAT,
        )
    return requested


def _open_model_session(history: List[Any], model: str) -> ModelSession:
    """Create the per-request model session seeded with the client's history."""
    return GeminiChatSession.open(
        prior_history=history,
        config=ModelConfig.for_model(model, runtime_config),
        api_key=runtime_config.gemini_api_key,
        declarations=ToolRegistry.get_function_declarations(),
    )


@router.post("/chat")
async def chat(request: ChatRequest):
    """Stream one chat exchange."""
    model = _resolve_model(request.model)
    log_message_in(logger, request.message, model=model, history=len(request.history))

    producer = partial(
        run_exchange,
        partial(_open_model_session, request.history, model),
        request.message,
        runtime_config=runtime_config,
    )
    return StreamingResponse(relay_events(producer), media_type=MEDIA_TYPE)


@router.get("/api/models")
async def list_models() -> Dict[str, Any]:
    """Model identifiers the client may select."""
    return {
        "default": runtime_config.default_model,
        "models": runtime_config.get_available_models(),
    }


@router.get("/api/tools")
async def list_tools() -> Dict[str, Any]:
    """Function declarations exactly as sent to the model."""
    return {"tools": ToolRegistry.get_function_declarations()}
