"""
Gemini Session - ModelSession backed by the google-genai chat API.

One client and one chat per request: nothing here is cached between
requests. The prior transcript comes from the client and the updated one
goes back to it, in the API's own JSON shape (camelCase keys).

Key translations:
- Turn content: str -> text message; FunctionResult -> functionResponse part
- Stream chunks: candidate parts -> ThoughtText / FunctionCallRequest / AnswerText
- Errors: APIError 503 -> ModelOverloadedError, other APIError -> LLMError
"""
import json
import logging
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence

import pydantic
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from errors import ChatbotError, ErrorCode, LLMError, ModelOverloadedError, ValidationError
from services.llm_config import ModelConfig
from services.model_session import (
    AnswerText,
    FunctionCallRequest,
    FunctionResult,
    ModelSession,
    Part,
    ThoughtText,
    TurnContent,
)

logger = logging.getLogger(__name__)

OVERLOADED_STATUS = 503

_TURN_IDLE = "idle"
_TURN_STREAMING = "streaming"
_TURN_COMPLETE = "complete"


def history_from_wire(history: Optional[Sequence[Any]]) -> List[types.Content]:
    """Parse a client-supplied transcript into SDK contents.

    Turns are validated through JSON so base64 fields (thought signatures)
    decode the same way they were encoded.

    Raises:
        ValidationError: If a turn is not a valid content object
    """
    contents = []
    for index, turn in enumerate(history or []):
        if not isinstance(turn, dict):
            raise ValidationError(
                "Invalid conversation history",
                details=f"turn {index} is not an object",
                parameter="history",
                code=ErrorCode.VALIDATION_INVALID_FORMAT,
            )
        try:
            contents.append(types.Content.model_validate_json(json.dumps(turn)))
        except pydantic.ValidationError as e:
            raise ValidationError(
                "Invalid conversation history",
                details=f"turn {index}: {e.errors()[0].get('msg', 'invalid')}",
                parameter="history",
                code=ErrorCode.VALIDATION_INVALID_FORMAT,
            ) from e
    return contents


def merge_consecutive_turns(contents: Sequence[types.Content]) -> List[types.Content]:
    """Fold adjacent contents with the same role into one turn.

    The SDK records one model content per streamed chunk, so a single
    answer arrives in its history as several consecutive model entries.
    """
    merged: List[types.Content] = []
    for content in contents:
        if merged and merged[-1].role == content.role:
            previous = merged[-1]
            merged[-1] = types.Content(
                role=previous.role,
                parts=list(previous.parts or []) + list(content.parts or []),
            )
        else:
            merged.append(content)
    return merged


def history_to_wire(contents: Sequence[types.Content]) -> List[Dict[str, Any]]:
    """Serialize SDK contents into the JSON transcript handed to the client.

    Each exchange turn becomes exactly one entry, however many chunks it
    was streamed in.
    """
    return [c.model_dump(mode="json", by_alias=True, exclude_none=True) for c in merge_consecutive_turns(contents)]


def parts_from_chunk(chunk: types.GenerateContentResponse) -> List[Part]:
    """Classify the parts of one streamed chunk, in emission order.

    Only the first candidate is read. Empty text parts (e.g. bare thought
    signatures) carry nothing to show and are skipped.
    """
    if not chunk.candidates:
        return []
    content = chunk.candidates[0].content
    if content is None or not content.parts:
        return []

    parts: List[Part] = []
    for part in content.parts:
        if part.thought:
            if part.text:
                parts.append(ThoughtText(part.text))
        elif part.function_call:
            parts.append(
                FunctionCallRequest(
                    name=part.function_call.name or "",
                    args=dict(part.function_call.args or {}),
                )
            )
        elif part.text:
            parts.append(AnswerText(part.text))
    return parts


def translate_api_error(error: genai_errors.APIError, model: str) -> LLMError:
    """Map an SDK error onto the retriable / non-retriable split."""
    code = getattr(error, "code", None)
    message = getattr(error, "message", None) or str(error)
    if code == OVERLOADED_STATUS:
        return ModelOverloadedError(message, model=model)
    if code and 400 <= code < 500:
        return LLMError(message, model=model, error_type="rejected", status_code=code)
    return LLMError(message, model=model, status_code=code)


class GeminiChatSession(ModelSession):
    """Chat session against the Gemini API."""

    def __init__(self, chat, config: ModelConfig, client: Optional[genai.Client] = None):
        self._chat = chat
        self._config = config
        self._client = client
        self._turn_state = _TURN_IDLE

    @classmethod
    def open(
        cls,
        prior_history: Optional[Sequence[Any]],
        config: ModelConfig,
        api_key: str,
        declarations: List[Dict[str, Any]],
    ) -> "GeminiChatSession":
        """Create a client and chat for one request.

        Args:
            prior_history: Transcript returned by a previous exchange, replayed verbatim
            config: Generation settings for the selected model
            api_key: Gemini API key
            declarations: Function declarations from the tool registry

        Raises:
            LLMError: If no API key is configured
            ValidationError: If prior_history is malformed
        """
        if not api_key:
            raise LLMError("Gemini API key not configured", details="Set GEMINI_API_KEY", model=config.model)

        history = history_from_wire(prior_history)
        client = genai.Client(api_key=api_key)
        chat = client.aio.chats.create(
            model=config.model,
            config=config.to_generate_config(declarations),
            history=history,
        )
        logger.info(f"Gemini session opened: {config.model} ({len(history)} prior turns)")
        return cls(chat, config, client=client)

    @property
    def model_name(self) -> str:
        return self._config.model

    @staticmethod
    def _to_message(content: TurnContent):
        if isinstance(content, FunctionResult):
            return [types.Part.from_function_response(name=content.name, response={"result": content.result})]
        return content

    async def send_turn(self, content: TurnContent) -> AsyncIterator[Part]:
        if self._turn_state == _TURN_STREAMING:
            raise ChatbotError("Previous turn is still streaming", code=ErrorCode.INTERNAL_STATE_ERROR)

        try:
            stream = await self._chat.send_message_stream(self._to_message(content))
            first = await anext(stream, None)
        except genai_errors.APIError as e:
            raise translate_api_error(e, self.model_name) from e

        self._turn_state = _TURN_STREAMING
        return self._iter_parts(first, stream)

    async def _iter_parts(self, first, stream) -> AsyncIterator[Part]:
        chunk = first
        while chunk is not None:
            for part in parts_from_chunk(chunk):
                yield part
            try:
                chunk = await anext(stream, None)
            except genai_errors.APIError as e:
                raise translate_api_error(e, self.model_name) from e
        # The SDK records the turn in its history once its stream is exhausted
        self._turn_state = _TURN_COMPLETE

    async def confirm_turn(self) -> None:
        if self._turn_state != _TURN_COMPLETE:
            raise ChatbotError(
                "Turn confirmed before its stream was fully consumed",
                code=ErrorCode.INTERNAL_STATE_ERROR,
            )
        self._turn_state = _TURN_IDLE

    def full_history(self) -> List[Dict[str, Any]]:
        if self._turn_state == _TURN_STREAMING:
            raise ChatbotError(
                "Transcript requested while a turn is streaming",
                code=ErrorCode.INTERNAL_STATE_ERROR,
            )
        return history_to_wire(self._chat.get_history())

    async def close(self) -> None:
        """Release the per-request client's connections."""
        if self._client is not None:
            await self._client.aio.aclose()
