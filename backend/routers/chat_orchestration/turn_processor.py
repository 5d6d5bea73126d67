"""
Turn Processor - Classifies one model turn's parts into stream events.

Thought fragments and answer fragments are relayed as they arrive;
a function call is held back until the turn ends so the loop can decide
what to do with it.
"""

import logging
from typing import AsyncIterator, List, Optional

from logging_config import log_thinking
from services.model_session import (
    AnswerText,
    FunctionCallRequest,
    FunctionResult,
    Part,
    ThoughtText,
)

from .events import EventSink, EventType, StreamEvent

logger = logging.getLogger(__name__)


class TurnProcessor:
    """Consumes a turn's parts, emitting thought and text events.

    Consecutive thought fragments form one "bubble" (the client renders
    them in the same collapsible block); an answer fragment closes it.
    The accumulated text of the most recent turn is kept for logging.
    """

    def __init__(self, emit: EventSink):
        self._emit = emit
        self._bubble: Optional[EventType] = None
        self.thoughts: List[str] = []
        self.answer: List[str] = []

    def _close_thought_bubble(self) -> None:
        if self._bubble is EventType.THOUGHT:
            log_thinking(logger, "end", chars=len(self.thoughts[-1]))
        self._bubble = None

    async def process(self, parts: AsyncIterator[Part]) -> Optional[FunctionCallRequest]:
        """Consume parts to the end of the turn.

        Returns:
            The turn's function call, or None if the turn completed the answer
        """
        self._bubble = None
        self.thoughts = []
        self.answer = []
        pending: Optional[FunctionCallRequest] = None

        async for part in parts:
            if isinstance(part, ThoughtText):
                if self._bubble is not EventType.THOUGHT:
                    log_thinking(logger, "start")
                    self._bubble = EventType.THOUGHT
                    self.thoughts.append("")
                self.thoughts[-1] += part.text
                await self._emit(StreamEvent.thought(part.text))

            elif isinstance(part, AnswerText):
                self._close_thought_bubble()
                self._bubble = EventType.TEXT
                self.answer.append(part.text)
                await self._emit(StreamEvent.text(part.text))

            elif isinstance(part, FunctionCallRequest):
                if pending is not None:
                    logger.warning(f"Multiple function calls in one turn, dropping {pending.name}")
                pending = part

            elif isinstance(part, FunctionResult):
                # Only ever sent by the client side
                logger.warning(f"Ignoring function result part for {part.name} in model output")

            else:
                raise TypeError(f"Unhandled part type: {type(part).__name__}")

        self._close_thought_bubble()
        return pending

    @property
    def answer_text(self) -> str:
        return "".join(self.answer)
