"""
Chat Tool Loop Orchestrator - Drives one chat exchange to completion

The remote model may answer directly or ask for a local tool. Each tool
request is executed, its result is sent back as the next turn, and the
loop continues until a turn ends without a function call:

    AWAITING_FIRST_TURN -> STREAMING_TURN -> TOOL_PENDING -> EXECUTING_TOOL
                                 ^                                  |
                                 +----------------------------------+
    STREAMING_TURN (no call) -> DONE
    any failure               -> FAILED

Only DONE emits the replayable transcript. A failed exchange emits a single
error event and no transcript, so the client keeps its previous history.
"""

import asyncio
import logging
import time
from enum import Enum
from typing import AsyncIterator, Awaitable, Callable, List, Optional, Type

from errors import (
    ChatbotError,
    ModelOverloadedError,
    ToolLimitError,
    UnknownToolError,
    log_error,
)
from logging_config import log_llm, log_message_out, log_tool
from services.model_session import (
    FunctionCallRequest,
    FunctionResult,
    ModelSession,
    Part,
    TurnContent,
)
from tools.registry import ToolInvocation, ToolRegistry

from .events import EventSink, StreamEvent
from .turn_processor import TurnProcessor

logger = logging.getLogger(__name__)

# Defaults mirror RuntimeConfig
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_RETRY_BASE_DELAY = 2.0


class LoopState(str, Enum):
    AWAITING_FIRST_TURN = "awaiting_first_turn"
    STREAMING_TURN = "streaming_turn"
    TOOL_PENDING = "tool_pending"
    EXECUTING_TOOL = "executing_tool"
    DONE = "done"
    FAILED = "failed"


def is_retryable_error(error: Exception) -> bool:
    """Only upstream overload is worth retrying; everything else is terminal."""
    return isinstance(error, ModelOverloadedError)


class ToolLoopOrchestrator:
    """Runs the message -> tool -> result -> answer loop for one exchange.

    Args:
        session: Open model session (already seeded with prior history)
        emit: Event sink for the response stream
        registry: Tool registry used for dispatch
        max_attempts: Attempts per turn when the model is overloaded
        retry_base_delay: Seconds; the Nth retry waits N times this
        max_tool_iterations: Tool calls allowed per exchange (None = unbounded)
        sleep: Awaitable sleep, replaceable in tests
    """

    def __init__(
        self,
        session: ModelSession,
        emit: EventSink,
        registry: Type[ToolRegistry] = ToolRegistry,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        retry_base_delay: float = DEFAULT_RETRY_BASE_DELAY,
        max_tool_iterations: Optional[int] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.session = session
        self.registry = registry
        self.max_attempts = max(1, max_attempts)
        self.retry_base_delay = retry_base_delay
        self.max_tool_iterations = max_tool_iterations
        self._emit = emit
        self._sleep = sleep
        self._processor = TurnProcessor(emit)

        self.state = LoopState.AWAITING_FIRST_TURN
        self.tools_used: List[str] = []
        self.turns = 0

    @classmethod
    def from_config(cls, session: ModelSession, emit: EventSink, runtime_config) -> "ToolLoopOrchestrator":
        """Build an orchestrator with the current runtime settings."""
        return cls(
            session,
            emit,
            max_attempts=runtime_config.retry_max_attempts,
            retry_base_delay=runtime_config.retry_base_delay,
            max_tool_iterations=runtime_config.get_max_tool_iterations(),
        )

    async def send_with_retry(self, content: TurnContent) -> AsyncIterator[Part]:
        """Start a turn, retrying while the model reports overload.

        Raises:
            ModelOverloadedError: If every attempt was rejected as overloaded
            ChatbotError: Any other failure, immediately
        """
        attempt = 1
        while True:
            try:
                return await self.session.send_turn(content)
            except Exception as e:
                if not is_retryable_error(e) or attempt >= self.max_attempts:
                    raise
                delay = self.retry_base_delay * attempt
                logger.warning(
                    f"Model overloaded, retry {attempt}/{self.max_attempts - 1} "
                    f"for {self.session.model_name} in {delay:.1f}s"
                )
                await self._sleep(delay)
                attempt += 1

    async def _stream_turn(self, content: TurnContent) -> Optional[FunctionCallRequest]:
        self.state = LoopState.STREAMING_TURN
        model = self.session.model_name
        log_llm(logger, "start", model=model)
        start = time.perf_counter()

        parts = await self.send_with_retry(content)
        call = await self._processor.process(parts)
        await self.session.confirm_turn()

        self.turns += 1
        log_llm(logger, "end", model=model, duration=time.perf_counter() - start)
        return call

    def _execute(self, call: FunctionCallRequest) -> ToolInvocation:
        self.state = LoopState.EXECUTING_TOOL
        log_tool(logger, call.name, "start", args=call.args)
        invocation = self.registry.execute(call.name, call.args)
        result = invocation.result
        if isinstance(result, str):
            log_tool(logger, call.name, "end", result_chars=len(result))
        else:
            log_tool(logger, call.name, "end", result_type=type(result).__name__)
        self.tools_used.append(call.name)
        return invocation

    async def run(self, message: str) -> LoopState:
        """Drive the exchange for one user message.

        Never raises for exchange failures: they end the stream with an error
        event. Cancellation (client disconnect) propagates.

        Returns:
            The terminal state, DONE or FAILED
        """
        try:
            call = await self._stream_turn(message)

            while call is not None:
                self.state = LoopState.TOOL_PENDING
                if self.registry.get_tool(call.name) is None:
                    raise UnknownToolError(call.name)
                if self.max_tool_iterations is not None and len(self.tools_used) >= self.max_tool_iterations:
                    raise ToolLimitError(self.max_tool_iterations)

                invocation = self._execute(call)
                await self._emit(StreamEvent.tool(invocation))
                call = await self._stream_turn(FunctionResult(invocation.name, invocation.result))

            self.state = LoopState.DONE
            await self._emit(StreamEvent.history(self.session.full_history()))

        except Exception as e:
            self.state = LoopState.FAILED
            log_error(logger, e, context="chat", include_traceback=not isinstance(e, ChatbotError))
            await self._emit(StreamEvent.error(str(e)))

        log_message_out(logger, tools_used=self.tools_used, turns=self.turns)
        return self.state


async def run_exchange(
    open_session: Callable[[], ModelSession],
    message: str,
    emit: EventSink,
    runtime_config,
) -> LoopState:
    """Open a session, run one exchange on it, and release it.

    Session setup failures (missing key, malformed history) are reported
    on the stream like any other exchange failure.
    """
    try:
        session = open_session()
    except Exception as e:
        log_error(logger, e, context="chat", include_traceback=not isinstance(e, ChatbotError))
        await emit(StreamEvent.error(str(e)))
        return LoopState.FAILED

    try:
        orchestrator = ToolLoopOrchestrator.from_config(session, emit, runtime_config)
        return await orchestrator.run(message)
    finally:
        try:
            await session.close()
        except Exception as e:
            logger.warning(f"Failed to close model session: {e}")
