"""
Chat Orchestration - Tool loop and event model for one chat exchange

Components:
- StreamEvent / EventType: the closed set of events relayed to the client
- TurnProcessor: turns one model turn's parts into thought/text events
- ToolLoopOrchestrator: message -> tool -> result -> answer loop, with
  overload retry and the optional tool-call limit
- run_exchange: open a session, run the loop, release the session
"""

from .events import EventSink, EventType, StreamEvent
from .turn_processor import TurnProcessor
from .orchestrator import (
    LoopState,
    ToolLoopOrchestrator,
    is_retryable_error,
    run_exchange,
)

__all__ = [
    "EventSink",
    "EventType",
    "StreamEvent",
    "TurnProcessor",
    "LoopState",
    "ToolLoopOrchestrator",
    "is_retryable_error",
    "run_exchange",
]
