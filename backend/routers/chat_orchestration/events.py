"""
Chat Stream Events - The wire-level unit relayed to the client.

Every event is {"type": ..., "data": ...}; the type set is closed.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List

from tools.registry import ToolInvocation


class EventType(str, Enum):
    """Stream event tags."""

    THOUGHT = "thought"  # data: reasoning text increment
    TEXT = "text"  # data: answer text increment
    TOOL = "tool"  # data: {name, args, result}
    HISTORY = "history"  # data: full replayable transcript
    ERROR = "error"  # data: human-readable message


@dataclass(frozen=True)
class StreamEvent:
    """One event of the response stream."""

    type: EventType
    data: Any

    @classmethod
    def thought(cls, text: str) -> "StreamEvent":
        return cls(EventType.THOUGHT, text)

    @classmethod
    def text(cls, text: str) -> "StreamEvent":
        return cls(EventType.TEXT, text)

    @classmethod
    def tool(cls, invocation: ToolInvocation) -> "StreamEvent":
        return cls(EventType.TOOL, invocation)

    @classmethod
    def history(cls, history: List[Dict[str, Any]]) -> "StreamEvent":
        return cls(EventType.HISTORY, history)

    @classmethod
    def error(cls, message: str) -> "StreamEvent":
        return cls(EventType.ERROR, message)

    def payload(self) -> Any:
        """JSON-ready data for this event's type."""
        if self.type in (EventType.THOUGHT, EventType.TEXT, EventType.ERROR):
            return str(self.data)
        if self.type is EventType.TOOL:
            return self.data.to_dict()
        if self.type is EventType.HISTORY:
            return list(self.data)
        raise ValueError(f"Unhandled event type: {self.type!r}")

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type.value, "data": self.payload()}


# Callback through which orchestration components emit events
EventSink = Callable[[StreamEvent], Awaitable[None]]
