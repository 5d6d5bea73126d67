"""
Model Session - abstract interface over a stateful, turn-based model exchange.

A session accepts one message per turn (user text or a function result),
streams back the turn's parts, and keeps the authoritative transcript.
Implementations wrap a concrete model API behind this interface so the
orchestration loop never touches SDK types.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Dict, List, Union


@dataclass(frozen=True)
class ThoughtText:
    """Reasoning fragment the model chose to expose."""

    text: str


@dataclass(frozen=True)
class AnswerText:
    """Answer fragment."""

    text: str


@dataclass(frozen=True)
class FunctionCallRequest:
    """The model asks for a local tool to run."""

    name: str
    args: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class FunctionResult:
    """A tool's result, sent back to the model as the next turn."""

    name: str
    result: Any


Part = Union[ThoughtText, AnswerText, FunctionCallRequest, FunctionResult]

# What a turn can carry from the client side
TurnContent = Union[str, FunctionResult]


class ModelSession(ABC):
    """Abstract turn-based model session.

    Turns are strictly sequential: send_turn, consume the returned parts to
    the end, confirm_turn, then either send the next turn or read the
    transcript with full_history.
    """

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Model identifier this session talks to."""
        ...

    @abstractmethod
    async def send_turn(self, content: TurnContent) -> AsyncIterator[Part]:
        """Start a turn and return its parts in emission order.

        The remote request is started before this returns, so a failure to
        open the turn (overload, auth, quota) is raised here rather than
        from the iterator.

        Raises:
            ModelOverloadedError: Transient upstream overload; safe to retry.
            LLMError: Any non-retriable remote failure.
        """
        ...

    @abstractmethod
    async def confirm_turn(self) -> None:
        """Wait until the last turn is recorded in the transcript.

        Only valid once the parts of the last send_turn are fully consumed.
        """
        ...

    @abstractmethod
    def full_history(self) -> List[Dict[str, Any]]:
        """JSON-ready transcript, replayable as prior history of a new session."""
        ...

    async def close(self) -> None:
        """Release any per-request resources. Default: nothing to release."""
        return None
