"""
Shared pytest fixtures for the chatbot backend tests.
"""

import pytest

from services.model_session import (
    AnswerText,
    FunctionCallRequest,
    FunctionResult,
    ModelSession,
    ThoughtText,
)
from tools.registry import ToolRegistry, register_all_tools


class ScriptedSession(ModelSession):
    """ModelSession fake that plays back one scripted step per send_turn.

    Each step is either a list of parts (a successful turn) or an exception
    instance (raised by send_turn, like an initiation failure). The
    transcript is a simplified user/model role list.
    """

    def __init__(self, steps, prior_history=None, model="gemini-2.5-flash"):
        self.steps = list(steps)
        self.sent = []
        self.confirmed = 0
        self.closed = False
        self._model = model
        self._history = list(prior_history or [])
        self._pending = None

    @property
    def model_name(self) -> str:
        return self._model

    async def send_turn(self, content):
        self.sent.append(content)
        if not self.steps:
            raise AssertionError(f"Unexpected turn: {content!r}")
        step = self.steps.pop(0)
        if isinstance(step, BaseException):
            raise step
        self._pending = (content, step)
        return self._iterate(step)

    async def _iterate(self, parts):
        for part in parts:
            yield part

    async def confirm_turn(self) -> None:
        content, parts = self._pending
        if isinstance(content, FunctionResult):
            self._history.append({"role": "user", "parts": [{"functionResponse": {"name": content.name}}]})
        else:
            self._history.append({"role": "user", "parts": [{"text": content}]})
        self._history.append({"role": "model", "parts": [_part_to_wire(p) for p in parts]})
        self._pending = None
        self.confirmed += 1

    def full_history(self):
        return list(self._history)

    async def close(self) -> None:
        self.closed = True


def _part_to_wire(part):
    if isinstance(part, ThoughtText):
        return {"text": part.text, "thought": True}
    if isinstance(part, FunctionCallRequest):
        return {"functionCall": {"name": part.name, "args": part.args}}
    return {"text": part.text}


@pytest.fixture
def scripted_session():
    """Factory for ScriptedSession instances."""
    return ScriptedSession


@pytest.fixture
def tool_registry():
    """Registry holding exactly the built-in tools, reset after the test."""
    ToolRegistry.clear()
    register_all_tools()
    yield ToolRegistry
    ToolRegistry.clear()


@pytest.fixture
def fibonacci_script():
    """Two-turn script: thought, fibonacci(5) call, then the answer."""
    return [
        [ThoughtText("T1"), FunctionCallRequest("fibonacci", {"n": 5})],
        [AnswerText("The 5th Fibonacci number is 5.")],
    ]
