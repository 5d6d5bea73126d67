"""
Chatbot Logging Configuration - Console logs with exchange markers

Exchange events are logged as plain messages; the event and its marker
(">>> TOOL", "<<< LLM", ...) ride on the log record. The console formatter
puts the marker in front of the message and colors it only when writing
to a terminal, so redirected logs and other handlers never see ANSI codes.

Provides:
- ConsoleFormatter: `HH:MM:SS [LEVL] message`, optionally colored
- setup_logging(): Configure application logging
- Exchange helpers: log_message_in, log_message_out, log_thinking, log_tool, log_llm

Usage:
    from logging_config import setup_logging, log_tool
    setup_logging()
    logger = logging.getLogger(__name__)
    log_tool(logger, "fibonacci", "start", args={"n": 5})
"""

import logging
import os
import sys
from typing import Optional, TextIO

RESET = "\033[0m"
DIM = "\033[2m"

# Marker colors per exchange event
EVENT_COLORS = {
    "message": "\033[96m",  # Cyan
    "response": "\033[92m",  # Green
    "thinking": "\033[95m",  # Magenta
    "llm": "\033[94m",  # Blue
    "tool": "\033[93m",  # Yellow
}

LEVEL_COLORS = {
    logging.DEBUG: "\033[90m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[91m",
    logging.CRITICAL: "\033[1;91m",
}


class ConsoleFormatter(logging.Formatter):
    """Compact single-line formatter (no module name)."""

    def __init__(self, use_color: bool = True):
        super().__init__()
        self.use_color = use_color

    def _paint(self, text: str, color: Optional[str]) -> str:
        if not self.use_color or not color:
            return text
        return f"{color}{text}{RESET}"

    def format(self, record: logging.LogRecord) -> str:
        timestamp = self._paint(self.formatTime(record, "%H:%M:%S"), DIM)
        level = self._paint(record.levelname[:4], LEVEL_COLORS.get(record.levelno))

        message = record.getMessage()
        marker = getattr(record, "marker", None)
        if marker:
            color = EVENT_COLORS.get(getattr(record, "event", ""))
            message = f"{self._paint(marker, color)} {message}"

        formatted = f"{timestamp} [{level}] {message}"
        if record.exc_info:
            formatted += "\n" + self.formatException(record.exc_info)
        return formatted


def setup_logging(level: int | str = logging.INFO, stream: Optional[TextIO] = None) -> None:
    """Configure console logging for the application.

    Colors are used when the stream is a terminal and NO_COLOR is unset.
    """
    stream = stream or sys.stdout
    use_color = stream.isatty() and "NO_COLOR" not in os.environ

    handler = logging.StreamHandler(stream)
    handler.setFormatter(ConsoleFormatter(use_color=use_color))

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = [handler]

    # Quiet noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("google_genai").setLevel(logging.WARNING)


# =============================================================================
# EXCHANGE EVENT HELPERS
# =============================================================================


def _log_event(logger: logging.Logger, event: str, marker: str, message: str) -> None:
    logger.info(message, extra={"event": event, "marker": marker})


def _format_context(context: dict) -> str:
    return " ".join(f"{k}={v}" for k, v in context.items())


def log_message_in(logger: logging.Logger, message: str, **context) -> None:
    """Log an incoming user message, truncated to 80 characters.

    Args:
        logger: Logger instance
        message: User message text
        **context: Additional context (model, history length, etc.)
    """
    preview = message[:80] + "..." if len(message) > 80 else message
    _log_event(logger, "message", ">>> MESSAGE", f"{preview} [{_format_context(context)}]")


def log_message_out(logger: logging.Logger, tools_used: list = None, turns: int = 0) -> None:
    """Log the end of an exchange."""
    tools = ", ".join(tools_used) if tools_used else "none"
    _log_event(logger, "response", "<<< RESPONSE", f"tools=[{tools}] turns={turns}")


def log_thinking(logger: logging.Logger, state: str, chars: int = 0) -> None:
    """Log a thought bubble opening ('start') or closing ('end', with its size)."""
    text = "started" if state == "start" else f"done ({chars} chars)"
    _log_event(logger, "thinking", "... THINKING", text)


def log_tool(logger: logging.Logger, tool_name: str, state: str, **context) -> None:
    """Log a tool call ('start', with its args) or its completion ('end')."""
    marker = ">>> TOOL" if state == "start" else "<<< TOOL"
    _log_event(logger, "tool", marker, f"{tool_name} {_format_context(context)}".rstrip())


def log_llm(logger: logging.Logger, state: str, model: str = "", duration: float = 0) -> None:
    """Log a remote model turn starting, or completing after duration seconds."""
    if state == "start":
        _log_event(logger, "llm", ">>> LLM", f"calling {model}")
    else:
        _log_event(logger, "llm", "<<< LLM", f"{model} completed in {duration:.1f}s")
