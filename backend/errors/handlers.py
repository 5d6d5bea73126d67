"""
Error handling decorators and utilities.

Provides the decorator that keeps tool failures out of the orchestration loop.
"""

import logging
from functools import wraps
from typing import Any, Callable, Optional, TypeVar

from .exceptions import ChatbotError
from .response import format_error_for_llm

# Type variable for decorated functions
F = TypeVar("F", bound=Callable[..., Any])


def handle_tool_errors(tool_name: str, action: Optional[str] = None, logger: Optional[logging.Logger] = None):
    """Decorator that catches exceptions and returns a textual error result.

    Tools hand their result straight back to the model, so a failure becomes
    a string describing it rather than an exception.

    Args:
        tool_name: Name of the tool for log context
        action: Phrase used in the error text, e.g. "listing files"
        logger: Optional logger instance (defaults to tool-specific logger)

    Example:
        >>> @handle_tool_errors("listFiles", action="listing files")
        ... def list_files(path="."):
        ...     return "\\n".join(sorted(os.listdir(path)))
    """

    def decorator(func: F) -> F:
        log = logger or logging.getLogger(f"chatbot.{tool_name}")

        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return func(*args, **kwargs)
            except ChatbotError as e:
                log.warning(f"[{tool_name}] {e.code.value}: {e.message}")
                return format_error_for_llm(e, action)
            except Exception as e:
                log.error(f"[{tool_name}] Unexpected error: {e}", exc_info=True)
                return format_error_for_llm(e, action)

        return wrapper  # type: ignore

    return decorator


def log_error(
    logger: logging.Logger, error: Exception, context: Optional[str] = None, include_traceback: bool = True
) -> None:
    """Log an error with consistent formatting.

    Args:
        logger: Logger instance to use
        error: The exception to log
        context: Optional context string to prefix the message
        include_traceback: Whether to include the full stack trace

    Example:
        >>> log_error(logger, err, context="chat")
        # Logs: "[chat] LLM_OVERLOADED: The model is overloaded"
    """
    if isinstance(error, ChatbotError):
        message = f"{error.code.value}: {error.message}"
    else:
        message = str(error)

    if context:
        message = f"[{context}] {message}"

    logger.error(message, exc_info=include_traceback)
