"""
Chatbot Error Handling Module

Provides standardized error codes, exceptions, and response builders
for consistent error handling across the application.

Usage:
    from errors import (
        # Error codes
        ErrorCode,

        # Exceptions
        ChatbotError,
        ValidationError,
        UnknownToolError,
        LLMError,
        ModelOverloadedError,
        ToolLimitError,

        # Response builders
        error_response,
        format_error_for_llm,

        # Decorators
        handle_tool_errors,
        log_error,
    )

Example:
    from errors import handle_tool_errors, ValidationError

    @handle_tool_errors("fibonacci", action="calculating Fibonacci number")
    def fibonacci(n):
        if n < 0:
            raise ValidationError("n must be non-negative", parameter="n", received=str(n))
        ...
"""

from .codes import ErrorCode
from .exceptions import (
    ChatbotError,
    ValidationError,
    UnknownToolError,
    LLMError,
    ModelOverloadedError,
    ToolLimitError,
)
from .response import (
    error_response,
    format_error_for_llm,
)
from .handlers import (
    handle_tool_errors,
    log_error,
)

__all__ = [
    # Error codes
    "ErrorCode",
    # Exceptions
    "ChatbotError",
    "ValidationError",
    "UnknownToolError",
    "LLMError",
    "ModelOverloadedError",
    "ToolLimitError",
    # Response builders
    "error_response",
    "format_error_for_llm",
    # Decorators
    "handle_tool_errors",
    "log_error",
]
