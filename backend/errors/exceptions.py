"""
Custom exception hierarchy for the chatbot backend.

All exceptions inherit from ChatbotError and include:
- code: ErrorCode for categorization
- message: Human-readable error message
- details: Optional additional context
- recoverable: Whether the user can retry/fix the issue
- context: Additional key-value pairs for debugging
"""

from typing import Any, Optional
from .codes import ErrorCode


class ChatbotError(Exception):
    """Base exception for all chatbot errors.

    Attributes:
        code: The ErrorCode categorizing this error
        message: Human-readable error message
        details: Optional additional context for the user
        recoverable: Whether the error can be resolved by user action
        context: Additional debugging information
    """

    code: ErrorCode = ErrorCode.INTERNAL_UNEXPECTED
    recoverable: bool = False

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        code: Optional[ErrorCode] = None,
        recoverable: Optional[bool] = None,
        **context: Any,
    ):
        self.message = message
        self.details = details
        self.context = context if context else None

        # Allow overriding class defaults
        if code is not None:
            self.code = code
        if recoverable is not None:
            self.recoverable = recoverable

        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message

    def to_dict(self) -> dict:
        """Convert exception to dictionary for JSON serialization."""
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
            "context": self.context,
        }


class ValidationError(ChatbotError):
    """Error during input validation."""

    code = ErrorCode.VALIDATION_MISSING_PARAM
    recoverable = True

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        parameter: Optional[str] = None,
        expected: Optional[str] = None,
        received: Optional[str] = None,
        **context: Any,
    ):
        ctx = {**context}
        if parameter:
            ctx["parameter"] = parameter
        if expected:
            ctx["expected"] = expected
        if received is not None:
            ctx["received"] = received
        super().__init__(message, details, **ctx)


class UnknownToolError(ChatbotError):
    """The model requested a function that is not in the tool registry."""

    code = ErrorCode.NOT_FOUND_TOOL
    recoverable = False

    def __init__(self, tool_name: str, **context: Any):
        self.tool_name = tool_name
        super().__init__(f"Unknown tool: {tool_name}", tool=tool_name, **context)


class LLMError(ChatbotError):
    """Non-retriable failure talking to the remote model (auth, bad request, quota)."""

    code = ErrorCode.LLM_UNAVAILABLE
    recoverable = False

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        model: Optional[str] = None,
        error_type: Optional[str] = None,
        status_code: Optional[int] = None,
        **context: Any,
    ):
        # Set appropriate code based on error type
        if error_type == "overloaded":
            code = ErrorCode.LLM_OVERLOADED
        elif error_type == "rejected":
            code = ErrorCode.LLM_REQUEST_REJECTED
        else:
            code = ErrorCode.LLM_UNAVAILABLE

        ctx = {**context}
        if model:
            ctx["model"] = model
        if status_code:
            ctx["status_code"] = status_code
        self.status_code = status_code
        super().__init__(message, details, code=code, **ctx)


class ModelOverloadedError(LLMError):
    """Transient upstream overload (HTTP 503). The only condition worth retrying."""

    recoverable = True

    def __init__(self, message: str, details: Optional[str] = None, model: Optional[str] = None, **context: Any):
        super().__init__(message, details, model=model, error_type="overloaded", status_code=503, **context)


class ToolLimitError(ChatbotError):
    """The configured maximum number of tool calls for one request was reached."""

    code = ErrorCode.TOOL_LIMIT_REACHED
    recoverable = False

    def __init__(self, limit: int, **context: Any):
        super().__init__(f"Tool call limit reached ({limit})", limit=limit, **context)
