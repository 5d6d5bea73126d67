"""
Standard error response builders.

Provides consistent response formats for HTTP-level failures and for the
textual error results that failed tools hand back to the model.
"""

from typing import Optional
from .codes import ErrorCode
from .exceptions import ChatbotError


def error_response(error: ChatbotError | Exception, include_context: bool = True) -> dict:
    """Build a standard error response dictionary.

    Args:
        error: The exception to convert to a response
        include_context: Whether to include the context dict (disable for privacy)

    Returns:
        Standard error response dict with success=False

    Example:
        >>> from errors import ValidationError, error_response
        >>> err = ValidationError("Invalid model", parameter="model")
        >>> error_response(err)
        {
            "success": False,
            "error": {
                "code": "VALIDATION_MISSING_PARAM",
                "message": "Invalid model",
                "details": None,
                "recoverable": True,
                "context": {"parameter": "model"}
            }
        }
    """
    if isinstance(error, ChatbotError):
        return {
            "success": False,
            "error": {
                "code": error.code.value,
                "message": error.message,
                "details": error.details,
                "recoverable": error.recoverable,
                "context": error.context if include_context else None,
            },
        }

    # Fallback for foreign exceptions
    return {
        "success": False,
        "error": {
            "code": ErrorCode.INTERNAL_UNEXPECTED.value,
            "message": str(error),
            "details": None,
            "recoverable": False,
            "context": None,
        },
    }


def format_error_for_llm(error: ChatbotError | Exception, action: Optional[str] = None) -> str:
    """Format an error as a tool result the model can read and relay.

    Args:
        error: The exception to format
        action: What the tool was doing, e.g. "listing files"

    Returns:
        Formatted error string, e.g. "Error listing files: not a directory"
    """
    prefix = f"Error {action}" if action else "Error"

    if isinstance(error, ChatbotError):
        text = f"{prefix}: {error.message}"
        if error.details:
            text += f" ({error.details})"
        return text

    return f"{prefix}: {error}"
