"""
Error codes for the chatbot backend.

Provides a standardized taxonomy of error codes organized by category.
Use these codes consistently across all error responses.
"""

from enum import Enum


class ErrorCode(str, Enum):
    """Standardized error codes.

    Categories:
    - VALIDATION_*: Input validation errors
    - NOT_FOUND_*: Resource not found errors
    - LLM_*: Remote model errors
    - TOOL_*: Local tool errors
    - INTERNAL_*: Internal/unexpected errors
    """

    # Validation errors (input checking)
    VALIDATION_MISSING_PARAM = "VALIDATION_MISSING_PARAM"
    VALIDATION_INVALID_TYPE = "VALIDATION_INVALID_TYPE"
    VALIDATION_OUT_OF_RANGE = "VALIDATION_OUT_OF_RANGE"
    VALIDATION_INVALID_FORMAT = "VALIDATION_INVALID_FORMAT"

    # Not found errors (missing resources)
    NOT_FOUND_TOOL = "NOT_FOUND_TOOL"
    NOT_FOUND_PATH = "NOT_FOUND_PATH"

    # LLM errors (remote model interactions)
    LLM_UNAVAILABLE = "LLM_UNAVAILABLE"
    LLM_OVERLOADED = "LLM_OVERLOADED"
    LLM_REQUEST_REJECTED = "LLM_REQUEST_REJECTED"

    # Tool errors
    TOOL_LIMIT_REACHED = "TOOL_LIMIT_REACHED"

    # Internal errors (unexpected failures)
    INTERNAL_UNEXPECTED = "INTERNAL_UNEXPECTED"
    INTERNAL_STATE_ERROR = "INTERNAL_STATE_ERROR"
