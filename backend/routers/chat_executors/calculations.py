"""
Chatbot Chat Executors - Calculations

Pure numeric tools.
"""

import logging
from typing import Union

from errors import (
    ErrorCode,
    handle_tool_errors,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Results up to this many bits go back as plain ints (about 600 digits,
# below the smallest int-to-str limit the interpreter allows)
MAX_INT_RESULT_BITS = 2000

# Digits rendered per str() call when spelling out larger results
_CHUNK_DIGITS = 500


def fibonacci(n: int) -> int:
    """nth Fibonacci number, iteratively: fib(0)=0, fib(1)=1."""
    if n <= 1:
        return n
    a, b = 0, 1
    for _ in range(2, n + 1):
        a, b = b, a + b
    return b


def to_decimal(value: int) -> str:
    """Decimal digits of a non-negative int of any size.

    str() refuses ints past sys.get_int_max_str_digits(), so the value is
    split into fixed-width chunks that each stay well under that limit.
    """
    base = 10 ** _CHUNK_DIGITS
    chunks = []
    while value >= base:
        value, low = divmod(value, base)
        chunks.append(str(low).zfill(_CHUNK_DIGITS))
    chunks.append(str(value))
    return "".join(reversed(chunks))


def _coerce_index(n) -> int:
    """The model sends NUMBER parameters as floats; accept only whole, non-negative values."""
    if isinstance(n, bool) or not isinstance(n, (int, float)):
        raise ValidationError(
            "n must be a number",
            parameter="n",
            expected="non-negative integer",
            received=repr(n),
            code=ErrorCode.VALIDATION_INVALID_TYPE,
        )
    if isinstance(n, float):
        if not n.is_integer():
            raise ValidationError(
                "n must be a whole number",
                parameter="n",
                expected="non-negative integer",
                received=repr(n),
                code=ErrorCode.VALIDATION_INVALID_TYPE,
            )
        n = int(n)
    if n < 0:
        raise ValidationError(
            "n must be non-negative",
            parameter="n",
            expected="non-negative integer",
            received=repr(n),
            code=ErrorCode.VALIDATION_OUT_OF_RANGE,
        )
    return n


@handle_tool_errors("fibonacci", action="calculating Fibonacci number")
def execute_fibonacci(n) -> Union[int, str]:
    """Calculate the nth Fibonacci number for the model.

    Large results are returned as a decimal string so they can be logged,
    JSON-encoded and sent back to the model like any other result.
    """
    value = fibonacci(_coerce_index(n))
    if value.bit_length() <= MAX_INT_RESULT_BITS:
        return value
    logger.info(f"fibonacci({n}) has {value.bit_length()} bits, returning decimal string")
    return to_decimal(value)
