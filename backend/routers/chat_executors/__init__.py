"""
Chatbot Chat Executors

Re-exports the built-in tool executors registered in tools/registry.py.
Every executor is wrapped with @handle_tool_errors, so a failure comes back
as an error-describing string instead of an exception.
"""

from .calculations import execute_fibonacci, fibonacci
from .files import execute_list_files, execute_find_files

__all__ = [
    "execute_fibonacci",
    "fibonacci",
    "execute_list_files",
    "execute_find_files",
]
