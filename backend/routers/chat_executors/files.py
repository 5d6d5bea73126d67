"""
Chatbot Chat Executors - Filesystem

Read-only directory listing and recursive name search. Paths are relative
to the server's working directory; parent-directory traversal is refused.
The search is a native directory walk, no external process is spawned.
"""

import fnmatch
import logging
import os
from itertools import islice
from typing import Iterator

from config import runtime_config
from errors import (
    handle_tool_errors,
    ChatbotError,
    ErrorCode,
    ValidationError,
)

logger = logging.getLogger(__name__)

TRAVERSAL_TOKEN = ".."
SHELL_METACHARACTERS = ("|", ";", "&")
ITEM_TYPES = ("file", "directory", "all")

TRAVERSAL_REFUSED = "Error: Access to parent directories is restricted."
SEARCH_REFUSED = "Error: Invalid characters or path traversal detected."
NO_MATCHES = "No matches found."


def _has_forbidden_input(*values: str) -> bool:
    for value in values:
        if TRAVERSAL_TOKEN in value or any(ch in value for ch in SHELL_METACHARACTERS):
            return True
    return False


@handle_tool_errors("listFiles", action="listing files")
def execute_list_files(path: str = ".") -> str:
    """List the entries of a directory, one per line."""
    path = path or "."
    if TRAVERSAL_TOKEN in path:
        return TRAVERSAL_REFUSED
    return "\n".join(sorted(os.listdir(path)))


def _walk_matches(search_path: str, pattern: str, item_type: str) -> Iterator[str]:
    """Yield paths under search_path whose name matches pattern, top-down.

    Like find(1), the starting directory itself is a candidate and
    unreadable subdirectories are skipped silently.
    """
    want_dirs = item_type in ("directory", "all")
    want_files = item_type in ("file", "all")

    root_name = os.path.basename(os.path.normpath(search_path))
    if want_dirs and fnmatch.fnmatchcase(root_name, pattern):
        yield search_path

    for dirpath, dirnames, filenames in os.walk(search_path):
        dirnames.sort()
        if want_dirs:
            for name in dirnames:
                if fnmatch.fnmatchcase(name, pattern):
                    yield os.path.join(dirpath, name)
        if want_files:
            for name in sorted(filenames):
                if fnmatch.fnmatchcase(name, pattern):
                    yield os.path.join(dirpath, name)


@handle_tool_errors("findFiles", action="finding files")
def execute_find_files(pattern: str, search_path: str = ".", item_type: str = "all") -> str:
    """Search recursively for entries whose name matches a glob pattern."""
    search_path = search_path or "."
    item_type = item_type or "all"

    if not pattern:
        raise ValidationError("pattern is required", parameter="pattern")
    if _has_forbidden_input(pattern, search_path):
        return SEARCH_REFUSED
    if item_type not in ITEM_TYPES:
        raise ValidationError(
            f"Invalid type '{item_type}'",
            parameter="type",
            expected="file, directory or all",
            received=item_type,
            code=ErrorCode.VALIDATION_OUT_OF_RANGE,
        )
    if not os.path.isdir(search_path):
        raise ChatbotError(f"No such directory: {search_path}", code=ErrorCode.NOT_FOUND_PATH)

    limit = runtime_config.find_files_max_results
    matches = list(islice(_walk_matches(search_path, pattern, item_type), limit))
    logger.debug(f"findFiles {pattern!r} in {search_path!r}: {len(matches)} matches")
    return "\n".join(matches) if matches else NO_MATCHES
