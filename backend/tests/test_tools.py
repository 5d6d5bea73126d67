"""
Tests for the built-in tools and the tool registry.
"""

import os

import pytest

from config import runtime_config
from errors import ErrorCode, UnknownToolError, ValidationError
from routers.chat_executors import (
    execute_fibonacci,
    execute_find_files,
    execute_list_files,
    fibonacci,
)
from routers.chat_executors.calculations import _coerce_index, to_decimal
from routers.chat_executors.files import NO_MATCHES, SEARCH_REFUSED, TRAVERSAL_REFUSED
from tools.registry import ToolCategory, ToolDefinition, ToolInvocation


@pytest.fixture
def sample_tree(tmp_path, monkeypatch):
    """A small directory tree; the working directory is its root."""
    (tmp_path / "cat").mkdir()
    (tmp_path / "cat" / "black.png").write_text("")
    (tmp_path / "cat" / "white.png").write_text("")
    (tmp_path / "docs").mkdir()
    (tmp_path / "docs" / "cat").mkdir()
    (tmp_path / "docs" / "readme.md").write_text("")
    (tmp_path / "main.py").write_text("")
    monkeypatch.chdir(tmp_path)
    return tmp_path


class TestFibonacci:
    """fibonacci(n): iterative, fib(0)=0, fib(1)=1."""

    def test_first_values(self):
        assert [fibonacci(n) for n in range(11)] == [0, 1, 1, 2, 3, 5, 8, 13, 21, 34, 55]

    def test_recurrence_holds(self):
        for n in range(2, 60):
            assert fibonacci(n) == fibonacci(n - 1) + fibonacci(n - 2)

    def test_large_index_is_exact(self):
        # No overflow or float rounding
        assert fibonacci(100) == 354224848179261915075

    def test_executor_accepts_whole_float(self):
        """NUMBER parameters arrive as floats."""
        assert execute_fibonacci(5.0) == 5
        assert isinstance(execute_fibonacci(5.0), int)

    def test_executor_rejects_negative(self):
        result = execute_fibonacci(-1)
        assert result.startswith("Error calculating Fibonacci number: n must be non-negative")

    def test_executor_rejects_fraction(self):
        assert execute_fibonacci(2.5).startswith("Error calculating Fibonacci number:")

    def test_executor_rejects_non_number(self):
        assert execute_fibonacci("five").startswith("Error calculating Fibonacci number:")
        assert execute_fibonacci(True).startswith("Error calculating Fibonacci number:")

    def test_large_result_is_decimal_string(self):
        result = execute_fibonacci(30000.0)
        assert isinstance(result, str)
        assert result.isdigit()
        assert result[-10:] == str(fibonacci(30000) % 10**10).zfill(10)

    def test_result_type_switches_at_bit_limit(self):
        assert isinstance(execute_fibonacci(2000), int)
        assert isinstance(execute_fibonacci(3000), str)
        assert execute_fibonacci(3000) == str(fibonacci(3000))

    def test_to_decimal_keeps_inner_zeros(self):
        assert to_decimal(0) == "0"
        assert to_decimal(10**600) == "1" + "0" * 600
        assert to_decimal(10**1200 + 7) == str(10**1200 + 7)

    @pytest.mark.parametrize(
        "n,code",
        [
            ("five", ErrorCode.VALIDATION_INVALID_TYPE),
            (2.5, ErrorCode.VALIDATION_INVALID_TYPE),
            (-1, ErrorCode.VALIDATION_OUT_OF_RANGE),
        ],
    )
    def test_index_error_codes(self, n, code):
        with pytest.raises(ValidationError) as exc_info:
            _coerce_index(n)
        assert exc_info.value.code == code
        assert exc_info.value.context["parameter"] == "n"


class TestListFiles:
    """listFiles(path)."""

    def test_lists_current_directory_sorted(self, sample_tree):
        assert execute_list_files() == "cat\ndocs\nmain.py"

    def test_lists_subdirectory(self, sample_tree):
        assert execute_list_files("cat") == "black.png\nwhite.png"

    def test_empty_path_means_current_directory(self, sample_tree):
        assert execute_list_files("") == execute_list_files(".")

    def test_empty_directory(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert execute_list_files() == ""

    def test_traversal_refused(self, sample_tree):
        assert execute_list_files("..") == TRAVERSAL_REFUSED
        assert execute_list_files("cat/../..") == TRAVERSAL_REFUSED

    def test_missing_directory_is_error_text(self, sample_tree):
        result = execute_list_files("nope")
        assert result.startswith("Error listing files: ")
        assert "nope" in result


class TestFindFiles:
    """findFiles(pattern, searchPath, type)."""

    def test_all_types(self, sample_tree):
        assert execute_find_files("cat").splitlines() == ["./cat", "./docs/cat"]

    def test_files_only(self, sample_tree):
        assert execute_find_files("*.png", item_type="file").splitlines() == [
            "./cat/black.png",
            "./cat/white.png",
        ]

    def test_directories_only(self, sample_tree):
        assert execute_find_files("*", search_path="docs", item_type="directory").splitlines() == [
            "docs",
            "docs/cat",
        ]

    def test_no_matches(self, sample_tree):
        assert execute_find_files("*.rs") == NO_MATCHES

    def test_result_cap(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        for i in range(30):
            (tmp_path / f"f{i:02d}.txt").write_text("")
        monkeypatch.setattr(runtime_config, "find_files_max_results", 20)

        lines = execute_find_files("*.txt", item_type="file").splitlines()
        assert len(lines) == 20

    @pytest.mark.parametrize(
        "pattern,search_path",
        [
            ("../x", "."),
            ("*.py", ".."),
            ("*.py; rm -rf /", "."),
            ("a|b", "."),
            ("a&b", "."),
            ("*.py", "docs;ls"),
        ],
    )
    def test_forbidden_input_refused(self, sample_tree, pattern, search_path):
        assert execute_find_files(pattern, search_path=search_path) == SEARCH_REFUSED

    def test_invalid_type(self, sample_tree):
        assert execute_find_files("cat", item_type="socket").startswith("Error finding files: Invalid type")

    def test_missing_pattern(self, sample_tree):
        assert execute_find_files("").startswith("Error finding files: pattern is required")

    def test_missing_search_path(self, sample_tree):
        assert execute_find_files("*", search_path="nope").startswith("Error finding files: No such directory")


class TestRefusalsWithoutFilesystemAccess:
    """Refused inputs are answered before any directory is touched."""

    @pytest.fixture
    def no_filesystem(self, monkeypatch):
        def forbidden(*args, **kwargs):
            raise AssertionError(f"filesystem accessed with {args!r}")

        for name in ("listdir", "scandir", "walk"):
            monkeypatch.setattr(os, name, forbidden)
        monkeypatch.setattr(os.path, "isdir", forbidden)
        monkeypatch.setattr(os.path, "exists", forbidden)

    @pytest.mark.parametrize("path", ["..", "../etc", "cat/../..", "/tmp/.."])
    def test_list_files_traversal(self, no_filesystem, path):
        assert execute_list_files(path) == TRAVERSAL_REFUSED

    @pytest.mark.parametrize(
        "pattern,search_path,item_type",
        [
            ("a;b", ".", "all"),
            ("*.py", "..", "all"),
            ("x|y", ".", "file"),
            ("*", "docs&ls", "directory"),
            # Refused before the type is checked
            ("a;b", ".", "socket"),
        ],
    )
    def test_find_files_forbidden_input(self, no_filesystem, pattern, search_path, item_type):
        assert execute_find_files(pattern, search_path=search_path, item_type=item_type) == SEARCH_REFUSED


class TestToolRegistry:
    """Registry declarations and dispatch."""

    def test_builtin_tools_registered(self, tool_registry):
        assert set(tool_registry.get_all_tools()) == {"fibonacci", "listFiles", "findFiles"}
        assert [t.name for t in tool_registry.get_tools_by_category(ToolCategory.FILESYSTEM)] == [
            "listFiles",
            "findFiles",
        ]

    def test_register_all_tools_is_idempotent(self, tool_registry):
        from tools.registry import register_all_tools

        register_all_tools()
        assert len(tool_registry.get_all_tools()) == 3

    def test_declarations(self, tool_registry):
        declarations = {d["name"]: d for d in tool_registry.get_function_declarations()}

        fib = declarations["fibonacci"]
        assert fib["description"] == "Calculates the nth Fibonacci number."
        assert fib["parameters"]["type"] == "OBJECT"
        assert fib["parameters"]["properties"]["n"]["type"] == "NUMBER"
        assert fib["parameters"]["required"] == ["n"]

        assert declarations["listFiles"]["parameters"]["required"] == []

        find = declarations["findFiles"]
        assert set(find["parameters"]["properties"]) == {"pattern", "searchPath", "type"}
        assert find["parameters"]["properties"]["type"]["enum"] == ["file", "directory", "all"]
        assert find["parameters"]["required"] == ["pattern"]

    def test_execute_returns_invocation(self, tool_registry):
        invocation = tool_registry.execute("fibonacci", {"n": 5})
        assert invocation == ToolInvocation(name="fibonacci", args={"n": 5}, result=5)
        assert invocation.to_dict() == {"name": "fibonacci", "args": {"n": 5}, "result": 5}

    def test_execute_maps_wire_argument_names(self, tool_registry, sample_tree):
        invocation = tool_registry.execute("findFiles", {"pattern": "*.md", "searchPath": "docs", "type": "file"})
        assert invocation.result == os.path.join("docs", "readme.md")
        # Args are reported as the model sent them
        assert invocation.args == {"pattern": "*.md", "searchPath": "docs", "type": "file"}

    def test_execute_ignores_unknown_and_null_args(self, tool_registry, sample_tree):
        invocation = tool_registry.execute("listFiles", {"path": None, "recursive": True})
        assert invocation.result == "cat\ndocs\nmain.py"

    def test_execute_unknown_tool(self, tool_registry):
        with pytest.raises(UnknownToolError) as exc_info:
            tool_registry.execute("rm", {})
        assert exc_info.value.tool_name == "rm"

    def test_executor_exception_becomes_result_text(self, tool_registry):
        def explode(**kwargs):
            raise RuntimeError("kaboom")

        tool_registry.register(
            ToolDefinition(
                name="explode",
                description="Always fails.",
                parameters={},
                required_params=[],
                executor=explode,
                category=ToolCategory.SIMPLE,
            )
        )

        invocation = tool_registry.execute("explode", {"x": 1})
        assert invocation.result == "Error executing explode: kaboom"
