"""
Tool Registry - Fixed mapping from tool name to schema and executor.

Each tool is a self-contained definition registered at start-up. The
registry produces the function declarations sent to the remote model
verbatim, and dispatches the model's function calls to local executors.
"""

import inspect
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any, List, Callable, Optional
import logging

from errors import UnknownToolError, format_error_for_llm

logger = logging.getLogger(__name__)


class ToolCategory(Enum):
    """Tool categories for grouping."""

    SIMPLE = "simple"  # Pure calculations
    FILESYSTEM = "filesystem"  # Read-only directory inspection


@dataclass
class ToolDefinition:
    """Definition of a tool for the registry."""

    name: str
    description: str
    parameters: Dict[str, Any]
    required_params: List[str]
    executor: Callable[..., Any]
    category: ToolCategory
    arg_aliases: Dict[str, str] = field(default_factory=dict)  # wire name -> executor kwarg

    def to_declaration(self) -> Dict[str, Any]:
        """Function declaration in the remote API's schema dialect."""
        return {
            "name": self.name,
            "description": self.description,
            "parameters": {
                "type": "OBJECT",
                "properties": self.parameters,
                "required": self.required_params,
            },
        }


@dataclass(frozen=True)
class ToolInvocation:
    """A resolved function call: what was asked for and what the tool returned."""

    name: str
    args: Dict[str, Any]
    result: Any

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "args": self.args, "result": self.result}


class ToolRegistry:
    """
    Central registry for all chatbot tools.

    Usage:
        # Register a tool
        ToolRegistry.register(ToolDefinition(...))

        # Get declarations for the remote model
        declarations = ToolRegistry.get_function_declarations()

        # Execute a tool
        invocation = ToolRegistry.execute("fibonacci", {"n": 5})
    """

    _tools: Dict[str, ToolDefinition] = {}
    _initialized: bool = False

    @classmethod
    def register(cls, tool: ToolDefinition) -> None:
        """Register a tool definition."""
        cls._tools[tool.name] = tool
        logger.debug(f"Registered tool: {tool.name}")

    @classmethod
    def get_tool(cls, name: str) -> Optional[ToolDefinition]:
        """Get a tool definition by name."""
        return cls._tools.get(name)

    @classmethod
    def get_function_declarations(cls) -> List[Dict[str, Any]]:
        """Generate the function-calling declarations sent to the remote model."""
        return [tool.to_declaration() for tool in cls._tools.values()]

    @classmethod
    def execute(cls, name: str, args: Optional[Dict[str, Any]] = None) -> ToolInvocation:
        """
        Execute a tool by name with given arguments.

        Executor failures never propagate: they become a textual error result
        that is fed back to the model like any other result.

        Args:
            name: Tool name
            args: Tool arguments as sent by the model

        Returns:
            ToolInvocation with the arguments and the result value

        Raises:
            UnknownToolError: If no tool is registered under name
        """
        tool = cls._tools.get(name)
        if not tool:
            raise UnknownToolError(name)

        args = dict(args or {})
        try:
            result = tool.executor(**cls._executor_kwargs(tool, args))
        except Exception as e:
            logger.error(f"Tool {name} failed: {e}", exc_info=True)
            result = format_error_for_llm(e, f"executing {name}")

        return ToolInvocation(name=name, args=args, result=result)

    @staticmethod
    def _executor_kwargs(tool: ToolDefinition, args: Dict[str, Any]) -> Dict[str, Any]:
        """Map wire argument names to executor kwargs, dropping ones it does not accept.

        Null arguments are dropped so the executor's defaults apply.
        """
        renamed = {tool.arg_aliases.get(k, k): v for k, v in args.items() if v is not None}
        sig = inspect.signature(tool.executor)
        has_var_kw = any(p.kind == inspect.Parameter.VAR_KEYWORD for p in sig.parameters.values())
        if has_var_kw:
            return renamed
        accepted = set(sig.parameters.keys())
        return {k: v for k, v in renamed.items() if k in accepted}

    @classmethod
    def get_all_tools(cls) -> Dict[str, ToolDefinition]:
        """Get all registered tools."""
        return cls._tools.copy()

    @classmethod
    def get_tools_by_category(cls, category: ToolCategory) -> List[ToolDefinition]:
        """Get all tools in a category."""
        return [t for t in cls._tools.values() if t.category == category]

    @classmethod
    def clear(cls) -> None:
        """Clear all registered tools (for testing)."""
        cls._tools.clear()
        cls._initialized = False


def _register_core_tools() -> None:
    """Register the built-in tools."""
    from routers.chat_executors import (
        execute_fibonacci,
        execute_list_files,
        execute_find_files,
    )

    # fibonacci: iterative nth Fibonacci number
    ToolRegistry.register(
        ToolDefinition(
            name="fibonacci",
            description="Calculates the nth Fibonacci number.",
            parameters={
                "n": {
                    "type": "NUMBER",
                    "description": "The position in the Fibonacci sequence (0-based index).",
                },
            },
            required_params=["n"],
            executor=execute_fibonacci,
            category=ToolCategory.SIMPLE,
        )
    )

    # listFiles: directory listing
    ToolRegistry.register(
        ToolDefinition(
            name="listFiles",
            description="Lists files and directories in the current directory or a subdirectory.",
            parameters={
                "path": {
                    "type": "STRING",
                    "description": "The relative path to list files from (default is current directory '.').",
                },
            },
            required_params=[],
            executor=execute_list_files,
            category=ToolCategory.FILESYSTEM,
        )
    )

    # findFiles: recursive name search
    ToolRegistry.register(
        ToolDefinition(
            name="findFiles",
            description="Searches for files or directories matching a pattern recursively.",
            parameters={
                "pattern": {
                    "type": "STRING",
                    "description": "The glob pattern or filename to search for (e.g., '*.py', 'main.py').",
                },
                "searchPath": {
                    "type": "STRING",
                    "description": "The directory to start searching from (default is '.').",
                },
                "type": {
                    "type": "STRING",
                    "description": "The type of item to search for. Can be 'file', 'directory', or 'all'. Default is 'all'.",
                    "enum": ["file", "directory", "all"],
                },
            },
            required_params=["pattern"],
            executor=execute_find_files,
            category=ToolCategory.FILESYSTEM,
            arg_aliases={"searchPath": "search_path", "type": "item_type"},
        )
    )

    logger.info(f"Registered {len(ToolRegistry._tools)} core tools")


def register_all_tools() -> None:
    """Register all tools with the registry (idempotent)."""
    if ToolRegistry._initialized:
        return

    _register_core_tools()

    ToolRegistry._initialized = True
    logger.info(f"Total tools: {len(ToolRegistry._tools)}")
