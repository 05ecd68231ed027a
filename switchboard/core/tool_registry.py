# Discovers and manages all available tools automatically.
# Date: 2026-10-17
# Version: 0.1.0

import pkgutil
import inspect
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional

from pydantic import ValidationError

from switchboard import tools as tools_package
from switchboard.core.exceptions import ToolExecutionError
from switchboard.models.common import ToolDeclaration, ToolResult
from switchboard.tools.base_tool import BaseTool
from switchboard.utils.logger import console

ExecutableFunction = Callable[[Dict[str, Any]], Awaitable[ToolResult]]


def _format_validation_error(tool_name: str, error: ValidationError) -> str:
    problems = []
    for item in error.errors():
        location = ".".join(str(part) for part in item.get("loc", ())) or "arguments"
        problems.append(f"{location}: {item.get('msg')}")
    return f"Invalid arguments for tool '{tool_name}': " + "; ".join(problems)


class ToolRegistry:
    """
    A class to automatically discover, register, and execute tools.
    """
    def __init__(self, tools: Optional[Iterable[BaseTool]] = None):
        self.tools: Dict[str, BaseTool] = {}
        if tools is None:
            self._discover_tools()
            console.success(f"Tool discovery complete. Found {len(self.tools)} tools: {list(self.tools.keys())}")
        else:
            for tool in tools:
                self.register(tool)

    def _discover_tools(self):
        """
        Scans the switchboard.tools package, imports all modules, finds classes that
        inherit from BaseTool, and creates an instance of each to register.
        """
        for _, modname, _ in pkgutil.iter_modules(tools_package.__path__, f"{tools_package.__name__}."):
            if modname.startswith(f"{tools_package.__name__}.base_tool"):
                continue
            try:
                module = __import__(modname, fromlist="dummy")
                for name, obj in inspect.getmembers(module):
                    if (
                        inspect.isclass(obj)
                        and issubclass(obj, BaseTool)
                        and obj is not BaseTool
                        and obj.__module__ == module.__name__
                    ):
                        self.register(obj())
            except Exception as e:
                console.error(f"Failed to load or register tool from module {modname}: {e}")

    def register(self, tool: BaseTool):
        if tool.name in self.tools:
            raise ValueError(f"Tool '{tool.name}' is already registered.")
        self.tools[tool.name] = tool
        console.info(f"Successfully registered tool: '{tool.name}'")

    def get(self, tool_name: str) -> Optional[BaseTool]:
        return self.tools.get(tool_name)

    def get_declarations(self, tool_names: Iterable[str]) -> List[ToolDeclaration]:
        """Returns the declarations of the named tools, in the order given."""
        declarations = []
        for tool_name in tool_names:
            tool = self.tools.get(tool_name)
            if tool is None:
                raise KeyError(f"Tool '{tool_name}' is not registered.")
            declarations.append(tool.get_declaration())
        return declarations

    async def execute(self, tool_name: str, arguments: Optional[Dict[str, Any]] = None) -> ToolResult:
        """
        Executes a tool by its name. Never raises: every failure is returned
        as a ToolResult carrying a human-readable message.
        """
        tool = self.tools.get(tool_name)
        if tool is None:
            console.error(f"Attempted to execute unknown tool: {tool_name}")
            return ToolResult.failure(f"Tool '{tool_name}' not found.")

        try:
            validated = tool.args_schema.model_validate(arguments or {})
        except ValidationError as e:
            message = _format_validation_error(tool_name, e)
            console.warning(message)
            return ToolResult.failure(message)

        try:
            value = await tool.execute(**validated.model_dump())
        except ToolExecutionError as e:
            console.warning(f"Tool '{tool_name}' rejected the call: {e}")
            return ToolResult.failure(str(e))
        except Exception as e:
            console.exception(f"Error executing tool '{tool_name}'")
            return ToolResult.failure(f"Error: {e}")

        return ToolResult.success(value)

    def bind(self, tool_name: str) -> ExecutableFunction:
        """Returns an async callable that executes the named tool with a mapping of arguments."""
        if tool_name not in self.tools:
            raise KeyError(f"Tool '{tool_name}' is not registered.")

        async def run(arguments: Dict[str, Any]) -> ToolResult:
            return await self.execute(tool_name, arguments)

        run.__name__ = tool_name
        return run

# Create a singleton instance for global use throughout the application.
tool_registry = ToolRegistry()
