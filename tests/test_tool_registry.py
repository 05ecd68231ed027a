"""Tests for tool discovery, declarations and never-raising execution."""
import pytest
from pydantic import BaseModel

from switchboard.core.exceptions import ToolExecutionError
from switchboard.core.tool_registry import ToolRegistry, tool_registry
from switchboard.tools.base_tool import BaseTool
from switchboard.tools.calculator_tool import CalculatorTool


class EchoInput(BaseModel):
    text: str


class EchoTool(BaseTool):
    name = "echo"
    description = "Echoes text."
    args_schema = EchoInput

    async def execute(self, text: str):
        if text == "reject":
            raise ToolExecutionError("Rejected input.")
        if text == "crash":
            raise KeyError("boom")
        return text.upper()


def test_discovery_finds_builtin_tools():
    assert {"calculator", "search_cars", "search_web"} <= set(tool_registry.tools)


def test_get_returns_registered_instance_or_none():
    registry = ToolRegistry(tools=[EchoTool()])
    assert isinstance(registry.get("echo"), EchoTool)
    assert registry.get("missing") is None


def test_definitions_follow_function_calling_shape():
    declarations = tool_registry.get_declarations(tool_registry.tools)
    for definition in [declaration.to_openai() for declaration in declarations]:
        assert definition["type"] == "function"
        function = definition["function"]
        assert function["name"]
        assert function["description"]
        assert function["parameters"]["type"] == "object"


def test_declarations_keep_requested_order():
    declarations = tool_registry.get_declarations(["search_cars", "calculator"])
    assert [declaration.name for declaration in declarations] == ["search_cars", "calculator"]
    assert "expression" in declarations[1].parameters["properties"]


def test_declarations_for_unknown_tool_raise():
    with pytest.raises(KeyError):
        tool_registry.get_declarations(["teleport"])


def test_duplicate_registration_is_rejected():
    with pytest.raises(ValueError):
        ToolRegistry(tools=[EchoTool(), EchoTool()])


@pytest.mark.asyncio
async def test_execute_returns_success_value():
    registry = ToolRegistry(tools=[EchoTool()])
    result = await registry.execute("echo", {"text": "hi"})
    assert result.ok
    assert result.value == "HI"


@pytest.mark.asyncio
async def test_unknown_tool_is_a_failure_not_an_exception():
    result = await ToolRegistry(tools=[]).execute("teleport", {})
    assert not result.ok
    assert result.error == "Tool 'teleport' not found."


@pytest.mark.asyncio
async def test_invalid_arguments_are_reported():
    result = await ToolRegistry(tools=[EchoTool()]).execute("echo", {"wrong": 1})
    assert not result.ok
    assert result.error.startswith("Invalid arguments for tool 'echo'")
    assert "text" in result.error


@pytest.mark.asyncio
async def test_tool_errors_become_failures():
    registry = ToolRegistry(tools=[EchoTool()])

    rejected = await registry.execute("echo", {"text": "reject"})
    crashed = await registry.execute("echo", {"text": "crash"})

    assert rejected.error == "Rejected input."
    assert not crashed.ok
    assert crashed.error.startswith("Error:")


@pytest.mark.asyncio
async def test_bound_function_executes_through_registry():
    registry = ToolRegistry(tools=[CalculatorTool()])
    run = registry.bind("calculator")

    result = await run({"expression": "6*7"})

    assert result.ok
    assert result.value == "42"
    with pytest.raises(KeyError):
        registry.bind("missing")
