# The module is to define the calculator tool used by the analyst agent.
# Date: 2026-10-17
# Version: 0.1.0

import ast
import math
import operator
import re
from pydantic import BaseModel, Field
from typing import Type

from .base_tool import BaseTool
from switchboard.core.exceptions import ToolExecutionError
from switchboard.utils.logger import console

ALLOWED_EXPRESSION = re.compile(r"^[0-9+\-*/().,\s^%a-zA-Z_]+$")
MAX_EXPRESSION_LENGTH = 500
MAX_EXPONENT = 10000
# Integer results stay below Python's int-to-str conversion limit (4300 digits).
MAX_RESULT_DIGITS = 4000
MAX_COMBINATORIC_ARGUMENT = 1000
_LOG10_2 = math.log10(2)

_BINARY_OPERATORS = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
    ast.Pow: operator.pow,
}

_UNARY_OPERATORS = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}

_CONSTANTS = {
    "pi": math.pi,
    "e": math.e,
    "tau": math.tau,
    "PI": math.pi,
    "E": math.e,
}

_FUNCTIONS = {
    name: getattr(math, name)
    for name in dir(math)
    if not name.startswith("_") and callable(getattr(math, name))
}
_FUNCTIONS.update({"abs": abs, "round": round, "min": min, "max": max})

# Cost grows with the argument itself, so arguments are capped before the call.
_COMBINATORIC_FUNCTIONS = {math.factorial, math.comb, math.perm}

# Accepts Math.sqrt(...) as well as math.sqrt(...).
_NAMESPACES = {"Math", "math"}


class CalculatorInput(BaseModel):
    """
    Input model for the CalculatorTool.
    Attributes:
        expression (str): The arithmetic expression to evaluate.
    """
    expression: str = Field(..., description='The mathematical expression to evaluate (e.g., "2 + 2", "sin(0.5) * 3").')


def _check_magnitude(value):
    if isinstance(value, int) and value.bit_length() * _LOG10_2 > MAX_RESULT_DIGITS:
        raise ToolExecutionError("Result is too large.")
    return value


def _power(base, exponent):
    if isinstance(exponent, (int, float)) and abs(exponent) > MAX_EXPONENT:
        raise ToolExecutionError("Exponent is too large.")
    # Integer powers are exact, so estimate the digit count before computing.
    if isinstance(base, int) and isinstance(exponent, int) and abs(base) > 1 and exponent > 0:
        if exponent * math.log10(abs(base)) > MAX_RESULT_DIGITS:
            raise ToolExecutionError("Result is too large.")
    return operator.pow(base, exponent)


def _call(function, arguments):
    if function in _COMBINATORIC_FUNCTIONS:
        for argument in arguments:
            if isinstance(argument, (int, float)) and abs(argument) > MAX_COMBINATORIC_ARGUMENT:
                raise ToolExecutionError(f"Argument is too large for {function.__name__}.")
    return function(*arguments)


def _resolve_function(node: ast.expr):
    if isinstance(node, ast.Name) and node.id in _FUNCTIONS:
        return _FUNCTIONS[node.id]
    if (
        isinstance(node, ast.Attribute)
        and isinstance(node.value, ast.Name)
        and node.value.id in _NAMESPACES
        and node.attr in _FUNCTIONS
    ):
        return _FUNCTIONS[node.attr]
    raise ToolExecutionError(f"Unsupported function in expression: {ast.unparse(node)}")


def _evaluate(node: ast.AST):
    if isinstance(node, ast.Expression):
        return _evaluate(node.body)
    if isinstance(node, ast.Constant) and isinstance(node.value, (int, float)) and not isinstance(node.value, bool):
        return node.value
    if isinstance(node, ast.BinOp) and type(node.op) in _BINARY_OPERATORS:
        left = _evaluate(node.left)
        right = _evaluate(node.right)
        if isinstance(node.op, ast.Pow):
            return _check_magnitude(_power(left, right))
        return _check_magnitude(_BINARY_OPERATORS[type(node.op)](left, right))
    if isinstance(node, ast.UnaryOp) and type(node.op) in _UNARY_OPERATORS:
        return _UNARY_OPERATORS[type(node.op)](_evaluate(node.operand))
    if isinstance(node, ast.Name) and node.id in _CONSTANTS:
        return _CONSTANTS[node.id]
    if isinstance(node, ast.Attribute) and isinstance(node.value, ast.Name) and node.value.id in _NAMESPACES:
        if node.attr in _CONSTANTS:
            return _CONSTANTS[node.attr]
    if isinstance(node, ast.Call) and not node.keywords:
        function = _resolve_function(node.func)
        return _check_magnitude(_call(function, [_evaluate(arg) for arg in node.args]))
    raise ToolExecutionError(f"Unsupported element in expression: {type(node).__name__}")


def format_number(value) -> str:
    """Renders integral floats without a trailing '.0'."""
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer() and abs(value) < 1e15:
            return str(int(value))
        return repr(value)
    return str(value)


def evaluate_expression(expression: str) -> str:
    """
    Validates and evaluates an arithmetic expression, returning the result as text.
    '^' is treated as exponentiation.
    """
    expression = expression.strip()
    if not expression:
        raise ToolExecutionError("Expression is empty.")
    if len(expression) > MAX_EXPRESSION_LENGTH:
        raise ToolExecutionError("Expression is too long.")
    if not ALLOWED_EXPRESSION.match(expression):
        raise ToolExecutionError("Invalid characters in expression.")

    try:
        tree = ast.parse(expression.replace("^", "**"), mode="eval")
    except SyntaxError:
        raise ToolExecutionError("Error evaluating expression: invalid syntax.")

    try:
        result = _evaluate(tree)
        if isinstance(result, complex):
            raise ToolExecutionError("Error evaluating expression: result is not a real number.")
        return format_number(result)
    except ZeroDivisionError:
        raise ToolExecutionError("Error evaluating expression: division by zero.")
    except (ValueError, TypeError, OverflowError) as e:
        raise ToolExecutionError(f"Error evaluating expression: {e}")


class CalculatorTool(BaseTool):
    """
    Evaluates arithmetic expressions precisely, without calling into Python's eval.
    """
    name: str = "calculator"
    description: str = "Perform mathematical calculations. Use this for any math capability."
    args_schema: Type[BaseModel] = CalculatorInput

    async def execute(self, expression: str) -> str:
        console.info(f"Executing tool '{self.name}' with expression: '{expression}'")
        result = evaluate_expression(expression)
        console.success(f"Tool '{self.name}' evaluated '{expression}' = {result}")
        return result
