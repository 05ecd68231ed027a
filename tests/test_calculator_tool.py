"""Tests for the calculator tool's validation and evaluation."""
import pytest

from switchboard.core.exceptions import ToolExecutionError
from switchboard.tools.calculator_tool import CalculatorTool, evaluate_expression


@pytest.mark.parametrize(
    "expression, expected",
    [
        ("2+2*10", "22"),
        ("(2 + 3) * 4", "20"),
        ("10 / 4", "2.5"),
        ("8 / 2", "4"),
        ("2^10", "1024"),
        ("17 % 5", "2"),
        ("-3 + 1", "-2"),
        ("Math.sqrt(16)", "4"),
        ("floor(7.9)", "7"),
        ("round(pi, 4)", "3.1416"),
        ("max(3, 9, 4)", "9"),
    ],
)
def test_expressions_evaluate(expression, expected):
    assert evaluate_expression(expression) == expected


@pytest.mark.parametrize(
    "expression, message",
    [
        ("__import__('os')", "Invalid characters"),
        ("1; 2", "Invalid characters"),
        ("", "empty"),
        ("1/0", "division by zero"),
        ("2 +", "invalid syntax"),
        ("open(1)", "Unsupported function"),
        ("foo + 1", "Unsupported element"),
        ("9^99999", "too large"),
        ("sqrt(-1)", "Error evaluating expression"),
    ],
)
def test_invalid_expressions_are_rejected(expression, message):
    with pytest.raises(ToolExecutionError) as excinfo:
        evaluate_expression(expression)
    assert message in str(excinfo.value)


@pytest.mark.parametrize(
    "expression, message",
    [
        ("(9^9999)^2999", "Result is too large"),
        ("10^5000", "Result is too large"),
        ("(10^3000)*(10^3000)", "Result is too large"),
        ("factorial(99999)", "Argument is too large for factorial"),
        ("comb(100000, 50000)", "Argument is too large for comb"),
        ("perm(5000)", "Argument is too large for perm"),
    ],
)
def test_oversized_results_are_rejected_before_computing(expression, message):
    with pytest.raises(ToolExecutionError) as excinfo:
        evaluate_expression(expression)
    assert message in str(excinfo.value)


def test_large_results_within_bounds_still_evaluate():
    assert evaluate_expression("2^1000") == str(2 ** 1000)
    assert evaluate_expression("factorial(20)") == "2432902008176640000"
    assert evaluate_expression("(-1)^9999") == "-1"


@pytest.mark.asyncio
async def test_tool_execute_returns_text_result():
    assert await CalculatorTool().execute(expression="2+2*10") == "22"
