import pytest

from novacalc import display, error as E
from novacalc.MathEngine import DisplayState


@pytest.mark.parametrize("text, expected", [
    ("0", "0"),
    ("999", "999"),
    ("1234", "1,234"),
    ("1234567.891", "1,234,567.891"),
    ("-1234", "-1,234"),
    ("1000.", "1,000."),
    ("Error", "Error"),
    ("-Infinity", "-Infinity"),
    ("1e+21", "1e+21"),
])
def test_format_operand(text, expected):
    assert display.format_operand(text) == expected


def test_grouping_disabled():
    assert display.format_operand("1234567") == "1,234,567"
    assert display.format_operand("1234567", grouping=False) == "1234567"


def test_format_equation():
    assert display.format_equation("1234 + 5678 × ") == "1,234 + 5,678 × "
    assert display.format_equation("1234 + ", grouping=False) == "1234 + "


def test_state_labels():
    assert display.state_label(DisplayState.NORMAL) == ""
    assert display.state_label(DisplayState.ERROR)
    assert display.state_label(DisplayState.INFINITY)


def test_error_description():
    error = E.CalculationError("Division by zero", code="3003", equation="5 ÷ 0")
    assert E.describe(error) == "Calculator Error 3003: Division by Zero"

    error = E.ParseError("'abc'", code="3011", equation="1 + abc")
    assert E.describe(error) == "Calculator Error 3011: Unexpected Token: 1 + abc"

    assert E.describe(E.MathError("boom")) == "Unexpected Error 9999: Unexpected Error: boom"
