# display.py
"""""
Text formatting between engine snapshots and the window.

The engine stores plain numbers ('1234567.5'); the display shows them with
grouping separators ('1,234,567.5'). Sentinel texts pass through unchanged.
"""""
import re

from . import MathEngine

NUMBER_PATTERN = re.compile(r"^(-?)(\d+)(\.\d*)?$")

State_Labels = {
    MathEngine.DisplayState.NORMAL: "",
    MathEngine.DisplayState.ERROR: "Invalid operation",
    MathEngine.DisplayState.INFINITY: "Result too large",
}


def group_digits(text, separator=","):
    """Insert separator every three digits of the integer part of a plain number."""
    match = NUMBER_PATTERN.match(text)
    if not match:
        # Exponent form and sentinels are shown as they are
        return text
    sign, integer, fraction = match.groups()
    grouped = f"{int(integer):,}".replace(",", separator)
    return f"{sign}{grouped}{fraction or ''}"


def format_operand(text, grouping=True):
    if not grouping:
        return text
    return group_digits(text)


def format_equation(text, grouping=True):
    if not grouping:
        return text
    return " ".join(group_digits(part) for part in text.split(" "))


def state_label(state):
    return State_Labels[state]
