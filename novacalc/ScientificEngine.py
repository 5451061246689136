# ScientificEngine
"""""
Scientific functions for the NovaCalc engine.

Every function takes the operand as a float and returns a float. Domain
checks run before the math call, so an invalid input is reported as a coded
DomainError instead of a bare ValueError from the math module.

The angle unit is passed in explicitly by the caller; there is no module
level degree setting.
"""""
import math
import logging
from enum import Enum

from . import error as E

logger = logging.getLogger(__name__)

# Largest n for which n! still fits in a float
FACTORIAL_LIMIT = 170


class ScientificFunction(str, Enum):
    SIN = "sin"
    COS = "cos"
    TAN = "tan"
    ASIN = "asin"
    ACOS = "acos"
    ATAN = "atan"
    LOG = "log"
    LN = "ln"
    SQRT = "sqrt"
    CBRT = "cbrt"
    ABS = "abs"
    RECIPROCAL = "reciprocal"
    SQUARE = "square"
    FACTORIAL = "factorial"


# Button captions used by the UI for each function
Science_Labels = {
    ScientificFunction.SIN: "sin",
    ScientificFunction.COS: "cos",
    ScientificFunction.TAN: "tan",
    ScientificFunction.ASIN: "sin⁻¹",
    ScientificFunction.ACOS: "cos⁻¹",
    ScientificFunction.ATAN: "tan⁻¹",
    ScientificFunction.LOG: "log",
    ScientificFunction.LN: "ln",
    ScientificFunction.SQRT: "√",
    ScientificFunction.CBRT: "∛",
    ScientificFunction.ABS: "|x|",
    ScientificFunction.RECIPROCAL: "1/x",
    ScientificFunction.SQUARE: "x²",
    ScientificFunction.FACTORIAL: "n!",
}


def isTrig(func, number, degrees=False):
    """sin / cos / tan; the argument is converted from degrees if asked."""
    if degrees:
        number = math.radians(number)
    if func == ScientificFunction.SIN:
        return math.sin(number)
    elif func == ScientificFunction.COS:
        return math.cos(number)
    return math.tan(number)


def isInverseTrig(func, number, degrees=False):
    if func in (ScientificFunction.ASIN, ScientificFunction.ACOS) and not -1 <= number <= 1:
        raise E.DomainError(f"{func.value}({number})", code="2005")

    if func == ScientificFunction.ASIN:
        ergebnis = math.asin(number)
    elif func == ScientificFunction.ACOS:
        ergebnis = math.acos(number)
    else:
        ergebnis = math.atan(number)

    if degrees:
        return math.degrees(ergebnis)
    return ergebnis


def isLog(func, number):
    """log is base 10, ln is the natural logarithm. Both need number > 0."""
    if number <= 0:
        raise E.DomainError(f"{func.value}({number})", code="2001")
    if func == ScientificFunction.LOG:
        return math.log10(number)
    return math.log(number)


def isRoot(func, number):
    if func == ScientificFunction.SQRT:
        if number < 0:
            raise E.DomainError(f"sqrt({number})", code="2002")
        return math.sqrt(number)
    # Cube root keeps the sign, (-8) -> -2
    return math.copysign(abs(number) ** (1 / 3), number)


def isReciprocal(number):
    if number == 0:
        raise E.DomainError("1/0", code="2003")
    return 1 / number


def isFactorial(number):
    if not float(number).is_integer() or number < 0 or number > FACTORIAL_LIMIT:
        raise E.DomainError(f"{number}!", code="2004")
    return float(math.factorial(int(number)))


def calculate(func, number, degrees=False):
    """Apply one scientific function to number.

    Raises:
        DomainError: input outside the function's domain.
        CalculationError: func is not a known scientific function.
    """
    try:
        func = ScientificFunction(func)
    except ValueError:
        raise E.CalculationError(str(func), code="2000")

    try:
        if func in (ScientificFunction.SIN, ScientificFunction.COS, ScientificFunction.TAN):
            return isTrig(func, number, degrees)
        elif func in (ScientificFunction.ASIN, ScientificFunction.ACOS, ScientificFunction.ATAN):
            return isInverseTrig(func, number, degrees)
        elif func in (ScientificFunction.LOG, ScientificFunction.LN):
            return isLog(func, number)
        elif func in (ScientificFunction.SQRT, ScientificFunction.CBRT):
            return isRoot(func, number)
        elif func == ScientificFunction.ABS:
            return abs(number)
        elif func == ScientificFunction.RECIPROCAL:
            return isReciprocal(number)
        elif func == ScientificFunction.SQUARE:
            return number * number
        else:
            return isFactorial(number)
    except ValueError as e:
        # math module rejected an input the checks above let through
        logger.debug("math rejected %s(%s): %s", func.value, number, e)
        raise E.DomainError(str(e), code="2006", equation=f"{func.value}({number})")
