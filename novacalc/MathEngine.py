# MathEngine.py
"""""
Core calculation engine for NovaCalc.

Pipeline
--------
1) Buffers: the host feeds key presses into an operand buffer (the number
   being typed) and a flat equation buffer ('12 + 3 × ').
2) Tokenizer: splits the equation text into numbers, operators and '%'.
3) Evaluator: folds the term list strictly left to right. A trailing
   'A op B %' is resolved with calculator percentage rules first.
4) Formatter: rounds half away from zero to the requested precision and
   renders normalised text ('2', not '2.0000').

Every public method of CalculatorEngine returns a Snapshot. Calculation
errors never leave the engine; they turn the display into 'Error' (invalid
operation) or 'Infinity' (overflow).
"""""

import re
import math
import logging
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP, localcontext
from enum import Enum

from . import ScientificEngine
from . import error as E

logger = logging.getLogger(__name__)

MIN_PRECISION = 0
MAX_PRECISION = 8

# Display texts that block numeric editing
ERROR = "Error"
SENTINELS = ("Error", "Infinity", "-Infinity", "NaN")

# Beyond this magnitude results are shown in exponent form ('1e+21')
EXPONENT_THRESHOLD = 21

# Enough digits to quantize any finite float to MAX_PRECISION places
DECIMAL_PRECISION = 400

# '÷ 0' not followed by a digit or point, e.g. '5 ÷ 0' but not '5 ÷ 0.5'
LITERAL_ZERO_DIVISION = re.compile(r"÷ -?0(?![\d.])")


class Operator(str, Enum):
    ADD = "+"
    SUBTRACT = "−"
    MULTIPLY = "×"
    DIVIDE = "÷"
    PERCENT = "%"
    POWER = "^"


# Keyboard spellings accepted by apply_operator
Operator_Aliases = {
    "-": Operator.SUBTRACT,
    "*": Operator.MULTIPLY,
    "x": Operator.MULTIPLY,
    "/": Operator.DIVIDE,
    "**": Operator.POWER,
}

Operator_Symbols = [op.value for op in Operator]
Binary_Operations = [Operator.ADD, Operator.SUBTRACT, Operator.MULTIPLY, Operator.DIVIDE, Operator.POWER]
Percentage_Operations = [Operator.ADD, Operator.SUBTRACT, Operator.MULTIPLY, Operator.DIVIDE]

Constants = {"pi": math.pi, "π": math.pi, "e": math.e}


class DisplayState(Enum):
    NORMAL = "normal"
    ERROR = "error"
    INFINITY = "infinity"


@dataclass(frozen=True)
class Snapshot:
    """Read-only view of the engine handed to the display layer."""
    operand_text: str
    equation_text: str
    display_state: DisplayState


@dataclass
class Term:
    """One '<operator> <number>[%]' element of a flat expression."""
    operator: Operator
    number: float
    percent: bool = False

    def value(self):
        return self.number / 100 if self.percent else self.number


# -----------------------------
# Utilities / small helpers
# -----------------------------

def isSentinel(text):
    return text in SENTINELS


def isExponentForm(text):
    """Results of 1e21 and up are shown as '1e+24'; they are finished, not editable."""
    return "e" in text


def isLocked(text):
    """Operand texts that digit entry replaces instead of extending."""
    return isSentinel(text) or isExponentForm(text)


def check_precision(precision):
    """Reject precisions outside 0..8; a bool is not a precision."""
    if isinstance(precision, bool) or not isinstance(precision, int) \
            or not MIN_PRECISION <= precision <= MAX_PRECISION:
        raise E.ConfigurationError(f"precision={precision!r}", code="5001")


def parse_operand(text):
    """Return the operand text as a finite float or raise ParseError."""
    try:
        value = float(text)
    except ValueError:
        raise E.ParseError(f"'{text}'", code="3000", equation=text)
    # float() also accepts 'inf' and 'nan'
    if not math.isfinite(value):
        raise E.ParseError(f"'{text}'", code="3000", equation=text)
    return value


def to_operator(op):
    """Normalise an Operator, its symbol or a keyboard alias."""
    if isinstance(op, Operator):
        return op
    if op in Operator_Aliases:
        return Operator_Aliases[op]
    try:
        return Operator(op)
    except ValueError:
        raise E.CalculationError(f"'{op}'", code="3004")


# -----------------------------
# Result formatting
# -----------------------------

def format_number(number):
    """Render a Decimal without trailing zeros, '-0' or needless exponent."""
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        if number.is_zero():
            return "0"
        normal = number.normalize()
        if normal.adjusted() >= EXPONENT_THRESHOLD:
            return repr(float(normal))
        return format(normal, "f")


def cleanup(ergebnis, precision):
    """Round a float result half away from zero and return normalised text.

    Rounding works on the shortest decimal representation of the float, so
    1.005 with precision 2 becomes '1.01'.
    """
    check_precision(precision)
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        rundungs_muster = Decimal(1).scaleb(-precision)
        gerundet = Decimal(repr(ergebnis)).quantize(rundungs_muster, rounding=ROUND_HALF_UP)
    return format_number(gerundet)


def percent_of(text):
    """Standalone '%': '50' -> '0.5', computed exactly on the decimal text."""
    number = parse_operand(text)
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        return format_number(Decimal(repr(number)) / 100)


# -----------------------------
# Tokenizer
# -----------------------------

def translator(problem):
    """Convert the flat equation text into a token list of floats and Operators.

    The buffer is built with single spaces between every token, and negative
    numbers carry a plain '-' while subtraction uses '−', so splitting on
    whitespace is unambiguous.
    """
    tokens = []
    for part in problem.split():
        if part in Operator_Symbols:
            tokens.append(Operator(part))
            continue

        if part.count(".") > 1:
            raise E.ParseError(f"'{part}'", code="3008", equation=problem)
        try:
            number = float(part)
        except ValueError:
            raise E.ParseError(f"'{part}'", code="3011", equation=problem)
        if not math.isfinite(number):
            raise E.ParseError(f"'{part}'", code="3011", equation=problem)
        tokens.append(number)

    if not tokens:
        raise E.ParseError("", code="3013", equation=problem)
    return tokens


def build_terms(tokens, problem):
    """Group tokens into Terms: number, then (operator number [%])*.

    A number right after 'B %' reads as "of": '50 % 4' is 50% × 4.
    """
    terms = []
    pending_operator = None
    expecting_number = True

    for token in tokens:
        if isinstance(token, float):
            if not expecting_number:
                if terms[-1].percent and pending_operator is None:
                    pending_operator = Operator.MULTIPLY
                else:
                    raise E.ParseError(f"'{token}'", code="3011", equation=problem)
            terms.append(Term(pending_operator, token))
            pending_operator = None
            expecting_number = False

        elif token == Operator.PERCENT:
            if expecting_number or terms[-1].percent:
                raise E.ParseError("'%'", code="3011", equation=problem)
            terms[-1].percent = True

        else:
            if expecting_number:
                raise E.ParseError(f"'{token.value}'", code="3011", equation=problem)
            pending_operator = token
            expecting_number = True

    if expecting_number:
        raise E.ParseError(problem, code="3012", equation=problem)
    return terms


# -----------------------------
# Evaluator
# -----------------------------

def apply_operation(left, operator, right):
    """Apply one binary operator with float semantics.

    Division by zero and overflowing powers give ±inf (or nan for 0/0),
    which the engine maps to display states.
    """
    if operator == Operator.ADD:
        return left + right
    elif operator == Operator.SUBTRACT:
        return left - right
    elif operator == Operator.MULTIPLY:
        return left * right
    elif operator == Operator.DIVIDE:
        if right == 0:
            if left == 0:
                return math.nan
            return math.copysign(math.inf, left) * math.copysign(1, right)
        return left / right
    elif operator == Operator.POWER:
        try:
            return math.pow(left, right)
        except OverflowError:
            # Only an odd integer power keeps the sign of a negative base
            if left < 0 and float(right).is_integer() and int(right) % 2 == 1:
                return -math.inf
            return math.inf
        except ValueError:
            if left == 0 and right < 0:
                return math.inf
            # negative base with fractional exponent
            raise E.CalculationError(f"{left} ^ {right}", code="3012")
    else:
        raise E.CalculationError(f"'{operator}'", code="3004")


def fold(terms):
    """Evaluate terms strictly left to right; '%' divides its number by 100."""
    ergebnis = terms[0].value()
    for term in terms[1:]:
        ergebnis = apply_operation(ergebnis, term.operator, term.value())
    return ergebnis


def resolve_percentage(left, operator, percent):
    """Calculator percentages: 'A + B%' adds B% of A, 'A × B%' scales by B/100."""
    if operator == Operator.ADD:
        return left + left * percent / 100
    elif operator == Operator.SUBTRACT:
        return left - left * percent / 100
    elif operator == Operator.MULTIPLY:
        return left * (percent / 100)
    return apply_operation(left, Operator.DIVIDE, percent / 100)


def evaluate(problem):
    """Evaluate a flat expression like '200 + 10 %' and return a float."""
    terms = build_terms(translator(problem), problem)

    last = terms[-1]
    if len(terms) >= 2 and last.percent and last.operator in Percentage_Operations:
        left = fold(terms[:-1])
        return resolve_percentage(left, last.operator, last.number)

    return fold(terms)


def ends_with_operator(problem):
    parts = problem.split()
    return bool(parts) and parts[-1] in [op.value for op in Binary_Operations]


# -----------------------------
# Engine
# -----------------------------

class CalculatorEngine:
    """""
    Calculator state machine behind the display.

    State is the operand being typed, the pending equation text and a flag
    telling whether the operand is the '0' placed there by the last operator
    (as opposed to a '0' the user typed). The display state is derived from
    the operand: 'Error'/'NaN' is ERROR, '±Infinity' is INFINITY.

    on_record(expression, result) is called exactly once per successful
    finalize() or apply_scientific(), never on error or no-op paths.
    """""

    def __init__(self, on_record=None):
        self.on_record = on_record
        self.operand = "0"
        self.equation = ""
        self.awaiting_operand = False
        self.last_error = None

    # --- State views ---

    @property
    def display_state(self):
        if self.operand in ("Infinity", "-Infinity"):
            return DisplayState.INFINITY
        if isSentinel(self.operand):
            return DisplayState.ERROR
        return DisplayState.NORMAL

    def snapshot(self):
        return Snapshot(self.operand, self.equation, self.display_state)

    # --- Operand editing ---

    def append_digit(self, digit):
        digit = str(digit)
        if digit == ".":
            return self.append_decimal_point()
        if len(digit) != 1 or digit not in "0123456789":
            raise E.ParseError(f"'{digit}'", code="3011")

        if isLocked(self.operand):
            self._reset_operand(digit)
        elif self.operand == "0":
            self.operand = digit
        else:
            self.operand += digit
        self.awaiting_operand = False
        return self.snapshot()

    def append_decimal_point(self):
        if isLocked(self.operand):
            self._reset_operand("0.")
        elif "." in self.operand:
            return self.snapshot()
        else:
            self.operand += "."
        self.awaiting_operand = False
        return self.snapshot()

    def append_constant(self, name):
        """Replace the operand with pi or e."""
        if name not in Constants:
            raise E.ParseError(f"'{name}'", code="3011")
        self._reset_operand(format(Constants[name], ".10g"))
        self.awaiting_operand = False
        return self.snapshot()

    def toggle_sign(self):
        if self.operand == "0" or isSentinel(self.operand):
            return self.snapshot()
        if self.operand.startswith("-"):
            self.operand = self.operand[1:]
        else:
            self.operand = "-" + self.operand
        self.awaiting_operand = False
        return self.snapshot()

    def delete_last(self):
        if isSentinel(self.operand):
            self._reset_operand("0")
            return self.snapshot()
        if isExponentForm(self.operand):
            self.operand = "0"
            self.awaiting_operand = bool(self.equation)
            return self.snapshot()

        kuerzer = self.operand[:-1]
        if kuerzer in ("", "-", "-0"):
            kuerzer = "0"
        self.operand = kuerzer
        if self.operand == "0" and self.equation:
            # Deleting the whole operand puts the engine back to "operator just pressed"
            self.awaiting_operand = True
        return self.snapshot()

    def clear_all(self):
        self.operand = "0"
        self.equation = ""
        self.awaiting_operand = False
        self.last_error = None
        return self.snapshot()

    # --- Operators ---

    def apply_operator(self, op):
        op = to_operator(op)
        if isSentinel(self.operand):
            return self.snapshot()

        # Standalone percent converts the operand in place
        if op == Operator.PERCENT and not self.equation:
            try:
                self.operand = percent_of(self.operand)
            except E.MathError as e:
                self._fail(e)
            return self.snapshot()

        if self.equation and self.awaiting_operand and self.operand == "0":
            self.equation = self._replace_trailing_operator(op)
            return self.snapshot()

        self.equation += f"{self.operand} {op.value} "
        self.operand = "0"
        self.awaiting_operand = True
        return self.snapshot()

    def _replace_trailing_operator(self, op):
        teile = self.equation.split()
        if teile[-1] == Operator.PERCENT.value and op != Operator.PERCENT:
            # 'B %' is a finished term; the new operator follows it
            return self.equation + f"{op.value} "
        teile[-1] = op.value
        return " ".join(teile) + " "

    def apply_scientific(self, func, precision, degrees=False):
        """Apply a scientific function to the operand; never touches the equation."""
        check_precision(precision)
        try:
            func = ScientificEngine.ScientificFunction(func)
        except ValueError:
            raise E.CalculationError(f"'{func}'", code="2000")

        if isSentinel(self.operand):
            return self.snapshot()

        try:
            number = parse_operand(self.operand)
        except E.MathError as e:
            self._fail(e)
            return self.snapshot()

        argument = format_number(Decimal(repr(number)))
        if func == ScientificEngine.ScientificFunction.FACTORIAL:
            expression = f"{argument}!"
        else:
            expression = f"{func.value}({argument})"

        try:
            ergebnis = ScientificEngine.calculate(func, number, degrees)
        except (E.MathError, ArithmeticError, ValueError) as e:
            self._fail(e, expression)
            return self.snapshot()

        if not self._finish(ergebnis, precision, expression):
            return self.snapshot()
        self.awaiting_operand = False
        return self.snapshot()

    # --- '=' ---

    def finalize(self, precision):
        check_precision(precision)
        if isSentinel(self.operand):
            return self.snapshot()
        if not self.equation and self.operand == "0":
            return self.snapshot()

        if self.equation and self.awaiting_operand:
            problem = self.equation.strip()
        else:
            problem = self.equation + self.operand

        # An incomplete expression ('7 +') is never evaluated
        if ends_with_operator(problem):
            return self.snapshot()

        if LITERAL_ZERO_DIVISION.search(problem):
            self._fail(E.CalculationError("Division by zero", code="3003", equation=problem))
            return self.snapshot()

        try:
            ergebnis = evaluate(problem)
        except (E.MathError, ArithmeticError, ValueError) as e:
            self._fail(e, problem)
            return self.snapshot()

        if self._finish(ergebnis, precision, problem):
            self.equation = ""
            self.awaiting_operand = False
        return self.snapshot()

    # --- Internal transitions ---

    def _finish(self, ergebnis, precision, expression):
        """Store a finite result and emit its record. Returns False on nan/inf."""
        if math.isnan(ergebnis):
            self._fail(E.CalculationError("Result is not a number", code="3012", equation=expression))
            return False
        if math.isinf(ergebnis):
            logger.debug("Overflow in '%s'", expression)
            self.operand = "Infinity" if ergebnis > 0 else "-Infinity"
            self.equation = ""
            self.awaiting_operand = False
            self.last_error = E.CalculationError("Result overflowed", code="3026", equation=expression)
            return False

        self.operand = cleanup(ergebnis, precision)
        logger.debug("%s = %s", expression, self.operand)
        if self.on_record is not None:
            self.on_record(expression, self.operand)
        return True

    def _fail(self, error, equation=None):
        if not isinstance(error, E.MathError):
            error = E.MathError(str(error), code="9999", equation=equation)
        elif error.equation is None:
            error.equation = equation
        logger.debug("Calculation failed: %s", error)
        self.operand = ERROR
        self.equation = ""
        self.awaiting_operand = False
        self.last_error = error

    def _reset_operand(self, text):
        self.operand = text
        self.last_error = None
