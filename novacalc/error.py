class MathError(Exception):
    def __init__(self, message, code="9999", equation=None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.equation = equation

    def __str__(self):
        return f"[{self.code}] {self.message}"


class ParseError(MathError):
    pass

class CalculationError(MathError):
    pass

class DomainError(MathError):
    pass

class ConfigurationError(MathError):
    pass



Error_Dictionary = {

    "2" : "Scientific Calculation Error",
    "3" : "Calculator Error",
    "4" : "UI Error",
    "5" : "Configuration Error",
    "9" : "Unexpected Error"

}

#Error codes are structured in:
# 1. Digit: Main Error (see Error_Dictionary)
# 2. Digit: Specification
# 3. and 4. Digit: Error Number



ERROR_MESSAGES = {
    "2000" : "Unknown scientific function: ", # + function name
    "2001" : "Logarithm of a non-positive number.",
    "2002" : "Square root of a negative number.",
    "2003" : "Reciprocal of zero.",
    "2004" : "Factorial needs a whole number between 0 and 170.",
    "2005" : "Inverse trigonometric argument outside [-1, 1].",
    "2006" : "Scientific function failed: ", # + Python error


    "3000" : "Could not read number: ", # + operand text
    "3003" : "Division by Zero",
    "3004" : "Invalid Operator: ", # + operator
    "3008" : "More than one '.' in one number.",
    "3011" : "Unexpected Token: ", # + Token
    "3012" : "Invalid equation: ", # + Equation
    "3013" : "Empty expression.",
    "3026" : "Number too big.",


    "4001" : "Clipboard content is not a number: ", # + clipboard text


    "5000" : "Could not read configuration file: ", # + path
    "5001" : "Invalid setting value: ", # + key
    "5002" : "Could not write configuration file: ", # + path


    "9999" : "Unexpected Error: " #+error
}


def describe(error):
    """Return the user facing text for a MathError.

    Messages ending in ': ' expect a detail, which is the offending equation
    when known and the raw exception message otherwise.
    """
    base = ERROR_MESSAGES.get(error.code, ERROR_MESSAGES["9999"])
    area = Error_Dictionary.get(error.code[:1], Error_Dictionary["9"])
    if base.endswith(": "):
        detail = error.equation if error.equation is not None else error.message
        return f"{area} {error.code}: {base}{detail}"
    return f"{area} {error.code}: {base}"
