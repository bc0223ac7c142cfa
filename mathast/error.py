class MathError(Exception):
    def __init__(self, message, code="9999", equation=None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.equation = equation


class PositionalError(MathError):
    """Error that points at a character offset in the source text."""

    def __init__(self, message, code, source=None, offset=None, equation=None):
        self.source = source
        self.offset = offset
        self.diagram = caret_diagram(source, offset) if source is not None and offset is not None else ""
        if self.diagram:
            message = f"{message}\n{self.diagram}"
        super().__init__(message, code=code, equation=equation if equation is not None else source)


class LexError(PositionalError):
    def __init__(self, source, offset):
        self.unexpected_char = source[offset]
        super().__init__(f"Unknown symbol '{self.unexpected_char}' at position {offset}",
                         code="3001", source=source, offset=offset)


class ParseError(PositionalError):
    default_code = "3011"

    def __init__(self, message, source=None, offset=None):
        super().__init__(message, code=self.default_code, source=source, offset=offset)


class EmptyExpressionError(ParseError):
    default_code = "3012"


class UnexpectedTokenError(ParseError):
    default_code = "3011"


class UnexpectedEndError(ParseError):
    default_code = "3027"


class UnmatchedParenError(ParseError):
    default_code = "3009"


class UndefinedFunctionError(ParseError):
    default_code = "3030"


class ArityError(ParseError):
    default_code = "3031"


class TrailingTokensError(ParseError):
    default_code = "3032"


class NestingDepthError(ParseError):
    default_code = "3033"


class CalculationError(MathError):
    pass


class DivisionByZeroError(CalculationError, ZeroDivisionError):
    def __init__(self, message="Division by zero"):
        super().__init__(message, code="3003")


class EvaluationError(MathError):
    default_code = "3005"

    def __init__(self, message, code=None, equation=None):
        super().__init__(message, code=code or self.default_code, equation=equation)


class MissingContextError(EvaluationError):
    default_code = "3034"


class UnboundVariableError(EvaluationError):
    default_code = "3035"

    def __init__(self, name):
        self.name = name
        super().__init__(f"No parameter value found for '{name}'")


class CyclicSubstitutionError(EvaluationError):
    default_code = "3036"

    def __init__(self, name):
        self.name = name
        super().__init__(f"Variable '{name}' refers back to itself")


class SubstitutionDepthError(EvaluationError):
    default_code = "3037"


class ContextError(MathError):
    def __init__(self, message):
        super().__init__(message, code="3038")


class RegistryError(MathError):
    def __init__(self, message):
        super().__init__(message, code="5001")


def caret_diagram(source, offset):
    """Render the source with a caret under `offset`, framed by dashed rules."""
    rule = "-" * len(source)
    return f"{rule}\n{source}\n{' ' * offset}^\n{rule}"


Error_Dictionary = {

    "3" : "Calculator Error",
    "5" : "Configuration Error",
    "9" : "Runtime Error"

}

#Error Messages are structured in:
# 1. Digit: Main Error
# 2. Digit: Specification
# 3. and 4. Digit: Error Number


ERROR_MESSAGES = {
    "3001" : "Unknown symbol in expression.",
    "3003" : "Division by Zero",
    "3004" : "Calculation failed: ", # + detail
    "3005" : "Evaluation failed: ", # + detail
    "3009" : "Missing ')'. ",
    "3011" : "Unexpected Token: ", # + Token
    "3012" : "Empty expression.",
    "3026" : "Number too big.",
    "3027" : "Missing Number.",
    "3030" : "Undefined function: ", # + name
    "3031" : "Wrong number of arguments.",
    "3032" : "Missing operator between two expressions.",
    "3033" : "Expression is nested too deeply.",
    "3034" : "No parameters were given.",
    "3035" : "Variable has no value: ", # + name
    "3036" : "Variable refers back to itself.",
    "3037" : "Variable substitution is nested too deeply.",
    "3038" : "Invalid variable value.",
    "3218" : "Error with Scientific function: ", # + detail
    "4002" : "Calculation already Running!",
    "4501" : "Not all Settings could be saved: ", # + Error raising setting
    "5001" : "Invalid function or constant registration.",

    "9999" : "Unexpected Error: " #+error
}
