"""Exceptions raised by the formal-language engines."""


class FormalLanguageError(ValueError):
    """Base class for every error raised by formlang."""


class DefinitionError(FormalLanguageError):
    """A top-level definition does not have the expected shape."""

    def __init__(self, message, text=None):
        super().__init__(message)
        self.text = text


class UnknownSymbolError(FormalLanguageError):
    """A state or symbol is used but was never declared."""

    def __init__(self, message, symbol, line=None, line_number=None):
        super().__init__(message)
        self.symbol = symbol
        self.line = line
        self.line_number = line_number


class TransitionSyntaxError(FormalLanguageError):
    """A transition line matches none of the accepted syntaxes."""

    def __init__(self, message, line, line_number=None):
        super().__init__(message)
        self.line = line
        self.line_number = line_number


class NotDeterministicError(FormalLanguageError):
    """An operation that needs a DFA was given an NFA."""


class ExpressionSyntaxError(FormalLanguageError):
    """An arithmetic expression breaks the grammar.

    ``position`` is 1-based; ``stack_top`` and ``last_kind`` describe the
    transducer state at the moment the error was detected, when known.
    """

    def __init__(self, message, token=None, position=None, stack_top=None, last_kind=None):
        super().__init__(message)
        self.token = token
        self.position = position
        self.stack_top = stack_top
        self.last_kind = last_kind
