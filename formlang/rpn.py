"""Infix to reverse Polish notation with a traced shunting-yard transducer."""
import logging
from dataclasses import dataclass

from .errors import ExpressionSyntaxError
from .symbols import LAMBDA, Token, TokenKind

logger = logging.getLogger(__name__)

PRECEDENCE = {'+': 1, '-': 1, '*': 2, '/': 2}
DIGITS = '0123456789'
BOTTOM = 'Z'

START = 'start'
END = 'end'

EXAMPLES = [
    '(5 + 3) * 2',
    '2 * 3 + 4',
    '10 / (2 + 3)',
    '1 + 2 * 3 - 4',
    '(15 + 7) * 3 - 9 / 3',
]


@dataclass(frozen=True)
class TraceStep:
    """One transducer move. ``stack`` runs bottom to top and starts with ``Z``."""
    step: int
    symbol: str
    stack: tuple
    output: tuple
    error: bool = False


def tokenize(expression):
    """Split an expression into number, operator and parenthesis tokens."""
    tokens = []
    digits, digits_start = '', None

    for position, char in enumerate(expression, start=1):
        if char in DIGITS:
            if not digits:
                digits_start = position
            digits += char
            continue
        if digits:
            tokens.append(Token(TokenKind.NUMBER, digits, digits_start))
            digits = ''

        if char == ' ':
            continue
        if char in PRECEDENCE:
            kind = TokenKind.OPERATOR
        elif char == '(':
            kind = TokenKind.LPAREN
        elif char == ')':
            kind = TokenKind.RPAREN
        else:
            raise ExpressionSyntaxError(f"Invalid character '{char}' at position {position}",
                                        token=char, position=position)
        tokens.append(Token(kind, char, position))

    if digits:
        tokens.append(Token(TokenKind.NUMBER, digits, digits_start))
    return tokens


class RPNTransducer:
    """Deterministic pushdown transducer that rewrites infix arithmetic as RPN.

    Numbers go straight to the output; operators wait on a stack whose bottom
    is marked with ``Z``. Every move is recorded so the conversion can be
    replayed step by step. An instance can be reused: each call to
    :meth:`convert` starts from a clean stack, output and trace.
    """

    def __init__(self):
        self._reset()

    def _reset(self):
        self.stack = [BOTTOM]
        self.output = []
        self.trace = []
        self._last = None

    def _record(self, symbol, error=False):
        self.trace.append(TraceStep(len(self.trace) + 1, symbol, tuple(self.stack), tuple(self.output), error))

    def _fail(self, message, token):
        last = self._last.value if self._last else 'none'
        self._record(token.text if token.kind is not TokenKind.END else END, error=True)
        logger.debug('RPN conversion stopped: %s', message)
        raise ExpressionSyntaxError(
            f'{message} at position {token.position} (stack top: {self.stack[-1]}, last token: {last})',
            token=token.text,
            position=token.position,
            stack_top=self.stack[-1],
            last_kind=self._last,
        )

    def convert(self, expression):
        """Convert an infix expression and return the postfix string."""
        self._reset()
        tokens = tokenize(expression)
        self._record(START)

        for token in tokens:
            if token.kind is TokenKind.NUMBER:
                self._number(token)
            elif token.kind is TokenKind.LPAREN:
                self._open(token)
            elif token.kind is TokenKind.RPAREN:
                self._close(token)
            else:
                self._operator(token)
            self._last = token.kind

        self._finish(Token(TokenKind.END, '', len(expression) + 1))
        return ' '.join(self.output)

    def _number(self, token):
        if self._last in (TokenKind.NUMBER, TokenKind.RPAREN):
            self._fail(f"Missing operator before operand '{token.text}'", token)
        self.output.append(token.text)
        self._record(token.text)

    def _open(self, token):
        if self._last in (TokenKind.NUMBER, TokenKind.RPAREN):
            self._fail("Missing operator before '('", token)
        self.stack.append(token.text)
        self._record(token.text)

    def _close(self, token):
        if '(' not in self.stack:
            self._fail("Unmatched closing parenthesis ')'", token)
        if self._last is TokenKind.LPAREN:
            self._fail("Empty parentheses '()'", token)
        if self._last is TokenKind.OPERATOR:
            self._fail(f"Operator '{self.stack[-1]}' has no right operand before ')'", token)

        while self.stack[-1] != '(':
            self.output.append(self.stack.pop())
            self._record(token.text)
        self.stack.pop()
        self._record(token.text)

    def _operator(self, token):
        if self._last in (None, TokenKind.OPERATOR, TokenKind.LPAREN):
            self._fail(f"Operator '{token.text}' has no left operand", token)

        # Left associative: pop operators of equal or higher precedence
        while self.stack[-1] in PRECEDENCE and PRECEDENCE[self.stack[-1]] >= PRECEDENCE[token.text]:
            self.output.append(self.stack.pop())
            self._record(token.text)
        self.stack.append(token.text)
        self._record(token.text)

    def _finish(self, token):
        if self._last is None:
            self._fail('Expression contains no operands', token)
        if self._last is TokenKind.OPERATOR:
            self._fail(f"Expression ends with operator '{self.stack[-1]}'", token)
        if '(' in self.stack:
            self._fail("Unmatched opening parenthesis '('", token)

        while self.stack[-1] != BOTTOM:
            self.output.append(self.stack.pop())
            self._record(LAMBDA)
        self._record(END)

    def get_trace(self):
        return list(self.trace)


def evaluate_postfix(postfix):
    """Evaluate an RPN string produced by :class:`RPNTransducer`."""
    values = []
    for position, item in enumerate(postfix.split(), start=1):
        if item.isdigit():
            values.append(int(item))
            continue
        if item not in PRECEDENCE or len(values) < 2:
            raise ExpressionSyntaxError(f"Malformed postfix expression at item {position}: '{item}'",
                                        token=item, position=position)
        right = values.pop()
        left = values.pop()
        if item == '+':
            values.append(left + right)
        elif item == '-':
            values.append(left - right)
        elif item == '*':
            values.append(left * right)
        else:
            if right == 0:
                raise ExpressionSyntaxError('Division by zero', token=item, position=position)
            values.append(left / right)

    if len(values) != 1:
        raise ExpressionSyntaxError(f"Malformed postfix expression '{postfix}'")
    return values[0]
