"""Recursive-descent parser for arithmetic expressions.

Grammar (left recursion removed)::

    S  -> T E
    E  -> + T E | - T E | ε
    T  -> F T'
    T' -> * F T' | / F T' | ε
    F  -> ( S ) | number | identifier

Besides the parse tree the parser records the leftmost derivation, one
sentential form per production applied.
"""
import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass, field

from .errors import ExpressionSyntaxError
from .symbols import EPSILON, Token, TokenKind

logger = logging.getLogger(__name__)

TOKEN_PATTERN = re.compile(r'([+\-*/])|([()])|([a-zA-Z][a-zA-Z0-9]*)|([0-9]+)|(.)')
START_SYMBOL = 'S'


@dataclass
class ParseTreeNode:
    tag: str
    value: str = None
    children: list = field(default_factory=list)


@dataclass
class ParseResult:
    valid: bool
    tree: ParseTreeNode = None
    derivation_chain: Sequence = field(default_factory=list)
    error: str = None


@dataclass(frozen=True)
class GrammarSymbol:
    name: str
    terminal: bool = False


def nonterminal(name):
    return GrammarSymbol(name)


def terminal(name):
    return GrammarSymbol(name, terminal=True)


EMPTY = (terminal(EPSILON),)


class Derivation(Sequence):
    """Leftmost derivation, read as a sequence of rendered sentential forms.

    A form is the terminals derived so far followed by the pending symbols,
    which start at the leftmost nonterminal. Terminals only ever grow at the
    end, so one list serves every step and a step stores just the prefix
    length and its pending symbols. Forms are rendered when they are read.
    """

    def __init__(self, start=START_SYMBOL):
        self.terminals = []
        self.steps = [(0, (nonterminal(start),))]

    def expand(self, name, replacement):
        _, pending = self.steps[-1]
        if not pending or pending[0].name != name:
            raise ExpressionSyntaxError(
                f"Cannot expand {name}: it is not the leftmost nonterminal of '{self[-1]}'", token=name,
            )
        pending = tuple(replacement) + pending[1:]
        split = next((i for i, symbol in enumerate(pending) if not symbol.terminal), len(pending))
        self.terminals.extend(pending[:split])
        self.steps.append((len(self.terminals), pending[split:]))

    def __len__(self):
        return len(self.steps)

    def __getitem__(self, index):
        if isinstance(index, slice):
            return [self[i] for i in range(*index.indices(len(self)))]
        length, pending = self.steps[index]
        return render(self.terminals[:length] + list(pending))

    def __eq__(self, other):
        if isinstance(other, Sequence) and not isinstance(other, str):
            return list(self) == list(other)
        return NotImplemented

    def __repr__(self):
        return f'Derivation({list(self)!r})'


def render(form):
    return ' '.join(symbol.name for symbol in form)


def tokenize(text):
    """Tokenize after removing whitespace; positions refer to the original text."""
    kept = [(position, char) for position, char in enumerate(text, start=1) if not char.isspace()]
    compact = ''.join(char for _, char in kept)

    tokens = []
    for match in TOKEN_PATTERN.finditer(compact):
        position = kept[match.start()][0]
        operator, paren, identifier, number, unknown = match.groups()
        if unknown is not None:
            raise ExpressionSyntaxError(f"Unexpected character '{unknown}' at position {position}",
                                        token=unknown, position=position)
        if operator:
            tokens.append(Token(TokenKind.OPERATOR, operator, position))
        elif paren:
            kind = TokenKind.LPAREN if paren == '(' else TokenKind.RPAREN
            tokens.append(Token(kind, paren, position))
        elif identifier:
            tokens.append(Token(TokenKind.IDENTIFIER, identifier, position))
        else:
            tokens.append(Token(TokenKind.NUMBER, number, position))

    end_position = kept[-1][0] + 1 if kept else 1
    tokens.append(Token(TokenKind.END, '', end_position))
    return tokens


def nest(tag, tails):
    """Right-nest ``(operator, operand)`` pairs into E or T' nodes ending in ε."""
    node = ParseTreeNode(tag, EPSILON)
    for op, operand in reversed(tails):
        node = ParseTreeNode(tag, children=[ParseTreeNode(op.text, op.text), operand, node])
    return node


class ArithmeticParser:
    """One method per nonterminal; tokens are consumed through :meth:`expect`."""

    def __init__(self, tokens):
        self.tokens = tokens
        self.index = 0
        self.derivation = Derivation()

    @property
    def current(self):
        return self.tokens[self.index]

    def expect(self, kind):
        token = self.current
        if token.kind is not kind:
            raise ExpressionSyntaxError(
                f'Expected {kind.value} but found {token.describe()} at position {token.position}',
                token=token.text, position=token.position,
            )
        self.index += 1
        return token

    def parse(self):
        tree = self.parse_s()
        token = self.current
        if token.kind is not TokenKind.END:
            raise ExpressionSyntaxError(
                f'Unexpected {token.describe()} at position {token.position} after the end of the expression',
                token=token.text, position=token.position,
            )
        return tree

    def parse_s(self):
        self.derivation.expand('S', [nonterminal('T'), nonterminal('E')])
        t = self.parse_t()
        e = self.parse_e()
        return ParseTreeNode('S', children=[t, e])

    def at_operator(self, operators):
        token = self.current
        return token.kind is TokenKind.OPERATOR and token.text in operators

    def parse_e(self):
        # E -> + T E repeats in a loop; only ( S ) costs recursion depth
        tails = []
        while self.at_operator('+-'):
            self.derivation.expand('E', [terminal(self.current.text), nonterminal('T'), nonterminal('E')])
            op = self.expect(TokenKind.OPERATOR)
            tails.append((op, self.parse_t()))

        self.derivation.expand('E', EMPTY)
        return nest('E', tails)

    def parse_t(self):
        self.derivation.expand('T', [nonterminal('F'), nonterminal("T'")])
        f = self.parse_f()
        t_prime = self.parse_t_prime()
        return ParseTreeNode('T', children=[f, t_prime])

    def parse_t_prime(self):
        tails = []
        while self.at_operator('*/'):
            self.derivation.expand("T'", [terminal(self.current.text), nonterminal('F'), nonterminal("T'")])
            op = self.expect(TokenKind.OPERATOR)
            tails.append((op, self.parse_f()))

        self.derivation.expand("T'", EMPTY)
        return nest("T'", tails)

    def parse_f(self):
        token = self.current
        if token.kind is TokenKind.LPAREN:
            self.derivation.expand('F', [terminal('('), nonterminal('S'), terminal(')')])
            self.expect(TokenKind.LPAREN)
            s = self.parse_s()
            self.expect(TokenKind.RPAREN)
            return ParseTreeNode('F', children=[ParseTreeNode('(', '('), s, ParseTreeNode(')', ')')])

        if token.kind in (TokenKind.NUMBER, TokenKind.IDENTIFIER):
            self.derivation.expand('F', [terminal(token.text)])
            self.expect(token.kind)
            return ParseTreeNode('F', children=[ParseTreeNode(token.kind.value, token.text)])

        raise ExpressionSyntaxError(
            f"Expected number, identifier or '(' but found {token.describe()} at position {token.position}",
            token=token.text, position=token.position,
        )


def parse_expression(text):
    """Parse ``text`` and report the outcome without raising.

    On failure ``tree`` is None and ``derivation_chain`` holds the forms
    derived before the error.
    """
    parser = None
    try:
        parser = ArithmeticParser(tokenize(text or ''))
        tree = parser.parse()
    except ExpressionSyntaxError as error:
        logger.debug('Parse failed: %s', error)
        chain = parser.derivation if parser else Derivation()
        return ParseResult(False, None, chain, str(error))
    except RecursionError:
        return ParseResult(False, None, parser.derivation, 'Parentheses are nested too deeply')

    return ParseResult(True, tree, parser.derivation, None)
