"""Shared symbol conventions and the token type used by the expression tools."""
import re
from dataclasses import dataclass
from enum import Enum

EPSILON = 'ε'
LAMBDA = 'λ'

# Spellings accepted for the empty word in textual input
EPSILON_ALIASES = {'', EPSILON, LAMBDA, 'eps', 'epsilon', '^'}


def is_epsilon(symbol):
    """Check whether a textual symbol stands for the empty word."""
    return symbol is None or symbol.strip() in EPSILON_ALIASES


def natural_key(name):
    """Sort key that orders 'q2' before 'q10'."""
    return [int(part) if part.isdigit() else part for part in re.split(r'(\d+)', str(name))]


def split_items(text):
    """Split a comma separated list, dropping blanks."""
    return [item.strip() for item in text.split(',') if item.strip()]


def unique(items):
    """Drop duplicates while keeping the first occurrence order."""
    return tuple(dict.fromkeys(items))


class TokenKind(Enum):
    NUMBER = 'number'
    OPERATOR = 'operator'
    LPAREN = "'('"
    RPAREN = "')'"
    IDENTIFIER = 'identifier'
    END = 'end of input'


@dataclass(frozen=True)
class Token:
    """A lexical token; ``position`` is the 1-based column of its first character."""
    kind: TokenKind
    text: str
    position: int

    def describe(self):
        if self.kind is TokenKind.END:
            return 'end of input'
        return f"'{self.text}'"
