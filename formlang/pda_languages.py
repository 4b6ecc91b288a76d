"""Ready-made DPDAs for a few languages written in set-builder notation."""
import re
from dataclasses import dataclass, field

from .dpda import DPDA, DPDASpec, Rule, format_rule
from .errors import DefinitionError
from .symbols import EPSILON, split_items, unique

SUPPORTED_FORMS = (
    'w | w ∈ {a,b,c}*',
    'c^(2k) β | β ∈ {a,b}^+',
    'a^n b^k c^(2n) | k>=0, n>0',
)

ANY_WORD = re.compile(r'w\|w∈\{([^}]+)\}\*', re.I)
EVEN_PREFIX = re.compile(r'(\w)\^\(2k\)β\|β∈\{([^}]+)\}\^?\+', re.I)
COUNTED = re.compile(r'(\w)\^n(\w)\^k(\w)\^\(2n\)', re.I)


@dataclass
class GeneratedDPDA:
    language: str
    dpda: DPDA
    notes: list = field(default_factory=list)

    def rule_lines(self):
        return [format_rule(key, rule) for key, rule in self.dpda.rules.items()]


class _Builder:
    def __init__(self):
        self.rules = {}
        self.notes = []

    def add(self, state, symbol, top, next_state, push, note):
        key = (state, symbol, top)
        rule = Rule(next_state, push)
        self.rules[key] = rule
        self.notes.append((format_rule(key, rule), note))


def _any_word(alphabet):
    builder = _Builder()
    for symbol in alphabet:
        builder.add('q0', symbol, 'Z', 'q0', 'Z', f"Read '{symbol}' and stay in q0")
    builder.add('q0', EPSILON, 'Z', 'q1', 'Z', 'Input exhausted, move to the accepting state')
    spec = DPDASpec(('q0', 'q1'), alphabet, ('Z',), 'q0', 'Z', ('q1',))
    return spec, builder


def _even_prefix(prefix, suffix_alphabet):
    if prefix in suffix_alphabet:
        raise DefinitionError(f"Prefix symbol '{prefix}' must not belong to the suffix alphabet")
    builder = _Builder()
    builder.add('q0', prefix, 'Z', 'q1', 'XZ', f"First '{prefix}' of a pair, push a marker")
    builder.add('q1', prefix, 'X', 'q0', '', f"Second '{prefix}' of a pair, pop the marker")
    for symbol in suffix_alphabet:
        builder.add('q0', symbol, 'Z', 'q2', 'Z', f"First suffix symbol '{symbol}'")
        builder.add('q2', symbol, 'Z', 'q2', 'Z', f"Further suffix symbol '{symbol}'")
    builder.add('q2', EPSILON, 'Z', 'q3', 'Z', 'Suffix read, move to the accepting state')
    spec = DPDASpec(('q0', 'q1', 'q2', 'q3'), unique((prefix,) + suffix_alphabet), ('Z', 'X'),
                    'q0', 'Z', ('q3',))
    return spec, builder


def _counted(first, middle, last):
    if len({first, middle, last}) != 3:
        raise DefinitionError('The three symbols of a^n b^k c^(2n) must be different')
    builder = _Builder()
    # Two markers per leading symbol, one popped per trailing symbol
    builder.add('q0', first, 'Z', 'q1', 'AAZ', f"First '{first}', push two markers")
    builder.add('q1', first, 'A', 'q1', 'AAA', f"Another '{first}', push two more markers")
    builder.add('q1', middle, 'A', 'q2', 'A', f"First '{middle}', stack untouched")
    builder.add('q2', middle, 'A', 'q2', 'A', f"Another '{middle}', stack untouched")
    builder.add('q1', last, 'A', 'q3', '', f"No '{middle}' (k=0), first '{last}' pops a marker")
    builder.add('q2', last, 'A', 'q3', '', f"First '{last}' pops a marker")
    builder.add('q3', last, 'A', 'q3', '', f"Another '{last}' pops a marker")
    builder.add('q3', EPSILON, 'Z', 'q4', 'Z', 'All markers popped, move to the accepting state')
    spec = DPDASpec(('q0', 'q1', 'q2', 'q3', 'q4'), (first, middle, last), ('Z', 'A'), 'q0', 'Z', ('q4',))
    return spec, builder


def dpda_for_language(text):
    """Build a DPDA for one of the :data:`SUPPORTED_FORMS`."""
    cleaned = re.sub(r'\s+', '', text or '')

    match = ANY_WORD.search(cleaned)
    if match:
        spec, builder = _any_word(unique(split_items(match.group(1))))
    elif EVEN_PREFIX.search(cleaned):
        match = EVEN_PREFIX.search(cleaned)
        spec, builder = _even_prefix(match.group(1), unique(split_items(match.group(2))))
    elif COUNTED.search(cleaned):
        match = COUNTED.search(cleaned)
        spec, builder = _counted(*match.groups())
    else:
        raise DefinitionError(
            f"Unsupported language '{text}'. Supported forms: " + '; '.join(SUPPORTED_FORMS), text
        )

    return GeneratedDPDA(text, DPDA(spec, builder.rules), builder.notes)
