"""Textual automaton definitions: M=(...) notation and transition tables."""
import logging
import random
import re
from dataclasses import dataclass

from .automaton import FiniteAutomaton
from .errors import DefinitionError, TransitionSyntaxError, UnknownSymbolError
from .symbols import EPSILON, is_epsilon, split_items, unique

logger = logging.getLogger(__name__)

DEFINITION_PATTERN = re.compile(
    r'^M\s*=\s*\(\s*\{([^}]+)\}\s*,\s*\{([^}]+)\}\s*,\s*δ\s*,\s*([^\s,{}()]+)\s*,\s*\{([^}]+)\}\s*\)$'
)

# Right-hand side: a single state or a brace set {q1, q2}
_TARGET = r'(\{[^}]*\}|[^\s{},]+)'

TRANSITION_PATTERNS = [
    # δ(q, a) = q'
    re.compile(r'^δ\s*\(\s*([^\s,()]+)\s*,\s*([^\s,()]*)\s*\)\s*=\s*' + _TARGET + r'$'),
    # q, a -> q'   and   q, a = q'
    re.compile(r'^([^\s,]+?)\s*,\s*([^\s,]*?)\s*(?:->|→|=)\s*' + _TARGET + r'$'),
    # q a q'
    re.compile(r'^([^\s,]+)\s+([^\s,]+)\s+' + _TARGET + r'$'),
]

EXAMPLE_DEFINITION = 'M=({q0, q1, q2, q3, q4, q5}, {0,1}, δ, q0, {q4, q5})'
EXAMPLE_TRANSITIONS = '\n'.join([
    'δ(q0, 0) = q1',
    'δ(q0, 1) = q2',
    'δ(q1, 0) = q3',
    'δ(q1, 1) = q4',
    'δ(q2, 0) = q4',
    'δ(q2, 1) = q5',
    'δ(q3, 0) = q3',
    'δ(q3, 1) = q4',
    'δ(q4, 0) = q4',
    'δ(q4, 1) = q5',
    'δ(q5, 0) = q5',
    'δ(q5, 1) = q5',
])


@dataclass(frozen=True)
class AutomatonDefinition:
    states: tuple
    alphabet: tuple
    start_state: str
    final_states: tuple


def parse_definition(text):
    """Parse ``M=({q0, q1}, {a, b}, δ, q0, {q1})`` into an AutomatonDefinition."""
    text = (text or '').strip()
    if not text:
        raise DefinitionError('Empty automaton definition', text)

    match = DEFINITION_PATTERN.match(text)
    if not match:
        raise DefinitionError(
            f"Invalid automaton definition '{text}'. Expected a form like M=({{q0, q1, q2}}, {{0,1}}, δ, q0, {{q2}})",
            text,
        )

    states = unique(split_items(match.group(1)))
    alphabet = unique(split_items(match.group(2)))
    start_state = match.group(3).strip()
    final_states = unique(split_items(match.group(4)))

    if start_state not in states:
        raise UnknownSymbolError(f"Start state '{start_state}' is not in the list of states", start_state, line=text)
    for state in final_states:
        if state not in states:
            raise UnknownSymbolError(f"Final state '{state}' is not in the list of states", state, line=text)

    return AutomatonDefinition(states, alphabet, start_state, final_states)


def _match_transition(line):
    for pattern in TRANSITION_PATTERNS:
        match = pattern.match(line)
        if match:
            return match
    return None


def _check_declared(token, declared, kind, line, number):
    if token not in declared:
        raise UnknownSymbolError(
            f"Line {number}: unknown {kind} '{token}' in '{line}'", token, line=line, line_number=number
        )


def parse_transition_table(text, definition):
    """Parse a transition table, one rule per line.

    Accepts ``δ(q,a)=q'``, ``q,a->q'``, ``q a q'`` and ``q,a=q'`` with an
    optional brace set on the right. Repeated ``(state, symbol)`` pairs are
    merged, which is how nondeterministic moves are written. Blank lines and
    lines starting with ``#`` or ``//`` are ignored.
    """
    transitions = {}
    for number, raw_line in enumerate((text or '').splitlines(), start=1):
        line = raw_line.strip()
        if not line or line.startswith('#') or line.startswith('//'):
            continue

        match = _match_transition(line)
        if match is None:
            raise TransitionSyntaxError(f"Line {number}: cannot parse transition '{line}'", line, number)

        state, symbol, target = (group.strip() for group in match.groups())
        _check_declared(state, definition.states, 'state', line, number)
        if is_epsilon(symbol):
            symbol = EPSILON
        else:
            _check_declared(symbol, definition.alphabet, 'symbol', line, number)

        targets = split_items(target[1:-1]) if target.startswith('{') else [target]
        bucket = transitions.setdefault((state, symbol), [])
        for next_state in targets:
            _check_declared(next_state, definition.states, 'state', line, number)
            if next_state not in bucket:
                bucket.append(next_state)

    return transitions


def generate_transitions(definition, rng):
    """Demo transitions for a bare definition, drawn from ``rng``.

    The result is always deterministic. Pass a seeded ``random.Random`` to get
    the same automaton twice.
    """
    states, alphabet = definition.states, definition.alphabet
    transitions = {}

    # Mostly a chain q0 -> q1 -> ... so the last state is reachable
    for current, following in zip(states, states[1:]):
        for symbol in alphabet:
            if rng.random() < 0.8:
                transitions[(current, symbol)] = [following]

    last_state = states[-1]
    for symbol in alphabet:
        if rng.random() < 0.6:
            target = last_state if rng.random() < 0.7 else rng.choice(states)
            transitions[(last_state, symbol)] = [target]

    for state in states:
        for symbol in alphabet:
            if (state, symbol) not in transitions and rng.random() < 0.3:
                transitions[(state, symbol)] = [rng.choice(states)]

    if not any((definition.start_state, symbol) in transitions for symbol in alphabet):
        transitions[(definition.start_state, rng.choice(alphabet))] = [rng.choice(states)]

    for state in definition.final_states:
        for symbol in alphabet:
            if rng.random() < 0.5:
                transitions[(state, symbol)] = [state]

    return transitions


def automaton_from_text(definition_text, table_text=None, rng=None):
    """Build an automaton from its M=(...) definition and an optional transition table.

    Without a table the transitions are generated for demonstration purposes.
    """
    definition = parse_definition(definition_text)
    if table_text and table_text.strip():
        transitions = parse_transition_table(table_text, definition)
    else:
        logger.debug('No transition table given, generating demo transitions')
        transitions = generate_transitions(definition, rng or random.Random())

    return FiniteAutomaton(
        definition.states,
        definition.alphabet,
        transitions,
        definition.start_state,
        definition.final_states,
    )
