"""Deterministic pushdown automaton: definition parsing and step-by-step simulation."""
import logging
import re
from dataclasses import dataclass, field

from .errors import DefinitionError, TransitionSyntaxError, UnknownSymbolError
from .symbols import EPSILON, is_epsilon, split_items, unique

logger = logging.getLogger(__name__)

DEFAULT_MAX_STEPS = 1000

SPEC_WRAPPER = re.compile(r'^P\s*=\s*\((.*)\)$', re.S)
RULE_PATTERN = re.compile(
    r'^(?:δ\s*)?\(\s*([^,\s()]+)\s*,\s*([^,\s()]*)\s*,\s*([^,\s()]+)\s*\)'
    r'\s*(?:=|->|→)\s*'
    r'\(\s*([^,\s()]+)\s*,\s*([^,\s()]*)\s*\)$'
)

FIELD_NAMES = (
    'states', 'input alphabet', 'stack alphabet', 'transition function',
    'start state', 'start stack symbol', 'accept states',
)


@dataclass(frozen=True)
class DPDASpec:
    states: tuple
    input_alphabet: tuple
    stack_alphabet: tuple
    start_state: str
    start_stack_symbol: str
    accept_states: tuple
    delta_symbol: str = 'δ'


@dataclass(frozen=True)
class Rule:
    """Right-hand side of a rule: the next state and the string to push.

    ``push`` is written top first: after the move its first character is
    the new stack top. An empty ``push`` only pops.
    """
    next_state: str
    push: str
    text: str = ''


@dataclass(frozen=True)
class Configuration:
    state: str
    remaining: str
    stack: tuple
    step: int
    action: str


@dataclass
class RunResult:
    accepted: bool
    reason: str
    history: list = field(default_factory=list)


def format_rule(key, rule):
    state, symbol, top = key
    return f'δ({state}, {symbol}, {top}) = ({rule.next_state}, {rule.push or EPSILON})'


def _split_fields(body, text):
    fields, current, depth = [], [], 0
    for char in body:
        if char == '{':
            depth += 1
        elif char == '}':
            depth -= 1
            if depth < 0:
                raise DefinitionError(f"Unbalanced braces in DPDA definition '{text}'", text)
        if char == ',' and depth == 0:
            fields.append(''.join(current).strip())
            current = []
        else:
            current.append(char)
    if depth != 0:
        raise DefinitionError(f"Unbalanced braces in DPDA definition '{text}'", text)
    fields.append(''.join(current).strip())
    return fields


def _set_field(value):
    if value.startswith('{') and value.endswith('}'):
        value = value[1:-1]
    return unique(split_items(value))


def _scalar_field(value, name, text):
    if not value or any(char in value for char in '{}'):
        raise DefinitionError(f"DPDA {name} must be a single symbol, got '{value}'", text)
    return value


def parse_spec(text):
    """Parse ``{q0,q1}, {a,b}, {Z,A}, δ, q0, Z, {q1}``, optionally wrapped in ``P=( ... )``."""
    text = (text or '').strip()
    if not text:
        raise DefinitionError('Empty DPDA definition', text)

    wrapped = SPEC_WRAPPER.match(text)
    body = wrapped.group(1) if wrapped else text
    fields = _split_fields(body, text)
    if len(fields) != len(FIELD_NAMES):
        raise DefinitionError(
            f"DPDA definition needs {len(FIELD_NAMES)} components ({', '.join(FIELD_NAMES)}), "
            f"got {len(fields)} in '{text}'",
            text,
        )

    states_field, input_field, stack_field, delta_field, start_field, bottom_field, accept_field = fields
    spec = DPDASpec(
        states=_set_field(states_field),
        input_alphabet=_set_field(input_field),
        stack_alphabet=_set_field(stack_field),
        start_state=_scalar_field(start_field, 'start state', text),
        start_stack_symbol=_scalar_field(bottom_field, 'start stack symbol', text),
        accept_states=_set_field(accept_field),
        delta_symbol=_scalar_field(delta_field, 'transition function', text),
    )

    if spec.start_state not in spec.states:
        raise UnknownSymbolError(f"Start state '{spec.start_state}' is not in the set of states",
                                 spec.start_state, line=text)
    for state in spec.accept_states:
        if state not in spec.states:
            raise UnknownSymbolError(f"Accept state '{state}' is not in the set of states", state, line=text)
    if spec.start_stack_symbol not in spec.stack_alphabet:
        raise UnknownSymbolError(f"Start stack symbol '{spec.start_stack_symbol}' is not in the stack alphabet",
                                 spec.start_stack_symbol, line=text)
    return spec


def parse_rules(text):
    """Parse rule lines ``(state, input, top) = (next, push)`` into a lookup table.

    ``ε`` (or an empty field) as input marks a move that reads nothing; as
    push it means pop only. A later rule with the same left-hand side
    replaces the earlier one.
    """
    rules = {}
    for number, raw_line in enumerate((text or '').splitlines(), start=1):
        line = raw_line.strip()
        if not line or line.startswith('#') or line.startswith('//'):
            continue

        match = RULE_PATTERN.match(line)
        if not match:
            raise TransitionSyntaxError(f"Line {number}: cannot parse rule '{line}'", line, number)

        state, symbol, top, next_state, push = match.groups()
        key = (state, EPSILON if is_epsilon(symbol) else symbol, top)
        if key in rules:
            logger.debug('Line %d overrides rule %s', number, format_rule(key, rules[key]))
        rules[key] = Rule(next_state, '' if is_epsilon(push) else push, line)
    return rules


class DPDA:
    """Deterministic pushdown automaton accepting by final state.

    The stack is a list whose last element is the top. Rules are looked up
    on ``(state, input symbol, stack top)``; a rule on the actual next symbol
    wins over an ε-rule for the same state and stack top.
    """

    def __init__(self, spec, rules):
        self.spec = spec
        self.rules = dict(rules)
        self._check_rules()

    @classmethod
    def from_text(cls, spec_text, rules_text):
        return cls(parse_spec(spec_text), parse_rules(rules_text))

    def _check_rules(self):
        spec = self.spec
        for key, rule in self.rules.items():
            state, symbol, top = key
            line = rule.text or format_rule(key, rule)
            checks = [(state, spec.states, 'state'), (rule.next_state, spec.states, 'state'),
                      (top, spec.stack_alphabet, 'stack symbol')]
            if symbol != EPSILON:
                checks.append((symbol, spec.input_alphabet, 'input symbol'))
            checks.extend((char, spec.stack_alphabet, 'stack symbol') for char in rule.push)
            for token, declared, kind in checks:
                if token not in declared:
                    raise UnknownSymbolError(f"Unknown {kind} '{token}' in rule '{line}'", token, line=line)

    def _lookup(self, state, symbol, top):
        if symbol is not None:
            rule = self.rules.get((state, symbol, top))
            if rule is not None:
                return symbol, rule
        return EPSILON, self.rules.get((state, EPSILON, top))

    def run(self, word, max_steps=DEFAULT_MAX_STEPS):
        """Simulate the automaton on ``word`` and return the verdict with the full history."""
        spec = self.spec
        state = spec.start_state
        stack = [spec.start_stack_symbol]
        position = 0
        steps = 0
        history = [Configuration(state, word, tuple(stack), steps, 'start')]

        if not word and state in spec.accept_states:
            return self._verdict(True, 'Input consumed in an accepting state', history)

        while True:
            if steps >= max_steps:
                return self._verdict(False, f'Step budget exceeded after {max_steps} steps (possible ε-loop)', history)

            symbol = word[position] if position < len(word) else None
            top = stack[-1] if stack else None
            consumed, rule = self._lookup(state, symbol, top)
            if rule is None:
                return self._verdict(
                    False,
                    f"No transition from state {state} on input '{symbol or EPSILON}' "
                    f"with stack top '{top or EPSILON}'",
                    history,
                )

            action = format_rule((state, consumed, top), rule)
            stack.pop()
            stack.extend(reversed(rule.push))
            state = rule.next_state
            if consumed != EPSILON:
                position += 1
            steps += 1
            history.append(Configuration(state, word[position:], tuple(stack), steps, action))

            if position == len(word) and state in spec.accept_states:
                return self._verdict(True, 'Input consumed in an accepting state', history)

    def accepts(self, word, max_steps=DEFAULT_MAX_STEPS):
        return self.run(word, max_steps).accepted

    @staticmethod
    def _verdict(accepted, reason, history):
        logger.debug('DPDA %s after %d steps: %s', 'accepted' if accepted else 'rejected',
                     history[-1].step, reason)
        return RunResult(accepted, reason, history)
