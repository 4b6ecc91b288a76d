"""Finite automata: determinism checks, subset construction and minimization."""
import logging
from collections import deque
from dataclasses import dataclass, field

from .errors import DefinitionError, NotDeterministicError
from .symbols import EPSILON, natural_key, unique

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StateSet:
    """A canonical set of NFA states, used as the identity of a DFA state."""
    members: tuple

    @classmethod
    def of(cls, states):
        return cls(tuple(sorted(set(states), key=natural_key)))

    @property
    def label(self):
        return '{' + ','.join(self.members) + '}'

    def __iter__(self):
        return iter(self.members)

    def __len__(self):
        return len(self.members)

    def __contains__(self, state):
        return state in self.members


@dataclass
class ValidationResult:
    is_valid: bool
    errors: list = field(default_factory=list)


class FiniteAutomaton:
    """Represents a DFA or NFA with states, alphabet, transitions, start and final states.

    ``transitions`` maps a ``(state, symbol)`` pair to the targets of that move.
    Targets are always stored as a tuple, one element for a deterministic move,
    several for a nondeterministic one. Moves on the empty word are keyed on
    ``EPSILON``. Instances are treated as immutable: every transformation
    returns a new automaton.
    """

    def __init__(self, states, alphabet, transitions, start_state, final_states):
        self.states = unique(states or ())
        self.alphabet = unique(alphabet or ())
        self.transitions = {}
        for (state, symbol), targets in (transitions or {}).items():
            if isinstance(targets, str):
                targets = [targets]
            targets = unique(targets)
            if targets:
                self.transitions[(state, symbol)] = targets
        self.start_state = start_state
        self.final_states = frozenset(final_states or ())

    def __repr__(self):
        return (f'FiniteAutomaton(states={list(self.states)}, alphabet={list(self.alphabet)}, '
                f'start={self.start_state!r}, finals={sorted(self.final_states, key=natural_key)})')

    def targets(self, state, symbol):
        return self.transitions.get((state, symbol), ())

    def is_deterministic(self):
        """True iff no move has two targets and there are no ε-moves."""
        for (_, symbol), targets in self.transitions.items():
            if symbol == EPSILON or len(targets) > 1:
                return False
        return True

    def is_nfa(self):
        return not self.is_deterministic()

    def epsilon_closure(self, states):
        """Compute the epsilon closure of a set of states."""
        if isinstance(states, str):
            states = [states]
        stack = list(states)
        closure = set(stack)

        while stack:
            current_state = stack.pop()
            for next_state in self.targets(current_state, EPSILON):
                if next_state not in closure:
                    closure.add(next_state)
                    stack.append(next_state)
        return frozenset(closure)

    def move(self, states, symbol):
        """All states reachable from ``states`` by one move on ``symbol``."""
        image = set()
        for state in states:
            image.update(self.targets(state, symbol))
        return image

    def convert_to_dfa(self):
        """Convert to a DFA using subset construction.

        An already deterministic automaton is returned as is. Each DFA state
        is named after the set of original states it stands for. Symbols whose
        image is empty get no transition, so the result may be partial.
        """
        if self.is_deterministic():
            return self

        symbols = [symbol for symbol in self.alphabet if symbol != EPSILON]
        initial = StateSet.of(self.epsilon_closure([self.start_state]))
        discovered = [initial]
        seen = {initial}
        unprocessed = deque([initial])
        dfa_transitions = {}

        while unprocessed:
            current = unprocessed.popleft()
            for symbol in symbols:
                image = self.epsilon_closure(self.move(current, symbol))
                if not image:
                    continue
                target = StateSet.of(image)
                if target not in seen:
                    seen.add(target)
                    discovered.append(target)
                    unprocessed.append(target)
                dfa_transitions[(current.label, symbol)] = (target.label,)

        final_states = [subset.label for subset in discovered
                        if any(state in self.final_states for state in subset)]
        logger.info('Subset construction: %d NFA states -> %d DFA states', len(self.states), len(discovered))
        return FiniteAutomaton(
            [subset.label for subset in discovered],
            symbols,
            dfa_transitions,
            initial.label,
            final_states,
        )

    def reachable_states(self):
        """States reachable from the start state, in declaration order."""
        reached = {self.start_state}
        queue = deque([self.start_state])
        while queue:
            state = queue.popleft()
            for symbol in self.alphabet + (EPSILON,):
                for target in self.targets(state, symbol):
                    if target not in reached:
                        reached.add(target)
                        queue.append(target)
        return [state for state in self.states if state in reached]

    def _target(self, state, symbol):
        targets = self.targets(state, symbol)
        return targets[0] if targets else None

    def minimize(self):
        """Minimize the DFA by partition refinement.

        Unreachable states are dropped first. Blocks start as final/non-final
        and are split by the signature of block indices their moves lead to
        (-1 for a missing move) until a full pass splits nothing. The block
        holding the start state is always named q0.
        """
        if not self.is_deterministic():
            raise NotDeterministicError('Minimization needs a DFA; convert the NFA to a DFA first')
        if self.start_state not in self.states:
            raise DefinitionError(f"Start state '{self.start_state}' is not in the list of states")

        symbols = [symbol for symbol in self.alphabet if symbol != EPSILON]
        states = self.reachable_states()
        final_block = [state for state in states if state in self.final_states]
        non_final_block = [state for state in states if state not in self.final_states]
        partitions = [block for block in (final_block, non_final_block) if block]

        while True:
            block_of = {state: index for index, block in enumerate(partitions) for state in block}
            refined = []
            for block in partitions:
                groups = {}
                for state in block:
                    signature = tuple(block_of.get(self._target(state, symbol), -1) for symbol in symbols)
                    groups.setdefault(signature, []).append(state)
                refined.extend(groups.values())
            if len(refined) == len(partitions):
                break
            partitions = refined

        start_index = next(index for index, block in enumerate(partitions) if self.start_state in block)
        partitions.insert(0, partitions.pop(start_index))

        names = {state: f'q{index}' for index, block in enumerate(partitions) for state in block}
        min_transitions = {}
        for index, block in enumerate(partitions):
            representative = block[0]
            for symbol in symbols:
                target = self._target(representative, symbol)
                if target in names:
                    min_transitions[(f'q{index}', symbol)] = (names[target],)

        min_final_states = [f'q{index}' for index, block in enumerate(partitions)
                            if any(state in self.final_states for state in block)]

        logger.info('DFA minimization complete: Reduced from %d to %d states.', len(self.states), len(partitions))
        return FiniteAutomaton(
            [f'q{index}' for index in range(len(partitions))],
            symbols,
            min_transitions,
            'q0',
            min_final_states,
        )

    def validate(self):
        """Structural checks only; completeness and reachability are not required."""
        errors = []
        if not self.states:
            errors.append('The automaton must have at least one state')
        if not self.alphabet:
            errors.append('The automaton must have at least one input symbol')
        if not self.start_state or self.start_state not in self.states:
            errors.append(f"Start state '{self.start_state}' is not in the list of states")
        if not self.final_states:
            errors.append('The automaton must have at least one final state')
        for state in sorted(self.final_states, key=natural_key):
            if state not in self.states:
                errors.append(f"Final state '{state}' is not in the list of states")
        return ValidationResult(is_valid=not errors, errors=errors)

    def simulate(self, word):
        """Run a word (a string of one-character symbols or a symbol sequence).

        Returns ``(accepted, trace)`` where ``trace`` lists the moves made.
        """
        current = self.epsilon_closure([self.start_state])
        trace = [f'Start state: {_describe(current)}']

        for symbol in word:
            if symbol == EPSILON or symbol not in self.alphabet:
                trace.append(f"Symbol '{symbol}' is not in the alphabet")
                return False, trace
            next_states = self.epsilon_closure(self.move(current, symbol))
            if not next_states:
                trace.append(f"  Input '{symbol}': no transition from {_describe(current)}")
                return False, trace
            trace.append(f"  Input '{symbol}': {_describe(current)} -> {_describe(next_states)}")
            current = next_states

        accepted = any(state in self.final_states for state in current)
        trace.append(f"Ended in {'accepting' if accepted else 'non-accepting'} state: {_describe(current)}")
        return accepted, trace

    def accepts(self, word):
        return self.simulate(word)[0]

    def describe(self):
        """Text summary of the automaton, one transition per line."""
        lines = [
            f"States: {{{', '.join(self.states)}}}",
            f"Alphabet: {{{', '.join(self.alphabet)}}}",
            f'Start state: {self.start_state}',
            f"Final states: {{{', '.join(sorted(self.final_states, key=natural_key))}}}",
            'Transitions:',
        ]
        for (state, symbol), targets in self.transitions.items():
            lines.append(f"  δ({state}, {symbol}) = {{{', '.join(targets)}}}")
        return '\n'.join(lines)


def _describe(states):
    if len(states) == 1:
        return next(iter(states))
    return StateSet.of(states).label


def example_nfa():
    """The stock NFA over {a, b}; it accepts a+bab*."""
    return FiniteAutomaton(
        ['q0', 'q1', 'q2', 'q3'],
        ['a', 'b'],
        {
            ('q0', 'a'): ['q0', 'q1'],
            ('q1', 'b'): ['q2'],
            ('q2', 'a'): ['q3'],
            ('q3', 'b'): ['q3'],
        },
        'q0',
        ['q3'],
    )
