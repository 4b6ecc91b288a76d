from .automaton import FiniteAutomaton, StateSet, ValidationResult, example_nfa
from .dpda import DEFAULT_MAX_STEPS, DPDA, Configuration, DPDASpec, Rule, RunResult, parse_rules, parse_spec
from .errors import (
    DefinitionError,
    ExpressionSyntaxError,
    FormalLanguageError,
    NotDeterministicError,
    TransitionSyntaxError,
    UnknownSymbolError,
)
from .notation import AutomatonDefinition, automaton_from_text, parse_definition, parse_transition_table
from .pda_languages import dpda_for_language
from .rd_parser import ParseResult, ParseTreeNode, parse_expression
from .rpn import RPNTransducer, TraceStep, evaluate_postfix
from .symbols import EPSILON, Token, TokenKind

__version__ = '0.1.0'
