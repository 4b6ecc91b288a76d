"""Graphviz drawings and pandas tables for the engines' results."""
import itertools

import graphviz
import pandas as pd

from .symbols import EPSILON, natural_key


def automaton_graph(automaton, title):
    """Create a graphical representation of the automaton using Graphviz."""
    dot = graphviz.Digraph(comment=title)
    dot.attr(rankdir='LR')  # Left to right layout

    for state in automaton.states:
        shape = 'doublecircle' if state in automaton.final_states else 'circle'
        dot.node(str(state), shape=shape)

    # Invisible node so the start state gets an incoming arrow
    dot.node('__start__', shape='none', label='')
    dot.edge('__start__', str(automaton.start_state))

    # One edge per (source, target) pair, symbols joined into a single label
    labels = {}
    for (state, symbol), targets in automaton.transitions.items():
        for target in targets:
            labels.setdefault((state, target), []).append(symbol)
    for (state, target), symbols in labels.items():
        dot.edge(str(state), str(target), label=', '.join(symbols))

    return dot


def parse_tree_graph(tree):
    """Draw a parse tree top-down; leaves carrying a literal show it."""
    dot = graphviz.Digraph(comment='Parse tree')
    counter = itertools.count()

    # Long sums nest deeply on the right, so walk with an explicit stack
    stack = [(tree, None)]
    while stack:
        node, parent = stack.pop()
        name = f'n{next(counter)}'
        label = node.tag if node.value is None else f'{node.tag}\n{node.value}'
        dot.node(name, label=label, shape='box' if node.children else 'plaintext')
        if parent is not None:
            dot.edge(parent, name)
        stack.extend((child, name) for child in reversed(node.children))
    return dot


def transition_table(automaton):
    """Transition table with start and final state markers, '-' where no move exists."""
    symbols = [symbol for symbol in automaton.alphabet if symbol != EPSILON]
    if any(symbol == EPSILON for _, symbol in automaton.transitions):
        symbols.append(EPSILON)

    rows = []
    for state in automaton.states:
        label = state
        if state == automaton.start_state:
            label += ' (Start)'
        if state in automaton.final_states:
            label += ' (Final)'
        row = [label]
        for symbol in symbols:
            targets = automaton.targets(state, symbol)
            row.append(', '.join(sorted(targets, key=natural_key)) if targets else '-')
        rows.append(row)

    return pd.DataFrame(rows, columns=['State'] + symbols)


def trace_table(steps):
    """One row per transducer step; stacks are shown bottom to top."""
    return pd.DataFrame(
        [{
            'Step': step.step,
            'Input': step.symbol,
            'Stack': ' '.join(step.stack),
            'Output': ' '.join(step.output) or '-',
            'Error': step.error,
        } for step in steps],
        columns=['Step', 'Input', 'Stack', 'Output', 'Error'],
    )


def history_table(history):
    """One row per DPDA configuration; the stack top is the rightmost symbol."""
    return pd.DataFrame(
        [{
            'Step': config.step,
            'State': config.state,
            'Remaining input': config.remaining or EPSILON,
            'Stack': ''.join(config.stack) or EPSILON,
            'Action': config.action,
        } for config in history],
        columns=['Step', 'State', 'Remaining input', 'Stack', 'Action'],
    )
