import logging
import random
import warnings

import streamlit as st

from formlang import (
    DEFAULT_MAX_STEPS,
    DPDA,
    RPNTransducer,
    automaton_from_text,
    dpda_for_language,
    evaluate_postfix,
    parse_expression,
)
from formlang.notation import EXAMPLE_DEFINITION, EXAMPLE_TRANSITIONS
from formlang.pda_languages import SUPPORTED_FORMS
from formlang.render import automaton_graph, history_table, parse_tree_graph, trace_table, transition_table
from formlang.rpn import EXAMPLES as RPN_EXAMPLES

warnings.filterwarnings('ignore')
logging.basicConfig(level=logging.INFO, format='%(asctime)s %(name)s %(levelname)s %(message)s')

TOOLS = (
    'DFA Minimization',
    'Infix to RPN',
    'DPDA Simulator',
    'Arithmetic Parser',
)

EXAMPLE_DPDA = '{q0,q1,q2}, {a,b}, {Z,A}, δ, q0, Z, {q2}'
EXAMPLE_DPDA_RULES = '\n'.join([
    '(q0, a, Z) = (q0, AZ)',
    '(q0, a, A) = (q0, AA)',
    '(q0, b, A) = (q1, ε)',
    '(q1, b, A) = (q1, ε)',
    '(q1, ε, Z) = (q2, Z)',
])


def show_automaton(automaton, title):
    """Transition table on the left, drawing on the right."""
    col1, col2 = st.columns([1, 2])
    with col1:
        st.markdown(f'### {title}')
        st.table(transition_table(automaton))
    with col2:
        st.graphviz_chart(automaton_graph(automaton, title))


def automaton_page():
    st.header('DFA Minimization')
    st.markdown("""
    Enter the automaton as `M=({states}, {alphabet}, δ, start, {final states})` and, optionally, its
    transition table. Table lines may be written as `δ(q0, 0) = q1`, `q0, 1 -> q2`, `q1 0 q3`,
    `q2,1=q5` or with a set of targets `q3, 1 = {q4, q5}`.
    """)

    if st.button('Load example'):
        st.session_state['automaton_definition'] = EXAMPLE_DEFINITION
        st.session_state['automaton_table'] = EXAMPLE_TRANSITIONS

    definition = st.text_input('Automaton definition:', key='automaton_definition',
                               placeholder='M=({q0, q1, q2}, {0,1}, δ, q0, {q2})')
    table = st.text_area('Transition table (optional):', key='automaton_table', height=200)
    seed = st.number_input('Seed for generated transitions', min_value=0, value=0, step=1,
                           help='Used only when no transition table is given')
    if not definition:
        return

    try:
        automaton = automaton_from_text(definition, table, rng=random.Random(int(seed)))
    except ValueError as e:
        st.error(f'Error: {e}')
        return

    validation = automaton.validate()
    if not validation.is_valid:
        for message in validation.errors:
            st.error(message)
        return

    show_automaton(automaton, 'Input automaton')
    dfa = automaton
    if automaton.is_nfa():
        st.info('The automaton is nondeterministic, converting it with the subset construction first.')
        dfa = automaton.convert_to_dfa()
        show_automaton(dfa, 'Subset construction')

    minimized = dfa.minimize()
    show_automaton(minimized, 'Minimized DFA')
    if len(minimized.states) < len(dfa.states):
        reduction = (1 - len(minimized.states) / len(dfa.states)) * 100
        st.success(f'State reduction: {reduction:.1f}% (from {len(dfa.states)} to {len(minimized.states)} states)')
    else:
        st.info('The DFA was already minimal - no state reduction possible.')

    test_string = st.text_input('Enter a string to test:')
    if test_string:
        accepted, trace = minimized.simulate(test_string)
        if accepted:
            st.success(f"String '{test_string}' is ACCEPTED by the DFA.")
        else:
            st.error(f"String '{test_string}' is REJECTED by the DFA.")
        with st.expander('Show Processing Trace'):
            st.code('\n'.join(trace), language='text')


def rpn_page():
    st.header('Infix to Reverse Polish Notation')
    st.markdown('Allowed: digits, `+ - * /`, parentheses and spaces.')
    example = st.selectbox('Examples', RPN_EXAMPLES)
    expression = st.text_input('Arithmetic expression:', value=example)
    if not expression:
        return

    transducer = RPNTransducer()
    try:
        postfix = transducer.convert(expression)
    except ValueError as e:
        st.error(f'Error: {e}')
        postfix = None
    else:
        st.success(postfix)
        try:
            st.write('Value:', evaluate_postfix(postfix))
        except ValueError as e:
            st.warning(str(e))

    with st.expander('Show Trace', expanded=postfix is None):
        st.table(trace_table(transducer.get_trace()))


def dpda_page():
    st.header('DPDA Simulator')
    mode = st.radio('Define the automaton by:', ('Components and rules', 'Language'), horizontal=True)

    if mode == 'Language':
        st.markdown('Supported forms: ' + ', '.join(f'`{form}`' for form in SUPPORTED_FORMS))
        language = st.text_input('Language:', placeholder=SUPPORTED_FORMS[2])
        if not language:
            return
        try:
            generated = dpda_for_language(language)
        except ValueError as e:
            st.error(f'Error: {e}')
            return
        dpda = generated.dpda
        with st.expander('Generated rules', expanded=True):
            for rule, note in generated.notes:
                st.markdown(f'`{rule}`: {note}')
    else:
        spec_text = st.text_input('P = (', value=EXAMPLE_DPDA)
        rules_text = st.text_area('Transition rules:', value=EXAMPLE_DPDA_RULES, height=200)
        try:
            dpda = DPDA.from_text(spec_text, rules_text)
        except ValueError as e:
            st.error(f'Error: {e}')
            return

    word = st.text_input('String to check:')
    max_steps = st.number_input('Step budget', min_value=1, value=DEFAULT_MAX_STEPS, step=100)
    if st.button('Check'):
        result = dpda.run(word, int(max_steps))
        if result.accepted:
            st.success(result.reason)
        else:
            st.error(result.reason)
        st.table(history_table(result.history))


def parser_page():
    st.header('Arithmetic Parser')
    st.code("S -> T E\nE -> + T E | - T E | ε\nT -> F T'\nT' -> * F T' | / F T' | ε\nF -> ( S ) | number | id",
            language='text')
    expression = st.text_input('Expression:', value='2+3*4')
    if not expression:
        return

    result = parse_expression(expression)
    if result.valid:
        st.success('The expression is valid')
    else:
        st.error(f'Error! {result.error}')

    with st.expander('Derivation', expanded=True):
        st.code('\n=> '.join(result.derivation_chain), language='text')
    if result.tree is not None:
        st.graphviz_chart(parse_tree_graph(result.tree))


def main():
    st.set_page_config(
        page_title='Formal Language Workbench',
        page_icon='🧠',
        layout='wide'
    )

    st.title('Formal Language Workbench')
    tool = st.sidebar.radio('Select Tool:', TOOLS)

    if tool == 'DFA Minimization':
        automaton_page()
    elif tool == 'Infix to RPN':
        rpn_page()
    elif tool == 'DPDA Simulator':
        dpda_page()
    else:
        parser_page()


if __name__ == "__main__":
    main()
