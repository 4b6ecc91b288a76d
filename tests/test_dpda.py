import pytest

from formlang import (
    DPDA,
    EPSILON,
    DefinitionError,
    Rule,
    TransitionSyntaxError,
    UnknownSymbolError,
    parse_rules,
    parse_spec,
)

ANBN_SPEC = '{q0,q1,q2}, {a,b}, {Z,A}, δ, q0, Z, {q2}'
ANBN_RULES = """
(q0, a, Z) = (q0, AZ)
(q0, a, A) = (q0, AA)
(q0, b, A) = (q1, ε)
(q1, b, A) = (q1, ε)
(q1, ε, Z) = (q2, Z)
"""


@pytest.fixture
def anbn():
    return DPDA.from_text(ANBN_SPEC, ANBN_RULES)


def test_parse_spec():
    spec = parse_spec(ANBN_SPEC)
    assert spec.states == ('q0', 'q1', 'q2')
    assert spec.input_alphabet == ('a', 'b')
    assert spec.stack_alphabet == ('Z', 'A')
    assert spec.start_state == 'q0'
    assert spec.start_stack_symbol == 'Z'
    assert spec.accept_states == ('q2',)


def test_parse_spec_with_wrapper():
    assert parse_spec('P=(' + ANBN_SPEC + ')') == parse_spec(ANBN_SPEC)


@pytest.mark.parametrize('text', [
    '',
    '{q0,q1}, {a}, {Z}, δ, q0, {q1}',
    '{q0,q1}, {a}, {Z}, δ, q0, Z, {q1}, extra',
    '{q0,q1, {a}, {Z}, δ, q0, Z, {q1}',
    '{q0,q1}, {a}, {Z}, δ, {q0}, Z, {q1}',
])
def test_parse_spec_rejects_malformed_text(text):
    with pytest.raises(DefinitionError):
        parse_spec(text)


@pytest.mark.parametrize('text, symbol', [
    ('{q0,q1}, {a}, {Z}, δ, q5, Z, {q1}', 'q5'),
    ('{q0,q1}, {a}, {Z}, δ, q0, Z, {q1,q9}', 'q9'),
    ('{q0,q1}, {a}, {Z}, δ, q0, Y, {q1}', 'Y'),
])
def test_parse_spec_rejects_undeclared_symbols(text, symbol):
    with pytest.raises(UnknownSymbolError) as info:
        parse_spec(text)
    assert info.value.symbol == symbol


def test_parse_rules():
    rules = parse_rules(ANBN_RULES)
    assert rules[('q0', 'a', 'Z')] == Rule('q0', 'AZ', '(q0, a, Z) = (q0, AZ)')
    assert rules[('q0', 'b', 'A')].push == ''
    assert rules[('q1', EPSILON, 'Z')].next_state == 'q2'


def test_parse_rules_accepts_delta_prefix_and_comments():
    rules = parse_rules('# pushdown rules\nδ(q0, , Z) = (q1, )\n\n// done')
    assert rules == {('q0', EPSILON, 'Z'): Rule('q1', '', 'δ(q0, , Z) = (q1, )')}


def test_parse_rules_last_duplicate_wins():
    rules = parse_rules('(q0, a, Z) = (q1, Z)\n(q0, a, Z) = (q2, AZ)')
    assert len(rules) == 1
    assert rules[('q0', 'a', 'Z')].next_state == 'q2'


def test_parse_rules_rejects_unparseable_line():
    with pytest.raises(TransitionSyntaxError) as info:
        parse_rules('(q0, a, Z) = (q1, Z)\nq0 a Z q1')
    assert info.value.line_number == 2


def test_rules_are_checked_against_spec():
    with pytest.raises(UnknownSymbolError, match="'q9'"):
        DPDA.from_text(ANBN_SPEC, '(q0, a, Z) = (q9, Z)')
    with pytest.raises(UnknownSymbolError, match="stack symbol 'B'"):
        DPDA.from_text(ANBN_SPEC, '(q0, a, Z) = (q0, BZ)')
    with pytest.raises(UnknownSymbolError, match="input symbol 'c'"):
        DPDA.from_text(ANBN_SPEC, '(q0, c, Z) = (q0, Z)')


@pytest.mark.parametrize('word', ['ab', 'aabb', 'aaabbb'])
def test_anbn_accepts(anbn, word):
    assert anbn.run(word).accepted


@pytest.mark.parametrize('word', ['', 'a', 'aab', 'abb', 'abab', 'ba'])
def test_anbn_rejects(anbn, word):
    assert not anbn.run(word).accepted


def test_history(anbn):
    result = anbn.run('aabb')
    history = result.history
    assert history[0].state == 'q0'
    assert history[0].remaining == 'aabb'
    assert history[0].stack == ('Z',)
    assert history[0].step == 0
    assert history[1].action == 'δ(q0, a, Z) = (q0, AZ)'
    assert history[1].stack == ('Z', 'A')
    assert history[2].stack == ('Z', 'A', 'A')
    assert history[-1].state == 'q2'
    assert history[-1].remaining == ''
    assert [config.step for config in history] == list(range(len(history)))
    assert len(history) == 6


def test_missing_rule_reason(anbn):
    result = anbn.run('aab')
    assert not result.accepted
    assert 'q1' in result.reason
    assert "'ε'" in result.reason
    assert "'A'" in result.reason


def test_push_string_first_character_ends_on_top():
    dpda = DPDA.from_text('{q0,q1}, {a}, {Z,A,B}, δ, q0, Z, {q1}', '(q0, a, Z) = (q1, ABZ)')
    result = dpda.run('a')
    assert result.accepted
    assert result.history[-1].stack == ('Z', 'B', 'A')


def test_input_rule_preferred_over_epsilon_rule():
    dpda = DPDA.from_text(
        '{q0,q1,q2}, {a}, {Z}, δ, q0, Z, {q1}',
        '(q0, a, Z) = (q1, Z)\n(q0, ε, Z) = (q2, Z)',
    )
    result = dpda.run('a')
    assert result.accepted
    assert result.history[1].state == 'q1'


def test_acceptance_is_checked_after_every_step():
    dpda = DPDA.from_text(
        '{q0,q1}, {a}, {Z}, δ, q0, Z, {q1}',
        '(q0, a, Z) = (q1, Z)\n(q1, ε, Z) = (q1, Z)',
    )
    result = dpda.run('a')
    assert result.accepted
    assert len(result.history) == 2


def test_empty_word_accepted_in_start_state():
    dpda = DPDA.from_text('{q0}, {a}, {Z}, δ, q0, Z, {q0}', '(q0, a, Z) = (q0, Z)')
    result = dpda.run('')
    assert result.accepted
    assert len(result.history) == 1


def test_epsilon_loop_hits_step_budget():
    dpda = DPDA.from_text('{q0,q1}, {a}, {Z}, δ, q0, Z, {q1}', '(q0, ε, Z) = (q0, Z)')
    result = dpda.run('', max_steps=50)
    assert not result.accepted
    assert 'Step budget exceeded' in result.reason
    assert len(result.history) == 51


def test_popping_the_last_symbol_stops_the_run():
    dpda = DPDA.from_text('{q0,q1}, {a}, {Z}, δ, q0, Z, {q1}', '(q0, a, Z) = (q0, ε)')
    result = dpda.run('aa')
    assert not result.accepted
    assert result.history[-1].stack == ()
