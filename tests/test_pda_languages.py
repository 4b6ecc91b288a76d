import pytest

from formlang import DefinitionError, dpda_for_language


def test_any_word_language():
    generated = dpda_for_language('L = {w | w ∈ {a,b,c}*}')
    dpda = generated.dpda
    assert dpda.spec.input_alphabet == ('a', 'b', 'c')
    for word in ['', 'a', 'abcab', 'ccc']:
        assert dpda.accepts(word), word
    assert not dpda.accepts('abd')
    assert len(generated.notes) == len(dpda.rules) == 4


@pytest.mark.parametrize('word, accepted', [
    ('a', True),
    ('ccab', True),
    ('ccccb', True),
    ('ccbba', True),
    ('cab', False),
    ('cc', False),
    ('', False),
    ('acc', False),
])
def test_even_prefix_language(word, accepted):
    dpda = dpda_for_language('c^(2k) β | β∈{a,b}^+').dpda
    assert dpda.accepts(word) is accepted


@pytest.mark.parametrize('word, accepted', [
    ('acc', True),
    ('abbcc', True),
    ('aacccc', True),
    ('aabcccc', True),
    ('ac', False),
    ('aaccc', False),
    ('accc', False),
    ('bcc', False),
    ('', False),
])
def test_counted_language(word, accepted):
    dpda = dpda_for_language('a^n b^k c^(2n) | k>=0, n>0').dpda
    assert dpda.accepts(word) is accepted


def test_rule_lines_are_readable():
    generated = dpda_for_language('a^n b^k c^(2n) | k>=0, n>0')
    assert 'δ(q0, a, Z) = (q1, AAZ)' in generated.rule_lines()
    assert 'δ(q3, ε, Z) = (q4, Z)' in generated.rule_lines()


def test_unsupported_language():
    with pytest.raises(DefinitionError, match='Supported forms'):
        dpda_for_language('{a^n b^n c^n}')


def test_prefix_symbol_must_not_overlap_suffix():
    with pytest.raises(DefinitionError):
        dpda_for_language('a^(2k) β | β∈{a,b}^+')
