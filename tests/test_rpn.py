import pytest

from formlang import ExpressionSyntaxError, RPNTransducer, TokenKind, evaluate_postfix
from formlang.rpn import tokenize


@pytest.mark.parametrize('expression, expected', [
    ('(5 + 3) * 2', '5 3 + 2 *'),
    ('2 * 3 + 4', '2 3 * 4 +'),
    ('10 / (2 + 3)', '10 2 3 + /'),
    ('1 + 2 * 3 - 4', '1 2 3 * + 4 -'),
    ('(15 + 7) * 3 - 9 / 3', '15 7 + 3 * 9 3 / -'),
    ('8 - 3 - 2', '8 3 - 2 -'),
    ('((42))', '42'),
])
def test_convert(expression, expected):
    assert RPNTransducer().convert(expression) == expected


@pytest.mark.parametrize('expression, message', [
    ('(5 + 3', 'Unmatched opening parenthesis'),
    ('5 + )', 'Unmatched closing parenthesis'),
    ('5 +', 'ends with operator'),
    ('5 3', 'Missing operator'),
    ('5 (3)', 'Missing operator'),
    ('()', 'Empty parentheses'),
    ('(5 +)', 'no right operand'),
    ('+ 5', 'no left operand'),
    ('5 * * 2', 'no left operand'),
    ('', 'no operands'),
    ('   ', 'no operands'),
])
def test_convert_rejects_invalid_expressions(expression, message):
    with pytest.raises(ExpressionSyntaxError, match=message):
        RPNTransducer().convert(expression)


def test_error_carries_context():
    with pytest.raises(ExpressionSyntaxError) as info:
        RPNTransducer().convert('5 3')
    error = info.value
    assert error.token == '3'
    assert error.position == 3
    assert error.stack_top == 'Z'
    assert error.last_kind is TokenKind.NUMBER


def test_tokenize_coalesces_digits():
    tokens = tokenize('12+ 345')
    assert [(token.kind, token.text, token.position) for token in tokens] == [
        (TokenKind.NUMBER, '12', 1),
        (TokenKind.OPERATOR, '+', 3),
        (TokenKind.NUMBER, '345', 5),
    ]


def test_tokenize_reports_invalid_character_position():
    with pytest.raises(ExpressionSyntaxError, match="'x' at position 5") as info:
        tokenize('2 + x')
    assert info.value.position == 5


def test_trace():
    transducer = RPNTransducer()
    transducer.convert('(5 + 3) * 2')
    trace = transducer.get_trace()

    assert [step.step for step in trace] == list(range(1, 12))
    assert [step.symbol for step in trace] == ['start', '(', '5', '+', '3', ')', ')', '*', '2', 'λ', 'end']
    assert trace[0].stack == ('Z',)
    assert trace[3].stack == ('Z', '(', '+')
    # First ')' pops '+', second one discards '('
    assert trace[5].output == ('5', '3', '+')
    assert trace[5].stack == ('Z', '(')
    assert trace[6].stack == ('Z',)
    assert trace[-1].stack == ('Z',)
    assert trace[-1].output == ('5', '3', '+', '2', '*')
    assert not any(step.error for step in trace)


def test_precedence_pops_are_traced():
    transducer = RPNTransducer()
    transducer.convert('2 * 3 + 4')
    symbols = [step.symbol for step in transducer.get_trace()]
    # '+' pops '*' (one step) and is then pushed (another step)
    assert symbols == ['start', '2', '*', '3', '+', '+', '4', 'λ', 'end']


def test_transducer_is_reusable():
    transducer = RPNTransducer()
    transducer.convert('1 + 2 * 3 - 4')
    first_trace = transducer.get_trace()

    with pytest.raises(ExpressionSyntaxError):
        transducer.convert('(1')
    assert transducer.convert('1 + 2 * 3 - 4') == '1 2 3 * + 4 -'
    assert transducer.get_trace() == first_trace
    assert RPNTransducer().convert('7') == '7'


def test_failed_conversion_ends_with_error_step():
    transducer = RPNTransducer()
    with pytest.raises(ExpressionSyntaxError):
        transducer.convert('5 +')
    trace = transducer.get_trace()
    assert trace[-1].error
    assert trace[-1].symbol == 'end'
    assert not any(step.error for step in trace[:-1])


@pytest.mark.parametrize('postfix, value', [
    ('5 3 + 2 *', 16),
    ('10 2 3 + /', 2),
    ('1 2 3 * + 4 -', 3),
])
def test_evaluate_postfix(postfix, value):
    assert evaluate_postfix(postfix) == value


@pytest.mark.parametrize('postfix', ['5 +', '5 3', '4 0 /', ''])
def test_evaluate_postfix_rejects_bad_input(postfix):
    with pytest.raises(ExpressionSyntaxError):
        evaluate_postfix(postfix)
