import random

import pytest

from fraction_engine.errors import DivisionByZero, MalformedExpression
from fraction_engine.expression import (
    build_linear_expression,
    build_parenthesized_expression,
    evaluate_expression,
    evaluate_left_to_right,
    evaluate_question,
    evaluate_with_addition_priority,
    render_expression,
    tokenize,
)
from fraction_engine.formatting import format_operand
from fraction_engine.values import DecimalValue, ExpressionQuestion, Fraction, MixedNumber

HALF, THIRD, QUARTER = Fraction(1, 2), Fraction(1, 3), Fraction(1, 4)


def test_template_with_brackets():
    assert evaluate_expression("({0} + {1}) × {2}", [HALF, THIRD, QUARTER]) == Fraction(5, 24)


def test_precedence_without_brackets():
    # 1/2 + 1/3 × 1/4 = 1/2 + 1/12
    assert evaluate_expression("{0} + {1} × {2}", [HALF, THIRD, QUARTER]) == Fraction(7, 12)
    assert evaluate_expression("{0} − {1} ÷ {2}", [HALF, THIRD, QUARTER]) == Fraction(-5, 6)


def test_ascii_operators_are_accepted():
    assert evaluate_expression("({0} + {1}) * {2}", [HALF, THIRD, QUARTER]) == Fraction(5, 24)
    assert evaluate_expression("{0} - {1} / {2}", [HALF, THIRD, QUARTER]) == Fraction(-5, 6)


def test_tokenize():
    assert tokenize("({0} + {12})") == [
        ("symbol", "("),
        ("operand", 0),
        ("symbol", "+"),
        ("operand", 12),
        ("symbol", ")"),
    ]


@pytest.mark.parametrize(
    "expression",
    [
        "{0} +",
        "({0} + {1}",
        "{0} + {1})",
        "{0} {1}",
        "{a} + {1}",
        "{0 + {1}",
        "{0} % {1}",
        "",
    ],
)
def test_malformed_expressions(expression):
    with pytest.raises(MalformedExpression):
        evaluate_expression(expression, [HALF, THIRD])


def test_placeholder_out_of_range():
    with pytest.raises(MalformedExpression):
        evaluate_expression("{0} + {5}", [HALF, THIRD])


def test_division_by_zero_operand():
    with pytest.raises(DivisionByZero):
        evaluate_expression("{0} ÷ {1}", [HALF, Fraction(0, 1)])


def test_build_linear_expression():
    assert build_linear_expression(["+", "×"]) == "{0} + {1} × {2}"


def test_parenthesized_templates_evaluate():
    rng = random.Random(3)
    operands = [HALF, THIRD, QUARTER, Fraction(2, 3)]
    for count in (1, 2, 3):
        for _ in range(20):
            template = build_parenthesized_expression(["+", "×", "−"][:count], rng)
            assert "(" in template
            evaluate_expression(template, operands[: count + 1])


def test_evaluate_question_uses_linear_template_by_default():
    question = ExpressionQuestion((HALF, THIRD, QUARTER), ("+", "×"))
    assert evaluate_question(question) == Fraction(7, 12)


def test_evaluate_question_with_mixed_and_decimal_operands():
    question = ExpressionQuestion((MixedNumber(1, 1, 2), DecimalValue(0.25, display="0,25")), ("×",))
    assert evaluate_question(question) == Fraction(3, 8)


def test_wrong_precedence_evaluators():
    question = ExpressionQuestion((HALF, THIRD, QUARTER), ("+", "×"), "{0} + {1} × {2}")
    # (1/2 + 1/3) × 1/4
    assert evaluate_left_to_right(question) == Fraction(5, 24)
    assert evaluate_with_addition_priority(question) == Fraction(5, 24)

    question = ExpressionQuestion((HALF, THIRD, QUARTER), ("×", "+"))
    # 1/2 × (1/3 + 1/4)
    assert evaluate_with_addition_priority(question) == Fraction(7, 24)
    assert evaluate_left_to_right(question) == Fraction(5, 12)


def test_wrong_evaluators_return_none_on_errors():
    question = ExpressionQuestion((HALF, Fraction(0, 1)), ("÷",))
    assert evaluate_left_to_right(question) is None
    assert evaluate_with_addition_priority(question) is None
    assert evaluate_left_to_right(ExpressionQuestion((HALF,), ("+",))) is None


def test_render_expression_wraps_negative_operands():
    question = ExpressionQuestion((Fraction(-1, 2), THIRD), ("×",), "({0} × {1})")
    assert render_expression(question, format_operand) == "((-1/2) × 1/3)"
