import dataclasses

import pytest

from fraction_engine.fallbacks import FALLBACK_TASKS
from fraction_engine.validator import is_within_limit, validate_fraction, validate_task
from fraction_engine.values import (
    CommonDenominatorAnswer,
    DecimalValue,
    ExpressionQuestion,
    Fraction,
    MixedNumber,
    PairQuestion,
    Task,
    ValueQuestion,
)


def _expression_task(topic, operands, operators, answer, level=1, answer_type="fraction"):
    return Task(topic, level, ExpressionQuestion(tuple(operands), tuple(operators)), answer, answer_type)


@pytest.mark.parametrize("topic", sorted(FALLBACK_TASKS))
@pytest.mark.parametrize("level", [1, 2, 3, 4])
def test_fallback_tasks_are_valid(topic, level):
    task = dataclasses.replace(FALLBACK_TASKS[topic], level=level)
    assert validate_task(task)


def test_validate_fraction():
    assert validate_fraction(Fraction(-3, 4))
    assert validate_fraction(Fraction(999, 998))
    assert not validate_fraction(Fraction(1, 0))
    assert not validate_fraction(Fraction(1, -2))
    assert not validate_fraction(Fraction(1000, 3))
    assert not validate_fraction(Fraction(1.5, 2))
    assert not validate_fraction((1, 2))


def test_is_within_limit():
    assert is_within_limit(Fraction(999, 2))
    assert not is_within_limit(Fraction(1000, 2))
    assert not is_within_limit(DecimalValue(float("nan")))
    assert not is_within_limit(ExpressionQuestion((Fraction(1, 2), MixedNumber(1000, 1, 2)), ("+",)))
    assert is_within_limit({"a": [1, 2, 3]})


def test_rejects_wrong_answer():
    task = _expression_task("add", [Fraction(1, 3), Fraction(1, 4)], ["+"], Fraction(2, 7))
    assert not validate_task(task)


def test_rejects_division_by_zero_operand():
    task = _expression_task("divide", [Fraction(1, 3), Fraction(0, 1)], ["÷"], Fraction(0, 1))
    assert not validate_task(task)


def test_negative_subtraction_depends_on_level():
    operands = [Fraction(1, 4), Fraction(1, 2)]
    assert not validate_task(_expression_task("subtract", operands, ["−"], Fraction(-1, 4), level=2))
    assert validate_task(_expression_task("subtract", operands, ["−"], Fraction(-1, 4), level=3))


def test_level_one_multiplication_must_be_proper():
    operands = [Fraction(3, 2), Fraction(3, 2)]
    assert not validate_task(_expression_task("multiply", operands, ["×"], Fraction(9, 4), level=1))
    assert validate_task(_expression_task("multiply", operands, ["×"], Fraction(9, 4), level=2))


def test_level_one_addition_allows_whole_results():
    operands = [Fraction(1, 2), Fraction(1, 2)]
    assert validate_task(_expression_task("add", operands, ["+"], Fraction(1, 1), level=1))
    operands = [Fraction(3, 4), Fraction(1, 2)]
    assert not validate_task(_expression_task("add", operands, ["+"], Fraction(5, 4), level=1))


def test_rejects_out_of_bounds_operand():
    operands = [Fraction(1000, 3), Fraction(1, 3)]
    assert not validate_task(_expression_task("add", operands, ["+"], Fraction(1001, 3), level=3))


def test_rejects_unknown_answer_type():
    task = dataclasses.replace(FALLBACK_TASKS["add"], answer_type="percent")
    assert not validate_task(task)


def test_rejects_non_tasks():
    assert not validate_task(None)
    assert not validate_task({"topic": "add"})


def test_mixed_answer_shape():
    question = ValueQuestion(Fraction(11, 4))
    assert validate_task(Task("mixed", 1, question, MixedNumber(2, 3, 4), "mixed"))
    # remainder not smaller than the denominator
    assert not validate_task(Task("mixed", 1, question, MixedNumber(1, 7, 4), "mixed"))


def test_common_denominator_shape():
    question = PairQuestion((Fraction(1, 3), Fraction(2, 5)))
    good = CommonDenominatorAnswer((Fraction(5, 15), Fraction(6, 15)), 15)
    assert validate_task(Task("common_denom", 1, question, good, "common_denom"))

    wrong_den = CommonDenominatorAnswer((Fraction(10, 30), Fraction(12, 30)), 15)
    assert not validate_task(Task("common_denom", 1, question, wrong_den, "common_denom"))

    wrong_value = CommonDenominatorAnswer((Fraction(5, 15), Fraction(7, 15)), 15)
    assert not validate_task(Task("common_denom", 1, question, wrong_value, "common_denom"))


def test_decimal_answers():
    question = ValueQuestion(Fraction(1, 3))
    exact = DecimalValue(0.333, period="3", display="0,(3)")
    assert validate_task(Task("to_decimal", 3, question, exact, "decimal"))
    assert not validate_task(Task("to_decimal", 3, question, DecimalValue(0.25), "decimal"))
    assert not validate_task(Task("to_decimal", 3, question, DecimalValue(float("inf")), "decimal"))


def test_from_decimal_question_must_be_decimal():
    task = Task("from_decimal", 1, ValueQuestion(Fraction(3, 8)), Fraction(3, 8), "fraction")
    assert not validate_task(task)
