# fraction_engine/validator.py
"""
Acceptance checks for generated tasks. ``validate_task`` never raises for bad
data; a False result means "generate another one".
"""
from __future__ import annotations

import dataclasses
import math
from typing import Any

from . import rational
from .errors import FractionEngineError
from .expression import evaluate_question
from .levels import MAX_ABS_VALUE
from .values import (
    CommonDenominatorAnswer,
    DecimalValue,
    ExpressionQuestion,
    Fraction,
    MixedNumber,
    PairQuestion,
    Task,
    ValueQuestion,
)


def is_within_limit(value: Any) -> bool:
    """Every number reachable from value is finite and at most MAX_ABS_VALUE in magnitude."""
    if isinstance(value, bool):
        return True
    if isinstance(value, (int, float)):
        return math.isfinite(value) and abs(value) <= MAX_ABS_VALUE
    if isinstance(value, (list, tuple)):
        return all(is_within_limit(v) for v in value)
    if isinstance(value, dict):
        return all(is_within_limit(v) for v in value.values())
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return all(is_within_limit(getattr(value, f.name)) for f in dataclasses.fields(value))
    return True


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_fraction(value: Any) -> bool:
    if not isinstance(value, Fraction):
        return False
    if not _is_int(value.num) or not _is_int(value.den):
        return False
    if value.den <= 0:
        return False
    return abs(value.num) <= MAX_ABS_VALUE and value.den <= MAX_ABS_VALUE


def _validate_mixed(answer: Any) -> bool:
    if isinstance(answer, Fraction):
        return validate_fraction(answer)
    if not isinstance(answer, MixedNumber) or not _is_int(answer.whole):
        return False
    if not validate_fraction(Fraction(answer.num, answer.den)):
        return False
    if answer.whole != 0 and answer.num < 0:
        return False
    return abs(answer.num) < answer.den


def _validate_common_denom(answer: Any) -> bool:
    if not isinstance(answer, CommonDenominatorAnswer) or len(answer.fractions) != 2:
        return False
    common = answer.common_den
    if not _is_int(common) or common <= 0 or common > MAX_ABS_VALUE:
        return False
    return all(validate_fraction(f) and f.den == common for f in answer.fractions)


def _validate_decimal(answer: Any) -> bool:
    if not isinstance(answer, DecimalValue):
        return False
    if not isinstance(answer.decimal, (int, float)) or isinstance(answer.decimal, bool):
        return False
    if not math.isfinite(answer.decimal) or abs(answer.decimal) > MAX_ABS_VALUE:
        return False
    if answer.period is not None and not isinstance(answer.period, str):
        return False
    return answer.display is None or isinstance(answer.display, str)


_SHAPE_CHECKS = {
    "fraction": validate_fraction,
    "mixed": _validate_mixed,
    "common_denom": _validate_common_denom,
    "decimal": _validate_decimal,
}


def _operands_valid(task: Task) -> bool:
    question = task.question
    if isinstance(question, ExpressionQuestion):
        operands = question.operands
    elif isinstance(question, PairQuestion):
        operands = question.fractions
    else:
        return True
    try:
        return all(validate_fraction(rational.to_fraction(op)) for op in operands)
    except (FractionEngineError, TypeError):
        return False


def _topic_rules_hold(task: Task) -> bool:
    topic, level, question = task.topic, task.level, task.question

    if topic == "divide":
        if not isinstance(question, ExpressionQuestion) or len(question.operands) < 2:
            return False
        if any(rational.to_fraction(op).num == 0 for op in question.operands[1:]):
            return False

    if topic == "subtract" and level <= 2:
        if rational.to_fraction(task.correct_answer).num < 0:
            return False

    if level == 1 and topic in ("add", "divide"):
        if not rational.is_proper_or_whole(rational.to_fraction(task.correct_answer)):
            return False

    if level == 1 and topic == "multiply":
        if not rational.is_proper(rational.to_fraction(task.correct_answer)):
            return False

    if topic == "to_decimal":
        if not isinstance(question, ValueQuestion) or not validate_fraction(question.value):
            return False

    if topic == "from_decimal":
        if not isinstance(question, ValueQuestion) or not isinstance(question.value, DecimalValue):
            return False
        if not math.isfinite(question.value.decimal):
            return False

    return True


def _answer_matches_question(task: Task) -> bool:
    question, answer = task.question, task.correct_answer

    if isinstance(answer, CommonDenominatorAnswer):
        if not isinstance(question, PairQuestion):
            return False
        return all(
            rational.to_fraction(src) == rational.to_fraction(dst)
            for src, dst in zip(question.fractions, answer.fractions)
        )

    expected = None
    if isinstance(question, ExpressionQuestion):
        expected = evaluate_question(question)
    elif isinstance(question, ValueQuestion):
        expected = rational.to_fraction(question.value)
    if expected is None:
        return False
    return rational.to_fraction(answer) == expected


def validate_task(task: Any) -> bool:
    if not isinstance(task, Task):
        return False
    if not _is_int(task.level):
        return False

    # (a) magnitudes
    if not is_within_limit(task.question) or not is_within_limit(task.correct_answer):
        return False

    # (b) operands
    if not _operands_valid(task):
        return False

    # (c) answer shape
    shape_check = _SHAPE_CHECKS.get(task.answer_type)
    if shape_check is None or not shape_check(task.correct_answer):
        return False

    # (d) topic rules, (e) the answer really solves the question
    try:
        return _topic_rules_hold(task) and _answer_matches_question(task)
    except (FractionEngineError, TypeError):
        return False
