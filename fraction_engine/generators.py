# fraction_engine/generators.py
"""
One generator per topic. Each takes ``(level, rng)`` and returns a candidate
Task (without options/explanation) or None once its attempt budget is spent.
Arithmetic errors inside an attempt just burn that attempt.
"""
from __future__ import annotations

import dataclasses
import logging
import random
from typing import Callable, Dict, List, Optional, Tuple, Union

from . import rational
from .errors import FractionEngineError
from .expression import build_linear_expression, build_parenthesized_expression, evaluate_question
from .levels import MAX_ABS_VALUE, LevelParams, get_level_params
from .validator import validate_fraction
from .values import (
    DIVIDE,
    MINUS,
    OPERATORS,
    PLUS,
    TIMES,
    CommonDenominatorAnswer,
    DecimalValue,
    ExpressionQuestion,
    Fraction,
    MixedNumber,
    PairQuestion,
    Task,
    Value,
    ValueQuestion,
)

logger = logging.getLogger(__name__)

PROPER_FRACTION_ATTEMPTS = 200
SIMPLIFY_ATTEMPTS = 100
MIXED_ATTEMPTS = 100
COMMON_DENOM_ATTEMPTS = 200
ARITHMETIC_ATTEMPTS = 200
EXPRESSION_ATTEMPTS = 250

NEGATIVE_PROBABILITY = 0.2
BRACKET_PROBABILITY = 0.45
REPEATING_PROBABILITY = 0.4

MAX_WHOLE = {1: 5, 2: 10, 3: 15, 4: 20}

TO_DECIMAL_DENOMS = {1: (2, 4, 5, 10), 2: (2, 4, 5, 8, 10, 20, 25)}
FROM_DECIMAL_VALUES = {
    1: (0.5, 0.2, 0.4, 0.6, 0.8, 0.25, 0.75),
    2: (0.15, 0.35, 0.45, 0.65, 0.125, 0.375, 1.25, 1.5, 2.75),
}

Generator = Callable[[int, random.Random], Optional[Task]]


# --- Sampling helpers --------------------------------------------------------------


def make_negative(value, level: int, rng: random.Random):
    """
    With 20 % probability (levels 3-4 only) return a negated copy of value.
    The input is never modified.
    """
    if level < 3 or rng.random() >= NEGATIVE_PROBABILITY:
        return value

    if isinstance(value, MixedNumber):
        if value.whole != 0:
            return dataclasses.replace(value, whole=-abs(value.whole))
        return dataclasses.replace(value, num=-abs(value.num))
    if isinstance(value, DecimalValue):
        display = value.display
        if display and not display.startswith("-"):
            display = "-" + display
        return dataclasses.replace(value, decimal=-abs(value.decimal), display=display)
    if isinstance(value, Fraction):
        return Fraction(-abs(value.num), value.den)
    if isinstance(value, (int, float)):
        return -value
    return value


def proper_irreducible_fraction(params: LevelParams, rng: random.Random) -> Fraction:
    for _ in range(PROPER_FRACTION_ATTEMPTS):
        den = params.random_denominator(rng)
        max_num = min(params.max_num, den - 1)
        if max_num < 1:
            continue
        num = rng.randint(1, max_num)
        if rational.gcd(num, den) != 1:
            continue
        return Fraction(num, den)
    return Fraction(1, 2)


def arithmetic_operand(level: int, rng: random.Random) -> Union[Fraction, MixedNumber]:
    params = get_level_params(level)

    if level >= 3:
        cap = 24 if level == 3 else 36
        den = denominator_in_range(2, params, cap, rng)
        num = rng.randint(1, min(params.max_num, cap))
        base = rational.simplify_fraction(num, den)
        if rng.random() < 0.35:
            whole = rng.randint(1, 6 if level == 3 else 8)
            base = rational.simplify_fraction(base.num + whole * base.den, base.den)
    else:
        base = proper_irreducible_fraction(params, rng)

    if level == 2 and rng.random() < 0.3:
        return MixedNumber(rng.randint(1, 5), base.num, base.den)

    if level >= 3 and rng.random() < 0.3:
        mixed = rational.to_mixed(base.num, base.den)
        if isinstance(mixed, MixedNumber):
            return make_negative(mixed, level, rng)

    return make_negative(base, level, rng)


def denominator_in_range(low: int, params: LevelParams, cap: int, rng: random.Random) -> int:
    """Draw from low..min(params.max_den, cap); the top never drops below low."""
    high = max(low, min(params.max_den, cap))
    return rng.randint(low, high)


def decimal_operand(rng: random.Random, scale: int) -> DecimalValue:
    """A terminating decimal k/scale (0 < k < scale) with its exact display."""
    k = rng.randint(1, scale - 1)
    return rational.analyze_decimal_expansion(k, scale).as_value()


def operation_answer(result: Fraction, level: int) -> Tuple[Union[Fraction, MixedNumber], str]:
    fraction = rational.simplify_fraction(result.num, result.den)
    if level == 2 and fraction.den != 1 and abs(fraction.num) > fraction.den:
        mixed = rational.to_mixed(fraction.num, fraction.den)
        if isinstance(mixed, MixedNumber):
            return mixed, "mixed"
    return fraction, "fraction"


def random_operators(count: int, rng: random.Random) -> List[str]:
    operators = [rng.choice(OPERATORS) for _ in range(count)]
    if len(operators) >= 2 and len(set(operators)) < 2:
        alternatives = [op for op in OPERATORS if op != operators[0]]
        operators[-1] = rng.choice(alternatives)
    return operators


def _operands_in_bounds(operands) -> bool:
    try:
        return all(validate_fraction(rational.to_fraction(op)) for op in operands)
    except (FractionEngineError, TypeError):
        return False


# --- Topic generators --------------------------------------------------------------


def generate_simplify(level: int, rng: random.Random) -> Optional[Task]:
    params = get_level_params(level)

    for _ in range(SIMPLIFY_ATTEMPTS):
        if level >= 3:
            base = rational.simplify_fraction(
                rng.randint(1, params.max_num), params.random_denominator(rng)
            )
            if rng.random() < 0.4:
                whole = rng.randint(1, 6 if level == 3 else 8)
                base = rational.simplify_fraction(base.num + whole * base.den, base.den)
            base = make_negative(base, level, rng)
        else:
            base = proper_irreducible_fraction(params, rng)

        multiplier = rng.randint(2, 8 if level >= 4 else 6)
        question = Fraction(base.num * multiplier, base.den * multiplier)
        if abs(question.num) > MAX_ABS_VALUE or question.den > MAX_ABS_VALUE:
            continue
        if rational.gcd(question.num, question.den) <= 1:
            continue

        answer = rational.simplify_fraction(base.num, base.den)
        return Task("simplify", level, ValueQuestion(question), answer, "fraction")
    return None


def generate_mixed(level: int, rng: random.Random) -> Optional[Task]:
    params = get_level_params(level)
    max_whole = MAX_WHOLE.get(level, MAX_WHOLE[2])

    for _ in range(MIXED_ATTEMPTS):
        den = params.random_denominator(rng)
        whole = rng.randint(1, max_whole)
        rem = rng.randint(1, den - 1)
        num = whole * den + rem
        if level >= 3 and rng.random() < NEGATIVE_PROBABILITY:
            num = -num

        if abs(num) > MAX_ABS_VALUE or den > MAX_ABS_VALUE:
            continue

        answer = rational.to_mixed(num, den)
        if not isinstance(answer, MixedNumber):
            continue
        return Task("mixed", level, ValueQuestion(Fraction(num, den)), answer, "mixed")
    return None


def generate_common_denom(level: int, rng: random.Random) -> Optional[Task]:
    params = get_level_params(level)

    for _ in range(COMMON_DENOM_ATTEMPTS):
        den1 = params.random_denominator(rng)
        den2 = params.random_denominator(rng)
        if den1 == den2:
            continue

        max_num1 = min(params.max_num, den1 - 1)
        max_num2 = min(params.max_num, den2 - 1)
        if max_num1 < 1 or max_num2 < 1:
            continue

        frac1 = make_negative(rational.simplify_fraction(rng.randint(1, max_num1), den1), level, rng)
        frac2 = make_negative(rational.simplify_fraction(rng.randint(1, max_num2), den2), level, rng)
        if frac1.den == frac2.den:
            continue

        common_den = rational.lcm(frac1.den, frac2.den)
        if common_den <= 0 or common_den > MAX_ABS_VALUE:
            continue

        converted1 = Fraction(frac1.num * (common_den // frac1.den), common_den)
        converted2 = Fraction(frac2.num * (common_den // frac2.den), common_den)
        if not validate_fraction(converted1) or not validate_fraction(converted2):
            continue

        return Task(
            "common_denom",
            level,
            PairQuestion((frac1, frac2)),
            CommonDenominatorAnswer((converted1, converted2), common_den),
            "common_denom",
        )
    return None


def _result_allowed(topic: str, level: int, result: Fraction) -> bool:
    if topic in ("add", "divide") and level == 1:
        return rational.is_proper_or_whole(result)
    if topic == "multiply" and level == 1:
        return rational.is_proper(result)
    if topic == "subtract" and level <= 2:
        return result.num >= 0
    return True


def _generate_operation(topic: str, operator: str, level: int, rng: random.Random) -> Optional[Task]:
    params = get_level_params(level)

    for _ in range(ARITHMETIC_ATTEMPTS):
        try:
            term_count = 2 if level <= 2 else rng.randint(2, params.max_terms)
            operands = [arithmetic_operand(level, rng) for _ in range(term_count)]

            if topic == "subtract" and level <= 2:
                first = rational.to_fraction(operands[0])
                second = rational.to_fraction(operands[1])
                if first.num * second.den < second.num * first.den:
                    operands[0], operands[1] = operands[1], operands[0]

            if topic == "divide" and any(rational.to_fraction(op).num == 0 for op in operands[1:]):
                continue

            operators = (operator,) * (term_count - 1)
            expression = None
            if level >= 3 and term_count >= 3 and rng.random() < BRACKET_PROBABILITY:
                expression = build_parenthesized_expression(operators, rng)

            question = ExpressionQuestion(tuple(operands), operators, expression)
            result = evaluate_question(question)
            if not _result_allowed(topic, level, result) or not validate_fraction(result):
                continue

            answer, answer_type = operation_answer(result, level)
            return Task(topic, level, question, answer, answer_type)
        except FractionEngineError as e:
            logger.debug("%s attempt failed: %s", topic, e)
    return None


def generate_add(level: int, rng: random.Random) -> Optional[Task]:
    return _generate_operation("add", PLUS, level, rng)


def generate_subtract(level: int, rng: random.Random) -> Optional[Task]:
    return _generate_operation("subtract", MINUS, level, rng)


def generate_multiply(level: int, rng: random.Random) -> Optional[Task]:
    return _generate_operation("multiply", TIMES, level, rng)


def generate_divide(level: int, rng: random.Random) -> Optional[Task]:
    return _generate_operation("divide", DIVIDE, level, rng)


def generate_combined(level: int, rng: random.Random) -> Optional[Task]:
    if level <= 2:
        basic = rng.choice((generate_add, generate_subtract, generate_multiply, generate_divide))
        task = basic(level, rng)
        if task is None:
            return None
        return dataclasses.replace(task, topic="combined")

    max_terms = 3 if level == 3 else 4
    for _ in range(EXPRESSION_ATTEMPTS):
        try:
            term_count = rng.randint(2, max_terms)
            operands: List[Value] = []
            for _ in range(term_count):
                if level == 4 and rng.random() < 0.25:
                    operands.append(make_negative(decimal_operand(rng, 1000), level, rng))
                else:
                    operands.append(arithmetic_operand(level, rng))

            if all(isinstance(op, DecimalValue) for op in operands):
                operands[0] = arithmetic_operand(level, rng)

            operators = tuple(random_operators(term_count - 1, rng))
            question = ExpressionQuestion(
                tuple(operands), operators, build_parenthesized_expression(operators, rng)
            )
            result = evaluate_question(question)
            if not validate_fraction(result) or not _operands_in_bounds(operands):
                continue

            answer, answer_type = operation_answer(result, level)
            return Task("combined", level, question, answer, answer_type)
        except FractionEngineError as e:
            logger.debug("combined attempt failed: %s", e)
    return None


def generate_to_decimal(level: int, rng: random.Random) -> Optional[Task]:
    params = get_level_params(level)
    # decided once up front; sampling then has to hit the requested case
    want_repeating = level >= 3 and rng.random() < REPEATING_PROBABILITY

    for _ in range(EXPRESSION_ATTEMPTS):
        if level <= 2:
            den = rng.choice(TO_DECIMAL_DENOMS[level])
            fraction = rational.simplify_fraction(rng.randint(1, den * 2), den)
            digits = rational.count_terminating_digits(fraction.den)
            if level == 1 and (digits > 1 or fraction.den == 1):
                continue
            if level == 2 and digits > 2:
                continue
        else:
            den = denominator_in_range(params.min_den, params, 50 if level == 3 else 100, rng)
            num = rng.randint(1, min(params.max_num, den * 2))
            fraction = make_negative(rational.simplify_fraction(num, den), level, rng)

        info = rational.analyze_decimal_expansion(fraction.num, fraction.den)
        if info.terminating == want_repeating:
            continue

        return Task("to_decimal", level, ValueQuestion(fraction), info.as_value(), "decimal")
    return None


def generate_from_decimal(level: int, rng: random.Random) -> Optional[Task]:
    if level <= 2:
        value = rng.choice(FROM_DECIMAL_VALUES[level])
        answer = rational.decimal_to_fraction(value)
        question = rational.analyze_decimal_expansion(answer.num, answer.den).as_value()
        return Task("from_decimal", level, ValueQuestion(question), answer, "fraction")

    params = get_level_params(level)
    if rng.random() < REPEATING_PROBABILITY:
        for _ in range(EXPRESSION_ATTEMPTS):
            den = denominator_in_range(3, params, 50 if level == 3 else 100, rng)
            num = rng.randint(1, min(params.max_num, den * 2))
            base = make_negative(rational.simplify_fraction(num, den), level, rng)
            info = rational.analyze_decimal_expansion(base.num, base.den)
            if info.terminating:
                continue
            return Task("from_decimal", level, ValueQuestion(info.as_value()), base, "fraction")
        return None

    sign = -1 if rng.random() < NEGATIVE_PROBABILITY else 1
    answer = rational.simplify_fraction(sign * rng.randint(1, 999), 1000)
    question = rational.analyze_decimal_expansion(answer.num, answer.den).as_value()
    return Task("from_decimal", level, ValueQuestion(question), answer, "fraction")


def generate_mixed_decimal(level: int, rng: random.Random) -> Optional[Task]:
    max_terms = 2 if level <= 2 else (3 if level == 3 else 4)
    scale = 100 if level <= 2 else 1000

    for _ in range(EXPRESSION_ATTEMPTS):
        try:
            term_count = 2 if level <= 2 else rng.randint(2, max_terms)
            decimal_index = rng.randint(0, term_count - 1)
            operands: List[Value] = []
            for i in range(term_count):
                if i == decimal_index or (level >= 4 and rng.random() < 0.25):
                    operands.append(make_negative(decimal_operand(rng, scale), level, rng))
                else:
                    operands.append(arithmetic_operand(level, rng))

            operators = tuple(random_operators(term_count - 1, rng))
            if level >= 3:
                expression = build_parenthesized_expression(operators, rng)
            else:
                expression = build_linear_expression(operators)

            question = ExpressionQuestion(tuple(operands), operators, expression)
            result = evaluate_question(question)
            if not validate_fraction(result) or not _operands_in_bounds(operands):
                continue
            return Task("mixed_decimal", level, question, result, "fraction")
        except FractionEngineError as e:
            logger.debug("mixed_decimal attempt failed: %s", e)
    return None


GENERATORS: Dict[str, Generator] = {
    "simplify": generate_simplify,
    "mixed": generate_mixed,
    "common_denom": generate_common_denom,
    "add": generate_add,
    "subtract": generate_subtract,
    "multiply": generate_multiply,
    "divide": generate_divide,
    "combined": generate_combined,
    "to_decimal": generate_to_decimal,
    "from_decimal": generate_from_decimal,
    "mixed_decimal": generate_mixed_decimal,
}
