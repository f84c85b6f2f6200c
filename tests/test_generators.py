import random

import pytest

from fraction_engine import rational
from fraction_engine.generators import (
    COMMON_DENOM_ATTEMPTS,
    FROM_DECIMAL_VALUES,
    GENERATORS,
    generate_combined,
    generate_common_denom,
    generate_divide,
    generate_from_decimal,
    generate_mixed_decimal,
    generate_multiply,
    generate_subtract,
    generate_to_decimal,
    make_negative,
)
from fraction_engine.validator import validate_task
from fraction_engine.values import DecimalValue, ExpressionQuestion, Fraction, MixedNumber


class _AlwaysLow(random.Random):
    def random(self):
        return 0.0


class _FirstDraw(random.Random):
    """Seeded rng whose first random() call returns a fixed value."""

    def __init__(self, first, seed):
        super().__init__(seed)
        self._first = first

    def random(self):
        if self._first is not None:
            value, self._first = self._first, None
            return value
        return super().random()


class _SameDenominator(_AlwaysLow):
    def __init__(self):
        super().__init__()
        self.choices = 0

    def choice(self, seq):
        self.choices += 1
        return super().choice(seq)


@pytest.mark.parametrize("topic", sorted(GENERATORS))
@pytest.mark.parametrize("level", [1, 2, 3, 4])
def test_generated_candidates_are_valid(topic, level):
    rng = random.Random(f"{topic}-{level}")
    produced = 0
    for _ in range(60):
        task = GENERATORS[topic](level, rng)
        if task is None:
            continue
        produced += 1
        assert task.topic == topic
        assert task.level == level
        assert validate_task(task), task
    assert produced > 0


def test_make_negative_returns_new_values():
    value = Fraction(3, 4)
    assert make_negative(value, 1, _AlwaysLow()) is value
    assert make_negative(value, 3, _AlwaysLow()) == Fraction(-3, 4)
    assert value == Fraction(3, 4)

    assert make_negative(MixedNumber(2, 1, 3), 4, _AlwaysLow()) == MixedNumber(-2, 1, 3)
    negative = make_negative(DecimalValue(0.25, display="0,25"), 3, _AlwaysLow())
    assert negative == DecimalValue(-0.25, display="-0,25")


def test_low_level_subtraction_is_never_negative():
    rng = random.Random(1)
    for level in (1, 2):
        for _ in range(200):
            task = generate_subtract(level, rng)
            if task is None:
                continue
            assert rational.to_fraction(task.correct_answer).num >= 0


def test_division_never_by_zero():
    rng = random.Random(2)
    for level in (1, 2, 3, 4):
        for _ in range(100):
            task = generate_divide(level, rng)
            if task is None:
                continue
            assert all(rational.to_fraction(op).num != 0 for op in task.question.operands[1:])


def test_level_one_multiplication_is_proper():
    rng = random.Random(3)
    for _ in range(200):
        task = generate_multiply(1, rng)
        if task is None:
            continue
        assert rational.is_proper(rational.to_fraction(task.correct_answer))


def test_level_one_to_decimal_has_one_place():
    rng = random.Random(4)
    for _ in range(200):
        task = generate_to_decimal(1, rng)
        if task is None:
            continue
        assert task.correct_answer.period is None
        assert rational.count_terminating_digits(task.question.value.den) <= 1


def test_to_decimal_repeating_answers_carry_period():
    rng = random.Random(5)
    seen_repeating = False
    for _ in range(200):
        task = generate_to_decimal(3, rng)
        if task is None or task.correct_answer.period is None:
            continue
        seen_repeating = True
        assert "(" in task.correct_answer.display
        assert rational.to_fraction(task.correct_answer) == rational.to_fraction(task.question.value)
    assert seen_repeating


def test_from_decimal_low_levels_use_table():
    rng = random.Random(6)
    for level in (1, 2):
        for _ in range(50):
            task = GENERATORS["from_decimal"](level, rng)
            assert task.question.value.decimal in FROM_DECIMAL_VALUES[level]


def test_combined_high_levels_use_brackets():
    rng = random.Random(7)
    for level in (3, 4):
        for _ in range(50):
            task = generate_combined(level, rng)
            if task is None:
                continue
            assert isinstance(task.question, ExpressionQuestion)
            assert "(" in task.question.expression


def test_combined_low_levels_are_single_operations():
    rng = random.Random(8)
    for _ in range(50):
        task = generate_combined(2, rng)
        if task is None:
            continue
        assert task.topic == "combined"
        assert len(task.question.operators) == 1


def test_mixed_decimal_has_decimal_operand():
    rng = random.Random(9)
    for level in (1, 2, 3, 4):
        for _ in range(50):
            task = generate_mixed_decimal(level, rng)
            if task is None:
                continue
            assert any(isinstance(op, DecimalValue) for op in task.question.operands)
            assert task.answer_type == "fraction"


@pytest.mark.parametrize("level", [3, 4])
@pytest.mark.parametrize("first, repeating", [(0.1, True), (0.39, True), (0.4, False), (0.9, False)])
def test_decimal_kind_is_decided_before_sampling(level, first, repeating):
    for seed in range(25):
        to_decimal = generate_to_decimal(level, _FirstDraw(first, seed))
        assert to_decimal is not None
        assert (to_decimal.correct_answer.period is not None) is repeating
        assert rational.is_terminating_fraction(to_decimal.question.value) is not repeating

        from_decimal = generate_from_decimal(level, _FirstDraw(first, seed))
        assert from_decimal is not None
        assert (from_decimal.question.value.period is not None) is repeating
        assert rational.is_terminating_fraction(from_decimal.correct_answer) is not repeating


def test_common_denom_gives_up_after_its_attempts():
    rng = _SameDenominator()
    # every draw picks the same denominator, so no pair ever qualifies
    assert generate_common_denom(1, rng) is None
    assert rng.choices == 2 * COMMON_DENOM_ATTEMPTS
    assert generate_common_denom(3, _AlwaysLow()) is None
