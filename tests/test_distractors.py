import dataclasses
import random

from fraction_engine import rational
from fraction_engine.distractors import (
    TOTAL_OPTIONS,
    OptionContext,
    detect_option_kind,
    generate_options,
    normalize_option,
    option_key,
    random_distractor,
    typical_distractors,
)
from fraction_engine.fallbacks import FALLBACK_TASKS
from fraction_engine.values import DecimalValue, ExpressionQuestion, Fraction, MixedNumber, Task, ValueQuestion


def _keys(task, options):
    ctx = OptionContext(detect_option_kind(task), 3)
    return [option_key(opt, ctx) for opt in options]


def test_detect_option_kind():
    assert detect_option_kind(FALLBACK_TASKS["common_denom"]) == "common_denom"
    assert detect_option_kind(FALLBACK_TASKS["to_decimal"]) == "decimal"
    assert detect_option_kind(FALLBACK_TASKS["mixed"]) == "mixed"
    assert detect_option_kind(FALLBACK_TASKS["add"]) == "fraction"


def test_equivalent_fractions_share_a_key():
    ctx = OptionContext("fraction", 2)
    assert option_key(Fraction(2, 4), ctx) == option_key(Fraction(1, 2), ctx) == "f:1/2"
    assert option_key(MixedNumber(1, 1, 2), OptionContext("mixed", 2)) == "f:3/2"


def test_decimal_keys_use_task_places():
    ctx = OptionContext("decimal", 2)
    assert option_key(DecimalValue(0.5), ctx) == "d:0,5"
    assert option_key(DecimalValue(0.504), ctx) == "d:0,5"


def test_normalize_option_bounds():
    fraction_ctx = OptionContext("fraction", 2)
    assert normalize_option(Fraction(1000, 1), fraction_ctx) is None
    assert normalize_option(Fraction(2000, 4), fraction_ctx) == Fraction(500, 1)
    assert normalize_option(Fraction(1, 0), fraction_ctx) is None

    common_ctx = OptionContext("common_denom", 2)
    assert normalize_option(0, common_ctx) is None
    assert normalize_option(-12, common_ctx) == 12
    assert normalize_option(1000, common_ctx) is None

    mixed_ctx = OptionContext("mixed", 2)
    # proper values are not mixed numbers
    assert normalize_option(Fraction(3, 4), mixed_ctx) is None
    assert normalize_option(Fraction(11, 4), mixed_ctx) == MixedNumber(2, 3, 4)
    assert normalize_option(Fraction(8, 4), mixed_ctx) == MixedNumber(2, 0, 1)


def test_simplify_options_contain_typical_mistakes():
    task = Task("simplify", 1, ValueQuestion(Fraction(6, 8)), Fraction(3, 4), "fraction")
    options, correct_index = generate_options(task, random.Random(1))

    assert len(options) == TOTAL_OPTIONS
    assert options[correct_index] == Fraction(3, 4)
    # only one side divided, and the inverted value
    assert Fraction(3, 8) in options
    assert Fraction(3, 2) in options
    assert Fraction(4, 3) in options


def test_common_denominator_options():
    task = FALLBACK_TASKS["common_denom"]
    options, correct_index = generate_options(task, random.Random(2))

    assert options[correct_index] == 15
    assert all(isinstance(opt, int) for opt in options)
    assert len(set(options)) == TOTAL_OPTIONS
    # sum and max of the denominators are classic mistakes
    assert 8 in options and 5 in options


def test_decimal_options_keep_the_exact_display():
    task = Task(
        "to_decimal",
        3,
        ValueQuestion(Fraction(1, 3)),
        DecimalValue(0.333, period="3", display="0,(3)"),
        "decimal",
    )
    options, correct_index = generate_options(task, random.Random(3))
    assert options[correct_index].display == "0,(3)"
    assert options[correct_index].period == "3"
    assert len(set(_keys(task, options))) == TOTAL_OPTIONS


def test_mixed_options_are_all_improper():
    task = FALLBACK_TASKS["mixed"]
    options, correct_index = generate_options(task, random.Random(4))
    assert options[correct_index] == MixedNumber(2, 3, 4)
    for opt in options:
        fraction = rational.to_fraction(opt)
        assert abs(fraction.num) >= fraction.den


def test_options_fill_up_near_the_bounds():
    task = Task("to_decimal", 4, ValueQuestion(Fraction(1997, 2)), DecimalValue(998.5, display="998,5"), "decimal")
    options, correct_index = generate_options(task, random.Random(5))
    assert len(options) == TOTAL_OPTIONS
    assert len(set(_keys(task, options))) == TOTAL_OPTIONS
    assert all(abs(opt.decimal) <= 999 for opt in options)


def test_precedence_mistakes_for_combined():
    task = FALLBACK_TASKS["combined"]
    # left-to-right equals the bracketed value here; addition priority too
    assert Fraction(5, 24) in typical_distractors(task)

    question = ExpressionQuestion((Fraction(1, 2), Fraction(1, 3), Fraction(1, 4)), ("+", "×"), "{0} + {1} × {2}")
    task = Task("combined", 3, question, Fraction(7, 12), "fraction")
    options, correct_index = generate_options(task, random.Random(6))
    assert options[correct_index] == Fraction(7, 12)
    assert Fraction(5, 24) in options


def test_options_are_shuffled_with_injected_rng():
    task = FALLBACK_TASKS["add"]
    first = generate_options(task, random.Random(42))
    second = generate_options(task, random.Random(42))
    assert first == second

    positions = {generate_options(task, random.Random(seed))[1] for seed in range(60)}
    assert len(positions) > 1


def test_random_decimal_options_follow_the_level_sign_rule():
    task = FALLBACK_TASKS["to_decimal"]
    ctx = OptionContext("decimal", 3)
    correct = task.correct_answer
    rng = random.Random(7)

    low_level = [random_distractor(task, ctx, correct, rng) for _ in range(300)]
    assert all(opt.decimal >= 0 for opt in low_level)

    high_task = dataclasses.replace(task, level=3)
    high_level = [random_distractor(high_task, ctx, correct, rng) for _ in range(300)]
    assert any(opt.decimal < 0 for opt in high_level)
