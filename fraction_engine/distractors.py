# fraction_engine/distractors.py
"""
Multiple-choice options for a validated task.

Distractors are collected in tiers until there are six options in total:

1. typical mistakes for the topic (at most 3),
2. values next to the correct answer (at most 2),
3. random values drawn from the level table,
4. deterministic index-offset values, then a last-resort sequence.

Every candidate is normalised and bounds-checked, then deduplicated by its
canonical key, so 2/4 and 1/2 can never both appear.
"""
from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import Any, List, Optional, Set, Tuple

from . import rational
from .errors import FractionEngineError
from .expression import (
    evaluate_left_to_right,
    evaluate_with_addition_priority,
    evaluate_with_operands,
    operands_as_fractions,
)
from .formatting import decimal_places_for_task, decimal_places_of, format_decimal
from .generators import MAX_WHOLE
from .levels import MAX_ABS_VALUE, get_level_params
from .values import (
    CommonDenominatorAnswer,
    DecimalValue,
    ExpressionQuestion,
    Fraction,
    MixedNumber,
    Option,
    PairQuestion,
    Task,
    ValueQuestion,
)

TOTAL_OPTIONS = 6
MAX_TYPICAL = 3
MAX_NEARBY = 2
MAX_RANDOM_ATTEMPTS = 20
MAX_FALLBACK_ATTEMPTS = 120
MAX_LAST_RESORT_ATTEMPTS = 500


@dataclass(frozen=True)
class OptionContext:
    kind: str
    decimal_places: int


def detect_option_kind(task: Task) -> str:
    if task.topic == "common_denom" or task.answer_type == "common_denom":
        return "common_denom"
    if task.answer_type == "decimal":
        return "decimal"
    if task.answer_type == "mixed" or task.topic == "mixed":
        return "mixed"
    return "fraction"


# --- Normalisation & keys ----------------------------------------------------------


def _mixed_option(fraction: Fraction) -> Optional[MixedNumber]:
    if abs(fraction.num) < fraction.den:
        return None
    sign = -1 if fraction.num < 0 else 1
    whole, remainder = divmod(abs(fraction.num), fraction.den)
    if remainder == 0:
        return MixedNumber(sign * whole, 0, 1)
    return MixedNumber(sign * whole, remainder, fraction.den)


def normalize_option(candidate: Any, ctx: OptionContext) -> Optional[Option]:
    if ctx.kind == "common_denom":
        if isinstance(candidate, CommonDenominatorAnswer):
            candidate = candidate.common_den
        if isinstance(candidate, bool) or not isinstance(candidate, (int, float)):
            return None
        if not math.isfinite(candidate):
            return None
        value = abs(math.trunc(candidate))
        if value <= 0 or value > MAX_ABS_VALUE:
            return None
        return value

    if ctx.kind == "decimal":
        if isinstance(candidate, DecimalValue):
            candidate = candidate.decimal
        if isinstance(candidate, bool) or not isinstance(candidate, (int, float)):
            return None
        if not math.isfinite(candidate):
            return None
        value = round(float(candidate), ctx.decimal_places)
        if not math.isfinite(value) or abs(value) > MAX_ABS_VALUE:
            return None
        return DecimalValue(value)

    try:
        fraction = rational.to_fraction(candidate)
    except (FractionEngineError, TypeError):
        return None
    if abs(fraction.num) > MAX_ABS_VALUE * 20 or fraction.den > MAX_ABS_VALUE * 20:
        return None

    if ctx.kind == "mixed":
        mixed = _mixed_option(fraction)
        if mixed is None:
            return None
        if max(abs(mixed.whole), mixed.num, mixed.den) > MAX_ABS_VALUE:
            return None
        return mixed

    if abs(fraction.num) > MAX_ABS_VALUE or fraction.den > MAX_ABS_VALUE:
        return None
    return fraction


def option_key(option: Any, ctx: OptionContext) -> Optional[str]:
    if ctx.kind == "common_denom":
        return f"c:{option}"
    if ctx.kind == "decimal":
        if not isinstance(option, DecimalValue):
            return None
        return "d:" + format_decimal(option.decimal, ctx.decimal_places)
    try:
        fraction = rational.to_fraction(option)
    except (FractionEngineError, TypeError):
        return None
    return f"f:{fraction.num}/{fraction.den}"


# --- Tier 1: typical mistakes ------------------------------------------------------


def _wrong_decimal_operands(question: ExpressionQuestion) -> Optional[List[Any]]:
    """Read the first decimal operand as tenths (0.37 -> 4/10)."""
    operands: List[Any] = list(question.operands)
    for i, operand in enumerate(operands):
        if not isinstance(operand, DecimalValue) or not math.isfinite(operand.decimal):
            continue
        wrong = round(abs(operand.decimal) * 10) or 1
        operands[i] = Fraction(-wrong if operand.decimal < 0 else wrong, 10)
        return operands
    return None


def _question_fraction(task: Task) -> Optional[Fraction]:
    question = task.question
    if isinstance(question, ValueQuestion) and isinstance(question.value, Fraction):
        if question.value.den != 0:
            return question.value
    return None


def typical_distractors(task: Task) -> List[Any]:
    topic = task.topic
    question = task.question
    candidates: List[Any] = []

    if topic == "simplify":
        q = _question_fraction(task)
        if q is None:
            return candidates
        g = rational.gcd(q.num, q.den)
        if g > 1:
            # only one side divided
            candidates.append(Fraction(q.num // g, q.den))
            candidates.append(Fraction(q.num, q.den // g))
        if q.num != 0:
            sign = -1 if q.num < 0 else 1
            candidates.append(Fraction(sign * abs(q.den), max(1, abs(q.num))))
        return candidates

    if topic == "mixed":
        q = _question_fraction(task)
        if q is None or q.den <= 1:
            return candidates
        negative = q.num < 0
        whole, rem = divmod(abs(q.num), q.den)
        signed_whole = -whole if negative else whole
        if rem > 1:
            candidates.append(MixedNumber(signed_whole, rem - 1, q.den))
        if rem + 1 < q.den:
            candidates.append(MixedNumber(signed_whole, rem + 1, q.den))
        # whole part and remainder swapped, then an off-by-one whole part
        candidates.append(MixedNumber(-rem if negative else rem, whole, q.den))
        candidates.append(MixedNumber(-(whole + 1) if negative else whole + 1, rem, q.den))
        return candidates

    if topic == "common_denom":
        if isinstance(question, PairQuestion):
            d1, d2 = (f.den for f in question.fractions)
            if d1 > 0 and d2 > 0:
                candidates.extend([d1 * d2, d1 + d2, max(d1, d2)])
                if abs(d1 - d2) > 1:
                    candidates.append(abs(d1 - d2))
        return candidates

    if topic == "to_decimal":
        q = _question_fraction(task)
        if q is None:
            return candidates
        fraction = rational.simplify_fraction(q.num, q.den)
        if fraction.num != 0:
            candidates.append(DecimalValue(fraction.den / fraction.num))
        answer = task.correct_answer
        correct = answer.decimal if isinstance(answer, DecimalValue) else fraction.num / fraction.den
        candidates.append(DecimalValue(correct * 10))
        candidates.append(DecimalValue(correct / 10))
        return candidates

    if topic == "from_decimal":
        if not isinstance(question, ValueQuestion) or not isinstance(question.value, DecimalValue):
            return candidates
        source = question.value.decimal
        if not math.isfinite(source):
            return candidates
        places = max(1, decimal_places_of(source))
        denominator = 10**places
        numerator = round(source * denominator)
        sign = -1 if numerator < 0 else 1
        candidates.append(Fraction(numerator, 10))
        if denominator >= 100:
            candidates.append(Fraction(numerator, denominator // 10))
        candidates.append(Fraction(sign * denominator, abs(numerator) or 1))
        candidates.append(Fraction(numerator + sign, denominator))
        return candidates

    if not isinstance(question, ExpressionQuestion):
        return candidates

    if topic in ("combined", "mixed_decimal"):
        if topic == "mixed_decimal":
            wrong_operands = _wrong_decimal_operands(question)
            if wrong_operands is not None:
                candidates.append(evaluate_with_operands(question, wrong_operands))
        candidates.append(evaluate_left_to_right(question))
        candidates.append(evaluate_with_addition_priority(question))
        return [c for c in candidates if c is not None]

    try:
        operands = operands_as_fractions(question.operands)
    except (FractionEngineError, TypeError):
        return candidates
    if len(operands) < 2:
        return candidates
    a, b = operands[0], operands[1]

    if topic == "add":
        # numerators and denominators added separately
        candidates.append(Fraction(a.num + b.num, a.den + b.den))
        common = rational.lcm(a.den, b.den)
        if common > 0:
            candidates.append(Fraction(a.num + b.num, common))
        candidates.append(Fraction(a.num * b.den - b.num * a.den, a.den * b.den))
    elif topic == "subtract":
        candidates.append(Fraction(a.num + b.num, a.den + b.den))
        den_diff = abs(a.den - b.den)
        if den_diff > 0:
            candidates.append(Fraction(a.num - b.num, den_diff))
        candidates.append(Fraction(b.num * a.den - a.num * b.den, a.den * b.den))
    elif topic == "multiply":
        if b.num != 0:
            candidates.append(Fraction(a.num * b.den, a.den * b.num))
        candidates.append(Fraction(a.num * b.num, a.den + b.den))
        candidates.append(Fraction(a.num + b.num, a.den * b.den))
    elif topic == "divide":
        candidates.append(Fraction(a.num * b.num, a.den * b.den))
        if a.num != 0:
            candidates.append(Fraction(a.den * b.num, a.num * b.den))
        if a.num != 0 and b.num != 0:
            candidates.append(Fraction(a.den * b.den, a.num * b.num))

    if len(operands) > 2 and question.expression:
        # brackets ignored
        wrong = evaluate_left_to_right(question)
        if wrong is not None:
            candidates.append(wrong)
    return candidates


# --- Tier 2: near values -----------------------------------------------------------


def nearby_distractors(ctx: OptionContext, correct: Option) -> List[Any]:
    if ctx.kind == "common_denom":
        base = int(correct)
        return [base - 1, base + 1, base - 2, base + 2]

    if ctx.kind == "decimal":
        base = correct.decimal if isinstance(correct, DecimalValue) else 0.0
        return [
            DecimalValue(base + 0.1),
            DecimalValue(base - 0.1),
            DecimalValue(base + 0.01),
            DecimalValue(base - 0.01),
        ]

    if ctx.kind == "mixed" and isinstance(correct, MixedNumber):
        whole, num, den = correct.whole, abs(correct.num) or 1, correct.den if correct.den > 0 else 2
        candidates = [
            MixedNumber(whole + 1, num, den),
            MixedNumber(whole - 1, num, den),
            MixedNumber(whole, num + 1, den),
        ]
        if num > 1:
            candidates.append(MixedNumber(whole, num - 1, den))
        return candidates

    fraction = rational.to_fraction(correct)
    candidates = [
        Fraction(fraction.num + 1, fraction.den),
        Fraction(fraction.num - 1, fraction.den),
        Fraction(fraction.num, fraction.den + 1),
    ]
    if fraction.den > 1:
        candidates.append(Fraction(fraction.num, fraction.den - 1))
    return candidates


# --- Tiers 3 and 4 -----------------------------------------------------------------


def random_distractor(task: Task, ctx: OptionContext, correct: Option, rng: random.Random) -> Any:
    params = get_level_params(task.level)

    if ctx.kind == "common_denom":
        base = int(correct) if int(correct) > 0 else 10
        low = max(2, math.floor(base * 0.5))
        high = min(MAX_ABS_VALUE, max(low + 6, math.floor(base * 1.8)))
        return rng.randint(low, high)

    if ctx.kind == "decimal":
        base = correct.decimal if isinstance(correct, DecimalValue) else 0.0
        scale = 10**ctx.decimal_places
        low = round((base - 3) * scale)
        high = round((base + 3) * scale)
        if not params.negatives:
            low = max(0, low)
        if low == high:
            high += scale
        return DecimalValue(rng.randint(min(low, high), max(low, high)) / scale)

    min_den, max_den = params.min_den, params.largest_denominator

    if ctx.kind == "mixed":
        den = rng.randint(min_den, max_den)
        whole = rng.randint(1, MAX_WHOLE.get(task.level, MAX_WHOLE[2]))
        num = rng.randint(1, max(1, den - 1))
        if params.negatives and rng.random() < 0.25:
            whole = -whole
        return MixedNumber(whole, num, den)

    den = rng.randint(min_den, max_den)
    if params.negatives:
        num = rng.randint(-params.max_num, params.max_num) or 1
    else:
        num = rng.randint(1, params.max_num)
    return Fraction(num, den)


def fallback_distractor(ctx: OptionContext, correct: Option, index: int) -> Any:
    if ctx.kind == "common_denom":
        return max(2, int(correct) + index + 1)
    if ctx.kind == "decimal":
        base = correct.decimal if isinstance(correct, DecimalValue) else 0.0
        return DecimalValue(base + (index + 1) / 10**ctx.decimal_places)
    if ctx.kind == "mixed" and isinstance(correct, MixedNumber):
        return MixedNumber(correct.whole + index + 1, max(1, abs(correct.num)), correct.den)
    fraction = rational.to_fraction(correct)
    return Fraction(fraction.num + index + 1, fraction.den + (index % 4) + 1)


def last_resort_distractor(ctx: OptionContext, step: int) -> Any:
    if ctx.kind == "common_denom":
        return 100 + step
    if ctx.kind == "decimal":
        return DecimalValue((100 + step) / 10**ctx.decimal_places)
    if ctx.kind == "mixed":
        return MixedNumber(100 + step, 1, 2)
    return Fraction(100 + step, 101 + step)


# --- Assembly ----------------------------------------------------------------------


def _correct_option(task: Task, ctx: OptionContext) -> Optional[Option]:
    answer = task.correct_answer
    if ctx.kind == "common_denom":
        return normalize_option(answer, ctx)
    normalized = normalize_option(answer, ctx)
    if ctx.kind == "decimal" and normalized is not None and isinstance(answer, DecimalValue):
        # keep the exact display (e.g. repeating period) on the correct option
        return answer
    return normalized


def generate_options(task: Task, rng: Optional[random.Random] = None) -> Tuple[Tuple[Option, ...], int]:
    """
    Return six options (the correct answer plus five distractors) in random
    order, together with the index of the correct one.
    """
    rng = rng or random.Random()
    ctx = OptionContext(detect_option_kind(task), decimal_places_for_task(task))

    correct = _correct_option(task, ctx)
    if correct is None and ctx.kind == "mixed":
        ctx = OptionContext("fraction", ctx.decimal_places)
        correct = _correct_option(task, ctx)
    if correct is None:
        raise ValueError(f"Task has no usable correct answer: {task.correct_answer!r}")

    correct_key = option_key(correct, ctx)
    options: List[Option] = [correct]
    used: Set[Optional[str]] = {correct_key}

    def add(candidate: Any) -> bool:
        normalized = normalize_option(candidate, ctx)
        if normalized is None:
            return False
        key = option_key(normalized, ctx)
        if key is None or key in used:
            return False
        used.add(key)
        options.append(normalized)
        return True

    added = 0
    for candidate in typical_distractors(task):
        if len(options) >= TOTAL_OPTIONS or added >= MAX_TYPICAL:
            break
        added += add(candidate)

    added = 0
    for candidate in nearby_distractors(ctx, correct):
        if len(options) >= TOTAL_OPTIONS or added >= MAX_NEARBY:
            break
        added += add(candidate)

    attempts = 0
    while len(options) < TOTAL_OPTIONS and attempts < MAX_RANDOM_ATTEMPTS:
        attempts += 1
        add(random_distractor(task, ctx, correct, rng))

    attempts = 0
    while len(options) < TOTAL_OPTIONS and attempts < MAX_FALLBACK_ATTEMPTS:
        add(fallback_distractor(ctx, correct, attempts))
        attempts += 1

    attempts = 0
    while len(options) < TOTAL_OPTIONS and attempts < MAX_LAST_RESORT_ATTEMPTS:
        attempts += 1
        add(last_resort_distractor(ctx, attempts))

    rng.shuffle(options)
    correct_index = next(i for i, opt in enumerate(options) if option_key(opt, ctx) == correct_key)
    return tuple(options), correct_index
