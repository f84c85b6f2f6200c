# fraction_engine/formatting.py
from __future__ import annotations

import math
import re
from typing import Any, Optional

from . import rational
from .errors import FractionEngineError, InvalidFraction
from .expression import render_expression
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

MIN_DECIMAL_PLACES = 1
MAX_DECIMAL_PLACES = 3
DEFAULT_DECIMAL_PLACES = 2


def decimal_places_of(value: Any) -> int:
    if not isinstance(value, (int, float)) or not math.isfinite(value):
        return 0
    text = repr(float(value))
    if "e" in text or "E" in text:
        text = f"{value:.6f}"
    if "." not in text:
        return 0
    return len(text.split(".", 1)[1].rstrip("0"))


def decimal_places_for_task(task: Task) -> int:
    places = 0
    question = task.question
    if isinstance(question, ValueQuestion) and isinstance(question.value, DecimalValue):
        places = max(places, decimal_places_of(question.value.decimal))

    answer = task.correct_answer
    if isinstance(answer, DecimalValue):
        places = max(places, decimal_places_of(answer.decimal))
        if answer.period:
            places = max(places, min(MAX_DECIMAL_PLACES, len(answer.period)))

    if places == 0:
        places = DEFAULT_DECIMAL_PLACES
    return min(MAX_DECIMAL_PLACES, max(MIN_DECIMAL_PLACES, places))


def format_decimal(value: Any, places: Optional[int] = None) -> str:
    if not isinstance(value, (int, float)) or not math.isfinite(value):
        return "?"
    digits = decimal_places_of(value) if places is None else places
    digits = min(6, max(0, digits))

    text = f"{value:.{digits}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text == "-0":
        return "0"
    return text.replace(".", ",")


def format_raw_fraction(value: Any) -> str:
    if not isinstance(value, Fraction) or value.den == 0:
        return "?"
    return f"{value.num}/{value.den}"


def format_fraction(value: Any) -> str:
    try:
        fraction = rational.to_fraction(value)
    except (FractionEngineError, TypeError):
        return "?"
    if fraction.den == 1:
        return str(fraction.num)
    return f"{fraction.num}/{fraction.den}"


def format_mixed(value: Any) -> str:
    if not isinstance(value, MixedNumber):
        return format_fraction(value)
    if value.num == 0:
        return str(value.whole)
    if value.whole == 0:
        return f"{value.num}/{value.den}"
    return f"{value.whole} {abs(value.num)}/{value.den}"


def format_value(value: Any, places: Optional[int] = None) -> str:
    if isinstance(value, MixedNumber):
        return format_mixed(value)
    if isinstance(value, DecimalValue):
        if value.display:
            return value.display
        return format_decimal(value.decimal, places)
    if isinstance(value, Fraction):
        return format_fraction(value)
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return "?"


def format_operand(value: Any) -> str:
    text = format_value(value)
    return f"({text})" if text.startswith("-") else text


def format_answer(task: Task) -> str:
    answer = task.correct_answer
    if task.answer_type == "decimal":
        if isinstance(answer, DecimalValue) and answer.display:
            return answer.display
        decimal = answer.decimal if isinstance(answer, DecimalValue) else None
        return format_decimal(decimal, decimal_places_for_task(task))
    if task.answer_type == "common_denom":
        return str(answer.common_den) if isinstance(answer, CommonDenominatorAnswer) else "?"
    if task.answer_type == "mixed":
        return format_mixed(answer)
    return format_fraction(answer)


def format_question(task: Task) -> str:
    question = task.question
    if isinstance(question, ValueQuestion):
        value = question.value
        if isinstance(value, Fraction):
            return format_raw_fraction(value)
        return format_value(value)
    if isinstance(question, PairQuestion):
        return "; ".join(format_raw_fraction(f) for f in question.fractions)
    if isinstance(question, ExpressionQuestion):
        return render_expression(question, format_operand)
    raise TypeError(f"Unsupported question: {question!r}")


_FRACTION_TEXT_RE = re.compile(r"^\s*([+-]?\d+)\s*/\s*(\d+)\s*$")
_MIXED_TEXT_RE = re.compile(r"^\s*([+-]?\d+)\s+(\d+)\s*/\s*(\d+)\s*$")


def parse_rendered(text: str) -> Fraction:
    """
    Exact value of anything the formatters above produce: "3/4", "-2 3/4",
    "15", "0,375" or "1,(3)". Raises InvalidFraction otherwise.
    """
    if not isinstance(text, str):
        raise InvalidFraction(f"Not a rendered value: {text!r}")
    m = _MIXED_TEXT_RE.match(text)
    if m:
        return rational.to_improper(int(m.group(1)), int(m.group(2)), int(m.group(3)))
    m = _FRACTION_TEXT_RE.match(text)
    if m:
        return rational.simplify_fraction(int(m.group(1)), int(m.group(2)))
    return rational.repeating_to_fraction(text)
