# fraction_engine/fallbacks.py
# Hand-authored tasks, one per topic. Used when the generator keeps
# producing candidates the validator rejects.
from __future__ import annotations

import dataclasses
from typing import Dict

from .errors import UnsupportedTopic
from .values import (
    DIVIDE,
    MINUS,
    PLUS,
    TIMES,
    CommonDenominatorAnswer,
    DecimalValue,
    ExpressionQuestion,
    Fraction,
    MixedNumber,
    PairQuestion,
    Task,
    ValueQuestion,
)

# Level is filled in per request.
FALLBACK_TASKS: Dict[str, Task] = {
    "simplify": Task(
        "simplify", 1, ValueQuestion(Fraction(6, 8)), Fraction(3, 4), "fraction"
    ),
    "mixed": Task(
        "mixed", 1, ValueQuestion(Fraction(11, 4)), MixedNumber(2, 3, 4), "mixed"
    ),
    "common_denom": Task(
        "common_denom",
        1,
        PairQuestion((Fraction(1, 3), Fraction(2, 5))),
        CommonDenominatorAnswer((Fraction(5, 15), Fraction(6, 15)), 15),
        "common_denom",
    ),
    "add": Task(
        "add",
        1,
        ExpressionQuestion((Fraction(1, 3), Fraction(1, 4)), (PLUS,)),
        Fraction(7, 12),
        "fraction",
    ),
    "subtract": Task(
        "subtract",
        1,
        ExpressionQuestion((Fraction(3, 4), Fraction(1, 3)), (MINUS,)),
        Fraction(5, 12),
        "fraction",
    ),
    "multiply": Task(
        "multiply",
        1,
        ExpressionQuestion((Fraction(2, 3), Fraction(3, 5)), (TIMES,)),
        Fraction(2, 5),
        "fraction",
    ),
    "divide": Task(
        "divide",
        1,
        ExpressionQuestion((Fraction(2, 3), Fraction(4, 5)), (DIVIDE,)),
        Fraction(5, 6),
        "fraction",
    ),
    "combined": Task(
        "combined",
        1,
        ExpressionQuestion(
            (Fraction(1, 2), Fraction(1, 3), Fraction(1, 4)),
            (PLUS, TIMES),
            "({0} + {1}) × {2}",
        ),
        Fraction(5, 24),
        "fraction",
    ),
    "to_decimal": Task(
        "to_decimal",
        1,
        ValueQuestion(Fraction(3, 8)),
        DecimalValue(0.375, display="0,375"),
        "decimal",
    ),
    "from_decimal": Task(
        "from_decimal",
        1,
        ValueQuestion(DecimalValue(0.375, display="0,375")),
        Fraction(3, 8),
        "fraction",
    ),
    "mixed_decimal": Task(
        "mixed_decimal",
        1,
        ExpressionQuestion((DecimalValue(0.5, display="0,5"), Fraction(1, 3)), (PLUS,), "{0} + {1}"),
        Fraction(5, 6),
        "fraction",
    ),
}


def fallback_task(topic: str, level: int) -> Task:
    try:
        task = FALLBACK_TASKS[topic]
    except KeyError:
        raise UnsupportedTopic(topic) from None
    return dataclasses.replace(task, level=level)
