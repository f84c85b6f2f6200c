# fraction_engine/values.py
"""
Value types shared by the whole engine.

Every quantity a task can carry is one of three concrete shapes (Fraction,
MixedNumber, DecimalValue); questions and answers are small tagged variants
built from them. All of them are frozen, so a Task handed to a caller is a
plain value with no shared mutable state.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple, Union

# Operator glyphs used in questions and expression templates.
PLUS = "+"
MINUS = "−"
TIMES = "×"
DIVIDE = "÷"
OPERATORS = (PLUS, MINUS, TIMES, DIVIDE)

ANSWER_TYPES = ("fraction", "mixed", "decimal", "common_denom")


@dataclass(frozen=True)
class Fraction:
    num: int
    den: int

    kind = "fraction"


@dataclass(frozen=True)
class MixedNumber:
    whole: int
    num: int
    den: int

    kind = "mixed"


@dataclass(frozen=True)
class DecimalValue:
    decimal: float
    # present iff the expansion repeats; display is e.g. "0,375" or "1,(3)"
    period: Optional[str] = None
    display: Optional[str] = None

    kind = "decimal"


Value = Union[Fraction, MixedNumber, DecimalValue]


# ---------- Questions ----------


@dataclass(frozen=True)
class ValueQuestion:
    """A single quantity to transform (simplify, mixed, to_decimal, from_decimal)."""

    value: Union[Fraction, DecimalValue]

    kind = "value"


@dataclass(frozen=True)
class PairQuestion:
    """Two fractions to bring to a common denominator."""

    fractions: Tuple[Fraction, Fraction]

    kind = "pair"


@dataclass(frozen=True)
class ExpressionQuestion:
    operands: Tuple[Value, ...]
    operators: Tuple[str, ...]
    # optional template over {i} placeholders, e.g. "({0} + {1}) × {2}"
    expression: Optional[str] = None

    kind = "expression"

    @property
    def operator(self) -> Optional[str]:
        return self.operators[0] if len(self.operators) == 1 else None


Question = Union[ValueQuestion, PairQuestion, ExpressionQuestion]


# ---------- Answers ----------


@dataclass(frozen=True)
class CommonDenominatorAnswer:
    fractions: Tuple[Fraction, Fraction]
    common_den: int

    kind = "common_denom"


Answer = Union[Fraction, MixedNumber, DecimalValue, CommonDenominatorAnswer]
Option = Union[Fraction, MixedNumber, DecimalValue, int]


@dataclass(frozen=True)
class Task:
    topic: str
    level: int
    question: Question
    correct_answer: Answer
    answer_type: str
    options: Tuple[Option, ...] = ()
    correct_index: int = -1
    explanation: Dict[str, str] = field(default_factory=dict, compare=False)
