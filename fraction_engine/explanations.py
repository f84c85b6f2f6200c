# fraction_engine/explanations.py
"""
Short worked explanations in Russian and German.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Optional

from . import rational
from .errors import FractionEngineError
from .expression import operands_as_fractions, render_expression
from .formatting import (
    decimal_places_for_task,
    decimal_places_of,
    format_answer,
    format_decimal,
    format_fraction,
    format_operand,
    format_question,
    format_raw_fraction,
)
from .values import (
    CommonDenominatorAnswer,
    DecimalValue,
    ExpressionQuestion,
    Fraction,
    PairQuestion,
    Task,
    ValueQuestion,
)

logger = logging.getLogger(__name__)

LANGUAGES = ("ru", "de")

_TEXT: Dict[str, Dict[str, str]] = {
    "ru": {
        "gcd": "НОД",
        "lcm": "НОК",
        "step": "Шаг",
        "remainder": "остаток",
        "divide_by_gcd": "",
        "bring_to_lcm": "",
        "common_den": "Общий знаменатель",
        "precedence": "Сначала скобки и ×/÷, затем +/−",
        "decimal_to_fraction": "Переводим десятичную в дробь",
    },
    "de": {
        "gcd": "ggT",
        "lcm": "kgV",
        "step": "Schritt",
        "remainder": "Rest",
        "divide_by_gcd": "Zähler und Nenner durch den ggT teilen: ",
        "bring_to_lcm": "Nenner auf das kgV bringen: ",
        "common_den": "Gemeinsamer Nenner",
        "precedence": "Erst Klammern und ×/÷, dann +/−",
        "decimal_to_fraction": "Dezimalzahl in Bruch umwandeln",
    },
}


def _steps(t: Dict[str, str], *parts: str) -> str:
    return ". ".join(f"{t['step']} {i}: {part}" for i, part in enumerate(parts, 1))


def _expression_text(task: Task) -> str:
    if isinstance(task.question, ExpressionQuestion):
        return render_expression(task.question, lambda op: format_operand(rational.to_fraction(op)))
    return ""


def _operands(task: Task) -> List[Fraction]:
    if not isinstance(task.question, ExpressionQuestion):
        return []
    try:
        return operands_as_fractions(task.question.operands)
    except (FractionEngineError, TypeError):
        return []


def _question_fraction(task: Task) -> Optional[Fraction]:
    question = task.question
    if isinstance(question, ValueQuestion) and isinstance(question.value, Fraction):
        return question.value
    return None


def _explain_simplify(task: Task, t: Dict[str, str]) -> Optional[str]:
    q = _question_fraction(task)
    if q is None:
        return None
    g = rational.gcd(q.num, q.den)
    return (
        f"{t['gcd']}({q.num}, {q.den}) = {g}. {t['divide_by_gcd']}"
        f"{q.num}÷{g} / {q.den}÷{g} = {format_fraction(task.correct_answer)}"
    )


def _explain_mixed(task: Task, t: Dict[str, str]) -> Optional[str]:
    q = _question_fraction(task)
    if q is None or q.den <= 0:
        return None
    whole, rem = divmod(abs(q.num), q.den)
    if q.num < 0:
        whole = -whole
    result = str(whole) if rem == 0 else f"{whole} {rem}/{q.den}"
    return f"{q.num} ÷ {q.den} = {whole} {t['remainder']} {rem}. {q.num}/{q.den} = {result}"


def _explain_common_denom(task: Task, t: Dict[str, str]) -> Optional[str]:
    question, answer = task.question, task.correct_answer
    if not isinstance(question, PairQuestion) or not isinstance(answer, CommonDenominatorAnswer):
        return None
    (a, b), (ca, cb) = question.fractions, answer.fractions
    return (
        f"{t['lcm']}({a.den}, {b.den}) = {answer.common_den}. {t['bring_to_lcm']}"
        f"{format_raw_fraction(a)} = {format_raw_fraction(ca)}, "
        f"{format_raw_fraction(b)} = {format_raw_fraction(cb)}"
    )


def _explain_add_subtract(task: Task, t: Dict[str, str]) -> Optional[str]:
    operands = _operands(task)
    if not operands:
        return None
    common = operands[0].den
    for op in operands[1:]:
        common = rational.lcm(common, op.den)
    return _steps(
        t,
        f"{t['common_den']} = {common}",
        f"{_expression_text(task)} = {format_answer(task)}",
    )


def _explain_multiply(task: Task, t: Dict[str, str]) -> Optional[str]:
    operands = _operands(task)
    if len(operands) != 2:
        return None
    a, b = operands
    return (
        f"{a.num}×{b.num} / {a.den}×{b.den} = "
        f"{a.num * b.num}/{a.den * b.den} = {format_answer(task)}"
    )


def _explain_divide(task: Task, t: Dict[str, str]) -> Optional[str]:
    operands = _operands(task)
    if len(operands) != 2 or operands[1].num == 0:
        return None
    a, b = operands
    first = format_operand(a)
    second = format_operand(b)
    inverse = format_operand(rational.simplify_fraction(b.den, b.num))
    return f"{first} ÷ {second} = {first} × {inverse} = {format_answer(task)}"


def _explain_combined(task: Task, t: Dict[str, str]) -> Optional[str]:
    return _steps(t, t["precedence"], f"{_expression_text(task)} = {format_answer(task)}")


def _explain_to_decimal(task: Task, t: Dict[str, str]) -> Optional[str]:
    q = _question_fraction(task)
    if q is None:
        return None
    return f"{q.num} ÷ {q.den} = {format_answer(task)}"


def _explain_from_decimal(task: Task, t: Dict[str, str]) -> Optional[str]:
    question = task.question
    if not isinstance(question, ValueQuestion) or not isinstance(question.value, DecimalValue):
        return None
    source = question.value.display or format_decimal(
        question.value.decimal, decimal_places_for_task(task)
    )
    return f"{source} = {format_fraction(task.correct_answer)}"


def _explain_mixed_decimal(task: Task, t: Dict[str, str]) -> Optional[str]:
    question = task.question
    if not isinstance(question, ExpressionQuestion):
        return None
    decimal = next((op for op in question.operands if isinstance(op, DecimalValue)), None)
    if decimal is None:
        return _steps(
            t,
            t["decimal_to_fraction"],
            f"{_expression_text(task)} = {format_answer(task)}",
        )
    converted = rational.to_fraction(decimal)
    source = decimal.display or format_decimal(decimal.decimal, decimal_places_of(decimal.decimal))
    return _steps(
        t,
        f"{source} = {format_fraction(converted)}",
        f"{_expression_text(task)} = {format_answer(task)}",
    )


_EXPLAINERS = {
    "simplify": _explain_simplify,
    "mixed": _explain_mixed,
    "common_denom": _explain_common_denom,
    "add": _explain_add_subtract,
    "subtract": _explain_add_subtract,
    "multiply": _explain_multiply,
    "divide": _explain_divide,
    "combined": _explain_combined,
    "to_decimal": _explain_to_decimal,
    "from_decimal": _explain_from_decimal,
    "mixed_decimal": _explain_mixed_decimal,
}


def generate_explanation(task: Task, lang: str = "ru") -> str:
    """
    One-line worked solution for task in ``lang`` (``ru`` or ``de``; anything
    else is treated as ``ru``). Falls back to "Step 1: <question> = <answer>".
    """
    t = _TEXT.get(lang, _TEXT["ru"])
    explainer = _EXPLAINERS.get(task.topic)
    text = None
    if explainer is not None:
        try:
            text = explainer(task, t)
        except (FractionEngineError, TypeError) as e:
            logger.debug("No %s explanation for %s: %s", lang, task.topic, e)
    if text:
        return text
    return _steps(t, f"{format_question(task)} = {format_answer(task)}")


def explain(task: Task) -> Dict[str, str]:
    return {lang: generate_explanation(task, lang) for lang in LANGUAGES}
