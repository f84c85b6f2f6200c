from __future__ import annotations

import logging
import math
import re
from typing import Any, Dict, Optional, Tuple

from fastapi import APIRouter
from sympy import Integer, Rational, nan, nsimplify, oo, zoo
from sympy.core.power import Pow
from sympy.parsing.sympy_parser import (
    convert_xor,
    implicit_multiplication_application,
    parse_expr,
    standard_transformations,
)

from fraction_engine import FractionEngineError
from fraction_engine.expression import evaluate_expression
from fraction_engine.formatting import format_fraction, parse_rendered
from fraction_engine.rational import fraction_to_decimal, repeating_to_fraction, to_improper
from schemas.marking import EvaluateRequest, EvaluateResponse, MarkRequest, MarkResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["marking"])

# --- Grading policy toggles ------------------------------------------------------
# If True: non-reduced correct fractions are marked incorrect with "Reduce..." feedback.
# If False: non-reduced correct fractions are marked correct with a gentle nudge.
STRICT_SIMPLIFICATION = False

# If True: give partial credit to non-reduced fractions (e.g., 0.5). If False: full credit.
PARTIAL_CREDIT_FOR_NON_REDUCED = False
NOT_REDUCED_SCORE_VALUE = 0.5  # used only when PARTIAL_CREDIT_FOR_NON_REDUCED = True

# --- Parsing / validation helpers ------------------------------------------------
LEN_LIMIT = 100
EXPRESSION_LEN_LIMIT = 200
MAX_OPERANDS = 10
_INVALID_CHARS_MSG = (
    "Only numeric answers using digits, spaces, + - * / ^ , . and parentheses are allowed."
)
_NON_FINITE_MSG = "Answer is not finite (e.g., division by zero)."
_TOO_COMPLEX_MSG = "Answer is too complex."
_NOT_A_NUMBER_MSG = "Answer must be a single number."
_ALLOWED_RE = re.compile(r"^[0-9+\-*/^().,\s]{1,100}$")

# "2 3/4", "-2 3/4"
_MIXED_INPUT_RE = re.compile(r"^\s*([+-]?)(\d+)\s+(\d+)\s*/\s*(\d+)\s*$")
# "0,(3)", "1.1(6)"
_REPEATING_INPUT_RE = re.compile(r"[.,]\d*\(\d+\)\s*$")
_FRACTION_PART_RE = re.compile(r"(\d+)\s*/\s*(\d+)\s*$")

TRANSFORMS = standard_transformations + (
    convert_xor,
    implicit_multiplication_application,
)

_MAX_OPS = 200
_MAX_INT_DIGITS = 200
_MAX_EXPONENT_ABS = 2000


def _validate_answer_text(s: str) -> Optional[str]:
    if s is None or not isinstance(s, str) or not s.strip():
        return "Answer required."
    if len(s) > LEN_LIMIT:
        return "Answer too long (> 100)."
    if _ALLOWED_RE.fullmatch(s) is None:
        return _INVALID_CHARS_MSG
    return None


# --- Finite & Complexity guards ---------------------------------------------------


def _assert_finite_sym(val: Any) -> None:
    if getattr(val, "is_finite", None) is False:
        raise ValueError(_NON_FINITE_MSG)
    if val in (oo, -oo, zoo, nan):
        raise ValueError(_NON_FINITE_MSG)


def _assert_expr_complexity(sym: Any) -> None:
    """
    Treat plain numbers as trivial; only inspect SymPy expressions for complexity.
    """
    if not hasattr(sym, "atoms") or getattr(sym, "is_Number", False):
        return
    if sym.count_ops() > _MAX_OPS:
        raise ValueError(_TOO_COMPLEX_MSG)
    for node in sym.atoms(Integer):
        if len(str(abs(int(node)))) > _MAX_INT_DIGITS:
            raise ValueError(_TOO_COMPLEX_MSG)
    for node in sym.atoms(Pow):
        if node.exp.is_number and abs(float(node.exp)) > _MAX_EXPONENT_ABS:
            raise ValueError(_TOO_COMPLEX_MSG)


# --- Low-level helpers ------------------------------------------------------------


def _as_rational(fraction) -> Rational:
    return Rational(fraction.num, fraction.den)


def _parse_number(text: str) -> Tuple[Rational, str]:
    """
    Exact value of a typed answer plus the form it was typed in
    ("mixed", "repeating" or "expression").
    """
    m = _MIXED_INPUT_RE.match(text)
    if m:
        sign, whole, num, den = m.groups()
        if int(den) == 0:
            raise ValueError(_NON_FINITE_MSG)
        value = _as_rational(to_improper(int(whole), int(num), int(den)))
        return (-value if sign == "-" else value), "mixed"

    if _REPEATING_INPUT_RE.search(text):
        return _as_rational(repeating_to_fraction(text)), "repeating"

    sym = parse_expr(text.replace(",", "."), transformations=TRANSFORMS, evaluate=True)
    _assert_expr_complexity(sym)
    val = nsimplify(sym, rational=True)
    _assert_finite_sym(val)
    if not isinstance(val, Rational):
        raise ValueError(_NOT_A_NUMBER_MSG)
    return val, "expression"


def _is_reduced_fraction_str(ans: str) -> bool:
    m = _FRACTION_PART_RE.search(ans)
    if not m:
        return True
    a, b = int(m.group(1)), int(m.group(2))
    return math.gcd(a, b) == 1


def _typed_decimal_places(ans: str) -> int:
    m = re.search(r"[.,](\d+)\s*$", ans)
    return len(m.group(1)) if m else 0


def _prepare_expected(expected: str) -> Tuple[Optional[Rational], str, str]:
    """
    Returns: (expected_value, expected_str, error_feedback_if_missing)
    """
    raw = (expected or "").strip()
    if not raw:
        return None, raw, "Missing expected answer."
    try:
        return _as_rational(parse_rendered(raw)), raw, ""
    except FractionEngineError:
        pass
    # Fallback to sympy for anything the engine does not render itself
    try:
        value, _ = _parse_number(raw)
        return value, raw, ""
    except Exception:
        return None, raw, "Expected answer is not a number."


def _result(ok: bool, correct: bool, feedback: str, expected: Optional[str], score=None) -> Dict[str, Any]:
    if score is None:
        score = 1 if correct else 0
    return {"ok": ok, "correct": correct, "score": score, "feedback": feedback, "expected": expected}


# --- Core marking -----------------------------------------------------------------


def _mark_one(expected: str, answer: str, answer_type: str) -> Dict[str, Any]:
    # Compute expected FIRST so every path can include it
    exp_value, exp_str, exp_err = _prepare_expected(expected)

    msg = _validate_answer_text(answer)
    if msg:
        return _result(False, False, msg, exp_str)
    if exp_value is None:
        return _result(False, False, exp_err, exp_str)

    try:
        user_val, form = _parse_number(answer)
    except ValueError as e:
        return _result(False, False, str(e), exp_str)
    except Exception:
        return _result(False, False, _INVALID_CHARS_MSG, exp_str)

    if user_val != exp_value:
        # A rounded repeating decimal counts when it is accurate to the typed places.
        places = _typed_decimal_places(answer)
        if answer_type == "decimal" and "(" in exp_str and form != "repeating" and places >= 2:
            if abs(float(user_val) - float(exp_value)) < 10**-places:
                return _result(True, True, f"Correct; exact value is {exp_str}.", exp_str)
        return _result(True, False, "", exp_str)

    if answer_type in ("fraction", "mixed") and "/" in answer and not _is_reduced_fraction_str(answer):
        if STRICT_SIMPLIFICATION:
            return _result(True, False, f"Reduce your fraction to {exp_str}.", exp_str)
        score_val = NOT_REDUCED_SCORE_VALUE if PARTIAL_CREDIT_FOR_NON_REDUCED else 1
        return _result(True, True, f"Correct, but reduce your fraction to {exp_str}.", exp_str, score_val)

    if answer_type == "mixed" and form != "mixed" and abs(exp_value.p) > exp_value.q > 1:
        return _result(True, True, f"Correct; as a mixed number: {exp_str}.", exp_str)

    # Gentle suggestion if they typed an expression but simplest form differs
    raw = answer.strip()
    if form == "expression" and raw != exp_str and any(op in raw for op in ("+", "*", "^", "(")):
        return _result(True, True, f"Correct; simplest form is {exp_str}.", exp_str)

    return _result(True, True, "", exp_str)


# --- Endpoints --------------------------------------------------------------------


@router.post("/evaluate", response_model=EvaluateResponse)
def evaluate(req: EvaluateRequest):
    if not req.expression.strip():
        return {"ok": False, "feedback": "Expression required."}
    if len(req.expression) > EXPRESSION_LEN_LIMIT:
        return {"ok": False, "feedback": "Expression too long (> 200)."}
    if len(req.operands) > MAX_OPERANDS:
        return {"ok": False, "feedback": "Too many operands (> 10)."}
    if any(len(op) > LEN_LIMIT for op in req.operands):
        return {"ok": False, "feedback": "Operand too long (> 100)."}

    try:
        operands = [parse_rendered(op) for op in req.operands]
        result = evaluate_expression(req.expression, operands)
    except FractionEngineError as e:
        return {"ok": False, "feedback": str(e)}

    return {
        "ok": True,
        "value": format_fraction(result),
        "num": result.num,
        "den": result.den,
        "decimal": fraction_to_decimal(result.num, result.den),
    }


@router.post("/mark", response_model=MarkResponse)
def mark(req: MarkRequest):
    res = _mark_one(req.expected, req.answer, req.answer_type)
    logger.debug("Marked %r against %r: %s", req.answer, req.expected, res["correct"])
    return res
