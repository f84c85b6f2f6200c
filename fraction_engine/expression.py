# fraction_engine/expression.py
"""
Tiny template language over operand placeholders:

    expr   := term (('+' | '−') term)*
    term   := factor (('×' | '÷') factor)*
    factor := '{' index '}' | '(' expr ')'

Templates are evaluated with exact fractions. Besides the correct evaluator
this module carries two deliberately wrong ones (strict left-to-right and
addition-before-multiplication) that the distractor engine uses to imitate
precedence mistakes.
"""
from __future__ import annotations

import random
import re
from typing import Callable, List, Optional, Sequence, Tuple

from . import rational
from .errors import FractionEngineError, MalformedExpression
from .values import DIVIDE, MINUS, OPERATORS, PLUS, TIMES, ExpressionQuestion, Fraction, Value

_PLACEHOLDER_RE = re.compile(r"\{(\d+)\}")
_INDEX_RE = re.compile(r"[0-9]+")
_WHITESPACE = " \t\r\n"
_SYMBOLS = OPERATORS + ("(", ")")

_OPERATOR_ALIASES = {
    "+": PLUS,
    "-": MINUS,
    "–": MINUS,
    "—": MINUS,
    "*": TIMES,
    "x": TIMES,
    "X": TIMES,
    "·": TIMES,
    "/": DIVIDE,
    ":": DIVIDE,
}

# Token = ("symbol", glyph) | ("operand", index)
Token = Tuple[str, object]


def normalize_operator(symbol: str) -> str:
    if symbol in OPERATORS:
        return symbol
    return _OPERATOR_ALIASES.get(symbol, symbol)


def apply_operator(left: Fraction, right: Fraction, symbol: str) -> Fraction:
    op = normalize_operator(symbol)
    if op == PLUS:
        return rational.add(left, right)
    if op == MINUS:
        return rational.subtract(left, right)
    if op == TIMES:
        return rational.multiply(left, right)
    if op == DIVIDE:
        return rational.divide(left, right)
    raise MalformedExpression(f"Unsupported operator: {symbol!r}")


def tokenize(expression: str) -> List[Token]:
    tokens: List[Token] = []
    index = 0
    while index < len(expression):
        char = expression[index]
        if char in _WHITESPACE:
            index += 1
            continue

        if char in _SYMBOLS or char in _OPERATOR_ALIASES:
            tokens.append(("symbol", normalize_operator(char)))
            index += 1
            continue

        if char == "{":
            close = expression.find("}", index)
            if close == -1:
                raise MalformedExpression("Unterminated operand placeholder")
            raw = expression[index + 1 : close].strip()
            if not _INDEX_RE.fullmatch(raw):
                raise MalformedExpression(f"Invalid operand placeholder: {{{raw}}}")
            tokens.append(("operand", int(raw)))
            index = close + 1
            continue

        raise MalformedExpression(f"Unexpected character in expression: {char!r}")
    return tokens


class _Parser:
    def __init__(self, tokens: List[Token], operands: Sequence[Fraction]):
        self.tokens = tokens
        self.operands = operands
        self.pos = 0

    def peek_symbol(self) -> Optional[str]:
        if self.pos < len(self.tokens) and self.tokens[self.pos][0] == "symbol":
            return self.tokens[self.pos][1]  # type: ignore[return-value]
        return None

    def parse(self) -> Fraction:
        value = self.parse_expression()
        if self.pos != len(self.tokens):
            raise MalformedExpression("Unexpected trailing tokens in expression")
        return value

    def parse_expression(self) -> Fraction:
        left = self.parse_term()
        while self.peek_symbol() in (PLUS, MINUS):
            op = self.peek_symbol()
            self.pos += 1
            left = apply_operator(left, self.parse_term(), op)
        return left

    def parse_term(self) -> Fraction:
        left = self.parse_factor()
        while self.peek_symbol() in (TIMES, DIVIDE):
            op = self.peek_symbol()
            self.pos += 1
            left = apply_operator(left, self.parse_factor(), op)
        return left

    def parse_factor(self) -> Fraction:
        if self.pos >= len(self.tokens):
            raise MalformedExpression("Unexpected end of expression")

        kind, value = self.tokens[self.pos]
        if kind == "operand":
            self.pos += 1
            if not 0 <= value < len(self.operands):  # type: ignore[operator]
                raise MalformedExpression(f"Operand placeholder out of range: {{{value}}}")
            return self.operands[value]  # type: ignore[index]

        if value == "(":
            self.pos += 1
            inner = self.parse_expression()
            if self.peek_symbol() != ")":
                raise MalformedExpression("Missing closing parenthesis")
            self.pos += 1
            return inner

        raise MalformedExpression(f"Unexpected token in expression: {value!r}")


def evaluate_expression(expression: str, operands: Sequence[Fraction]) -> Fraction:
    return _Parser(tokenize(expression), operands).parse()


# --- Templates ---------------------------------------------------------------------


def build_linear_expression(operators: Sequence[str]) -> str:
    parts = ["{0}"]
    for i, op in enumerate(operators, 1):
        parts.append(f"{op} {{{i}}}")
    return " ".join(parts)


def build_parenthesized_expression(operators: Sequence[str], rng: random.Random) -> str:
    """
    Pick one bracket placement for len(operators) + 1 terms, uniformly among
    the shapes available for that size.
    """
    ops = list(operators)
    if len(ops) == 1:
        return f"({{0}} {ops[0]} {{1}})"
    if len(ops) == 2:
        if rng.random() < 0.5:
            return f"({{0}} {ops[0]} {{1}}) {ops[1]} {{2}}"
        return f"{{0}} {ops[0]} ({{1}} {ops[1]} {{2}})"
    if len(ops) == 3:
        shape = rng.choice(("pairs", "left_nested", "right_nested"))
        if shape == "pairs":
            return f"({{0}} {ops[0]} {{1}}) {ops[1]} ({{2}} {ops[2]} {{3}})"
        if shape == "left_nested":
            return f"(({{0}} {ops[0]} {{1}}) {ops[1]} {{2}}) {ops[2]} {{3}}"
        return f"{{0}} {ops[0]} ({{1}} {ops[1]} ({{2}} {ops[2]} {{3}}))"
    return build_linear_expression(ops)


def question_template(question: ExpressionQuestion) -> str:
    if question.expression:
        return question.expression
    if question.operators:
        return build_linear_expression(question.operators)
    return ""


def render_expression(question: ExpressionQuestion, formatter: Callable[[Value], str]) -> str:
    template = question_template(question)
    if not template:
        return ""

    def _replace(m: "re.Match[str]") -> str:
        index = int(m.group(1))
        if index >= len(question.operands):
            return m.group(0)
        return formatter(question.operands[index])

    return _PLACEHOLDER_RE.sub(_replace, template)


# --- Question evaluation -----------------------------------------------------------


def operands_as_fractions(operands: Sequence[Value]) -> List[Fraction]:
    return [rational.to_fraction(op) for op in operands]


def evaluate_question(question: ExpressionQuestion) -> Fraction:
    fractions = operands_as_fractions(question.operands)
    if not fractions:
        raise MalformedExpression("Question has no operands")
    template = question_template(question)
    if not template:
        raise MalformedExpression("Question has no operators")
    return evaluate_expression(template, fractions)


def evaluate_with_operands(
    question: ExpressionQuestion, operands: Sequence[Value]
) -> Optional[Fraction]:
    try:
        return evaluate_question(
            ExpressionQuestion(tuple(operands), question.operators, question.expression)
        )
    except (FractionEngineError, TypeError):
        return None


def evaluate_left_to_right(
    question: ExpressionQuestion, operands: Optional[Sequence[Value]] = None
) -> Optional[Fraction]:
    """Ignore precedence and brackets; returns None when it cannot evaluate."""
    raw = question.operands if operands is None else operands
    try:
        fractions = operands_as_fractions(raw)
    except (FractionEngineError, TypeError):
        return None

    operators = question.operators
    if not fractions or not operators or len(operators) != len(fractions) - 1:
        return None

    result = fractions[0]
    try:
        for op, right in zip(operators, fractions[1:]):
            result = apply_operator(result, right, op)
    except FractionEngineError:
        return None
    return result


def _collapse(fractions: List[Fraction], operators: List[str], apply_now) -> Tuple[List[Fraction], List[str]]:
    next_fractions = [fractions[0]]
    next_operators: List[str] = []
    for op, right in zip(operators, fractions[1:]):
        if apply_now(op):
            next_fractions[-1] = apply_operator(next_fractions[-1], right, op)
        else:
            next_operators.append(op)
            next_fractions.append(right)
    return next_fractions, next_operators


def evaluate_with_addition_priority(question: ExpressionQuestion) -> Optional[Fraction]:
    """
    Evaluate +/− before ×/÷ (brackets ignored). Only meant as a plausible
    wrong answer, not as an arithmetic law.
    """
    try:
        fractions = operands_as_fractions(question.operands)
    except (FractionEngineError, TypeError):
        return None

    operators = [normalize_operator(op) for op in question.operators]
    if not fractions or len(operators) != len(fractions) - 1:
        return None

    try:
        rest, rest_ops = _collapse(fractions, operators, lambda op: op in (PLUS, MINUS))
        result = rest[0]
        for op, right in zip(rest_ops, rest[1:]):
            result = apply_operator(result, right, op)
    except FractionEngineError:
        return None
    return result
