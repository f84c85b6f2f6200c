# fraction_engine/rational.py
"""
Exact rational arithmetic on (num, den) integer pairs.

Everything here is integer arithmetic; floats only show up as rounded
previews (``fraction_to_decimal``, ``DecimalExpansion.decimal``) and as the
best-effort input of ``decimal_to_fraction``.
"""
from __future__ import annotations

import math
import numbers
import re
from dataclasses import dataclass
from typing import Any, Optional, Union

from .errors import DivisionByZero, InvalidFraction
from .values import DecimalValue, Fraction, MixedNumber

MAX_EXPANSION_DIGITS = 300
DECIMAL_SEARCH_LIMIT = 10**6
DECIMAL_TOLERANCE = 1e-10

_DISPLAY_RE = re.compile(r"^\s*([+-]?)(\d+)(?:[,.](\d*)(?:\((\d+)\))?)?\s*$")


def _as_integer(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidFraction(f"Not a number: {value!r}")
    if isinstance(value, int):
        return value
    if not math.isfinite(value):
        raise InvalidFraction(f"Not a finite number: {value!r}")
    return math.trunc(value)


def gcd(a: Any, b: Any) -> int:
    x = abs(_as_integer(a))
    y = abs(_as_integer(b))
    if x == 0 and y == 0:
        return 1
    return math.gcd(x, y)


def lcm(a: Any, b: Any) -> int:
    x = _as_integer(a)
    y = _as_integer(b)
    if x == 0 or y == 0:
        return 0
    return abs(x * y) // gcd(x, y)


def simplify_fraction(num: Any, den: Any) -> Fraction:
    n = _as_integer(num)
    d = _as_integer(den)
    if d == 0:
        raise InvalidFraction("Denominator must not be zero")
    if d < 0:
        n, d = -n, -d
    if n == 0:
        return Fraction(0, 1)
    divisor = gcd(n, d)
    return Fraction(n // divisor, d // divisor)


def add(a: Fraction, b: Fraction) -> Fraction:
    return simplify_fraction(a.num * b.den + b.num * a.den, a.den * b.den)


def subtract(a: Fraction, b: Fraction) -> Fraction:
    return simplify_fraction(a.num * b.den - b.num * a.den, a.den * b.den)


def multiply(a: Fraction, b: Fraction) -> Fraction:
    return simplify_fraction(a.num * b.num, a.den * b.den)


def divide(a: Fraction, b: Fraction) -> Fraction:
    if b.num == 0:
        raise DivisionByZero("Division by zero")
    return simplify_fraction(a.num * b.den, a.den * b.num)


def to_improper(whole: Any, num: Any, den: Any) -> Fraction:
    w = _as_integer(whole)
    n = _as_integer(num)
    d = _as_integer(den)
    if d == 0:
        raise InvalidFraction("Invalid mixed number")
    if w == 0:
        # sign lives on the numerator when there is no whole part
        return simplify_fraction(n, d)
    n, d = abs(n), abs(d)
    improper = w * d + n if w > 0 else w * d - n
    return simplify_fraction(improper, d)


def to_mixed(num: Any, den: Any) -> Union[Fraction, MixedNumber]:
    fraction = simplify_fraction(num, den)
    sign = -1 if fraction.num < 0 else 1
    whole, remainder = divmod(abs(fraction.num), fraction.den)

    if whole == 0:
        return fraction
    if remainder == 0:
        return Fraction(sign * whole, 1)
    return MixedNumber(sign * whole, remainder, fraction.den)


def is_proper(fraction: Fraction) -> bool:
    return 0 <= fraction.num < fraction.den


def is_proper_or_whole(fraction: Fraction) -> bool:
    return fraction.den == 1 or is_proper(fraction)


def fraction_to_decimal(num: Any, den: Any) -> float:
    fraction = simplify_fraction(num, den)
    return fraction.num / fraction.den


def decimal_to_fraction(decimal: Any) -> Fraction:
    """
    Best-effort conversion of a float to a fraction with a power-of-ten
    denominator (at most 10^6). Callers validate the bounds of the result.
    """
    if isinstance(decimal, bool) or not isinstance(decimal, numbers.Real):
        raise InvalidFraction(f"Invalid decimal: {decimal!r}")
    value = float(decimal)
    if not math.isfinite(value):
        raise InvalidFraction(f"Invalid decimal: {decimal!r}")
    if value == 0:
        return Fraction(0, 1)

    sign = -1 if value < 0 else 1
    abs_value = abs(value)
    if abs_value.is_integer():
        return Fraction(sign * int(abs_value), 1)

    denominator = 1
    while (
        denominator < DECIMAL_SEARCH_LIMIT
        and abs(round(abs_value * denominator) - abs_value * denominator) > DECIMAL_TOLERANCE
    ):
        denominator *= 10

    numerator = int(round(abs_value * denominator)) * sign
    return simplify_fraction(numerator, denominator)


def repeating_to_fraction(display: str) -> Fraction:
    """
    Exact value of a rendered decimal such as "0,375", "1,(3)" or "-0,1(6)".
    """
    m = _DISPLAY_RE.match(display or "")
    if not m:
        raise InvalidFraction(f"Not a decimal display: {display!r}")
    sign_str, int_part, non_repeat, period = m.groups()
    non_repeat = non_repeat or ""
    sign = -1 if sign_str == "-" else 1

    scale = 10 ** len(non_repeat)
    if period:
        repeat_scale = 10 ** len(period) - 1
        frac_num = int(non_repeat + period) - int(non_repeat or "0")
        frac = simplify_fraction(frac_num, scale * repeat_scale)
    else:
        frac = simplify_fraction(int(non_repeat or "0"), scale)

    total = add(Fraction(int(int_part), 1), frac)
    return Fraction(sign * total.num, total.den)


def to_fraction(value: Any) -> Fraction:
    """
    Canonical reduced fraction for any engine value.
    """
    if isinstance(value, Fraction):
        return simplify_fraction(value.num, value.den)
    if isinstance(value, MixedNumber):
        return to_improper(value.whole, value.num, value.den)
    if isinstance(value, DecimalValue):
        if value.display:
            try:
                return repeating_to_fraction(value.display)
            except InvalidFraction:
                pass
        return decimal_to_fraction(value.decimal)
    if isinstance(value, int) and not isinstance(value, bool):
        return Fraction(value, 1)
    raise TypeError(f"Unsupported value: {value!r}")


def fractions_equal(a: Any, b: Any) -> bool:
    return to_fraction(a) == to_fraction(b)


# --- Decimal expansion -------------------------------------------------------------


def count_terminating_digits(denominator: Any) -> Union[int, float]:
    den = abs(_as_integer(denominator))
    if den == 0:
        return math.inf

    pow2 = pow5 = 0
    while den % 2 == 0:
        den //= 2
        pow2 += 1
    while den % 5 == 0:
        den //= 5
        pow5 += 1

    if den != 1:
        return math.inf
    return max(pow2, pow5)


def is_terminating_fraction(fraction: Fraction) -> bool:
    simplified = simplify_fraction(fraction.num, fraction.den)
    return count_terminating_digits(simplified.den) != math.inf


@dataclass(frozen=True)
class DecimalExpansion:
    terminating: bool
    decimal: float
    display: str
    digits: Optional[str] = None
    period: Optional[str] = None

    def as_value(self) -> DecimalValue:
        if self.terminating:
            return DecimalValue(self.decimal, display=self.display)
        return DecimalValue(self.decimal, period=self.period, display=self.display)


def analyze_decimal_expansion(num: Any, den: Any) -> DecimalExpansion:
    simplified = simplify_fraction(num, den)
    prefix = "-" if simplified.num < 0 else ""
    integer_part, remainder = divmod(abs(simplified.num), simplified.den)

    digits = []
    seen = {}
    repeat_start = -1
    truncated = False

    while remainder != 0:
        if remainder in seen:
            repeat_start = seen[remainder]
            break
        seen[remainder] = len(digits)
        remainder *= 10
        digits.append(str(remainder // simplified.den))
        remainder %= simplified.den
        if len(digits) > MAX_EXPANSION_DIGITS:
            truncated = True
            break

    preview = round(simplified.num / simplified.den, 3)

    if truncated:
        # no cycle found within the digit budget; report what we have
        return DecimalExpansion(
            terminating=False,
            decimal=preview,
            display=f"{prefix}{integer_part}," + "".join(digits) + "…",
        )

    if repeat_start == -1:
        text = "".join(digits)
        return DecimalExpansion(
            terminating=True,
            decimal=preview,
            digits=text,
            display=f"{prefix}{integer_part}" + (f",{text}" if text else ""),
        )

    non_repeat = "".join(digits[:repeat_start])
    period = "".join(digits[repeat_start:])
    return DecimalExpansion(
        terminating=False,
        decimal=preview,
        period=period,
        display=f"{prefix}{integer_part},{non_repeat}({period})",
    )
