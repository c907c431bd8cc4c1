"""Canonical wire text for doubles.

Finite values use the shortest digit string that parses back to the same
float, laid out like ``%g``: exponential when the decimal exponent is below -4
or at least 6 (``1e+06``, ``1.5e-07``), positional otherwise (``123456``,
``0.001``). Non-finite values use the sentinels below, which the JSON wire
format wraps in double quotes.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from decimal import Decimal

from thriftwire.protocol.base import ProtocolFormatError, ProtocolRangeError

INFINITY = "Infinity"
NEGATIVE_INFINITY = "-Infinity"
NAN = "NaN"

SENTINELS = {
    INFINITY: math.inf,
    NEGATIVE_INFINITY: -math.inf,
    NAN: math.nan,
}

_NUMBER_RE = re.compile(r"-?(?:0|[1-9][0-9]*)(?:\.[0-9]+)?(?:[eE][+-]?[0-9]+)?")

# Positional layout is used for decimal exponents in [-4, _EXP_LIMIT).
_EXP_LIMIT = 6


def format_double(value: float) -> str:
    if math.isnan(value):
        return NAN
    if math.isinf(value):
        return INFINITY if value > 0 else NEGATIVE_INFINITY
    if value == 0:
        return "-0" if math.copysign(1.0, value) < 0 else "0"

    # repr() yields the shortest round-tripping digits; only the layout changes.
    sign, digit_tuple, exponent = Decimal(repr(value)).as_tuple()
    digits = "".join(map(str, digit_tuple))
    point = len(digits) + exponent
    digits = digits.rstrip("0")
    exp10 = point - 1
    prefix = "-" if sign else ""

    if exp10 < -4 or exp10 >= _EXP_LIMIT:
        mantissa = digits[0] + ("." + digits[1:] if len(digits) > 1 else "")
        return f"{prefix}{mantissa}e{'-' if exp10 < 0 else '+'}{abs(exp10):02d}"
    if point <= 0:
        return f"{prefix}0.{'0' * -point}{digits}"
    if point >= len(digits):
        return f"{prefix}{digits}{'0' * (point - len(digits))}"
    return f"{prefix}{digits[:point]}.{digits[point:]}"


def _quote_sentinel(text: str) -> str:
    return f'"{text}"' if text in SENTINELS else text


def to_json(value: float) -> str:
    return _quote_sentinel(format_double(value))


def is_number_literal(text: str) -> bool:
    return _NUMBER_RE.fullmatch(text) is not None


def parse_double(
    text: str,
    *,
    quoted: bool = False,
    allow_bare_sentinel: bool = False,
    allow_quoted_number: bool = False,
) -> float:
    """Inverse of ``format_double``.

    ``quoted`` says whether ``text`` came from inside double quotes. Sentinels
    are expected quoted and finite numbers unquoted; the two ``allow_*`` flags
    relax that for lenient readers and for map keys.
    """
    if text in SENTINELS:
        if not quoted and not allow_bare_sentinel:
            raise ProtocolFormatError(f"Unquoted non-finite sentinel: {text}")
        return SENTINELS[text]
    if quoted and not allow_quoted_number:
        raise ProtocolFormatError(f"Quoted value is not a numeric sentinel: {text!r}")
    if not is_number_literal(text):
        raise ProtocolFormatError(f"Invalid numeric literal: {text!r}")
    value = float(text)
    if math.isinf(value):
        raise ProtocolRangeError(f"Numeric literal overflows a double: {text!r}")
    return value


@dataclass(frozen=True)
class Numeric:
    """A double paired with its canonical wire text."""

    value: float
    text: str

    @classmethod
    def from_double(cls, value: float) -> Numeric:
        return cls(float(value), format_double(value))

    @classmethod
    def from_string(cls, text: str) -> Numeric:
        return cls(parse_double(text, allow_bare_sentinel=True), text)

    @property
    def json(self) -> str:
        return _quote_sentinel(self.text)

    def is_finite(self) -> bool:
        return math.isfinite(self.value)

    def __str__(self) -> str:
        return self.text
