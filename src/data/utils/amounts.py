"""Exact monetary and quantity amounts.

Ledger values are exact rationals (``fractions.Fraction``). Average cost is a
division, and the write-down for balance adjustments is a ratio, so any
fixed-precision type would accumulate rounding that the ledger cannot undo
when a transaction is reversed. Rationals keep every fold step invertible.

Inputs arrive as ``int``, ``str``, ``Decimal`` or ``float``. Floats are routed
through ``Decimal(str(x))`` so binary artefacts (0.1 + 0.2) never enter the
ledger. Presentation goes back to ``Decimal`` via :func:`to_decimal`.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation, localcontext
from fractions import Fraction
from typing import Any, Union

AmountLike = Union[Fraction, Decimal, int, float, str, None]

ZERO = Fraction(0)
ONE_HUNDRED = Fraction(100)


def to_amount(value: AmountLike) -> Fraction:
    """Convert a numeric-ish value to an exact Fraction.

    Never converts a float directly (``Fraction(0.1)`` is not 1/10).

    Args:
        value: Number, numeric string, or None (treated as 0).

    Returns:
        Exact rational value.

    Raises:
        ValueError: If the value cannot be parsed as a finite number.
    """
    if value is None:
        return ZERO
    if isinstance(value, bool):
        raise ValueError(f"Not an amount: {value!r}")
    if isinstance(value, Fraction):
        return value
    if isinstance(value, int):
        return Fraction(value)
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise ValueError(f"Amount must be finite: {value!r}")
        return Fraction(value)
    if isinstance(value, float):
        return to_amount(Decimal(str(value)))
    if isinstance(value, str):
        text = value.strip().replace(",", "")
        if not text:
            return ZERO
        try:
            return to_amount(Decimal(text))
        except InvalidOperation as e:
            raise ValueError(f"Not an amount: {value!r}") from e
    raise ValueError(f"Not an amount: {value!r}")


def to_decimal(value: Fraction, places: int = 8) -> Decimal:
    """Render an exact amount as a Decimal rounded to ``places`` digits."""
    with localcontext() as ctx:
        ctx.prec = 60
        result = Decimal(value.numerator) / Decimal(value.denominator)
        return result.quantize(Decimal(1).scaleb(-places))


def format_amount(value: Fraction, places: int = 2) -> str:
    """Format an amount for text output (fixed ``places`` decimals)."""
    return f"{to_decimal(value, places):,.{places}f}"


def amount_to_json(value: Fraction) -> str:
    """Serialize an amount losslessly when it has a finite decimal form.

    Values with a non-terminating expansion (e.g. 1/3) are written as
    ``"numerator/denominator"``, which :func:`amount_from_json` reads back.
    """
    den = value.denominator
    while den % 2 == 0:
        den //= 2
    while den % 5 == 0:
        den //= 5
    if den != 1:
        return f"{value.numerator}/{value.denominator}"
    with localcontext() as ctx:
        ctx.prec = 80
        text = str((Decimal(value.numerator) / Decimal(value.denominator)).normalize())
    if "E" in text:
        text = f"{Decimal(text):f}"
    return text


def amount_from_json(value: Any) -> Fraction:
    """Inverse of :func:`amount_to_json`; also accepts plain numbers."""
    if isinstance(value, str) and "/" in value:
        return Fraction(value.strip())
    return to_amount(value)
