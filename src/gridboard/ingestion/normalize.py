"""Normalization helpers.

Centralizes defensive parsing of loosely typed feed fields and the
display arithmetic shared by the projectors.
"""

from __future__ import annotations

import math
from decimal import ROUND_HALF_DOWN, ROUND_HALF_UP, Decimal, localcontext
from typing import Any

# Enough significant digits to quantize any finite float exactly.
_QUANTIZE_PRECISION = 400


def safe_float(value: Any) -> float | None:
    if value is None or value == "" or value == "--":
        return None
    try:
        result = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(result):
        return None
    return result


def safe_label(value: Any) -> str | None:
    """Return a display label, or ``None`` for falsy values.

    ``0``, ``False`` and the empty string count as missing, the same as
    ``None``; anything else is rendered with ``str``.
    """
    if value is None or value is False or value == "" or value == 0:
        return None
    return str(value)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward positive infinity.

    ``round_half_up(2.5) == 3`` and ``round_half_up(-2.5) == -2``, unlike
    the built-in :func:`round` which rounds halves to even.
    """
    exact = Decimal(value)
    rounding = ROUND_HALF_UP if exact >= 0 else ROUND_HALF_DOWN
    with localcontext() as ctx:
        ctx.prec = _QUANTIZE_PRECISION
        return int(exact.quantize(Decimal(1), rounding=rounding))


def round_decimals(value: float, places: int) -> float:
    """Round the exact binary value of *value* to *places* decimals.

    Halves round away from zero, so ``0.125`` becomes ``0.13`` while
    ``1.005`` (stored as ``1.00499...``) becomes ``1.0``.
    """
    quantum = Decimal(1).scaleb(-places)
    with localcontext() as ctx:
        ctx.prec = _QUANTIZE_PRECISION
        return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def capitalize_first(text: str) -> str:
    """Upper-case the first character and leave the rest untouched."""
    if not text:
        return text
    return text[0].upper() + text[1:]
