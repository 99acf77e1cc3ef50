"""Fixed-point formatting of numeric literals embedded in shader text.

Every scalar transform parameter is rendered with exactly
:data:`~scene2glsl.config.SCALAR_DECIMALS` places so that two numerically
equal parameters always produce byte-identical shader text.  Rounding is
half-away-from-zero on the exact binary value of the float, matching
JavaScript's ``Number.prototype.toFixed`` which the scene editor uses for
its own labels.
"""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Context, Decimal
from typing import Union

from .config import SCALAR_DECIMALS

Numeric = Union[int, float, str]

# wide enough for the integer part of any finite float
_WIDE = Context(prec=400)

__all__ = ["Numeric", "to_float", "format_fixed", "format_scalar", "is_numeric"]


def to_float(value: Numeric) -> float:
    """Coerce *value* (number or numeric text) to a finite ``float``."""
    if isinstance(value, bool):
        raise ValueError(f"expected a number, got {value!r}")
    if isinstance(value, str):
        try:
            f = float(value.strip())
        except ValueError:
            raise ValueError(f"expected a number, got {value!r}") from None
    elif isinstance(value, (int, float)):
        f = float(value)
    else:
        raise ValueError(f"expected a number, got {value!r}")
    if not math.isfinite(f):
        raise ValueError(f"expected a finite number, got {value!r}")
    return f


def is_numeric(value: object) -> bool:
    """True if :func:`to_float` would accept *value*."""
    try:
        to_float(value)  # type: ignore[arg-type]
    except ValueError:
        return False
    return True


def format_fixed(value: Numeric, places: int) -> str:
    """Format *value* with exactly *places* digits after the decimal point."""
    f = to_float(value) + 0.0  # folds -0.0 into 0.0
    quantum = Decimal(1).scaleb(-places)
    return str(Decimal(f).quantize(quantum, rounding=ROUND_HALF_UP, context=_WIDE))


def format_scalar(value: Numeric) -> str:
    """Three-decimal text for a transform parameter, e.g. ``20`` → ``"20.000"``."""
    return format_fixed(value, SCALAR_DECIMALS)
