from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Any, Optional

ATOMIC_UNITS_PER_UPX = 10**8

_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")


def to_atomic_units(amount: Any) -> Optional[int]:
    """Convert a UPX amount in major units to integer atomic units.

    Rounds half-up to zero decimals. Returns None when the amount is not
    a finite number.
    """
    if amount is None or isinstance(amount, bool):
        return None
    try:
        value = Decimal(str(amount).strip())
    except (InvalidOperation, ValueError):
        return None
    if not value.is_finite():
        return None
    with localcontext() as ctx:
        ctx.prec = max(28, len(value.as_tuple().digits) + 9, value.adjusted() + 10)
        scaled = value * ATOMIC_UNITS_PER_UPX
        return int(scaled.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def from_atomic_units(atomic: int) -> Decimal:
    return Decimal(atomic) / ATOMIC_UNITS_PER_UPX


def parse_int_prefix(value: Any) -> Optional[int]:
    """Leading-integer parse: 12 -> 12, "12abc" -> 12, 3.9 -> 3, "abc" -> None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, (float, Decimal)):
        try:
            return int(value)
        except (OverflowError, ValueError):
            return None
    if isinstance(value, str):
        match = _INT_PREFIX.match(value)
        if match:
            return int(match.group(1))
    return None
