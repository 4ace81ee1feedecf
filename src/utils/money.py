"""Helpers for the fixed-point money values stored in the ledger.

Every monetary column is a ``Numeric(10, 2)``. Aggregates coming back from
the database may be ``None`` (no rows), a ``Decimal`` or, on drivers without
native decimals, a float. ``to_money`` normalises all of them to a
``Decimal`` quantized to cents so sums never pick up binary float noise.
"""

from decimal import Decimal, ROUND_HALF_UP

CENTS = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value) -> Decimal:
    if value is None:
        return ZERO
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def to_float(value) -> float:
    """Convert a stored money value to a plain number for chart/stat payloads."""
    return float(to_money(value))
